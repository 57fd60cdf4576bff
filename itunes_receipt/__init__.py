from .exceptions import (
    InvalidReceipt,
    MalformedInputError,
    NoActiveReceiptException,
    NoPurchasesException,
    ReceiptValidationException,
    RetryReceiptValidation,
)
from .items import PendingRenewalInfo, PurchaseItem
from .response import ReceiptResponse
from .status import StatusCode, StatusKind, classify
from .utils import (
    validate_debug_receipt,
    validate_production_receipt,
    validate_receipt_is_active,
)

__all__ = [
    'InvalidReceipt',
    'MalformedInputError',
    'NoActiveReceiptException',
    'NoPurchasesException',
    'ReceiptValidationException',
    'RetryReceiptValidation',
    'PendingRenewalInfo',
    'PurchaseItem',
    'ReceiptResponse',
    'StatusCode',
    'StatusKind',
    'classify',
    'validate_debug_receipt',
    'validate_production_receipt',
    'validate_receipt_is_active',
]
