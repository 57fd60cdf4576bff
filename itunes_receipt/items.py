from collections import namedtuple
import copy
from types import MappingProxyType

from .forms import PendingRenewalInfoForm, PurchaseItemForm, clean_fields


def _frozen(data):
    return MappingProxyType(copy.deepcopy(dict(data)))


class PurchaseItem(
    namedtuple(
        "PurchaseItem",
        [
            "product_id",
            "transaction_id",
            "original_transaction_id",
            "purchase_date",
            "original_purchase_date",
            "expires_date",
            "cancellation_date",
            "cancellation_reason",
            "quantity",
            "web_order_line_item_id",
            "is_trial_period",
            "is_in_intro_offer_period",
            "raw",
        ],
    )
):
    """
    One in-app purchase transaction. Built once from the vendor's flat field
    mapping and never changed afterwards. Optional fields that were not sent
    are None.
    """

    __slots__ = ()

    @classmethod
    def from_data(cls, data):
        return cls(raw=_frozen(data), **clean_fields(PurchaseItemForm, data))

    @property
    def is_cancelled(self):
        return self.cancellation_date is not None


class PendingRenewalInfo(
    namedtuple(
        "PendingRenewalInfo",
        [
            "product_id",
            "auto_renew_product_id",
            "original_transaction_id",
            "auto_renew_status",
            "expiration_intent",
            "is_in_billing_retry_period",
            "grace_period_expires_date",
            "price_consent_status",
            "raw",
        ],
    )
):
    """The pending auto-renewal state of one subscription."""

    __slots__ = ()

    @classmethod
    def from_data(cls, data):
        return cls(raw=_frozen(data), **clean_fields(PendingRenewalInfoForm, data))
