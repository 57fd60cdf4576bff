import datetime
import logging

import pytz

from .exceptions import (
    InvalidReceipt,
    NoActiveReceiptException,
    NoPurchasesException,
)
from . import settings


log = logging.getLogger(__name__)


def validate_device(response, bundle_ids):
    if response.bundle_id is None:
        raise InvalidReceipt("Unknown decoded receipt format!")
    if response.bundle_id not in bundle_ids:
        raise InvalidReceipt(
            "Unexpected bundle_id in decoded receipt {}".format(response.bundle_id)
        )
    return True


def validate_product(response, product_ids):
    # If there are no products in the receipt, they are all ok
    for purchase in response.purchases:
        if not purchase.product_id:
            raise InvalidReceipt("Unknown decoded receipt format!")
        if purchase.product_id not in product_ids:
            raise InvalidReceipt(
                "Unexpected product_id in decoded receipt {}".format(
                    purchase.product_id
                )
            )
    return True


def validate_production_receipt(response):
    validate_device(response, [settings.production_bundle_id()])
    validate_product(response, settings.production_product_ids())


def validate_debug_receipt(response):
    if not response.is_sandbox:
        raise InvalidReceipt("Debug receipts must be in the sandbox!")

    production_bundle_id = settings.production_bundle_id()
    debug_bundle_id = settings.debug_bundle_id()
    bundle_ids = (
        [debug_bundle_id, production_bundle_id]
        if debug_bundle_id
        else [production_bundle_id]
    )

    # The sandbox can have both production and debug bundle and product ids.
    # This is because when the app is in review, they test on the sandbox,
    # but are using a production build of the app.
    validate_device(response, bundle_ids)
    validate_product(
        response, settings.debug_product_ids() | settings.production_product_ids()
    )


def _is_active(purchase, timedelta, grace_period, now):
    if purchase.expires_date is not None:
        # See if this iap is expired
        return now < purchase.expires_date + grace_period

    if purchase.original_purchase_date is None:
        log.warning(
            "Purchase {} has neither an expires nor an original purchase date".format(
                purchase.transaction_id
            )
        )
        return False

    # Check the subscription period
    expires_date = purchase.original_purchase_date + timedelta
    return now < expires_date + grace_period


def validate_receipt_is_active(
    response, timedelta, is_test=False, product_id=None, now=None
):
    """
    Return the most recent active purchase of a parsed ReceiptResponse.

    `timedelta` is the subscription period used for purchases that carry no
    expires_date.
    """
    # Establish grace period
    delta_kwargs = {"minutes": 1} if is_test else {"days": 1}
    grace_period = datetime.timedelta(**delta_kwargs)

    response.raise_for_status()

    # Validate the device and product are ok
    local_validation = (
        validate_debug_receipt if is_test else validate_production_receipt
    )
    local_validation(response)

    # Use the latest receipt information from Apple, otherwise use the IAPs
    # from the receipt. latest_receipt_info is sorted most recent first.
    iaps = response.latest_receipt_info
    if iaps is None:
        iaps = response.purchases
    if not iaps:
        raise NoPurchasesException(response, "No IAPs for receipt!")

    if now is None:
        now = datetime.datetime.now(tz=pytz.utc)

    # Ensure the receipt has an active subscription.
    for iap in iaps:
        if iap.is_cancelled:
            # This iap is canceled. Ignore it
            continue

        # If we were given a product_id, make sure this iap is for that same
        # product_id
        if product_id is not None and iap.product_id != product_id:
            continue

        if _is_active(iap, timedelta, grace_period, now):
            return iap

    raise NoActiveReceiptException(response, "No active IAP was found in the receipt")
