import datetime
import logging

from django import forms
import pytz

from .widgets import VendorBooleanSelect

log = logging.getLogger(__name__)


EXPIRATION_INTENT_CHOICES = [
    (1, "Voluntary cancellation"),
    (2, "Billing error"),
    (3, "Declined price change"),
    (4, "Product not available at renewal"),
    (5, "Unknown error"),
]

# Format of the human readable dates, e.g. "2020-06-27 00:02:39 Etc/GMT"
APPLE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _from_ms(value):
    # the date in ms
    seconds = int(value) / 1000.0
    return datetime.datetime.fromtimestamp(seconds, tz=pytz.utc)


def _parse_date(value):
    if isinstance(value, bool):
        raise ValueError("Not a date: {}".format(value))
    if isinstance(value, (int, float)):
        return _from_ms(value)

    value = str(value).strip()
    if value.isdigit():
        return _from_ms(value)

    stamp, _, zone = value.rpartition(" ")
    if not stamp:
        raise ValueError("Missing time zone: {}".format(value))

    naive = datetime.datetime.strptime(stamp, APPLE_DATE_FORMAT)
    return pytz.timezone(zone).localize(naive).astimezone(pytz.utc)


def _clean_date(data, name, required=False):
    # Try to get the value in ms
    for key in (name + "_ms", name):
        value = data.get(key)
        if value is None or value == "":
            continue

        try:
            return _parse_date(value)
        except (TypeError, ValueError, OverflowError, OSError, pytz.UnknownTimeZoneError):
            raise forms.ValidationError(
                "Unable to parse {} as a date: {!r}".format(key, value)
            )

    if required:
        raise forms.ValidationError("Unable to find a date for {}".format(name))

    return None


def _clean_raw_string(data, name):
    # Identifiers are surfaced as given, including empty strings. Presence
    # is for the caller to judge.
    value = data.get(name)
    if value is None:
        return None
    return str(value)


class PurchaseItemForm(forms.Form):
    """
    A Django form to decode one transaction of a verifyReceipt response.

    Used for the elements of receipt.in_app, of latest_receipt_info and for
    an iOS 6 style transaction receipt.

    See https://developer.apple.com/documentation/appstorereceipts/responsebody/receipt/in_app
    """

    CANCELLATION_REASON_CHOICES = ((0, "Other"), (1, "Issue"))

    # The unique identifier of the product purchased. You provide this value when
    # creating the product in App Store Connect, and it corresponds to the
    # productIdentifier property of the SKPayment object stored in the transaction's
    # payment property.
    product_id = forms.Field(required=False)

    # A unique identifier for a transaction such as a purchase, restore, or renewal.
    transaction_id = forms.Field(required=False)

    # The transaction identifier of the original purchase.
    original_transaction_id = forms.Field(required=False)

    # The time the App Store charged the user's account for a purchased or
    # restored product, or for a subscription purchase or renewal after a lapse.
    purchase_date = forms.Field(required=False)

    # The time of the original app purchase.
    original_purchase_date = forms.Field(required=False)

    # The time a subscription expires or when it will renew.
    expires_date = forms.Field(required=False)

    # The time Apple customer support canceled a transaction, or the time an
    # auto-renewable subscription plan was upgraded.
    cancellation_date = forms.Field(required=False)

    # "1" if the customer canceled due to an issue within the app, "0" for any
    # other reason.
    cancellation_reason = forms.TypedChoiceField(
        choices=CANCELLATION_REASON_CHOICES, coerce=int, required=False, empty_value=None
    )

    # The number of consumable products purchased.
    quantity = forms.IntegerField(required=False, min_value=0)

    # A unique identifier for purchase events across devices, including
    # subscription-renewal events.
    web_order_line_item_id = forms.CharField(required=False, empty_value=None)

    # An indicator of whether a subscription is in the free trial period.
    is_trial_period = forms.NullBooleanField(widget=VendorBooleanSelect)

    # An indicator of whether an auto-renewable subscription is in the introductory
    # price period.
    is_in_intro_offer_period = forms.NullBooleanField(widget=VendorBooleanSelect)

    def clean_product_id(self):
        return _clean_raw_string(self.data, "product_id")

    def clean_transaction_id(self):
        return _clean_raw_string(self.data, "transaction_id")

    def clean_original_transaction_id(self):
        return _clean_raw_string(self.data, "original_transaction_id")

    def clean_purchase_date(self):
        return _clean_date(self.data, "purchase_date")

    def clean_original_purchase_date(self):
        return _clean_date(self.data, "original_purchase_date")

    def clean_expires_date(self):
        # iOS 6 style receipts send expires_date in ms, without expires_date_ms
        return _clean_date(self.data, "expires_date")

    def clean_cancellation_date(self):
        return _clean_date(self.data, "cancellation_date")


class PendingRenewalInfoForm(forms.Form):
    """
    A Django form to decode one element of pending_renewal_info.

    https://developer.apple.com/documentation/appstorereceipts/responsebody/pending_renewal_info
    """

    PRICE_CONSENT_CHOICES = ((0, "Pending"), (1, "Consented"))

    # The unique identifier of the product purchased.
    product_id = forms.Field(required=False)

    # The product identifier the customer's subscription renews to.
    auto_renew_product_id = forms.Field(required=False)

    # The transaction identifier of the original purchase.
    original_transaction_id = forms.Field(required=False)

    # The current renewal status for an auto-renewable subscription product.
    auto_renew_status = forms.NullBooleanField(widget=VendorBooleanSelect)

    # The reason a subscription expired. This field is only present for an expired
    # auto-renewable subscription.
    expiration_intent = forms.TypedChoiceField(
        choices=EXPIRATION_INTENT_CHOICES, coerce=int, required=False, empty_value=None
    )

    # A flag that indicates Apple is attempting to renew an expired subscription
    # automatically.
    is_in_billing_retry_period = forms.NullBooleanField(widget=VendorBooleanSelect)

    # The time at which the grace period for subscription renewals expires.
    grace_period_expires_date = forms.Field(required=False)

    # The price consent status for a subscription price increase.
    price_consent_status = forms.TypedChoiceField(
        choices=PRICE_CONSENT_CHOICES, coerce=int, required=False, empty_value=None
    )

    def clean_product_id(self):
        return _clean_raw_string(self.data, "product_id")

    def clean_auto_renew_product_id(self):
        return _clean_raw_string(self.data, "auto_renew_product_id")

    def clean_original_transaction_id(self):
        return _clean_raw_string(self.data, "original_transaction_id")

    def clean_grace_period_expires_date(self):
        return _clean_date(self.data, "grace_period_expires_date")


def clean_fields(form_cls, data):
    """
    Run `data` through `form_cls` and return every field of the form.

    Fields that fail to decode are logged and come back as None, so that one
    odd value never costs the whole record.
    """
    form = form_cls(data)
    if not form.is_valid():
        log.warning(
            "Unable to decode fields for {}: {}".format(
                form_cls.__name__, sorted(form.errors)
            ),
            extra={"data": {"errors": form.errors.as_data()}},
        )

    return {name: form.cleaned_data.get(name) for name in form_cls.base_fields}
