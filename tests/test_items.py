import datetime
import logging

import pytest
import pytz

from itunes_receipt.items import PendingRenewalInfo, PurchaseItem
from itunes_receipt.widgets import VendorBooleanSelect


def test_purchase_item_from_data():
    # An example latest_receipt_info entry from Apple
    data = {
        "expires_date": "2020-07-27 00:02:39 Etc/GMT",
        "expires_date_ms": "1595808159000",
        "expires_date_pst": "2020-07-26 17:02:39 America/Los_Angeles",
        "is_in_intro_offer_period": "false",
        "is_trial_period": "true",
        "original_purchase_date": "2020-06-27 00:02:42 Etc/GMT",
        "original_purchase_date_ms": "1593216162000",
        "original_purchase_date_pst": "2020-06-26 17:02:42 America/Los_Angeles",
        "original_transaction_id": "100000000000001",
        "product_id": "com.example.app.1month",
        "purchase_date": "2020-06-27 00:02:39 Etc/GMT",
        "purchase_date_ms": "1593216159000",
        "purchase_date_pst": "2020-06-26 17:02:39 America/Los_Angeles",
        "quantity": "1",
        "subscription_group_identifier": "00000000",
        "transaction_id": "100000000000002",
        "web_order_line_item_id": "100000000000003",
    }

    item = PurchaseItem.from_data(data)
    assert item.product_id == "com.example.app.1month"
    assert item.transaction_id == "100000000000002"
    assert item.original_transaction_id == "100000000000001"
    assert item.purchase_date == datetime.datetime(2020, 6, 27, 0, 2, 39, tzinfo=pytz.utc)
    assert item.original_purchase_date == datetime.datetime(
        2020, 6, 27, 0, 2, 42, tzinfo=pytz.utc
    )
    assert item.expires_date == datetime.datetime(2020, 7, 27, 0, 2, 39, tzinfo=pytz.utc)
    assert item.cancellation_date is None
    assert item.cancellation_reason is None
    assert item.quantity == 1
    assert item.web_order_line_item_id == "100000000000003"
    assert item.is_trial_period is True
    assert item.is_in_intro_offer_period is False
    assert item.raw == data
    assert not item.is_cancelled


def test_purchase_item_missing_optional_fields():
    item = PurchaseItem.from_data(
        {
            "product_id": "com.example.app.1year",
            "transaction_id": "1",
            "original_transaction_id": "1",
            "purchase_date_ms": "1593216159000",
            "original_purchase_date_ms": "1593216159000",
        }
    )
    assert item.expires_date is None
    assert item.cancellation_date is None
    assert item.cancellation_reason is None
    assert item.quantity is None
    assert item.web_order_line_item_id is None
    assert item.is_trial_period is None
    assert item.is_in_intro_offer_period is None


def test_purchase_item_keeps_empty_identifiers():
    item = PurchaseItem.from_data({"product_id": "", "transaction_id": 12345})
    assert item.product_id == ""
    assert item.transaction_id == "12345"
    assert item.original_transaction_id is None
    assert item.purchase_date is None


def test_purchase_item_cancellation():
    item = PurchaseItem.from_data(
        {
            "product_id": "com.example.app.1year",
            "purchase_date_ms": "1598365962000",
            "cancellation_date": "2020-09-05 11:48:12 Etc/GMT",
            "cancellation_date_ms": "1599306492000",
            "cancellation_reason": "1",
        }
    )
    assert item.cancellation_date == datetime.datetime(
        2020, 9, 5, 11, 48, 12, tzinfo=pytz.utc
    )
    assert item.cancellation_reason == 1
    assert item.is_cancelled


@pytest.mark.parametrize(
    "value",
    [
        "2020-06-27 00:02:39 Etc/GMT",
        "2020-06-26 17:02:39 America/Los_Angeles",
        "1593216159000",
        1593216159000,
    ],
)
def test_purchase_date_without_ms_field(value):
    item = PurchaseItem.from_data({"purchase_date": value})
    assert item.purchase_date == datetime.datetime(2020, 6, 27, 0, 2, 39, tzinfo=pytz.utc)


def test_undecodable_fields_are_left_unset(caplog):
    with caplog.at_level(logging.WARNING):
        item = PurchaseItem.from_data(
            {
                "product_id": "com.example.app.1month",
                "purchase_date": "yesterday",
                "quantity": "lots",
                "cancellation_reason": "7",
            }
        )

    assert item.product_id == "com.example.app.1month"
    assert item.purchase_date is None
    assert item.quantity is None
    assert item.cancellation_reason is None
    assert "Unable to decode fields for PurchaseItemForm" in caplog.text


def test_negative_quantity_is_left_unset():
    item = PurchaseItem.from_data({"quantity": "-1"})
    assert item.quantity is None


def test_purchase_item_is_immutable():
    item = PurchaseItem.from_data({"product_id": "com.example.app.1month"})
    with pytest.raises(AttributeError):
        item.product_id = "com.example.app.1year"


def test_pending_renewal_info_from_data():
    data = {
        "auto_renew_product_id": "com.example.app.1year",
        "auto_renew_status": "0",
        "expiration_intent": "1",
        "is_in_billing_retry_period": "0",
        "original_transaction_id": "100000000000001",
        "product_id": "com.example.app.1month",
    }

    info = PendingRenewalInfo.from_data(data)
    assert info.product_id == "com.example.app.1month"
    assert info.auto_renew_product_id == "com.example.app.1year"
    assert info.original_transaction_id == "100000000000001"
    assert info.auto_renew_status is False
    assert info.expiration_intent == 1
    assert info.is_in_billing_retry_period is False
    assert info.grace_period_expires_date is None
    assert info.price_consent_status is None
    assert info.raw == data


def test_pending_renewal_info_missing_optional_fields():
    info = PendingRenewalInfo.from_data(
        {
            "auto_renew_product_id": "com.example.app.1month",
            "auto_renew_status": "1",
            "original_transaction_id": "100000000000001",
            "product_id": "com.example.app.1month",
        }
    )
    assert info.auto_renew_status is True
    assert info.expiration_intent is None
    assert info.is_in_billing_retry_period is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("true", True),
        ("1", True),
        (1, True),
        (True, True),
        ("false", False),
        ("0", False),
        (0, False),
        (False, False),
        (None, None),
        ("maybe", None),
    ],
)
def test_vendor_boolean_select(value, expected):
    widget = VendorBooleanSelect()
    assert widget.value_from_datadict({"flag": value}, {}, "flag") is expected


def test_raw_fields_are_read_only():
    data = {"product_id": "com.example.app.1month", "extra": {"nested": "1"}}
    item = PurchaseItem.from_data(data)

    with pytest.raises(TypeError):
        item.raw["product_id"] = "com.example.app.1year"

    data["product_id"] = "com.example.app.1year"
    data["extra"]["nested"] = "2"
    assert item.raw["product_id"] == "com.example.app.1month"
    assert item.raw["extra"] == {"nested": "1"}

    info = PendingRenewalInfo.from_data({"product_id": "com.example.app.1month"})
    with pytest.raises(TypeError):
        info.raw["product_id"] = "com.example.app.1year"
