from collections import namedtuple
from collections.abc import Mapping
import copy
import datetime
import logging

import pytz

from .exceptions import (
    MalformedInputError,
    NoPurchasesException,
    ReceiptValidationException,
    RetryReceiptValidation,
)
from .items import PendingRenewalInfo, PurchaseItem
from .status import StatusCode, StatusKind, classify, coerce_code, describe

log = logging.getLogger(__name__)

SANDBOX_ENVIRONMENT = "Sandbox"
PRODUCTION_ENVIRONMENT = "Production"

# Transactions without a purchase date sort after everything else
_OLDEST = datetime.datetime.min.replace(tzinfo=pytz.utc)


_ParsedState = namedtuple(
    "_ParsedState",
    [
        "result_code",
        "bundle_id",
        "receipt",
        "purchases",
        "latest_receipt",
        "latest_receipt_info",
        "pending_renewal_info",
        "environment",
    ],
)


def _default_state(result_code=None, environment=None):
    return _ParsedState(
        result_code=result_code,
        bundle_id=None,
        receipt={},
        purchases=[],
        latest_receipt=None,
        latest_receipt_info=None,
        pending_renewal_info=None,
        environment=environment,
    )


def _is_array(value):
    return isinstance(value, (list, tuple))


def _status(content):
    value = content.get("status")
    code = coerce_code(value)
    if code is None:
        log.warning(
            "Unreadable status {!r}, treating the receipt data as malformed".format(
                value
            )
        )
        return int(StatusCode.DATA_MALFORMED)
    return code


def _build_items(item_cls, values, name):
    # Server notifications send a single object where verifyReceipt sends a
    # list, accept both.
    if isinstance(values, Mapping):
        values = [values]

    if not _is_array(values):
        log.warning(
            "Ignoring {} that is not a list".format(name),
            extra={"data": {"value": values}},
        )
        return None

    items = []
    for i, data in enumerate(values):
        if not isinstance(data, Mapping):
            log.warning(
                "Skipping {}[{}] that is not an object".format(name, i),
                extra={"data": {"value": data}},
            )
            continue
        items.append(item_cls.from_data(data))
    return items


def _purchase_date_key(item):
    return item.purchase_date or _OLDEST


def _decode_modern(content):
    # iOS 7 style app receipt, the transactions are in receipt.in_app
    receipt = content.get("receipt")
    if not isinstance(receipt, Mapping) or not _is_array(receipt.get("in_app")):
        return None

    state = _default_state(_status(content), content.get("environment"))._replace(
        receipt=copy.deepcopy(dict(receipt)),
        purchases=_build_items(PurchaseItem, receipt["in_app"], "in_app"),
        bundle_id=receipt.get("bundle_id"),
    )

    if "latest_receipt_info" in content:
        latest_receipt_info = _build_items(
            PurchaseItem, content["latest_receipt_info"], "latest_receipt_info"
        )
        if latest_receipt_info is not None:
            # Most recent first. sorted() is stable, ties keep the vendor order.
            latest_receipt_info = sorted(
                latest_receipt_info, key=_purchase_date_key, reverse=True
            )
        state = state._replace(latest_receipt_info=latest_receipt_info)

    if "latest_receipt" in content:
        state = state._replace(latest_receipt=content["latest_receipt"])

    if "pending_renewal_info" in content:
        state = state._replace(
            pending_renewal_info=_build_items(
                PendingRenewalInfo,
                content["pending_renewal_info"],
                "pending_renewal_info",
            )
        )

    return state


def _decode_legacy(content):
    # iOS 6 style transaction receipt, the receipt is the transaction
    receipt = content.get("receipt")
    if not isinstance(receipt, Mapping):
        if receipt is not None:
            log.warning(
                "Ignoring receipt that is not an object",
                extra={"data": {"value": receipt}},
            )
        return None

    return _default_state(_status(content), content.get("environment"))._replace(
        receipt=copy.deepcopy(dict(receipt)),
        purchases=[PurchaseItem.from_data(receipt)],
        bundle_id=receipt.get("bid"),
    )


def _decode_status_only(content):
    if "status" not in content:
        return None
    return _default_state(_status(content), content.get("environment"))


# Order matters, the first decoder that recognizes the content wins
DECODERS = (
    ("modern", _decode_modern),
    ("legacy", _decode_legacy),
    ("status only", _decode_status_only),
)


class ReceiptResponse(object):
    """
    The decoded body of a verifyReceipt response.

    A response that Apple rejected is still a ReceiptResponse: check
    is_valid() or result_code, or call raise_for_status(). The only error
    raised while parsing is MalformedInputError, when the body is not a JSON
    object at all.

    Note that status 21006 (valid receipt, expired subscription) is not
    considered valid.
    """

    def __init__(self, raw=None):
        self._state = _default_state()
        if raw is not None:
            self.parse(raw)

    def __repr__(self):
        return "<ReceiptResponse status={} bundle_id={!r} purchases={}>".format(
            self.result_code, self.bundle_id, len(self.purchases)
        )

    def __eq__(self, other):
        if not isinstance(other, ReceiptResponse):
            return NotImplemented
        return self._state == other._state

    __hash__ = None

    def parse(self, raw):
        if not isinstance(raw, Mapping):
            raise MalformedInputError(
                "Response must be a JSON object, got {}".format(type(raw).__name__)
            )

        for shape, decode in DECODERS:
            state = decode(raw)
            if state is not None:
                break
        else:
            shape = "unrecognized"
            state = _default_state(int(StatusCode.DATA_MALFORMED))

        log.info(
            "Parsed {} receipt response with status {}".format(
                shape, state.result_code
            ),
            extra={
                "data": {
                    "bundle_id": state.bundle_id,
                    "purchases": len(state.purchases),
                }
            },
        )

        self._state = state
        return self

    @property
    def result_code(self):
        return self._state.result_code

    @property
    def status_code(self):
        """The StatusCode member for result_code, None for unknown codes."""
        return StatusCode.lookup(self._state.result_code)

    @property
    def status_kind(self):
        return classify(self._state.result_code)

    @property
    def bundle_id(self):
        return self._state.bundle_id

    @property
    def receipt(self):
        return copy.deepcopy(self._state.receipt)

    @property
    def purchases(self):
        return list(self._state.purchases)

    @property
    def latest_receipt(self):
        return self._state.latest_receipt

    @property
    def latest_receipt_info(self):
        if self._state.latest_receipt_info is None:
            return None
        return list(self._state.latest_receipt_info)

    @property
    def pending_renewal_info(self):
        if self._state.pending_renewal_info is None:
            return None
        return list(self._state.pending_renewal_info)

    @property
    def environment(self):
        return self._state.environment

    @property
    def is_sandbox(self):
        return self._state.environment == SANDBOX_ENVIRONMENT

    def is_valid(self):
        return self._state.result_code == StatusCode.OK

    def raise_for_status(self):
        """
        Raise the matching ReceiptValidationException if Apple did not accept
        the receipt.
        """
        if self.is_valid():
            return

        message = describe(self.result_code)
        log.info("Receipt rejected with status {}".format(self.result_code))

        if self.status_kind is StatusKind.TRANSIENT:
            raise RetryReceiptValidation(self, "{}. Retry".format(message))
        if self.result_code == StatusCode.UNAUTHORIZED_RECEIPT:
            raise NoPurchasesException(self, message)
        raise ReceiptValidationException(self, message)
