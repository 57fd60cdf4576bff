import enum


@enum.unique
class StatusCode(int, enum.Enum):
    """
    Status codes returned in the `status` field of a verifyReceipt response.

    See https://developer.apple.com/documentation/appstorereceipts/status
    """

    OK = 0

    # The App Store could not read the JSON object you provided.
    APPSTORE_CANNOT_READ = 21000

    # The data in the receipt-data property was malformed or missing.
    DATA_MALFORMED = 21002

    # The receipt could not be authenticated.
    RECEIPT_NOT_AUTHENTICATED = 21003

    # The shared secret you provided does not match the shared secret on file
    # for your account.
    SHARED_SECRET_NOT_MATCH = 21004

    # The receipt server is not currently available.
    RECEIPT_SERVER_UNAVAILABLE = 21005

    # This receipt is valid but the subscription has expired. The receipt data
    # is still decoded and returned as part of the response.
    # NOTE: Only returned for iOS 6 style transaction receipts for
    # auto-renewable subscriptions.
    RECEIPT_VALID_BUT_SUB_EXPIRED = 21006

    # This receipt is from the test environment, but it was sent to the
    # production environment for verification.
    SANDBOX_RECEIPT_SENT_TO_PRODUCTION = 21007

    # This receipt is from the production environment, but it was sent to the
    # test environment for verification.
    PRODUCTION_RECEIPT_SENT_TO_SANDBOX = 21008

    # Internal data access error. Try again later.
    INTERNAL_ERROR = 21009

    # The user account cannot be found or has been deleted. Treated as if the
    # purchase was never made.
    UNAUTHORIZED_RECEIPT = 21010

    @classmethod
    def lookup(cls, code):
        """Return the member for `code`, or None if it isn't a known status."""
        code = coerce_code(code)
        if code is None:
            return None
        try:
            return cls(code)
        except ValueError:
            return None


def coerce_code(value):
    """
    Return `value` as an integer status code, or None if it doesn't hold one.

    Booleans and fractional or non-finite numbers are not status codes.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        # False for inf and nan as well
        if value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


# Internal data access errors are reported with any code in this range
INTERNAL_DATA_ACCESS_ERROR_MIN = 21100
INTERNAL_DATA_ACCESS_ERROR_MAX = 21199


@enum.unique
class StatusKind(enum.Enum):
    OK = "ok"
    TRANSIENT = "transient"
    ENVIRONMENT_MISMATCH = "environment_mismatch"
    FAILURE = "failure"


_KINDS = {
    StatusCode.OK: StatusKind.OK,
    StatusCode.RECEIPT_SERVER_UNAVAILABLE: StatusKind.TRANSIENT,
    StatusCode.INTERNAL_ERROR: StatusKind.TRANSIENT,
    StatusCode.SANDBOX_RECEIPT_SENT_TO_PRODUCTION: StatusKind.ENVIRONMENT_MISMATCH,
    StatusCode.PRODUCTION_RECEIPT_SENT_TO_SANDBOX: StatusKind.ENVIRONMENT_MISMATCH,
}

_MESSAGES = {
    StatusCode.OK: "OK",
    StatusCode.APPSTORE_CANNOT_READ: "Unable to read payload",
    StatusCode.DATA_MALFORMED: "Malformed receipt-data",
    StatusCode.RECEIPT_NOT_AUTHENTICATED: "Receipt is from an unknown source",
    StatusCode.SHARED_SECRET_NOT_MATCH: "The shared secret does not match",
    StatusCode.RECEIPT_SERVER_UNAVAILABLE: "Server Unavailable",
    StatusCode.RECEIPT_VALID_BUT_SUB_EXPIRED: "Inactive subscription",
    StatusCode.SANDBOX_RECEIPT_SENT_TO_PRODUCTION: (
        "Receipt should be in the sandbox environment"
    ),
    StatusCode.PRODUCTION_RECEIPT_SENT_TO_SANDBOX: (
        "Receipt should be in the production environment"
    ),
    StatusCode.INTERNAL_ERROR: "Internal Apple error",
    StatusCode.UNAUTHORIZED_RECEIPT: "The receipt could not be authorized",
}


def _is_internal_data_access_error(code):
    code = coerce_code(code)
    return (
        code is not None
        and INTERNAL_DATA_ACCESS_ERROR_MIN <= code <= INTERNAL_DATA_ACCESS_ERROR_MAX
    )


def classify(code):
    """
    Classify a raw status code. Unknown codes are failures, never errors.
    """
    status = StatusCode.lookup(code)
    if status is not None:
        return _KINDS.get(status, StatusKind.FAILURE)

    if _is_internal_data_access_error(code):
        return StatusKind.TRANSIENT

    return StatusKind.FAILURE


def describe(code):
    status = StatusCode.lookup(code)
    if status is not None:
        return _MESSAGES[status]

    if _is_internal_data_access_error(code):
        return "Internal data access error {}".format(code)

    return "Unknown status code {}".format(code)
