from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

# Read on use so that parsing a response needs no configuration


def _iap_settings():
    return getattr(settings, "IAP_SETTINGS", {})


def production_bundle_id():
    try:
        return _iap_settings()["PRODUCTION_BUNDLE_ID"]
    except KeyError:
        raise ImproperlyConfigured("IAP_SETTINGS['PRODUCTION_BUNDLE_ID'] is required")


def debug_bundle_id():
    return _iap_settings().get("DEBUG_BUNDLE_ID")


def production_product_ids():
    return set(_iap_settings().get("PRODUCTION_PRODUCT_IDS", set()))


def debug_product_ids():
    return set(_iap_settings().get("DEBUG_PRODUCT_IDS", set()))
