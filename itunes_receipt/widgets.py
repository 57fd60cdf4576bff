from django.forms.widgets import NullBooleanSelect

# Apple is inconsistent about how it encodes flags: "true"/"false" in
# latest_receipt_info, "1"/"0" in pending_renewal_info, and plain JSON values
# in a few older payloads. "2" and "3" are NullBooleanSelect's own encodings.
TRUE_VALUES = (True, 1, "1", "2", "true", "True")
FALSE_VALUES = (False, 0, "0", "3", "false", "False")


class VendorBooleanSelect(NullBooleanSelect):
    """
    A Select Widget that decodes the App Store's boolean flags for a
    NullBooleanField. Anything unrecognized decodes to None.
    """

    def value_from_datadict(self, data, files, name):
        value = data.get(name)
        if isinstance(value, str):
            value = value.strip()
        # bool is an int, so check the exact type before comparing
        if value is True or value is False:
            return value
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
        return None
