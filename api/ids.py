import time

from django.utils.crypto import get_random_string

ID_SUFFIX_CHARS = 'abcdefghijklmnopqrstuvwxyz0123456789'


def generate_id(prefix):
    """Return ``<prefix>_<millis>_<suffix>``; unique, not globally ordered."""
    millis = int(time.time() * 1000)
    return f"{prefix}_{millis}_{get_random_string(9, ID_SUFFIX_CHARS)}"
