"""Israeli postal code shape check."""

import re

# Seven digits, no leading zero
ZIPCODE_PATTERN = re.compile(r"[1-9]\d{6}", re.ASCII)


def is_valid_zipcode(value: object) -> bool:
    """Return True iff value is a 7-digit Israeli zipcode string."""
    return isinstance(value, str) and ZIPCODE_PATTERN.fullmatch(value) is not None
