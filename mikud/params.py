"""Query string encoding for sparse upstream field sets."""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

# Characters encodeURIComponent leaves alone
_SAFE = "-_.!~*'()"


def is_blank(value: Any) -> bool:
    """True for None or values whose string form is only whitespace."""
    return value is None or not str(value).strip()


def encode_params(fields: Mapping[str, Any]) -> str:
    """Build a query string, omitting blank or absent fields.

    Fields keep the mapping's iteration order. Values are percent-encoded
    as UTF-8 (Hebrew names included); the untrimmed value is sent.

    >>> encode_params({"Location": "Tel Aviv", "Street": " ", "House": 7})
    'Location=Tel%20Aviv&House=7'
    """
    return "&".join(
        f"{key}={quote(str(value), safe=_SAFE)}"
        for key, value in fields.items()
        if not is_blank(value)
    )
