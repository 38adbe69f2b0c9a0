"""Zipcode lookup data models and enums.

This module defines the core data structures shared by the lookup
pipeline: the structured address, the error taxonomy surfaced to
callers, and the single-completion lookup result.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .params import is_blank as _is_blank_value


class ErrorKind(str, Enum):
    """Classified failure categories of a zipcode lookup."""

    INVALID_INPUT = "invalid_input"               # Not an address-shaped object
    TIMEOUT = "timeout"                           # Request aborted by the deadline
    NETWORK_UNAVAILABLE = "network_unavailable"   # DNS / connection failure
    HTTP_ERROR = "http_error"                     # Non-2xx status
    BOT_PROTECTION = "bot_protection"             # Anti-automation challenge page
    MALFORMED_ZIP = "malformed_zip"               # RES8 matched, zip shape invalid
    ADDRESS_NOT_FOUND = "address_not_found"       # RES0/RES1/RES2
    UPSTREAM_ERROR = "upstream_error"             # Any other non-8 RES code
    UNEXPECTED_FORMAT = "unexpected_format"       # RES8 without 7 digits
    SERVICE_UNAVAILABLE = "service_unavailable"   # No RES token at all


# Human readable messages, keyed by kind.
ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_INPUT: "Invalid address object provided",
    ErrorKind.TIMEOUT: (
        "Request timeout - Israeli Post service might be slow or protected. "
        "Please try again later."
    ),
    ErrorKind.NETWORK_UNAVAILABLE: (
        "Network error - unable to reach Israeli Post service. "
        "Please check your internet connection."
    ),
    ErrorKind.HTTP_ERROR: "HTTP error",
    ErrorKind.BOT_PROTECTION: (
        "Israeli Post service is currently protected by anti-bot measures. "
        "Please try again later or use manual lookup at israelpost.co.il"
    ),
    ErrorKind.MALFORMED_ZIP: "Invalid zipcode format received from Israeli Post",
    ErrorKind.ADDRESS_NOT_FOUND: "Address not found in Israeli Post database",
    ErrorKind.UPSTREAM_ERROR: "Israeli Post returned error code",
    ErrorKind.UNEXPECTED_FORMAT: "Unexpected zipcode format from Israeli Post service",
    ErrorKind.SERVICE_UNAVAILABLE: (
        "Israeli Post service is currently unavailable. You can manually lookup "
        "zipcodes at israelpost.co.il or try again later."
    ),
}


class ZipLookupError(Exception):
    """A classified lookup failure.

    Attributes:
        kind: Error category.
        message: Human readable description.
        status: HTTP status code (HTTP_ERROR only).
        status_text: HTTP reason phrase (HTTP_ERROR only).
        code: Raw upstream RES code digits (UPSTREAM_ERROR only).
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        *,
        status: int | None = None,
        status_text: str | None = None,
        code: str | None = None,
    ):
        self.kind = kind
        self.status = status
        self.status_text = status_text
        self.code = code
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        base = ERROR_MESSAGES[self.kind]
        if self.kind is ErrorKind.HTTP_ERROR:
            return f"{base}: {self.status} {self.status_text or ''}".rstrip()
        if self.kind is ErrorKind.UPSTREAM_ERROR:
            return f"{base}: {self.code}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.status is not None:
            data["status"] = self.status
            data["status_text"] = self.status_text
        if self.code is not None:
            data["code"] = self.code
        return data

    def __repr__(self) -> str:
        return f"ZipLookupError({self.kind.value!r}, {self.message!r})"


@dataclass(slots=True, frozen=True)
class Address:
    """Structured Israeli street address.

    Attributes:
        city: City / locality name (Hebrew as the upstream expects).
        street: Street name.
        house_number: Building number, as given by the caller.
        entrance: Entrance designator.
    """

    city: str = ""
    street: str = ""
    house_number: str | int | None = None
    entrance: str | int | None = None

    # Wire name -> attribute
    FIELD_ALIASES = {
        "city": "city",
        "street": "street",
        "houseNumber": "house_number",
        "house_number": "house_number",
        "entrance": "entrance",
    }

    @classmethod
    def from_mapping(cls, obj: Any) -> "Address":
        """Build an Address from a dict using wire or snake_case names.

        Raises:
            ZipLookupError: INVALID_INPUT for None, non-mappings or empty mappings.
        """
        if obj is None or not isinstance(obj, Mapping) or not obj:
            raise ZipLookupError(ErrorKind.INVALID_INPUT)

        values: dict[str, Any] = {}
        for key, attr in cls.FIELD_ALIASES.items():
            if key in obj and obj[key] is not None:
                values[attr] = obj[key]
        return cls(**values)

    def is_blank(self) -> bool:
        """True when no field carries a non-whitespace value."""
        return all(_is_blank_value(value) for value in (self.city, self.street, self.house_number, self.entrance))

    def query_fields(self) -> dict[str, Any]:
        """Upstream query parameter names, in fixed order."""
        return {
            "Location": self.city,
            "Street": self.street,
            "House": self.house_number,
            "Entrance": self.entrance,
        }

    def cache_key(self) -> str:
        """Deterministic serialization of the four identifying fields."""
        return json.dumps(
            [self.city, self.street, self.house_number, self.entrance],
            ensure_ascii=False,
            separators=(",", ":"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "city": self.city,
            "street": self.street,
            "houseNumber": self.house_number,
            "entrance": self.entrance,
        }


@dataclass(slots=True, frozen=True)
class LookupResult:
    """Outcome of one lookup: exactly one of zipcode or error is set."""

    zipcode: str | None = None
    error: ZipLookupError | None = None
    cached: bool = False

    def __post_init__(self):
        if (self.zipcode is None) == (self.error is None):
            raise ValueError("LookupResult needs exactly one of zipcode or error")

    @classmethod
    def ok(cls, zipcode: str, cached: bool = False) -> "LookupResult":
        return cls(zipcode=zipcode, cached=cached)

    @classmethod
    def fail(cls, error: ZipLookupError) -> "LookupResult":
        return cls(error=error)

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "zipcode": self.zipcode,
            "cached": self.cached,
            "error": self.error.to_dict() if self.error else None,
        }
