"""
Israel Post zipcode (mikud) lookup.

Resolves the 7-digit postal code of a structured Israeli street address
through the Israel Post SearchZip agent, with an in-memory TTL cache.

Usage:
    from mikud import LookupService

    async with LookupService() as service:
        result = await service.lookup({"city": "ירושלים", "street": "הרצל", "houseNumber": 10})
"""

from .cache import CacheEntry, LookupCache
from .classifier import (
    BOT_PROTECTION_MARKERS,
    DEFAULT_RULES,
    ClassificationRule,
    ResponseClassifier,
    TransportFailure,
)
from .config import Config
from .models import Address, ErrorKind, LookupResult, ZipLookupError
from .params import encode_params
from .service import LookupService
from .zip_validator import is_valid_zipcode

__all__ = [
    # Models
    "Address",
    "ErrorKind",
    "LookupResult",
    "ZipLookupError",
    # Components
    "encode_params",
    "is_valid_zipcode",
    "ResponseClassifier",
    "ClassificationRule",
    "TransportFailure",
    "DEFAULT_RULES",
    "BOT_PROTECTION_MARKERS",
    "LookupCache",
    "CacheEntry",
    # Service
    "LookupService",
    "Config",
]
