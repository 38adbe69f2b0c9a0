"""Configuration with sensible defaults for the Israel Post lookup service."""

from dataclasses import dataclass, field
from os import getenv


ISRAEL_POST_URL = "http://www.israelpost.co.il/zip_data1.nsf/SearchZip?OpenAgent&"


def _parse_bool(value: str, default: bool = True) -> bool:
    """Parse boolean from environment variable."""
    if not value:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_float(value: str, default: float) -> float:
    """Parse float from environment variable."""
    try:
        return float(value) if value else default
    except ValueError:
        return default


def _parse_int(value: str, default: int) -> int:
    """Parse int from environment variable."""
    try:
        return int(value) if value else default
    except ValueError:
        return default


@dataclass(slots=True, frozen=True)
class Config:
    # ==================== Upstream ====================
    # Base already ends with '&', the encoded query is appended as-is
    endpoint_url: str = field(default_factory=lambda: getenv("MIKUD_ENDPOINT_URL", ISRAEL_POST_URL))
    request_timeout: float = field(
        default_factory=lambda: _parse_float(getenv("MIKUD_REQUEST_TIMEOUT", ""), 15.0)
    )

    # ==================== Cache ====================
    cache_ttl: int = field(
        default_factory=lambda: _parse_int(getenv("MIKUD_CACHE_TTL", ""), 300)  # 5 minutes
    )
    # Soft bound: a put above this triggers a sweep of expired entries
    cache_max_entries: int = field(
        default_factory=lambda: _parse_int(getenv("MIKUD_CACHE_MAX_ENTRIES", ""), 100)
    )
    enable_cache: bool = field(
        default_factory=lambda: _parse_bool(getenv("MIKUD_ENABLE_CACHE", ""), True)
    )

    # ==================== Logging ====================
    log_level: str = field(default_factory=lambda: getenv("MIKUD_LOG_LEVEL", "INFO").upper())

    def get_cache_config(self) -> dict:
        """Get LookupCache constructor kwargs."""
        return {
            "ttl": self.cache_ttl,
            "max_entries": self.cache_max_entries,
        }


cfg = Config()
