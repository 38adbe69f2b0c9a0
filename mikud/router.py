"""FastAPI router for zipcode lookup endpoints.

Classified lookup failures are returned with HTTP 200 and
``success: false`` so callers can branch on ``error.kind``.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from .models import Address
from .service import LookupService

logger = logging.getLogger(__name__)

# Router instance - configured with the service in main.py
router = APIRouter(prefix="/api/zip", tags=["Zipcode Lookup"])

# Global reference to the service (set during app startup)
_service: LookupService | None = None


def configure_router(service: LookupService | None) -> None:
    """Configure the router with its lookup service.

    Args:
        service: Initialized lookup service, or None to detach it.
    """
    global _service
    _service = service
    if service is not None:
        logger.info(f"Zip router configured (cache={'enabled' if service.cache is not None else 'disabled'})")


def _require_service() -> LookupService:
    if _service is None:
        raise HTTPException(status_code=503, detail="Lookup service not initialized")
    return _service


# ============================================================================
# Request/Response Models
# ============================================================================


class ZipLookupRequest(BaseModel):
    """Request model for a single zipcode lookup."""

    model_config = ConfigDict(populate_by_name=True)

    city: str = Field(
        default="",
        max_length=100,
        description="City name, in Hebrew",
        examples=["תל אביב"],
    )
    street: str = Field(
        default="",
        max_length=100,
        description="Street name, in Hebrew",
        examples=["פרישמן"],
    )
    house_number: str | int | None = Field(
        default=None,
        alias="houseNumber",
        description="House number",
        examples=[7],
    )
    entrance: str | int | None = Field(
        default=None,
        description="Entrance designator",
    )

    def to_address(self) -> Address:
        return Address(
            city=self.city,
            street=self.street,
            house_number=self.house_number,
            entrance=self.entrance,
        )


class ZipLookupResponse(BaseModel):
    """Response model for a zipcode lookup."""

    success: bool
    zipcode: str | None
    cached: bool
    error: dict[str, Any] | None


class CacheStatsResponse(BaseModel):
    """Response model for cache statistics."""

    entries: int
    ttl_seconds: float | None
    max_entries: int | None
    backend: str


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/lookup", response_model=ZipLookupResponse)
async def lookup_zip(request: ZipLookupRequest) -> ZipLookupResponse:
    """Resolve the zipcode of one address.

    Args:
        request: Address fields; blank fields are not sent upstream.

    Returns:
        The zipcode, or the classified error.
    """
    service = _require_service()
    result = await service.lookup(request.to_address())
    return ZipLookupResponse(**result.to_dict())


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats() -> CacheStatsResponse:
    service = _require_service()
    if service.cache is None:
        return CacheStatsResponse(entries=0, ttl_seconds=None, max_entries=None, backend="disabled")
    return CacheStatsResponse(**service.cache.stats())


@router.delete("/cache")
async def clear_cache() -> dict[str, int]:
    service = _require_service()
    cleared = service.cache.clear() if service.cache is not None else 0
    logger.info(f"Cache cleared ({cleared} entries)")
    return {"cleared": cleared}
