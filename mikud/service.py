"""Zipcode lookup orchestration.

One call is a single linear pass:

    address -> cache key -> cache hit?  -> cached zipcode
                                 no     -> GET SearchZip -> classify -> cache -> zipcode

No retries happen here; retry and backoff are left to the caller.
"""

import asyncio
import logging
import random
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from .cache import LookupCache
from .classifier import ResponseClassifier, TransportFailure
from .config import Config
from .models import Address, ErrorKind, LookupResult, ZipLookupError
from .params import encode_params

logger = logging.getLogger(__name__)


USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
)

BASE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "he-IL,he;q=0.8,en-US;q=0.5,en;q=0.3",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "DNT": "1",
}

ZipCallback = Callable[[str | None, str | None], Any]


def build_headers(rng: random.Random | None = None) -> dict[str, str]:
    """Request headers with a User-Agent picked from the pool."""
    choice = (rng or random).choice
    return {"User-Agent": choice(USER_AGENTS), **BASE_HEADERS}


def coerce_address(address: Any) -> Address:
    """Accept an Address or an address-shaped mapping.

    Raises:
        ZipLookupError: INVALID_INPUT for anything else, or an address
            with no usable field.
    """
    if isinstance(address, Address):
        parsed = address
    elif isinstance(address, Mapping):
        parsed = Address.from_mapping(address)
    else:
        raise ZipLookupError(ErrorKind.INVALID_INPUT)

    if parsed.is_blank():
        raise ZipLookupError(ErrorKind.INVALID_INPUT)
    return parsed


class LookupService:
    """Resolves Israeli zipcodes through the Israel Post SearchZip agent.

    The cache is owned by whoever constructs the service; pass one in to
    share it, or let the service build its own from config.

    Usage:
        async with LookupService() as service:
            result = await service.lookup({"city": "תל אביב", "street": "פרישמן", "houseNumber": 7})
            if result.success:
                print(result.zipcode)
    """

    __slots__ = ("config", "cache", "classifier", "client", "_owns_client", "_rng")

    def __init__(
        self,
        config: Config | None = None,
        cache: LookupCache | None = None,
        client: httpx.AsyncClient | None = None,
        classifier: ResponseClassifier | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or Config()
        if cache is None and self.config.enable_cache:
            cache = LookupCache(**self.config.get_cache_config())
        self.cache = cache
        self.classifier = classifier or ResponseClassifier()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=self.config.request_timeout)
        self._rng = rng

    async def __aenter__(self) -> "LookupService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client:
            await self.client.aclose()

    def build_url(self, address: Address) -> str:
        return self.config.endpoint_url + encode_params(address.query_fields())

    async def lookup(self, address: Address | Mapping[str, Any] | Any) -> LookupResult:
        """Resolve the zipcode for one address.

        Never raises for classified failures; the error is returned in
        the result.

        Args:
            address: Address instance or mapping with city, street,
                houseNumber and entrance.

        Returns:
            LookupResult with exactly one of zipcode or error.
        """
        try:
            parsed = coerce_address(address)
        except ZipLookupError as e:
            logger.info(f"Rejected lookup input: {type(address).__name__}")
            return LookupResult.fail(e)

        key = LookupCache.make_key(parsed)
        if self.cache is not None:
            entry = self.cache.get(key)
            if entry is not None:
                logger.debug(f"Cache hit for {key}")
                return LookupResult.ok(entry.zipcode, cached=True)

        result = await self._fetch(parsed)

        if result.success:
            if self.cache is not None:
                self.cache.put(key, result.zipcode)
            logger.info(f"Resolved zipcode {result.zipcode} for {key}")
        else:
            self._log_failure(key, result.error)
        return result

    async def lookup_or_raise(self, address: Address | Mapping[str, Any] | Any) -> str:
        """Like lookup(), but return the zipcode or raise ZipLookupError."""
        result = await self.lookup(address)
        if result.error is not None:
            raise result.error
        return result.zipcode

    async def get_zip_code(self, address: Any, callback: ZipCallback) -> None:
        """Callback-style entry point: callback(error, zipcode).

        The callback runs exactly once with exactly one argument set.
        """
        result = await self.lookup(address)
        if result.error is not None:
            callback(result.error.message, None)
        else:
            callback(None, result.zipcode)

    async def _fetch(self, address: Address) -> LookupResult:
        """Issue the GET and classify whatever comes back."""
        url = self.build_url(address)
        headers = build_headers(self._rng)
        logger.debug(f"GET {url}")

        try:
            # wait_for bounds the whole exchange, httpx bounds each phase
            response = await asyncio.wait_for(
                self.client.get(url, headers=headers, timeout=self.config.request_timeout),
                timeout=self.config.request_timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning(f"Israel Post request timed out after {self.config.request_timeout}s: {e!r}")
            return self.classifier.classify(failure=TransportFailure.TIMEOUT)
        except httpx.NetworkError as e:
            logger.warning(f"Israel Post unreachable: {e!r}")
            return self.classifier.classify(failure=TransportFailure.CONNECTION, failure_detail=str(e))
        except httpx.HTTPError as e:
            logger.warning(f"Israel Post request failed: {e!r}")
            return self.classifier.classify(failure=TransportFailure.OTHER, failure_detail=str(e))

        body = response.text
        logger.debug(f"Israel Post replied {response.status_code}: {body[:200]!r}")
        return self.classifier.classify(
            body=body,
            status=response.status_code,
            reason=response.reason_phrase,
        )

    @staticmethod
    def _log_failure(key: str, error: ZipLookupError) -> None:
        if error.kind is ErrorKind.ADDRESS_NOT_FOUND:
            logger.info(f"Address not found for {key}")
        else:
            logger.warning(f"Lookup failed for {key}: {error.kind.value} - {error.message}")
