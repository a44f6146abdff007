from abc import ABC, abstractmethod
from typing import Any

import httpx
from cachetools import TTLCache
from loguru import logger

from src.greenhouse.core.errors import UpstreamServiceError


class JWKSCache(ABC):
    @abstractmethod
    def get_jwks(self, jwks_uri: str) -> dict[str, Any]:
        """Return the cached key set for ``jwks_uri``, or an empty dict."""
        raise NotImplementedError

    @abstractmethod
    def set_jwks(self, jwks_uri: str, jwks: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear_jwks_cache(self) -> None:
        """Clear the JWKS cache."""
        raise NotImplementedError


class JWKSCacheInMemory(JWKSCache):
    def __init__(self, ttl_seconds: int = 3600) -> None:
        self._cache: TTLCache[str, dict[str, Any]] = TTLCache(maxsize=10, ttl=ttl_seconds)

    def get_jwks(self, jwks_uri: str) -> dict[str, Any]:
        return self._cache.get(jwks_uri, {})

    def set_jwks(self, jwks_uri: str, jwks: dict[str, Any]) -> None:
        self._cache[jwks_uri] = jwks

    def clear_jwks_cache(self) -> None:
        self._cache.clear()


class JwksService:
    """Fetches and caches the identity provider's public signing keys."""

    def __init__(self, cache: JWKSCache, timeout: float = 5.0) -> None:
        self._cache = cache
        self._timeout = timeout

    async def fetch_jwks(self, jwks_uri: str, *, refresh: bool = False) -> dict[str, Any]:
        if not refresh:
            jwks = self._cache.get_jwks(jwks_uri)
            if jwks:
                return jwks

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(jwks_uri)
                resp.raise_for_status()
                jwks = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Failed to fetch JWKS from {}: {}", jwks_uri, exc)
            raise UpstreamServiceError(f"Failed to fetch JWKS: {exc}") from exc

        if not isinstance(jwks, dict) or not isinstance(jwks.get("keys"), list):
            raise UpstreamServiceError("JWKS response has no key list")

        self._cache.set_jwks(jwks_uri, jwks)
        logger.debug("Cached {} signing keys from {}", len(jwks["keys"]), jwks_uri)
        return jwks
