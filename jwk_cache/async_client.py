"""
asyncio flavour of the JWKS client.
"""

import asyncio
from typing import Any, Optional

import httpx

from .client import BaseKeyStore
from .config import JWKSConfig
from .fetcher import fetch_jwks_async
from .keys import Certs, Key
from .metrics import JWKSMetrics


class AsyncJSONWebKeys(BaseKeyStore):
    """Fetches and caches RSA signing keys for coroutine callers.

    Concurrent tasks on one event loop share a single refresh: the lock is
    an ``asyncio.Lock`` held across the awaited HTTP call.
    """

    def __init__(self, jwk_url: str, *, client: Optional[httpx.AsyncClient] = None,
                 metrics: Optional[JWKSMetrics] = None, **settings: Any):
        super().__init__(JWKSConfig(jwk_url=jwk_url, **settings), metrics,
                         logger_name="jwk_cache.async_client")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.config.http_timeout)
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: JWKSConfig, client: Optional[httpx.AsyncClient] = None,
                    metrics: Optional[JWKSMetrics] = None) -> "AsyncJSONWebKeys":
        return cls(client=client, metrics=metrics, **config.model_dump())

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncJSONWebKeys":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def get_keys(self) -> Certs:
        """Return the current key set, refreshing it first if missing or expired."""
        certs = self._fresh_certs()
        if certs is not None:
            self.metrics.record_cache_hit()
            return certs

        self.metrics.record_cache_miss()
        async with self._lock:
            if self.config.collapse_refreshes:
                certs = self._fresh_certs()
                if certs is not None:
                    return certs

            self.logger.debug("Refreshing JWKS", url=self.config.jwk_url)
            try:
                with self.metrics.time_refresh():
                    result = await fetch_jwks_async(
                        self._client,
                        self.config.jwk_url,
                        self.config.default_cache_age,
                        self.config.require_success_status,
                    )
            except Exception as exc:
                self._refresh_failed(exc)
                raise

            return self._install(result)

    async def get_key(self, kid: str) -> Key:
        """Return the signing key for ``kid``; raises KeyNotFoundError if absent."""
        return self._lookup(await self.get_keys(), kid)
