"""
Thread-safe JWKS client that caches the key set between refreshes.
"""

import threading
from typing import Any, Optional

import httpx

from .config import JWKSConfig
from .errors import KeyNotFoundError
from .fetcher import FetchResult, fetch_jwks
from .keys import Certs, Key, parse_certs
from .logging import get_logger
from .metrics import JWKSMetrics


class BaseKeyStore:
    """Cache bookkeeping shared by the sync and async clients.

    The current snapshot is a single reference that is swapped whole on
    refresh, so readers never need the refresh lock.
    """

    def __init__(self, config: JWKSConfig, metrics: Optional[JWKSMetrics] = None,
                 logger_name: str = "jwk_cache.client"):
        self.config = config
        self.metrics = metrics or JWKSMetrics()
        self.logger = get_logger(logger_name)
        self._certs: Optional[Certs] = None

    @property
    def cached_certs(self) -> Optional[Certs]:
        """The snapshot currently held, fresh or not."""
        return self._certs

    def clear_cache(self):
        """Drop the cached snapshot so the next read refetches."""
        self._certs = None
        self.logger.info("JWKS cache cleared", url=self.config.jwk_url)

    def _fresh_certs(self) -> Optional[Certs]:
        certs = self._certs
        if certs is not None and not certs.is_expired():
            return certs
        return None

    def _install(self, result: FetchResult) -> Certs:
        certs = parse_certs(result.document, result.cache_age)
        self._certs = certs
        self.metrics.record_refresh("success")
        self.logger.info(
            "JWKS refreshed",
            url=self.config.jwk_url,
            keys_count=len(certs),
            ttl_seconds=result.cache_age.total_seconds(),
        )
        return certs

    def _refresh_failed(self, exc: Exception):
        self.metrics.record_refresh("error")
        self.logger.error(
            "Failed to refresh JWKS",
            url=self.config.jwk_url,
            error=str(exc),
            error_type=type(exc).__name__,
        )

    def _lookup(self, certs: Certs, kid: str) -> Key:
        key = certs.keys.get(kid)
        if key is None:
            self.metrics.record_lookup("not_found")
            self.logger.warning("Key not found", kid=kid)
            raise KeyNotFoundError(kid)

        self.metrics.record_lookup("found")
        return key


class JSONWebKeys(BaseKeyStore):
    """Fetches and caches RSA signing keys from a JSON Web Key Store.

    Safe to share between threads. A fresh snapshot is returned without
    locking; an expired or missing one is refreshed under an exclusive lock
    held for the duration of the HTTP call.

    Example::

        keys = JSONWebKeys("https://YOUR_DOMAIN/.well-known/jwks.json")
        key = keys.get_key(kid)
        print(key.pem())
    """

    def __init__(self, jwk_url: str, *, client: Optional[httpx.Client] = None,
                 metrics: Optional[JWKSMetrics] = None, **settings: Any):
        super().__init__(JWKSConfig(jwk_url=jwk_url, **settings), metrics)
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=self.config.http_timeout)
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: JWKSConfig, client: Optional[httpx.Client] = None,
                    metrics: Optional[JWKSMetrics] = None) -> "JSONWebKeys":
        return cls(client=client, metrics=metrics, **config.model_dump())

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "JSONWebKeys":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_keys(self) -> Certs:
        """Return the current key set, refreshing it first if missing or expired."""
        certs = self._fresh_certs()
        if certs is not None:
            self.metrics.record_cache_hit()
            return certs

        self.metrics.record_cache_miss()
        with self._lock:
            if self.config.collapse_refreshes:
                certs = self._fresh_certs()
                if certs is not None:
                    return certs
            return self._refresh()

    def get_key(self, kid: str) -> Key:
        """Return the signing key for ``kid``.

        Raises:
            KeyNotFoundError: the key set has no RSA signing key with that kid.
        """
        return self._lookup(self.get_keys(), kid)

    def _refresh(self) -> Certs:
        self.logger.debug("Refreshing JWKS", url=self.config.jwk_url)
        try:
            with self.metrics.time_refresh():
                result = fetch_jwks(
                    self._client,
                    self.config.jwk_url,
                    self.config.default_cache_age,
                    self.config.require_success_status,
                )
        except Exception as exc:
            self._refresh_failed(exc)
            raise

        return self._install(result)
