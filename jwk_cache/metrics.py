"""
Prometheus metrics for the JWKS cache.
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from prometheus_client import Counter, Histogram, CollectorRegistry


class JWKSMetrics:
    """Metrics recorder owned by a single key store client.

    Instruments are only exported when a registry is given, so several
    clients can live in one process without name clashes.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        self._metrics["jwks_refresh_total"] = Counter(
            "jwks_refresh_total",
            "Total JWKS refreshes",
            ["status"],
            registry=self.registry
        )

        self._metrics["jwks_refresh_duration_seconds"] = Histogram(
            "jwks_refresh_duration_seconds",
            "JWKS refresh duration in seconds",
            registry=self.registry
        )

        self._metrics["jwks_cache_hits_total"] = Counter(
            "jwks_cache_hits_total",
            "Total key set reads served from cache",
            registry=self.registry
        )

        self._metrics["jwks_cache_misses_total"] = Counter(
            "jwks_cache_misses_total",
            "Total key set reads that required a refresh",
            registry=self.registry
        )

        self._metrics["jwks_key_lookups_total"] = Counter(
            "jwks_key_lookups_total",
            "Total key lookups by kid",
            ["result"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_cache_hit(self):
        self._metrics["jwks_cache_hits_total"].inc()

    def record_cache_miss(self):
        self._metrics["jwks_cache_misses_total"].inc()

    def record_refresh(self, status: str):
        """Record a refresh outcome ("success" or "error")."""
        self._metrics["jwks_refresh_total"].labels(status=status).inc()

    def record_lookup(self, result: str):
        """Record a key lookup outcome ("found" or "not_found")."""
        self._metrics["jwks_key_lookups_total"].labels(result=result).inc()

    @contextmanager
    def time_refresh(self):
        """Context manager to time a refresh."""
        start_time = time.time()
        try:
            yield
        finally:
            self._metrics["jwks_refresh_duration_seconds"].observe(time.time() - start_time)
