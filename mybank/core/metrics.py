"""
mybank/core/metrics.py

Purpose: Prometheus metrics registry

- Owns a dedicated CollectorRegistry (no ambient global registry)
- Registers the request and user-insert counters
- Optionally exports process, platform and GC metrics
- Renders the exposition-format snapshot served at /metrics
"""

from typing import Dict, Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

# Counter names; prometheus_client exposes counters with a "_total" suffix
HTTP_REQUESTS = "http_requests"
USER_INSERTS = "user_inserts"
DB_SESSIONS_IN_USE = "db_sessions_in_use"


class MetricsRegistry:
    """
    Process-scoped metrics. Counter increments are atomic, and snapshot()
    may run concurrently with them.
    """

    def __init__(self, collect_default_metrics: bool = True):
        self.registry = CollectorRegistry()

        if collect_default_metrics:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

        self._counters: Dict[str, Counter] = {
            HTTP_REQUESTS: Counter(
                HTTP_REQUESTS,
                "Total number of HTTP requests",
                registry=self.registry,
            ),
            USER_INSERTS: Counter(
                USER_INSERTS,
                "Number of users inserted into DB",
                registry=self.registry,
            ),
        }
        self.sessions_in_use = Gauge(
            DB_SESSIONS_IN_USE,
            "Number of database sessions currently leased by requests",
            registry=self.registry,
        )

    def increment(self, counter_name: str) -> None:
        """
        Adds one to a registered counter.

        Raises:
            KeyError: If the counter was never registered
        """
        self._counters[counter_name].inc()

    def value(self, counter_name: str) -> float:
        """Current value of a registered counter."""
        sample: Optional[float] = self.registry.get_sample_value(f"{counter_name}_total")
        return sample or 0.0

    def snapshot(self) -> bytes:
        """All registered metrics in Prometheus text exposition format."""
        return generate_latest(self.registry)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST
