"""Failure-tolerant wrapper around a MetricSource.

A failed or timed-out measurement degrades to a zero-valued payload (or
an empty list for usage stats). Failures are logged and counted, never
raised, and never retried.
"""

import logging
import threading
from typing import Callable, TypeVar

from behavior_guard.data.schemas.metrics import (
    AppBehaviorMetrics,
    DeviceMetrics,
    NetworkBehaviorMetrics,
)
from behavior_guard.data.schemas.usage import NetworkUsageRecord, UsageRecord
from behavior_guard.data.sources.base import MetricSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MetricCollector:
    """Reads from a MetricSource, substituting zeros on failure."""

    def __init__(self, source: MetricSource):
        self.source = source
        self._failures = 0
        self._calls = 0
        self._stats_lock = threading.Lock()

    def _collect(self, what: str, call: Callable[[], T], fallback: Callable[[], T]) -> T:
        with self._stats_lock:
            self._calls += 1
        try:
            return call()
        except Exception as e:
            with self._stats_lock:
                self._failures += 1
            logger.warning(
                f"Metric source '{self.source.name}' failed to provide {what}: {e}; using zeros"
            )
            return fallback()

    def app_metrics(self, package_name: str) -> AppBehaviorMetrics:
        return self._collect(
            f"app metrics for {package_name}",
            lambda: self.source.collect_app_metrics(package_name),
            AppBehaviorMetrics.zero,
        )

    def network_metrics(self, entity_id: str) -> NetworkBehaviorMetrics:
        return self._collect(
            f"network metrics for {entity_id}",
            lambda: self.source.collect_network_metrics(entity_id),
            NetworkBehaviorMetrics.zero,
        )

    def device_metrics(self) -> DeviceMetrics:
        return self._collect(
            "device metrics",
            self.source.collect_device_metrics,
            DeviceMetrics,
        )

    def usage_stats(self, hours: int) -> list[UsageRecord]:
        return self._collect(
            f"usage stats for {hours}h",
            lambda: list(self.source.collect_usage_stats(hours)),
            list,
        )

    def network_usage(self, hours: int) -> list[NetworkUsageRecord]:
        return self._collect(
            f"network usage for {hours}h",
            lambda: list(self.source.collect_network_usage(hours)),
            list,
        )

    def get_stats(self) -> dict:
        """Get collection statistics."""
        with self._stats_lock:
            return {
                "calls": self._calls,
                "failures": self._failures,
            }
