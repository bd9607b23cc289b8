"""Metric source contract.

A metric source is the boundary to the OS bridge (battery, CPU, byte
counters, usage stats). It is injected into whatever needs it rather than
reached through a global, so tests can hand in fakes.
"""

from abc import ABC, abstractmethod

from behavior_guard.data.schemas.metrics import (
    AppBehaviorMetrics,
    DeviceMetrics,
    NetworkBehaviorMetrics,
)
from behavior_guard.data.schemas.usage import NetworkUsageRecord, UsageRecord


class MetricSource(ABC):
    """Abstract provider of raw behavioral measurements.

    Implementations may block on I/O and may raise; callers go through
    MetricCollector, which turns failures into zero-valued data.
    """

    name: str = "metric_source"

    @abstractmethod
    def collect_app_metrics(self, package_name: str) -> AppBehaviorMetrics:
        """Current resource and permission counters for one app."""

    @abstractmethod
    def collect_network_metrics(self, entity_id: str) -> NetworkBehaviorMetrics:
        """Current aggregate counters for one network flow or endpoint."""

    @abstractmethod
    def collect_device_metrics(self) -> DeviceMetrics:
        """Current whole-device health counters."""

    @abstractmethod
    def collect_usage_stats(self, hours: int) -> list[UsageRecord]:
        """Usage-stats buckets covering the last `hours` hours."""

    @abstractmethod
    def collect_network_usage(self, hours: int) -> list[NetworkUsageRecord]:
        """Per-interface byte counters covering the last `hours` hours."""
