"""Metric sources - the boundary to OS-provided measurements."""

from behavior_guard.data.sources.base import MetricSource
from behavior_guard.data.sources.collector import MetricCollector

__all__ = ["MetricSource", "MetricCollector"]
