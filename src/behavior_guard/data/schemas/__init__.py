"""Data schemas - canonical Pydantic models."""

from behavior_guard.data.schemas.metrics import (
    AppBehaviorMetrics,
    NetworkBehaviorMetrics,
    DeviceMetrics,
)
from behavior_guard.data.schemas.finding import AnomalyAlert, AnomalyIndicator, ThreatFinding
from behavior_guard.data.schemas.usage import UsageRecord, NetworkUsageRecord

__all__ = [
    "AppBehaviorMetrics",
    "NetworkBehaviorMetrics",
    "DeviceMetrics",
    "AnomalyAlert",
    "AnomalyIndicator",
    "ThreatFinding",
    "UsageRecord",
    "NetworkUsageRecord",
]
