"""Alert delivery for Behavior Guard."""

from behavior_guard.monitoring.alerts import AlertChannel, Subscription

__all__ = ["AlertChannel", "Subscription"]
