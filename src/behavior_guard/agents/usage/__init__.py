"""Usage Anomaly Agent - module init."""

from behavior_guard.agents.usage.agent import UsageAnomalyAgent, usage_entity_id
from behavior_guard.agents.usage.schema import UsageAnomaly

__all__ = ["UsageAnomalyAgent", "UsageAnomaly", "usage_entity_id"]
