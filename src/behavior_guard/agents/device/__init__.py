"""Device Anomaly Agent - module init."""

from behavior_guard.agents.device.agent import DeviceAnomalyAgent, DEVICE_ENTITY_ID

__all__ = ["DeviceAnomalyAgent", "DEVICE_ENTITY_ID"]
