"""Behavior Guard - behavioral baselining and threat classification."""

__version__ = "0.1.0"
__author__ = "Behavior Guard Team"

# Core exports
from behavior_guard.core.types import EntityKind, ThreatClass, BootstrapMode
from behavior_guard.data.schemas.finding import AnomalyIndicator, ThreatFinding
from behavior_guard.orchestration.engine import BehaviorEngine

__all__ = [
    "EntityKind",
    "ThreatClass",
    "BootstrapMode",
    "AnomalyIndicator",
    "ThreatFinding",
    "BehaviorEngine",
]
