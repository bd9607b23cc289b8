"""Behavioral profiling models.

Per-entity baselines learned without labels: a rolling EMA with a
bounded sample window, plus batch baselines for entities that arrive
with history.

This answers: "Is this entity behaving like it usually does?"
"""

from behavior_guard.models.behavior.profile import (
    BehavioralProfile,
    BehaviorSample,
    BaselineMetrics,
    ProfileConfig,
)
from behavior_guard.models.behavior.config import DetectionConfig
from behavior_guard.models.behavior.store import ProfileStore
from behavior_guard.models.behavior.scorer import AnomalyScorer, describe_deviation
from behavior_guard.models.behavior.baseline import BaselineLearner

__all__ = [
    "BehavioralProfile",
    "BehaviorSample",
    "BaselineMetrics",
    "ProfileConfig",
    "DetectionConfig",
    "ProfileStore",
    "AnomalyScorer",
    "describe_deviation",
    "BaselineLearner",
]
