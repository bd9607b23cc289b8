"""Orchestration - the engine and its background tasks."""

from behavior_guard.orchestration.engine import BehaviorEngine
from behavior_guard.orchestration.learning import BaselineLearningTask

__all__ = ["BehaviorEngine", "BaselineLearningTask"]
