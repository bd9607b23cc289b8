"""Threat Classifier - module init."""

from behavior_guard.agents.classification.agent import ThreatClassifier

__all__ = ["ThreatClassifier"]
