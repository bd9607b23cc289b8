"""Explanation Agent - module init."""

from behavior_guard.agents.explanation.agent import ExplanationAgent

__all__ = ["ExplanationAgent"]
