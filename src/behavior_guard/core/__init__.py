"""Core types."""

from behavior_guard.core.types import (
    EntityKind,
    BootstrapMode,
    Severity,
    RiskLevel,
    ThreatClass,
)

__all__ = [
    "EntityKind",
    "BootstrapMode",
    "Severity",
    "RiskLevel",
    "ThreatClass",
]
