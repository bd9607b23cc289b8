"""Configuration module."""

from behavior_guard.common.config.settings import (
    Config,
    Environment,
    LogLevel,
    get_config,
    reset_config,
)
from behavior_guard.common.config.rules import (
    DetectionRules,
    UrlWeights,
    UrlLimits,
    load_rules,
)

__all__ = [
    "Config",
    "Environment",
    "LogLevel",
    "get_config",
    "reset_config",
    "DetectionRules",
    "UrlWeights",
    "UrlLimits",
    "load_rules",
]
