"""Common utilities - logging and exceptions.

Configuration lives in behavior_guard.common.config and is imported from
there, since it depends on the detection models.
"""

from behavior_guard.common.logging.logger import get_logger
from behavior_guard.common.exceptions import (
    BehaviorGuardException,
    ConfigurationError,
    ValidationError,
    MetricSourceError,
    ChannelClosedError,
)

__all__ = [
    # Logging
    "get_logger",
    # Exceptions
    "BehaviorGuardException",
    "ConfigurationError",
    "ValidationError",
    "MetricSourceError",
    "ChannelClosedError",
]
