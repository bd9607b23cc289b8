"""Custom exceptions for Behavior Guard.

Provides a hierarchy of exceptions for different error types.
All Behavior Guard exceptions inherit from BehaviorGuardException.
"""

from typing import Any, Dict, Optional


class BehaviorGuardException(Exception):
    """Base exception for all Behavior Guard errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: str = "BGUARD_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for alert sinks and logs."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(BehaviorGuardException):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class ValidationError(BehaviorGuardException):
    """Raised when caller input fails validation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class MetricSourceError(BehaviorGuardException):
    """Raised by metric sources when a measurement cannot be taken.

    The collector converts it into a zero-valued sample; it never
    reaches callers of the analyze API.
    """

    def __init__(
        self,
        message: str,
        source_name: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["source_name"] = source_name
        super().__init__(message, code="METRIC_SOURCE_ERROR", details=details)


class ChannelClosedError(BehaviorGuardException):
    """Raised when subscribing to an alert channel that was closed."""

    def __init__(self, channel_name: str):
        super().__init__(
            f"Alert channel '{channel_name}' is closed",
            code="CHANNEL_CLOSED",
            details={"channel_name": channel_name},
        )
