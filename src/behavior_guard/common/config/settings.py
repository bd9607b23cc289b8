"""Configuration management - Centralized configuration for Behavior Guard.

Provides environment-aware configuration with sensible defaults.
All configuration is loaded from environment variables with fallbacks.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from behavior_guard.common.constants import (
    AlertConstants,
    BaselineConstants,
    ScoringConstants,
)
from behavior_guard.common.exceptions import ConfigurationError
from behavior_guard.common.config.rules import DetectionRules, load_rules
from behavior_guard.core.types import BootstrapMode
from behavior_guard.models.behavior.config import DetectionConfig


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _get_project_root() -> Path:
    """Get the project root directory."""
    # settings.py -> config -> common -> behavior_guard -> src -> project_root
    current = Path(__file__).resolve()
    return current.parent.parent.parent.parent.parent


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be a number",
            details={"variable": name, "value": raw},
        ) from e


@dataclass
class Config:
    """Central configuration object for Behavior Guard.

    All settings can be overridden via environment variables prefixed with BGUARD_.

    Example:
        BGUARD_ENVIRONMENT=production
        BGUARD_LOG_LEVEL=INFO
        BGUARD_BOOTSTRAP_MODE=one_sided
    """

    # Core settings
    environment: Environment = field(
        default_factory=lambda: Environment(
            os.getenv("BGUARD_ENVIRONMENT", "development")
        )
    )
    debug: bool = field(
        default_factory=lambda: os.getenv("BGUARD_DEBUG", "false").lower() == "true"
    )
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("BGUARD_LOG_LEVEL", "INFO"))
    )

    # Paths
    project_root: Path = field(default_factory=_get_project_root)
    rules_file: Optional[Path] = field(
        default_factory=lambda: (
            Path(os.environ["BGUARD_RULES_FILE"])
            if os.getenv("BGUARD_RULES_FILE") else None
        )
    )

    # Detection thresholds
    anomaly_threshold: float = field(
        default_factory=lambda: _env_float(
            "BGUARD_ANOMALY_THRESHOLD", ScoringConstants.ANOMALY_THRESHOLD
        )
    )
    threat_threshold: float = field(
        default_factory=lambda: _env_float(
            "BGUARD_THREAT_THRESHOLD", ScoringConstants.THREAT_THRESHOLD
        )
    )
    bootstrap_mode: BootstrapMode = field(
        default_factory=lambda: BootstrapMode(
            os.getenv("BGUARD_BOOTSTRAP_MODE", BootstrapMode.TWO_SIDED.value)
        )
    )

    # Background work
    alert_queue_size: int = field(
        default_factory=lambda: int(
            os.getenv("BGUARD_ALERT_QUEUE_SIZE", str(AlertConstants.SUBSCRIBER_QUEUE_SIZE))
        )
    )
    sampling_interval_seconds: float = field(
        default_factory=lambda: _env_float(
            "BGUARD_SAMPLING_INTERVAL", BaselineConstants.SAMPLING_INTERVAL_SECONDS
        )
    )
    learning_duration_minutes: float = field(
        default_factory=lambda: _env_float(
            "BGUARD_LEARNING_DURATION", BaselineConstants.LEARNING_DURATION_MINUTES
        )
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.alert_queue_size < 1:
            raise ConfigurationError(
                "BGUARD_ALERT_QUEUE_SIZE must be positive",
                details={"alert_queue_size": self.alert_queue_size},
            )
        if self.sampling_interval_seconds <= 0:
            raise ConfigurationError(
                "BGUARD_SAMPLING_INTERVAL must be positive",
                details={"sampling_interval_seconds": self.sampling_interval_seconds},
            )
        if self.learning_duration_minutes <= 0:
            raise ConfigurationError(
                "BGUARD_LEARNING_DURATION must be positive",
                details={"learning_duration_minutes": self.learning_duration_minutes},
            )

        # Warn about debug in production
        if self.environment == Environment.PRODUCTION and self.debug:
            import warnings
            warnings.warn(
                "Debug mode is enabled in production environment",
                RuntimeWarning,
                stacklevel=2
            )

    @property
    def config_dir(self) -> Path:
        """Get the config directory path."""
        return self.project_root / "config"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    def detection_config(self) -> DetectionConfig:
        """Build the detection pipeline configuration."""
        return DetectionConfig(
            anomaly_threshold=self.anomaly_threshold,
            threat_threshold=self.threat_threshold,
            bootstrap_mode=self.bootstrap_mode,
        )

    def detection_rules(self) -> DetectionRules:
        """Load heuristic rules.

        Uses BGUARD_RULES_FILE when set, then config/detection_rules.yaml,
        then the built-in defaults.
        """
        if self.rules_file is not None:
            return load_rules(self.rules_file)
        default_file = self.config_dir / "detection_rules.yaml"
        if default_file.exists():
            return load_rules(default_file)
        return load_rules(None)


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The global configuration singleton.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
