"""Configuration constants for the behavioral detection pipeline.

Centralizes thresholds so they can be tuned or overridden in one place.
"""
from dataclasses import dataclass

from behavior_guard.common.constants import (
    AlertConstants,
    BaselineConstants,
    ProfileConstants,
    ScoringConstants,
)
from behavior_guard.common.exceptions import ConfigurationError
from behavior_guard.core.types import BootstrapMode
from behavior_guard.models.behavior.profile import ProfileConfig


@dataclass
class DetectionConfig:
    # Profile store
    max_samples: int = ProfileConstants.MAX_SAMPLES
    min_reliable_samples: int = ProfileConstants.MIN_RELIABLE_SAMPLES
    ema_retain_weight: float = ProfileConstants.EMA_RETAIN_WEIGHT
    min_std_dev_samples: int = ProfileConstants.MIN_STD_DEV_SAMPLES
    default_std_dev: float = ProfileConstants.DEFAULT_STD_DEV

    # Bootstrap baselines
    bootstrap_mode: BootstrapMode = BootstrapMode.TWO_SIDED
    min_bootstrap_samples: int = BaselineConstants.MIN_BOOTSTRAP_SAMPLES
    sigma_multiplier: float = BaselineConstants.SIGMA_MULTIPLIER

    # Scoring
    anomaly_threshold: float = ScoringConstants.ANOMALY_THRESHOLD
    threat_threshold: float = ScoringConstants.THREAT_THRESHOLD
    per_indicator_divisor: float = ScoringConstants.PER_INDICATOR_DIVISOR
    per_indicator_cap: float = ScoringConstants.PER_INDICATOR_CAP
    reliable_confidence: float = ScoringConstants.RELIABLE_CONFIDENCE
    unreliable_confidence: float = ScoringConstants.UNRELIABLE_CONFIDENCE
    url_confidence: float = ScoringConstants.URL_CONFIDENCE
    malformed_url_confidence: float = ScoringConstants.MALFORMED_URL_CONFIDENCE
    phishing_threshold: float = ScoringConstants.PHISHING_THRESHOLD
    fallback_recommendation_score: float = ScoringConstants.FALLBACK_RECOMMENDATION_SCORE

    # App classification cutoffs (raw values)
    crypto_cpu_percent: float = 80.0
    clipboard_access_limit: int = 10
    c2_requests_per_min: int = 100
    multi_anomaly_count: int = 3

    # Network indicators
    unusual_port_weight: float = 2.0
    connection_frequency_limit: float = 100.0
    connection_frequency_divisor: float = 20.0
    tx_rx_ratio_limit: float = 10.0
    tx_rx_ratio_divisor: float = 3.0
    failed_ratio_limit: float = 0.5
    failed_ratio_multiplier: float = 5.0

    # Alerting
    anomaly_alert_deviation: float = AlertConstants.ANOMALY_ALERT_DEVIATION

    # Numerical guards
    epsilon: float = 1e-10

    def __post_init__(self):
        self.bootstrap_mode = BootstrapMode(self.bootstrap_mode)
        self.validate()

    def validate(self) -> None:
        """Reject settings that would break scoring invariants."""
        if self.max_samples < 1:
            raise ConfigurationError(
                "max_samples must be at least 1",
                details={"max_samples": self.max_samples},
            )
        if not 0.0 < self.ema_retain_weight < 1.0:
            raise ConfigurationError(
                "ema_retain_weight must be between 0 and 1",
                details={"ema_retain_weight": self.ema_retain_weight},
            )
        if not 0.0 <= self.threat_threshold <= 1.0:
            raise ConfigurationError(
                "threat_threshold must be within [0, 1]",
                details={"threat_threshold": self.threat_threshold},
            )
        if self.anomaly_threshold <= 0.0 or self.per_indicator_divisor <= 0.0:
            raise ConfigurationError(
                "anomaly_threshold and per_indicator_divisor must be positive",
                details={
                    "anomaly_threshold": self.anomaly_threshold,
                    "per_indicator_divisor": self.per_indicator_divisor,
                },
            )
        if self.min_bootstrap_samples < 2:
            raise ConfigurationError(
                "min_bootstrap_samples must be at least 2",
                details={"min_bootstrap_samples": self.min_bootstrap_samples},
            )

    def profile_config(self) -> ProfileConfig:
        """Profile settings derived from this configuration."""
        return ProfileConfig(
            max_samples=self.max_samples,
            min_reliable_samples=self.min_reliable_samples,
            ema_retain_weight=self.ema_retain_weight,
        )
