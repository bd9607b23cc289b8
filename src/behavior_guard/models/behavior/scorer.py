"""Anomaly scoring against an entity's rolling baseline.

Compares a new sample to the profile's EMA baseline, one metric at a
time, and folds the triggered indicators into a bounded score.
"""

from typing import Iterable, Optional

import numpy as np

from behavior_guard.data.schemas.finding import AnomalyIndicator
from behavior_guard.models.behavior.config import DetectionConfig
from behavior_guard.models.behavior.profile import BehavioralProfile, BehaviorSample


def describe_deviation(metric: str, observed: float, expected: float) -> str:
    """Human-readable description of one metric deviation."""
    direction = "higher" if observed > expected else "lower"
    change = round(abs(observed - expected) / max(expected, 1.0) * 100)
    return (
        f"{metric} is {change}% {direction} than normal "
        f"(observed: {observed:.1f}, expected: {expected:.1f})"
    )


class AnomalyScorer:
    """Score samples against a behavioral profile.

    Per-metric deviation is a z-score against the spread of the stored
    samples. The aggregate caps each indicator's contribution, so a
    single extreme metric cannot saturate the score on its own.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    def estimate_std_dev(self, profile: BehavioralProfile, metric: str) -> float:
        """Population standard deviation of a metric over the sample window.

        Falls back to a conservative default while fewer than
        `min_std_dev_samples` values are stored for the metric.
        """
        values = profile.values_for(metric)
        if len(values) < self.config.min_std_dev_samples:
            return self.config.default_std_dev

        std_dev = float(np.std(np.asarray(values, dtype=np.float64)))
        if std_dev < self.config.epsilon:
            return 0.0
        return std_dev

    def detect(
        self,
        profile: BehavioralProfile,
        sample: BehaviorSample
    ) -> list[AnomalyIndicator]:
        """Detect metrics in `sample` that deviate from the profile.

        Args:
            profile: Entity profile (read only)
            sample: New observation

        Returns:
            Indicators for metrics whose z-score exceeds the threshold.
            Empty for unreliable profiles.
        """
        anomalies: list[AnomalyIndicator] = []

        if not profile.is_reliable:
            return anomalies

        for metric, observed in sample.metrics.items():
            if metric not in profile.normal_behavior:
                continue
            expected = profile.normal_behavior[metric]

            std_dev = self.estimate_std_dev(profile, metric)
            if std_dev == 0.0:
                continue

            z_score = abs(observed - expected) / std_dev
            if z_score > self.config.anomaly_threshold:
                anomalies.append(AnomalyIndicator(
                    metric=metric,
                    observed_value=observed,
                    expected_value=expected,
                    deviation_score=z_score,
                    description=describe_deviation(metric, observed, expected),
                ))

        return anomalies

    def aggregate(self, anomalies: Iterable[AnomalyIndicator]) -> float:
        """Fold indicators into an anomaly score in [0, 1]."""
        total = 0.0
        for anomaly in anomalies:
            total += min(
                anomaly.deviation_score / self.config.per_indicator_divisor,
                self.config.per_indicator_cap,
            )
        return round(max(0.0, min(1.0, total)), 10)

    def confidence(self, profile: BehavioralProfile) -> float:
        if profile.is_reliable:
            return self.config.reliable_confidence
        return self.config.unreliable_confidence
