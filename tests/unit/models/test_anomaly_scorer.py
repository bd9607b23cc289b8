"""Unit tests for the anomaly scorer.

Covers the reliability gate, spread estimation and the bounded aggregate.
"""

import math

import pytest

from behavior_guard.core.types import EntityKind
from behavior_guard.data.schemas.finding import AnomalyIndicator
from behavior_guard.models.behavior.profile import BehavioralProfile, BehaviorSample
from behavior_guard.models.behavior.scorer import AnomalyScorer, describe_deviation


@pytest.fixture
def scorer():
    return AnomalyScorer()


def _profile(values: list[float], metric: str = "cpu_usage") -> BehavioralProfile:
    profile = BehavioralProfile(entity_id="app", entity_kind=EntityKind.APPLICATION)
    for value in values:
        profile.add_sample(BehaviorSample({metric: value}))
    return profile


def _indicator(z: float) -> AnomalyIndicator:
    return AnomalyIndicator(
        metric="m",
        observed_value=z,
        expected_value=0.0,
        deviation_score=z,
        description="test",
    )


class TestEstimateStdDev:
    """Tests for spread estimation over the sample window."""

    def test_default_below_three_values(self, scorer):
        assert scorer.estimate_std_dev(_profile([1.0, 100.0]), "cpu_usage") == 1.0

    def test_population_standard_deviation(self, scorer):
        std = scorer.estimate_std_dev(_profile([1.0, 2.0, 3.0, 4.0]), "cpu_usage")
        assert std == pytest.approx(math.sqrt(1.25))

    def test_constant_metric_has_zero_spread(self, scorer):
        assert scorer.estimate_std_dev(_profile([7.0] * 5), "cpu_usage") == 0.0


class TestDetect:
    """Tests for per-metric detection."""

    def test_unreliable_profile_yields_nothing(self, scorer):
        profile = _profile([10.0, 12.0] * 4 + [10.0])
        assert profile.sample_count == 9

        anomalies = scorer.detect(profile, BehaviorSample({"cpu_usage": 10_000.0}))

        assert anomalies == []

    def test_reliable_profile_flags_outlier(self, scorer):
        profile = _profile([10.0, 12.0] * 5)

        anomalies = scorer.detect(profile, BehaviorSample({"cpu_usage": 95.0}))

        assert len(anomalies) == 1
        indicator = anomalies[0]
        assert indicator.metric == "cpu_usage"
        assert indicator.observed_value == 95.0
        assert indicator.expected_value == pytest.approx(profile.normal_behavior["cpu_usage"])
        assert indicator.deviation_score > 2.5
        assert "higher than normal" in indicator.description

    def test_value_within_band_is_not_flagged(self, scorer):
        profile = _profile([10.0, 12.0] * 5)
        assert scorer.detect(profile, BehaviorSample({"cpu_usage": 11.0})) == []

    def test_unknown_metric_is_ignored(self, scorer):
        profile = _profile([10.0, 12.0] * 5)
        sample = BehaviorSample({"cpu_usage": 11.0, "gpu_usage": 1000.0})
        assert scorer.detect(profile, sample) == []

    def test_zero_spread_metric_is_skipped(self, scorer):
        profile = _profile([5.0] * 10)
        assert scorer.detect(profile, BehaviorSample({"cpu_usage": 500.0})) == []


class TestAggregate:
    """Tests for the bounded aggregate score."""

    def test_no_indicators_scores_zero(self, scorer):
        assert scorer.aggregate([]) == 0.0

    def test_single_indicator_is_capped(self, scorer):
        assert scorer.aggregate([_indicator(1_000_000.0)]) == pytest.approx(0.3)

    def test_small_indicator_contributes_proportionally(self, scorer):
        assert scorer.aggregate([_indicator(1.0)]) == pytest.approx(0.2)

    def test_saturates_at_one(self, scorer):
        assert scorer.aggregate([_indicator(50.0)] * 10) == 1.0

    def test_monotone_in_indicator_count(self, scorer):
        scores = [scorer.aggregate([_indicator(3.0)] * n) for n in range(8)]
        assert scores == sorted(scores)
        assert all(0.0 <= s <= 1.0 for s in scores)


class TestConfidence:
    def test_confidence_follows_reliability(self, scorer):
        assert scorer.confidence(_profile([1.0] * 9)) == 0.5
        assert scorer.confidence(_profile([1.0] * 10)) == 0.9


class TestDescribeDeviation:
    """Tests for deviation descriptions."""

    def test_higher(self):
        assert describe_deviation("cpu_usage", 95.0, 10.0) == (
            "cpu_usage is 850% higher than normal (observed: 95.0, expected: 10.0)"
        )

    def test_lower_with_small_expected(self):
        assert describe_deviation("x", 0.5, 0.8) == (
            "x is 30% lower than normal (observed: 0.5, expected: 0.8)"
        )
