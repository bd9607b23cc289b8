"""Unit tests for finding schemas and the exception hierarchy."""

import pytest
from pydantic import ValidationError

from behavior_guard.common.exceptions import (
    BehaviorGuardException,
    ConfigurationError,
    MetricSourceError,
)
from behavior_guard.core.types import RiskLevel, Severity, ThreatClass
from behavior_guard.data.schemas.finding import AnomalyIndicator, ThreatFinding
from tests.fixtures.metric_sources import FIXED_NOW


def _indicator(deviation: float) -> AnomalyIndicator:
    return AnomalyIndicator(
        metric="cpu_usage",
        observed_value=50.0,
        expected_value=10.0,
        deviation_score=deviation,
        description="cpu_usage deviates",
    )


def _finding(score: float) -> ThreatFinding:
    return ThreatFinding(
        entity_id="com.example.app",
        is_threat=score >= 0.7,
        anomaly_score=score,
        confidence_score=0.9,
        classification=ThreatClass.UNKNOWN,
        explanation="",
        detection_time=FIXED_NOW,
    )


class TestAnomalyIndicator:
    @pytest.mark.parametrize("deviation,expected", [
        (2.6, Severity.MEDIUM),
        (3.0, Severity.MEDIUM),
        (3.5, Severity.HIGH),
        (4.0, Severity.HIGH),
        (9.0, Severity.CRITICAL),
    ])
    def test_severity_grades(self, deviation, expected):
        assert _indicator(deviation).severity == expected

    def test_z_score_alias(self):
        assert _indicator(3.2).z_score == 3.2

    def test_negative_deviation_rejected(self):
        with pytest.raises(ValidationError):
            _indicator(-1.0)


class TestThreatFinding:
    @pytest.mark.parametrize("score,expected", [
        (0.0, RiskLevel.SAFE),
        (0.3, RiskLevel.LOW),
        (0.5, RiskLevel.MEDIUM),
        (0.7, RiskLevel.HIGH),
        (0.9, RiskLevel.CRITICAL),
    ])
    def test_risk_level(self, score, expected):
        assert _finding(score).risk_level == expected

    def test_score_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            _finding(1.5)

    def test_max_severity(self):
        finding = _finding(0.6).model_copy(update={"anomalies": [_indicator(3.5), _indicator(9.0)]})
        assert finding.max_severity == Severity.CRITICAL
        assert _finding(0.0).max_severity is None

    def test_json_dump(self):
        dumped = _finding(0.3).model_dump(mode="json")
        assert dumped["classification"] == "unknown"
        assert dumped["detection_time"].startswith("2026-01-25T12:00:00")


class TestExceptions:
    def test_hierarchy(self):
        assert issubclass(ConfigurationError, BehaviorGuardException)
        assert issubclass(MetricSourceError, BehaviorGuardException)

    def test_to_dict(self):
        error = MetricSourceError("battery unavailable", source_name="bridge")
        assert error.to_dict() == {
            "error": "METRIC_SOURCE_ERROR",
            "message": "battery unavailable",
            "details": {"source_name": "bridge"},
        }
