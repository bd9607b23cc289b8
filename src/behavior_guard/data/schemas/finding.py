"""Finding schemas - what the engine hands to alert sinks.

Pydantic models replace the loosely-typed threat maps alert sinks used
to receive. Both models are frozen: a finding is produced per call and
never mutated afterwards.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from behavior_guard.common.constants import ScoringConstants
from behavior_guard.core.types import RiskLevel, Severity, ThreatClass


class AnomalyIndicator(BaseModel):
    """One metric that deviates from the entity's baseline."""

    metric: str = Field(..., description="Metric name, e.g. 'cpu_usage'")
    observed_value: float = Field(..., description="Value seen in the sample")
    expected_value: float = Field(..., description="Baseline value")
    deviation_score: float = Field(
        ...,
        ge=0.0,
        description="Magnitude of deviation, in standard deviations where a baseline exists"
    )
    description: str = Field(..., description="Human-readable description")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "metric": "cpu_usage",
                "observed_value": 95.0,
                "expected_value": 11.8,
                "deviation_score": 27.7,
                "description": "cpu_usage is 705% higher than normal (observed: 95.0, expected: 11.8)",
            }
        }
    }

    @property
    def z_score(self) -> float:
        """How many standard deviations from normal."""
        return self.deviation_score

    @property
    def severity(self) -> Severity:
        if self.deviation_score > ScoringConstants.SEVERITY_CRITICAL:
            return Severity.CRITICAL
        if self.deviation_score > ScoringConstants.SEVERITY_HIGH:
            return Severity.HIGH
        return Severity.MEDIUM


class ThreatFinding(BaseModel):
    """Result of one analysis call."""

    entity_id: str = Field(..., description="Entity the finding is about")
    is_threat: bool = Field(..., description="Whether the anomaly score crossed the threat threshold")
    anomaly_score: float = Field(..., ge=0.0, le=1.0)
    confidence_score: float = Field(..., ge=0.0, le=1.0)
    classification: ThreatClass = Field(...)
    anomalies: list[AnomalyIndicator] = Field(default_factory=list)
    explanation: str = Field(..., description="Deterministic explanation text")
    recommendations: list[str] = Field(default_factory=list)
    detection_time: datetime = Field(..., description="When the finding was produced")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "entity_id": "com.example.flashlight",
                "is_threat": True,
                "anomaly_score": 0.9,
                "confidence_score": 0.9,
                "classification": "crypto_mining",
                "anomalies": [],
                "explanation": "Detected Crypto Mining: cpu_usage is 705% higher than normal "
                               "(observed: 95.0, expected: 11.8). Resource abuse for mining",
                "recommendations": [
                    "Check battery and CPU usage",
                    "Identify and remove mining apps",
                    "Monitor device temperature",
                ],
                "detection_time": "2026-01-25T14:30:00Z",
            }
        }
    }

    @property
    def risk_level(self) -> RiskLevel:
        if self.anomaly_score >= 0.9:
            return RiskLevel.CRITICAL
        if self.anomaly_score >= 0.7:
            return RiskLevel.HIGH
        if self.anomaly_score >= 0.5:
            return RiskLevel.MEDIUM
        if self.anomaly_score >= 0.3:
            return RiskLevel.LOW
        return RiskLevel.SAFE

    @property
    def max_severity(self) -> Severity | None:
        """Highest indicator severity, or None when there are no indicators."""
        if not self.anomalies:
            return None
        order = [Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]
        return max((a.severity for a in self.anomalies), key=order.index)


class AnomalyAlert(BaseModel):
    """One high-deviation indicator, as published on the anomaly channel."""

    entity_id: str = Field(..., description="Entity the indicator belongs to")
    indicator: AnomalyIndicator = Field(...)
    detection_time: datetime = Field(...)

    model_config = {"frozen": True}
