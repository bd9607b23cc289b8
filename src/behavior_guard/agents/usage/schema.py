"""Usage Anomaly Agent output schema."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from behavior_guard.core.types import Severity, ThreatClass


class UsageAnomaly(BaseModel):
    """One finding from the usage-stats detector."""

    anomaly_type: str = Field(
        ...,
        description="usage_deviation, background_abuse or high_network_usage"
    )
    subject: str = Field(..., description="Package name or network interface type")
    name: str = Field(..., description="Short title")
    description: str = Field(...)
    severity: Severity = Field(...)
    classification: ThreatClass = Field(...)
    observed_value: float = Field(...)
    expected_value: Optional[float] = Field(default=None)
    deviation_score: Optional[float] = Field(default=None, ge=0.0)
    recommendation: Optional[str] = Field(default=None)
    detected_at: datetime = Field(...)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "anomaly_type": "background_abuse",
                "subject": "com.example.flashlight",
                "name": "Suspicious Background Activity: Flashlight",
                "description": "App active in background for extended period without user interaction",
                "severity": "HIGH",
                "classification": "persistence",
                "observed_value": 9.5,
                "expected_value": None,
                "deviation_score": None,
                "recommendation": "Review app permissions and consider restricting background activity",
                "detected_at": "2026-01-25T14:30:00Z",
            }
        }
    }
