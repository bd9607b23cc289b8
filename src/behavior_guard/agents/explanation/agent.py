"""Explanation Agent - Translator, not thinker.

Turns indicators and a classification into fixed-format text and a
recommendation list. Output depends only on its inputs.
"""

from typing import Optional, Sequence

from behavior_guard.core.types import ThreatClass
from behavior_guard.data.schemas.finding import AnomalyIndicator
from behavior_guard.agents.explanation.templates import (
    FALLBACK_RECOMMENDATIONS,
    MAX_EXPLAINED_ANOMALIES,
    NORMAL_EXPLANATION,
    RECOMMENDATIONS,
)
from behavior_guard.models.behavior.config import DetectionConfig


class ExplanationAgent:
    """Explanation Agent - Translator, not thinker."""

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    def explain(
        self,
        anomalies: Sequence[AnomalyIndicator],
        classification: ThreatClass,
    ) -> str:
        """Summarize the first few indicators under the classification.

        Args:
            anomalies: Indicators in detection order
            classification: Threat class of the finding

        Returns:
            Explanation text
        """
        if not anomalies:
            return NORMAL_EXPLANATION

        details = "; ".join(
            a.description for a in anomalies[:MAX_EXPLAINED_ANOMALIES]
        )
        return (
            f"Detected {classification.display_name}: {details}. "
            f"{classification.description}"
        )

    def recommend(self, classification: ThreatClass, anomaly_score: float) -> list[str]:
        """Recommended actions for a classification.

        Classes without a dedicated list get generic advice once the
        score is high enough, and nothing below that.
        """
        if classification in RECOMMENDATIONS:
            return list(RECOMMENDATIONS[classification])
        if anomaly_score >= self.config.fallback_recommendation_score:
            return list(FALLBACK_RECOMMENDATIONS)
        return []
