"""Unit tests for the Explanation Agent."""

import pytest

from behavior_guard.agents.explanation.agent import ExplanationAgent
from behavior_guard.core.types import ThreatClass
from behavior_guard.data.schemas.finding import AnomalyIndicator


@pytest.fixture
def explanation_agent():
    return ExplanationAgent()


def _indicator(n: int) -> AnomalyIndicator:
    return AnomalyIndicator(
        metric=f"m{n}",
        observed_value=float(n),
        expected_value=0.0,
        deviation_score=3.0,
        description=f"reason {n}",
    )


class TestExplain:
    """Tests for explanation text."""

    def test_no_anomalies(self, explanation_agent):
        assert explanation_agent.explain([], ThreatClass.BENIGN) == (
            "No significant anomalies detected. Behavior appears normal."
        )

    def test_top_three_descriptions(self, explanation_agent):
        anomalies = [_indicator(n) for n in range(1, 6)]

        text = explanation_agent.explain(anomalies, ThreatClass.CRYPTO_MINING)

        assert text == (
            "Detected Crypto Mining: reason 1; reason 2; reason 3. "
            "Resource abuse for mining"
        )

    def test_deterministic(self, explanation_agent):
        anomalies = [_indicator(1)]
        first = explanation_agent.explain(anomalies, ThreatClass.UNKNOWN)
        second = explanation_agent.explain(anomalies, ThreatClass.UNKNOWN)
        assert first == second == "Detected Unknown: reason 1. Unclassified anomalous behavior"


class TestRecommend:
    """Tests for recommendation lookup."""

    def test_crypto_mining(self, explanation_agent):
        assert explanation_agent.recommend(ThreatClass.CRYPTO_MINING, 0.1) == [
            "Check battery and CPU usage",
            "Identify and remove mining apps",
            "Monitor device temperature",
        ]

    @pytest.mark.parametrize("classification", [
        ThreatClass.DATA_EXFILTRATION,
        ThreatClass.COMMAND_AND_CONTROL,
        ThreatClass.PHISHING,
        ThreatClass.SUSPICIOUS_NETWORK,
        ThreatClass.MALICIOUS_PAYLOAD,
    ])
    def test_dedicated_lists_ignore_score(self, explanation_agent, classification):
        assert explanation_agent.recommend(classification, 0.0)

    def test_fallback_at_half(self, explanation_agent):
        assert explanation_agent.recommend(ThreatClass.UNKNOWN, 0.5) == [
            "Monitor for continued suspicious activity",
            "Review recent app installations",
        ]

    def test_nothing_below_half(self, explanation_agent):
        assert explanation_agent.recommend(ThreatClass.BENIGN, 0.49) == []

    def test_returned_list_is_a_copy(self, explanation_agent):
        explanation_agent.recommend(ThreatClass.PHISHING, 1.0).append("mutated")
        assert "mutated" not in explanation_agent.recommend(ThreatClass.PHISHING, 1.0)
