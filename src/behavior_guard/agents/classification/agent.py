"""Threat Classifier - names the kind of anomaly.

Ordered, first-match-wins heuristics over the triggered metric names
plus selected raw values. Network analysis also contributes its own
indicators, which need no baseline and fire even for new entities.

This agent labels. It does not score.
"""

from typing import Iterable, Optional

from behavior_guard.common.config.rules import DetectionRules
from behavior_guard.core.types import ThreatClass
from behavior_guard.data.schemas.finding import AnomalyIndicator
from behavior_guard.data.schemas.metrics import AppBehaviorMetrics, NetworkBehaviorMetrics
from behavior_guard.models.behavior.config import DetectionConfig


class ThreatClassifier:
    """Rule-based threat classification for app and network behavior.

    App rules (in order):
    - cpu_usage anomalous and raw CPU high -> crypto mining
    - clipboard_accesses anomalous and raw count high -> data exfiltration
    - network_rpm anomalous and raw rate high -> command and control
    - several anomalies at once -> suspicious network

    Network rules (in order):
    - unusual ports -> command and control
    - outbound/inbound imbalance -> data exfiltration
    - mostly failed connections -> suspicious network (scanning)
    - connection storm -> command and control
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        rules: Optional[DetectionRules] = None,
    ):
        self.config = config or DetectionConfig()
        self.rules = rules or DetectionRules()

    def classify_app(
        self,
        anomalies: list[AnomalyIndicator],
        metrics: AppBehaviorMetrics,
    ) -> ThreatClass:
        """Classify app behavior from its anomalies and raw counters."""
        anomalous = {a.metric for a in anomalies}

        if "cpu_usage" in anomalous and metrics.cpu_usage > self.config.crypto_cpu_percent:
            return ThreatClass.CRYPTO_MINING

        if (
            "clipboard_accesses" in anomalous
            and metrics.clipboard_accesses > self.config.clipboard_access_limit
        ):
            return ThreatClass.DATA_EXFILTRATION

        if (
            "network_rpm" in anomalous
            and metrics.network_requests_per_min > self.config.c2_requests_per_min
        ):
            return ThreatClass.COMMAND_AND_CONTROL

        if len(anomalies) >= self.config.multi_anomaly_count:
            return ThreatClass.SUSPICIOUS_NETWORK

        return self._fallback(anomalies)

    def network_indicators(self, metrics: NetworkBehaviorMetrics) -> list[AnomalyIndicator]:
        """Baseline-free indicators for one network sample."""
        anomalies: list[AnomalyIndicator] = []

        if metrics.unusual_ports > 0:
            anomalies.append(AnomalyIndicator(
                metric="unusual_ports",
                observed_value=float(metrics.unusual_ports),
                expected_value=0.0,
                deviation_score=metrics.unusual_ports * self.config.unusual_port_weight,
                description="Connections to unusual/suspicious ports detected",
            ))

        if metrics.connection_frequency > self.config.connection_frequency_limit:
            anomalies.append(AnomalyIndicator(
                metric="connection_frequency",
                observed_value=metrics.connection_frequency,
                expected_value=10.0,
                deviation_score=metrics.connection_frequency / self.config.connection_frequency_divisor,
                description="Abnormally high connection frequency",
            ))

        tx_rx_ratio = metrics.tx_rx_ratio
        if tx_rx_ratio > self.config.tx_rx_ratio_limit:
            anomalies.append(AnomalyIndicator(
                metric="tx_rx_ratio",
                observed_value=tx_rx_ratio,
                expected_value=1.0,
                deviation_score=tx_rx_ratio / self.config.tx_rx_ratio_divisor,
                description="High outbound to inbound traffic ratio (possible exfiltration)",
            ))

        failed_ratio = metrics.failed_ratio
        if failed_ratio > self.config.failed_ratio_limit:
            anomalies.append(AnomalyIndicator(
                metric="failed_connection_ratio",
                observed_value=failed_ratio,
                expected_value=0.1,
                deviation_score=failed_ratio * self.config.failed_ratio_multiplier,
                description="High rate of failed connections (possible scanning)",
            ))

        return anomalies

    def classify_network(
        self,
        anomalies: list[AnomalyIndicator],
        metrics: NetworkBehaviorMetrics,
    ) -> ThreatClass:
        """Classify network behavior from its anomalies."""
        anomalous = {a.metric for a in anomalies}

        # A rolling drop to zero flags the metric but is no C2 evidence
        if "unusual_ports" in anomalous and metrics.unusual_ports > 0:
            return ThreatClass.COMMAND_AND_CONTROL
        if "tx_rx_ratio" in anomalous:
            return ThreatClass.DATA_EXFILTRATION
        if "failed_connection_ratio" in anomalous:
            return ThreatClass.SUSPICIOUS_NETWORK
        if "connection_frequency" in anomalous:
            return ThreatClass.COMMAND_AND_CONTROL

        return self._fallback(anomalies)

    def count_unusual_ports(self, ports: Iterable[int]) -> int:
        """Count destination ports on the known C2/backdoor list.

        Use it to fill NetworkBehaviorMetrics.unusual_ports from a list
        of observed destination ports.
        """
        suspicious = self.rules.suspicious_port_set
        return sum(1 for port in ports if port in suspicious)

    def _fallback(self, anomalies: list[AnomalyIndicator]) -> ThreatClass:
        return ThreatClass.UNKNOWN if anomalies else ThreatClass.BENIGN
