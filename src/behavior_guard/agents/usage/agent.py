"""Usage Anomaly Agent - daily app usage against a week of history.

Three checks over OS usage stats:
1. foreground hours per app outside the learned band
2. apps with heavy foreground time but no recent user interaction
3. network interfaces moving unusually large volumes in a day
"""

import logging
import threading
from collections import defaultdict
from typing import Optional

from behavior_guard.agents.explanation.templates import (
    BACKGROUND_ABUSE_DESCRIPTION,
    BACKGROUND_ABUSE_RECOMMENDATION,
    HIGH_NETWORK_DESCRIPTION,
    HIGH_NETWORK_RECOMMENDATION,
)
from behavior_guard.agents.usage.schema import UsageAnomaly
from behavior_guard.common.constants import BaselineConstants, UsageConstants
from behavior_guard.core.types import BootstrapMode, EntityKind, Severity, ThreatClass
from behavior_guard.data.schemas.usage import NetworkUsageRecord, UsageRecord
from behavior_guard.data.sources.collector import MetricCollector
from behavior_guard.orchestration.engine import BehaviorEngine

logger = logging.getLogger(__name__)

FOREGROUND_METRIC = "foreground_hours"


def usage_entity_id(package_name: str) -> str:
    """Entity id for a package's usage profile, kept apart from its app profile."""
    return f"usage:{package_name}"


class UsageAnomalyAgent:
    """Usage-stats detector on top of the behavior engine."""

    def __init__(
        self,
        engine: BehaviorEngine,
        collector: MetricCollector,
        history_hours: int = BaselineConstants.USAGE_HISTORY_HOURS,
        current_hours: int = BaselineConstants.USAGE_CURRENT_HOURS,
    ):
        self.engine = engine
        self.collector = collector
        self.history_hours = history_hours
        self.current_hours = current_hours

        self._tracked: set[str] = set()
        self._baseline_established = False
        self._lock = threading.Lock()

    @property
    def baseline_established(self) -> bool:
        with self._lock:
            return self._baseline_established

    @property
    def tracked_packages(self) -> list[str]:
        with self._lock:
            return sorted(self._tracked)

    def establish_baseline(self) -> int:
        """Learn per-package foreground hours from the usage history.

        Returns:
            Number of packages with a usable baseline
        """
        records = self.collector.usage_stats(self.history_hours)
        if not records:
            logger.warning("No usage data available; is usage-stats access granted?")
            return 0

        history: dict[str, list[dict[str, float]]] = defaultdict(list)
        for record in records:
            history[record.package_name].append({FOREGROUND_METRIC: record.foreground_hours})

        tracked = set()
        for package_name, samples in history.items():
            baselines = self.engine.bootstrap_profile(
                usage_entity_id(package_name), EntityKind.APPLICATION, samples
            )
            if baselines:
                tracked.add(package_name)

        with self._lock:
            self._tracked = tracked
            self._baseline_established = True

        logger.info(f"Usage baseline established for {len(tracked)} apps")
        return len(tracked)

    def detect_behavioral_anomalies(self) -> list[UsageAnomaly]:
        """Run every usage check over the current window.

        Returns:
            Findings in check order; empty until a baseline exists
        """
        if not self.baseline_established:
            logger.warning("Usage baseline not established; run establish_baseline() first")
            return []

        records = self.collector.usage_stats(self.current_hours)
        anomalies = self._usage_deviations(records)
        anomalies.extend(self._background_abuse(records))
        anomalies.extend(self._network_anomalies(self.collector.network_usage(self.current_hours)))
        return anomalies

    def _usage_deviations(self, records: list[UsageRecord]) -> list[UsageAnomaly]:
        tracked = set(self.tracked_packages)
        anomalies: list[UsageAnomaly] = []

        for record in records:
            if record.package_name not in tracked:
                continue

            finding = self.engine.check_baseline(
                usage_entity_id(record.package_name),
                {FOREGROUND_METRIC: record.foreground_hours},
                mode=BootstrapMode.TWO_SIDED,
            )
            for indicator in finding.anomalies:
                change = round(
                    (indicator.observed_value - indicator.expected_value)
                    / indicator.expected_value * 100
                )
                direction = "above" if change > 0 else "below"
                anomalies.append(UsageAnomaly(
                    anomaly_type="usage_deviation",
                    subject=record.package_name,
                    name=f"Behavioral Anomaly: {record.app_name or record.package_name}",
                    description=f"App usage is {abs(change)}% {direction} normal",
                    severity=indicator.severity,
                    classification=finding.classification,
                    observed_value=indicator.observed_value,
                    expected_value=indicator.expected_value,
                    deviation_score=indicator.deviation_score,
                    detected_at=finding.detection_time,
                ))

        return anomalies

    def _background_abuse(self, records: list[UsageRecord]) -> list[UsageAnomaly]:
        now = self.engine.now()
        now_ms = now.timestamp() * 1000
        anomalies: list[UsageAnomaly] = []

        for record in records:
            hours_since_use = (now_ms - record.last_time_used_ms) / UsageConstants.MS_PER_HOUR
            if (
                record.total_time_in_foreground_ms > UsageConstants.BACKGROUND_MIN_FOREGROUND_MS
                and hours_since_use > UsageConstants.BACKGROUND_IDLE_HOURS
            ):
                anomalies.append(UsageAnomaly(
                    anomaly_type="background_abuse",
                    subject=record.package_name,
                    name=f"Suspicious Background Activity: {record.app_name or record.package_name}",
                    description=BACKGROUND_ABUSE_DESCRIPTION,
                    severity=Severity.HIGH,
                    classification=ThreatClass.PERSISTENCE,
                    observed_value=round(hours_since_use, 2),
                    recommendation=BACKGROUND_ABUSE_RECOMMENDATION,
                    detected_at=now,
                ))

        return anomalies

    def _network_anomalies(self, records: list[NetworkUsageRecord]) -> list[UsageAnomaly]:
        now = self.engine.now()
        anomalies: list[UsageAnomaly] = []

        for record in records:
            if record.total_mb > UsageConstants.HIGH_NETWORK_USAGE_MB:
                anomalies.append(UsageAnomaly(
                    anomaly_type="high_network_usage",
                    subject=record.network_type,
                    name="High Network Usage Detected",
                    description=HIGH_NETWORK_DESCRIPTION.format(network_type=record.network_type),
                    severity=Severity.MEDIUM,
                    classification=ThreatClass.DATA_EXFILTRATION,
                    observed_value=round(record.total_mb, 2),
                    expected_value=UsageConstants.HIGH_NETWORK_USAGE_MB,
                    recommendation=HIGH_NETWORK_RECOMMENDATION,
                    detected_at=now,
                ))

        return anomalies

    def generate_report(self, anomalies: Optional[list[UsageAnomaly]] = None) -> dict:
        """Summarize the current usage findings.

        Args:
            anomalies: Findings to report on. Runs detection when None.
        """
        if anomalies is None:
            anomalies = self.detect_behavioral_anomalies()

        return {
            "timestamp": self.engine.now().isoformat(),
            "baseline_established": self.baseline_established,
            "tracked_apps": len(self.tracked_packages),
            "anomalies": [a.model_dump(mode="json") for a in anomalies],
            "summary": {
                "total_anomalies": len(anomalies),
                "critical": sum(1 for a in anomalies if a.severity == Severity.CRITICAL),
                "high": sum(1 for a in anomalies if a.severity == Severity.HIGH),
                "medium": sum(1 for a in anomalies if a.severity == Severity.MEDIUM),
            },
        }
