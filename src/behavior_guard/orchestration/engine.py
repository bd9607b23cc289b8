"""Behavior Engine - the public analyze-and-update API.

Owns the profile store, the scoring and classification agents, and the
two alert channels. Every analyze call on an entity runs under that
entity's lock: read profile, score, then one profile update. Alerts are
published after the lock is released.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Mapping, Optional, Sequence, Union

from behavior_guard.agents.classification.agent import ThreatClassifier
from behavior_guard.agents.explanation.agent import ExplanationAgent
from behavior_guard.agents.url.agent import UrlAnalyzer
from behavior_guard.common.config.rules import DetectionRules
from behavior_guard.common.config.settings import Config, get_config
from behavior_guard.common.constants import AlertConstants
from behavior_guard.common.exceptions import ConfigurationError, ValidationError
from behavior_guard.core.types import BootstrapMode, EntityKind, ThreatClass
from behavior_guard.data.schemas.finding import AnomalyAlert, AnomalyIndicator, ThreatFinding
from behavior_guard.data.schemas.metrics import AppBehaviorMetrics, NetworkBehaviorMetrics
from behavior_guard.data.sources.base import MetricSource
from behavior_guard.data.sources.collector import MetricCollector
from behavior_guard.models.behavior.baseline import BaselineLearner
from behavior_guard.models.behavior.config import DetectionConfig
from behavior_guard.models.behavior.profile import (
    BaselineMetrics,
    BehavioralProfile,
    BehaviorSample,
    utc_now,
)
from behavior_guard.models.behavior.scorer import AnomalyScorer
from behavior_guard.models.behavior.store import ProfileStore
from behavior_guard.monitoring.alerts import AlertChannel, Subscription

logger = logging.getLogger(__name__)

HistoryItem = Union[BehaviorSample, Mapping[str, float]]


class BehaviorEngine:
    """Behavioral baselining and threat classification engine.

    Usage:
        with BehaviorEngine() as engine:
            alerts = engine.subscribe_threats()
            finding = engine.analyze_app_behavior("com.example.app", metrics)
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        rules: Optional[DetectionRules] = None,
        source: Optional[MetricSource] = None,
        clock: Callable[[], datetime] = utc_now,
        alert_queue_size: int = AlertConstants.SUBSCRIBER_QUEUE_SIZE,
    ):
        """Initialize engine.

        Args:
            config: Detection thresholds. Defaults if not provided.
            rules: URL and port heuristics. Built-in defaults if not provided.
            source: Metric source for the *_from_source helpers.
            clock: Time source for samples and findings.
            alert_queue_size: Default per-subscriber queue bound.
        """
        self.config = config or DetectionConfig()
        self.rules = rules or DetectionRules()
        self._clock = clock

        self.store = ProfileStore(self.config.profile_config(), clock=clock)
        self.scorer = AnomalyScorer(self.config)
        self.learner = BaselineLearner(self.config)
        self.classifier = ThreatClassifier(self.config, self.rules)
        self.explainer = ExplanationAgent(self.config)
        self.url_analyzer = UrlAnalyzer(self.config, self.rules, self.explainer)

        self.collector = MetricCollector(source) if source is not None else None

        self.threat_alerts: AlertChannel[ThreatFinding] = AlertChannel(
            "threat_alerts", alert_queue_size
        )
        self.anomaly_alerts: AlertChannel[AnomalyAlert] = AlertChannel(
            "anomaly_alerts", alert_queue_size
        )

        # Statistics
        self._samples_analyzed = 0
        self._threats_detected = 0
        self._stats_lock = threading.Lock()
        self._disposed = False

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        source: Optional[MetricSource] = None,
    ) -> "BehaviorEngine":
        """Build an engine from environment configuration."""
        config = config or get_config()
        return cls(
            config=config.detection_config(),
            rules=config.detection_rules(),
            source=source,
            alert_queue_size=config.alert_queue_size,
        )

    # ------------------------------------------------------------------
    # App behavior
    # ------------------------------------------------------------------

    def analyze_app_behavior(
        self,
        package_name: str,
        metrics: AppBehaviorMetrics,
        context: Optional[str] = None,
    ) -> ThreatFinding:
        """Score an app sample against its profile, then learn from it.

        Args:
            package_name: App entity id
            metrics: Current counters for the app
            context: Free-text note stored with the sample

        Returns:
            ThreatFinding computed against the profile as it was before
            this sample
        """
        _check_entity_id(package_name)
        now = self._clock()
        sample = BehaviorSample(metrics.to_metrics_map(), timestamp=now, context=context)

        with self.store.locked(package_name):
            profile = self.store.get_or_create(package_name, EntityKind.APPLICATION)
            finding = self._score_app(profile, package_name, metrics, sample, now)
            self.store.add_sample(profile, sample)

        self._record(finding)
        return finding

    def score_app_behavior(
        self,
        package_name: str,
        metrics: AppBehaviorMetrics,
    ) -> ThreatFinding:
        """Same as analyze_app_behavior without updating the profile."""
        _check_entity_id(package_name)
        now = self._clock()
        sample = BehaviorSample(metrics.to_metrics_map(), timestamp=now)

        with self.store.locked(package_name):
            profile = self._profile_or_empty(package_name, EntityKind.APPLICATION)
            return self._score_app(profile, package_name, metrics, sample, now)

    def _score_app(
        self,
        profile: BehavioralProfile,
        entity_id: str,
        metrics: AppBehaviorMetrics,
        sample: BehaviorSample,
        now: datetime,
    ) -> ThreatFinding:
        anomalies = self.scorer.detect(profile, sample)
        classification = self.classifier.classify_app(anomalies, metrics)
        return self._build_finding(entity_id, profile, anomalies, classification, now)

    # ------------------------------------------------------------------
    # Network behavior
    # ------------------------------------------------------------------

    def analyze_network_behavior(
        self,
        entity_id: str,
        metrics: NetworkBehaviorMetrics,
        entity_kind: EntityKind = EntityKind.NETWORK_FLOW,
        context: Optional[str] = None,
    ) -> ThreatFinding:
        """Score a network sample, then learn from it.

        Baseline-free network indicators are evaluated even while the
        profile is still unreliable.
        """
        _check_entity_id(entity_id)
        now = self._clock()
        sample = BehaviorSample(metrics.to_metrics_map(), timestamp=now, context=context)

        with self.store.locked(entity_id):
            profile = self.store.get_or_create(entity_id, entity_kind)
            finding = self._score_network(profile, entity_id, metrics, sample, now)
            self.store.add_sample(profile, sample)

        self._record(finding)
        return finding

    def score_network_behavior(
        self,
        entity_id: str,
        metrics: NetworkBehaviorMetrics,
        entity_kind: EntityKind = EntityKind.NETWORK_FLOW,
    ) -> ThreatFinding:
        """Same as analyze_network_behavior without updating the profile."""
        _check_entity_id(entity_id)
        now = self._clock()
        sample = BehaviorSample(metrics.to_metrics_map(), timestamp=now)

        with self.store.locked(entity_id):
            profile = self._profile_or_empty(entity_id, entity_kind)
            return self._score_network(profile, entity_id, metrics, sample, now)

    def _score_network(
        self,
        profile: BehavioralProfile,
        entity_id: str,
        metrics: NetworkBehaviorMetrics,
        sample: BehaviorSample,
        now: datetime,
    ) -> ThreatFinding:
        anomalies = self.scorer.detect(profile, sample)
        anomalies.extend(self.classifier.network_indicators(metrics))
        classification = self.classifier.classify_network(anomalies, metrics)
        return self._build_finding(entity_id, profile, anomalies, classification, now)

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------

    def analyze_url(self, url: str) -> ThreatFinding:
        """Heuristic URL check. Keeps no profile."""
        finding = self.url_analyzer.analyze(url, now=self._clock())
        self._record(finding)
        return finding

    # ------------------------------------------------------------------
    # Batch baselines
    # ------------------------------------------------------------------

    def bootstrap_profile(
        self,
        entity_id: str,
        entity_kind: EntityKind,
        history: Sequence[HistoryItem],
    ) -> dict[str, BaselineMetrics]:
        """Learn baselines from a batch of historical samples.

        Metrics with fewer than `min_bootstrap_samples` values get no
        baseline. With at least one baseline the entity's rolling profile
        is seeded too.

        Returns:
            Learned baselines by metric
        """
        _check_entity_id(entity_id)
        samples = [
            item if isinstance(item, BehaviorSample)
            else BehaviorSample(item, timestamp=self._clock())
            for item in history
        ]
        baselines = self.learner.learn(samples)
        self.store.bootstrap(entity_id, entity_kind, samples, baselines)

        if baselines:
            logger.info(
                f"Bootstrapped {entity_id} from {len(samples)} samples "
                f"({len(baselines)} metrics)"
            )
        else:
            logger.info(f"Not enough history to bootstrap {entity_id} ({len(samples)} samples)")
        return baselines

    def check_baseline(
        self,
        entity_id: str,
        metrics: Mapping[str, float],
        mode: Optional[BootstrapMode] = None,
    ) -> ThreatFinding:
        """Compare current values against the entity's batch baselines.

        Does not update the profile. Entities without baselines get an
        empty Benign finding.
        """
        _check_entity_id(entity_id)
        now = self._clock()
        with self.store.locked(entity_id):
            profile = self.store.peek(entity_id)
            if profile is None or not profile.has_bootstrap_baseline:
                anomalies: list[AnomalyIndicator] = []
                confidence = self.config.unreliable_confidence
            else:
                anomalies = self.learner.evaluate(profile.bootstrap_baselines, metrics, mode)
                confidence = self.config.reliable_confidence

        classification = ThreatClass.UNKNOWN if anomalies else ThreatClass.BENIGN
        finding = self._finding(entity_id, anomalies, classification, confidence, now)
        self._record(finding)
        return finding

    # ------------------------------------------------------------------
    # Metric source helpers
    # ------------------------------------------------------------------

    def _require_collector(self) -> MetricCollector:
        if self.collector is None:
            raise ConfigurationError("No metric source configured for this engine")
        return self.collector

    def analyze_app_from_source(self, package_name: str) -> ThreatFinding:
        """Collect app metrics from the metric source, then analyze them."""
        metrics = self._require_collector().app_metrics(package_name)
        return self.analyze_app_behavior(package_name, metrics)

    def analyze_network_from_source(
        self,
        entity_id: str,
        entity_kind: EntityKind = EntityKind.NETWORK_FLOW,
    ) -> ThreatFinding:
        """Collect network metrics from the metric source, then analyze them."""
        metrics = self._require_collector().network_metrics(entity_id)
        return self.analyze_network_behavior(entity_id, metrics, entity_kind)

    # ------------------------------------------------------------------
    # Profiles and statistics
    # ------------------------------------------------------------------

    def get_profile(self, entity_id: str) -> Optional[BehavioralProfile]:
        """Copy of an entity's profile, or None if unknown."""
        return self.store.get(entity_id)

    def reset_profile(self, entity_id: str) -> None:
        """Forget an entity. Unknown entities are ignored."""
        self.store.reset(entity_id)

    def get_statistics(self) -> dict:
        """Get engine statistics."""
        store_stats = self.store.stats()
        with self._stats_lock:
            return {
                "profiles_count": store_stats["profiles_count"],
                "samples_analyzed": self._samples_analyzed,
                "threats_detected": self._threats_detected,
                "reliable_profiles": store_stats["reliable_profiles"],
            }

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def subscribe_threats(self, max_queue_size: Optional[int] = None) -> Subscription[ThreatFinding]:
        """Subscribe to findings with is_threat set."""
        return self.threat_alerts.subscribe(max_queue_size)

    def subscribe_anomalies(self, max_queue_size: Optional[int] = None) -> Subscription[AnomalyAlert]:
        """Subscribe to indicators whose deviation exceeds the alert cutoff."""
        return self.anomaly_alerts.subscribe(max_queue_size)

    def dispose(self) -> None:
        """Close both alert channels. Safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True
        self.threat_alerts.close()
        self.anomaly_alerts.close()
        logger.info("Behavior engine disposed")

    def __enter__(self) -> "BehaviorEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def now(self) -> datetime:
        """Current time from the engine clock."""
        return self._clock()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _profile_or_empty(self, entity_id: str, kind: EntityKind) -> BehavioralProfile:
        """Live profile, or an unstored empty one for unknown entities."""
        profile = self.store.peek(entity_id)
        if profile is not None:
            return profile
        now = self._clock()
        return BehavioralProfile(
            entity_id=entity_id,
            entity_kind=kind,
            first_seen=now,
            last_updated=now,
            config=self.config.profile_config(),
        )

    def _build_finding(
        self,
        entity_id: str,
        profile: BehavioralProfile,
        anomalies: list[AnomalyIndicator],
        classification: ThreatClass,
        now: datetime,
    ) -> ThreatFinding:
        confidence = self.scorer.confidence(profile)
        return self._finding(entity_id, anomalies, classification, confidence, now)

    def _finding(
        self,
        entity_id: str,
        anomalies: list[AnomalyIndicator],
        classification: ThreatClass,
        confidence: float,
        now: datetime,
    ) -> ThreatFinding:
        score = self.scorer.aggregate(anomalies)
        return ThreatFinding(
            entity_id=entity_id,
            is_threat=score >= self.config.threat_threshold,
            anomaly_score=score,
            confidence_score=confidence,
            classification=classification,
            anomalies=anomalies,
            explanation=self.explainer.explain(anomalies, classification),
            recommendations=self.explainer.recommend(classification, score),
            detection_time=now,
        )

    def _record(self, finding: ThreatFinding) -> None:
        """Update counters and publish alerts for a finished analysis."""
        with self._stats_lock:
            self._samples_analyzed += 1
            if finding.is_threat:
                self._threats_detected += 1

        if finding.is_threat:
            logger.info(
                f"Threat detected for {finding.entity_id}: "
                f"{finding.classification.value} (score={finding.anomaly_score:.2f})"
            )
            self.threat_alerts.publish(finding)

        for anomaly in finding.anomalies:
            if anomaly.deviation_score > self.config.anomaly_alert_deviation:
                self.anomaly_alerts.publish(AnomalyAlert(
                    entity_id=finding.entity_id,
                    indicator=anomaly,
                    detection_time=finding.detection_time,
                ))


def _check_entity_id(entity_id: str) -> None:
    if not isinstance(entity_id, str) or not entity_id.strip():
        raise ValidationError(
            "Entity id must be a non-empty string",
            details={"entity_id": entity_id},
        )
