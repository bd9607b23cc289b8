"""URL Analyzer - baseline-free heuristics over a single URL string.

Each rule that fires adds a fixed weight to the score and one
indicator to the finding. Nothing here learns or keeps state.
"""

import logging
import re
from datetime import datetime
from typing import Optional
from urllib.parse import urlsplit

from behavior_guard.agents.explanation.agent import ExplanationAgent
from behavior_guard.agents.explanation.templates import MALFORMED_URL_EXPLANATION
from behavior_guard.common.config.rules import DetectionRules
from behavior_guard.core.types import ThreatClass
from behavior_guard.data.schemas.finding import AnomalyIndicator, ThreatFinding
from behavior_guard.models.behavior.config import DetectionConfig
from behavior_guard.models.behavior.profile import utc_now

logger = logging.getLogger(__name__)

IPV4_HOST = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")
ENCODED_TRIPLET = re.compile(r"%[0-9a-fA-F]{2}")


def parse_host(url: str) -> Optional[tuple[str, str]]:
    """Split a URL into (host, lowercased path).

    A URL without a scheme is read as http. Returns None for anything
    that has no usable host.
    """
    if not url or any(c.isspace() or ord(c) < 32 for c in url):
        return None

    candidate = url if "://" in url else f"http://{url}"
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
    except ValueError:
        return None

    if not host:
        return None
    return host, parts.path.lower()


class UrlAnalyzer:
    """Heuristic URL classifier.

    Rules (weights from DetectionRules.url_weights):
    - bare IPv4 host
    - very long host
    - many subdomains
    - suspicious TLD
    - phishing keyword in the path (first match only)
    - heavy percent-encoding
    - non-ASCII (lookalike) characters in the host
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        rules: Optional[DetectionRules] = None,
        explainer: Optional[ExplanationAgent] = None,
    ):
        self.config = config or DetectionConfig()
        self.rules = rules or DetectionRules()
        self.explainer = explainer or ExplanationAgent(self.config)

    def analyze(self, url: str, now: Optional[datetime] = None) -> ThreatFinding:
        """Score one URL.

        Args:
            url: Raw URL string
            now: Detection time; current UTC time when None

        Returns:
            ThreatFinding with entity_id set to the URL
        """
        detection_time = now or utc_now()

        parsed = parse_host(url)
        if parsed is None:
            logger.info(f"Malformed URL rejected: {url!r}")
            return self._malformed(url, detection_time)

        host, path = parsed
        anomalies = self.indicators(url, host, path)

        weights = self.rules.url_weights
        weight_by_metric = {
            "ip_as_domain": weights.ip_host,
            "domain_length": weights.long_host,
            "subdomain_count": weights.many_subdomains,
            "suspicious_tld": weights.suspicious_tld,
            "suspicious_path": weights.path_keyword,
            "url_encoding": weights.excessive_encoding,
            "homoglyph_attack": weights.homoglyph,
        }
        score = sum(weight_by_metric[a.metric] for a in anomalies)
        score = round(max(0.0, min(1.0, score)), 10)

        if score >= self.config.phishing_threshold:
            classification = ThreatClass.PHISHING
        else:
            classification = ThreatClass.BENIGN

        return ThreatFinding(
            entity_id=url,
            is_threat=score >= self.config.threat_threshold,
            anomaly_score=score,
            confidence_score=self.config.url_confidence,
            classification=classification,
            anomalies=anomalies,
            explanation=self.explainer.explain(anomalies, classification),
            recommendations=self.explainer.recommend(classification, score),
            detection_time=detection_time,
        )

    def indicators(self, url: str, host: str, path: str) -> list[AnomalyIndicator]:
        """Indicators for every URL rule that fires, in rule order."""
        limits = self.rules.url_limits
        anomalies: list[AnomalyIndicator] = []

        if IPV4_HOST.match(host):
            anomalies.append(_flag(
                "ip_as_domain", 3.0, "URL uses IP address instead of domain name",
            ))

        if len(host) > limits.max_host_length:
            anomalies.append(AnomalyIndicator(
                metric="domain_length",
                observed_value=float(len(host)),
                expected_value=20.0,
                deviation_score=2.5,
                description="Unusually long domain name",
            ))

        labels = host.split(".")
        subdomains = len(labels) - 2
        if subdomains > limits.max_subdomains:
            anomalies.append(AnomalyIndicator(
                metric="subdomain_count",
                observed_value=float(subdomains),
                expected_value=1.0,
                deviation_score=3.0,
                description="Excessive number of subdomains",
            ))

        if labels[-1] in self.rules.suspicious_tlds:
            anomalies.append(_flag(
                "suspicious_tld", 2.5, "Domain uses suspicious top-level domain",
            ))

        for keyword in self.rules.path_keywords:
            if keyword in path:
                anomalies.append(_flag(
                    "suspicious_path", 1.5, f'URL path contains "{keyword}"',
                ))
                break

        if len(ENCODED_TRIPLET.findall(url)) > limits.max_encoded_triplets:
            anomalies.append(_flag("url_encoding", 2.0, "Excessive URL encoding"))

        if not host.isascii():
            anomalies.append(_flag(
                "homoglyph_attack", 4.0, "Domain contains lookalike characters",
            ))

        return anomalies

    def _malformed(self, url: str, detection_time: datetime) -> ThreatFinding:
        classification = ThreatClass.MALICIOUS_PAYLOAD
        return ThreatFinding(
            entity_id=url,
            is_threat=True,
            anomaly_score=1.0,
            confidence_score=self.config.malformed_url_confidence,
            classification=classification,
            anomalies=[AnomalyIndicator(
                metric="url_validity",
                observed_value=0.0,
                expected_value=1.0,
                deviation_score=10.0,
                description="Invalid URL format",
            )],
            explanation=MALFORMED_URL_EXPLANATION,
            recommendations=self.explainer.recommend(classification, 1.0),
            detection_time=detection_time,
        )


def _flag(metric: str, deviation: float, description: str) -> AnomalyIndicator:
    """Presence indicator: observed 1, expected 0."""
    return AnomalyIndicator(
        metric=metric,
        observed_value=1.0,
        expected_value=0.0,
        deviation_score=deviation,
        description=description,
    )
