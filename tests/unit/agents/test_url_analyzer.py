"""Unit tests for the URL Analyzer."""

import pytest

from behavior_guard.agents.url.agent import UrlAnalyzer, parse_host
from behavior_guard.common.config.rules import DetectionRules, UrlWeights
from behavior_guard.core.types import ThreatClass
from tests.fixtures.metric_sources import FIXED_NOW


@pytest.fixture
def analyzer():
    return UrlAnalyzer()


class TestParseHost:
    """Tests for URL parsing policy."""

    def test_scheme_is_optional(self):
        assert parse_host("Example.com/Login") == ("example.com", "/login")

    @pytest.mark.parametrize("url", ["", "not a url", "http://", "http://[::1", "ftp://\x00host"])
    def test_unusable_urls(self, url):
        assert parse_host(url) is None


class TestUrlScenarios:
    """End-to-end URL scoring scenarios."""

    def test_ip_host_with_login_path(self, analyzer):
        finding = analyzer.analyze("http://192.168.1.1/login", now=FIXED_NOW)

        assert finding.anomaly_score == pytest.approx(0.4)
        assert finding.classification == ThreatClass.BENIGN
        assert finding.is_threat is False
        assert finding.confidence_score == 0.85
        assert [a.metric for a in finding.anomalies] == ["ip_as_domain", "suspicious_path"]
        assert finding.recommendations == []
        assert finding.entity_id == "http://192.168.1.1/login"
        assert finding.detection_time == FIXED_NOW

    def test_phishing_line_is_below_threat_line(self, analyzer):
        url = "http://secure-login-verify.xyz/account/confirm?a=%20%20%20%20%20%20"

        finding = analyzer.analyze(url)

        assert finding.anomaly_score == pytest.approx(0.5)
        assert finding.classification == ThreatClass.PHISHING
        assert finding.is_threat is False
        assert [a.metric for a in finding.anomalies] == [
            "suspicious_tld", "suspicious_path", "url_encoding",
        ]
        assert finding.anomalies[1].description == 'URL path contains "account"'
        assert finding.recommendations[0] == "Do not enter any credentials"

    def test_malformed_url(self, analyzer):
        finding = analyzer.analyze("not a url")

        assert finding.is_threat is True
        assert finding.anomaly_score == 1.0
        assert finding.confidence_score == 0.9
        assert finding.classification == ThreatClass.MALICIOUS_PAYLOAD
        assert finding.explanation == "URL is malformed and cannot be parsed"
        assert finding.recommendations == ["Block this URL", "Do not click"]
        (indicator,) = finding.anomalies
        assert indicator.metric == "url_validity"
        assert indicator.deviation_score == 10.0

    def test_homoglyph_phishing_is_a_threat(self, analyzer):
        url = "http://pаypal.com.secure.account.verify.tk/signin"

        finding = analyzer.analyze(url)

        assert [a.metric for a in finding.anomalies] == [
            "subdomain_count", "suspicious_tld", "suspicious_path", "homoglyph_attack",
        ]
        assert finding.anomaly_score == 1.0
        assert finding.is_threat is True
        assert finding.classification == ThreatClass.PHISHING

    def test_clean_url(self, analyzer):
        finding = analyzer.analyze("https://www.example.com/docs")

        assert finding.anomalies == []
        assert finding.anomaly_score == 0.0
        assert finding.classification == ThreatClass.BENIGN
        assert finding.explanation == "No significant anomalies detected. Behavior appears normal."


class TestUrlRules:
    """Tests for individual heuristics."""

    def test_long_host(self, analyzer):
        finding = analyzer.analyze("http://" + "a" * 60 + ".com/")
        (indicator,) = finding.anomalies
        assert indicator.metric == "domain_length"
        assert indicator.observed_value == 64.0
        assert finding.anomaly_score == pytest.approx(0.2)

    def test_subdomain_count(self, analyzer):
        finding = analyzer.analyze("http://a.b.c.d.example.com/")
        (indicator,) = finding.anomalies
        assert indicator.metric == "subdomain_count"
        assert indicator.observed_value == 4.0

    def test_three_subdomains_is_fine(self, analyzer):
        assert analyzer.analyze("http://a.b.c.example.com/").anomalies == []

    def test_only_first_path_keyword_counts(self, analyzer):
        finding = analyzer.analyze("http://example.com/login/verify/secure/update")
        assert [a.metric for a in finding.anomalies] == ["suspicious_path"]
        assert finding.anomaly_score == pytest.approx(0.1)

    def test_five_encoded_triplets_is_fine(self, analyzer):
        assert analyzer.analyze("http://example.com/?q=%20%20%20%20%20").anomalies == []

    def test_tld_must_be_last_label(self, analyzer):
        assert analyzer.analyze("http://xyz.example.com/").anomalies == []

    def test_weights_come_from_rules(self):
        rules = DetectionRules(url_weights=UrlWeights(ip_host=0.8))
        finding = UrlAnalyzer(rules=rules).analyze("http://10.0.0.1/")
        assert finding.anomaly_score == pytest.approx(0.8)
        assert finding.is_threat is True
