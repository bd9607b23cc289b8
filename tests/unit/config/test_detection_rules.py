"""Tests for YAML detection rules."""

import pytest

from behavior_guard.common.config.rules import DetectionRules, load_rules
from behavior_guard.common.exceptions import ConfigurationError


class TestLoadRules:
    def test_defaults_without_file(self):
        rules = load_rules(None)
        assert rules == DetectionRules()
        assert rules.path_keywords[0] == "login"
        assert rules.url_weights.homoglyph == 0.4

    def test_partial_override_keeps_defaults(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(
            "version: '2.0.0'\n"
            "suspicious_ports: [4444]\n"
            "url_weights:\n"
            "  ip_host: 0.5\n"
        )

        rules = load_rules(path)

        assert rules.version == "2.0.0"
        assert rules.suspicious_port_set == frozenset({4444})
        assert rules.url_weights.ip_host == 0.5
        assert rules.url_weights.long_host == 0.2
        assert "tk" in rules.suspicious_tlds

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_rules(path) == DetectionRules()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_rules(tmp_path / "nope.yaml")
        assert exc_info.value.code == "CONFIG_ERROR"

    def test_bad_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("suspicious_tlds: [xyz\n")
        with pytest.raises(ConfigurationError, match="not valid YAML"):
            load_rules(path)

    def test_invalid_weight(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("url_weights:\n  homoglyph: 2.5\n")
        with pytest.raises(ConfigurationError, match="failed validation"):
            load_rules(path)

    def test_shipped_rules_match_defaults(self):
        from behavior_guard.common.config.settings import Config

        shipped = load_rules(Config().config_dir / "detection_rules.yaml")
        defaults = DetectionRules()

        assert shipped.suspicious_tlds == defaults.suspicious_tlds
        assert shipped.path_keywords == defaults.path_keywords
        assert shipped.suspicious_port_set == defaults.suspicious_port_set
        assert shipped.url_weights == defaults.url_weights
