"""Tests for the command-line entry point."""

import json
import logging
import os
from unittest.mock import patch

import pytest

from main import PACKAGE_LOGGER, main


@pytest.fixture
def restore_loggers():
    """Put the loggers main configures back as they were."""
    loggers = [logging.getLogger(PACKAGE_LOGGER), logging.getLogger("main")]
    saved = [(lg, lg.level, list(lg.handlers)) for lg in loggers]
    yield
    for lg, level, handlers in saved:
        lg.setLevel(level)
        lg.handlers[:] = handlers


def _findings(out: str) -> list[dict]:
    decoder = json.JSONDecoder()
    findings, idx = [], 0
    out = out.strip()
    while idx < len(out):
        finding, idx = decoder.raw_decode(out, idx)
        findings.append(finding)
        idx = len(out) - len(out[idx:].lstrip())
    return findings


def test_prints_one_finding_per_url(capsys, restore_loggers):
    assert main(["http://192.168.1.1/login", "https://www.example.com/"]) == 0

    findings = _findings(capsys.readouterr().out)

    assert [f["entity_id"] for f in findings] == [
        "http://192.168.1.1/login",
        "https://www.example.com/",
    ]
    assert findings[0]["classification"] == "benign"
    assert findings[0]["anomaly_score"] == 0.4


def test_no_urls(capsys, restore_loggers):
    assert main([]) == 0
    assert capsys.readouterr().out == ""


def test_log_level_comes_from_config(restore_loggers):
    with patch.dict(os.environ, {"BGUARD_LOG_LEVEL": "WARNING"}):
        assert main([]) == 0

    assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING
    assert logging.getLogger("main").level == logging.WARNING
