"""Shared pytest fixtures for Behavior Guard."""

import pytest

from behavior_guard.common.config.settings import reset_config
from behavior_guard.data.sources.collector import MetricCollector
from behavior_guard.orchestration.engine import BehaviorEngine
from tests.fixtures.metric_sources import FakeMetricSource, FixedClock


@pytest.fixture
def clock():
    """Fixed clock at 2026-01-25 12:00 UTC."""
    return FixedClock()


@pytest.fixture
def fake_source():
    """Fake metric source with nominal readings."""
    return FakeMetricSource()


@pytest.fixture
def collector(fake_source):
    """Failure-tolerant collector over the fake source."""
    return MetricCollector(fake_source)


@pytest.fixture
def engine(clock, fake_source):
    """Engine on the fixed clock and fake source, disposed after the test."""
    engine = BehaviorEngine(source=fake_source, clock=clock)
    yield engine
    engine.dispose()


@pytest.fixture(autouse=True)
def clean_config():
    """Reset the config singleton around every test."""
    reset_config()
    yield
    reset_config()
