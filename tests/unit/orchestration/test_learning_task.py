"""Unit tests for the background baseline learning task."""

import logging

import pytest

from behavior_guard.orchestration.learning import BaselineLearningTask


class Recorder:
    """on_complete callback that remembers what it was given."""

    def __init__(self):
        self.calls = []

    def __call__(self, samples):
        self.calls.append(samples)


class TestMaxPolls:
    @pytest.mark.parametrize("interval,duration,expected", [
        (30.0, 60, 120),
        (30.0, 0.25, 1),
        (60.0, 0.1, 1),
        (0.001, 0.0005, 30),
    ])
    def test_polls_fit_window(self, collector, interval, duration, expected):
        task = BaselineLearningTask(collector, Recorder(), interval, duration)
        assert task.max_polls == expected


class TestRun:
    def test_collects_and_hands_off(self, collector):
        recorder = Recorder()
        task = BaselineLearningTask(collector, recorder, 0.001, 0.0001)

        task.start()

        assert task.join(timeout=5.0)
        assert task.is_done
        assert not task.is_running
        assert task.progress == 1.0
        (samples,) = recorder.calls
        assert len(samples) == 6
        assert samples[0].metrics["battery_drain"] == 0.0

    def test_start_twice_is_noop(self, collector):
        recorder = Recorder()
        task = BaselineLearningTask(collector, recorder, 0.001, 0.0001)

        task.start()
        task.start()

        assert task.join(timeout=5.0)
        assert len(recorder.calls) == 1

    def test_join_before_start(self, collector):
        task = BaselineLearningTask(collector, Recorder())
        assert task.join(timeout=0.01) is False
        assert not task.is_running

    def test_cancel_still_hands_off_partial_samples(self, collector):
        recorder = Recorder()
        task = BaselineLearningTask(collector, recorder, 10.0, 60)

        task.start()
        task.cancel()

        assert task.join(timeout=5.0)
        assert task.cancelled
        assert len(recorder.calls) == 1
        assert len(recorder.calls[0]) <= 1
        assert task.progress < 1.0

    def test_callback_error_is_logged(self, collector, caplog):
        def explode(samples):
            raise RuntimeError("store unavailable")

        task = BaselineLearningTask(collector, explode, 0.001, 0.00005)

        with caplog.at_level(logging.ERROR, logger="behavior_guard.orchestration.learning"):
            task.start()
            assert task.join(timeout=5.0)

        assert "store unavailable" in caplog.text
        (record,) = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert record.exc_info is not None
        assert record.exc_info[0] is RuntimeError
        assert task.is_done
