"""Baseline Learning Task - cancellable background polling loop."""

import logging
import threading
from typing import Callable, Optional

from behavior_guard.common.constants import BaselineConstants
from behavior_guard.data.sources.collector import MetricCollector
from behavior_guard.models.behavior.profile import BehaviorSample, utc_now

logger = logging.getLogger(__name__)


class BaselineLearningTask:
    """Poll device metrics at a fixed interval, then hand them off.

    Runs on a daemon thread. cancel() stops the loop between polls; the
    samples gathered so far are still passed to `on_complete`, so a
    cancelled run leaves a partially learned baseline rather than none.
    """

    def __init__(
        self,
        collector: MetricCollector,
        on_complete: Callable[[list[BehaviorSample]], None],
        interval_seconds: float = BaselineConstants.SAMPLING_INTERVAL_SECONDS,
        duration_minutes: float = BaselineConstants.LEARNING_DURATION_MINUTES,
    ):
        """Initialize learning task.

        Args:
            collector: Failure-tolerant metric reader
            on_complete: Receives every collected sample once the loop ends
            interval_seconds: Delay between polls
            duration_minutes: Total learning window
        """
        self.collector = collector
        self.on_complete = on_complete
        self.interval_seconds = interval_seconds
        self.duration_minutes = duration_minutes

        self._samples: list[BehaviorSample] = []
        self._samples_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._done_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._cancelled = False

    @property
    def max_polls(self) -> int:
        """Number of polls that fit in the learning window."""
        return max(1, int(round(self.duration_minutes * 60 / self.interval_seconds)))

    def start(self) -> None:
        """Start polling in the background. Starting twice is a no-op."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run,
            name="BaselineLearner",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            f"Baseline learning started: {self.max_polls} polls "
            f"every {self.interval_seconds}s"
        )

    def _run(self) -> None:
        try:
            for poll in range(self.max_polls):
                if self._stop_event.is_set():
                    break
                metrics = self.collector.device_metrics()
                sample = BehaviorSample(metrics.to_metrics_map(), timestamp=utc_now())
                with self._samples_lock:
                    self._samples.append(sample)

                if poll + 1 < self.max_polls and self._stop_event.wait(self.interval_seconds):
                    break

            samples = self.samples
            self.on_complete(samples)
            logger.info(f"Baseline learning finished with {len(samples)} samples")
        except Exception as e:
            logger.exception(f"Baseline learning failed: {e}")
        finally:
            self._done_event.set()

    def cancel(self) -> None:
        """Stop polling after the current poll."""
        if not self._stop_event.is_set():
            self._cancelled = True
            self._stop_event.set()
            logger.info("Baseline learning cancelled")

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the task to finish.

        Returns:
            True if the task finished within `timeout`
        """
        if self._thread is None:
            return self._done_event.is_set()
        return self._done_event.wait(timeout)

    @property
    def samples(self) -> list[BehaviorSample]:
        with self._samples_lock:
            return list(self._samples)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and not self._done_event.is_set()

    @property
    def is_done(self) -> bool:
        return self._done_event.is_set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def progress(self) -> float:
        """Fraction of polls completed."""
        with self._samples_lock:
            return min(1.0, len(self._samples) / self.max_polls)
