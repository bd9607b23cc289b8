"""Device Anomaly Agent - whole-device health against a learned baseline.

Learns the device's normal battery, CPU and traffic levels over a
polling window, then flags readings above the learned band.
"""

import logging
import threading
from typing import Optional

from behavior_guard.common.config.settings import Config, get_config
from behavior_guard.core.types import BootstrapMode, EntityKind
from behavior_guard.data.schemas.finding import ThreatFinding
from behavior_guard.data.sources.collector import MetricCollector
from behavior_guard.models.behavior.profile import BehaviorSample
from behavior_guard.orchestration.engine import BehaviorEngine
from behavior_guard.orchestration.learning import BaselineLearningTask

logger = logging.getLogger(__name__)

DEVICE_ENTITY_ID = "device"


class DeviceAnomalyAgent:
    """Device metric detector on top of the behavior engine.

    Only increases count as anomalous (one-sided band): a device that
    suddenly uses less battery is not a threat.
    """

    def __init__(
        self,
        engine: BehaviorEngine,
        collector: MetricCollector,
        entity_id: str = DEVICE_ENTITY_ID,
        interval_seconds: Optional[float] = None,
        duration_minutes: Optional[float] = None,
    ):
        self.engine = engine
        self.collector = collector
        self.entity_id = entity_id
        self.interval_seconds = interval_seconds
        self.duration_minutes = duration_minutes

        self._task: Optional[BaselineLearningTask] = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        engine: BehaviorEngine,
        collector: MetricCollector,
        config: Optional[Config] = None,
    ) -> "DeviceAnomalyAgent":
        """Build an agent that learns on the configured schedule."""
        config = config or get_config()
        return cls(
            engine,
            collector,
            interval_seconds=config.sampling_interval_seconds,
            duration_minutes=config.learning_duration_minutes,
        )

    def learn_baseline(
        self,
        interval_seconds: Optional[float] = None,
        duration_minutes: Optional[float] = None,
    ) -> BaselineLearningTask:
        """Start learning in the background.

        A run already in progress is returned as is.
        """
        with self._lock:
            if self._task is not None and self._task.is_running:
                return self._task

            kwargs = {}
            interval = interval_seconds or self.interval_seconds
            duration = duration_minutes or self.duration_minutes
            if interval is not None:
                kwargs["interval_seconds"] = interval
            if duration is not None:
                kwargs["duration_minutes"] = duration

            self._task = BaselineLearningTask(self.collector, self._install, **kwargs)
            self._task.start()
            return self._task

    def stop_learning(self) -> None:
        with self._lock:
            task = self._task
        if task is not None:
            task.cancel()

    def _install(self, samples: list[BehaviorSample]) -> None:
        self.engine.bootstrap_profile(self.entity_id, EntityKind.DEVICE, samples)

    @property
    def is_learning(self) -> bool:
        with self._lock:
            return self._task is not None and self._task.is_running

    @property
    def has_baseline(self) -> bool:
        profile = self.engine.get_profile(self.entity_id)
        return profile is not None and profile.has_bootstrap_baseline

    def detect_anomalies(self) -> ThreatFinding:
        """Take one reading and compare it to the learned baseline.

        Returns:
            ThreatFinding; empty and Benign while no baseline exists
        """
        if not self.has_baseline:
            logger.debug("Device baseline not established yet")
        metrics = self.collector.device_metrics()
        return self.engine.check_baseline(
            self.entity_id,
            metrics.to_metrics_map(),
            mode=BootstrapMode.ONE_SIDED,
        )
