"""Batch baseline learning.

For entities that arrive with a history (a week of usage stats, an hour
of device polling) the baseline is computed in one pass instead of being
accumulated sample by sample.
"""

from collections import defaultdict
from typing import Mapping, Optional, Sequence

import numpy as np

from behavior_guard.core.types import BootstrapMode
from behavior_guard.data.schemas.finding import AnomalyIndicator
from behavior_guard.models.behavior.config import DetectionConfig
from behavior_guard.models.behavior.profile import BaselineMetrics, BehaviorSample
from behavior_guard.models.behavior.scorer import describe_deviation


class BaselineLearner:
    """Compute and apply batch-learned baselines."""

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    def compute(self, values: Sequence[float]) -> Optional[BaselineMetrics]:
        """Baseline for one metric.

        Returns:
            BaselineMetrics, or None when fewer than
            `min_bootstrap_samples` values are available.
        """
        if len(values) < self.config.min_bootstrap_samples:
            return None

        arr = np.asarray(values, dtype=np.float64)
        std_dev = float(arr.std())
        if std_dev < self.config.epsilon:
            std_dev = 0.0

        return BaselineMetrics(
            mean=float(arr.mean()),
            std_dev=std_dev,
            min=float(arr.min()),
            max=float(arr.max()),
            sample_count=int(arr.size),
            sigma_multiplier=self.config.sigma_multiplier,
        )

    def learn(self, samples: Sequence[BehaviorSample]) -> dict[str, BaselineMetrics]:
        """Baselines for every metric with enough history.

        Metrics below the minimum sample count are left out and so
        never produce bootstrap anomalies.
        """
        values: dict[str, list[float]] = defaultdict(list)
        for sample in samples:
            for metric, value in sample.metrics.items():
                values[metric].append(value)

        baselines: dict[str, BaselineMetrics] = {}
        for metric, metric_values in values.items():
            baseline = self.compute(metric_values)
            if baseline is not None:
                baselines[metric] = baseline
        return baselines

    def evaluate(
        self,
        baselines: Mapping[str, BaselineMetrics],
        metrics: Mapping[str, float],
        mode: Optional[BootstrapMode] = None,
    ) -> list[AnomalyIndicator]:
        """Compare current values to batch baselines.

        Args:
            baselines: Learned baselines by metric
            metrics: Current values by metric
            mode: Band policy; the configured default when None

        Returns:
            Indicators for metrics outside the normal band. Metrics with
            zero spread are skipped.
        """
        mode = mode or self.config.bootstrap_mode
        anomalies: list[AnomalyIndicator] = []

        for metric, baseline in baselines.items():
            if metric not in metrics or baseline.std_dev == 0.0:
                continue
            observed = float(metrics[metric])
            if baseline.is_anomaly(observed, mode):
                anomalies.append(AnomalyIndicator(
                    metric=metric,
                    observed_value=observed,
                    expected_value=baseline.mean,
                    deviation_score=baseline.deviation(observed),
                    description=describe_deviation(metric, observed, baseline.mean),
                ))

        return anomalies
