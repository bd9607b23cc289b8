"""Behavioral profile data structures.

Defines the rolling behavioral profile maintained per entity, the
immutable samples it is built from, and batch-learned baselines.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Mapping, Optional
import json
from pathlib import Path

from behavior_guard.common.constants import ProfileConstants
from behavior_guard.core.types import BootstrapMode, EntityKind


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ProfileConfig:
    """Configuration for behavioral profiling.

    Attributes:
        max_samples: Capacity of the sample ring buffer
        min_reliable_samples: Samples needed before the profile is scored
        ema_retain_weight: Weight kept by the running average on each update
    """
    max_samples: int = ProfileConstants.MAX_SAMPLES
    min_reliable_samples: int = ProfileConstants.MIN_RELIABLE_SAMPLES
    ema_retain_weight: float = ProfileConstants.EMA_RETAIN_WEIGHT


@dataclass(frozen=True)
class BehaviorSample:
    """One immutable observation of an entity's metrics."""
    metrics: Mapping[str, float]
    timestamp: datetime = field(default_factory=utc_now)
    context: Optional[str] = None

    def __post_init__(self):
        # Own a private copy so later caller mutation cannot leak in
        object.__setattr__(
            self, "metrics", {k: float(v) for k, v in self.metrics.items()}
        )


@dataclass(frozen=True)
class BaselineMetrics:
    """Batch-learned baseline for one metric.

    Attributes:
        mean: Arithmetic mean of the learning window
        std_dev: Population standard deviation
        min: Smallest value seen
        max: Largest value seen
        sample_count: Number of values learned from
        sigma_multiplier: Width of the normal band in standard deviations
    """
    mean: float
    std_dev: float
    min: float
    max: float
    sample_count: int
    sigma_multiplier: float = 2.0

    @property
    def lower_bound(self) -> float:
        return self.mean - self.sigma_multiplier * self.std_dev

    @property
    def upper_bound(self) -> float:
        return self.mean + self.sigma_multiplier * self.std_dev

    @property
    def threshold(self) -> float:
        """One-sided alert threshold."""
        return self.upper_bound

    def is_anomaly(self, value: float, mode: BootstrapMode = BootstrapMode.TWO_SIDED) -> bool:
        if self.std_dev == 0:
            return False
        if mode == BootstrapMode.ONE_SIDED:
            return value > self.upper_bound
        return value < self.lower_bound or value > self.upper_bound

    def deviation(self, value: float) -> float:
        """Distance from the mean in standard deviations."""
        if self.std_dev == 0:
            return 0.0
        return abs(value - self.mean) / self.std_dev


@dataclass
class BehavioralProfile:
    """Rolling behavioral profile for one entity.

    Keeps an exponential moving average per metric and a bounded
    window of recent samples used to estimate spread.

    Attributes:
        entity_id: Entity this profile belongs to
        entity_kind: What sort of entity it is
        normal_behavior: EMA estimate per metric
        samples: Most recent samples, oldest first
        sample_count: Total samples ever added (never decremented)
        first_seen: When the profile was created
        last_updated: When the last sample was added
        bootstrap_baselines: Batch-learned baselines, if any
    """
    entity_id: str
    entity_kind: EntityKind
    normal_behavior: dict[str, float] = field(default_factory=dict)
    samples: list[BehaviorSample] = field(default_factory=list)
    sample_count: int = 0
    first_seen: datetime = field(default_factory=utc_now)
    last_updated: datetime = field(default_factory=utc_now)
    bootstrap_baselines: dict[str, BaselineMetrics] = field(default_factory=dict)
    config: ProfileConfig = field(default_factory=ProfileConfig)

    @property
    def is_reliable(self) -> bool:
        """Check if profile has enough data for reliable analysis."""
        return self.sample_count >= self.config.min_reliable_samples

    @property
    def has_bootstrap_baseline(self) -> bool:
        return bool(self.bootstrap_baselines)

    def add_sample(self, sample: BehaviorSample, now: Optional[datetime] = None) -> None:
        """Update profile with a new sample.

        The first observation of a metric seeds its average with its
        own value, so it starts with zero deviation.
        """
        self.samples.append(sample)
        if len(self.samples) > self.config.max_samples:
            self.samples.pop(0)

        self.sample_count += 1
        self.last_updated = now or utc_now()

        retain = self.config.ema_retain_weight
        learn = round(1.0 - retain, 12)
        for metric, value in sample.metrics.items():
            current = self.normal_behavior.get(metric, value)
            self.normal_behavior[metric] = current * retain + value * learn

    def values_for(self, metric: str) -> list[float]:
        """Stored values of one metric, oldest first."""
        return [s.metrics[metric] for s in self.samples if metric in s.metrics]

    def copy(self) -> "BehavioralProfile":
        """Independent copy safe to hand to callers."""
        return BehavioralProfile(
            entity_id=self.entity_id,
            entity_kind=self.entity_kind,
            normal_behavior=dict(self.normal_behavior),
            samples=list(self.samples),
            sample_count=self.sample_count,
            first_seen=self.first_seen,
            last_updated=self.last_updated,
            bootstrap_baselines=dict(self.bootstrap_baselines),
            config=ProfileConfig(
                max_samples=self.config.max_samples,
                min_reliable_samples=self.config.min_reliable_samples,
                ema_retain_weight=self.config.ema_retain_weight,
            ),
        )

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "entity_kind": self.entity_kind.value,
            "normal_behavior": dict(self.normal_behavior),
            "samples": [
                {
                    "timestamp": s.timestamp.isoformat(),
                    "metrics": dict(s.metrics),
                    "context": s.context,
                }
                for s in self.samples
            ],
            "sample_count": self.sample_count,
            "first_seen": self.first_seen.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "bootstrap_baselines": {
                metric: {
                    "mean": b.mean,
                    "std_dev": b.std_dev,
                    "min": b.min,
                    "max": b.max,
                    "sample_count": b.sample_count,
                    "sigma_multiplier": b.sigma_multiplier,
                }
                for metric, b in self.bootstrap_baselines.items()
            },
            "config": {
                "max_samples": self.config.max_samples,
                "min_reliable_samples": self.config.min_reliable_samples,
                "ema_retain_weight": self.config.ema_retain_weight,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BehavioralProfile":
        return cls(
            entity_id=data["entity_id"],
            entity_kind=EntityKind(data["entity_kind"]),
            normal_behavior=dict(data.get("normal_behavior", {})),
            samples=[
                BehaviorSample(
                    metrics=s["metrics"],
                    timestamp=datetime.fromisoformat(s["timestamp"]),
                    context=s.get("context"),
                )
                for s in data.get("samples", [])
            ],
            sample_count=data.get("sample_count", 0),
            first_seen=datetime.fromisoformat(data["first_seen"]),
            last_updated=datetime.fromisoformat(data["last_updated"]),
            bootstrap_baselines={
                metric: BaselineMetrics(**b)
                for metric, b in data.get("bootstrap_baselines", {}).items()
            },
            config=ProfileConfig(**data.get("config", {})),
        )

    def save(self, path: Path) -> None:
        """Save profile snapshot to disk.

        Args:
            path: Path to save file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "BehavioralProfile":
        """Load profile snapshot from disk.

        Args:
            path: Path to profile file

        Returns:
            Loaded BehavioralProfile
        """
        with open(path, "r") as f:
            return cls.from_dict(json.load(f))
