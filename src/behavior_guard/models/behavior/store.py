"""Behavioral profile store.

Owns every BehavioralProfile. Work on one entity is serialized through
that entity's lock; different entities never contend beyond the brief
map lock used to look locks up. A lock lives only while some caller holds
or waits on it.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, Mapping, Optional, Sequence
from urllib.parse import quote

from behavior_guard.core.types import EntityKind
from behavior_guard.models.behavior.profile import (
    BaselineMetrics,
    BehavioralProfile,
    BehaviorSample,
    ProfileConfig,
    utc_now,
)

logger = logging.getLogger(__name__)


class _EntityLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.RLock()
        self.users = 0


class ProfileStore:
    """In-memory map of entity id -> BehavioralProfile."""

    def __init__(
        self,
        config: Optional[ProfileConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config or ProfileConfig()
        self._clock = clock
        self._profiles: dict[str, BehavioralProfile] = {}
        self._locks: dict[str, _EntityLock] = {}
        self._map_lock = threading.Lock()

    def _acquire_entry(self, entity_id: str) -> _EntityLock:
        with self._map_lock:
            entry = self._locks.get(entity_id)
            if entry is None:
                entry = _EntityLock()
                self._locks[entity_id] = entry
            entry.users += 1
            return entry

    def _release_entry(self, entity_id: str, entry: _EntityLock) -> None:
        with self._map_lock:
            entry.users -= 1
            if entry.users == 0 and self._locks.get(entity_id) is entry:
                del self._locks[entity_id]

    @contextmanager
    def locked(self, entity_id: str) -> Iterator[None]:
        """Hold the entity's lock for a read-score-update cycle."""
        entry = self._acquire_entry(entity_id)
        try:
            with entry.lock:
                yield
        finally:
            self._release_entry(entity_id, entry)

    def get_or_create(self, entity_id: str, kind: EntityKind) -> BehavioralProfile:
        """Live profile for the entity, created empty if absent.

        Callers must hold `locked(entity_id)` while using the result.
        """
        with self._map_lock:
            profile = self._profiles.get(entity_id)
            if profile is None:
                now = self._clock()
                profile = BehavioralProfile(
                    entity_id=entity_id,
                    entity_kind=kind,
                    first_seen=now,
                    last_updated=now,
                    config=ProfileConfig(
                        max_samples=self.config.max_samples,
                        min_reliable_samples=self.config.min_reliable_samples,
                        ema_retain_weight=self.config.ema_retain_weight,
                    ),
                )
                self._profiles[entity_id] = profile
                logger.debug(f"Created {kind.value} profile for {entity_id}")
            return profile

    def peek(self, entity_id: str) -> Optional[BehavioralProfile]:
        """Live profile without creating one. Callers must hold the lock."""
        with self._map_lock:
            return self._profiles.get(entity_id)

    def get(self, entity_id: str) -> Optional[BehavioralProfile]:
        """Copy of the entity's profile, or None."""
        with self.locked(entity_id):
            profile = self.peek(entity_id)
            return profile.copy() if profile is not None else None

    def add_sample(self, profile: BehavioralProfile, sample: BehaviorSample) -> None:
        profile.add_sample(sample, now=self._clock())

    def bootstrap(
        self,
        entity_id: str,
        kind: EntityKind,
        history: Sequence[BehaviorSample],
        baselines: Mapping[str, BaselineMetrics],
    ) -> BehavioralProfile:
        """Install batch-learned baselines on an entity.

        With at least one valid baseline, the EMA is seeded with the
        baseline means and the window with the newest history, so the
        incremental scorer can use the entity straight away.
        """
        with self.locked(entity_id):
            profile = self.get_or_create(entity_id, kind)
            profile.bootstrap_baselines = dict(baselines)
            if not baselines:
                return profile

            for metric, baseline in baselines.items():
                profile.normal_behavior[metric] = baseline.mean

            window = list(history)[-profile.config.max_samples:]
            profile.samples = (profile.samples + window)[-profile.config.max_samples:]
            profile.sample_count += len(history)
            profile.last_updated = self._clock()
            return profile

    def reset(self, entity_id: str) -> bool:
        """Forget an entity. Unknown entities are a no-op.

        Returns:
            True if a profile was removed
        """
        with self.locked(entity_id):
            with self._map_lock:
                removed = self._profiles.pop(entity_id, None)
        if removed is not None:
            logger.info(f"Reset profile for {entity_id}")
        return removed is not None

    def clear(self) -> None:
        with self._map_lock:
            self._profiles.clear()

    def entity_ids(self) -> list[str]:
        with self._map_lock:
            return list(self._profiles)

    def __len__(self) -> int:
        with self._map_lock:
            return len(self._profiles)

    def __contains__(self, entity_id: object) -> bool:
        with self._map_lock:
            return entity_id in self._profiles

    def stats(self) -> dict:
        """Get statistics about stored profiles."""
        with self._map_lock:
            profiles = list(self._profiles.values())
        return {
            "profiles_count": len(profiles),
            "reliable_profiles": sum(1 for p in profiles if p.is_reliable),
            "bootstrapped_profiles": sum(1 for p in profiles if p.has_bootstrap_baseline),
        }

    def save_profiles(self, path: Path) -> int:
        """Write a JSON snapshot per profile into a directory.

        Returns:
            Number of profiles written
        """
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)

        count = 0
        for entity_id in self.entity_ids():
            profile = self.get(entity_id)
            if profile is None:
                continue
            profile.save(path / f"{_safe_filename(entity_id)}.json")
            count += 1
        return count

    def load_profiles(self, path: Path) -> int:
        """Load JSON snapshots written by save_profiles.

        Returns:
            Number of profiles loaded
        """
        path = Path(path)
        if not path.exists():
            return 0

        count = 0
        for profile_file in sorted(path.glob("*.json")):
            try:
                profile = BehavioralProfile.load(profile_file)
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning(f"Could not load profile {profile_file}: {e}")
                continue
            with self.locked(profile.entity_id):
                with self._map_lock:
                    self._profiles[profile.entity_id] = profile
            count += 1
        return count


def _safe_filename(entity_id: str) -> str:
    # Percent-encoding is reversible, so distinct ids never share a file.
    return quote(entity_id, safe="-_.")
