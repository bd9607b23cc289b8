"""Tests for the behavioral profile store."""

import threading

import pytest

from behavior_guard.core.types import EntityKind
from behavior_guard.models.behavior.profile import BaselineMetrics, BehaviorSample
from behavior_guard.models.behavior.store import ProfileStore
from tests.fixtures.metric_sources import FIXED_NOW, FixedClock


@pytest.fixture
def store():
    """Store on a fixed clock."""
    return ProfileStore(clock=FixedClock())


def _baseline(mean: float) -> BaselineMetrics:
    return BaselineMetrics(mean=mean, std_dev=1.0, min=mean - 1, max=mean + 1, sample_count=20)


class TestGetOrCreate:
    """Tests for profile creation and lookup."""

    def test_creates_once(self, store):
        with store.locked("app"):
            first = store.get_or_create("app", EntityKind.APPLICATION)
            second = store.get_or_create("app", EntityKind.APPLICATION)

        assert first is second
        assert first.entity_kind == EntityKind.APPLICATION
        assert first.first_seen == FIXED_NOW
        assert len(store) == 1
        assert "app" in store

    def test_get_unknown_returns_none(self, store):
        assert store.get("missing") is None
        assert store.peek("missing") is None

    def test_get_returns_copy(self, store):
        with store.locked("app"):
            live = store.get_or_create("app", EntityKind.APPLICATION)
            store.add_sample(live, BehaviorSample({"x": 1.0}))

        snapshot = store.get("app")
        snapshot.samples.clear()
        snapshot.sample_count = 0

        assert store.peek("app").sample_count == 1
        assert len(store.peek("app").samples) == 1


class TestReset:
    """Tests for reset and clear."""

    def test_reset_unknown_is_noop(self, store):
        assert store.reset("missing") is False
        assert len(store) == 0

    def test_reset_removes_profile(self, store):
        with store.locked("app"):
            store.get_or_create("app", EntityKind.APPLICATION)

        assert store.reset("app") is True
        assert "app" not in store

    def test_clear(self, store):
        for entity in ("a", "b"):
            with store.locked(entity):
                store.get_or_create(entity, EntityKind.USER)
        store.clear()
        assert store.entity_ids() == []

    def test_reset_releases_entity_lock(self, store):
        with store.locked("app"):
            store.get_or_create("app", EntityKind.APPLICATION)

        store.reset("app")

        assert store._locks == {}


class TestBootstrap:
    """Tests for installing batch baselines."""

    def test_bootstrap_seeds_profile(self, store):
        history = [BehaviorSample({"x": float(i % 2)}) for i in range(30)]

        profile = store.bootstrap("dev", EntityKind.DEVICE, history, {"x": _baseline(0.5)})

        assert profile.has_bootstrap_baseline
        assert profile.normal_behavior["x"] == 0.5
        assert profile.sample_count == 30
        assert len(profile.samples) == 30
        assert profile.is_reliable

    def test_bootstrap_window_is_capped(self, store):
        history = [BehaviorSample({"x": float(i)}) for i in range(150)]

        profile = store.bootstrap("dev", EntityKind.DEVICE, history, {"x": _baseline(75.0)})

        assert len(profile.samples) == 100
        assert profile.samples[0].metrics["x"] == 50.0
        assert profile.sample_count == 150

    def test_bootstrap_without_baselines_leaves_profile_empty(self, store):
        history = [BehaviorSample({"x": 1.0}) for _ in range(5)]

        profile = store.bootstrap("dev", EntityKind.DEVICE, history, {})

        assert not profile.has_bootstrap_baseline
        assert profile.sample_count == 0
        assert profile.normal_behavior == {}


class TestConcurrency:
    """Tests for per-entity serialization."""

    def test_parallel_updates_on_one_entity_are_not_lost(self, store):
        def worker():
            for _ in range(100):
                with store.locked("shared"):
                    profile = store.get_or_create("shared", EntityKind.PROCESS)
                    store.add_sample(profile, BehaviorSample({"x": 1.0}))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        profile = store.get("shared")
        assert profile.sample_count == 800
        assert len(profile.samples) == 100

    def test_locks_are_dropped_when_unused(self, store):
        for i in range(1000):
            assert store.get(f"transient-{i}") is None
        with store.locked("kept"):
            store.get_or_create("kept", EntityKind.PROCESS)

        assert store._locks == {}
        assert store.entity_ids() == ["kept"]

    def test_lock_survives_while_held(self, store):
        with store.locked("busy"):
            with store.locked("busy"):
                assert store._locks["busy"].users == 2
            assert store._locks["busy"].users == 1
        assert "busy" not in store._locks


class TestStatsAndPersistence:
    """Tests for statistics and JSON snapshots."""

    def test_stats(self, store):
        with store.locked("a"):
            a = store.get_or_create("a", EntityKind.APPLICATION)
            for _ in range(10):
                store.add_sample(a, BehaviorSample({"x": 1.0}))
        with store.locked("b"):
            store.get_or_create("b", EntityKind.APPLICATION)

        stats = store.stats()

        assert stats["profiles_count"] == 2
        assert stats["reliable_profiles"] == 1
        assert stats["bootstrapped_profiles"] == 0

    def test_save_and_load_profiles(self, store, tmp_path):
        with store.locked("com.example/app"):
            profile = store.get_or_create("com.example/app", EntityKind.APPLICATION)
            store.add_sample(profile, BehaviorSample({"x": 2.0}))

        assert store.save_profiles(tmp_path) == 1
        (tmp_path / "broken.json").write_text("{not json")

        restored = ProfileStore()
        assert restored.load_profiles(tmp_path) == 1
        assert restored.get("com.example/app").sample_count == 1

    def test_load_from_missing_directory(self, tmp_path):
        assert ProfileStore().load_profiles(tmp_path / "nope") == 0

    def test_similar_ids_get_separate_snapshots(self, store, tmp_path):
        for entity in ("a/b", "a_b", "a b"):
            with store.locked(entity):
                profile = store.get_or_create(entity, EntityKind.DOMAIN)
                store.add_sample(profile, BehaviorSample({"x": 1.0}))

        assert store.save_profiles(tmp_path) == 3
        assert len(list(tmp_path.glob("*.json"))) == 3

        restored = ProfileStore()
        assert restored.load_profiles(tmp_path) == 3
        assert sorted(restored.entity_ids()) == ["a b", "a/b", "a_b"]
