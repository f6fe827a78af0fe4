"""Session store: per-match locking, eviction and derived RNG streams."""
from __future__ import annotations

import threading
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from tennis_coach.services.match_service import (
    CHOICE_SEED_OFFSET,
    PLAYER_SEED_OFFSET,
    MatchNotFoundError,
    MatchSessionStore,
    derived_rng,
)
from tennis_coach.simulation.autoplay import AutoPlayMode, StopReason
from tennis_coach.simulation.errors import MatchStateError
from tennis_coach.simulation.profiles import Player, PlayerStats
from tennis_coach.simulation.rng import SeededRNG
from tennis_coach.simulation.schemas import GameScore, MatchConfig, PointResult


def _player(pid: str, value: float = 70) -> Player:
    return Player(id=pid, name=pid.title(), stats=PlayerStats(value, value, value, value, value, value))


@pytest.fixture
def store():
    return MatchSessionStore(max_sessions=3)


class TestSessionLifecycle:
    def test_oldest_session_evicted(self, store):
        ids = [store.create(_player("home"), _player("away")).id for _ in range(4)]
        assert len(store) == 3
        with pytest.raises(MatchNotFoundError):
            store.get(ids[0])
        assert store.get(ids[-1]).id == ids[-1]

    def test_locked_unknown_match(self, store):
        with pytest.raises(MatchNotFoundError):
            with store.locked("nope"):
                pass


class TestConcurrentAccess:
    def test_concurrent_advance_plays_each_point_once(self, store):
        session = store.create(_player("home"), _player("away"), MatchConfig(coach_system_enabled=False), seed=5)
        played: list[int] = []
        errors: list[Exception] = []
        start = threading.Barrier(4)

        def worker():
            start.wait()
            try:
                while True:
                    outcomes = store.advance(session.id, 1)
                    if not outcomes:
                        return
                    played.extend(o.point_number for o in outcomes)
            except Exception as e:  # collected for the assertion below
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert errors == []
        assert session.state.is_match_complete
        assert sorted(played) == list(range(len(played)))
        assert session.state.point_number == len(session.orchestrator.history) == len(played)

    def test_concurrent_runs_match_sequential_run(self, store):
        config = MatchConfig(coach_system_enabled=False)
        shared = store.create(_player("home"), _player("away"), config, seed=9)
        alone = store.create(_player("home"), _player("away"), config, seed=9)

        threads = [threading.Thread(target=lambda: store.advance(shared.id, 400)) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)
        store.advance(alone.id, 1000)

        assert [r.winner for r in shared.orchestrator.history] == [r.winner for r in alone.orchestrator.history]
        assert shared.state.winner is alone.state.winner

    def test_lock_blocks_other_callers(self, store):
        session = store.create(_player("home"), _player("away"), MatchConfig(coach_system_enabled=False), seed=1)
        done = threading.Event()

        def advance():
            store.advance(session.id, 1)
            done.set()

        with store.locked(session.id):
            t = threading.Thread(target=advance)
            t.start()
            assert not done.wait(0.1)
            assert session.state.point_number == 0
        t.join(timeout=5)
        assert done.is_set()
        assert session.state.point_number == 1


class TestStoreAutoplay:
    def test_to_end(self, store):
        session = store.create(_player("home"), _player("away"), seed=3)
        played, outcome = store.autoplay(session.id, AutoPlayMode.TO_END)
        assert outcome.reason is StopReason.COMPLETED
        assert session.state.is_match_complete
        assert len(played) == len(session.orchestrator.history)

    def test_refused_while_pending(self, store):
        session = store.create(_player("home"), _player("away"), seed=4)
        session.state.game = GameScore(0, 3)
        store.advance(session.id, 1)
        assert session.state.pending_opportunity is not None
        with pytest.raises(MatchStateError):
            store.autoplay(session.id, AutoPlayMode.TO_END)


class TestDerivedStreams:
    def test_offsets_distinct(self):
        assert CHOICE_SEED_OFFSET != PLAYER_SEED_OFFSET
        assert 0 not in (CHOICE_SEED_OFFSET, PLAYER_SEED_OFFSET)

    def test_derived_rng_shifts_seed(self):
        assert derived_rng(11, PLAYER_SEED_OFFSET).random() == SeededRNG(11 + PLAYER_SEED_OFFSET).random()
        assert derived_rng(11, PLAYER_SEED_OFFSET).random() != SeededRNG(11).random()

    def test_point_stream_uses_match_seed(self, store):
        session = store.create(_player("home"), _player("away"), MatchConfig(coach_system_enabled=False), seed=11)
        (result,) = store.advance(session.id, 1)
        assert isinstance(result, PointResult)
        assert result.roll == SeededRNG(11).random()
