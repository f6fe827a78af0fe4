"""
Auto-play driver: modes, decision timeout, cancellation and the async stream.
"""
from __future__ import annotations

import asyncio
import threading
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from tennis_coach.instructions import get_instruction
from tennis_coach.simulation.autoplay import (
    AutoPlayConfig,
    AutoPlayer,
    AutoPlayMode,
    StopReason,
    async_auto_play,
)
from tennis_coach.simulation.orchestrator import MatchOrchestrator, initialize_match
from tennis_coach.simulation.profiles import Player, PlayerStats
from tennis_coach.simulation.schemas import GameScore, InterventionOpportunity, MatchConfig, PointResult


def _player(pid: str, value: float = 70) -> Player:
    return Player(id=pid, name=pid.title(), stats=PlayerStats(value, value, value, value, value, value))


def _orchestrator(seed: int = 4, **config) -> MatchOrchestrator:
    state = initialize_match(_player("home"), _player("away"), MatchConfig(**config))
    return MatchOrchestrator(state, seed=seed)


@pytest.fixture
def at_break_point():
    orch = _orchestrator()
    orch.state.game = GameScore(0, 3)
    return orch


class TestAutoPlayer:
    def test_to_end_skips_every_opportunity(self):
        orch = _orchestrator()
        seen = []
        player = AutoPlayer(orch, AutoPlayConfig(mode=AutoPlayMode.TO_END), on_opportunity=seen.append)
        outcome = player.run()
        assert outcome.reason is StopReason.COMPLETED
        assert orch.state.is_match_complete
        assert outcome.points_played == len(orch.history)
        assert orch.state.used_instructions == []
        assert orch.state.coach_budget_remaining == 3
        assert all(isinstance(o, InterventionOpportunity) for o in seen)

    def test_to_end_ignores_decide(self):
        orch = _orchestrator()
        calls = []
        player = AutoPlayer(
            orch,
            AutoPlayConfig(mode=AutoPlayMode.TO_END),
            decide=lambda st, opp: calls.append(opp) or get_instruction("mental_reset"),
        )
        player.run()
        assert calls == []

    def test_to_intervention_stops_before_point(self, at_break_point):
        player = AutoPlayer(at_break_point, AutoPlayConfig(mode=AutoPlayMode.TO_INTERVENTION))
        outcome = player.run()
        assert outcome.reason is StopReason.INTERVENTION
        assert outcome.points_played == 0
        assert outcome.opportunity is at_break_point.state.pending_opportunity
        assert at_break_point.history == []

    def test_normal_mode_without_decide_skips(self, at_break_point):
        player = AutoPlayer(at_break_point, AutoPlayConfig(mode=AutoPlayMode.NORMAL))
        outcome = player.run(max_points=1)
        assert outcome.reason is StopReason.MAX_POINTS
        assert outcome.points_played == 1
        assert at_break_point.state.last_intervention_point == 0
        assert at_break_point.state.coach_budget_remaining == 3

    def test_normal_mode_applies_decision(self, at_break_point):
        player = AutoPlayer(
            at_break_point,
            AutoPlayConfig(mode=AutoPlayMode.NORMAL),
            decide=lambda st, opp: get_instruction("defensive_wall"),
        )
        player.run(max_points=1)
        assert at_break_point.state.used_instructions == ["defensive_wall"]
        assert at_break_point.state.coach_budget_remaining == 2

    def test_decision_timeout_counts_as_skip(self, at_break_point):
        release = threading.Event()

        def slow(st, opp):
            release.wait(2.0)
            return get_instruction("defensive_wall")

        player = AutoPlayer(
            at_break_point,
            AutoPlayConfig(mode=AutoPlayMode.NORMAL, decision_timeout=0.05),
            decide=slow,
        )
        try:
            outcome = player.run(max_points=1)
        finally:
            release.set()
        assert outcome.points_played == 1
        assert at_break_point.state.used_instructions == []
        assert at_break_point.state.coach_budget_remaining == 3

    def test_timed_out_decision_sees_frozen_state(self, at_break_point):
        release = threading.Event()
        finished = threading.Event()
        seen = {}

        def slow(st, opp):
            release.wait(2.0)
            seen["point_number"] = st.point_number
            seen["game"] = st.game
            seen["live"] = st is at_break_point.state
            finished.set()
            return None

        player = AutoPlayer(
            at_break_point,
            AutoPlayConfig(mode=AutoPlayMode.NORMAL, decision_timeout=0.05),
            decide=slow,
        )
        try:
            player.run(max_points=3)
        finally:
            release.set()
        assert finished.wait(2.0)
        assert at_break_point.state.point_number == 3
        assert seen == {"point_number": 0, "game": GameScore(0, 3), "live": False}

    def test_decision_gets_copy_of_state(self, at_break_point):
        received = []

        def decide(st, opp):
            received.append(st)
            st.coach_budget_remaining = 0
            return None

        AutoPlayer(at_break_point, AutoPlayConfig(mode=AutoPlayMode.NORMAL), decide=decide).run(max_points=1)
        (st,) = received
        assert st is not at_break_point.state
        assert st.pending_opportunity is not None
        assert at_break_point.state.coach_budget_remaining == 3

    def test_cancel_from_callback(self):
        orch = _orchestrator()
        player = AutoPlayer(orch, AutoPlayConfig(mode=AutoPlayMode.TO_END))
        player.on_point = lambda r: player.cancel() if r.point_number == 4 else None
        outcome = player.run()
        assert outcome.reason is StopReason.CANCELLED
        assert outcome.points_played == 5
        assert not orch.state.is_match_complete

    def test_cancel_interrupts_delay(self):
        orch = _orchestrator()
        player = AutoPlayer(orch, AutoPlayConfig(mode=AutoPlayMode.TO_END, seconds_per_point=30))
        player.on_point = lambda r: player.cancel()
        outcome = player.run()
        assert outcome.reason is StopReason.CANCELLED
        assert outcome.points_played == 1

    def test_points_generator(self):
        orch = _orchestrator(coach_system_enabled=False)
        player = AutoPlayer(orch, AutoPlayConfig(mode=AutoPlayMode.NORMAL, fast_forward=True))
        points = list(player.points(max_points=6))
        assert len(points) == 6
        assert all(isinstance(p, PointResult) for p in points)
        assert player.outcome.reason is StopReason.MAX_POINTS


class TestAsyncAutoPlay:
    def _collect(self, orch, config, decide=None, cancel=None):
        async def go():
            return [o async for o in async_auto_play(orch, config, decide=decide, cancel=cancel)]
        return asyncio.run(go())

    def test_stream_ends_at_opportunity(self, at_break_point):
        out = self._collect(at_break_point, AutoPlayConfig(mode=AutoPlayMode.TO_INTERVENTION))
        assert len(out) == 1
        assert isinstance(out[0], InterventionOpportunity)
        assert at_break_point.state.pending_opportunity == out[0]

    def test_stream_to_end(self):
        orch = _orchestrator()
        out = self._collect(orch, AutoPlayConfig(mode=AutoPlayMode.TO_END))
        assert orch.state.is_match_complete
        points = [o for o in out if isinstance(o, PointResult)]
        assert len(points) == orch.state.point_number
        assert orch.state.used_instructions == []

    def test_async_decision_applied(self, at_break_point):
        async def decide(st, opp):
            if "mental_reset" in st.used_instructions:
                return None
            return get_instruction("mental_reset")

        self._collect(at_break_point, AutoPlayConfig(mode=AutoPlayMode.NORMAL), decide=decide)
        assert at_break_point.state.is_match_complete
        assert at_break_point.state.used_instructions == ["mental_reset"]

    def test_async_decision_timeout(self, at_break_point):
        async def slow(st, opp):
            await asyncio.sleep(5)
            return get_instruction("mental_reset")

        cfg = AutoPlayConfig(mode=AutoPlayMode.NORMAL, decision_timeout=0.01)

        async def go():
            cancel = asyncio.Event()
            out = []
            async for o in async_auto_play(at_break_point, cfg, decide=slow, cancel=cancel):
                out.append(o)
                if isinstance(o, PointResult):
                    cancel.set()
            return out

        out = asyncio.run(go())
        assert isinstance(out[0], InterventionOpportunity)
        assert isinstance(out[1], PointResult)
        assert at_break_point.state.used_instructions == []
