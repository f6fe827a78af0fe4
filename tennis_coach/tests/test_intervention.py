"""
Intervention detector, instruction effects (grant, failure, decay, budget)
and candidate instruction generation.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from tennis_coach.instructions import (
    COACH_INSTRUCTIONS,
    SITUATION_WEIGHTS,
    eligible_instructions,
    generate_instruction_choices,
    get_instruction,
)
from tennis_coach.simulation.errors import InvalidInstructionError, MatchStateError
from tennis_coach.simulation.instruction_engine import apply_instruction, decay_effects, skip_intervention
from tennis_coach.simulation.intervention import detect
from tennis_coach.simulation.orchestrator import advance_point, initialize_match, resolve_intervention
from tennis_coach.simulation.profiles import Player, PlayerStats
from tennis_coach.simulation.rng import ScriptedRNG, SeededRNG
from tennis_coach.simulation.schemas import (
    GameScore,
    InterventionOpportunity,
    InterventionSituation,
    InterventionType,
    MatchConfig,
    PointResult,
    SetScore,
    Side,
    TiebreakScore,
)


def _player(pid: str, value: float = 70) -> Player:
    return Player(id=pid, name=pid.title(), stats=PlayerStats(value, value, value, value, value, value))


def _state(**config):
    return initialize_match(_player("home"), _player("away"), MatchConfig(**config))


def _opportunity(situation: InterventionSituation) -> InterventionOpportunity:
    return InterventionOpportunity(InterventionType.CRISIS, situation, 80, "test")


@pytest.fixture
def state():
    return _state()


# ---- Detector ----
class TestDetector:
    def test_quiet_opening_point(self, state):
        assert detect(state) is None

    def test_break_point_against(self, state):
        state.game = GameScore(0, 3)
        opp = detect(state)
        assert opp.situation is InterventionSituation.BREAK_POINT_AGAINST
        assert opp.type is InterventionType.CRISIS
        assert opp.urgency == 80

    def test_break_point_for(self, state):
        state.server = Side.AWAY
        state.game = GameScore(4, 3)
        opp = detect(state)
        assert opp.situation is InterventionSituation.BREAK_POINT_FOR
        assert opp.type is InterventionType.CHANCE

    def test_break_point_outranks_set_point(self, state):
        state.current_set = SetScore(4, 5)
        state.game = GameScore(2, 3)
        assert detect(state).situation is InterventionSituation.BREAK_POINT_AGAINST

    def test_set_point_for(self, state):
        state.current_set = SetScore(5, 4)
        state.game = GameScore(3, 2)
        opp = detect(state)
        assert opp.situation is InterventionSituation.SET_POINT_FOR
        assert opp.urgency == 90

    def test_match_point_not_reported_as_set_point(self, state):
        state.sets = [SetScore(6, 2)]
        state.current_set = SetScore(5, 4)
        state.game = GameScore(3, 0)
        opp = detect(state)
        assert opp.situation is InterventionSituation.MATCH_POINT_FOR
        assert opp.type is InterventionType.CHANCE
        assert opp.urgency == 100

    def test_match_point_against(self, state):
        state.sets = [SetScore(3, 6)]
        state.server = Side.AWAY
        state.current_set = SetScore(4, 5)
        state.game = GameScore(0, 3)
        opp = detect(state)
        assert opp.situation is InterventionSituation.MATCH_POINT_AGAINST
        assert opp.type is InterventionType.CRISIS

    def test_tiebreak(self, state):
        state.current_set = SetScore(6, 6)
        state.tiebreak = TiebreakScore(2, 2)
        opp = detect(state)
        assert opp.situation is InterventionSituation.TIEBREAK
        assert opp.urgency == 75

    def test_no_break_point_inside_tiebreak(self, state):
        state.current_set = SetScore(6, 6)
        state.tiebreak = TiebreakScore(5, 6)
        state.game = GameScore(0, 3)
        # 5-6 in the tiebreak is a set point for away, not a break point
        assert detect(state).situation is InterventionSituation.SET_POINT_AGAINST

    def test_low_stamina(self, state):
        state.home.current_stamina = state.home.stats.stamina * 0.2
        opp = detect(state)
        assert opp.situation is InterventionSituation.STAMINA_LOW
        assert opp.type is InterventionType.CRISIS
        state.home.reset_condition()
        state.away.current_stamina = 5
        assert detect(state).type is InterventionType.CHANCE

    def test_momentum_shift(self, state):
        for _ in range(3):
            state.momentum.record_point(Side.AWAY)
        opp = detect(state)
        assert opp.situation is InterventionSituation.MOMENTUM_SHIFT
        assert opp.type is InterventionType.CRISIS
        assert opp.urgency == 50

    def test_momentum_streak_resets(self, state):
        for _ in range(3):
            state.momentum.record_point(Side.AWAY)
        state.momentum.record_point(Side.HOME)
        assert state.momentum.streak(Side.HOME) == 1
        assert state.momentum.streak(Side.AWAY) == 0
        assert detect(state) is None

    def test_mental_pressure(self, state):
        state.home.current_mental = 25
        opp = detect(state)
        assert opp.situation is InterventionSituation.MENTAL_PRESSURE
        assert opp.urgency == 55

    def test_cooldown(self, state):
        state.game = GameScore(0, 3)
        state.last_intervention_point = 10
        state.point_number = 12
        assert detect(state) is None
        state.point_number = 13
        assert detect(state) is not None

    def test_idempotent(self, state):
        state.game = GameScore(0, 3)
        assert detect(state) == detect(state)

    def test_none_after_match_complete(self, state):
        state.game = GameScore(0, 3)
        state.is_match_complete = True
        assert detect(state) is None


# ---- Budget gate in advance_point ----
class TestBudgetGate:
    def test_zero_budget_plays_point(self):
        st = _state(coach_budget=0)
        st.game = GameScore(0, 3)
        outcome = advance_point(st, SeededRNG(1))
        assert isinstance(outcome, PointResult)
        assert st.pending_opportunity is None

    def test_coach_system_disabled_plays_point(self):
        st = _state(coach_system_enabled=False)
        st.game = GameScore(0, 3)
        assert isinstance(advance_point(st, SeededRNG(1)), PointResult)

    def test_opportunity_suspends_point(self, state):
        state.game = GameScore(0, 3)
        outcome = advance_point(state, ScriptedRNG([]))
        assert isinstance(outcome, InterventionOpportunity)
        assert state.pending_opportunity == outcome
        assert state.point_number == 0
        assert state.game == GameScore(0, 3)
        with pytest.raises(MatchStateError):
            advance_point(state, SeededRNG(1))

    def test_resolve_without_pending(self, state):
        with pytest.raises(MatchStateError):
            resolve_intervention(state, None, SeededRNG(1))


# ---- Instruction effects ----
class TestInstructionEngine:
    def test_success_grants_multiplied_effect(self, state):
        state.point_number = 7
        instr = get_instruction("serve_and_volley")
        ack = apply_instruction(state, instr, ScriptedRNG([0.0]))
        assert ack.success and not ack.skipped
        (effect,) = state.active_effects
        assert effect.effects.serve == pytest.approx(18)
        assert effect.effects.volley == pytest.approx(12)
        assert effect.remaining_points == 1
        assert state.coach_budget_remaining == 2
        assert state.used_instructions == ["serve_and_volley"]
        assert state.last_intervention_point == 7

    def test_failure_applies_mental_penalty_for_one_point(self, state):
        ack = apply_instruction(state, get_instruction("miracle_shot"), ScriptedRNG([0.99]))
        assert not ack.success
        (effect,) = state.active_effects
        assert effect.effects.mental == -8
        assert effect.effects.serve == 0
        assert effect.remaining_points == 1
        assert not effect.succeeded
        assert state.coach_budget_remaining == 2

    def test_failure_without_penalty_adds_nothing(self, state):
        apply_instruction(state, get_instruction("mental_reset"), ScriptedRNG([0.99]))
        assert state.active_effects == []
        assert state.used_instructions == ["mental_reset"]

    def test_skip_only_restarts_cooldown(self, state):
        state.point_number = 4
        ack = skip_intervention(state)
        assert ack.skipped
        assert state.last_intervention_point == 4
        assert state.coach_budget_remaining == 3
        assert state.used_instructions == []

    def test_decay_drops_expired(self, state):
        apply_instruction(state, get_instruction("power_baseline"), ScriptedRNG([0.0]))
        decay_effects(state)
        assert state.active_effects[0].remaining_points == 1
        decay_effects(state)
        assert state.active_effects == []

    def test_effect_lasts_exactly_duration_points(self):
        st = _state(coach_budget=1)
        st.game = GameScore(0, 3)
        assert isinstance(advance_point(st, SeededRNG(5)), InterventionOpportunity)
        resolve_intervention(st, get_instruction("defensive_wall"), ScriptedRNG([0.0]))
        rng = SeededRNG(5)
        influenced = [advance_point(st, rng).was_influenced_by_instruction for _ in range(3)]
        assert influenced == [True, True, False]
        assert st.active_effects == []

    def test_last_stand_rejected_outside_its_situations(self, state):
        state.game = GameScore(0, 3)
        advance_point(state, SeededRNG(1))
        with pytest.raises(InvalidInstructionError):
            resolve_intervention(state, get_instruction("last_stand"), SeededRNG(1))
        assert state.pending_opportunity is not None
        assert state.coach_budget_remaining == 3
        assert state.used_instructions == []

    def test_repeat_instruction_rejected(self, state):
        state.used_instructions.append("tempo_change")
        state.game = GameScore(0, 3)
        advance_point(state, SeededRNG(1))
        with pytest.raises(InvalidInstructionError):
            resolve_intervention(state, get_instruction("tempo_change"), SeededRNG(1))

    def test_budget_never_negative(self):
        st = _state(coach_budget=2)
        rng = SeededRNG(11)
        ids = ["power_baseline", "defensive_wall", "mental_reset"]
        used = 0
        points = 0
        while not st.is_match_complete and points < 2000:
            outcome = advance_point(st, rng)
            if isinstance(outcome, InterventionOpportunity):
                resolve_intervention(st, get_instruction(ids[used]), rng)
                used += 1
            else:
                points += 1
            assert 0 <= st.coach_budget_remaining <= 2
        assert used <= 2
        assert st.coach_budget_remaining == 2 - used


# ---- Candidate generation ----
class TestInstructionChoices:
    def test_catalog(self):
        assert len(COACH_INSTRUCTIONS) == 10
        assert set(SITUATION_WEIGHTS) == set(InterventionSituation)

    def test_last_stand_only_when_facing_set_or_match_point(self):
        ids = {i.id for i in eligible_instructions(_opportunity(InterventionSituation.BREAK_POINT_AGAINST))}
        assert "last_stand" not in ids
        assert len(ids) == 9
        ids = {i.id for i in eligible_instructions(_opportunity(InterventionSituation.MATCH_POINT_AGAINST))}
        assert "last_stand" in ids

    def test_used_instructions_excluded(self):
        opp = _opportunity(InterventionSituation.TIEBREAK)
        choices = generate_instruction_choices(opp, ["mental_reset", "tempo_change"], SeededRNG(3), count=20)
        ids = [c.id for c in choices]
        assert "mental_reset" not in ids
        assert "tempo_change" not in ids
        assert len(ids) == len(set(ids)) == 7

    def test_count_and_distinct(self):
        opp = _opportunity(InterventionSituation.SET_POINT_AGAINST)
        choices = generate_instruction_choices(opp, [], SeededRNG(8), count=5)
        assert len(choices) == 5
        assert len({c.id for c in choices}) == 5

    def test_deterministic_for_seed(self):
        opp = _opportunity(InterventionSituation.MOMENTUM_SHIFT)
        a = generate_instruction_choices(opp, [], SeededRNG(21))
        b = generate_instruction_choices(opp, [], SeededRNG(21))
        assert [c.id for c in a] == [c.id for c in b]

    def test_everything_used_gives_no_choices(self):
        opp = _opportunity(InterventionSituation.MATCH_POINT_AGAINST)
        assert generate_instruction_choices(opp, list(COACH_INSTRUCTIONS), SeededRNG(1)) == []
