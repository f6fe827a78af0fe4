"""
Intervention Opportunity Detector.
Before each point, decides whether the coach should be offered a choice.
Crisis/chance is always judged from the home (coached) side.
"""
from __future__ import annotations

from .schemas import InterventionOpportunity, InterventionSituation, InterventionType, Side
from .state_tracker import (
    MatchState,
    is_break_point,
    is_match_point_for,
    is_set_point_for,
    is_tiebreak,
)

INTERVENTION_COOLDOWN_POINTS = 3
LOW_STAMINA_RATIO = 0.3
MOMENTUM_STREAK = 3
MENTAL_PRESSURE_LEVEL = 30.0

URGENCY = {
    InterventionSituation.BREAK_POINT_FOR: 80,
    InterventionSituation.BREAK_POINT_AGAINST: 80,
    InterventionSituation.SET_POINT_FOR: 90,
    InterventionSituation.SET_POINT_AGAINST: 90,
    InterventionSituation.MATCH_POINT_FOR: 100,
    InterventionSituation.MATCH_POINT_AGAINST: 100,
    InterventionSituation.TIEBREAK: 75,
    InterventionSituation.STAMINA_LOW: 60,
    InterventionSituation.MENTAL_PRESSURE: 55,
    InterventionSituation.MOMENTUM_SHIFT: 50,
}

DESCRIPTIONS = {
    InterventionSituation.BREAK_POINT_FOR: "Break point! A chance to take their serve.",
    InterventionSituation.BREAK_POINT_AGAINST: "Break point against us. Hold this one.",
    InterventionSituation.SET_POINT_FOR: "Set point! One more point takes the set.",
    InterventionSituation.SET_POINT_AGAINST: "Set point against us. Stay in the set.",
    InterventionSituation.MATCH_POINT_FOR: "Match point! One point from victory.",
    InterventionSituation.MATCH_POINT_AGAINST: "Match point against us. Everything on this point.",
    InterventionSituation.TIEBREAK: "Tiebreak! Concentration is everything now.",
    InterventionSituation.STAMINA_LOW: "Stamina is running low. Manage the energy.",
    InterventionSituation.MENTAL_PRESSURE: "The pressure is getting to our player.",
    InterventionSituation.MOMENTUM_SHIFT: "The momentum is swinging.",
}


def in_cooldown(state: MatchState) -> bool:
    return state.point_number - state.last_intervention_point < INTERVENTION_COOLDOWN_POINTS


def _opportunity(
    state: MatchState, situation: InterventionSituation, kind: InterventionType
) -> InterventionOpportunity:
    return InterventionOpportunity(
        type=kind,
        situation=situation,
        urgency=URGENCY[situation],
        description=DESCRIPTIONS[situation],
        point_number=state.point_number,
    )


def _for_or_against(
    state: MatchState,
    side: Side,
    for_situation: InterventionSituation,
    against_situation: InterventionSituation,
) -> InterventionOpportunity:
    if side is Side.HOME:
        return _opportunity(state, for_situation, InterventionType.CHANCE)
    return _opportunity(state, against_situation, InterventionType.CRISIS)


def detect(state: MatchState) -> InterventionOpportunity | None:
    """
    First match in priority order: break point, set point, match point,
    tiebreak, low stamina, momentum shift, mental pressure.
    Pure read of the state; calling it twice gives the same answer.
    """
    if state.is_match_complete or in_cooldown(state):
        return None

    if is_break_point(state):
        return _for_or_against(
            state,
            state.receiver,
            InterventionSituation.BREAK_POINT_FOR,
            InterventionSituation.BREAK_POINT_AGAINST,
        )

    # A set point that would also end the match is reported as a match point.
    for side in (Side.HOME, Side.AWAY):
        if is_set_point_for(state, side) and not is_match_point_for(state, side):
            return _for_or_against(
                state,
                side,
                InterventionSituation.SET_POINT_FOR,
                InterventionSituation.SET_POINT_AGAINST,
            )

    for side in (Side.HOME, Side.AWAY):
        if is_match_point_for(state, side):
            return _for_or_against(
                state,
                side,
                InterventionSituation.MATCH_POINT_FOR,
                InterventionSituation.MATCH_POINT_AGAINST,
            )

    if state.tiebreak is not None or is_tiebreak(state):
        return _opportunity(state, InterventionSituation.TIEBREAK, InterventionType.CHANCE)

    if state.home.stamina_ratio() < LOW_STAMINA_RATIO:
        return _opportunity(state, InterventionSituation.STAMINA_LOW, InterventionType.CRISIS)
    if state.away.stamina_ratio() < LOW_STAMINA_RATIO:
        return _opportunity(state, InterventionSituation.STAMINA_LOW, InterventionType.CHANCE)

    if state.momentum.streak(Side.AWAY) >= MOMENTUM_STREAK:
        return _opportunity(state, InterventionSituation.MOMENTUM_SHIFT, InterventionType.CRISIS)
    if state.momentum.streak(Side.HOME) >= MOMENTUM_STREAK:
        return _opportunity(state, InterventionSituation.MOMENTUM_SHIFT, InterventionType.CHANCE)

    if state.home.current_mental < MENTAL_PRESSURE_LEVEL:
        return _opportunity(state, InterventionSituation.MENTAL_PRESSURE, InterventionType.CRISIS)

    return None
