"""
Attribute & modifier aggregation: folds active abilities and active coach
instruction effects into one EffectBonuses record per side. No randomness,
no mutation; called fresh every point.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .profiles import SpecialAbility
from .schemas import NO_BONUS, ActiveEffect, EffectBonuses, Side
from .state_tracker import (
    MatchState,
    is_ahead,
    is_behind,
    is_break_point,
    is_match_point,
    is_set_point,
    is_tiebreak,
)


@dataclass(frozen=True)
class SituationFlags:
    is_break_point: bool = False
    is_set_point: bool = False
    is_match_point: bool = False
    is_tiebreak: bool = False
    is_behind: bool = False
    is_ahead: bool = False


def situation_flags(state: MatchState, side: Side) -> SituationFlags:
    """Situational flags as seen by `side` (behind/ahead differ per side)."""
    return SituationFlags(
        is_break_point=is_break_point(state),
        is_set_point=is_set_point(state),
        is_match_point=is_match_point(state),
        is_tiebreak=state.tiebreak is not None or is_tiebreak(state),
        is_behind=is_behind(state, side),
        is_ahead=is_ahead(state, side),
    )


def calculate_ability_effects(
    abilities: Iterable[SpecialAbility],
    situation: SituationFlags | None = None,
) -> EffectBonuses:
    """Sum flat bonuses of active abilities plus situational success bonuses."""
    total = NO_BONUS
    for ability in abilities:
        if not ability.is_active:
            continue
        total = total + ability.effects
        if situation is None:
            continue
        extra = 0.0
        s = ability.situational
        if situation.is_break_point:
            extra += s.break_point
        if situation.is_set_point:
            extra += s.set_point
        if situation.is_match_point:
            extra += s.match_point
        if situation.is_tiebreak:
            extra += s.tiebreak
        if situation.is_behind:
            extra += s.behind
        if situation.is_ahead:
            extra += s.lead
        if extra:
            total = total.with_success_bonus(extra)
    return total


def calculate_instruction_effects(active_effects: Iterable[ActiveEffect]) -> EffectBonuses:
    """Effects are already multiplied at grant time; this only sums them."""
    total = NO_BONUS
    for effect in active_effects:
        if effect.remaining_points > 0:
            total = total + effect.effects
    return total


def side_bonuses(state: MatchState, side: Side) -> EffectBonuses:
    """
    Everything contributing to `side` this point. Coach instructions only
    ever benefit the home (coached) player.
    """
    player = state.player(side)
    bonuses = calculate_ability_effects(player.special_abilities, situation_flags(state, side))
    if side is Side.HOME:
        bonuses = bonuses + calculate_instruction_effects(state.active_effects)
    return bonuses
