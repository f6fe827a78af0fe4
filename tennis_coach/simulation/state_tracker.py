"""
Match state and read-only queries over it.
MatchState is the single mutable aggregate the core operates on; the
predicates here (break/set/match point, tiebreak, behind/ahead) are shared by
the detector, the aggregator and the resolver.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .profiles import Player
from .schemas import (
    ActiveEffect,
    GameScore,
    InterventionOpportunity,
    MatchConfig,
    SetScore,
    Side,
    TiebreakScore,
)

# last_intervention_point before any intervention; far enough back that the
# cooldown never blocks the opening points.
NO_INTERVENTION_YET = -10


@dataclass
class MomentumState:
    """Consecutive points won by each side; only one streak is non-zero."""
    streak_home: int = 0
    streak_away: int = 0

    def record_point(self, winner: Side) -> None:
        if winner is Side.HOME:
            self.streak_home += 1
            self.streak_away = 0
        else:
            self.streak_away += 1
            self.streak_home = 0

    def streak(self, side: Side) -> int:
        return self.streak_home if side is Side.HOME else self.streak_away


@dataclass
class MatchState:
    """Everything the core reads and mutates for one match."""
    home: Player
    away: Player
    config: MatchConfig
    sets: list[SetScore] = field(default_factory=list)
    current_set: SetScore = field(default_factory=SetScore)
    game: GameScore = field(default_factory=GameScore)
    tiebreak: TiebreakScore | None = None  # set while a tiebreak game is in progress
    tiebreak_first_server: Side | None = None
    server: Side = Side.HOME
    coach_budget_remaining: int = 0
    used_instructions: list[str] = field(default_factory=list)
    active_effects: list[ActiveEffect] = field(default_factory=list)
    last_intervention_point: int = NO_INTERVENTION_YET
    point_number: int = 0
    is_match_complete: bool = False
    winner: Side | None = None
    pending_opportunity: InterventionOpportunity | None = None
    momentum: MomentumState = field(default_factory=MomentumState)

    def player(self, side: Side) -> Player:
        return self.home if side is Side.HOME else self.away

    @property
    def receiver(self) -> Side:
        return self.server.other

    def to_dict(self) -> dict[str, Any]:
        return {
            "home": self.home.to_dict(),
            "away": self.away.to_dict(),
            "config": self.config.to_dict(),
            "sets": [s.to_dict() for s in self.sets],
            "current_set": self.current_set.to_dict(),
            "game": self.tiebreak.label() if self.tiebreak else self.game.label(),
            "in_tiebreak": self.tiebreak is not None,
            "server": self.server.value,
            "coach_budget_remaining": self.coach_budget_remaining,
            "used_instructions": list(self.used_instructions),
            "active_effects": [e.to_dict() for e in self.active_effects],
            "last_intervention_point": self.last_intervention_point,
            "point_number": self.point_number,
            "is_match_complete": self.is_match_complete,
            "winner": self.winner.value if self.winner else None,
            "pending_opportunity": (
                self.pending_opportunity.to_dict() if self.pending_opportunity else None
            ),
        }


def sets_won(state: MatchState, side: Side) -> int:
    return sum(1 for s in state.sets if s.winner() is side)


def is_tiebreak(state: MatchState) -> bool:
    """Games tied at games_per_set with tiebreaks enabled."""
    gps = state.config.games_per_set
    return (
        state.config.tiebreak_enabled
        and state.current_set.home == gps
        and state.current_set.away == gps
    )


def point_wins_game(state: MatchState, side: Side) -> bool:
    """True if `side` winning the next point wins the current game."""
    if state.tiebreak is not None:
        mine = state.tiebreak.points(side) + 1
        theirs = state.tiebreak.points(side.other)
        return mine >= state.config.tiebreak_points and mine - theirs >= 2
    mine = state.game.points(side)
    theirs = state.game.points(side.other)
    return mine >= 3 and mine > theirs


def game_wins_set(state: MatchState, side: Side) -> bool:
    """True if `side` winning the current game wins the set."""
    if state.tiebreak is not None:
        return True
    mine = state.current_set.games(side) + 1
    theirs = state.current_set.games(side.other)
    return mine >= state.config.games_per_set and mine - theirs >= 2


def is_set_point_for(state: MatchState, side: Side) -> bool:
    return point_wins_game(state, side) and game_wins_set(state, side)


def is_match_point_for(state: MatchState, side: Side) -> bool:
    return (
        is_set_point_for(state, side)
        and sets_won(state, side) >= state.config.sets_to_win - 1
    )


def is_break_point(state: MatchState) -> bool:
    """The receiver wins the game (breaks serve) by winning the next point."""
    if state.tiebreak is not None:
        return False
    return point_wins_game(state, state.receiver)


def is_set_point(state: MatchState) -> bool:
    return is_set_point_for(state, Side.HOME) or is_set_point_for(state, Side.AWAY)


def is_match_point(state: MatchState) -> bool:
    return is_match_point_for(state, Side.HOME) or is_match_point_for(state, Side.AWAY)


def _standing(state: MatchState, side: Side) -> tuple[int, int]:
    """(sets lead, games lead) from side's point of view."""
    other = side.other
    return (
        sets_won(state, side) - sets_won(state, other),
        state.current_set.games(side) - state.current_set.games(other),
    )


def is_behind(state: MatchState, side: Side) -> bool:
    return _standing(state, side) < (0, 0)


def is_ahead(state: MatchState, side: Side) -> bool:
    return _standing(state, side) > (0, 0)


def score_label(state: MatchState) -> str:
    """Human-readable score, e.g. 'Sets 1-0 | Games 3-2 | 30-15'."""
    sets_h = sets_won(state, Side.HOME)
    sets_a = sets_won(state, Side.AWAY)
    game = f"TB {state.tiebreak.label()}" if state.tiebreak else state.game.label()
    return (
        f"Sets {sets_h}-{sets_a} | Games {state.current_set.home}-{state.current_set.away}"
        f" | {game}"
    )
