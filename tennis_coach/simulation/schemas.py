"""
Shared types for the coached match simulator.
Match configuration and state, tagged game scores, effect records,
point results and intervention opportunities.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any

from .errors import MatchConfigError


class Side(str, Enum):
    """Which end of the court. HOME is the coached side."""
    HOME = "home"
    AWAY = "away"

    @property
    def other(self) -> Side:
        return Side.AWAY if self is Side.HOME else Side.HOME


class PointWinReason(str, Enum):
    """How the point was won."""
    ACE = "ace"
    SERVICE_WINNER = "service_winner"
    RETURN_WINNER = "return_winner"
    VOLLEY_WINNER = "volley_winner"
    STROKE_WINNER = "stroke_winner"
    OPPONENT_ERROR = "opponent_error"
    MENTAL_BREAK = "mental_break"


class InterventionType(str, Enum):
    CRISIS = "crisis"
    CHANCE = "chance"


class InterventionSituation(str, Enum):
    BREAK_POINT_AGAINST = "break_point_against"
    BREAK_POINT_FOR = "break_point_for"
    SET_POINT_AGAINST = "set_point_against"
    SET_POINT_FOR = "set_point_for"
    MATCH_POINT_AGAINST = "match_point_against"
    MATCH_POINT_FOR = "match_point_for"
    TIEBREAK = "tiebreak"
    MOMENTUM_SHIFT = "momentum_shift"
    STAMINA_LOW = "stamina_low"
    MENTAL_PRESSURE = "mental_pressure"


class GameStatus(str, Enum):
    """Tagged state of a regular (non-tiebreak) game."""
    PLAYING = "playing"  # no side past 40, or only one side at 40
    DEUCE = "deuce"
    ADVANTAGE_HOME = "advantage_home"
    ADVANTAGE_AWAY = "advantage_away"


POINT_CALLS = ("0", "15", "30", "40")


@dataclass(frozen=True)
class GameScore:
    """
    Point indices within a regular game (0=love .. 3=forty).
    Indices past 40 are kept normalised to (3, 3), (4, 3) or (3, 4), so every
    stored value is one of 0/15/30/40, Deuce or Advantage.
    """
    home: int = 0
    away: int = 0

    @property
    def status(self) -> GameStatus:
        if self.home >= 3 and self.away >= 3:
            if self.home == self.away:
                return GameStatus.DEUCE
            return GameStatus.ADVANTAGE_HOME if self.home > self.away else GameStatus.ADVANTAGE_AWAY
        return GameStatus.PLAYING

    def points(self, side: Side) -> int:
        return self.home if side is Side.HOME else self.away

    def label(self) -> str:
        status = self.status
        if status is GameStatus.DEUCE:
            return "Deuce"
        if status is GameStatus.ADVANTAGE_HOME:
            return "Ad-40"
        if status is GameStatus.ADVANTAGE_AWAY:
            return "40-Ad"
        return f"{POINT_CALLS[self.home]}-{POINT_CALLS[self.away]}"


@dataclass(frozen=True)
class TiebreakScore:
    """Tiebreak points are counted 0, 1, 2, ..."""
    home: int = 0
    away: int = 0

    def points(self, side: Side) -> int:
        return self.home if side is Side.HOME else self.away

    @property
    def total(self) -> int:
        return self.home + self.away

    def label(self) -> str:
        return f"{self.home}-{self.away}"


@dataclass
class SetScore:
    """Games won by each side in one set."""
    home: int = 0
    away: int = 0

    def games(self, side: Side) -> int:
        return self.home if side is Side.HOME else self.away

    def add_game(self, side: Side) -> None:
        if side is Side.HOME:
            self.home += 1
        else:
            self.away += 1

    def winner(self) -> Side | None:
        if self.home > self.away:
            return Side.HOME
        if self.away > self.home:
            return Side.AWAY
        return None

    def to_dict(self) -> dict[str, int]:
        return {"home": self.home, "away": self.away}


@dataclass(frozen=True)
class EffectBonuses:
    """
    Structured bonus record shared by abilities and coach instructions.
    Attribute bonuses are rating points; critical_rate, error_reduction,
    success_rate_bonus and opponent_pressure are percentages.
    """
    serve: float = 0.0
    receive: float = 0.0
    volley: float = 0.0
    stroke: float = 0.0
    mental: float = 0.0
    stamina: float = 0.0
    critical_rate: float = 0.0
    error_reduction: float = 0.0
    success_rate_bonus: float = 0.0
    opponent_pressure: float = 0.0

    def __add__(self, other: EffectBonuses) -> EffectBonuses:
        return EffectBonuses(**{
            f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)
        })

    def scaled(self, factor: float) -> EffectBonuses:
        return EffectBonuses(**{f.name: getattr(self, f.name) * factor for f in fields(self)})

    def with_success_bonus(self, extra: float) -> EffectBonuses:
        return replace(self, success_rate_bonus=self.success_rate_bonus + extra)

    def is_zero(self) -> bool:
        return all(getattr(self, f.name) == 0 for f in fields(self))

    def to_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


NO_BONUS = EffectBonuses()


@dataclass
class MatchConfig:
    """Configuration for a single match. Treated as immutable once a match starts."""
    sets_to_win: int = 2  # best of 3
    games_per_set: int = 6
    tiebreak_enabled: bool = True
    coach_budget: int = 3
    coach_system_enabled: bool = True
    tiebreak_points: int = 7
    instruction_choices: int = 5

    def validate(self) -> None:
        if self.sets_to_win <= 0:
            raise MatchConfigError(f"sets_to_win must be positive, got {self.sets_to_win}")
        if self.games_per_set <= 0:
            raise MatchConfigError(f"games_per_set must be positive, got {self.games_per_set}")
        if self.tiebreak_points <= 0:
            raise MatchConfigError(f"tiebreak_points must be positive, got {self.tiebreak_points}")
        if self.coach_budget < 0:
            raise MatchConfigError(f"coach_budget must not be negative, got {self.coach_budget}")
        if self.instruction_choices <= 0:
            raise MatchConfigError(
                f"instruction_choices must be positive, got {self.instruction_choices}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "sets_to_win": self.sets_to_win,
            "games_per_set": self.games_per_set,
            "tiebreak_enabled": self.tiebreak_enabled,
            "coach_budget": self.coach_budget,
            "coach_system_enabled": self.coach_system_enabled,
            "tiebreak_points": self.tiebreak_points,
            "instruction_choices": self.instruction_choices,
        }


@dataclass
class ActiveEffect:
    """An instruction effect still contributing to ratings."""
    instruction_id: str
    effects: EffectBonuses
    remaining_points: int
    succeeded: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "instruction_id": self.instruction_id,
            "effects": self.effects.to_dict(),
            "remaining_points": self.remaining_points,
            "succeeded": self.succeeded,
        }


@dataclass(frozen=True)
class InterventionOpportunity:
    """A high-leverage moment offered to the coach before a point."""
    type: InterventionType
    situation: InterventionSituation
    urgency: int  # 0..100
    description: str
    point_number: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "situation": self.situation.value,
            "urgency": self.urgency,
            "description": self.description,
            "point_number": self.point_number,
        }


@dataclass(frozen=True)
class PointResult:
    """
    Outcome of one simulated point, with the rating components and the draw
    that produced it.
    """
    winner: Side
    reason: PointWinReason
    description: str
    was_influenced_by_instruction: bool
    home_attack: float
    away_attack: float
    home_defense: float
    away_defense: float
    success_rate: float
    roll: float
    # Diagnostics
    server: Side = Side.HOME
    point_number: int = 0
    critical: bool = False
    score_after: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "winner": self.winner.value,
            "reason": self.reason.value,
            "description": self.description,
            "was_influenced_by_instruction": self.was_influenced_by_instruction,
            "home_attack": self.home_attack,
            "away_attack": self.away_attack,
            "home_defense": self.home_defense,
            "away_defense": self.away_defense,
            "success_rate": self.success_rate,
            "roll": self.roll,
            "server": self.server.value,
            "point_number": self.point_number,
            "critical": self.critical,
            "score_after": self.score_after,
        }


@dataclass(frozen=True)
class InterventionAck:
    """Returned by resolve_intervention."""
    skipped: bool
    success: bool
    message: str
    instruction_id: str | None = None
    budget_remaining: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "skipped": self.skipped,
            "success": self.success,
            "message": self.message,
            "instruction_id": self.instruction_id,
            "budget_remaining": self.budget_remaining,
        }


@dataclass
class MatchResult:
    """Aggregated summary of a finished (or abandoned) match."""
    winner: Side | None
    sets: list[SetScore]
    sets_won: tuple[int, int]  # (home, away)
    total_points: tuple[int, int]  # points won (home, away)
    interventions_used: int
    reasons: dict[str, int] = field(default_factory=dict)
    mvp: Side | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "winner": self.winner.value if self.winner else None,
            "sets": [s.to_dict() for s in self.sets],
            "sets_won": list(self.sets_won),
            "total_points": list(self.total_points),
            "interventions_used": self.interventions_used,
            "reasons": dict(self.reasons),
            "mvp": self.mvp.value if self.mvp else None,
        }


class InstructionCategory(str, Enum):
    OFFENSIVE = "offensive"
    DEFENSIVE = "defensive"
    MENTAL = "mental"
    STAMINA = "stamina"
    TACTICAL = "tactical"
    EMERGENCY = "emergency"


class InstructionEffectiveness(str, Enum):
    BASIC = "basic"
    ADVANCED = "advanced"
    RISKY = "risky"
    EMERGENCY = "emergency"


@dataclass(frozen=True)
class CoachInstruction:
    """
    Catalog entry for a coaching instruction. Read-only input to the engine.
    effects are granted (times success_multiplier) for `duration` points on
    success; on failure only failure_penalty is applied to mental.
    """
    id: str
    name: str
    description: str
    category: InstructionCategory
    effectiveness: InstructionEffectiveness
    effects: EffectBonuses
    duration: int  # points
    success_rate: float  # 0..1
    success_multiplier: float
    failure_penalty: float
    situation_requirements: tuple[InterventionSituation, ...] = ()

    def allowed_in(self, situation: InterventionSituation) -> bool:
        return not self.situation_requirements or situation in self.situation_requirements

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "effectiveness": self.effectiveness.value,
            "effects": self.effects.to_dict(),
            "duration": self.duration,
            "success_rate": self.success_rate,
            "success_multiplier": self.success_multiplier,
            "failure_penalty": self.failure_penalty,
            "situation_requirements": [s.value for s in self.situation_requirements],
        }
