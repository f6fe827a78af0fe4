"""
Coached tennis match simulator: scoring state machine, point resolver,
intervention detector and instruction effects. Deterministic under a seeded
RNG; no I/O.
"""
from .errors import InvalidInstructionError, MatchConfigError, MatchStateError
from .schemas import (
    ActiveEffect,
    CoachInstruction,
    EffectBonuses,
    GameScore,
    GameStatus,
    InstructionCategory,
    InstructionEffectiveness,
    InterventionAck,
    InterventionOpportunity,
    InterventionSituation,
    InterventionType,
    MatchConfig,
    MatchResult,
    PointResult,
    PointWinReason,
    SetScore,
    Side,
    TiebreakScore,
)
from .profiles import (
    AbilityCategory,
    AbilityRarity,
    Player,
    PlayerStats,
    SituationalBonuses,
    SpecialAbility,
)
from .rng import ScriptedRNG, SeededRNG
from .state_tracker import (
    MatchState,
    MomentumState,
    is_break_point,
    is_match_point,
    is_set_point,
    is_tiebreak,
    score_label,
    sets_won,
)
from .scoring import ScoreUpdate, apply_point, set_won
from .aggregator import (
    SituationFlags,
    calculate_ability_effects,
    calculate_instruction_effects,
    side_bonuses,
)
from .probability_engine import OutcomeProbs, ProbabilityEngine
from .point_simulator import PointSimulator, classify_point
from .intervention import detect
from .instruction_engine import apply_instruction, decay_effects, skip_intervention
from .fatigue_model import ConditionModel
from .orchestrator import (
    MatchOrchestrator,
    advance_point,
    initialize_match,
    resolve_intervention,
)
from .summary import summarize_match
from .autoplay import AutoPlayConfig, AutoPlayer, AutoPlayMode, AutoPlayOutcome, StopReason, async_auto_play

__all__ = [
    "InvalidInstructionError",
    "MatchConfigError",
    "MatchStateError",
    "ActiveEffect",
    "CoachInstruction",
    "EffectBonuses",
    "GameScore",
    "GameStatus",
    "InstructionCategory",
    "InstructionEffectiveness",
    "InterventionAck",
    "InterventionOpportunity",
    "InterventionSituation",
    "InterventionType",
    "MatchConfig",
    "MatchResult",
    "PointResult",
    "PointWinReason",
    "SetScore",
    "Side",
    "TiebreakScore",
    "AbilityCategory",
    "AbilityRarity",
    "Player",
    "PlayerStats",
    "SituationalBonuses",
    "SpecialAbility",
    "ScriptedRNG",
    "SeededRNG",
    "MatchState",
    "MomentumState",
    "is_break_point",
    "is_match_point",
    "is_set_point",
    "is_tiebreak",
    "score_label",
    "sets_won",
    "ScoreUpdate",
    "apply_point",
    "set_won",
    "SituationFlags",
    "calculate_ability_effects",
    "calculate_instruction_effects",
    "side_bonuses",
    "OutcomeProbs",
    "ProbabilityEngine",
    "PointSimulator",
    "classify_point",
    "detect",
    "apply_instruction",
    "decay_effects",
    "skip_intervention",
    "ConditionModel",
    "MatchOrchestrator",
    "advance_point",
    "initialize_match",
    "resolve_intervention",
    "summarize_match",
    "AutoPlayConfig",
    "AutoPlayer",
    "AutoPlayMode",
    "AutoPlayOutcome",
    "StopReason",
    "async_auto_play",
]
