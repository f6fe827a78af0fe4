"""
Coach instruction catalog and candidate generation.
Candidates for an opportunity are drawn without replacement, weighted by how
well each instruction's category suits the situation. Instructions already
used this match, or whose situation requirements are not met, are never
offered.
"""
from __future__ import annotations

from tennis_coach.simulation.rng import SeededRNG
from tennis_coach.simulation.schemas import (
    CoachInstruction,
    EffectBonuses,
    InstructionCategory,
    InstructionEffectiveness,
    InterventionOpportunity,
    InterventionSituation,
)

DEFAULT_CHOICES = 5
DEFAULT_CATEGORY_WEIGHT = 10

# ---------- Catalog ----------

COACH_INSTRUCTIONS: dict[str, CoachInstruction] = {i.id: i for i in [
    # Offensive
    CoachInstruction(
        id="serve_and_volley",
        name="Serve & Volley",
        description="Follow the serve straight to the net and finish it there.",
        category=InstructionCategory.OFFENSIVE,
        effectiveness=InstructionEffectiveness.ADVANCED,
        effects=EffectBonuses(serve=15, volley=10, critical_rate=8),
        duration=1,
        success_rate=0.65,
        success_multiplier=1.2,
        failure_penalty=-3,
    ),
    CoachInstruction(
        id="power_baseline",
        name="Power Baseline",
        description="Step in and hammer the groundstrokes.",
        category=InstructionCategory.OFFENSIVE,
        effectiveness=InstructionEffectiveness.BASIC,
        effects=EffectBonuses(stroke=12, success_rate_bonus=5),
        duration=2,
        success_rate=0.80,
        success_multiplier=1.0,
        failure_penalty=-2,
    ),
    # Defensive
    CoachInstruction(
        id="defensive_wall",
        name="Defensive Wall",
        description="Get every ball back and let them miss.",
        category=InstructionCategory.DEFENSIVE,
        effectiveness=InstructionEffectiveness.BASIC,
        effects=EffectBonuses(receive=15, volley=8, error_reduction=20),
        duration=2,
        success_rate=0.85,
        success_multiplier=1.0,
        failure_penalty=-1,
    ),
    CoachInstruction(
        id="patience_game",
        name="Patience Game",
        description="Stay in the rally and wait for the short ball.",
        category=InstructionCategory.DEFENSIVE,
        effectiveness=InstructionEffectiveness.ADVANCED,
        effects=EffectBonuses(receive=10, stroke=8, mental=5),
        duration=2,
        success_rate=0.70,
        success_multiplier=1.1,
        failure_penalty=-2,
    ),
    # Mental
    CoachInstruction(
        id="mental_reset",
        name="Mental Reset",
        description="Deep breath. Reset and play the next point clean.",
        category=InstructionCategory.MENTAL,
        effectiveness=InstructionEffectiveness.BASIC,
        effects=EffectBonuses(mental=12, error_reduction=15),
        duration=1,
        success_rate=0.90,
        success_multiplier=1.0,
        failure_penalty=0,
    ),
    CoachInstruction(
        id="fighting_spirit",
        name="Fighting Spirit",
        description="Play with fire. Risky, but huge if it lands.",
        category=InstructionCategory.MENTAL,
        effectiveness=InstructionEffectiveness.RISKY,
        effects=EffectBonuses(serve=10, stroke=10, mental=8, critical_rate=15),
        duration=1,
        success_rate=0.50,
        success_multiplier=1.5,
        failure_penalty=-5,
    ),
    # Tactical
    CoachInstruction(
        id="tempo_change",
        name="Tempo Change",
        description="Break the rhythm and unsettle the opponent.",
        category=InstructionCategory.TACTICAL,
        effectiveness=InstructionEffectiveness.ADVANCED,
        effects=EffectBonuses(opponent_pressure=8, success_rate_bonus=6),
        duration=2,
        success_rate=0.75,
        success_multiplier=1.1,
        failure_penalty=-2,
    ),
    CoachInstruction(
        id="target_weakness",
        name="Target the Weakness",
        description="Go after the weaker wing relentlessly.",
        category=InstructionCategory.TACTICAL,
        effectiveness=InstructionEffectiveness.ADVANCED,
        effects=EffectBonuses(stroke=8, volley=8, critical_rate=12),
        duration=1,
        success_rate=0.60,
        success_multiplier=1.3,
        failure_penalty=-3,
    ),
    # Emergency
    CoachInstruction(
        id="miracle_shot",
        name="Miracle Shot",
        description="Believe and go for the impossible shot.",
        category=InstructionCategory.EMERGENCY,
        effectiveness=InstructionEffectiveness.EMERGENCY,
        effects=EffectBonuses(serve=20, stroke=20, critical_rate=25),
        duration=1,
        success_rate=0.40,
        success_multiplier=2.0,
        failure_penalty=-8,
    ),
    CoachInstruction(
        id="last_stand",
        name="Last Stand",
        description="Back to the wall, everything on one point.",
        category=InstructionCategory.EMERGENCY,
        effectiveness=InstructionEffectiveness.EMERGENCY,
        effects=EffectBonuses(serve=15, receive=15, volley=15, stroke=15, mental=10),
        duration=1,
        success_rate=0.35,
        success_multiplier=2.5,
        failure_penalty=-10,
        situation_requirements=(
            InterventionSituation.MATCH_POINT_AGAINST,
            InterventionSituation.SET_POINT_AGAINST,
        ),
    ),
]}

# ---------- Situation x category weights ----------

_S = InterventionSituation
_C = InstructionCategory

SITUATION_WEIGHTS: dict[InterventionSituation, dict[InstructionCategory, int]] = {
    _S.BREAK_POINT_AGAINST: {_C.OFFENSIVE: 20, _C.DEFENSIVE: 40, _C.MENTAL: 30, _C.STAMINA: 10, _C.TACTICAL: 15, _C.EMERGENCY: 5},
    _S.BREAK_POINT_FOR: {_C.OFFENSIVE: 40, _C.DEFENSIVE: 15, _C.MENTAL: 25, _C.STAMINA: 5, _C.TACTICAL: 30, _C.EMERGENCY: 10},
    _S.SET_POINT_AGAINST: {_C.OFFENSIVE: 15, _C.DEFENSIVE: 35, _C.MENTAL: 40, _C.STAMINA: 10, _C.TACTICAL: 20, _C.EMERGENCY: 15},
    _S.SET_POINT_FOR: {_C.OFFENSIVE: 35, _C.DEFENSIVE: 10, _C.MENTAL: 30, _C.STAMINA: 5, _C.TACTICAL: 25, _C.EMERGENCY: 20},
    _S.MATCH_POINT_AGAINST: {_C.OFFENSIVE: 10, _C.DEFENSIVE: 25, _C.MENTAL: 30, _C.STAMINA: 5, _C.TACTICAL: 15, _C.EMERGENCY: 40},
    _S.MATCH_POINT_FOR: {_C.OFFENSIVE: 30, _C.DEFENSIVE: 5, _C.MENTAL: 35, _C.STAMINA: 5, _C.TACTICAL: 20, _C.EMERGENCY: 25},
    _S.TIEBREAK: {_C.OFFENSIVE: 25, _C.DEFENSIVE: 25, _C.MENTAL: 35, _C.STAMINA: 15, _C.TACTICAL: 20, _C.EMERGENCY: 10},
    _S.MOMENTUM_SHIFT: {_C.OFFENSIVE: 30, _C.DEFENSIVE: 20, _C.MENTAL: 25, _C.STAMINA: 10, _C.TACTICAL: 35, _C.EMERGENCY: 5},
    _S.STAMINA_LOW: {_C.OFFENSIVE: 5, _C.DEFENSIVE: 25, _C.MENTAL: 20, _C.STAMINA: 40, _C.TACTICAL: 10, _C.EMERGENCY: 15},
    _S.MENTAL_PRESSURE: {_C.OFFENSIVE: 15, _C.DEFENSIVE: 20, _C.MENTAL: 45, _C.STAMINA: 15, _C.TACTICAL: 25, _C.EMERGENCY: 10},
}


def get_instruction(instruction_id: str) -> CoachInstruction | None:
    return COACH_INSTRUCTIONS.get(instruction_id)


def list_instructions() -> list[CoachInstruction]:
    return list(COACH_INSTRUCTIONS.values())


def eligible_instructions(
    opportunity: InterventionOpportunity,
    used_instructions: list[str] | tuple[str, ...] = (),
) -> list[CoachInstruction]:
    used = set(used_instructions)
    return [
        i for i in COACH_INSTRUCTIONS.values()
        if i.id not in used and i.allowed_in(opportunity.situation)
    ]


def generate_instruction_choices(
    opportunity: InterventionOpportunity,
    used_instructions: list[str] | tuple[str, ...],
    rng: SeededRNG,
    count: int = DEFAULT_CHOICES,
) -> list[CoachInstruction]:
    """Up to `count` distinct eligible instructions, weighted by situation fit."""
    pool = eligible_instructions(opportunity, used_instructions)
    weights_by_category = SITUATION_WEIGHTS.get(opportunity.situation, {})
    selected: list[CoachInstruction] = []
    while pool and len(selected) < count:
        weights = [weights_by_category.get(i.category, DEFAULT_CATEGORY_WEIGHT) for i in pool]
        pick = rng.choices(pool, weights=weights, k=1)[0]
        selected.append(pick)
        pool.remove(pick)
    return selected
