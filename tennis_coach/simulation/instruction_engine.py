"""
Instruction Effect Engine: resolves a chosen coaching instruction and manages
the lifecycle of active effects (grant, decay).
"""
from __future__ import annotations

import logging

from .errors import InvalidInstructionError
from .rng import SeededRNG
from .schemas import (
    ActiveEffect,
    CoachInstruction,
    EffectBonuses,
    InterventionAck,
    InterventionOpportunity,
)
from .state_tracker import MatchState

logger = logging.getLogger(__name__)


def validate_choice(
    state: MatchState,
    instruction: CoachInstruction,
    opportunity: InterventionOpportunity | None,
) -> None:
    """Raise InvalidInstructionError if the instruction may not be used now."""
    if state.coach_budget_remaining <= 0:
        raise InvalidInstructionError("No coach interventions left")
    if instruction.id in state.used_instructions:
        raise InvalidInstructionError(f"Instruction already used this match: {instruction.id}")
    if opportunity is not None and not instruction.allowed_in(opportunity.situation):
        required = ", ".join(s.value for s in instruction.situation_requirements)
        raise InvalidInstructionError(
            f"Instruction {instruction.id} requires one of [{required}], "
            f"not {opportunity.situation.value}"
        )


def apply_instruction(
    state: MatchState,
    instruction: CoachInstruction,
    rng: SeededRNG,
) -> InterventionAck:
    """
    Draw once against instruction.success_rate.
    Success: grant effects x success_multiplier for `duration` points.
    Failure: failure_penalty on mental for the next point only.
    Either way the instruction is spent and the cooldown restarts.
    """
    success = rng.random() < instruction.success_rate
    if success:
        effect = ActiveEffect(
            instruction_id=instruction.id,
            effects=instruction.effects.scaled(instruction.success_multiplier),
            remaining_points=instruction.duration,
            succeeded=True,
        )
        state.active_effects.append(effect)
        message = f"{instruction.name} worked! The player is fired up."
    else:
        if instruction.failure_penalty:
            state.active_effects.append(
                ActiveEffect(
                    instruction_id=instruction.id,
                    effects=EffectBonuses(mental=instruction.failure_penalty),
                    remaining_points=1,
                    succeeded=False,
                )
            )
        message = f"{instruction.name} backfired... the player looks confused."

    state.used_instructions.append(instruction.id)
    state.coach_budget_remaining -= 1
    state.last_intervention_point = state.point_number
    logger.info(
        "Instruction %s %s at point %d (budget left %d)",
        instruction.id,
        "succeeded" if success else "failed",
        state.point_number,
        state.coach_budget_remaining,
    )
    return InterventionAck(
        skipped=False,
        success=success,
        message=message,
        instruction_id=instruction.id,
        budget_remaining=state.coach_budget_remaining,
    )


def skip_intervention(state: MatchState) -> InterventionAck:
    """Declining still restarts the cooldown; no budget is spent."""
    state.last_intervention_point = state.point_number
    logger.info("Intervention skipped at point %d", state.point_number)
    return InterventionAck(
        skipped=True,
        success=False,
        message="No instruction given.",
        budget_remaining=state.coach_budget_remaining,
    )


def decay_effects(state: MatchState) -> None:
    """Once per completed point: count down and drop expired effects."""
    for effect in state.active_effects:
        effect.remaining_points -= 1
    state.active_effects = [e for e in state.active_effects if e.remaining_points > 0]
