"""
Match Orchestrator: the call-by-call surface of the simulator.
initialize_match / advance_point / resolve_intervention operate on a
caller-owned MatchState. advance_point either resolves one point or stops
before it with an InterventionOpportunity that must be resolved first.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterator

from .errors import MatchStateError
from .fatigue_model import ConditionModel
from .instruction_engine import apply_instruction, decay_effects, skip_intervention, validate_choice
from .intervention import detect
from .point_simulator import PointSimulator
from .probability_engine import ProbabilityEngine
from .profiles import Player
from .rng import SeededRNG
from .schemas import (
    CoachInstruction,
    InterventionAck,
    InterventionOpportunity,
    MatchConfig,
    PointResult,
)
from .scoring import apply_point
from .state_tracker import MatchState, score_label

logger = logging.getLogger(__name__)

# Decision callback for MatchOrchestrator.run: given the opportunity, return
# the instruction to apply, or None to skip.
DecisionFn = Callable[[MatchState, InterventionOpportunity], "CoachInstruction | None"]


def initialize_match(home: Player, away: Player, config: MatchConfig | None = None) -> MatchState:
    """Fresh match: no sets played, full coach budget, home serves first."""
    config = config or MatchConfig()
    config.validate()
    if home is away or home.id == away.id:
        raise ValueError("Home and away must be different players")
    for player in (home, away):
        player.stats.validate()
        player.reset_condition()
    state = MatchState(home=home, away=away, config=config)
    state.coach_budget_remaining = config.coach_budget
    logger.info(
        "Match initialised: %s vs %s (first to %d sets, %d games per set)",
        home.name,
        away.name,
        config.sets_to_win,
        config.games_per_set,
    )
    return state


def coaching_available(state: MatchState) -> bool:
    return state.config.coach_system_enabled and state.coach_budget_remaining > 0


def advance_point(
    state: MatchState,
    rng: SeededRNG,
    prob_engine: ProbabilityEngine | None = None,
    condition_model: ConditionModel | None = None,
) -> PointResult | InterventionOpportunity:
    """
    Play the next point, or return an opportunity (without playing) when the
    detector fires and the coach still has budget.
    """
    if state.is_match_complete:
        raise MatchStateError("Match is already complete")
    if state.pending_opportunity is not None:
        raise MatchStateError("An intervention is pending; resolve it before the next point")

    if coaching_available(state):
        opportunity = detect(state)
        if opportunity is not None:
            state.pending_opportunity = opportunity
            logger.info(
                "Opportunity at point %d: %s (%s)",
                state.point_number,
                opportunity.situation.value,
                opportunity.type.value,
            )
            return opportunity

    simulator = PointSimulator(prob_engine or ProbabilityEngine(), rng)
    result = simulator.resolve(state)
    apply_point(state, result.winner)
    state.momentum.record_point(result.winner)
    (condition_model or ConditionModel()).update_after_point(state, result.winner, rng)
    decay_effects(state)
    state.point_number += 1
    return replace(result, score_after=score_label(state))


def resolve_intervention(
    state: MatchState,
    instruction: CoachInstruction | None,
    rng: SeededRNG,
) -> InterventionAck:
    """
    Answer the pending opportunity. None means skip (also used for a timed-out
    decision). An invalid instruction is rejected and the opportunity stays
    pending.
    """
    opportunity = state.pending_opportunity
    if opportunity is None:
        raise MatchStateError("No intervention is pending")
    if instruction is None:
        ack = skip_intervention(state)
    else:
        validate_choice(state, instruction, opportunity)
        ack = apply_instruction(state, instruction, rng)
    state.pending_opportunity = None
    return ack


class MatchOrchestrator:
    """
    Owns the RNG and engines for one match and drives it point-by-point.
    run() plays to completion, consulting `decide` at each opportunity.
    """

    def __init__(
        self,
        state: MatchState,
        seed: int | None = None,
        rng: SeededRNG | None = None,
        prob_engine: ProbabilityEngine | None = None,
        condition_model: ConditionModel | None = None,
    ) -> None:
        self.state = state
        self.rng = rng or SeededRNG(seed)
        self.prob_engine = prob_engine or ProbabilityEngine()
        self.condition_model = condition_model or ConditionModel()
        self.history: list[PointResult] = []

    def advance(self) -> PointResult | InterventionOpportunity:
        outcome = advance_point(self.state, self.rng, self.prob_engine, self.condition_model)
        if isinstance(outcome, PointResult):
            self.history.append(outcome)
        return outcome

    def resolve(self, instruction: CoachInstruction | None) -> InterventionAck:
        return resolve_intervention(self.state, instruction, self.rng)

    def run(
        self,
        decide: DecisionFn | None = None,
        on_point: Callable[[PointResult], None] | None = None,
        max_points: int | None = None,
    ) -> Iterator[PointResult]:
        """
        Play until the match ends (or max_points points). Yields each
        PointResult. Without `decide` every opportunity is skipped.
        """
        played = 0
        while not self.state.is_match_complete:
            if max_points is not None and played >= max_points:
                break
            outcome = self.advance()
            if isinstance(outcome, InterventionOpportunity):
                choice = decide(self.state, outcome) if decide else None
                self.resolve(choice)
                continue
            played += 1
            if on_point:
                on_point(outcome)
            yield outcome
