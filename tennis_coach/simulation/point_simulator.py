"""
Point Simulator: uses Probability Engine + seeded RNG to resolve one point.
Exactly three draws are taken per point (outcome, critical, error) before the
reason is chosen, so the RNG stream advances identically whatever happens.
"""
from __future__ import annotations

import logging

from .probability_engine import OutcomeProbs, ProbabilityEngine
from .rng import SeededRNG
from .schemas import PointResult, PointWinReason, Side
from .state_tracker import MatchState

logger = logging.getLogger(__name__)

# Share of critical server points (by roll) that become aces; the rest are
# service winners, keeping aces the rarer of the two.
ACE_SHARE = 0.3
# Server mental below this turns a server error into a mental break.
MENTAL_BREAK_THRESHOLD = 25.0

DRAWS_PER_POINT = 3


def classify_point(
    probs: OutcomeProbs,
    state: MatchState,
    roll: float,
    critical_roll: float,
    error_roll: float,
) -> tuple[Side, PointWinReason, bool]:
    """
    Pure: (winner, reason, critical) from already-drawn randomness.
    Server-side reasons: ace, service winner, volley/stroke winner.
    Receiver-side reasons: mental break, opponent error, return winner,
    volley/stroke winner.
    """
    server = probs.server
    server_wins = roll < probs.success_rate
    winner = server if server_wins else server.other
    winner_ratings = probs.ratings(winner)
    critical = critical_roll < winner_ratings.critical_rate
    rally_reason = (
        PointWinReason.VOLLEY_WINNER
        if winner_ratings.net > winner_ratings.baseline
        else PointWinReason.STROKE_WINNER
    )

    if server_wins:
        if critical and roll < probs.success_rate * ACE_SHARE:
            return winner, PointWinReason.ACE, critical
        if critical:
            return winner, PointWinReason.SERVICE_WINNER, critical
        return winner, rally_reason, critical

    if error_roll < probs.error_rate:
        if state.player(server).current_mental < MENTAL_BREAK_THRESHOLD:
            return winner, PointWinReason.MENTAL_BREAK, critical
        return winner, PointWinReason.OPPONENT_ERROR, critical
    if critical:
        return winner, PointWinReason.RETURN_WINNER, critical
    return winner, rally_reason, critical


def describe_point(state: MatchState, winner: Side, reason: PointWinReason) -> str:
    name = state.player(winner).name
    loser = state.player(winner.other).name
    if reason is PointWinReason.ACE:
        return f"{name} fires an unreturnable ace!"
    if reason is PointWinReason.SERVICE_WINNER:
        return f"Service winner from {name}."
    if reason is PointWinReason.RETURN_WINNER:
        return f"{name} rips a return winner past {loser}!"
    if reason is PointWinReason.VOLLEY_WINNER:
        return f"{name} finishes at the net with a crisp volley."
    if reason is PointWinReason.OPPONENT_ERROR:
        return f"Error from {loser}; point to {name}."
    if reason is PointWinReason.MENTAL_BREAK:
        return f"{loser} cracks under pressure and hands {name} the point."
    return f"{name} wins the baseline rally."


class PointSimulator:
    """
    Resolves one point against the current state. Does not mutate the state;
    the orchestrator applies the score and condition updates.
    """

    def __init__(self, prob_engine: ProbabilityEngine, rng: SeededRNG) -> None:
        self.prob_engine = prob_engine
        self.rng = rng

    def resolve(self, state: MatchState) -> PointResult:
        probs = self.prob_engine.compute(state)
        roll = self.rng.random()
        critical_roll = self.rng.random()
        error_roll = self.rng.random()
        winner, reason, critical = classify_point(probs, state, roll, critical_roll, error_roll)
        logger.debug(
            "Point %d: server=%s p=%.3f roll=%.3f -> %s (%s)",
            state.point_number,
            probs.server.value,
            probs.success_rate,
            roll,
            winner.value,
            reason.value,
        )
        return PointResult(
            winner=winner,
            reason=reason,
            description=describe_point(state, winner, reason),
            was_influenced_by_instruction=probs.influenced_by_instruction,
            home_attack=probs.home.attack,
            away_attack=probs.away.attack,
            home_defense=probs.home.defense,
            away_defense=probs.away.defense,
            success_rate=probs.success_rate,
            roll=roll,
            server=probs.server,
            point_number=state.point_number,
            critical=critical,
        )
