"""
Match summary from the final state and the caller's point history.
"""
from __future__ import annotations

from collections import Counter

from .schemas import MatchResult, PointResult, PointWinReason, SetScore, Side
from .state_tracker import MatchState, sets_won

# Reasons that count as a clean winner for MVP purposes.
WINNER_REASONS = frozenset({
    PointWinReason.ACE,
    PointWinReason.SERVICE_WINNER,
    PointWinReason.RETURN_WINNER,
    PointWinReason.VOLLEY_WINNER,
    PointWinReason.STROKE_WINNER,
})


def summarize_match(state: MatchState, history: list[PointResult]) -> MatchResult:
    """
    Build MatchResult. MVP is the side with more clean winners; ties go to
    the match winner.
    """
    points = Counter(r.winner for r in history)
    winners = Counter(r.winner for r in history if r.reason in WINNER_REASONS)
    reasons = Counter(r.reason.value for r in history)
    if winners[Side.HOME] > winners[Side.AWAY]:
        mvp: Side | None = Side.HOME
    elif winners[Side.AWAY] > winners[Side.HOME]:
        mvp = Side.AWAY
    else:
        mvp = state.winner
    return MatchResult(
        winner=state.winner,
        sets=[SetScore(s.home, s.away) for s in state.sets],
        sets_won=(sets_won(state, Side.HOME), sets_won(state, Side.AWAY)),
        total_points=(points[Side.HOME], points[Side.AWAY]),
        interventions_used=len(state.used_instructions),
        reasons=dict(reasons),
        mvp=mvp,
    )
