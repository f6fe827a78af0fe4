"""
Scoring state machine: point -> game -> set -> match.
Deterministic given the point winner. Regular games use the 0/15/30/40 ladder
with deuce and advantage; at games_per_set-all (tiebreaks enabled) the set is
decided by a tiebreak game counted 0, 1, 2, ...
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import MatchStateError
from .schemas import GameScore, SetScore, Side, TiebreakScore
from .state_tracker import MatchState, is_tiebreak, sets_won

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreUpdate:
    """What a single point completed, if anything."""
    game_winner: Side | None = None
    set_winner: Side | None = None
    match_winner: Side | None = None


def set_won(games_home: int, games_away: int, to_win: int = 6, win_by: int = 2) -> Side | None:
    """Returns the side that has won the set on games alone, else None."""
    if games_home >= to_win and games_home - games_away >= win_by:
        return Side.HOME
    if games_away >= to_win and games_away - games_home >= win_by:
        return Side.AWAY
    return None


def advance_game_score(score: GameScore, winner: Side) -> tuple[GameScore, Side | None]:
    """
    One point in a regular game. Returns (new score, game winner or None).
    When the game is won the returned score is reset to 0-0.
    """
    home = score.home + (1 if winner is Side.HOME else 0)
    away = score.away + (1 if winner is Side.AWAY else 0)
    if (home >= 4 or away >= 4) and abs(home - away) >= 2:
        return GameScore(), Side.HOME if home > away else Side.AWAY
    if home >= 3 and away >= 3:
        # Deuce / advantage: keep indices at (3,3), (4,3) or (3,4)
        lead = home - away
        return GameScore(3 + max(lead, 0), 3 + max(-lead, 0)), None
    return GameScore(home, away), None


def advance_tiebreak_score(
    score: TiebreakScore, winner: Side, to_win: int = 7
) -> tuple[TiebreakScore, Side | None]:
    home = score.home + (1 if winner is Side.HOME else 0)
    away = score.away + (1 if winner is Side.AWAY else 0)
    if home >= to_win and home - away >= 2:
        return TiebreakScore(home, away), Side.HOME
    if away >= to_win and away - home >= 2:
        return TiebreakScore(home, away), Side.AWAY
    return TiebreakScore(home, away), None


def apply_point(state: MatchState, winner: Side) -> ScoreUpdate:
    """
    Apply one point won by `winner` to the running score.
    Toggles serve after each game (and within a tiebreak after the first
    point and every two points thereafter).
    """
    if state.is_match_complete:
        raise MatchStateError("Match is already complete")

    if state.tiebreak is not None:
        return _apply_tiebreak_point(state, winner)

    state.game, game_winner = advance_game_score(state.game, winner)
    if game_winner is None:
        return ScoreUpdate()
    state.current_set.add_game(game_winner)
    state.server = state.server.other
    logger.debug(
        "Game to %s (set %d-%d)", game_winner.value, state.current_set.home, state.current_set.away
    )
    set_winner = set_won(
        state.current_set.home, state.current_set.away, state.config.games_per_set
    )
    if set_winner is None:
        if is_tiebreak(state):
            state.tiebreak = TiebreakScore()
            state.tiebreak_first_server = state.server
            logger.info("Tiebreak at %d-%d", state.current_set.home, state.current_set.away)
        return ScoreUpdate(game_winner=game_winner)
    match_winner = _close_set(state, set_winner)
    return ScoreUpdate(game_winner=game_winner, set_winner=set_winner, match_winner=match_winner)


def _apply_tiebreak_point(state: MatchState, winner: Side) -> ScoreUpdate:
    tb, tb_winner = advance_tiebreak_score(state.tiebreak, winner, state.config.tiebreak_points)
    if tb_winner is None:
        state.tiebreak = tb
        # Serve changes after the first point, then every two points
        if tb.total % 2 == 1:
            state.server = state.server.other
        return ScoreUpdate()
    logger.debug("Tiebreak to %s %s", tb_winner.value, tb.label())
    state.current_set.add_game(tb_winner)
    # Whoever received first in the tiebreak serves the next set
    first_server = state.tiebreak_first_server or state.server
    state.server = first_server.other
    state.tiebreak = None
    state.tiebreak_first_server = None
    match_winner = _close_set(state, tb_winner)
    return ScoreUpdate(game_winner=tb_winner, set_winner=tb_winner, match_winner=match_winner)


def _close_set(state: MatchState, set_winner: Side) -> Side | None:
    """Archive the current set; complete the match if the set count is reached."""
    state.sets.append(SetScore(state.current_set.home, state.current_set.away))
    state.current_set = SetScore()
    state.game = GameScore()
    logger.info(
        "Set %d to %s (%d-%d)",
        len(state.sets),
        set_winner.value,
        state.sets[-1].home,
        state.sets[-1].away,
    )
    if sets_won(state, set_winner) >= state.config.sets_to_win:
        state.is_match_complete = True
        state.winner = set_winner
        logger.info("Match to %s after %d sets", set_winner.value, len(state.sets))
        return set_winner
    return None
