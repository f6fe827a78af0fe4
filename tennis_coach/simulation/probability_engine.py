"""
Probability Engine: turns aggregated ratings into the server's chance of
winning the point.
Inputs: match state (server/receiver, gauges) and per-side EffectBonuses.
Output: rating components, clamped success rate, critical and error rates.
"""
from __future__ import annotations

from dataclasses import dataclass

from .aggregator import side_bonuses
from .profiles import Player
from .schemas import EffectBonuses, Side
from .state_tracker import MatchState

MIN_SUCCESS_RATE = 0.05
MAX_SUCCESS_RATE = 0.95
BASE_ERROR_RATE = 0.15


def clamp_success(p: float) -> float:
    return max(MIN_SUCCESS_RATE, min(MAX_SUCCESS_RATE, p))


@dataclass(frozen=True)
class SideRatings:
    attack: float
    defense: float
    net: float  # volley capability
    baseline: float  # stroke capability
    critical_rate: float  # 0..1


@dataclass(frozen=True)
class OutcomeProbs:
    """Structured probabilities for diagnostics and sampling."""
    server: Side
    home: SideRatings
    away: SideRatings
    success_rate: float  # P(server wins the point)
    error_rate: float  # P(receiver's point comes from a server error)
    influenced_by_instruction: bool

    def ratings(self, side: Side) -> SideRatings:
        return self.home if side is Side.HOME else self.away


def _side_ratings(player: Player, bonus: EffectBonuses, serving: bool) -> SideRatings:
    s = player.stats
    serve = s.serve + bonus.serve
    receive = s.receive + bonus.receive
    volley = s.volley + bonus.volley
    stroke = s.stroke + bonus.stroke
    if serving:
        attack = serve
        defense = (stroke + volley) / 2  # holding the rally after the serve
    else:
        attack = (receive + stroke) / 2  # counter-attack off the return
        defense = receive
    return SideRatings(
        attack=attack,
        defense=defense,
        net=volley,
        baseline=stroke,
        critical_rate=max(0.0, bonus.critical_rate) * 0.01,
    )


class ProbabilityEngine:
    """
    success = 0.5 + (attack - defense) * rating_scale + mental - stamina
              + (server success bonus - receiver success bonus) * bonus_scale
    clamped to [0.05, 0.95].
    """

    def __init__(
        self,
        rating_scale: float = 0.0075,
        bonus_scale: float = 0.01,
        stamina_scale: float = 0.0005,
        mental_scale: float = 0.0008,
    ) -> None:
        self.rating_scale = rating_scale
        self.bonus_scale = bonus_scale
        self.stamina_scale = stamina_scale
        self.mental_scale = mental_scale

    def compute(self, state: MatchState) -> OutcomeProbs:
        server_side = state.server
        receiver_side = state.receiver
        bonuses = {side: side_bonuses(state, side) for side in (Side.HOME, Side.AWAY)}
        ratings = {
            side: _side_ratings(state.player(side), bonuses[side], side is server_side)
            for side in (Side.HOME, Side.AWAY)
        }
        server = state.player(server_side)
        b_server = bonuses[server_side]
        b_receiver = bonuses[receiver_side]

        stamina_penalty = max(0.0, 100.0 - server.current_stamina - b_server.stamina) * self.stamina_scale
        effective_mental = server.current_mental + b_server.mental - b_receiver.opponent_pressure
        mental_adjustment = (effective_mental - 50.0) * self.mental_scale

        success = 0.5 + (
            ratings[server_side].attack - ratings[receiver_side].defense
        ) * self.rating_scale
        success += mental_adjustment - stamina_penalty
        success += (b_server.success_rate_bonus - b_receiver.success_rate_bonus) * self.bonus_scale

        error_rate = max(0.0, BASE_ERROR_RATE - b_receiver.error_reduction * 0.01)

        return OutcomeProbs(
            server=server_side,
            home=ratings[Side.HOME],
            away=ratings[Side.AWAY],
            success_rate=clamp_success(success),
            error_rate=error_rate,
            influenced_by_instruction=bool(state.active_effects),
        )
