"""
Condition Model: per-point stamina drain and mental swings for both players.
Runs after scoring; the resolver reads the gauges on the next point.
"""
from __future__ import annotations

from dataclasses import dataclass

from .aggregator import calculate_ability_effects
from .profiles import Player
from .rng import SeededRNG
from .schemas import Side
from .state_tracker import MatchState


@dataclass
class ConditionModel:
    """
    Stamina: both players lose min_drain..max_drain per point (one shared
    draw), reduced by the player's stamina ability bonus, at most halved.
    Mental: point winner +mental_gain, loser -mental_loss.
    """
    min_drain: float = 1.0
    max_drain: float = 3.0
    mental_gain: float = 3.0
    mental_loss: float = 4.0
    max_drain_reduction: float = 0.5

    def drain_factor(self, player: Player) -> float:
        bonus = calculate_ability_effects(player.special_abilities).stamina
        return 1.0 - min(self.max_drain_reduction, max(0.0, bonus) / 100.0)

    def update_after_point(self, state: MatchState, winner: Side, rng: SeededRNG) -> None:
        drain = self.min_drain + rng.random() * (self.max_drain - self.min_drain)
        for side in (Side.HOME, Side.AWAY):
            player = state.player(side)
            player.adjust_stamina(-drain * self.drain_factor(player))
        state.player(winner).adjust_mental(self.mental_gain)
        state.player(winner.other).adjust_mental(-self.mental_loss)
