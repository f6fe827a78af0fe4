"""
Random player generation and rating.

A generated player gets base stats around `level` (+-10), shifted by a
play-style profile, then clamped to [10, 100], plus 2-4 special abilities
drawn by rarity. All randomness comes from the injected RNG so a seed
reproduces the same roster.
"""
from __future__ import annotations

from enum import Enum

from tennis_coach.abilities import random_abilities
from tennis_coach.simulation.profiles import AbilityRarity, Player, PlayerStats
from tennis_coach.simulation.rng import SeededRNG

STAT_MIN = 10.0
STAT_MAX = 100.0
STAT_SPREAD = 20.0
STAT_NAMES = ("serve", "receive", "volley", "stroke", "mental", "stamina")


class PlayStyle(str, Enum):
    POWER = "power"
    TECHNICAL = "technical"
    DEFENSIVE = "defensive"
    BALANCED = "balanced"
    MENTAL = "mental"


# ---------- Style modifiers ----------

STYLE_MODIFIERS: dict[PlayStyle, dict[str, float]] = {
    PlayStyle.POWER: {"serve": 15, "stroke": 12, "volley": -5, "receive": -8, "mental": -5, "stamina": 5},
    PlayStyle.TECHNICAL: {"serve": 5, "stroke": 8, "volley": 15, "receive": 8, "mental": 12, "stamina": -10},
    PlayStyle.DEFENSIVE: {"serve": -8, "stroke": 5, "volley": -5, "receive": 15, "mental": 8, "stamina": 12},
    PlayStyle.BALANCED: {"serve": 2, "stroke": 2, "volley": 2, "receive": 2, "mental": 2, "stamina": 2},
    PlayStyle.MENTAL: {"serve": -5, "stroke": 3, "volley": 3, "receive": 5, "mental": 15, "stamina": 10},
}

RARITY_RATING_BONUS: dict[AbilityRarity, float] = {
    AbilityRarity.COMMON: 1,
    AbilityRarity.RARE: 2,
    AbilityRarity.EPIC: 4,
    AbilityRarity.LEGENDARY: 8,
}

PLAYER_NAMES = [
    "Ana Ferreira", "Bruno Keller", "Chiara Moretti", "Daniel Osei",
    "Elena Petrova", "Felix Andersson", "Grace Mbeki", "Hugo Laurent",
    "Ines Duarte", "Jonas Weber", "Kira Tanaka", "Luca Romano",
    "Maya Lindqvist", "Nikolai Sokolov", "Olivia Brennan", "Pablo Serrano",
    "Quinn Harper", "Rosa Delgado", "Stefan Novak", "Yuki Mori",
]


def _clamp_stat(value: float) -> float:
    return max(STAT_MIN, min(STAT_MAX, value))


def generate_random_player(
    rng: SeededRNG,
    level: float = 70,
    name: str | None = None,
    style: PlayStyle | None = None,
) -> Player:
    """Build a player around `level`. Draw order: name, style, six stats, ability count, abilities, id."""
    name = name or rng.choice(PLAYER_NAMES)
    style = style or rng.choice(list(PlayStyle))
    modifiers = STYLE_MODIFIERS[style]
    stats: dict[str, float] = {}
    for stat in STAT_NAMES:
        base = _clamp_stat(level + (rng.random() - 0.5) * STAT_SPREAD)
        stats[stat] = round(_clamp_stat(base + modifiers.get(stat, 0)), 1)
    abilities = random_abilities(rng, rng.randint(2, 4))
    player_id = f"player_{rng.randint(0, 16 ** 8 - 1):08x}"
    return Player(id=player_id, name=name, stats=PlayerStats(**stats), special_abilities=abilities)


def generate_preset_players(rng: SeededRNG) -> tuple[Player, Player]:
    """A slightly stronger home player against a close rival."""
    home = generate_random_player(rng, level=75, name="Ace Home")
    away = generate_random_player(rng, level=73, name="Rival Away")
    return home, away


def generate_players(rng: SeededRNG, count: int, level_range: tuple[float, float] = (60, 80)) -> list[Player]:
    low, high = level_range
    return [generate_random_player(rng, level=int(rng.uniform(low, high))) for _ in range(count)]


def calculate_player_rating(player: Player) -> float:
    """Average stat plus 2 per ability plus a rarity bonus, capped at 100."""
    ability_bonus = 2 * len(player.special_abilities)
    rarity_bonus = sum(RARITY_RATING_BONUS.get(a.rarity, 0) for a in player.special_abilities)
    return min(STAT_MAX, player.stats.average() + ability_bonus + rarity_bonus)
