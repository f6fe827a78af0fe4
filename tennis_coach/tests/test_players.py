"""Ability catalog, random player generation and player rating."""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from tennis_coach.abilities import RARITY_WEIGHTS, get_ability, list_abilities, random_abilities
from tennis_coach.players import (
    PLAYER_NAMES,
    PlayStyle,
    calculate_player_rating,
    generate_players,
    generate_preset_players,
    generate_random_player,
)
from tennis_coach.simulation.profiles import AbilityRarity, Player, PlayerStats
from tennis_coach.simulation.rng import SeededRNG


class TestAbilityCatalog:
    def test_catalog_size_and_lookup(self):
        abilities = list_abilities()
        assert len(abilities) == 18
        assert len({a.id for a in abilities}) == 18
        assert get_ability("power_serve").effects.serve == 15
        assert get_ability("nope") is None

    def test_every_rarity_weighted(self):
        assert set(RARITY_WEIGHTS) == set(AbilityRarity)
        assert {a.rarity for a in list_abilities()} <= set(RARITY_WEIGHTS)

    def test_random_abilities_distinct(self):
        picks = random_abilities(SeededRNG(6), count=5)
        assert len(picks) == 5
        assert len({a.id for a in picks}) == 5

    def test_ability_to_dict(self):
        d = get_ability("clutch_serve").to_dict()
        assert d["rarity"] == "epic"
        assert d["situational"]["break_point"] == 20
        assert d["effects"]["serve"] == 8


class TestPlayerGeneration:
    @pytest.mark.parametrize("seed", range(10))
    def test_generated_player_is_valid(self, seed):
        player = generate_random_player(SeededRNG(seed))
        player.stats.validate()
        assert player.name in PLAYER_NAMES
        assert 2 <= len(player.special_abilities) <= 4
        assert len({a.id for a in player.special_abilities}) == len(player.special_abilities)
        assert player.id.startswith("player_")
        assert player.current_stamina == player.stats.stamina

    def test_extreme_levels_clamped(self):
        low = generate_random_player(SeededRNG(1), level=5, style=PlayStyle.POWER)
        high = generate_random_player(SeededRNG(1), level=120, style=PlayStyle.MENTAL)
        low.stats.validate()
        high.stats.validate()
        assert high.stats.mental == 100

    def test_same_seed_same_player(self):
        a = generate_random_player(SeededRNG(31))
        b = generate_random_player(SeededRNG(31))
        assert a.to_dict() == b.to_dict()

    def test_preset_pair(self):
        home, away = generate_preset_players(SeededRNG(8))
        assert home.name == "Ace Home"
        assert away.name == "Rival Away"
        assert home.id != away.id

    def test_roster(self):
        roster = generate_players(SeededRNG(2), 6, (60, 80))
        assert len(roster) == 6
        for p in roster:
            p.stats.validate()


class TestPlayerRating:
    def test_no_abilities_is_average(self):
        p = Player(id="p", name="P", stats=PlayerStats(60, 70, 80, 60, 70, 80))
        assert calculate_player_rating(p) == pytest.approx(70)

    def test_abilities_and_rarity(self):
        common = [a for a in list_abilities() if a.rarity is AbilityRarity.COMMON][0]
        legendary = [a for a in list_abilities() if a.rarity is AbilityRarity.LEGENDARY][0]
        p = Player(id="p", name="P", stats=PlayerStats(70, 70, 70, 70, 70, 70),
                   special_abilities=[common, legendary])
        assert calculate_player_rating(p) == pytest.approx(70 + 4 + 1 + 8)

    def test_capped_at_100(self):
        p = Player(id="p", name="P", stats=PlayerStats(100, 100, 100, 100, 100, 100),
                   special_abilities=list_abilities()[:4])
        assert calculate_player_rating(p) == 100
