"""
Special ability catalog. Static, read-only data consumed by the simulator;
players equip an ordered subset drawn by rarity weight.
"""
from __future__ import annotations

from tennis_coach.simulation.profiles import (
    AbilityCategory,
    AbilityRarity,
    SituationalBonuses,
    SpecialAbility,
)
from tennis_coach.simulation.rng import SeededRNG
from tennis_coach.simulation.schemas import EffectBonuses

# ---------- Catalog ----------

SPECIAL_ABILITIES: dict[str, SpecialAbility] = {a.id: a for a in [
    # Serve
    SpecialAbility(
        id="power_serve",
        name="Power Serve",
        description="Serve pace rises sharply.",
        category=AbilityCategory.SERVE,
        rarity=AbilityRarity.COMMON,
        effects=EffectBonuses(serve=15, critical_rate=8),
    ),
    SpecialAbility(
        id="ace_master",
        name="Ace Master",
        description="Finds the lines for aces more often.",
        category=AbilityCategory.SERVE,
        rarity=AbilityRarity.RARE,
        effects=EffectBonuses(serve=12, critical_rate=15, success_rate_bonus=10),
    ),
    SpecialAbility(
        id="clutch_serve",
        name="Clutch Serve",
        description="Serves best when it matters most.",
        category=AbilityCategory.SERVE,
        rarity=AbilityRarity.EPIC,
        effects=EffectBonuses(serve=8),
        situational=SituationalBonuses(break_point=20, set_point=15, match_point=25),
    ),
    # Receive
    SpecialAbility(
        id="return_specialist",
        name="Return Specialist",
        description="Cleaner, deeper returns.",
        category=AbilityCategory.RECEIVE,
        rarity=AbilityRarity.COMMON,
        effects=EffectBonuses(receive=12, error_reduction=10),
    ),
    SpecialAbility(
        id="break_hunter",
        name="Break Hunter",
        description="Returns sharpen on break chances.",
        category=AbilityCategory.RECEIVE,
        rarity=AbilityRarity.RARE,
        effects=EffectBonuses(receive=8, success_rate_bonus=5),
        situational=SituationalBonuses(break_point=18),
    ),
    SpecialAbility(
        id="counter_puncher",
        name="Counter Puncher",
        description="Fights back hardest from behind.",
        category=AbilityCategory.RECEIVE,
        rarity=AbilityRarity.EPIC,
        effects=EffectBonuses(receive=10, critical_rate=12),
        situational=SituationalBonuses(behind=20),
    ),
    # Volley
    SpecialAbility(
        id="net_master",
        name="Net Master",
        description="At home at the net.",
        category=AbilityCategory.VOLLEY,
        rarity=AbilityRarity.COMMON,
        effects=EffectBonuses(volley=15, critical_rate=6),
    ),
    SpecialAbility(
        id="volley_artist",
        name="Volley Artist",
        description="Finishes points with touch volleys.",
        category=AbilityCategory.VOLLEY,
        rarity=AbilityRarity.RARE,
        effects=EffectBonuses(volley=12, critical_rate=18, success_rate_bonus=8),
    ),
    SpecialAbility(
        id="pressure_volley",
        name="Pressure Volley",
        description="Volleys hold up in the big moments.",
        category=AbilityCategory.VOLLEY,
        rarity=AbilityRarity.EPIC,
        effects=EffectBonuses(volley=10, critical_rate=10),
        situational=SituationalBonuses(tiebreak=15, set_point=12),
    ),
    # Stroke
    SpecialAbility(
        id="baseline_power",
        name="Baseline Power",
        description="Heavier groundstrokes from the back.",
        category=AbilityCategory.STROKE,
        rarity=AbilityRarity.COMMON,
        effects=EffectBonuses(stroke=12, critical_rate=8),
    ),
    SpecialAbility(
        id="rally_master",
        name="Rally Master",
        description="Thrives in long rallies.",
        category=AbilityCategory.STROKE,
        rarity=AbilityRarity.RARE,
        effects=EffectBonuses(stroke=10, stamina=8, error_reduction=12),
    ),
    SpecialAbility(
        id="winner_machine",
        name="Winner Machine",
        description="Produces groundstroke winners at will.",
        category=AbilityCategory.STROKE,
        rarity=AbilityRarity.EPIC,
        effects=EffectBonuses(stroke=15, critical_rate=20, success_rate_bonus=6),
    ),
    # Mental
    SpecialAbility(
        id="mental_strength",
        name="Mental Strength",
        description="Does not buckle under pressure.",
        category=AbilityCategory.MENTAL,
        rarity=AbilityRarity.COMMON,
        effects=EffectBonuses(mental=15, error_reduction=8),
    ),
    SpecialAbility(
        id="clutch_player",
        name="Clutch Player",
        description="Shows true quality in key moments.",
        category=AbilityCategory.MENTAL,
        rarity=AbilityRarity.RARE,
        effects=EffectBonuses(mental=10),
        situational=SituationalBonuses(break_point=12, set_point=15, match_point=20),
    ),
    SpecialAbility(
        id="ice_cold",
        name="Ice Cold",
        description="Total calm under the heaviest pressure.",
        category=AbilityCategory.MENTAL,
        rarity=AbilityRarity.LEGENDARY,
        effects=EffectBonuses(mental=20, error_reduction=20),
        situational=SituationalBonuses(tiebreak=25, match_point=30),
    ),
    # Stamina
    SpecialAbility(
        id="endurance",
        name="Endurance",
        description="Tires slowly.",
        category=AbilityCategory.STAMINA,
        rarity=AbilityRarity.COMMON,
        effects=EffectBonuses(stamina=20),
    ),
    SpecialAbility(
        id="second_wind",
        name="Second Wind",
        description="Recovers energy when trailing.",
        category=AbilityCategory.STAMINA,
        rarity=AbilityRarity.RARE,
        effects=EffectBonuses(stamina=15),
        situational=SituationalBonuses(behind=8),
    ),
    SpecialAbility(
        id="iron_will",
        name="Iron Will",
        description="Fights to the very last ball.",
        category=AbilityCategory.STAMINA,
        rarity=AbilityRarity.EPIC,
        effects=EffectBonuses(stamina=25, mental=10),
        situational=SituationalBonuses(match_point=15),
    ),
]}

RARITY_WEIGHTS: dict[AbilityRarity, int] = {
    AbilityRarity.COMMON: 50,
    AbilityRarity.RARE: 30,
    AbilityRarity.EPIC: 15,
    AbilityRarity.LEGENDARY: 5,
}


def get_ability(ability_id: str) -> SpecialAbility | None:
    return SPECIAL_ABILITIES.get(ability_id)


def list_abilities() -> list[SpecialAbility]:
    return list(SPECIAL_ABILITIES.values())


def random_abilities(rng: SeededRNG, count: int = 3) -> list[SpecialAbility]:
    """Draw `count` distinct abilities weighted by rarity."""
    pool = list_abilities()
    selected: list[SpecialAbility] = []
    while pool and len(selected) < count:
        weights = [RARITY_WEIGHTS[a.rarity] for a in pool]
        pick = rng.choices(pool, weights=weights, k=1)[0]
        selected.append(pick)
        pool.remove(pick)
    return selected
