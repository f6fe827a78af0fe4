"""
Player profiles: base attributes, runtime condition gauges and equipped
special abilities. Used by the aggregator and the point resolver.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from .schemas import EffectBonuses

ATTRIBUTE_MIN = 10
ATTRIBUTE_MAX = 100
GAUGE_MIN = 0.0
GAUGE_MAX = 100.0


class AbilityCategory(str, Enum):
    SERVE = "serve"
    RECEIVE = "receive"
    VOLLEY = "volley"
    STROKE = "stroke"
    MENTAL = "mental"
    STAMINA = "stamina"


class AbilityRarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


@dataclass(frozen=True)
class SituationalBonuses:
    """Extra success-rate percentage applied only while the situation holds."""
    break_point: float = 0.0
    set_point: float = 0.0
    match_point: float = 0.0
    tiebreak: float = 0.0
    behind: float = 0.0
    lead: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class SpecialAbility:
    id: str
    name: str
    description: str
    category: AbilityCategory
    rarity: AbilityRarity
    effects: EffectBonuses = field(default_factory=EffectBonuses)
    situational: SituationalBonuses = field(default_factory=SituationalBonuses)
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "rarity": self.rarity.value,
            "effects": self.effects.to_dict(),
            "situational": self.situational.to_dict(),
            "is_active": self.is_active,
        }


@dataclass
class PlayerStats:
    """Six base attributes, each in [10, 100]."""
    serve: float
    receive: float
    volley: float
    stroke: float
    mental: float
    stamina: float

    def validate(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not ATTRIBUTE_MIN <= value <= ATTRIBUTE_MAX:
                raise ValueError(
                    f"{f.name} must be in [{ATTRIBUTE_MIN}, {ATTRIBUTE_MAX}], got {value}"
                )

    def average(self) -> float:
        values = [getattr(self, f.name) for f in fields(self)]
        return sum(values) / len(values)

    def to_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class Player:
    """
    A player for the lifetime of one match.
    current_stamina / current_mental are mutated every point and reset only
    by reset_condition() at match (re)initialization.
    """
    id: str
    name: str
    stats: PlayerStats
    special_abilities: list[SpecialAbility] = field(default_factory=list)
    current_stamina: float = -1.0  # -1 = not yet initialised
    current_mental: float = -1.0

    def __post_init__(self) -> None:
        if self.current_stamina < 0:
            self.current_stamina = float(self.stats.stamina)
        if self.current_mental < 0:
            self.current_mental = float(self.stats.mental)

    def reset_condition(self) -> None:
        self.current_stamina = float(self.stats.stamina)
        self.current_mental = float(self.stats.mental)

    def adjust_stamina(self, delta: float) -> None:
        self.current_stamina = max(GAUGE_MIN, min(GAUGE_MAX, self.current_stamina + delta))

    def adjust_mental(self, delta: float) -> None:
        self.current_mental = max(GAUGE_MIN, min(GAUGE_MAX, self.current_mental + delta))

    def stamina_ratio(self) -> float:
        """Current stamina as a fraction of the base stamina attribute."""
        return self.current_stamina / self.stats.stamina

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "stats": self.stats.to_dict(),
            "current_stamina": round(self.current_stamina, 2),
            "current_mental": round(self.current_mental, 2),
            "special_abilities": [a.to_dict() for a in self.special_abilities],
        }
