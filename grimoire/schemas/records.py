# -*- coding: utf-8 -*-
"""Flat, JSON-ready records produced by the assembler."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union

Number = Union[int, float]


@dataclass(frozen=True)
class PublicationInfo:
    id: str
    name: str = ""
    short_name: str = ""
    publication_date: str = ""
    page: str = ""


@dataclass(frozen=True)
class CatalogueInfo:
    id: str
    name: str
    revision: str
    library: bool


@dataclass(frozen=True)
class FactionInfo:
    id: str
    name: str


@dataclass(frozen=True)
class CategoryInfo:
    id: str
    name: str
    primary: bool = False


@dataclass(frozen=True)
class RuleInfo:
    id: str
    name: str


@dataclass(frozen=True)
class StatBlock:
    movement: str = ""
    toughness: int = 0
    save: str = ""
    wounds: int = 0
    leadership: str = ""
    objective_control: int = 0


@dataclass(frozen=True)
class AbilityInfo:
    name: str
    description: str = ""


@dataclass(frozen=True)
class TransportInfo:
    capacity: str = ""


@dataclass(frozen=True)
class UnitProfiles:
    unit: Optional[StatBlock] = None
    abilities: List[AbilityInfo] = field(default_factory=list)
    transport: Optional[TransportInfo] = None


@dataclass(frozen=True)
class RangedWeapon:
    name: str
    range: str = ""
    attacks: str = ""
    ballistic_skill: str = ""
    strength: str = ""
    armour_penetration: str = ""
    damage: str = ""
    keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MeleeWeapon:
    name: str
    range: str = ""
    attacks: str = ""
    weapon_skill: str = ""
    strength: str = ""
    armour_penetration: str = ""
    damage: str = ""
    keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class WeaponSet:
    ranged: List[RangedWeapon] = field(default_factory=list)
    melee: List[MeleeWeapon] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UnitConstraints:
    max_per_roster: int = 0
    min_per_roster: int = 0
    max_per_force: int = 0
    min_per_force: int = 0

    def is_empty(self) -> bool:
        return not (self.max_per_roster or self.min_per_roster or self.max_per_force or self.min_per_force)


@dataclass(frozen=True)
class UnitRecord:
    id: str
    name: str
    type: str
    profiles: UnitProfiles
    weapons: WeaponSet
    categories: List[CategoryInfo]
    rules: List[RuleInfo]
    costs: Dict[str, Number]
    publication: Optional[PublicationInfo] = None
    constraints: Optional[UnitConstraints] = None
    faction: Optional[FactionInfo] = None
    catalogue: Optional[CatalogueInfo] = None

    @property
    def stats(self) -> Optional[StatBlock]:
        return self.profiles.unit

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UnitSummary:
    id: str
    name: str
    target_id: str = ""
    type: str = ""
    costs: Dict[str, Number] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CatalogueRecord:
    id: str
    name: str
    revision: str
    library: bool
    game_system_id: str
    linked_catalogues: List[CatalogueInfo]
    units: List[UnitSummary]
    publications: List[PublicationInfo]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProfileTypeInfo:
    id: str
    name: str
    characteristics: List[str]


@dataclass(frozen=True)
class CostTypeInfo:
    id: str
    name: str
    default_cost_limit: str = ""
    hidden: bool = False


@dataclass(frozen=True)
class GameSystemRecord:
    id: str
    name: str
    revision: str
    battle_scribe_version: str
    profile_types: List[ProfileTypeInfo]
    categories: List[CategoryInfo]
    cost_types: List[CostTypeInfo]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SearchResult:
    type: str
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FactionSummary:
    name: str
    catalogues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
