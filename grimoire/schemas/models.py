# -*- coding: utf-8 -*-
"""Typed, immutable BattleScribe data model.

Notes
- Every model is a frozen dataclass and every list-like field is a tuple, so a
  loaded tree can be shared between threads without locking.
- Attribute values stay as the source text; numeric meaning is decoded on
  demand (see `grimoire.schemas.values`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, NewType, Optional, Tuple

from grimoire.schemas.values import parse_int

DocumentId = NewType("DocumentId", str)
EntryId = NewType("EntryId", str)


# ----------------- game system -----------------


@dataclass(frozen=True)
class Publication:
    id: str
    name: str = ""
    short_name: str = ""
    publisher: str = ""
    publication_date: str = ""


@dataclass(frozen=True)
class CostType:
    id: str
    name: str = ""
    default_cost_limit: str = ""
    hidden: bool = False


@dataclass(frozen=True)
class CharacteristicType:
    id: str
    name: str = ""


@dataclass(frozen=True)
class ProfileType:
    id: str
    name: str = ""
    characteristic_types: Tuple[CharacteristicType, ...] = ()

    def characteristic_names(self) -> Tuple[str, ...]:
        return tuple(ct.name for ct in self.characteristic_types)


@dataclass(frozen=True)
class CategoryEntry:
    id: str
    name: str = ""
    hidden: bool = False


@dataclass(frozen=True)
class GameSystem:
    id: DocumentId
    name: str = ""
    revision: str = ""
    battle_scribe_version: str = ""
    publications: Tuple[Publication, ...] = ()
    cost_types: Tuple[CostType, ...] = ()
    profile_types: Tuple[ProfileType, ...] = ()
    category_entries: Tuple[CategoryEntry, ...] = ()


# ----------------- rule data (surfaced, never evaluated) -----------------


@dataclass(frozen=True)
class Condition:
    id: str = ""
    type: str = ""
    value: str = ""
    field: str = ""
    scope: str = ""
    child_id: str = ""
    shared: bool = False
    include_child_selections: bool = False
    include_child_forces: bool = False
    percent_value: bool = False


@dataclass(frozen=True)
class ConditionGroup:
    id: str = ""
    type: str = ""
    conditions: Tuple[Condition, ...] = ()
    condition_groups: Tuple["ConditionGroup", ...] = ()


@dataclass(frozen=True)
class Repeat:
    value: str = ""
    repeats: str = ""
    field: str = ""
    scope: str = ""
    child_id: str = ""
    round_up: bool = False
    include_child_selections: bool = False


@dataclass(frozen=True)
class Modifier:
    id: str = ""
    type: str = ""
    value: str = ""
    field: str = ""
    scope: str = ""
    affects: str = ""
    join: str = ""
    conditions: Tuple[Condition, ...] = ()
    condition_groups: Tuple[ConditionGroup, ...] = ()
    repeats: Tuple[Repeat, ...] = ()


@dataclass(frozen=True)
class ModifierGroup:
    id: str = ""
    type: str = ""
    modifiers: Tuple[Modifier, ...] = ()
    conditions: Tuple[Condition, ...] = ()
    condition_groups: Tuple[ConditionGroup, ...] = ()
    comment: str = ""


@dataclass(frozen=True)
class Constraint:
    id: str = ""
    type: str = ""
    value: str = ""
    field: str = ""
    scope: str = ""
    shared: bool = False
    include_child_selections: bool = False
    include_child_forces: bool = False
    percent_value: bool = False
    negative: bool = False

    def int_value(self, default: int = 0) -> int:
        return parse_int(self.value, default=default)


# ----------------- profiles -----------------


@dataclass(frozen=True)
class Characteristic:
    name: str
    type_id: str = ""
    value: str = ""

    def as_int(self, default: int = 0) -> int:
        return parse_int(self.value, default=default)


@dataclass(frozen=True)
class Profile:
    id: EntryId
    name: str = ""
    type_id: str = ""
    type_name: str = ""
    hidden: bool = False
    publication_id: str = ""
    page: str = ""
    characteristics: Tuple[Characteristic, ...] = ()
    modifiers: Tuple[Modifier, ...] = ()

    def characteristic_map(self) -> Dict[str, str]:
        """name -> raw text (later duplicates win, matching a plain map build)."""
        return {c.name: c.value for c in self.characteristics}


# ----------------- links -----------------


@dataclass(frozen=True)
class Cost:
    name: str = ""
    type_id: str = ""
    value: str = ""


@dataclass(frozen=True)
class CategoryLink:
    id: str = ""
    name: str = ""
    target_id: str = ""
    primary: bool = False


@dataclass(frozen=True)
class InfoLink:
    id: str = ""
    name: str = ""
    target_id: str = ""
    type: str = ""
    hidden: bool = False


@dataclass(frozen=True)
class EntryLink:
    id: EntryId
    target_id: EntryId
    name: str = ""
    type: str = "selectionEntry"
    hidden: bool = False
    collective: bool = False
    import_: bool = False
    category_links: Tuple[CategoryLink, ...] = ()
    costs: Tuple[Cost, ...] = ()
    constraints: Tuple[Constraint, ...] = ()
    modifiers: Tuple[Modifier, ...] = ()
    entry_links: Tuple["EntryLink", ...] = ()


@dataclass(frozen=True)
class CatalogueLink:
    id: str = ""
    name: str = ""
    target_id: DocumentId = DocumentId("")
    type: str = "catalogue"
    import_root_entries: bool = False


# ----------------- entries -----------------


@dataclass(frozen=True)
class SelectionEntry:
    id: EntryId
    name: str = ""
    type: str = ""
    hidden: bool = False
    collective: bool = False
    import_: bool = False
    publication_id: str = ""
    page: str = ""
    sort_index: str = ""
    profiles: Tuple[Profile, ...] = ()
    info_links: Tuple[InfoLink, ...] = ()
    category_links: Tuple[CategoryLink, ...] = ()
    selection_entries: Tuple["SelectionEntry", ...] = ()
    selection_entry_groups: Tuple["SelectionEntryGroup", ...] = ()
    entry_links: Tuple[EntryLink, ...] = ()
    costs: Tuple[Cost, ...] = ()
    constraints: Tuple[Constraint, ...] = ()
    modifiers: Tuple[Modifier, ...] = ()
    modifier_groups: Tuple[ModifierGroup, ...] = ()
    comment: str = ""


@dataclass(frozen=True)
class SelectionEntryGroup:
    id: EntryId
    name: str = ""
    hidden: bool = False
    collapsible: bool = False
    flatten: bool = False
    sort_index: str = ""
    selection_entries: Tuple[SelectionEntry, ...] = ()
    selection_entry_groups: Tuple["SelectionEntryGroup", ...] = ()
    entry_links: Tuple[EntryLink, ...] = ()
    constraints: Tuple[Constraint, ...] = ()
    modifiers: Tuple[Modifier, ...] = ()


# ----------------- documents -----------------


@dataclass(frozen=True)
class Catalogue:
    id: DocumentId
    name: str = ""
    revision: str = ""
    battle_scribe_version: str = ""
    library: bool = False
    game_system_id: str = ""
    game_system_revision: str = ""
    type: str = "catalogue"
    publications: Tuple[Publication, ...] = ()
    category_entries: Tuple[CategoryEntry, ...] = ()
    shared_selection_entries: Tuple[SelectionEntry, ...] = ()
    shared_selection_entry_groups: Tuple[SelectionEntryGroup, ...] = ()
    shared_profiles: Tuple[Profile, ...] = ()
    entry_links: Tuple[EntryLink, ...] = ()
    catalogue_links: Tuple[CatalogueLink, ...] = ()

    def publication(self, publication_id: str) -> Optional[Publication]:
        if not publication_id:
            return None
        for pub in self.publications:
            if pub.id == publication_id:
                return pub
        return None
