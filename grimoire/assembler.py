# -*- coding: utf-8 -*-
"""Assembler (core).

Projects effective entries into flat, JSON-ready records.

Notes
- Characteristic text is decoded here (T/W/OC to int); everything else stays
  as the source text.
- Missing data is a normal outcome: no stat profile -> `profiles.unit is None`,
  no weapons -> empty lists, non-numeric cost -> key omitted.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from grimoire.discovery import DiscoveryEngine
from grimoire.errors import NotFoundError
from grimoire.indexers.catalogue_index import CatalogueIndex
from grimoire.resolver import LinkResolver
from grimoire.schemas.models import (
    Catalogue,
    CategoryLink,
    Constraint,
    Cost,
    EntryLink,
    Profile,
    SelectionEntry,
)
from grimoire.schemas.records import (
    AbilityInfo,
    CatalogueInfo,
    CatalogueRecord,
    CategoryInfo,
    CostTypeInfo,
    FactionInfo,
    GameSystemRecord,
    MeleeWeapon,
    Number,
    ProfileTypeInfo,
    PublicationInfo,
    RangedWeapon,
    RuleInfo,
    StatBlock,
    TransportInfo,
    UnitConstraints,
    UnitProfiles,
    UnitRecord,
    UnitSummary,
    WeaponSet,
)
from grimoire.schemas.values import parse_int, parse_keywords, parse_number

FACTION_PREFIX = "Faction:"


# ----------------- projections -----------------


def cost_map(costs: Iterable[Cost]) -> Dict[str, Number]:
    """cost name -> number; empty and non-numeric values ("Variable") are skipped."""
    out: Dict[str, Number] = {}
    for cost in costs:
        val = parse_number(cost.value)
        if val is None:
            continue
        out[cost.name] = val
    return out


def constraint_summary(constraints: Iterable[Constraint]) -> Optional[UnitConstraints]:
    """min/max per roster/force; negative means unlimited and is skipped."""
    found: Dict[str, int] = {}
    for c in constraints:
        value = c.int_value()
        if value < 0:
            continue
        if c.type in ("max", "min") and c.scope in ("roster", "force"):
            found[f"{c.type}_per_{c.scope}"] = value

    summary = UnitConstraints(**found)
    return None if summary.is_empty() else summary


def stat_block(profile: Profile) -> StatBlock:
    chars = profile.characteristic_map()
    return StatBlock(
        movement=chars.get("M", ""),
        toughness=parse_int(chars.get("T")),
        save=chars.get("SV", ""),
        wounds=parse_int(chars.get("W")),
        leadership=chars.get("LD", ""),
        objective_control=parse_int(chars.get("OC")),
    )


def ranged_weapon(profile: Profile) -> RangedWeapon:
    chars = profile.characteristic_map()
    return RangedWeapon(
        name=profile.name,
        range=chars.get("Range", ""),
        attacks=chars.get("A", ""),
        ballistic_skill=chars.get("BS", ""),
        strength=chars.get("S", ""),
        armour_penetration=chars.get("AP", ""),
        damage=chars.get("D", ""),
        keywords=parse_keywords(chars.get("Keywords")),
    )


def melee_weapon(profile: Profile) -> MeleeWeapon:
    chars = profile.characteristic_map()
    return MeleeWeapon(
        name=profile.name,
        range=chars.get("Range", ""),
        attacks=chars.get("A", ""),
        weapon_skill=chars.get("WS", ""),
        strength=chars.get("S", ""),
        armour_penetration=chars.get("AP", ""),
        damage=chars.get("D", ""),
        keywords=parse_keywords(chars.get("Keywords")),
    )


def categories(links: Iterable[CategoryLink]) -> List[CategoryInfo]:
    return [CategoryInfo(id=c.target_id, name=c.name, primary=c.primary) for c in links]


def faction_of(links: Iterable[CategoryLink]) -> Optional[FactionInfo]:
    for c in links:
        if c.name.startswith(FACTION_PREFIX):
            return FactionInfo(id=c.target_id, name=c.name)
    return None


def catalogue_info(doc: Catalogue) -> CatalogueInfo:
    return CatalogueInfo(id=doc.id, name=doc.name, revision=doc.revision, library=doc.library)


def unit_summary(link: EntryLink, entry: SelectionEntry) -> UnitSummary:
    """Summary row keyed by the link id (the id clients query with)."""
    return UnitSummary(
        id=link.id,
        name=entry.name,
        target_id=link.target_id,
        type=entry.type,
        costs=cost_map(entry.costs),
    )


# ----------------- assembler -----------------


class Assembler:
    def __init__(self, index: CatalogueIndex, discovery: Optional[DiscoveryEngine] = None):
        self.index = index
        self.discovery = discovery or DiscoveryEngine(index)
        self.resolver: LinkResolver = self.discovery.resolver

    def _publication(self, entry: SelectionEntry, *document_ids: str) -> Optional[PublicationInfo]:
        if not entry.publication_id:
            return None
        info = PublicationInfo(id=entry.publication_id, page=entry.page)
        pub = None
        for document_id in document_ids:
            doc = self.index.lookup_document(document_id)
            pub = doc.publication(entry.publication_id) if doc is not None else None
            if pub is not None:
                break
        if pub is None and self.index.game_system is not None:
            pub = next((p for p in self.index.game_system.publications if p.id == entry.publication_id), None)
        if pub is None:
            return info
        return PublicationInfo(
            id=entry.publication_id,
            name=pub.name,
            short_name=pub.short_name,
            publication_date=pub.publication_date,
            page=entry.page,
        )

    def _profiles(self, entry: SelectionEntry, document_id: str) -> UnitProfiles:
        names = self.discovery.type_names
        stat = self.discovery.find_governing_stat_profile(entry, document_id)

        abilities = [
            AbilityInfo(name=p.name, description=p.characteristic_map().get("Description", ""))
            for p in self.discovery.collect_profiles(entry, document_id, names.abilities)
        ]

        transport: Optional[TransportInfo] = None
        for p in self.discovery.collect_profiles(entry, document_id, names.transport):
            # last one wins
            transport = TransportInfo(capacity=p.characteristic_map().get("Capacity", ""))

        return UnitProfiles(
            unit=stat_block(stat) if stat is not None else None,
            abilities=abilities,
            transport=transport,
        )

    def build_weapon_set(self, entry: SelectionEntry, document_id: str) -> WeaponSet:
        found = self.discovery.collect_weapon_profiles(entry, document_id)
        return WeaponSet(
            ranged=[ranged_weapon(p) for p in found.ranged],
            melee=[melee_weapon(p) for p in found.melee],
        )

    def build_unit_record(
        self,
        entry: SelectionEntry,
        document_id: str,
        *,
        owner_document_id: Optional[str] = None,
    ) -> UnitRecord:
        """Full record for `entry` as exposed by `document_id`.

        `owner_document_id` is the document that declares the entry (a library
        for linked units); the walk resolves nested links from there. The
        catalogue block always describes `document_id`.
        """
        owner_id = owner_document_id or document_id
        doc = self.index.lookup_document(document_id)
        return UnitRecord(
            id=entry.id,
            name=entry.name,
            type=entry.type,
            profiles=self._profiles(entry, owner_id),
            weapons=self.build_weapon_set(entry, owner_id),
            categories=categories(entry.category_links),
            rules=[RuleInfo(id=i.target_id, name=i.name) for i in entry.info_links],
            costs=cost_map(entry.costs),
            publication=self._publication(entry, owner_id, document_id),
            constraints=constraint_summary(entry.constraints),
            faction=faction_of(entry.category_links),
            catalogue=catalogue_info(doc) if doc is not None else None,
        )

    def build_catalogue_record(self, catalogue: Catalogue) -> CatalogueRecord:
        return CatalogueRecord(
            id=catalogue.id,
            name=catalogue.name,
            revision=catalogue.revision,
            library=catalogue.library,
            game_system_id=catalogue.game_system_id,
            linked_catalogues=[catalogue_info(c) for c in self.resolver.resolve_catalogue_links(catalogue)],
            units=[
                UnitSummary(
                    id=link.id,
                    name=link.name,
                    target_id=link.target_id,
                    type=link.type,
                    costs=cost_map(link.costs),
                )
                for link in catalogue.entry_links
            ],
            publications=[
                PublicationInfo(
                    id=p.id,
                    name=p.name,
                    short_name=p.short_name,
                    publication_date=p.publication_date,
                )
                for p in catalogue.publications
            ],
        )

    def build_game_system_record(self) -> GameSystemRecord:
        gs = self.index.game_system
        if gs is None:
            raise NotFoundError("", kind="game system", message="no game system loaded")
        return GameSystemRecord(
            id=gs.id,
            name=gs.name,
            revision=gs.revision,
            battle_scribe_version=gs.battle_scribe_version,
            profile_types=[
                ProfileTypeInfo(id=pt.id, name=pt.name, characteristics=list(pt.characteristic_names()))
                for pt in gs.profile_types
            ],
            categories=[CategoryInfo(id=c.id, name=c.name) for c in gs.category_entries if not c.hidden],
            cost_types=[
                CostTypeInfo(id=c.id, name=c.name, default_cost_limit=c.default_cost_limit, hidden=c.hidden)
                for c in gs.cost_types
            ],
        )
