# -*- coding: utf-8 -*-
"""Discovery engine (core).

Walks an entry's nested structure (entries, groups, entry links resolved on the
fly) to find the governing stat profile and to collect weapon profiles.

Notes
- One traversal (`iter_subtree`) drives every query; visitors decide whether
  the walk stops at the first match or collects everything.
- Order is pre-order depth-first: the entry itself, its nested entries, its
  resolved entry links, then its groups (group entries, group links, nested
  groups).
- An entry link that fails to resolve is skipped; the rest of the subtree is
  still walked.
- The walk keeps its own stack, so nesting depth is not bounded by the
  interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from grimoire.errors import NotFoundError
from grimoire.indexers.catalogue_index import CatalogueIndex
from grimoire.resolver import LinkResolver
from grimoire.schemas.models import Profile, SelectionEntry

logger = logging.getLogger(__name__)

ENTRY_LINK_TYPES = ("selectionEntry", "upgrade", "")
GROUP_LINK_TYPES = ("selectionEntryGroup",)


@dataclass(frozen=True)
class ProfileTypeNames:
    """Profile type names the engine looks for (game-system specific)."""

    unit: str = "Unit"
    ranged: str = "Ranged Weapons"
    melee: str = "Melee Weapons"
    abilities: str = "Abilities"
    transport: str = "Transport"

    @classmethod
    def from_config(cls, config) -> "ProfileTypeNames":
        d = cls()
        return cls(
            unit=config.get("PROFILES", "UNIT", d.unit),
            ranged=config.get("PROFILES", "RANGED", d.ranged),
            melee=config.get("PROFILES", "MELEE", d.melee),
            abilities=config.get("PROFILES", "ABILITIES", d.abilities),
            transport=config.get("PROFILES", "TRANSPORT", d.transport),
        )


@dataclass(frozen=True)
class WeaponProfiles:
    ranged: Tuple[Profile, ...] = ()
    melee: Tuple[Profile, ...] = ()


# ----------------- visitors -----------------


class ProfileVisitor:
    """Receives each entry of a walk; `visit` returns True to stop the walk."""

    def __init__(self, type_name_of):
        self._type_name_of = type_name_of

    def visit(self, entry: SelectionEntry) -> bool:
        raise NotImplementedError


class FirstProfileMatch(ProfileVisitor):
    def __init__(self, type_name_of, type_name: str):
        super().__init__(type_name_of)
        self.type_name = type_name
        self.found: Optional[Profile] = None

    def visit(self, entry: SelectionEntry) -> bool:
        for profile in entry.profiles:
            if self._type_name_of(profile) == self.type_name:
                self.found = profile
                return True
        return False


class ProfileCollector(ProfileVisitor):
    def __init__(self, type_name_of, type_names: Sequence[str]):
        super().__init__(type_name_of)
        self.buckets: Dict[str, List[Profile]] = {name: [] for name in type_names}

    def visit(self, entry: SelectionEntry) -> bool:
        for profile in entry.profiles:
            bucket = self.buckets.get(self._type_name_of(profile))
            if bucket is not None:
                bucket.append(profile)
        return False


# ----------------- engine -----------------


class DiscoveryEngine:
    def __init__(
        self,
        index: CatalogueIndex,
        resolver: Optional[LinkResolver] = None,
        type_names: Optional[ProfileTypeNames] = None,
    ):
        self.index = index
        self.resolver = resolver or LinkResolver(index)
        self.type_names = type_names or ProfileTypeNames()

        # typeId -> name, for profiles that omit typeName
        self._type_names_by_id: Dict[str, str] = {}
        gs = index.game_system
        if gs is not None:
            self._type_names_by_id = {pt.id: pt.name for pt in gs.profile_types}

    def profile_type_name(self, profile: Profile) -> str:
        return profile.type_name or self._type_names_by_id.get(profile.type_id, "")

    # ----------------- traversal -----------------

    def iter_subtree(
        self,
        entry: SelectionEntry,
        document_id: str,
        *,
        follow_links: bool = True,
        follow_groups: bool = True,
    ) -> Iterator[Tuple[SelectionEntry, str]]:
        """Yield `(entry, owning_document_id)` for every reachable entry, in walk order.

        `document_id` is the document that declares `entry`. Links are resolved
        against the document that declares them, so a library entry reached
        from a catalogue keeps resolving inside its own library.
        """
        stack: List[Tuple[str, object, str]] = [("entry", entry, document_id)]

        while stack:
            kind, node, doc_id = stack.pop()

            if kind == "link":
                target = self._resolve(node, doc_id)
                if target is not None:
                    stack.append(target)
                continue

            if kind == "entry":
                yield node, doc_id  # type: ignore[misc]

            # children are pushed in reverse so they pop in declaration order
            if kind == "entry" and follow_groups:
                for group in reversed(node.selection_entry_groups):  # type: ignore[attr-defined]
                    stack.append(("group", group, doc_id))
            if kind == "group":
                for group in reversed(node.selection_entry_groups):  # type: ignore[attr-defined]
                    stack.append(("group", group, doc_id))
            if follow_links:
                for link in reversed(node.entry_links):  # type: ignore[attr-defined]
                    stack.append(("link", link, doc_id))
            for child in reversed(node.selection_entries):  # type: ignore[attr-defined]
                stack.append(("entry", child, doc_id))

    def _resolve(self, link, document_id: str) -> Optional[Tuple[str, object, str]]:
        link_type = link.type or ""
        try:
            if link_type in ENTRY_LINK_TYPES:
                entry, owner_id = self.resolver.locate_entry(link, document_id)
                return "entry", entry, owner_id
            if link_type in GROUP_LINK_TYPES:
                group, owner_id = self.resolver.locate_group(link, document_id)
                return "group", group, owner_id
        except NotFoundError as exc:
            logger.debug("Skipping unresolved link %s: %s", link.id, exc)
            return None
        return None

    def walk(
        self,
        entry: SelectionEntry,
        document_id: str,
        visitor: ProfileVisitor,
        *,
        follow_links: bool = True,
        follow_groups: bool = True,
    ) -> ProfileVisitor:
        for node, _ in self.iter_subtree(entry, document_id, follow_links=follow_links, follow_groups=follow_groups):
            if visitor.visit(node):
                break
        return visitor

    # ----------------- queries -----------------

    def find_governing_stat_profile(self, entry: SelectionEntry, document_id: str) -> Optional[Profile]:
        """First unit stat profile, or None (upgrades legitimately have none).

        Precedence: own profiles and nested entries; then groups and resolved
        entry links; then `profile` info links against shared profiles.
        """
        unit = self.type_names.unit

        # own profiles + nested entries (the root is visited first)
        found = self.walk(
            entry, document_id, FirstProfileMatch(self.profile_type_name, unit),
            follow_links=False, follow_groups=False,
        ).found
        if found is not None:
            return found

        found = self.walk(entry, document_id, FirstProfileMatch(self.profile_type_name, unit)).found
        if found is not None:
            return found

        return self._find_info_link_profile(entry, document_id, unit)

    def _find_info_link_profile(self, entry: SelectionEntry, document_id: str, type_name: str) -> Optional[Profile]:
        for node, owner_id in self.iter_subtree(entry, document_id, follow_links=False):
            for info in node.info_links:
                if info.type != "profile" or not info.target_id:
                    continue
                profile = self.index.lookup_shared_profile(info.target_id, owner_id)
                if profile is not None and self.profile_type_name(profile) == type_name:
                    return profile
        return None

    def collect_weapon_profiles(self, entry: SelectionEntry, document_id: str) -> WeaponProfiles:
        names = self.type_names
        collector = ProfileCollector(self.profile_type_name, (names.ranged, names.melee))
        self.walk(entry, document_id, collector)
        return WeaponProfiles(
            ranged=tuple(collector.buckets[names.ranged]),
            melee=tuple(collector.buckets[names.melee]),
        )

    def collect_profiles(
        self,
        entry: SelectionEntry,
        document_id: str,
        type_name: str,
        *,
        deep: bool = False,
    ) -> List[Profile]:
        """Profiles of one type; own profiles only unless `deep`."""
        if not deep:
            return [p for p in entry.profiles if self.profile_type_name(p) == type_name]
        collector = ProfileCollector(self.profile_type_name, (type_name,))
        self.walk(entry, document_id, collector)
        return collector.buckets[type_name]
