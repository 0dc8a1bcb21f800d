# -*- coding: utf-8 -*-
"""BattleScribe document loader.

Reads one game system (`.gst`/`.gstz`) plus every catalogue (`.cat`/`.catz`)
under a data directory and builds a `CatalogueIndex`.

Notes
- BattleScribe files carry a default XML namespace; tags are matched on their
  local name so schema revisions don't matter.
- `.gstz`/`.catz` are zip archives holding a single XML document.
- Files are loaded in sorted path order so the index (and therefore link
  resolution) is reproducible across machines.
"""

from __future__ import annotations

import logging
import os
import zipfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from grimoire.errors import CatalogueLoadError
from grimoire.indexers.catalogue_index import CatalogueIndex
from grimoire.resolver import iter_shared_nodes
from grimoire.schemas.models import (
    Catalogue,
    CatalogueLink,
    CategoryEntry,
    CategoryLink,
    Characteristic,
    CharacteristicType,
    Condition,
    ConditionGroup,
    Constraint,
    Cost,
    CostType,
    DocumentId,
    EntryId,
    EntryLink,
    GameSystem,
    InfoLink,
    Modifier,
    ModifierGroup,
    Profile,
    ProfileType,
    Publication,
    Repeat,
    SelectionEntry,
    SelectionEntryGroup,
)
from grimoire.schemas.values import parse_bool
from grimoire.version import is_supported_battlescribe_version

logger = logging.getLogger(__name__)

GAME_SYSTEM_SUFFIXES = (".gst", ".gstz")
CATALOGUE_SUFFIXES = (".cat", ".catz")


# ----------------- element helpers -----------------


def _local(tag: str) -> str:
    """'{ns}selectionEntry' -> 'selectionEntry'."""
    if tag and tag[0] == "{":
        return tag.split("}", 1)[1]
    return tag


def _attr(el: ET.Element, name: str, default: str = "") -> str:
    return el.attrib.get(name, default)


def _flag(el: ET.Element, name: str) -> bool:
    return parse_bool(el.attrib.get(name))


def _children(el: ET.Element, container: str, tag: str) -> List[ET.Element]:
    """Items of a wrapper element, e.g. ('costs', 'cost')."""
    out: List[ET.Element] = []
    for wrapper in el:
        if _local(wrapper.tag) != container:
            continue
        for item in wrapper:
            if _local(item.tag) == tag:
                out.append(item)
    return out


def _text_child(el: ET.Element, tag: str) -> str:
    for child in el:
        if _local(child.tag) == tag:
            return (child.text or "").strip()
    return ""


# ----------------- element -> model -----------------


def _publication(el: ET.Element) -> Publication:
    return Publication(
        id=_attr(el, "id"),
        name=_attr(el, "name"),
        short_name=_attr(el, "shortName"),
        publisher=_attr(el, "publisher"),
        publication_date=_attr(el, "publicationDate"),
    )


def _category_entry(el: ET.Element) -> CategoryEntry:
    return CategoryEntry(id=_attr(el, "id"), name=_attr(el, "name"), hidden=_flag(el, "hidden"))


def _condition(el: ET.Element) -> Condition:
    return Condition(
        id=_attr(el, "id"),
        type=_attr(el, "type"),
        value=_attr(el, "value"),
        field=_attr(el, "field"),
        scope=_attr(el, "scope"),
        child_id=_attr(el, "childId"),
        shared=_flag(el, "shared"),
        include_child_selections=_flag(el, "includeChildSelections"),
        include_child_forces=_flag(el, "includeChildForces"),
        percent_value=_flag(el, "percentValue"),
    )


def _condition_group(el: ET.Element) -> ConditionGroup:
    return ConditionGroup(
        id=_attr(el, "id"),
        type=_attr(el, "type"),
        conditions=tuple(_condition(c) for c in _children(el, "conditions", "condition")),
        condition_groups=tuple(_condition_group(g) for g in _children(el, "conditionGroups", "conditionGroup")),
    )


def _repeat(el: ET.Element) -> Repeat:
    return Repeat(
        value=_attr(el, "value"),
        repeats=_attr(el, "repeats"),
        field=_attr(el, "field"),
        scope=_attr(el, "scope"),
        child_id=_attr(el, "childId"),
        round_up=_flag(el, "roundUp"),
        include_child_selections=_flag(el, "includeChildSelections"),
    )


def _modifier(el: ET.Element) -> Modifier:
    return Modifier(
        id=_attr(el, "id"),
        type=_attr(el, "type"),
        value=_attr(el, "value"),
        field=_attr(el, "field"),
        scope=_attr(el, "scope"),
        affects=_attr(el, "affects"),
        join=_attr(el, "join"),
        conditions=tuple(_condition(c) for c in _children(el, "conditions", "condition")),
        condition_groups=tuple(_condition_group(g) for g in _children(el, "conditionGroups", "conditionGroup")),
        repeats=tuple(_repeat(r) for r in _children(el, "repeats", "repeat")),
    )


def _modifiers(el: ET.Element) -> Tuple[Modifier, ...]:
    return tuple(_modifier(m) for m in _children(el, "modifiers", "modifier"))


def _modifier_group(el: ET.Element) -> ModifierGroup:
    return ModifierGroup(
        id=_attr(el, "id"),
        type=_attr(el, "type"),
        modifiers=_modifiers(el),
        conditions=tuple(_condition(c) for c in _children(el, "conditions", "condition")),
        condition_groups=tuple(_condition_group(g) for g in _children(el, "conditionGroups", "conditionGroup")),
        comment=_text_child(el, "comment"),
    )


def _constraint(el: ET.Element) -> Constraint:
    return Constraint(
        id=_attr(el, "id"),
        type=_attr(el, "type"),
        value=_attr(el, "value"),
        field=_attr(el, "field"),
        scope=_attr(el, "scope"),
        shared=_flag(el, "shared"),
        include_child_selections=_flag(el, "includeChildSelections"),
        include_child_forces=_flag(el, "includeChildForces"),
        percent_value=_flag(el, "percentValue"),
        negative=_flag(el, "negative"),
    )


def _constraints(el: ET.Element) -> Tuple[Constraint, ...]:
    return tuple(_constraint(c) for c in _children(el, "constraints", "constraint"))


def _cost(el: ET.Element) -> Cost:
    return Cost(name=_attr(el, "name"), type_id=_attr(el, "typeId"), value=_attr(el, "value"))


def _costs(el: ET.Element) -> Tuple[Cost, ...]:
    return tuple(_cost(c) for c in _children(el, "costs", "cost"))


def _category_links(el: ET.Element) -> Tuple[CategoryLink, ...]:
    return tuple(
        CategoryLink(
            id=_attr(c, "id"),
            name=_attr(c, "name"),
            target_id=_attr(c, "targetId"),
            primary=_flag(c, "primary"),
        )
        for c in _children(el, "categoryLinks", "categoryLink")
    )


def _info_links(el: ET.Element) -> Tuple[InfoLink, ...]:
    return tuple(
        InfoLink(
            id=_attr(c, "id"),
            name=_attr(c, "name"),
            target_id=_attr(c, "targetId"),
            type=_attr(c, "type"),
            hidden=_flag(c, "hidden"),
        )
        for c in _children(el, "infoLinks", "infoLink")
    )


def _profile(el: ET.Element) -> Profile:
    chars = tuple(
        Characteristic(
            name=_attr(c, "name"),
            type_id=_attr(c, "typeId"),
            value=(c.text or "").strip(),
        )
        for c in _children(el, "characteristics", "characteristic")
    )
    return Profile(
        id=EntryId(_attr(el, "id")),
        name=_attr(el, "name"),
        type_id=_attr(el, "typeId"),
        type_name=_attr(el, "typeName"),
        hidden=_flag(el, "hidden"),
        publication_id=_attr(el, "publicationId"),
        page=_attr(el, "page"),
        characteristics=chars,
        modifiers=_modifiers(el),
    )


def _profiles(el: ET.Element, container: str = "profiles") -> Tuple[Profile, ...]:
    return tuple(_profile(p) for p in _children(el, container, "profile"))


def _entry_link(el: ET.Element) -> EntryLink:
    return EntryLink(
        id=EntryId(_attr(el, "id")),
        target_id=EntryId(_attr(el, "targetId")),
        name=_attr(el, "name"),
        type=_attr(el, "type"),
        hidden=_flag(el, "hidden"),
        collective=_flag(el, "collective"),
        import_=_flag(el, "import"),
        category_links=_category_links(el),
        costs=_costs(el),
        constraints=_constraints(el),
        modifiers=_modifiers(el),
        entry_links=_entry_links(el),
    )


def _entry_links(el: ET.Element) -> Tuple[EntryLink, ...]:
    return tuple(_entry_link(e) for e in _children(el, "entryLinks", "entryLink"))


def _selection_entry(el: ET.Element) -> SelectionEntry:
    return SelectionEntry(
        id=EntryId(_attr(el, "id")),
        name=_attr(el, "name"),
        type=_attr(el, "type"),
        hidden=_flag(el, "hidden"),
        collective=_flag(el, "collective"),
        import_=_flag(el, "import"),
        publication_id=_attr(el, "publicationId"),
        page=_attr(el, "page"),
        sort_index=_attr(el, "sortIndex"),
        profiles=_profiles(el),
        info_links=_info_links(el),
        category_links=_category_links(el),
        selection_entries=_selection_entries(el),
        selection_entry_groups=_selection_entry_groups(el),
        entry_links=_entry_links(el),
        costs=_costs(el),
        constraints=_constraints(el),
        modifiers=_modifiers(el),
        modifier_groups=tuple(_modifier_group(g) for g in _children(el, "modifierGroups", "modifierGroup")),
        comment=_text_child(el, "comment"),
    )


def _selection_entries(el: ET.Element, container: str = "selectionEntries") -> Tuple[SelectionEntry, ...]:
    return tuple(_selection_entry(e) for e in _children(el, container, "selectionEntry"))


def _selection_entry_group(el: ET.Element) -> SelectionEntryGroup:
    return SelectionEntryGroup(
        id=EntryId(_attr(el, "id")),
        name=_attr(el, "name"),
        hidden=_flag(el, "hidden"),
        collapsible=_flag(el, "collapsible"),
        flatten=_flag(el, "flatten"),
        sort_index=_attr(el, "sortIndex"),
        selection_entries=_selection_entries(el),
        selection_entry_groups=_selection_entry_groups(el),
        entry_links=_entry_links(el),
        constraints=_constraints(el),
        modifiers=_modifiers(el),
    )


def _selection_entry_groups(el: ET.Element, container: str = "selectionEntryGroups") -> Tuple[SelectionEntryGroup, ...]:
    return tuple(_selection_entry_group(g) for g in _children(el, container, "selectionEntryGroup"))


def parse_game_system(root: ET.Element) -> GameSystem:
    if _local(root.tag) != "gameSystem":
        raise CatalogueLoadError(f"Expected <gameSystem> root, got <{_local(root.tag)}>")
    profile_types = tuple(
        ProfileType(
            id=_attr(pt, "id"),
            name=_attr(pt, "name"),
            characteristic_types=tuple(
                CharacteristicType(id=_attr(ct, "id"), name=_attr(ct, "name"))
                for ct in _children(pt, "characteristicTypes", "characteristicType")
            ),
        )
        for pt in _children(root, "profileTypes", "profileType")
    )
    return GameSystem(
        id=DocumentId(_attr(root, "id")),
        name=_attr(root, "name"),
        revision=_attr(root, "revision"),
        battle_scribe_version=_attr(root, "battleScribeVersion"),
        publications=tuple(_publication(p) for p in _children(root, "publications", "publication")),
        cost_types=tuple(
            CostType(
                id=_attr(c, "id"),
                name=_attr(c, "name"),
                default_cost_limit=_attr(c, "defaultCostLimit"),
                hidden=_flag(c, "hidden"),
            )
            for c in _children(root, "costTypes", "costType")
        ),
        profile_types=profile_types,
        category_entries=tuple(_category_entry(c) for c in _children(root, "categoryEntries", "categoryEntry")),
    )


def parse_catalogue(root: ET.Element) -> Catalogue:
    if _local(root.tag) != "catalogue":
        raise CatalogueLoadError(f"Expected <catalogue> root, got <{_local(root.tag)}>")
    return Catalogue(
        id=DocumentId(_attr(root, "id")),
        name=_attr(root, "name"),
        revision=_attr(root, "revision"),
        battle_scribe_version=_attr(root, "battleScribeVersion"),
        library=_flag(root, "library"),
        game_system_id=_attr(root, "gameSystemId"),
        game_system_revision=_attr(root, "gameSystemRevision"),
        type=_attr(root, "type", "catalogue"),
        publications=tuple(_publication(p) for p in _children(root, "publications", "publication")),
        category_entries=tuple(_category_entry(c) for c in _children(root, "categoryEntries", "categoryEntry")),
        shared_selection_entries=_selection_entries(root, "sharedSelectionEntries"),
        shared_selection_entry_groups=_selection_entry_groups(root, "sharedSelectionEntryGroups"),
        shared_profiles=_profiles(root, "sharedProfiles"),
        entry_links=_entry_links(root),
        catalogue_links=tuple(
            CatalogueLink(
                id=_attr(c, "id"),
                name=_attr(c, "name"),
                target_id=DocumentId(_attr(c, "targetId")),
                type=_attr(c, "type", "catalogue"),
                import_root_entries=_flag(c, "importRootEntries"),
            )
            for c in _children(root, "catalogueLinks", "catalogueLink")
        ),
    )


# ----------------- file IO -----------------


def read_document(path: str) -> ET.Element:
    """Parse one BattleScribe file (plain or zipped) and return its root element."""
    try:
        if path.lower().endswith("z"):
            with zipfile.ZipFile(path, "r") as zf:
                names = [n for n in zf.namelist() if not n.endswith("/")]
                if not names:
                    raise CatalogueLoadError(f"Empty archive: {path}")
                with zf.open(names[0]) as fh:
                    return ET.parse(fh).getroot()
        return ET.parse(path).getroot()
    except (OSError, ET.ParseError, zipfile.BadZipFile) as exc:
        raise CatalogueLoadError(f"Failed to read {path}: {exc}") from exc


class BattleScribeLoader:
    """Load a BattleScribe data directory into a `CatalogueIndex`.

    Parameters
    - data_dir: folder holding the `.gst` and `.cat` files (searched recursively).
    - game_system_file: optional explicit game system file (absolute or
      relative to data_dir). Defaults to the first game system file found.
    - silent: suppress info logs.
    """

    def __init__(self, data_dir: str, game_system_file: Optional[str] = None, *, silent: bool = False):
        self.data_dir = os.path.expanduser(str(data_dir))
        self.game_system_file = game_system_file or None
        self.silent = bool(silent)

    def _log(self, msg: str) -> None:
        if not self.silent:
            logger.info(msg)

    def _scan(self) -> Tuple[List[str], List[str]]:
        gst: List[str] = []
        cats: List[str] = []
        for root, _, files in os.walk(self.data_dir):
            for name in files:
                low = name.lower()
                full = os.path.join(root, name)
                if low.endswith(GAME_SYSTEM_SUFFIXES):
                    gst.append(full)
                elif low.endswith(CATALOGUE_SUFFIXES):
                    cats.append(full)
        return sorted(gst), sorted(cats)

    def _game_system_path(self, candidates: List[str]) -> str:
        if self.game_system_file:
            p = Path(os.path.expanduser(self.game_system_file))
            if not p.is_absolute():
                p = Path(self.data_dir) / p
            return str(p)
        if not candidates:
            raise CatalogueLoadError(f"No game system file (.gst) under {self.data_dir}")
        return candidates[0]

    def load(self) -> CatalogueIndex:
        if not os.path.isdir(self.data_dir):
            raise CatalogueLoadError(f"Data directory not found: {self.data_dir}")

        gst_files, cat_files = self._scan()
        gs_path = self._game_system_path(gst_files)
        game_system = parse_game_system(read_document(gs_path))
        self._log(f"Loaded game system: {game_system.name} (revision {game_system.revision})")
        if not is_supported_battlescribe_version(game_system.battle_scribe_version):
            logger.warning(
                "Untested battleScribeVersion %s in %s; parsing anyway",
                game_system.battle_scribe_version,
                gs_path,
            )

        documents: List[Catalogue] = []
        seen: Dict[str, str] = {}
        for path in cat_files:
            doc = parse_catalogue(read_document(path))
            kind = "library" if doc.library else "catalogue"
            self._log(f"Loaded {kind}: {doc.name} (revision {doc.revision})")
            self._note_collisions(doc, seen)
            documents.append(doc)

        return CatalogueIndex.from_documents(game_system, documents)

    def _note_collisions(self, doc: Catalogue, seen: Dict[str, str]) -> None:
        for node in iter_shared_nodes(doc):
            entry_id = str(node.id)
            owner = seen.get(entry_id)
            if owner is None:
                seen[entry_id] = str(doc.id)
            elif owner != doc.id:
                logger.debug("Duplicate shared id %s in %s (first declared in %s)", entry_id, doc.id, owner)
