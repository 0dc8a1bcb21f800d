# -*- coding: utf-8 -*-
"""Query services used by the HTTP API and the CLI.

Notes
- Unit ids are entry-link ids (what catalogues expose) or, as a fallback,
  selection-entry ids (what libraries define).
- Unit rows for list/search are built once per service and reused; the corpus
  never changes after load.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import List, Optional, Tuple

from grimoire.assembler import Assembler, catalogue_info, unit_summary
from grimoire.cache import ResultCache
from grimoire.discovery import ENTRY_LINK_TYPES
from grimoire.errors import NotFoundError
from grimoire.indexers.catalogue_index import CatalogueIndex
from grimoire.merge import merge
from grimoire.resolver import LinkResolver
from grimoire.schemas.models import SelectionEntry
from grimoire.schemas.records import (
    CatalogueInfo,
    CatalogueRecord,
    FactionSummary,
    GameSystemRecord,
    SearchResult,
    UnitRecord,
    UnitSummary,
    WeaponSet,
)

logger = logging.getLogger(__name__)

UNIT_LINK_TYPE = "selectionEntry"


def extract_faction_from_name(name: str) -> str:
    """'Imperium - Space Marines' -> 'Imperium'; 'Necrons' -> 'Necrons'."""
    name = (name or "").strip()
    if " - " in name:
        return name.split(" - ", 1)[0]
    if " " in name:
        return name.split(" ", 1)[0]
    return name


class UnitService:
    def __init__(
        self,
        index: CatalogueIndex,
        resolver: LinkResolver,
        assembler: Assembler,
        cache: Optional[ResultCache] = None,
    ):
        self.index = index
        self.resolver = resolver
        self.assembler = assembler
        self.cache = cache or ResultCache()

        self._rows_lock = threading.Lock()
        self._rows: Optional[List[Tuple[UnitSummary, SelectionEntry]]] = None

    # ----------------- single unit -----------------

    def get_unit(self, unit_id: str) -> UnitRecord:
        cached = self.cache.get_unit(unit_id)
        if cached is not None:
            return cached

        entry: Optional[SelectionEntry] = None
        document_id = ""
        owner_id = ""
        via_link = False
        link_error: Optional[NotFoundError] = None

        try:
            link, document_id = self.resolver.find_entry_link(unit_id)
        except NotFoundError:
            link = None
        if link is not None and (link.type or "") not in ENTRY_LINK_TYPES:
            # group links expose a choice, not a unit
            logger.debug("Entry link %s has type %r; not a unit", unit_id, link.type)
            link = None
        if link is not None:
            try:
                target, owner_id = self.resolver.locate_entry(link, document_id)
                entry = merge(link, target)
                via_link = True
            except NotFoundError as exc:
                link_error = exc

        if entry is None:
            try:
                entry, document_id = self.resolver.find_selection_entry(unit_id)
            except NotFoundError:
                if link_error is not None:
                    # the link exists but its target doesn't: report the target id
                    raise link_error from None
                raise NotFoundError(unit_id, kind="unit") from None
            owner_id = document_id

        record = self.assembler.build_unit_record(entry, document_id, owner_document_id=owner_id)
        if via_link:
            record = replace(record, id=unit_id)

        self.cache.set_unit(unit_id, record)
        return record

    def get_unit_weapons(self, unit_id: str) -> WeaponSet:
        return self.get_unit(unit_id).weapons

    def get_units(self, unit_ids: List[str]) -> Tuple[List[UnitRecord], List[str]]:
        """Records for every known id, plus the ids that were not found."""
        found: List[UnitRecord] = []
        missing: List[str] = []
        for unit_id in unit_ids:
            try:
                found.append(self.get_unit(unit_id))
            except NotFoundError:
                missing.append(unit_id)
        return found, missing

    # ----------------- listings -----------------

    def _unit_rows(self) -> List[Tuple[UnitSummary, SelectionEntry]]:
        with self._rows_lock:
            if self._rows is None:
                self._rows = self._build_rows()
            return self._rows

    def _build_rows(self) -> List[Tuple[UnitSummary, SelectionEntry]]:
        rows: List[Tuple[UnitSummary, SelectionEntry]] = []
        skipped = 0
        for cat in self.index.all_catalogues():
            for link in cat.entry_links:
                if link.type != UNIT_LINK_TYPE:
                    continue
                try:
                    entry = merge(link, self.resolver.resolve_entry_link(link, cat.id))
                except NotFoundError:
                    skipped += 1
                    continue
                rows.append((unit_summary(link, entry), entry))
        if skipped:
            logger.debug("Skipped %d unresolved root entry links", skipped)
        return rows

    def list_units(
        self,
        faction: str = "",
        category: str = "",
        search: str = "",
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[UnitSummary], int]:
        """Filtered, paginated unit summaries plus the unfiltered-by-page total."""
        faction_q = (faction or "").lower()
        category_q = (category or "").lower()
        search_q = (search or "").lower()

        matched: List[UnitSummary] = []
        for summary, entry in self._unit_rows():
            cat_names = [c.name.lower() for c in entry.category_links]
            if faction_q and not any(faction_q in n for n in cat_names):
                continue
            if category_q and not any(category_q in n for n in cat_names):
                continue
            if search_q and search_q not in summary.name.lower():
                continue
            matched.append(summary)

        total = len(matched)
        start = min(max(0, offset), total)
        end = min(start + max(0, limit), total)
        return matched[start:end], total

    def search_units(self, query: str, limit: int = 50) -> List[SearchResult]:
        q = (query or "").lower()
        out: List[SearchResult] = []
        for summary, _ in self._unit_rows():
            if q in summary.name.lower():
                out.append(SearchResult(type="unit", id=summary.id, name=summary.name))
                if len(out) >= limit:
                    break
        return out

    def list_factions(self) -> List[FactionSummary]:
        grouped = {}
        for cat in self.index.all_catalogues():
            faction = extract_faction_from_name(cat.name)
            if faction:
                grouped.setdefault(faction, []).append(cat.name)
        return [FactionSummary(name=k, catalogues=v) for k, v in grouped.items()]

    def get_faction_units(self, faction: str) -> List[UnitSummary]:
        units, _ = self.list_units(faction=faction, limit=1000)
        return units


class CatalogueService:
    def __init__(
        self,
        index: CatalogueIndex,
        resolver: LinkResolver,
        assembler: Assembler,
        cache: Optional[ResultCache] = None,
    ):
        self.index = index
        self.resolver = resolver
        self.assembler = assembler
        self.cache = cache or ResultCache()

    def _catalogue(self, catalogue_id: str):
        cat = self.index.lookup_catalogue(catalogue_id)
        if cat is None:
            raise NotFoundError(catalogue_id, kind="catalogue")
        return cat

    def get_catalogue(self, catalogue_id: str) -> CatalogueRecord:
        cached = self.cache.get_catalogue(catalogue_id)
        if cached is not None:
            return cached
        record = self.assembler.build_catalogue_record(self._catalogue(catalogue_id))
        self.cache.set_catalogue(catalogue_id, record)
        return record

    def list_catalogues(self) -> List[CatalogueInfo]:
        return [catalogue_info(c) for c in self.index.all_catalogues()]

    def get_catalogue_units(self, catalogue_id: str) -> List[UnitSummary]:
        cat = self._catalogue(catalogue_id)
        out: List[UnitSummary] = []
        for link in cat.entry_links:
            if link.type != UNIT_LINK_TYPE:
                continue
            try:
                entry = merge(link, self.resolver.resolve_entry_link(link, cat.id))
            except NotFoundError:
                continue
            out.append(unit_summary(link, entry))
        return out

    def get_game_system(self) -> GameSystemRecord:
        return self.assembler.build_game_system_record()
