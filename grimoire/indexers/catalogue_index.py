# -*- coding: utf-8 -*-
"""Catalogue index (core).

Immutable snapshot of one loaded corpus: the game system plus catalogues and
libraries keyed by id. Built once by the loader, then only read.

Every accessor is a map lookup or a scan inside a single document; searching
across documents is the link resolver's job.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from grimoire.schemas.models import Catalogue, GameSystem, Profile


class CatalogueIndex:
    """Read-only lookup surface (safe for any number of concurrent readers)."""

    def __init__(
        self,
        game_system: Optional[GameSystem],
        catalogues: Iterable[Catalogue] = (),
        libraries: Iterable[Catalogue] = (),
    ):
        self._game_system = game_system
        cats: Dict[str, Catalogue] = {}
        libs: Dict[str, Catalogue] = {}
        for cat in catalogues:
            cats[str(cat.id)] = cat
        for lib in libraries:
            libs[str(lib.id)] = lib
        # dict order is load order; the proxies keep it read-only
        self._catalogues: Mapping[str, Catalogue] = MappingProxyType(cats)
        self._libraries: Mapping[str, Catalogue] = MappingProxyType(libs)
        self._catalogue_list: Tuple[Catalogue, ...] = tuple(cats.values())
        self._library_list: Tuple[Catalogue, ...] = tuple(libs.values())

    @classmethod
    def from_documents(cls, game_system: Optional[GameSystem], documents: Iterable[Catalogue]) -> "CatalogueIndex":
        """Split documents into catalogues/libraries by their `library` flag."""
        cats: List[Catalogue] = []
        libs: List[Catalogue] = []
        for doc in documents:
            (libs if doc.library else cats).append(doc)
        return cls(game_system, cats, libs)

    @property
    def game_system(self) -> Optional[GameSystem]:
        return self._game_system

    def lookup_catalogue(self, document_id: str) -> Optional[Catalogue]:
        if not document_id:
            return None
        return self._catalogues.get(str(document_id))

    def lookup_library(self, document_id: str) -> Optional[Catalogue]:
        if not document_id:
            return None
        return self._libraries.get(str(document_id))

    def lookup_document(self, document_id: str) -> Optional[Catalogue]:
        return self.lookup_catalogue(document_id) or self.lookup_library(document_id)

    def all_catalogues(self) -> Tuple[Catalogue, ...]:
        return self._catalogue_list

    def all_libraries(self) -> Tuple[Catalogue, ...]:
        return self._library_list

    def lookup_shared_profile(self, profile_id: str, document_id: str) -> Optional[Profile]:
        """Find a shared profile inside one document (catalogue map first)."""
        if not profile_id:
            return None
        for doc in (self.lookup_catalogue(document_id), self.lookup_library(document_id)):
            if doc is None:
                continue
            for profile in doc.shared_profiles:
                if profile.id == profile_id:
                    return profile
        return None

    def stats(self) -> Dict[str, int]:
        gs = self._game_system
        return {
            "catalogues": len(self._catalogue_list),
            "libraries": len(self._library_list),
            "profile_types": len(gs.profile_types) if gs else 0,
            "cost_types": len(gs.cost_types) if gs else 0,
            "root_entry_links": sum(len(c.entry_links) for c in self._catalogue_list),
        }
