# -*- coding: utf-8 -*-
"""Link resolver (core).

Maps an entry link's target id to the concrete definition it points at.

Search order (first match wins):
1) the context document, when it is a library
2) libraries imported by the context catalogue (`importRootEntries`), in link order
3) every library (load order)
4) every catalogue (load order)

Inside one document, shared selection entries (and their nested entries) are
searched before shared groups (their entries and nested groups). Entry links
are never followed while searching.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Tuple, Union

from grimoire.errors import NotFoundError
from grimoire.indexers.catalogue_index import CatalogueIndex
from grimoire.schemas.models import Catalogue, DocumentId, EntryLink, SelectionEntry, SelectionEntryGroup

logger = logging.getLogger(__name__)

Node = Union[SelectionEntry, SelectionEntryGroup]


# ----------------- in-document search -----------------


def iter_shared_nodes(doc: Catalogue) -> Iterator[Node]:
    """Pre-order over a document's shared definitions (explicit stack)."""
    stack: List[Tuple[str, Node]] = []
    for group in reversed(doc.shared_selection_entry_groups):
        stack.append(("group", group))
    for entry in reversed(doc.shared_selection_entries):
        stack.append(("entry", entry))

    while stack:
        kind, node = stack.pop()
        yield node
        if kind == "entry":
            for child in reversed(node.selection_entries):
                stack.append(("entry", child))
            continue
        # group: its entries first, then nested groups
        for sub in reversed(node.selection_entry_groups):
            stack.append(("group", sub))
        for child in reversed(node.selection_entries):
            stack.append(("entry", child))


def find_entry_in_document(doc: Catalogue, entry_id: str) -> Optional[SelectionEntry]:
    if not entry_id:
        return None
    for node in iter_shared_nodes(doc):
        if isinstance(node, SelectionEntry) and node.id == entry_id:
            return node
    return None


def find_group_in_document(doc: Catalogue, group_id: str) -> Optional[SelectionEntryGroup]:
    if not group_id:
        return None
    for node in iter_shared_nodes(doc):
        if isinstance(node, SelectionEntryGroup) and node.id == group_id:
            return node
    return None


# ----------------- resolver -----------------


class LinkResolver:
    """Resolve entry links and catalogue links against a `CatalogueIndex`.

    Stateless apart from the index reference; safe to share between threads.
    """

    def __init__(self, index: CatalogueIndex):
        self.index = index

    def _search_order(self, context_document_id: str) -> Iterator[Catalogue]:
        """Documents in resolution order (duplicates are harmless)."""
        lib = self.index.lookup_library(context_document_id)
        if lib is not None:
            yield lib

        cat = self.index.lookup_catalogue(context_document_id)
        if cat is not None:
            for link in cat.catalogue_links:
                if not link.import_root_entries:
                    continue
                imported = self.index.lookup_library(link.target_id)
                if imported is not None:
                    yield imported

        yield from self.index.all_libraries()
        yield from self.index.all_catalogues()

    def locate_entry(self, link: EntryLink, context_document_id: str) -> Tuple[SelectionEntry, DocumentId]:
        """Resolve an entry link and return the target with its owning document."""
        target_id = link.target_id
        if not target_id:
            raise NotFoundError("", kind="entry", message=f"entry link {link.id!r} has no target id")

        for doc in self._search_order(context_document_id):
            entry = find_entry_in_document(doc, target_id)
            if entry is not None:
                return entry, doc.id

        logger.debug("Unresolved entry link %s -> %s (context %s)", link.id, target_id, context_document_id)
        raise NotFoundError(target_id, kind="entry")

    def locate_group(self, link: EntryLink, context_document_id: str) -> Tuple[SelectionEntryGroup, DocumentId]:
        """Same precedence as `locate_entry`, for `selectionEntryGroup` links."""
        target_id = link.target_id
        if not target_id:
            raise NotFoundError("", kind="group", message=f"entry link {link.id!r} has no target id")

        for doc in self._search_order(context_document_id):
            group = find_group_in_document(doc, target_id)
            if group is not None:
                return group, doc.id

        logger.debug("Unresolved group link %s -> %s (context %s)", link.id, target_id, context_document_id)
        raise NotFoundError(target_id, kind="group")

    def resolve_entry_link(self, link: EntryLink, context_document_id: str) -> SelectionEntry:
        """Return the SelectionEntry a link points at, or raise NotFoundError."""
        return self.locate_entry(link, context_document_id)[0]

    def resolve_entry_group_link(self, link: EntryLink, context_document_id: str) -> SelectionEntryGroup:
        return self.locate_group(link, context_document_id)[0]

    def resolve_catalogue_links(self, catalogue: Catalogue) -> List[Catalogue]:
        """Linked documents in link order; unknown targets are dropped."""
        out: List[Catalogue] = []
        for link in catalogue.catalogue_links:
            doc = self.index.lookup_library(link.target_id) or self.index.lookup_catalogue(link.target_id)
            if doc is not None:
                out.append(doc)
        return out

    # ----------------- id lookups -----------------

    def find_selection_entry(self, entry_id: str) -> Tuple[SelectionEntry, DocumentId]:
        """Find a selection entry by id (libraries first, then catalogues)."""
        for doc in list(self.index.all_libraries()) + list(self.index.all_catalogues()):
            entry = find_entry_in_document(doc, entry_id)
            if entry is not None:
                return entry, doc.id
        raise NotFoundError(entry_id, kind="entry")

    def find_entry_link(self, link_id: str) -> Tuple[EntryLink, DocumentId]:
        """Find a root entry link of a regular catalogue by its own id."""
        if link_id:
            for cat in self.index.all_catalogues():
                for link in cat.entry_links:
                    if link.id == link_id:
                        return link, cat.id
        raise NotFoundError(link_id, kind="entry link")

    def find_collisions(self, target_id: str) -> List[DocumentId]:
        """Every document declaring a shared entry/group with this id.

        More than one result means resolution depends on search order.
        """
        out: List[DocumentId] = []
        if not target_id:
            return out
        for doc in list(self.index.all_libraries()) + list(self.index.all_catalogues()):
            if any(node.id == target_id for node in iter_shared_nodes(doc)):
                out.append(doc.id)
        return out
