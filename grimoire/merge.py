# -*- coding: utf-8 -*-
"""Override merger (core).

Overlays an entry link's local overrides onto the entry it resolves to.

Rules
- name: a non-empty link name wins
- costs: keyed by cost type id, link wins; resolved order kept, new keys appended
- category links: keyed by target category id, same overlay
- constraints, modifiers: resolved list followed by link list (no de-dup)
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Tuple, TypeVar

from grimoire.schemas.models import EntryLink, SelectionEntry

T = TypeVar("T")

# Effective view of a linked entry; still a plain SelectionEntry value.
EffectiveEntry = SelectionEntry


def _overlay(base: Tuple[T, ...], extra: Tuple[T, ...], key: Callable[[T], str]) -> Tuple[T, ...]:
    if not extra:
        return base
    merged: Dict[str, T] = {key(item): item for item in base}
    for item in extra:
        # replacing an existing key keeps its position
        merged[key(item)] = item
    return tuple(merged.values())


def merge(link: EntryLink, entry: SelectionEntry) -> EffectiveEntry:
    """Return a new entry with the link's overrides applied; inputs are untouched."""
    return replace(
        entry,
        name=link.name or entry.name,
        costs=_overlay(entry.costs, link.costs, lambda c: c.type_id),
        category_links=_overlay(entry.category_links, link.category_links, lambda c: c.target_id),
        constraints=entry.constraints + link.constraints,
        modifiers=entry.modifiers + link.modifiers,
    )
