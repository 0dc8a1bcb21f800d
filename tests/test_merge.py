"""Tests for overlaying entry-link overrides onto resolved entries."""

from __future__ import annotations

import pytest

from conftest import SCOUT, pts
from grimoire.merge import merge
from grimoire.schemas.models import CategoryLink, Constraint, Cost, EntryLink, Modifier, SelectionEntry

pytestmark = [pytest.mark.unit]


def test_link_cost_replaces_resolved_cost_of_same_type() -> None:
    """Exactly one cost per type survives and it carries the link value."""

    link = EntryLink(id="LK1", target_id="U1", costs=(pts("20"),))

    merged = merge(link, SCOUT)

    assert [(c.type_id, c.value) for c in merged.costs] == [("ct-pts", "20")]


def test_new_cost_types_are_appended_in_order() -> None:
    """Costs unknown to the entry follow the entry's own costs."""

    entry_costs = (Cost(name="pts", type_id="ct-pts", value="100"), Cost(name="PL", type_id="ct-pl", value="5"))
    entry = SelectionEntry(id="E", costs=entry_costs)
    link = EntryLink(
        id="L",
        target_id="E",
        costs=(Cost(name="CP", type_id="ct-cp", value="1"), Cost(name="pts", type_id="ct-pts", value="90")),
    )

    merged = merge(link, entry)

    assert [(c.type_id, c.value) for c in merged.costs] == [("ct-pts", "90"), ("ct-pl", "5"), ("ct-cp", "1")]


def test_non_empty_link_name_wins() -> None:
    """A named link renames the entry; an unnamed one keeps it."""

    assert merge(EntryLink(id="L", target_id="U1", name="Scout Squad"), SCOUT).name == "Scout Squad"
    assert merge(EntryLink(id="L", target_id="U1"), SCOUT).name == "Scout"


def test_category_links_overlay_by_target() -> None:
    """Link category links replace same-target ones and append the rest."""

    link = EntryLink(
        id="L",
        target_id="U1",
        category_links=(
            CategoryLink(id="x", name="Infantry", target_id="cat-inf", primary=False),
            CategoryLink(id="y", name="Battleline", target_id="cat-bl"),
        ),
    )

    merged = merge(link, SCOUT)

    assert [c.target_id for c in merged.category_links] == ["cat-fac-imp", "cat-inf", "cat-bl"]
    assert merged.category_links[1].primary is False


def test_constraints_and_modifiers_are_concatenated() -> None:
    """Resolved constraints come first, then the link's, with no de-duplication."""

    extra = Constraint(id="con-1", type="max", value="1", scope="roster")
    link = EntryLink(id="L", target_id="U1", constraints=(extra,), modifiers=(Modifier(id="m", type="set"),))

    merged = merge(link, SCOUT)

    assert merged.constraints == SCOUT.constraints + (extra,)
    assert [m.id for m in merged.modifiers] == ["m"]


def test_merge_leaves_inputs_untouched() -> None:
    """The resolved entry is shared and must not change."""

    link = EntryLink(id="L", target_id="U1", name="Renamed", costs=(pts("1"),))

    merged = merge(link, SCOUT)

    assert merged is not SCOUT
    assert SCOUT.name == "Scout"
    assert SCOUT.costs == (pts("100"),)
    assert merged.profiles is SCOUT.profiles


def test_merging_the_same_inputs_twice_gives_equal_results() -> None:
    """merge depends only on its arguments."""

    link = EntryLink(
        id="L",
        target_id="U1",
        name="Renamed",
        costs=(pts("20"), Cost(name="CP", type_id="ct-cp", value="1")),
        category_links=(CategoryLink(id="c", target_id="cat-bl", name="Battleline"),),
        constraints=(Constraint(id="con-1", type="max", value="1"),),
    )

    first = merge(link, SCOUT)
    second = merge(link, SCOUT)

    assert first == second
    assert first is not second
