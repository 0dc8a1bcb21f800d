"""Pytest fixtures shared across the Grimoire test suite."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from grimoire.indexers.catalogue_index import CatalogueIndex  # noqa: E402
from grimoire.schemas.models import (  # noqa: E402
    Catalogue,
    CatalogueLink,
    CategoryEntry,
    CategoryLink,
    Characteristic,
    CharacteristicType,
    Constraint,
    Cost,
    CostType,
    EntryLink,
    GameSystem,
    InfoLink,
    Profile,
    ProfileType,
    Publication,
    SelectionEntry,
    SelectionEntryGroup,
)


def make_profile(pid: str, name: str, type_name: str, **chars: str) -> Profile:
    """Build a profile; keyword names become characteristic names."""

    return Profile(
        id=pid,
        name=name,
        type_name=type_name,
        characteristics=tuple(Characteristic(name=k, value=v) for k, v in chars.items()),
    )


def unit_profile(pid: str, name: str, **chars: str) -> Profile:
    return make_profile(pid, name, "Unit", **chars)


def ranged(pid: str, name: str, keywords: str = "-") -> Profile:
    return make_profile(pid, name, "Ranged Weapons", Range='24"', A="2", BS="3+", S="4", AP="0", D="1", Keywords=keywords)


def melee(pid: str, name: str, keywords: str = "-") -> Profile:
    return make_profile(pid, name, "Melee Weapons", Range="Melee", A="3", WS="3+", S="4", AP="0", D="1", Keywords=keywords)


def pts(value: str) -> Cost:
    return Cost(name="pts", type_id="ct-pts", value=value)


GAME_SYSTEM = GameSystem(
    id="gs-1",
    name="Warhammer 40,000",
    revision="5",
    battle_scribe_version="2.03",
    publications=(Publication(id="pub-core", name="Core Rules"),),
    cost_types=(CostType(id="ct-pts", name="pts", default_cost_limit="2000"),),
    profile_types=(
        ProfileType(
            id="pt-unit",
            name="Unit",
            characteristic_types=tuple(CharacteristicType(id=f"c-{n}", name=n) for n in ("M", "T", "SV", "W", "LD", "OC")),
        ),
        ProfileType(id="pt-ranged", name="Ranged Weapons"),
        ProfileType(id="pt-melee", name="Melee Weapons"),
    ),
    category_entries=(
        CategoryEntry(id="cat-inf", name="Infantry"),
        CategoryEntry(id="cat-hidden", name="Configuration", hidden=True),
    ),
)

SCOUT = SelectionEntry(
    id="U1",
    name="Scout",
    type="unit",
    publication_id="pub-sm",
    page="42",
    profiles=(
        unit_profile("p-scout", "Scout", M='6"', T="3", SV="4+", W="1", LD="7+", OC="1"),
        make_profile("p-infil", "Infiltrators", "Abilities", Description="Deploys anywhere."),
    ),
    info_links=(InfoLink(id="il-oath", name="Oath of Moment", target_id="rule-oath", type="rule"),),
    category_links=(
        CategoryLink(id="cl-1", name="Faction: Imperium", target_id="cat-fac-imp"),
        CategoryLink(id="cl-2", name="Infantry", target_id="cat-inf", primary=True),
    ),
    selection_entries=(
        SelectionEntry(
            id="se-scout-model",
            name="Scout Trooper",
            type="model",
            entry_links=(EntryLink(id="el-bolter", target_id="se-bolter", type="selectionEntry"),),
        ),
    ),
    costs=(pts("100"),),
    constraints=(
        Constraint(id="con-1", type="max", value="3", scope="roster"),
        Constraint(id="con-2", type="max", value="-1", scope="force"),
    ),
)

BOLTER = SelectionEntry(
    id="se-bolter",
    name="Bolt weapons",
    type="upgrade",
    profiles=(
        ranged("p-pistol", "Bolt pistol", keywords="Pistol"),
        ranged("p-boltgun", "Boltgun", keywords="Rapid Fire 1, Assault"),
        melee("p-ccw", "Close combat weapon"),
    ),
)

LIBRARY = Catalogue(
    id="lib-imp",
    name="Imperium - Library",
    revision="3",
    library=True,
    game_system_id="gs-1",
    shared_selection_entries=(
        SCOUT,
        BOLTER,
        SelectionEntry(id="se-upgrade", name="Auspex", type="upgrade", costs=(pts("5"),)),
    ),
    shared_selection_entry_groups=(
        SelectionEntryGroup(
            id="grp-wargear",
            name="Wargear",
            selection_entries=(SelectionEntry(id="se-knife", name="Combat knife", type="upgrade", profiles=(melee("p-knife", "Combat knife"),)),),
        ),
    ),
)

SPACE_MARINES = Catalogue(
    id="cat-sm",
    name="Imperium - Space Marines",
    revision="12",
    game_system_id="gs-1",
    publications=(Publication(id="pub-sm", name="Codex: Space Marines", short_name="CSM", publication_date="2024"),),
    entry_links=(
        EntryLink(id="LK1", target_id="U1", type="selectionEntry", costs=(pts("20"),)),
        EntryLink(id="LK-missing", name="Ghost", target_id="does-not-exist", type="selectionEntry"),
        EntryLink(id="LK-auspex", target_id="se-upgrade", type="upgrade"),
    ),
    catalogue_links=(
        CatalogueLink(id="cl-lib", name="Imperium - Library", target_id="lib-imp", import_root_entries=True),
        CatalogueLink(id="cl-gone", name="Removed", target_id="cat-removed"),
    ),
)

ORKS = Catalogue(
    id="cat-orks",
    name="Orks",
    revision="7",
    game_system_id="gs-1",
    shared_selection_entries=(
        SelectionEntry(
            id="se-grots",
            name="Grot Tanks",
            type="unit",
            info_links=(InfoLink(id="il-grot", name="Grot Tank", target_id="sp-grot", type="profile"),),
            category_links=(CategoryLink(id="cl-orks", name="Faction: Orks", target_id="cat-fac-orks"),),
            costs=(pts("Variable"),),
        ),
    ),
    shared_profiles=(unit_profile("sp-grot", "Grot Tank", M='6"', T="5", SV="4+", W="4", LD="7+", OC="1"),),
    entry_links=(EntryLink(id="LK-grots", target_id="se-grots", type="selectionEntry"),),
)


@pytest.fixture
def corpus() -> CatalogueIndex:
    """Return a small index: one library, two catalogues."""

    return CatalogueIndex(GAME_SYSTEM, catalogues=[SPACE_MARINES, ORKS], libraries=[LIBRARY])


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests over in-memory data.
    - `integration`: tests touching files or the HTTP stack.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
