"""Smoke tests for the terminal front end."""

from __future__ import annotations

from pathlib import Path

import pytest

from apps.cli import main as cli_main
from apps.cli.cli_common import clip, console, fmt_costs
from apps.cli.commands import codex
from grimoire.discovery import ProfileTypeNames
from grimoire.engine import GrimoireEngine
from grimoire.indexers.catalogue_index import CatalogueIndex

pytestmark = [pytest.mark.unit]


@pytest.fixture
def engine(corpus: CatalogueIndex) -> GrimoireEngine:
    return GrimoireEngine(index=corpus, type_names=ProfileTypeNames(), silent=True)


def test_formatters() -> None:
    """Cost and text helpers render compactly."""

    assert fmt_costs({}) == "-"
    assert fmt_costs({"pts": 20, "CP": 1}) == "pts 20, CP 1"
    assert clip("a  b\nc") == "a b c"
    assert clip("x" * 10, width=5) == "xxxx…"


def test_show_unit_renders_weapons(engine: GrimoireEngine) -> None:
    """The unit view prints stats and weapons."""

    with console.capture() as capture:
        assert codex.show_unit(engine, "LK1") == 0

    out = capture.get()
    assert "Scout" in out
    assert "Boltgun" in out
    assert "Melee" in out


def test_show_unit_missing_returns_error(engine: GrimoireEngine) -> None:
    """Unknown ids print the error and return a non-zero code."""

    with console.capture() as capture:
        assert codex.show_unit(engine, "nope") == 1

    assert "nope" in capture.get()


def test_listings_render(engine: GrimoireEngine) -> None:
    """Summary, catalogue, search and faction views all print."""

    with console.capture() as capture:
        codex.show_summary(engine)
        codex.show_catalogues(engine)
        assert codex.show_catalogue(engine, "cat-sm") == 0
        codex.show_search(engine, "grot")
        codex.show_factions(engine)

    out = capture.get()
    assert "Warhammer 40,000" in out
    assert "Grot Tanks" in out
    assert "Orks" in out


def test_main_reports_load_failure(tmp_path: Path) -> None:
    """A missing data folder exits with status 2."""

    assert cli_main.main(["--data", str(tmp_path / "absent"), "summary"]) == 2
