"""Tests for reading BattleScribe files from disk."""

from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from grimoire.errors import CatalogueLoadError
from grimoire.parsers.battlescribe import BattleScribeLoader, parse_catalogue, read_document
from grimoire.resolver import LinkResolver

pytestmark = [pytest.mark.integration]

GST = """<?xml version="1.0" encoding="UTF-8"?>
<gameSystem id="gs-1" name="Warhammer 40,000" revision="5" battleScribeVersion="2.03"
            xmlns="http://www.battlescribe.net/schema/gameSystemSchema">
  <publications>
    <publication id="pub-core" name="Core Rules"/>
  </publications>
  <costTypes>
    <costType id="ct-pts" name="pts" defaultCostLimit="-1.0" hidden="false"/>
  </costTypes>
  <profileTypes>
    <profileType id="pt-unit" name="Unit">
      <characteristicTypes>
        <characteristicType id="c-m" name="M"/>
        <characteristicType id="c-t" name="T"/>
      </characteristicTypes>
    </profileType>
  </profileTypes>
  <categoryEntries>
    <categoryEntry id="cat-inf" name="Infantry" hidden="false"/>
  </categoryEntries>
</gameSystem>
"""

LIBRARY = """<?xml version="1.0" encoding="UTF-8"?>
<catalogue id="lib-imp" name="Imperium - Library" revision="3" library="true" gameSystemId="gs-1"
           xmlns="http://www.battlescribe.net/schema/catalogueSchema">
  <sharedSelectionEntries>
    <selectionEntry id="U1" name="Scout" type="unit" publicationId="pub-core" page="9">
      <profiles>
        <profile id="p1" name="Scout" typeId="pt-unit" typeName="Unit">
          <characteristics>
            <characteristic name="M" typeId="c-m">6"</characteristic>
            <characteristic name="T" typeId="c-t">3</characteristic>
            <characteristic name="W">1</characteristic>
          </characteristics>
        </profile>
      </profiles>
      <categoryLinks>
        <categoryLink id="cl1" name="Faction: Imperium" targetId="fac-imp" primary="false"/>
      </categoryLinks>
      <constraints>
        <constraint id="c1" type="max" value="3" field="selections" scope="roster"/>
      </constraints>
      <costs>
        <cost name="pts" typeId="ct-pts" value="100"/>
      </costs>
      <modifierGroups>
        <modifierGroup type="and">
          <comment> stacking rule </comment>
        </modifierGroup>
      </modifierGroups>
    </selectionEntry>
  </sharedSelectionEntries>
</catalogue>
"""

CATALOGUE = """<?xml version="1.0" encoding="UTF-8"?>
<catalogue id="cat-sm" name="Imperium - Space Marines" revision="12" library="false" gameSystemId="gs-1"
           xmlns="http://www.battlescribe.net/schema/catalogueSchema">
  <catalogueLinks>
    <catalogueLink id="cl" name="Imperium - Library" targetId="lib-imp" type="catalogue" importRootEntries="true"/>
  </catalogueLinks>
  <entryLinks>
    <entryLink id="LK1" name="Scout" hidden="false" targetId="U1" type="selectionEntry">
      <costs>
        <cost name="pts" typeId="ct-pts" value="20"/>
      </costs>
      <modifiers>
        <modifier type="set" field="hidden" value="true">
          <conditions>
            <condition type="atLeast" value="1" field="selections" scope="roster" childId="x"/>
          </conditions>
        </modifier>
      </modifiers>
    </entryLink>
  </entryLinks>
</catalogue>
"""


def _write_corpus(root: Path) -> Path:
    (root / "wh40k.gst").write_text(GST, encoding="utf-8")
    (root / "Imperium - Library.cat").write_text(LIBRARY, encoding="utf-8")
    sub = root / "factions"
    sub.mkdir()
    with zipfile.ZipFile(sub / "Space Marines.catz", "w") as zf:
        zf.writestr("Space Marines.cat", CATALOGUE)
    return root


def test_loader_reads_plain_and_zipped_documents(tmp_path: Path) -> None:
    """A data folder with .gst, .cat and .catz loads into one index."""

    index = BattleScribeLoader(str(_write_corpus(tmp_path)), silent=True).load()

    assert index.game_system.name == "Warhammer 40,000"
    assert index.game_system.profile_types[0].characteristic_names() == ("M", "T")
    assert [lib.id for lib in index.all_libraries()] == ["lib-imp"]
    assert [c.id for c in index.all_catalogues()] == ["cat-sm"]


def test_loaded_documents_keep_attribute_text(tmp_path: Path) -> None:
    """Attributes, characteristics and nested rule data survive parsing."""

    index = BattleScribeLoader(str(_write_corpus(tmp_path)), silent=True).load()
    scout = index.lookup_library("lib-imp").shared_selection_entries[0]
    link = index.lookup_catalogue("cat-sm").entry_links[0]

    assert scout.profiles[0].characteristic_map() == {"M": '6"', "T": "3", "W": "1"}
    assert scout.category_links[0].name == "Faction: Imperium"
    assert scout.constraints[0].int_value() == 3
    assert scout.modifier_groups[0].comment == "stacking rule"
    assert link.costs[0].value == "20"
    assert link.modifiers[0].conditions[0].child_id == "x"
    assert index.lookup_catalogue("cat-sm").catalogue_links[0].import_root_entries is True


def test_loaded_corpus_resolves_links(tmp_path: Path) -> None:
    """Links written on disk resolve across files."""

    index = BattleScribeLoader(str(_write_corpus(tmp_path)), silent=True).load()
    link = index.lookup_catalogue("cat-sm").entry_links[0]

    assert LinkResolver(index).resolve_entry_link(link, "cat-sm").name == "Scout"


def test_explicit_game_system_file_is_relative_to_data_dir(tmp_path: Path) -> None:
    """An explicit game system path may be given relative to the data folder."""

    root = _write_corpus(tmp_path)
    (root / "aaa-other.gst").write_text(GST.replace('name="Warhammer 40,000"', 'name="Other"'), encoding="utf-8")

    assert BattleScribeLoader(str(root), silent=True).load().game_system.name == "Other"
    assert BattleScribeLoader(str(root), "wh40k.gst", silent=True).load().game_system.name == "Warhammer 40,000"


def test_malformed_xml_is_a_load_error(tmp_path: Path) -> None:
    """Broken files fail loudly with the offending path."""

    _write_corpus(tmp_path)
    bad = tmp_path / "broken.cat"
    bad.write_text("<catalogue id='x'><oops></catalogue>", encoding="utf-8")

    with pytest.raises(CatalogueLoadError) as excinfo:
        BattleScribeLoader(str(tmp_path), silent=True).load()

    assert "broken.cat" in str(excinfo.value)


def test_missing_folder_and_missing_game_system(tmp_path: Path) -> None:
    """Both a missing folder and a folder without .gst are load errors."""

    with pytest.raises(CatalogueLoadError):
        BattleScribeLoader(str(tmp_path / "absent")).load()
    with pytest.raises(CatalogueLoadError):
        BattleScribeLoader(str(tmp_path)).load()


def test_wrong_root_element_is_rejected(tmp_path: Path) -> None:
    """A game system file is not a catalogue."""

    path = tmp_path / "wh40k.gst"
    path.write_text(GST, encoding="utf-8")

    with pytest.raises(CatalogueLoadError):
        parse_catalogue(read_document(str(path)))


def test_bad_zip_is_a_load_error(tmp_path: Path) -> None:
    """A .catz that isn't an archive is reported, not crashed on."""

    path = tmp_path / "bad.catz"
    path.write_bytes(b"not a zip")

    with pytest.raises(CatalogueLoadError):
        read_document(str(path))
