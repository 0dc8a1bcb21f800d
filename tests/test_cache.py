"""Tests for the derived-result cache and its lock."""

from __future__ import annotations

import threading

import pytest

from grimoire.cache import ReadWriteLock, ResultCache
from grimoire.schemas.records import CatalogueRecord, UnitProfiles, UnitRecord, WeaponSet

pytestmark = [pytest.mark.unit]


def _unit(unit_id: str) -> UnitRecord:
    return UnitRecord(
        id=unit_id,
        name=unit_id,
        type="unit",
        profiles=UnitProfiles(),
        weapons=WeaponSet(),
        categories=[],
        rules=[],
        costs={},
    )


def test_units_and_catalogues_are_kept_apart() -> None:
    """Records are keyed by the requested id, one map per record kind."""

    cache = ResultCache()
    record = _unit("LK1")
    catalogue = CatalogueRecord(
        id="cat", name="Cat", revision="1", library=False, game_system_id="gs",
        linked_catalogues=[], units=[], publications=[],
    )

    cache.set_unit("LK1", record)
    cache.set_catalogue("cat", catalogue)

    assert cache.get_unit("LK1") is record
    assert cache.get_unit("other") is None
    assert cache.stats() == {"units": 1, "catalogues": 1}

    assert cache.get_catalogue("cat") is catalogue
    assert cache.get_catalogue("LK1") is None


def test_concurrent_readers_and_writers() -> None:
    """Parallel access neither deadlocks nor loses writes."""

    cache = ResultCache()
    errors: list[BaseException] = []

    def worker(n: int) -> None:
        try:
            for i in range(200):
                key = f"u{n}-{i}"
                cache.set_unit(key, _unit(key))
                assert cache.get_unit(key) is not None
        except BaseException as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert not errors
    assert all(not t.is_alive() for t in threads)
    assert cache.stats()["units"] == 8 * 200


def test_readers_share_the_lock() -> None:
    """Two readers may hold the lock at the same time."""

    lock = ReadWriteLock()
    entered = threading.Barrier(2, timeout=5)

    def reader() -> None:
        with lock.read():
            entered.wait()

    other = threading.Thread(target=reader)
    other.start()
    reader()
    other.join(timeout=5)

    assert not other.is_alive()


def test_writer_waits_for_reader() -> None:
    """A writer only proceeds once the active reader leaves."""

    lock = ReadWriteLock()
    order: list[str] = []
    reading = threading.Event()

    def writer() -> None:
        reading.wait(timeout=5)
        with lock.write():
            order.append("write")

    t = threading.Thread(target=writer)
    t.start()
    with lock.read():
        reading.set()
        # give the writer a chance to block on the lock
        t.join(timeout=0.2)
        order.append("read")
    t.join(timeout=5)

    assert order == ["read", "write"]
