# -*- coding: utf-8 -*-
"""Derived-result cache.

Holds assembled unit/catalogue records keyed by the id they were requested
with. Readers share the lock; a writer waits for readers to drain.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from grimoire.schemas.records import CatalogueRecord, UnitRecord


class ReadWriteLock:
    """Many concurrent readers or a single writer (writers are preferred)."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ResultCache:
    def __init__(self):
        self._lock = ReadWriteLock()
        self._units: Dict[str, UnitRecord] = {}
        self._catalogues: Dict[str, CatalogueRecord] = {}

    def get_unit(self, unit_id: str) -> Optional[UnitRecord]:
        with self._lock.read():
            return self._units.get(unit_id)

    def set_unit(self, unit_id: str, record: UnitRecord) -> None:
        with self._lock.write():
            self._units[unit_id] = record

    def get_catalogue(self, catalogue_id: str) -> Optional[CatalogueRecord]:
        with self._lock.read():
            return self._catalogues.get(catalogue_id)

    def set_catalogue(self, catalogue_id: str, record: CatalogueRecord) -> None:
        with self._lock.write():
            self._catalogues[catalogue_id] = record

    def stats(self) -> Dict[str, int]:
        with self._lock.read():
            return {"units": len(self._units), "catalogues": len(self._catalogues)}
