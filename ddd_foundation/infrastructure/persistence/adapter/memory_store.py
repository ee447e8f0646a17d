"""In-memory RecordStore for tests and local development.

Not for production use - records are lost on restart.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import UTC, datetime
from typing import Mapping

from ddd_foundation.domain.shared.port.record_store import (
    PersistedRecord,
    RecordStore,
    RelationHandle,
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _copy(record: PersistedRecord) -> PersistedRecord:
    return replace(record, fields=dict(record.fields))


class InMemoryRelationHandle(RelationHandle):
    def __init__(self, store: InMemoryRecordStore, foreign_key: str, parent_id: str) -> None:
        self._store = store
        self._foreign_key = foreign_key
        self._parent_id = parent_id

    def find(self, related_id: str) -> PersistedRecord | None:
        record = self._store.find_by_id(related_id)
        if record is None or record.fields.get(self._foreign_key) != self._parent_id:
            return None
        return record

    def delete(self, related: PersistedRecord) -> bool:
        if self.find(related.id) is None:
            return False
        return self._store.delete(related)


class InMemoryRecordStore(RecordStore):
    """Dictionary-backed RecordStore.

    Compare-and-write happens under a lock, giving the same atomicity as a
    conditional UPDATE. Stored records are copied in and out so callers never
    share state with the store.

    Args:
        relations: relation name -> (child store, foreign key field on the child).
    """

    def __init__(self, relations: Mapping[str, tuple[InMemoryRecordStore, str]] | None = None) -> None:
        self._rows: dict[str, PersistedRecord] = {}
        self._lock = threading.RLock()
        self._relations = dict(relations or {})

    def add_relation(self, name: str, store: InMemoryRecordStore, foreign_key: str) -> None:
        self._relations[name] = (store, foreign_key)

    def find_by_id(self, id: str) -> PersistedRecord | None:
        with self._lock:
            row = self._rows.get(id)
            return _copy(row) if row else None

    def new_record(self, id: str) -> PersistedRecord:
        return PersistedRecord(id=id)

    def exists(self, id: str) -> bool:
        with self._lock:
            return id in self._rows

    def create(self, record: PersistedRecord) -> bool:
        now = _utc_now()
        with self._lock:
            if record.id in self._rows:
                return False
            record.version = 1
            record.created_at = now
            record.updated_at = now
            record.exists = True
            self._rows[record.id] = _copy(record)
        return True

    def update(self, record: PersistedRecord, expected_version: int) -> bool:
        now = _utc_now()
        with self._lock:
            stored = self._rows.get(record.id)
            if stored is None or stored.version != expected_version:
                return False
            record.version = expected_version + 1
            record.updated_at = now
            record.created_at = stored.created_at
            self._rows[record.id] = _copy(record)
        return True

    def delete(self, record: PersistedRecord) -> bool:
        with self._lock:
            if self._rows.pop(record.id, None) is None:
                return False
        record.exists = False
        return True

    def relation(self, record: PersistedRecord, name: str) -> RelationHandle | None:
        if name not in self._relations:
            return None
        store, foreign_key = self._relations[name]
        return InMemoryRelationHandle(store, foreign_key, record.id)

    def clear(self) -> None:
        """Clear all stored records (for testing)."""
        with self._lock:
            self._rows.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
