"""SQLAlchemy implementation of the RecordStore port."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Mapping

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ddd_foundation.domain.shared.model.entity import as_utc
from ddd_foundation.domain.shared.port.record_store import (
    PersistedRecord,
    RecordStore,
    RelationHandle,
)
from ddd_foundation.infrastructure.persistence.tables import STANDARD_COLUMNS

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def row_to_record(row: RowMapping | Mapping[str, Any]) -> PersistedRecord:
    """Convert database row to a PersistedRecord backed by storage."""
    return PersistedRecord(
        id=row["id"],
        version=row["version"],
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
        fields={k: v for k, v in row.items() if k not in STANDARD_COLUMNS},
        exists=True,
    )


@dataclass(frozen=True)
class Relation:
    """A one-to-many association: rows of ``table`` whose ``foreign_key`` holds the parent id."""

    table: Table
    foreign_key: str


class SqlRelationHandle(RelationHandle):
    def __init__(self, sessions: sessionmaker[Session], relation: Relation, parent_id: str) -> None:
        self._sessions = sessions
        self._relation = relation
        self._parent_id = parent_id

    def _owned(self, related_id: str):
        table = self._relation.table
        return (table.c.id == related_id) & (table.c[self._relation.foreign_key] == self._parent_id)

    def find(self, related_id: str) -> PersistedRecord | None:
        stmt = select(self._relation.table).where(self._owned(related_id))
        with self._sessions() as session:
            row = session.execute(stmt).mappings().first()
        return row_to_record(row) if row else None

    def delete(self, related: PersistedRecord) -> bool:
        stmt = delete(self._relation.table).where(self._owned(related.id))
        try:
            with self._sessions.begin() as session:
                deleted = session.execute(stmt).rowcount
        except IntegrityError:
            logger.warning(
                "Delete from %s rejected for id=%s",
                self._relation.table.name,
                related.id,
                exc_info=True,
            )
            return False
        return deleted == 1


class SqlRecordStore(RecordStore):
    """RecordStore over one SQLAlchemy table.

    Every write runs in its own short transaction, committed before the
    method returns. ``update`` is a single conditional statement
    (``UPDATE ... WHERE id = :id AND version = :expected``), so two writers
    holding the same expected version can never both succeed.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        table: Table,
        relations: Mapping[str, Relation] | None = None,
    ) -> None:
        self._sessions = session_factory
        self.table = table
        self._relations = dict(relations or {})

    def find_by_id(self, id: str) -> PersistedRecord | None:
        stmt = select(self.table).where(self.table.c.id == id)
        with self._sessions() as session:
            row = session.execute(stmt).mappings().first()
        return row_to_record(row) if row else None

    def new_record(self, id: str) -> PersistedRecord:
        return PersistedRecord(id=id)

    def exists(self, id: str) -> bool:
        stmt = select(self.table.c.id).where(self.table.c.id == id)
        with self._sessions() as session:
            return session.execute(stmt).first() is not None

    def create(self, record: PersistedRecord) -> bool:
        now = _utc_now()
        values = {**record.fields, "id": record.id, "version": 1, "created_at": now, "updated_at": now}
        try:
            with self._sessions.begin() as session:
                session.execute(insert(self.table).values(**values))
        except IntegrityError:
            logger.warning("Insert into %s rejected for id=%s", self.table.name, record.id, exc_info=True)
            return False

        record.version = 1
        record.created_at = now
        record.updated_at = now
        record.exists = True
        return True

    def update(self, record: PersistedRecord, expected_version: int) -> bool:
        now = _utc_now()
        stmt = (
            update(self.table)
            .where(self.table.c.id == record.id, self.table.c.version == expected_version)
            .values(**record.fields, version=self.table.c.version + 1, updated_at=now)
        )
        try:
            with self._sessions.begin() as session:
                matched = session.execute(stmt).rowcount
        except IntegrityError:
            logger.warning("Update of %s rejected for id=%s", self.table.name, record.id, exc_info=True)
            return False

        if matched != 1:
            return False

        record.version = expected_version + 1
        record.updated_at = now
        return True

    def delete(self, record: PersistedRecord) -> bool:
        stmt = delete(self.table).where(self.table.c.id == record.id)
        try:
            with self._sessions.begin() as session:
                deleted = session.execute(stmt).rowcount
        except IntegrityError:
            logger.warning("Delete from %s rejected for id=%s", self.table.name, record.id, exc_info=True)
            return False

        if deleted == 1:
            record.exists = False
        return deleted == 1

    def relation(self, record: PersistedRecord, name: str) -> RelationHandle | None:
        relation = self._relations.get(name)
        if relation is None:
            return None
        return SqlRelationHandle(self._sessions, relation, record.id)
