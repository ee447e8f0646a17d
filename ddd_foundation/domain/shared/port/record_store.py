"""RecordStore port - persistence capability consumed by mappers and repositories."""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from ddd_foundation.domain.shared.port import Port


@dataclass
class PersistedRecord:
    """Storage-layer representation of an entity's durable state.

    Attributes:
        id: Primary key (the entity's identity, as a string).
        version: Stored optimistic-lock version.
        created_at: Set by the store when the record is created.
        updated_at: Set by the store on every successful write.
        fields: Domain columns.
        exists: True once the record is backed by storage.
    """

    id: str
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    fields: dict[str, Any] = field(default_factory=dict)
    exists: bool = False

    def fill(self, values: dict[str, Any]) -> None:
        self.fields.update(values)

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


class RelationHandle(Port, Protocol):
    """A named association navigated from one record."""

    @abstractmethod
    def find(self, related_id: str) -> PersistedRecord | None: ...

    @abstractmethod
    def delete(self, related: PersistedRecord) -> bool: ...


class RecordStore(Port, Protocol):
    """Create/read/update/delete plus relation navigation over one record type.

    Writes report rejection by returning False rather than raising; the
    repository turns that into the matching domain error.
    """

    @abstractmethod
    def find_by_id(self, id: str) -> PersistedRecord | None: ...

    @abstractmethod
    def new_record(self, id: str) -> PersistedRecord:
        """Build an unsaved record (``exists`` is False)."""
        ...

    @abstractmethod
    def create(self, record: PersistedRecord) -> bool:
        """Insert ``record``; on success it exists and carries version/timestamps."""
        ...

    @abstractmethod
    def update(self, record: PersistedRecord, expected_version: int) -> bool:
        """Atomically write ``record`` if the stored version equals ``expected_version``.

        The compare and the write are a single operation against storage. On
        success the stored version is incremented and ``record`` reflects it.
        Returns False if no row matched.
        """
        ...

    @abstractmethod
    def delete(self, record: PersistedRecord) -> bool: ...

    @abstractmethod
    def relation(self, record: PersistedRecord, name: str) -> RelationHandle | None:
        """Navigate association ``name``; None if it is not a known relation."""
        ...

    @abstractmethod
    def exists(self, id: str) -> bool: ...
