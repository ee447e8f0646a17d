"""Repository port - the persistence contract application code depends on."""

from __future__ import annotations

from abc import abstractmethod
from typing import Iterable, Protocol, TypeVar

from ddd_foundation.domain.shared.model.aggregate import AggregateRoot
from ddd_foundation.domain.shared.model.value import Identifier
from ddd_foundation.domain.shared.port import Port
from ddd_foundation.domain.shared.port.record_store import PersistedRecord

A = TypeVar("A", bound=AggregateRoot)


class AggregateRepository(Port, Protocol[A]):
    @abstractmethod
    def next_id(self) -> Identifier: ...

    @abstractmethod
    def get(self, id: Identifier | str, *, deep: bool = False) -> A | None: ...

    @abstractmethod
    def exists(self, id: Identifier | str) -> bool: ...

    @abstractmethod
    def save(self, entity: A) -> PersistedRecord: ...

    @abstractmethod
    def delete(self, entity: A) -> None: ...

    @abstractmethod
    def delete_many(self, entities: Iterable[A]) -> None: ...

    @abstractmethod
    def delete_related(self, entity: A, relation: str, related_id: Identifier | str) -> None: ...
