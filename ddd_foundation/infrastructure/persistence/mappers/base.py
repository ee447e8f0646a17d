"""Entity mapper - converts between domain entities and persisted records."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, TypeVar

from ddd_foundation.domain.shared.model.entity import Entity
from ddd_foundation.domain.shared.port.record_store import PersistedRecord, RecordStore

E = TypeVar("E", bound=Entity)


class EntityMapper(ABC, Generic[E]):
    """Pure, bidirectional translator between one entity type and its records.

    A mapper does no I/O beyond locating or building the record itself through
    its store. Concrete mappers set ``entity_type`` and implement the two
    conversions::

        class OrderMapper(EntityMapper[Order]):
            entity_type = Order

            def to_entity(self, record, deep=False):
                order = Order(id=OrderId(record.id), customer=record["customer"])
                return self._hydrated(order, record)

            def to_model(self, order):
                return self._find_or_create_record(order, {"customer": order.customer})
    """

    entity_type: ClassVar[type[Entity]]

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    @abstractmethod
    def to_entity(self, record: PersistedRecord, deep: bool = False) -> E:
        """Rebuild the entity from ``record``.

        ``deep`` asks the mapper to also load child entities reached through
        relations.
        """

    @abstractmethod
    def to_model(self, entity: E) -> PersistedRecord:
        """Locate the entity's record by id (or build an unsaved one) and copy fields onto it."""

    def _find_or_create_record(
        self, entity: E, data: dict[str, Any] | None = None
    ) -> PersistedRecord:
        record_id = str(entity.id)
        record = self.store.find_by_id(record_id) or self.store.new_record(record_id)
        if data:
            record.fill(data)
        return record

    @staticmethod
    def _hydrated(entity: E, record: PersistedRecord) -> E:
        entity.hydrate(
            created_at=record.created_at,  # type: ignore[arg-type]
            updated_at=record.updated_at,
            version=record.version,
        )
        return entity
