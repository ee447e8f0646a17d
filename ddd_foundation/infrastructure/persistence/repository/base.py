"""Repository base - save/delete orchestration with optimistic locking."""

from __future__ import annotations

import logging
from typing import ClassVar, Iterable, TypeVar

from ddd_foundation.domain.shared.error import (
    ConcurrencyConflict,
    DeletionFailure,
    InvalidConfiguration,
    PersistenceFailure,
    RelatedDeletionFailure,
    RelationNotFound,
)
from ddd_foundation.domain.shared.model.aggregate import AggregateRoot
from ddd_foundation.domain.shared.model.entity import Entity
from ddd_foundation.domain.shared.model.value import Identifier
from ddd_foundation.domain.shared.port.event_publisher import DomainEventPublisher
from ddd_foundation.domain.shared.port.record_store import PersistedRecord, RecordStore
from ddd_foundation.domain.shared.port.repository import AggregateRepository
from ddd_foundation.infrastructure.persistence.mappers.resolver import EntityMapperResolver

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=AggregateRoot)


class Repository(AggregateRepository[A]):
    """Persists aggregates through their mappers and publishes their events.

    Concrete repositories name the aggregate they manage::

        class OrderRepository(Repository[Order]):
            aggregate = Order

    Construction fails fast if ``aggregate`` is missing or not an
    AggregateRoot subclass (InvalidConfiguration), or if the resolver has no
    mapper for it (MapperNotFound).

    ``save`` ordering: optimistic-lock check, atomic conditional write, event
    publication, re-hydration. Events are only published after the write
    succeeded; a failed write never reaches the publisher.
    """

    aggregate: ClassVar[type[AggregateRoot]]

    def __init__(self, resolver: EntityMapperResolver, publisher: DomainEventPublisher) -> None:
        aggregate = getattr(type(self), "aggregate", None)
        if not (isinstance(aggregate, type) and issubclass(aggregate, AggregateRoot)):
            raise InvalidConfiguration(
                f"{type(self).__name__} must define a valid aggregate class"
            )
        self._resolver = resolver
        self._publisher = publisher
        self._mapper = resolver.resolve(aggregate)

    # --- lookups ---

    def next_id(self) -> Identifier:
        id_type = self.aggregate.model_fields["id"].annotation
        if not (isinstance(id_type, type) and issubclass(id_type, Identifier)):
            id_type = Identifier
        return id_type.generate()

    def get(self, id: Identifier | str, *, deep: bool = False) -> A | None:
        record = self._mapper.store.find_by_id(str(id))
        return self._mapper.to_entity(record, deep=deep) if record else None

    def exists(self, id: Identifier | str) -> bool:
        return self._mapper.store.exists(str(id))

    # --- save ---

    def save(self, entity: A | Entity) -> PersistedRecord:
        mapper = self._resolver.resolve_for(entity)
        record = mapper.to_model(entity)
        is_new = not record.exists

        if not is_new:
            self._handle_optimistic_locking(record, entity)

        if is_new or entity.is_dirty():
            self._write(mapper.store, record, entity, is_new)
        else:
            logger.debug("Nothing to persist for %s", entity)

        try:
            if isinstance(entity, AggregateRoot):
                self._dispatch_uncommitted_events(entity)
        finally:
            # The write is committed even if a subscriber failed
            self._sync_entity_from_record(entity, record)

        return record

    def _handle_optimistic_locking(self, record: PersistedRecord, entity: Entity) -> None:
        if record.version != entity.persisted_version:
            logger.warning(
                "Version conflict on %s: expected %d, stored %d",
                entity,
                entity.persisted_version,
                record.version,
            )
            raise ConcurrencyConflict(entity.id, entity.persisted_version, record.version)

    def _write(
        self, store: RecordStore, record: PersistedRecord, entity: Entity, is_new: bool
    ) -> None:
        if is_new:
            written = store.create(record)
        else:
            written = store.update(record, expected_version=entity.persisted_version)

        if written:
            logger.info(
                "%s %s (version %d)", "Created" if is_new else "Updated", entity, record.version
            )
            return

        # Zero rows matched: either another writer got there first or storage refused
        current = store.find_by_id(record.id)
        if is_new and current is not None:
            raise ConcurrencyConflict(entity.id, entity.persisted_version, current.version)
        if not is_new and (current is None or current.version != entity.persisted_version):
            actual = current.version if current else None
            logger.warning(
                "Lost update race on %s: expected %d, stored %s",
                entity,
                entity.persisted_version,
                actual,
            )
            raise ConcurrencyConflict(entity.id, entity.persisted_version, actual)

        logger.warning("Write rejected for %s", entity)
        raise PersistenceFailure(f"Failed to save entity {entity.id}")

    def _dispatch_uncommitted_events(self, aggregate: AggregateRoot) -> None:
        if aggregate.has_uncommitted_events():
            self._publisher.publish(aggregate.uncommitted_events())
            aggregate.mark_events_as_committed()

    def _sync_entity_from_record(self, entity: Entity, record: PersistedRecord) -> None:
        # Update entity with final stored values
        if record.exists:
            entity.hydrate(
                created_at=record.created_at,  # type: ignore[arg-type]
                updated_at=record.updated_at,
                version=record.version,
            )

    # --- delete ---

    def delete(self, entity: A | Entity) -> None:
        mapper = self._resolver.resolve_for(entity)
        record = mapper.to_model(entity)
        if not record.exists:
            raise DeletionFailure(f"Cannot delete {entity}: no stored record")
        if not mapper.store.delete(record):
            raise DeletionFailure(f"Failed to delete entity {entity.id}")
        logger.info("Deleted %s", entity)

    def delete_many(self, entities: Iterable[A | Entity]) -> None:
        """Delete each entity in order; stops at the first failure.

        There is no enclosing transaction: entities deleted before the
        failure stay deleted.
        """
        for entity in entities:
            self.delete(entity)

    def delete_related(
        self, entity: A | Entity, relation: str, related_id: Identifier | str
    ) -> None:
        mapper = self._resolver.resolve_for(entity)
        record = mapper.to_model(entity)

        handle = mapper.store.relation(record, relation)
        if handle is None:
            raise RelationNotFound(relation, type(entity).__qualname__)

        related = handle.find(str(related_id)) if record.exists else None
        if related is None:
            raise RelatedDeletionFailure(
                f"Related record {related_id} not found in '{relation}' of {entity}"
            )
        if not handle.delete(related):
            raise RelatedDeletionFailure(
                f"Unable to delete related record {related_id} from '{relation}' of {entity}"
            )
        logger.info("Deleted %s from '%s' of %s", related_id, relation, entity)
