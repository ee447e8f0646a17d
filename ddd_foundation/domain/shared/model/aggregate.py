"""Aggregate roots: entities that record their own domain events."""

import logging
from abc import ABC
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import PrivateAttr
from typing_extensions import Self

from ddd_foundation.domain.shared.event import DomainEvent
from ddd_foundation.domain.shared.model.change import ChangeSet
from ddd_foundation.domain.shared.model.entity import Entity

logger = logging.getLogger(__name__)


@dataclass
class EventLog:
    """Pending (unpublished) domain events of one aggregate, in recorded order."""

    pending: list[DomainEvent] = field(default_factory=list)

    def append(self, event: DomainEvent) -> None:
        self.pending.append(event)

    def copies(self) -> list[DomainEvent]:
        return [event.model_copy(deep=True) for event in self.pending]

    def clear(self) -> None:
        self.pending = []

    def named(self, event_name: str) -> list[DomainEvent]:
        return [e for e in self.pending if e.event_name() == event_name]

    def __len__(self) -> int:
        return len(self.pending)


class AggregateRoot(Entity, ABC):
    """Base class for aggregate roots.

    Aggregate roots are consistency boundaries and the only place domain
    events are recorded. Events stay pending until the repository has
    persisted the aggregate; it then publishes them and calls
    ``mark_events_as_committed``.

    Duplicating an aggregate (``duplicate()``, ``copy.copy``,
    ``copy.deepcopy`` or pickling) never carries pending events over.
    """

    _events: EventLog = PrivateAttr(default_factory=EventLog)

    def record_event(self, event: DomainEvent) -> None:
        self._events.append(event)
        logger.debug(
            "Domain event recorded: %s on %s[%s]",
            event.event_name(),
            type(self).__name__,
            self.id,
        )

    def uncommitted_events(self) -> list[DomainEvent]:
        """Independent copies of the pending events, in recorded order."""
        return self._events.copies()

    def mark_events_as_committed(self) -> None:
        self._events.clear()

    def has_uncommitted_events(self) -> bool:
        return len(self._events) > 0

    def _update_aggregate(
        self, values: Mapping[str, Any], event: DomainEvent | None = None
    ) -> ChangeSet:
        """Apply a mutation and record ``event`` if anything actually changed."""
        changes = self._update_entity(values)
        if changes and event is not None:
            self.record_event(event)
        return changes

    def duplicate(self) -> Self:
        clone = super().duplicate()
        clone._events = EventLog()
        return clone

    def __setstate__(self, state: dict[Any, Any]) -> None:
        super().__setstate__(state)
        self._events = EventLog()

    # --- introspection ---

    def metadata(self) -> dict[str, Any]:
        return {
            **super().metadata(),
            "is_aggregate_root": True,
            "has_uncommitted_events": self.has_uncommitted_events(),
            "uncommitted_events_count": len(self._events),
        }

    def event_summary(self) -> list[dict[str, str]]:
        return [
            {
                "event_name": event.event_name(),
                "aggregate_id": event.aggregate_id,
                "occurred_on": event.occurred_on.isoformat(),
            }
            for event in self._events.pending
        ]

    def event_by_name(self, event_name: str) -> DomainEvent | None:
        matches = self._events.named(event_name)
        return matches[0].model_copy(deep=True) if matches else None

    def count_events_of_type(self, event_name: str) -> int:
        return len(self._events.named(event_name))

    def clear_events_of_type(self, event_name: str) -> None:
        self._events.pending = [e for e in self._events.pending if e.event_name() != event_name]
