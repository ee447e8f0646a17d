import logging
from collections import defaultdict
from typing import Sequence

from ddd_foundation.domain.shared.event import DomainEvent
from ddd_foundation.domain.shared.port.event_publisher import (
    DomainEventPublisher,
    EventSubscriber,
)

logger = logging.getLogger(__name__)


def _name_of(event: str | type[DomainEvent]) -> str:
    return event if isinstance(event, str) else event.event_name()


class InProcessEventPublisher(DomainEventPublisher):
    """Synchronous in-process publisher.

    Subscribers are registered per event name and run sequentially, in
    registration order, for each event in the order the events were given.
    Failures are not retried; the first subscriber exception propagates.
    """

    def __init__(self, log_payloads: bool = False) -> None:
        self._subscribers: dict[str, list[EventSubscriber]] = defaultdict(list)
        self._log_payloads = log_payloads

    def subscribe(self, event: str | type[DomainEvent], handler: EventSubscriber) -> None:
        self._subscribers[_name_of(event)].append(handler)

    def unsubscribe(self, event: str | type[DomainEvent], handler: EventSubscriber) -> None:
        handlers = self._subscribers.get(_name_of(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def subscribers(self, event: str | type[DomainEvent]) -> list[EventSubscriber]:
        return list(self._subscribers.get(_name_of(event), []))

    def publish(self, events: Sequence[DomainEvent]) -> None:
        for event in events:
            self.publish_event(event)

    def publish_event(self, event: DomainEvent) -> None:
        name = event.event_name()
        handlers = list(self._subscribers.get(name, []))

        if not handlers:
            logger.debug("No subscribers for event %s", name)
            return

        logger.info("Publishing event %s to %d subscribers", name, len(handlers))
        if self._log_payloads:
            logger.debug("Event payload: %s", event.to_dict())

        for handler in handlers:
            handler(event)
