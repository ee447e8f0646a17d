"""DomainEventPublisher port."""

from abc import abstractmethod
from typing import Callable, Protocol, Sequence

from ddd_foundation.domain.shared.event import DomainEvent
from ddd_foundation.domain.shared.port import Port

EventSubscriber = Callable[[DomainEvent], None]


class DomainEventPublisher(Port, Protocol):
    """Dispatches committed domain events to subscribers.

    Synchronous and in order: ``publish`` returns once every subscriber of
    every event has run. A subscriber exception propagates to the caller.
    """

    @abstractmethod
    def publish(self, events: Sequence[DomainEvent]) -> None: ...
