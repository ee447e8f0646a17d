"""Dependency injection provider for domain event publication."""

from dishka import Provider, alias, provide

from ddd_foundation.config import Config
from ddd_foundation.domain.shared.port.event_publisher import DomainEventPublisher
from ddd_foundation.infrastructure.event.publisher import InProcessEventPublisher
from ddd_foundation.util.di.scope import Scope


class EventProvider(Provider):
    @provide(scope=Scope.APP)
    def get_publisher(self, config: Config) -> InProcessEventPublisher:
        """One publisher per process so subscriptions made at startup are shared."""
        return InProcessEventPublisher(log_payloads=config.events.log_payloads)

    publisher = alias(source=InProcessEventPublisher, provides=DomainEventPublisher)
