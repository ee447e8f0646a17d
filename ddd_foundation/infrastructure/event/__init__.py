"""Event infrastructure - in-process publisher and DI provider.

Import modules directly:
    from ddd_foundation.infrastructure.event.di import EventProvider
    from ddd_foundation.infrastructure.event.publisher import InProcessEventPublisher
"""

__all__: list[str] = []
