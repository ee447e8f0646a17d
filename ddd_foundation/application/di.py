from dishka import Container, Provider, from_context, make_container

from ddd_foundation.config import Config
from ddd_foundation.infrastructure.event.di import EventProvider
from ddd_foundation.infrastructure.persistence import PersistenceProvider
from ddd_foundation.util.di.scope import Scope


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(*providers: Provider, config: Config | None = None) -> Container:
    """Build the DI container.

    Applications pass their own providers for mappers (an
    ``EntityMapperResolver``) and repositories; the library contributes the
    engine, the session factory and the event publisher.
    """
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_container(
        ConfigProvider(),
        PersistenceProvider(),
        EventProvider(),
        *providers,
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
