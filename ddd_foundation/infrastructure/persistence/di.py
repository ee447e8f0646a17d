from typing import Iterable

from dishka import Provider, provide
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from ddd_foundation.config import Config
from ddd_foundation.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from ddd_foundation.util.di.scope import Scope


class PersistenceProvider(Provider):
    # APP-scoped factories; record stores open short transactions per write
    @provide(scope=Scope.APP)
    def get_engine(self, config: Config) -> Iterable[Engine]:
        engine = create_db_engine(config)
        yield engine
        engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: Engine) -> sessionmaker[Session]:
        return create_session_factory(engine)
