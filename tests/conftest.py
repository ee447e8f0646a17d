"""Global test fixtures."""

from unittest.mock import Mock

import pytest
from sqlalchemy import MetaData, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ddd_foundation.infrastructure.event.publisher import InProcessEventPublisher
from ddd_foundation.infrastructure.persistence.adapter.memory_store import InMemoryRecordStore
from ddd_foundation.infrastructure.persistence.adapter.sql_store import Relation, SqlRecordStore
from ddd_foundation.infrastructure.persistence.database import create_session_factory
from ddd_foundation.infrastructure.persistence.mappers.resolver import EntityMapperResolver
from tests.support.orders import (
    OrderLineMapper,
    OrderMapper,
    OrderRepository,
    build_tables,
)


@pytest.fixture
def line_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def order_store(line_store: InMemoryRecordStore) -> InMemoryRecordStore:
    return InMemoryRecordStore(relations={"lines": (line_store, "order_id")})


@pytest.fixture
def spy_order_store(order_store: InMemoryRecordStore) -> Mock:
    """Order store wrapped so write calls can be counted."""
    return Mock(wraps=order_store)


@pytest.fixture
def resolver(spy_order_store: Mock, line_store: InMemoryRecordStore) -> EntityMapperResolver:
    return EntityMapperResolver([OrderMapper(spy_order_store), OrderLineMapper(line_store)])


@pytest.fixture
def publisher() -> InProcessEventPublisher:
    return InProcessEventPublisher()


@pytest.fixture
def published(publisher: InProcessEventPublisher) -> list:
    """Events delivered to subscribers, in delivery order."""
    received: list = []
    publisher.subscribe("order.placed", received.append)
    publisher.subscribe("order.customer_changed", received.append)
    return received


@pytest.fixture
def repo(resolver: EntityMapperResolver, publisher: InProcessEventPublisher) -> OrderRepository:
    return OrderRepository(resolver, publisher)


# --- SQL (SQLite in-memory) ---


@pytest.fixture
def sql_meta() -> MetaData:
    return MetaData()


@pytest.fixture
def sql_tables(sql_meta: MetaData):
    return build_tables(sql_meta)


@pytest.fixture
def sql_engine(sql_meta: MetaData, sql_tables):
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    sql_meta.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_sessions(sql_engine) -> sessionmaker:
    return create_session_factory(sql_engine)


@pytest.fixture
def sql_line_store(sql_sessions, sql_tables) -> SqlRecordStore:
    _, order_lines = sql_tables
    return SqlRecordStore(sql_sessions, order_lines)


@pytest.fixture
def sql_order_store(sql_sessions, sql_tables) -> SqlRecordStore:
    orders, order_lines = sql_tables
    return SqlRecordStore(
        sql_sessions,
        orders,
        relations={"lines": Relation(order_lines, foreign_key="order_id")},
    )


@pytest.fixture
def sql_resolver(sql_order_store, sql_line_store) -> EntityMapperResolver:
    return EntityMapperResolver([OrderMapper(sql_order_store), OrderLineMapper(sql_line_store)])


@pytest.fixture
def sql_repo(sql_resolver, publisher) -> OrderRepository:
    return OrderRepository(sql_resolver, publisher)
