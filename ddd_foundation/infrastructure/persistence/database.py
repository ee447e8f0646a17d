"""Engine, session factory and schema creation for the SQL record store."""

from pathlib import Path
from typing import Any

from sqlalchemy import Engine, MetaData, create_engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ddd_foundation.config import Config


def _resolve_sqlite_file(url: str) -> str:
    """Make a file-backed SQLite URL absolute and create its directory.

    In-memory URLs and non-SQLite URLs are returned unchanged.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or parsed.database in (None, "", ":memory:"):
        return url

    db_file = Path(parsed.database).expanduser().resolve()
    db_file.parent.mkdir(parents=True, exist_ok=True)
    return parsed.set(database=str(db_file)).render_as_string(hide_password=False)


def create_db_engine(config: Config) -> Engine:
    """Build the engine for ``config.database.url``.

    SQLite shares one connection across sessions so an in-memory database
    outlives individual sessions. Server databases get a pre-pinged pool
    sized from config.
    """
    db = config.database
    url = _resolve_sqlite_file(db.url)

    options: dict[str, Any] = {"echo": db.echo}
    if make_url(url).get_backend_name() == "sqlite":
        options.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    else:
        options.update(pool_pre_ping=True, pool_size=db.pool_size, max_overflow=db.max_overflow)

    return create_engine(url, **options)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Records are plain values copied out of rows; nothing needs refreshing after commit
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def create_tables(engine: Engine, meta: MetaData) -> None:
    """Create any missing tables declared on ``meta``."""
    meta.create_all(engine)
