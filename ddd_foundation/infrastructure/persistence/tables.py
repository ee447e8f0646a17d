"""SQLAlchemy table helpers - dialect-agnostic (works with SQLite and PostgreSQL)."""

from typing import Any

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table

# Columns every entity table carries; everything else is a domain column
STANDARD_COLUMNS = frozenset({"id", "version", "created_at", "updated_at"})


def entity_table(name: str, meta: MetaData, *columns: Any, **kwargs: Any) -> Table:
    """Declare a table backing an entity.

    Adds the standard ``id``/``version``/``created_at``/``updated_at`` columns
    in front of the supplied domain columns.
    """
    return Table(
        name,
        meta,
        Column("id", String(64), primary_key=True),
        Column("version", Integer, nullable=False),  # Optimistic lock counter
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("updated_at", DateTime(timezone=True), nullable=True),
        *columns,
        **kwargs,
    )
