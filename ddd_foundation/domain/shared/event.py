"""Domain events."""

import re
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utc_now() -> datetime:
    return datetime.now(UTC)


class DomainEvent(BaseModel, ABC):
    """Base class for domain events.

    An event is an immutable fact about an aggregate. ``occurred_on`` is
    captured when the event is constructed and never changes. Concrete events
    implement ``event_name``::

        class OrderPlaced(DomainEvent):
            @classmethod
            def event_name(cls) -> str:
                return "order.placed"

        OrderPlaced(aggregate_id=order.id, event_data={"total": "12.50"})
    """

    model_config = ConfigDict(frozen=True)

    aggregate_id: str
    event_data: dict[str, Any] = Field(default_factory=dict)
    event_version: int = Field(default=1, ge=1)
    occurred_on: datetime = Field(default_factory=_utc_now)

    @field_validator("aggregate_id", mode="before")
    @classmethod
    def _coerce_aggregate_id(cls, v: Any) -> str:
        # Identifier value objects render to their raw value
        return v if isinstance(v, str) else str(v)

    @classmethod
    @abstractmethod
    def event_name(cls) -> str:
        """Stable name subscribers register against."""

    def to_dict(self) -> dict[str, Any]:
        """Wire representation; needs no secondary lookups."""
        return {
            "event_name": self.event_name(),
            "aggregate_id": self.aggregate_id,
            "event_data": self.model_dump(mode="json", include={"event_data"})["event_data"],
            "event_version": self.event_version,
            "occurred_on": self.occurred_on.isoformat(),
        }


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class NamedDomainEvent(DomainEvent, ABC):
    """Domain event whose name comes from its class.

    ``OrderPlaced`` is published as ``order_placed`` unless the class sets
    ``__event_name__``.
    """

    __event_name__: ClassVar[str | None] = None

    @classmethod
    def event_name(cls) -> str:
        if cls.__event_name__:
            return cls.__event_name__
        return _CAMEL_BOUNDARY.sub("_", cls.__name__).lower()
