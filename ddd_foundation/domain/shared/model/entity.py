"""Base entity: identity, timestamps, optimistic-lock version, dirty tracking."""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, PrivateAttr
from typing_extensions import Self

from ddd_foundation.domain.shared.error import ValidationError
from ddd_foundation.domain.shared.model.change import ChangeSet
from ddd_foundation.domain.shared.model.value import Identifier


def _utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | str | None) -> datetime | None:
    """Normalize a timestamp coming from storage to an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass
class EntityState:
    """Lifecycle state shared by every entity.

    Attributes:
        created_at: When the entity was first created.
        updated_at: When the entity was last touched (None until then).
        version: In-memory revision counter.
        persisted_version: Version last loaded from storage; the optimistic
            lock compares the stored version against this value.
        changes: Change ledger from the last ``record_change`` call (not persisted).
    """

    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime | None = None
    version: int = 0
    persisted_version: int = 0
    changes: ChangeSet = field(default_factory=ChangeSet)

    def __post_init__(self) -> None:
        if self.version < 0 or self.persisted_version < 0:
            raise ValidationError("version must be >= 0", field="version")

    def snapshot(self) -> "EntityState":
        """Copy identity-adjacent state, dropping the change ledger."""
        return replace(self, changes=ChangeSet())


class Entity(BaseModel, ABC):
    """Base class for all entities (aggregate roots and child entities).

    Two entities are equal iff they have the same concrete type and the same
    ``id``. The id is assigned at construction and can never be reassigned.

    Subclasses declare their domain fields as pydantic fields and implement
    ``apply_changes`` to map a ``ChangeSet`` back onto those fields. The usual
    mutation path is ``_update_entity``::

        class Customer(Entity):
            id: CustomerId
            email: str

            def change_email(self, email: str) -> None:
                self._update_entity({"email": email})

            def apply_changes(self, changes: ChangeSet) -> None:
                self._apply_changes_by_setter_map(
                    {"email": lambda v: setattr(self, "email", v)}, changes
                )
    """

    model_config = ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)

    id: Identifier

    _state: EntityState = PrivateAttr(default_factory=EntityState)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id":
            raise ValidationError("Entity id cannot be reassigned", field="id")
        super().__setattr__(name, value)

    # --- identity ---

    def equals(self, other: object) -> bool:
        if type(self) is not type(other):
            return False
        return self.id == other.id  # type: ignore[attr-defined]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash((type(self), self.id))

    # --- timestamps and version ---

    @property
    def created_at(self) -> datetime:
        return self._state.created_at

    @property
    def updated_at(self) -> datetime | None:
        return self._state.updated_at

    @property
    def version(self) -> int:
        return self._state.version

    @property
    def persisted_version(self) -> int:
        return self._state.persisted_version

    def touch(self) -> None:
        """Mark the entity updated now and bump the in-memory version."""
        self._state.updated_at = _utc_now()
        self._state.version += 1

    def hydrate(
        self,
        *,
        created_at: datetime | str,
        updated_at: datetime | str | None,
        version: int,
    ) -> None:
        """Overwrite timestamps and version from an authoritative source.

        Clears the change ledger. Pending domain events are left untouched.
        """
        if version < 0:
            raise ValidationError("version must be >= 0", field="version")
        self._state.created_at = as_utc(created_at)  # type: ignore[assignment]
        self._state.updated_at = as_utc(updated_at)
        self._state.version = version
        self._state.persisted_version = version
        self._state.changes = ChangeSet()

    # --- dirty tracking ---

    def record_change(self, values: Mapping[str, Any]) -> ChangeSet:
        """Reset the ledger and record which of ``values`` differ from current state.

        Returns the resulting change set. An empty set means nothing must be
        applied or persisted.
        """
        self._state.changes = ChangeSet()
        current = {name: self._current_value(name) for name in values}
        self._state.changes = ChangeSet.diff(current, dict(values))
        return self._state.changes

    def _current_value(self, name: str) -> Any:
        return getattr(self, name)

    @abstractmethod
    def apply_changes(self, changes: ChangeSet) -> None:
        """Map changed fields back onto the entity's own state."""

    def _apply_changes_by_setter_map(
        self, setters: Mapping[str, Callable[[Any], None]], changes: ChangeSet
    ) -> None:
        for name, setter in setters.items():
            change = changes.get(name)
            if change is not None:
                setter(change.new)

    def _update_entity(self, values: Mapping[str, Any]) -> ChangeSet:
        changes = self.record_change(values)
        if not changes:
            return changes
        self.apply_changes(changes)
        self.touch()
        return changes

    def is_dirty(self) -> bool:
        return bool(self._state.changes)

    def dirty(self) -> ChangeSet:
        return self._state.changes

    # --- duplication ---

    def duplicate(self) -> Self:
        """Copy domain fields, identity, timestamps and version.

        The change ledger is not carried over.
        """
        clone = type(self).model_validate(
            {name: copy.deepcopy(getattr(self, name)) for name in type(self).model_fields}
        )
        clone._state = self._state.snapshot()
        return clone

    def __setstate__(self, state: dict[Any, Any]) -> None:
        super().__setstate__(state)
        self._state = self._state.snapshot()

    def __copy__(self) -> Self:
        return self.duplicate()

    def __deepcopy__(self, memo: dict[int, Any] | None = None) -> Self:
        return self.duplicate()

    # --- introspection ---

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "version": self.version,
        }

    def metadata(self) -> dict[str, Any]:
        """Entity metadata for auditing."""
        return {
            "entity_type": type(self).__qualname__,
            "entity_id": str(self.id),
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "updated_at": (self.updated_at or _utc_now()).isoformat(),
            "age_seconds": self.age_in_seconds(),
        }

    def is_recently_created(self, within: timedelta = timedelta(minutes=1)) -> bool:
        return self.created_at >= _utc_now() - within

    def is_recently_updated(self, within: timedelta = timedelta(minutes=1)) -> bool:
        if self.updated_at is None:
            return False
        return self.updated_at >= _utc_now() - within

    def age_in_seconds(self) -> int:
        return int((_utc_now() - self.created_at).total_seconds())

    def is_older_than(self, age: timedelta) -> bool:
        return self.created_at < _utc_now() - age

    def validation_errors(self) -> list[str]:
        """Return invariant violations. Override to add entity-specific checks."""
        errors = []
        if not str(self.id):
            errors.append("Entity must have an ID")
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()

    def __str__(self) -> str:
        return f"{type(self).__name__}[id={self.id}, version={self.version}]"
