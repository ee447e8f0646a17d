"""Change ledger types used for dirty tracking."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator, NamedTuple

_MISSING = object()

# A scalar current value is compared by type and value; any other current
# value by canonical string form against the proposed value.
_SCALARS = (str, int, float, bool, bytes, Decimal, datetime, date, Enum)


class FieldChange(NamedTuple):
    field: str
    old: Any
    new: Any


def has_changed(current: Any, new: Any) -> bool:
    """Return True if ``new`` is not logically equal to ``current``."""
    if current is None or new is None:
        return current is not new
    if not isinstance(current, _SCALARS):
        return str(current) != str(new)
    return type(current) is not type(new) or current != new


class ChangeSet:
    """Ordered, read-only collection of field changes.

    Field names are unique; iteration yields ``FieldChange`` tuples in the
    order the fields were supplied.
    """

    __slots__ = ("_changes",)

    def __init__(self, changes: list[FieldChange] | tuple[FieldChange, ...] = ()) -> None:
        self._changes: tuple[FieldChange, ...] = tuple(changes)

    @classmethod
    def diff(cls, current: dict[str, Any], proposed: dict[str, Any]) -> "ChangeSet":
        return cls(
            [
                FieldChange(name, current[name], value)
                for name, value in proposed.items()
                if has_changed(current[name], value)
            ]
        )

    @property
    def fields(self) -> list[str]:
        return [c.field for c in self._changes]

    def has(self, field: str) -> bool:
        return any(c.field == field for c in self._changes)

    def get(self, field: str) -> FieldChange | None:
        return next((c for c in self._changes if c.field == field), None)

    def new_value(self, field: str, default: Any = _MISSING) -> Any:
        change = self.get(field)
        if change is None:
            if default is _MISSING:
                raise KeyError(field)
            return default
        return change.new

    def old_value(self, field: str) -> Any:
        change = self.get(field)
        if change is None:
            raise KeyError(field)
        return change.old

    def as_dict(self) -> dict[str, tuple[Any, Any]]:
        return {c.field: (c.old, c.new) for c in self._changes}

    def __iter__(self) -> Iterator[FieldChange]:
        return iter(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    def __bool__(self) -> bool:
        return bool(self._changes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ChangeSet):
            return self._changes == other._changes
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._changes)

    def __repr__(self) -> str:
        return f"ChangeSet({list(self._changes)!r})"
