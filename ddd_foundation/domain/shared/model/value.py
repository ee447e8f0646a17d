import re
import uuid
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, RootModel, field_validator
from typing_extensions import Self

from ddd_foundation.domain.shared.error import ValidationError

T = TypeVar("T")


class ValueObject(BaseModel):
    model_config = ConfigDict(frozen=True)


class RootValueObject(RootModel[T], Generic[T]):
    model_config = ConfigDict(frozen=True)


class Identifier(RootValueObject[str]):
    """Entity identity backed by a UUID string.

    Subclass per entity type (``class OrderId(Identifier): ...``) so that ids of
    different entity types never compare equal.
    """

    @field_validator("root", mode="before")
    @classmethod
    def _validate(cls, v: object) -> str:
        if isinstance(v, uuid.UUID):
            return str(v)
        if not isinstance(v, str):
            raise ValidationError(f"{cls.__name__} must be a string, got {type(v).__name__}")
        v = v.strip().lower()
        try:
            uuid.UUID(v)
        except ValueError:
            raise ValidationError(f"Invalid {cls.__name__}: {v!r} is not a UUID") from None
        return v

    @classmethod
    def generate(cls) -> Self:
        return cls(str(uuid.uuid4()))

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value)

    @property
    def value(self) -> str:
        return self.root

    def equals(self, other: object) -> bool:
        return isinstance(other, type(self)) and self.root == other.root

    def __str__(self) -> str:
        return self.root


class ObjectId(Identifier):
    """Document-store style identifier: exactly 24 hexadecimal characters."""

    _re: ClassVar[re.Pattern] = re.compile(r"^[a-f0-9]{24}$")

    @field_validator("root", mode="before")
    @classmethod
    def _validate(cls, v: object) -> str:
        if not isinstance(v, str):
            raise ValidationError(f"{cls.__name__} must be a string, got {type(v).__name__}")
        v = v.strip().lower()
        if not cls._re.match(v):
            raise ValidationError(
                f"Invalid ObjectId format. Expected 24 hexadecimal characters, got: {v}"
            )
        return v

    @classmethod
    def generate(cls) -> Self:
        return cls(uuid.uuid4().hex[:24])
