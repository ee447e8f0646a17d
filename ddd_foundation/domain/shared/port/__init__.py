"""Domain ports: interfaces the infrastructure layer implements."""

from typing import Protocol


class Port(Protocol):
    """Marker base for domain ports."""


__all__ = ["Port"]
