"""Entity mapper resolver - exact-type registry built once at startup."""

import logging
from types import MappingProxyType
from typing import Iterable

from ddd_foundation.domain.shared.error import InvalidConfiguration, MapperNotFound
from ddd_foundation.domain.shared.model.entity import Entity
from ddd_foundation.infrastructure.persistence.mappers.base import EntityMapper

logger = logging.getLogger(__name__)


class EntityMapperResolver:
    """Maps an entity's concrete type to its mapper.

    The table is fixed at construction: every mapper must declare an Entity
    subclass as ``entity_type`` and each type may be registered once.
    Lookups are by exact type; subclasses of a registered type are not
    matched.
    """

    def __init__(self, mappers: Iterable[EntityMapper]) -> None:
        table: dict[type[Entity], EntityMapper] = {}
        for mapper in mappers:
            entity_type = getattr(mapper, "entity_type", None)
            if not (isinstance(entity_type, type) and issubclass(entity_type, Entity)):
                raise InvalidConfiguration(
                    f"{type(mapper).__name__} must declare an Entity subclass as entity_type"
                )
            if entity_type in table:
                raise InvalidConfiguration(
                    f"Duplicate mapper for {entity_type.__qualname__}: "
                    f"{type(table[entity_type]).__name__} and {type(mapper).__name__}"
                )
            table[entity_type] = mapper

        self._mappers = MappingProxyType(table)
        logger.debug(
            "Entity mapper registry built: %s",
            ", ".join(t.__qualname__ for t in self._mappers) or "(empty)",
        )

    def resolve(self, entity_type: type[Entity]) -> EntityMapper:
        try:
            return self._mappers[entity_type]
        except KeyError:
            raise MapperNotFound(entity_type) from None

    def resolve_for(self, entity: Entity) -> EntityMapper:
        return self.resolve(type(entity))

    @property
    def registered_types(self) -> frozenset[type[Entity]]:
        return frozenset(self._mappers)

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._mappers
