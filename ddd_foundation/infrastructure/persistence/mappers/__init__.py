"""Entity mappers and the mapper registry."""

from ddd_foundation.infrastructure.persistence.mappers.base import EntityMapper
from ddd_foundation.infrastructure.persistence.mappers.resolver import EntityMapperResolver

__all__ = ["EntityMapper", "EntityMapperResolver"]
