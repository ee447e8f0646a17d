from ddd_foundation.infrastructure.persistence.repository.base import Repository

__all__ = ["Repository"]
