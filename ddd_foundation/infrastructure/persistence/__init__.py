from ddd_foundation.infrastructure.persistence.di import PersistenceProvider

__all__ = ["PersistenceProvider"]
