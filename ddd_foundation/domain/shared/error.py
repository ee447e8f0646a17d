"""Error hierarchy for ddd-foundation.

Error layers:
- FoundationError: Base class for all errors raised by the library
- DomainError: Business rule violations, validation failures, version conflicts (4xx)
- InfrastructureError: Storage failures and misconfiguration (5xx)

Every error carries a human readable ``message`` and an integer ``code``. At an
API boundary only those two are rendered (see ``application.api.errors``).
Nothing in the library catches these internally; they always reach the caller.
"""

from typing import Any, ClassVar


class FoundationError(Exception):
    """Base class for all ddd-foundation errors."""

    default_code: ClassVar[int] = 500

    def __init__(self, message: str, code: int | None = None) -> None:
        self.message = message
        self.code = code if code is not None else self.default_code
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(FoundationError):
    """Base class for domain/business errors."""

    default_code = 400


class ValidationError(DomainError):
    """An entity or value invariant was violated; the input is rejected."""

    default_code = 422

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ConflictError(DomainError):
    """Resource already exists or version conflict."""

    default_code = 409


class ConcurrencyConflict(ConflictError):
    """The stored version no longer matches the version the entity was loaded at.

    Recoverable: reload the aggregate, reapply the change, save again.
    """

    def __init__(self, entity_id: Any, expected_version: int, actual_version: int | None) -> None:
        self.entity_id = str(entity_id)
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Entity {self.entity_id} was modified by another process. "
            f"Expected version: {expected_version}, Actual version: {actual_version}"
        )


# =============================================================================
# Infrastructure Errors (system-level failures - typically 5xx)
# =============================================================================


class InfrastructureError(FoundationError):
    """Base class for infrastructure/system errors."""

    default_code = 503


class PersistenceFailure(InfrastructureError):
    """The persistence layer rejected a write. Retryable by the caller."""


class DeletionFailure(InfrastructureError):
    """A record could not be deleted (missing or rejected by storage)."""

    default_code = 500


class RelatedDeletionFailure(DeletionFailure):
    """A record reached through a relation could not be deleted."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected. Not retryable."""

    default_code = 500


class MapperNotFound(ConfigurationError):
    """No entity mapper is registered for an entity type."""

    def __init__(self, entity_type: type | str) -> None:
        self.entity_type = entity_type if isinstance(entity_type, str) else entity_type.__qualname__
        super().__init__(f"No entity mapper registered for {self.entity_type}")


class RelationNotFound(ConfigurationError):
    """A relation name does not denote a navigable association."""

    def __init__(self, relation: str, entity_type: str | None = None) -> None:
        self.relation = relation
        self.entity_type = entity_type
        owner = f" on {entity_type}" if entity_type else ""
        super().__init__(f"Relation '{relation}' not found{owner}")


class InvalidConfiguration(ConfigurationError):
    """A repository or registry was wired incorrectly."""
