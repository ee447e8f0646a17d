"""Unit tests for the error hierarchy."""

import pytest

from ddd_foundation.domain.shared.error import (
    ConcurrencyConflict,
    ConfigurationError,
    ConflictError,
    DeletionFailure,
    DomainError,
    FoundationError,
    InfrastructureError,
    InvalidConfiguration,
    MapperNotFound,
    PersistenceFailure,
    RelatedDeletionFailure,
    RelationNotFound,
    ValidationError,
)
from tests.support.orders import Order


class TestErrorCodes:
    @pytest.mark.parametrize(
        "error, code",
        [
            (DomainError("x"), 400),
            (ValidationError("x"), 422),
            (ConflictError("x"), 409),
            (ConcurrencyConflict("id", 1, 2), 409),
            (InfrastructureError("x"), 503),
            (PersistenceFailure("x"), 503),
            (DeletionFailure("x"), 500),
            (RelatedDeletionFailure("x"), 500),
            (ConfigurationError("x"), 500),
            (MapperNotFound(Order), 500),
            (RelationNotFound("lines"), 500),
            (InvalidConfiguration("x"), 500),
        ],
    )
    def test_default_codes(self, error, code):
        assert error.code == code
        assert isinstance(error, FoundationError)

    def test_explicit_code_overrides_default(self):
        assert PersistenceFailure("x", code=507).code == 507


class TestHierarchy:
    def test_domain_and_infrastructure_are_disjoint(self):
        assert issubclass(ConcurrencyConflict, ConflictError)
        assert issubclass(ConflictError, DomainError)
        assert not issubclass(DomainError, InfrastructureError)
        assert issubclass(RelatedDeletionFailure, DeletionFailure)
        assert issubclass(MapperNotFound, ConfigurationError)


class TestMessages:
    def test_concurrency_conflict(self):
        error = ConcurrencyConflict("abc", expected_version=4, actual_version=5)
        assert error.message == (
            "Entity abc was modified by another process. Expected version: 4, Actual version: 5"
        )
        assert error.expected_version == 4
        assert error.actual_version == 5
        assert str(error) == error.message

    def test_mapper_not_found_names_type(self):
        error = MapperNotFound(Order)
        assert error.entity_type == "Order"
        assert "Order" in error.message

    def test_relation_not_found(self):
        error = RelationNotFound("lines", "Order")
        assert error.message == "Relation 'lines' not found on Order"

    def test_validation_error_field(self):
        assert ValidationError("bad", field="customer").field == "customer"
