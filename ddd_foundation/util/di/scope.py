"""Custom Dishka scopes for ddd-foundation."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (engine, session factory, publisher, resolver)
    - UOW: Unit of Work (one request or one batch of repository calls)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
