"""Error taxonomy shared by the store, the request operations and the server."""
from __future__ import annotations


class EntityNotFoundError(RuntimeError):
    """Raised when an entity cannot be located in the database."""


class EntityConflictError(RuntimeError):
    """Raised when a unique constraint is violated."""


class NoReportDataError(EntityNotFoundError):
    """Raised when a user has no cost entries in the requested month."""
