"""
Error taxonomy for the book index

Handlers translate these into API Gateway responses using ``status_code``.
Store errors raised by psycopg are mapped onto the taxonomy by
``classify_store_error`` using their SQLSTATE.
"""

from __future__ import annotations

import psycopg

UNIQUE_VIOLATION = "23505"
INVALID_TEXT_REPRESENTATION = "22P02"


class IndexBackendError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(IndexBackendError):
    """Client-correctable input problem."""

    status_code = 400


class ConflictError(IndexBackendError):
    """A record with the same identity already exists."""

    status_code = 409


class TransientInfrastructureError(IndexBackendError):
    """Secret store or database connection failure. Not retried internally."""

    status_code = 500


class SecretUnavailable(TransientInfrastructureError):
    pass


class QueryError(IndexBackendError):
    """The store rejected the statement."""


def classify_store_error(exc: psycopg.Error) -> IndexBackendError:
    """
    Map a psycopg error onto the error taxonomy.

    Args:
        exc: Error raised while talking to the store

    Returns:
        IndexBackendError: Classified error, with ``exc`` as its cause
    """
    if exc.sqlstate == UNIQUE_VIOLATION:
        error: IndexBackendError = ConflictError("A book with this ID already exists")
    elif exc.sqlstate == INVALID_TEXT_REPRESENTATION:
        error = ValidationError("Invalid data format provided")
    elif isinstance(exc, psycopg.OperationalError):
        # Also covers psycopg_pool.PoolTimeout
        error = TransientInfrastructureError("Book index database is unavailable")
    else:
        error = QueryError("Book index query failed")
    error.__cause__ = exc
    return error
