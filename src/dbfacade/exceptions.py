"""
Database-specific exception classes.

Every failure surfaced by the facade is a `DatabaseError`. Driver exceptions
are never exposed directly; they are kept as the `__cause__` of the error.
"""
import sqlite3
from typing import Any

import psycopg
import sqlalchemy as sa


class DatabaseError(Exception):
    """Base class for all database facade errors.

    :param message: Human readable description, usually the driver message.
    :param code: Driver error code (SQLSTATE or SQLite error name), if any.
    """

    def __init__(self, message: str, code: str | int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


# Exceptions raised by drivers that are translated to DatabaseError
DriverError = (
    sa.exc.SQLAlchemyError,    # URL parsing, dialect loading, wrapped DBAPI errors
    psycopg.Error,             # Postgres driver errors
    sqlite3.Error,             # SQLite driver errors
    )

# Raised by some drivers when a parameter value cannot be bound
BindError = (OverflowError, UnicodeEncodeError)


def error_code(exc: BaseException) -> Any:
    """Extract the driver error code from an exception.

    SQLAlchemy wraps DBAPI errors; the original is found on `.orig`.
    """
    orig = getattr(exc, 'orig', None) or exc
    for attr in ('sqlstate', 'sqlite_errorname'):
        code = getattr(orig, attr, None)
        if code:
            return code
    return None


def wrap_driver_error(exc: BaseException) -> DatabaseError:
    """Translate a driver exception into a DatabaseError.

    Callers chain the result with `raise ... from exc`.
    """
    orig = getattr(exc, 'orig', None) or exc
    return DatabaseError(str(orig).strip(), error_code(exc))
