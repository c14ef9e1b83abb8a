"""
Statement execution on DB-API 2.0 cursors.

A statement is a driver cursor that lives for exactly one execute call. It is
opened by `statement()`, and closed when the block exits, whether the
execute or the result handler failed or not.
"""
import logging
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from functools import wraps
from typing import Any

from dbfacade.exceptions import BindError, wrap_driver_error
from dbfacade.sql import standardize_placeholders

from libb import attrdict

logger = logging.getLogger(__name__)


def dumpsql(func):
    """Decorator for logging SQL queries, parameters and timing."""
    @wraps(func)
    def wrapper(self, handler, sql: str, *args: Any):
        start = time.time()
        logger.debug(f'SQL:\n{sql}\nargs: {args}')
        try:
            return func(self, handler, sql, *args)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{sql}\nargs: {args}')
            raise
        finally:
            elapsed = time.time() - start
            self.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


def normalize_params(args: Sequence[Any]) -> tuple:
    """Unpack a single list/tuple argument into the parameter list."""
    if len(args) == 1 and isinstance(args[0], (list, tuple)):
        return tuple(args[0])
    return tuple(args)


@contextmanager
def statement(raw_conn: Any, sql: str, params: tuple,
              paramstyle: str = 'qmark') -> Iterator[Any]:
    """Prepare, bind and execute `sql`, yielding the executed cursor.

    Without params the SQL is sent verbatim, so `%` needs no escaping.
    Values the driver cannot bind raise DatabaseError.
    """
    cursor = raw_conn.cursor()
    try:
        try:
            if params:
                cursor.execute(standardize_placeholders(sql, paramstyle), params)
            else:
                cursor.execute(sql)
        except BindError as exc:
            raise wrap_driver_error(exc) from exc
        yield cursor
    finally:
        cursor.close()


def column_names(cursor: Any) -> list[str]:
    """Column names of the current result set."""
    if cursor.description is None:
        return []
    return [desc[0] for desc in cursor.description]


def make_row(columns: list[str], values: Sequence[Any]) -> attrdict:
    """Build a row mapping from column names and a value tuple."""
    return attrdict(zip(columns, values))


def fetch_rows(cursor: Any) -> list[attrdict]:
    """Fetch all remaining rows as mappings."""
    columns = column_names(cursor)
    return [make_row(columns, values) for values in cursor.fetchall()]


def fetch_row(cursor: Any) -> attrdict | None:
    """Fetch the next row as a mapping, or None when exhausted."""
    values = cursor.fetchone()
    if values is None:
        return None
    return make_row(column_names(cursor), values)


def fetch_field(cursor: Any) -> Any | None:
    """Fetch the first column of the next row, or None when exhausted."""
    values = cursor.fetchone()
    if values is None:
        return None
    return values[0]
