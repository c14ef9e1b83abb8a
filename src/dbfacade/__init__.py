"""
Minimal database facade over SQLAlchemy-managed driver connections.

All operations can be called either as:
- Database methods: db.select(sql, *args)
- Module functions: dbfacade.select(db, sql, *args)
"""
__version__ = '0.1.0'

from collections.abc import Callable
from typing import Any, TypeVar

from dbfacade.connection import Database, connect
from dbfacade.exceptions import DatabaseError
from dbfacade.options import DatabaseOptions, iterdict_data_loader
from dbfacade.options import pandas_numpy_data_loader
from dbfacade.options import pandas_pyarrow_data_loader
from dbfacade.transaction import Transaction

T = TypeVar('T')


def insert(db: Database, sql: str, *args: Any) -> Any:
    """Execute an INSERT and return the id of the last inserted row.
    """
    return db.insert(sql, *args)


def select(db: Database, sql: str, *args: Any, **kwargs: Any) -> Any:
    """Execute a SELECT query and return all rows.
    """
    return db.select(sql, *args, **kwargs)


def select_field(db: Database, sql: str, *args: Any) -> Any | None:
    """Execute a query and return the first column of the first row, or None.
    """
    return db.select_field(sql, *args)


def select_row(db: Database, sql: str, *args: Any) -> Any | None:
    """Execute a query and return the first row, or None if no rows found.
    """
    return db.select_row(sql, *args)


def update(db: Database, sql: str, *args: Any) -> int:
    """Execute an UPDATE/DELETE and return affected row count.
    """
    return db.update(sql, *args)


delete = update


def transactional(db: Database, callback: Callable[[Database], T]) -> T:
    """Run `callback(db)` in a transaction, committing on success.
    """
    return db.transactional(callback)


__all__ = [
    'connect',
    'Database',
    'DatabaseOptions',
    'DatabaseError',
    'Transaction',
    'insert',
    'select',
    'select_field',
    'select_row',
    'update',
    'delete',
    'transactional',
    'iterdict_data_loader',
    'pandas_numpy_data_loader',
    'pandas_pyarrow_data_loader',
]
