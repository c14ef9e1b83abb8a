"""
Database facade over a single driver connection.

This module provides:
1. The `Database` class, a thin facade that lazily opens one DBAPI connection
   through SQLAlchemy and exposes insert/select/update style operations
2. The `connect()` function for building a facade from `DatabaseOptions`
3. Engine creation from a DSN plus optional credentials and driver attributes

Every operation funnels through `Database._execute`, which opens a cursor,
binds the positional parameters, executes, hands the cursor to a result
handler and closes the cursor again before returning.
"""
import logging
from collections.abc import Callable, Mapping
from dataclasses import fields
from typing import Any, Self, TypeVar

import sqlalchemy as sa
from dbfacade.cursor import dumpsql, fetch_field, fetch_row, fetch_rows
from dbfacade.cursor import column_names, normalize_params, statement
from dbfacade.exceptions import DatabaseError, DriverError, wrap_driver_error
from dbfacade.options import DatabaseOptions, iterdict_data_loader
from dbfacade.strategy import DatabaseStrategy, get_strategy
from dbfacade.transaction import Transaction
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

from libb import attrdict, load_options

__all__ = [
    'Database',
    'connect',
    'create_engine',
    'create_url_from_options',
]

logger = logging.getLogger(__name__)

T = TypeVar('T')


def create_engine(dsn: str | sa.URL, user: str | None = None,
                  password: str | None = None,
                  attributes: Mapping[str, Any] | None = None,
                  engine_factory: Callable[..., Engine] = sa.create_engine) -> Engine:
    """Create a SQLAlchemy engine for a single unpooled connection.

    Explicit credentials override any embedded in the DSN. `attributes` are
    handed to the driver's connect call as-is.
    """
    url = sa.make_url(dsn)
    if user is not None:
        url = url.set(username=user)
    if password is not None:
        url = url.set(password=password)

    return engine_factory(url, poolclass=NullPool,
                          connect_args=dict(attributes or {}))


def create_url_from_options(options: DatabaseOptions) -> sa.URL:
    """Convert DatabaseOptions to SQLAlchemy URL.
    """
    return get_strategy(options.drivername).build_connection_url(options)


class Database:
    """Facade over one lazily opened database connection.

    The connection is opened on first use and reused until `close()`.
    Statements are executed with positional parameters (`?` or `%s`), and
    driver failures are raised as `DatabaseError`.

    Not safe for concurrent use; each thread should own its own facade.

    Examples
        db = Database('sqlite:///app.db')
        uid = db.insert('insert into user (name) values (?)', 'Xavier')
        row = db.select_row('select * from user where id = ?', uid)
    """

    def __init__(self, dsn: str | sa.URL, user: str | None = None,
                 password: str | None = None,
                 attributes: Mapping[str, Any] | None = None,
                 data_loader: Callable[..., Any] | None = None) -> None:
        self.dsn = dsn
        self.user = user
        self.password = password
        self.attributes = dict(attributes or {})
        self.data_loader = data_loader or iterdict_data_loader
        self.engine: Engine | None = None
        self.strategy: DatabaseStrategy | None = None
        self._connection: Any = None
        self._closed = False
        self.in_transaction = False
        self.calls = 0
        self.time = 0

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def __repr__(self) -> str:
        state = 'closed' if self._closed else 'connected' if self.connected else 'unconnected'
        return f'<{type(self).__name__} {self.dialect or "?"} {state}>'

    @property
    def connected(self) -> bool:
        """Whether the driver connection has been opened."""
        return self._connection is not None

    @property
    def dialect(self) -> str | None:
        """Backend name once connected ('postgresql', 'sqlite', ...)."""
        if self.engine is None:
            return None
        return self.engine.dialect.name

    @property
    def connection(self) -> Any:
        """The driver connection, opened on first access."""
        return self._connect()

    def _connect(self) -> Any:
        """Open the driver connection unless already open.
        """
        if self._connection is not None:
            return self._connection
        if self._closed:
            raise DatabaseError('Database connection has been closed')

        try:
            engine = create_engine(self.dsn, self.user, self.password, self.attributes)
            proxied = engine.raw_connection()
        except (*DriverError, ImportError) as exc:
            raise wrap_driver_error(exc) from exc

        strategy = get_strategy(engine.dialect.name)
        try:
            strategy.configure_connection(proxied.driver_connection)
        except DriverError as exc:
            proxied.close()
            engine.dispose()
            raise wrap_driver_error(exc) from exc

        self.engine = engine
        self.strategy = strategy
        self._connection = proxied
        logger.debug(f'Connected to {engine.dialect.name} database')
        return self._connection

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def close(self) -> None:
        """Close the driver connection, rolling back any open transaction.
        """
        self._closed = True
        if self._connection is None:
            return

        connection, self._connection = self._connection, None
        try:
            if self.in_transaction:
                connection.rollback()
                self.in_transaction = False
                logger.warning('Rolled back open transaction on close')
            connection.close()
        except DriverError as exc:
            raise wrap_driver_error(exc) from exc
        finally:
            self.engine.dispose()

        logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s (avg: {self.time/max(1,self.calls):.3f}s per query)')

    @dumpsql
    def _execute(self, handler: Callable[[Any, Any], T], sql: str, *args: Any) -> T:
        """Prepare and execute `sql`, returning `handler(cursor, connection)`.

        The cursor is closed on every exit path. Outside a transaction the
        statement is committed once the handler has run.
        """
        connection = self._connect()
        raw_conn = connection.driver_connection
        paramstyle = self.engine.dialect.paramstyle
        params = normalize_params(args)

        try:
            with statement(raw_conn, sql, params, paramstyle) as cursor:
                result = handler(cursor, raw_conn)
            if not self.in_transaction:
                raw_conn.commit()
        except DriverError as exc:
            raise wrap_driver_error(exc) from exc
        return result

    def insert(self, sql: str, *args: Any) -> Any:
        """Execute an INSERT and return the id of the last inserted row.
        """
        def handler(cursor, raw_conn):
            return self.strategy.last_insert_id(cursor, raw_conn)
        return self._execute(handler, sql, *args)

    def select(self, sql: str, *args: Any, **kwargs: Any) -> Any:
        """Execute a SELECT query and return all rows.

        Rows are passed through the configured data loader, which by default
        returns a list of row mappings (empty when nothing matched).
        """
        def handler(cursor, raw_conn):
            columns = column_names(cursor)
            rows = fetch_rows(cursor)
            return self.data_loader(rows, columns, **kwargs)
        result = self._execute(handler, sql, *args)
        logger.debug(f"Select query returned {len(result) if hasattr(result, '__len__') else 'scalar'} result")
        return result

    def select_field(self, sql: str, *args: Any) -> Any | None:
        """Execute a query and return the first column of the first row.

        Returns None when no row matched.
        """
        return self._execute(lambda cursor, raw_conn: fetch_field(cursor), sql, *args)

    def select_row(self, sql: str, *args: Any) -> attrdict | None:
        """Execute a query and return the first row, or None if no rows found.
        """
        return self._execute(lambda cursor, raw_conn: fetch_row(cursor), sql, *args)

    def update(self, sql: str, *args: Any) -> int:
        """Execute an UPDATE/DELETE and return affected row count.
        """
        return self._execute(lambda cursor, raw_conn: cursor.rowcount, sql, *args)

    def begin(self) -> None:
        """Start a transaction.

        Raises DatabaseError if a transaction is already active.
        """
        if self.in_transaction:
            raise DatabaseError('There is already an active transaction')
        raw_conn = self._connect().driver_connection
        try:
            self.strategy.begin_transaction(raw_conn)
        except DriverError as exc:
            raise wrap_driver_error(exc) from exc
        self.in_transaction = True
        logger.debug(f'Started transaction for connection {id(raw_conn)}')

    def commit(self) -> None:
        """Commit the active transaction.

        The transaction stays active if the commit fails, so it can be
        rolled back.
        """
        if not self.in_transaction:
            raise DatabaseError('There is no active transaction')
        raw_conn = self._connection.driver_connection
        try:
            raw_conn.commit()
        except DriverError as exc:
            raise wrap_driver_error(exc) from exc
        self._end_transaction(raw_conn)
        logger.debug(f'Committed transaction for connection {id(raw_conn)}')

    def rollback(self) -> None:
        """Roll back the active transaction.
        """
        if not self.in_transaction:
            raise DatabaseError('There is no active transaction')
        raw_conn = self._connection.driver_connection
        logger.warning('Rolling back the current transaction')
        try:
            raw_conn.rollback()
        except DriverError as exc:
            raise wrap_driver_error(exc) from exc
        finally:
            self.in_transaction = False
        self._end_transaction(raw_conn)

    def _end_transaction(self, raw_conn: Any) -> None:
        self.in_transaction = False
        try:
            self.strategy.end_transaction(raw_conn)
        except DriverError as exc:
            raise wrap_driver_error(exc) from exc

    def transactional(self, callback: Callable[[Self], T]) -> T:
        """Run `callback(self)` inside a transaction.

        Commits when the callback returns and returns its result. If the
        callback or the commit raises, the transaction is rolled back and
        DatabaseError is raised with the original exception as its cause.
        """
        with Transaction(self):
            return callback(self)


@load_options(cls=DatabaseOptions)
def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> Database:
    """Create a database facade from options.

    Args:
        options: Can be:
                - DatabaseOptions object
                - String name of a section on `config`
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        Database facade; the connection is opened on first use
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    url = create_url_from_options(options)
    return Database(url, attributes=options.attributes, data_loader=options.data_loader)
