"""
PostgreSQL-specific strategy implementation.

psycopg connections run with `autocommit=True` so every statement outside a
transaction is committed by the server. A transaction is started by turning
autocommit off; psycopg then issues BEGIN before the next statement.
"""
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from dbfacade.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from dbfacade.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)
        if options.appname:
            query['application_name'] = options.appname

        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query=query
        )

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'password', 'database']

    def configure_connection(self, raw_conn: Any) -> None:
        """Configure connection settings for PostgreSQL.
        """
        raw_conn.autocommit = True

    def begin_transaction(self, raw_conn: Any) -> None:
        """Disable auto-commit so psycopg opens a transaction.
        """
        raw_conn.autocommit = False

    def end_transaction(self, raw_conn: Any) -> None:
        """Enable auto-commit mode again.
        """
        raw_conn.autocommit = True

    def last_insert_id(self, cursor: Any, raw_conn: Any) -> int:
        """Return `lastval()` for the session.

        Raises the driver error when no sequence has been used yet.
        """
        id_cursor = raw_conn.cursor()
        try:
            id_cursor.execute('SELECT lastval()')
            return id_cursor.fetchone()[0]
        finally:
            id_cursor.close()
