"""
SQLite-specific strategy implementation.

sqlite3 opens implicit transactions before DML unless `isolation_level` is
None. The facade runs connections in autocommit mode and starts transactions
with an explicit BEGIN, so reads inside `transactional` belong to the
transaction too.
"""
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from dbfacade.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from dbfacade.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQLite."""
        return sa.URL.create(drivername='sqlite', database=options.database)

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']

    def configure_connection(self, raw_conn: Any) -> None:
        """Configure connection settings for SQLite.
        """
        raw_conn.isolation_level = None

    def begin_transaction(self, raw_conn: Any) -> None:
        """Issue an explicit BEGIN on the autocommit connection.
        """
        cursor = raw_conn.cursor()
        try:
            cursor.execute('BEGIN')
        finally:
            cursor.close()

    def last_insert_id(self, cursor: Any, raw_conn: Any) -> int:
        """Return the rowid of the last inserted row."""
        return cursor.lastrowid
