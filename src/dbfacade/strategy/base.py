"""
Base strategy interface for dialect-specific driver behaviour.

The facade itself is driver agnostic. The few places where drivers disagree
(autocommit handling, explicit transaction start, last insert id, URL layout)
are encapsulated in a strategy selected by the SQLAlchemy backend name.
Backends without a registered strategy use `DatabaseStrategy` directly,
which sticks to plain DB-API 2.0 behaviour.
"""
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa

if TYPE_CHECKING:
    from dbfacade.options import DatabaseOptions

logger = logging.getLogger(__name__)

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DatabaseStrategy:
    """Generic DB-API 2.0 behaviour, overridden per dialect.
    """

    def configure_connection(self, raw_conn: Any) -> None:
        """Prepare a freshly opened driver connection.

        DB-API connections start in manual-commit mode; the facade commits
        after every statement outside a transaction, so nothing is needed here.
        """

    def begin_transaction(self, raw_conn: Any) -> None:
        """Start a transaction. DB-API drivers begin implicitly."""

    def end_transaction(self, raw_conn: Any) -> None:
        """Restore per-statement commit mode after commit or rollback."""

    def last_insert_id(self, cursor: Any, raw_conn: Any) -> Any:
        """Return the id of the last inserted row as reported by the driver.
        """
        return cursor.lastrowid

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL from options."""
        raise NotImplementedError(f'{type(self).__name__} cannot build URLs from options')

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for connections of this dialect."""
        return []

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Raise ValueError if a required option is missing.
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'{field} is required for {options.drivername}')
