"""
Transaction handling for the database facade.
"""
import logging
from typing import TYPE_CHECKING, Any

from dbfacade.exceptions import DatabaseError, error_code

if TYPE_CHECKING:
    from dbfacade.connection import Database

logger = logging.getLogger(__name__)

TRANSACTION_FAILED = 'An exception thrown during transaction.'


class Transaction:
    """Context manager for running multiple commands in a transaction.

    Commits when the block exits normally. Any exception raised inside the
    block, or by the commit itself, rolls the transaction back and is
    re-raised as `DatabaseError` with the original exception as its cause.
    Nested transactions on the same facade are not supported.

    Examples
        with Transaction(db):
            db.update('delete from ...', args)
            db.update('update ...', args)
    """

    def __init__(self, db: 'Database') -> None:
        self.db = db

    def __enter__(self) -> 'Database':
        self.db.begin()
        return self.db

    def __exit__(self, exc_type: type | None, value: BaseException | None,
                 traceback: Any | None) -> None:
        if exc_type is None:
            try:
                self.db.commit()
                return
            except Exception as exc:
                value = exc

        if not isinstance(value, Exception):
            self.db.rollback()
            return

        self.db.rollback()
        code = value.code if isinstance(value, DatabaseError) else error_code(value)
        raise DatabaseError(TRANSACTION_FAILED, code) from value
