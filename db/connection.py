"""
db/connection.py
----------------
Scoped connection and transaction handling.
Every connection is opened for a single call and closed before it returns;
there is no pooling.
"""

from contextlib import contextmanager
from typing import Iterator

from db.providers import ProviderFactory
from models.statement import Statement
from utils.logger import get_logger

logger = get_logger(__name__)


@contextmanager
def open_connection(factory: ProviderFactory, connection_string: str) -> Iterator:
    """
    Open a connection and close it on every exit path.

    Args:
        factory: Provider used to create the connection.
        connection_string: Opaque driver-specific connection string.

    Raises:
        Whatever the driver raises when the target is unreachable.
    """
    conn = factory.connect(connection_string)
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def transaction(conn) -> Iterator:
    """
    Commit on normal exit; roll back and re-raise on any exception.

    The original exception always reaches the caller: a rollback that fails
    too (e.g. on a dropped connection) is logged, not raised.
    """
    try:
        yield conn
    except BaseException:
        try:
            conn.rollback()
        except Exception:
            logger.exception("Rollback failed; re-raising the original error.")
        raise
    else:
        conn.commit()


def run(cursor, statement: Statement, paramstyle: str) -> None:
    """
    Execute a statement on a cursor.

    Parameters are passed only when the statement has some, so raw text
    containing `%` reaches pyformat drivers untouched.
    """
    sql = statement.render(paramstyle)
    if statement.params:
        cursor.execute(sql, statement.params)
    else:
        cursor.execute(sql)
