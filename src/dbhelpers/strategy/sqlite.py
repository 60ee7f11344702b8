"""
SQLite-specific strategy implementation.

SQLite has no server-side statement timeout, so a progress handler enforces a
deadline on the connection; exceeding it aborts the running statement with
``sqlite3.OperationalError: interrupted``.
"""
import logging
import time
from contextlib import contextmanager
from typing import Any

from dbhelpers.exceptions import QueryError
from dbhelpers.strategy.base import DatabaseStrategy, register_strategy

logger = logging.getLogger(__name__)

# virtual machine instructions between deadline checks
PROGRESS_INTERVAL = 1000


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        return 'sqlite'

    @contextmanager
    def command_timeout(self, raw_conn: Any, timeout: float | None):
        if not timeout:
            yield
            return

        deadline = time.monotonic() + timeout

        def past_deadline() -> int:
            return int(time.monotonic() > deadline)

        raw_conn.set_progress_handler(past_deadline, PROGRESS_INTERVAL)
        logger.debug(f'SQLite progress handler deadline set to {timeout}s')
        try:
            yield
        finally:
            raw_conn.set_progress_handler(None, 0)

    def call_procedure(self, cursor: Any, name: str, values) -> None:
        raise QueryError('SQLite does not support stored procedures')
