"""
PostgreSQL-specific strategy implementation.

Timeouts map to the ``statement_timeout`` setting. Outside autocommit mode
the setting is transaction-local, so a failed statement's rollback discards
it as well.
"""
import logging
from collections.abc import Sequence
from contextlib import contextmanager
from typing import Any

import psycopg
from dbhelpers.strategy.base import DatabaseStrategy, register_strategy

logger = logging.getLogger(__name__)


def _show_statement_timeout(raw_conn: Any) -> str:
    with raw_conn.cursor() as cursor:
        cursor.execute("SELECT current_setting('statement_timeout')")
        return cursor.fetchone()[0]


def _set_statement_timeout(raw_conn: Any, value: str, is_local: bool) -> None:
    with raw_conn.cursor() as cursor:
        cursor.execute("SELECT set_config('statement_timeout', %s, %s)", (value, is_local))


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        return 'postgresql'

    @contextmanager
    def command_timeout(self, raw_conn: Any, timeout: float | None):
        if timeout is None:
            yield
            return

        is_local = not getattr(raw_conn, 'autocommit', False)
        previous = _show_statement_timeout(raw_conn)
        _set_statement_timeout(raw_conn, f'{int(timeout * 1000)}ms', is_local)
        logger.debug(f'statement_timeout set to {timeout}s (was {previous})')
        try:
            yield
        except BaseException:
            try:
                _set_statement_timeout(raw_conn, previous, is_local)
            except psycopg.Error as e:
                logger.debug(f'Could not restore statement_timeout: {e}')
            raise
        _set_statement_timeout(raw_conn, previous, is_local)

    def call_procedure(self, cursor: Any, name: str, values: Sequence[Any]) -> None:
        placeholders = ', '.join(['%s'] * len(values))
        cursor.execute(f'CALL {name}({placeholders})', tuple(values))
