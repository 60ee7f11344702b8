"""
Fallback strategy for DB-API drivers without a dedicated implementation.
"""
from contextlib import contextmanager
from typing import Any

from dbhelpers.exceptions import QueryError
from dbhelpers.strategy.base import DatabaseStrategy, register_strategy


@register_strategy('generic')
class GenericStrategy(DatabaseStrategy):
    """Plain PEP-249 behavior: ``callproc`` when the cursor offers it, no timeouts.
    """

    @property
    def dialect_name(self) -> str:
        return 'generic'

    @contextmanager
    def command_timeout(self, raw_conn: Any, timeout: float | None):
        if timeout:
            raise QueryError(f'Command timeout is not supported for {type(raw_conn).__module__} connections')
        yield

    def call_procedure(self, cursor: Any, name: str, values) -> None:
        callproc = getattr(cursor, 'callproc', None)
        if callproc is None:
            raise QueryError(f'{type(cursor).__qualname__} does not implement callproc')
        callproc(name, tuple(values))
