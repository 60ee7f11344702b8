"""
Connection wrapper exposing the helpers as methods.

The wrapper does not open or pool connections; it wraps one the caller
already has and keeps simple execution statistics.
"""
import logging
from collections.abc import Callable, Iterable
from typing import Any, Self

from dbhelpers import query
from dbhelpers.options import CommandOptions
from dbhelpers.query import ResultIterator, SqlParams
from dbhelpers.reader import Reader
from dbhelpers.utils import get_dialect_name, get_raw_connection

logger = logging.getLogger(__name__)

__all__ = ['ConnectionWrapper']


class ConnectionWrapper:
    """Wraps a DB-API or SQLAlchemy connection to track calls and execution time

    Attribute access falls through to the wrapped connection.
    """

    def __init__(self, connection: Any) -> None:
        self.connection = connection
        self.dbapi_connection = get_raw_connection(connection)
        try:
            self._dialect = get_dialect_name(connection)
        except AttributeError:
            self._dialect = 'generic'
        self.calls = 0
        self.time = 0.0

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __getattr__(self, name: str) -> Any:
        return getattr(self.connection, name)

    @property
    def dialect(self) -> str:
        return self._dialect

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics"""
        self.time += elapsed
        self.calls += 1

    def close(self) -> None:
        """Close the wrapped connection."""
        self.connection.close()
        logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s '
                     f'(avg: {self.time/max(1, self.calls):.3f}s per query)')

    def execute(self, sql: str, params: SqlParams = None,
                options: CommandOptions | None = None, **kw: Any) -> int:
        return query.execute(self, sql, params, options, **kw)

    def execute_batch(self, sql: str, parameter_count: int, binder: Callable,
                      values: Iterable, options: CommandOptions | None = None,
                      **kw: Any) -> int:
        return query.execute_batch(self, sql, parameter_count, binder, values, options, **kw)

    def read(self, sql: str, selector: Callable[[Reader], Any], params: SqlParams = None,
             options: CommandOptions | None = None, **kw: Any) -> ResultIterator:
        return query.read(self, sql, selector, params, options, **kw)

    def select(self, target: type, sql: str, params: SqlParams = None,
               selector: Callable[[Reader], Any] | None = None,
               options: CommandOptions | None = None, **kw: Any) -> ResultIterator:
        return query.select(self, target, sql, params, selector, options, **kw)

    def for_each(self, sql: str, action: Callable[[Reader], Any], params: SqlParams = None,
                 options: CommandOptions | None = None, **kw: Any) -> None:
        query.for_each(self, sql, action, params, options, **kw)

    def for_each_while(self, sql: str, predicate: Callable[[Reader], bool],
                       params: SqlParams = None, options: CommandOptions | None = None,
                       **kw: Any) -> None:
        query.for_each_while(self, sql, predicate, params, options, **kw)
