"""
Execution helpers.

Every helper prepares its own command, runs it, and releases the command
(and reader) before returning, or, for ``read``/``select``, when the
returned sequence is exhausted, fails, or is closed.

    >>> import sqlite3
    >>> cn = sqlite3.connect(':memory:')
    >>> execute(cn, 'CREATE TABLE t (x INTEGER)')
    -1
    >>> execute(cn, 'INSERT INTO t VALUES (?)', [5])
    1
    >>> read(cn, 'SELECT x FROM t', lambda r: r.get_int(0)).fetchall()
    [5]
"""
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Generic, Self, TypeVar

from dbhelpers.columns import add_column_names, column_factory
from dbhelpers.command import Command, Parameter, prepare_command
from dbhelpers.options import CommandOptions, resolve_options
from dbhelpers.reader import Reader
from dbhelpers.utils import ensure_commit, rollback_quietly

logger = logging.getLogger(__name__)

__all__ = [
    'ResultIterator',
    'execute',
    'execute_batch',
    'read',
    'select',
    'for_each',
    'for_each_while',
]

T = TypeVar('T')
V = TypeVar('V')

SqlParams = Sequence[Any] | None
Selector = Callable[[Reader], T]
Binder = Callable[[V, list[Parameter]], None]


def _manages_commit(options: CommandOptions) -> bool:
    return options.auto_commit and options.transaction is None


class ResultIterator(Generic[T]):
    """Lazy, single-pass sequence of selector results.

    Nothing is executed until the first ``next()``. The command and reader
    are released exactly once: when rows run out, when the selector or
    driver raises, or on ``close()``.
    """

    def __init__(self, cn: Any, sql: str, params: SqlParams, selector: Selector,
                 options: CommandOptions) -> None:
        self._cn = cn
        self._sql = sql
        self._params = params
        self._selector = selector
        self._options = options
        self._command: Command | None = None
        self._reader: Reader | None = None
        self.closed = False

    def __iter__(self) -> Self:
        return self

    def __next__(self) -> T:
        if self.closed:
            raise StopIteration
        try:
            if self._reader is None:
                self._command = prepare_command(self._cn, self._sql, self._params, self._options)
                self._reader = self._command.execute_reader()
            if self._reader.read():
                return self._selector(self._reader)
        except BaseException:
            self.close()
            raise
        self.close()
        raise StopIteration

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the reader and command. Later calls do nothing."""
        if self.closed:
            return
        self.closed = True
        try:
            if self._reader is not None:
                self._reader.close()
        finally:
            if self._command is not None:
                self._command.close()

    def fetchall(self) -> list[T]:
        """Drain the remaining rows into a list."""
        with self:
            return list(self)


def execute(cn: Any, sql: str, params: SqlParams = None,
            options: CommandOptions | None = None, **kw: Any) -> int:
    """Execute a command once and return the affected-row count.

    ``kw`` accepts any ``CommandOptions`` field as an override.
    """
    options = resolve_options(options, **kw)
    with prepare_command(cn, sql, params, options) as cmd:
        try:
            rowcount = cmd.execute_non_query()
        except Exception:
            if _manages_commit(options):
                rollback_quietly(cmd.dbapi_connection)
            raise
        if _manages_commit(options):
            ensure_commit(cmd.dbapi_connection)
        logger.debug(f'Executed query with {len(cmd.parameters)} parameters, rowcount {rowcount}')
    return rowcount


def execute_batch(cn: Any, sql: str, parameter_count: int, binder: Binder,
                  values: Iterable[V], options: CommandOptions | None = None,
                  **kw: Any) -> int:
    """Execute one prepared command once per input value.

    A single command with ``parameter_count`` slots is created. For every
    value, ``binder(value, slots)`` overwrites the slot values and the command
    runs again. Returns the summed affected-row count.
    """
    options = resolve_options(options, **kw)
    total = 0
    executions = 0
    with prepare_command(cn, sql, None, options) as cmd:
        slots = []
        for _ in range(parameter_count):
            param = cmd.create_parameter()
            slots.append(param)
            cmd.parameters.append(param)
        try:
            for value in values:
                binder(value, slots)
                total += cmd.execute_non_query()
                executions += 1
        except Exception:
            if _manages_commit(options):
                rollback_quietly(cmd.dbapi_connection)
            raise
        if _manages_commit(options):
            ensure_commit(cmd.dbapi_connection)
    logger.debug(f'Batch executed {executions} times, total rowcount {total}')
    return total


def read(cn: Any, sql: str, selector: Selector, params: SqlParams = None,
         options: CommandOptions | None = None, **kw: Any) -> ResultIterator[T]:
    """Return a lazy sequence of ``selector(reader)`` for every row.

    Close the sequence (or use it as a context manager) when abandoning it
    before the last row.
    """
    return ResultIterator(cn, sql, params, selector, resolve_options(options, **kw))


def select(cn: Any, target: type[T], sql: str, params: SqlParams = None,
           selector: Selector | None = None, options: CommandOptions | None = None,
           **kw: Any) -> ResultIterator[T]:
    """Like ``read`` with ``SELECT <columns of target>`` prepended to ``sql``.

    The column list comes from the parameter names of ``target``'s widest
    constructor. Without a selector each row is passed positionally to
    that constructor.

    Raises ColumnInferenceError if ``target`` has no parameterized constructor.
    """
    sql = add_column_names(target, sql)
    if selector is None:
        factory = column_factory(target)

        def selector(reader: Reader) -> T:
            return factory(*reader.values())
    return read(cn, sql, selector, params, options, **kw)


def for_each(cn: Any, sql: str, action: Callable[[Reader], Any],
             params: SqlParams = None, options: CommandOptions | None = None,
             **kw: Any) -> None:
    """Invoke ``action(reader)`` for every row."""
    options = resolve_options(options, **kw)
    with prepare_command(cn, sql, params, options) as cmd, cmd.execute_reader() as reader:
        while reader.read():
            action(reader)


def for_each_while(cn: Any, sql: str, predicate: Callable[[Reader], bool],
                   params: SqlParams = None, options: CommandOptions | None = None,
                   **kw: Any) -> None:
    """Invoke ``predicate(reader)`` for every row until it returns False."""
    options = resolve_options(options, **kw)
    with prepare_command(cn, sql, params, options) as cmd, cmd.execute_reader() as reader:
        while reader.read() and predicate(reader):
            pass


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
