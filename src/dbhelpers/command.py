"""
Command preparation.

A ``Command`` owns one DB-API cursor, its SQL text and an ordered list of
positional ``Parameter`` slots. Slots keep their identity across executions;
only their values change, which is what batched execution relies on.
"""
import logging
import time
from collections.abc import Sequence
from contextlib import ExitStack
from functools import wraps
from typing import Any, Self

from dbhelpers.exceptions import ValidationError
from dbhelpers.options import CommandOptions, CommandType
from dbhelpers.reader import Reader
from dbhelpers.strategy import get_db_strategy
from dbhelpers.utils import get_raw_connection

logger = logging.getLogger(__name__)

__all__ = [
    'Parameter',
    'Command',
    'prepare_command',
]


def dumpsql(func):
    """Decorator for logging command SQL, bound values and timing."""
    @wraps(func)
    def wrapper(self: 'Command', *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{self.text}\nargs: {self.values()}')
        try:
            return func(self, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{self.text}\nargs: {self.values()}')
            raise
        finally:
            elapsed = time.time() - start
            if hasattr(self.owner, 'addcall'):
                self.owner.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class Parameter:
    """Positional parameter slot bound to a command."""

    __slots__ = ('value',)

    def __init__(self, value: Any = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f'Parameter({self.value!r})'


class Command:
    """A prepared statement plus its positional parameters.

    Transaction, timeout and command type are applied only when set; left at
    None they keep the driver's defaults.
    """

    def __init__(self, connection: Any, text: str = '', transaction: Any = None,
                 timeout: float | None = None,
                 command_type: CommandType | None = None) -> None:
        self.owner = connection
        self.dbapi_connection = get_raw_connection(connection)
        if transaction is not None:
            tx_conn = get_raw_connection(transaction.connection)
            if tx_conn is not self.dbapi_connection:
                raise ValidationError('Transaction belongs to a different connection')
        self.transaction = transaction
        self.text = text
        self.timeout = timeout
        self.command_type = command_type
        self.parameters: list[Parameter] = []
        self.strategy = get_db_strategy(connection)
        self.dbapi_cursor = self.dbapi_connection.cursor()
        self._timeout_scope = ExitStack()
        self.closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def create_parameter(self) -> Parameter:
        """Create an empty slot. It is not bound until added to ``parameters``."""
        return Parameter()

    def add_parameter(self, value: Any = None) -> Parameter:
        param = self.create_parameter()
        param.value = value
        self.parameters.append(param)
        return param

    def values(self) -> tuple:
        """Current values of all slots in positional order."""
        return tuple(p.value for p in self.parameters)

    @dumpsql
    def execute_non_query(self) -> int:
        """Run the command and return the affected-row count."""
        self._timeout_scope.close()
        self._run()
        return self.dbapi_cursor.rowcount

    @dumpsql
    def execute_reader(self, arraysize: int = 500) -> Reader:
        """Run the command and return a reader over its rows.

        The timeout stays in force while rows are fetched, until ``close``.
        """
        self._timeout_scope.close()
        self._run(hold_timeout=True)
        return Reader(self.dbapi_cursor, arraysize=arraysize)

    def close(self) -> None:
        """Release the cursor. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        try:
            self._timeout_scope.close()
        finally:
            self.dbapi_cursor.close()

    def _run(self, hold_timeout: bool = False) -> None:
        values = self.values()
        with ExitStack() as stack:
            stack.enter_context(self.strategy.command_timeout(self.dbapi_connection, self.timeout))
            if self.command_type is CommandType.STORED_PROCEDURE:
                self.strategy.call_procedure(self.dbapi_cursor, self.text, values)
            elif values:
                self.dbapi_cursor.execute(self.text, values)
            else:
                self.dbapi_cursor.execute(self.text)
            if hold_timeout:
                self._timeout_scope = stack.pop_all()


def prepare_command(cn: Any, sql: str, params: Sequence[Any] | None = None,
                    options: CommandOptions | None = None) -> Command:
    """Build a command bound to ``cn`` with one positional slot per value.

    The caller owns the returned command and must close it.
    """
    options = options or CommandOptions()
    cmd = Command(cn, sql, transaction=options.transaction,
                  timeout=options.timeout, command_type=options.command_type)
    try:
        for value in params or ():
            cmd.add_parameter(value)
    except BaseException:
        cmd.close()
        raise
    return cmd
