"""
Base strategy interface for dialect-specific command behavior.

DB-API leaves statement timeouts and stored-procedure calls to each driver.
A strategy supplies both for one dialect so that ``Command`` can stay
dialect-agnostic.
"""
from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import AbstractContextManager
from typing import Any

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


class DatabaseStrategy(ABC):
    """Base class for dialect-specific command behavior.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier."""

    @abstractmethod
    def command_timeout(self, raw_conn: Any, timeout: float | None) -> AbstractContextManager:
        """Bound statement execution inside the block to ``timeout`` seconds.

        Args:
            raw_conn: DB-API connection the command runs on
            timeout: Seconds, 0 for no limit, None to leave the driver default
        """

    @abstractmethod
    def call_procedure(self, cursor: Any, name: str, values: Sequence[Any]) -> None:
        """Invoke a stored procedure with positional arguments.

        Args:
            cursor: DB-API cursor owned by the command
            name: Procedure name as written by the caller
            values: Positional argument values
        """
