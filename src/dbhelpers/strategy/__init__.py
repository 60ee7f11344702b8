"""
Database strategy factory for dialect-specific command behavior.
"""
import logging
from functools import lru_cache

from dbhelpers.strategy.base import _STRATEGY_REGISTRY
from dbhelpers.strategy.base import DatabaseStrategy as DatabaseStrategy
from dbhelpers.strategy.base import register_strategy as register_strategy
from dbhelpers.strategy.generic import GenericStrategy as GenericStrategy
from dbhelpers.strategy.postgres import PostgresStrategy as PostgresStrategy
from dbhelpers.strategy.sqlite import SQLiteStrategy as SQLiteStrategy
from dbhelpers.utils import get_dialect_name

logger = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def _get_strategy(dialect: str) -> DatabaseStrategy:
    """Get cached strategy instance for a dialect."""
    return _STRATEGY_REGISTRY[dialect]()


def get_strategy(dialect: str) -> DatabaseStrategy:
    """Get strategy instance for a dialect name, falling back to generic DB-API.
    """
    if dialect not in _STRATEGY_REGISTRY:
        logger.debug(f'No strategy registered for {dialect}, using generic')
        dialect = 'generic'
    return _get_strategy(dialect)


def get_db_strategy(cn) -> DatabaseStrategy:
    """Get database strategy for the connection."""
    try:
        dialect = get_dialect_name(cn)
    except AttributeError:
        dialect = 'generic'
    return get_strategy(dialect)


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_STRATEGY_REGISTRY.keys())
