"""
Connection resolution utilities.

Helpers accept raw DB-API connections, SQLAlchemy connections, and
``ConnectionWrapper`` objects. Everything is reduced to the DB-API
connection before a cursor is opened.
"""
import logging
from typing import Any

import sqlalchemy as sa

__all__ = [
    'get_dialect_name',
    'get_raw_connection',
    'ensure_commit',
    'rollback_quietly',
]

logger = logging.getLogger(__name__)


def get_dialect_name(obj: Any) -> str:
    """Get dialect name for a database connection.

    Raises AttributeError if the dialect cannot be determined.
    """
    if hasattr(obj, 'dialect'):
        dialect = obj.dialect
        if isinstance(dialect, str):
            return dialect.lower()
        return str(dialect.name).lower()

    if hasattr(obj, 'dbapi_connection'):
        return get_dialect_name(obj.dbapi_connection)

    type_name = f'{type(obj).__module__}.{type(obj).__name__}'
    if 'psycopg' in type_name:
        return 'postgresql'
    if 'sqlite3' in type_name:
        return 'sqlite'

    raise AttributeError(f'Cannot determine dialect for {type(obj)}')


def get_raw_connection(connection: Any) -> Any:
    """Extract the DB-API connection from a SQLAlchemy connection or wrapper.
    """
    if isinstance(connection, sa.engine.Connection):
        return connection.connection.dbapi_connection
    if hasattr(connection, 'dbapi_connection'):
        return connection.dbapi_connection
    return connection


def ensure_commit(connection: Any) -> None:
    """Commit the DB-API connection behind ``connection``.
    """
    raw_conn = get_raw_connection(connection)
    raw_conn.commit()


def rollback_quietly(connection: Any) -> None:
    """Roll back after a failed statement without masking the original error.
    """
    raw_conn = get_raw_connection(connection)
    try:
        raw_conn.rollback()
    except Exception as e:
        logger.debug(f'Could not roll back after failed statement: {e}')
