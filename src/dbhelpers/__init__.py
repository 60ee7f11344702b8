"""
Query helpers over DB-API connections.

All helpers can be called either as:
- Module functions: dbhelpers.execute(cn, sql, params)
- ConnectionWrapper methods: cn.execute(sql, params)

``cn`` may be a DB-API connection, a SQLAlchemy connection, or a
ConnectionWrapper. Parameters are positional and use the driver's own
paramstyle.
"""
__version__ = '0.1.0'

from dbhelpers.columns import add_column_names, clear_column_cache
from dbhelpers.columns import column_constructor, column_factory, infer_columns
from dbhelpers.columns import register_columns
from dbhelpers.command import Command, Parameter, prepare_command
from dbhelpers.connection import ConnectionWrapper
from dbhelpers.exceptions import ColumnInferenceError, DatabaseError
from dbhelpers.exceptions import DbConnectionError, IntegrityError
from dbhelpers.exceptions import OperationalError, ProgrammingError, QueryError
from dbhelpers.exceptions import UniqueViolation, ValidationError
from dbhelpers.options import CommandOptions, CommandType
from dbhelpers.query import ResultIterator, execute, execute_batch, for_each
from dbhelpers.query import for_each_while, read, select
from dbhelpers.reader import Reader

__all__ = [
    'ConnectionWrapper',
    'CommandOptions',
    'CommandType',
    'Command',
    'Parameter',
    'Reader',
    'ResultIterator',
    'prepare_command',
    'execute',
    'execute_batch',
    'read',
    'select',
    'for_each',
    'for_each_while',
    'column_constructor',
    'register_columns',
    'infer_columns',
    'column_factory',
    'add_column_names',
    'clear_column_cache',
    'DatabaseError',
    'ValidationError',
    'ColumnInferenceError',
    'QueryError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
    'UniqueViolation',
    'DbConnectionError',
]
