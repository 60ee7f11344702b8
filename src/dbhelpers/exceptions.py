"""
Exception classes for the query helpers.

Driver errors are never translated. The tuples at the bottom only group the
psycopg and sqlite3 classes so callers can write a single ``except`` clause.
"""
import sqlite3

import psycopg


class DatabaseError(Exception):
    """Base class for all dbhelpers errors.
    """


class QueryError(DatabaseError):
    """Command feature not available for the connection's dialect.
    """


class ValidationError(DatabaseError):
    """Error in input validation.
    """


class ColumnInferenceError(ValidationError, ValueError):
    """Column names cannot be derived from a type's constructors.

    Raised on every lookup for the type, since the failed inference is cached.
    """

    def __init__(self, target: type) -> None:
        self.target = target
        name = getattr(target, '__qualname__', repr(target))
        super().__init__(f'Could not find column names for type {name}')


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    )

IntegrityError = (
    psycopg.IntegrityError,
    sqlite3.IntegrityError,
    )

ProgrammingError = (
    psycopg.ProgrammingError,
    psycopg.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    QueryError,
    )

OperationalError = (
    psycopg.OperationalError,
    sqlite3.OperationalError,
    )

UniqueViolation = (
    psycopg.errors.UniqueViolation,
    sqlite3.IntegrityError,
    )
