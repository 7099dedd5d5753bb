"""
Exception classes for binding, mapping and query execution.
"""
import sqlite3

import psycopg


class DatabaseError(Exception):
    """Root of the errors sqlbind raises itself.
    """


class QueryError(DatabaseError):
    """A statement cannot be sent as given, such as an empty one.
    """


class ValidationError(DatabaseError):
    """Arguments do not fit the statement, or a result has the wrong shape.
    """


class TypeConversionError(DatabaseError):
    """A value could not be converted between its driver and Python forms.
    """


class CoercionError(TypeConversionError):
    """A raw column value could not be coerced to its declared column type.
    """


class MappingError(DatabaseError):
    """Error populating a target object from a result row.
    """


class ConstructionError(MappingError):
    """The target type could not be instantiated without arguments.
    """


class UnmatchedColumnError(MappingError):
    """No mapping strategy matched a result column to a property.
    """

    def __init__(self, message: str, column: str | None = None) -> None:
        super().__init__(message)
        self.column = column


# Driver errors grouped so callers can catch them without importing drivers.

DbConnectionError = (
    psycopg.InterfaceError,
    psycopg.OperationalError,
    sqlite3.InterfaceError,
    sqlite3.OperationalError,
    )

IntegrityError = (psycopg.IntegrityError, sqlite3.IntegrityError)

ProgrammingError = (
    QueryError,
    psycopg.DatabaseError,
    sqlite3.DatabaseError,
    )

OperationalError = (psycopg.OperationalError, sqlite3.OperationalError)
