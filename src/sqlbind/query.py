"""
Query operations over a DB-API connection.

Each operation expands the statement's parameters (sequence values become
runs of placeholders), standardizes markers for the connection's dialect,
executes on a fresh cursor and returns plain dicts or mapped objects.

Transactions are left to the caller.

    >>> import sqlite3
    >>> cn = sqlite3.connect(':memory:')
    >>> execute(cn, 'CREATE TABLE t (id INTEGER, name TEXT)')
    -1
    >>> execute(cn, 'INSERT INTO t VALUES (?, ?), (?, ?)', 1, 'a', 2, 'b')
    2
    >>> select(cn, 'SELECT name FROM t WHERE id IN (?)', [1, 2])
    [{'name': 'a'}, {'name': 'b'}]
"""
import logging
import time
from collections.abc import Mapping
from functools import wraps
from typing import Any, TypeVar

from more_itertools import one, only

from sqlbind.columns import ColumnTypes
from sqlbind.exceptions import QueryError, ValidationError
from sqlbind.mapper import RowMapper
from sqlbind.options import SqlOptions
from sqlbind.row import Row, as_row
from sqlbind.sql import BoundStatement, expand
from sqlbind.utils import get_dialect_name

logger = logging.getLogger(__name__)

__all__ = [
    'prepare',
    'execute',
    'select',
    'select_row',
    'select_row_or_none',
    'select_scalar',
    'select_scalar_or_none',
    'select_column',
    'count',
]

T = TypeVar('T')


def dumpsql(func):
    """Decorator for logging SQL statements and parameters."""
    @wraps(func)
    def wrapper(cursor: Any, statement: BoundStatement, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{statement.sql}\nargs: {statement.args}')
        try:
            return func(cursor, statement, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{statement.sql}\nargs: {statement.args}')
            raise
        finally:
            logger.debug(f'Query time: {time.time() - start:.4f}s')
    return wrapper


@dumpsql
def _execute(cursor: Any, statement: BoundStatement) -> None:
    if statement.args:
        cursor.execute(statement.sql, statement.args)
    else:
        cursor.execute(statement.sql)


def prepare(cn: Any, sql: str, args: tuple, options: SqlOptions | None = None) -> BoundStatement:
    """Expand parameters and standardize markers for the connection.

    A single mapping argument binds named markers.
    """
    if not sql or not sql.strip():
        raise QueryError('Empty SQL statement')
    options = options or SqlOptions()
    if len(args) == 1 and isinstance(args[0], Mapping):
        args = args[0]
    statement = expand(sql, args, empty_sequence=options.empty_sequence)
    if statement.args:
        statement = statement.for_dialect(get_dialect_name(cn))
    return statement


def _fetch(cn: Any, sql: str, args: tuple, options: SqlOptions | None) -> list[Row]:
    statement = prepare(cn, sql, args, options)
    cursor = cn.cursor()
    try:
        _execute(cursor, statement)
        rows = cursor.fetchall()
        logger.debug(f'Fetched {len(rows)} rows')
        return [as_row(row, cursor) for row in rows]
    finally:
        cursor.close()


def execute(cn: Any, sql: str, *args: Any, options: SqlOptions | None = None) -> int:
    """Execute a statement and return the affected row count.
    """
    statement = prepare(cn, sql, args, options)
    cursor = cn.cursor()
    try:
        _execute(cursor, statement)
        return cursor.rowcount
    finally:
        cursor.close()


def _build(rows: list[Row], target: type[T] | None, column_types: ColumnTypes | dict | None,
           options: SqlOptions | None) -> list[Any]:
    if target is None:
        return [row.to_dict() for row in rows]
    options = options or SqlOptions()
    mapper = RowMapper(target, column_types=column_types, strategies=options.strategies,
                       raise_on_unmatched=options.raise_on_unmatched)
    return mapper.map_all(rows)


def select(cn: Any, sql: str, *args: Any, target: type[T] | None = None,
           column_types: ColumnTypes | dict | None = None,
           options: SqlOptions | None = None) -> list[Any]:
    """Execute a query and return all rows.

    Rows are dicts, or instances of `target` built by a RowMapper.
    """
    rows = _fetch(cn, sql, args, options)
    return _build(rows, target, column_types, options)


def select_row(cn: Any, sql: str, *args: Any, target: type[T] | None = None,
               column_types: ColumnTypes | dict | None = None,
               options: SqlOptions | None = None) -> Any:
    """Execute a query and return its single row.

    Raises ValidationError if the query returns zero or multiple rows.
    """
    rows = select(cn, sql, *args, target=target, column_types=column_types, options=options)
    return one(rows,
               too_short=ValidationError('Expected one row, returned 0'),
               too_long=ValidationError(f'Expected one row, returned {len(rows)}'))


def select_row_or_none(cn: Any, sql: str, *args: Any, target: type[T] | None = None,
                       column_types: ColumnTypes | dict | None = None,
                       options: SqlOptions | None = None) -> Any | None:
    """Execute a query and return a single row or None if no rows found.

    Raises ValidationError if the query returns multiple rows.
    """
    rows = select(cn, sql, *args, target=target, column_types=column_types, options=options)
    return only(rows, too_long=ValidationError(f'Expected at most one row, returned {len(rows)}'))


def select_scalar(cn: Any, sql: str, *args: Any, options: SqlOptions | None = None) -> Any:
    """Execute a query and return the first column of its single row.

    Raises ValidationError if the query returns zero or multiple rows.
    """
    rows = _fetch(cn, sql, args, options)
    row = one(rows,
              too_short=ValidationError('Expected one row, returned 0'),
              too_long=ValidationError(f'Expected one row, returned {len(rows)}'))
    return row.value(1)


def select_scalar_or_none(cn: Any, sql: str, *args: Any, options: SqlOptions | None = None) -> Any | None:
    """Execute a query and return a single scalar value or None if no rows found.
    """
    rows = _fetch(cn, sql, args, options)
    row = only(rows, too_long=ValidationError(f'Expected at most one row, returned {len(rows)}'))
    return None if row is None else row.value(1)


def select_column(cn: Any, sql: str, *args: Any, options: SqlOptions | None = None) -> list[Any]:
    """Execute a query and return its first column as a list.
    """
    rows = _fetch(cn, sql, args, options)
    return [row.value(1) for row in rows]


def count(cn: Any, sql: str, *args: Any, options: SqlOptions | None = None) -> int:
    """Number of rows a query returns.
    """
    return select_scalar(cn, f'SELECT COUNT(*) FROM ({sql}) AS counted', *args, options=options)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
