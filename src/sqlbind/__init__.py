"""
Client-side SQL binding and row mapping over DB-API connections.

Binding: sequence-valued parameters expand into runs of placeholders with
exact physical index bookkeeping.

    >>> import sqlbind as sb
    >>> sb.expand('SELECT * FROM t WHERE id IN (?)', ([1, 2, 3],)).sql
    'SELECT * FROM t WHERE id IN (?,?,?)'

Mapping: result rows become plain objects through an ordered chain of
column-to-property strategies.
"""
__version__ = '0.1.0'

from sqlbind.binding import BindingResolver, BindingResolverRegistry
from sqlbind.binding import Resolution, resolve, resolve_all
from sqlbind.columns import ColumnType, ColumnTypes
from sqlbind.exceptions import CoercionError, ConstructionError, DatabaseError
from sqlbind.exceptions import DbConnectionError, IntegrityError, MappingError
from sqlbind.exceptions import OperationalError, ProgrammingError, QueryError
from sqlbind.exceptions import TypeConversionError, UnmatchedColumnError
from sqlbind.exceptions import ValidationError
from sqlbind.mapper import RowMapper
from sqlbind.options import SqlOptions
from sqlbind.parameters import ABSENT, Absent, Parameter, Scalar, Sequence
from sqlbind.query import count, execute, select, select_column, select_row
from sqlbind.query import select_row_or_none, select_scalar
from sqlbind.query import select_scalar_or_none
from sqlbind.row import Row
from sqlbind.sql import BoundStatement, expand
from sqlbind.strategies import DEFAULTS, ColumnMapping, case_insensitive
from sqlbind.strategies import exact_name, normalized_name

__all__ = [
    'expand',
    'resolve',
    'resolve_all',
    'execute',
    'select',
    'select_row',
    'select_row_or_none',
    'select_scalar',
    'select_scalar_or_none',
    'select_column',
    'count',
    'Parameter',
    'Scalar',
    'Sequence',
    'Absent',
    'ABSENT',
    'Resolution',
    'BindingResolver',
    'BindingResolverRegistry',
    'BoundStatement',
    'ColumnType',
    'ColumnTypes',
    'Row',
    'RowMapper',
    'ColumnMapping',
    'DEFAULTS',
    'exact_name',
    'case_insensitive',
    'normalized_name',
    'SqlOptions',
    'DatabaseError',
    'QueryError',
    'ValidationError',
    'TypeConversionError',
    'CoercionError',
    'MappingError',
    'ConstructionError',
    'UnmatchedColumnError',
    'DbConnectionError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
]
