"""
Column type registry.

Maps result column names to a declared ColumnType. The declared type
coerces the raw driver value before it is offered to mapping strategies.
Columns absent from the registry use OBJECT, which passes values through.
"""
import datetime
import json
import logging
import pathlib
from collections.abc import Callable, Iterator, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Self

import dateutil.parser

from sqlbind.exceptions import CoercionError

logger = logging.getLogger(__name__)

__all__ = [
    'ColumnType',
    'ColumnTypes',
    'OBJECT',
    'STRING',
    'INTEGER',
    'FLOAT',
    'DECIMAL',
    'BOOLEAN',
    'DATE',
    'DATETIME',
    'TIME',
    'BYTES',
    'column_type_for',
]

TRUE_STRINGS = {'true', 't', 'yes', 'y', '1', 'on'}
FALSE_STRINGS = {'false', 'f', 'no', 'n', '0', 'off'}


class ColumnType:
    """A semantic column type with its coercion.
    """

    def __init__(self, name: str, python_type: type | None,
                 converter: Callable[[Any], Any]) -> None:
        self.name = name
        self.python_type = python_type
        self._converter = converter

    def coerce(self, value: Any, column: str | None = None) -> Any:
        """Coerce a raw driver value. None is never coerced.

        Raises
            CoercionError: the value cannot be represented as this type
        """
        if value is None:
            return None
        if self.python_type is not None and type(value) is self.python_type:
            return value
        try:
            return self._converter(value)
        except (TypeError, ValueError, ArithmeticError, InvalidOperation, OverflowError) as e:
            where = f' for column {column!r}' if column else ''
            raise CoercionError(f'Cannot coerce {type(value).__name__} value {value!r} '
                                f'to {self.name}{where}: {e}') from e

    def __repr__(self) -> str:
        return f'ColumnType({self.name})'


def _to_string(value: Any) -> str:
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).decode()
    if isinstance(value, datetime.date | datetime.time):
        return value.isoformat()
    return str(value)


def _to_int(value: Any) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError('fractional value')
    if isinstance(value, Decimal) and value != value.to_integral_value():
        raise ValueError('fractional value')
    if isinstance(value, str):
        return int(value.strip())
    return int(value)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value if isinstance(value, str | int) else str(value))


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise ValueError(f'unrecognized boolean string {value!r}')
    if isinstance(value, int | float | Decimal):
        return bool(value)
    raise TypeError(f'{type(value).__name__} is not boolean-like')


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        return dateutil.parser.parse(value).date()
    raise TypeError(f'{type(value).__name__} is not date-like')


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        return dateutil.parser.parse(value)
    if isinstance(value, int | float):
        return datetime.datetime.fromtimestamp(value, tz=datetime.UTC)
    raise TypeError(f'{type(value).__name__} is not datetime-like')


def _to_time(value: Any) -> datetime.time:
    if isinstance(value, datetime.datetime):
        return value.timetz()
    if isinstance(value, datetime.time):
        return value
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        return datetime.time.fromisoformat(value.strip())
    raise TypeError(f'{type(value).__name__} is not time-like')


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


OBJECT = ColumnType('object', None, lambda value: value)
STRING = ColumnType('string', str, _to_string)
INTEGER = ColumnType('integer', int, _to_int)
FLOAT = ColumnType('float', float, float)
DECIMAL = ColumnType('decimal', Decimal, _to_decimal)
BOOLEAN = ColumnType('boolean', bool, _to_bool)
DATE = ColumnType('date', datetime.date, _to_date)
DATETIME = ColumnType('datetime', datetime.datetime, _to_datetime)
TIME = ColumnType('time', datetime.time, _to_time)
BYTES = ColumnType('bytes', bytes, _to_bytes)

_BY_NAME = {t.name: t for t in (OBJECT, STRING, INTEGER, FLOAT, DECIMAL,
                                BOOLEAN, DATE, DATETIME, TIME, BYTES)}
_BY_NAME.update({
    'str': STRING, 'text': STRING, 'varchar': STRING,
    'int': INTEGER, 'bigint': INTEGER,
    'double': FLOAT, 'real': FLOAT,
    'numeric': DECIMAL,
    'bool': BOOLEAN,
    'timestamp': DATETIME,
    'blob': BYTES,
    })

_BY_PYTHON_TYPE = {t.python_type: t for t in _BY_NAME.values() if t.python_type is not None}


def column_type_for(declared: 'ColumnType | type | str') -> ColumnType:
    """Resolve a ColumnType, Python type or type name to a ColumnType.
    """
    if isinstance(declared, ColumnType):
        return declared
    if isinstance(declared, str):
        try:
            return _BY_NAME[declared.strip().lower()]
        except KeyError:
            raise ValueError(f'Unknown column type name: {declared!r}') from None
    if isinstance(declared, type):
        # datetime is checked before its base class date
        for python_type in (bool, datetime.datetime, *_BY_PYTHON_TYPE):
            if issubclass(declared, python_type):
                return _BY_PYTHON_TYPE[python_type]
        return OBJECT
    raise TypeError(f'Cannot derive a column type from {declared!r}')


class ColumnTypes(Mapping):
    """Immutable, case-insensitive column name -> ColumnType registry.

    >>> types = ColumnTypes({'user_age': 'string'})
    >>> types.get('USER_AGE')
    ColumnType(string)
    >>> types.get('other')
    ColumnType(object)
    """

    def __init__(self, types: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        merged = dict(types or {}, **kwargs)
        self._types: dict[str, ColumnType] = {}
        for column, declared in merged.items():
            key = column.lower()
            if key in self._types:
                raise ValueError(f'Duplicate column type declaration: {column!r}')
            self._types[key] = column_type_for(declared)

    @classmethod
    def empty(cls) -> Self:
        return cls()

    @classmethod
    def from_file(cls, config_file: str | pathlib.Path) -> Self:
        """Load a JSON object of column name -> type name.
        """
        with pathlib.Path(config_file).open() as f:
            config = json.load(f)
        if not isinstance(config, dict):
            raise ValueError(f'Column type config {config_file} must be a JSON object')
        logger.info(f'Loaded {len(config)} column types from {config_file}')
        return cls(config)

    def with_type(self, column: str, declared: ColumnType | type | str) -> Self:
        """Copy of the registry with one column declared or overridden."""
        types = {k: v for k, v in self._types.items() if k != column.lower()}
        types[column] = declared
        return type(self)(types)

    def get(self, column: str, default: ColumnType = OBJECT) -> ColumnType:
        return self._types.get(column.lower(), default)

    def coerce(self, column: str, value: Any) -> Any:
        """Coerce a raw value by the column's declared type."""
        return self.get(column).coerce(value, column)

    def __getitem__(self, column: str) -> ColumnType:
        return self._types[column.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f'ColumnTypes({self._types!r})'


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
