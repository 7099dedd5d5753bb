"""
Row to object mapping.

RowMapper builds one target object per result row. Each column is
coerced by its declared ColumnType, then offered to the mapping
strategies in order; the first strategy that names a property wins and
the coerced value is written to that property.

    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class User:
    ...     userName: str = None
    ...     userAge: int = None
    >>> RowMapper(User).map({'user_name': 'Alice', 'user_age': 30})
    User(userName='Alice', userAge=30)
"""
import logging
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from sqlbind.columns import ColumnTypes
from sqlbind.exceptions import MappingError, UnmatchedColumnError
from sqlbind.row import Row, as_row
from sqlbind.strategies import DEFAULTS, MappingStrategy, strategy_name
from sqlbind.target import TargetDescriptor, describe

logger = logging.getLogger(__name__)

__all__ = ['RowMapper']

T = TypeVar('T')


class RowMapper(Generic[T]):
    """Maps result rows onto new instances of a target type.

    Subclasses may override `get_mapping_strategies` to supply their own
    chain, and set `raise_on_unmatched = False` to log unmatched columns
    instead of failing.

    A mapper holds no per-row state and may be reused across queries.
    """

    raise_on_unmatched: bool = True

    def __init__(self, target_type: type[T],
                 column_types: ColumnTypes | dict | None = None,
                 strategies: Iterable[MappingStrategy] | None = None,
                 raise_on_unmatched: bool | None = None) -> None:
        self.target_type = target_type
        self.descriptor: TargetDescriptor = describe(target_type)
        if column_types is None:
            column_types = ColumnTypes.empty()
        elif not isinstance(column_types, ColumnTypes):
            column_types = ColumnTypes(column_types)
        self.column_types = column_types
        self.strategies = tuple(strategies) if strategies is not None else DEFAULTS
        if raise_on_unmatched is not None:
            self.raise_on_unmatched = raise_on_unmatched

    def get_mapping_strategies(self) -> tuple[MappingStrategy, ...]:
        """Strategies to try for each column, in priority order."""
        return self.strategies

    def map(self, row: Any, cursor: Any = None) -> T:
        """Build a target object from one row.

        Args:
            row: Row, sqlite3.Row, mapping, or a value tuple with `cursor`
            cursor: Cursor whose description names the columns of a tuple row

        Returns
            A new instance of the target type

        Raises
            ConstructionError: target type needs constructor arguments
            CoercionError: a value does not fit its declared column type
            UnmatchedColumnError: no strategy matched a column (when raising)
            MappingError: the matched property rejected the value
        """
        target = self.descriptor.new_instance()
        row = as_row(row, cursor)
        strategies = self.get_mapping_strategies()

        for ordinal in range(1, row.column_count + 1):
            column = row.column_name(ordinal)
            value = self.column_types.coerce(column, row.value(ordinal))
            prop = self._find_match(strategies, column, value)
            if prop is None:
                self._unmatched(strategies, column, value, target)
                continue
            try:
                self.descriptor.setter(prop).set(target, value)
            except MappingError as e:
                raise MappingError(f'Could not map [column: {column}, type: {_type_name(value)}, '
                                   f'value: {value!r}] to property {prop!r} on '
                                   f'{self.target_type.__name__}: {e}') from e
        return target

    __call__ = map

    def map_all(self, rows: Iterable[Any], cursor: Any = None) -> list[T]:
        """Map every row; the first failing row aborts the whole list."""
        return [self.map(row, cursor) for row in rows]

    def row_factory(self, cursor: Any, values: tuple) -> T:
        """sqlite3 row factory: `connection.row_factory = mapper.row_factory`.
        """
        return self.map(Row.from_cursor(cursor, values))

    def _find_match(self, strategies: tuple[MappingStrategy, ...], column: str, value: Any) -> str | None:
        for strategy in strategies:
            prop = strategy(column, value, self.descriptor)
            if prop is not None:
                return prop
        return None

    def _unmatched(self, strategies: tuple[MappingStrategy, ...], column: str,
                   value: Any, target: Any) -> None:
        message = (f'Could not map [column: {column}, type: {_type_name(value)}, value: {value!r}] '
                   f'to a property on {type(target).__name__} using strategies: '
                   f'{[strategy_name(s) for s in strategies]}')
        if self.raise_on_unmatched:
            raise UnmatchedColumnError(message, column=column)
        logger.debug(message)

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.target_type.__name__})'


def _type_name(value: Any) -> str:
    return 'null' if value is None else type(value).__name__


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
