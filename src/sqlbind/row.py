"""Result row abstraction over DB-API rows.

A Row exposes column count, column name by 1-based ordinal and value by
name or ordinal, whatever shape the driver produced the row in.
"""
import logging
import sqlite3
from collections.abc import Mapping, Sequence
from typing import Any, Self

logger = logging.getLogger(__name__)

__all__ = ['Row', 'as_row', 'column_names']


def column_names(cursor: Any) -> list[str]:
    """Column names from a DB-API cursor description.
    """
    return [getattr(c, 'name', None) or c[0] for c in (cursor.description or [])]


class Row:
    """Ordered, read-only result row.
    """

    __slots__ = ('_names', '_values', '_positions')

    def __init__(self, names: Sequence[str], values: Sequence[Any]) -> None:
        if len(names) != len(values):
            raise ValueError(f'Row has {len(values)} values for {len(names)} columns')
        self._names = tuple(names)
        self._values = tuple(values)
        self._positions: dict[str, int] = {}
        for ordinal, name in enumerate(self._names, start=1):
            self._positions.setdefault(name, ordinal)

    @classmethod
    def from_cursor(cls, cursor: Any, values: Sequence[Any]) -> Self:
        """Build a row from a cursor description and a value tuple."""
        return cls(column_names(cursor), values)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> Self:
        return cls(list(mapping.keys()), list(mapping.values()))

    @property
    def column_count(self) -> int:
        return len(self._names)

    @property
    def columns(self) -> tuple[str, ...]:
        return self._names

    def column_name(self, ordinal: int) -> str:
        """Name of the column at 1-based `ordinal`."""
        if not 1 <= ordinal <= len(self._names):
            raise IndexError(f'Column ordinal {ordinal} out of range 1..{len(self._names)}')
        return self._names[ordinal - 1]

    def value(self, key: str | int) -> Any:
        """Value by column name or 1-based ordinal.

        A duplicated column name resolves to its first occurrence.
        """
        if isinstance(key, int):
            self.column_name(key)
            return self._values[key - 1]
        try:
            return self._values[self._positions[key] - 1]
        except KeyError:
            raise KeyError(f'No column named {key!r}; columns: {list(self._names)}') from None

    def to_dict(self) -> dict[str, Any]:
        return dict(zip(self._names, self._values))

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self):
        return iter(self._values)

    def __repr__(self) -> str:
        return f'Row({self.to_dict()!r})'


def as_row(row: Any, cursor: Any = None) -> Row:
    """Adapt a driver row to a Row.

    Accepts Row, sqlite3.Row, mappings (psycopg dict rows), or plain
    sequences together with the cursor that produced them.
    """
    if isinstance(row, Row):
        return row
    if isinstance(row, sqlite3.Row):
        return Row(row.keys(), tuple(row))
    if isinstance(row, Mapping):
        return Row.from_mapping(row)
    if cursor is not None:
        return Row.from_cursor(cursor, row)
    raise TypeError(f'Cannot adapt {type(row).__name__} to a Row without a cursor description')
