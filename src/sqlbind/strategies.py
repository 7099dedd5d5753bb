"""
Column to property mapping strategies.

A strategy is any callable taking `(column, value, descriptor)` and
returning the name of the matched property, or None. Strategies are
tried in order and the first match wins, so cheaper and stricter
strategies come first.
"""
import logging
from collections.abc import Callable, Mapping
from typing import Any

from sqlbind.target import TargetDescriptor

logger = logging.getLogger(__name__)

__all__ = [
    'MappingStrategy',
    'exact_name',
    'case_insensitive',
    'normalized_name',
    'ColumnMapping',
    'DEFAULTS',
    'strategy_name',
]

MappingStrategy = Callable[[str, Any, TargetDescriptor], str | None]


def exact_name(column: str, value: Any, descriptor: TargetDescriptor) -> str | None:
    """Column name equals a property name."""
    return column if descriptor.has_property(column) else None


def case_insensitive(column: str, value: Any, descriptor: TargetDescriptor) -> str | None:
    """Column name equals a property name ignoring case."""
    return descriptor.find_folded(column)


def normalized_name(column: str, value: Any, descriptor: TargetDescriptor) -> str | None:
    """Names equal once case and separators are dropped.

    `user_name` matches `userName`, `UserName` and `user_name`.
    """
    return descriptor.find_normalized(column)


class ColumnMapping:
    """Declarative column -> property table.

    >>> strategy = ColumnMapping({'usr_nm': 'name'})
    """

    def __init__(self, mapping: Mapping[str, str] | None = None, **kwargs: str) -> None:
        self.mapping = {column.casefold(): prop for column, prop in dict(mapping or {}, **kwargs).items()}

    def __call__(self, column: str, value: Any, descriptor: TargetDescriptor) -> str | None:
        prop = self.mapping.get(column.casefold())
        if prop is not None and descriptor.has_property(prop):
            return prop
        return None

    def __repr__(self) -> str:
        return f'ColumnMapping({self.mapping!r})'


def strategy_name(strategy: MappingStrategy) -> str:
    """Readable name of a strategy for error messages."""
    if hasattr(strategy, '__name__'):
        return strategy.__name__
    return repr(strategy)


DEFAULTS: tuple[MappingStrategy, ...] = (exact_name, case_insensitive, normalized_name)
