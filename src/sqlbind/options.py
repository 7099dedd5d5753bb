from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlbind.binding import EMPTY_SEQUENCE_POLICIES

from libb import ConfigOptions

__all__ = ['SqlOptions']


@dataclass
class SqlOptions(ConfigOptions):
    """Options

    Binding:
    - empty_sequence: 'empty' emits no placeholder for an empty sequence,
      'null' emits the literal NULL (default: 'empty')

    Mapping:
    - raise_on_unmatched: Fail when a column matches no property (default: True)
    - strategies: Ordered mapping strategies, None for the defaults
    """
    empty_sequence: str = 'empty'
    raise_on_unmatched: bool = True
    strategies: tuple[Callable[..., Any], ...] | None = None

    def __post_init__(self):
        if self.empty_sequence not in EMPTY_SEQUENCE_POLICIES:
            raise ValueError(f'empty_sequence must be one of: {EMPTY_SEQUENCE_POLICIES}')
        if self.strategies is not None:
            self.strategies = tuple(self.strategies)
            if not self.strategies:
                raise ValueError('strategies must not be empty')
            for strategy in self.strategies:
                if not callable(strategy):
                    raise ValueError(f'strategy {strategy!r} is not callable')
