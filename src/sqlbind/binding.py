"""
Placeholder generation and physical index bookkeeping.

A resolver turns one logical parameter into a placeholder fragment and
the contiguous range of 1-based physical indexes that fragment occupies:

    >>> resolve(1, Parameter.of([10, 20, 30]))
    Resolution(fragment='?,?,?', indexes=range(1, 4))
    >>> resolve(4, Parameter.of('x'))
    Resolution(fragment='?', indexes=range(4, 5))

Resolution is pure. The caller threads the running index counter, and
must concatenate fragments in the same order it resolves parameters.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from sqlbind.parameters import Absent, Parameter, Scalar, Sequence

logger = logging.getLogger(__name__)

__all__ = [
    'Resolution',
    'BindingResolver',
    'ScalarBindingResolver',
    'SequenceBindingResolver',
    'AbsentBindingResolver',
    'BindingResolverRegistry',
    'EMPTY_SEQUENCE_POLICIES',
    'generate_placeholders',
    'resolve',
    'resolve_all',
]

EMPTY_SEQUENCE_POLICIES = ('empty', 'null')


@dataclass(frozen=True)
class Resolution:
    """Placeholder fragment and the physical indexes it occupies."""
    fragment: str
    indexes: range

    @property
    def length(self) -> int:
        return len(self.indexes)

    @property
    def next_index(self) -> int:
        """First physical index free after this resolution."""
        return self.indexes.stop


def generate_placeholders(length: int, marker: str = '?') -> str:
    """Comma-joined run of `length` markers, empty when length is 0.
    """
    return ','.join([marker] * length)


class BindingResolver(ABC):
    """Decides how many placeholders a parameter contributes.
    """

    def __init__(self, marker: str = '?') -> None:
        self.marker = marker

    @abstractmethod
    def length_of(self, parameter: Parameter) -> int:
        """Number of placeholders the parameter expands to."""

    def empty_fragment(self, parameter: Parameter) -> str:
        """Fragment emitted when the parameter contributes no placeholder."""
        return ''

    def resolve(self, next_index: int, parameter: Parameter) -> Resolution:
        length = self.length_of(parameter)
        if length == 0:
            return Resolution(self.empty_fragment(parameter), range(next_index, next_index))
        return Resolution(generate_placeholders(length, self.marker),
                          range(next_index, next_index + length))

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(marker={self.marker!r})'


class ScalarBindingResolver(BindingResolver):
    """One placeholder for any present value.

    Also the fallback for variants with no registered resolver.
    """

    def length_of(self, parameter: Parameter) -> int:
        if parameter.is_absent:
            return 0
        return 1


class SequenceBindingResolver(BindingResolver):
    """One placeholder per element.

    An empty sequence yields an empty fragment, or the literal NULL when
    the empty policy is 'null' (so `IN ()` reads `IN (NULL)`). Neither
    records an index.
    """

    def __init__(self, marker: str = '?', empty: str = 'empty') -> None:
        super().__init__(marker)
        if empty not in EMPTY_SEQUENCE_POLICIES:
            raise ValueError(f'empty must be one of: {EMPTY_SEQUENCE_POLICIES}')
        self.empty = empty

    def length_of(self, parameter: Parameter) -> int:
        return parameter.size

    def empty_fragment(self, parameter: Parameter) -> str:
        return 'NULL' if self.empty == 'null' else ''


class AbsentBindingResolver(BindingResolver):
    """No value, no placeholder."""

    def length_of(self, parameter: Parameter) -> int:
        return 0


class BindingResolverRegistry:
    """Resolvers keyed by parameter variant.

    Lookup walks the variant's MRO; unregistered variants fall back to the
    default resolver.
    """

    def __init__(self, marker: str = '?', empty_sequence: str = 'empty',
                 default: BindingResolver | None = None) -> None:
        self.marker = marker
        self.default = default or ScalarBindingResolver(marker)
        self._resolvers: dict[type, BindingResolver] = {
            Scalar: ScalarBindingResolver(marker),
            Sequence: SequenceBindingResolver(marker, empty=empty_sequence),
            Absent: AbsentBindingResolver(marker),
            }

    def register(self, variant: type, resolver: BindingResolver) -> None:
        """Register a resolver for a parameter variant.
        """
        self._resolvers[variant] = resolver

    def resolver_for(self, parameter: Parameter) -> BindingResolver:
        for cls in type(parameter.value).__mro__:
            if cls in self._resolvers:
                return self._resolvers[cls]
        logger.debug(f'No resolver for {type(parameter.value).__name__}, using {self.default!r}')
        return self.default

    def resolve(self, next_index: int, parameter: Parameter) -> Resolution:
        return self.resolver_for(parameter).resolve(next_index, parameter)


_default_registry = BindingResolverRegistry()


def resolve(next_index: int, parameter: Parameter,
            registry: BindingResolverRegistry | None = None) -> Resolution:
    """Resolve one parameter starting at the 1-based physical `next_index`.

    Args:
        next_index: Position the parameter's first placeholder would take
        parameter: Logical parameter (raw values are wrapped with Parameter.of)
        registry: Resolver registry, defaults to `?` markers

    Returns
        Resolution with the fragment text and occupied index range
    """
    if next_index < 1:
        raise ValueError(f'Physical indexes are 1-based, got {next_index}')
    registry = registry or _default_registry
    return registry.resolve(next_index, Parameter.of(parameter))


def resolve_all(parameters: Iterable[Parameter], start: int = 1,
                registry: BindingResolverRegistry | None = None) -> tuple[Resolution, ...]:
    """Resolve parameters in order, threading the running index counter.

    The returned index ranges are contiguous: no overlap, no gaps.

    >>> [r.fragment for r in resolve_all([Parameter.of([1, 2, 3]), Parameter.of([4, 5])])]
    ['?,?,?', '?,?']
    """
    resolutions = []
    next_index = start
    for parameter in parameters:
        resolution = resolve(next_index, parameter, registry)
        resolutions.append(resolution)
        next_index = resolution.next_index
    return tuple(resolutions)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
