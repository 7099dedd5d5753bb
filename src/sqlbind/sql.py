"""
SQL statement expansion and placeholder handling.

This module provides:
- expand: resolve every placeholder marker of a statement in textual
  order, expanding sequence parameters into runs of placeholders
- standardize_placeholders: ? vs %s based on database dialect
- escape_percent_signs_in_literals: %% escaping for pyformat drivers
- has_placeholders: quick check for any marker

Markers inside quoted literals, comments and `::` casts are left alone.
"""
import logging
import re
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Self

from sqlbind.binding import BindingResolverRegistry, Resolution
from sqlbind.exceptions import ValidationError
from sqlbind.parameters import Parameter, Scalar

logger = logging.getLogger(__name__)

__all__ = [
    'BoundStatement',
    'expand',
    'standardize_placeholders',
    'escape_percent_signs_in_literals',
    'has_placeholders',
]

_TOKEN = re.compile(r"""
    (?P<literal>'(?:[^']|'')*'|"(?:[^"]|"")*")
  | (?P<comment>--[^\n]*|/\*[\s\S]*?\*/)
  | (?P<cast>::)
  | (?P<escaped>%%)
  | %\((?P<pyformat>[A-Za-z_]\w*)\)s
  | (?P<format>%s)
  | (?P<qmark>\?)
  | (?<![\w:]):(?P<named>[A-Za-z_]\w*)
""", re.VERBOSE)

_POSITIONAL = {'qmark', 'format'}
_NAMED = {'pyformat', 'named'}

_registries: dict[str, BindingResolverRegistry] = {}


def _get_registry(empty_sequence: str) -> BindingResolverRegistry:
    if empty_sequence not in _registries:
        _registries[empty_sequence] = BindingResolverRegistry(empty_sequence=empty_sequence)
    return _registries[empty_sequence]


@dataclass(frozen=True)
class BoundStatement:
    """A statement ready for a qmark driver.

    Attributes
        sql: Final SQL text with `?` markers
        args: Driver values in physical placeholder order
        indexes: Positional ordinal (0-based) or name -> physical indexes
        resolutions: (key, Resolution) per marker occurrence, in textual order
    """
    sql: str
    args: tuple = ()
    indexes: Mapping[int | str, tuple[int, ...]] = field(default_factory=dict)
    resolutions: tuple[tuple[int | str, Resolution], ...] = ()

    def bindings(self) -> list[tuple[int, Any]]:
        """(physical index, value) pairs, 1-based."""
        return list(enumerate(self.args, start=1))

    def for_dialect(self, dialect: str) -> Self:
        """Copy of the statement with markers standardized for `dialect`."""
        return replace(self, sql=standardize_placeholders(self.sql, dialect=dialect))


def _wrap(value: Any, name: str | None = None) -> Parameter:
    # a bare None passed to a marker binds NULL; ABSENT omits the placeholder
    if value is None:
        return Parameter(Scalar(None), name)
    return Parameter.of(value, name)


def expand(sql: str, args: Mapping[str, Any] | tuple | list = (),
           empty_sequence: str = 'empty',
           registry: BindingResolverRegistry | None = None) -> BoundStatement:
    """Expand parameters of a statement into physical placeholders.

    Positional markers (`?` or `%s`) consume `args` left to right; named
    markers (`:name` or `%(name)s`) look up a mapping. A name used twice is
    resolved twice.

    >>> stmt = expand('SELECT * FROM t WHERE a IN (?) AND b IN (?)', ([1, 2, 3], [4, 5]))
    >>> stmt.sql
    'SELECT * FROM t WHERE a IN (?,?,?) AND b IN (?,?)'
    >>> stmt.indexes[1]
    (4, 5)

    Parameters
        sql: SQL text
        args: Positional values, or a mapping for named markers
        empty_sequence: 'empty' or 'null' policy for empty sequences
        registry: Resolver registry overriding the default

    Returns
        BoundStatement

    Raises
        ValidationError: marker/argument mismatch or mixed marker styles
    """
    registry = registry or _get_registry(empty_sequence)
    named = isinstance(args, Mapping)
    positional = () if named else tuple(args)

    pieces: list[str] = []
    values: list[Any] = []
    indexes: dict[int | str, list[int]] = defaultdict(list)
    resolutions: list[tuple[int | str, Resolution]] = []
    next_index = 1
    ordinal = 0
    pos = 0

    for match in _TOKEN.finditer(sql):
        kind = match.lastgroup
        if kind not in _POSITIONAL and kind not in _NAMED:
            continue

        if kind in _POSITIONAL:
            if named:
                raise ValidationError(f'Positional marker at offset {match.start()} but named arguments supplied')
            if ordinal >= len(positional):
                raise ValidationError(f'Not enough parameters: marker {ordinal + 1} has no value '
                                      f'({len(positional)} supplied)')
            key = ordinal
            parameter = _wrap(positional[ordinal])
            ordinal += 1
        else:
            name = match.group(kind)
            if not named:
                raise ValidationError(f'Named marker {name!r} but positional arguments supplied')
            if name not in args:
                raise ValidationError(f'No value supplied for named parameter {name!r}')
            key = name
            parameter = _wrap(args[name], name)

        resolution = registry.resolve(next_index, parameter)
        bound = parameter.bind_values() if resolution.length else ()
        assert len(bound) == resolution.length, f'{parameter!r} resolved to {resolution!r}'

        pieces.append(sql[pos:match.start()])
        pieces.append(resolution.fragment)
        pos = match.end()

        values.extend(bound)
        indexes[key].extend(resolution.indexes)
        resolutions.append((key, resolution))
        next_index = resolution.next_index

    if not named and ordinal != len(positional):
        raise ValidationError(f'Too many parameters: {len(positional)} supplied for {ordinal} markers')

    pieces.append(sql[pos:])
    statement = BoundStatement(
        sql=''.join(pieces),
        args=tuple(values),
        indexes=MappingProxyType({k: tuple(v) for k, v in indexes.items()}),
        resolutions=tuple(resolutions),
        )
    logger.debug(f'Expanded {len(resolutions)} markers into {len(values)} placeholders')
    return statement


def standardize_placeholders(sql: str, dialect: str = 'sqlite') -> str:
    """Standardize positional markers between ? and %s based on database type.

    Parameters
        sql: SQL query string with positional markers
        dialect: Database dialect name ('sqlite' or 'postgresql')

    Returns
        SQL with standardized placeholders
    """
    assert isinstance(dialect, str), f'Dialect must be a string (not {dialect})'

    if not sql:
        return sql

    if dialect == 'postgresql':
        def to_format(match):
            kind = match.lastgroup
            if kind == 'qmark':
                return '%s'
            if kind in ('literal', 'comment'):
                return _escape_percent(match.group(0))
            return match.group(0)
        return _TOKEN.sub(to_format, sql)

    if dialect == 'sqlite':
        def to_qmark(match):
            return '?' if match.lastgroup == 'format' else match.group(0)
        return _TOKEN.sub(to_qmark, sql)

    raise ValueError(f'Unknown dialect: {dialect}')


def _escape_percent(literal: str) -> str:
    return re.sub(r'(?<!%)%(?!%)', '%%', literal)


def escape_percent_signs_in_literals(sql: str) -> str:
    """Escape percent signs in string literals as %%.

    Pyformat drivers (psycopg) otherwise read them as placeholders.
    """
    if not sql or '%' not in sql:
        return sql

    def escape(match):
        if match.lastgroup == 'literal':
            return _escape_percent(match.group(0))
        return match.group(0)

    return _TOKEN.sub(escape, sql)


def has_placeholders(sql: str | None) -> bool:
    """Check if SQL has any parameter marker outside literals.
    """
    if not sql:
        return False
    return any(m.lastgroup in _POSITIONAL or m.lastgroup in _NAMED
               for m in _TOKEN.finditer(sql))


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
