"""
Logical SQL parameters.

A parameter value is one of three tagged variants chosen when the
parameter is created:

- Scalar: a single value bound through one placeholder
- Sequence: zero or more values, one placeholder each
- Absent: no value; contributes no placeholder at all

Resolution never inspects the wrapped value, only the variant.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Self

import numpy as np
import pandas as pd

from libb import isiterable, issequence

logger = logging.getLogger(__name__)

__all__ = [
    'Scalar',
    'Sequence',
    'Absent',
    'ABSENT',
    'Parameter',
    'convert_value',
]


def convert_value(value: Any) -> Any:
    """Convert a single value to a driver-compatible Python value.

    NumPy scalars become their Python equivalents, NaN/NaT become None.
    """
    if value is None:
        return None

    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None

    if value is pd.NaT:
        return None

    if isinstance(value, np.floating) and np.isnan(value):
        return None

    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return None
        return pd.Timestamp(value).to_pydatetime()

    if isinstance(value, np.bool_ | np.integer | np.floating):
        return value.item()

    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()

    return value


@dataclass(frozen=True)
class Scalar:
    """A single present value. Scalar(None) binds SQL NULL."""
    value: Any

    def __len__(self) -> int:
        return 1

    def values(self) -> tuple:
        return (self.value,)


@dataclass(frozen=True)
class Sequence:
    """A variable-length run of values, one placeholder per element."""
    items: tuple = ()

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, 'items', tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def values(self) -> tuple:
        return self.items


@dataclass(frozen=True)
class Absent:
    """No value supplied."""

    def __len__(self) -> int:
        return 0

    def values(self) -> tuple:
        return ()


ABSENT = Absent()

ParameterValue = Scalar | Sequence | Absent


def _is_sequence_value(value: Any) -> bool:
    if isinstance(value, str | bytes | bytearray | memoryview | dict):
        return False
    if isinstance(value, pd.DataFrame):
        return False
    if isinstance(value, np.ndarray | pd.Series | pd.Index):
        return value.ndim == 1
    if issequence(value):
        return True
    return isiterable(value)


@dataclass(frozen=True)
class Parameter:
    """A logical named-or-positional SQL input.

    Instances are immutable. The physical placeholder indexes a parameter
    occupies are returned by resolution, never stored here.
    """
    value: ParameterValue = field(default=ABSENT)
    name: str | None = None

    @classmethod
    def of(cls, value: Any, name: str | None = None) -> Self:
        """Wrap a raw value, choosing its variant once.

        >>> Parameter.of([1, 2, 3]).value
        Sequence(items=(1, 2, 3))
        >>> Parameter.of('abc').value
        Scalar(value='abc')
        >>> Parameter.of(None).value
        Absent()
        """
        if isinstance(value, Parameter):
            if name is not None and value.name != name:
                return cls(value.value, name)
            return value
        if isinstance(value, Scalar | Sequence | Absent):
            return cls(value, name)
        if value is None:
            return cls(ABSENT, name)
        if _is_sequence_value(value):
            return cls(Sequence(tuple(value)), name)
        return cls(Scalar(value), name)

    @property
    def is_absent(self) -> bool:
        return isinstance(self.value, Absent)

    @property
    def size(self) -> int:
        """Number of placeholders this parameter expands to."""
        return len(self.value)

    def bind_values(self) -> tuple:
        """Values to hand to the driver, in placeholder order.
        """
        return tuple(convert_value(v) for v in self.value.values())
