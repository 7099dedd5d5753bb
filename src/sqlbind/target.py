"""
Target type descriptors.

A descriptor lists the settable properties of a target type and how to
write them. It is resolved once per type and cached, so mapping a row
never repeats the introspection.

Settable properties are:
- public class annotations, dataclass fields included (ClassVar excluded)
- `property` objects that define a setter
"""
import logging
import typing
from types import UnionType
from typing import Any, ClassVar

from sqlbind.cache import Cache, get_descriptor_cache
from sqlbind.exceptions import ConstructionError, MappingError

logger = logging.getLogger(__name__)

__all__ = ['PropertySetter', 'TargetDescriptor', 'describe', 'normalize_name']


def normalize_name(name: str) -> str:
    """Fold case and drop separators: `user_name`, `userName`, `User-Name` -> `username`.
    """
    return ''.join(ch for ch in name if ch.isalnum()).casefold()


def _accepts(annotation: Any, value: Any) -> bool:
    if annotation is Any or annotation is None or isinstance(annotation, str | typing.TypeVar):
        return True

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is UnionType:
        return any(_accepts(arg, value) for arg in typing.get_args(annotation))
    if origin is typing.Annotated:
        return _accepts(typing.get_args(annotation)[0], value)
    if origin is typing.Literal:
        return value in typing.get_args(annotation)
    if origin is not None:
        annotation = origin

    if not isinstance(annotation, type):
        return True
    if annotation is int and isinstance(value, bool):
        return False
    if annotation is float and isinstance(value, int) and not isinstance(value, bool):
        return True
    if annotation is complex and isinstance(value, int | float) and not isinstance(value, bool):
        return True
    return isinstance(value, annotation)


class PropertySetter:
    """Writes one property of a target object, type-checked by annotation.
    """

    def __init__(self, name: str, annotation: Any = Any) -> None:
        self.name = name
        self.annotation = annotation

    def accepts(self, value: Any) -> bool:
        """None is accepted by every property."""
        return value is None or _accepts(self.annotation, value)

    def set(self, target: Any, value: Any) -> None:
        """Write `value`, raising MappingError when the property rejects it.
        """
        if not self.accepts(value):
            raise MappingError(f'Property {self.name!r} of {type(target).__name__} expects '
                               f'{_type_name(self.annotation)}, got {type(value).__name__} value {value!r}')
        try:
            setattr(target, self.name, value)
        except (TypeError, ValueError, AttributeError) as e:
            raise MappingError(f'Property {self.name!r} of {type(target).__name__} rejected '
                               f'{type(value).__name__} value {value!r}: {e}') from e

    def __repr__(self) -> str:
        return f'PropertySetter({self.name!r}, {_type_name(self.annotation)})'


def _type_name(annotation: Any) -> str:
    return getattr(annotation, '__name__', None) or str(annotation)


class TargetDescriptor:
    """Settable properties of one target type.
    """

    def __init__(self, target_type: type, properties: dict[str, PropertySetter]) -> None:
        self.target_type = target_type
        self.properties = properties
        self._folded: dict[str, str] = {}
        self._normalized: dict[str, str] = {}
        for name in properties:
            self._folded.setdefault(name.casefold(), name)
            self._normalized.setdefault(normalize_name(name), name)

    def has_property(self, name: str) -> bool:
        return name in self.properties

    def find_folded(self, name: str) -> str | None:
        """Property whose name equals `name` ignoring case."""
        return self._folded.get(name.casefold())

    def find_normalized(self, name: str) -> str | None:
        """Property whose normalized name equals the normalized `name`."""
        return self._normalized.get(normalize_name(name))

    def setter(self, name: str) -> PropertySetter:
        try:
            return self.properties[name]
        except KeyError:
            raise MappingError(f'{self.target_type.__name__} has no settable property {name!r}') from None

    def new_instance(self) -> Any:
        """Default-construct the target type.

        Raises
            ConstructionError: the type cannot be built without arguments
        """
        try:
            return self.target_type()
        except TypeError as e:
            raise ConstructionError(f'Cannot instantiate {self.target_type.__name__} '
                                    f'without arguments: {e}') from e

    def __repr__(self) -> str:
        return f'TargetDescriptor({self.target_type.__name__}, {list(self.properties)})'


def _resolve_hints(target_type: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(target_type, include_extras=True)
    except (NameError, TypeError) as e:
        logger.debug(f'Unresolvable annotations on {target_type.__name__}, using raw: {e}')
        hints = {}
        for klass in reversed(target_type.__mro__):
            hints.update(getattr(klass, '__annotations__', {}))
        return hints


def _property_annotation(prop: property) -> Any:
    try:
        hints = typing.get_type_hints(prop.fset)
    except (NameError, TypeError):
        return Any
    hints.pop('return', None)
    if hints:
        return next(iter(hints.values()))
    if prop.fget is not None:
        try:
            return typing.get_type_hints(prop.fget).get('return', Any)
        except (NameError, TypeError):
            return Any
    return Any


def _build_descriptor(target_type: type) -> TargetDescriptor:
    properties: dict[str, PropertySetter] = {}
    hints = _resolve_hints(target_type)

    for name, annotation in hints.items():
        if name.startswith('_'):
            continue
        if annotation is ClassVar or typing.get_origin(annotation) is ClassVar:
            continue
        properties[name] = PropertySetter(name, annotation)

    for klass in reversed(target_type.__mro__):
        slots = vars(klass).get('__slots__', ())
        for name in [slots] if isinstance(slots, str) else slots:
            if not name.startswith('_') and name not in properties:
                properties[name] = PropertySetter(name, hints.get(name, Any))

    for klass in reversed(target_type.__mro__):
        for name, attr in vars(klass).items():
            if name.startswith('_') or not isinstance(attr, property):
                continue
            if attr.fset is None:
                properties.pop(name, None)
                continue
            properties[name] = PropertySetter(name, _property_annotation(attr))

    logger.debug(f'Described {target_type.__name__}: {list(properties)}')
    return TargetDescriptor(target_type, properties)


def describe(target_type: type) -> TargetDescriptor:
    """Descriptor for `target_type`, cached per type.
    """
    if not isinstance(target_type, type):
        raise TypeError(f'Target must be a class, got {target_type!r}')
    cache = get_descriptor_cache()
    with Cache.get_instance().lock:
        descriptor = cache.get(target_type)
        if descriptor is None:
            descriptor = cache[target_type] = _build_descriptor(target_type)
    return descriptor
