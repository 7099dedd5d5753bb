"""Dialect detection for DB-API connections and cursors.

Imports nothing from the rest of sqlbind.
"""
from typing import Any

SUPPORTED_DIALECTS = ('postgresql', 'sqlite')

# driver module prefix -> dialect
_DRIVER_DIALECTS = {
    'psycopg': 'postgresql',
    'sqlite3': 'sqlite',
}


def get_dialect_name(obj: Any) -> str:
    """Dialect of a connection, cursor or wrapper object.

    An explicit `dialect` attribute (a string, or an object with `.name`)
    wins over the driver module the object's type comes from.

    Raises AttributeError when neither identifies a supported dialect.
    """
    dialect = getattr(obj, 'dialect', None)
    if dialect is not None:
        name = (dialect if isinstance(dialect, str) else str(dialect.name)).lower()
        if name in SUPPORTED_DIALECTS:
            return name

    driver = type(obj).__module__.split('.')[0]
    if driver in _DRIVER_DIALECTS:
        return _DRIVER_DIALECTS[driver]

    raise AttributeError(f'Cannot determine dialect for {type(obj)}')
