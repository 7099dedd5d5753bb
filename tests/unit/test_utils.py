import sqlite3

import pytest
from sqlbind.utils import get_dialect_name


def test_dialect_from_mock_connections(create_simple_mock_connection):
    assert get_dialect_name(create_simple_mock_connection('postgresql')) == 'postgresql'
    assert get_dialect_name(create_simple_mock_connection('sqlite')) == 'sqlite'


def test_dialect_unknown(create_simple_mock_connection):
    with pytest.raises(AttributeError):
        get_dialect_name(create_simple_mock_connection('unknown'))


def test_dialect_attribute():
    class Wrapper:
        dialect = 'PostgreSQL'

    assert get_dialect_name(Wrapper()) == 'postgresql'


def test_dialect_real_sqlite():
    conn = sqlite3.connect(':memory:')
    try:
        assert get_dialect_name(conn) == 'sqlite'
        assert get_dialect_name(conn.cursor()) == 'sqlite'
    finally:
        conn.close()
