"""
Tests for mapping result rows onto target objects.
"""
import datetime
import logging
import sqlite3
from dataclasses import dataclass

import pytest
from sqlbind.columns import ColumnTypes
from sqlbind.exceptions import CoercionError, ConstructionError, MappingError
from sqlbind.exceptions import UnmatchedColumnError
from sqlbind.mapper import RowMapper
from sqlbind.row import Row
from sqlbind.strategies import ColumnMapping, exact_name
from tests.fixtures.mocks import RecordingCursor
from tests.fixtures.targets import Account, Member, NeedsArgs, User


def test_normalized_names_map_onto_camel_case():
    row = Row(['user_name', 'user_age'], ('Alice', 30))

    user = RowMapper(User).map(row)

    assert user == User(userName='Alice', userAge=30)


def test_accepts_mapping_rows():
    user = RowMapper(User).map({'userName': 'Bob', 'userAge': 25})

    assert user == User(userName='Bob', userAge=25)


def test_accepts_tuple_with_cursor():
    cursor = RecordingCursor(description=[('user_name',), ('user_age',)])

    user = RowMapper(User).map(('Carol', 41), cursor)

    assert user.userName == 'Carol'


def test_callable():
    mapper = RowMapper(User)

    assert mapper({'user_name': 'Dan'}).userName == 'Dan'


def test_map_all_builds_one_object_per_row():
    rows = [{'user_name': 'A', 'user_age': 1}, {'user_name': 'B', 'user_age': 2}]

    users = RowMapper(User).map_all(rows)

    assert [u.userName for u in users] == ['A', 'B']
    assert users[0] is not users[1]


def test_null_values_are_written():
    user = RowMapper(User).map({'user_name': None, 'user_age': None})

    assert user == User()


def test_unmatched_column_raises_by_default():
    row = Row(['user_name', 'email'], ('Alice', 'a@example.com'))

    with pytest.raises(UnmatchedColumnError, match='email') as exc_info:
        RowMapper(User).map(row)

    assert exc_info.value.column == 'email'
    message = str(exc_info.value)
    assert 'User' in message
    assert 'str' in message
    assert 'normalized_name' in message


def test_unmatched_column_skipped_when_relaxed(caplog):
    row = Row(['user_name', 'email'], ('Alice', 'a@example.com'))

    with caplog.at_level(logging.DEBUG, logger='sqlbind.mapper'):
        user = RowMapper(User, raise_on_unmatched=False).map(row)

    assert user == User(userName='Alice')
    assert 'email' in caplog.text


def test_relaxed_policy_by_subclass():
    class LenientMapper(RowMapper):
        raise_on_unmatched = False

    user = LenientMapper(User).map({'user_name': 'Alice', 'extra': 1})

    assert user.userName == 'Alice'


def test_strategies_overridable_by_subclass():
    class ExactMapper(RowMapper):
        def get_mapping_strategies(self):
            return (exact_name,)

    with pytest.raises(UnmatchedColumnError):
        ExactMapper(User).map({'user_name': 'Alice'})


def test_first_matching_strategy_wins():
    calls = []

    def spy(column, value, descriptor):
        calls.append(column)
        return None

    mapper = RowMapper(User, strategies=(ColumnMapping(nm='userName'), spy, exact_name))

    user = mapper.map({'nm': 'Alice', 'userAge': 3})

    assert user == User(userName='Alice', userAge=3)
    assert calls == ['userAge']


def test_columns_visited_in_order_once():
    seen = []

    def record(column, value, descriptor):
        seen.append(column)
        return exact_name(column, value, descriptor)

    RowMapper(User, strategies=(record,)).map(Row(['userAge', 'userName'], (1, 'x')))

    assert seen == ['userAge', 'userName']


def test_type_mismatch_raises_mapping_error():
    row = Row(['user_name', 'user_age'], ('Alice', 'thirty'))

    with pytest.raises(MappingError) as exc_info:
        RowMapper(User).map(row)

    message = str(exc_info.value)
    assert 'user_age' in message
    assert "'thirty'" in message
    assert 'User' in message


def test_bool_rejected_by_int_property():
    with pytest.raises(MappingError, match='userAge'):
        RowMapper(User).map({'user_age': True})


def test_column_type_override_changes_value_type():
    """Declaring a numeric column as string presents a str to the strategies."""
    @dataclass
    class Person:
        userName: str = None
        userAge: str = None

    row = Row(['user_name', 'user_age'], ('Alice', 30))

    with pytest.raises(MappingError):
        RowMapper(Person).map(row)

    seen = {}

    def record(column, value, descriptor):
        seen[column] = value
        return descriptor.find_normalized(column)

    person = RowMapper(Person, column_types={'user_age': 'string'}, strategies=(record,)).map(row)

    assert person.userAge == '30'
    assert seen == {'user_name': 'Alice', 'user_age': '30'}


def test_column_types_coerce_before_mapping():
    row = Row(['id', 'user_name', 'user_age', 'joined', 'note'],
              ('7', 'Alice', 30, '2023-05-15', None))

    member = RowMapper(Member, column_types=ColumnTypes(id=int, joined='date')).map(row)

    assert member.id == 7
    assert member.joined == datetime.date(2023, 5, 15)
    assert member.note is None


def test_coercion_error_propagates():
    with pytest.raises(CoercionError, match='user_age'):
        RowMapper(User, column_types={'user_age': int}).map({'user_age': 'old'})


def test_construction_error_before_any_column():
    def explode(column, value, descriptor):
        raise AssertionError('strategy should not run')

    with pytest.raises(ConstructionError):
        RowMapper(NeedsArgs, strategies=(explode,)).map({'name': 'x'})


def test_property_setter_rejection():
    with pytest.raises(MappingError, match='balance'):
        RowMapper(Account).map({'owner': 'Alice', 'balance': -1})


def test_property_setter_used():
    account = RowMapper(Account).map({'OWNER': 'Alice', 'balance': 10})

    assert account.summary == 'Alice: 10'


def test_sqlite_row_factory():
    conn = sqlite3.connect(':memory:')
    conn.row_factory = RowMapper(User).row_factory
    try:
        user = conn.execute("SELECT 'Alice' AS user_name, 30 AS user_age").fetchone()
    finally:
        conn.close()

    assert user == User(userName='Alice', userAge=30)
