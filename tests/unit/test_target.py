"""
Tests for target type descriptors.
"""
import threading
from dataclasses import make_dataclass
from typing import Any, Optional

import pytest
from sqlbind.cache import get_descriptor_cache
from sqlbind.exceptions import ConstructionError, MappingError
from sqlbind.target import PropertySetter, describe, normalize_name
from tests.fixtures.targets import Account, Member, NeedsArgs, Slotted, Tagged
from tests.fixtures.targets import User


@pytest.mark.parametrize(('name', 'expected'), [
    ('user_name', 'username'),
    ('userName', 'username'),
    ('UserName', 'username'),
    ('User-Name', 'username'),
    ('USER_NAME', 'username'),
])
def test_normalize_name(name, expected):
    assert normalize_name(name) == expected


def test_dataclass_fields_are_properties():
    descriptor = describe(Member)

    assert list(descriptor.properties) == ['id', 'user_name', 'user_age', 'joined', 'note']


def test_classvar_and_private_excluded():
    descriptor = describe(Tagged)

    assert list(descriptor.properties) == ['tags']


def test_property_setters_included_read_only_excluded():
    descriptor = describe(Account)

    assert descriptor.has_property('balance')
    assert descriptor.has_property('owner')
    assert not descriptor.has_property('summary')
    assert descriptor.properties['balance'].annotation is int


def test_slots_are_properties():
    descriptor = describe(Slotted)

    assert set(descriptor.properties) == {'code', 'label'}


def test_descriptor_is_cached_per_type():
    first = describe(User)

    assert describe(User) is first
    assert get_descriptor_cache()[User] is first


def test_describe_from_many_threads_while_evicting():
    """Concurrent describes stay consistent while the LRU evicts."""
    types = [make_dataclass(f'Row{i}', [('value', int, None)]) for i in range(600)]
    errors = []

    def work(offset):
        try:
            for target_type in types[offset:] + types[:offset]:
                assert describe(target_type).target_type is target_type
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=work, args=(i * 75,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(get_descriptor_cache()) <= 512


def test_describe_requires_class():
    with pytest.raises(TypeError):
        describe(User())


def test_find_folded_and_normalized():
    descriptor = describe(User)

    assert descriptor.find_folded('USERNAME') == 'userName'
    assert descriptor.find_normalized('user_name') == 'userName'
    assert descriptor.find_normalized('nothing') is None


def test_new_instance():
    assert isinstance(describe(User).new_instance(), User)


def test_new_instance_requires_default_constructor():
    with pytest.raises(ConstructionError, match='NeedsArgs'):
        describe(NeedsArgs).new_instance()


def test_unknown_setter():
    with pytest.raises(MappingError):
        describe(User).setter('nope')


class TestPropertySetter:

    @pytest.mark.parametrize(('annotation', 'value', 'accepted'), [
        (str, 'x', True),
        (str, 1, False),
        (int, True, False),
        (bool, True, True),
        (Optional[int], False, False),
        (float, 1, True),
        (float, True, False),
        (int, 1.0, False),
        (Any, object(), True),
        (Optional[int], 5, True),
        (int | str, 'x', True),
        (int | str, 1.5, False),
        (list[str], ['a'], True),
        (list[str], ('a',), False),
        ('ForwardRef', 1, True),
        (str, None, True),
    ])
    def test_accepts(self, annotation, value, accepted):
        assert PropertySetter('p', annotation).accepts(value) is accepted

    def test_set(self):
        user = User()

        PropertySetter('userName', str).set(user, 'Alice')

        assert user.userName == 'Alice'

    def test_set_rejects_wrong_type(self):
        with pytest.raises(MappingError, match='expects int'):
            PropertySetter('userAge', int).set(User(), 'thirty')

    def test_setter_exception_becomes_mapping_error(self):
        with pytest.raises(MappingError, match='negative'):
            describe(Account).setter('balance').set(Account(), -5)
