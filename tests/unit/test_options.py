import pytest
from sqlbind.options import SqlOptions
from sqlbind.strategies import exact_name, normalized_name


def test_init_defaults():
    """Test default initialization"""
    options = SqlOptions()

    assert options.empty_sequence == 'empty'
    assert options.raise_on_unmatched is True
    assert options.strategies is None


def test_custom_options():
    options = SqlOptions(
        empty_sequence='null',
        raise_on_unmatched=False,
        strategies=[exact_name, normalized_name],
    )

    assert options.empty_sequence == 'null'
    assert options.raise_on_unmatched is False
    assert options.strategies == (exact_name, normalized_name)


@pytest.mark.parametrize('kwargs', [
    {'empty_sequence': 'drop'},
    {'strategies': []},
    {'strategies': ['exact_name']},
])
def test_validation(kwargs):
    """Test validation rules"""
    with pytest.raises(ValueError):
        SqlOptions(**kwargs)
