import pytest
from hypothesis import given
from hypothesis import strategies as st

from pommesound.bigendian import BigEndianWriter
from pommesound.text import get_ind_string, num_to_string, num_to_string_c

LONGS = st.integers(-(2**63), 2**63 - 1)


def str_list(*strings, count=None):
    writer = BigEndianWriter()
    writer.write_i16(len(strings) if count is None else count)
    for s in strings:
        writer.write_pascal_string(s)
    return writer.getvalue()


@given(LONGS)
def test_num_to_string_is_pascal_string(value):
    result = num_to_string(value)
    assert result[0] == len(result) - 1
    assert int(result[1:].decode("ascii")) == value


def test_num_to_string_zero():
    assert num_to_string(0) == b"\x010"


@given(LONGS)
def test_num_to_string_c_round_trip(value):
    assert int(num_to_string_c(value)) == value


@pytest.mark.parametrize("index,expected", [(1, "alpha"), (2, "beta"), (3, "gamma")])
def test_get_ind_string(index, expected):
    assert get_ind_string(str_list("alpha", "beta", "gamma"), index) == expected


def test_get_ind_string_past_end_is_empty():
    assert get_ind_string(str_list("alpha", "beta"), 3) == ""


def test_get_ind_string_missing_resource_is_empty():
    assert get_ind_string(None, 1) == ""


def test_get_ind_string_index_zero_gives_first():
    assert get_ind_string(str_list("alpha", "beta"), 0) == "alpha"


def test_get_ind_string_truncated_list():
    with pytest.raises(EOFError):
        get_ind_string(str_list("alpha", count=2), 2)