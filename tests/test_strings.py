import string

from hypothesis import given
from hypothesis import strategies as st

from pommesound.strings import uppercase_copy


def test_ascii_is_uppercased():
    assert uppercase_copy("track.aiff") == "TRACK.AIFF"


def test_non_ascii_letters_are_kept():
    assert uppercase_copy("é") == "é"


@given(st.text())
def test_only_ascii_lowercase_changes(text):
    result = uppercase_copy(text)
    assert len(result) == len(text)
    for before, after in zip(text, result):
        if before in string.ascii_lowercase:
            assert after == before.upper()
        else:
            assert after == before


@given(st.text())
def test_idempotent(text):
    once = uppercase_copy(text)
    assert uppercase_copy(once) == once