import pytest
from hypothesis import given
from hypothesis import strategies as st

from pommesound.bigendian import BigEndianReader, BigEndianWriter
from pommesound.ieee_extended import to_ieee_extended


@given(
    st.integers(0, 0xFF),
    st.integers(-0x8000, 0x7FFF),
    st.integers(0, 0xFFFF),
    st.integers(-(2**31), 2**31 - 1),
    st.integers(0, 2**32 - 1),
)
def test_integer_round_trip(u8, i16, u16, i32, u32):
    w = BigEndianWriter()
    w.write_u8(u8)
    w.write_i16(i16)
    w.write_u16(u16)
    w.write_i32(i32)
    w.write_u32(u32)
    r = BigEndianReader(w.getvalue())
    assert r.read_u8() == u8
    assert r.read_i16() == i16
    assert r.read_u16() == u16
    assert r.read_i32() == i32
    assert r.read_u32() == u32
    assert r.tell() == len(w.getvalue())


def test_writer_is_big_endian():
    w = BigEndianWriter()
    w.write_u32(0x01020304)
    assert w.getvalue() == b"\x01\x02\x03\x04"


def test_signed_and_unsigned_views_agree():
    r = BigEndianReader(b"\xff\xff\xff\xff")
    assert r.read_i8() == -1
    assert r.read_u8() == 0xFF
    assert r.read_i16() == -1


def test_read_exactly_to_end_then_past_end():
    r = BigEndianReader(b"\x00\x01")
    assert r.read(2) == b"\x00\x01"
    with pytest.raises(EOFError):
        r.read_u8()


def test_short_read_raises():
    r = BigEndianReader(b"\x00")
    with pytest.raises(EOFError):
        r.read_u32()


def test_pascal_string_round_trip_with_padding():
    w = BigEndianWriter()
    w.write_pascal_string("ab", 2)
    w.write_pascal_string("abc", 2)
    assert w.getvalue()[:4] == b"\x02ab\x00"
    r = BigEndianReader(w.getvalue())
    assert r.read_pascal_string(2) == "ab"
    assert r.tell() == 4
    assert r.read_pascal_string(2) == "abc"
    assert r.tell() == len(w.getvalue())


def test_pascal_string_stops_at_nul():
    r = BigEndianReader(b"\x03a\x00b")
    assert r.read_pascal_string() == "a"
    assert r.tell() == 4


def test_pascal_string_too_long():
    w = BigEndianWriter()
    with pytest.raises(ValueError):
        w.write_pascal_string("x" * 256)


def test_fixed_length_pascal_record():
    r = BigEndianReader(b"\x03abcXXXXXXXtail")
    assert r.read_pascal_string_fixed(10) == "abc"
    assert r.tell() == 11
    assert r.read(4) == b"tail"


def test_preserve_position_restores_and_cancels():
    r = BigEndianReader(b"\x00\x01\x02\x03")
    r.skip(1)
    with r.preserve_position():
        r.read(2)
    assert r.tell() == 1
    with r.preserve_position() as guard:
        r.read(2)
        guard.cancel()
    assert r.tell() == 3


def test_preserve_position_restores_on_error():
    r = BigEndianReader(b"\x00\x01")
    with pytest.raises(EOFError):
        with r.preserve_position():
            r.read(5)
    assert r.tell() == 0


def test_read_extended():
    w = BigEndianWriter()
    w.write(to_ieee_extended(2.5))
    assert BigEndianReader(w.getvalue()).read_extended() == 2.5


def test_seek_and_skip():
    r = BigEndianReader(b"abcdef")
    r.seek(4)
    assert r.read(2) == b"ef"
    r.seek(0)
    r.skip(2)
    assert r.read(1) == b"c"
    with pytest.raises(ValueError):
        r.skip(-10)


def test_writer_overwrite_and_gap():
    w = BigEndianWriter()
    w.write(b"hello")
    w.seek(0)
    w.write(b"J")
    assert w.getvalue() == b"Jello"
    assert w.tell() == 1
    w.seek(7)
    w.write_raw_string("!")
    assert w.getvalue() == b"Jello\x00\x00!"