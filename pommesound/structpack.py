"""Byte-swapping of packed structures described by format strings."""

from __future__ import annotations

import sys

_NATIVE_INDICATOR = ">" if sys.byteorder == "big" else "<"

_FIELD_LENGTHS = {
    **dict.fromkeys("xcbB?", 1),
    **dict.fromkeys("hH", 2),
    **dict.fromkeys("iIlLf", 4),
    **dict.fromkeys("qQd", 8),
}


def _parse(fmt: str) -> tuple[bool, list[tuple[int, int]]]:
    """Return whether ``fmt`` is native-endian and its (field length, repeat) list."""
    if not fmt:
        raise ValueError("can't unpack without a format")
    indicator = fmt[0]
    if indicator not in "<>":
        raise ValueError("first format char must be endianness indicator")

    fields: list[tuple[int, int]] = []
    total = 0
    repeat = 0
    for c in fmt[1:]:
        if c in " \r\n\t":
            continue
        if c in "0123456789":
            if repeat:
                repeat *= 10
            repeat += int(c)
            continue
        length = _FIELD_LENGTHS.get(c)
        if length is None:
            raise ValueError(f"unknown format char {c!r} in structpack format")
        if total % length:
            raise ValueError("illegal word alignment in structpack format")
        repeat = repeat or 1
        fields.append((length, repeat))
        total += length * repeat
        repeat = 0

    return indicator == _NATIVE_INDICATOR, fields


def struct_size(fmt: str) -> int:
    """Size in bytes of one structure described by ``fmt``."""
    _, fields = _parse(fmt)
    return sum(length * repeat for length, repeat in fields)


def unpack_structs(fmt: str, struct_size: int, count: int, buffer) -> int:
    """Convert ``count`` structures in ``buffer`` to native byte order in place."""
    native, fields = _parse(fmt)
    size = sum(length * repeat for length, repeat in fields)
    total = size * count
    if total != struct_size * count:
        raise ValueError("unexpected length after byteswap")
    if len(buffer) < total:
        raise ValueError("buffer too small for the structures")

    if not native:
        offset = 0
        for _ in range(count):
            for length, repeat in fields:
                for _ in range(repeat):
                    if length > 1:
                        end = offset + length
                        buffer[offset:end] = bytes(reversed(buffer[offset:end]))
                    offset += length
    return total


def byteswap_ints(int_size: int, count: int, buffer) -> int:
    """Reverse the byte order of ``count`` integers of ``int_size`` bytes in place."""
    total = int_size * count
    if len(buffer) < total:
        raise ValueError("buffer too small for the integers")
    for offset in range(0, total, int_size):
        end = offset + int_size
        buffer[offset:end] = bytes(reversed(buffer[offset:end]))
    return total