"""Number formatting and 'STR#' string-list lookup."""

from __future__ import annotations

from .bigendian import TEXT_ENCODING, BigEndianReader

_MAX_PASCAL_TEXT = 253


def num_to_string(value: int) -> bytes:
    """Format ``value`` in decimal as a Pascal string (length byte, then text)."""
    text = str(value).encode("ascii")
    length = len(text) if len(text) <= 255 else 0
    return bytes([length]) + text[:_MAX_PASCAL_TEXT]


def num_to_string_c(value: int) -> str:
    """Format ``value`` in decimal."""
    return str(value)


def get_ind_string(str_list, index: int) -> str:
    """Return string number ``index`` (counted from 1) of a 'STR#' resource.

    A missing resource or an index past the last string gives an empty string.
    """
    if str_list is None:
        return ""

    reader = BigEndianReader(str_list)
    n_strings = reader.read_i16()
    if index > n_strings:
        return ""

    for _ in range(1, index):
        reader.skip(reader.read_u8())

    return reader.read(reader.read_u8()).decode(TEXT_ENCODING)