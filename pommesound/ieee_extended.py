"""Conversion between floats and the 80-bit IEEE extended format (big-endian)."""

from __future__ import annotations

import math
import struct

_EXTENDED = struct.Struct(">HII")
EXTENDED_SIZE = _EXTENDED.size


def to_ieee_extended(num: float) -> bytes:
    """Encode ``num`` as 10 big-endian bytes of 80-bit extended precision.

    NaN and infinities are encoded as infinity.
    """
    sign = 0
    if num < 0:
        sign = 0x8000
        num = -num

    if num == 0:
        expon, hi_mant, lo_mant = 0, 0, 0
    else:
        f_mant, expon = math.frexp(num)
        if expon > 16384 or not f_mant < 1:
            expon, hi_mant, lo_mant = sign | 0x7FFF, 0, 0
        else:
            expon += 16382
            if expon < 0:
                f_mant = math.ldexp(f_mant, expon)
                expon = 0
            expon |= sign
            f_mant = math.ldexp(f_mant, 32)
            fs_mant = math.floor(f_mant)
            hi_mant = int(fs_mant)
            f_mant = math.ldexp(f_mant - fs_mant, 32)
            fs_mant = math.floor(f_mant)
            lo_mant = int(fs_mant)

    return _EXTENDED.pack(expon & 0xFFFF, hi_mant & 0xFFFFFFFF, lo_mant & 0xFFFFFFFF)


def from_ieee_extended(data: bytes) -> float:
    """Decode 10 big-endian bytes of 80-bit extended precision into a float."""
    if len(data) != EXTENDED_SIZE:
        raise ValueError(f"extended float needs {EXTENDED_SIZE} bytes, got {len(data)}")

    raw_expon, hi_mant, lo_mant = _EXTENDED.unpack(bytes(data))
    negative = bool(raw_expon & 0x8000)
    expon = raw_expon & 0x7FFF

    if expon == 0 and hi_mant == 0 and lo_mant == 0:
        f = 0.0
    elif expon == 0x7FFF:
        f = math.inf
    else:
        expon -= 16383
        try:
            f = math.ldexp(float(hi_mant), expon - 31)
            f += math.ldexp(float(lo_mant), expon - 63)
        except OverflowError:
            f = math.inf

    return -f if negative else f