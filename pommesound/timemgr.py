"""Clock services: calendar seconds since 1904, microseconds and ticks since start."""

from __future__ import annotations

import time

# Seconds between the Mac epoch (1904-01-01) and the UNIX epoch (1970-01-01).
MAC_EPOCH_OFFSET = 2_082_844_800
TICKS_PER_SECOND = 60

_BOOT_NS = time.perf_counter_ns()


def _microseconds_since_boot() -> int:
    return (time.perf_counter_ns() - _BOOT_NS) // 1000


def get_date_time() -> int:
    """Seconds elapsed since midnight, January 1, 1904, as an unsigned 32-bit value."""
    return (int(time.time()) + MAC_EPOCH_OFFSET) & 0xFFFFFFFF


def microseconds() -> int:
    """Microseconds elapsed since the module was loaded, as an unsigned 64-bit value."""
    return _microseconds_since_boot() & 0xFFFFFFFFFFFFFFFF


def tick_count() -> int:
    """Ticks (1/60 s) elapsed since the module was loaded, as an unsigned 32-bit value."""
    return (TICKS_PER_SECOND * _microseconds_since_boot() // 1_000_000) & 0xFFFFFFFF