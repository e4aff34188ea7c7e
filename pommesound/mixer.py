"""A software mixer that sums stereo sources into clipped signed 16-bit PCM."""

from __future__ import annotations

import abc
import enum
import sys
import threading
from array import array
from typing import Callable, Optional

BUFFER_SIZE = 512
_BUFFER_MASK = BUFFER_SIZE - 1

FX_BITS = 12
FX_UNIT = 1 << FX_BITS
_FX_MASK = FX_UNIT - 1

_NATIVE_BIG_ENDIAN = sys.byteorder == "big"


def _fx_from_float(value: float) -> int:
    return int(value * FX_UNIT)


def _cdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


class SourceState(enum.IntEnum):
    STOPPED = 0
    PLAYING = 1
    PAUSED = 2


class Mixer:
    """Mixes the playing sources into interleaved stereo 16-bit samples."""

    def __init__(self, sample_rate: int) -> None:
        if sample_rate <= 0:
            raise ValueError(f"invalid sample rate {sample_rate}")
        self.sample_rate = sample_rate
        self._gain = FX_UNIT
        self._sources: list[Source] = []
        self.lock = threading.RLock()

    @property
    def sources(self) -> tuple["Source", ...]:
        """Sources currently being mixed, most recently started first."""
        with self.lock:
            return tuple(self._sources)

    def get_master_gain(self) -> float:
        return self._gain / FX_UNIT

    def set_master_gain(self, gain: float) -> None:
        self._gain = _fx_from_float(max(gain, 0.0))

    def process(self, length: int) -> array:
        """Mix ``length`` interleaved stereo samples and return them as int16."""
        if length < 0:
            raise ValueError("cannot process a negative length")
        out = array("h")
        while length > BUFFER_SIZE:
            out.extend(self._process_chunk(BUFFER_SIZE))
            length -= BUFFER_SIZE
        if length > 0:
            out.extend(self._process_chunk(length))
        return out

    def _process_chunk(self, length: int) -> array:
        mix = [0] * length
        with self.lock:
            for source in list(self._sources):
                source._process(length, mix)
                if source.state != SourceState.PLAYING:
                    source.active = False
                    if source in self._sources:
                        self._sources.remove(source)
        gain = self._gain
        return array("h", (min(max((x * gain) >> FX_BITS, -32768), 32767) for x in mix))


class Source(abc.ABC):
    """A playable stream of stereo frames fed to a mixer."""

    def __init__(self, mixer: Mixer) -> None:
        self.mixer = mixer
        self._pcmbuf = array("h", bytes(2 * BUFFER_SIZE))
        self.sustain_offset = 0
        self.active = False
        self._clear_private()

    def _clear_private(self) -> None:
        self.sample_rate = 0
        self.length = 0
        self.end = 0
        self.state = SourceState.STOPPED
        self.position = 0
        self.lgain = 0
        self.rgain = 0
        self.rate = 0
        self.nextfill = 0
        self.loop = False
        self._rewind_pending = True
        self.interpolate = False
        # "active" is left alone: the source may still be in the mixer.
        self.gain = 0.0
        self.pan = 0.0
        self.on_complete: Optional[Callable[[], None]] = None

    @abc.abstractmethod
    def _rewind_impl(self) -> None: ...

    @abc.abstractmethod
    def _clear_impl(self) -> None: ...

    @abc.abstractmethod
    def _fill(self, offset: int, fill_length: int) -> None:
        """Write ``fill_length`` interleaved values into the ring buffer at ``offset``."""

    def _init(self, sample_rate: int, length: int) -> None:
        self.sample_rate = sample_rate
        self.length = length
        self.sustain_offset = 0
        self.set_gain(1.0)
        self.set_pan(0.0)
        self.set_pitch(1.0)
        self.set_loop(False)
        self.stop()

    def __enter__(self) -> "Source":
        return self

    def __exit__(self, *exc_info) -> bool:
        self.remove_from_mixer()
        return False

    def clear(self) -> None:
        with self.mixer.lock:
            self._clear_private()
            self._clear_impl()

    def rewind(self) -> None:
        self._rewind_impl()
        self.position = 0
        self._rewind_pending = False
        self.end = self.length
        self.nextfill = 0

    def remove_from_mixer(self) -> None:
        with self.mixer.lock:
            if self.active:
                if self in self.mixer._sources:
                    self.mixer._sources.remove(self)
                self.active = False

    def _process(self, length: int, dst: list[int]) -> None:
        if self._rewind_pending:
            self.rewind()
        if self.state != SourceState.PLAYING:
            return

        buf = self._pcmbuf
        di = 0
        while length > 0:
            frame = self.position >> FX_BITS

            if frame + 3 >= self.nextfill:
                self._fill((self.nextfill * 2) & _BUFFER_MASK, BUFFER_SIZE // 2)
                self.nextfill += BUFFER_SIZE // 4

            if frame >= self.end:
                # Streams keep filling the ring buffer, so extend the end by one length.
                self.end = frame + self.length
                if not self.loop:
                    self.state = SourceState.STOPPED
                    if self.on_complete is not None:
                        self.on_complete()
                    break

            n = min(self.nextfill - 2, self.end) - frame
            count = _cdiv(n << FX_BITS, self.rate) if self.rate else length // 2
            count = max(count, 1)
            count = min(count, length // 2)
            length -= count * 2

            lgain, rgain = self.lgain, self.rgain
            if self.rate == FX_UNIT:
                n = frame * 2
                for _ in range(count):
                    dst[di] += (buf[n & _BUFFER_MASK] * lgain) >> FX_BITS
                    dst[di + 1] += (buf[(n + 1) & _BUFFER_MASK] * rgain) >> FX_BITS
                    n += 2
                    di += 2
                self.position += count * FX_UNIT
            elif self.interpolate:
                for _ in range(count):
                    n = (self.position >> FX_BITS) * 2
                    p = self.position & _FX_MASK
                    a = buf[n & _BUFFER_MASK]
                    b = buf[(n + 2) & _BUFFER_MASK]
                    dst[di] += ((a + (((b - a) * p) >> FX_BITS)) * lgain) >> FX_BITS
                    n += 1
                    a = buf[n & _BUFFER_MASK]
                    b = buf[(n + 2) & _BUFFER_MASK]
                    dst[di + 1] += ((a + (((b - a) * p) >> FX_BITS)) * rgain) >> FX_BITS
                    self.position += self.rate
                    di += 2
            else:
                for _ in range(count):
                    n = (self.position >> FX_BITS) * 2
                    dst[di] += (buf[n & _BUFFER_MASK] * lgain) >> FX_BITS
                    dst[di + 1] += (buf[(n + 1) & _BUFFER_MASK] * rgain) >> FX_BITS
                    self.position += self.rate
                    di += 2

    def length_seconds(self) -> float:
        if not self.sample_rate:
            return 0.0
        return self.length / self.sample_rate

    def position_seconds(self) -> float:
        if not self.length or not self.sample_rate:
            return 0.0
        return ((self.position >> FX_BITS) % self.length) / self.sample_rate

    def _recalc_gains(self) -> None:
        left = self.gain * (1.0 if self.pan <= 0.0 else 1.0 - self.pan)
        right = self.gain * (1.0 if self.pan >= 0.0 else 1.0 + self.pan)
        self.lgain = _fx_from_float(left)
        self.rgain = _fx_from_float(right)

    def set_gain(self, gain: float) -> None:
        self.gain = gain
        self._recalc_gains()

    def set_pan(self, pan: float) -> None:
        self.pan = min(max(pan, -1.0), 1.0)
        self._recalc_gains()

    def set_pitch(self, pitch: float) -> None:
        if pitch > 0.0:
            new_rate = self.sample_rate / self.mixer.sample_rate * pitch
        else:
            new_rate = 0.001
        self.rate = _fx_from_float(new_rate)

    def set_loop(self, loop: bool) -> None:
        self.loop = bool(loop)

    def set_interpolation(self, interpolate: bool) -> None:
        self.interpolate = bool(interpolate)

    def play(self) -> None:
        if self.length == 0:
            # An empty source would starve the mixer buffer at once.
            return
        with self.mixer.lock:
            self.state = SourceState.PLAYING
            if not self.active:
                self.active = True
                self.mixer._sources.insert(0, self)

    def pause(self) -> None:
        self.state = SourceState.PAUSED

    def toggle_pause(self) -> None:
        if self.state == SourceState.PAUSED:
            self.play()
        elif self.state == SourceState.PLAYING:
            self.pause()

    def stop(self) -> None:
        self.state = SourceState.STOPPED
        self._rewind_pending = True


class WavStream(Source):
    """A source playing 8-bit unsigned or 16-bit signed PCM, mono or stereo."""

    def __init__(self, mixer: Mixer) -> None:
        super().__init__(mixer)
        self._clear_impl()

    def _clear_impl(self) -> None:
        self.bit_depth = 0
        self.channels = 0
        self.big_endian = _NATIVE_BIG_ENDIAN
        self._idx = 0
        self._frames = array("h")

    def _rewind_impl(self) -> None:
        self._idx = 0

    def load(self, sample_rate: int, bit_depth: int, n_channels: int, big_endian: bool, data) -> None:
        """Set the PCM data to play; the source is left stopped."""
        if bit_depth not in (8, 16):
            raise ValueError(f"unsupported bit depth {bit_depth}")
        if n_channels not in (1, 2):
            raise ValueError(f"unsupported channel count {n_channels}")
        raw = bytes(data)
        bytes_per_sample = bit_depth // 8
        length = (len(raw) // bytes_per_sample) // n_channels
        raw = raw[:length * n_channels * bytes_per_sample]

        if bit_depth == 16:
            samples = array("h", raw)
            if bool(big_endian) != _NATIVE_BIG_ENDIAN:
                samples.byteswap()
        else:
            samples = array("h", ((b - 128) << 8 for b in raw))

        if n_channels == 1:
            frames = array("h", bytes(4 * length))
            frames[0::2] = samples
            frames[1::2] = samples
        else:
            frames = samples

        self.clear()
        self._init(sample_rate, length)
        self.bit_depth = bit_depth
        self.channels = n_channels
        self.big_endian = bool(big_endian)
        self._idx = 0
        self._frames = frames

    def _fill(self, offset: int, fill_length: int) -> None:
        if self.length <= 0:
            return
        remaining = fill_length // 2
        pos = offset
        while remaining > 0:
            n = min(remaining, self.length - self._idx)
            remaining -= max(n, 0)
            if n > 0:
                start = 2 * self._idx
                self._pcmbuf[pos:pos + 2 * n] = self._frames[start:start + 2 * n]
                pos += 2 * n
                self._idx += n
            if remaining > 0:
                self._idx = self.sustain_offset if 0 <= self.sustain_offset < self.length else 0