"""Sound channels driven by Sound Manager commands, played through a software mixer."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from .codecs import get_codec
from .midi import midi_note_frequency
from .mixer import Mixer, SourceState, WavStream
from .sndres import NATIVE_BIG_ENDIAN, get_sound_info

log = logging.getLogger(__name__)

SAMPLED_SYNTH = 5
INIT_NO_INTERP = 0x0004
MIDDLE_C = 60
MAX_CHANNEL_GAIN = 2.5

# Set on a command whose data is an offset into an 'snd ' resource.
_DATA_FLAG_MASK = 0x7FFF


class SoundManagerError(Exception):
    """Raised when a Sound Manager request cannot be carried out."""


class CommandCode(enum.IntEnum):
    NULL = 0
    QUIET = 3
    FLUSH = 4
    RE_INIT = 5
    FREQ = 42
    AMP = 43
    VOLUME = 46
    SOUND = 80
    BUFFER = 81
    RATE = 82
    RATE_MULTIPLIER = 86
    POMME_SET_LOOP = 0x7000
    POMME_PAUSE_PLAYBACK = 0x7001
    POMME_RESUME_PLAYBACK = 0x7002


class ApplyParameters(enum.IntFlag):
    PAN_AND_GAIN = 1 << 0
    PITCH = 1 << 1
    LOOP = 1 << 2
    INTERPOLATION = 1 << 3
    ALL = PAN_AND_GAIN | PITCH | LOOP | INTERPOLATION


@dataclass
class SndCommand:
    """A sound command; ``data`` and ``offset`` locate a sampled sound header."""

    cmd: int
    param1: int = 0
    param2: int = 0
    data: Optional[bytes] = None
    offset: int = 0


@dataclass(frozen=True)
class ChannelStatus:
    paused: bool
    busy: bool


class Channel:
    """A sound channel: command parameters plus the stream it plays."""

    def __init__(self, mixer: Mixer) -> None:
        self.source = WavStream(mixer)
        self.pan = 0.0
        self.gain = 1.0
        self.base_note = MIDDLE_C
        self.playback_note = MIDDLE_C
        self.pitch_mult = 1.0
        self.loop = False
        self.interpolate = False

    def recycle(self) -> None:
        self.source.clear()

    def set_initialization_parameters(self, init_bits: int) -> None:
        self.interpolate = not (init_bits & INIT_NO_INTERP)
        self.source.set_interpolation(self.interpolate)

    def apply_parameters(self, mask: int) -> None:
        """Pass the parameters selected by ``mask`` on to the source."""
        mask = int(mask)
        if mask & ApplyParameters.PITCH:
            base_freq = midi_note_frequency(self.base_note)
            playback_freq = midi_note_frequency(self.playback_note)
            self.source.set_pitch(self.pitch_mult * playback_freq / base_freq)

        if mask & ApplyParameters.PAN_AND_GAIN:
            if self.gain > MAX_CHANNEL_GAIN:
                log.debug("capping extreme channel gain (%f)", self.gain)
                self.gain = MAX_CHANNEL_GAIN
            self.source.set_pan(self.pan)
            self.source.set_gain(self.gain)

        if mask & ApplyParameters.INTERPOLATION:
            self.source.set_interpolation(self.interpolate)

        if mask & ApplyParameters.LOOP:
            self.source.set_loop(self.loop)

    def pause_file_play(self) -> None:
        self.source.toggle_pause()

    def stop_file_play(self, quiet_now: bool) -> None:
        if not quiet_now:
            log.warning("quietNow=False not supported; sound is cut off immediately")
        self.source.stop()

    def _install_sound(self, data, offset: int) -> None:
        self.recycle()
        info = get_sound_info(data, offset)
        sample_rate = int(info.sample_rate)

        if info.is_compressed:
            codec = get_codec(info.compression_type)
            pcm = codec.decode(info.n_channels, info.data)
            if len(pcm) != info.decompressed_length:
                raise SoundManagerError("incorrect decompressed output size")
            self.source.load(sample_rate, 16, info.n_channels, NATIVE_BIG_ENDIAN, pcm)
        else:
            self.source.load(sample_rate, info.codec_bit_depth, info.n_channels,
                             info.big_endian, info.data)

        self.base_note = info.base_note

        if ((info.loop_end - info.loop_start) & 0xFFFFFFFF) >= 2:
            self.source.set_loop(True)
            if info.loop_start >= self.source.length:
                log.warning("illegal sustain loop start frame %d", info.loop_start)
            else:
                self.source.sustain_offset = info.loop_start
            if info.loop_end != self.source.length:
                log.warning("unsupported sustain loop end frame %d", info.loop_end)

        # The loop comes from the header; an explicit loop command must follow this one.
        self.apply_parameters(
            ApplyParameters.PAN_AND_GAIN | ApplyParameters.PITCH | ApplyParameters.INTERPOLATION
        )
        self.source.play()


class SoundManager:
    """Creates channels and executes sound commands on them."""

    def __init__(self, mixer: Mixer) -> None:
        self.mixer = mixer
        self._channels: list[Channel] = []

    @property
    def channels(self) -> tuple[Channel, ...]:
        """Managed channels, most recently created first."""
        return tuple(self._channels)

    def new_channel(self, synth: int, init: int = 0) -> Channel:
        if synth != SAMPLED_SYNTH:
            raise SoundManagerError(f"unimplemented synth type {synth}")
        channel = Channel(self.mixer)
        channel.set_initialization_parameters(init)
        self._channels.insert(0, channel)
        log.debug("new channel, init=$%x, total managed channels=%d", init, len(self._channels))
        return channel

    def _check(self, channel: Channel) -> None:
        if channel not in self._channels:
            raise SoundManagerError("channel is not managed by this sound manager")

    def dispose_channel(self, channel: Channel, quiet_now: bool = True) -> None:
        self._check(channel)
        if not quiet_now:
            log.warning("dispose with quietNow=False is not implemented")
        self._channels.remove(channel)
        channel.source.remove_from_mixer()

    def channel_status(self, channel: Channel) -> ChannelStatus:
        self._check(channel)
        state = channel.source.state
        return ChannelStatus(paused=state == SourceState.PAUSED,
                             busy=state != SourceState.STOPPED)

    def do_immediate(self, channel: Channel, command: SndCommand) -> None:
        self._check(channel)
        code = command.cmd & _DATA_FLAG_MASK
        source = channel.source

        if code in (CommandCode.NULL, CommandCode.FLUSH):
            # Commands are never queued, so there is nothing to flush.
            pass
        elif code == CommandCode.QUIET:
            source.stop()
        elif code in (CommandCode.BUFFER, CommandCode.SOUND):
            if command.data is None:
                raise SoundManagerError("sound command carries no sound data")
            channel._install_sound(command.data, command.offset)
            source.play()
        elif code == CommandCode.AMP:
            channel.gain = command.param1 / 256.0
            channel.apply_parameters(ApplyParameters.PAN_AND_GAIN)
        elif code == CommandCode.VOLUME:
            lvol = command.param2 & 0xFFFF
            rvol = (command.param2 >> 16) & 0xFFFF
            volsum = lvol + rvol
            pan = 0.0
            if volsum:
                pan = 2 * (rvol / volsum) - 1  # [0, 1] to [-1, +1]
            channel.pan = pan
            channel.gain = max(lvol, rvol) / 256.0
            channel.apply_parameters(ApplyParameters.PAN_AND_GAIN)
        elif code == CommandCode.FREQ:
            channel.playback_note = command.param2 & 0xFF
            channel.apply_parameters(ApplyParameters.PITCH)
        elif code in (CommandCode.RATE, CommandCode.RATE_MULTIPLIER):
            # The rate is treated as a plain pitch multiplier.
            channel.pitch_mult = command.param2 / 65536.0
            channel.apply_parameters(ApplyParameters.PITCH)
        elif code == CommandCode.RE_INIT:
            channel.set_initialization_parameters(command.param2)
        elif code == CommandCode.POMME_SET_LOOP:
            channel.loop = bool(command.param1)
            channel.apply_parameters(ApplyParameters.LOOP)
        elif code == CommandCode.POMME_PAUSE_PLAYBACK:
            if source.state == SourceState.PLAYING:
                source.pause()
        elif code == CommandCode.POMME_RESUME_PLAYBACK:
            # Only paused channels resume; stopped ones stay stopped.
            if source.state == SourceState.PAUSED:
                source.play()
        else:
            log.warning("unsupported command %d(%d,%d)", command.cmd, command.param1, command.param2)

    def get_default_output_volume(self) -> int:
        g = int(self.mixer.get_master_gain() * 256.0) & 0xFFFF
        return (g << 16) | g

    def set_default_output_volume(self, stereo_level: int) -> None:
        left = stereo_level & 0xFFFF
        right = (stereo_level >> 16) & 0xFFFF
        if left != right:
            log.warning("different left and right volumes are not supported")
        self.mixer.set_master_gain(left / 256.0)

    def shutdown(self) -> None:
        while self._channels:
            self.dispose_channel(self._channels[0], True)


def sound_manager_version() -> tuple[int, int, int, int]:
    """Version as (major revision, minor and bug revision, stage, non-release revision)."""
    return (3, 9, 0x80, 0)