"""MIDI note frequencies and names, following the Sound Manager's conventions."""

from __future__ import annotations

import struct

NUM_MIDI_NOTES = 128
DEFAULT_FREQUENCY = 440.0

# Ratio between consecutive semitones as used by the Sound Manager.
_SEMITONE_RATIO = 1.059630943592952646

_NOTE_NAMES = ("A", "A#", "B", "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#")

_FLOAT32 = struct.Struct("f")


def _as_float32(value: float) -> float:
    return _FLOAT32.unpack(_FLOAT32.pack(value))[0]


def _build_frequency_table() -> tuple[float, ...]:
    scale = [1.0]
    for _ in range(11):
        scale.append(scale[-1] * _SEMITONE_RATIO)

    table = []
    for note in range(NUM_MIDI_NOTES):
        octave = 1 + (note + 3) // 12  # A440 and middle C are in octave 7
        semitone = (note + 3) % 12
        if octave < 7:
            freq = scale[semitone] * 440.0 / (1 << (7 - octave))
        else:
            freq = scale[semitone] * 440.0 * (1 << (octave - 7))
        table.append(_as_float32(freq))
    return tuple(table)


_FREQUENCIES = _build_frequency_table()


def midi_note_frequency(note: int) -> float:
    """Frequency in Hz of a MIDI note; notes outside 0..127 give 440 Hz."""
    if not 0 <= note < NUM_MIDI_NOTES:
        return DEFAULT_FREQUENCY
    return _FREQUENCIES[note]


def midi_note_name(note: int) -> str:
    """Name of a note with the Sound Manager's octave numbering (A440 is "A7")."""
    if note + 3 < 0:
        raise ValueError(f"note {note} is below the named range")
    octave = 1 + (note + 3) // 12
    return f"{_NOTE_NAMES[(note + 3) % 12]}{octave}"