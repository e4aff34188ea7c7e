import re
import struct

import pytest

from pommesound.midi import midi_note_frequency, midi_note_name

NAME_RE = re.compile(r"^([A-G]#?)(\d+)$")


def test_a440():
    assert midi_note_frequency(69) == 440.0
    assert midi_note_name(69) == "A7"


@pytest.mark.parametrize("note", [-1, 128, 1000, -50])
def test_out_of_range_frequency_defaults_to_440(note):
    assert midi_note_frequency(note) == 440.0


@pytest.mark.parametrize("note", range(116))
def test_octave_doubles_frequency(note):
    assert midi_note_frequency(note + 12) == 2 * midi_note_frequency(note)


def test_frequencies_strictly_increase():
    freqs = [midi_note_frequency(n) for n in range(128)]
    assert all(a < b for a, b in zip(freqs, freqs[1:]))


def test_frequencies_are_single_precision():
    for note in range(128):
        freq = midi_note_frequency(note)
        assert struct.unpack("f", struct.pack("f", freq))[0] == freq


@pytest.mark.parametrize("note", range(-3, 116))
def test_octave_name_increments(note):
    low = NAME_RE.match(midi_note_name(note))
    high = NAME_RE.match(midi_note_name(note + 12))
    assert low and high
    assert low.group(1) == high.group(1)
    assert int(high.group(2)) == int(low.group(2)) + 1


def test_twelve_distinct_names_per_octave():
    names = {NAME_RE.match(midi_note_name(n)).group(1) for n in range(60, 72)}
    assert len(names) == 12


def test_name_below_range_raises():
    with pytest.raises(ValueError):
        midi_note_name(-4)