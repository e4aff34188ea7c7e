import struct

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from pommesound.mixer import BUFFER_SIZE, Mixer, SourceState, WavStream

RATE = 44100


def pcm16le(values):
    return struct.pack(f"<{len(values)}h", *values)


def pcm16be(values):
    return struct.pack(f">{len(values)}h", *values)


def make_stream(mixer, values, rate=RATE):
    stream = WavStream(mixer)
    stream.load(rate, 16, 1, False, pcm16le(values))
    return stream


def test_mono_plays_duplicated_then_silence():
    mixer = Mixer(RATE)
    samples = [100, -200, 300, -400]
    stream = make_stream(mixer, samples)
    stream.play()
    out = list(mixer.process(16))
    assert out[0:8:2] == samples
    assert out[1:8:2] == samples
    assert out[8:] == [0] * 8
    assert stream.state == SourceState.STOPPED
    assert stream.active is False
    assert mixer.sources == ()


def test_loop_repeats():
    mixer = Mixer(RATE)
    samples = [10, 20, 30, 40]
    stream = make_stream(mixer, samples)
    stream.set_loop(True)
    stream.play()
    out = list(mixer.process(16))
    assert out[0::2] == samples + samples
    assert stream.state == SourceState.PLAYING


def test_on_complete_called_once():
    mixer = Mixer(RATE)
    calls = []
    stream = make_stream(mixer, [1, 2, 3, 4])
    stream.on_complete = lambda: calls.append(True)
    stream.play()
    mixer.process(64)
    mixer.process(64)
    assert calls == [True]


def test_pan_right_silences_left():
    mixer = Mixer(RATE)
    samples = [500, 600, 700, 800]
    stream = make_stream(mixer, samples)
    stream.set_pan(5.0)
    assert stream.pan == 1.0
    stream.play()
    out = list(mixer.process(8))
    assert out[0::2] == [0] * 4
    assert out[1::2] == samples


def test_pan_left_silences_right():
    mixer = Mixer(RATE)
    samples = [500, 600, 700, 800]
    stream = make_stream(mixer, samples)
    stream.set_pan(-1.0)
    stream.play()
    out = list(mixer.process(8))
    assert out[0::2] == samples
    assert out[1::2] == [0] * 4


def test_master_gain_bounds_and_zero_output():
    mixer = Mixer(RATE)
    mixer.set_master_gain(-3.0)
    assert mixer.get_master_gain() == 0.0
    stream = make_stream(mixer, [1000, 2000, 3000, 4000])
    stream.play()
    assert list(mixer.process(8)) == [0] * 8
    mixer.set_master_gain(0.5)
    assert mixer.get_master_gain() == 0.5


def test_clipping():
    mixer = Mixer(RATE)
    a = make_stream(mixer, [30000] * 4)
    b = make_stream(mixer, [30000] * 4)
    c = make_stream(mixer, [-30000] * 4)
    d = make_stream(mixer, [-30000] * 4)
    a.play()
    b.play()
    out = list(mixer.process(8))
    assert out == [32767] * 8
    c.play()
    d.play()
    out = list(mixer.process(8))
    assert out == [-32768] * 8


def test_eight_bit_unsigned():
    mixer = Mixer(RATE)
    stream = WavStream(mixer)
    stream.load(RATE, 8, 1, False, bytes([128, 0]))
    stream.play()
    out = list(mixer.process(4))
    assert out == [0, 0, -32768, -32768]


def test_big_endian_matches_little_endian():
    samples = [256, -1234, 32767, -32768]
    mixer_le = Mixer(RATE)
    le = WavStream(mixer_le)
    le.load(RATE, 16, 1, False, pcm16le(samples))
    le.play()
    mixer_be = Mixer(RATE)
    be = WavStream(mixer_be)
    be.load(RATE, 16, 1, True, pcm16be(samples))
    be.play()
    assert list(mixer_le.process(8)) == list(mixer_be.process(8))


def test_stereo_frames():
    mixer = Mixer(RATE)
    stream = WavStream(mixer)
    values = [100, -100, 200, -200]
    stream.load(RATE, 16, 2, False, pcm16le(values))
    assert stream.length == 2
    stream.play()
    assert list(mixer.process(4)) == values


def test_half_pitch_without_interpolation_repeats_frames():
    mixer = Mixer(RATE)
    samples = [0, 1000, 2000, 3000]
    stream = make_stream(mixer, samples)
    stream.set_pitch(0.5)
    stream.play()
    out = list(mixer.process(16))
    left = out[0::2]
    assert left == [s for s in samples for _ in range(2)]


def test_half_pitch_with_interpolation_lies_between_frames():
    mixer = Mixer(RATE)
    samples = [0, 1000, 2000, 3000]
    stream = make_stream(mixer, samples)
    stream.set_interpolation(True)
    stream.set_pitch(0.5)
    stream.play()
    left = list(mixer.process(16))[0::2]
    assert left[0::2] == samples
    for i in range(3):
        assert samples[i] < left[2 * i + 1] < samples[i + 1]


def test_pitch_compensates_sample_rate():
    mixer = Mixer(RATE)
    samples = [7, 8, 9, 10]
    stream = make_stream(mixer, samples, rate=RATE // 2)
    stream.set_pitch(2.0)
    stream.play()
    assert list(mixer.process(8))[0::2] == samples


def test_state_transitions():
    mixer = Mixer(RATE)
    stream = make_stream(mixer, [1, 2, 3, 4])
    assert stream.state == SourceState.STOPPED
    stream.play()
    assert stream.state == SourceState.PLAYING
    stream.pause()
    assert stream.state == SourceState.PAUSED
    stream.toggle_pause()
    assert stream.state == SourceState.PLAYING
    stream.toggle_pause()
    assert stream.state == SourceState.PAUSED
    stream.stop()
    stream.toggle_pause()
    assert stream.state == SourceState.STOPPED


def test_empty_source_does_not_play():
    mixer = Mixer(RATE)
    stream = WavStream(mixer)
    stream.play()
    assert stream.state == SourceState.STOPPED
    assert mixer.sources == ()


def test_paused_source_leaves_mixer():
    mixer = Mixer(RATE)
    stream = make_stream(mixer, [1000] * 8)
    stream.play()
    stream.pause()
    assert list(mixer.process(8)) == [0] * 8
    assert stream.active is False
    stream.play()
    assert mixer.sources == (stream,)


def test_remove_from_mixer_and_context_manager():
    mixer = Mixer(RATE)
    stream = make_stream(mixer, [1000] * 8)
    with stream:
        stream.play()
        assert stream.active is True
    assert stream.active is False
    assert mixer.sources == ()
    assert list(mixer.process(8)) == [0] * 8


def test_newest_source_first():
    mixer = Mixer(RATE)
    a = make_stream(mixer, [1] * 4)
    b = make_stream(mixer, [2] * 4)
    a.play()
    b.play()
    assert mixer.sources == (b, a)


def test_length_and_position_seconds():
    mixer = Mixer(RATE)
    stream = make_stream(mixer, [0] * RATE)
    assert stream.length_seconds() == 1.0
    stream.play()
    mixer.process(2 * (RATE // 10))
    assert stream.position_seconds() == pytest.approx(0.1)


def test_clear_resets():
    mixer = Mixer(RATE)
    stream = make_stream(mixer, [5] * 4)
    stream.play()
    stream.clear()
    assert stream.state == SourceState.STOPPED
    assert stream.length == 0
    assert stream.length_seconds() == 0.0


def test_process_length_matches_request():
    mixer = Mixer(RATE)
    assert len(mixer.process(3 * BUFFER_SIZE + 17)) == 3 * BUFFER_SIZE + 17
    assert len(mixer.process(0)) == 0
    with pytest.raises(ValueError):
        mixer.process(-1)


@pytest.mark.parametrize("bit_depth,channels", [(24, 1), (16, 3), (0, 1)])
def test_load_rejects_unsupported_formats(bit_depth, channels):
    stream = WavStream(Mixer(RATE))
    with pytest.raises(ValueError):
        stream.load(RATE, bit_depth, channels, False, bytes(12))


def test_mixer_rejects_bad_rate():
    with pytest.raises(ValueError):
        Mixer(0)


@settings(max_examples=30, deadline=None)
@given(st.lists(st.integers(-32768, 32767), min_size=1, max_size=300))
def test_unity_playback_round_trip(samples):
    mixer = Mixer(RATE)
    stream = make_stream(mixer, samples)
    stream.play()
    out = list(mixer.process(2 * len(samples)))
    assert out[0::2] == samples
    assert out[1::2] == samples