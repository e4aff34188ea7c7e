# pommesound

Pure-Python tools for classic Macintosh sound data: parsing `'snd '`
resources, decoding compressed audio, and mixing sounds into stereo
16-bit PCM through a small software mixer driven by Sound Manager–style
commands. The package has no dependencies outside the standard library.

## Modules

- `pommesound.sndres` – `'snd '` resources.
  - `get_sound_header_offset(data)` finds the sampled sound header in a
    standard (format 1), HyperCard (format 2) or standalone (`'po'`)
    resource.
  - `get_sound_info(data, offset)` and `get_sound_info_from_snd_resource(data)`
    return a `SampledSoundInfo` dataclass (sample rate, channels, packets,
    bit depth, compression four-character code as an integer, loop points,
    lengths and the sample bytes in `data`).
  - `SampledSoundInfo.make_standalone_resource()` builds a self-contained
    resource from a record.
  - `decompress_sound_resource(data)` returns a new resource holding
    native-endian PCM; its header is always at offset 2.
  - Malformed or unsupported resources raise `SoundFormatError`
    (a `ValueError`).
- `pommesound.codecs` – `Mace` (MACE-3), `Ima4` (QuickTime IMA ADPCM) and
  `XLaw` (a-law / mu-law) decoders. Each `decode(n_channels, data)` returns
  native-endian signed 16-bit PCM as `bytes`; MACE output is written channel
  after channel rather than interleaved. `get_codec(fourcc)` accepts an
  int, `str` or `bytes` code (`"MAC3"`, `"ima4"`, `"alaw"`, `"ulaw"`; `0`
  means MACE-3) and raises `ValueError` for unknown codes.
- `pommesound.mixer` – `Mixer(sample_rate)` sums playing sources;
  `Mixer.process(length)` returns an `array("h")` of `length` interleaved
  stereo samples, clipped to 16 bits. `WavStream(mixer).load(...)` plays
  8-bit unsigned or 16-bit signed PCM, mono or stereo, with gain, pan,
  pitch, looping and optional linear interpolation. `SourceState` gives
  the stopped/playing/paused states.
- `pommesound.soundmanager` – `SoundManager(mixer)` creates `Channel`s with
  `new_channel(synth, init)` (only the sampled synth, `5`) and runs
  `SndCommand`s on them with `do_immediate(channel, command)`: sound and
  buffer commands, quiet, amplitude, volume, frequency, rate, re-init,
  loop, pause and resume (see `CommandCode`). Also `channel_status`,
  `dispose_channel`, default output volume getters and setters,
  `shutdown()`, and `sound_manager_version()`.
- `pommesound.midi` – `midi_note_frequency(note)` and `midi_note_name(note)`
  using the Sound Manager's octave numbering, where A440 (note 69) is `"A7"`.
- Helpers:
  - `bigendian` – `BigEndianReader` (raises `EOFError` past the end) and
    `BigEndianWriter`, including Pascal strings and 80-bit floats.
  - `ieee_extended` – `to_ieee_extended` / `from_ieee_extended`.
  - `structpack` – `struct_size`, `unpack_structs`, `byteswap_ints`.
  - `pools` – `FixedPool` and `GrowablePool`.
  - `text` – `num_to_string`, `num_to_string_c`, `get_ind_string` for
    `'STR#'` resources.
  - `timemgr` – `get_date_time`, `microseconds`, `tick_count`.
  - `strings` – `uppercase_copy`.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Example

```python
from pommesound.sndres import get_sound_info_from_snd_resource, decompress_sound_resource
from pommesound.midi import midi_note_frequency, midi_note_name

with open("sound.snd", "rb") as f:
    resource = f.read()

info = get_sound_info_from_snd_resource(resource)
print(info.sample_rate, info.n_channels, info.compression_type)

pcm_resource = decompress_sound_resource(resource)

print(midi_note_name(69), midi_note_frequency(69))  # A7 440.0
```

Playing through the mixer:

```python
from pommesound.mixer import Mixer
from pommesound.soundmanager import CommandCode, SndCommand, SoundManager

mixer = Mixer(44100)
manager = SoundManager(mixer)
channel = manager.new_channel(5, 0)
manager.do_immediate(channel, SndCommand(CommandCode.BUFFER, data=resource, offset=20))
samples = mixer.process(1024)   # interleaved stereo int16 values
manager.shutdown()
```

## What it does not do

- It does not open an audio device: `Mixer.process` only returns samples,
  and sending them to speakers is up to the caller.
- It does not load AIFF or MP3 files, nor play sound from files.
- Commands are carried out immediately; there is no command queue.
- Only the sampled synth is supported, and MACE-6 resources are rejected.