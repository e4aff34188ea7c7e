"""Parsing, rebuilding and decompressing 'snd ' sound resources."""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass, replace

from .bigendian import BigEndianReader
from .codecs import FOURCC_MAC3, get_codec
from .structpack import byteswap_ints

NATIVE_BIG_ENDIAN = sys.byteorder == "big"


def _fourcc(text: str) -> int:
    return int.from_bytes(text.encode("latin-1"), "big")


FOURCC_RAW = _fourcc("raw ")
FOURCC_TWOS = _fourcc("twos")
FOURCC_SOWT = _fourcc("sowt")

# Resource formats
_FORMAT_STANDARD = 0x0001
_FORMAT_HYPERCARD = 0x0002
_FORMAT_POMME = 0x706F  # 'po': only sampled data, no command list

_SAMPLED_SYNTH = 5
_INIT_MACE6 = 0x0400
_SOUND_CMD = 80
_BUFFER_CMD = 81

# Sampled sound header encodings
_ENCODING_STANDARD = 0x00
_ENCODING_COMPRESSED = 0xFE
_ENCODING_EXTENDED = 0xFF

_POMME_TAG = b"POMM"
_POMME_RESOURCE_PREFIX = b"po" + _POMME_TAG
POMME_HEADER_OFFSET = 2

_SAMPLED_HEADER = struct.Struct(">IiIIIBB")
_RECORD = struct.Struct(">IiihBBdBIIii")


class SoundFormatError(ValueError):
    """Raised when a sound resource is malformed or unsupported."""


@dataclass
class SampledSoundInfo:
    """Description of the sampled sound held by a resource, with its sample data."""

    compression_type: int = 0
    n_channels: int = 0
    n_packets: int = 0
    codec_bit_depth: int = 0
    big_endian: bool = False
    is_compressed: bool = False
    sample_rate: float = 0.0
    base_note: int = 0
    loop_start: int = 0
    loop_end: int = 0
    compressed_length: int = 0
    decompressed_length: int = 0
    data: bytes = b""

    def _pack_record(self) -> bytes:
        return _RECORD.pack(
            self.compression_type,
            self.n_channels,
            self.n_packets,
            self.codec_bit_depth,
            int(self.big_endian),
            int(self.is_compressed),
            self.sample_rate,
            self.base_note,
            self.loop_start,
            self.loop_end,
            self.compressed_length,
            self.decompressed_length,
        )

    @classmethod
    def _from_record(cls, record: bytes, resource: bytes, data_start: int) -> "SampledSoundInfo":
        (compression_type, n_channels, n_packets, bit_depth, big_endian, is_compressed,
         sample_rate, base_note, loop_start, loop_end, compressed_length,
         decompressed_length) = _RECORD.unpack(record)
        return cls(
            compression_type=compression_type,
            n_channels=n_channels,
            n_packets=n_packets,
            codec_bit_depth=bit_depth,
            big_endian=bool(big_endian),
            is_compressed=bool(is_compressed),
            sample_rate=sample_rate,
            base_note=base_note,
            loop_start=loop_start,
            loop_end=loop_end,
            compressed_length=compressed_length,
            decompressed_length=decompressed_length,
            data=_payload(resource, data_start, compressed_length),
        )

    def make_standalone_resource(self) -> bytes:
        """Build a self-contained resource holding this record and its sample data."""
        n = self.compressed_length
        if n < 0:
            raise ValueError("compressed length cannot be negative")
        payload = bytes(self.data[:n]).ljust(n, b"\0")
        return _POMME_RESOURCE_PREFIX + self._pack_record() + payload


def _payload(resource: bytes, start: int, length: int) -> bytes:
    if length < 0 or start + length > len(resource):
        raise SoundFormatError("sample data is truncated")
    return resource[start:start + length]


def _find_header_offset(reader: BigEndianReader) -> int:
    fmt = reader.read_i16()
    if fmt == _FORMAT_STANDARD:
        modifier_count = reader.read_i16()
        synth_type = reader.read_i16()
        init_bits = reader.read_u32()
        if modifier_count != 1:
            raise SoundFormatError("only 1 modifier per 'snd ' is supported")
        if synth_type != _SAMPLED_SYNTH:
            raise SoundFormatError("only sampledSynth 'snd ' is supported")
        if init_bits & _INIT_MACE6:
            raise SoundFormatError("MACE-6 not supported yet")
    elif fmt == _FORMAT_HYPERCARD:
        reader.skip(2)  # reference count
    elif fmt == _FORMAT_POMME:
        return POMME_HEADER_OFFSET
    else:
        raise SoundFormatError(f"unknown snd resource format {fmt}")

    for _ in range(reader.read_i16()):
        # The high bit marks a command whose param2 is an offset into the resource.
        cmd = reader.read_u16() & 0x7FFF
        reader.skip(2)
        param2 = reader.read_i32()
        if cmd in (_BUFFER_CMD, _SOUND_CMD):
            return param2

    raise SoundFormatError("didn't find offset in snd resource")


def get_sound_header_offset(data) -> int:
    """Offset of the sampled sound header inside an 'snd ' resource."""
    reader = BigEndianReader(data)
    try:
        return _find_header_offset(reader)
    except EOFError as exc:
        raise SoundFormatError("truncated snd resource") from exc


def _parse_sampled_header(reader: BigEndianReader, resource: bytes) -> SampledSoundInfo:
    (zero, count, fixed_rate, loop_start, loop_end, encoding,
     base_note) = _SAMPLED_HEADER.unpack(reader.read(_SAMPLED_HEADER.size))

    if zero != 0:
        raise SoundFormatError("expected 0 at the beginning of an snd")

    info = SampledSoundInfo(
        sample_rate=fixed_rate / 65536.0,
        base_note=base_note,
        loop_start=loop_start,
        loop_end=loop_end,
    )

    if encoding == _ENCODING_STANDARD:
        info.compression_type = FOURCC_RAW  # unsigned 8-bit
        info.is_compressed = False
        info.big_endian = NATIVE_BIG_ENDIAN
        info.codec_bit_depth = 8
        info.n_channels = 1
        info.n_packets = count
        info.compressed_length = count
        info.decompressed_length = count
    elif encoding == _ENCODING_COMPRESSED:
        info.n_packets = reader.read_i32()
        reader.skip(14)  # AIFF sample rate, marker chunk
        compression_type = reader.read_u32()
        reader.skip(20)  # future use, state vars, leftover samples, ids, packet size
        if compression_type == 0:
            # Unspecified compression is taken to be MACE-3.
            compression_type = FOURCC_MAC3
        try:
            codec = get_codec(compression_type)
        except ValueError as exc:
            raise SoundFormatError(str(exc)) from exc
        info.compression_type = compression_type
        info.is_compressed = True
        info.big_endian = NATIVE_BIG_ENDIAN
        info.n_channels = count
        info.codec_bit_depth = codec.aiff_bit_depth
        info.compressed_length = count * info.n_packets * codec.bytes_per_packet
        info.decompressed_length = count * info.n_packets * codec.samples_per_packet * 2
    elif encoding == _ENCODING_EXTENDED:
        info.n_packets = reader.read_i32()
        reader.skip(22)  # AIFF sample rate, marker chunk, instrument chunks, AES recording
        info.codec_bit_depth = reader.read_i16()
        reader.skip(14)  # future use
        info.is_compressed = False
        info.big_endian = True
        info.compression_type = FOURCC_RAW if info.codec_bit_depth == 8 else FOURCC_TWOS
        info.n_channels = count
        info.compressed_length = count * info.n_packets * info.codec_bit_depth // 8
        info.decompressed_length = info.compressed_length
    else:
        raise SoundFormatError(f"unsupported snd header encoding {encoding}")

    info.data = _payload(resource, reader.tell(), info.compressed_length)
    return info


def get_sound_info(data, offset: int = 0) -> SampledSoundInfo:
    """Describe the sampled sound whose header starts at ``offset`` in ``data``."""
    resource = bytes(data)
    if not 0 <= offset <= len(resource):
        raise SoundFormatError(f"header offset {offset} is outside the resource")

    if resource[offset:offset + len(_POMME_TAG)] == _POMME_TAG:
        start = offset + len(_POMME_TAG)
        record = resource[start:start + _RECORD.size]
        if len(record) != _RECORD.size:
            raise SoundFormatError("truncated sound record")
        return SampledSoundInfo._from_record(record, resource, start + _RECORD.size)

    reader = BigEndianReader(resource)
    reader.seek(offset)
    try:
        return _parse_sampled_header(reader, resource)
    except EOFError as exc:
        raise SoundFormatError("truncated sampled sound header") from exc


def get_sound_info_from_snd_resource(data) -> SampledSoundInfo:
    """Locate the sampled sound header in an 'snd ' resource and describe it."""
    return get_sound_info(data, get_sound_header_offset(data))


def decompress_sound_resource(data) -> bytes:
    """Return a resource holding the sound as native-endian PCM.

    The sampled sound header of the returned resource is always at offset 2.
    """
    info = get_sound_info_from_snd_resource(data)
    out = replace(info, is_compressed=False, compressed_length=info.decompressed_length)

    if not info.is_compressed:
        if info.decompressed_length != info.compressed_length:
            raise SoundFormatError("decompressed length differs from compressed length")
        pcm = bytearray(info.data)
        bytes_per_sample = info.codec_bit_depth // 8
        if info.big_endian != NATIVE_BIG_ENDIAN and bytes_per_sample > 1:
            if len(pcm) % bytes_per_sample:
                raise SoundFormatError("unexpected raw PCM length")
            byteswap_ints(bytes_per_sample, len(pcm) // bytes_per_sample, pcm)
            out.big_endian = NATIVE_BIG_ENDIAN
        out.data = bytes(pcm)
    else:
        codec = get_codec(info.compression_type)
        pcm = codec.decode(info.n_channels, info.data)
        if len(pcm) != info.decompressed_length:
            raise SoundFormatError("incorrect output size")
        out.compression_type = FOURCC_TWOS if NATIVE_BIG_ENDIAN else FOURCC_SOWT
        out.big_endian = NATIVE_BIG_ENDIAN
        out.codec_bit_depth = 16
        out.n_packets = codec.samples_per_packet * info.n_packets
        out.data = pcm

    resource = out.make_standalone_resource()
    if get_sound_header_offset(resource) != POMME_HEADER_OFFSET:
        raise SoundFormatError("incorrect decompressed sound header offset")
    return resource