"""Decoders for classic Macintosh compressed sound: MACE-3, IMA4, A-law and mu-law.

Every decoder returns native-endian signed 16-bit PCM as ``bytes``.
"""

from __future__ import annotations

import abc
from array import array
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Four-character codes


def _fourcc_value(fourcc) -> int:
    """Normalise a four-character code given as int, str or bytes to an int."""
    if isinstance(fourcc, int):
        return fourcc
    if isinstance(fourcc, str):
        fourcc = fourcc.encode("latin-1")
    raw = bytes(fourcc)
    if len(raw) != 4:
        raise ValueError(f"four-character code must be 4 bytes, got {len(raw)}")
    return int.from_bytes(raw, "big")


def _fourcc_text(value: int) -> str:
    return value.to_bytes(4, "big", signed=False).decode("latin-1")


FOURCC_MAC3 = _fourcc_value("MAC3")
FOURCC_IMA4 = _fourcc_value("ima4")
FOURCC_ALAW = _fourcc_value("alaw")
FOURCC_ULAW = _fourcc_value("ulaw")


def _to_int16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value >= 0x8000 else value


class Codec(abc.ABC):
    """A sound decompressor."""

    samples_per_packet: int = 1
    bytes_per_packet: int = 1
    aiff_bit_depth: int = 16

    @abc.abstractmethod
    def decode(self, n_channels: int, data) -> bytes:
        """Decode ``data`` into native-endian signed 16-bit PCM."""


# ---------------------------------------------------------------------------
# MACE-3

_MACE_TAB1 = (-13, 8, 76, 222, 222, 76, 8, -13)

_MACE_TAB3 = (-18, 140, 140, -18)

_MACE_TAB2 = (
    (37, 116, 206, 330), (39, 121, 216, 346),
    (41, 127, 225, 361), (42, 132, 235, 377),
    (44, 137, 245, 392), (46, 144, 256, 410),
    (48, 150, 267, 428), (51, 157, 280, 449),
    (53, 165, 293, 470), (55, 172, 306, 490),
    (58, 179, 319, 511), (60, 187, 333, 534),
    (63, 195, 348, 557), (66, 205, 364, 583),
    (69, 214, 380, 609), (72, 223, 396, 635),
    (75, 233, 414, 663), (79, 244, 433, 694),
    (82, 254, 453, 725), (86, 265, 472, 756),
    (90, 278, 495, 792), (94, 290, 516, 826),
    (98, 303, 538, 862), (102, 316, 562, 901),
    (107, 331, 588, 942), (112, 345, 614, 983),
    (117, 361, 641, 1027), (122, 377, 670, 1074),
    (127, 394, 701, 1123), (133, 411, 732, 1172),
    (139, 430, 764, 1224), (145, 449, 799, 1280),
    (152, 469, 835, 1337), (159, 490, 872, 1397),
    (166, 512, 911, 1459), (173, 535, 951, 1523),
    (181, 558, 993, 1590), (189, 584, 1038, 1663),
    (197, 610, 1085, 1738), (206, 637, 1133, 1815),
    (215, 665, 1183, 1895), (225, 695, 1237, 1980),
    (235, 726, 1291, 2068), (246, 759, 1349, 2161),
    (257, 792, 1409, 2257), (268, 828, 1472, 2357),
    (280, 865, 1538, 2463), (293, 903, 1606, 2572),
    (306, 944, 1678, 2688), (319, 986, 1753, 2807),
    (334, 1030, 1832, 2933), (349, 1076, 1914, 3065),
    (364, 1124, 1999, 3202), (380, 1174, 2088, 3344),
    (398, 1227, 2182, 3494), (415, 1281, 2278, 3649),
    (434, 1339, 2380, 3811), (453, 1398, 2486, 3982),
    (473, 1461, 2598, 4160), (495, 1526, 2714, 4346),
    (517, 1594, 2835, 4540), (540, 1665, 2961, 4741),
    (564, 1740, 3093, 4953), (589, 1818, 3232, 5175),
    (615, 1898, 3375, 5405), (643, 1984, 3527, 5647),
    (671, 2072, 3683, 5898), (701, 2164, 3848, 6161),
    (733, 2261, 4020, 6438), (766, 2362, 4199, 6724),
    (800, 2467, 4386, 7024), (836, 2578, 4583, 7339),
    (873, 2692, 4786, 7664), (912, 2813, 5001, 8008),
    (952, 2938, 5223, 8364), (995, 3070, 5457, 8739),
    (1039, 3207, 5701, 9129), (1086, 3350, 5956, 9537),
    (1134, 3499, 6220, 9960), (1185, 3655, 6497, 10404),
    (1238, 3818, 6788, 10869), (1293, 3989, 7091, 11355),
    (1351, 4166, 7407, 11861), (1411, 4352, 7738, 12390),
    (1474, 4547, 8084, 12946), (1540, 4750, 8444, 13522),
    (1609, 4962, 8821, 14126), (1680, 5183, 9215, 14756),
    (1756, 5415, 9626, 15415), (1834, 5657, 10057, 16104),
    (1916, 5909, 10505, 16822), (2001, 6173, 10975, 17574),
    (2091, 6448, 11463, 18356), (2184, 6736, 11974, 19175),
    (2282, 7037, 12510, 20032), (2383, 7351, 13068, 20926),
    (2490, 7679, 13652, 21861), (2601, 8021, 14260, 22834),
    (2717, 8380, 14897, 23854), (2838, 8753, 15561, 24918),
    (2965, 9144, 16256, 26031), (3097, 9553, 16982, 27193),
    (3236, 9979, 17740, 28407), (3380, 10424, 18532, 29675),
    (3531, 10890, 19359, 31000), (3688, 11375, 20222, 32382),
    (3853, 11883, 21125, 32767), (4025, 12414, 22069, 32767),
    (4205, 12967, 23053, 32767), (4392, 13546, 24082, 32767),
    (4589, 14151, 25157, 32767), (4793, 14783, 26280, 32767),
    (5007, 15442, 27452, 32767), (5231, 16132, 28678, 32767),
    (5464, 16851, 29957, 32767), (5708, 17603, 31294, 32767),
    (5963, 18389, 32691, 32767), (6229, 19210, 32767, 32767),
    (6507, 20067, 32767, 32767), (6797, 20963, 32767, 32767),
    (7101, 21899, 32767, 32767), (7418, 22876, 32767, 32767),
    (7749, 23897, 32767, 32767), (8095, 24964, 32767, 32767),
    (8456, 26078, 32767, 32767), (8833, 27242, 32767, 32767),
    (9228, 28457, 32767, 32767), (9639, 29727, 32767, 32767),
)

_MACE_TAB4 = (
    (64, 216), (67, 226), (70, 236), (74, 246),
    (77, 257), (80, 268), (84, 280), (88, 294),
    (92, 307), (96, 321), (100, 334), (104, 350),
    (109, 365), (114, 382), (119, 399), (124, 416),
    (130, 434), (136, 454), (142, 475), (148, 495),
    (155, 519), (162, 541), (169, 564), (176, 590),
    (185, 617), (193, 644), (201, 673), (210, 703),
    (220, 735), (230, 767), (240, 801), (251, 838),
    (262, 876), (274, 914), (286, 955), (299, 997),
    (312, 1041), (326, 1089), (341, 1138), (356, 1188),
    (372, 1241), (388, 1297), (406, 1354), (424, 1415),
    (443, 1478), (462, 1544), (483, 1613), (505, 1684),
    (527, 1760), (551, 1838), (576, 1921), (601, 2007),
    (628, 2097), (656, 2190), (686, 2288), (716, 2389),
    (748, 2496), (781, 2607), (816, 2724), (853, 2846),
    (891, 2973), (930, 3104), (972, 3243), (1016, 3389),
    (1061, 3539), (1108, 3698), (1158, 3862), (1209, 4035),
    (1264, 4216), (1320, 4403), (1379, 4599), (1441, 4806),
    (1505, 5019), (1572, 5244), (1642, 5477), (1715, 5722),
    (1792, 5978), (1872, 6245), (1955, 6522), (2043, 6813),
    (2134, 7118), (2229, 7436), (2329, 7767), (2432, 8114),
    (2541, 8477), (2655, 8854), (2773, 9250), (2897, 9663),
    (3026, 10094), (3162, 10546), (3303, 11016), (3450, 11508),
    (3604, 12020), (3765, 12556), (3933, 13118), (4108, 13703),
    (4292, 14315), (4483, 14953), (4683, 15621), (4892, 16318),
    (5111, 17046), (5339, 17807), (5577, 18602), (5826, 19433),
    (6086, 20300), (6358, 21205), (6642, 22152), (6938, 23141),
    (7248, 24173), (7571, 25252), (7909, 26380), (8262, 27557),
    (8631, 28786), (9016, 30072), (9419, 31413), (9839, 32767),
    (10278, 32767), (10737, 32767), (11216, 32767), (11717, 32767),
    (12240, 32767), (12786, 32767), (13356, 32767), (13953, 32767),
    (14576, 32767), (15226, 32767), (15906, 32767), (16615, 32767),
)

# (index deltas, magnitude rows, stride) for the three fields of a packet byte
_MACE_TABLES = (
    (_MACE_TAB1, _MACE_TAB2, 4),
    (_MACE_TAB3, _MACE_TAB4, 2),
    (_MACE_TAB1, _MACE_TAB2, 4),
)


def _mace_clip(n: int) -> int:
    # Deliberately asymmetric: values below the range become -32767.
    if n > 32767:
        return 32767
    if n < -32768:
        return -32767
    return n


@dataclass
class _MaceChannel:
    index: int = 0
    level: int = 0

    def _read_table(self, val: int, tab_idx: int) -> int:
        deltas, rows, stride = _MACE_TABLES[tab_idx]
        row = rows[(self.index & 0x7F0) >> 4]
        if val < stride:
            current = row[val]
        else:
            current = -1 - row[2 * stride - val - 1]
        self.index += deltas[val] - (self.index >> 5)
        if self.index < 0:
            self.index = 0
        return current

    def expand(self, val: int, tab_idx: int) -> int:
        current = _mace_clip(self._read_table(val, tab_idx) + self.level)
        self.level = current - (current >> 3)
        return _to_int16((current & 0xFF00) | ((current >> 8) & 0xFF))


class Mace(Codec):
    """MACE 3:1 decoder.

    Output samples are written channel after channel, not interleaved.
    """

    samples_per_packet = 6
    bytes_per_packet = 2
    aiff_bit_depth = 8

    def decode(self, n_channels: int, data) -> bytes:
        data = bytes(data)
        if not 1 <= n_channels <= 2:
            raise ValueError(f"MACE supports 1 or 2 channels, got {n_channels}")
        frame_size = n_channels * 2
        if len(data) % frame_size:
            raise ValueError("odd input buffer size")

        out = array("h")
        for chan in range(n_channels):
            state = _MaceChannel()
            for start in range(chan * 2, len(data), frame_size):
                for pkt in data[start:start + 2]:
                    fields = (pkt & 7, (pkt >> 3) & 3, pkt >> 5)
                    out.extend(state.expand(val, tab_idx) for tab_idx, val in enumerate(fields))
        return out.tobytes()


# ---------------------------------------------------------------------------
# IMA4 (QuickTime flavour of IMA ADPCM)

_IMA_INDEX_TABLE = (
    -1, -1, -1, -1, 2, 4, 6, 8,
    -1, -1, -1, -1, 2, 4, 6, 8,
)

_IMA_STEP_TABLE = (
    7, 8, 9, 10, 11, 12, 13, 14, 16, 17,
    19, 21, 23, 25, 28, 31, 34, 37, 41, 45,
    50, 55, 60, 66, 73, 80, 88, 97, 107, 118,
    130, 143, 157, 173, 190, 209, 230, 253, 279, 307,
    337, 371, 408, 449, 494, 544, 598, 658, 724, 796,
    876, 963, 1060, 1166, 1282, 1411, 1552, 1707, 1878, 2066,
    2272, 2499, 2749, 3024, 3327, 3660, 4026, 4428, 4871, 5358,
    5894, 6484, 7132, 7845, 8630, 9493, 10442, 11487, 12635, 13899,
    15289, 16818, 18500, 20350, 22385, 24623, 27086, 29794, 32767,
)

_IMA_BLOCK_BYTES = 34
_IMA_BLOCK_SAMPLES = 64
_IMA_MAX_STEP_INDEX = len(_IMA_STEP_TABLE) - 1


@dataclass
class _ImaChannel:
    predictor: int = 0
    step_index: int = 0

    def _expand(self, nibble: int) -> int:
        step = _IMA_STEP_TABLE[self.step_index]
        step_index = min(max(self.step_index + _IMA_INDEX_TABLE[nibble], 0), _IMA_MAX_STEP_INDEX)

        diff = step >> 3
        if nibble & 4:
            diff += step
        if nibble & 2:
            diff += step >> 1
        if nibble & 1:
            diff += step >> 2

        predictor = self.predictor - diff if nibble & 8 else self.predictor + diff
        self.predictor = min(max(predictor, -32768), 32767)
        self.step_index = step_index
        return self.predictor

    def decode_block(self, block: bytes) -> list[int]:
        # The top 9 bits of the header are the initial predictor, the low 7 the step index.
        header = int.from_bytes(block[:2], "big", signed=True)
        step_index = header & 0x7F
        predictor = header & ~0x7F

        if self.step_index != step_index or abs(predictor - self.predictor) > 0x7F:
            self.step_index = step_index
            self.predictor = predictor

        if self.step_index > _IMA_MAX_STEP_INDEX:
            raise ValueError(f"step index {self.step_index} exceeds {_IMA_MAX_STEP_INDEX}")

        samples = []
        for byte in block[2:]:
            samples.append(self._expand(byte & 0x0F))
            samples.append(self._expand(byte >> 4))
        return samples


class Ima4(Codec):
    """IMA4 decoder: 34-byte blocks of 64 samples, blocks interleaved per channel."""

    samples_per_packet = _IMA_BLOCK_SAMPLES
    bytes_per_packet = _IMA_BLOCK_BYTES
    aiff_bit_depth = 16

    def decode(self, n_channels: int, data) -> bytes:
        data = bytes(data)
        if len(data) % _IMA_BLOCK_BYTES:
            raise ValueError("odd input buffer size")
        if n_channels < 1:
            raise ValueError(f"invalid channel count {n_channels}")

        chunk_bytes = _IMA_BLOCK_BYTES * n_channels
        chunk_samples = _IMA_BLOCK_SAMPLES * n_channels
        n_chunks = len(data) // chunk_bytes

        out = array("h", bytes(2 * chunk_samples * n_chunks))
        states = [_ImaChannel() for _ in range(n_channels)]

        for chunk, chunk_start in enumerate(range(0, n_chunks * chunk_bytes, chunk_bytes)):
            base = chunk * chunk_samples
            for chan, state in enumerate(states):
                start = chunk_start + chan * _IMA_BLOCK_BYTES
                samples = state.decode_block(data[start:start + _IMA_BLOCK_BYTES])
                out[base + chan:base + chunk_samples:n_channels] = array("h", samples)

        return out.tobytes()


# ---------------------------------------------------------------------------
# A-law / mu-law
#
# Tables cover input bytes 0..127; bytes 128..255 mirror them with the sign flipped.

_ALAW_TO_PCM = (
    -5504, -5248, -6016, -5760, -4480, -4224, -4992, -4736,
    -7552, -7296, -8064, -7808, -6528, -6272, -7040, -6784,
    -2752, -2624, -3008, -2880, -2240, -2112, -2496, -2368,
    -3776, -3648, -4032, -3904, -3264, -3136, -3520, -3392,
    -22016, -20992, -24064, -23040, -17920, -16896, -19968, -18944,
    -30208, -29184, -32256, -31232, -26112, -25088, -28160, -27136,
    -11008, -10496, -12032, -11520, -8960, -8448, -9984, -9472,
    -15104, -14592, -16128, -15616, -13056, -12544, -14080, -13568,
    -344, -328, -376, -360, -280, -264, -312, -296,
    -472, -456, -504, -488, -408, -392, -440, -424,
    -88, -72, -120, -104, -24, -8, -56, -40,
    -216, -200, -248, -232, -152, -136, -184, -168,
    -1376, -1312, -1504, -1440, -1120, -1056, -1248, -1184,
    -1888, -1824, -2016, -1952, -1632, -1568, -1760, -1696,
    -688, -656, -752, -720, -560, -528, -624, -592,
    -944, -912, -1008, -976, -816, -784, -880, -848,
)

_ULAW_TO_PCM = (
    -32124, -31100, -30076, -29052, -28028, -27004, -25980, -24956,
    -23932, -22908, -21884, -20860, -19836, -18812, -17788, -16764,
    -15996, -15484, -14972, -14460, -13948, -13436, -12924, -12412,
    -11900, -11388, -10876, -10364, -9852, -9340, -8828, -8316,
    -7932, -7676, -7420, -7164, -6908, -6652, -6396, -6140,
    -5884, -5628, -5372, -5116, -4860, -4604, -4348, -4092,
    -3900, -3772, -3644, -3516, -3388, -3260, -3132, -3004,
    -2876, -2748, -2620, -2492, -2364, -2236, -2108, -1980,
    -1884, -1820, -1756, -1692, -1628, -1564, -1500, -1436,
    -1372, -1308, -1244, -1180, -1116, -1052, -988, -924,
    -876, -844, -812, -780, -748, -716, -684, -652,
    -620, -588, -556, -524, -492, -460, -428, -396,
    -372, -356, -340, -324, -308, -292, -276, -260,
    -244, -228, -212, -196, -180, -164, -148, -132,
    -120, -112, -104, -96, -88, -80, -72, -64,
    -56, -48, -40, -32, -24, -16, -8, 0,
)


def _full_table(half: tuple[int, ...]) -> tuple[int, ...]:
    return half + tuple(-value for value in half)


_XLAW_TABLES = {
    FOURCC_ALAW: _full_table(_ALAW_TO_PCM),
    FOURCC_ULAW: _full_table(_ULAW_TO_PCM),
}


class XLaw(Codec):
    """A-law or mu-law decoder, one byte per sample."""

    samples_per_packet = 1
    bytes_per_packet = 1
    aiff_bit_depth = 8

    def __init__(self, fourcc) -> None:
        self.fourcc = _fourcc_value(fourcc)
        try:
            self._table = _XLAW_TABLES[self.fourcc]
        except KeyError:
            raise ValueError("unknown xlaw fourCC") from None

    def decode(self, n_channels: int, data) -> bytes:
        table = self._table
        return array("h", [table[byte] for byte in bytes(data)]).tobytes()


# ---------------------------------------------------------------------------


def get_codec(fourcc) -> Codec:
    """Return a decoder for a compression four-character code; 0 means MACE-3."""
    value = _fourcc_value(fourcc)
    if value in (0, FOURCC_MAC3):
        return Mace()
    if value == FOURCC_IMA4:
        return Ima4()
    if value in (FOURCC_ALAW, FOURCC_ULAW):
        return XLaw(value)
    raise ValueError(f"Unknown audio codec: {_fourcc_text(value)!r}")