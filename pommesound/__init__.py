"""Classic Mac sound resources, audio codecs and a software mixer."""

__version__ = "0.1.0"

__all__ = [
    "bigendian",
    "codecs",
    "ieee_extended",
    "midi",
    "mixer",
    "pools",
    "sndres",
    "soundmanager",
    "strings",
    "structpack",
    "text",
    "timemgr",
]