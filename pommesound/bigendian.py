"""Big-endian binary readers and writers over in-memory buffers."""

from __future__ import annotations

import struct

from .ieee_extended import EXTENDED_SIZE, from_ieee_extended

TEXT_ENCODING = "mac_roman"

_U8 = struct.Struct(">B")
_I8 = struct.Struct(">b")
_U16 = struct.Struct(">H")
_I16 = struct.Struct(">h")
_U32 = struct.Struct(">I")
_I32 = struct.Struct(">i")


class _PositionGuard:
    """Restores a reader's position on exit unless cancelled."""

    def __init__(self, reader: "BigEndianReader") -> None:
        self._reader = reader
        self._backup = reader.tell()
        self._active = True

    def cancel(self) -> None:
        self._active = False

    def __enter__(self) -> "_PositionGuard":
        return self

    def __exit__(self, *exc_info) -> bool:
        if self._active:
            self._reader.seek(self._backup)
        return False


class BigEndianReader:
    """Reads big-endian values from a byte buffer."""

    def __init__(self, data) -> None:
        self._data = memoryview(bytes(data))
        self._pos = 0

    def read(self, n: int) -> bytes:
        if n < 0:
            raise ValueError("cannot read a negative number of bytes")
        end = self._pos + n
        if end > len(self._data):
            raise EOFError("read past end of stream")
        chunk = bytes(self._data[self._pos:end])
        self._pos = end
        return chunk

    def _unpack(self, fmt: struct.Struct) -> int:
        return fmt.unpack(self.read(fmt.size))[0]

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_i8(self) -> int:
        return self._unpack(_I8)

    def read_u16(self) -> int:
        return self._unpack(_U16)

    def read_i16(self) -> int:
        return self._unpack(_I16)

    def read_u32(self) -> int:
        return self._unpack(_U32)

    def read_i32(self) -> int:
        return self._unpack(_I32)

    def skip(self, n: int) -> None:
        self.seek(self._pos + n)

    def seek(self, offset: int) -> None:
        if offset < 0:
            raise ValueError("cannot seek before start of stream")
        self._pos = offset

    def tell(self) -> int:
        return self._pos

    def preserve_position(self) -> _PositionGuard:
        """Context manager that restores the current position on exit."""
        return _PositionGuard(self)

    def read_pascal_string(self, pad_to_alignment: int = 1) -> str:
        length = self.read_u8()
        raw = self.read(length)
        padding = (length + 1) % pad_to_alignment
        if padding:
            self.skip(padding)
        return raw.split(b"\0", 1)[0].decode(TEXT_ENCODING)

    def read_pascal_string_fixed(self, max_chars: int) -> str:
        """Read a length byte followed by a fixed-size record of ``max_chars`` bytes."""
        length = self.read_u8()
        end = min(self._pos + max_chars, len(self._data))
        record = bytes(self._data[self._pos:end])
        self._pos = self._pos + max_chars
        return record[:length].decode(TEXT_ENCODING)

    def read_extended(self) -> float:
        return from_ieee_extended(self.read(EXTENDED_SIZE))


class BigEndianWriter:
    """Writes big-endian values into a growable byte buffer."""

    def __init__(self) -> None:
        self._buf = bytearray()
        self._pos = 0

    def write(self, data) -> None:
        data = bytes(data)
        if self._pos > len(self._buf):
            self._buf.extend(bytes(self._pos - len(self._buf)))
        end = self._pos + len(data)
        self._buf[self._pos:end] = data
        self._pos = end

    def write_u8(self, value: int) -> None:
        self.write(_U8.pack(value))

    def write_i16(self, value: int) -> None:
        self.write(_I16.pack(value))

    def write_u16(self, value: int) -> None:
        self.write(_U16.pack(value))

    def write_i32(self, value: int) -> None:
        self.write(_I32.pack(value))

    def write_u32(self, value: int) -> None:
        self.write(_U32.pack(value))

    def write_pascal_string(self, text: str, pad_to_alignment: int = 1) -> None:
        raw = text.encode(TEXT_ENCODING)
        if len(raw) > 255:
            raise ValueError("pascal string must be at most 255 characters")
        self.write_u8(len(raw))
        self.write(raw)
        self.write(bytes((len(raw) + 1) % pad_to_alignment))

    def write_raw_string(self, text: str) -> None:
        self.write(text.encode(TEXT_ENCODING))

    def seek(self, offset: int) -> None:
        if offset < 0:
            raise ValueError("cannot seek before start of stream")
        self._pos = offset

    def tell(self) -> int:
        return self._pos

    def getvalue(self) -> bytes:
        return bytes(self._buf)