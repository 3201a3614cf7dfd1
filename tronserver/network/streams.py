from __future__ import annotations
import struct
from enum import Enum

from .scalars import (
    decode_real,
    decode_string,
    decode_u32,
    encode_real,
    encode_string,
    encode_u32,
)


class FieldKind(Enum):
    """Wire types a legacy message body is built from."""
    U16 = "u16"
    U32 = "u32"
    STRING = "string"
    REAL = "real"


class PacketWriter:
    """
    Builds a legacy message body.
    The legacy stream is made of 16-bit words, so every write is word aligned.
    """
    def __init__(self):
        self._buffer = bytearray()

    def get_bytes(self) -> bytes:
        return bytes(self._buffer)

    # ------------------------------------------------------------------
    # STANDARD TYPES
    # ------------------------------------------------------------------

    def write_u16(self, value: int):
        """Writes one big-endian short."""
        self._buffer += struct.pack(">H", value & 0xFFFF)

    def write_u32(self, value: int):
        """Writes an unsigned int as two shorts, low word first."""
        self._buffer += encode_u32(value)

    # ------------------------------------------------------------------
    # LEGACY SPECIFIC TYPES
    # ------------------------------------------------------------------

    def write_string(self, text: str | None):
        """
        Writes [u16 length] + packed char pairs.
        The length counts the null terminator.
        """
        if text is None:
            text = ""
        self._buffer += encode_string(text)

    def write_real(self, value: float):
        """Writes a REAL (6 bit exponent, 1 bit sign, 25 bit mantissa)."""
        self._buffer += encode_real(value)

    def write_field(self, kind: FieldKind, value):
        if kind is FieldKind.U16:
            self.write_u16(value)
        elif kind is FieldKind.U32:
            self.write_u32(value)
        elif kind is FieldKind.STRING:
            self.write_string(value)
        elif kind is FieldKind.REAL:
            self.write_real(value)
        else:
            raise TypeError(f"unsupported field kind {kind!r}")


class PacketReader:
    """
    Walks a legacy message body written by PacketWriter.
    Reading past the end raises IndexError.
    """
    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._pos = 0

    def _take(self, n: int) -> bytes:
        if self._pos + n > len(self._data):
            raise IndexError("End of Stream")
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    # ------------------------------------------------------------------
    # READ HELPERS
    # ------------------------------------------------------------------

    def read_u16(self) -> int:
        (val,) = struct.unpack(">H", self._take(2))
        return val

    def read_u32(self) -> int:
        return decode_u32(self._take(4))

    def read_string(self) -> str:
        text, self._pos = decode_string(self._data, self._pos)
        return text

    def read_real(self) -> float:
        return decode_real(self._take(4))

    def read_field(self, kind: FieldKind):
        if kind is FieldKind.U16:
            return self.read_u16()
        if kind is FieldKind.U32:
            return self.read_u32()
        if kind is FieldKind.STRING:
            return self.read_string()
        if kind is FieldKind.REAL:
            return self.read_real()
        raise TypeError(f"unsupported field kind {kind!r}")
