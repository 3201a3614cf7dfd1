# network/scalars.py
from __future__ import annotations
import math
import struct

# REAL layout: [exp:6][sign:1][mantissa:25]
REAL_MANT_BITS = 25
REAL_EXP_BITS = 6
REAL_SIGN_SHIFT = REAL_MANT_BITS
REAL_EXP_SHIFT = REAL_MANT_BITS + 1
REAL_MANT_MAX = (1 << REAL_MANT_BITS) - 1
REAL_EXP_MAX = (1 << REAL_EXP_BITS) - 1

FLT32_MAX = 3.4028234663852886e38

# Longest string payload whose length word (payload + NUL) still fits a u16
MAX_STRING_BYTES = 0xFFFF - 1

_WORD = struct.Struct(">H")
_WORD_PAIR = struct.Struct(">HH")


def _sign_extend8(b: int) -> int:
    return b - 0x100 if b & 0x80 else b


# ------------------------------------------------------------------
# WORD-SWAPPED U32
# ------------------------------------------------------------------

def encode_u32(value: int) -> bytes:
    """
    Writes a 32-bit unsigned int as two big-endian shorts, LOW word first.
    1 -> 00 01 00 00. A plain '>I' write is NOT compatible.
    """
    value &= 0xFFFFFFFF
    return _WORD_PAIR.pack(value & 0xFFFF, value >> 16)


def decode_u32(data: bytes) -> int:
    lo, hi = _WORD_PAIR.unpack(data[:4])
    return lo | (hi << 16)


# ------------------------------------------------------------------
# PACKED STRINGS
# ------------------------------------------------------------------

def pack_char_pair(lo: int, hi: int) -> int:
    """
    Packs two chars into one short the way the legacy host does:
        short(lo) + (short(hi) << 8)
    with both chars signed, so a high-bit 'lo' borrows from 'hi'.
    Returns the unsigned 16-bit result.
    """
    return (_sign_extend8(lo) + (_sign_extend8(hi) << 8)) & 0xFFFF


def unpack_char_pair(word: int) -> tuple[int, int]:
    """Inverse of pack_char_pair."""
    lo = word & 0xFF
    hi = ((word - _sign_extend8(lo)) >> 8) & 0xFF
    return lo, hi


def string_bytes(text: str) -> bytes:
    """
    Raw bytes that go on the wire for 'text', terminator included.
    Anything after an embedded NUL is dropped; the client reads C strings.
    """
    raw = text.encode("utf-8").split(b"\x00", 1)[0]
    if len(raw) > MAX_STRING_BYTES:
        # Back off to a char boundary, never split a multi-byte char
        raw = raw[:MAX_STRING_BYTES].decode("utf-8", "ignore").encode("utf-8")
    return raw + b"\x00"


def encode_string(text: str) -> bytes:
    """
    [u16 length incl. NUL] + one packed short per char pair.
    An odd trailing char is paired with 0.
    """
    raw = string_bytes(text)
    out = bytearray(_WORD.pack(len(raw)))
    for i in range(0, len(raw), 2):
        lo = raw[i]
        hi = raw[i + 1] if i + 1 < len(raw) else 0
        out += _WORD.pack(pack_char_pair(lo, hi))
    return bytes(out)


def decode_string(data: bytes, offset: int = 0) -> tuple[str, int]:
    """
    Reads a packed string starting at 'offset'.
    Returns (text, offset just past the last word).
    """
    if offset + 2 > len(data):
        raise IndexError("End of Stream")
    (length,) = _WORD.unpack_from(data, offset)
    offset += 2

    n_words = (length + 1) // 2
    if offset + n_words * 2 > len(data):
        raise IndexError("End of Stream")

    raw = bytearray()
    for _ in range(n_words):
        (word,) = _WORD.unpack_from(data, offset)
        offset += 2
        raw.extend(unpack_char_pair(word))

    del raw[length:]
    text = bytes(raw).split(b"\x00", 1)[0]
    return text.decode("utf-8", errors="replace"), offset


# ------------------------------------------------------------------
# REAL
# ------------------------------------------------------------------

def to_float32(value: float) -> float:
    """Rounds a Python float to the nearest IEEE single, keeping infinities."""
    if math.isnan(value) or math.isinf(value) or abs(value) > FLT32_MAX:
        return value
    return struct.unpack(">f", struct.pack(">f", value))[0]


def pack_real(value: float) -> int:
    """
    Converts a float into the 32-bit REAL word (before word swapping).

    The exponent is found by scaling down by 64 while we can, then by 2
    until the value sits in [0, 1). Values that never get there saturate
    at exponent 63 with a full mantissa. NaN is encoded as zero.
    """
    y = to_float32(value)
    if math.isnan(y):
        y = 0.0

    negative = 0
    if y < 0:
        y = -y
        negative = 1

    exp = 0

    # Coarse: whole powers of 64
    while y >= 64 and exp < REAL_EXP_MAX + 1 - 6:
        exp += 6
        y /= 64

    # Fine: halve until below 1
    while y >= 1 and exp < REAL_EXP_MAX:
        exp += 1
        y /= 2

    scaled = y * (1 << REAL_MANT_BITS)
    if scaled > REAL_MANT_MAX:
        mant = REAL_MANT_MAX
    else:
        mant = math.floor(scaled)

    if exp > REAL_EXP_MAX:
        exp = REAL_EXP_MAX
        if mant > 0:
            mant = REAL_MANT_MAX

    return (mant & REAL_MANT_MAX) | (negative << REAL_SIGN_SHIFT) | (exp << REAL_EXP_SHIFT)


def unpack_real(packed: int) -> float:
    mant = packed & REAL_MANT_MAX
    negative = (packed >> REAL_SIGN_SHIFT) & 1
    exp = (packed >> REAL_EXP_SHIFT) & REAL_EXP_MAX
    value = math.ldexp(mant, exp - REAL_MANT_BITS)
    return -value if negative else value


def encode_real(value: float) -> bytes:
    """REAL on the wire: the packed word, sent as a word-swapped u32."""
    return encode_u32(pack_real(value))


def decode_real(data: bytes) -> float:
    return unpack_real(decode_u32(data))
