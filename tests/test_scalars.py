import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tronserver.network.scalars import (
    REAL_MANT_MAX,
    decode_real,
    decode_string,
    decode_u32,
    encode_real,
    encode_string,
    encode_u32,
    pack_char_pair,
    pack_real,
    unpack_char_pair,
)


@pytest.mark.parametrize('value, expected', [
    (0, '00000000'),
    (1, '00010000'),
    (4534, '11B60000'),
    (0x12345678, '56781234'),
    (-1, 'FFFFFFFF'),
])
def test_encode_u32_low_word_first(value, expected):
    assert encode_u32(value) == bytes.fromhex(expected)


def test_encode_u32_is_not_plain_big_endian():
    assert encode_u32(1) != (1).to_bytes(4, 'big')


def test_decode_u32():
    assert decode_u32(bytes.fromhex('56781234')) == 0x12345678


def test_encode_empty_string_is_terminator_only():
    assert encode_string('') == bytes([0x00, 0x01, 0x00, 0x00])


@pytest.mark.parametrize('text, expected', [
    ('D', '0002 0044'),
    ('Do', '0003 6F44 0000'),
    ('abc', '0004 6261 0063'),
])
def test_encode_string_ascii(text, expected):
    assert encode_string(text) == bytes.fromhex(expected.replace(' ', ''))


def test_encode_string_sign_extends_high_bit_chars():
    # UTF-8 e-acute is C3 A9; the signed low char borrows one from the high char
    assert encode_string('é') == bytes.fromhex('0003A8C30000')


def test_pack_char_pair_borrow():
    assert pack_char_pair(0x80, 0x41) == 0x4080
    assert pack_char_pair(0x41, 0x80) == 0x8041
    assert pack_char_pair(0xFF, 0xFF) == 0xFEFF


@given(st.integers(0, 255), st.integers(0, 255))
def test_char_pair_unpacks_exactly(lo, hi):
    assert unpack_char_pair(pack_char_pair(lo, hi)) == (lo, hi)


def test_encode_string_stops_at_embedded_nul():
    assert encode_string('ab\x00cd') == encode_string('ab')


def test_decode_string_returns_next_offset():
    data = encode_string('Dock') + encode_string('x')
    text, offset = decode_string(data)
    assert text == 'Dock'
    assert decode_string(data, offset) == ('x', len(data))


def test_decode_string_high_bit_chars():
    assert decode_string(encode_string('café über'))[0] == 'café über'


def test_decode_string_truncated():
    with pytest.raises(IndexError):
        decode_string(encode_string('hello')[:-2])


def test_encode_real_zero():
    assert encode_real(0.0) == b'\x00\x00\x00\x00'


@pytest.mark.parametrize('value, expected', [
    (0.1, '33330033'),
    (0.5, '00000100'),
    (1.0, '00000500'),
    (10.0, '00001140'),
    (100.0, '00001D90'),
])
def test_encode_real_known_values(value, expected):
    assert encode_real(value) == bytes.fromhex(expected)


def test_encode_real_negative_only_flips_sign_bit():
    assert pack_real(1.0) ^ pack_real(-1.0) == 1 << 25
    assert encode_real(-1.0) == bytes.fromhex('00000700')


@pytest.mark.parametrize('value', [math.inf, 1e300, 3.0e38])
def test_encode_real_saturates(value):
    packed = pack_real(value)
    assert packed >> 26 == 63
    assert packed & REAL_MANT_MAX == REAL_MANT_MAX
    assert encode_real(value) == bytes.fromhex('FFFFFDFF')


def test_encode_real_negative_infinity_saturates_with_sign():
    assert encode_real(-math.inf) == bytes.fromhex('FFFFFFFF')


def test_encode_real_nan_is_zero():
    assert encode_real(math.nan) == b'\x00\x00\x00\x00'


def test_encode_real_underflows_to_zero():
    assert pack_real(1e-10) == 0


@given(st.floats(min_value=0.0, max_value=1e18), st.floats(min_value=0.0, max_value=1e18))
def test_encode_real_is_monotonic(a, b):
    low, high = sorted((a, b))
    assert pack_real(low) <= pack_real(high)


@given(st.floats(min_value=-1e6, max_value=1e6, allow_nan=False))
def test_decode_real_is_close(value):
    decoded = decode_real(encode_real(value))
    assert math.copysign(1.0, decoded) == math.copysign(1.0, value) or decoded == 0.0
    assert abs(decoded - value) <= abs(value) * 2 ** -22 + 2 ** -24


def test_decode_real_exact_for_short_mantissas():
    for value in (0.5, 1.0, -1.0, 10.0, 100.0, 0.0):
        assert decode_real(encode_real(value)) == value


def test_long_string_is_cut_on_a_char_boundary():
    text = 'a' + 'é' * 40000
    encoded = encode_string(text)
    # 'a' plus 32766 two-byte chars fill 65533 bytes, the next char would not fit
    assert encoded[:2] == (65534).to_bytes(2, 'big')
    decoded, offset = decode_string(encoded)
    assert decoded == 'a' + 'é' * 32766
    assert offset == len(encoded)
