"""Tests for the byte-level helpers."""

import logging

import pytest

from tagsmith.errors import TagParseError
from tagsmith.utils import (
    decode_latin1,
    decode_synchsafe,
    encode_fixed,
    encode_synchsafe,
    fixed_string,
    read_u16_be,
    read_u24_be,
    read_u32_be,
    read_u32_le,
    read_u64_be,
    remove_unsync,
    split_terminated,
    tolerate,
)


class TestIntegerReaders:
    """Test the endian-specific integer readers."""

    def test_big_endian(self):
        """Big-endian readers decode at an offset."""
        data = b"\x00\x01\x02\x03\x04\x05\x06\x07\x08"
        assert read_u16_be(data, 1) == 0x0102
        assert read_u24_be(data, 1) == 0x010203
        assert read_u32_be(data, 1) == 0x01020304
        assert read_u64_be(data, 1) == 0x0102030405060708

    def test_little_endian(self):
        """read_u32_le reads little-endian."""
        assert read_u32_le(b"\x01\x00\x00\x00") == 1

    def test_truncated_raises(self):
        """Reading past the end raises TagParseError."""
        with pytest.raises(TagParseError):
            read_u32_be(b"\x00\x01", 0)
        with pytest.raises(TagParseError):
            read_u24_be(b"\x00\x01", 0)


class TestSynchsafe:
    """Test synchsafe integer encoding."""

    def test_known_value(self):
        """2^21 - 1 encodes as 00 7f 7f 7f."""
        assert encode_synchsafe(2**21 - 1) == b"\x00\x7f\x7f\x7f"

    @pytest.mark.parametrize("value", [0, 1, 127, 128, 255, 16383, 16384, 2**21, 2**28 - 1])
    def test_inverse(self, value):
        """decode(encode(x)) == x for values below 2^28."""
        assert decode_synchsafe(encode_synchsafe(value)) == value

    def test_high_bits_are_ignored(self):
        """The top bit of each byte is not part of the value."""
        assert decode_synchsafe(b"\x80\x80\x81\x00") == 128

    def test_too_large(self):
        """Values of 2^28 and above cannot be encoded."""
        with pytest.raises(TagParseError):
            encode_synchsafe(2**28)

    def test_too_short(self):
        """Decoding needs four bytes."""
        with pytest.raises(TagParseError):
            decode_synchsafe(b"\x00\x00")


class TestStrings:
    """Test string helpers."""

    def test_remove_unsync(self):
        """FF 00 becomes FF, other bytes are untouched."""
        assert remove_unsync(b"\xff\x00\xe0\x00\xff\x00\x00") == b"\xff\xe0\x00\xff\x00"

    def test_split_terminated_latin1(self):
        """Single NUL terminator."""
        assert split_terminated(b"abc\x00def") == (b"abc", 4)

    def test_split_terminated_utf16_alignment(self):
        """UTF-16 terminators are aligned to two bytes."""
        data = "a".encode("utf-16-le") + b"\x00\x00" + b"rest"
        # 'a\x00' followed by the terminator; the '\x00\x00' spanning a/terminator is skipped
        assert split_terminated(data, 0, 2) == (b"a\x00", 4)

    def test_split_terminated_missing(self):
        """Without a terminator the rest of the data is returned."""
        assert split_terminated(b"abc", 1) == (b"bc", 3)

    def test_decode_latin1_uses_cp1252(self):
        """0x80 is the euro sign in Windows-1252."""
        assert decode_latin1(b"\x80") == "€"

    def test_decode_latin1_fallback(self):
        """Bytes unmapped in cp1252 fall back to Latin-1."""
        assert decode_latin1(b"\x81") == "\x81"

    def test_fixed_string(self):
        """Fixed fields stop at NUL and are trimmed."""
        assert fixed_string(b"Hello  \x00garbage") == "Hello"

    def test_encode_fixed_pads_and_truncates(self):
        """encode_fixed always returns exactly width bytes."""
        assert encode_fixed("ab", 4) == b"ab\x00\x00"
        assert encode_fixed("abcdef", 4) == b"abcd"


class TestTolerate:
    """Test strict/tolerant reporting."""

    def test_logs_warning(self, caplog):
        """Tolerant mode logs and continues."""
        with caplog.at_level(logging.WARNING):
            tolerate("frame truncated")
        assert "frame truncated" in caplog.text

    def test_strict_raises(self):
        """Strict mode raises TagParseError."""
        with pytest.raises(TagParseError, match="frame truncated"):
            tolerate("frame truncated", strict=True)
