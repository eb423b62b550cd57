"""Byte-level helpers shared by the tag codecs."""

import logging
import struct
from typing import Tuple

from .constants import SYNCHSAFE_MAX
from .errors import TagParseError


def _unpack(fmt: str, data: bytes, offset: int) -> int:
    try:
        return struct.unpack_from(fmt, data, offset)[0]
    except struct.error as e:
        raise TagParseError(f"Truncated data at offset {offset}: {e}") from e


def read_u16_be(data: bytes, offset: int = 0) -> int:
    return _unpack(">H", data, offset)


def read_u24_be(data: bytes, offset: int = 0) -> int:
    if offset + 3 > len(data):
        raise TagParseError(f"Truncated data at offset {offset}")
    return int.from_bytes(data[offset:offset + 3], "big")


def read_u32_be(data: bytes, offset: int = 0) -> int:
    return _unpack(">I", data, offset)


def read_u64_be(data: bytes, offset: int = 0) -> int:
    return _unpack(">Q", data, offset)


def read_u32_le(data: bytes, offset: int = 0) -> int:
    return _unpack("<I", data, offset)


def decode_synchsafe(data: bytes) -> int:
    """Decode a 4-byte synchsafe integer (7 significant bits per byte).

    Args:
        data: At least four bytes; only the first four are used

    Returns:
        The decoded integer

    Raises:
        TagParseError: If fewer than four bytes are given
    """
    if len(data) < 4:
        raise TagParseError(f"Synchsafe integer needs 4 bytes, got {len(data)}")
    value = 0
    for byte in data[:4]:
        value = (value << 7) | (byte & 0x7F)
    return value


def encode_synchsafe(value: int) -> bytes:
    """Encode an integer below 2^28 as a 4-byte synchsafe integer.

    Raises:
        TagParseError: If the value does not fit in 28 bits
    """
    if value < 0 or value > SYNCHSAFE_MAX:
        raise TagParseError(f"Value {value} cannot be stored as a synchsafe integer")
    return bytes(
        [
            (value >> 21) & 0x7F,
            (value >> 14) & 0x7F,
            (value >> 7) & 0x7F,
            value & 0x7F,
        ]
    )


def remove_unsync(data: bytes) -> bytes:
    """Undo ID3 unsynchronisation (every 0xFF 0x00 pair becomes 0xFF)."""
    return data.replace(b"\xff\x00", b"\xff")


def split_terminated(data: bytes, start: int = 0, width: int = 1) -> Tuple[bytes, int]:
    """Split off a NUL-terminated string starting at ``start``.

    For ``width == 2`` (UTF-16) the terminator is a pair of zero bytes aligned
    to the start of the string.

    Returns:
        Tuple of (string bytes without terminator, offset after terminator).
        When no terminator exists the rest of the buffer is returned.
    """
    terminator = b"\x00" * width
    pos = start
    while True:
        pos = data.find(terminator, pos)
        if pos == -1:
            return data[start:], len(data)
        if (pos - start) % width == 0:
            return data[start:pos], pos + width
        pos += 1


def decode_latin1(data: bytes) -> str:
    """Decode Windows-1252 text, falling back to Latin-1 for unmapped bytes."""
    try:
        return data.decode("cp1252")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def decode_utf8(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def fixed_string(data: bytes) -> str:
    """Decode a fixed-width field: cut at the first NUL, decode, trim."""
    return decode_latin1(data.split(b"\x00", 1)[0]).strip()


def encode_fixed(text: str, width: int) -> bytes:
    """Encode text into a NUL-padded field of exactly ``width`` bytes."""
    raw = text.encode("cp1252", errors="replace")[:width]
    return raw.ljust(width, b"\x00")


def display_key(key: bytes) -> str:
    """Printable form of a binary frame/atom identifier."""
    return key.decode("latin-1")


def tolerate(message: str, strict: bool = False) -> None:
    """Report a recoverable structural problem.

    In strict mode the problem is raised as a TagParseError; otherwise it is
    logged and parsing continues with what was read so far.
    """
    if strict:
        raise TagParseError(message)
    logging.warning(message)
