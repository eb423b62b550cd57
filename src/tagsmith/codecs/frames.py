"""Payload formats of the ID3v2 frames tagsmith understands.

Text frames, COMM/USLT (language + description + text), APIC and the
ID3v2.2 PIC frame. Everything here works on a frame payload, after any
frame-level unsynchronisation has been removed.
"""

from enum import IntEnum
from typing import Tuple

from ..constants import DEFAULT_LANGUAGE, DEFAULT_MIME_TYPE, FRONT_COVER
from ..errors import TagParseError
from ..models import CoverArt
from ..utils import decode_latin1, decode_utf8, split_terminated


class TextEncoding(IntEnum):
    LATIN1 = 0
    UTF16 = 1
    UTF16BE = 2
    UTF8 = 3

    @classmethod
    def from_byte(cls, value: int) -> "TextEncoding":
        """Encoding for a frame's leading byte (unknown values read as Latin-1)."""
        try:
            return cls(value)
        except ValueError:
            return cls.LATIN1

    @property
    def width(self) -> int:
        """Size of a NUL terminator in this encoding."""
        return 2 if self in (TextEncoding.UTF16, TextEncoding.UTF16BE) else 1

    @property
    def terminator(self) -> bytes:
        return b"\x00" * self.width


def decode_text(encoding: TextEncoding, data: bytes) -> str:
    if encoding == TextEncoding.LATIN1:
        return decode_latin1(data)
    if encoding == TextEncoding.UTF8:
        return decode_utf8(data)

    codec = "utf-16-be" if encoding == TextEncoding.UTF16BE else "utf-16-le"
    if encoding == TextEncoding.UTF16:
        if data[:2] == b"\xff\xfe":
            data = data[2:]
        elif data[:2] == b"\xfe\xff":
            codec = "utf-16-be"
            data = data[2:]
    if len(data) % 2:
        data = data[:-1]
    return data.decode(codec, errors="replace")


def encode_text(encoding: TextEncoding, text: str) -> bytes:
    if encoding == TextEncoding.LATIN1:
        return text.encode("latin-1")
    if encoding == TextEncoding.UTF16:
        return b"\xff\xfe" + text.encode("utf-16-le")
    if encoding == TextEncoding.UTF16BE:
        return text.encode("utf-16-be")
    return text.encode("utf-8")


def choose_encoding(text: str, major: int) -> TextEncoding:
    """UTF-8 for v2.4; Latin-1 for v2.3 when possible, else UTF-16.

    Latin-1 frames are read as Windows-1252, so C1 control characters
    (U+0080 to U+009F) also need UTF-16.
    """
    if major >= 4:
        return TextEncoding.UTF8
    if any("\x80" <= char <= "\x9f" for char in text):
        return TextEncoding.UTF16
    try:
        text.encode("latin-1")
    except UnicodeEncodeError:
        return TextEncoding.UTF16
    return TextEncoding.LATIN1


def _strip_value(text: str) -> str:
    return text.lstrip("\ufeff").rstrip("\x00")


def decode_text_frame(payload: bytes):
    """Decode a T*** frame.

    Trailing NULs are dropped. ID3v2.4 stores multiple values separated by
    NUL; they are joined with "/".

    Returns:
        The text, or None if the frame holds no text
    """
    if not payload:
        return None
    encoding = TextEncoding.from_byte(payload[0])
    text = decode_text(encoding, payload[1:])
    values = [_strip_value(value) for value in text.split("\x00")]
    values = [value for value in values if value]
    if not values:
        return None
    return "/".join(values)


def build_text_frame(text: str, major: int) -> bytes:
    encoding = choose_encoding(text, major)
    return bytes([encoding]) + encode_text(encoding, text)


def parse_lang_frame(payload: bytes) -> Tuple[str, str, str]:
    """Decode a COMM or USLT payload.

    Layout: encoding (1), language (3), description (terminated), text.

    Returns:
        Tuple of (language, description, text)
    """
    if len(payload) < 4:
        raise TagParseError(f"Frame too short for language field ({len(payload)} bytes)")
    encoding = TextEncoding.from_byte(payload[0])
    language = decode_latin1(payload[1:4]).rstrip("\x00")
    description, pos = split_terminated(payload, 4, encoding.width)
    text = decode_text(encoding, payload[pos:])
    return (
        language,
        _strip_value(decode_text(encoding, description)),
        _strip_value(text),
    )


def build_lang_frame(
    text: str, major: int, language: str = DEFAULT_LANGUAGE, description: str = ""
) -> bytes:
    encoding = choose_encoding(text + description, major)
    lang = language.encode("latin-1", errors="replace")[:3].ljust(3, b" ")
    return (
        bytes([encoding])
        + lang
        + encode_text(encoding, description)
        + encoding.terminator
        + encode_text(encoding, text)
    )


def _normalize_mime(mime: str) -> str:
    mime = mime.strip().lower()
    if not mime:
        return DEFAULT_MIME_TYPE
    if "/" not in mime:
        mime = f"image/{mime}"
    if mime == "image/jpg":
        return "image/jpeg"
    return mime


def parse_apic(payload: bytes) -> CoverArt:
    """Decode an APIC payload.

    Layout: encoding (1), MIME (NUL-terminated Latin-1), picture type (1),
    description (terminated per encoding), image data.
    """
    if not payload:
        raise TagParseError("Empty APIC frame")
    encoding = TextEncoding.from_byte(payload[0])
    mime, pos = split_terminated(payload, 1)
    if pos >= len(payload):
        raise TagParseError("APIC frame truncated before picture type")
    picture_type = payload[pos]
    description, pos = split_terminated(payload, pos + 1, encoding.width)
    return CoverArt(
        data=payload[pos:],
        mime_type=_normalize_mime(decode_latin1(mime)),
        description=_strip_value(decode_text(encoding, description)),
        picture_type=picture_type,
    )


def build_apic(cover: CoverArt, major: int) -> bytes:
    encoding = choose_encoding(cover.description, major)
    return (
        bytes([encoding])
        + cover.mime_type.encode("latin-1", errors="replace")
        + b"\x00"
        + bytes([cover.picture_type])
        + encode_text(encoding, cover.description)
        + encoding.terminator
        + cover.data
    )


# ID3v2.2 PIC frames carry a three-letter image format instead of a MIME type
PIC_FORMATS = {
    "JPG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "BMP": "image/bmp",
}


def parse_pic(payload: bytes) -> CoverArt:
    """Decode an ID3v2.2 PIC payload (encoding, format, type, description, data)."""
    if len(payload) < 5:
        raise TagParseError("PIC frame truncated")
    encoding = TextEncoding.from_byte(payload[0])
    image_format = decode_latin1(payload[1:4]).upper()
    description, pos = split_terminated(payload, 5, encoding.width)
    return CoverArt(
        data=payload[pos:],
        mime_type=PIC_FORMATS.get(image_format, _normalize_mime(image_format)),
        description=_strip_value(decode_text(encoding, description)),
        picture_type=payload[4],
    )


def is_front_cover(cover: CoverArt) -> bool:
    return cover.picture_type == FRONT_COVER
