"""APEv2 tag located by its footer at the end of the file (read-only)."""

import struct
from typing import List, Optional, Tuple

from ..constants import (
    APE_FOOTER_SIZE,
    APE_IS_HEADER,
    APE_ITEM_BINARY,
    APE_MAGIC,
    APE_VERSION_2,
)
from ..errors import TagParseError
from ..models import Metadata
from ..tag.mappings import APE_MAPPING, StandardField
from ..utils import decode_latin1, decode_utf8, read_u32_le, split_terminated, tolerate
from .base import Codec


class ApeTagFooter:
    """32-byte footer (or header copy).

    Layout: "APETAGEX", version, tag size, item count, flags, 8 reserved
    bytes; integers little-endian. The tag size covers the items and the
    footer but not a leading header.
    """

    FORMAT = "<8sIIII8s"

    def __init__(self, version=APE_VERSION_2, tag_size=APE_FOOTER_SIZE, item_count=0, flags=0):
        self.version = version
        self.tag_size = tag_size
        self.item_count = item_count
        self.flags = flags

    @staticmethod
    def from_bytes(data: bytes) -> Optional["ApeTagFooter"]:
        if len(data) < APE_FOOTER_SIZE or not data.startswith(APE_MAGIC):
            return None
        _, version, tag_size, item_count, flags, _ = struct.unpack_from(ApeTagFooter.FORMAT, data)
        return ApeTagFooter(version, tag_size, item_count, flags)

    @property
    def is_header(self) -> bool:
        return bool(self.flags & APE_IS_HEADER)


class ApeTagItem:
    """Item: size, flags, NUL-terminated key, ``size`` bytes of value."""

    def __init__(self, key: str, value: bytes, flags: int = 0):
        self.key = key
        self.value = value
        self.flags = flags

    @staticmethod
    def from_bytes(data: bytes, offset: int, end: int) -> Tuple["ApeTagItem", int]:
        """Parse the item at ``offset``.

        Returns:
            Tuple of (item, offset after the item)
        """
        if offset + 8 > end:
            raise TagParseError(f"APE item header truncated at offset {offset}")
        size = read_u32_le(data, offset)
        flags = read_u32_le(data, offset + 4)
        key_start = offset + 8
        terminator = data.find(b"\x00", key_start, end)
        if terminator == -1:
            raise TagParseError(f"APE item key at offset {key_start} is not terminated")
        key = decode_latin1(data[key_start:terminator])
        value_start = terminator + 1
        if value_start + size > end:
            raise TagParseError(
                f"APE item {key!r} claims {size} bytes, only {end - value_start} remain"
            )
        return ApeTagItem(key, data[value_start:value_start + size], flags), value_start + size

    @property
    def is_binary(self) -> bool:
        return (self.flags & 0x06) == APE_ITEM_BINARY

    @property
    def text(self) -> str:
        value = self.value
        if value.endswith(b"\x00"):
            value = value[:-1]
        return decode_utf8(value)

    def __repr__(self):
        return f"ApeTagItem({self.key!r}, {len(self.value)} bytes)"


class ApeTag:
    """Footer plus items."""

    def __init__(self, items=None, footer: Optional[ApeTagFooter] = None):
        self.items: List[ApeTagItem] = items if items is not None else []
        self.footer = footer

    @staticmethod
    def find(data: bytes, strict: bool = False) -> Optional["ApeTag"]:
        """Parse the tag whose footer occupies the last 32 bytes.

        Returns:
            The tag, or None if there is no footer there
        """
        footer = ApeTagFooter.from_bytes(data[-APE_FOOTER_SIZE:])
        if footer is None or len(data) < APE_FOOTER_SIZE:
            return None
        if footer.is_header:
            tolerate("APE block at end of file is a header, not a footer", strict)
            return None

        footer_start = len(data) - APE_FOOTER_SIZE
        # APEv2 counts the footer in tag_size; some writers do not.
        candidates = [len(data) - footer.tag_size, footer_start - footer.tag_size]
        for start in candidates:
            if start < 0:
                continue
            items = _parse_exact(data, start, footer_start, footer.item_count)
            if items is not None:
                return ApeTag(items, footer)

        start = max(0, candidates[0])
        return ApeTag(_parse_tolerant(data, start, footer_start, footer.item_count, strict), footer)

    def get(self, key: str) -> Optional[ApeTagItem]:
        key = key.upper()
        for item in self.items:
            if item.key.upper() == key:
                return item
        return None

    def to_metadata(self) -> Metadata:
        values = {}
        for item in self.items:
            field = APE_MAPPING.field_for(item.key)
            if field is None or field is StandardField.COVER or item.is_binary:
                continue
            text = item.text
            if text:
                values[field.value] = text
        return Metadata(**values)

    def cover_item(self) -> Optional[ApeTagItem]:
        return self.get(APE_MAPPING.preferred_key(StandardField.COVER))


def _parse_exact(data: bytes, start: int, end: int, count: int) -> Optional[List[ApeTagItem]]:
    """Items if exactly ``count`` of them fill ``start``..``end``, else None."""
    items = []
    pos = start
    try:
        for _ in range(count):
            item, pos = ApeTagItem.from_bytes(data, pos, end)
            items.append(item)
    except TagParseError:
        return None
    return items if pos == end else None


def _parse_tolerant(data: bytes, start: int, end: int, count: int, strict: bool) -> List[ApeTagItem]:
    items = []
    pos = start
    for index in range(count):
        try:
            item, pos = ApeTagItem.from_bytes(data, pos, end)
        except TagParseError as e:
            tolerate(f"APE tag truncated after {index} of {count} items: {e}", strict)
            break
        items.append(item)
    return items


def split_cover_value(value: bytes) -> Tuple[str, bytes]:
    """Binary cover items hold ``filename NUL image-data``."""
    name, pos = split_terminated(value)
    return decode_utf8(name), value[pos:]


class ApeCodec(Codec):
    name = "ape"
    fields = tuple(
        field.value for field in APE_MAPPING.fields if field is not StandardField.COVER
    )

    def read(self, data: bytes) -> Metadata:
        tag = ApeTag.find(data, self.strict)
        if tag is None:
            return Metadata()
        return tag.to_metadata()

    def info(self, data: bytes):
        tag = ApeTag.find(data, self.strict)
        if tag is None:
            return {}
        result = {
            "tag_size": tag.footer.tag_size,
            "items": [item.key for item in tag.items],
        }
        cover = tag.cover_item()
        if cover is not None and cover.is_binary:
            filename, image = split_cover_value(cover.value)
            result["cover"] = f"{filename} ({len(image)} bytes)"
        return result
