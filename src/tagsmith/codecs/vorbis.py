"""Vorbis comment block, shared by FLAC, Ogg Vorbis and Opus."""

import logging
import struct
from typing import Iterator, List, NamedTuple, Optional, Tuple

from ..errors import TagParseError
from ..models import Metadata
from ..tag.mappings import VORBIS_MAPPING, StandardField
from ..utils import decode_utf8, read_u32_le, tolerate


class VorbisEntry(NamedTuple):
    """One comment entry.

    ``raw`` holds the bytes read from the file and is written back as is;
    entries created by an update have no ``raw``. Entries without '=' have
    no ``key``.
    """

    key: Optional[str]
    value: str
    raw: Optional[bytes] = None

    def to_bytes(self) -> bytes:
        if self.raw is not None:
            return self.raw
        return f"{self.key}={self.value}".encode("utf-8")


class VorbisComment:
    """Vendor string plus an ordered list of ``FIELD=value`` entries.

    Field names are matched ignoring case. Entries are kept in file order and
    duplicates are allowed. Entries an update does not touch are written back
    byte for byte, including ones that are not valid UTF-8 or lack '='.

    Attributes:
        vendor: Encoder identification string
        entries: List of VorbisEntry in file order
        trailing: Bytes after the last entry (the Vorbis framing bit, or
            extra data in OpusTags); preserved on rewrite
    """

    def __init__(self, vendor: str = "", comments=None, trailing: bytes = b""):
        self.vendor = vendor
        self.entries: List[VorbisEntry] = [VorbisEntry(key, value) for key, value in comments or []]
        self.trailing = trailing

    @property
    def comments(self) -> List[Tuple[str, str]]:
        """(field, value) pairs of the entries that have a field name."""
        return [(entry.key, entry.value) for entry in self.entries if entry.key is not None]

    @staticmethod
    def from_bytes(data: bytes, strict: bool = False) -> "VorbisComment":
        """Decode a comment block.

        A truncated entry list keeps the entries read so far (or raises in
        strict mode). A truncated vendor string always raises.

        Raises:
            TagParseError: If the vendor string or entry count is unreadable
        """
        vendor_len = read_u32_le(data, 0)
        if 4 + vendor_len > len(data):
            raise TagParseError(
                f"Vendor string claims {vendor_len} bytes, only {len(data) - 4} present"
            )
        vendor = decode_utf8(data[4:4 + vendor_len])
        pos = 4 + vendor_len
        count = read_u32_le(data, pos)
        pos += 4

        comment = VorbisComment(vendor)
        for index in range(count):
            if pos + 4 > len(data):
                tolerate(f"Vorbis comment list truncated after {index} of {count} entries", strict)
                break
            length = read_u32_le(data, pos)
            if pos + 4 + length > len(data):
                tolerate(f"Vorbis comment {index} claims {length} bytes past end of block", strict)
                break
            raw = data[pos + 4:pos + 4 + length]
            pos += 4 + length
            key, sep, value = decode_utf8(raw).partition("=")
            if not sep:
                logging.debug(f"Keeping Vorbis comment without '=' as is: {raw!r}")
                comment.entries.append(VorbisEntry(None, key, raw))
                continue
            comment.entries.append(VorbisEntry(key, value, raw))

        comment.trailing = data[pos:]
        return comment

    def to_bytes(self) -> bytes:
        """Encode vendor and entries (``trailing`` is not included)."""
        vendor = self.vendor.encode("utf-8")
        parts = [struct.pack("<I", len(vendor)), vendor, struct.pack("<I", len(self.entries))]
        for entry in self.entries:
            encoded = entry.to_bytes()
            parts.append(struct.pack("<I", len(encoded)))
            parts.append(encoded)
        return b"".join(parts)

    def get(self, field: str) -> Optional[str]:
        """First value stored for ``field``."""
        for value in self.get_all(field):
            return value
        return None

    def get_all(self, field: str) -> List[str]:
        field = field.upper()
        return [value for key, value in self.comments if key.upper() == field]

    def set(self, field: str, value: str) -> None:
        """Replace every entry for ``field`` with a single upper-cased entry at the end."""
        self.remove(field)
        self.entries.append(VorbisEntry(field.upper(), value))

    def remove(self, field: str) -> None:
        field = field.upper()
        self.entries = [
            entry for entry in self.entries if entry.key is None or entry.key.upper() != field
        ]

    def keys(self) -> List[str]:
        return [key for key, _ in self.comments]

    def to_metadata(self) -> Metadata:
        values = {}
        for key, value in self.comments:
            field = VORBIS_MAPPING.field_for(key)
            if field is None or field is StandardField.COVER or not value:
                continue
            values[field.value] = value
        return Metadata(**values)

    def apply(self, metadata: Metadata) -> None:
        """Merge the provided text fields of a write request.

        Every alias of a field is removed before the preferred key is
        written, so a stale YEAR cannot shadow a new DATE. A field that
        already holds exactly the requested entry is left where it is.
        """
        for name, value in metadata.text_updates().items():
            field = StandardField(name)
            keys = VORBIS_MAPPING.keys_for(field)
            preferred = VORBIS_MAPPING.preferred_key(field)
            names = {key.upper() for key in keys}
            current = [(key, existing) for key, existing in self.comments if key.upper() in names]
            if current == [(preferred, value)]:
                continue
            for key in keys:
                self.remove(key)
            if value is not None:
                self.entries.append(VorbisEntry(preferred, value))

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.comments)

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self):
        return f"VorbisComment(vendor={self.vendor!r}, {len(self.entries)} entries)"
