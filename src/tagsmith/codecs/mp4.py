"""MP4 atom tree and iTunes-style ``ilst`` metadata (read-only)."""

from typing import Any, Dict, Iterator, List, Optional

from ..constants import (
    MP4_CONTAINERS,
    MP4_DATA_HEADER_SIZE,
    MP4_TYPE_BMP,
    MP4_TYPE_JPEG,
    MP4_TYPE_PNG,
)
from ..errors import TagParseError
from ..models import TEXT_FIELDS, CoverArt, Metadata
from ..tag.mappings import MP4_MAPPING, StandardField
from ..utils import decode_utf8, display_key, read_u16_be, read_u32_be, read_u64_be, tolerate
from .base import Codec

COVER_MIME_TYPES = {
    MP4_TYPE_JPEG: "image/jpeg",
    MP4_TYPE_PNG: "image/png",
    MP4_TYPE_BMP: "image/bmp",
}


class Mp4Atom:
    """Location of one atom inside a file image.

    Attributes:
        atom_type: Four raw bytes, compared exactly (b"\\xa9nam" etc.)
        offset: Position of the size field
        size: Total size including the header
        header_size: 8, or 16 with a 64-bit extended size
    """

    def __init__(self, atom_type: bytes, offset: int, size: int, header_size: int = 8):
        self.atom_type = atom_type
        self.offset = offset
        self.size = size
        self.header_size = header_size

    @staticmethod
    def parse(data: bytes, offset: int, end: int) -> "Mp4Atom":
        """Read the atom header at ``offset`` within a parent ending at ``end``.

        A size of 1 means a 64-bit size follows the type; a size of 0 means
        the atom extends to the end of its parent.

        Raises:
            TagParseError: If the header is truncated or the size is impossible
        """
        if offset + 8 > end:
            raise TagParseError(f"Atom header truncated at offset {offset}")
        size = read_u32_be(data, offset)
        atom_type = data[offset + 4:offset + 8]
        header_size = 8
        if size == 1:
            if offset + 16 > end:
                raise TagParseError(f"Extended atom size truncated at offset {offset}")
            size = read_u64_be(data, offset + 8)
            header_size = 16
        elif size == 0:
            size = end - offset
        if size < header_size or offset + size > end:
            raise TagParseError(
                f"Atom {display_key(atom_type)!r} at offset {offset} claims {size} bytes, "
                f"parent has {end - offset}"
            )
        return Mp4Atom(atom_type, offset, size, header_size)

    @property
    def data_offset(self) -> int:
        return self.offset + self.header_size

    @property
    def end(self) -> int:
        return self.offset + self.size

    def payload(self, data: bytes) -> bytes:
        return data[self.data_offset:self.end]

    def __repr__(self):
        return f"Mp4Atom({display_key(self.atom_type)!r}, offset={self.offset}, size={self.size})"


def iter_atoms(data: bytes, start: int, end: int, strict: bool = False) -> Iterator[Mp4Atom]:
    """Yield sibling atoms between ``start`` and ``end``."""
    pos = start
    while pos + 8 <= end:
        try:
            atom = Mp4Atom.parse(data, pos, end)
        except TagParseError as e:
            tolerate(f"Stopped reading MP4 atoms: {e}", strict)
            return
        yield atom
        pos = atom.end


def children_offset(data: bytes, atom: Mp4Atom) -> int:
    """Where an atom's children start.

    ISO ``meta`` atoms carry 4 bytes of version/flags before their children;
    QuickTime-style ones start directly with ``hdlr``.
    """
    if atom.atom_type == b"meta" and data[atom.data_offset + 4:atom.data_offset + 8] != b"hdlr":
        return atom.data_offset + 4
    return atom.data_offset


def find_ilst(data: bytes, start: int = 0, end: Optional[int] = None, strict: bool = False) -> Optional[Mp4Atom]:
    """Depth-first search for the ``ilst`` atom through container atoms."""
    if end is None:
        end = len(data)
    for atom in iter_atoms(data, start, end, strict):
        if atom.atom_type == b"ilst":
            return atom
        if atom.atom_type in MP4_CONTAINERS:
            found = find_ilst(data, children_offset(data, atom), atom.end, strict)
            if found is not None:
                return found
    return None


class Mp4Item:
    """A metadata item: key atom wrapping a ``data`` atom."""

    def __init__(self, key: bytes, data_type: int, value: bytes):
        self.key = key
        self.data_type = data_type
        self.value = value

    @property
    def text(self) -> str:
        return decode_utf8(self.value).rstrip("\x00")

    def __repr__(self):
        return f"Mp4Item({display_key(self.key)!r}, type={self.data_type}, {len(self.value)} bytes)"


def parse_ilst(data: bytes, ilst: Mp4Atom, strict: bool = False) -> List[Mp4Item]:
    """Items of an ``ilst`` atom in file order.

    The value of an item is its first ``data`` child after the 4-byte type
    indicator and 4-byte locale.
    """
    items = []
    for item in iter_atoms(data, ilst.data_offset, ilst.end, strict):
        for child in iter_atoms(data, item.data_offset, item.end, strict):
            if child.atom_type != b"data":
                continue
            if child.size < MP4_DATA_HEADER_SIZE:
                tolerate(f"Short data atom in {display_key(item.atom_type)!r}", strict)
                break
            data_type = read_u32_be(data, child.data_offset) & 0x00FFFFFF
            value = data[child.data_offset + 8:child.end]
            items.append(Mp4Item(item.atom_type, data_type, value))
            break
    return items


def items_to_metadata(items: List[Mp4Item]) -> Metadata:
    values: Dict[str, Any] = {}
    for item in items:
        field = MP4_MAPPING.field_for(item.key)
        if field is None:
            continue
        if field is StandardField.TRACK:
            if len(item.value) >= 6:
                number = read_u16_be(item.value, 2)
                if number:
                    values["track"] = str(number)
        elif field is StandardField.COVER:
            if "cover" not in values and item.value:
                values["cover"] = CoverArt(
                    data=item.value,
                    mime_type=COVER_MIME_TYPES.get(item.data_type, "image/jpeg"),
                )
        else:
            text = item.text
            if text:
                values[field.value] = text
    return Metadata(**values)


class Mp4Codec(Codec):
    name = "mp4"
    fields = TEXT_FIELDS + ("cover",)

    def read(self, data: bytes) -> Metadata:
        ilst = find_ilst(data, strict=self.strict)
        if ilst is None:
            return Metadata()
        return items_to_metadata(parse_ilst(data, ilst, self.strict))

    def info(self, data: bytes) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for atom in iter_atoms(data, 0, len(data), self.strict):
            if atom.atom_type == b"ftyp" and atom.size >= 12:
                result["brand"] = display_key(data[atom.data_offset:atom.data_offset + 4]).strip()
            elif atom.atom_type == b"moov":
                result.update(_movie_header(data, atom, self.strict))
        return result


def _movie_header(data: bytes, moov: Mp4Atom, strict: bool) -> Dict[str, Any]:
    for atom in iter_atoms(data, moov.data_offset, moov.end, strict):
        if atom.atom_type != b"mvhd":
            continue
        pos = atom.data_offset
        try:
            if data[pos] == 1:
                timescale = read_u32_be(data, pos + 20)
                duration = read_u64_be(data, pos + 24)
            else:
                timescale = read_u32_be(data, pos + 12)
                duration = read_u32_be(data, pos + 16)
        except (TagParseError, IndexError) as e:
            tolerate(f"Unreadable mvhd atom: {e}", strict)
            return {}
        if timescale:
            return {"duration": round(duration / timescale, 3)}
    return {}
