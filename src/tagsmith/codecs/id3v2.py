"""ID3v2 tag: header, frame stream and rewrite."""

import logging
import struct
from typing import Callable, Iterable, List, Optional

from ..constants import (
    FRONT_COVER,
    ID3V2_FLAG_EXPERIMENTAL,
    ID3V2_FLAG_EXTENDED,
    ID3V2_FLAG_FOOTER,
    ID3V2_FLAG_UNSYNC,
    ID3V2_FRAME_DATA_LENGTH,
    ID3V2_FRAME_UNSYNC,
    ID3V2_HEADER_SIZE,
    ID3V2_MAGIC,
    ID3V2_SUPPORTED_MAJOR,
)
from ..errors import TagParseError, UnsupportedFormatError
from ..models import TEXT_FIELDS, CoverArt, Metadata
from ..tag.mappings import ID3V2_MAPPING, ID3V22_MAPPING, StandardField, year_frame_id
from ..utils import (
    decode_synchsafe,
    display_key,
    encode_synchsafe,
    read_u16_be,
    read_u24_be,
    read_u32_be,
    remove_unsync,
    tolerate,
)
from .base import Codec
from .frames import (
    build_apic,
    build_lang_frame,
    build_text_frame,
    decode_text_frame,
    parse_apic,
    parse_lang_frame,
    parse_pic,
)


class Id3v2Header:
    """The 10-byte tag header: "ID3", major, revision, flags, synchsafe size.

    ``size`` excludes the header itself and the optional v2.4 footer.
    """

    FORMAT = ">3sBBB4s"

    def __init__(self, major=4, revision=0, flags=0, size=0):
        self.major = major
        self.revision = revision
        self.flags = flags
        self.size = size

    @staticmethod
    def from_bytes(data: bytes) -> Optional["Id3v2Header"]:
        """Parse the header at the start of ``data``, or None if there is none."""
        if len(data) < ID3V2_HEADER_SIZE or not data.startswith(ID3V2_MAGIC):
            return None
        magic, major, revision, flags, size = struct.unpack_from(Id3v2Header.FORMAT, data)
        return Id3v2Header(major, revision, flags, decode_synchsafe(size))

    def to_bytes(self) -> bytes:
        return struct.pack(
            self.FORMAT,
            ID3V2_MAGIC,
            self.major,
            self.revision,
            self.flags,
            encode_synchsafe(self.size),
        )

    @property
    def unsynchronised(self) -> bool:
        return bool(self.flags & ID3V2_FLAG_UNSYNC)

    @property
    def has_extended_header(self) -> bool:
        return bool(self.flags & ID3V2_FLAG_EXTENDED) and self.major >= 3

    @property
    def has_footer(self) -> bool:
        return bool(self.flags & ID3V2_FLAG_FOOTER) and self.major >= 4

    @property
    def tag_size(self) -> int:
        """Bytes from the start of the file to the end of the tag."""
        footer = ID3V2_HEADER_SIZE if self.has_footer else 0
        return ID3V2_HEADER_SIZE + self.size + footer

    @property
    def version(self) -> str:
        return f"2.{self.major}"


class Id3Frame:
    """A single frame: identifier, flags and raw payload.

    The payload is kept exactly as stored so frames that are not rewritten
    go back into the file unchanged.
    """

    def __init__(self, frame_id: bytes, data: bytes, flags: int = 0):
        self.frame_id = frame_id
        self.data = data
        self.flags = flags

    def payload(self, major: int) -> bytes:
        """Payload with v2.4 data-length indicator and unsynchronisation undone."""
        data = self.data
        if major >= 4:
            if self.flags & ID3V2_FRAME_DATA_LENGTH:
                data = data[4:]
            if self.flags & ID3V2_FRAME_UNSYNC:
                data = remove_unsync(data)
        return data

    def to_bytes(self, major: int) -> bytes:
        if major >= 4:
            size = encode_synchsafe(len(self.data))
        else:
            size = struct.pack(">I", len(self.data))
        return self.frame_id + size + struct.pack(">H", self.flags) + self.data

    def __repr__(self):
        return f"Id3Frame({display_key(self.frame_id)!r}, {len(self.data)} bytes)"


class Id3v2Tag:
    """Parsed ID3v2 tag.

    Attributes:
        header: Tag header as read from the file
        frames: Frames in file order; duplicates are kept
        end: Offset of the first byte after the tag in the original file
    """

    def __init__(self, header: Optional[Id3v2Header] = None, frames=None, end: int = 0):
        self.header = header or Id3v2Header()
        self.frames: List[Id3Frame] = frames if frames is not None else []
        self.end = end

    @property
    def major(self) -> int:
        return self.header.major

    @property
    def mapping(self):
        return ID3V22_MAPPING if self.major == 2 else ID3V2_MAPPING

    @staticmethod
    def from_bytes(data: bytes, strict: bool = False) -> Optional["Id3v2Tag"]:
        """Parse the tag at the start of a file image.

        Returns:
            The tag, or None if the data does not start with an ID3v2 header
        """
        header = Id3v2Header.from_bytes(data)
        if header is None:
            return None
        tag = Id3v2Tag(header, end=header.tag_size)

        if header.major not in ID3V2_SUPPORTED_MAJOR:
            tolerate(f"Unsupported ID3v2 version {header.version}, ignoring frames", strict)
            return tag

        body_end = ID3V2_HEADER_SIZE + header.size
        if body_end > len(data):
            tolerate(
                f"ID3v2 tag claims {header.size} bytes, file holds only "
                f"{len(data) - ID3V2_HEADER_SIZE}",
                strict,
            )
        body = data[ID3V2_HEADER_SIZE:body_end]
        if header.unsynchronised and header.major < 4:
            body = remove_unsync(body)

        pos = 0
        if header.has_extended_header:
            if header.major == 3:
                pos = read_u32_be(body, 0) + 4
            else:
                pos = decode_synchsafe(body[:4])

        tag.frames = list(_iter_frames(body, pos, header.major, strict))
        return tag

    def frames_size(self) -> int:
        return sum(ID3V2_HEADER_SIZE + len(frame.data) for frame in self.frames)

    def to_bytes(self, padding: int = 0) -> bytes:
        """Serialize as a new tag (no extended header, footer or unsync)."""
        if self.major == 2:
            raise UnsupportedFormatError("ID3v2.2 tags cannot be written")
        body = b"".join(frame.to_bytes(self.major) for frame in self.frames)
        header = Id3v2Header(
            self.major,
            self.header.revision,
            self.header.flags & ID3V2_FLAG_EXPERIMENTAL,
            len(body) + padding,
        )
        return header.to_bytes() + body + b"\x00" * padding

    def to_metadata(self, strict: bool = False) -> Metadata:
        """Map frames to canonical fields; later frames override earlier ones."""
        values = {}
        covers: List[CoverArt] = []
        for frame in self.frames:
            field = self.mapping.field_for(frame.frame_id)
            if field is None:
                continue
            payload = frame.payload(self.major)
            try:
                if field is StandardField.COVER:
                    covers.append(parse_pic(payload) if self.major == 2 else parse_apic(payload))
                    continue
                if field in (StandardField.COMMENT, StandardField.LYRICS):
                    value = parse_lang_frame(payload)[2] or None
                else:
                    value = decode_text_frame(payload)
            except TagParseError as e:
                tolerate(f"Skipping malformed {display_key(frame.frame_id)} frame: {e}", strict)
                continue
            if value is not None:
                values[field.value] = value

        if covers:
            front = [cover for cover in covers if cover.picture_type == FRONT_COVER]
            values["cover"] = front[0] if front else covers[0]
        return Metadata(**values)

    def apply(self, metadata: Metadata, language: str) -> None:
        """Merge the provided fields of a write request into the frame list."""
        for name, value in metadata.text_updates().items():
            field = StandardField(name)
            ids = self.mapping.keys_for(field)
            if value is None:
                self._replace(lambda f: f.frame_id in ids, None)
                continue

            if field is StandardField.YEAR:
                frame_id = year_frame_id(self.major)
            else:
                frame_id = ids[0]
            if field in (StandardField.COMMENT, StandardField.LYRICS):
                lang = self._existing_language(frame_id) or language
                data = build_lang_frame(value, self.major, lang)
            else:
                data = build_text_frame(value, self.major)
            self._replace(lambda f: f.frame_id in ids, Id3Frame(frame_id, data))

        if metadata.has_cover_update():
            if metadata.cover is None:
                self.remove_covers()
            else:
                self.set_cover(metadata.cover)

    def set_cover(self, cover: CoverArt) -> None:
        """Replace pictures of the same picture type with ``cover``."""

        def same_type(frame):
            if frame.frame_id != b"APIC":
                return False
            try:
                return parse_apic(frame.payload(self.major)).picture_type == cover.picture_type
            except TagParseError:
                return False

        self._replace(same_type, Id3Frame(b"APIC", build_apic(cover, self.major)))

    def remove_covers(self) -> None:
        self._replace(lambda f: f.frame_id == b"APIC", None)

    def _existing_language(self, frame_id: bytes) -> Optional[str]:
        for frame in self.frames:
            if frame.frame_id == frame_id:
                try:
                    return parse_lang_frame(frame.payload(self.major))[0] or None
                except TagParseError:
                    return None
        return None

    def _replace(self, match: Callable[[Id3Frame], bool], frame: Optional[Id3Frame]) -> None:
        """Drop matching frames; put ``frame`` where the first one was (or at the end)."""
        kept = []
        position = None
        for existing in self.frames:
            if match(existing):
                if position is None:
                    position = len(kept)
                continue
            kept.append(existing)
        if frame is not None:
            kept.insert(len(kept) if position is None else position, frame)
        self.frames = kept

    def __repr__(self):
        return f"Id3v2Tag(v{self.header.version}, {len(self.frames)} frames)"


def _iter_frames(body: bytes, pos: int, major: int, strict: bool) -> Iterable[Id3Frame]:
    id_size = 3 if major == 2 else 4
    header_size = 6 if major == 2 else ID3V2_HEADER_SIZE

    while pos + header_size <= len(body):
        frame_id = body[pos:pos + id_size]
        if frame_id == b"\x00" * id_size:
            break  # padding

        if major == 2:
            size = read_u24_be(body, pos + 3)
            flags = 0
        else:
            if major == 4:
                size = decode_synchsafe(body[pos + 4:pos + 8])
            else:
                size = read_u32_be(body, pos + 4)
            flags = read_u16_be(body, pos + 8)

        start = pos + header_size
        if start + size > len(body):
            tolerate(
                f"Frame {display_key(frame_id)} claims {size} bytes, "
                f"only {len(body) - start} remain in tag",
                strict,
            )
            break

        yield Id3Frame(frame_id, body[start:start + size], flags)
        pos = start + size


class Id3v2Codec(Codec):
    name = "id3v2"
    fields = TEXT_FIELDS + ("cover",)

    def read(self, data: bytes) -> Metadata:
        tag = Id3v2Tag.from_bytes(data, self.strict)
        if tag is None:
            return Metadata()
        return tag.to_metadata(self.strict)

    def write(self, data: bytes, metadata: Metadata) -> bytes:
        tag = self._load(data)
        tag.apply(metadata, self.language)
        return self._rebuild(data, tag)

    def write_cover(self, data: bytes, cover: CoverArt) -> bytes:
        tag = self._load(data)
        tag.set_cover(cover)
        return self._rebuild(data, tag)

    def remove_cover(self, data: bytes) -> bytes:
        tag = self._load(data)
        tag.remove_covers()
        return self._rebuild(data, tag)

    def version(self, data: bytes) -> str:
        header = Id3v2Header.from_bytes(data)
        return header.version if header else self.name

    def info(self, data: bytes):
        tag = Id3v2Tag.from_bytes(data, self.strict)
        if tag is None:
            return {}
        return {
            "tag_size": tag.end,
            "frames": len(tag.frames),
            "frame_ids": sorted({display_key(frame.frame_id) for frame in tag.frames}),
        }

    def _load(self, data: bytes) -> Id3v2Tag:
        tag = Id3v2Tag.from_bytes(data, self.strict)
        if tag is None:
            raise TagParseError("no ID3v2 tag present")
        if tag.major == 2:
            raise UnsupportedFormatError("ID3v2.2 tags are read-only")
        if tag.major not in ID3V2_SUPPORTED_MAJOR:
            raise UnsupportedFormatError(f"Cannot write ID3v2 version {tag.header.version}")
        return tag

    def _rebuild(self, data: bytes, tag: Id3v2Tag) -> bytes:
        """New tag followed by the original audio.

        The tag keeps its previous size when the frames still fit, otherwise
        it grows by the configured padding.
        """
        frames_size = tag.frames_size()
        if frames_size <= tag.header.size:
            padding = tag.header.size - frames_size
        else:
            padding = self.padding
        logging.debug(f"Rebuilding ID3v2.{tag.major} tag: {frames_size} bytes of frames")
        return tag.to_bytes(padding) + data[tag.end:]
