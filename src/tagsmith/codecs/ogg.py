"""Ogg page framing and the comment header of Ogg Vorbis streams.

The comment packet starts on the page with sequence number 1. On rewrite
the header packets sharing those pages are re-paginated with fresh segment
tables and CRCs; all other pages are copied through unchanged unless the
page count changed, in which case the stream's later pages are renumbered.
"""

import logging
import struct
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..constants import (
    OGG_FLAG_CONTINUED,
    OGG_FLAG_FIRST,
    OGG_FLAG_LAST,
    OGG_HEADER_SIZE,
    OGG_MAGIC,
    OGG_MAX_SEGMENTS,
    VORBIS_COMMENT_MAGIC,
    VORBIS_FRAMING_BIT,
)
from ..errors import TagParseError, UnsupportedFormatError
from ..models import TEXT_FIELDS, Metadata
from ..utils import tolerate
from .base import Codec
from .vorbis import VorbisComment

# capture pattern, version, header type, granule, serial, sequence, crc, segment count
OGG_PAGE_FORMAT = "<4sBBqIIIB"
OGG_CRC_OFFSET = 22


def _make_crc_table() -> List[int]:
    table = []
    for i in range(256):
        crc = i << 24
        for _ in range(8):
            if crc & 0x80000000:
                crc = ((crc << 1) & 0xFFFFFFFF) ^ 0x04C11DB7
            else:
                crc = (crc << 1) & 0xFFFFFFFF
        table.append(crc)
    return table


CRC_TABLE = _make_crc_table()


def ogg_crc32(data: bytes) -> int:
    """CRC-32 as used by Ogg (polynomial 0x04C11DB7, no reflection, no final xor)."""
    crc = 0
    for byte in data:
        crc = ((crc << 8) & 0xFFFFFFFF) ^ CRC_TABLE[((crc >> 24) ^ byte) & 0xFF]
    return crc


def lacing_values(length: int) -> List[int]:
    """Segment table entries for one complete packet of ``length`` bytes.

    A packet ends with the first value below 255, so a length that is a
    multiple of 255 (including 0) ends with an explicit 0.
    """
    return [255] * (length // 255) + [length % 255]


class OggPage:
    """A single Ogg page.

    Attributes:
        segments: Lacing values (the segment table)
        data: Page payload, ``sum(segments)`` bytes
        offset: Position of the page in the file it was read from
    """

    def __init__(
        self,
        version=0,
        header_type=0,
        granule_position=0,
        serial=0,
        sequence=0,
        crc=0,
        segments=None,
        data=b"",
        offset=0,
    ):
        self.version = version
        self.header_type = header_type
        self.granule_position = granule_position
        self.serial = serial
        self.sequence = sequence
        self.crc = crc
        self.segments: List[int] = segments if segments is not None else []
        self.data = data
        self.offset = offset

    @staticmethod
    def from_bytes(data: bytes, offset: int = 0) -> "OggPage":
        """Parse the page starting at ``offset``.

        Raises:
            TagParseError: On a missing capture pattern or a truncated page
        """
        if offset + OGG_HEADER_SIZE > len(data):
            raise TagParseError(f"Ogg page header truncated at offset {offset}")
        (
            magic,
            version,
            header_type,
            granule,
            serial,
            sequence,
            crc,
            count,
        ) = struct.unpack_from(OGG_PAGE_FORMAT, data, offset)
        if magic != OGG_MAGIC:
            raise TagParseError(f"Missing OggS capture pattern at offset {offset}")

        table_start = offset + OGG_HEADER_SIZE
        body_start = table_start + count
        if body_start > len(data):
            raise TagParseError(f"Ogg segment table truncated at offset {offset}")
        segments = list(data[table_start:body_start])
        body_end = body_start + sum(segments)
        if body_end > len(data):
            raise TagParseError(
                f"Ogg page at offset {offset} claims {body_end - body_start} payload bytes, "
                f"only {len(data) - body_start} remain"
            )
        return OggPage(
            version,
            header_type,
            granule,
            serial,
            sequence,
            crc,
            segments,
            data[body_start:body_end],
            offset,
        )

    def to_bytes(self) -> bytes:
        """Serialize with a freshly computed CRC (also stored in ``crc``)."""
        if len(self.segments) > OGG_MAX_SEGMENTS:
            raise TagParseError(f"Ogg page has {len(self.segments)} segments (max 255)")
        header = struct.pack(
            OGG_PAGE_FORMAT,
            OGG_MAGIC,
            self.version,
            self.header_type,
            self.granule_position,
            self.serial,
            self.sequence,
            0,
            len(self.segments),
        )
        page = header + bytes(self.segments) + self.data
        self.crc = ogg_crc32(page)
        return page[:OGG_CRC_OFFSET] + struct.pack("<I", self.crc) + page[OGG_CRC_OFFSET + 4:]

    def crc_valid(self) -> bool:
        stored = self.crc
        computed = OggPage(
            self.version,
            self.header_type,
            self.granule_position,
            self.serial,
            self.sequence,
            0,
            self.segments,
            self.data,
        )
        computed.to_bytes()
        return computed.crc == stored

    @property
    def size(self) -> int:
        return OGG_HEADER_SIZE + len(self.segments) + len(self.data)

    @property
    def continued(self) -> bool:
        return bool(self.header_type & OGG_FLAG_CONTINUED)

    @property
    def first(self) -> bool:
        return bool(self.header_type & OGG_FLAG_FIRST)

    @property
    def last(self) -> bool:
        return bool(self.header_type & OGG_FLAG_LAST)

    def packets(self) -> List[Tuple[bytes, bool]]:
        """Split the payload into packet pieces.

        Returns:
            List of (bytes, complete) where complete is False for a piece
            that continues on the next page
        """
        pieces = []
        pos = 0
        start = 0
        for value in self.segments:
            pos += value
            if value < 255:
                pieces.append((self.data[start:pos], True))
                start = pos
        if start < pos:
            pieces.append((self.data[start:pos], False))
        return pieces

    def __repr__(self):
        return (
            f"OggPage(serial={self.serial}, sequence={self.sequence}, "
            f"granule={self.granule_position}, {len(self.data)} bytes)"
        )


def iter_pages(data: bytes, strict: bool = False) -> Iterator[OggPage]:
    """Yield pages from the start of ``data``, stopping at the first bad page."""
    pos = 0
    while pos < len(data):
        try:
            page = OggPage.from_bytes(data, pos)
        except TagParseError as e:
            tolerate(f"Stopped reading Ogg pages: {e}", strict)
            return
        yield page
        pos += page.size


def paginate(
    packets: List[bytes], serial: int, sequence: int, granule: int = 0
) -> List[OggPage]:
    """Lay packets out over as many pages as their segments need.

    Pages on which no packet ends get granule position -1; the last page
    gets ``granule``, the others 0.
    """
    entries = []
    for packet in packets:
        values = lacing_values(len(packet))
        for k, value in enumerate(values):
            entries.append((value, packet[k * 255:k * 255 + value], k == len(values) - 1))

    pages = []
    continued = False
    for start in range(0, len(entries), OGG_MAX_SEGMENTS):
        chunk = entries[start:start + OGG_MAX_SEGMENTS]
        ends_packet = any(ends for _, _, ends in chunk)
        pages.append(
            OggPage(
                header_type=OGG_FLAG_CONTINUED if continued else 0,
                granule_position=0 if ends_packet else -1,
                serial=serial,
                sequence=sequence + len(pages),
                segments=[value for value, _, _ in chunk],
                data=b"".join(piece for _, piece, _ in chunk),
            )
        )
        continued = not chunk[-1][2]
    if pages:
        pages[-1].granule_position = granule
    return pages


class OggStream:
    """All pages of an Ogg file together with the original bytes."""

    def __init__(self, data: bytes, pages: List[OggPage]):
        self.data = data
        self.pages = pages

    @staticmethod
    def from_bytes(data: bytes, strict: bool = False) -> "OggStream":
        pages = list(iter_pages(data, strict))
        if not pages:
            raise TagParseError("No Ogg pages found")
        return OggStream(data, pages)

    @property
    def serial(self) -> int:
        return self.pages[0].serial

    def locate_headers(self, count: int) -> Tuple[List[bytes], int, int, bytes]:
        """Reassemble ``count`` packets starting on the page with sequence 1.

        Returns:
            Tuple of (packets, index of the first page, index after the last
            page, bytes of a packet left unfinished on the last page). The
            packet list holds every packet completed on those pages, which
            can be more than ``count``.

        Raises:
            TagParseError: If there is no such page or the packets are cut short
        """
        first = None
        for index, page in enumerate(self.pages):
            if page.serial == self.serial and page.sequence == 1:
                first = index
                break
        if first is None:
            raise TagParseError("No Ogg page with sequence number 1 (comment header)")

        packets: List[bytes] = []
        current = b""
        index = first
        while index < len(self.pages) and len(packets) < count:
            page = self.pages[index]
            index += 1
            if page.serial != self.serial:
                continue
            pieces = page.packets()
            if page.continued and index - 1 == first and pieces:
                pieces = pieces[1:]
            for piece, complete in pieces:
                current += piece
                if complete:
                    packets.append(current)
                    current = b""

        if len(packets) < count:
            raise TagParseError(f"Ogg stream ended after {len(packets)} of {count} header packets")
        return packets, first, index, current


class OggCodec(Codec):
    """Vorbis comment carried in an Ogg stream.

    Subclasses set the comment packet magic, how many header packets share
    pages with it and whether a framing bit follows the comments.
    """

    name = "ogg"
    fields = TEXT_FIELDS
    magic = VORBIS_COMMENT_MAGIC
    header_packets = 2
    framing = True

    def read(self, data: bytes) -> Metadata:
        try:
            packets = OggStream.from_bytes(data, self.strict).locate_headers(1)[0]
            comment = self._parse_comment(packets[0])
        except TagParseError as e:
            tolerate(f"No readable {self.name} comment header: {e}", self.strict)
            return Metadata()
        return comment.to_metadata()

    def read_comment(self, data: bytes) -> VorbisComment:
        packets = OggStream.from_bytes(data, self.strict).locate_headers(1)[0]
        return self._parse_comment(packets[0])

    def write(self, data: bytes, metadata: Metadata) -> bytes:
        stream = OggStream.from_bytes(data, self.strict)
        packets, first, end, leftover = stream.locate_headers(self.header_packets)
        if leftover:
            raise TagParseError("Comment header pages also carry audio data")
        old_pages = stream.pages[first:end]
        if any(page.serial != stream.serial for page in old_pages):
            raise UnsupportedFormatError("Multiplexed Ogg streams cannot be rewritten")

        comment = self._parse_comment(packets[0])
        comment.apply(metadata)
        trailing = comment.trailing
        if self.framing and not trailing:
            trailing = VORBIS_FRAMING_BIT
        packets[0] = self.magic + comment.to_bytes() + trailing

        new_pages = paginate(
            packets,
            stream.serial,
            old_pages[0].sequence,
            old_pages[-1].granule_position,
        )
        delta = len(new_pages) - len(old_pages)
        logging.debug(
            f"Rewriting {len(old_pages)} Ogg header page(s) as {len(new_pages)} page(s)"
        )

        out = [data[:old_pages[0].offset]]
        out.extend(page.to_bytes() for page in new_pages)
        tail_start = old_pages[-1].offset + old_pages[-1].size
        if delta == 0:
            out.append(data[tail_start:])
        else:
            for page in stream.pages[end:]:
                if page.serial == stream.serial:
                    page.sequence += delta
                    out.append(page.to_bytes())
                else:
                    out.append(data[page.offset:page.offset + page.size])
            last = stream.pages[-1]
            out.append(data[max(tail_start, last.offset + last.size):])
        return b"".join(out)

    def info(self, data: bytes) -> Dict[str, Any]:
        stream = OggStream.from_bytes(data, self.strict)
        result: Dict[str, Any] = {
            "serial": stream.serial,
            "pages": len(stream.pages),
        }
        result.update(self._stream_info(stream))
        return result

    def _stream_info(self, stream: OggStream) -> Dict[str, Any]:
        """Vorbis identification header: channels, sample rate, duration."""
        ident = stream.pages[0].data
        if len(ident) < 16 or not ident.startswith(b"\x01vorbis"):
            return {}
        channels, sample_rate = struct.unpack_from("<BI", ident, 11)
        result: Dict[str, Any] = {"channels": channels, "sample_rate": sample_rate}
        granule = last_granule(stream)
        if sample_rate and granule is not None:
            result["duration"] = round(granule / sample_rate, 3)
        return result

    def _parse_comment(self, packet: bytes) -> VorbisComment:
        if not packet.startswith(self.magic):
            raise TagParseError(f"Comment packet does not start with {self.magic!r}")
        return VorbisComment.from_bytes(packet[len(self.magic):], self.strict)


def last_granule(stream: OggStream) -> Optional[int]:
    for page in reversed(stream.pages):
        if page.serial == stream.serial and page.granule_position >= 0:
            return page.granule_position
    return None
