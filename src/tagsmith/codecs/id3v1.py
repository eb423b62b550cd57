"""ID3v1 / ID3v1.1 tag (fixed 128-byte trailer)."""

import logging
import struct
from typing import Optional

from ..constants import ID3V1_MAGIC, ID3V1_NO_GENRE, ID3V1_SIZE
from ..errors import TagParseError
from ..fileio import read_tail
from ..models import Metadata
from ..tag.mappings import normalize_track, normalize_year
from ..utils import encode_fixed, fixed_string
from .base import Codec

# magic, title, artist, album, year, comment (28), zero byte, track, genre
ID3V1_FORMAT = "3s30s30s30s4s28sBBB"


class Id3v1Tag:
    """ID3v1 trailer.

    Layout (offsets into the 128-byte block):
        0   "TAG"
        3   title (30)
        33  artist (30)
        63  album (30)
        93  year (4)
        97  comment (30), or comment (28) + 0x00 + track for v1.1
        127 genre index
    """

    def __init__(
        self,
        title="",
        artist="",
        album="",
        year="",
        comment="",
        track=None,
        genre=ID3V1_NO_GENRE,
    ):
        self.title = title
        self.artist = artist
        self.album = album
        self.year = year
        self.comment = comment
        self.track = track
        self.genre = genre

    @staticmethod
    def from_bytes(block: bytes) -> "Id3v1Tag":
        if len(block) != ID3V1_SIZE or not block.startswith(ID3V1_MAGIC):
            raise TagParseError("Not an ID3v1 tag")

        if block[125] == 0 and block[126] != 0:
            comment = block[97:125]
            track = block[126]
        else:
            comment = block[97:127]
            track = None

        return Id3v1Tag(
            title=fixed_string(block[3:33]),
            artist=fixed_string(block[33:63]),
            album=fixed_string(block[63:93]),
            year=fixed_string(block[93:97]),
            comment=fixed_string(comment),
            track=track,
            genre=block[127],
        )

    @staticmethod
    def find(data: bytes) -> Optional["Id3v1Tag"]:
        """Parse the tag at the end of a file image, or None if absent."""
        if len(data) < ID3V1_SIZE or data[-ID3V1_SIZE:-ID3V1_SIZE + 3] != ID3V1_MAGIC:
            return None
        return Id3v1Tag.from_bytes(data[-ID3V1_SIZE:])

    @staticmethod
    def read_from_file(filename) -> Optional["Id3v1Tag"]:
        return Id3v1Tag.find(read_tail(filename, ID3V1_SIZE))

    def to_bytes(self) -> bytes:
        if self.track:
            return struct.pack(
                ID3V1_FORMAT,
                ID3V1_MAGIC,
                encode_fixed(self.title, 30),
                encode_fixed(self.artist, 30),
                encode_fixed(self.album, 30),
                encode_fixed(self.year, 4),
                encode_fixed(self.comment, 28),
                0,
                self.track,
                self.genre,
            )
        return (
            ID3V1_MAGIC
            + encode_fixed(self.title, 30)
            + encode_fixed(self.artist, 30)
            + encode_fixed(self.album, 30)
            + encode_fixed(self.year, 4)
            + encode_fixed(self.comment, 30)
            + bytes([self.genre])
        )

    @property
    def version(self) -> str:
        return "1.1" if self.track else "1.0"

    def to_metadata(self) -> Metadata:
        values = {
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "year": self.year,
            "comment": self.comment,
        }
        found = {name: value for name, value in values.items() if value}
        if self.track:
            found["track"] = str(self.track)
        return Metadata(**found)

    def apply(self, metadata: Metadata) -> None:
        """Merge the provided fields of a write request into this tag."""
        for name, value in metadata.text_updates().items():
            if name == "track":
                self.track = _track_byte(value)
            elif name == "year":
                self.year = normalize_year(value) if value else ""
            elif name in ("title", "artist", "album", "comment"):
                setattr(self, name, value or "")

    def __repr__(self):
        return f"Id3v1Tag(title={self.title!r}, artist={self.artist!r}, track={self.track!r})"


def _track_byte(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    number = normalize_track(value)
    if number.isdigit() and 0 < int(number) < 256:
        return int(number)
    logging.warning(f"Track {value!r} cannot be stored in an ID3v1 tag, dropping it")
    return None


class Id3v1Codec(Codec):
    name = "id3v1"
    fields = ("title", "artist", "album", "year", "comment", "track")

    def read(self, data: bytes) -> Metadata:
        tag = Id3v1Tag.find(data)
        if tag is None:
            return Metadata()
        return tag.to_metadata()

    def write(self, data: bytes, metadata: Metadata) -> bytes:
        tag = Id3v1Tag.find(data)
        if tag is None:
            raise TagParseError("no ID3v1 tag present")
        tag.apply(metadata)
        return data[:-ID3V1_SIZE] + tag.to_bytes()

    def version(self, data: bytes) -> str:
        tag = Id3v1Tag.find(data)
        return tag.version if tag else "1.0"
