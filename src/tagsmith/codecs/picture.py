"""FLAC PICTURE block and the picture type codes shared with ID3 APIC."""

import struct
from enum import IntEnum

from ..constants import DEFAULT_MIME_TYPE, FRONT_COVER
from ..errors import TagParseError
from ..images import inspect_image
from ..models import CoverArt
from ..utils import decode_latin1, decode_utf8, read_u32_be


class PictureType(IntEnum):
    OTHER = 0
    FILE_ICON = 1
    OTHER_FILE_ICON = 2
    COVER_FRONT = 3
    COVER_BACK = 4
    LEAFLET_PAGE = 5
    MEDIA = 6
    LEAD_ARTIST = 7
    ARTIST = 8
    CONDUCTOR = 9
    BAND = 10
    COMPOSER = 11
    LYRICIST = 12
    RECORDING_LOCATION = 13
    DURING_RECORDING = 14
    DURING_PERFORMANCE = 15
    SCREEN_CAPTURE = 16
    BRIGHT_COLORED_FISH = 17
    ILLUSTRATION = 18
    BAND_LOGOTYPE = 19
    PUBLISHER_LOGOTYPE = 20

    @property
    def label(self) -> str:
        return PICTURE_TYPE_LABELS[self]

    @classmethod
    def describe(cls, value: int) -> str:
        """Human-readable name for a picture type code."""
        try:
            return cls(value).label
        except ValueError:
            return f"Unknown ({value})"


PICTURE_TYPE_LABELS = {
    PictureType.OTHER: "Other",
    PictureType.FILE_ICON: "32x32 file icon",
    PictureType.OTHER_FILE_ICON: "Other file icon",
    PictureType.COVER_FRONT: "Cover (front)",
    PictureType.COVER_BACK: "Cover (back)",
    PictureType.LEAFLET_PAGE: "Leaflet page",
    PictureType.MEDIA: "Media",
    PictureType.LEAD_ARTIST: "Lead artist",
    PictureType.ARTIST: "Artist",
    PictureType.CONDUCTOR: "Conductor",
    PictureType.BAND: "Band",
    PictureType.COMPOSER: "Composer",
    PictureType.LYRICIST: "Lyricist",
    PictureType.RECORDING_LOCATION: "Recording location",
    PictureType.DURING_RECORDING: "During recording",
    PictureType.DURING_PERFORMANCE: "During performance",
    PictureType.SCREEN_CAPTURE: "Screen capture",
    PictureType.BRIGHT_COLORED_FISH: "A bright colored fish",
    PictureType.ILLUSTRATION: "Illustration",
    PictureType.BAND_LOGOTYPE: "Band logotype",
    PictureType.PUBLISHER_LOGOTYPE: "Publisher logotype",
}


class FlacPicture:
    """Payload of a FLAC PICTURE metadata block.

    All integers are 32-bit big-endian:
        type, MIME length, MIME (ASCII), description length,
        description (UTF-8), width, height, depth, colors,
        data length, data
    """

    def __init__(
        self,
        picture_type=FRONT_COVER,
        mime_type=DEFAULT_MIME_TYPE,
        description="",
        width=0,
        height=0,
        depth=0,
        colors=0,
        data=b"",
    ):
        self.picture_type = picture_type
        self.mime_type = mime_type
        self.description = description
        self.width = width
        self.height = height
        self.depth = depth
        self.colors = colors
        self.data = data

    @staticmethod
    def from_bytes(payload: bytes) -> "FlacPicture":
        """Decode a PICTURE block payload.

        Raises:
            TagParseError: If a length field points past the end of the block
        """
        picture_type = read_u32_be(payload, 0)
        mime_len = read_u32_be(payload, 4)
        pos = 8
        mime = payload[pos:pos + mime_len]
        pos += mime_len
        desc_len = read_u32_be(payload, pos)
        pos += 4
        description = payload[pos:pos + desc_len]
        pos += desc_len
        if pos + 20 > len(payload):
            raise TagParseError(f"Picture block truncated at offset {pos}")
        width, height, depth, colors, data_len = struct.unpack_from(">5I", payload, pos)
        pos += 20
        if pos + data_len > len(payload):
            raise TagParseError(
                f"Picture data claims {data_len} bytes, only {len(payload) - pos} present"
            )
        return FlacPicture(
            picture_type=picture_type,
            mime_type=decode_latin1(mime),
            description=decode_utf8(description),
            width=width,
            height=height,
            depth=depth,
            colors=colors,
            data=payload[pos:pos + data_len],
        )

    def to_bytes(self) -> bytes:
        mime = self.mime_type.encode("ascii", errors="replace")
        description = self.description.encode("utf-8")
        return (
            struct.pack(">II", self.picture_type, len(mime))
            + mime
            + struct.pack(">I", len(description))
            + description
            + struct.pack(
                ">5I", self.width, self.height, self.depth, self.colors, len(self.data)
            )
            + self.data
        )

    def to_cover(self) -> CoverArt:
        return CoverArt(
            data=self.data,
            mime_type=self.mime_type or DEFAULT_MIME_TYPE,
            description=self.description,
            picture_type=self.picture_type if self.picture_type <= 255 else PictureType.OTHER,
            width=self.width or None,
            height=self.height or None,
            depth=self.depth or None,
        )

    @staticmethod
    def from_cover(cover: CoverArt) -> "FlacPicture":
        """Build a picture block, filling unknown dimensions from the image."""
        width, height, depth = cover.width, cover.height, cover.depth
        if not (width and height and depth):
            info = inspect_image(cover.data)
            if info is not None:
                width = width or info.width
                height = height or info.height
                depth = depth or info.depth
        return FlacPicture(
            picture_type=cover.picture_type,
            mime_type=cover.mime_type,
            description=cover.description,
            width=width or 0,
            height=height or 0,
            depth=depth or 0,
            data=cover.data,
        )

    def __repr__(self):
        return (
            f"FlacPicture({PictureType.describe(self.picture_type)!r}, "
            f"{self.mime_type!r}, {len(self.data)} bytes)"
        )
