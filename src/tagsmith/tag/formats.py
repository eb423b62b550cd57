"""Format detection and the codec registry."""

import logging
from enum import Enum
from typing import Dict, Type

from ..codecs import (
    ApeCodec,
    Codec,
    FlacCodec,
    Id3v1Codec,
    Id3v2Codec,
    Mp4Codec,
    OggCodec,
    OggPage,
    OpusCodec,
)
from ..constants import (
    APE_FOOTER_SIZE,
    APE_MAGIC,
    FLAC_MAGIC,
    ID3V1_MAGIC,
    ID3V1_SIZE,
    ID3V2_MAGIC,
    MP4_FTYP,
    OGG_MAGIC,
    OPUS_HEAD_MAGIC,
)
from ..errors import TagParseError, UnsupportedFormatError
from ..fileio import read_file


class FormatKind(str, Enum):
    """Tag container of a file, as found by its signature."""

    ID3V2 = "id3v2"
    ID3V1 = "id3v1"
    FLAC = "flac"
    OGG = "ogg"
    OPUS = "opus"
    MP4 = "mp4"
    APE = "ape"

    @property
    def writable(self) -> bool:
        return self in WRITABLE_FORMATS

    @property
    def cover_writable(self) -> bool:
        return self in (FormatKind.ID3V2, FormatKind.FLAC)


WRITABLE_FORMATS = (
    FormatKind.ID3V2,
    FormatKind.ID3V1,
    FormatKind.FLAC,
    FormatKind.OGG,
    FormatKind.OPUS,
)

CODECS: Dict[FormatKind, Type[Codec]] = {
    FormatKind.ID3V2: Id3v2Codec,
    FormatKind.ID3V1: Id3v1Codec,
    FormatKind.FLAC: FlacCodec,
    FormatKind.OGG: OggCodec,
    FormatKind.OPUS: OpusCodec,
    FormatKind.MP4: Mp4Codec,
    FormatKind.APE: ApeCodec,
}


def _sniff_ogg(data: bytes) -> FormatKind:
    try:
        page = OggPage.from_bytes(data)
    except TagParseError:
        return FormatKind.OPUS if data[28:32] == b"Opus" else FormatKind.OGG
    if page.data.startswith(OPUS_HEAD_MAGIC):
        return FormatKind.OPUS
    return FormatKind.OGG


def sniff_format(data: bytes) -> FormatKind:
    """Identify the tag format of a file image by its signatures.

    Checks run in a fixed order and the first match wins: ID3v2 header,
    FLAC marker, Ogg capture pattern (Opus when the first page holds an
    OpusHead packet), MP4 ``ftyp`` box, APE footer, ID3v1 trailer.

    Raises:
        UnsupportedFormatError: If no signature matches
    """
    if data[:3] == ID3V2_MAGIC:
        return FormatKind.ID3V2
    if data[:4] == FLAC_MAGIC:
        return FormatKind.FLAC
    if data[:4] == OGG_MAGIC:
        return _sniff_ogg(data)
    if data[4:8] == MP4_FTYP:
        return FormatKind.MP4
    if len(data) >= APE_FOOTER_SIZE and data[-APE_FOOTER_SIZE:].startswith(APE_MAGIC):
        return FormatKind.APE
    if len(data) >= ID3V1_SIZE and data[-ID3V1_SIZE:].startswith(ID3V1_MAGIC):
        return FormatKind.ID3V1
    raise UnsupportedFormatError("Unrecognized audio format")


def detect_format(filename) -> FormatKind:
    """Read a file and identify its tag format.

    Raises:
        AudioIOError: If the file cannot be read
        UnsupportedFormatError: If no signature matches
    """
    data = read_file(filename)
    try:
        kind = sniff_format(data)
    except UnsupportedFormatError as e:
        raise UnsupportedFormatError(f"{e}: {filename}") from e
    logging.debug(f"Detected {kind.value} in {filename}")
    return kind


def get_codec(kind: FormatKind, config=None, strict: bool = False) -> Codec:
    """Instantiate the codec for a format, optionally from a Config."""
    codec_class = CODECS[FormatKind(kind)]
    if config is not None:
        return codec_class.from_config(config, strict=strict or None)
    return codec_class(strict=strict)
