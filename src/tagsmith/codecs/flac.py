"""FLAC metadata block chain."""

import logging
import struct
from enum import IntEnum
from typing import Any, Dict, List, Optional

from ..constants import (
    FLAC_BLOCK_HEADER_SIZE,
    FLAC_LAST_BLOCK,
    FLAC_MAGIC,
    FLAC_MAX_BLOCK_SIZE,
    FRONT_COVER,
)
from ..errors import TagParseError
from ..models import TEXT_FIELDS, CoverArt, Metadata
from ..utils import read_u24_be, tolerate
from .base import Codec
from .picture import FlacPicture
from .vorbis import VorbisComment


class FlacBlockType(IntEnum):
    STREAMINFO = 0
    PADDING = 1
    APPLICATION = 2
    SEEKTABLE = 3
    VORBIS_COMMENT = 4
    CUESHEET = 5
    PICTURE = 6
    INVALID = 127


class FlacMetadataBlock:
    """One metadata block: 1-byte last-flag/type, 3-byte length, payload.

    The is-last flag is stored as read but recomputed on serialization, so
    blocks can be removed or appended freely.
    """

    def __init__(self, block_type: int, data: bytes, is_last: bool = False):
        self.block_type = block_type
        self.data = data
        self.is_last = is_last

    @staticmethod
    def from_bytes(data: bytes, offset: int) -> "FlacMetadataBlock":
        if offset + FLAC_BLOCK_HEADER_SIZE > len(data):
            raise TagParseError(f"Block header truncated at offset {offset}")
        flags = data[offset]
        length = read_u24_be(data, offset + 1)
        start = offset + FLAC_BLOCK_HEADER_SIZE
        if start + length > len(data):
            raise TagParseError(
                f"Block claims {length} bytes, only {len(data) - start} remain"
            )
        return FlacMetadataBlock(
            flags & 0x7F,
            data[start:start + length],
            bool(flags & FLAC_LAST_BLOCK),
        )

    def to_bytes(self, is_last: bool) -> bytes:
        if len(self.data) > FLAC_MAX_BLOCK_SIZE:
            raise TagParseError(
                f"{self.type_name} block of {len(self.data)} bytes exceeds the FLAC limit"
            )
        flags = (FLAC_LAST_BLOCK if is_last else 0) | self.block_type
        return bytes([flags]) + len(self.data).to_bytes(3, "big") + self.data

    @property
    def size(self) -> int:
        return FLAC_BLOCK_HEADER_SIZE + len(self.data)

    @property
    def type_name(self) -> str:
        try:
            return FlacBlockType(self.block_type).name
        except ValueError:
            return f"RESERVED_{self.block_type}"

    def __repr__(self):
        return f"FlacMetadataBlock({self.type_name}, {len(self.data)} bytes)"


class StreamInfo:
    """The fields of STREAMINFO needed for technical info."""

    def __init__(self, min_blocksize, max_blocksize, sample_rate, channels, bits_per_sample, total_samples):
        self.min_blocksize = min_blocksize
        self.max_blocksize = max_blocksize
        self.sample_rate = sample_rate
        self.channels = channels
        self.bits_per_sample = bits_per_sample
        self.total_samples = total_samples

    @staticmethod
    def from_bytes(data: bytes) -> "StreamInfo":
        if len(data) < 18:
            raise TagParseError(f"STREAMINFO too short ({len(data)} bytes)")
        min_blocksize, max_blocksize = struct.unpack_from(">HH", data, 0)
        # 20 bits rate, 3 bits channels-1, 5 bits bps-1, 36 bits samples
        packed = int.from_bytes(data[10:18], "big")
        return StreamInfo(
            min_blocksize,
            max_blocksize,
            packed >> 44,
            ((packed >> 41) & 0x07) + 1,
            ((packed >> 36) & 0x1F) + 1,
            packed & 0xFFFFFFFFF,
        )

    @property
    def duration(self) -> float:
        if not self.sample_rate:
            return 0.0
        return self.total_samples / self.sample_rate


class FlacFile:
    """A FLAC stream split into its metadata blocks and the audio that follows."""

    def __init__(self, blocks=None, audio: bytes = b""):
        self.blocks: List[FlacMetadataBlock] = blocks if blocks is not None else []
        self.audio = audio

    @staticmethod
    def from_bytes(data: bytes, strict: bool = False) -> "FlacFile":
        """Parse the block chain.

        Parsing stops at the block flagged as last. A corrupt block stops
        parsing too; everything from it onwards is kept as audio.

        Raises:
            TagParseError: If the data does not start with "fLaC"
        """
        if not data.startswith(FLAC_MAGIC):
            raise TagParseError("Not a FLAC file (missing fLaC signature)")

        blocks = []
        pos = len(FLAC_MAGIC)
        while pos < len(data):
            try:
                block = FlacMetadataBlock.from_bytes(data, pos)
            except TagParseError as e:
                tolerate(f"Corrupt FLAC metadata block at offset {pos}: {e}", strict)
                break
            blocks.append(block)
            pos += block.size
            if block.is_last:
                break
        return FlacFile(blocks, data[pos:])

    def to_bytes(self) -> bytes:
        last = len(self.blocks) - 1
        return (
            FLAC_MAGIC
            + b"".join(block.to_bytes(i == last) for i, block in enumerate(self.blocks))
            + self.audio
        )

    def find(self, block_type: int) -> List[FlacMetadataBlock]:
        return [block for block in self.blocks if block.block_type == block_type]

    def first(self, block_type: int) -> Optional[FlacMetadataBlock]:
        for block in self.blocks:
            if block.block_type == block_type:
                return block
        return None

    def stream_info(self) -> Optional[StreamInfo]:
        block = self.first(FlacBlockType.STREAMINFO)
        return StreamInfo.from_bytes(block.data) if block else None

    def pictures(self, strict: bool = False) -> List[FlacPicture]:
        pictures = []
        for block in self.find(FlacBlockType.PICTURE):
            try:
                pictures.append(FlacPicture.from_bytes(block.data))
            except TagParseError as e:
                tolerate(f"Skipping malformed PICTURE block: {e}", strict)
        return pictures

    def set_picture(self, picture: FlacPicture) -> None:
        """Replace PICTURE blocks of the same picture type with ``picture``.

        The new block takes the place of the first replaced one; if there was
        none it goes before the first PADDING block, or last.
        """
        new_block = FlacMetadataBlock(FlacBlockType.PICTURE, picture.to_bytes())
        kept = []
        position = None
        for block in self.blocks:
            if block.block_type == FlacBlockType.PICTURE and _picture_type(block) == picture.picture_type:
                if position is None:
                    position = len(kept)
                continue
            kept.append(block)

        if position is None:
            position = len(kept)
            for i, block in enumerate(kept):
                if block.block_type == FlacBlockType.PADDING:
                    position = i
                    break
        kept.insert(position, new_block)
        self.blocks = kept

    def remove_pictures(self) -> None:
        self.blocks = [b for b in self.blocks if b.block_type != FlacBlockType.PICTURE]


def _picture_type(block: FlacMetadataBlock) -> Optional[int]:
    if len(block.data) < 4:
        return None
    return int.from_bytes(block.data[:4], "big")


def _choose_cover(pictures: List[FlacPicture]) -> Optional[CoverArt]:
    if not pictures:
        return None
    for picture in pictures:
        if picture.picture_type == FRONT_COVER:
            return picture.to_cover()
    return pictures[0].to_cover()


class FlacCodec(Codec):
    name = "flac"
    fields = TEXT_FIELDS + ("cover",)

    def read(self, data: bytes) -> Metadata:
        flac = FlacFile.from_bytes(data, self.strict)
        metadata = Metadata()
        block = flac.first(FlacBlockType.VORBIS_COMMENT)
        if block is not None:
            try:
                metadata = VorbisComment.from_bytes(block.data, self.strict).to_metadata()
            except TagParseError as e:
                tolerate(f"Unreadable VORBIS_COMMENT block: {e}", self.strict)

        cover = _choose_cover(flac.pictures(self.strict))
        if cover is not None:
            metadata.cover = cover
        return metadata

    def read_cover(self, data: bytes) -> Optional[CoverArt]:
        return _choose_cover(FlacFile.from_bytes(data, self.strict).pictures(self.strict))

    def write(self, data: bytes, metadata: Metadata) -> bytes:
        flac = FlacFile.from_bytes(data, self.strict)

        if metadata.text_updates():
            block = flac.first(FlacBlockType.VORBIS_COMMENT)
            if block is None:
                raise TagParseError("no VORBIS_COMMENT block found in FLAC file")
            comment = VorbisComment.from_bytes(block.data, self.strict)
            comment.apply(metadata)
            block.data = comment.to_bytes()

        if metadata.has_cover_update():
            if metadata.cover is None:
                flac.remove_pictures()
            else:
                flac.set_picture(FlacPicture.from_cover(metadata.cover))

        return flac.to_bytes()

    def write_cover(self, data: bytes, cover: CoverArt) -> bytes:
        flac = FlacFile.from_bytes(data, self.strict)
        flac.set_picture(FlacPicture.from_cover(cover))
        return flac.to_bytes()

    def remove_cover(self, data: bytes) -> bytes:
        flac = FlacFile.from_bytes(data, self.strict)
        removed = len(flac.find(FlacBlockType.PICTURE))
        flac.remove_pictures()
        logging.debug(f"Removed {removed} PICTURE block(s)")
        return flac.to_bytes()

    def info(self, data: bytes) -> Dict[str, Any]:
        flac = FlacFile.from_bytes(data, self.strict)
        result: Dict[str, Any] = {"blocks": [block.type_name for block in flac.blocks]}
        try:
            stream = flac.stream_info()
        except TagParseError as e:
            tolerate(f"Unreadable STREAMINFO block: {e}", self.strict)
            stream = None
        if stream is not None:
            result.update(
                sample_rate=stream.sample_rate,
                channels=stream.channels,
                bits_per_sample=stream.bits_per_sample,
                total_samples=stream.total_samples,
                duration=round(stream.duration, 3),
            )
        return result
