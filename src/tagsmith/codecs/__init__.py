"""Binary tag codecs, one module per format."""

from .ape import ApeCodec, ApeTag, ApeTagFooter, ApeTagItem
from .base import Codec
from .flac import FlacBlockType, FlacCodec, FlacFile, FlacMetadataBlock, StreamInfo
from .id3v1 import Id3v1Codec, Id3v1Tag
from .id3v2 import Id3Frame, Id3v2Codec, Id3v2Header, Id3v2Tag
from .mp4 import Mp4Atom, Mp4Codec, Mp4Item
from .ogg import OggCodec, OggPage, OggStream, lacing_values, ogg_crc32
from .opus import OpusCodec
from .picture import FlacPicture, PictureType
from .vorbis import VorbisComment

__all__ = [
    "Codec",
    "ApeCodec",
    "ApeTag",
    "ApeTagFooter",
    "ApeTagItem",
    "FlacBlockType",
    "FlacCodec",
    "FlacFile",
    "FlacMetadataBlock",
    "FlacPicture",
    "StreamInfo",
    "Id3v1Codec",
    "Id3v1Tag",
    "Id3Frame",
    "Id3v2Codec",
    "Id3v2Header",
    "Id3v2Tag",
    "Mp4Atom",
    "Mp4Codec",
    "Mp4Item",
    "OggCodec",
    "OggPage",
    "OggStream",
    "OpusCodec",
    "PictureType",
    "VorbisComment",
    "lacing_values",
    "ogg_crc32",
]
