"""
Tag subpackage - format detection and the file-level read/write API.

This package provides a unified interface for reading and rewriting audio
file metadata across ID3v1, ID3v2, FLAC, Ogg Vorbis, Opus, MP4 and APE.
"""

# mappings first: the codecs imported by .formats depend on it
from .mappings import FieldMapping, StandardField
from .formats import CODECS, FormatKind, detect_format, get_codec, sniff_format
from .core import (
    AudioFile,
    read_cover,
    read_metadata,
    remove_cover,
    write_cover,
    write_metadata,
)

__all__ = [
    'AudioFile',
    'CODECS',
    'FieldMapping',
    'FormatKind',
    'StandardField',
    'detect_format',
    'get_codec',
    'read_cover',
    'read_metadata',
    'remove_cover',
    'sniff_format',
    'write_cover',
    'write_metadata',
]
