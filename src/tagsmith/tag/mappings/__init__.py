"""Tag field mappings for the supported formats."""

from .default import FieldMapping, StandardField, normalize_track, normalize_year
from .format_specific import APE_MAPPING, MP4_MAPPING, VORBIS_MAPPING
from .id3 import ID3V2_MAPPING, ID3V22_MAPPING, year_frame_id

__all__ = [
    "FieldMapping",
    "StandardField",
    "normalize_track",
    "normalize_year",
    "ID3V2_MAPPING",
    "ID3V22_MAPPING",
    "VORBIS_MAPPING",
    "MP4_MAPPING",
    "APE_MAPPING",
    "year_frame_id",
]
