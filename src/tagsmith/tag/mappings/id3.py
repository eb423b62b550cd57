"""ID3v2 frame ID mappings."""

from .default import FieldMapping, StandardField

# v2.3 / v2.4. TDRC is preferred for year on v2.4 only; the codec chooses.
ID3V2_MAPPING = FieldMapping(
    "id3v2",
    [
        (StandardField.TITLE, [b"TIT2"]),
        (StandardField.ARTIST, [b"TPE1"]),
        (StandardField.ALBUM, [b"TALB"]),
        (StandardField.YEAR, [b"TDRC", b"TYER"]),
        (StandardField.TRACK, [b"TRCK"]),
        (StandardField.GENRE, [b"TCON"]),
        (StandardField.COMMENT, [b"COMM"]),
        (StandardField.LYRICS, [b"USLT"]),
        (StandardField.ALBUM_ARTIST, [b"TPE2"]),
        (StandardField.COMPOSER, [b"TCOM"]),
        (StandardField.COVER, [b"APIC"]),
    ],
)

# v2.2 uses three-character frame IDs
ID3V22_MAPPING = FieldMapping(
    "id3v2.2",
    [
        (StandardField.TITLE, [b"TT2"]),
        (StandardField.ARTIST, [b"TP1"]),
        (StandardField.ALBUM, [b"TAL"]),
        (StandardField.YEAR, [b"TYE"]),
        (StandardField.TRACK, [b"TRK"]),
        (StandardField.GENRE, [b"TCO"]),
        (StandardField.COMMENT, [b"COM"]),
        (StandardField.LYRICS, [b"ULT"]),
        (StandardField.ALBUM_ARTIST, [b"TP2"]),
        (StandardField.COMPOSER, [b"TCM"]),
        (StandardField.COVER, [b"PIC"]),
    ],
)


def year_frame_id(major: int) -> bytes:
    """Frame used to store the year for a given ID3v2 major version."""
    return b"TDRC" if major >= 4 else b"TYER"
