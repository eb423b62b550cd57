"""Vorbis comment, MP4 atom and APE item mappings."""

from .default import FieldMapping, StandardField

# Shared by FLAC, Ogg Vorbis and Opus
VORBIS_MAPPING = FieldMapping(
    "vorbis",
    [
        (StandardField.TITLE, ["TITLE"]),
        (StandardField.ARTIST, ["ARTIST"]),
        (StandardField.ALBUM, ["ALBUM"]),
        (StandardField.YEAR, ["DATE", "YEAR"]),
        (StandardField.TRACK, ["TRACKNUMBER"]),
        (StandardField.GENRE, ["GENRE"]),
        (StandardField.COMMENT, ["COMMENT"]),
        (StandardField.LYRICS, ["LYRICS"]),
        (StandardField.ALBUM_ARTIST, ["ALBUMARTIST"]),
        (StandardField.COMPOSER, ["COMPOSER"]),
        (StandardField.COVER, ["COVERART", "COVER"]),
    ],
    case_sensitive=False,
)

# Atom codes are raw bytes; 0xA9 is the copyright sign
MP4_MAPPING = FieldMapping(
    "mp4",
    [
        (StandardField.TITLE, [b"\xa9nam"]),
        (StandardField.ARTIST, [b"\xa9ART"]),
        (StandardField.ALBUM, [b"\xa9alb"]),
        (StandardField.YEAR, [b"\xa9day"]),
        (StandardField.TRACK, [b"trkn"]),
        (StandardField.GENRE, [b"\xa9gen"]),
        (StandardField.COMMENT, [b"\xa9cmt"]),
        (StandardField.LYRICS, [b"\xa9lyr"]),
        (StandardField.ALBUM_ARTIST, [b"aART"]),
        (StandardField.COMPOSER, [b"\xa9wrt"]),
        (StandardField.COVER, [b"covr"]),
    ],
)

APE_MAPPING = FieldMapping(
    "ape",
    [
        (StandardField.TITLE, ["Title"]),
        (StandardField.ARTIST, ["Artist"]),
        (StandardField.ALBUM, ["Album"]),
        (StandardField.YEAR, ["Year"]),
        (StandardField.TRACK, ["Track"]),
        (StandardField.GENRE, ["Genre"]),
        (StandardField.COMMENT, ["Comment"]),
        (StandardField.LYRICS, ["Lyrics"]),
        (StandardField.ALBUM_ARTIST, ["Album Artist"]),
        (StandardField.COMPOSER, ["Composer"]),
        (StandardField.COVER, ["Cover Art (Front)"]),
    ],
    case_sensitive=False,
)
