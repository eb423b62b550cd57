"""Signatures, sizes and flag bits shared by the tag codecs."""

# ID3v2
ID3V2_MAGIC = b"ID3"
ID3V2_HEADER_SIZE = 10
ID3V2_FLAG_UNSYNC = 0x80
ID3V2_FLAG_EXTENDED = 0x40
ID3V2_FLAG_EXPERIMENTAL = 0x20
ID3V2_FLAG_FOOTER = 0x10
ID3V2_SUPPORTED_MAJOR = (2, 3, 4)

# v2.4 frame format flags (second flag byte)
ID3V2_FRAME_UNSYNC = 0x02
ID3V2_FRAME_DATA_LENGTH = 0x01

# Largest value a 4-byte synchsafe integer can hold
SYNCHSAFE_MAX = (1 << 28) - 1

# ID3v1
ID3V1_MAGIC = b"TAG"
ID3V1_SIZE = 128
ID3V1_NO_GENRE = 255

# FLAC
FLAC_MAGIC = b"fLaC"
FLAC_BLOCK_HEADER_SIZE = 4
FLAC_MAX_BLOCK_SIZE = (1 << 24) - 1
FLAC_LAST_BLOCK = 0x80

# Ogg
OGG_MAGIC = b"OggS"
OGG_HEADER_SIZE = 27
OGG_MAX_SEGMENTS = 255
OGG_FLAG_CONTINUED = 0x01
OGG_FLAG_FIRST = 0x02
OGG_FLAG_LAST = 0x04
VORBIS_COMMENT_MAGIC = b"\x03vorbis"
VORBIS_FRAMING_BIT = b"\x01"
OPUS_HEAD_MAGIC = b"OpusHead"
OPUS_TAGS_MAGIC = b"OpusTags"

# MP4
MP4_FTYP = b"ftyp"
MP4_CONTAINERS = frozenset(
    [b"moov", b"udta", b"meta", b"ilst", b"trak", b"mdia", b"minf", b"stbl"]
)
MP4_DATA_HEADER_SIZE = 16
MP4_TYPE_JPEG = 13
MP4_TYPE_PNG = 14
MP4_TYPE_BMP = 27

# APE
APE_MAGIC = b"APETAGEX"
APE_FOOTER_SIZE = 32
APE_VERSION_2 = 2000
APE_IS_HEADER = 0x20000000
APE_ITEM_BINARY = 0x00000002

# Cover art
FRONT_COVER = 3
DEFAULT_MIME_TYPE = "image/jpeg"

MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
}

# Writing defaults
DEFAULT_ID3_PADDING = 1024
DEFAULT_LANGUAGE = "eng"
