"""tagsmith.

Reads and rewrites the metadata embedded in audio files: ID3v1, ID3v2, FLAC,
Ogg Vorbis, Opus, MP4 and APE tags are decoded into one Metadata model, and
selected fields can be written back to ID3, FLAC and Ogg files.

Main modules:
    cli: Command-line interface (tagsmith command)
    codecs: Binary tag codecs, one per format
    tag: Format detection, field mappings and the file-level API

Core modules:
    config: Configuration management
    constants: Magic numbers and defaults
    errors: Exception hierarchy
    fileio: Whole-file reads and atomic rewrites
    models: Metadata and CoverArt
    utils: Byte-level helpers
"""

try:
    from importlib.metadata import version, PackageNotFoundError

    __version__ = version("tagsmith")
except PackageNotFoundError:
    # Package not installed, read directly from pyproject.toml
    from pathlib import Path
    import tomllib

    try:
        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            pyproject_data = tomllib.load(f)
            __version__ = pyproject_data["project"]["version"]
    except (OSError, KeyError, tomllib.TOMLDecodeError):
        # Last resort fallback if pyproject.toml can't be read
        __version__ = "unknown"

# tag before codecs: the codecs import tag.mappings
from .tag import (
    AudioFile,
    FormatKind,
    detect_format,
    read_cover,
    read_metadata,
    remove_cover,
    write_cover,
    write_metadata,
)
from .errors import AudioFileError, AudioIOError, TagParseError, UnsupportedFormatError
from .models import CoverArt, Metadata

__all__ = [
    # File-level API
    "AudioFile",
    "FormatKind",
    "detect_format",
    "read_cover",
    "read_metadata",
    "remove_cover",
    "write_cover",
    "write_metadata",
    # Models
    "CoverArt",
    "Metadata",
    # Errors
    "AudioFileError",
    "AudioIOError",
    "TagParseError",
    "UnsupportedFormatError",
]
