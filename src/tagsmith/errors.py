"""Exception hierarchy for tagsmith.

Every error raised by the library derives from AudioFileError so callers can
catch one type. TagParseError is also a ValueError, matching how malformed
input is reported by the binary codecs.
"""


class AudioFileError(Exception):
    """Base class for all tagsmith errors."""


class AudioIOError(AudioFileError):
    """Reading or writing the underlying file failed."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class UnsupportedFormatError(AudioFileError):
    """No recognized signature, or the operation is not available for the format."""


class TagParseError(AudioFileError, ValueError):
    """A tag structure is malformed or missing a required part."""
