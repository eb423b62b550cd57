"""Common interface implemented by every tag codec."""

from typing import Any, Dict, List, Optional, Tuple

from ..constants import DEFAULT_ID3_PADDING, DEFAULT_LANGUAGE
from ..errors import UnsupportedFormatError
from ..models import CoverArt, Metadata


class Codec:
    """Reads and rewrites one tag format over an in-memory file image.

    Codecs are stateless apart from their options and are created per call.
    ``write``, ``write_cover`` and ``remove_cover`` return the complete new
    file contents; the caller is responsible for storing them.

    Attributes:
        name: Short format name used in messages
        strict: Raise on truncated or malformed trailing structures instead
            of logging a warning and keeping what was parsed
        padding: Bytes of padding added when an ID3v2 tag has to grow
        language: ISO-639-2 code used for new COMM/USLT frames
    """

    name = "unknown"
    fields: Tuple[str, ...] = ()

    def __init__(
        self,
        strict: bool = False,
        padding: int = DEFAULT_ID3_PADDING,
        language: str = DEFAULT_LANGUAGE,
    ):
        self.strict = strict
        self.padding = padding
        self.language = language

    @classmethod
    def from_config(cls, config, strict: Optional[bool] = None) -> "Codec":
        """Create a codec using the reading/writing settings of a Config."""
        return cls(
            strict=config.is_strict() if strict is None else strict,
            padding=config.get_id3_padding(),
            language=config.get_id3_language(),
        )

    def read(self, data: bytes) -> Metadata:
        raise NotImplementedError

    def unstorable(self, metadata: Metadata) -> List[str]:
        """Provided fields with a value that this format has no place for."""
        return [
            name
            for name, value in metadata.updates().items()
            if value is not None and name not in self.fields
        ]

    def write(self, data: bytes, metadata: Metadata) -> bytes:
        raise UnsupportedFormatError(f"Writing {self.name} tags is not supported")

    def read_cover(self, data: bytes) -> Optional[CoverArt]:
        return self.read(data).cover

    def write_cover(self, data: bytes, cover: CoverArt) -> bytes:
        raise UnsupportedFormatError(f"Cover art cannot be written to {self.name} files")

    def remove_cover(self, data: bytes) -> bytes:
        raise UnsupportedFormatError(f"Cover art cannot be removed from {self.name} files")

    def version(self, data: bytes) -> str:
        return self.name

    def info(self, data: bytes) -> Dict[str, Any]:
        """Technical details about the file beyond its tags."""
        return {}
