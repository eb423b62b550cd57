"""Canonical metadata model shared by every codec.

Metadata and CoverArt are pydantic models so that the JSON interchange shape
(cover data as base64) is validated in one place. Raw bytes are kept as bytes
in Python; base64 is only used when serializing to or parsing from JSON.
"""

import base64
import binascii
from typing import Any, Dict, Iterable, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from .constants import DEFAULT_MIME_TYPE, FRONT_COVER, MIME_EXTENSIONS
from .errors import TagParseError

# Canonical text fields, in display order
TEXT_FIELDS = (
    "title",
    "artist",
    "album",
    "year",
    "track",
    "genre",
    "comment",
    "lyrics",
    "album_artist",
    "composer",
)


class CoverArt(BaseModel):
    """Embedded picture.

    Attributes:
        data: Raw image bytes
        mime_type: MIME type of the image
        description: Free-text description
        picture_type: ID3/FLAC picture type code (3 = front cover)
        width: Image width in pixels, when known
        height: Image height in pixels, when known
        depth: Colour depth in bits per pixel, when known
    """

    data: bytes = Field(description="Raw image bytes (base64 in JSON)")
    mime_type: str = Field(default=DEFAULT_MIME_TYPE)
    description: str = Field(default="")
    picture_type: int = Field(default=FRONT_COVER, ge=0, le=255)
    width: Optional[int] = Field(default=None, ge=0)
    height: Optional[int] = Field(default=None, ge=0)
    depth: Optional[int] = Field(default=None, ge=0)

    @field_validator("data", mode="before")
    @classmethod
    def _decode_base64(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return base64.b64decode(value, validate=True)
            except binascii.Error as e:
                raise ValueError(f"cover data is not valid base64: {e}") from e
        return value

    @field_serializer("data", when_used="json")
    def _encode_base64(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")

    @property
    def extension(self) -> str:
        """File extension matching the MIME type ("jpg" when unknown)."""
        return MIME_EXTENSIONS.get(self.mime_type.lower(), "jpg")


class Metadata(BaseModel):
    """Normalized tag contents.

    Every field is optional. A field that is None was not present in the
    source tag. When a Metadata is used as a write request, only the fields
    that were explicitly provided are applied: a provided value is stored, a
    provided None removes the field, and fields never provided are left as
    they are in the file.
    """

    model_config = ConfigDict(validate_assignment=True)

    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    year: Optional[str] = None
    track: Optional[str] = None
    genre: Optional[str] = None
    comment: Optional[str] = None
    lyrics: Optional[str] = None
    album_artist: Optional[str] = None
    composer: Optional[str] = None
    cover: Optional[CoverArt] = None

    def updates(self) -> Dict[str, Any]:
        """Fields explicitly provided on this record (None means remove)."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def text_updates(self) -> Dict[str, Optional[str]]:
        """Explicitly provided text fields, in canonical order."""
        provided = self.model_fields_set
        return {name: getattr(self, name) for name in TEXT_FIELDS if name in provided}

    def has_cover_update(self) -> bool:
        return "cover" in self.model_fields_set

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in type(self).model_fields)

    def restricted_to(self, fields: Iterable[str]) -> "Metadata":
        """Copy holding only the given fields (used to compare round-trips)."""
        keep = set(fields)
        return Metadata(
            **{name: getattr(self, name) for name in self.model_fields_set if name in keep}
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible dict without absent fields."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(exclude_none=True, indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "Metadata":
        """Parse a JSON object into a write request.

        Raises:
            TagParseError: If the text is not valid JSON or has invalid values
        """
        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise TagParseError(f"Invalid metadata JSON: {e}") from e
