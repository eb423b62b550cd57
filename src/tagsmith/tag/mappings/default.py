"""Canonical fields and the table type shared by all format mappings."""

from enum import Enum
from typing import Dict, Hashable, List, Optional, Sequence, Tuple


class StandardField(str, Enum):
    """Format-independent metadata slot."""

    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"
    YEAR = "year"
    TRACK = "track"
    GENRE = "genre"
    COMMENT = "comment"
    LYRICS = "lyrics"
    ALBUM_ARTIST = "album_artist"
    COMPOSER = "composer"
    COVER = "cover"

    @classmethod
    def from_name(cls, name: str) -> Optional["StandardField"]:
        """Look up a field by name, ignoring case ("TiTlE" -> TITLE)."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


class FieldMapping:
    """Bidirectional table between canonical fields and native keys.

    Each field lists one or more native keys; the first key is the one used
    when writing, the others are aliases accepted on read. Binary keys (ID3
    frame IDs, MP4 atom codes) are matched exactly; textual keys (Vorbis
    comments, APE items) are matched ignoring case.
    """

    def __init__(
        self,
        name: str,
        entries: Sequence[Tuple[StandardField, Sequence[Hashable]]],
        case_sensitive: bool = True,
    ):
        self.name = name
        self.case_sensitive = case_sensitive
        self._keys: Dict[StandardField, List[Hashable]] = {}
        self._fields: Dict[Hashable, StandardField] = {}
        for field, keys in entries:
            self._keys[field] = list(keys)
            for key in keys:
                self._fields[self._normalize(key)] = field

    def _normalize(self, key: Hashable) -> Hashable:
        if self.case_sensitive:
            return key
        return key.upper()  # type: ignore[attr-defined]

    def field_for(self, key: Hashable) -> Optional[StandardField]:
        """Canonical field a native key maps to, or None if unrecognized."""
        return self._fields.get(self._normalize(key))

    def keys_for(self, field: StandardField) -> List[Hashable]:
        """All native keys (preferred first) for a canonical field."""
        return list(self._keys.get(field, []))

    def preferred_key(self, field: StandardField) -> Optional[Hashable]:
        keys = self._keys.get(field)
        return keys[0] if keys else None

    def is_recognized(self, key: Hashable) -> bool:
        return self._normalize(key) in self._fields

    @property
    def fields(self) -> List[StandardField]:
        return list(self._keys)

    def __contains__(self, field: StandardField) -> bool:
        return field in self._keys

    def __repr__(self) -> str:
        return f"FieldMapping({self.name!r}, {len(self._keys)} fields)"


def normalize_year(value: str) -> str:
    """Leading four characters of a date string ("2024-05-01" -> "2024")."""
    value = value.strip()
    return value[:4] if len(value) >= 4 else value


def normalize_track(value: str) -> str:
    """Track number without the total ("3/12" -> "3")."""
    return value.split("/", 1)[0].strip()
