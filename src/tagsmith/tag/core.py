"""Read and write tags of audio files on disk."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..errors import TagParseError
from ..fileio import read_file, write_file
from ..models import CoverArt, Metadata
from .formats import FormatKind, get_codec, sniff_format

FormatArg = Optional[Union[FormatKind, str]]


def _resolve(data: bytes, filename, format: FormatArg) -> FormatKind:
    if format is None:
        kind = sniff_format(data)
        logging.debug(f"Detected {kind.value} in {filename}")
        return kind
    try:
        return FormatKind(format)
    except ValueError as e:
        raise TagParseError(f"Unknown format {format!r}") from e


def _store(filename, old: bytes, new: bytes, atomic: bool) -> bool:
    if new == old:
        logging.debug(f"No changes for {filename}, leaving it untouched")
        return False
    write_file(filename, new, atomic=atomic)
    logging.info(f"Wrote {filename} ({len(new)} bytes)")
    return True


def read_metadata(filename, format: FormatArg = None, *, strict: bool = False, config=None) -> Metadata:
    """Read the normalized metadata of a file.

    Args:
        filename: Path to the audio file
        format: Skip detection and use this format
        strict: Raise TagParseError on truncated structures instead of
            returning what was parsed
        config: Optional Config supplying codec settings

    Returns:
        Metadata with the fields present in the file
    """
    data = read_file(filename)
    kind = _resolve(data, filename, format)
    return get_codec(kind, config, strict).read(data)


def write_metadata(
    filename,
    metadata: Metadata,
    format: FormatArg = None,
    *,
    strict: bool = False,
    atomic: bool = True,
    config=None,
) -> bool:
    """Apply the explicitly provided fields of ``metadata`` to a file.

    Fields set to None are removed from the tag, fields that were never
    provided are left untouched.

    Returns:
        True if the file was rewritten, False if nothing changed

    Raises:
        UnsupportedFormatError: For formats without write support
        TagParseError: If the tag cannot hold the update
        AudioIOError: If the file cannot be read or written
    """
    data = read_file(filename)
    kind = _resolve(data, filename, format)
    codec = get_codec(kind, config, strict)
    new = codec.write(data, metadata)
    skipped = codec.unstorable(metadata)
    if skipped:
        logging.warning(f"{codec.name} tags cannot store {', '.join(sorted(skipped))}, skipping them for {filename}")
    return _store(filename, data, new, atomic)


def read_cover(filename, format: FormatArg = None, *, strict: bool = False, config=None) -> Optional[CoverArt]:
    """The embedded cover, preferring the front cover, or None."""
    data = read_file(filename)
    kind = _resolve(data, filename, format)
    return get_codec(kind, config, strict).read_cover(data)


def write_cover(
    filename,
    cover: CoverArt,
    format: FormatArg = None,
    *,
    strict: bool = False,
    atomic: bool = True,
    config=None,
) -> bool:
    """Embed ``cover``, replacing any existing picture of the same type."""
    data = read_file(filename)
    kind = _resolve(data, filename, format)
    new = get_codec(kind, config, strict).write_cover(data, cover)
    return _store(filename, data, new, atomic)


def remove_cover(
    filename,
    format: FormatArg = None,
    *,
    strict: bool = False,
    atomic: bool = True,
    config=None,
) -> bool:
    """Remove every embedded picture."""
    data = read_file(filename)
    kind = _resolve(data, filename, format)
    new = get_codec(kind, config, strict).remove_cover(data)
    return _store(filename, data, new, atomic)


class AudioFile:
    """
    One audio file and its tag.

    The format is detected on first use and cached. Every operation reads
    the file again, so changes made by other programs are picked up.

    Args:
        path: Path to the audio file
        strict: Raise on truncated tag structures
        config: Optional Config supplying codec and write settings
    """

    def __init__(self, path, strict: bool = False, config=None):
        self.path = Path(path)
        self.strict = strict if config is None else (strict or config.is_strict())
        self.config = config
        self._file_type: Optional[FormatKind] = None

    @property
    def atomic(self) -> bool:
        return self.config.is_atomic() if self.config is not None else True

    @property
    def file_type(self) -> FormatKind:
        if self._file_type is None:
            self._file_type = _resolve(read_file(self.path), self.path, None)
        return self._file_type

    def _codec(self):
        return get_codec(self.file_type, self.config, self.strict)

    def get_version(self) -> str:
        """Tag version: 2.<major> for ID3v2, 1.1 or 1.0 for ID3v1, else the format name."""
        return self._codec().version(read_file(self.path))

    def read(self) -> Metadata:
        return self._codec().read(read_file(self.path))

    def get_metadata(self, indent: Optional[int] = None) -> str:
        """Metadata as a JSON object string."""
        return self.read().to_json(indent=indent)

    def write(self, metadata: Metadata) -> bool:
        data = read_file(self.path)
        new = self._codec().write(data, metadata)
        return _store(self.path, data, new, self.atomic)

    def set_metadata(self, text: str) -> bool:
        """Apply a JSON update; ``null`` values remove fields."""
        return self.write(Metadata.from_json(text))

    def get_cover(self) -> Optional[CoverArt]:
        return self._codec().read_cover(read_file(self.path))

    def set_cover(self, cover: CoverArt) -> bool:
        data = read_file(self.path)
        new = self._codec().write_cover(data, cover)
        return _store(self.path, data, new, self.atomic)

    def remove_cover(self) -> bool:
        data = read_file(self.path)
        new = self._codec().remove_cover(data)
        return _store(self.path, data, new, self.atomic)

    def export_cover(self, output=None) -> Optional[Path]:
        """Save the cover image next to the file or at ``output``.

        Without ``output`` the image is written as ``<stem>.cover.<ext>``
        with the extension taken from the MIME type.

        Returns:
            Path of the written image, or None if the file has no cover
        """
        cover = self.get_cover()
        if cover is None:
            return None
        if output is None:
            output = self.path.with_name(f"{self.path.stem}.cover.{cover.extension}")
        output = Path(output)
        write_file(output, cover.data, atomic=self.atomic)
        logging.info(f"Exported cover of {self.path} to {output} ({len(cover.data)} bytes)")
        return output

    def info(self) -> Dict[str, Any]:
        """Format, version and size of the file plus codec specific details."""
        data = read_file(self.path)
        codec = self._codec()
        result: Dict[str, Any] = {
            "path": str(self.path),
            "format": self.file_type.value,
            "version": codec.version(data),
            "file_size": len(data),
        }
        result.update(codec.info(data))
        return result

    def __repr__(self):
        return f"AudioFile({str(self.path)!r})"
