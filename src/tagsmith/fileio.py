"""Whole-file reads and atomic rewrites."""

import logging
import os
import shutil
import tempfile
from pathlib import Path

from .errors import AudioIOError


def read_file(filename) -> bytes:
    """Read an entire file into memory.

    Raises:
        AudioIOError: If the file cannot be opened or read
    """
    try:
        with open(filename, "rb") as f:
            return f.read()
    except OSError as e:
        raise AudioIOError(f"Cannot read {filename}: {e}", filename) from e


def read_tail(filename, size: int) -> bytes:
    """Read the last ``size`` bytes of a file (the whole file if shorter)."""
    try:
        with open(filename, "rb") as f:
            f.seek(0, os.SEEK_END)
            length = f.tell()
            f.seek(max(0, length - size))
            return f.read()
    except OSError as e:
        raise AudioIOError(f"Cannot read {filename}: {e}", filename) from e


def write_file(filename, data: bytes, atomic: bool = True) -> None:
    """Replace the contents of a file.

    With ``atomic`` the data is written to a temporary file in the same
    directory, flushed to disk and moved over the target, so the target is
    never left half-written. The original permission bits are kept.

    Raises:
        AudioIOError: If the file cannot be written
    """
    path = Path(filename)
    if not atomic:
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise AudioIOError(f"Cannot write {path}: {e}", path) from e
        return

    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb",
            delete=False,
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        raise AudioIOError(f"Cannot write {path}: {e}", path) from e
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)

    logging.debug(f"Replaced {path} ({len(data)} bytes)")
