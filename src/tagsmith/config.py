"""Configuration management for tagsmith.

Handles saving and loading the reading and writing options used by the
codecs and the output style of the command-line interface.
"""

import copy
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, Tuple

import tomli_w

from .constants import DEFAULT_ID3_PADDING, DEFAULT_LANGUAGE

OUTPUT_FORMATS = ("pretty", "json", "table")


def get_config_dir() -> Path:
    """Get the configuration directory.

    Returns:
        Path to config directory ($TAGSMITH_CONFIG_DIR, or ~/.tagsmith)
    """
    override = os.environ.get("TAGSMITH_CONFIG_DIR")
    config_dir = Path(override) if override else Path.home() / ".tagsmith"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Get the full path to the config file."""
    return get_config_dir() / "config.toml"


class Config:
    """Configuration manager for reading, writing and output settings."""

    DEFAULT_CONFIG: Dict[str, Any] = {
        "reading": {
            # Raise on truncated frames/blocks/atoms instead of warning
            "strict": False,
        },
        "writing": {
            # Write to a temporary file and move it over the target
            "atomic": True,
            # Padding added when an ID3v2 tag outgrows its old size
            "id3_padding": DEFAULT_ID3_PADDING,
            # Language code of new COMM and USLT frames
            "id3_language": DEFAULT_LANGUAGE,
        },
        "output": {
            # pretty, json or table
            "format": "pretty",
        },
    }

    def __init__(self, config_path=None):
        """Initialize configuration manager."""
        self.config_path = Path(config_path) if config_path else get_config_path()
        self.data: Dict[str, Any] = copy.deepcopy(self.DEFAULT_CONFIG)
        self._dirty = False
        self.load()

    def load(self) -> bool:
        """Load configuration from file.

        Each known setting goes through its setter; unknown keys and invalid
        values are logged and the default is kept.

        Returns:
            True if the file was read, False if it is missing or unreadable
        """
        if not self.config_path.exists():
            return False

        try:
            with open(self.config_path, "rb") as f:
                loaded_data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logging.error(f"Error loading config {self.config_path}: {e}")
            return False

        for section, values in loaded_data.items():
            if section not in self.DEFAULT_CONFIG or not isinstance(values, dict):
                logging.warning(f"Ignoring unknown config section [{section}]")
                continue
            for key, value in values.items():
                setter = self._SETTERS.get((section, key))
                if setter is None:
                    logging.warning(f"Ignoring unknown config key {section}.{key}")
                    continue
                try:
                    setter(self, value)
                except (TypeError, ValueError) as e:
                    logging.warning(f"Ignoring {section}.{key} = {value!r}: {e}")
        self._dirty = False
        return True

    def save(self) -> bool:
        """Write the settings if they changed since the last load or save.

        Returns:
            True if the file is up to date, False if writing failed
        """
        if not self._dirty:
            return True

        try:
            with open(self.config_path, "wb") as f:
                tomli_w.dump(self.data, f)
        except OSError as e:
            logging.error(f"Error saving config {self.config_path}: {e}")
            return False
        self._dirty = False
        return True

    def is_dirty(self) -> bool:
        """Check if configuration has been modified."""
        return self._dirty

    # Reading settings
    def is_strict(self) -> bool:
        return self.data["reading"]["strict"]

    def set_strict(self, strict: bool) -> None:
        if not isinstance(strict, bool):
            raise ValueError(f"strict must be true or false, got {strict!r}")
        self.data["reading"]["strict"] = strict
        self._dirty = True

    # Writing settings
    def is_atomic(self) -> bool:
        return self.data["writing"]["atomic"]

    def set_atomic(self, atomic: bool) -> None:
        if not isinstance(atomic, bool):
            raise ValueError(f"atomic must be true or false, got {atomic!r}")
        self.data["writing"]["atomic"] = atomic
        self._dirty = True

    def get_id3_padding(self) -> int:
        """Bytes of padding added when an ID3v2 tag has to grow."""
        return self.data["writing"]["id3_padding"]

    def set_id3_padding(self, padding: int) -> None:
        """Set ID3v2 padding.

        Raises:
            ValueError: If padding is not a non-negative integer
        """
        if isinstance(padding, bool) or not isinstance(padding, int) or padding < 0:
            raise ValueError(f"ID3 padding must be a non-negative integer, got {padding!r}")
        self.data["writing"]["id3_padding"] = padding
        self._dirty = True

    def get_id3_language(self) -> str:
        return self.data["writing"]["id3_language"]

    def set_id3_language(self, language: str) -> None:
        """Set the language of new COMM/USLT frames.

        Args:
            language: ISO-639-2 code, e.g. "eng"

        Raises:
            ValueError: If the code is not three ASCII letters
        """
        if not isinstance(language, str) or len(language) != 3:
            raise ValueError(f"Language must be a 3-letter code, got {language!r}")
        if not language.isascii() or not language.isalpha():
            raise ValueError(f"Language must be a 3-letter code, got {language!r}")
        self.data["writing"]["id3_language"] = language.lower()
        self._dirty = True

    # Output settings
    def get_output_format(self) -> str:
        return self.data["output"]["format"]

    def set_output_format(self, output_format: str) -> None:
        """Set the default output style of the read command.

        Raises:
            ValueError: If the style is not one of pretty, json, table
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Output format must be one of {', '.join(OUTPUT_FORMATS)}, got {output_format!r}"
            )
        self.data["output"]["format"] = output_format
        self._dirty = True

    _SETTERS: Dict[Tuple[str, str], Callable[["Config", Any], None]] = {
        ("reading", "strict"): set_strict,
        ("writing", "atomic"): set_atomic,
        ("writing", "id3_padding"): set_id3_padding,
        ("writing", "id3_language"): set_id3_language,
        ("output", "format"): set_output_format,
    }
