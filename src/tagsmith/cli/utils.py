"""Utility functions for CLI operations."""

import json
import logging
import sys
from enum import IntEnum
from typing import Any, NoReturn, Tuple

from pydantic import BaseModel

from ..errors import AudioFileError, AudioIOError, TagParseError, UnsupportedFormatError


class ExitCode(IntEnum):
    """Process exit status of the tagsmith command."""

    SUCCESS = 0
    ERROR = 1
    UNSUPPORTED = 2
    PARSE_ERROR = 3
    IO_ERROR = 4
    INTERRUPTED = 130


def setup_logging(level: str) -> None:
    """Configure logging based on user-specified level.

    Args:
        level: Logging level (debug, info, warning, error, critical)
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def classify_error(error: BaseException) -> Tuple[ExitCode, str]:
    """Exit code and machine-readable error name for an exception."""
    if isinstance(error, UnsupportedFormatError):
        return ExitCode.UNSUPPORTED, "unsupported_format"
    if isinstance(error, TagParseError):
        return ExitCode.PARSE_ERROR, "parse_error"
    if isinstance(error, AudioIOError):
        return ExitCode.IO_ERROR, "io_error"
    if isinstance(error, AudioFileError):
        return ExitCode.ERROR, "audio_error"
    return ExitCode.ERROR, "error"


def json_output(data: Any, exit_code: int = ExitCode.SUCCESS) -> NoReturn:
    """Print a response as JSON on stdout and exit.

    Args:
        data: Pydantic response model or JSON-compatible value
        exit_code: Process exit status
    """
    if isinstance(data, BaseModel):
        print(data.model_dump_json(indent=2, exclude_none=True))
    else:
        print(json.dumps(data, indent=2))
    sys.exit(exit_code)
