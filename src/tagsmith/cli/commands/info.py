"""Info command - Show technical information about a file."""

import argparse

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...config import Config
from ...tag import AudioFile
from ..schemas import InfoResponse
from ..utils import ExitCode, json_output

SUMMARY_KEYS = ("path", "format", "version", "file_size")


def format_value(key: str, value) -> str:
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    if key == "duration":
        return f"{value:.3f} s"
    if key in ("file_size", "tag_size"):
        return f"{value:,} bytes"
    if key == "sample_rate":
        return f"{value:,} Hz"
    return str(value)


def cmd_info(args: argparse.Namespace) -> None:
    """Display format, version, size and stream details.

    Args:
        args: Parsed command-line arguments
    """
    audio = AudioFile(args.file, strict=args.strict, config=Config())
    info = audio.info()

    if getattr(args, "json", False):
        json_output(
            InfoResponse(
                path=info["path"],
                format=info["format"],
                version=info["version"],
                file_size=info["file_size"],
                details={key: value for key, value in info.items() if key not in SUMMARY_KEYS},
            ),
            ExitCode.SUCCESS,
        )

    table = Table(title=escape(info["path"]), show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="magenta")
    for key, value in info.items():
        if key == "path":
            continue
        table.add_row(key.replace("_", " ").capitalize(), escape(format_value(key, value)))
    Console().print(table)
