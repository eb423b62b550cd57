"""Detect command - Print the tag format of audio files."""

import argparse
import logging
import sys
from typing import List

from rich.console import Console
from rich.table import Table

from ...errors import AudioFileError
from ...tag import AudioFile
from ..schemas import DetectedFile, DetectResponse
from ..utils import ExitCode, classify_error, json_output


def cmd_detect(args: argparse.Namespace) -> None:
    """Detect the format of every file argument.

    Files that cannot be read or recognized are reported alongside the
    others; the exit code is that of the first failure.

    Args:
        args: Parsed command-line arguments
    """
    use_json = getattr(args, "json", False)
    results: List[DetectedFile] = []
    exit_code = ExitCode.SUCCESS

    for filename in args.files:
        try:
            audio = AudioFile(filename, strict=args.strict)
            results.append(
                DetectedFile(
                    path=filename,
                    format=audio.file_type.value,
                    version=audio.get_version(),
                )
            )
        except AudioFileError as e:
            logging.warning(f"Cannot detect {filename}: {e}")
            results.append(DetectedFile(path=filename, error=str(e)))
            if exit_code == ExitCode.SUCCESS:
                exit_code = classify_error(e)[0]

    if use_json:
        json_output(
            DetectResponse(
                status="success" if exit_code == ExitCode.SUCCESS else "completed_with_errors",
                files=results,
            ),
            exit_code,
        )

    console = Console()
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("File", style="cyan")
    table.add_column("Format", style="green")
    table.add_column("Version", style="yellow")
    for result in results:
        if result.error:
            table.add_row(result.path, f"[red]{result.error}[/red]", "")
        else:
            table.add_row(result.path, result.format, result.version)
    console.print(table)
    if exit_code != ExitCode.SUCCESS:
        sys.exit(exit_code)
