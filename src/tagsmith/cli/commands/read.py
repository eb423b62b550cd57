"""Read command - Show the metadata of a file."""

import argparse
import logging
from typing import List, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...codecs.picture import PictureType
from ...config import Config
from ...models import TEXT_FIELDS, Metadata
from ...tag import AudioFile
from ..schemas import ReadResponse
from ..utils import ExitCode, json_output

FIELD_LABELS = {
    "title": "Title",
    "artist": "Artist",
    "album": "Album",
    "year": "Year",
    "track": "Track",
    "genre": "Genre",
    "comment": "Comment",
    "lyrics": "Lyrics",
    "album_artist": "Album artist",
    "composer": "Composer",
    "cover": "Cover",
}


def describe_fields(metadata: Metadata) -> List[Tuple[str, str]]:
    """(label, text) pairs for the present fields, cover summarized."""
    rows = []
    for name in TEXT_FIELDS:
        value = getattr(metadata, name)
        if value is not None:
            rows.append((FIELD_LABELS[name], value))
    cover = metadata.cover
    if cover is not None:
        size = f"{cover.width}x{cover.height}, " if cover.width and cover.height else ""
        rows.append(
            (
                FIELD_LABELS["cover"],
                f"{PictureType.describe(cover.picture_type)}, {cover.mime_type}, "
                f"{size}{len(cover.data):,} bytes",
            )
        )
    return rows


def cmd_read(args: argparse.Namespace) -> None:
    """Print the metadata of one file.

    Args:
        args: Parsed command-line arguments
    """
    config = Config()
    audio = AudioFile(args.file, strict=args.strict, config=config)
    metadata = audio.read()
    logging.debug(f"Read {len(metadata.model_fields_set)} field(s) from {args.file}")

    if getattr(args, "json", False):
        json_output(
            ReadResponse(
                path=str(args.file),
                format=audio.file_type.value,
                metadata=metadata.to_dict(),
            ),
            ExitCode.SUCCESS,
        )

    output_format = args.output_format or config.get_output_format()
    if output_format == "json":
        print(metadata.to_json(indent=2))
        return

    console = Console()
    rows = describe_fields(metadata)
    if output_format == "table":
        table = Table(title=escape(str(args.file)), show_header=True, header_style="bold magenta")
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")
        for label, value in rows:
            table.add_row(label, escape(value))
        console.print(table)
        return

    console.print(f"\n[cyan]{escape(str(args.file))}[/cyan] [dim]({audio.file_type.value})[/dim]\n")
    if not rows:
        console.print("[yellow]No metadata found[/yellow]\n")
        return
    width = max(len(label) for label, _ in rows)
    for label, value in rows:
        console.print(f"  [bold]{label:<{width}}[/bold]  {escape(value)}", highlight=False)
    console.print()
