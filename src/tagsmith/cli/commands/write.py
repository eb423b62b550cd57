"""Write command - Apply a JSON metadata update to a file."""

import argparse
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ...config import Config
from ...errors import AudioIOError
from ...models import Metadata
from ...tag import AudioFile
from ..schemas import WriteResponse
from ..utils import ExitCode, json_output


def load_update(args: argparse.Namespace) -> Metadata:
    """The write request given by --metadata or --from-file.

    Raises:
        AudioIOError: If the JSON file cannot be read
        TagParseError: If the JSON is invalid
    """
    if args.from_file:
        try:
            text = Path(args.from_file).read_text(encoding="utf-8")
        except OSError as e:
            raise AudioIOError(f"Cannot read {args.from_file}: {e}", args.from_file) from e
    else:
        text = args.metadata
    return Metadata.from_json(text)


def cmd_write(args: argparse.Namespace) -> None:
    """Write the provided fields to a file.

    Args:
        args: Parsed command-line arguments
    """
    update = load_update(args)
    config = Config()
    audio = AudioFile(args.file, strict=args.strict, config=config)
    changed = audio.write(update)

    fields = update.updates()
    updated = sorted(name for name, value in fields.items() if value is not None)
    removed = sorted(name for name, value in fields.items() if value is None)

    if getattr(args, "json", False):
        json_output(
            WriteResponse(
                status="success" if changed else "unchanged",
                path=str(args.file),
                format=audio.file_type.value,
                updated=updated,
                removed=removed,
            ),
            ExitCode.SUCCESS,
        )

    console = Console()
    name = escape(str(args.file))
    if not changed:
        console.print(f"[yellow]No changes:[/yellow] {name}")
        return
    console.print(f"[green]✓[/green] Updated [cyan]{name}[/cyan]")
    if updated:
        console.print(f"  [dim]set:[/dim] {', '.join(updated)}")
    if removed:
        console.print(f"  [dim]removed:[/dim] {', '.join(removed)}")
