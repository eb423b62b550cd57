"""Cover command - Export, set or remove embedded cover art."""

import argparse
import logging
import sys

from rich.console import Console
from rich.markup import escape

from ...codecs.picture import PictureType
from ...config import Config
from ...constants import DEFAULT_MIME_TYPE
from ...fileio import read_file
from ...images import inspect_image
from ...models import CoverArt
from ...tag import AudioFile
from ..schemas import CoverResponse
from ..utils import ExitCode, json_output


def cmd_cover_export(args: argparse.Namespace) -> None:
    """Save the cover image of a file.

    Exits with ExitCode.ERROR when the file has no cover.

    Args:
        args: Parsed command-line arguments
    """
    use_json = getattr(args, "json", False)
    audio = AudioFile(args.file, strict=args.strict, config=Config())
    cover = audio.get_cover()
    if cover is None:
        if use_json:
            json_output(
                CoverResponse(status="not_found", action="export", path=str(args.file)),
                ExitCode.ERROR,
            )
        Console(stderr=True).print(f"[yellow]No cover art in {escape(str(args.file))}[/yellow]")
        sys.exit(ExitCode.ERROR)

    output = audio.export_cover(args.output)
    if use_json:
        json_output(
            CoverResponse(
                action="export",
                path=str(args.file),
                image=str(output),
                mime_type=cover.mime_type,
                size=len(cover.data),
            ),
            ExitCode.SUCCESS,
        )
    Console().print(
        f"[green]✓[/green] Exported {PictureType.describe(cover.picture_type).lower()} "
        f"({cover.mime_type}, {len(cover.data):,} bytes) to [cyan]{escape(str(output))}[/cyan]"
    )


def load_cover(args: argparse.Namespace) -> CoverArt:
    """CoverArt for the image named on the command line.

    The MIME type and dimensions come from the image itself unless
    --mime-type is given.
    """
    data = read_file(args.image)
    info = inspect_image(data)
    mime_type = args.mime_type or (info.mime_type if info else None)
    if not mime_type:
        logging.warning(f"Cannot identify {args.image}, assuming {DEFAULT_MIME_TYPE}")
        mime_type = DEFAULT_MIME_TYPE
    return CoverArt(
        data=data,
        mime_type=mime_type,
        description=args.description,
        picture_type=args.picture_type,
        width=info.width if info else None,
        height=info.height if info else None,
        depth=info.depth if info and info.depth else None,
    )


def cmd_cover_set(args: argparse.Namespace) -> None:
    """Embed an image, replacing a picture of the same type.

    Args:
        args: Parsed command-line arguments
    """
    cover = load_cover(args)
    audio = AudioFile(args.file, strict=args.strict, config=Config())
    changed = audio.set_cover(cover)

    if getattr(args, "json", False):
        json_output(
            CoverResponse(
                action="set",
                path=str(args.file),
                image=str(args.image),
                mime_type=cover.mime_type,
                size=len(cover.data),
                changed=changed,
            ),
            ExitCode.SUCCESS,
        )
    Console().print(
        f"[green]✓[/green] Set {PictureType.describe(cover.picture_type).lower()} of "
        f"[cyan]{escape(str(args.file))}[/cyan] ({cover.mime_type}, {len(cover.data):,} bytes)"
    )


def cmd_cover_remove(args: argparse.Namespace) -> None:
    """Remove every embedded picture.

    Args:
        args: Parsed command-line arguments
    """
    audio = AudioFile(args.file, strict=args.strict, config=Config())
    changed = audio.remove_cover()

    if getattr(args, "json", False):
        json_output(
            CoverResponse(action="remove", path=str(args.file), changed=changed),
            ExitCode.SUCCESS,
        )
    console = Console()
    if changed:
        console.print(f"[green]✓[/green] Removed cover art from [cyan]{escape(str(args.file))}[/cyan]")
    else:
        console.print(f"[yellow]No cover art to remove:[/yellow] {escape(str(args.file))}")
