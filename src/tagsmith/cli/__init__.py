"""Command-line interface for tagsmith.

This package provides the 'tagsmith' command-line tool with subcommands:
    detect: Print the tag format of one or more files
    read: Show the metadata of a file
    write: Apply a JSON metadata update to a file
    info: Show technical information about a file
    cover: Export, set or remove embedded cover art

Modules:
    commands/: Command implementations
    schemas.py: Pydantic models for --json output
    utils.py: CLI utility functions
"""

import argparse
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich_argparse import RichHelpFormatter

from .. import __version__
from ..codecs.picture import PictureType
from ..config import OUTPUT_FORMATS
from ..errors import AudioFileError
from .schemas import ErrorResponse
from .utils import ExitCode, classify_error, json_output, setup_logging
from .commands import (
    cmd_cover_export,
    cmd_cover_remove,
    cmd_cover_set,
    cmd_detect,
    cmd_info,
    cmd_read,
    cmd_write,
)

__all__ = [
    "main",
    "cmd_cover_export",
    "cmd_cover_remove",
    "cmd_cover_set",
    "cmd_detect",
    "cmd_info",
    "cmd_read",
    "cmd_write",
    "setup_logging",
]


class RichRawHelpFormatter(RichHelpFormatter, argparse.RawDescriptionHelpFormatter):
    """Combines Rich formatting with the ability to keep line breaks (Raw)."""
    pass


def picture_type_arg(value: str) -> int:
    """argparse type for picture type codes 0..20."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if number not in set(PictureType):
        raise argparse.ArgumentTypeError(f"picture type must be 0-{int(max(PictureType))}, got {number}")
    return number


def report_error(args: argparse.Namespace, error: Exception) -> None:
    """Print an error (as ErrorResponse with --json) and exit with its code."""
    exit_code, name = classify_error(error)
    if getattr(args, "json", False):
        json_output(
            ErrorResponse(error=name, message=str(error), exit_code=exit_code),
            exit_code,
        )
    logging.error(f"Error: {error}", exc_info=args.log_level == "debug")
    Console(stderr=True).print(f"[red]Error: {escape(str(error))}[/red]", highlight=False)
    sys.exit(exit_code)


def build_parent_parser(suppress: bool = False) -> argparse.ArgumentParser:
    """Options accepted before and after the subcommand.

    The copy given to subparsers uses SUPPRESS defaults, so an option given
    before the subcommand is not reset by the subparser's default.
    """
    parent_parser = argparse.ArgumentParser(add_help=False)

    parent_parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parent_parser.add_argument(
        "-l",
        "--log-level",
        default=argparse.SUPPRESS if suppress else None,
        help="Set logging level (disabled by default)",
    )
    parent_parser.add_argument(
        "--strict",
        action="store_true",
        default=argparse.SUPPRESS if suppress else False,
        help="Fail on truncated or malformed tags instead of reading what is there",
    )
    parent_parser.add_argument(
        "--json",
        action="store_true",
        default=argparse.SUPPRESS if suppress else False,
        help="Print machine-readable JSON responses",
    )
    return parent_parser


def main() -> None:
    """Main CLI entry point."""

    parent_parser = build_parent_parser(suppress=True)

    parser = argparse.ArgumentParser(
        prog="tagsmith",
        usage="tagsmith <command> [options]",
        description="tagsmith - Read and write audio file metadata (ID3, FLAC, Ogg, MP4, APE)",
        formatter_class=RichRawHelpFormatter,
        parents=[build_parent_parser()],
    )

    # Subcommands
    subparsers = parser.add_subparsers(
        title="Commands",
        dest="command",
        metavar="",
    )

    # ──────────────────────────────
    # detect
    # ──────────────────────────────
    detect_parser = subparsers.add_parser(
        "detect",
        help="Detect the tag format of audio files",
        usage="tagsmith detect <file> [<file> ...]",
        description="Identify each file's tag container from its signature",
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    detect_parser.add_argument("files", nargs="+", metavar="file", help="Audio files to examine")
    detect_parser.set_defaults(func=cmd_detect)

    # ──────────────────────────────
    # read
    # ──────────────────────────────
    read_parser = subparsers.add_parser(
        "read",
        help="Show the metadata of a file",
        usage="tagsmith read <file> [--format pretty|json|table]",
        description="Decode the embedded tag and print its normalized fields",
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    read_parser.add_argument("file", help="Audio file to read")
    read_parser.add_argument(
        "-f",
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output style (default: from config, initially pretty)",
    )
    read_parser.set_defaults(func=cmd_read)

    # ──────────────────────────────
    # write
    # ──────────────────────────────
    write_parser = subparsers.add_parser(
        "write",
        help="Apply a JSON metadata update to a file",
        usage="tagsmith write <file> (--metadata JSON | --from-file PATH)",
        description=(
            "Set the fields given in a JSON object. A null value removes the "
            "field, fields that are not mentioned are left untouched."
        ),
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    write_parser.add_argument("file", help="Audio file to update")
    source = write_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-m", "--metadata", help='JSON object, e.g. \'{"title": "Foo"}\'')
    source.add_argument("--from-file", help="Read the JSON object from a file")
    write_parser.set_defaults(func=cmd_write)

    # ──────────────────────────────
    # info
    # ──────────────────────────────
    info_parser = subparsers.add_parser(
        "info",
        help="Show technical information about a file",
        usage="tagsmith info <file>",
        description="Show format, tag version, file size and stream details",
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    info_parser.add_argument("file", help="Audio file to examine")
    info_parser.set_defaults(func=cmd_info)

    # ──────────────────────────────
    # cover
    # ──────────────────────────────
    cover_parser = subparsers.add_parser(
        "cover",
        help="Export, set or remove embedded cover art",
        usage="tagsmith cover <export|set|remove> <file> [options]",
        description="Manage the pictures embedded in FLAC and ID3v2 files",
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    cover_subparsers = cover_parser.add_subparsers(
        title="Actions",
        dest="cover_command",
        metavar="",
    )

    export_parser = cover_subparsers.add_parser(
        "export",
        help="Save the cover image to a file",
        usage="tagsmith cover export <file> [-o PATH]",
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    export_parser.add_argument("file", help="Audio file to read the cover from")
    export_parser.add_argument(
        "-o",
        "--output",
        help="Image path (default: <file stem>.cover.<ext> next to the audio file)",
    )
    export_parser.set_defaults(func=cmd_cover_export)

    set_parser = cover_subparsers.add_parser(
        "set",
        help="Embed an image as cover art",
        usage="tagsmith cover set <file> <image> [options]",
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    set_parser.add_argument("file", help="Audio file to update")
    set_parser.add_argument("image", help="Image file to embed")
    set_parser.add_argument(
        "--mime-type",
        help="MIME type of the image (default: detected from the image)",
    )
    set_parser.add_argument("--description", default="", help="Picture description")
    set_parser.add_argument(
        "--type",
        dest="picture_type",
        type=picture_type_arg,
        default=3,
        metavar="N",
        help="Picture type 0-20 (default: 3, front cover)",
    )
    set_parser.set_defaults(func=cmd_cover_set)

    remove_parser = cover_subparsers.add_parser(
        "remove",
        help="Remove all embedded pictures",
        usage="tagsmith cover remove <file>",
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    remove_parser.add_argument("file", help="Audio file to update")
    remove_parser.set_defaults(func=cmd_cover_remove)

    # Parse args
    args = parser.parse_args()

    # Show help if no command is provided
    if not args.command:
        parser.print_help()
        sys.exit(ExitCode.ERROR)
    if args.command == "cover" and not args.cover_command:
        cover_parser.print_help()
        sys.exit(ExitCode.ERROR)

    # Logging setup
    if args.log_level:
        try:
            setup_logging(args.log_level)
        except ValueError as e:
            parser.error(str(e))
    else:
        setup_logging("critical")

    # Execute command
    try:
        args.func(args)
    except KeyboardInterrupt:
        logging.info("\nOperation cancelled by user")
        sys.exit(ExitCode.INTERRUPTED)
    except AudioFileError as e:
        report_error(args, e)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=True)
        report_error(args, e)


if __name__ == "__main__":
    main()
