"""CLI command implementations.

Each module in this package implements a specific tagsmith subcommand:
    detect.py: Detect the tag format of files
    read.py: Show metadata
    write.py: Apply a JSON metadata update
    info.py: Show technical information
    cover.py: Export, set or remove cover art
"""

from .cover import cmd_cover_export, cmd_cover_remove, cmd_cover_set
from .detect import cmd_detect
from .info import cmd_info
from .read import cmd_read
from .write import cmd_write

__all__ = [
    "cmd_cover_export",
    "cmd_cover_remove",
    "cmd_cover_set",
    "cmd_detect",
    "cmd_info",
    "cmd_read",
    "cmd_write",
]
