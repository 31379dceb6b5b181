"""CLI command implementations.

Each module in this package implements a specific audiotag subcommand:
    inspect.py: Show stream properties and tags
    set.py: Set items on a tag and save it
    remove.py: Remove a tag block
    convert.py: Copy a tag into another tag type
"""

from .convert import cmd_convert
from .inspect import cmd_inspect
from .remove import cmd_remove
from .set import cmd_set

__all__ = [
    "cmd_inspect",
    "cmd_set",
    "cmd_remove",
    "cmd_convert",
]
