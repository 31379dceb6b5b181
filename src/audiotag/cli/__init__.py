"""Command-line interface for audiotag.

This package provides the 'audiotag' command-line tool with four subcommands:
    inspect: Show stream properties and tags of a file
    set: Set KEY=VALUE items on a tag
    remove: Remove a tag block from a file
    convert: Copy a tag into another tag type

Modules:
    commands/: Command implementations
    schemas.py: Pydantic models of the --json output
    utils.py: CLI utility functions
"""

import argparse
import logging
import sys

from rich_argparse import RichHelpFormatter

from .. import __version__
from ..tag import TagType
from .commands import cmd_convert, cmd_inspect, cmd_remove, cmd_set
from .utils import ExitCode, setup_logging

__all__ = [
    "main",
    "build_parser",
    "cmd_inspect",
    "cmd_set",
    "cmd_remove",
    "cmd_convert",
    "setup_logging",
]

TAG_TYPE_HELP = "Tag type: " + ", ".join(t.value for t in TagType)


class RichRawHelpFormatter(RichHelpFormatter, argparse.RawDescriptionHelpFormatter):
    """Combines Rich formatting with the ability to keep line breaks (Raw)."""
    pass


def build_parser() -> argparse.ArgumentParser:
    # Parent parser for shared options
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
        default=None,
        help="Set logging level (disabled by default)",
    )
    parent_parser.add_argument("-c", "--config", help="Path to configuration file")

    parser = argparse.ArgumentParser(
        prog="audiotag",
        usage="audiotag <command> [options]",
        description="audiotag - Read and write audio file metadata",
        formatter_class=RichRawHelpFormatter,
        parents=[parent_parser],
    )

    subparsers = parser.add_subparsers(
        title="Commands",
        dest="command",
        metavar="",
    )

    # ──────────────────────────────
    # inspect
    # ──────────────────────────────
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Show stream properties and tags",
        usage="audiotag inspect <file> [options]",
        description="Probe an audio file and display its properties and tags",
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    inspect_parser.add_argument("file", help="Audio file to inspect")
    inspect_parser.add_argument("--json", action="store_true", help="Print a JSON document")
    inspect_parser.add_argument(
        "--no-tags",
        action="store_true",
        help="Read the stream properties only",
    )
    inspect_parser.add_argument(
        "--all",
        action="store_true",
        help="Show every tag, not only the primary one",
    )
    inspect_parser.set_defaults(func=cmd_inspect)

    # ──────────────────────────────
    # set
    # ──────────────────────────────
    set_parser = subparsers.add_parser(
        "set",
        help="Set items on a tag",
        usage="audiotag set <file> KEY=VALUE... [options]",
        description=(
            "Set items on the primary (or chosen) tag and save the file. "
            "KEY is a field name such as title or TrackNumber, or a raw key. "
            "An empty VALUE removes the key."
        ),
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    set_parser.add_argument("file", help="Audio file to modify")
    set_parser.add_argument("items", nargs="+", metavar="KEY=VALUE", help="Items to set")
    set_parser.add_argument("-t", "--tag-type", help=TAG_TYPE_HELP)
    set_parser.add_argument("--json", action="store_true", help="Print a JSON document")
    set_parser.set_defaults(func=cmd_set)

    # ──────────────────────────────
    # remove
    # ──────────────────────────────
    remove_parser = subparsers.add_parser(
        "remove",
        help="Remove a tag block",
        usage="audiotag remove <file> --tag-type T",
        description="Remove the block of one tag type from the file",
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    remove_parser.add_argument("file", help="Audio file to modify")
    remove_parser.add_argument("-t", "--tag-type", required=True, help=TAG_TYPE_HELP)
    remove_parser.add_argument("--json", action="store_true", help="Print a JSON document")
    remove_parser.set_defaults(func=cmd_remove)

    # ──────────────────────────────
    # convert
    # ──────────────────────────────
    convert_parser = subparsers.add_parser(
        "convert",
        help="Copy a tag into another tag type",
        usage="audiotag convert <file> --from T --to T",
        description=(
            "Translate a tag into another tag type of the same file. "
            "Items the destination cannot represent are dropped."
        ),
        parents=[parent_parser],
        formatter_class=RichHelpFormatter,
    )
    convert_parser.add_argument("file", help="Audio file to modify")
    convert_parser.add_argument("--from", dest="source", required=True, help=TAG_TYPE_HELP)
    convert_parser.add_argument("--to", dest="target", required=True, help=TAG_TYPE_HELP)
    convert_parser.add_argument("--json", action="store_true", help="Print a JSON document")
    convert_parser.set_defaults(func=cmd_convert)

    return parser


def main() -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    # Show help if no command is provided
    if not args.command:
        parser.print_help()
        sys.exit(ExitCode.FAILURE)

    # Logging setup
    if args.log_level:
        setup_logging(args.log_level)
    else:
        setup_logging("critical")

    # Execute command
    try:
        args.func(args)
    except KeyboardInterrupt:
        logging.info("\nOperation cancelled by user")
        sys.exit(ExitCode.INTERRUPTED)
    except Exception as e:
        logging.error(f"Error: {e}", exc_info=args.log_level == "debug")
        sys.exit(ExitCode.FAILURE)


if __name__ == "__main__":
    main()
