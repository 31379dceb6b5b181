"""Remove command - Strip a tag block from an audio file."""

import argparse

from rich.console import Console

from ...errors import AudioTagError
from ...tag import Tag
from ..schemas import WriteSuccessResponse
from ..utils import ExitCode, fail, json_output, load_config, parse_tag_type


def cmd_remove(args: argparse.Namespace) -> None:
    """Remove the block of one tag type from a file.

    Args:
        args: Parsed command-line arguments
    """
    use_json = getattr(args, "json", False)
    console = Console(quiet=use_json)
    config = load_config(getattr(args, "config", None))

    try:
        tag_type = parse_tag_type(args.tag_type)
        Tag(tag_type).remove_from_path(args.file)
    except (AudioTagError, ValueError) as e:
        fail(console, use_json, e)
        return

    if use_json:
        json_output(
            WriteSuccessResponse(path=args.file, tag_type=tag_type.value, items=0),
            ExitCode.SUCCESS,
            indent=config.get_json_indent(),
        )
    console.print(f"[green]✓ Removed the {tag_type.value} tag[/green]")
