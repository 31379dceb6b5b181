"""Convert command - Copy a tag into another tag type."""

import argparse

from rich.console import Console

from ...errors import AudioTagError, UnsupportedTagError
from ..schemas import WriteSuccessResponse
from ..utils import ExitCode, fail, json_output, load_config, parse_tag_type, read_path


def cmd_convert(args: argparse.Namespace) -> None:
    """Translate the --from tag into a --to tag and save it.

    Items the destination cannot represent are dropped.

    Args:
        args: Parsed command-line arguments
    """
    use_json = getattr(args, "json", False)
    console = Console(quiet=use_json)
    config = load_config(getattr(args, "config", None))

    try:
        source_type = parse_tag_type(args.source)
        target_type = parse_tag_type(args.target)
        tagged = read_path(args.file, config, read_tags=True)
        source = tagged.tag(source_type)
        if source is None:
            raise UnsupportedTagError(f"{args.file} has no {source_type.value} tag")
        converted = source.to_dyn_tag(target_type)
        converted.save_to_path(args.file, config.get_id3v2_padding())
    except (AudioTagError, ValueError) as e:
        fail(console, use_json, e)
        return

    dropped = len(source) - len(converted)
    if use_json:
        json_output(
            WriteSuccessResponse(path=args.file, tag_type=target_type.value, items=len(converted)),
            ExitCode.SUCCESS,
            indent=config.get_json_indent(),
        )
    console.print(
        f"[green]✓ Converted {source_type.value} to {target_type.value} "
        f"({len(converted)} items, {dropped} dropped)[/green]"
    )
