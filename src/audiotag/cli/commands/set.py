"""Set command - Write items into a tag of an audio file."""

import argparse
import logging

from rich.console import Console

from ...errors import AudioTagError
from ...tag import TagItem
from ..schemas import WriteSuccessResponse
from ..utils import (
    ExitCode,
    fail,
    json_output,
    load_config,
    parse_assignments,
    parse_tag_type,
    read_path,
    select_tag,
)


def cmd_set(args: argparse.Namespace) -> None:
    """Set KEY=VALUE items on the primary (or chosen) tag and save it.

    An empty VALUE removes the key.

    Args:
        args: Parsed command-line arguments
    """
    use_json = getattr(args, "json", False)
    console = Console(quiet=use_json)
    config = load_config(getattr(args, "config", None))

    try:
        assignments = parse_assignments(args.items)
        tag_type = parse_tag_type(args.tag_type)
        tagged = read_path(args.file, config, read_tags=True)
        tag = select_tag(tagged, tag_type)
    except (AudioTagError, ValueError) as e:
        fail(console, use_json, e)
        return

    for key, value in assignments:
        existing = tag.get_item(key)
        if existing is not None and existing.read_only and config.get_preserve_read_only():
            logging.warning(f"Skipping read-only item {existing.key_name!r}")
            console.print(f"[yellow]Skipped read-only item {existing.key_name}[/yellow]")
            continue
        if not value:
            tag.remove_key(key)
        elif not tag.insert_item(TagItem(key, value, language=existing.language if existing else None)):
            console.print(
                f"[yellow]{tag.tag_type.value} tags cannot hold {TagItem(key, value).key_name}[/yellow]"
            )

    try:
        tag.save_to_path(args.file, config.get_id3v2_padding())
    except AudioTagError as e:
        fail(console, use_json, e)
        return

    if use_json:
        json_output(
            WriteSuccessResponse(path=args.file, tag_type=tag.tag_type.value, items=len(tag)),
            ExitCode.SUCCESS,
            indent=config.get_json_indent(),
        )
    console.print(f"[green]✓ Wrote {len(tag)} items to the {tag.tag_type.value} tag[/green]")
