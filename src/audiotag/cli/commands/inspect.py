"""Inspect command - Display stream properties and tags of an audio file."""

import argparse
import logging

from rich.console import Console
from rich.table import Table

from ...errors import AudioTagError
from ...file import TaggedFile
from ...tag import Tag
from ..schemas import InspectResponse
from ..utils import ExitCode, fail, format_value, json_output, load_config, read_path


def _properties_table(tagged: TaggedFile) -> Table:
    props = tagged.properties
    table = Table(title=f"{tagged.file_type.value} Properties", show_header=False)
    table.add_column("Field", style="cyan", width=16)
    table.add_column("Value", style="magenta")

    seconds = props.duration.total_seconds()
    table.add_row("Duration", f"{int(seconds // 60)}:{seconds % 60:06.3f}")
    for label, value, unit in (
        ("Overall bitrate", props.overall_bitrate, "kbps"),
        ("Audio bitrate", props.audio_bitrate, "kbps"),
        ("Sample rate", props.sample_rate, "Hz"),
        ("Channels", props.channels, ""),
    ):
        table.add_row(label, f"{value} {unit}".strip() if value is not None else "[dim]unknown[/dim]")
    return table


def _tag_table(tag: Tag, show_pictures: bool) -> Table:
    table = Table(title=f"{tag.tag_type.value} Tag ({len(tag)} items)")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="magenta", overflow="fold")
    for item in tag:
        key = item.key_name + (" [dim](read-only)[/dim]" if item.read_only else "")
        table.add_row(key, format_value(item.value, show_pictures))
    return table


def cmd_inspect(args: argparse.Namespace) -> None:
    """Display the properties and tags of a file.

    Args:
        args: Parsed command-line arguments
    """
    use_json = getattr(args, "json", False)

    # In JSON mode, suppress INFO/DEBUG logs to keep output clean for parsing
    if use_json and logging.getLogger().level < logging.WARNING:
        logging.getLogger().setLevel(logging.WARNING)

    console = Console(quiet=use_json)
    config = load_config(getattr(args, "config", None))

    try:
        tagged = read_path(args.file, config, read_tags=False if args.no_tags else None)
    except AudioTagError as e:
        fail(console, use_json, e)
        return

    if args.all:
        tags = tagged.tags
    else:
        first = tagged.first_tag()
        tags = [first] if first is not None else []

    if use_json:
        json_output(
            InspectResponse.from_tagged_file(args.file, tagged, tags),
            ExitCode.SUCCESS,
            indent=config.get_json_indent(),
        )

    console.print(_properties_table(tagged))
    console.print()
    if not tags and not args.no_tags:
        console.print("[yellow]No tags found[/yellow]")
    for tag in tags:
        console.print(_tag_table(tag, config.get_show_pictures()))
        console.print()
    for tag_type, error in tagged.read_errors.items():
        console.print(f"[red]✗ {tag_type.value} tag could not be read: {error}[/red]")
