"""Utility functions for CLI operations."""

import logging
import sys
from enum import IntEnum
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel
from rich.console import Console

from ..config import Config
from ..errors import (
    EncodingError,
    IoError,
    MalformedHeaderError,
    UnknownFormatError,
    UnsupportedTagError,
)
from ..file import TaggedFile
from ..probe import Probe, read_from_path
from ..tag import ItemKey, Tag, TagType
from ..tag.item import Key
from .schemas import ErrorResponse


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1
    INTERRUPTED = 130


# Machine-readable error codes of ErrorResponse
ERROR_CODES = {
    IoError: "io_error",
    UnknownFormatError: "unknown_format",
    UnsupportedTagError: "unsupported_tag",
    MalformedHeaderError: "malformed_header",
    EncodingError: "encoding_error",
}


def error_code(error: Exception) -> str:
    for error_type, code in ERROR_CODES.items():
        if isinstance(error, error_type):
            return code
    return "invalid_input"


def json_output(model: BaseModel, exit_code: Optional[int] = None, indent: Optional[int] = None) -> None:
    """Print a response model as JSON, then exit with ``exit_code`` if given."""
    print(model.model_dump_json(exclude_none=True, indent=indent))
    if exit_code is not None:
        sys.exit(exit_code)


def setup_logging(level: str) -> None:
    """Configure logging based on user-specified level.

    Args:
        level: Logging level (debug, info, warning, error, critical)
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_tag_type(name: Optional[str]) -> Optional[TagType]:
    """Turn a --tag-type argument into a TagType (None passes through)."""
    if name is None:
        return None
    return TagType.from_name(name)


def parse_assignments(assignments: List[str]) -> List[Tuple[Key, str]]:
    """Split KEY=VALUE arguments.

    Known field names (``title``, ``TrackNumber``, ...) become ItemKeys, anything
    else is kept as a raw key.

    Raises:
        ValueError: If an argument has no '=' or an empty key
    """
    parsed: List[Tuple[Key, str]] = []
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Expected KEY=VALUE, got {assignment!r}")
        name = name.strip()
        key: Key = ItemKey.from_name(name) or name
        parsed.append((key, value))
    return parsed


def select_tag(tagged: TaggedFile, tag_type: Optional[TagType]) -> Tag:
    """Pick the tag a write command edits, creating it when absent.

    Without ``tag_type`` this is the file type's primary tag.
    """
    if tag_type is None:
        tag_type = tagged.file_type.primary_tag_type()
    tag = tagged.tag(tag_type)
    if tag is None:
        tag = Tag(tag_type)
        tagged.insert_tag(tag)
    return tag


def format_value(value, show_pictures: bool = True) -> str:
    """Human readable rendering of an item value."""
    if isinstance(value, bytes):
        return f"<{len(value)} bytes>"
    if not isinstance(value, str):
        # Picture
        return repr(value) if show_pictures else "<picture>"
    return value


def load_config(path: Optional[str] = None) -> Config:
    return Config(Path(path)) if path else Config()


def read_path(path: str, config: Config, read_tags: Optional[bool] = None) -> TaggedFile:
    """Read ``path`` the way the configuration asks for.

    Raises:
        AudioTagError: If the file cannot be read
    """
    if read_tags is None:
        read_tags = config.get_read_tags()
    if config.get_guess_by_signature():
        return read_from_path(path, read_tags)
    with Probe.open(path) as probe:
        return probe.read(read_tags)


def fail(console: Console, use_json: bool, error: Exception) -> None:
    """Report a failed command and exit with ExitCode.FAILURE."""
    if use_json:
        json_output(ErrorResponse(error=error_code(error), message=str(error)), ExitCode.FAILURE)
    logging.debug("Command failed", exc_info=error)
    console.print(f"[red]Error: {error}[/red]")
    sys.exit(ExitCode.FAILURE)
