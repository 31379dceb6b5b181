"""audiotag - read and write audio file metadata.

One tag model (Tag, TagItem, ItemKey) over the metadata formats of the common
audio containers. Reading probes the file type, extracts the stream
properties and parses every tag block found; writing re-serializes a single
tag and leaves every other byte of the file in place.

Main modules:
    probe: File type detection and the read entry points
    file: FileType and TaggedFile
    tag: The canonical tag model and per-format key tables
    codecs: Binary codecs of each tag format
    containers: Readers and writers of each container
    cli: Command-line interface (audiotag command)

Core modules:
    config: Configuration of the command-line tool
    errors: Exception hierarchy
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("audiotag")
except PackageNotFoundError:
    # Not installed: read the version straight from pyproject.toml
    import tomllib
    from pathlib import Path

    _pyproject = Path(__file__).parent.parent.parent / "pyproject.toml"
    try:
        with open(_pyproject, "rb") as _f:
            __version__ = tomllib.load(_f)["project"]["version"]
    except (OSError, KeyError, tomllib.TOMLDecodeError):
        __version__ = "0.0.0+unknown"

from .errors import (
    AudioTagError,
    EncodingError,
    IoError,
    MalformedHeaderError,
    UnknownFormatError,
    UnsupportedTagError,
)
from .file import FileType, TaggedFile
from .probe import Probe, guess_from_ext, read_from, read_from_path
from .properties import FileProperties
from .tag import ItemKey, Locator, Picture, PictureType, Tag, TagItem, TagType

__all__ = [
    "__version__",
    "Probe",
    "read_from_path",
    "read_from",
    "guess_from_ext",
    "TaggedFile",
    "FileType",
    "FileProperties",
    "Tag",
    "TagType",
    "TagItem",
    "ItemKey",
    "Picture",
    "PictureType",
    "Locator",
    "AudioTagError",
    "IoError",
    "UnknownFormatError",
    "UnsupportedTagError",
    "MalformedHeaderError",
    "EncodingError",
]
