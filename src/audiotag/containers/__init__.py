"""Container readers and writers, dispatched by FileType."""

import logging
from typing import BinaryIO, Callable, Dict

from ..errors import UnsupportedTagError
from ..file import FileType, TaggedFile
from ..tag import Tag
from . import aiff, ape_file, flac, mp4, mpeg, ogg, wav

logger = logging.getLogger(__name__)

Reader = Callable[[BinaryIO, bool], TaggedFile]
Writer = Callable[[BinaryIO, Tag, int], None]

READERS: Dict[FileType, Reader] = {
    FileType.AIFF: aiff.read,
    FileType.APE: ape_file.read,
    FileType.FLAC: flac.read,
    FileType.MP3: mpeg.read,
    FileType.MP4: mp4.read,
    FileType.OPUS: ogg.read_opus,
    FileType.VORBIS: ogg.read_vorbis,
    FileType.WAV: wav.read,
}

WRITERS: Dict[FileType, Writer] = {
    FileType.AIFF: aiff.write,
    FileType.APE: ape_file.write,
    FileType.FLAC: flac.write,
    FileType.MP3: mpeg.write,
    FileType.MP4: mp4.write,
    FileType.OPUS: ogg.write_opus,
    FileType.VORBIS: ogg.write_vorbis,
    FileType.WAV: wav.write,
}


def read_file(f: BinaryIO, file_type: FileType, read_tags: bool = True) -> TaggedFile:
    """Parse ``f`` as ``file_type``."""
    f.seek(0)
    return READERS[file_type](f, read_tags)


def write_tag(f: BinaryIO, file_type: FileType, tag: Tag, padding: int = 0):
    """Write ``tag`` into ``f``; an empty tag removes its block.

    Raises:
        UnsupportedTagError: If ``file_type`` cannot carry the tag type
    """
    if not file_type.supports_tag_type(tag.tag_type):
        raise UnsupportedTagError(
            f"{tag.tag_type.value} tags cannot be written to {file_type.value} files"
        )
    logger.info(f"Writing {tag.tag_type.value} tag ({len(tag)} items) to {file_type.value} file")
    f.seek(0)
    WRITERS[file_type](f, tag, padding)
    f.seek(0)
