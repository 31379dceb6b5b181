"""Helpers shared by the container readers and writers."""

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

from ..codecs import ape, id3v1, id3v2
from ..constants import ID3V1_SIZE, ID3V2_HEADER_SIZE
from ..errors import AudioTagError, MalformedHeaderError
from ..file import TaggedFile
from ..tag import Tag, TagType
from ..utils import stream_length

logger = logging.getLogger(__name__)


def parse_tag(tagged: TaggedFile, tag_type: TagType, parser: Callable[[], Tag]) -> Optional[Tag]:
    """Run ``parser`` and add its tag to ``tagged``.

    A failing parser only loses its own tag: the error is logged and kept in
    ``tagged.read_errors``.
    """
    try:
        tag = parser()
    except (AudioTagError, struct.error) as e:
        logger.warning(f"Failed to read {tag_type.value} tag: {e}")
        tagged.read_errors[tag_type] = e
        return None
    tagged.insert_tag(tag)
    return tag


def read_all(f: BinaryIO) -> bytes:
    f.seek(0)
    return f.read()


def commit(f: BinaryIO, data: bytes):
    """Replace the whole content of ``f`` with ``data``."""
    f.seek(0)
    f.truncate()
    f.write(data)
    f.flush()
    logger.debug(f"Wrote {len(data)} bytes")


def skip_id3v2(f: BinaryIO) -> int:
    """Skip an ID3v2 tag at the current position, returning the new position."""
    header = id3v2.read_header(f)
    if header is not None:
        f.seek(header.total_size - ID3V2_HEADER_SIZE, 1)
    return f.tell()


@dataclass
class TagLayout:
    """Where the tags of an MP3 or Monkey's Audio file sit.

    ``audio_start`` follows the leading ID3v2 tag(s), ``audio_end`` precedes
    the trailing APE and ID3v1 tags.
    """

    length: int
    audio_start: int = 0
    audio_end: int = 0
    ape_start: Optional[int] = None
    id3v1_start: Optional[int] = None
    ape_error: Optional[Exception] = None


def locate_trailing_tags(f: BinaryIO, layout: TagLayout):
    """Fill in the trailing ID3v1 and APE positions of ``layout``."""
    end = layout.length
    layout.id3v1_start = id3v1.find(f, end)
    if layout.id3v1_start is not None:
        end = layout.id3v1_start
    try:
        found = ape.find(f, end)
    except MalformedHeaderError as e:
        layout.ape_error = e
        found = None
    if found is not None:
        layout.ape_start = found[0]
        end = found[0]
    layout.audio_end = max(end, layout.audio_start)


def read_trailing_tags(f: BinaryIO, tagged: TaggedFile, layout: TagLayout):
    if layout.id3v1_start is not None:
        def read_id3v1():
            f.seek(layout.id3v1_start)
            return id3v1.parse(f.read(ID3V1_SIZE))

        parse_tag(tagged, TagType.ID3V1, read_id3v1)

    if layout.ape_error is not None:
        logger.warning(f"Failed to read APE tag: {layout.ape_error}")
        tagged.read_errors[TagType.APE] = layout.ape_error

    end = layout.id3v1_start if layout.id3v1_start is not None else layout.length
    if layout.ape_start is not None:
        parse_tag(tagged, TagType.APE, lambda: ape.read_from(f, end)[1])


def scan_leading_tags(f: BinaryIO, tagged: Optional[TaggedFile]) -> int:
    """Read (or skip, when ``tagged`` is None) leading ID3v2 tags.

    Returns:
        The offset right after them
    """
    f.seek(0)
    while True:
        start = f.tell()
        try:
            header = id3v2.read_header(f)
        except MalformedHeaderError as e:
            if tagged is not None:
                logger.warning(f"Failed to read ID3v2 header at offset {start}: {e}")
                tagged.read_errors[TagType.ID3V2] = e
            f.seek(start)
            return start
        if header is None:
            return start
        if tagged is None or tagged.contains_tag_type(TagType.ID3V2):
            f.seek(start + header.total_size)
            continue

        def read_id3v2():
            f.seek(start)
            return id3v2.read_from(f)[1]

        parse_tag(tagged, TagType.ID3V2, read_id3v2)
        f.seek(start + header.total_size)


def tag_layout(f: BinaryIO) -> TagLayout:
    layout = TagLayout(length=stream_length(f))
    layout.audio_start = scan_leading_tags(f, None)
    locate_trailing_tags(f, layout)
    return layout


def write_edge_tag(f: BinaryIO, tag: Tag, padding: int = 0):
    """Write an ID3v2, APE or ID3v1 tag of a file whose tags sit at its edges."""
    layout = tag_layout(f)
    if layout.ape_error is not None:
        raise layout.ape_error
    data = read_all(f)
    ape_end = layout.id3v1_start if layout.id3v1_start is not None else layout.length
    ape_start = layout.ape_start if layout.ape_start is not None else ape_end

    if tag.tag_type == TagType.ID3V2:
        new = id3v2.render(tag, padding) + data[layout.audio_start:]
    elif tag.tag_type == TagType.APE:
        new = data[:ape_start] + ape.render(tag) + data[ape_end:]
    elif tag.tag_type == TagType.ID3V1:
        new = data[:ape_end] + id3v1.render(tag)
    else:
        raise ValueError(f"{tag.tag_type.value} tags are not written at the file edges")
    commit(f, new)
