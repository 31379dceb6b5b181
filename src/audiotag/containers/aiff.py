"""AIFF / AIFC: "COMM" and "SSND" chunks, text chunks and ID3v2 tags."""

import logging
import struct
from typing import BinaryIO

from ..codecs import aiff_text, id3v2
from ..constants import AIFF_FORMS, FORM_MAGIC
from ..errors import MalformedHeaderError
from ..file import FileType, TaggedFile
from ..properties import FileProperties
from ..tag import Tag, TagType
from ..utils import bitrate_kbps, millis, read_exact, read_extended_float, stream_length
from .chunks import iter_chunks, render_chunk, splice_chunks
from .common import commit, parse_tag, read_all
from .wav import ID3_CHUNKS, is_id3_chunk

logger = logging.getLogger(__name__)


def read_form_header(f: BinaryIO) -> int:
    """Check the FORM header, returning where the chunks end.

    Raises:
        MalformedHeaderError: If the file is not AIFF or AIFC
    """
    f.seek(0)
    magic, size, form = struct.unpack(">4sI4s", read_exact(f, 12))
    if magic != FORM_MAGIC or form not in AIFF_FORMS:
        raise MalformedHeaderError(f"Not an AIFF file (got {magic!r}/{form!r})")
    return min(8 + size, stream_length(f))


def parse_comm(comm: bytes, ssnd_size: int, file_length: int) -> FileProperties:
    if len(comm) < 18:
        raise MalformedHeaderError(f"'COMM' chunk is {len(comm)} bytes, expected at least 18")
    channels, sample_frames, _sample_size = struct.unpack(">hIh", comm[:8])
    sample_rate = int(read_extended_float(comm[8:18]))
    if sample_rate <= 0:
        raise MalformedHeaderError(f"'COMM' chunk has an invalid sample rate: {sample_rate}")
    duration_ms = sample_frames * 1000 // sample_rate
    return FileProperties(
        duration=millis(duration_ms),
        overall_bitrate=bitrate_kbps(file_length, duration_ms),
        audio_bitrate=bitrate_kbps(ssnd_size, duration_ms),
        sample_rate=sample_rate,
        channels=channels,
    )


def _is_text_chunk(f: BinaryIO, chunk) -> bool:
    return aiff_text.is_text_chunk(chunk.fourcc)


def read(f: BinaryIO, read_tags: bool = True) -> TaggedFile:
    tagged = TaggedFile(FileType.AIFF)
    end = read_form_header(f)
    length = stream_length(f)

    comm = None
    ssnd_size = 0
    text_chunks = []
    for chunk in iter_chunks(f, 12, end, big_endian=True):
        if chunk.fourcc == b"COMM":
            comm = chunk.read(f)
        elif chunk.fourcc == b"SSND":
            ssnd_size = chunk.size
        elif not read_tags:
            continue
        elif aiff_text.is_text_chunk(chunk.fourcc):
            text_chunks.append(render_chunk(chunk.fourcc, chunk.read(f), big_endian=True))
        elif chunk.fourcc in ID3_CHUNKS and not tagged.contains_tag_type(TagType.ID3V2):
            parse_tag(tagged, TagType.ID3V2, lambda c=chunk: id3v2.parse(c.read(f)))

    if text_chunks:
        parse_tag(tagged, TagType.AIFF_TEXT, lambda: aiff_text.parse(b"".join(text_chunks)))

    if comm is None:
        logger.warning("AIFF file has no 'COMM' chunk, audio properties are unknown")
    else:
        try:
            tagged.properties = parse_comm(comm, ssnd_size, length)
        except MalformedHeaderError as e:
            logger.warning(f"Failed to read AIFF 'COMM' chunk: {e}")
    return tagged


def write(f: BinaryIO, tag: Tag, padding: int = 0):
    """Replace the text chunks (placed after COMM when new) or the ID3 chunk."""
    end = read_form_header(f)
    data = read_all(f)

    if tag.tag_type == TagType.AIFF_TEXT:
        body = splice_chunks(
            data, 12, end, _is_text_chunk, aiff_text.render(tag), big_endian=True, after=b"COMM"
        )
    elif tag.tag_type == TagType.ID3V2:
        rendered = id3v2.render(tag, padding)
        new = render_chunk(b"ID3 ", rendered, big_endian=True) if rendered else b""
        body = splice_chunks(data, 12, end, is_id3_chunk, new, big_endian=True)
    else:
        raise ValueError(f"{tag.tag_type.value} tags cannot be written to AIFF files")

    body = data[8:12] + body
    commit(f, FORM_MAGIC + struct.pack(">I", len(body)) + body + data[end:])
