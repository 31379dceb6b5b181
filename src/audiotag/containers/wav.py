"""RIFF WAVE: "fmt ", "fact" and "data" chunks plus LIST INFO and ID3v2 tags."""

import logging
import struct
from typing import BinaryIO, Optional

from ..codecs import id3v2, riff_info
from ..constants import RIFF_MAGIC, WAVE_MAGIC
from ..errors import MalformedHeaderError
from ..file import FileType, TaggedFile
from ..properties import FileProperties
from ..tag import Tag, TagType
from ..utils import bitrate_kbps, millis, read_exact, stream_length
from .chunks import iter_chunks, render_chunk, splice_chunks
from .common import commit, parse_tag, read_all

logger = logging.getLogger(__name__)

FORMAT_PCM = 0x0001
FORMAT_EXTENSIBLE = 0xFFFE
ID3_CHUNKS = (b"ID3 ", b"id3 ")


def read_riff_header(f: BinaryIO) -> int:
    """Check the RIFF/WAVE header, returning where the chunks end.

    Raises:
        MalformedHeaderError: If the file is not RIFF WAVE
    """
    f.seek(0)
    magic, size, form = struct.unpack("<4sI4s", read_exact(f, 12))
    if magic != RIFF_MAGIC or form != WAVE_MAGIC:
        raise MalformedHeaderError(f"Not a RIFF WAVE file (got {magic!r}/{form!r})")
    return min(8 + size, stream_length(f))


def parse_fmt(
    fmt: bytes,
    data_size: int,
    fact_samples: Optional[int],
    file_length: int,
) -> FileProperties:
    if len(fmt) < 16:
        raise MalformedHeaderError(f"'fmt ' chunk is {len(fmt)} bytes, expected at least 16")
    format_tag, channels, sample_rate, byte_rate, _block_align, _bits = struct.unpack(
        "<HHIIHH", fmt[:16]
    )
    if format_tag == FORMAT_EXTENSIBLE:
        if len(fmt) < 26:
            raise MalformedHeaderError("Extensible 'fmt ' chunk is missing its sub-format")
        # The sub-format GUID starts with the actual format tag
        (format_tag,) = struct.unpack("<H", fmt[24:26])
    if sample_rate == 0:
        raise MalformedHeaderError("'fmt ' chunk has a sample rate of 0")

    if format_tag != FORMAT_PCM and fact_samples:
        duration_ms = fact_samples * 1000 // sample_rate
    elif byte_rate:
        duration_ms = data_size * 1000 // byte_rate
    else:
        duration_ms = 0

    return FileProperties(
        duration=millis(duration_ms),
        overall_bitrate=bitrate_kbps(file_length, duration_ms),
        audio_bitrate=bitrate_kbps(data_size, duration_ms),
        sample_rate=sample_rate,
        channels=channels,
    )


def is_id3_chunk(f: BinaryIO, chunk) -> bool:
    return chunk.fourcc in ID3_CHUNKS


def _is_info_list(f: BinaryIO, chunk) -> bool:
    if chunk.fourcc != b"LIST" or chunk.size < 4:
        return False
    f.seek(chunk.data_start)
    return f.read(4) == riff_info.INFO_FORM


def read(f: BinaryIO, read_tags: bool = True) -> TaggedFile:
    tagged = TaggedFile(FileType.WAV)
    end = read_riff_header(f)
    length = stream_length(f)

    fmt = None
    data_size = 0
    fact_samples = None
    for chunk in iter_chunks(f, 12, end):
        if chunk.fourcc == b"fmt ":
            fmt = chunk.read(f)
        elif chunk.fourcc == b"fact" and chunk.size >= 4:
            (fact_samples,) = struct.unpack("<I", chunk.read(f)[:4])
        elif chunk.fourcc == b"data":
            data_size = chunk.size
        elif not read_tags:
            continue
        elif _is_info_list(f, chunk) and not tagged.contains_tag_type(TagType.RIFF_INFO):
            parse_tag(tagged, TagType.RIFF_INFO, lambda c=chunk: riff_info.parse(c.read(f)))
        elif chunk.fourcc in ID3_CHUNKS and not tagged.contains_tag_type(TagType.ID3V2):
            parse_tag(tagged, TagType.ID3V2, lambda c=chunk: id3v2.parse(c.read(f)))

    if fmt is None:
        logger.warning("WAV file has no 'fmt ' chunk, audio properties are unknown")
    else:
        try:
            tagged.properties = parse_fmt(fmt, data_size, fact_samples, length)
        except MalformedHeaderError as e:
            logger.warning(f"Failed to read WAV format: {e}")
    return tagged


def write(f: BinaryIO, tag: Tag, padding: int = 0):
    """Replace (or append, or remove) the LIST INFO or ID3 chunk."""
    end = read_riff_header(f)
    data = read_all(f)

    if tag.tag_type == TagType.RIFF_INFO:
        new = riff_info.render(tag)
        matches = _is_info_list
    elif tag.tag_type == TagType.ID3V2:
        rendered = id3v2.render(tag, padding)
        new = render_chunk(b"ID3 ", rendered) if rendered else b""
        matches = is_id3_chunk
    else:
        raise ValueError(f"{tag.tag_type.value} tags cannot be written to WAV files")

    body = WAVE_MAGIC + splice_chunks(data, 12, end, matches, new)
    commit(f, RIFF_MAGIC + struct.pack("<I", len(body)) + body + data[end:])
