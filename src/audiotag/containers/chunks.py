"""FourCC + size chunk traversal for RIFF (little endian) and IFF/AIFF (big endian)."""

import io
import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, Optional

from ..utils import read_exact

logger = logging.getLogger(__name__)

CHUNK_HEADER_SIZE = 8


@dataclass
class Chunk:
    """A chunk header: ``offset`` is where the header starts."""

    fourcc: bytes
    offset: int
    size: int

    @property
    def data_start(self) -> int:
        return self.offset + CHUNK_HEADER_SIZE

    @property
    def end(self) -> int:
        """Offset after the chunk, including the pad byte of odd sizes."""
        return self.data_start + self.size + (self.size & 1)

    def read(self, f: BinaryIO) -> bytes:
        f.seek(self.data_start)
        return read_exact(f, self.size)


def iter_chunks(f: BinaryIO, start: int, end: int, big_endian: bool = False) -> Iterator[Chunk]:
    """Yield the chunks between ``start`` and ``end``.

    Chunks are never buffered, callers read the ones they need. A chunk
    claiming to extend past ``end`` is clamped and ends the walk.
    """
    fmt = ">4sI" if big_endian else "<4sI"
    offset = start
    while offset + CHUNK_HEADER_SIZE <= end:
        f.seek(offset)
        header = f.read(CHUNK_HEADER_SIZE)
        if len(header) < CHUNK_HEADER_SIZE:
            break
        fourcc, size = struct.unpack(fmt, header)
        chunk = Chunk(fourcc, offset, size)
        if chunk.data_start + size > end:
            logger.warning(
                f"Chunk {fourcc!r} at offset {offset} claims {size} bytes, "
                f"only {end - chunk.data_start} remain"
            )
            chunk.size = end - chunk.data_start
            yield chunk
            break
        yield chunk
        offset = chunk.end


def render_chunk(fourcc: bytes, data: bytes, big_endian: bool = False) -> bytes:
    """Serialize a chunk, adding the pad byte for odd sizes."""
    fmt = ">4sI" if big_endian else "<4sI"
    pad = b"\x00" if len(data) & 1 else b""
    return struct.pack(fmt, fourcc, len(data)) + data + pad


def splice_chunks(
    data: bytes,
    start: int,
    end: int,
    matches: Callable[[BinaryIO, Chunk], bool],
    new: bytes,
    big_endian: bool = False,
    after: Optional[bytes] = None,
) -> bytes:
    """Rebuild the chunk run ``data[start:end]`` around a replacement.

    Every chunk ``matches`` accepts is dropped. ``new`` (already serialized,
    possibly empty) takes the place of the first dropped chunk; failing that
    it goes right after the first ``after`` chunk, or at the end.
    """
    f = io.BytesIO(data)
    parts = []
    placed = not new
    anchor = None
    for chunk in iter_chunks(f, start, end, big_endian):
        if matches(f, chunk):
            if not placed:
                parts.append(new)
                placed = True
            continue
        parts.append(data[chunk.offset:min(chunk.end, end)])
        if anchor is None and after is not None and chunk.fourcc == after:
            anchor = len(parts)
    if not placed:
        if anchor is not None:
            parts.insert(anchor, new)
        else:
            parts.append(new)
    return b"".join(parts)
