"""AIFF text chunks: NAME, AUTH, "(c) " and ANNO."""

import io

from ..containers.chunks import iter_chunks, render_chunk
from ..tag import ItemKey, Tag, TagItem, TagType, map_key

TEXT_CHUNKS = (b"NAME", b"AUTH", b"(c) ", b"ANNO")


def is_text_chunk(fourcc: bytes) -> bool:
    return fourcc in TEXT_CHUNKS


def parse(data: bytes) -> Tag:
    """Parse a run of big endian chunks, keeping the text ones."""
    tag = Tag(TagType.AIFF_TEXT)
    f = io.BytesIO(data)
    for chunk in iter_chunks(f, 0, len(data), big_endian=True):
        if not is_text_chunk(chunk.fourcc):
            continue
        value = chunk.read(f).rstrip(b"\x00").decode("latin-1")
        if value:
            tag.insert_item(TagItem(chunk.fourcc.decode("latin-1"), value))
    return tag


def render(tag: Tag) -> bytes:
    """Serialize as a run of text chunks, or b"" for an empty tag."""
    chunks = []
    written = set()
    for item in tag:
        if not isinstance(item.value, str) or not isinstance(item.key, ItemKey):
            continue
        key = map_key(item.key, TagType.AIFF_TEXT)
        if key is None or key in written:
            continue
        written.add(key)
        value = item.value.encode("latin-1", "replace")
        chunks.append(render_chunk(key.encode("latin-1"), value, big_endian=True))
    return b"".join(chunks)
