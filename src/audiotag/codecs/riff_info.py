"""RIFF INFO lists: a "LIST" chunk of form type "INFO" holding text sub-chunks."""

import io
import logging

from ..containers.chunks import iter_chunks, render_chunk
from ..errors import EncodingError, MalformedHeaderError
from ..tag import ItemKey, Tag, TagItem, TagType, map_key
from ..tag.utils import valid_riff_key

logger = logging.getLogger(__name__)

INFO_FORM = b"INFO"


def parse(data: bytes) -> Tag:
    """Parse the body of a "LIST" chunk (starting with the "INFO" form type).

    Raises:
        MalformedHeaderError: If the form type is not INFO or a FourCC is invalid
        EncodingError: If a value is not UTF-8
    """
    if not data.startswith(INFO_FORM):
        raise MalformedHeaderError(f"Expected a LIST INFO chunk, got form type {data[:4]!r}")

    tag = Tag(TagType.RIFF_INFO)
    f = io.BytesIO(data)
    for chunk in iter_chunks(f, len(INFO_FORM), len(data)):
        key = chunk.fourcc.decode("latin-1")
        if not valid_riff_key(key):
            raise MalformedHeaderError(f"Invalid RIFF INFO FourCC {chunk.fourcc!r} at offset {chunk.offset}")
        raw = chunk.read(f).split(b"\x00", 1)[0]
        try:
            value = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"RIFF INFO item {key!r} is not valid UTF-8: {e}") from e
        if value:
            tag.insert_item(TagItem(key, value))
    return tag


def render(tag: Tag) -> bytes:
    """Serialize as a complete "LIST" chunk, or b"" for an empty tag."""
    written = set()
    chunks = []
    for item in tag:
        if not isinstance(item.value, str):
            continue
        key = map_key(item.key, TagType.RIFF_INFO) if isinstance(item.key, ItemKey) else item.key
        if key is None or key in written:
            continue
        written.add(key)
        chunks.append(render_chunk(key.encode("ascii"), item.value.encode("utf-8") + b"\x00"))

    if not chunks:
        return b""
    return render_chunk(b"LIST", INFO_FORM + b"".join(chunks))
