"""ID3v1 / ID3v1.1: the fixed 128 byte trailer."""

import logging
import struct
from typing import BinaryIO, Optional

from ..constants import ID3V1_GENRES, ID3V1_MAGIC, ID3V1_SIZE
from ..errors import MalformedHeaderError
from ..tag import ItemKey, Tag, TagItem, TagType
from ..utils import stream_length, to_int

logger = logging.getLogger(__name__)

_FIELDS = (
    (ItemKey.TRACK_TITLE, 3, 30),
    (ItemKey.TRACK_ARTIST, 33, 30),
    (ItemKey.ALBUM_TITLE, 63, 30),
    (ItemKey.YEAR, 93, 4),
)


def _decode_field(raw: bytes) -> Optional[str]:
    text = raw.split(b"\x00", 1)[0].decode("latin-1").strip()
    return text or None


def _encode_field(value: Optional[str], size: int) -> bytes:
    raw = (value or "").encode("latin-1", "replace")[:size]
    return raw.ljust(size, b"\x00")


def genre_index(genre: Optional[str]) -> int:
    """Byte value for a genre: its table index, a numeric string, or 255."""
    if not genre:
        return 255
    wanted = genre.strip().lower()
    for i, name in enumerate(ID3V1_GENRES):
        if name.lower() == wanted:
            return i
    number = to_int(wanted.strip("()"))
    if number is not None and number < len(ID3V1_GENRES):
        return number
    return 255


def parse(data: bytes) -> Tag:
    """Parse a 128 byte ID3v1 block.

    Raises:
        MalformedHeaderError: If the block is not 128 bytes starting with "TAG"
    """
    if len(data) != ID3V1_SIZE or not data.startswith(ID3V1_MAGIC):
        raise MalformedHeaderError("Not an ID3v1 tag (missing 'TAG' or wrong size)")

    tag = Tag(TagType.ID3V1)
    for key, offset, size in _FIELDS:
        value = _decode_field(data[offset:offset + size])
        if value is not None:
            tag.insert_item_unchecked(TagItem(key, value))

    comment = data[97:127]
    # ID3v1.1 convention, not guaranteed: a NUL at 28 followed by a non-zero
    # byte holds the track number
    if comment[28] == 0 and comment[29] != 0:
        value = _decode_field(comment[:28])
        track = str(comment[29])
    else:
        value = _decode_field(comment)
        track = None
    if value is not None:
        tag.insert_item_unchecked(TagItem(ItemKey.COMMENT, value))
    if track is not None:
        tag.insert_item_unchecked(TagItem(ItemKey.TRACK_NUMBER, track))

    genre = data[127]
    if genre < len(ID3V1_GENRES):
        tag.insert_item_unchecked(TagItem(ItemKey.GENRE, ID3V1_GENRES[genre]))
    return tag


def render(tag: Tag) -> bytes:
    """Serialize as ID3v1.1, or return b"" for an empty tag."""
    if tag.is_empty():
        return b""

    track = to_int(tag.get_string(ItemKey.TRACK_NUMBER))
    if track is not None and not 1 <= track <= 255:
        logger.debug(f"Track number {track} does not fit in ID3v1, dropping it")
        track = None

    year = tag.year
    parts = [
        ID3V1_MAGIC,
        _encode_field(tag.title, 30),
        _encode_field(tag.artist, 30),
        _encode_field(tag.album, 30),
        _encode_field(year[:4] if year else None, 4),
        _encode_field(tag.comment, 28),
        struct.pack("BB", 0, track or 0),
        struct.pack("B", genre_index(tag.genre)),
    ]
    return b"".join(parts)


def find(f: BinaryIO, end: Optional[int] = None) -> Optional[int]:
    """Return the offset of an ID3v1 tag ending at ``end`` (default EOF), if any."""
    if end is None:
        end = stream_length(f)
    if end < ID3V1_SIZE:
        return None
    f.seek(end - ID3V1_SIZE)
    if f.read(3) == ID3V1_MAGIC:
        return end - ID3V1_SIZE
    return None


def read_from(f: BinaryIO) -> Optional[Tag]:
    """Read the ID3v1 tag at the end of a stream, if present."""
    offset = find(f)
    if offset is None:
        return None
    f.seek(offset)
    return parse(f.read(ID3V1_SIZE))
