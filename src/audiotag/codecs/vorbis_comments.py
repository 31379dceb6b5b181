"""Vorbis comments, as found in OGG Vorbis, OGG Opus and FLAC."""

import logging
import struct
from typing import Tuple

from ..errors import EncodingError, MalformedHeaderError
from ..tag import ItemKey, Picture, Tag, TagItem, TagType, item_key_from, map_key
from ..tag.keys import PAIRED_KEYS
from ..tag.utils import split_pair_item, valid_vorbis_key

logger = logging.getLogger(__name__)

PICTURE_KEY = "METADATA_BLOCK_PICTURE"
DEFAULT_VENDOR = "audiotag"


def _read_string(data: bytes, pos: int, what: str) -> Tuple[bytes, int]:
    if pos + 4 > len(data):
        raise MalformedHeaderError(f"Truncated Vorbis comment block reading {what} length at {pos}")
    (size,) = struct.unpack("<I", data[pos:pos + 4])
    pos += 4
    if pos + size > len(data):
        raise MalformedHeaderError(
            f"Vorbis {what} claims {size} bytes at offset {pos}, only {len(data) - pos} remain"
        )
    return data[pos:pos + size], pos + size


def _decode(raw: bytes, what: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(f"Vorbis {what} is not valid UTF-8: {e}") from e


def parse_with_vendor(data: bytes) -> Tuple[str, Tag]:
    """Parse a comment block, returning its vendor string as well.

    Anything after the last comment (such as a framing bit) is ignored.

    Raises:
        MalformedHeaderError: If a length runs past the data
        EncodingError: If the vendor or a comment is not UTF-8
    """
    raw_vendor, pos = _read_string(data, 0, "vendor string")
    vendor = _decode(raw_vendor, "vendor string")
    if pos + 4 > len(data):
        raise MalformedHeaderError("Truncated Vorbis comment block: missing comment count")
    (count,) = struct.unpack("<I", data[pos:pos + 4])
    pos += 4

    tag = Tag(TagType.VORBIS_COMMENTS)
    for _ in range(count):
        raw, pos = _read_string(data, pos, "comment")
        comment = _decode(raw, "comment")
        key, sep, value = comment.partition("=")
        if not sep or not valid_vorbis_key(key):
            logger.warning(f"Skipping malformed Vorbis comment {comment[:32]!r}")
            continue

        if key.upper() == PICTURE_KEY:
            tag.push_picture(Picture.from_flac_bytes(value.encode("ascii", "replace"), encoded=True))
            continue

        # Some writers store "number/total" in TRACKNUMBER and DISCNUMBER
        item_key = item_key_from(TagType.VORBIS_COMMENTS, key)
        if item_key in PAIRED_KEYS and "/" in value:
            for pair_item in split_pair_item(item_key, value):
                tag.push_item(pair_item)
            continue
        tag.push_item(TagItem(key, value))
    return vendor, tag


def parse(data: bytes) -> Tag:
    return parse_with_vendor(data)[1]


def render(
    tag: Tag,
    vendor: str = DEFAULT_VENDOR,
    framing: bool = False,
    pictures: bool = True,
) -> bytes:
    """Serialize a comment block.

    Args:
        tag: The tag to write
        vendor: Vendor string to keep
        framing: Append the Vorbis framing bit (OGG Vorbis only)
        pictures: Write pictures as METADATA_BLOCK_PICTURE comments (FLAC
            stores them in their own blocks instead)
    """
    comments = []
    for item in tag:
        if isinstance(item.value, Picture):
            if pictures:
                comments.append(f"{PICTURE_KEY}=" + item.value.as_flac_bytes(encode=True).decode("ascii"))
            continue
        if not isinstance(item.value, str):
            continue
        key = map_key(item.key, TagType.VORBIS_COMMENTS) if isinstance(item.key, ItemKey) else item.key
        if key is None:
            continue
        comments.append(f"{key.upper()}={item.value}")

    encoded_vendor = vendor.encode("utf-8")
    parts = [struct.pack("<I", len(encoded_vendor)), encoded_vendor, struct.pack("<I", len(comments))]
    for comment in comments:
        raw = comment.encode("utf-8")
        parts.append(struct.pack("<I", len(raw)))
        parts.append(raw)
    if framing:
        parts.append(b"\x01")
    return b"".join(parts)
