"""APEv1/APEv2 tags: 32 byte header/footer around a list of items."""

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Optional, Tuple

from ..constants import (
    APE_FLAG_HAS_HEADER,
    APE_FLAG_IS_HEADER,
    APE_HEADER_SIZE,
    APE_ITEM_BINARY,
    APE_ITEM_LOCATOR,
    APE_ITEM_READ_ONLY,
    APE_PREAMBLE,
    MAX_TAG_SIZE,
)
from ..errors import EncodingError, MalformedHeaderError
from ..tag import ItemKey, Locator, Picture, Tag, TagItem, TagType, item_key_from, map_key
from ..tag.keys import PAIRED_KEYS
from ..tag.picture import is_ape_picture_key
from ..tag.utils import join_pair, paired_values, split_pair_item, valid_ape_key
from ..utils import read_exact

logger = logging.getLogger(__name__)

APE_VERSION = 2000
_ITEM_TYPE_SHIFT = 1


@dataclass
class ApeHeader:
    """An APE tag header or footer. ``size`` covers the items and the footer."""

    version: int
    size: int
    item_count: int
    flags: int

    @property
    def is_header(self) -> bool:
        return bool(self.flags & APE_FLAG_IS_HEADER)

    @property
    def has_header(self) -> bool:
        return bool(self.flags & APE_FLAG_HAS_HEADER)

    @property
    def total_size(self) -> int:
        """Bytes taken by the whole tag, header included."""
        return self.size + (APE_HEADER_SIZE if self.has_header else 0)

    @staticmethod
    def parse(data: bytes) -> "ApeHeader":
        """Parse a 32 byte header or footer.

        Raises:
            MalformedHeaderError: Missing preamble, or a size that cannot hold a footer
        """
        if len(data) != APE_HEADER_SIZE or not data.startswith(APE_PREAMBLE):
            raise MalformedHeaderError("Not an APE tag (missing 'APETAGEX')")
        version, size, item_count, flags = struct.unpack("<IIII", data[8:24])
        if size < APE_HEADER_SIZE:
            raise MalformedHeaderError(f"APE tag size {size} is smaller than its footer")
        if size > MAX_TAG_SIZE:
            raise MalformedHeaderError(f"APE tag size {size} exceeds the limit of {MAX_TAG_SIZE}")
        return ApeHeader(version, size, item_count, flags)

    def as_bytes(self) -> bytes:
        return APE_PREAMBLE + struct.pack(
            "<IIII", self.version, self.size, self.item_count, self.flags
        ) + b"\x00" * 8


def find(f: BinaryIO, end: int) -> Optional[Tuple[int, ApeHeader]]:
    """Look for an APE footer ending at ``end``.

    Returns:
        (offset where the tag starts, footer), or None
    """
    if end < APE_HEADER_SIZE:
        return None
    f.seek(end - APE_HEADER_SIZE)
    data = f.read(APE_HEADER_SIZE)
    if not data.startswith(APE_PREAMBLE):
        return None
    footer = ApeHeader.parse(data)
    start = end - footer.total_size
    if start < 0:
        raise MalformedHeaderError(f"APE tag size {footer.total_size} exceeds the file ({end} bytes)")
    return start, footer


def read_from(f: BinaryIO, end: int) -> Optional[Tuple[int, Tag]]:
    """Read the APE tag ending at ``end``, if present. Returns (start offset, tag)."""
    found = find(f, end)
    if found is None:
        return None
    start, footer = found
    f.seek(start)
    return start, parse(read_exact(f, footer.total_size))


def parse(data: bytes) -> Tag:
    """Parse a complete APE tag: optional header, items and footer.

    Raises:
        MalformedHeaderError: On an invalid key, or when the items do not match
            the footer's size and count
        EncodingError: On text items that are not UTF-8
    """
    footer = ApeHeader.parse(data[-APE_HEADER_SIZE:])
    items_end = len(data) - APE_HEADER_SIZE
    pos = items_end - (footer.size - APE_HEADER_SIZE)
    if pos < 0:
        raise MalformedHeaderError(f"APE tag claims {footer.size} bytes, only {len(data)} given")

    tag = Tag(TagType.APE)
    for index in range(footer.item_count):
        if pos + 8 > items_end:
            raise MalformedHeaderError(
                f"APE tag claims {footer.item_count} items, data ends after {index}"
            )
        value_size, flags = struct.unpack("<II", data[pos:pos + 8])
        key_end = data.find(b"\x00", pos + 8, items_end)
        if key_end == -1:
            raise MalformedHeaderError(f"Unterminated APE item key at offset {pos + 8}")
        key = data[pos + 8:key_end].decode("ascii", "replace")
        if not valid_ape_key(key):
            raise MalformedHeaderError(f"Invalid APE item key {key!r}")
        value_start = key_end + 1
        if value_start + value_size > items_end:
            raise MalformedHeaderError(
                f"APE item {key!r} claims {value_size} bytes, only {items_end - value_start} remain"
            )
        value = data[value_start:value_start + value_size]
        pos = value_start + value_size
        _add_item(tag, key, value, flags)

    if pos != items_end:
        raise MalformedHeaderError(
            f"APE tag items end at {pos}, footer says {items_end}"
        )
    return tag


def _add_item(tag: Tag, key: str, value: bytes, flags: int):
    read_only = bool(flags & APE_ITEM_READ_ONLY)
    item_type = (flags >> _ITEM_TYPE_SHIFT) & 0x3

    if item_type == APE_ITEM_BINARY:
        if is_ape_picture_key(key):
            tag.push_picture(Picture.from_ape_bytes(key, value))
        else:
            tag.insert_item(TagItem(key, value, read_only))
        return

    try:
        text = value.decode("utf-8").rstrip("\x00")
    except UnicodeDecodeError as e:
        raise EncodingError(f"APE item {key!r} is not valid UTF-8: {e}") from e

    if item_type == APE_ITEM_LOCATOR:
        tag.insert_item(TagItem(key, Locator(text), read_only))
        return

    item_key = item_key_from(TagType.APE, key)
    if item_key in PAIRED_KEYS:
        for item in split_pair_item(item_key, text):
            tag.insert_item(TagItem(item.key, item.value, read_only))
    else:
        tag.insert_item(TagItem(key, text, read_only))


def _render_item(key: str, value, read_only: bool) -> bytes:
    if isinstance(value, Picture):
        data, item_type = value.as_ape_bytes(), APE_ITEM_BINARY
    elif isinstance(value, bytes):
        data, item_type = value, APE_ITEM_BINARY
    elif isinstance(value, Locator):
        data, item_type = value.encode("utf-8"), APE_ITEM_LOCATOR
    else:
        data, item_type = value.encode("utf-8"), 0
    flags = (item_type << _ITEM_TYPE_SHIFT) | (APE_ITEM_READ_ONLY if read_only else 0)
    return struct.pack("<II", len(data), flags) + key.encode("ascii") + b"\x00" + data


def render(tag: Tag) -> bytes:
    """Serialize with both header and footer, or return b"" for an empty tag."""
    pairs = paired_values(tag.items)
    written = set()
    items = []
    for item in tag:
        value = item.value
        if isinstance(value, Picture):
            key = value.ape_key
        elif isinstance(item.key, ItemKey):
            key = map_key(item.key, TagType.APE)
        else:
            key = item.key
        if key is None or key.lower() in written:
            continue
        written.add(key.lower())

        if item.key in PAIRED_KEYS or item.key in PAIRED_KEYS.values():
            number_key = item_key_from(TagType.APE, key)
            value = join_pair(*pairs.get(number_key, (None, None)))
            if value is None:
                continue
        items.append(_render_item(key, value, item.read_only))

    if not items:
        return b""
    body = b"".join(items)
    size = len(body) + APE_HEADER_SIZE
    header = ApeHeader(APE_VERSION, size, len(items), APE_FLAG_HAS_HEADER | APE_FLAG_IS_HEADER)
    footer = ApeHeader(APE_VERSION, size, len(items), APE_FLAG_HAS_HEADER)
    return header.as_bytes() + body + footer.as_bytes()
