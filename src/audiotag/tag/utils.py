"""Key validation and value conversion helpers shared by the tag codecs."""

import re
from typing import Any, Iterable, List, Optional

from ..constants import APE_INVALID_KEYS
from ..utils import split_pair
from .item import TagItem
from .keys import PAIRED_KEYS, ItemKey, TagType
from .picture import Picture

_FRAME_ID = re.compile(r"^[A-Z0-9]{4}$")
_USER_FRAME = re.compile(r"^(TXXX|WXXX|COMM|USLT):")
_RIFF_ID = re.compile(r"^[A-Za-z0-9 ]{4}$")


def conv_string(value: Any) -> str:
    """Convert a value to a string; sequences are joined with ", "."""
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    if isinstance(value, Picture):
        return repr(value)
    if not isinstance(value, (list, tuple)):
        value = [value]
    return ", ".join(str(v) for v in value)


def valid_ape_key(key: str) -> bool:
    return (
        2 <= len(key) <= 255
        and all(0x20 <= ord(c) <= 0x7E for c in key)
        and key.upper() not in APE_INVALID_KEYS
    )


def valid_vorbis_key(key: str) -> bool:
    return bool(key) and all(0x20 <= ord(c) <= 0x7D and c != "=" for c in key)


def valid_riff_key(key: str) -> bool:
    return bool(_RIFF_ID.match(key))


def valid_ilst_key(key: str) -> bool:
    if key.startswith("----:"):
        return key.count(":") >= 2
    try:
        return len(key.encode("latin-1")) == 4
    except UnicodeEncodeError:
        return False


def valid_id3v2_key(key: str) -> bool:
    return bool(_FRAME_ID.match(key) or _USER_FRAME.match(key))


RAW_KEY_RULES = {
    TagType.ID3V1: lambda key: False,
    TagType.ID3V2: valid_id3v2_key,
    TagType.APE: valid_ape_key,
    TagType.MP4_ILST: valid_ilst_key,
    TagType.RIFF_INFO: valid_riff_key,
    TagType.VORBIS_COMMENTS: valid_vorbis_key,
    TagType.AIFF_TEXT: lambda key: False,
}


def split_pair_item(number_key: ItemKey, value: str) -> List[TagItem]:
    """Turn a "number/total" text field into separate number and total items."""
    number, total = split_pair(value)
    items = []
    if number is not None:
        items.append(TagItem(number_key, number))
    if total is not None:
        items.append(TagItem(PAIRED_KEYS[number_key], total))
    return items


def join_pair(number: Optional[str], total: Optional[str]) -> Optional[str]:
    """Inverse of split_pair_item: build "number/total", "number" or "/total"."""
    if number is None and total is None:
        return None
    if total is None:
        return number
    return f"{number or ''}/{total}"


def paired_values(items: Iterable[TagItem]):
    """Collect track/disc number and total text values from items.

    Returns:
        Dict mapping each number key to a (number, total) tuple
    """
    pairs = {}
    for item in items:
        for number_key, total_key in PAIRED_KEYS.items():
            if item.key in (number_key, total_key) and isinstance(item.value, str):
                number, total = pairs.get(number_key, (None, None))
                if item.key == number_key and number is None:
                    number = str(item.value)
                elif item.key == total_key and total is None:
                    total = str(item.value)
                pairs[number_key] = (number, total)
    return pairs
