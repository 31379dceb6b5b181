"""Core Tag class: an ordered, canonically keyed collection of items."""

import logging
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from ..errors import UnknownFormatError
from ..utils import to_int
from .item import Key, TagItem
from .keys import ItemKey, TagType
from .picture import Picture, PictureType
from .utils import RAW_KEY_RULES

logger = logging.getLogger(__name__)


def item_key_from(tag_type: TagType, key: str) -> Key:
    """Map a physical key to its ItemKey, or return the raw key unchanged."""
    return Tag.reverse_map.get(tag_type, {}).get(key.lower(), key)


def map_key(key: Key, tag_type: TagType, allow_unknown: bool = False) -> Optional[str]:
    """Return the physical key ``key`` is written as in ``tag_type``.

    Args:
        key: ItemKey or raw key
        tag_type: Destination tag type
        allow_unknown: Pass raw keys through when the format accepts them

    Returns:
        The physical key, or None if the format cannot represent it
    """
    if isinstance(key, ItemKey):
        keys = Tag.key_map.get(tag_type, {}).get(key)
        return keys[0] if keys else None
    if allow_unknown and RAW_KEY_RULES[tag_type](key):
        return key
    return None


def allows_multiple(tag_type: TagType, key: Key) -> bool:
    """Whether a tag type may hold several items with the same key."""
    return key == ItemKey.PICTURE or tag_type == TagType.VORBIS_COMMENTS


def _text_accessor(key: ItemKey, doc: str) -> property:
    def getter(self):
        return self.get_string(key)

    def setter(self, value):
        if value is None:
            self.remove_key(key)
        else:
            self.insert_item(TagItem(key, str(value)))

    def deleter(self):
        self.remove_key(key)

    return property(getter, setter, deleter, doc)


def _number_accessor(key: ItemKey, doc: str) -> property:
    text = _text_accessor(key, doc)

    def getter(self):
        return to_int(self.get_string(key))

    return property(getter, text.fset, text.fdel, doc)


class Tag:
    """
    A metadata collection in one specific physical format.

    Items keep their insertion order, which is the order formats with an
    ordered layout (ID3v2 frames, Vorbis comments) serialize them in.

    Available accessors:
        title, artist, album, album_artist, genre, comment, lyrics, year,
        track_number, track_total, disc_number, disc_total
    """

    # TagType -> ItemKey -> physical keys (the first one is written)
    key_map: Dict[TagType, Dict[ItemKey, Tuple[str, ...]]] = {}
    # TagType -> lower-cased physical key -> ItemKey
    reverse_map: Dict[TagType, Dict[str, ItemKey]] = {}

    def __init__(self, tag_type: TagType, items: Optional[List[TagItem]] = None):
        self._tag_type = tag_type
        self._items: List[TagItem] = []
        for item in items or []:
            self.push_item(item)

    @classmethod
    def RegisterKey(cls, tag_type: TagType, item_key: ItemKey, *keys: str):
        """Register the physical key(s) an ItemKey uses in a tag type.

        The first key is the one written. The reverse lookup keeps the first
        ItemKey registered for a physical key, so shared fields (such as
        "number/total" pairs) resolve to the number key.
        """
        if not keys:
            raise ValueError(f"No physical key given for {item_key}")
        cls.key_map.setdefault(tag_type, {})[item_key] = tuple(keys)
        reverse = cls.reverse_map.setdefault(tag_type, {})
        for key in keys:
            reverse.setdefault(key.lower(), item_key)

    @classmethod
    def RegisterKeys(cls, tag_type: TagType, mapping: Dict[ItemKey, object]):
        for item_key, keys in mapping.items():
            if isinstance(keys, str):
                keys = (keys,)
            cls.RegisterKey(tag_type, item_key, *keys)

    # -----------------------------------------------------------------------
    # Basic container behaviour
    # -----------------------------------------------------------------------
    @property
    def tag_type(self) -> TagType:
        return self._tag_type

    @property
    def items(self) -> List[TagItem]:
        return list(self._items)

    def __iter__(self) -> Iterator[TagItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        # An empty tag is still a tag
        return True

    def __eq__(self, other):
        if not isinstance(other, Tag):
            return NotImplemented
        return self._tag_type == other._tag_type and self._items == other._items

    def __repr__(self):
        return f"Tag({self._tag_type.value}, {self._items!r})"

    def is_empty(self) -> bool:
        return not self._items

    # -----------------------------------------------------------------------
    # Item access
    # -----------------------------------------------------------------------
    def _normalize_key(self, key: Key) -> Key:
        if isinstance(key, str):
            return item_key_from(self._tag_type, key)
        return key

    def _same_key(self, a: Key, b: Key) -> bool:
        if isinstance(a, str) and isinstance(b, str):
            if self._tag_type in (TagType.APE, TagType.VORBIS_COMMENTS, TagType.RIFF_INFO):
                return a.upper() == b.upper()
        return a == b

    def can_hold(self, item: TagItem) -> bool:
        """Whether this tag type can represent ``item``."""
        key, value = self._normalize_key(item.key), item.value
        if isinstance(value, Picture):
            return key == ItemKey.PICTURE and self._tag_type.supports_pictures
        if key == ItemKey.PICTURE:
            return False
        if isinstance(value, bytes) and not self._tag_type.supports_binary:
            return False
        return map_key(key, self._tag_type, allow_unknown=True) is not None

    def insert_item(self, item: TagItem) -> bool:
        """Insert an item, replacing every item that has the same key.

        Returns:
            False if the tag type cannot represent the item
        """
        if not self.can_hold(item):
            logger.debug(f"Dropping item {item.key_name!r}, not valid for {self._tag_type.value}")
            return False
        self.insert_item_unchecked(item)
        return True

    def insert_item_unchecked(self, item: TagItem):
        item = TagItem(self._normalize_key(item.key), item.value, item.read_only, item.language)
        for i, existing in enumerate(self._items):
            if self._same_key(existing.key, item.key):
                self._items[i] = item
                self._items[i + 1:] = [
                    other for other in self._items[i + 1:]
                    if not self._same_key(other.key, item.key)
                ]
                return
        self._items.append(item)

    def push_item(self, item: TagItem) -> bool:
        """Append an item, keeping existing values for multi-valued keys.

        Single valued keys fall back to insert_item().
        """
        key = self._normalize_key(item.key)
        if not allows_multiple(self._tag_type, key):
            return self.insert_item(item)
        if not self.can_hold(item):
            logger.debug(f"Dropping item {item.key_name!r}, not valid for {self._tag_type.value}")
            return False
        self._items.append(TagItem(key, item.value, item.read_only, item.language))
        return True

    def get_item(self, key: Key) -> Optional[TagItem]:
        key = self._normalize_key(key)
        for item in self._items:
            if self._same_key(item.key, key):
                return item
        return None

    def get_items(self, key: Key) -> List[TagItem]:
        key = self._normalize_key(key)
        return [item for item in self._items if self._same_key(item.key, key)]

    def get_string(self, key: Key) -> Optional[str]:
        for item in self.get_items(key):
            if isinstance(item.value, str):
                return str(item.value)
        return None

    def get_binary(self, key: Key) -> Optional[bytes]:
        for item in self.get_items(key):
            if isinstance(item.value, bytes):
                return item.value
        return None

    def remove_key(self, key: Key):
        key = self._normalize_key(key)
        self._items = [item for item in self._items if not self._same_key(item.key, key)]

    def retain_items(self, predicate: Callable[[TagItem], bool]):
        self._items = [item for item in self._items if predicate(item)]

    # -----------------------------------------------------------------------
    # Pictures
    # -----------------------------------------------------------------------
    def pictures(self) -> List[Picture]:
        return [item.value for item in self._items if isinstance(item.value, Picture)]

    def push_picture(self, picture: Picture) -> bool:
        return self.push_item(TagItem(ItemKey.PICTURE, picture))

    def remove_picture_type(self, pic_type: PictureType):
        self.retain_items(
            lambda item: not (isinstance(item.value, Picture) and item.value.pic_type == pic_type)
        )

    # -----------------------------------------------------------------------
    # Accessors
    # -----------------------------------------------------------------------
    title = _text_accessor(ItemKey.TRACK_TITLE, "Track title")
    artist = _text_accessor(ItemKey.TRACK_ARTIST, "Track artist")
    album = _text_accessor(ItemKey.ALBUM_TITLE, "Album title")
    album_artist = _text_accessor(ItemKey.ALBUM_ARTIST, "Album artist")
    genre = _text_accessor(ItemKey.GENRE, "Genre")
    comment = _text_accessor(ItemKey.COMMENT, "Comment")
    lyrics = _text_accessor(ItemKey.LYRICS, "Unsynchronized lyrics")
    year = _text_accessor(ItemKey.YEAR, "Release year")

    @year.getter
    def year(self):
        """Release year, falling back to the year of the recording date."""
        value = self.get_string(ItemKey.YEAR)
        if value is None:
            date = self.get_string(ItemKey.RECORDING_DATE)
            if date and date[:4].isdigit():
                value = date[:4]
        return value

    track_number = _number_accessor(ItemKey.TRACK_NUMBER, "Track number")
    track_total = _number_accessor(ItemKey.TRACK_TOTAL, "Total tracks")
    disc_number = _number_accessor(ItemKey.DISC_NUMBER, "Disc number")
    disc_total = _number_accessor(ItemKey.DISC_TOTAL, "Total discs")

    # -----------------------------------------------------------------------
    # Conversion
    # -----------------------------------------------------------------------
    def to_dyn_tag(self, tag_type: TagType) -> "Tag":
        """Convert to another tag type.

        Every item is translated through the destination's key table. Items
        the destination cannot represent are dropped, so the conversion is
        lossy but deterministic. Raw keys only survive into formats that take
        free-form keys (APE, Vorbis comments) or into the same tag type.
        """
        converted = Tag(tag_type)
        free_form = tag_type == self._tag_type or tag_type in (TagType.APE, TagType.VORBIS_COMMENTS)
        for item in self._items:
            if isinstance(item.key, str) and not free_form:
                continue
            converted.push_item(TagItem(item.key, item.value, language=item.language))
        return converted

    def re_map(self, tag_type: TagType):
        """Change this tag's type in place, dropping unrepresentable items."""
        converted = self.to_dyn_tag(tag_type)
        self._tag_type = tag_type
        self._items = converted._items

    # -----------------------------------------------------------------------
    # Persistence
    # -----------------------------------------------------------------------
    def save_to(self, f, padding: int = 0, file_type=None):
        """Write this tag into an open file (opened 'r+b').

        Args:
            f: File object positioned anywhere, opened for reading and writing
            padding: Bytes of padding to reserve, for formats that pad
            file_type: The FileType to assume when the signature is not recognised

        Raises:
            UnknownFormatError: If the file type cannot be determined
            UnsupportedTagError: If the file type cannot carry this tag type
        """
        from ..containers import write_tag
        from ..probe import Probe

        file_type = Probe(f, file_type).guess_file_type().file_type
        if file_type is None:
            raise UnknownFormatError("Cannot determine the type of the file to write to")
        write_tag(f, file_type, self, padding)

    def save_to_path(self, path, padding: int = 0):
        from ..file import FileType

        with open(path, "r+b") as f:
            self.save_to(f, padding, FileType.from_path(path))

    def remove_from(self, f, file_type=None):
        """Remove this tag type's block from an open file."""
        Tag(self._tag_type).save_to(f, file_type=file_type)

    def remove_from_path(self, path):
        from ..file import FileType

        with open(path, "r+b") as f:
            self.remove_from(f, FileType.from_path(path))

    def pprint(self):
        """Pretty print all tag items."""
        if not self._items:
            print(f"{self._tag_type.value}: <EMPTY>")
            return
        offset = max(len(item.key_name) for item in self._items)
        for item in self._items:
            print(item.key_name.ljust(offset), type(item.value).__name__, repr(item.value))
