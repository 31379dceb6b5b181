from dataclasses import dataclass
from typing import Optional, Union

from .keys import ItemKey
from .picture import Picture


class Locator(str):
    """A text value that is a URL or other locator."""

    def __repr__(self):
        return f"Locator({str.__repr__(self)})"


ItemValue = Union[str, Locator, bytes, Picture]
Key = Union[ItemKey, str]


@dataclass
class TagItem:
    """A single (key, value) pair of a Tag.

    ``key`` is an ItemKey, or the raw per-format key when the field has no
    canonical name. ``value`` is text (``str``), a ``Locator``, binary data
    (``bytes``) or a ``Picture``. ``read_only`` is only meaningful for APE,
    ``language`` (an ISO-639-2 code) for ID3v2 comment and lyrics frames.
    """

    key: Key
    value: ItemValue
    read_only: bool = False
    language: Optional[str] = None

    def __eq__(self, other):
        if not isinstance(other, TagItem):
            return NotImplemented
        return (
            self.key == other.key
            and type(self.value) is type(other.value)
            and self.value == other.value
        )

    @property
    def is_text(self) -> bool:
        return isinstance(self.value, str)

    @property
    def is_binary(self) -> bool:
        return isinstance(self.value, (bytes, Picture))

    @property
    def key_name(self) -> str:
        return self.key.value if isinstance(self.key, ItemKey) else self.key
