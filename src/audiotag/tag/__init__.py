"""
Tag subpackage - the format independent tag model.

A Tag is an ordered list of TagItems keyed by canonical ItemKeys. Each tag
format owns a static table translating ItemKeys to its physical keys.
"""

from .core import Tag, allows_multiple, item_key_from, map_key
from .item import Locator, TagItem
from .keys import ItemKey, TagType
from .mappings import setup_all_mappings
from .picture import Picture, PictureType

# Initialize all item key mappings
setup_all_mappings()

__all__ = [
    'Tag',
    'TagItem',
    'TagType',
    'ItemKey',
    'Locator',
    'Picture',
    'PictureType',
    'allows_multiple',
    'item_key_from',
    'map_key',
]
