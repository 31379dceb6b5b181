"""Item key mappings for the supported tag formats."""

from .format_specific import setup_format_specific_mappings
from .id3 import setup_id3_mappings


def setup_all_mappings():
    """Initialize all item key mappings."""
    setup_id3_mappings()
    setup_format_specific_mappings()


__all__ = [
    'setup_format_specific_mappings',
    'setup_id3_mappings',
    'setup_all_mappings',
]
