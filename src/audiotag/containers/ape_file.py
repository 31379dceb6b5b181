"""Monkey's Audio (.ape): the "MAC " header plus edge tags."""

import logging
import struct
from typing import BinaryIO

from ..constants import MAC_MAGIC
from ..errors import IoError, MalformedHeaderError
from ..file import FileType, TaggedFile
from ..properties import FileProperties
from ..utils import bitrate_kbps, millis, read_exact
from .common import TagLayout, locate_trailing_tags, read_trailing_tags, scan_leading_tags, write_edge_tag

logger = logging.getLogger(__name__)

DESCRIPTOR_VERSION = 3980


def _blocks_per_frame(version: int, compression_level: int) -> int:
    if version >= 3950:
        return 73728 * 4
    if version >= 3900 or (version >= 3800 and compression_level == 4000):
        return 73728
    return 9216


def _bits_per_sample(format_flags: int) -> int:
    if format_flags & 0x1:
        return 8
    if format_flags & 0x8:
        return 24
    return 16


def read_properties(f: BinaryIO, start: int, layout: TagLayout) -> FileProperties:
    """Parse the descriptor/header at ``start`` (just after "MAC ")."""
    (version,) = struct.unpack("<H", read_exact(f, 2))
    if version >= DESCRIPTOR_VERSION:
        f.seek(2, 1)  # padding
        (descriptor_size,) = struct.unpack("<I", read_exact(f, 4))
        f.seek(start - 4 + descriptor_size)
        (
            _compression_level,
            _format_flags,
            blocks_per_frame,
            final_frame_blocks,
            total_frames,
            _bits,
            channels,
            sample_rate,
        ) = struct.unpack("<HHIIIHHI", read_exact(f, 24))
    else:
        (
            compression_level,
            format_flags,
            channels,
            sample_rate,
            _header_size,
            _terminating_size,
            total_frames,
            final_frame_blocks,
        ) = struct.unpack("<HHHIIIII", read_exact(f, 26))
        blocks_per_frame = _blocks_per_frame(version, compression_level)
        logger.debug(f"Old style APE header, {_bits_per_sample(format_flags)} bit samples")

    if sample_rate == 0:
        raise MalformedHeaderError("APE header has a sample rate of 0")
    total_samples = 0
    if total_frames > 0:
        total_samples = (total_frames - 1) * blocks_per_frame + final_frame_blocks
    duration_ms = total_samples * 1000 // sample_rate

    return FileProperties(
        duration=millis(duration_ms),
        overall_bitrate=bitrate_kbps(layout.length, duration_ms),
        audio_bitrate=bitrate_kbps(layout.audio_end - layout.audio_start, duration_ms),
        sample_rate=sample_rate,
        channels=channels,
    )


def read(f: BinaryIO, read_tags: bool = True) -> TaggedFile:
    """Read a Monkey's Audio file.

    Raises:
        MalformedHeaderError: If the "MAC " signature is missing
    """
    tagged = TaggedFile(FileType.APE)
    layout = TagLayout(length=f.seek(0, 2))
    layout.audio_start = scan_leading_tags(f, tagged if read_tags else None)
    f.seek(layout.audio_start)
    if f.read(4) != MAC_MAGIC:
        raise MalformedHeaderError(f"Missing 'MAC ' signature at offset {layout.audio_start}")

    locate_trailing_tags(f, layout)
    if read_tags:
        read_trailing_tags(f, tagged, layout)

    f.seek(layout.audio_start + 4)
    try:
        tagged.properties = read_properties(f, layout.audio_start + 4, layout)
    except (IoError, MalformedHeaderError) as e:
        logger.warning(f"Failed to read APE stream header: {e}")
    return tagged


def write(f: BinaryIO, tag, padding: int = 0):
    write_edge_tag(f, tag, padding)
