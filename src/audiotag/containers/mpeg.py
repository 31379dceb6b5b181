"""MPEG audio (MP1/MP2/MP3): frame headers, Xing/VBRI and edge tags."""

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Optional

from ..errors import MalformedHeaderError
from ..file import FileType, TaggedFile
from ..properties import FileProperties
from ..utils import bitrate_kbps, millis
from .common import (
    TagLayout,
    locate_trailing_tags,
    read_trailing_tags,
    scan_leading_tags,
    write_edge_tag,
)

logger = logging.getLogger(__name__)

# Bitrates (kbps) by (version group, layer)
BITRATES = {
    (1, 1): (0, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448),
    (1, 2): (0, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384),
    (1, 3): (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320),
    (2, 1): (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256),
    (2, 2): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
    (2, 3): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
}

SAMPLE_RATES = {
    1: (44100, 48000, 32000),
    2: (22050, 24000, 16000),
    2.5: (11025, 12000, 8000),
}

_VERSIONS = {0: 2.5, 2: 2, 3: 1}
_LAYERS = {1: 3, 2: 2, 3: 1}
CHANNEL_MODE_MONO = 3

# How far to look for the first frame after the leading tags
MAX_SYNC_SEARCH = 1 << 20


def is_frame_sync(data: bytes) -> bool:
    return len(data) >= 2 and data[0] == 0xFF and data[1] & 0xE0 == 0xE0


@dataclass
class FrameHeader:
    """A decoded 4 byte MPEG audio frame header."""

    version: float
    layer: int
    bitrate: int
    sample_rate: int
    padding: int
    channel_mode: int

    @property
    def channels(self) -> int:
        return 1 if self.channel_mode == CHANNEL_MODE_MONO else 2

    @property
    def samples_per_frame(self) -> int:
        if self.layer == 1:
            return 384
        if self.layer == 3 and self.version != 1:
            return 576
        return 1152

    @property
    def frame_length(self) -> int:
        if self.layer == 1:
            return (12000 * self.bitrate // self.sample_rate + self.padding) * 4
        factor = 72000 if self.layer == 3 and self.version != 1 else 144000
        return factor * self.bitrate // self.sample_rate + self.padding

    @property
    def side_info_size(self) -> int:
        """Bytes between the header and a Xing/Info header."""
        if self.version == 1:
            return 17 if self.channel_mode == CHANNEL_MODE_MONO else 32
        return 9 if self.channel_mode == CHANNEL_MODE_MONO else 17

    @staticmethod
    def parse(data: bytes) -> Optional["FrameHeader"]:
        """Decode a frame header, or return None for invalid ones."""
        if len(data) < 4 or not is_frame_sync(data):
            return None
        (word,) = struct.unpack(">I", data[:4])
        version = _VERSIONS.get((word >> 19) & 0x3)
        layer = _LAYERS.get((word >> 17) & 0x3)
        bitrate_index = (word >> 12) & 0xF
        rate_index = (word >> 10) & 0x3
        if version is None or layer is None or bitrate_index in (0, 15) or rate_index == 3:
            return None
        group = 1 if version == 1 else 2
        return FrameHeader(
            version=version,
            layer=layer,
            bitrate=BITRATES[(group, layer)][bitrate_index],
            sample_rate=SAMPLE_RATES[version][rate_index],
            padding=(word >> 9) & 0x1,
            channel_mode=(word >> 6) & 0x3,
        )


@dataclass
class VbrHeader:
    """Frame and byte counts from a Xing/Info or VBRI header."""

    frames: Optional[int] = None
    byte_count: Optional[int] = None


def read_vbr_header(frame: bytes, header: FrameHeader) -> Optional[VbrHeader]:
    """Look for a Xing/Info header, then a VBRI header, in the first frame."""
    pos = 4 + header.side_info_size
    marker = frame[pos:pos + 4]
    if marker in (b"Xing", b"Info") and len(frame) >= pos + 8:
        (flags,) = struct.unpack(">I", frame[pos + 4:pos + 8])
        pos += 8
        vbr = VbrHeader()
        if flags & 0x1 and len(frame) >= pos + 4:
            (vbr.frames,) = struct.unpack(">I", frame[pos:pos + 4])
            pos += 4
        if flags & 0x2 and len(frame) >= pos + 4:
            (vbr.byte_count,) = struct.unpack(">I", frame[pos:pos + 4])
        return vbr

    # VBRI always sits 32 bytes after the header
    if frame[36:40] == b"VBRI" and len(frame) >= 54:
        byte_count, frames = struct.unpack(">II", frame[46:54])
        return VbrHeader(frames, byte_count)
    return None


def find_first_frame(f: BinaryIO, start: int, end: int) -> Optional[int]:
    """Offset of the first valid frame header at or after ``start``.

    Leading zero padding and junk are skipped. A candidate is accepted when the
    following frame also starts with a sync word, or when it is the only frame.
    """
    f.seek(start)
    data = f.read(min(end - start, MAX_SYNC_SEARCH))
    pos = 0
    while True:
        pos = data.find(b"\xff", pos)
        if pos == -1 or pos + 4 > len(data):
            return None
        header = FrameHeader.parse(data[pos:pos + 4])
        if header is not None:
            next_pos = pos + header.frame_length
            if next_pos + 2 > len(data) or is_frame_sync(data[next_pos:next_pos + 2]):
                return start + pos
        pos += 1


def read_properties(f: BinaryIO, layout: TagLayout, first_frame: Optional[int]) -> FileProperties:
    if first_frame is None:
        logger.warning("No MPEG frame found, audio properties are unknown")
        return FileProperties.unknown()

    f.seek(first_frame)
    frame = f.read(2048)
    header = FrameHeader.parse(frame)
    stream_length = layout.audio_end - first_frame

    vbr = read_vbr_header(frame, header)
    if vbr is not None and vbr.frames:
        duration_ms = vbr.frames * header.samples_per_frame * 1000 // header.sample_rate
        audio_bytes = vbr.byte_count or stream_length
        audio_bitrate = bitrate_kbps(audio_bytes, duration_ms)
    else:
        duration_ms = stream_length * 8 // header.bitrate
        audio_bitrate = header.bitrate

    return FileProperties(
        duration=millis(duration_ms),
        overall_bitrate=bitrate_kbps(layout.length, duration_ms),
        audio_bitrate=audio_bitrate,
        sample_rate=header.sample_rate,
        channels=header.channels,
    )


def read(f: BinaryIO, read_tags: bool = True) -> TaggedFile:
    """Read an MPEG audio file.

    Raises:
        MalformedHeaderError: If the file holds neither tags nor MPEG frames
    """
    tagged = TaggedFile(FileType.MP3)
    layout = TagLayout(length=f.seek(0, 2))
    layout.audio_start = scan_leading_tags(f, tagged if read_tags else None)
    locate_trailing_tags(f, layout)
    if read_tags:
        read_trailing_tags(f, tagged, layout)

    first_frame = find_first_frame(f, layout.audio_start, layout.audio_end)
    has_tags = layout.audio_start > 0 or layout.ape_start is not None or layout.id3v1_start is not None
    if first_frame is None and not has_tags:
        raise MalformedHeaderError(f"No MPEG frame sync found after offset {layout.audio_start}")
    tagged.properties = read_properties(f, layout, first_frame)
    return tagged


def write(f: BinaryIO, tag, padding: int = 0):
    write_edge_tag(f, tag, padding)

