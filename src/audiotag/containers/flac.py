"""FLAC: metadata blocks (STREAMINFO, VORBIS_COMMENT, PICTURE, PADDING)."""

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, List, Optional

from ..codecs import vorbis_comments
from ..constants import (
    FLAC_MAGIC,
    FLAC_PADDING,
    FLAC_PICTURE,
    FLAC_STREAMINFO,
    FLAC_VORBIS_COMMENT,
)
from ..errors import MalformedHeaderError
from ..file import FileType, TaggedFile
from ..properties import FileProperties
from ..tag import Picture, Tag, TagType
from ..utils import bitrate_kbps, millis, read_exact, stream_length
from .common import commit, parse_tag, read_all, skip_id3v2

logger = logging.getLogger(__name__)

BLOCK_HEADER_SIZE = 4
MAX_BLOCK_SIZE = (1 << 24) - 1
STREAMINFO_SIZE = 18
# Padding added when the metadata outgrows the space it had
DEFAULT_PADDING = 1024


@dataclass
class Block:
    block_type: int
    start: int
    size: int
    is_last: bool

    @property
    def data_start(self) -> int:
        return self.start + BLOCK_HEADER_SIZE

    @property
    def end(self) -> int:
        return self.data_start + self.size

    def read(self, f: BinaryIO) -> bytes:
        f.seek(self.data_start)
        return read_exact(f, self.size)


def read_blocks(f: BinaryIO) -> List[Block]:
    """Read the block headers following "fLaC" (and an optional ID3v2 tag).

    Raises:
        MalformedHeaderError: Missing signature or STREAMINFO
    """
    f.seek(0)
    start = skip_id3v2(f)
    if f.read(4) != FLAC_MAGIC:
        raise MalformedHeaderError(f"Missing 'fLaC' signature at offset {start}")

    blocks = []
    while True:
        offset = f.tell()
        header = read_exact(f, BLOCK_HEADER_SIZE)
        block = Block(header[0] & 0x7F, offset, int.from_bytes(header[1:4], "big"), bool(header[0] & 0x80))
        if not blocks and (block.block_type != FLAC_STREAMINFO or block.size < STREAMINFO_SIZE):
            raise MalformedHeaderError(
                f"First FLAC block must be STREAMINFO of at least {STREAMINFO_SIZE} bytes, "
                f"got type {block.block_type} of {block.size} bytes"
            )
        blocks.append(block)
        f.seek(block.end)
        if block.is_last:
            return blocks


def parse_streaminfo(data: bytes, file_length: int, audio_length: int) -> FileProperties:
    (packed,) = struct.unpack(">Q", data[10:18])
    sample_rate = packed >> 44
    channels = ((packed >> 41) & 0x7) + 1
    total_samples = packed & 0xFFFFFFFFF
    if sample_rate == 0:
        raise MalformedHeaderError("STREAMINFO has a sample rate of 0")
    duration_ms = total_samples * 1000 // sample_rate
    return FileProperties(
        duration=millis(duration_ms),
        overall_bitrate=bitrate_kbps(file_length, duration_ms),
        audio_bitrate=bitrate_kbps(audio_length, duration_ms),
        sample_rate=sample_rate,
        channels=channels,
    )


def read(f: BinaryIO, read_tags: bool = True) -> TaggedFile:
    tagged = TaggedFile(FileType.FLAC)
    length = stream_length(f)
    blocks = read_blocks(f)

    try:
        tagged.properties = parse_streaminfo(blocks[0].read(f), length, length - blocks[-1].end)
    except MalformedHeaderError as e:
        logger.warning(f"Failed to read STREAMINFO: {e}")

    if not read_tags:
        return tagged

    def read_tag() -> Optional[Tag]:
        tag = None
        pictures = []
        for block in blocks:
            if block.block_type == FLAC_VORBIS_COMMENT and tag is None:
                tag = vorbis_comments.parse(block.read(f))
            elif block.block_type == FLAC_PICTURE:
                pictures.append(Picture.from_flac_bytes(block.read(f)))
        if tag is None and not pictures:
            return None
        if tag is None:
            tag = Tag(TagType.VORBIS_COMMENTS)
        for picture in pictures:
            tag.push_picture(picture)
        return tag

    if any(b.block_type in (FLAC_VORBIS_COMMENT, FLAC_PICTURE) for b in blocks):
        parse_tag(tagged, TagType.VORBIS_COMMENTS, read_tag)
    return tagged


def render_block(block_type: int, data: bytes, is_last: bool = False) -> bytes:
    if len(data) > MAX_BLOCK_SIZE:
        raise MalformedHeaderError(f"FLAC block of {len(data)} bytes exceeds the 24-bit size limit")
    return bytes([block_type | (0x80 if is_last else 0)]) + len(data).to_bytes(3, "big") + data


def write(f: BinaryIO, tag: Tag, padding: int = 0):
    """Replace the VORBIS_COMMENT and PICTURE blocks.

    Existing padding absorbs size changes when it can, so the audio frames
    only move when the new metadata does not fit.
    """
    blocks = read_blocks(f)
    data = read_all(f)

    vendor = vorbis_comments.DEFAULT_VENDOR
    kept = []
    for block in blocks:
        if block.block_type == FLAC_VORBIS_COMMENT:
            vendor, _ = vorbis_comments.parse_with_vendor(data[block.data_start:block.end])
        elif block.block_type not in (FLAC_PICTURE, FLAC_PADDING):
            kept.append((block.block_type, data[block.data_start:block.end]))

    new_blocks = [kept[0]]
    if not tag.is_empty():
        new_blocks.append(
            (FLAC_VORBIS_COMMENT, vorbis_comments.render(tag, vendor, pictures=False))
        )
    new_blocks.extend(kept[1:])
    for picture in tag.pictures():
        new_blocks.append((FLAC_PICTURE, picture.as_flac_bytes()))

    metadata_start = blocks[0].start
    old_size = blocks[-1].end - metadata_start
    new_size = sum(BLOCK_HEADER_SIZE + len(body) for _, body in new_blocks)
    if new_size == old_size:
        pad = None
    elif new_size + BLOCK_HEADER_SIZE <= old_size:
        pad = old_size - new_size - BLOCK_HEADER_SIZE
    else:
        pad = max(padding, DEFAULT_PADDING)
        logger.debug(f"Metadata grew from {old_size} to {new_size} bytes, moving the audio")
    if pad is not None:
        new_blocks.append((FLAC_PADDING, b"\x00" * pad))

    metadata = b"".join(
        render_block(block_type, body, i == len(new_blocks) - 1)
        for i, (block_type, body) in enumerate(new_blocks)
    )
    commit(f, data[:metadata_start] + metadata + data[blocks[-1].end:])
