"""OGG page framing: reading, CRC and packet (re)pagination."""

import struct
from dataclasses import dataclass
from typing import BinaryIO, List, Optional

from ..constants import OGG_MAGIC
from ..errors import MalformedHeaderError
from ..utils import read_exact

PAGE_HEADER_SIZE = 27
MAX_SEGMENTS = 255

# Header type flags
CONTINUED_PACKET = 0x01
FIRST_PAGE = 0x02
LAST_PAGE = 0x04


def _make_crc_table():
    table = []
    for i in range(256):
        r = i << 24
        for _ in range(8):
            r = ((r << 1) ^ 0x04C11DB7) if r & 0x80000000 else (r << 1)
        table.append(r & 0xFFFFFFFF)
    return table


_CRC_TABLE = _make_crc_table()


def ogg_crc(data: bytes) -> int:
    """CRC-32 as used by OGG: polynomial 0x04C11DB7, no reflection, no final xor."""
    crc = 0
    for byte in data:
        crc = ((crc << 8) & 0xFFFFFFFF) ^ _CRC_TABLE[((crc >> 24) & 0xFF) ^ byte]
    return crc


@dataclass
class Page:
    header_type: int
    granule: int
    serial: int
    sequence: int
    segments: List[int]
    content: bytes
    crc: int = 0
    start: int = 0
    version: int = 0

    @property
    def end(self) -> int:
        return self.start + PAGE_HEADER_SIZE + len(self.segments) + len(self.content)

    @property
    def is_continued(self) -> bool:
        return bool(self.header_type & CONTINUED_PACKET)

    @staticmethod
    def read(f: BinaryIO, skip_content: bool = False) -> "Page":
        """Read the page at the current position.

        Raises:
            MalformedHeaderError: Bad capture pattern, version or segment count
            IoError: The page is truncated
        """
        start = f.tell()
        header = read_exact(f, PAGE_HEADER_SIZE)
        if header[:4] != OGG_MAGIC:
            raise MalformedHeaderError(f"Missing OGG capture pattern at offset {start}")
        version, header_type, granule, serial, sequence, crc, count = struct.unpack(
            "<BBqIIIB", header[4:]
        )
        if version != 0:
            raise MalformedHeaderError(f"Unsupported OGG stream structure version {version}")
        if count < 1:
            raise MalformedHeaderError(f"OGG page at offset {start} has no segments")
        segments = list(read_exact(f, count))
        size = sum(segments)
        if skip_content:
            f.seek(size, 1)
            content = b""
        else:
            content = read_exact(f, size)
        return Page(header_type, granule, serial, sequence, segments, content, crc, start, version)

    def as_bytes(self) -> bytes:
        """Serialize the page, computing its CRC."""
        header = OGG_MAGIC + struct.pack(
            "<BBqIIIB",
            self.version,
            self.header_type,
            self.granule,
            self.serial,
            self.sequence,
            0,
            len(self.segments),
        ) + bytes(self.segments)
        data = bytearray(header + self.content)
        self.crc = ogg_crc(data)
        data[22:26] = struct.pack("<I", self.crc)
        return bytes(data)

    def packets(self) -> List[bytes]:
        """Split the content into packet pieces (the last may be unterminated)."""
        pieces, pos, current = [], 0, 0
        for lace in self.segments:
            current += lace
            if lace < 255:
                pieces.append(self.content[pos:pos + current])
                pos += current
                current = 0
        if current:
            pieces.append(self.content[pos:pos + current])
        return pieces

    @property
    def ends_packet(self) -> bool:
        return self.segments[-1] < 255


def lacing(size: int) -> List[int]:
    """Segment table values for one complete packet of ``size`` bytes."""
    return [255] * (size // 255) + [size % 255]


def paginate(
    packets: List[bytes],
    serial: int,
    sequence: int,
    granule: int = 0,
    header_type: int = 0,
) -> List[Page]:
    """Lay complete packets out over as few pages as possible.

    Pages on which a packet ends carry ``granule``, the others -1.
    """
    laces: List[int] = []
    for packet in packets:
        laces.extend(lacing(len(packet)))
    data = b"".join(packets)

    pages = []
    pos = 0
    continued = False
    while laces:
        chunk, laces = laces[:MAX_SEGMENTS], laces[MAX_SEGMENTS:]
        size = sum(chunk)
        flags = header_type if not pages else 0
        if continued:
            flags |= CONTINUED_PACKET
        ends_packet = any(lace < 255 for lace in chunk)
        page = Page(
            flags,
            granule if ends_packet else -1,
            serial,
            sequence + len(pages),
            chunk,
            data[pos:pos + size],
        )
        pages.append(page)
        pos += size
        continued = chunk[-1] == 255
    return pages


def find_last_page(f: BinaryIO, end: int) -> Optional[Page]:
    """Locate the last page of a stream by scanning backwards for "OggS"."""
    window = 65536 + PAGE_HEADER_SIZE + MAX_SEGMENTS
    start = max(0, end - window)
    f.seek(start)
    data = f.read(end - start)
    pos = data.rfind(OGG_MAGIC)
    while pos != -1:
        f.seek(start + pos)
        try:
            return Page.read(f, skip_content=True)
        except (MalformedHeaderError, OSError):
            pos = data.rfind(OGG_MAGIC, 0, pos)
    return None
