"""ID3v2.2 / 2.3 / 2.4 reading and ID3v2.4 writing."""

import logging
import re
import struct
import zlib
from dataclasses import dataclass
from typing import BinaryIO, Iterator, List, Optional, Tuple

from mutagen.id3 import TCON

from ..constants import ID3V2_HEADER_SIZE, ID3V2_MAGIC, MAX_TAG_SIZE
from ..errors import EncodingError, MalformedHeaderError
from ..tag import ItemKey, Locator, Picture, PictureType, Tag, TagItem, TagType, item_key_from, map_key
from ..tag.keys import PAIRED_KEYS
from ..tag.picture import mime_from_image_format
from ..tag.utils import join_pair, paired_values, split_pair_item
from ..utils import (
    decode_text,
    read_exact,
    remove_unsynchronisation,
    synch_u32,
    unsynch_u32,
)

logger = logging.getLogger(__name__)

# Header flags
FLAG_UNSYNCHRONISATION = 0x80
FLAG_EXTENDED_HEADER = 0x40
FLAG_V22_COMPRESSION = 0x40
FLAG_FOOTER = 0x10

_FRAME_ID = re.compile(rb"^[A-Z0-9]+$")

# Text frames that do not start with "T"
_EXTRA_TEXT_FRAMES = ("GRP1", "MVNM", "MVIN")

# Written in place of the unknown language of converted comments
_DEFAULT_LANGUAGE = b"XXX"

V22_UPGRADES = {
    "BUF": "RBUF", "CNT": "PCNT", "COM": "COMM", "CRA": "AENC", "ETC": "ETCO",
    "GEO": "GEOB", "IPL": "TIPL", "MCI": "MCDI", "MLL": "MLLT", "PIC": "APIC",
    "POP": "POPM", "REV": "RVRB", "SLT": "SYLT", "STC": "SYTC", "UFI": "UFID",
    "ULT": "USLT", "TAL": "TALB", "TBP": "TBPM", "TCM": "TCOM", "TCO": "TCON",
    "TCP": "TCMP", "TCR": "TCOP", "TDY": "TDLY", "TEN": "TENC", "TFT": "TFLT",
    "TKE": "TKEY", "TLA": "TLAN", "TLE": "TLEN", "TMT": "TMED", "TOA": "TOPE",
    "TOF": "TOFN", "TOL": "TOLY", "TOR": "TDOR", "TOT": "TOAL", "TP1": "TPE1",
    "TP2": "TPE2", "TP3": "TPE3", "TP4": "TPE4", "TPA": "TPOS", "TPB": "TPUB",
    "TRC": "TSRC", "TRK": "TRCK", "TS2": "TSO2", "TSA": "TSOA", "TSC": "TSOC",
    "TSP": "TSOP", "TSS": "TSSE", "TST": "TSOT", "TT1": "TIT1", "TT2": "TIT2",
    "TT3": "TIT3", "TXT": "TEXT", "TXX": "TXXX", "TYE": "TDRC", "TDA": "TDAT",
    "TIM": "TIME", "WAF": "WOAF", "WAR": "WOAR", "WAS": "WOAS", "WCM": "WCOM",
    "WCP": "WCOP", "WPB": "WPUB", "WXX": "WXXX", "GP1": "GRP1", "MVN": "MVNM",
    "MVI": "MVIN",
}

V23_UPGRADES = {
    "TYER": "TDRC",
    "TORY": "TDOR",
    "IPLS": "TIPL",
    "EQUA": "EQU2",
    "RVAD": "RVA2",
}


@dataclass
class Header:
    """The 10 byte ID3v2 tag header. ``size`` excludes header and footer."""

    major: int
    revision: int
    flags: int
    size: int

    @property
    def unsynchronised(self) -> bool:
        return bool(self.flags & FLAG_UNSYNCHRONISATION)

    @property
    def has_extended_header(self) -> bool:
        return self.major >= 3 and bool(self.flags & FLAG_EXTENDED_HEADER)

    @property
    def has_footer(self) -> bool:
        return self.major == 4 and bool(self.flags & FLAG_FOOTER)

    @property
    def total_size(self) -> int:
        """Bytes taken by the whole tag, header and footer included."""
        footer = ID3V2_HEADER_SIZE if self.has_footer else 0
        return ID3V2_HEADER_SIZE + self.size + footer

    @staticmethod
    def parse(data: bytes) -> "Header":
        """Parse a tag header.

        Raises:
            MalformedHeaderError: Bad magic, unsupported version or v2.2 compression
        """
        if len(data) < ID3V2_HEADER_SIZE or not data.startswith(ID3V2_MAGIC):
            raise MalformedHeaderError("Not an ID3v2 tag (missing 'ID3')")
        major, revision, flags, raw_size = struct.unpack(">BBBI", data[3:10])
        if major not in (2, 3, 4):
            raise MalformedHeaderError(f"Unsupported ID3v2 major version: {major}")
        if major == 2 and flags & FLAG_V22_COMPRESSION:
            raise MalformedHeaderError("Compressed ID3v2.2 tags are not supported")
        size = unsynch_u32(raw_size)
        if size > MAX_TAG_SIZE:
            raise MalformedHeaderError(f"ID3v2 tag size {size} exceeds the limit of {MAX_TAG_SIZE}")
        return Header(major, revision, flags, size)


def read_header(f: BinaryIO) -> Optional[Header]:
    """Read a header at the current position; rewind and return None if there is none."""
    start = f.tell()
    data = f.read(ID3V2_HEADER_SIZE)
    if len(data) < ID3V2_HEADER_SIZE or not data.startswith(ID3V2_MAGIC):
        f.seek(start)
        return None
    return Header.parse(data)


def read_from(f: BinaryIO) -> Tuple[Header, Tag]:
    """Read the tag starting at the current position.

    Raises:
        MalformedHeaderError: If there is no valid tag at the current position
        IoError: If the tag is truncated
    """
    header = Header.parse(read_exact(f, ID3V2_HEADER_SIZE))
    body = read_exact(f, header.size)
    if header.has_footer:
        f.seek(ID3V2_HEADER_SIZE, 1)
    return header, _parse_body(header, body)


def parse(data: bytes) -> Tag:
    """Parse a complete tag (header included)."""
    header = Header.parse(data[:ID3V2_HEADER_SIZE])
    body = data[ID3V2_HEADER_SIZE:ID3V2_HEADER_SIZE + header.size]
    if len(body) != header.size:
        raise MalformedHeaderError(
            f"ID3v2 tag truncated: header claims {header.size} bytes, {len(body)} available"
        )
    return _parse_body(header, body)


# ---------------------------------------------------------------------------
# Frame reading
# ---------------------------------------------------------------------------
def _skip_extended_header(header: Header, body: bytes) -> bytes:
    if not header.has_extended_header:
        return body
    if len(body) < 4:
        raise MalformedHeaderError("Truncated ID3v2 extended header")
    (raw_size,) = struct.unpack(">I", body[:4])
    if header.major == 3:
        size = raw_size + 4
    else:
        size = unsynch_u32(raw_size)
        if size < 6:
            raise MalformedHeaderError(f"ID3v2.4 extended header size {size} is below the minimum of 6")
    if size > len(body):
        raise MalformedHeaderError(f"ID3v2 extended header size {size} exceeds the tag")
    return body[size:]


def _frame_content(frame_id: str, content: bytes, flags: int, header: Header) -> Tuple[bytes, bool]:
    """Strip per-frame extras and undo compression. Returns (content, encrypted)."""
    compressed = encrypted = False
    if header.major == 3:
        compressed = bool(flags & 0x0080)
        encrypted = bool(flags & 0x0040)
        skip = (4 if compressed else 0) + (1 if encrypted else 0) + (1 if flags & 0x0020 else 0)
        content = content[skip:]
    elif header.major == 4:
        compressed = bool(flags & 0x0008)
        encrypted = bool(flags & 0x0004)
        skip = (1 if flags & 0x0040 else 0) + (1 if encrypted else 0) + (4 if flags & 0x0001 else 0)
        content = content[skip:]
        # v2.4 unsynchronises per frame; the tag flag marks every frame
        if flags & 0x0002 or header.unsynchronised:
            content = remove_unsynchronisation(content)

    if encrypted:
        return content, True
    if compressed:
        try:
            content = zlib.decompress(content)
        except zlib.error as e:
            raise MalformedHeaderError(f"Frame {frame_id}: cannot inflate compressed content: {e}") from e
    return content, False


def iter_frames(header: Header, body: bytes) -> Iterator[Tuple[str, bytes, bool]]:
    """Yield (frame id, content, encrypted) for every frame of a tag body.

    Frame ids are returned as found; see upgrade_frame_id().
    """
    if header.major == 2:
        id_len, header_len = 3, 6
    else:
        id_len, header_len = 4, 10

    pos = 0
    while pos + header_len <= len(body):
        if body[pos] == 0:
            break  # padding
        raw_id = body[pos:pos + id_len]
        if not _FRAME_ID.match(raw_id):
            raise MalformedHeaderError(f"Invalid frame id {raw_id!r} at offset {pos}")

        if header.major == 2:
            size = int.from_bytes(body[pos + 3:pos + 6], "big")
            flags = 0
        elif header.major == 3:
            size, flags = struct.unpack(">IH", body[pos + 4:pos + 10])
        else:
            raw_size, flags = struct.unpack(">IH", body[pos + 4:pos + 10])
            size = unsynch_u32(raw_size)

        pos += header_len
        frame_id = raw_id.decode("ascii")
        if pos + size > len(body):
            raise MalformedHeaderError(
                f"Frame {frame_id} at offset {pos - header_len} claims {size} bytes, "
                f"only {len(body) - pos} remain"
            )
        content = body[pos:pos + size]
        pos += size
        content, encrypted = _frame_content(frame_id, content, flags, header)
        yield frame_id, content, encrypted


def upgrade_frame_id(frame_id: str, major: int) -> Optional[str]:
    """Map an ID3v2.2 or v2.3 frame id to its v2.4 equivalent (None if it has none)."""
    if major == 2:
        return V22_UPGRADES.get(frame_id)
    if major == 3:
        return V23_UPGRADES.get(frame_id, frame_id)
    return frame_id


def is_text_frame(frame_id: str) -> bool:
    return (frame_id.startswith("T") and frame_id != "TXXX") or frame_id in _EXTRA_TEXT_FRAMES


def is_url_frame(frame_id: str) -> bool:
    return frame_id.startswith("W") and frame_id != "WXXX"


def _text_values(data: bytes, encoding: int) -> List[str]:
    """Decode a text frame value, splitting on NUL separators."""
    values = []
    pos = 0
    while pos < len(data):
        text, consumed = decode_text(data[pos:], encoding, terminated=True)
        values.append(text)
        pos += consumed
    # Trailing terminators are not empty values
    while values and not values[-1]:
        values.pop()
    return values


def _parse_frame(tag: Tag, frame_id: str, content: bytes, major: int):
    """Convert one frame into items of ``tag``."""
    if is_text_frame(frame_id):
        values = _text_values(content[1:], content[0])
        if not values:
            return
        key = item_key_from(TagType.ID3V2, frame_id)
        if key in PAIRED_KEYS:
            for item in split_pair_item(key, values[0]):
                tag.insert_item(item)
            return
        if frame_id == "TCON":
            values = TCON(encoding=3, text=values).genres
        tag.insert_item(TagItem(key, "\x00".join(values)))

    elif frame_id == "TXXX":
        encoding = content[0]
        description, consumed = decode_text(content[1:], encoding, terminated=True)
        values = _text_values(content[1 + consumed:], encoding)
        tag.insert_item(TagItem(f"TXXX:{description}", "\x00".join(values)))

    elif is_url_frame(frame_id):
        url, _ = decode_text(content, 0, terminated=True)
        tag.insert_item(TagItem(frame_id, Locator(url)))

    elif frame_id == "WXXX":
        encoding = content[0]
        description, consumed = decode_text(content[1:], encoding, terminated=True)
        url, _ = decode_text(content[1 + consumed:], 0, terminated=True)
        tag.insert_item(TagItem(f"WXXX:{description}", Locator(url)))

    elif frame_id in ("COMM", "USLT"):
        if len(content) < 4:
            raise MalformedHeaderError(f"{frame_id} frame is too short ({len(content)} bytes)")
        encoding = content[0]
        language = content[1:4].decode("latin-1")
        description, consumed = decode_text(content[4:], encoding, terminated=True)
        text, _ = decode_text(content[4 + consumed:], encoding)
        key = f"{frame_id}:{description}" if description else frame_id
        tag.insert_item(TagItem(key, text, language=language))

    elif frame_id == "APIC":
        tag.push_picture(_parse_picture(content, major))

    else:
        tag.insert_item(TagItem(frame_id, content))


def _parse_picture(content: bytes, major: int) -> Picture:
    encoding = content[0]
    if major == 2:
        mime_type = mime_from_image_format(content[1:4].decode("latin-1")) or ""
        pos = 4
    else:
        mime_type, consumed = decode_text(content[1:], 0, terminated=True)
        pos = 1 + consumed
    if pos >= len(content):
        raise MalformedHeaderError("Picture frame is truncated")
    pic_type = PictureType.from_int(content[pos])
    description, consumed = decode_text(content[pos + 1:], encoding, terminated=True)
    data = content[pos + 1 + consumed:]
    return Picture(data, mime_type, pic_type, description)


def _merge_v23_dates(tag: Tag):
    """Fold v2.3 TDAT ("DDMM") and TIME ("HHMM") into the recording date."""
    day_month = tag.get_string("TDAT")
    hour_minute = tag.get_string("TIME")
    tag.remove_key("TDAT")
    tag.remove_key("TIME")
    year = tag.get_string(ItemKey.RECORDING_DATE)
    if not (year and len(year) == 4 and year.isdigit()):
        return
    if day_month and len(day_month) == 4 and day_month.isdigit():
        date = f"{year}-{day_month[2:]}-{day_month[:2]}"
        if hour_minute and len(hour_minute) == 4 and hour_minute.isdigit():
            date += f"T{hour_minute[:2]}:{hour_minute[2:]}"
        tag.insert_item(TagItem(ItemKey.RECORDING_DATE, date))


def _parse_body(header: Header, body: bytes) -> Tag:
    if header.unsynchronised and header.major < 4:
        body = remove_unsynchronisation(body)
    body = _skip_extended_header(header, body)

    tag = Tag(TagType.ID3V2)
    for raw_id, content, encrypted in iter_frames(header, body):
        frame_id = upgrade_frame_id(raw_id, header.major)
        if frame_id is None:
            logger.debug(f"Dropping ID3v2.2 frame {raw_id} with no v2.4 equivalent")
            continue
        if encrypted:
            tag.insert_item(TagItem(frame_id, content))
            continue
        if not content:
            logger.debug(f"Skipping empty {frame_id} frame")
            continue
        try:
            _parse_frame(tag, frame_id, content, header.major)
        except EncodingError as e:
            raise EncodingError(f"Frame {frame_id}: {e}") from e
    if header.major == 3:
        _merge_v23_dates(tag)
    return tag


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------
def _frame_id_for(item: TagItem) -> Optional[str]:
    if isinstance(item.value, Picture):
        return "APIC"
    if isinstance(item.key, ItemKey):
        return map_key(item.key, TagType.ID3V2)
    return item.key


def _text(value: str) -> bytes:
    return value.encode("utf-8")


def _language(item: TagItem) -> bytes:
    language = (item.language or "").encode("latin-1", "replace")
    return language if len(language) == 3 else _DEFAULT_LANGUAGE


def _frame_body(frame_id: str, item: TagItem, pairs) -> Optional[bytes]:
    """Build the content of the frame carrying ``item`` (v2.4, UTF-8)."""
    value = item.value
    base_id, _, description = frame_id.partition(":")

    if isinstance(value, Picture):
        return b"".join((
            b"\x03",
            value.mime_type.encode("latin-1", "replace") + b"\x00",
            bytes([int(value.pic_type)]),
            _text(value.description) + b"\x00",
            value.data,
        ))
    if isinstance(value, bytes):
        return value

    if base_id in ("TRCK", "TPOS"):
        number_key = item_key_from(TagType.ID3V2, base_id)
        value = join_pair(*pairs.get(number_key, (None, None)))
        if value is None:
            return None
    if is_text_frame(base_id):
        return b"\x03" + _text(value)
    if base_id == "TXXX":
        return b"\x03" + _text(description) + b"\x00" + _text(value)
    if is_url_frame(base_id):
        return value.encode("latin-1", "replace")
    if base_id == "WXXX":
        return b"\x03" + _text(description) + b"\x00" + value.encode("latin-1", "replace")
    if base_id in ("COMM", "USLT"):
        return b"\x03" + _language(item) + _text(description) + b"\x00" + _text(value)

    logger.debug(f"Frame {base_id} cannot hold a text value, skipping it")
    return None


def render_frame(frame_id: str, content: bytes) -> bytes:
    return struct.pack(">4sIH", frame_id.encode("ascii"), synch_u32(len(content)), 0) + content


def render(tag: Tag, padding: int = 0) -> bytes:
    """Serialize as an ID3v2.4 tag (UTF-8 text, no unsynchronisation).

    Returns b"" when no frame would be written.
    """
    pairs = paired_values(tag.items)
    written = set()
    frames = []
    for item in tag:
        frame_id = _frame_id_for(item)
        if frame_id is None:
            continue
        # Only pictures may repeat
        if frame_id != "APIC":
            if frame_id in written:
                continue
            written.add(frame_id)
        content = _frame_body(frame_id, item, pairs)
        if content is None:
            continue
        frames.append(render_frame(frame_id.partition(":")[0], content))

    if not frames:
        return b""
    body = b"".join(frames) + b"\x00" * padding
    return ID3V2_MAGIC + struct.pack(">BBBI", 4, 0, 0, synch_u32(len(body))) + body
