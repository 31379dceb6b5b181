"""OGG Vorbis and OGG Opus: header packets, properties and comment rewriting."""

import io
import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple

from ..codecs import vorbis_comments
from ..constants import (
    MAX_TAG_SIZE,
    OPUS_HEAD,
    OPUS_TAGS,
    VORBIS_COMMENT_HEAD,
    VORBIS_IDENT_HEAD,
)
from ..errors import IoError, MalformedHeaderError
from ..file import FileType, TaggedFile
from ..properties import FileProperties
from ..tag import Tag, TagType
from ..utils import bitrate_kbps, millis, stream_length
from .common import commit, parse_tag, read_all
from .ogg_page import Page, find_last_page, paginate

logger = logging.getLogger(__name__)

OPUS_SAMPLE_RATE = 48000


@dataclass(frozen=True)
class OggFormat:
    """What distinguishes the OGG codecs we handle."""

    file_type: FileType
    ident_head: bytes
    comment_head: bytes
    framing: bool
    # Header packets before the audio: ident + comment (+ setup for Vorbis)
    header_packets: int


VORBIS = OggFormat(FileType.VORBIS, VORBIS_IDENT_HEAD, VORBIS_COMMENT_HEAD, True, 3)
OPUS = OggFormat(FileType.OPUS, OPUS_HEAD, OPUS_TAGS, False, 2)


def read_packets(
    f: BinaryIO, serial: int, count: int, skip_content: bool = False
) -> Tuple[List[bytes], List[Page], bytes]:
    """Reassemble ``count`` complete packets of stream ``serial`` from the current position.

    With ``skip_content`` the pages are only walked, and every packet comes
    back empty.

    Returns:
        The packets, the pages they were read from and the start of any
        packet left unfinished on the last page
    """
    packets: List[bytes] = []
    pages: List[Page] = []
    current = b""
    while len(packets) < count:
        page = Page.read(f, skip_content)
        if page.serial != serial:
            continue
        pages.append(page)
        pos = 0
        for lace in page.segments:
            current += page.content[pos:pos + lace]
            pos += lace
            if len(current) > MAX_TAG_SIZE:
                raise MalformedHeaderError(f"OGG header packet exceeds {MAX_TAG_SIZE} bytes")
            if lace < 255:
                packets.append(current)
                current = b""
    return packets, pages, current


def _vorbis_properties(ident: bytes, first: Page, last: Optional[Page], length: int) -> FileProperties:
    _version, channels, sample_rate, _maximum, nominal, _minimum = struct.unpack(
        "<IBIiii", ident[7:28]
    )
    if sample_rate == 0:
        raise MalformedHeaderError("Vorbis identification header has a sample rate of 0")
    duration_ms = 0
    if last is not None and last.granule > first.granule:
        duration_ms = (last.granule - first.granule) * 1000 // sample_rate
    audio_bitrate = nominal // 1000 if nominal > 0 else bitrate_kbps(length, duration_ms)
    return FileProperties(
        duration=millis(duration_ms),
        overall_bitrate=bitrate_kbps(length, duration_ms),
        audio_bitrate=audio_bitrate,
        sample_rate=sample_rate,
        channels=channels,
    )


def _opus_properties(ident: bytes, last: Optional[Page], length: int, header_end: int) -> FileProperties:
    _version, channels, pre_skip, input_sample_rate = struct.unpack("<BBHI", ident[8:16])
    duration_ms = 0
    if last is not None and last.granule > pre_skip:
        duration_ms = (last.granule - pre_skip) * 1000 // OPUS_SAMPLE_RATE
    return FileProperties(
        duration=millis(duration_ms),
        overall_bitrate=bitrate_kbps(length, duration_ms),
        audio_bitrate=bitrate_kbps(length - header_end, duration_ms),
        sample_rate=input_sample_rate or None,
        channels=channels,
    )


def read(f: BinaryIO, read_tags: bool = True, fmt: OggFormat = VORBIS) -> TaggedFile:
    """Read an OGG Vorbis or Opus file.

    Raises:
        MalformedHeaderError: If the first page is not a valid OGG page of ``fmt``
    """
    tagged = TaggedFile(fmt.file_type)
    length = stream_length(f)
    f.seek(0)
    first = Page.read(f)
    ident = first.packets()[0]
    if not ident.startswith(fmt.ident_head):
        raise MalformedHeaderError(
            f"First OGG packet is not a {fmt.file_type.value} identification header"
        )

    packets, _, _ = read_packets(f, first.serial, 1, skip_content=not read_tags)
    comment = packets[0]
    header_end = f.tell()

    if read_tags:
        def read_tag() -> Tag:
            if not comment.startswith(fmt.comment_head):
                raise MalformedHeaderError(
                    f"Second OGG packet is not a {fmt.file_type.value} comment header"
                )
            return vorbis_comments.parse(comment[len(fmt.comment_head):])

        parse_tag(tagged, TagType.VORBIS_COMMENTS, read_tag)

    try:
        last = find_last_page(f, length)
        if fmt is VORBIS:
            tagged.properties = _vorbis_properties(ident, first, last, length)
        else:
            tagged.properties = _opus_properties(ident, last, length, header_end)
    except (struct.error, IoError, MalformedHeaderError) as e:
        logger.warning(f"Failed to read {fmt.file_type.value} stream properties: {e}")
    return tagged


def read_vorbis(f: BinaryIO, read_tags: bool = True) -> TaggedFile:
    return read(f, read_tags, VORBIS)


def read_opus(f: BinaryIO, read_tags: bool = True) -> TaggedFile:
    return read(f, read_tags, OPUS)


def write(f: BinaryIO, tag: Tag, fmt: OggFormat = VORBIS):
    """Replace the comment packet, repaginating the header pages after the
    first one and renumbering (and re-checksumming) every later page."""
    data = read_all(f)
    stream = io.BytesIO(data)
    first = Page.read(stream)
    packets, pages, partial = read_packets(stream, first.serial, fmt.header_packets - 1)
    if partial:
        raise MalformedHeaderError("An audio packet starts on the last OGG header page")
    comment = packets[0]
    if not comment.startswith(fmt.comment_head):
        raise MalformedHeaderError(f"Second OGG packet is not a {fmt.file_type.value} comment header")
    vendor, _ = vorbis_comments.parse_with_vendor(comment[len(fmt.comment_head):])
    packets[0] = fmt.comment_head + vorbis_comments.render(tag, vendor, framing=fmt.framing)

    new_pages = paginate(packets, first.serial, pages[0].sequence)
    delta = len(new_pages) - len(pages)

    out = [data[:first.end]]
    out.extend(page.as_bytes() for page in new_pages)
    while stream.tell() < len(data):
        page = Page.read(stream)
        if page.serial == first.serial:
            page.sequence += delta
        out.append(page.as_bytes())
    logger.debug(f"Comment header now spans {len(new_pages)} pages (was {len(pages)})")
    commit(f, b"".join(out))


def write_vorbis(f: BinaryIO, tag: Tag, padding: int = 0):
    write(f, tag, VORBIS)


def write_opus(f: BinaryIO, tag: Tag, padding: int = 0):
    write(f, tag, OPUS)
