"""MP4 / M4A: moov properties and moov.udta.meta.ilst rewriting."""

import io
import logging
import struct
from typing import BinaryIO, List, Optional, Tuple

from ..codecs import ilst
from ..constants import MP4_FTYP
from ..errors import IoError, MalformedHeaderError
from ..file import FileType, TaggedFile
from ..properties import FileProperties
from ..tag import Tag, TagType
from ..utils import bitrate_kbps, millis, stream_length
from .atoms import Atom, find_atom, iter_atoms, read_atom, render_atom, walk_atoms
from .common import commit, parse_tag, read_all

logger = logging.getLogger(__name__)

ILST_PATH = ("udta", "meta", "ilst")

# version/flags, pre_defined, handler type, reserved, empty name
META_HDLR = render_atom("hdlr", b"\x00" * 8 + b"mdir" + b"appl" + b"\x00" * 9)


def find_moov(f: BinaryIO, length: int) -> Atom:
    """Check the "ftyp" atom and locate "moov".

    Raises:
        MalformedHeaderError: If the file does not start with "ftyp" or lacks "moov"
    """
    first = read_atom(f, 0, length)
    if first.ident != MP4_FTYP.decode("latin-1"):
        raise MalformedHeaderError(f"MP4 file starts with {first.ident!r}, expected 'ftyp'")
    for atom in iter_atoms(f, 0, length):
        if atom.ident == "moov":
            return atom
    raise MalformedHeaderError("MP4 file has no 'moov' atom")


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------
def _descriptor_length(data: bytes, pos: int) -> Tuple[int, int]:
    """Decode an MPEG-4 descriptor length (up to 4 bytes, 7 bits each)."""
    length = 0
    for _ in range(4):
        byte = data[pos]
        pos += 1
        length = (length << 7) | (byte & 0x7F)
        if not byte & 0x80:
            break
    return length, pos


def esds_average_bitrate(payload: bytes) -> Optional[int]:
    """Average bitrate (bps) from an "esds" payload, if present."""
    pos = 4  # version/flags
    if payload[pos] != 0x03:
        return None
    _, pos = _descriptor_length(payload, pos + 1)
    flags = payload[pos + 2]
    pos += 3
    if flags & 0x80:
        pos += 2
    if flags & 0x40:
        pos += 1 + payload[pos]
    if flags & 0x20:
        pos += 2
    if payload[pos] != 0x04:
        return None
    _, pos = _descriptor_length(payload, pos + 1)
    # object type, stream type, buffer size (3), max bitrate, average bitrate
    (average,) = struct.unpack(">I", payload[pos + 9:pos + 13])
    return average


def _audio_track(f: BinaryIO, moov: Atom) -> Optional[Atom]:
    for trak in iter_atoms(f, moov.data_start, moov.end):
        if trak.ident != "trak":
            continue
        found = find_atom(f, trak.data_start, trak.end, ("mdia", "hdlr"))
        if found is None:
            continue
        hdlr = found[1].read(f)
        if hdlr[8:12] == b"soun":
            return trak
    return None


def read_properties(f: BinaryIO, moov: Atom, length: int) -> FileProperties:
    trak = _audio_track(f, moov)
    if trak is None:
        raise MalformedHeaderError("MP4 file has no audio track")

    found = find_atom(f, trak.data_start, trak.end, ("mdia", "mdhd"))
    if found is None:
        raise MalformedHeaderError("Audio track has no 'mdhd' atom")
    mdhd = found[1].read(f)
    if mdhd[0] == 1:
        timescale, duration = struct.unpack(">IQ", mdhd[20:32])
    else:
        timescale, duration = struct.unpack(">II", mdhd[12:20])
    if timescale == 0:
        raise MalformedHeaderError("'mdhd' has a timescale of 0")
    duration_ms = duration * 1000 // timescale

    sample_rate = channels = audio_bitrate = None
    found = find_atom(f, trak.data_start, trak.end, ("mdia", "minf", "stbl", "stsd"))
    if found is not None:
        stsd = found[1]
        # version/flags and entry count precede the first sample entry
        entry = read_atom(f, stsd.data_start + 8, stsd.end)
        f.seek(entry.data_start)
        head = f.read(28)
        if entry.ident in ("mp4a", "alac") and len(head) == 28:
            channels, _sample_size = struct.unpack(">HH", head[16:20])
            sample_rate = struct.unpack(">I", head[24:28])[0] >> 16
        for child in iter_atoms(f, entry.data_start + 28, entry.end):
            payload = child.read(f)
            if child.ident == "esds":
                average = esds_average_bitrate(payload)
                if average:
                    audio_bitrate = average // 1000
            elif child.ident == "alac" and len(payload) >= 28:
                channels = payload[13]
                average, sample_rate = struct.unpack(">II", payload[20:28])
                if average:
                    audio_bitrate = average // 1000

    if audio_bitrate is None:
        mdat = sum(a.data_size for a in iter_atoms(f, 0, length) if a.ident == "mdat")
        audio_bitrate = bitrate_kbps(mdat, duration_ms)

    return FileProperties(
        duration=millis(duration_ms),
        overall_bitrate=bitrate_kbps(length, duration_ms),
        audio_bitrate=audio_bitrate,
        sample_rate=sample_rate,
        channels=channels,
    )


def read(f: BinaryIO, read_tags: bool = True) -> TaggedFile:
    tagged = TaggedFile(FileType.MP4)
    length = stream_length(f)
    moov = find_moov(f, length)

    if read_tags:
        found = find_atom(f, moov.data_start, moov.end, ILST_PATH)
        if found is not None:
            parse_tag(tagged, TagType.MP4_ILST, lambda: ilst.parse(found[1].read(f)))

    try:
        tagged.properties = read_properties(f, moov, length)
    except (IndexError, struct.error, IoError, MalformedHeaderError) as e:
        logger.warning(f"Failed to read MP4 audio properties: {e}")
    return tagged


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------
def _patch_size(data: bytearray, atom: Atom, delta: int):
    size = atom.size + delta
    if atom.header_size == 16:
        data[atom.start + 8:atom.start + 16] = struct.pack(">Q", size)
    elif size > 0xFFFFFFFF:
        raise MalformedHeaderError(f"Atom {atom.ident!r} would exceed 4 GiB")
    else:
        data[atom.start:atom.start + 4] = struct.pack(">I", size)


def _shift_chunk_offsets(data: bytearray, moov: Atom, since: int, delta: int):
    """Add ``delta`` to every stco/co64 entry pointing at or past ``since``."""
    f = io.BytesIO(bytes(data))
    for _, atom in walk_atoms(f, moov.start, moov.start + moov.size + delta):
        if atom.ident not in ("stco", "co64"):
            continue
        width, fmt = (4, ">I") if atom.ident == "stco" else (8, ">Q")
        (count,) = struct.unpack(">I", data[atom.data_start + 4:atom.data_start + 8])
        pos = atom.data_start + 8
        for _ in range(count):
            (offset,) = struct.unpack(fmt, data[pos:pos + width])
            if offset >= since:
                offset += delta
                if width == 4 and offset > 0xFFFFFFFF:
                    raise MalformedHeaderError("Chunk offset no longer fits in 'stco'")
                data[pos:pos + width] = struct.pack(fmt, offset)
            pos += width
        logger.debug(f"Shifted {count} chunk offsets in {atom.ident!r} by {delta}")


def write(f: BinaryIO, tag: Tag, padding: int = 0):
    """Rebuild the "ilst" atom, creating udta/meta as needed."""
    length = stream_length(f)
    moov = find_moov(f, length)
    new_ilst = ilst.render(tag)

    parents: List[Atom] = [moov]
    found = find_atom(f, moov.data_start, moov.end, ILST_PATH)
    if found is not None:
        parents.extend(found[0])
        old = found[1]
        start, end, insert = old.start, old.end, new_ilst
    else:
        if not new_ilst:
            logger.debug("No ilst to remove")
            return
        meta = find_atom(f, moov.data_start, moov.end, ILST_PATH[:2])
        udta = find_atom(f, moov.data_start, moov.end, ILST_PATH[:1])
        if meta is not None:
            parents.extend(meta[0] + (meta[1],))
            start = end = meta[1].end
            insert = new_ilst
        elif udta is not None:
            parents.append(udta[1])
            start = end = udta[1].end
            insert = render_atom("meta", b"\x00" * 4 + META_HDLR + new_ilst)
        else:
            start = end = moov.end
            insert = render_atom("udta", render_atom("meta", b"\x00" * 4 + META_HDLR + new_ilst))

    data = bytearray(read_all(f))
    delta = len(insert) - (end - start)
    data[start:end] = insert
    for atom in parents:
        _patch_size(data, atom, delta)
    if delta:
        _shift_chunk_offsets(data, moov, start, delta)
    commit(f, bytes(data))
