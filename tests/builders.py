"""Builders for minimal, valid audio files made with struct.pack.

Each builder returns the complete file as bytes. The audio payload is a
recognisable byte pattern so tests can check it survives tag writes.
"""

import struct

from audiotag.containers.atoms import render_atom
from audiotag.containers.chunks import render_chunk
from audiotag.containers.ogg_page import FIRST_PAGE, LAST_PAGE, Page, paginate
from audiotag.utils import write_extended_float


def audio_pattern(size: int) -> bytes:
    return bytes(i % 251 for i in range(size))


# ---------------------------------------------------------------------------
# MPEG
# ---------------------------------------------------------------------------
# MPEG-1 Layer III, 128 kbps, 44100 Hz, stereo, no padding
MPEG_HEADER = b"\xff\xfb\x90\x00"
MPEG_FRAME_SIZE = 417


def mpeg_frames(count: int = 10) -> bytes:
    frame = MPEG_HEADER + b"\x00" * (MPEG_FRAME_SIZE - 4)
    return frame * count


def build_mp3(frames: int = 10, id3v2: bytes = b"", ape: bytes = b"", id3v1: bytes = b"") -> bytes:
    return id3v2 + mpeg_frames(frames) + ape + id3v1


def id3v1_block(
    title=b"Title",
    artist=b"Artist",
    album=b"Album",
    year=b"1999",
    comment=b"Comment",
    track=7,
    genre=17,
) -> bytes:
    """A 128 byte ID3v1.1 block (``track=None`` for plain ID3v1)."""
    if track is None:
        comment_field = comment.ljust(30, b"\x00")
    else:
        comment_field = comment.ljust(28, b"\x00") + bytes([0, track])
    return (
        b"TAG"
        + title.ljust(30, b"\x00")
        + artist.ljust(30, b"\x00")
        + album.ljust(30, b"\x00")
        + year.ljust(4, b"\x00")
        + comment_field
        + bytes([genre])
    )


def synchsafe(value: int) -> bytes:
    return bytes([(value >> 21) & 0x7F, (value >> 14) & 0x7F, (value >> 7) & 0x7F, value & 0x7F])


def id3v2_frame(frame_id: bytes, content: bytes, major: int = 4) -> bytes:
    if major == 2:
        return frame_id + len(content).to_bytes(3, "big") + content
    size = synchsafe(len(content)) if major == 4 else struct.pack(">I", len(content))
    return frame_id + size + b"\x00\x00" + content


def id3v2_tag(frames: bytes, major: int = 4, flags: int = 0, padding: int = 0) -> bytes:
    body = frames + b"\x00" * padding
    return b"ID3" + bytes([major, 0, flags]) + synchsafe(len(body)) + body


def text_frame(frame_id: bytes, text: str, major: int = 4) -> bytes:
    if major == 4:
        return id3v2_frame(frame_id, b"\x03" + text.encode("utf-8"), major)
    return id3v2_frame(frame_id, b"\x00" + text.encode("latin-1"), major)


# ---------------------------------------------------------------------------
# APE
# ---------------------------------------------------------------------------
def ape_item(key: str, value: bytes, flags: int = 0) -> bytes:
    return struct.pack("<II", len(value), flags) + key.encode("ascii") + b"\x00" + value


def ape_tag(items, count=None, header: bool = True) -> bytes:
    body = b"".join(items)
    if count is None:
        count = len(items)
    size = len(body) + 32
    flags = 0x80000000 if header else 0
    footer = b"APETAGEX" + struct.pack("<IIII", 2000, size, count, flags) + b"\x00" * 8
    if not header:
        return body + footer
    head = b"APETAGEX" + struct.pack("<IIII", 2000, size, count, flags | 0x20000000) + b"\x00" * 8
    return head + body + footer


def build_monkeys_audio(audio: bytes = b"", tags: bytes = b"") -> bytes:
    """A Monkey's Audio 3.99 file: descriptor plus header, 44100 Hz stereo."""
    descriptor = b"MAC " + struct.pack("<HHI", 3990, 0, 52) + b"\x00" * 40
    # compression, flags, blocks per frame, final frame blocks, total frames,
    # bits per sample, channels, sample rate
    header = struct.pack("<HHIIIHHI", 2000, 0, 73728 * 4, 44100, 2, 16, 2, 44100)
    return descriptor + header + (audio or audio_pattern(1000)) + tags


# ---------------------------------------------------------------------------
# FLAC
# ---------------------------------------------------------------------------
def streaminfo(sample_rate: int = 44100, channels: int = 2, total_samples: int = 4410000) -> bytes:
    packed = (sample_rate << 44) | ((channels - 1) << 41) | (15 << 36) | total_samples
    return struct.pack(">HH", 4096, 4096) + b"\x00" * 6 + struct.pack(">Q", packed) + b"\x00" * 16


def flac_block(block_type: int, data: bytes, last: bool = False) -> bytes:
    return bytes([block_type | (0x80 if last else 0)]) + len(data).to_bytes(3, "big") + data


def vorbis_comment_block(comments, vendor: bytes = b"test vendor") -> bytes:
    parts = [struct.pack("<I", len(vendor)), vendor, struct.pack("<I", len(comments))]
    for comment in comments:
        raw = comment.encode("utf-8")
        parts.append(struct.pack("<I", len(raw)) + raw)
    return b"".join(parts)


def build_flac(comments=None, audio: bytes = b"", padding: int = 0, **info) -> bytes:
    blocks = [(0, streaminfo(**info))]
    if comments is not None:
        blocks.append((4, vorbis_comment_block(comments)))
    if padding:
        blocks.append((1, b"\x00" * padding))
    metadata = b"".join(
        flac_block(t, d, i == len(blocks) - 1) for i, (t, d) in enumerate(blocks)
    )
    return b"fLaC" + metadata + (audio or audio_pattern(2000))


# ---------------------------------------------------------------------------
# OGG
# ---------------------------------------------------------------------------
SERIAL = 0x1234


def vorbis_ident(sample_rate: int = 44100, channels: int = 2, nominal: int = 128000) -> bytes:
    return (
        b"\x01vorbis"
        + struct.pack("<IBIiii", 0, channels, sample_rate, 0, nominal, 0)
        + b"\xb8\x01"
    )


def opus_head(channels: int = 2, pre_skip: int = 312, rate: int = 48000) -> bytes:
    return b"OpusHead" + struct.pack("<BBHIhB", 1, channels, pre_skip, rate, 0, 0)


def build_ogg(ident: bytes, headers, final_granule: int, audio_pages: int = 2) -> bytes:
    """First page with the identification packet, then the other header
    packets, then ``audio_pages`` audio pages ending at ``final_granule``."""
    pages = [Page(FIRST_PAGE, 0, SERIAL, 0, [len(ident)], ident)]
    pages.extend(paginate(list(headers), SERIAL, 1))
    sequence = pages[-1].sequence + 1
    for i in range(audio_pages):
        last = i == audio_pages - 1
        granule = final_granule * (i + 1) // audio_pages
        content = audio_pattern(200 + i)
        pages.append(
            Page(LAST_PAGE if last else 0, granule, SERIAL, sequence + i, [len(content)], content)
        )
    return b"".join(page.as_bytes() for page in pages)


def build_vorbis(comments=None, seconds: int = 10) -> bytes:
    comment = b"\x03vorbis" + vorbis_comment_block(comments or []) + b"\x01"
    setup = b"\x05vorbis" + audio_pattern(300)
    return build_ogg(vorbis_ident(), [comment, setup], 44100 * seconds)


def build_opus(comments=None, seconds: int = 10) -> bytes:
    tags = b"OpusTags" + vorbis_comment_block(comments or [])
    return build_ogg(opus_head(), [tags], 312 + 48000 * seconds)


# ---------------------------------------------------------------------------
# RIFF / AIFF
# ---------------------------------------------------------------------------
def fmt_chunk(channels: int = 2, sample_rate: int = 44100, bits: int = 16) -> bytes:
    block_align = channels * bits // 8
    return render_chunk(
        b"fmt ",
        struct.pack("<HHIIHH", 1, channels, sample_rate, sample_rate * block_align, block_align, bits),
    )


def info_list(items) -> bytes:
    body = b"INFO" + b"".join(
        render_chunk(key, value.encode("utf-8") + b"\x00") for key, value in items
    )
    return render_chunk(b"LIST", body)


def build_wav(extra: bytes = b"", audio: bytes = b"", trailing: bytes = b"") -> bytes:
    """WAV with fmt, data (default 100 ms of 16 bit stereo) and ``extra`` chunks after data."""
    data = render_chunk(b"data", audio or audio_pattern(17640))
    body = b"WAVE" + fmt_chunk() + data + extra + trailing
    return b"RIFF" + struct.pack("<I", len(body)) + body


def comm_chunk(channels: int = 2, frames: int = 44100, bits: int = 16, rate: int = 44100) -> bytes:
    payload = struct.pack(">hIh", channels, frames, bits) + write_extended_float(rate)
    return render_chunk(b"COMM", payload, big_endian=True)


def build_aiff(extra: bytes = b"", audio: bytes = b"") -> bytes:
    ssnd = render_chunk(b"SSND", b"\x00" * 8 + (audio or audio_pattern(4000)), big_endian=True)
    body = b"AIFF" + comm_chunk() + extra + ssnd
    return b"FORM" + struct.pack(">I", len(body)) + body


def aiff_text(fourcc: bytes, text: str) -> bytes:
    return render_chunk(fourcc, text.encode("latin-1"), big_endian=True)


# ---------------------------------------------------------------------------
# MP4
# ---------------------------------------------------------------------------
def full_atom(ident: str, payload: bytes, version: int = 0) -> bytes:
    return render_atom(ident, bytes([version, 0, 0, 0]) + payload)


def ilst_data(ident: str, type_code: int, value: bytes) -> bytes:
    data = render_atom("data", struct.pack(">II", type_code, 0) + value)
    return render_atom(ident, data)


def esds(avg_bitrate: int = 128000) -> bytes:
    decoder_config = bytes([0x40, 0x15]) + b"\x00\x00\x00" + struct.pack(">II", avg_bitrate, avg_bitrate)
    es = struct.pack(">HB", 1, 0) + bytes([0x04, len(decoder_config)]) + decoder_config
    return full_atom("esds", bytes([0x03, len(es)]) + es)


def mp4a_entry(channels: int = 2, sample_rate: int = 44100) -> bytes:
    head = (
        b"\x00" * 6
        + struct.pack(">H", 1)
        + b"\x00" * 8
        + struct.pack(">HHHHI", channels, 16, 0, 0, sample_rate << 16)
    )
    return render_atom("mp4a", head + esds())


def mp4_trak(chunk_offset: int, timescale: int = 44100, duration: int = 441000) -> bytes:
    mdhd = full_atom("mdhd", struct.pack(">IIIIHH", 0, 0, timescale, duration, 0, 0))
    hdlr = full_atom("hdlr", b"\x00" * 4 + b"soun" + b"\x00" * 12 + b"\x00")
    stsd = full_atom("stsd", struct.pack(">I", 1) + mp4a_entry())
    stco = full_atom("stco", struct.pack(">II", 1, chunk_offset))
    stbl = render_atom("stbl", stsd + stco)
    minf = render_atom("minf", stbl)
    return render_atom("trak", render_atom("mdia", mdhd + hdlr + minf))


def mp4_udta(ilst_items: bytes) -> bytes:
    meta_hdlr = full_atom("hdlr", b"\x00" * 4 + b"mdir" + b"appl" + b"\x00" * 9)
    meta = full_atom("meta", meta_hdlr + render_atom("ilst", ilst_items))
    return render_atom("udta", meta)


def build_mp4(ilst_items=None, audio: bytes = b"") -> bytes:
    """ftyp, moov (one sound trak, optional udta/meta/ilst), then mdat.

    The single stco entry points at the first byte of the mdat payload.
    """
    audio = audio or audio_pattern(5000)
    ftyp = render_atom("ftyp", b"M4A " + struct.pack(">I", 0) + b"M4A isom")
    udta = mp4_udta(ilst_items) if ilst_items is not None else b""

    # The stco offset depends on the moov size, which does not depend on the offset value
    moov = render_atom("moov", mp4_trak(0) + udta)
    offset = len(ftyp) + len(moov) + 8
    moov = render_atom("moov", mp4_trak(offset) + udta)
    return ftyp + moov + render_atom("mdat", audio)
