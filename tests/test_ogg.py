"""Tests for OGG Vorbis and OGG Opus files."""

import io
from datetime import timedelta
from unittest.mock import patch

import pytest
from mutagen.oggopus import OggOpus
from mutagen.oggvorbis import OggVorbis

from builders import SERIAL, build_opus, build_vorbis

from audiotag import FileType, ItemKey, Picture, Tag, TagItem, TagType, read_from_path
from audiotag.containers import ogg
from audiotag.containers.ogg_page import CONTINUED_PACKET, Page, lacing, ogg_crc, paginate
from audiotag.errors import MalformedHeaderError

PNG = b"\x89PNG\r\n\x1a\n" + b"\x04" * 64


def read_pages(data: bytes):
    stream = io.BytesIO(data)
    pages = []
    while stream.tell() < len(data):
        pages.append(Page.read(stream))
    return pages


class TestPages:
    """Test page framing."""

    def test_crc_matches_stored_value(self):
        """Test that every page of a built file carries a valid checksum."""
        data = build_vorbis(["TITLE=Song"])
        for page in read_pages(data):
            raw = data[page.start:page.end]
            zeroed = raw[:22] + b"\x00" * 4 + raw[26:]
            assert ogg_crc(zeroed) == page.crc

    def test_lacing(self):
        assert lacing(0) == [0]
        assert lacing(254) == [254]
        assert lacing(255) == [255, 0]
        assert lacing(600) == [255, 255, 90]

    def test_paginate_splits_large_packets(self):
        """Test that a packet longer than one page continues on the next."""
        pages = paginate([b"x" * 70000], SERIAL, 5)

        assert len(pages) == 2
        assert [p.sequence for p in pages] == [5, 6]
        assert pages[0].granule == -1
        assert pages[1].is_continued
        assert pages[1].header_type & CONTINUED_PACKET
        assert b"".join(p.content for p in pages) == b"x" * 70000

    def test_bad_capture_pattern(self):
        with pytest.raises(MalformedHeaderError):
            Page.read(io.BytesIO(b"OggX" + b"\x00" * 40))


class TestVorbis:
    """Test OGG Vorbis files."""

    def test_properties(self, make_file, vorbis_bytes):
        tagged = read_from_path(make_file("song.ogg", vorbis_bytes))

        assert tagged.file_type == FileType.VORBIS
        props = tagged.properties
        assert props.duration == timedelta(seconds=10)
        assert props.sample_rate == 44100
        assert props.channels == 2
        assert props.audio_bitrate == 128

    def test_tags(self, make_file, vorbis_bytes):
        tag = read_from_path(make_file("song.ogg", vorbis_bytes)).primary_tag()

        assert tag.title == "Song"
        assert tag.artist == "Someone"

    def test_write_keeps_pages_valid(self, make_file, vorbis_bytes):
        """Test that the rewritten file has consecutive sequence numbers and valid CRCs."""
        path = make_file("song.ogg", vorbis_bytes)
        tag = Tag(TagType.VORBIS_COMMENTS)
        tag.title = "New"
        tag.lyrics = "la " * 30000
        tag.save_to_path(path)

        data = path.read_bytes()
        pages = read_pages(data)
        assert [p.sequence for p in pages] == list(range(len(pages)))
        assert len(pages) > len(read_pages(vorbis_bytes))
        for page in pages:
            assert page.as_bytes() == data[page.start:page.end]
        # audio pages are untouched apart from their sequence number
        assert pages[-1].content == read_pages(vorbis_bytes)[-1].content

        reread = read_from_path(path)
        assert reread.primary_tag().title == "New"
        assert reread.properties.duration == timedelta(seconds=10)

    def test_vendor_is_kept(self, make_file, vorbis_bytes):
        path = make_file("song.ogg", vorbis_bytes)
        tag = Tag(TagType.VORBIS_COMMENTS)
        tag.title = "New"
        tag.save_to_path(path)

        audio = OggVorbis(path)
        assert audio.tags.vendor == "test vendor"
        assert audio["title"] == ["New"]

    def test_pictures_become_comments(self, make_file, vorbis_bytes):
        path = make_file("song.ogg", vorbis_bytes)
        tag = Tag(TagType.VORBIS_COMMENTS)
        tag.push_picture(Picture(PNG))
        tag.save_to_path(path)

        assert "metadata_block_picture" in OggVorbis(path)
        assert read_from_path(path).primary_tag().pictures()[0].data == PNG

    def test_remove(self, make_file, vorbis_bytes):
        """Test that removal leaves an empty comment header in place."""
        path = make_file("song.ogg", vorbis_bytes)
        Tag(TagType.VORBIS_COMMENTS).remove_from_path(path)

        tag = read_from_path(path).primary_tag()
        assert tag is not None
        assert tag.is_empty()

    def test_not_vorbis(self, make_file, opus_bytes):
        """Test that a Vorbis reader rejects an Opus stream."""
        with open(make_file("song.opus", opus_bytes), "rb") as f:
            with pytest.raises(MalformedHeaderError):
                ogg.read_vorbis(f)


class TestOpus:
    """Test OGG Opus files."""

    def test_properties(self, make_file, opus_bytes):
        tagged = read_from_path(make_file("song.opus", opus_bytes))

        assert tagged.file_type == FileType.OPUS
        props = tagged.properties
        assert props.duration == timedelta(seconds=10)
        assert props.sample_rate == 48000
        assert props.channels == 2

    def test_round_trip(self, make_file, opus_bytes):
        path = make_file("song.opus", opus_bytes)
        tag = Tag(TagType.VORBIS_COMMENTS)
        tag.title = "New"
        tag.push_item(TagItem(ItemKey.TRACK_ARTIST, "A"))
        tag.push_item(TagItem(ItemKey.TRACK_ARTIST, "B"))
        tag.save_to_path(path)

        reread = read_from_path(path).primary_tag()
        assert reread.title == "New"
        assert [i.value for i in reread.get_items(ItemKey.TRACK_ARTIST)] == ["A", "B"]
        assert OggOpus(path)["artist"] == ["A", "B"]

    def test_opus_in_ogg_extension(self, make_file):
        """Test that the signature wins over a .ogg extension."""
        tagged = read_from_path(make_file("song.ogg", build_opus(["TITLE=Song"])))

        assert tagged.file_type == FileType.OPUS
        assert tagged.primary_tag().title == "Song"

    def test_skipping_tags_does_not_buffer_comments(self, make_file):
        """Test that read_tags=False walks over the comment pages without loading them."""
        path = make_file("song.opus", build_opus(["COMMENT=" + "x" * 20000]))
        full = read_from_path(path)

        with patch.object(Page, "read", wraps=Page.read) as page_read, path.open("rb") as f:
            tagged = ogg.read_opus(f, read_tags=False)

        assert tagged.tags == []
        assert tagged.properties == full.properties
        skipped = [c for c in page_read.call_args_list if len(c.args) > 1 and c.args[1]]
        assert skipped
