"""Tests for MPEG audio files and their edge tags."""

import struct
from datetime import timedelta

import pytest

from builders import MPEG_FRAME_SIZE, MPEG_HEADER, build_mp3, id3v1_block, id3v2_tag, mpeg_frames, text_frame

from audiotag import FileType, ItemKey, Probe, Tag, TagItem, TagType, read_from_path
from audiotag.containers.mpeg import FrameHeader
from audiotag.errors import MalformedHeaderError


class TestFrameHeader:
    """Test decoding frame headers."""

    def test_mpeg1_layer3(self):
        header = FrameHeader.parse(MPEG_HEADER)

        assert header.version == 1
        assert header.layer == 3
        assert header.bitrate == 128
        assert header.sample_rate == 44100
        assert header.channels == 2
        assert header.samples_per_frame == 1152
        assert header.frame_length == MPEG_FRAME_SIZE

    def test_mono_mpeg2(self):
        # MPEG-2 Layer III, 64 kbps, 22050 Hz, mono
        header = FrameHeader.parse(b"\xff\xf3\x80\xc0")

        assert header.version == 2
        assert header.sample_rate == 22050
        assert header.channels == 1
        assert header.samples_per_frame == 576

    def test_invalid_headers(self):
        """Test reserved bitrate and sample rate indexes."""
        assert FrameHeader.parse(b"\xff\xfb\xf0\x00") is None
        assert FrameHeader.parse(b"\xff\xfb\x9c\x00") is None
        assert FrameHeader.parse(b"\x00\x00\x00\x00") is None


class TestRead:
    """Test reading MP3 files."""

    def test_cbr_properties(self, make_file, mp3_bytes):
        tagged = read_from_path(make_file("song.mp3", mp3_bytes))

        assert tagged.file_type == FileType.MP3
        props = tagged.properties
        assert props.duration == timedelta(milliseconds=len(mp3_bytes) * 8 // 128)
        assert props.audio_bitrate == 128
        assert props.sample_rate == 44100
        assert props.channels == 2
        assert tagged.tags == []

    def test_xing_header(self, make_file):
        """Test that the frame count of a Xing header gives the duration."""
        first = bytearray(mpeg_frames(1))
        first[36:52] = b"Xing" + struct.pack(">III", 0x3, 1000, 417000)
        data = bytes(first) + mpeg_frames(9)
        tagged = read_from_path(make_file("vbr.mp3", data))

        assert tagged.properties.duration == timedelta(milliseconds=1000 * 1152 * 1000 // 44100)
        assert tagged.properties.audio_bitrate == 417000 * 8 // (1000 * 1152 * 1000 // 44100)

    def test_all_tags(self, make_file):
        data = build_mp3(
            id3v2=id3v2_tag(text_frame(b"TIT2", "V2"), padding=16),
            id3v1=id3v1_block(title=b"V1"),
        )
        tagged = read_from_path(make_file("song.mp3", data))

        assert tagged.primary_tag().title == "V2"
        assert tagged.tag(TagType.ID3V1).title == "V1"
        assert tagged.first_tag().tag_type == TagType.ID3V2
        assert tagged.properties.sample_rate == 44100

    def test_junk_before_first_frame(self, make_file):
        """Test that zero padding after the ID3v2 tag is skipped."""
        data = id3v2_tag(text_frame(b"TIT2", "Song")) + b"\x00" * 100 + mpeg_frames()
        tagged = read_from_path(make_file("song.mp3", data))

        assert tagged.properties.sample_rate == 44100

    def test_read_without_tags(self, make_file):
        data = build_mp3(id3v2=id3v2_tag(text_frame(b"TIT2", "Song")))
        with Probe.open(make_file("song.mp3", data)) as probe:
            tagged = probe.read(read_tags=False)

        assert tagged.tags == []
        assert tagged.properties.channels == 2

    def test_no_frames_and_no_tags(self, make_file):
        with pytest.raises(MalformedHeaderError):
            read_from_path(make_file("song.mp3", b"\xff\xfb" + b"\x01" * 50))

    def test_tag_only_file(self, make_file):
        """Test that a file holding just a tag still reads."""
        tagged = read_from_path(make_file("song.mp3", id3v2_tag(text_frame(b"TIT2", "Song"))))

        assert tagged.primary_tag().title == "Song"
        assert tagged.properties.is_unknown


class TestWrite:
    """Test writing tags to MP3 files."""

    def test_add_id3v2(self, make_file, mp3_bytes):
        path = make_file("song.mp3", mp3_bytes)
        tag = Tag(TagType.ID3V2)
        tag.title = "Song"
        tag.save_to_path(path, padding=64)

        data = path.read_bytes()
        assert data.endswith(mp3_bytes)
        assert read_from_path(path).primary_tag().title == "Song"

    def test_replace_id3v2(self, make_file):
        path = make_file("song.mp3", build_mp3(id3v2=id3v2_tag(text_frame(b"TIT2", "Old"), padding=500)))
        tag = Tag(TagType.ID3V2)
        tag.title = "New"
        tag.artist = "Someone"
        tag.save_to_path(path)

        tagged = read_from_path(path)
        assert tagged.primary_tag().title == "New"
        assert tagged.primary_tag().artist == "Someone"
        assert path.read_bytes().endswith(mpeg_frames())

    def test_remove_id3v2(self, make_file, mp3_bytes):
        path = make_file("song.mp3", build_mp3(id3v2=id3v2_tag(text_frame(b"TIT2", "Old"))))
        Tag(TagType.ID3V2).remove_from_path(path)

        assert path.read_bytes() == mp3_bytes

    def test_add_and_remove_id3v1(self, make_file, mp3_bytes):
        path = make_file("song.mp3", mp3_bytes)
        tag = Tag(TagType.ID3V1)
        tag.title = "Song"
        tag.save_to_path(path)

        data = path.read_bytes()
        assert len(data) == len(mp3_bytes) + 128
        assert read_from_path(path).tag(TagType.ID3V1).title == "Song"

        tag.remove_from_path(path)
        assert path.read_bytes() == mp3_bytes

    def test_other_tags_survive(self, make_file):
        """Test that rewriting ID3v2 keeps the ID3v1 trailer."""
        path = make_file("song.mp3", build_mp3(id3v1=id3v1_block()))
        tag = Tag(TagType.ID3V2)
        tag.title = "Song"
        tag.save_to_path(path)

        tagged = read_from_path(path)
        assert tagged.tag(TagType.ID3V1).title == "Title"
        assert tagged.tag(TagType.ID3V2).title == "Song"

    def test_tagged_file_save(self, make_file, mp3_bytes):
        """Test saving every tag of a TaggedFile."""
        path = make_file("song.mp3", mp3_bytes)
        tagged = read_from_path(path)
        v2 = Tag(TagType.ID3V2)
        v2.title = "Two"
        v1 = Tag(TagType.ID3V1)
        v1.title = "One"
        tagged.insert_tag(v2)
        tagged.insert_tag(v1)
        tagged.save_to_path(path)

        reread = read_from_path(path)
        assert reread.tag(TagType.ID3V2).title == "Two"
        assert reread.tag(TagType.ID3V1).title == "One"

    def test_save_file_known_by_extension_only(self, make_file):
        """Test saving an MP3 whose leading zeros hide the frame sync from the signature check."""
        path = make_file("pad.mp3", b"\x00" * 64 + build_mp3())
        tagged = read_from_path(path)
        assert tagged.file_type == FileType.MP3

        tag = Tag(TagType.ID3V2)
        tag.insert_item(TagItem(ItemKey.TRACK_TITLE, "Song"))
        tagged.insert_tag(tag)
        tagged.save_to_path(path)

        assert read_from_path(path).primary_tag().title == "Song"
        assert path.read_bytes().endswith(b"\x00" * 64 + build_mp3())

    def test_tag_save_falls_back_to_extension(self, make_file):
        path = make_file("pad.mp3", b"\x00" * 64 + build_mp3())
        tag = Tag(TagType.ID3V1)
        tag.title = "Song"
        tag.save_to_path(path)

        assert read_from_path(path).tag(TagType.ID3V1).title == "Song"
        tag.remove_from_path(path)
        assert path.read_bytes() == b"\x00" * 64 + build_mp3()
