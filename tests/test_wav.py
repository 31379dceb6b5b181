"""Tests for WAV files and RIFF INFO lists."""

import struct
from datetime import timedelta

from builders import audio_pattern, build_wav, info_list

from audiotag import FileType, ItemKey, Tag, TagItem, TagType, read_from_path
from audiotag.codecs import riff_info


class TestRiffInfo:
    """Test the LIST INFO codec."""

    def test_parse(self):
        data = info_list([(b"INAM", "Song"), (b"IART", "Someone"), (b"ICMT", "")])
        tag = riff_info.parse(data[8:])

        assert tag.title == "Song"
        assert tag.artist == "Someone"
        assert len(tag) == 2

    def test_render_skips_binary_and_unmapped(self):
        tag = Tag(TagType.RIFF_INFO)
        tag.title = "Song"
        tag.insert_item_unchecked(TagItem("IBIN", b"\x00\x01"))

        parsed = riff_info.parse(riff_info.render(tag)[8:])
        assert parsed.items == [TagItem(ItemKey.TRACK_TITLE, "Song")]

    def test_empty_tag_renders_nothing(self):
        assert riff_info.render(Tag(TagType.RIFF_INFO)) == b""


class TestRead:
    """Test reading WAV files."""

    def test_properties(self, make_file, wav_bytes):
        tagged = read_from_path(make_file("song.wav", wav_bytes))

        assert tagged.file_type == FileType.WAV
        props = tagged.properties
        assert props.duration == timedelta(milliseconds=100)
        assert props.sample_rate == 44100
        assert props.channels == 2
        assert props.audio_bitrate == 1411

    def test_info_tag(self, make_file, wav_bytes):
        tagged = read_from_path(make_file("song.wav", wav_bytes))

        tag = tagged.tag(TagType.RIFF_INFO)
        assert tag.title == "Song"
        assert tag.artist == "Someone"
        assert tagged.first_tag() is tag

    def test_read_without_tags(self, make_file, wav_bytes):
        tagged = read_from_path(make_file("song.wav", wav_bytes), read_tags=False)

        assert tagged.tags == []
        assert tagged.properties.channels == 2


class TestWrite:
    """Test writing WAV tags."""

    def test_replace_info(self, make_file, wav_bytes):
        path = make_file("song.wav", wav_bytes)
        tag = Tag(TagType.RIFF_INFO)
        tag.title = "A longer title"
        tag.save_to_path(path)

        data = path.read_bytes()
        assert struct.unpack("<I", data[4:8])[0] == len(data) - 8
        assert audio_pattern(17640) in data
        tag = read_from_path(path).tag(TagType.RIFF_INFO)
        assert tag.title == "A longer title"
        assert tag.artist is None

    def test_id3_chunk(self, make_file, wav_bytes):
        """Test that an ID3v2 tag lives in its own chunk next to LIST INFO."""
        path = make_file("song.wav", wav_bytes)
        tag = Tag(TagType.ID3V2)
        tag.title = "Id3 title"
        tag.save_to_path(path)

        assert b"ID3 " in path.read_bytes()
        tagged = read_from_path(path)
        assert tagged.primary_tag().title == "Id3 title"
        assert tagged.tag(TagType.RIFF_INFO).title == "Song"

    def test_remove_info(self, make_file, wav_bytes):
        path = make_file("song.wav", wav_bytes)
        Tag(TagType.RIFF_INFO).remove_from_path(path)

        assert path.read_bytes() == build_wav()
        assert read_from_path(path).tags == []
