"""Tests for FLAC files and the Vorbis comment codec."""

from datetime import timedelta

import pytest
from mutagen.flac import FLAC

from builders import audio_pattern, build_flac, id3v2_tag, text_frame, vorbis_comment_block

from audiotag import FileType, ItemKey, Picture, PictureType, Tag, TagItem, TagType, read_from_path
from audiotag.codecs import vorbis_comments
from audiotag.containers import flac
from audiotag.errors import EncodingError, MalformedHeaderError

PNG = b"\x89PNG\r\n\x1a\n" + b"\x03" * 40


class TestVorbisComments:
    """Test the comment block codec."""

    def test_parse(self):
        vendor, tag = vorbis_comments.parse_with_vendor(
            vorbis_comment_block(["TITLE=Song", "artist=A", "ARTIST=B", "TRACKNUMBER=3/12"])
        )

        assert vendor == "test vendor"
        assert tag.title == "Song"
        assert [i.value for i in tag.get_items(ItemKey.TRACK_ARTIST)] == ["A", "B"]
        assert (tag.track_number, tag.track_total) == (3, 12)

    def test_malformed_comments_are_skipped(self):
        """Test that comments without '=' or with a bad key are dropped."""
        tag = vorbis_comments.parse(vorbis_comment_block(["no separator", "TITLE=Song", "=empty key"]))

        assert tag.items == [TagItem(ItemKey.TRACK_TITLE, "Song")]

    def test_value_may_contain_equals(self):
        tag = vorbis_comments.parse(vorbis_comment_block(["COMMENT=a=b"]))

        assert tag.comment == "a=b"

    def test_count_past_end(self):
        """Test that a count larger than the block is malformed."""
        data = vorbis_comment_block(["TITLE=Song"])
        data = data[:15] + b"\x05" + data[16:]

        with pytest.raises(MalformedHeaderError):
            vorbis_comments.parse(data)

    def test_invalid_utf8(self):
        data = vorbis_comment_block([])[:-4] + b"\x01\x00\x00\x00" + b"\x07\x00\x00\x00TITLE=\xff"

        with pytest.raises(EncodingError):
            vorbis_comments.parse(data)

    def test_render_round_trip(self):
        tag = Tag(TagType.VORBIS_COMMENTS)
        tag.title = "Sông"
        tag.push_item(TagItem(ItemKey.GENRE, "Rock"))
        tag.push_item(TagItem(ItemKey.GENRE, "Pop"))
        tag.push_item(TagItem("CUSTOM", "value"))
        tag.push_picture(Picture(PNG, pic_type=PictureType.COVER_BACK))

        vendor, parsed = vorbis_comments.parse_with_vendor(vorbis_comments.render(tag, "me"))
        assert vendor == "me"
        assert parsed == tag

    def test_framing_bit(self):
        data = vorbis_comments.render(Tag(TagType.VORBIS_COMMENTS), framing=True)

        assert data.endswith(b"\x01")


class TestRead:
    """Test reading FLAC files."""

    def test_properties(self, make_file, flac_bytes):
        tagged = read_from_path(make_file("song.flac", flac_bytes))

        assert tagged.file_type == FileType.FLAC
        props = tagged.properties
        assert props.duration == timedelta(seconds=100)
        assert props.sample_rate == 44100
        assert props.channels == 2
        assert props.overall_bitrate == len(flac_bytes) * 8 // 100000

    def test_tags(self, make_file, flac_bytes):
        tag = read_from_path(make_file("song.flac", flac_bytes)).primary_tag()

        assert tag.tag_type == TagType.VORBIS_COMMENTS
        assert tag.title == "Song"
        assert tag.artist == "Someone"
        assert tag.track_total == 12

    def test_no_comment_block(self, make_file):
        tagged = read_from_path(make_file("song.flac", build_flac()))

        assert tagged.tags == []
        assert tagged.properties.sample_rate == 44100

    def test_leading_id3v2_is_skipped(self, make_file, flac_bytes):
        data = id3v2_tag(text_frame(b"TIT2", "Ignored")) + flac_bytes
        tagged = read_from_path(make_file("song.flac", data))

        assert tagged.file_type == FileType.FLAC
        assert tagged.primary_tag().title == "Song"

    def test_first_block_must_be_streaminfo(self, make_file):
        data = b"fLaC" + bytes([0x84]) + (8).to_bytes(3, "big") + b"\x00" * 8

        with pytest.raises(MalformedHeaderError):
            read_from_path(make_file("song.flac", data))

    def test_read_mutagen_output(self, make_file, flac_bytes):
        """Test reading tags written by mutagen."""
        path = make_file("song.flac", flac_bytes)
        audio = FLAC(path)
        audio["title"] = "Changed"
        audio["album"] = "Album"
        audio.save()

        tag = read_from_path(path).primary_tag()
        assert tag.title == "Changed"
        assert tag.album == "Album"


class TestWrite:
    """Test writing FLAC metadata."""

    def test_small_change_uses_padding(self, make_file, flac_bytes):
        """Test that the audio does not move when the padding absorbs the change."""
        path = make_file("song.flac", flac_bytes)
        tag = Tag(TagType.VORBIS_COMMENTS)
        tag.title = "Another song"
        tag.save_to_path(path)

        data = path.read_bytes()
        assert len(data) == len(flac_bytes)
        assert data.endswith(audio_pattern(2000))
        assert read_from_path(path).primary_tag().title == "Another song"

    def test_growth_adds_padding(self, make_file, flac_bytes):
        path = make_file("song.flac", flac_bytes)
        tag = Tag(TagType.VORBIS_COMMENTS)
        tag.lyrics = "la " * 1000
        tag.save_to_path(path)

        data = path.read_bytes()
        assert data.endswith(audio_pattern(2000))
        with path.open("rb") as f:
            blocks = flac.read_blocks(f)
        assert blocks[-1].block_type == flac.FLAC_PADDING
        assert blocks[-1].size == flac.DEFAULT_PADDING

    def test_vendor_is_kept(self, make_file, flac_bytes):
        path = make_file("song.flac", flac_bytes)
        tag = Tag(TagType.VORBIS_COMMENTS)
        tag.title = "Song"
        tag.save_to_path(path)

        assert FLAC(path).tags.vendor == "test vendor"

    def test_pictures_get_their_own_blocks(self, make_file, flac_bytes):
        path = make_file("song.flac", flac_bytes)
        tag = Tag(TagType.VORBIS_COMMENTS)
        tag.title = "Song"
        tag.push_picture(Picture(PNG, pic_type=PictureType.COVER_FRONT, description="front"))
        tag.save_to_path(path)

        audio = FLAC(path)
        assert audio["title"] == ["Song"]
        assert "metadata_block_picture" not in audio
        (picture,) = audio.pictures
        assert picture.type == 3
        assert picture.data == PNG

        reread = read_from_path(path).primary_tag()
        assert reread.pictures()[0].description == "front"

    def test_remove(self, make_file, flac_bytes):
        path = make_file("song.flac", flac_bytes)
        Tag(TagType.VORBIS_COMMENTS).remove_from_path(path)

        tagged = read_from_path(path)
        assert tagged.tags == []
        assert path.read_bytes().endswith(audio_pattern(2000))
        assert tagged.properties.duration == timedelta(seconds=100)
