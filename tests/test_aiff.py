"""Tests for AIFF files."""

from datetime import timedelta

from builders import aiff_text, audio_pattern, build_aiff

from audiotag import FileType, Tag, TagType, read_from_path


class TestRead:
    """Test reading AIFF files."""

    def test_properties(self, make_file, aiff_bytes):
        tagged = read_from_path(make_file("song.aiff", aiff_bytes))

        assert tagged.file_type == FileType.AIFF
        props = tagged.properties
        assert props.duration == timedelta(seconds=1)
        assert props.sample_rate == 44100
        assert props.channels == 2

    def test_text_chunks(self, make_file):
        data = build_aiff(aiff_text(b"NAME", "Song") + aiff_text(b"AUTH", "Someone"))
        tagged = read_from_path(make_file("song.aiff", data))

        tag = tagged.tag(TagType.AIFF_TEXT)
        assert tag.title == "Song"
        assert tag.artist == "Someone"
        assert tagged.primary_tag() is None
        assert tagged.first_tag() is tag


class TestWrite:
    """Test writing AIFF tags."""

    def test_text_chunks_follow_comm(self, make_file):
        """Test that new text chunks are placed right after COMM."""
        path = make_file("song.aiff", build_aiff())
        tag = Tag(TagType.AIFF_TEXT)
        tag.title = "Song"
        tag.save_to_path(path)

        data = path.read_bytes()
        assert data.index(b"COMM") < data.index(b"NAME") < data.index(b"SSND")
        assert data.endswith(audio_pattern(4000))
        assert read_from_path(path).tag(TagType.AIFF_TEXT).title == "Song"

    def test_id3_chunk(self, make_file, aiff_bytes):
        path = make_file("song.aiff", aiff_bytes)
        tag = Tag(TagType.ID3V2)
        tag.title = "Id3 title"
        tag.save_to_path(path)

        tagged = read_from_path(path)
        assert tagged.primary_tag().title == "Id3 title"
        assert tagged.tag(TagType.AIFF_TEXT).title == "Song"

    def test_remove_text_chunks(self, make_file, aiff_bytes):
        path = make_file("song.aiff", aiff_bytes)
        Tag(TagType.AIFF_TEXT).remove_from_path(path)

        assert path.read_bytes() == build_aiff()
