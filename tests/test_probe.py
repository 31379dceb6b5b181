"""Tests for file type detection."""

import io

import pytest

from builders import build_flac, build_vorbis, build_wav, id3v2_tag, text_frame

from audiotag import FileType, IoError, Probe, UnknownFormatError, guess_from_ext, read_from, read_from_path


class TestGuess:
    """Test extension and signature detection."""

    def test_extension(self):
        assert guess_from_ext("song.MP3") == FileType.MP3
        assert guess_from_ext("song.m4a") == FileType.MP4
        assert guess_from_ext("song.oga") == FileType.VORBIS
        assert guess_from_ext("song.txt") is None

    def test_signature_overrides_extension(self, make_file):
        """Test that an OGG Vorbis stream named .mp3 is read as Vorbis."""
        path = make_file("song.mp3", build_vorbis(["TITLE=Song"]))

        assert guess_from_ext(path) == FileType.MP3
        tagged = read_from_path(path)
        assert tagged.file_type == FileType.VORBIS
        assert tagged.primary_tag().title == "Song"

    def test_from_buffer(self):
        assert FileType.from_buffer(b"fLaC\x00\x00\x00\x22") == FileType.FLAC
        assert FileType.from_buffer(build_wav()[:36]) == FileType.WAV
        assert FileType.from_buffer(b"\xff\xfb\x90\x00") == FileType.MP3
        assert FileType.from_buffer(b"MAC \x96\x0f") == FileType.APE
        assert FileType.from_buffer(b"\x00\x00\x00\x20ftypM4A ") == FileType.MP4
        assert FileType.from_buffer(b"OggS" + b"\x00" * 40) is None
        assert FileType.from_buffer(b"") is None

    def test_signature_behind_large_id3v2(self, make_file):
        """Test that a FLAC stream is found behind an ID3v2 tag longer than the probe window."""
        data = id3v2_tag(text_frame(b"TIT2", "Song"), padding=4000) + build_flac(["TITLE=Flac"])
        path = make_file("song", data)

        with Probe.open(path) as probe:
            assert probe.file_type is None
            assert probe.guess_file_type().file_type == FileType.FLAC

    def test_position_is_restored(self):
        stream = io.BytesIO(build_wav())
        stream.seek(20)

        assert Probe(stream).guess_file_type().file_type == FileType.WAV
        assert stream.tell() == 20


class TestRead:
    """Test the read entry points."""

    def test_read_from_stream(self):
        tagged = read_from(io.BytesIO(build_flac(["TITLE=Song"])))

        assert tagged.file_type == FileType.FLAC
        assert tagged.primary_tag().title == "Song"

    def test_empty_file(self, make_file):
        with pytest.raises(UnknownFormatError):
            read_from_path(make_file("song.mp3", b""))

    def test_unknown_format(self, make_file):
        with pytest.raises(UnknownFormatError):
            read_from_path(make_file("notes.txt", b"just some text"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(IoError):
            read_from_path(tmp_path / "missing.mp3")

    def test_probe_without_signature_check(self, make_file):
        """Test that Probe.read trusts the extension when not asked to guess."""
        path = make_file("song.flac", build_flac(["TITLE=Song"]))

        with Probe.open(path) as probe:
            tagged = probe.read(read_tags=False)
        assert tagged.file_type == FileType.FLAC
        assert tagged.tags == []
