"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import builders  # noqa: E402


@pytest.fixture
def make_file(tmp_path):
    """Write bytes to a file under tmp_path and return its path."""

    def _make(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _make


@pytest.fixture
def mp3_bytes():
    """An untagged MP3: ten 128 kbps frames."""
    return builders.build_mp3()


@pytest.fixture
def flac_bytes():
    """A FLAC file of 100 s at 44100 Hz with a small comment block."""
    return builders.build_flac(["TITLE=Song", "ARTIST=Someone", "TRACKNUMBER=3/12"], padding=64)


@pytest.fixture
def vorbis_bytes():
    return builders.build_vorbis(["TITLE=Song", "ARTIST=Someone"])


@pytest.fixture
def opus_bytes():
    return builders.build_opus(["TITLE=Song"])


@pytest.fixture
def wav_bytes():
    return builders.build_wav(builders.info_list([(b"INAM", "Song"), (b"IART", "Someone")]))


@pytest.fixture
def aiff_bytes():
    return builders.build_aiff(builders.aiff_text(b"NAME", "Song"))


@pytest.fixture
def mp4_bytes():
    return builders.build_mp4(builders.ilst_data("\xa9nam", 1, b"Song"))
