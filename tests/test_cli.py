"""Tests for the CLI module."""

import json
from unittest.mock import patch

import pytest

from builders import build_mp3, id3v1_block, id3v2_tag, text_frame

from audiotag import ItemKey, TagType, __version__, read_from_path
from audiotag.cli import main
from audiotag.cli.utils import parse_assignments


@pytest.fixture
def config_file(tmp_path):
    """A config path that does not exist yet, keeping tests away from ~/.audiotag."""
    return str(tmp_path / "config.toml")


@pytest.fixture
def tagged_mp3(make_file):
    return make_file("song.mp3", build_mp3(id3v2=id3v2_tag(text_frame(b"TIT2", "Song"))))


def run_json(capsys, argv):
    """Run main() with --json and return (exit code, parsed document)."""
    with pytest.raises(SystemExit) as exc_info:
        with patch("sys.argv", ["audiotag"] + argv + ["--json"]):
            main()
    return exc_info.value.code, json.loads(capsys.readouterr().out)


def test_version_output(capsys):
    """Test that --version flag displays version correctly."""
    with pytest.raises(SystemExit) as exc_info:
        with patch("sys.argv", ["audiotag", "--version"]):
            main()

    # argparse exits with 0 for --version
    assert exc_info.value.code == 0
    captured = capsys.readouterr()
    assert __version__ in captured.out


def test_help_output(capsys):
    with pytest.raises(SystemExit) as exc_info:
        with patch("sys.argv", ["audiotag", "--help"]):
            main()

    assert exc_info.value.code == 0
    captured = capsys.readouterr()
    assert "inspect" in captured.out
    assert "convert" in captured.out


def test_no_command_shows_help(capsys):
    """Test that running without a command shows help."""
    with pytest.raises(SystemExit) as exc_info:
        with patch("sys.argv", ["audiotag"]):
            main()

    assert exc_info.value.code == 1
    assert "audiotag" in capsys.readouterr().out


def test_parse_assignments():
    assert parse_assignments(["title=Song", "TXXX:Mood=a=b", "artist="]) == [
        (ItemKey.TRACK_TITLE, "Song"),
        ("TXXX:Mood", "a=b"),
        (ItemKey.TRACK_ARTIST, ""),
    ]
    with pytest.raises(ValueError):
        parse_assignments(["=value"])


def test_inspect_json(capsys, tagged_mp3, config_file):
    code, data = run_json(capsys, ["inspect", str(tagged_mp3), "-c", config_file])

    assert code == 0
    assert data["status"] == "success"
    assert data["file_type"] == "MP3"
    assert data["properties"]["sample_rate"] == 44100
    assert data["properties"]["channels"] == 2
    (tag,) = data["tags"]
    assert tag["tag_type"] == "Id3v2"
    assert tag["items"] == [{"key": "TrackTitle", "kind": "text", "value": "Song"}]
    assert "read_errors" not in data


def test_inspect_all(capsys, make_file, config_file):
    """Test that --all lists every tag, not only the first one."""
    data = build_mp3(id3v2=id3v2_tag(text_frame(b"TIT2", "Song")), id3v1=id3v1_block())
    path = make_file("song.mp3", data)

    code, document = run_json(capsys, ["inspect", str(path), "--all", "-c", config_file])

    assert code == 0
    assert [t["tag_type"] for t in document["tags"]] == ["Id3v2", "Id3v1"]


def test_inspect_table(capsys, tagged_mp3, config_file):
    with patch("sys.argv", ["audiotag", "inspect", str(tagged_mp3), "-c", config_file]):
        main()

    out = capsys.readouterr().out
    assert "MP3 Properties" in out
    assert "TrackTitle" in out
    assert "Song" in out


def test_inspect_unknown_format(capsys, make_file, config_file):
    path = make_file("notes.txt", b"just some text")

    code, data = run_json(capsys, ["inspect", str(path), "-c", config_file])

    assert code == 1
    assert data["status"] == "error"
    assert data["error"] == "unknown_format"


def test_set(capsys, tagged_mp3, config_file):
    code, data = run_json(capsys, ["set", str(tagged_mp3), "title=New", "artist=Someone", "-c", config_file])

    assert code == 0
    assert data == {"status": "success", "path": str(tagged_mp3), "tag_type": "Id3v2", "items": 2}
    tag = read_from_path(tagged_mp3).primary_tag()
    assert tag.title == "New"
    assert tag.artist == "Someone"


def test_set_empty_value_removes_key(capsys, tagged_mp3, config_file):
    """Test that removing the last item removes the whole tag block."""
    code, data = run_json(capsys, ["set", str(tagged_mp3), "title=", "-c", config_file])

    assert code == 0
    assert data["items"] == 0
    assert tagged_mp3.read_bytes() == build_mp3()


def test_set_invalid_assignment(capsys, tagged_mp3, config_file):
    code, data = run_json(capsys, ["set", str(tagged_mp3), "no-separator", "-c", config_file])

    assert code == 1
    assert data["error"] == "invalid_input"


def test_set_on_file_known_by_extension(capsys, make_file, config_file):
    path = make_file("pad.mp3", b"\x00" * 64 + build_mp3())

    code, data = run_json(capsys, ["set", str(path), "title=Song", "-c", config_file])

    assert code == 0
    assert read_from_path(path).primary_tag().title == "Song"


def test_remove(capsys, make_file, config_file):
    path = make_file("song.mp3", build_mp3(id3v1=id3v1_block()))

    code, data = run_json(capsys, ["remove", str(path), "-t", "id3v1", "-c", config_file])

    assert code == 0
    assert data["items"] == 0
    assert path.read_bytes() == build_mp3()


def test_remove_unsupported_tag_type(capsys, tagged_mp3, config_file):
    code, data = run_json(capsys, ["remove", str(tagged_mp3), "-t", "vorbis-comments", "-c", config_file])

    assert code == 1
    assert data["error"] == "unsupported_tag"


def test_convert(capsys, tagged_mp3, config_file):
    code, data = run_json(capsys, ["convert", str(tagged_mp3), "--from", "id3v2", "--to", "ape", "-c", config_file])

    assert code == 0
    assert data["tag_type"] == "Ape"
    tagged = read_from_path(tagged_mp3)
    assert tagged.tag(TagType.APE).title == "Song"
    assert tagged.tag(TagType.ID3V2).title == "Song"


def test_convert_missing_source(capsys, make_file, config_file):
    path = make_file("song.mp3", build_mp3())

    code, data = run_json(capsys, ["convert", str(path), "--from", "ape", "--to", "id3v2", "-c", config_file])

    assert code == 1
    assert data["error"] == "unsupported_tag"
