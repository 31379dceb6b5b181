"""Tests for the Config class."""

import logging

import pytest

from audiotag.config import Config


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.toml"


class TestConfig:
    """Test loading, changing and saving settings."""

    def test_defaults(self, config_path):
        config = Config(config_path)

        assert config.get_guess_by_signature() is True
        assert config.get_read_tags() is True
        assert config.get_id3v2_padding() == 1024
        assert config.get_preserve_read_only() is True
        assert config.get_json_indent() == 2
        assert not config.is_dirty()
        assert not config_path.exists()

    def test_save_and_load(self, config_path):
        """Test that saved settings come back in a new instance."""
        config = Config(config_path)
        config.set_id3v2_padding(0)
        config.set_read_tags(False)
        assert config.is_dirty()
        assert config.save()
        assert not config.is_dirty()

        reloaded = Config(config_path)
        assert reloaded.get_id3v2_padding() == 0
        assert reloaded.get_read_tags() is False
        assert reloaded.get_guess_by_signature() is True

    def test_save_skips_clean_config(self, config_path):
        config = Config(config_path)

        assert config.save()
        assert not config_path.exists()
        assert config.save(force=True)
        assert config_path.exists()

    def test_partial_file_is_merged(self, config_path):
        """Test that keys missing from the file keep their defaults."""
        config_path.write_text("[write]\nid3v2_padding = 64\n")
        config = Config(config_path)

        assert config.get_id3v2_padding() == 64
        assert config.get_preserve_read_only() is True
        assert config.get_show_pictures() is True

    def test_negative_padding(self, config_path):
        config = Config(config_path)

        with pytest.raises(ValueError, match="negative"):
            config.set_id3v2_padding(-1)
        assert config.get_id3v2_padding() == 1024

    def test_invalid_toml(self, config_path, caplog):
        config_path.write_text("this is [not toml")
        with caplog.at_level(logging.WARNING, logger="audiotag.config"):
            config = Config(config_path)

        assert config.get_id3v2_padding() == 1024
        assert "Error loading config" in caplog.text

    def test_compact_json(self, config_path):
        config = Config(config_path)
        config.set_json_indent(0)

        assert config.get_json_indent() is None
