"""Configuration management for audiotag.

Holds the defaults of the command line tool: how files are probed, how much
padding new ID3v2 tags get and how results are printed. The tagging engine
never reads this file, every setting reaches it as an explicit argument.
"""

import copy
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import tomli_w

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """Get the configuration directory.

    Returns:
        Path to config directory (~/.audiotag on all platforms)
    """
    config_dir = Path.home() / ".audiotag"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Get the full path to the config file."""
    return get_config_dir() / "config.toml"


class Config:
    """Configuration manager for application settings."""

    DEFAULT_CONFIG: Dict[str, Any] = {
        "read": {
            # Confirm the extension against the file's first bytes
            "guess_by_signature": True,
            "read_tags": True,
        },
        "write": {
            # Bytes of padding reserved after a rewritten ID3v2 tag
            "id3v2_padding": 1024,
            # Keep APE items flagged read-only when setting values
            "preserve_read_only": True,
        },
        "cli": {
            "json_indent": 2,
            "show_pictures": True,
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Alternative file to use instead of ~/.audiotag/config.toml
        """
        self.config_path = Path(config_path) if config_path is not None else get_config_path()
        self.data: Dict[str, Any] = copy.deepcopy(self.DEFAULT_CONFIG)
        self._dirty = False
        self.load()

    def load(self) -> bool:
        """Load configuration from file.

        Returns:
            True if loaded successfully, False if file doesn't exist or is invalid
        """
        if not self.config_path.exists():
            return False

        try:
            with open(self.config_path, "rb") as f:
                loaded_data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Error loading config {self.config_path}: {e}")
            return False
        # Merge with defaults (in case new keys were added)
        self._merge_config(self.data, loaded_data)
        self._dirty = False
        return True

    def save(self, force: bool = False) -> bool:
        """Save configuration to file.

        Args:
            force: If True, save even if config hasn't been modified

        Returns:
            True if saved successfully, False otherwise
        """
        if not force and not self._dirty:
            return True

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "wb") as f:
                tomli_w.dump(self.data, f)
        except OSError as e:
            logger.error(f"Error saving config {self.config_path}: {e}")
            return False
        self._dirty = False
        return True

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge override dict into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def is_dirty(self) -> bool:
        """Check if configuration has been modified."""
        return self._dirty

    def _set(self, section: str, key: str, value: Any) -> None:
        self.data.setdefault(section, {})[key] = value
        self._dirty = True

    # Read settings
    def get_guess_by_signature(self) -> bool:
        return bool(self.data["read"]["guess_by_signature"])

    def set_guess_by_signature(self, enabled: bool) -> None:
        self._set("read", "guess_by_signature", enabled)

    def get_read_tags(self) -> bool:
        return bool(self.data["read"]["read_tags"])

    def set_read_tags(self, enabled: bool) -> None:
        self._set("read", "read_tags", enabled)

    # Write settings
    def get_id3v2_padding(self) -> int:
        """Get the padding written after an ID3v2 tag, in bytes."""
        return self.data.get("write", {}).get("id3v2_padding", 1024)

    def set_id3v2_padding(self, padding: int) -> None:
        """Set the ID3v2 padding.

        Args:
            padding: Bytes of padding, 0 for none

        Raises:
            ValueError: If padding is negative
        """
        if padding < 0:
            raise ValueError("Padding cannot be negative")
        self._set("write", "id3v2_padding", padding)

    def get_preserve_read_only(self) -> bool:
        return bool(self.data["write"]["preserve_read_only"])

    def set_preserve_read_only(self, enabled: bool) -> None:
        self._set("write", "preserve_read_only", enabled)

    # Output settings
    def get_json_indent(self) -> Optional[int]:
        """Get the JSON indentation (None or 0 prints compact JSON)."""
        return self.data.get("cli", {}).get("json_indent") or None

    def set_json_indent(self, indent: int) -> None:
        self._set("cli", "json_indent", indent)

    def get_show_pictures(self) -> bool:
        return bool(self.data["cli"]["show_pictures"])

    def set_show_pictures(self, enabled: bool) -> None:
        self._set("cli", "show_pictures", enabled)
