# ABOUTME: Configuration defaults for md2epub, merged from JSON config files.
# ABOUTME: Later files override earlier ones; unreadable files are logged and skipped.

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SYSTEM_CONFIG_PATH = Path("/etc/md2epub.json")

DEFAULT_COVER = "cover.jpg"

# Config file key -> BuildConfig attribute
_CONFIG_KEYS: dict[str, str] = {
    "defaultAuthor": "author",
    "defaultCover": "cover",
    "defaultDescription": "description",
    "defaultLanguage": "language",
    "defaultTags": "tags",
    "defaultTitle": "title",
    "defaultVerbose": "verbose",
}


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


@dataclass
class BuildConfig:
    """Defaults for the `build` command, as read from configuration files."""

    author: str | None = None
    cover: str = DEFAULT_COVER
    description: str | None = None
    language: str | None = None
    tags: list[str] = field(default_factory=list)
    title: str | None = None
    verbose: bool = False

    def default_map(self) -> dict[str, Any]:
        """Click default_map for the build command. None values are left out."""
        values: dict[str, Any] = {
            "author": self.author,
            "cover": self.cover,
            "description": self.description,
            "language": self.language,
            "tags": list(self.tags) or None,
            "title": self.title,
            "verbose": self.verbose,
        }
        return {key: value for key, value in values.items() if value is not None}


def default_config_paths() -> list[Path]:
    """Candidate config files in ascending precedence."""
    home = Path.home()
    return [
        SYSTEM_CONFIG_PATH,
        home / ".md2epub.json",
        home / ".config" / "md2epub.json",
    ]


def _read_config_file(path: Path) -> dict[str, Any] | None:
    """Read one config file. Returns None if the file does not exist.

    Raises:
        ConfigError: If the file exists but is unreadable or not a JSON object.
    """
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Failed to read config file: {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file is not a JSON object: {path}")
    return data


def _valid_value(attr: str, value: Any) -> bool:
    if attr == "tags":
        return isinstance(value, list) and all(isinstance(tag, str) for tag in value)
    if attr == "verbose":
        return isinstance(value, bool)
    return value is None or isinstance(value, str)


def load_config(
    paths: list[Path] | None = None, extra: Path | None = None
) -> BuildConfig:
    """Merge configuration files into a BuildConfig.

    Files are read in order and each key of a later file replaces the same
    key of an earlier one. Missing files are skipped silently. Malformed
    files, and keys holding a value of the wrong type, are logged as warnings
    and skipped.

    Args:
        paths: Candidate files. Defaults to the system, home dotfile and
            user config-directory files.
        extra: An additional file read last, e.g. from `--config`.

    Returns:
        The merged BuildConfig.
    """
    candidates = list(paths if paths is not None else default_config_paths())
    if extra is not None:
        candidates.append(extra)

    merged: dict[str, Any] = {}
    for path in candidates:
        try:
            data = _read_config_file(path)
        except ConfigError as exc:
            logger.warning("%s", exc)
            continue
        if data is None:
            continue
        logger.debug("Loaded config file %s", path)
        for key, value in data.items():
            attr = _CONFIG_KEYS.get(key)
            if attr is None:
                continue
            if not _valid_value(attr, value):
                logger.warning("Ignoring %s in %s: unexpected value %r", key, path, value)
                continue
            merged[attr] = value

    if merged.get("cover") is None:
        merged.pop("cover", None)
    return BuildConfig(**merged)
