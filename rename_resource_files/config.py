"""Load and save rename settings.

Settings live in a Godot `ConfigFile`-style text file, so the same file can
be read and edited from the editor:

    [settings]

    dirs=PackedStringArray("res://assets/")
    extensions=PackedStringArray(".png", ".tscn", ".json")
    camel_case_regex=""
    separator_regex=""
    custom_regex_enabled=false
"""

import configparser
import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Final

from .list_files import globalize_path
from .types import RenameConfig

DEFAULT_CONFIG_PATH: Final = "res://addons/rename_tool/config.cfg"

SECTION: Final = "settings"
DIRS_KEY: Final = "dirs"
EXTENSIONS_KEY: Final = "extensions"
CAMEL_REGEX_KEY: Final = "camel_case_regex"
SEPARATOR_REGEX_KEY: Final = "separator_regex"
CUSTOM_REGEX_ENABLED_KEY: Final = "custom_regex_enabled"

STRING_ARRAY_PREFIX: Final = "PackedStringArray("


class ConfigLoadError(Exception):
    """Raised when the config file is missing, unreadable or malformed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Can't load config {path}: {reason}")


class ValidationError(Exception):
    """Raised when a config has no valid directory or no valid extension to save."""


def default_config_path(project_root: Path) -> Path:
    return globalize_path(DEFAULT_CONFIG_PATH, project_root)


def _new_parser() -> configparser.ConfigParser:
    # Regexes may contain `%` and `:`, so turn off interpolation and only split on `=`
    return configparser.ConfigParser(interpolation=None, delimiters=("=",))


def _decode_value(raw: str) -> Any:
    raw = raw.strip()
    if raw.startswith(STRING_ARRAY_PREFIX) and raw.endswith(")"):
        raw = f"[{raw[len(STRING_ARRAY_PREFIX) : -1]}]"
    return json.loads(raw)


def _encode_string_array(values: list[str]) -> str:
    return STRING_ARRAY_PREFIX + ", ".join(json.dumps(v, ensure_ascii=False) for v in values) + ")"


def _get(parser: configparser.ConfigParser, key: str, expected_type: type, default: Any) -> Any:
    if not parser.has_option(SECTION, key):
        return default
    value = _decode_value(parser.get(SECTION, key))
    if not isinstance(value, expected_type):
        raise ValueError(f"{key} should be a {expected_type.__name__}, got {value!r}")
    if expected_type is list and not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key} should only contain strings, got {value!r}")
    return value


def read_config(path: Path) -> RenameConfig:
    """Read a config file exactly as stored.

    Raises:
        ConfigLoadError: If the file is missing, unreadable or malformed
    """
    parser = _new_parser()
    try:
        with open(path, encoding="utf-8") as f:
            parser.read_file(f)
        return RenameConfig(
            directories=_get(parser, DIRS_KEY, list, []),
            extensions=_get(parser, EXTENSIONS_KEY, list, []),
            camel_case_regex=_get(parser, CAMEL_REGEX_KEY, str, ""),
            separator_regex=_get(parser, SEPARATOR_REGEX_KEY, str, ""),
            custom_regex_enabled=_get(parser, CUSTOM_REGEX_ENABLED_KEY, bool, False),
        )
    except OSError as e:
        raise ConfigLoadError(path, e.strerror or str(e)) from e
    except (configparser.Error, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        raise ConfigLoadError(path, str(e)) from e


def load_config(path: Path) -> RenameConfig:
    """Load settings, falling back to an empty config if the file can't be read."""
    try:
        config = read_config(path)
    except ConfigLoadError as e:
        logging.info(f"{e}; using an empty config")
        return RenameConfig()

    valid_directories = config.valid_directories()
    valid_extensions = config.valid_extensions()
    dropped = [d for d in config.directories if d.strip() not in valid_directories]
    dropped += [e for e in config.extensions if e.strip().lower() not in valid_extensions]
    if dropped:
        logging.warning(f"Ignoring invalid entries in {path}: {', '.join(map(repr, dropped))}")
    config.directories = valid_directories
    config.extensions = valid_extensions
    logging.debug(f"Loaded config from {path}")
    return config


def validate_config(config: RenameConfig) -> RenameConfig:
    """Return a copy of `config` without invalid entries.

    Raises:
        ValidationError: If no valid directory or no valid extension remains
    """
    directories = config.valid_directories()
    extensions = config.valid_extensions()
    if not directories or not extensions:
        raise ValidationError("Enter at least one directory starting with res:// and one extension such as .png")
    return RenameConfig(
        directories=directories,
        extensions=extensions,
        camel_case_regex=config.camel_case_regex.strip(),
        separator_regex=config.separator_regex.strip(),
        custom_regex_enabled=config.custom_regex_enabled,
    )


def _file_mode(path: Path) -> int:
    """The mode to save `path` with: its current mode, or the umask default for a new file."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def save_config(config: RenameConfig, path: Path) -> RenameConfig:
    """Validate and save settings.

    Invalid directories and extensions are dropped before saving.

    Returns:
        The config as written

    Raises:
        ValidationError: If no valid directory or no valid extension remains.
            The file on disk is left untouched.
        OSError: If the file can't be written
    """
    saved = validate_config(config)
    if saved.custom_regex_enabled and not (saved.camel_case_regex and saved.separator_regex):
        logging.warning("Custom regex is enabled but a pattern is empty; the default will be used for it")

    parser = _new_parser()
    parser[SECTION] = {
        DIRS_KEY: _encode_string_array(saved.directories),
        EXTENSIONS_KEY: _encode_string_array(saved.extensions),
        CAMEL_REGEX_KEY: json.dumps(saved.camel_case_regex, ensure_ascii=False),
        SEPARATOR_REGEX_KEY: json.dumps(saved.separator_regex, ensure_ascii=False),
        CUSTOM_REGEX_ENABLED_KEY: json.dumps(saved.custom_regex_enabled),
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            parser.write(f, space_around_delimiters=False)
        os.chmod(tmp_name, _file_mode(path))
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logging.info(f"Config saved to {path}")
    return saved


def reset_config(config: RenameConfig) -> RenameConfig:
    """Return a config with the default directories and extensions and the same regex settings."""
    reset = RenameConfig.default()
    reset.camel_case_regex = config.camel_case_regex
    reset.separator_regex = config.separator_regex
    reset.custom_regex_enabled = config.custom_regex_enabled
    return reset
