"""Configuration loader that layers defaults, a TOML file and CLI overrides."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, get_args, get_origin

from .datatypes import SysfetchConfig
from .sysfetch.config_defaults import (
    APP_NAME,
    ASCII_FILENAME,
    CONFIG_FILENAME,
    CONFIG_SUFFIX,
    default_tree,
)
from .utils import find_first_existing, read_text_file

logger = logging.getLogger(__name__)

_UNKNOWN_FILE = "Unknown"
_U8_FIELDS = ("color_margin", "progress_target_length", "ascii.margin")


class ConfigError(ValueError):
    """Raised when the configuration cannot be resolved.

    Carries the file the failure originated from (``"Unknown"`` when no file
    was involved) alongside the human-readable cause.
    """

    def __init__(self, config_file: Optional[str | Path], message: str) -> None:
        self.config_file = str(config_file) if config_file is not None else _UNKNOWN_FILE
        self.message = message
        super().__init__(f"Failed to parse from file '{self.config_file}': {message}")


class InvalidConfigPathError(ConfigError):
    """Raised when an explicit config path lacks the ``.toml`` suffix."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicit config path does not exist."""


class ConfigMergeError(ConfigError):
    """Raised when the file cannot be parsed or layered over the defaults."""


class ConfigDeserializeError(ConfigError):
    """Raised when the merged tree does not match the configuration schema."""


def _coerce_bool(value: Any, dotted_key: str) -> bool:
    """Return a bool, coercing simple 0/1 and true/false strings when necessary."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"0", "1"}:
            return normalized == "1"
        if normalized in {"true", "false"}:
            return normalized == "true"
    raise ValueError(f"{dotted_key} must be a boolean (use true/false).")


def _coerce_int(value: Any, dotted_key: str) -> int:
    """Return a non-negative integer, accepting digit-only strings."""

    if isinstance(value, bool):
        raise ValueError(f"{dotted_key} must be an integer")
    if isinstance(value, int):
        numeric = value
    elif isinstance(value, str) and value.strip().isdigit():
        numeric = int(value.strip())
    else:
        raise ValueError(f"{dotted_key} must be an integer")
    if numeric < 0:
        raise ValueError(f"{dotted_key} must be >= 0")
    return numeric


def _coerce_enum(value: Any, dotted_key: str, enum_type: type[Enum]) -> Enum:
    """Return an enum member, coercing string values case-insensitively."""

    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        try:
            return enum_type(value.strip().lower())
        except ValueError:
            pass
    raise ValueError(
        f"{dotted_key} must be one of: {', '.join(str(member.value) for member in enum_type)}"
    )


def _coerce_value(value: Any, field_type: Any, dotted_key: str) -> Any:
    """Coerce ``value`` to ``field_type`` or raise ``ValueError`` naming the key."""

    if field_type is bool:
        return _coerce_bool(value, dotted_key)
    if field_type is int:
        return _coerce_int(value, dotted_key)
    if field_type is str:
        if not isinstance(value, str):
            raise ValueError(f"{dotted_key} must be a string")
        return value
    if isinstance(field_type, type) and issubclass(field_type, Enum):
        return _coerce_enum(value, dotted_key, field_type)
    if is_dataclass(field_type):
        return _sanitize_section(value, dotted_key, field_type)
    if get_origin(field_type) is tuple:
        item_type = get_args(field_type)[0]
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"{dotted_key} must be an array")
        return tuple(
            _coerce_value(item, item_type, f"{dotted_key}[{index}]")
            for index, item in enumerate(value)
        )
    return value


def _sanitize_section(raw: Any, name: str, cls):
    """
    Coerce a merged TOML table into an instance of ``cls``.

    Parameters:
        raw (Any): Merged table for the section.
        name (str): Dotted section name used when reporting validation errors.
        cls: Frozen dataclass type used to construct the section object.

    Returns:
        Any: Instantiated dataclass populated with coerced values from ``raw``.

    Raises:
        ValueError: If the section is not a table, misses a key or holds a value of the wrong type.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"[{name}] must be a table")
    cleaned: Dict[str, Any] = {}
    cls_fields = {field.name: field for field in fields(cls)}
    for key in raw:
        if key not in cls_fields:
            logger.warning("Ignoring unknown configuration key %s.%s", name, key)
    for field_name, field in cls_fields.items():
        dotted_key = f"{name}.{field_name}" if name else field_name
        if field_name not in raw:
            raise ValueError(f"missing field `{dotted_key}`")
        cleaned[field_name] = _coerce_value(raw[field_name], field.type, dotted_key)
    return cls(**cleaned)


def merge_config_tree(base: Dict[str, Any], overlay: Mapping[str, Any], *, prefix: str = "") -> Dict[str, Any]:
    """
    Overlay ``overlay`` onto ``base`` key by key, recursing into tables.

    Tables present in both trees are merged so partially specified sections
    inherit their remaining keys from ``base``. ``base`` is updated in place
    and returned.

    Raises:
        ValueError: If a key holds a table on one side and a plain value on the other.
    """
    for key, value in overlay.items():
        dotted_key = f"{prefix}.{key}" if prefix else str(key)
        existing = base.get(key)
        if isinstance(value, dict):
            if key in base and not isinstance(existing, dict):
                raise ValueError(f"invalid type for `{dotted_key}`: expected a value, found a table")
            base[key] = merge_config_tree(dict(existing or {}), value, prefix=dotted_key)
        elif isinstance(existing, dict):
            raise ValueError(f"invalid type for `{dotted_key}`: expected a table, found a value")
        else:
            base[key] = value
    return base


def config_search_paths(filename: str) -> List[Path]:
    """Return the candidate locations for ``filename``, most preferred first."""

    candidates: List[Path] = []
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        candidates.append(Path(config_home) / APP_NAME / filename)
    user_home = os.environ.get("HOME")
    if user_home:
        candidates.append(Path(user_home) / ".config" / APP_NAME / filename)
    return candidates


def find_file_in_config_dir(filename: str) -> Optional[Path]:
    """Return the first existing ``filename`` in the config search locations."""

    return find_first_existing(config_search_paths(filename))


def _read_toml(path: Path) -> Dict[str, Any]:
    """Parse ``path`` as UTF-8 TOML (a leading BOM is accepted)."""

    with open(path, "rb") as handle:
        raw_bytes = handle.read()
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        raw_bytes = raw_bytes[3:]
    try:
        return tomllib.loads(raw_bytes.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ConfigMergeError(path, "Configuration file must be UTF-8 encoded") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigMergeError(path, f"Failed to parse TOML: {exc}") from exc


def _split_module_override(module_override: str) -> List[str]:
    return [entry.strip() for entry in module_override.split(",") if entry.strip()]


def _validate(config: SysfetchConfig, config_file: Optional[str]) -> None:
    """Range checks the dataclass types alone cannot express."""

    for dotted_key in _U8_FIELDS:
        target: Any = config
        for part in dotted_key.split("."):
            target = getattr(target, part)
        if target > 255:
            raise ConfigDeserializeError(config_file, f"{dotted_key} must be between 0 and 255")
    if len(config.underline_character) != 1:
        raise ConfigDeserializeError(config_file, "underline_character must be a single character")


def resolve_config(
    location_override: Optional[str] = None,
    module_override: Optional[str] = None,
    ignore_file: bool = False,
) -> SysfetchConfig:
    """
    Build the effective configuration from defaults, an optional file and overrides.

    Parameters:
        location_override (Optional[str]): Explicit config path; must end with ``.toml``.
        module_override (Optional[str]): Comma-separated module list replacing ``modules``.
        ignore_file (bool): Skip any on-disk configuration and use the defaults alone.

    Returns:
        SysfetchConfig: The validated, fully defaulted configuration.

    Raises:
        InvalidConfigPathError: If ``location_override`` does not end with ``.toml``.
        ConfigNotFoundError: If ``location_override`` does not exist.
        ConfigMergeError: If the file cannot be parsed or layered over the defaults.
        ConfigDeserializeError: If the merged tree does not match the schema.
    """
    tree = default_tree()
    config_path: Optional[Path] = None

    if not ignore_file:
        if location_override is not None:
            config_path = Path(location_override).expanduser()
            if not str(config_path).endswith(CONFIG_SUFFIX):
                raise InvalidConfigPathError(config_path, f"Config path MUST end with '{CONFIG_SUFFIX}'")
            if not config_path.exists():
                raise ConfigNotFoundError(config_path, "Unable to find config file.")
        else:
            config_path = find_file_in_config_dir(CONFIG_FILENAME)

    config_file = str(config_path) if config_path is not None else None
    if config_path is not None:
        logger.debug("Loading configuration from %s", config_path)
        try:
            raw = _read_toml(config_path)
        except OSError as exc:
            raise ConfigMergeError(config_path, f"Unable to read config file: {exc}") from exc
        try:
            merge_config_tree(tree, raw)
        except ValueError as exc:
            raise ConfigMergeError(config_file, str(exc)) from exc

    if module_override is not None:
        tree["modules"] = _split_module_override(module_override)

    try:
        config = _sanitize_section(tree, "", SysfetchConfig)
    except ValueError as exc:
        raise ConfigDeserializeError(config_file, str(exc)) from exc
    _validate(config, config_file)
    return config


def check_for_ascii_override() -> Optional[str]:
    """Return the raw text of the user's ASCII art file, or ``None`` when unavailable."""

    path = find_file_in_config_dir(ASCII_FILENAME)
    if path is None:
        return None
    try:
        return read_text_file(path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Unable to read ASCII override %s: %s", path, exc)
        return None


__all__ = [
    "ConfigDeserializeError",
    "ConfigError",
    "ConfigMergeError",
    "ConfigNotFoundError",
    "InvalidConfigPathError",
    "check_for_ascii_override",
    "config_search_paths",
    "find_file_in_config_dir",
    "merge_config_tree",
    "resolve_config",
]
