"""Write the packaged default configuration document to disk."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from src.config_loader import ConfigError, InvalidConfigPathError, config_search_paths
from src.sysfetch.config_defaults import CONFIG_FILENAME, CONFIG_SUFFIX

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "data" / "default-config.toml"


class ConfigGenerationError(ConfigError):
    """Raised when the default configuration cannot be written."""


def read_template_text() -> str:
    """Return the packaged default configuration document."""

    return DEFAULT_CONFIG_PATH.read_text(encoding="utf-8")


def default_generation_target() -> Path:
    """
    Return where a generated config lands without an explicit location.

    Raises:
        ConfigGenerationError: If neither ``XDG_CONFIG_HOME`` nor ``HOME`` is set.
    """
    candidates = config_search_paths(CONFIG_FILENAME)
    if not candidates:
        raise ConfigGenerationError(
            None, "unable to find a config directory: neither XDG_CONFIG_HOME nor HOME is set"
        )
    return candidates[0]


def generate_config_file(location_override: Optional[str] = None) -> Path:
    """
    Write the default configuration document to disk.

    Parameters:
        location_override (Optional[str]): Explicit destination; must end with ``.toml``.

    Returns:
        Path: The file that was written.

    Raises:
        InvalidConfigPathError: If the explicit destination lacks the ``.toml`` suffix.
        ConfigGenerationError: If the destination exists, its directory cannot be
            created or the write fails. An existing file is never modified.
    """
    if location_override is not None:
        if not location_override.endswith(CONFIG_SUFFIX):
            raise InvalidConfigPathError(
                location_override, f"Config path MUST end with '{CONFIG_SUFFIX}'"
            )
        target = Path(os.path.expanduser(location_override))
    else:
        target = default_generation_target()

    if target.exists():
        raise ConfigGenerationError(target, "path already exists; remove it before generating a new one")

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigGenerationError(target, f"unable to create directory {target.parent}: {exc}") from exc

    try:
        content = read_template_text()
        with open(target, "x", encoding="utf-8") as handle:
            handle.write(content)
    except FileExistsError as exc:
        raise ConfigGenerationError(target, "path already exists; remove it before generating a new one") from exc
    except OSError as exc:
        raise ConfigGenerationError(target, f"unable to write config: {exc}") from exc

    logger.info("Wrote default configuration to %s", target)
    return target


__all__ = [
    "ConfigGenerationError",
    "DEFAULT_CONFIG_PATH",
    "default_generation_target",
    "generate_config_file",
    "read_template_text",
]
