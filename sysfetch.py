"""Public shim exposing the sysfetch CLI and library surface."""

from __future__ import annotations

from typing import Callable, cast

import src.sysfetch.cli_entry as _cli_entry
from src.config_loader import (
    ConfigDeserializeError,
    ConfigError,
    ConfigMergeError,
    ConfigNotFoundError,
    InvalidConfigPathError,
    check_for_ascii_override,
    resolve_config,
)
from src.sysfetch.config_writer import ConfigGenerationError, generate_config_file
from src.sysfetch.report import ReportResult, build_report

main = _cli_entry.main

__all__ = (
    "ConfigDeserializeError",
    "ConfigError",
    "ConfigGenerationError",
    "ConfigMergeError",
    "ConfigNotFoundError",
    "InvalidConfigPathError",
    "ReportResult",
    "build_report",
    "check_for_ascii_override",
    "generate_config_file",
    "main",
    "resolve_config",
)


if __name__ == "__main__":
    _entry_point = cast(Callable[[], None], main)
    _entry_point()
