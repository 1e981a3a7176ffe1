"""General-purpose utility helpers shared by the loader and the fact probes."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable, Optional, Sequence

COMMAND_TIMEOUT_SECONDS = 2.0

_DECIMAL_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")
_BINARY_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB")


def find_first_existing(paths: Iterable[Path]) -> Optional[Path]:
    """Return the first path in *paths* that exists on disk."""

    for candidate in paths:
        if candidate.exists():
            return candidate
    return None


def read_text_file(path: Path) -> str:
    """Read *path* as UTF-8 text, releasing the handle immediately."""

    with open(path, "r", encoding="utf-8") as handle:
        return handle.read()


def read_first_line(path: Path) -> str:
    """
    Return the stripped first line of a small procfs/sysfs style file.

    Parameters:
        path (Path): File to read.

    Returns:
        str: First line without surrounding whitespace (empty for empty files).

    Raises:
        OSError: If the file cannot be opened.
    """
    with open(path, "r", encoding="utf-8", errors="replace") as handle:
        return handle.readline().strip()


def format_bytes(num_bytes: float, decimal_places: int, *, use_ibis: bool = False) -> str:
    """
    Format a byte count using the largest unit that keeps the value above one.

    Parameters:
        num_bytes (float): Raw byte count.
        decimal_places (int): Digits after the decimal point.
        use_ibis (bool): Use 1024-based units (KiB, MiB, ...) instead of 1000-based ones.

    Returns:
        str: Human readable size such as ``"3.20 GiB"``.
    """
    step = 1024.0 if use_ibis else 1000.0
    units = _BINARY_UNITS if use_ibis else _DECIMAL_UNITS
    value = float(max(num_bytes, 0))
    unit = units[0]
    for unit in units:
        if value < step or unit == units[-1]:
            break
        value /= step
    return f"{value:.{decimal_places}f} {unit}"


def run_command(args: Sequence[str], *, timeout: float = COMMAND_TIMEOUT_SECONDS) -> str:
    """
    Run an external command and return its standard output.

    Raises:
        FileNotFoundError: If the executable is not installed.
        subprocess.CalledProcessError: If the command exits with a non-zero status.
        subprocess.TimeoutExpired: If the command does not finish within *timeout*.
    """
    completed = subprocess.run(
        list(args),
        capture_output=True,
        encoding="utf-8",
        errors="replace",
        check=True,
        timeout=timeout,
    )
    return completed.stdout
