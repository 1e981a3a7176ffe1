"""Connected display discovery through ``xrandr``."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional

from src.sysfetch.layout.template import RenderStyle
from src.utils import run_command

from .base import Module, ModuleError

if TYPE_CHECKING:
    from src.datatypes import SysfetchConfig

logger = logging.getLogger(__name__)

_GEOMETRY_RE = re.compile(r"(?P<width>\d+)x(?P<height>\d+)\+\d+\+\d+")
_ACTIVE_RATE_RE = re.compile(r"(?P<rate>\d+(?:\.\d+)?)\*")


class DisplayProbeError(RuntimeError):
    """
    Raised when displays cannot be listed.

    ``reason`` is ``"missing_tool"`` when ``xrandr`` is absent and
    ``"unexpected_output"`` when it ran but produced nothing usable.
    An empty display list is not an error.
    """

    MISSING_TOOL = "missing_tool"
    UNEXPECTED_OUTPUT = "unexpected_output"

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


def _refresh_rate(mode_lines: List[str]) -> float:
    for line in mode_lines:
        match = _ACTIVE_RATE_RE.search(line)
        if match:
            return float(match.group("rate"))
    return 0.0


def parse_xrandr(output: str) -> List["DisplayInfo"]:
    """
    Parse ``xrandr --query`` output into connected displays.

    Output header lines look like ``HDMI-1 connected primary 1920x1080+0+0 ...``
    and are followed by indented mode lines; the active mode is marked with
    ``*``. Disconnected outputs, connected outputs without a geometry and any
    line that does not fit this shape are skipped individually.

    Raises:
        DisplayProbeError: If the output holds no ``Screen`` or output header at all.
    """
    lines = output.splitlines()
    if not any(line and not line[0].isspace() for line in lines):
        raise DisplayProbeError(DisplayProbeError.UNEXPECTED_OUTPUT, "xrandr produced no output")

    displays: List[DisplayInfo] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        index += 1
        if not line or line[0].isspace():
            continue
        fields = line.split()
        if len(fields) < 2 or fields[1] != "connected":
            continue
        match = _GEOMETRY_RE.search(line)
        if not match:
            logger.debug("Skipping xrandr output without geometry: %r", line)
            continue
        modes: List[str] = []
        while index < len(lines) and lines[index][:1].isspace():
            modes.append(lines[index])
            index += 1
        displays.append(
            DisplayInfo(
                name=fields[0],
                width=int(match.group("width")),
                height=int(match.group("height")),
                refresh_rate=_refresh_rate(modes),
            )
        )
    return displays


def query_displays() -> List["DisplayInfo"]:
    """Run ``xrandr`` and parse its output."""

    try:
        output = run_command(["xrandr", "--query"])
    except FileNotFoundError as exc:
        raise DisplayProbeError(DisplayProbeError.MISSING_TOOL, "the 'xrandr' command is not installed") from exc
    except (subprocess.SubprocessError, OSError) as exc:
        raise DisplayProbeError(DisplayProbeError.UNEXPECTED_OUTPUT, f"xrandr failed: {exc}") from exc
    return parse_xrandr(output)


@dataclass
class DisplayInfo(Module):
    identifier: ClassVar[str] = "displays"

    name: str = ""
    width: int = 0
    height: int = 0
    refresh_rate: float = 0.0
    make: str = ""
    model: str = ""

    @classmethod
    def gather(cls, config: "SysfetchConfig") -> List["DisplayInfo"]:
        session = os.environ.get("XDG_SESSION_TYPE", "").strip().lower()
        if session and session not in ("x11", "wayland"):
            raise ModuleError(cls.identifier, f"unsupported session type '{session}'")
        try:
            return query_displays()
        except DisplayProbeError as exc:
            raise ModuleError(cls.identifier, exc.message) from exc

    def placeholders(self, decimal_places: int, style: RenderStyle) -> Dict[str, Any]:
        return {
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "refresh_rate": round(self.refresh_rate),
            "make": self.make or "Unknown",
            "model": self.model or self.name,
        }

    def resolution(self) -> Optional[str]:
        if not self.width or not self.height:
            return None
        return f"{self.width}x{self.height}"

    def summarize(self) -> str:
        return f"{self.name}: {self.resolution() or 'unknown'} @ {round(self.refresh_rate)}Hz"
