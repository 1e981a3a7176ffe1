"""Terminal color handling and percentage threshold coloring."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")
ANSI_RESET = "\x1b[0m"

_BRIGHT_PREFIX = "bright"


@dataclass(frozen=True)
class PercentageThreshold:
    """Upper bound of a percentage bucket and the color it maps to."""

    cutoff: float
    color: str


def parse_thresholds(entries: Iterable[str]) -> Tuple[PercentageThreshold, ...]:
    """
    Parse ``"<cutoff>:<color>"`` entries, dropping malformed ones individually.

    Parameters:
        entries (Iterable[str]): Raw threshold strings from the configuration.

    Returns:
        Tuple[PercentageThreshold, ...]: Parsed thresholds in their original order.
    """
    parsed = []
    for entry in entries:
        cutoff_text, sep, color = str(entry).partition(":")
        if not sep or not color.strip():
            logger.debug("Ignoring threshold without a color: %r", entry)
            continue
        try:
            cutoff = float(cutoff_text.strip())
        except ValueError:
            logger.debug("Ignoring threshold with a non-numeric cutoff: %r", entry)
            continue
        parsed.append(PercentageThreshold(cutoff=cutoff, color=color.strip()))
    return tuple(parsed)


def resolve_threshold(
    percentage: float, thresholds: Sequence[PercentageThreshold]
) -> Optional[str]:
    """
    Return the color for ``percentage`` from an upper-bound bucket table.

    The bucket is the smallest cutoff the percentage is still below; a value
    equal to a cutoff falls into the next bucket, and a value at or above
    every cutoff takes the highest entry's color.

    Returns:
        Optional[str]: The bucket's color token, or ``None`` for an empty table.
    """
    if not thresholds:
        return None
    ordered = sorted(thresholds, key=lambda threshold: threshold.cutoff)
    for threshold in ordered:
        if percentage < threshold.cutoff:
            return threshold.color
    return ordered[-1].color


class AnsiColorMapper:
    """Translate color tokens into ANSI escape sequences."""

    _TOKEN_CODES_16: Dict[str, int] = {
        "black": 30,
        "red": 31,
        "green": 32,
        "yellow": 33,
        "blue": 34,
        "magenta": 35,
        "cyan": 36,
        "white": 37,
    }

    _STYLE_CODES: Dict[str, int] = {
        "bold": 1,
        "italic": 3,
        "underline": 4,
    }

    def __init__(
        self,
        *,
        no_color: bool = False,
        title_color: str = "bright_magenta",
        title_sequence: Optional[str] = None,
    ) -> None:
        """
        Initialize the mapper.

        Color output is disabled when ``no_color`` is set or when the
        ``NO_COLOR`` environment variable holds a truthy value.

        Parameters:
            no_color (bool): Force-disable every escape sequence.
            title_color (str): Token used for ``{color-title}`` and module titles.
            title_sequence (Optional[str]): Raw SGR sequence overriding ``title_color``,
                e.g. one built from the distro's ``ANSI_COLOR``.
        """
        env_no_color = self._is_truthy_flag(os.environ.get("NO_COLOR", ""))
        self.no_color = no_color or env_no_color
        self.title_color = title_color
        self._title_sequence = title_sequence

    @property
    def title_sequence(self) -> Optional[str]:
        """The distro-provided title sequence, if one was supplied."""

        return self._title_sequence

    @staticmethod
    def _is_truthy_flag(raw_value: str) -> bool:
        """Return True when an environment-style flag requests enabling behavior."""

        normalized = raw_value.strip().lower()
        return bool(normalized) and normalized not in {"0", "false", "no", "off"}

    @classmethod
    def color_code(cls, token: str, *, background: bool = False) -> Optional[int]:
        """Return the SGR code for a named (optionally bright) color, or ``None``."""

        name = (token or "").strip().lower().replace("-", "_")
        bright = name.startswith(_BRIGHT_PREFIX)
        if bright:
            name = name[len(_BRIGHT_PREFIX):].lstrip("_")
        base = cls._TOKEN_CODES_16.get(name)
        if base is None:
            return None
        if bright:
            base += 60
        if background:
            base += 10
        return base

    def resolve_color(self, token: str) -> Optional[str]:
        """
        Convert a color token into its ANSI SGR escape sequence.

        Parameters:
            token (str): Color name (``red``, ``bright_red``, ``brightred``), a style
                (``bold``, ``italic``, ``underline``), ``title`` or ``reset``.

        Returns:
            Optional[str]: The escape sequence, or ``None`` if the token is unknown
            or color output is disabled.
        """
        if self.no_color:
            return None
        token = (token or "").strip().lower()
        if not token:
            return None
        if token == "reset":
            return ANSI_RESET
        if token == "title":
            if self._title_sequence:
                return self._title_sequence
            token = self.title_color
        style = self._STYLE_CODES.get(token)
        if style is not None:
            return f"\x1b[{style}m"
        code = self.color_code(token)
        if code is None:
            return None
        return f"\x1b[{code}m"

    def apply(self, token: str, text: str) -> str:
        """
        Wrap ``text`` with the sequence for ``token`` and a reset.

        Returns ``text`` unchanged when it is empty, the token is unknown or
        color output is disabled.
        """
        if not text:
            return text
        sgr = self.resolve_color(token)
        if not sgr:
            return text
        return f"{sgr}{text}{ANSI_RESET}"

    def title_prefix(self, *, bold: bool, italic: bool) -> str:
        """Return the escape sequences that open a styled module title."""

        if self.no_color:
            return ""
        parts = []
        if bold:
            parts.append(self._STYLE_CODES["bold"])
        if italic:
            parts.append(self._STYLE_CODES["italic"])
        prefix = f"\x1b[{';'.join(str(part) for part in parts)}m" if parts else ""
        return prefix + (self.resolve_color("title") or "")

    def palette(self, *, bright: bool, character: str, margin: int, background: bool) -> str:
        """Render the eight terminal colors as one line of colored blocks."""

        if self.no_color:
            return ""
        blocks = []
        for name in self._TOKEN_CODES_16:
            code = self.color_code(f"bright_{name}" if bright else name, background=background)
            blocks.append(f"\x1b[{code}m{character}{ANSI_RESET}")
        return (" " * margin).join(blocks)


def strip_ansi(text: str) -> str:
    """Return ``text`` without SGR escape sequences."""

    return ANSI_ESCAPE_RE.sub("", text)


def visible_length(text: str) -> int:
    """Return the printable width of ``text`` ignoring escape sequences."""

    return len(strip_ansi(text))
