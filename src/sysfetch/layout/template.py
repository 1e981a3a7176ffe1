"""Placeholder substitution for module format strings."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple

from .terminal import AnsiColorMapper, PercentageThreshold, parse_thresholds, resolve_threshold

if TYPE_CHECKING:
    from src.datatypes import SysfetchConfig

COLOR_PREFIX = "color-"


@dataclass(frozen=True)
class ProgressBarStyle:
    """Glyphs and length used by the ``{bar}`` placeholder."""

    left_border: str = "["
    right_border: str = "]"
    progress: str = "="
    empty: str = " "
    target_length: int = 20


@dataclass(frozen=True)
class RenderStyle:
    """Everything a module needs to render beyond its own facts."""

    colors: Optional[AnsiColorMapper] = None
    thresholds: Tuple[PercentageThreshold, ...] = ()
    bar: ProgressBarStyle = field(default_factory=ProgressBarStyle)
    use_ibis: bool = False

    @classmethod
    def from_config(
        cls,
        config: "SysfetchConfig",
        *,
        no_color: bool = False,
        title_sequence: Optional[str] = None,
    ) -> "RenderStyle":
        """
        Build the render style for a resolved configuration.

        Parameters:
            config (SysfetchConfig): Effective configuration.
            no_color (bool): Disable escape sequences entirely.
            title_sequence (Optional[str]): Distro title color used when ``use_os_color`` is on.
        """
        colors = AnsiColorMapper(
            no_color=no_color,
            title_color=config.title_color.value,
            title_sequence=title_sequence if config.use_os_color else None,
        )
        return cls(
            colors=colors,
            thresholds=parse_thresholds(config.percentage_color_thresholds),
            bar=ProgressBarStyle(
                left_border=config.progress_left_border,
                right_border=config.progress_right_border,
                progress=config.progress_progress,
                empty=config.progress_empty,
                target_length=config.progress_target_length,
            ),
            use_ibis=config.use_ibis,
        )


def format_value(value: Any, decimal_places: int) -> str:
    """
    Format a bound value for substitution.

    ``None`` becomes an empty string, booleans ``true``/``false``, floats are
    rounded to ``decimal_places`` and everything else goes through ``str()``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:.{decimal_places}f}"
    return str(value)


def _extract_token(text: str, start: int) -> tuple[Optional[str], int]:
    """
    Return the token between ``start`` and the next ``}``.

    A ``{`` before the closing brace means the opening brace was literal, so
    ``None`` is returned together with ``start``.
    """
    index = start
    while index < len(text):
        char = text[index]
        if char == "}":
            return text[start:index], index + 1
        if char == "{":
            return None, start
        index += 1
    return None, start


def render_template(
    template: str,
    bindings: Mapping[str, Any],
    *,
    decimal_places: int = 2,
    colors: Optional[AnsiColorMapper] = None,
) -> str:
    """
    Render ``template`` by replacing ``{name}`` tokens with bound values.

    Parameters:
        template (str): Text containing zero or more ``{name}`` and ``{color-<token>}`` tokens.
        bindings (Mapping[str, Any]): Values keyed by placeholder name.
        decimal_places (int): Precision applied to float values.
        colors (Optional[AnsiColorMapper]): Resolves color directives; ``None`` renders them empty.

    Returns:
        str: The rendered text. Tokens without a binding are kept verbatim, unknown
        color tokens render as empty, and substituted values are never re-scanned.
    """
    result: List[str] = []
    index = 0
    length = len(template)

    while index < length:
        char = template[index]
        if char != "{":
            result.append(char)
            index += 1
            continue

        token, next_index = _extract_token(template, index + 1)
        if token is None:
            result.append(char)
            index += 1
            continue
        if token.startswith(COLOR_PREFIX):
            sequence = colors.resolve_color(token[len(COLOR_PREFIX):]) if colors else None
            result.append(sequence or "")
        elif token in bindings:
            result.append(format_value(bindings[token], decimal_places))
        else:
            result.append(template[index:next_index])
        index = next_index

    return "".join(result)


def _clamp_percentage(percentage: float) -> float:
    if math.isnan(percentage):
        return 0.0
    return min(max(percentage, 0.0), 100.0)


def progress_bar(percentage: float, style: ProgressBarStyle) -> str:
    """
    Render a progress bar for ``percentage``.

    The percentage is clamped to [0, 100]; the progress glyph count is
    ``floor(percentage * target_length / 100)`` and empty glyphs fill the rest,
    so the bar always holds exactly ``target_length`` glyphs between borders.
    """
    clamped = _clamp_percentage(percentage)
    length = max(style.target_length, 0)
    filled = min(math.floor(clamped * length / 100), length)
    return (
        f"{style.left_border}"
        f"{style.progress * filled}"
        f"{style.empty * (length - filled)}"
        f"{style.right_border}"
    )


def format_percentage(percentage: float, decimal_places: int, style: RenderStyle) -> str:
    """Return ``"<percentage>%"`` wrapped in its threshold color when one applies."""

    text = f"{percentage:.{decimal_places}f}%"
    if style.colors is None:
        return text
    color = resolve_threshold(percentage, style.thresholds)
    if color is None:
        return text
    return style.colors.apply(color, text)


__all__ = [
    "COLOR_PREFIX",
    "ProgressBarStyle",
    "RenderStyle",
    "format_percentage",
    "format_value",
    "progress_bar",
    "render_template",
]
