"""Template rendering and terminal color helpers."""

from .template import (
    ProgressBarStyle,
    RenderStyle,
    format_percentage,
    format_value,
    progress_bar,
    render_template,
)
from .terminal import (
    ANSI_RESET,
    AnsiColorMapper,
    PercentageThreshold,
    parse_thresholds,
    resolve_threshold,
    strip_ansi,
    visible_length,
)

__all__ = [
    "ANSI_RESET",
    "AnsiColorMapper",
    "PercentageThreshold",
    "ProgressBarStyle",
    "RenderStyle",
    "format_percentage",
    "format_value",
    "parse_thresholds",
    "progress_bar",
    "render_template",
    "resolve_threshold",
    "strip_ansi",
    "visible_length",
]
