"""Compose the rendered report from the configured module list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Type, Union

import psutil

from src.datatypes import AsciiSide, SysfetchConfig
from src.sysfetch.layout.template import RenderStyle, render_template
from src.sysfetch.layout.terminal import ANSI_RESET, AnsiColorMapper, visible_length
from src.sysfetch.modules import (
    KIND_DIRECTIVE,
    KIND_MODULE,
    Module,
    ModuleError,
    resolve_identifier,
)

logger = logging.getLogger(__name__)

Entry = Tuple[str, str]
ReportItem = Union[str, Entry]


@dataclass
class ReportResult:
    """Rendered report lines plus the probe failures that were not suppressed."""

    lines: List[str] = field(default_factory=list)
    errors: List[ModuleError] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


def gather_module(
    module: Type[Module],
    config: SysfetchConfig,
    errors: List[ModuleError],
) -> List[Module]:
    """
    Run a module's probe, applying the ``suppress_errors`` policy.

    Parameters:
        module (Type[Module]): Implementation resolved from the registry.
        config (SysfetchConfig): Effective configuration.
        errors (List[ModuleError]): Receives failures when suppression is off.

    Returns:
        List[Module]: Gathered instances; a single ``create_empty()`` instance
        when the probe failed under suppression, and nothing when it failed
        without it.
    """
    try:
        return list(module.gather(config))
    except (ModuleError, OSError, ValueError, psutil.Error) as exc:
        error = exc if isinstance(exc, ModuleError) else ModuleError(module.identifier, str(exc))
        if config.suppress_errors:
            logger.debug("Suppressed %s", error)
            return [module.create_empty()]
        errors.append(error)
        return []


def _underline(config: SysfetchConfig, length: str) -> str:
    return config.underline_character * int(length)


def _segment_line(template: str, name: str, colors: Optional[AnsiColorMapper]) -> str:
    bindings = {"name": name, "name_sized_gap": " " * len(name)}
    return render_template(template, bindings, colors=colors) + (ANSI_RESET if colors and not colors.no_color else "")


def _palette(config: SysfetchConfig, colors: AnsiColorMapper, *, bright: bool) -> str:
    return colors.palette(
        bright=bright,
        character=config.color_character,
        margin=config.color_margin,
        background=config.color_use_background,
    )


def collect_items(config: SysfetchConfig, style: RenderStyle, errors: List[ModuleError]) -> List[ReportItem]:
    """
    Walk ``config.modules`` in order and produce raw report items.

    Entries are ``(title, value)`` tuples; directives and raw text are plain
    strings. Unknown identifiers are rendered as text only when
    ``unknown_as_text`` is set and are otherwise skipped with a warning.
    """
    colors = style.colors
    items: List[ReportItem] = []
    open_segment = ""
    for identifier in config.modules:
        lookup = resolve_identifier(identifier)
        if lookup.kind == KIND_MODULE and lookup.module is not None:
            section = getattr(config, lookup.module.identifier)
            for instance in gather_module(lookup.module, config, errors):
                items.extend(instance.render_entries(section, config.decimal_places, style))
        elif lookup.kind == KIND_DIRECTIVE:
            if lookup.directive == "space":
                items.append("")
            elif lookup.directive == "underline":
                items.append(_underline(config, lookup.argument or "0"))
            elif lookup.directive in ("colors", "bright_colors"):
                if colors is not None and not colors.no_color:
                    items.append(_palette(config, colors, bright=lookup.directive == "bright_colors"))
            elif lookup.directive == "segment":
                open_segment = lookup.argument or ""
                items.append(_segment_line(config.segment_top, open_segment, colors))
            elif lookup.directive == "end_segment":
                items.append(_segment_line(config.segment_bottom, open_segment, colors))
                open_segment = ""
        elif config.unknown_as_text:
            items.append(render_template(identifier, {}, colors=colors))
        else:
            logger.warning("Skipping unknown module '%s'", identifier)
    return items


def format_entries(items: Sequence[ReportItem], config: SysfetchConfig, style: RenderStyle) -> List[str]:
    """Turn report items into lines, styling titles and aligning them when ``inline_values`` is on."""

    colors = style.colors
    titled = [item for item in items if isinstance(item, tuple) and item[0]]
    width = max((visible_length(title) for title, _ in titled), default=0) if config.inline_values else 0
    lines: List[str] = []
    for item in items:
        if isinstance(item, str):
            lines.append(item)
            continue
        title, value = item
        if not title:
            lines.append(value)
            continue
        padding = " " * max(width - visible_length(title), 0)
        if colors is not None and not colors.no_color:
            prefix = colors.title_prefix(bold=config.title_bold, italic=config.title_italic)
            title = f"{prefix}{title}{ANSI_RESET}" if prefix else title
        lines.append(f"{title}{padding}{config.separator}{value}")
    return lines


def _ascii_line_colors(config: SysfetchConfig, count: int, style: RenderStyle) -> List[Optional[str]]:
    """Spread ``ascii.colors`` evenly over ``count`` lines, top to bottom."""

    colors = style.colors
    if colors is None or colors.no_color or count == 0:
        return [None] * count
    if config.use_os_color and colors.title_sequence:
        return [colors.title_sequence] * count
    palette = [colors.resolve_color(color.value) for color in config.ascii.colors]
    if not palette:
        return [None] * count
    return [palette[index * len(palette) // count] for index in range(count)]


def compose_with_ascii(lines: List[str], art: str, config: SysfetchConfig, style: RenderStyle) -> List[str]:
    """
    Place ASCII art next to, above or below the report lines.

    Parameters:
        lines (List[str]): Formatted report lines.
        art (str): Raw art text, one row per line.
        config (SysfetchConfig): Supplies ``ascii.side``, ``ascii.margin`` and ``ascii.colors``.
        style (RenderStyle): Color mapper for the art.

    Returns:
        List[str]: The combined lines. Side placements pad the art (or the
        report, for ``right``) to a common visible width plus the margin.
    """
    art_lines = art.rstrip("\n").splitlines()
    if not art_lines:
        return lines
    colored = []
    for row, sequence in zip(art_lines, _ascii_line_colors(config, len(art_lines), style)):
        colored.append(f"{sequence}{row}{ANSI_RESET}" if sequence else row)

    side = config.ascii.side
    if side == AsciiSide.TOP:
        return colored + [""] + lines
    if side == AsciiSide.BOTTOM:
        return lines + [""] + colored

    margin = " " * config.ascii.margin
    height = max(len(colored), len(lines))
    art_width = max(visible_length(row) for row in art_lines)
    text_width = max((visible_length(line) for line in lines), default=0)
    combined = []
    for index in range(height):
        art_row = colored[index] if index < len(colored) else ""
        text_row = lines[index] if index < len(lines) else ""
        if side == AsciiSide.LEFT:
            art_row += " " * (art_width - visible_length(art_row))
            combined.append(f"{art_row}{margin}{text_row}".rstrip())
        else:
            text_row += " " * (text_width - visible_length(text_row))
            combined.append(f"{text_row}{margin}{art_row}".rstrip())
    return combined


def build_report(
    config: SysfetchConfig,
    *,
    no_color: bool = False,
    ascii_art: Optional[str] = None,
    title_sequence: Optional[str] = None,
) -> ReportResult:
    """
    Render every configured module into report lines.

    Parameters:
        config (SysfetchConfig): Effective configuration.
        no_color (bool): Strip all escape sequences from the output.
        ascii_art (Optional[str]): Art to place beside the report when ``ascii.display`` is on.
        title_sequence (Optional[str]): Distro title color used when ``use_os_color`` is on.

    Returns:
        ReportResult: Lines to print and any probe failures that were not suppressed.
    """
    style = RenderStyle.from_config(config, no_color=no_color, title_sequence=title_sequence)
    result = ReportResult()
    items = collect_items(config, style, result.errors)
    result.lines = format_entries(items, config, style)
    if ascii_art and config.ascii.display:
        result.lines = compose_with_ascii(result.lines, ascii_art, config, style)
    return result


__all__ = [
    "ReportResult",
    "build_report",
    "collect_items",
    "compose_with_ascii",
    "format_entries",
    "gather_module",
]
