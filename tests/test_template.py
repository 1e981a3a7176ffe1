from __future__ import annotations

import pytest

from src.sysfetch.layout.template import (
    ProgressBarStyle,
    RenderStyle,
    format_percentage,
    format_value,
    progress_bar,
    render_template,
)
from src.sysfetch.layout.terminal import ANSI_RESET, AnsiColorMapper, parse_thresholds


def test_unknown_placeholder_left_verbatim() -> None:
    assert render_template("{nope} x", {}) == "{nope} x"


def test_bound_placeholders_substituted() -> None:
    rendered = render_template("{used} / {max}", {"used": "1.00 GB", "max": "4.00 GB"})

    assert rendered == "1.00 GB / 4.00 GB"


def test_substituted_values_are_not_rescanned() -> None:
    rendered = render_template("{a}", {"a": "{b}", "b": "boom"})

    assert rendered == "{b}"


def test_stray_braces_are_literal() -> None:
    assert render_template("{ {a} }", {"a": 1}) == "{ 1 }"
    assert render_template("tail {", {}) == "tail {"
    assert render_template("}{a}", {"a": "x"}) == "}x"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (3, "3"),
        (2.5, "2.50"),
        ("text", "text"),
    ],
)
def test_format_value(value, expected) -> None:
    assert format_value(value, 2) == expected


def test_float_precision_follows_decimal_places() -> None:
    assert render_template("{ghz} GHz", {"ghz": 3.14159}, decimal_places=1) == "3.1 GHz"


def test_color_directives_resolve() -> None:
    colors = AnsiColorMapper()

    rendered = render_template("{color-red}hot{color-reset}", {}, colors=colors)

    assert rendered == f"\x1b[31mhot{ANSI_RESET}"


def test_color_directives_render_empty_without_colors() -> None:
    assert render_template("{color-red}hot{color-reset}", {}) == "hot"
    assert render_template("{color-red}hot", {}, colors=AnsiColorMapper(no_color=True)) == "hot"


def test_unknown_color_renders_empty() -> None:
    assert render_template("{color-chartreuse}x", {}, colors=AnsiColorMapper()) == "x"


def test_title_color_directive_uses_configured_title() -> None:
    colors = AnsiColorMapper(title_color="bright_cyan")

    assert render_template("{color-title}me", {}, colors=colors) == "\x1b[96mme"


@pytest.mark.parametrize(
    ("percentage", "expected"),
    [
        (0, "[" + " " * 20 + "]"),
        (100, "[" + "=" * 20 + "]"),
        (50, "[" + "=" * 10 + " " * 10 + "]"),
        (33, "[" + "=" * 6 + " " * 14 + "]"),
        (-10, "[" + " " * 20 + "]"),
        (250, "[" + "=" * 20 + "]"),
    ],
)
def test_progress_bar_length(percentage: float, expected: str) -> None:
    assert progress_bar(percentage, ProgressBarStyle()) == expected


def test_progress_bar_custom_glyphs() -> None:
    style = ProgressBarStyle(left_border="<", right_border=">", progress="#", empty=".", target_length=4)

    assert progress_bar(75, style) == "<###.>"


def test_format_percentage_plain_without_thresholds() -> None:
    assert format_percentage(42.0, 1, RenderStyle()) == "42.0%"


def test_format_percentage_threshold_color() -> None:
    style = RenderStyle(
        colors=AnsiColorMapper(),
        thresholds=parse_thresholds(["75:brightgreen", "85:brightyellow", "90:brightred"]),
    )

    assert format_percentage(80.0, 0, style) == f"\x1b[93m80%{ANSI_RESET}"
    assert format_percentage(10.0, 0, style) == f"\x1b[92m10%{ANSI_RESET}"


def test_render_style_from_config(default_config) -> None:
    style = RenderStyle.from_config(default_config)

    assert style.bar == ProgressBarStyle()
    assert [threshold.cutoff for threshold in style.thresholds] == [75.0, 85.0, 90.0]
    assert style.colors is not None
    assert style.colors.title_color == "bright_magenta"
    assert style.use_ibis is False
