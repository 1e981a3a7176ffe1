"""Click CLI wiring and entry point for sysfetch."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.markup import escape

from src.config_loader import ConfigError, check_for_ascii_override, resolve_config
from src.sysfetch.config_writer import generate_config_file
from src.sysfetch.modules import MODULES, os_title_sequence
from src.sysfetch.report import build_report

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    help="Use this config file instead of the one in the config directory (must end with .toml).",
)
@click.option(
    "-m",
    "--module-override",
    "module_override",
    default=None,
    help="Comma-separated module list replacing the configured one, e.g. 'cpu,gpu'.",
)
@click.option("--ignore-config-file", is_flag=True, help="Ignore any config file and use the built-in defaults.")
@click.option(
    "-g",
    "--generate-config",
    "generate_config",
    is_flag=True,
    help="Write the default config file (to --config when given) and exit.",
)
@click.option("--no-color", is_flag=True, help="Disable ANSI colour output.")
@click.option("--list-modules", is_flag=True, help="List the available modules and exit.")
@click.option("-v", "--verbose", is_flag=True, help="Show diagnostic logging on stderr.")
def main(
    config_path: str | None,
    module_override: str | None,
    *,
    ignore_config_file: bool,
    generate_config: bool,
    no_color: bool,
    list_modules: bool,
    verbose: bool,
) -> None:
    """Print a summary of this system."""

    _configure_logging(verbose)
    err_console = Console(stderr=True, no_color=no_color, highlight=False)

    if list_modules:
        for identifier in MODULES:
            click.echo(identifier)
        return

    if generate_config:
        try:
            written = generate_config_file(config_path)
        except ConfigError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"Wrote config to {written}")
        return

    try:
        config = resolve_config(
            location_override=config_path,
            module_override=module_override,
            ignore_file=ignore_config_file,
        )
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    ascii_art = check_for_ascii_override() if config.ascii.display else None
    title_sequence = os_title_sequence() if config.use_os_color else None
    result = build_report(
        config,
        no_color=no_color,
        ascii_art=ascii_art,
        title_sequence=title_sequence,
    )
    for line in result.lines:
        click.echo(line, color=not no_color)

    if result.errors:
        for error in result.errors:
            err_console.print(f"[red]{escape(error.module)}:[/red] {escape(error.message)}")
        raise click.exceptions.Exit(1)


__all__ = ["main"]
