"""Command-line interface for neur.

Defines the ``neur`` command with click. It resolves the configuration from
``neur.toml`` and the command-line options, builds the site, and reports the
outcome. Any fatal error exits with status 1.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .build import build_site
from .config import load_config_file, resolve_config
from .errors import BuildError, ConfigError, SourceIOError


def _display_path(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd().resolve()))
    except ValueError:
        return str(path)


def _fail(title: str, path: Path | None, message: str) -> None:
    click.echo(click.style(title, fg="red", bold=True), err=True)
    if path is not None:
        click.echo(click.style(f"  File: {_display_path(path)}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {message}", fg="white"), err=True)
    raise SystemExit(1)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="neur")
@click.option(
    "-s",
    "--source",
    type=click.Path(file_okay=False),
    help="Source directory (default: src).",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False),
    help="Output directory (default: dist).",
)
@click.option(
    "-m",
    "--minify",
    type=click.BOOL,
    is_flag=False,
    flag_value=True,
    default=None,
    help="Minify stylesheets. A bare --minify means true.",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file to use instead of ./neur.toml.",
)
@click.option(
    "-j",
    "--workers",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of threads processing files.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log progress.")
def cli(
    source: str | None,
    output: str | None,
    minify: bool | None,
    config_path: Path | None,
    workers: int,
    verbose: bool,
):
    """Build a static site from templates, markdown and stylesheets."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        file_values = load_config_file(config_path, root=Path.cwd())
        config = resolve_config(
            file_values,
            {
                "source": source,
                "output": output,
                "minify": minify,
            },
        )
    except ConfigError as exc:
        _fail("Configuration error:", config_path, str(exc))

    try:
        result = build_site(config, workers=workers)
    except SourceIOError as exc:
        _fail("Build failed:", exc.path, exc.message)
    except BuildError as exc:
        _fail("Build failed:", exc.source_path, exc.message)

    click.echo(f"Built {len(result.written)} files into {result.output_dir}")
    if result.skipped:
        skipped = ", ".join(p.as_posix() for p in result.skipped)
        click.echo(click.style(f"Skipped unreadable files: {skipped}", fg="yellow"), err=True)


def main():
    """Entry point for the CLI application."""
    cli()
