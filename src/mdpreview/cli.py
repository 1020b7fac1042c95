"""CLI interface for mdpreview.

Command-line tool for rendering markdown into preview parse trees.
"""

import logging
from pathlib import Path

import click

from mdpreview.config import Config, parse_matcher
from mdpreview.core.renderer import ParseTreeRenderer
from mdpreview.core.search import InvalidQueryError, SearchMatcher


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _matcher_option(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> SearchMatcher | None:
    if value is None:
        return None
    try:
        return parse_matcher(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@click.group()
def cli() -> None:
    """mdpreview - markdown preview parse trees."""


@cli.command()
@click.argument("markdown_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover mdpreview.toml)",
)
@click.option(
    "--modified",
    type=click.IntRange(min=0),
    default=None,
    help="Byte offset where modified content starts",
)
@click.option(
    "--query",
    "-q",
    default=None,
    help="Search query to highlight",
)
@click.option(
    "--current",
    type=click.IntRange(min=0),
    default=None,
    help="Index of the focused search match",
)
@click.option(
    "--matcher",
    default=None,
    callback=_matcher_option,
    help="Search matcher: SmartCase, CaseSensitive, CaseInsensitive, CaseSensitiveRegex "
    "(overrides config)",
)
@click.option(
    "--plain-text",
    is_flag=True,
    help="Print the plain text of the document instead of the parse tree",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def render(
    markdown_file: Path,
    config_path: Path | None,
    modified: int | None,
    query: str | None,
    current: int | None,
    matcher: SearchMatcher | None,
    plain_text: bool,
    verbose: bool,
) -> None:
    """Render a markdown file into a parse tree message."""
    _setup_logging(verbose)
    config = _load_config(config_path).with_overrides(matcher=matcher)

    renderer = ParseTreeRenderer(config.search.matcher)
    source = markdown_file.read_text(encoding="utf-8")
    try:
        result = renderer.render(source, modified=modified, query=query, current=current)
    except InvalidQueryError as e:
        raise click.ClickException(str(e)) from e

    if plain_text:
        click.echo(result.text.text)
    else:
        click.echo(result.message)

    if query:
        click.echo(f"Matches: {len(result.matches)}", err=True)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover mdpreview.toml)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def serve(config_path: Path | None, host: str | None, port: int | None, verbose: bool) -> None:
    """Start the parse tree server."""
    from mdpreview.server import run_server

    _setup_logging(verbose)
    config = _load_config(config_path).with_overrides(host=host, port=port)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Search matcher: {config.search.matcher.value}")

    run_server(config)
