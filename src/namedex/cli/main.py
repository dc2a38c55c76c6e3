"""
Namedex CLI

Command-line goto-by-name over files and Python symbols.

Usage::

    namedex files foo/index ./web        # bar/foo/index.html before foo/bar/index.html
    namedex symbols core.NSE ./src       # NameSearchEngine in namedex.core
    namedex symbols "*Engine" --anywhere  # middle matches too
    namedex mcp                          # Start the MCP server
"""

import logging
import time
from pathlib import Path

import click

from namedex.client import Namedex
from namedex.core.config import CASE_SENSITIVITY_MODES, NamedexConfig
from namedex.core.search import ResultFormatter
from namedex.exceptions import NamedexError


# ---------------------------------------------------------------------------
# Logging helpers
# ---------------------------------------------------------------------------

def _configure_logging(config: NamedexConfig, verbose: bool) -> None:
    """Set up logging for the CLI session."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO)
    logging.basicConfig(level=level, format=config.log_format)


# ---------------------------------------------------------------------------
# Top-level group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(package_name="namedex")
@click.pass_context
def cli(ctx: click.Context):
    """Namedex — fuzzy goto-by-name for files and symbols."""
    ctx.ensure_object(dict)


def _search_options(func):
    """Options shared by the files and symbols commands."""
    options = [
        click.argument("pattern"),
        click.argument("directory", default=".",
                       type=click.Path(exists=True, file_okay=False)),
        click.option("--anywhere", is_flag=True,
                     help="Also match in the middle of names (leading '*')."),
        click.option("--case", "case_sensitivity",
                     type=click.Choice(CASE_SENSITIVITY_MODES), default=None,
                     help="Case sensitivity (default: $NAMEDEX_CASE_SENSITIVITY or 'none')."),
        click.option("--include-non-project", is_flag=True,
                     help="Include virtualenv and build output."),
        click.option("--context", default=None,
                     help="File (relative to DIRECTORY) whose neighbours rank first."),
        click.option("-n", "--max-results", type=int, default=None,
                     help="Maximum number of results."),
        click.option("-f", "--format", "fmt", type=click.Choice(["console", "json"]),
                     default="console", help="Output format."),
        click.option("-v", "--verbose", is_flag=True, help="Enable debug logging."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _run_search(kind: str, pattern: str, directory: str, anywhere, case_sensitivity,
                include_non_project, context, max_results, fmt: str, verbose: bool) -> None:
    config = NamedexConfig.from_env().with_overrides(
        search_anywhere=anywhere or None,
        case_sensitivity=case_sensitivity,
        include_non_project=include_non_project or None,
        max_results=max_results,
    )
    _configure_logging(config, verbose)

    t0 = time.perf_counter()
    try:
        client = Namedex(config=config)
        goto = client.goto_file if kind == "files" else client.goto_symbol
        items = goto(pattern, path=Path(directory), context=context,
                     include_separator=True)
    except NamedexError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)
    elapsed = time.perf_counter() - t0

    formatter = ResultFormatter()
    if fmt == "json":
        click.echo(formatter.format_json(items))
    else:
        click.echo(formatter.format_console(items, pattern, elapsed_time=elapsed))


# ---------------------------------------------------------------------------
# namedex files / namedex symbols
# ---------------------------------------------------------------------------

@cli.command()
@_search_options
def files(pattern, directory, anywhere, case_sensitivity, include_non_project,
          context, max_results, fmt, verbose):
    """Find files in DIRECTORY whose name matches PATTERN ('/' qualifies)."""
    _run_search("files", pattern, directory, anywhere, case_sensitivity,
                include_non_project, context, max_results, fmt, verbose)


@cli.command()
@_search_options
def symbols(pattern, directory, anywhere, case_sensitivity, include_non_project,
            context, max_results, fmt, verbose):
    """Find Python classes and functions in DIRECTORY matching PATTERN ('.' qualifies)."""
    _run_search("symbols", pattern, directory, anywhere, case_sensitivity,
                include_non_project, context, max_results, fmt, verbose)


# ---------------------------------------------------------------------------
# namedex mcp
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--transport", type=click.Choice(["stdio", "sse", "streamable-http"]),
              default="stdio", help="MCP transport (default: stdio).")
@click.option("-v", "--verbose", is_flag=True)
def mcp(transport: str, verbose: bool):
    """Start the Namedex MCP server for editor / agent integration."""
    _configure_logging(NamedexConfig.from_env(), verbose)
    try:
        from namedex.mcp.server import create_server  # noqa: E402
    except ImportError:
        click.echo(
            "Error: MCP dependencies not installed.\n"
            "Install with:  pip install 'namedex[mcp]'",
            err=True,
        )
        raise SystemExit(1)

    server = create_server()
    server.run(transport=transport)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
