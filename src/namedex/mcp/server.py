"""
Namedex MCP Server

Exposes goto-by-name over files and Python symbols as tools that AI agents
(Claude, Cursor, Windsurf) can invoke natively via the Model Context
Protocol.

Start with::

    namedex mcp                              # stdio transport (default for Cursor)
    namedex mcp --transport streamable-http  # HTTP (Streamable) for remote clients

Or programmatically::

    from namedex.mcp.server import create_server
    server = create_server()
    server.run()
"""

from __future__ import annotations

import json
import logging
import os
from typing import Annotated, Any, List

# FastMCP uses pydantic for validation, so Field should be available
from pydantic import Field  # type: ignore[import-untyped]

from namedex.client import Namedex
from namedex.core.config import NamedexConfig
from namedex.core.search import NON_PREFIX_SEPARATOR

logger = logging.getLogger(__name__)


def _to_payload(pattern: str, items: List[Any]) -> str:
    """Serialise results; middle matches are flagged instead of separated."""
    results = []
    middle = False
    for item in items:
        if item is NON_PREFIX_SEPARATOR:
            middle = True
            continue
        obj = item.to_dict()
        obj["middle_match"] = middle
        results.append(obj)
    return json.dumps({"pattern": pattern, "count": len(results),
                       "results": results}, indent=2)


def create_server(config: NamedexConfig | None = None):
    """
    Build and return a configured FastMCP server instance.

    All tool invocations share one :class:`Namedex` client, so name
    sources are built once per directory and reused across calls.

    Args:
        config: Instance-based configuration.  Defaults to
            ``NamedexConfig.from_env()`` so that the server respects the
            same environment variables as the CLI.

    Raises ``ImportError`` if ``fastmcp`` is not installed (install via
    ``pip install 'namedex[mcp]'``).
    """
    from fastmcp import FastMCP  # type: ignore[import-untyped]

    cfg = config or NamedexConfig.from_env()
    client = Namedex(config=cfg)

    mcp = FastMCP("Namedex")

    def _resolve_path(path: str) -> str:
        """When path is '.', use NAMEDEX_DEFAULT_PATH if set (e.g. /data in Docker)."""
        if path == ".":
            default = os.environ.get("NAMEDEX_DEFAULT_PATH", "").strip()
            if default:
                return default
        return path

    # ==================================================================
    # Tool: goto_file
    # ==================================================================

    @mcp.tool()
    def goto_file(
        pattern: Annotated[
            str,
            Field(description="File name query. Abbreviations work ('GNI' finds 'getNameIdentifier.ts'); '/' adds directory qualifiers ('foo/index' finds 'web/foo/index.html').")
        ],
        path: Annotated[
            str,
            Field(default=".", description="Root directory to search. Defaults to the current working directory.")
        ] = ".",
        context: Annotated[
            str | None,
            Field(default=None, description="File path relative to the root; files in nearby directories rank first among same-named files.")
        ] = None,
        max_results: Annotated[
            int | None,
            Field(default=None, description="Maximum number of results (config default when omitted).")
        ] = None,
    ) -> str:
        """Find files by (possibly abbreviated, possibly qualified) name."""
        items = client.goto_file(pattern, path=_resolve_path(path), context=context,
                                 max_results=max_results, include_separator=True)
        return _to_payload(pattern, items)

    # ==================================================================
    # Tool: goto_symbol
    # ==================================================================

    @mcp.tool()
    def goto_symbol(
        pattern: Annotated[
            str,
            Field(description="Python symbol query. Camel-hump abbreviations work ('NSE' finds 'NameSearchEngine'); '.' adds module/class qualifiers ('core.NSE.filter').")
        ],
        path: Annotated[
            str,
            Field(default=".", description="Root directory whose Python sources to search.")
        ] = ".",
        context: Annotated[
            str | None,
            Field(default=None, description="File path relative to the root used to rank same-named symbols by proximity.")
        ] = None,
        max_results: Annotated[
            int | None,
            Field(default=None, description="Maximum number of results (config default when omitted).")
        ] = None,
    ) -> str:
        """Find Python classes, functions and methods by name."""
        items = client.goto_symbol(pattern, path=_resolve_path(path), context=context,
                                   max_results=max_results, include_separator=True)
        return _to_payload(pattern, items)

    # ==================================================================
    # Tool: health
    # ==================================================================

    @mcp.tool()
    def health() -> str:
        """Server readiness check; does not scan any directory."""
        return json.dumps(client.health())

    return mcp
