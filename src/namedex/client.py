"""
Namedex Client Facade

Single entry point for programmatic use of Namedex.  Wraps name-source
construction and goto-by-name search behind an instance-based API with
optional async support.

Usage::

    from namedex import Namedex

    client = Namedex()

    # Files: "foo/index" prefers web/foo/index.html over foo/bar/index.html
    for entry in client.goto_file("foo/index", path="./web"):
        print(entry.full_name)

    # Python symbols, camel-hump abbreviations and dotted qualifiers
    hits = client.goto_symbol("engine.NSE", path="./src")

    # Async variants (for FastAPI / Django async views)
    hits = await client.agoto_file("foo/index", path="./web")
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Tuple

from namedex.core.config import NamedexConfig
from namedex.core.indexer import (
    FileNameSource, InMemoryNameSource, NameEntry, SymbolNameSource, entry_model,
)
from namedex.core.model import CancellationToken, SearchModel, strip_class_markup
from namedex.core.search import NameSearchEngine

logger = logging.getLogger(__name__)


class Namedex:
    """
    High-level Namedex client.

    Each instance carries its own :class:`NamedexConfig` and never touches
    global state.  Name sources are built once per directory and reused
    until :meth:`refresh` is called.

    Args:
        config: Explicit configuration object.  When *None*, a config is
            built from environment variables plus keyword overrides.
        **kwargs: Forwarded to :meth:`NamedexConfig.with_overrides` when
            *config* is ``None`` (e.g. ``search_anywhere=True``).
    """

    def __init__(self, config: NamedexConfig | None = None, **kwargs):
        if config is not None:
            self._config = config
        else:
            self._config = NamedexConfig.from_env().with_overrides(**kwargs)
        self._config.validate()
        self._sources: Dict[Tuple[str, Path], InMemoryNameSource] = {}

    @property
    def config(self) -> NamedexConfig:
        """The active configuration for this client."""
        return self._config

    # ── Search ────────────────────────────────────────────────────

    def goto(
        self,
        model: SearchModel,
        pattern: str,
        *,
        max_results: int | None = None,
        token: CancellationToken | None = None,
        include_separator: bool = False,
        config: NamedexConfig | None = None,
    ) -> List[Any]:
        """
        Run a goto-by-name search over any :class:`SearchModel`.

        Returns the delivered candidates in ranked order, at most
        *max_results* of them (default from config).

        Raises:
            InvalidPatternError: Empty pattern with empty listing disabled.
            SearchCancelledError: *token* was cancelled mid-search.
        """
        config = config or self._config
        engine = NameSearchEngine(model, config)
        limit = max_results or config.max_results
        return engine.collect(pattern, max_results=limit, token=token,
                              include_separator=include_separator)

    def goto_names(
        self,
        entries: Iterable[NameEntry],
        pattern: str,
        *,
        context: str | None = None,
        max_results: int | None = None,
    ) -> List[NameEntry]:
        """Search an explicit list of entries using the configured separators."""
        model = entry_model(InMemoryNameSource(entries),
                            separators=self._config.separators, context=context)
        return self.goto(model, pattern, max_results=max_results)

    def goto_file(
        self,
        pattern: str,
        *,
        path: str | Path = ".",
        context: str | None = None,
        max_results: int | None = None,
        token: CancellationToken | None = None,
        include_separator: bool = False,
    ) -> List[Any]:
        """
        Find files under *path* by name, e.g. ``foo/index`` or ``*Views``.

        Args:
            pattern: Query; ``/`` separates qualifier segments.
            path: Root directory to search.
            context: File (relative to *path*) whose neighbours rank first.
            max_results: Maximum hits to return.
            token: Cancellation token.
            include_separator: Keep the non-prefix separator in the result.

        Raises:
            NameSourceError: If *path* is not a directory.
        """
        source = self._source("files", path)
        model = entry_model(source, separators=FileNameSource.separators,
                            context=context)
        return self.goto(model, pattern, max_results=max_results, token=token,
                         include_separator=include_separator)

    def goto_symbol(
        self,
        pattern: str,
        *,
        path: str | Path = ".",
        context: str | None = None,
        max_results: int | None = None,
        token: CancellationToken | None = None,
        include_separator: bool = False,
    ) -> List[Any]:
        """
        Find Python classes, functions and methods under *path*.

        ``.`` separates qualifier segments (``engine.Search.filter``); a
        leading ``@`` is accepted and ignored.

        Raises:
            NameSourceError: If *path* is not a directory.
        """
        source = self._source("symbols", path)
        model = entry_model(source, separators=SymbolNameSource.separators,
                            context=context, strip_markup=strip_class_markup)
        return self.goto(model, pattern, max_results=max_results, token=token,
                         include_separator=include_separator)

    def refresh(self, path: str | Path | None = None) -> None:
        """Drop cached name sources (all, or only those for *path*)."""
        if path is None:
            self._sources.clear()
            return
        root = Path(path).resolve()
        for key in [k for k in self._sources if k[1] == root]:
            del self._sources[key]

    # ── Async variants ────────────────────────────────────────────
    # These run the sync search in a worker thread via asyncio.to_thread()
    # and raise the same exceptions.

    async def agoto_file(self, pattern: str, **kwargs) -> List[Any]:
        """Async variant of :meth:`goto_file`."""
        return await asyncio.to_thread(self.goto_file, pattern, **kwargs)

    async def agoto_symbol(self, pattern: str, **kwargs) -> List[Any]:
        """Async variant of :meth:`goto_symbol`."""
        return await asyncio.to_thread(self.goto_symbol, pattern, **kwargs)

    # ── Health (for agents / status endpoints) ─────────────────────

    def health(self) -> Dict[str, object]:
        """Return a small status dict; does not touch the filesystem."""
        from namedex import __version__

        return {
            "version": __version__,
            "search_anywhere": self._config.search_anywhere,
            "case_sensitivity": self._config.case_sensitivity,
            "cached_sources": len(self._sources),
        }

    # ── Internal helpers ──────────────────────────────────────────

    def _source(self, kind: str, path: str | Path) -> InMemoryNameSource:
        """Return a cached name source of *kind* for *path*."""
        root = Path(path).resolve()
        key = (kind, root)
        if key not in self._sources:
            factory: Callable[..., InMemoryNameSource] = (
                FileNameSource if kind == "files" else SymbolNameSource
            )
            self._sources[key] = factory(root, config=self._config)
        return self._sources[key]


__all__ = ["Namedex"]
