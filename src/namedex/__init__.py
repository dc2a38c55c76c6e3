"""
Namedex — incremental fuzzy goto-by-name search.

The ``namedex`` package resolves short, abbreviated, optionally qualified
queries (``foo/index``, ``engine.NSE``) against large sets of names and
streams a deterministic, ranked result order.

Quick start (programmatic API)::

    from namedex import Namedex

    client = Namedex()
    files = client.goto_file("foo/index", path="./web")
    symbols = client.goto_symbol("core.NSE", path="./src")

Quick start (CLI)::

    namedex files foo/index ./web
    namedex symbols "*Engine" ./src --anywhere

Embedding the engine with your own name source::

    from namedex import NameSearchEngine, SearchModel

    engine = NameSearchEngine(SearchModel(source=my_index, full_name=my_fqn))
    engine.filter_elements("pkg/Name", consumer=print_and_continue)
"""

__version__ = "1.0.0"

# Primary public API: the Namedex facade
from namedex.client import Namedex

# Configuration
from namedex.core.config import NamedexConfig

# Engine and the types callers interact with
from namedex.core.indexer import NameEntry
from namedex.core.matcher import CaseSensitivity, MatchResult
from namedex.core.model import CancellationToken, CustomMatching, SearchModel
from namedex.core.search import NON_PREFIX_SEPARATOR, NameSearchEngine

# Exception hierarchy
from namedex.exceptions import (
    ConfigError,
    InvalidPatternError,
    NamedexError,
    NameSourceError,
    SearchCancelledError,
)


def health(config: NamedexConfig | None = None) -> dict:
    """
    Return a small status dict for agents or REST health checks.

    When *config* is None, uses :meth:`NamedexConfig.from_env()` for the snapshot.
    """
    cfg = config or NamedexConfig.from_env()
    return {
        "version": __version__,
        "search_anywhere": cfg.search_anywhere,
        "case_sensitivity": cfg.case_sensitivity,
    }


__all__ = [
    "__version__",
    # Facade
    "Namedex",
    # Config
    "NamedexConfig",
    # Engine and data types
    "NameSearchEngine",
    "SearchModel",
    "CustomMatching",
    "CancellationToken",
    "CaseSensitivity",
    "MatchResult",
    "NameEntry",
    "NON_PREFIX_SEPARATOR",
    # Exceptions
    "NamedexError",
    "ConfigError",
    "InvalidPatternError",
    "NameSourceError",
    "SearchCancelledError",
    # Status
    "health",
]
