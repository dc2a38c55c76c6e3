"""
Namedex Core — matching, qualifier scoring, result streaming and name sources.

Re-exports the primary classes for convenience::

    from namedex.core import NameSearchEngine, SearchModel, build_matcher
"""

from namedex.core.config import NamedexConfig
from namedex.core.indexer import (
    FileNameSource,
    InMemoryNameSource,
    NameEntry,
    PathProximity,
    SymbolNameSource,
    entry_model,
)
from namedex.core.matcher import CaseSensitivity, MatchResult, NameMatcher, build_matcher
from namedex.core.model import (
    CancellationToken,
    CustomMatching,
    DefaultMatching,
    NameSource,
    SearchModel,
)
from namedex.core.patterns import build_sub_patterns, resolve, split
from namedex.core.scoring import PathProximityComparator, ScoredCandidate, match_qualifier
from namedex.core.search import NON_PREFIX_SEPARATOR, NameSearchEngine, SearchState

__all__ = [
    "NamedexConfig",
    "FileNameSource",
    "InMemoryNameSource",
    "NameEntry",
    "PathProximity",
    "SymbolNameSource",
    "entry_model",
    "CaseSensitivity",
    "MatchResult",
    "NameMatcher",
    "build_matcher",
    "CancellationToken",
    "CustomMatching",
    "DefaultMatching",
    "NameSource",
    "SearchModel",
    "build_sub_patterns",
    "resolve",
    "split",
    "PathProximityComparator",
    "ScoredCandidate",
    "match_qualifier",
    "NON_PREFIX_SEPARATOR",
    "NameSearchEngine",
    "SearchState",
]
