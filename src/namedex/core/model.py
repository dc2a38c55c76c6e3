"""
Namedex Search Model

Contracts for the collaborators a search depends on (name source,
full-name accessor, proximity, consumer) and the capability set that
bundles them.  Capabilities are resolved once when a search starts, never
re-inspected per candidate.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, Sequence, Tuple, Union

from namedex.exceptions import SearchCancelledError

#: Receives each result (or the separator sentinel); False stops the search.
Consumer = Callable[[Any], bool]

#: Three-way comparison of two candidates: negative, zero or positive.
CandidateComparator = Callable[[Any, Any], int]


class NameSource(Protocol):
    """Supplies short names and the candidates registered under each."""

    def all_short_names(self, include_non_project: bool) -> Sequence[str]:
        ...

    def candidates_for_short_name(self, name: str, include_non_project: bool,
                                  name_pattern: str) -> Sequence[Any]:
        ...


class InterruptibleNameSource(NameSource, Protocol):
    """
    A name source whose lookups observe cancellation themselves.

    Implementations set ``interruptible = True`` and accept a ``token``
    keyword in :meth:`candidates_for_short_name`.
    """

    interruptible: bool

    def candidates_for_short_name(self, name: str, include_non_project: bool,
                                  name_pattern: str,
                                  token: Optional["CancellationToken"] = None) -> Sequence[Any]:
        ...


@dataclass(frozen=True)
class DefaultMatching:
    """Filter short names with the fuzzy :class:`~namedex.core.matcher.NameMatcher`."""


@dataclass(frozen=True)
class CustomMatching:
    """
    Filter short names with an external ``matches(name, pattern)`` predicate.

    Every accepted name gets degree 0 and counts as a start match, so the
    streamer never emits a prefix/middle separator for such models.
    """
    matches: Callable[[str, str], bool]


MatchingStrategy = Union[DefaultMatching, CustomMatching]


def _identity(pattern: str) -> str:
    return pattern


@dataclass
class SearchModel:
    """
    Capability set for one kind of goto-by-name search.

    Attributes:
        source: Where short names and candidates come from.
        full_name: Fully qualified name of a candidate; None excludes the
            candidate from qualifier matching.
        separators: Strings that split qualified names and qualifiers.
        matching: Default fuzzy matching or a custom predicate.
        proximity: Optional closeness comparator (lower = closer).
        comparator: Optional model-level ordering that replaces the
            proximity/full-name/navigation comparator entirely.
        navigation: For alternate representations (compiled forms, stubs)
            returns the navigable form, which may be the candidate itself;
            returns None for ordinary candidates.
        strip_markup: Removes model-specific markup from the raw pattern.
        transform_pattern: Applied before the name pattern is extracted.
    """

    source: NameSource
    full_name: Callable[[Any], Optional[str]]
    separators: Tuple[str, ...] = ("/",)
    matching: MatchingStrategy = field(default_factory=DefaultMatching)
    proximity: Optional[CandidateComparator] = None
    comparator: Optional[CandidateComparator] = None
    navigation: Optional[Callable[[Any], Any]] = None
    strip_markup: Callable[[str], str] = _identity
    transform_pattern: Callable[[str], str] = _identity

    @property
    def sorted_by_matching_degree(self) -> bool:
        return not isinstance(self.matching, CustomMatching)

    @property
    def interruptible(self) -> bool:
        return bool(getattr(self.source, "interruptible", False))


def strip_class_markup(pattern: str) -> str:
    """Class searches accept an ``@`` prefix (annotation syntax); drop it."""
    return pattern[1:] if pattern.startswith("@") else pattern


class CancellationToken:
    """
    Cooperative cancellation flag shared between a caller and a search.

    The search polls :meth:`check_cancelled`; any thread may call
    :meth:`cancel`.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def check_cancelled(self) -> None:
        """Raise :class:`SearchCancelledError` if cancellation was requested."""
        if self._event.is_set():
            raise SearchCancelledError("Search cancelled")
