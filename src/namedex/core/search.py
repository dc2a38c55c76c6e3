"""
Namedex Search Engine

Streams goto-by-name results to a consumer in two ranked passes:

1. short names are fuzzy-matched and sorted (start matches first, then by
   matching degree); for each name the candidates are fetched, filtered and
   scored by qualifier, ordered by proximity, and the start matches are
   delivered immediately;
2. candidates whose qualifier only matched mid-segment are held back and
   delivered after a :data:`NON_PREFIX_SEPARATOR`, the first time a
   non-start result follows a start result, and once more at the end.

The consumer can stop the search at any time by returning False, and the
caller can cancel it through a :class:`~namedex.core.model.CancellationToken`.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from namedex.core.config import NamedexConfig
from namedex.core.matcher import MatchResult, build_matcher
from namedex.core.model import (
    CancellationToken, Consumer, CustomMatching, SearchModel,
)
from namedex.core.patterns import WILDCARD, build_sub_patterns, resolve
from namedex.core.scoring import ScoredCandidate, match_qualifier, sort_by_proximity
from namedex.exceptions import InvalidPatternError, SearchCancelledError

logger = logging.getLogger(__name__)


class _NonPrefixSeparator:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NON_PREFIX_SEPARATOR"


#: Delivered between prefix matches and the middle matches that follow them.
NON_PREFIX_SEPARATOR = _NonPrefixSeparator()


class SearchState(str, Enum):
    IDLE = "idle"
    MATCHING = "matching"
    GROUPING = "grouping"
    EMITTING = "emitting"
    DONE = "done"
    CANCELLED = "cancelled"


class NameSearchEngine:
    """
    Goto-by-name search over one :class:`SearchModel`.

    An engine may be reused for many searches; each call to
    :meth:`filter_elements` builds its own matchers and buffers.  Only
    :attr:`state` reflects the most recent search, so concurrent searches
    should use separate engines.
    """

    def __init__(self, model: SearchModel, config: NamedexConfig | None = None):
        self._model = model
        self._config = config or NamedexConfig()
        self._state = SearchState.IDLE

    @property
    def model(self) -> SearchModel:
        return self._model

    @property
    def state(self) -> SearchState:
        return self._state

    def _set_state(self, state: SearchState) -> None:
        if state is not self._state:
            logger.debug(f"Search state {self._state.value} -> {state.value}")
            self._state = state

    # ── Public API ────────────────────────────────────────────────

    def filter_elements(self, pattern: str, consumer: Consumer,
                        token: Optional[CancellationToken] = None,
                        everywhere: Optional[bool] = None) -> bool:
        """
        Stream the candidates matching *pattern* to *consumer*.

        Args:
            pattern: Raw query, optionally qualified (``foo/index``).
            consumer: Called with each candidate or :data:`NON_PREFIX_SEPARATOR`;
                returning False stops the search.
            token: Cancellation token polled between groups and lookups.
            everywhere: Include non-project candidates; defaults to the
                config's ``include_non_project``.

        Returns:
            True if the search ran to completion, False if the consumer
            stopped it.

        Raises:
            InvalidPatternError: *pattern* is empty and the config
                disallows listing everything.
            SearchCancelledError: *token* was cancelled; results already
                delivered stand.
        """
        token = token or CancellationToken()
        if everywhere is None:
            everywhere = self._config.include_non_project
        self._set_state(SearchState.IDLE)
        try:
            completed = self._filter(pattern, consumer, token, everywhere)
        except SearchCancelledError:
            self._set_state(SearchState.CANCELLED)
            logger.info(f"Search '{pattern}' cancelled")
            raise
        self._set_state(SearchState.DONE)
        return completed

    def filter_names(self, names: Sequence[str], pattern: str) -> List[str]:
        """Return the *names* matching *pattern*, in input order."""
        pattern = self._model.strip_markup(pattern)
        name_filter = self._name_filter(self._matching_pattern(pattern))
        return [name for name in names if name_filter(name) is not None]

    def collect(self, pattern: str, max_results: Optional[int] = None,
                token: Optional[CancellationToken] = None,
                everywhere: Optional[bool] = None,
                include_separator: bool = False) -> List[Any]:
        """
        Run a search and return the delivered items as a list.

        Stops after *max_results* candidates (the separator does not count).
        """
        items: List[Any] = []
        found = 0

        def consumer(item: Any) -> bool:
            nonlocal found
            if item is NON_PREFIX_SEPARATOR:
                if include_separator:
                    items.append(item)
                return True
            items.append(item)
            found += 1
            return max_results is None or found < max_results

        self.filter_elements(pattern, consumer, token=token, everywhere=everywhere)
        return items

    # ── Pattern preparation ───────────────────────────────────────

    def _matching_pattern(self, pattern: str) -> str:
        if not pattern and not self._config.allow_empty_pattern_listing:
            raise InvalidPatternError(
                "Empty name pattern while empty-pattern listing is disabled"
            )
        if self._config.search_anywhere and pattern.strip():
            pattern = WILDCARD + pattern
        return pattern

    def _name_filter(self, matching_pattern: str) -> Callable[[str], Optional[MatchResult]]:
        """Resolve the matching capability once for this search."""
        strategy = self._model.matching
        if isinstance(strategy, CustomMatching):
            def custom(name: str) -> Optional[MatchResult]:
                if name is None or not strategy.matches(name, matching_pattern):
                    return None
                return MatchResult(name, 0, True)
            return custom

        matcher = build_matcher(matching_pattern, self._config.case_sensitivity,
                                self._config.matching_weights)
        return matcher.match

    def _lookup(self, token: CancellationToken) -> Callable[[str, bool, str], Sequence[Any]]:
        source = self._model.source
        if self._model.interruptible:
            return lambda name, everywhere, name_pattern: source.candidates_for_short_name(
                name, everywhere, name_pattern, token=token)
        return source.candidates_for_short_name

    # ── Streaming ─────────────────────────────────────────────────

    def _filter(self, pattern: str, consumer: Consumer,
                token: CancellationToken, everywhere: bool) -> bool:
        model = self._model
        raw = model.strip_markup(pattern)
        if not raw and not self._config.allow_empty_pattern_listing:
            raise InvalidPatternError(
                "Empty pattern while empty-pattern listing is disabled"
            )

        name_pattern, qualifier_pattern = resolve(
            raw, model.separators, model.transform_pattern)
        if not name_pattern and not self._config.allow_empty_pattern_listing:
            # "foo/" names a qualifier only: nothing to list, not an error
            logger.debug(f"Pattern '{pattern}' has no name part; nothing to search")
            return True

        self._set_state(SearchState.MATCHING)
        name_filter = self._name_filter(self._matching_pattern(name_pattern))
        names: List[MatchResult] = []
        for name in model.source.all_short_names(everywhere):
            token.check_cancelled()
            result = name_filter(name)
            if result is not None:
                names.append(result)
        names.sort()
        token.check_cancelled()
        logger.debug(f"Pattern '{pattern}': {len(names)} matching short names")

        sub_patterns = build_sub_patterns(
            qualifier_pattern, model.separators, self._config.search_anywhere)
        lookup = self._lookup(token)
        sorted_by_degree = model.sorted_by_matching_degree
        middle_matched: List[Any] = []
        after_start_match = False

        for result in names:
            token.check_cancelled()
            self._set_state(SearchState.GROUPING)
            need_separator = (sorted_by_degree and not result.starts_at_zero
                              and after_start_match)

            candidates = lookup(result.name, everywhere, name_pattern)
            token.check_cancelled()

            if len(candidates) > 1:
                group: List[ScoredCandidate] = []
                for candidate in candidates:
                    token.check_cancelled()
                    scored = match_qualifier(candidate, model.full_name(candidate),
                                             model.separators, sub_patterns)
                    if scored is not None:
                        group.append(scored)
                group = sort_by_proximity(model, group)
                group.sort(key=ScoredCandidate.rank_key)

                for scored in group:
                    if not scored.starts_at_zero:
                        middle_matched.append(scored.candidate)
                        continue
                    if need_separator and not self._flush_middle(
                            consumer, middle_matched, separator=True):
                        return False
                    if not self._emit(consumer, scored.candidate):
                        return False
                    need_separator = False
                    after_start_match = result.starts_at_zero

            elif len(candidates) == 1:
                candidate = candidates[0]
                if match_qualifier(candidate, model.full_name(candidate),
                                   model.separators, sub_patterns) is None:
                    continue
                if need_separator and not self._flush_middle(
                        consumer, middle_matched, separator=True):
                    return False
                if not self._emit(consumer, candidate):
                    return False
                after_start_match = result.starts_at_zero

        return self._flush_middle(consumer, middle_matched, separator=False)

    def _emit(self, consumer: Consumer, item: Any) -> bool:
        self._set_state(SearchState.EMITTING)
        return bool(consumer(item))

    def _flush_middle(self, consumer: Consumer, middle_matched: List[Any],
                      separator: bool) -> bool:
        """Deliver the held-back middle matches, optionally after the separator."""
        if separator and not self._emit(consumer, NON_PREFIX_SEPARATOR):
            return False
        for item in middle_matched:
            if not self._emit(consumer, item):
                return False
        middle_matched.clear()
        return True


# =============================================================================
# Output Formatting
# =============================================================================

class ResultFormatter:
    """Format delivered search items for console and JSON output."""

    SEPARATOR_LABEL = "non-prefix matches"

    @staticmethod
    def describe(item: Any) -> str:
        """One-line rendering of a candidate."""
        full_name = getattr(item, "full_name", None)
        if full_name is None:
            return str(item)
        kind = getattr(item, "kind", "")
        if kind in ("", "file"):
            return full_name
        line = getattr(item, "line", 0)
        path = getattr(item, "path", "")
        location = f"{path}:{line}" if line else path
        return f"{full_name}  ({kind}, {location})"

    @staticmethod
    def format_console(items: List[Any], pattern: str,
                       elapsed_time: float | None = None) -> str:
        """Numbered list with a divider where middle matches begin."""
        results = [i for i in items if i is not NON_PREFIX_SEPARATOR]
        if not results:
            return "\n  No results found.\n"

        import shutil
        width = min(shutil.get_terminal_size().columns, 78)
        thin = "─" * width

        header = f"  NAMEDEX — {len(results)} result{'s' if len(results) != 1 else ''} for '{pattern}'"
        if elapsed_time is not None:
            timing_str = f"{elapsed_time:.4f}".replace(',', '.')
            header += f" in {timing_str} seconds"

        out: List[str] = [f"\n{thin}", header, thin]
        idx = 0
        for item in items:
            if item is NON_PREFIX_SEPARATOR:
                label = f" {ResultFormatter.SEPARATOR_LABEL} "
                out.append(f"  {label:┄^{width - 4}}")
                continue
            idx += 1
            out.append(f"  #{idx:<3} {ResultFormatter.describe(item)}")
        out.append(thin)
        return "\n".join(out)

    @staticmethod
    def format_json(items: List[Any]) -> str:
        """JSON list of candidates; the separator becomes ``{"separator": true}``."""
        import json

        def _to_obj(item: Any) -> dict:
            if item is NON_PREFIX_SEPARATOR:
                return {"separator": True}
            if hasattr(item, "to_dict"):
                return item.to_dict()
            return {"name": str(item)}

        return json.dumps([_to_obj(i) for i in items], indent=2)
