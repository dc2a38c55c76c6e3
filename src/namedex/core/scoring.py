"""
Namedex Qualifier Scoring

Ranks candidates that share a short name.  Each qualifier segment of the
query must match a segment of the candidate's fully qualified name, in
order; every path segment skipped along the way costs a quadratic
penalty, so ``foo/index`` prefers ``bar/foo/index.html`` (qualifier hit
right next to the name) over ``foo/bar/index.html``.
"""

import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, List, Optional, Sequence, Tuple

from namedex.core.model import CandidateComparator, SearchModel
from namedex.core.patterns import SubPattern, split

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate whose qualifier aligned, with its cumulative score."""

    candidate: Any
    full_name: str
    matching_degree: int
    starts_at_zero: bool

    def rank_key(self) -> Tuple[bool, int]:
        """Start matches first, then higher score; ties keep their order."""
        return (not self.starts_at_zero, -self.matching_degree)


def skip_penalty(index: int) -> int:
    """Cost of skipping the segment at *index*."""
    return (index + 1) * (index + 1)


def match_qualifier(candidate: Any, full_name: Optional[str],
                    separators: Sequence[str],
                    sub_patterns: Sequence[SubPattern]) -> Optional[ScoredCandidate]:
    """
    Align *sub_patterns* against the segments of *full_name*.

    The last segment is the candidate's own name and never takes part.
    Returns None when the full name is missing or a sub-pattern cannot be
    placed after the previous one.
    """
    if full_name is None:
        return None

    segments = split(full_name, separators)
    name_index = len(segments) - 1
    degree = 0
    position = 0
    start_match = True

    for sub in sub_patterns:
        if not sub.pattern:
            continue
        for j in range(position, name_index):
            hit = sub.matcher.match(segments[j])
            if hit is not None:
                degree += hit.matching_degree
                start_match = start_match and hit.starts_at_zero
                position = j + 1
                break
            degree -= skip_penalty(j)
        else:
            return None

    # Trailing path parts between the last hit and the name
    for j in range(position, name_index):
        degree -= skip_penalty(j)

    return ScoredCandidate(candidate, full_name, degree, start_match)


def _compare_names(a: Optional[str], b: Optional[str]) -> int:
    # Missing names sort first
    if a == b:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    return -1 if a < b else 1


class PathProximityComparator:
    """
    Orders same-named candidates: closest first, then by full name, then
    alternate representations with a separate navigable form before those
    that only navigate to themselves.
    """

    def __init__(self, full_name: Callable[[Any], Optional[str]],
                 proximity: Optional[CandidateComparator] = None,
                 navigation: Optional[Callable[[Any], Any]] = None):
        self._full_name = full_name
        self._proximity = proximity
        self._navigation = navigation

    def _navigation_weight(self, candidate: Any) -> int:
        if self._navigation is None:
            return 0
        return 1 if self._navigation(candidate) is candidate else 0

    def __call__(self, a: Any, b: Any) -> int:
        if self._proximity is not None:
            rc = self._proximity(a, b)
            if rc != 0:
                return rc
        rc = _compare_names(self._full_name(a), self._full_name(b))
        if rc != 0:
            return rc
        return self._navigation_weight(a) - self._navigation_weight(b)


def sort_by_proximity(model: SearchModel,
                      scored: List[ScoredCandidate]) -> List[ScoredCandidate]:
    """Sort with the model's own comparator if it has one, else by proximity."""
    comparator = model.comparator or PathProximityComparator(
        model.full_name, model.proximity, model.navigation)
    return sorted(scored, key=cmp_to_key(
        lambda a, b: comparator(a.candidate, b.candidate)))
