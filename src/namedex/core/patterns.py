"""
Namedex Pattern Resolution

Splits a raw query such as ``web/foo/index`` into the *name pattern*
(``index``, matched against short names) and the *qualifier pattern*
(``web/foo``, matched segment by segment against fully qualified names).
"""

import re
from functools import lru_cache
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from namedex.core.matcher import CaseSensitivity, NameMatcher, build_matcher

WILDCARD = "*"


class SubPattern(NamedTuple):
    """One qualifier segment and the matcher built for it."""
    pattern: str
    matcher: NameMatcher


@lru_cache(maxsize=64)
def _separator_regex(separators: Tuple[str, ...]) -> "re.Pattern":
    # Longest first so "::" wins over ":"
    ordered = sorted(set(separators), key=len, reverse=True)
    return re.compile("|".join(re.escape(s) for s in ordered))


def split(text: str, separators: Sequence[str]) -> List[str]:
    """
    Split *text* on every occurrence of any separator, dropping empty tokens.

    Input that yields no tokens comes back as ``[text]`` so that a
    degenerate name never disappears.
    """
    seps = tuple(s for s in separators if s)
    if not seps:
        return [text]
    tokens = [t for t in _separator_regex(seps).split(text) if t]
    return tokens or [text]


def get_name_pattern(pattern: str, separators: Sequence[str]) -> str:
    """Text after the last separator occurrence (whole pattern if none)."""
    cut = 0
    for sep in separators:
        idx = pattern.rfind(sep)
        if idx != -1:
            cut = max(cut, idx + len(sep))
    return pattern[cut:]


def get_qualifier_pattern(pattern: str, separators: Sequence[str]) -> str:
    """Text before the last separator occurrence (empty if none)."""
    cut = 0
    for sep in separators:
        cut = max(cut, pattern.rfind(sep))
    return pattern[:cut]


def resolve(raw_pattern: str, separators: Sequence[str],
            transform: Optional[Callable[[str], str]] = None) -> Tuple[str, str]:
    """
    Return ``(name_pattern, qualifier_pattern)`` for *raw_pattern*.

    *transform* is the search model's pattern transform; it applies to the
    name side only.
    """
    name_source = transform(raw_pattern) if transform else raw_pattern
    return (get_name_pattern(name_source, separators),
            get_qualifier_pattern(raw_pattern, separators))


def build_sub_patterns(qualifier_pattern: str, separators: Sequence[str],
                       search_anywhere: bool = False) -> List[SubPattern]:
    """Build one case-insensitive matcher per qualifier segment."""
    sub_patterns = []
    for token in split(qualifier_pattern, separators):
        name_pattern = get_name_pattern(token, separators)
        if search_anywhere and name_pattern.strip():
            name_pattern = WILDCARD + name_pattern
        sub_patterns.append(SubPattern(
            name_pattern, build_matcher(name_pattern, CaseSensitivity.NONE)))
    return sub_patterns
