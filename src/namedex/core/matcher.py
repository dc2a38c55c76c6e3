"""
Namedex Pattern Matcher

Camel-hump aware fuzzy matching of a name pattern against candidate names.

A pattern is split into *fragments* of consecutive candidate characters.
The first fragment must start at the beginning of the candidate (leading
punctuation such as ``_`` may be skipped); every later fragment must start
on a word boundary.  So ``GNI`` matches ``getNameIdentifier`` and
``nameId`` matches ``getNameIdentifier`` only with a leading ``*``.

Pattern syntax:

- ``*`` matches any run of characters; a leading ``*`` lets the match
  begin anywhere in the candidate.
- a space breaks the current fragment; the next character must start a
  word.  A trailing space requires the match to reach the end of the name.

Matchers are immutable and pure: the same candidate always yields the same
result, so one matcher can be shared by every lookup of an invocation.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Gap markers attached to pattern characters
_CONTINUE = 0   # may extend the previous fragment or start a new word
_WORD = 1       # must start a new fragment on a word start
_ANY = 2        # may start a new fragment anywhere

# Fragment lengths are squared, so one long run beats several word starts
DEFAULT_WEIGHTS: Dict[str, int] = {
    "fragment": 3,
    "word_start": 2,
    "exact_case": 1,
    "start_match": 20,
    "whole_name": 15,
    "offset_penalty": 1,
}


class CaseSensitivity(str, Enum):
    """How pattern letters compare against candidate letters."""

    NONE = "none"
    SMART = "smart"   # upper-case pattern letters must match upper case
    EXACT = "exact"

    @classmethod
    def parse(cls, value) -> "CaseSensitivity":
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


@dataclass(frozen=True)
class MatchResult:
    """
    A name that matched a pattern.

    Sorts start matches first, then by descending matching degree, then
    case-insensitively by name.  The raw name is the last key so that two
    distinct results never compare as equal.
    """

    name: str
    matching_degree: int
    starts_at_zero: bool

    def sort_key(self) -> Tuple[bool, int, str, str]:
        return (not self.starts_at_zero, -self.matching_degree,
                self.name.lower(), self.name)

    def __lt__(self, other: "MatchResult") -> bool:
        if not isinstance(other, MatchResult):
            return NotImplemented
        return self.sort_key() < other.sort_key()


def is_word_start(name: str, index: int) -> bool:
    """True if *index* begins a word (camel hump, letter run or digit run)."""
    if index == 0:
        return True
    prev, cur = name[index - 1], name[index]
    if cur.isupper():
        if not prev.isupper():
            return True
        # "HTMLParser": the P starts a word because a lower-case letter follows
        return index + 1 < len(name) and name[index + 1].islower()
    if cur.isalpha():
        return not prev.isalpha()
    if cur.isdigit():
        return not prev.isdigit()
    return False


class NameMatcher:
    """Reusable fuzzy matcher bound to one pattern."""

    def __init__(self, pattern: str,
                 case_sensitivity: CaseSensitivity = CaseSensitivity.NONE,
                 weights: Optional[Dict[str, int]] = None):
        self._pattern = pattern
        self._case = CaseSensitivity.parse(case_sensitivity)
        self._weights = dict(DEFAULT_WEIGHTS)
        if weights:
            self._weights.update(weights)
        self._chars, self._gaps, self._must_end = self._parse(pattern)

    @property
    def pattern(self) -> str:
        return self._pattern

    def __repr__(self) -> str:
        return f"NameMatcher({self._pattern!r}, {self._case.value})"

    # ── Public API ───────────────────────────────────────────────

    def matches(self, name: str) -> bool:
        return self._align(name) is not None

    def matching_degree(self, name: str) -> int:
        """Quality of the match; only meaningful when :meth:`matches` is True."""
        fragments = self._align(name)
        if fragments is None:
            return 0
        return self._degree(name, fragments)

    def is_start_match(self, name: str) -> bool:
        fragments = self._align(name)
        return fragments is not None and self._starts_at_zero(fragments)

    def match(self, name: str) -> Optional[MatchResult]:
        """Align once and return the full :class:`MatchResult`, or None."""
        fragments = self._align(name)
        if fragments is None:
            return None
        return MatchResult(name, self._degree(name, fragments),
                           self._starts_at_zero(fragments))

    # ── Pattern parsing ──────────────────────────────────────────

    @staticmethod
    def _parse(pattern: str) -> Tuple[str, List[int], bool]:
        chars: List[str] = []
        gaps: List[int] = []
        pending = _CONTINUE
        for ch in pattern:
            if ch == "*":
                pending = _ANY
            elif ch == " ":
                # Leading spaces carry no meaning
                if chars and pending != _ANY:
                    pending = _WORD
            else:
                chars.append(ch)
                gaps.append(pending)
                pending = _CONTINUE
        must_end = bool(chars) and pattern.endswith(" ")
        return "".join(chars), gaps, must_end

    # ── Alignment ────────────────────────────────────────────────

    def _chars_match(self, pc: str, nc: str) -> bool:
        if self._case is CaseSensitivity.EXACT:
            return pc == nc
        if self._case is CaseSensitivity.SMART and pc.isupper():
            return pc == nc
        return pc.lower() == nc.lower()

    def _may_start(self, name: str, p: int, s: int) -> bool:
        """Can pattern character *p* open a fragment at name index *s*?"""
        gap = self._gaps[p]
        if p == 0:
            if gap == _ANY:
                return True
            # Only leading punctuation may be skipped
            return not any(c.isalnum() for c in name[:s])
        if gap == _ANY:
            return True
        return is_word_start(name, s) or not self._chars[p].isalnum()

    def _align(self, name: str) -> Optional[List[Tuple[int, int]]]:
        """Return (start, length) fragments of the leftmost-longest match."""
        if name is None:
            return None
        chars = self._chars
        if not chars:
            return []
        if len(chars) > len(name):
            return None

        memo: Dict[Tuple[int, int], Optional[List[Tuple[int, int]]]] = {}

        def fragments_from(p: int, lo: int) -> Optional[List[Tuple[int, int]]]:
            key = (p, lo)
            if key in memo:
                return memo[key]
            result = None
            for s in range(lo, len(name) - (len(chars) - p) + 1):
                if not self._chars_match(chars[p], name[s]):
                    continue
                if not self._may_start(name, p, s):
                    continue
                run = 1
                while (p + run < len(chars) and s + run < len(name)
                       and self._gaps[p + run] == _CONTINUE
                       and self._chars_match(chars[p + run], name[s + run])):
                    run += 1
                for length in range(run, 0, -1):
                    end = s + length
                    if p + length == len(chars):
                        if self._must_end and end != len(name):
                            continue
                        result = [(s, length)]
                        break
                    rest = fragments_from(p + length, end)
                    if rest is not None:
                        result = [(s, length)] + rest
                        break
                if result is not None:
                    break
            memo[key] = result
            return result

        return fragments_from(0, 0)

    # ── Scoring ──────────────────────────────────────────────────

    @staticmethod
    def _starts_at_zero(fragments: List[Tuple[int, int]]) -> bool:
        return not fragments or fragments[0][0] == 0

    def _degree(self, name: str, fragments: List[Tuple[int, int]]) -> int:
        if not fragments:
            return 0
        w = self._weights
        degree = 0
        p = 0
        for start, length in fragments:
            degree += w["fragment"] * length * length
            if is_word_start(name, start):
                degree += w["word_start"]
            for k in range(length):
                if self._chars[p + k] == name[start + k]:
                    degree += w["exact_case"]
            p += length
        first_start = fragments[0][0]
        if first_start == 0:
            degree += w["start_match"]
        last_start, last_length = fragments[-1]
        if last_start + last_length == len(name):
            degree += w["whole_name"]
        degree -= w["offset_penalty"] * first_start
        return degree


def build_matcher(pattern: str,
                  case_sensitivity=CaseSensitivity.NONE,
                  weights: Optional[Dict[str, int]] = None) -> NameMatcher:
    """Build a :class:`NameMatcher` for *pattern*."""
    return NameMatcher(pattern, case_sensitivity, weights)
