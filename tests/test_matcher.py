"""
Tests for namedex.core.matcher — camel-hump fuzzy matching and degrees.
"""

import pytest

from namedex.core.matcher import (
    CaseSensitivity,
    MatchResult,
    NameMatcher,
    build_matcher,
    is_word_start,
)


# =============================================================================
# Word starts
# =============================================================================

class TestWordStart:
    """Boundaries that later pattern fragments may jump to."""

    @pytest.mark.parametrize("name,index", [
        ("getName", 0),
        ("getName", 3),       # camel hump
        ("HTMLParser", 4),    # end of an upper-case run
        ("get_name", 4),      # after underscore
        ("file2name", 4),     # digit run
        ("file2name", 5),     # letters after digits
    ])
    def test_word_starts(self, name, index):
        assert is_word_start(name, index)

    @pytest.mark.parametrize("name,index", [
        ("getName", 1),
        ("HTMLParser", 2),
        ("foobar", 3),
        ("get_name", 3),
    ])
    def test_not_word_starts(self, name, index):
        assert not is_word_start(name, index)


# =============================================================================
# Matching
# =============================================================================

class TestMatching:
    """Which names a pattern accepts."""

    def test_camel_hump_abbreviation(self):
        assert build_matcher("GNI").matches("getNameIdentifier")

    def test_upper_case_run_boundary(self):
        assert build_matcher("HP").matches("HTMLParser")

    def test_later_fragment_needs_word_start(self):
        matcher = build_matcher("fb")
        assert not matcher.matches("foobar")
        assert matcher.matches("fooBar")

    def test_plain_prefix(self):
        assert build_matcher("foo").matches("foobar")

    def test_no_middle_match_without_wildcard(self):
        assert not build_matcher("Foo").matches("xyzFoo")

    def test_leading_wildcard_matches_in_the_middle(self):
        matcher = build_matcher("*Foo")
        for name in ("xFoo", "xyzFoo"):
            result = matcher.match(name)
            assert result is not None
            assert result.starts_at_zero is False

    def test_inner_wildcard(self):
        assert build_matcher("g*fier").matches("getNameIdentifier")

    def test_leading_punctuation_is_skipped(self):
        result = build_matcher("foo").match("_foo")
        assert result is not None
        assert result.starts_at_zero is False

    def test_trailing_space_requires_end_of_name(self):
        matcher = build_matcher("foo ")
        assert matcher.matches("foo")
        assert not matcher.matches("foobar")

    def test_empty_pattern_matches_everything(self):
        result = build_matcher("").match("anything.py")
        assert result == MatchResult("anything.py", 0, True)

    def test_none_name_never_matches(self):
        assert build_matcher("foo").match(None) is None

    def test_pattern_longer_than_name(self):
        assert not build_matcher("foobar").matches("foo")


class TestCaseSensitivity:
    """none / smart / exact comparison modes."""

    def test_none_ignores_case(self):
        assert build_matcher("getname", CaseSensitivity.NONE).matches("GetName")

    def test_smart_upper_case_letters_must_match(self):
        matcher = build_matcher("GN", CaseSensitivity.SMART)
        assert matcher.matches("GetName")
        assert not matcher.matches("getName")

    def test_smart_lower_case_letters_match_either(self):
        assert build_matcher("gn", CaseSensitivity.SMART).matches("GetName")

    def test_exact(self):
        matcher = build_matcher("getname", CaseSensitivity.EXACT)
        assert not matcher.matches("getName")
        assert build_matcher("getN", CaseSensitivity.EXACT).matches("getName")

    def test_parse_accepts_strings(self):
        assert CaseSensitivity.parse("SMART") is CaseSensitivity.SMART
        assert CaseSensitivity.parse(CaseSensitivity.EXACT) is CaseSensitivity.EXACT

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            CaseSensitivity.parse("loose")


# =============================================================================
# Degrees
# =============================================================================

class TestMatchingDegree:
    """Relative quality of matches."""

    def test_whole_name_beats_prefix(self):
        matcher = build_matcher("index")
        assert matcher.matching_degree("index") == 117
        assert matcher.matching_degree("index.html") == 102

    def test_contiguous_beats_split(self):
        matcher = build_matcher("ab")
        assert matcher.matching_degree("abc") == 36
        assert matcher.matching_degree("a_bc") == 32

    def test_offset_is_penalised(self):
        assert build_matcher("foo").matching_degree("_foo") == 46

    def test_non_match_has_zero_degree(self):
        assert build_matcher("zzz").matching_degree("foo") == 0

    def test_custom_weights(self):
        matcher = NameMatcher("index", weights={"whole_name": 0})
        assert matcher.matching_degree("index") == 102

    def test_start_match_flag(self):
        assert build_matcher("foo").is_start_match("fooBar")
        assert not build_matcher("*Bar").is_start_match("fooBar")
        assert not build_matcher("zzz").is_start_match("fooBar")

    def test_match_is_repeatable(self):
        matcher = build_matcher("GNI")
        assert matcher.match("getNameIdentifier") == matcher.match("getNameIdentifier")


# =============================================================================
# MatchResult ordering
# =============================================================================

class TestMatchResultOrder:
    """Start matches first, then degree, then name."""

    def test_sort_order(self):
        results = [
            MatchResult("zeta", 10, False),
            MatchResult("beta", 5, True),
            MatchResult("Alpha", 5, True),
            MatchResult("gamma", 50, True),
        ]
        assert [r.name for r in sorted(results)] == ["gamma", "Alpha", "beta", "zeta"]

    def test_sort_is_idempotent(self):
        results = [MatchResult("b", 1, True), MatchResult("a", 1, True),
                   MatchResult("c", 9, False)]
        once = sorted(results)
        assert sorted(once) == once

    def test_case_variants_stay_distinct(self):
        upper, lower = MatchResult("Foo", 1, True), MatchResult("foo", 1, True)
        assert upper < lower
        assert not lower < upper
