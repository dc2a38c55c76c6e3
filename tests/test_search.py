"""
Tests for namedex.core.search — streaming order, separator placement,
consumer stop, cancellation and empty-pattern handling.
"""

import logging

import pytest

from conftest import CountingSource, InterruptibleSource, file_entry

from namedex.core.config import NamedexConfig
from namedex.core.indexer import NameEntry, entry_model
from namedex.core.model import CancellationToken
from namedex.core.search import (
    NON_PREFIX_SEPARATOR,
    NameSearchEngine,
    ResultFormatter,
    SearchState,
)
from namedex.exceptions import InvalidPatternError, SearchCancelledError


def _engine(entries, config=None, source_cls=CountingSource, **model_kwargs):
    source = source_cls(entries)
    return NameSearchEngine(entry_model(source, **model_kwargs), config), source


def _paths(items):
    return ["SEP" if i is NON_PREFIX_SEPARATOR else i.full_name for i in items]


# =============================================================================
# Ranking
# =============================================================================

class TestRanking:
    """Order of delivered candidates."""

    def test_qualifier_next_to_name_ranks_first(self, web_entries):
        engine, _ = _engine(web_entries)
        assert _paths(engine.collect("foo/index")) == [
            "bar/foo/index.html", "foo/bar/index.html",
        ]

    def test_unqualified_pattern_orders_by_full_name(self, web_entries):
        engine, _ = _engine(web_entries)
        assert _paths(engine.collect("index")) == [
            "bar/foo/index.html", "foo/bar/index.html",
        ]

    def test_names_ordered_by_degree(self):
        engine, _ = _engine([file_entry("util_helpers.py"), file_entry("util.py")])
        assert _paths(engine.collect("util.py")) == ["util.py", "util_helpers.py"]

    def test_qualifier_filters_single_candidates(self):
        engine, _ = _engine([file_entry("src/app.py"), file_entry("lib/main.py")])
        assert _paths(engine.collect("src/app")) == ["src/app.py"]
        assert engine.collect("lib/app") == []

    def test_proximity_context(self):
        entries = [file_entry("a/util.py"), file_entry("b/util.py")]
        engine, _ = _engine(entries, context="b/main.py")
        assert _paths(engine.collect("util")) == ["b/util.py", "a/util.py"]
        engine, _ = _engine(entries)
        assert _paths(engine.collect("util")) == ["a/util.py", "b/util.py"]

    def test_self_navigating_stub_after_source(self):
        stub = NameEntry("Foo", "pkg.Foo", "pkg.pyi", kind="class", compiled=True)
        plain = NameEntry("Foo", "pkg.Foo", "pkg.py", kind="class")
        engine, _ = _engine([stub, plain], separators=(".",))
        assert engine.collect("Foo") == [plain, stub]

    def test_missing_full_name_is_skipped(self):
        orphan = NameEntry("orphan.py", None, "orphan.py")
        engine, _ = _engine([orphan, file_entry("lib/orphan.py")])
        assert _paths(engine.collect("orphan")) == ["lib/orphan.py"]

    def test_single_orphan_is_skipped(self):
        engine, _ = _engine([NameEntry("orphan.py", None, "orphan.py")])
        assert engine.collect("orphan") == []

    def test_markup_is_stripped(self):
        engine, _ = _engine([NameEntry("Foo", "pkg.Foo", "pkg.py", kind="class")],
                            separators=(".",), strip_markup=lambda p: p.lstrip("@"))
        assert _paths(engine.collect("@Foo")) == ["pkg.Foo"]


# =============================================================================
# Non-prefix separator
# =============================================================================

class TestSeparator:
    """Prefix matches first, middle matches after the separator."""

    def test_separator_before_middle_names(self):
        entries = [file_entry("xFoo.py"), file_entry("FooBar.py"), file_entry("Foo.py")]
        engine, _ = _engine(entries, NamedexConfig(search_anywhere=True))
        assert _paths(engine.collect("Foo", include_separator=True)) == [
            "Foo.py", "FooBar.py", "SEP", "xFoo.py",
        ]

    def test_separator_hidden_by_default(self):
        entries = [file_entry("xFoo.py"), file_entry("Foo.py")]
        engine, _ = _engine(entries, NamedexConfig(search_anywhere=True))
        assert _paths(engine.collect("Foo")) == ["Foo.py", "xFoo.py"]

    def test_no_separator_without_start_match(self):
        engine, _ = _engine([file_entry("xFoo.py")], NamedexConfig(search_anywhere=True))
        assert _paths(engine.collect("Foo", include_separator=True)) == ["xFoo.py"]

    def test_middle_qualifier_matches_wait_for_separator(self):
        entries = [
            file_entry("src/app/util.py"),
            file_entry("lib/myapp/util.py"),
            file_entry("app/xutil.py"),
        ]
        engine, _ = _engine(entries, NamedexConfig(search_anywhere=True))
        assert _paths(engine.collect("app/util", include_separator=True)) == [
            "src/app/util.py", "SEP", "lib/myapp/util.py", "app/xutil.py",
        ]

    def test_held_back_matches_flushed_at_end(self):
        entries = [file_entry("src/app/util.py"), file_entry("lib/myapp/util.py")]
        engine, _ = _engine(entries, NamedexConfig(search_anywhere=True))
        assert _paths(engine.collect("app/util", include_separator=True)) == [
            "src/app/util.py", "lib/myapp/util.py",
        ]

    def test_separator_emitted_at_most_once(self):
        entries = [file_entry("Foo.py"), file_entry("xFoo.py"), file_entry("yFoo.py")]
        engine, _ = _engine(entries, NamedexConfig(search_anywhere=True))
        items = engine.collect("Foo", include_separator=True)
        assert items.count(NON_PREFIX_SEPARATOR) == 1


# =============================================================================
# Consumer and limits
# =============================================================================

class TestConsumer:
    """The consumer controls how far the search goes."""

    def test_consumer_stop(self):
        entries = [file_entry("Foo.py"), file_entry("FooBar.py")]
        engine, source = _engine(entries)
        seen = []

        def consumer(item):
            seen.append(item)
            return False

        assert engine.filter_elements("Foo", consumer) is False
        assert _paths(seen) == ["Foo.py"]
        assert source.lookups == ["Foo.py"]

    def test_completed_search_returns_true(self):
        engine, _ = _engine([file_entry("Foo.py")])
        assert engine.filter_elements("Foo", lambda item: True) is True
        assert engine.state is SearchState.DONE

    def test_max_results(self):
        entries = [file_entry("Foo.py"), file_entry("FooBar.py"), file_entry("FooBaz.py")]
        engine, source = _engine(entries)
        assert _paths(engine.collect("Foo", max_results=2)) == ["Foo.py", "FooBar.py"]
        assert source.lookups == ["Foo.py", "FooBar.py"]

    def test_rejected_separator_stops_search(self):
        entries = [file_entry("Foo.py"), file_entry("xFoo.py")]
        engine, _ = _engine(entries, NamedexConfig(search_anywhere=True))
        seen = []

        def consumer(item):
            seen.append(item)
            return item is not NON_PREFIX_SEPARATOR

        assert engine.filter_elements("Foo", consumer) is False
        assert _paths(seen) == ["Foo.py", "SEP"]


# =============================================================================
# Empty patterns
# =============================================================================

class TestEmptyPattern:
    """Empty patterns are a caller error unless listing is enabled."""

    def test_empty_pattern_rejected(self):
        engine, source = _engine([file_entry("Foo.py")])
        with pytest.raises(InvalidPatternError):
            engine.collect("")
        assert source.lookups == []

    def test_invalid_pattern_is_value_error(self):
        engine, _ = _engine([file_entry("Foo.py")])
        with pytest.raises(ValueError):
            engine.collect("")

    def test_qualifier_without_name(self):
        engine, source = _engine([file_entry("foo/Foo.py")])
        assert engine.filter_elements("foo/", lambda item: True) is True
        assert source.lookups == []

    def test_listing_enabled(self):
        entries = [file_entry("c.py"), file_entry("B.py"), file_entry("a.py")]
        engine, _ = _engine(entries, NamedexConfig(allow_empty_pattern_listing=True))
        assert _paths(engine.collect("")) == ["a.py", "B.py", "c.py"]


# =============================================================================
# Cancellation
# =============================================================================

class TestCancellation:
    """Cooperative cancellation through a token."""

    def test_cancel_mid_search(self):
        entries = [file_entry("Foo.py"), file_entry("FooBar.py")]
        engine, source = _engine(entries)
        token = CancellationToken()
        seen = []

        def consumer(item):
            seen.append(item)
            token.cancel()
            return True

        with pytest.raises(SearchCancelledError):
            engine.filter_elements("Foo", consumer, token=token)
        assert _paths(seen) == ["Foo.py"]
        assert source.lookups == ["Foo.py"]
        assert engine.state is SearchState.CANCELLED

    def test_pre_cancelled_token(self):
        engine, source = _engine([file_entry("Foo.py")])
        token = CancellationToken()
        token.cancel()
        with pytest.raises(SearchCancelledError):
            engine.collect("Foo", token=token)
        assert source.lookups == []

    def test_cancellation_is_logged(self, caplog):
        engine, _ = _engine([file_entry("Foo.py")])
        token = CancellationToken()
        token.cancel()
        with caplog.at_level(logging.INFO, logger="namedex.core.search"):
            with pytest.raises(SearchCancelledError):
                engine.collect("Foo", token=token)
        assert "cancelled" in caplog.text

    def test_interruptible_source_receives_token(self):
        engine, source = _engine([file_entry("Foo.py"), file_entry("FooBar.py")],
                                 source_cls=InterruptibleSource)
        token = CancellationToken()
        engine.collect("Foo", token=token)
        assert source.tokens == [token, token]

    def test_plain_source_gets_no_token(self):
        engine, source = _engine([file_entry("Foo.py")])
        assert engine.model.interruptible is False
        assert _paths(engine.collect("Foo")) == ["Foo.py"]


# =============================================================================
# Name filtering and options
# =============================================================================

class TestFilterNames:
    """Short-name filtering without candidate lookups."""

    def test_input_order_preserved(self):
        engine, _ = _engine([])
        names = ["zeta", "Foo", "afoo", "fooBar"]
        assert engine.filter_names(names, "foo") == ["Foo", "fooBar"]

    def test_search_anywhere(self):
        engine, _ = _engine([], NamedexConfig(search_anywhere=True))
        assert engine.filter_names(["afoo", "bar"], "foo") == ["afoo"]

    def test_empty_pattern_rejected(self):
        engine, _ = _engine([])
        with pytest.raises(InvalidPatternError):
            engine.filter_names(["foo"], "")

    def test_custom_matching(self):
        engine, _ = _engine([], custom_matcher=lambda name, pattern: name.endswith(pattern))
        assert engine.filter_names(["foo.py", "foo.txt"], ".py") == ["foo.py"]


class TestOptions:
    """Custom matching, case modes and non-project candidates."""

    def test_custom_matching_orders_by_name_without_separator(self):
        entries = [file_entry("xFoo.py"), file_entry("bar.py"), file_entry("Foo.py")]
        engine, _ = _engine(entries, custom_matcher=lambda name, pattern: pattern in name)
        assert _paths(engine.collect("oo", include_separator=True)) == ["Foo.py", "xFoo.py"]

    def test_case_sensitivity_from_config(self):
        entries = [file_entry("GetName.py"), file_entry("getName.py")]
        engine, _ = _engine(entries, NamedexConfig(case_sensitivity="smart"))
        assert _paths(engine.collect("GN")) == ["GetName.py"]

    def test_non_project_candidates(self):
        entries = [file_entry(".venv/util.py", is_project=False), file_entry("src/util.py")]
        engine, _ = _engine(entries)
        assert _paths(engine.collect("util")) == ["src/util.py"]
        assert _paths(engine.collect("util", everywhere=True)) == [
            "src/util.py", ".venv/util.py",
        ]

    def test_include_non_project_from_config(self):
        entries = [file_entry(".venv/extra.py", is_project=False)]
        engine, _ = _engine(entries, NamedexConfig(include_non_project=True))
        assert _paths(engine.collect("extra")) == [".venv/extra.py"]

    def test_engine_is_reusable(self, web_entries):
        engine, _ = _engine(web_entries)
        first = engine.collect("foo/index")
        assert engine.collect("foo/index") == first


# =============================================================================
# Output formatting
# =============================================================================

class TestResultFormatter:
    """Console and JSON rendering."""

    def test_console_no_results(self):
        assert "No results found" in ResultFormatter.format_console([], "zzz")

    def test_console_lists_results_and_divider(self):
        items = [file_entry("Foo.py"), NON_PREFIX_SEPARATOR, file_entry("xFoo.py")]
        out = ResultFormatter.format_console(items, "Foo", elapsed_time=0.5)
        assert "2 results for 'Foo'" in out
        assert "#1" in out and "#2" in out
        assert ResultFormatter.SEPARATOR_LABEL in out

    def test_describe_symbol(self):
        entry = NameEntry("Foo", "pkg.Foo", "pkg.py", line=3, kind="class")
        assert ResultFormatter.describe(entry) == "pkg.Foo  (class, pkg.py:3)"

    def test_json(self):
        import json

        items = [file_entry("Foo.py"), NON_PREFIX_SEPARATOR]
        data = json.loads(ResultFormatter.format_json(items))
        assert data[0]["full_name"] == "Foo.py"
        assert data[1] == {"separator": True}
