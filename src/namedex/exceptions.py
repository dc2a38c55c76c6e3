"""
Namedex Exception Hierarchy

Structured exceptions for clear error handling across CLI, API, and MCP
consumers.  Each exception type maps to a specific failure mode so that
callers can handle errors precisely without parsing message strings.

Usage::

    from namedex.exceptions import NamedexError, SearchCancelledError

    try:
        hits = client.goto_file("foo/index", path="./web")
    except SearchCancelledError:
        print("Search cancelled, partial results kept.")
    except NamedexError as exc:
        print(f"Namedex error: {exc}")
"""


class NamedexError(Exception):
    """Base exception for all Namedex errors."""


class ConfigError(NamedexError, ValueError):
    """Configuration is invalid (e.g. unknown case-sensitivity mode).

    Inherits from ``ValueError`` so callers that already catch
    ``ValueError`` from ``NamedexConfig.validate()`` keep working.
    """


class InvalidPatternError(NamedexError, ValueError):
    """The caller supplied an empty pattern where empty listing is disallowed.

    This is a contract violation by the caller, not an empty search result.
    """


class SearchCancelledError(NamedexError):
    """The search observed a cancellation request and stopped.

    Items already delivered to the consumer stand; nothing is rolled back.
    """


class NameSourceError(NamedexError):
    """A bundled name source cannot read its root (e.g. missing directory)."""
