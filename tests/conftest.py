"""
Shared fixtures for the Namedex test suite.
"""

import sys
from pathlib import Path
from typing import Iterable, List, Optional

import pytest

# Ensure the src/ directory is on the import path so that
# namedex.core.* can be imported without installing the package.
SRC_ROOT = Path(__file__).resolve().parent.parent / "src"
sys.path.insert(0, str(SRC_ROOT))

from namedex.core.indexer import InMemoryNameSource, NameEntry  # noqa: E402


def file_entry(path: str, is_project: bool = True) -> NameEntry:
    """A file entry whose full name is its path."""
    return NameEntry(
        short_name=path.rsplit("/", 1)[-1],
        full_name=path,
        path=path,
        is_project=is_project,
    )


class CountingSource(InMemoryNameSource):
    """In-memory name source that records every candidate lookup."""

    def __init__(self, entries: Iterable[NameEntry] = ()):
        super().__init__(entries)
        self.lookups: List[str] = []

    def candidates_for_short_name(self, name, include_non_project, name_pattern=""):
        self.lookups.append(name)
        return super().candidates_for_short_name(name, include_non_project, name_pattern)


class InterruptibleSource(CountingSource):
    """Name source that takes the cancellation token in its lookups."""

    interruptible = True

    def __init__(self, entries: Iterable[NameEntry] = ()):
        super().__init__(entries)
        self.tokens: List[Optional[object]] = []

    def candidates_for_short_name(self, name, include_non_project, name_pattern="",
                                  token=None):
        self.tokens.append(token)
        return super().candidates_for_short_name(name, include_non_project, name_pattern)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def web_entries() -> List[NameEntry]:
    """Two index.html files that differ only in where 'foo' sits."""
    return [
        file_entry("foo/bar/index.html"),
        file_entry("bar/foo/index.html"),
        file_entry("bar/readme.md"),
    ]


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """
    A small project tree with Python sources, a stub, a virtualenv and an
    excluded cache directory.
    """
    pkg = tmp_path / "shop"
    pkg.mkdir()
    (pkg / "__init__.py").write_text("", encoding="utf-8")
    (pkg / "orders.py").write_text(
        "class OrderService:\n"
        "    def place_order(self, order):\n"
        "        return order\n"
        "\n"
        "    async def cancel_order(self, order_id):\n"
        "        return None\n"
        "\n"
        "\n"
        "def get_name_identifier(order):\n"
        "    return order.id\n",
        encoding="utf-8",
    )
    (pkg / "orders.pyi").write_text(
        "class OrderService:\n"
        "    def place_order(self, order): ...\n",
        encoding="utf-8",
    )
    (pkg / "broken.py").write_text("def broken(\n", encoding="utf-8")

    web = tmp_path / "web"
    (web / "foo" / "bar").mkdir(parents=True)
    (web / "bar" / "foo").mkdir(parents=True)
    (web / "foo" / "bar" / "index.html").write_text("<html/>", encoding="utf-8")
    (web / "bar" / "foo" / "index.html").write_text("<html/>", encoding="utf-8")

    venv = tmp_path / ".venv" / "lib"
    venv.mkdir(parents=True)
    (venv / "orders.py").write_text("def place_order():\n    pass\n", encoding="utf-8")

    cache = tmp_path / "__pycache__"
    cache.mkdir()
    (cache / "orders.cpython-312.pyc").write_bytes(b"fake bytecode")
    return tmp_path
