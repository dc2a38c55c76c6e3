"""
Namedex Name Sources

Concrete collaborators that feed the search engine:

- :class:`FileNameSource`: every file under a directory; the short name is
  the file name and the full name its POSIX path relative to the root.
- :class:`SymbolNameSource`: classes, functions and methods extracted
  from Python sources with the ``ast`` module; full names are dotted
  (``pkg.module.Class.method``).  Symbols from ``.pyi`` stubs are alternate
  representations that navigate to the matching ``.py`` definition.

Directories are walked with early pruning of excluded subtrees.  Entries
under ``non_project_dirs`` (virtualenvs, build output) are only returned
when a search includes non-project candidates.
"""

import ast
import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from tqdm import tqdm

from namedex.core.config import NamedexConfig
from namedex.core.model import CustomMatching, DefaultMatching, SearchModel
from namedex.exceptions import NameSourceError

logger = logging.getLogger(__name__)


# =============================================================================
# Data Models
# =============================================================================

@dataclass(eq=False)
class NameEntry:
    """One searchable entity.  Compared by identity."""
    short_name: str
    full_name: Optional[str]
    path: str
    """POSIX path of the defining file, relative to the indexed root."""
    line: int = 0
    kind: str = "file"
    is_project: bool = True
    compiled: bool = False
    """True for alternate representations such as ``.pyi`` stub symbols."""
    navigation: Optional["NameEntry"] = None
    """Source entry a compiled entry navigates to, if one exists."""

    def navigation_element(self) -> Optional["NameEntry"]:
        """Navigable form of a compiled entry (itself if it has no source)."""
        if not self.compiled:
            return None
        return self.navigation or self

    def to_dict(self) -> dict:
        return {
            "short_name": self.short_name,
            "full_name": self.full_name,
            "path": self.path,
            "line": self.line,
            "kind": self.kind,
            "is_project": self.is_project,
            "compiled": self.compiled,
        }

    def __repr__(self) -> str:
        return f"NameEntry({self.full_name or self.short_name!r}, {self.kind})"


# =============================================================================
# Name Sources
# =============================================================================

class InMemoryNameSource:
    """Name source over a fixed list of :class:`NameEntry` objects."""

    def __init__(self, entries: Iterable[NameEntry] = ()):
        self._by_name: Dict[str, List[NameEntry]] = {}
        self._load(entries)

    def _load(self, entries: Iterable[NameEntry]) -> None:
        self._by_name = {}
        for entry in entries:
            self._by_name.setdefault(entry.short_name, []).append(entry)

    @property
    def entries(self) -> List[NameEntry]:
        return [e for group in self._by_name.values() for e in group]

    def __len__(self) -> int:
        return sum(len(group) for group in self._by_name.values())

    def all_short_names(self, include_non_project: bool) -> List[str]:
        return sorted(
            name for name, group in self._by_name.items()
            if include_non_project or any(e.is_project for e in group)
        )

    def candidates_for_short_name(self, name: str, include_non_project: bool,
                                  name_pattern: str = "") -> List[NameEntry]:
        return [
            e for e in self._by_name.get(name, ())
            if include_non_project or e.is_project
        ]


def _is_project_path(relative: PurePosixPath, non_project_dirs: frozenset) -> bool:
    return not any(part in non_project_dirs for part in relative.parts[:-1])


def walk_files(root: Path, config: NamedexConfig,
               extensions: Optional[frozenset] = None) -> List[Path]:
    """
    Recursively list files under *root*, pruning ``config.exclude_dirs``.

    When *extensions* is given, only matching files no larger than
    ``config.max_file_size_mb`` are returned.
    """
    if not root.is_dir():
        raise NameSourceError(f"Not a directory: {root}")

    max_bytes = config.max_file_size_mb * 1024 * 1024
    files: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        # Prune in place so os.walk never descends into excluded dirs
        dirnames[:] = [d for d in dirnames if d not in config.exclude_dirs]
        for fname in filenames:
            full = os.path.join(dirpath, fname)
            if extensions is not None:
                if os.path.splitext(fname)[1] not in extensions:
                    continue
                try:
                    size = os.path.getsize(full)
                except OSError:
                    continue
                if size > max_bytes:
                    logger.warning(
                        f"Skipping large file: {full} ({size / (1024 * 1024):.1f}MB)"
                    )
                    continue
            files.append(Path(full))
    files.sort()
    return files


class FileNameSource(InMemoryNameSource):
    """Every file under *root*; full names are ``/``-separated relative paths."""

    separators = ("/",)

    def __init__(self, root: Path, config: NamedexConfig | None = None):
        self.root = Path(root).resolve()
        self._config = config or NamedexConfig()
        super().__init__()
        self.refresh()

    def refresh(self) -> None:
        entries = []
        for path in walk_files(self.root, self._config):
            relative = PurePosixPath(path.relative_to(self.root).as_posix())
            entries.append(NameEntry(
                short_name=relative.name,
                full_name=str(relative),
                path=str(relative),
                kind="file",
                is_project=_is_project_path(relative, self._config.non_project_dirs),
            ))
        self._load(entries)
        logger.info(f"Indexed {len(entries):,} file names under {self.root}")


class SymbolNameSource(InMemoryNameSource):
    """Python classes, functions and methods under *root*, dotted full names."""

    separators = (".",)

    def __init__(self, root: Path, config: NamedexConfig | None = None,
                 show_progress: bool = False):
        self.root = Path(root).resolve()
        self._config = config or NamedexConfig()
        self._show_progress = show_progress
        self.stats = {"files_scanned": 0, "files_failed": 0, "symbols": 0}
        super().__init__()
        self.refresh()

    def refresh(self) -> None:
        files = walk_files(self.root, self._config, self._config.target_extensions)
        self.stats = {"files_scanned": len(files), "files_failed": 0, "symbols": 0}
        entries: List[NameEntry] = []
        with tqdm(total=len(files), desc="Indexing symbols", unit="file",
                  disable=not self._show_progress) as pbar:
            for path in files:
                try:
                    entries.extend(self._extract(path))
                except (OSError, UnicodeDecodeError) as e:
                    logger.warning(f"Cannot read {path}: {e}")
                    self.stats["files_failed"] += 1
                finally:
                    pbar.update(1)
        _link_stubs(entries)
        self.stats["symbols"] = len(entries)
        self._load(entries)
        logger.info(
            f"Indexed {len(entries):,} symbols from {len(files):,} files under {self.root}"
        )

    def _extract(self, path: Path) -> List[NameEntry]:
        relative = PurePosixPath(path.relative_to(self.root).as_posix())
        source = path.read_text(encoding="utf-8")
        try:
            tree = ast.parse(source, filename=str(path))
        except SyntaxError as e:
            logger.error(f"Syntax error in {path}: {e}")
            self.stats["files_failed"] += 1
            return []
        return extract_symbols(
            tree, module_name(relative), str(relative),
            is_project=_is_project_path(relative, self._config.non_project_dirs),
            compiled=relative.suffix == ".pyi",
        )


def module_name(relative: PurePosixPath) -> str:
    """Dotted module name for a relative source path (``pkg/__init__.py`` -> ``pkg``)."""
    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "__init__" and len(parts) > 1:
        parts.pop()
    return ".".join(parts)


def extract_symbols(tree: ast.AST, module: str, path: str,
                    is_project: bool = True, compiled: bool = False) -> List[NameEntry]:
    """Walk *tree* and return an entry per class, function and method."""
    entries: List[NameEntry] = []

    def visit(node: ast.AST, qualifier: str, in_class: bool) -> None:
        for child in ast.iter_child_nodes(node):
            if isinstance(child, ast.ClassDef):
                kind = "class"
            elif isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef)):
                kind = "method" if in_class else "function"
            else:
                visit(child, qualifier, in_class)
                continue
            full_name = f"{qualifier}.{child.name}" if qualifier else child.name
            entries.append(NameEntry(
                short_name=child.name, full_name=full_name, path=path,
                line=child.lineno, kind=kind, is_project=is_project,
                compiled=compiled,
            ))
            visit(child, full_name, kind == "class")

    visit(tree, module, False)
    return entries


def _link_stubs(entries: Sequence[NameEntry]) -> None:
    """Point each stub symbol at the ``.py`` definition with the same full name."""
    sources = {e.full_name: e for e in entries if not e.compiled}
    for entry in entries:
        if entry.compiled:
            entry.navigation = sources.get(entry.full_name)


# =============================================================================
# Proximity
# =============================================================================

class PathProximity:
    """
    Proximity comparator for :class:`NameEntry` candidates.

    Project entries come before non-project ones; then, when a context
    file is given, entries whose directory is fewer steps away from the
    context's directory come first.
    """

    def __init__(self, context: Optional[str] = None):
        self._context = PurePosixPath(context).parent.parts if context else None

    def distance(self, entry: NameEntry) -> int:
        if self._context is None:
            return 0
        parts = PurePosixPath(entry.path).parent.parts
        common = 0
        for a, b in zip(parts, self._context):
            if a != b:
                break
            common += 1
        return (len(parts) - common) + (len(self._context) - common)

    def __call__(self, a: NameEntry, b: NameEntry) -> int:
        rc = int(not a.is_project) - int(not b.is_project)
        if rc != 0:
            return rc
        return self.distance(a) - self.distance(b)


def entry_model(source: InMemoryNameSource,
                separators: Sequence[str] = ("/",),
                context: Optional[str] = None,
                custom_matcher: Optional[Callable[[str, str], bool]] = None,
                strip_markup: Optional[Callable[[str], str]] = None) -> SearchModel:
    """Build a :class:`SearchModel` over a :class:`NameEntry` source."""
    model = SearchModel(
        source=source,
        full_name=_entry_full_name,
        separators=tuple(separators),
        matching=CustomMatching(custom_matcher) if custom_matcher else DefaultMatching(),
        proximity=PathProximity(context),
        navigation=NameEntry.navigation_element,
    )
    if strip_markup is not None:
        model.strip_markup = strip_markup
    return model


def _entry_full_name(entry: Any) -> Optional[str]:
    return entry.full_name
