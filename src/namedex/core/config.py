"""
Namedex Configuration Module

Centralized configuration for the Namedex goto-by-name engine: search
options, matcher scoring weights, directory scanning, and logging.
"""

import os
from dataclasses import dataclass, field

from namedex.core.matcher import DEFAULT_WEIGHTS

CASE_SENSITIVITY_MODES = ("none", "smart", "exact")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class NamedexConfig:
    """
    Instance-based configuration for Namedex.

    Each ``NamedexConfig`` instance is self-contained and passed through
    the call stack, so independent searches never share mutable state.

    Create from environment variables::

        config = NamedexConfig.from_env()

    Or with explicit values::

        config = NamedexConfig(search_anywhere=True, case_sensitivity="smart")
    """

    # ── Search ────────────────────────────────────────────────────
    separators: tuple = ("/",)
    include_non_project: bool = False
    search_anywhere: bool = False
    allow_empty_pattern_listing: bool = False
    case_sensitivity: str = "none"
    max_results: int = 20

    # Matcher scoring; see namedex.core.matcher.DEFAULT_WEIGHTS
    matching_weights: dict = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))

    # ── Directory scanning ────────────────────────────────────────
    target_extensions: frozenset = frozenset((".py", ".pyi"))
    exclude_dirs: frozenset = frozenset((
        "__pycache__", ".git", ".hg", ".svn",
        ".pytest_cache", ".mypy_cache", ".tox", "node_modules",
    ))
    # Directories whose contents are searchable only with include_non_project
    non_project_dirs: frozenset = frozenset((
        ".venv", "venv", "site-packages", "dist", "build",
    ))
    max_file_size_mb: int = 5

    # ── Logging ───────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ── Factory ───────────────────────────────────────────────────

    @classmethod
    def from_env(cls) -> "NamedexConfig":
        """Build a config snapshot from current environment variables."""
        return cls(
            include_non_project=_env_flag("NAMEDEX_INCLUDE_NON_PROJECT"),
            search_anywhere=_env_flag("NAMEDEX_SEARCH_ANYWHERE"),
            case_sensitivity=os.getenv("NAMEDEX_CASE_SENSITIVITY", "none").lower(),
            max_results=int(os.getenv("NAMEDEX_MAX_RESULTS", "20")),
            log_level=os.getenv("NAMEDEX_LOG_LEVEL", "INFO").upper(),
        )

    def with_overrides(self, **overrides) -> "NamedexConfig":
        """Return a copy with the given non-None fields replaced."""
        merged = {
            f: getattr(self, f) for f in self.__dataclass_fields__
        }
        merged.update({k: v for k, v in overrides.items() if v is not None})
        return NamedexConfig(**merged)

    # ── Validation ────────────────────────────────────────────────

    def validate(self) -> bool:
        """
        Check option values.

        Raises :class:`~namedex.exceptions.ConfigError` on failure.
        """
        from namedex.exceptions import ConfigError

        if self.case_sensitivity not in CASE_SENSITIVITY_MODES:
            raise ConfigError(
                f"Unknown case sensitivity '{self.case_sensitivity}'. "
                f"Supported: {', '.join(CASE_SENSITIVITY_MODES)}.\n"
                "  Set via: export NAMEDEX_CASE_SENSITIVITY=smart"
            )
        if not self.separators or any(not s for s in self.separators):
            raise ConfigError("At least one non-empty separator is required.")
        if self.max_results <= 0:
            raise ConfigError(
                f"max_results must be positive, got {self.max_results}."
            )
        return True
