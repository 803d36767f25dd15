"""Layered ignore rules: default skip tables, hidden directories, .gitignore files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".gitignore"

DEFAULT_SKIP_DIRS = frozenset(
    {
        "node_modules",
        "vendor",
        ".git",
        "dist",
        "build",
        ".next",
        "__pycache__",
        ".venv",
        "venv",
        ".tox",
        ".cache",
        ".idea",
        ".vscode",
        "coverage",
        ".nyc_output",
        "target",
        "bin",
        "obj",
    }
)

DEFAULT_ALLOWED_HIDDEN_DIRS = frozenset({".agent", ".github", ".codemap"})

DEFAULT_SKIP_FILES = frozenset({".DS_Store", "Thumbs.db"})


def _compile_ignore_file(path: Path) -> Callable[[str], bool] | None:
    """Compile a .gitignore file, or return None when it is absent or unreadable."""
    if not path.is_file() or path.is_symlink():
        return None
    try:
        return cast("Callable[[str], bool]", parse_gitignore(path))
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("skipping unreadable ignore file %s: %s", path, exc)
        return None


def _matches(matcher: Callable[[str], bool], path: Path) -> bool:
    try:
        return bool(matcher(str(path)))
    except ValueError:
        # gitignore_parser raises when the path lies outside the rule base.
        return False


class IgnoreResolver:
    """Decide whether a path under ``root`` should be skipped.

    Rules are checked in precedence order: the default skip tables, the
    hidden-directory rule, the root ``.gitignore`` and finally the
    ``.gitignore`` of every ancestor directory registered through
    :meth:`track_directory`. Nested rules are evaluated relative to the
    directory that owns them, so they only apply inside that subtree.

    One resolver is meant to serve one walk; the nested rule cache is
    filled while the walk descends.
    """

    def __init__(
        self,
        root: Path,
        *,
        skip_dirs: Iterable[str] | None = None,
        allowed_hidden_dirs: Iterable[str] | None = None,
        skip_files: Iterable[str] | None = None,
    ) -> None:
        self.root = Path(root).resolve()
        self.skip_dirs = frozenset(
            DEFAULT_SKIP_DIRS if skip_dirs is None else skip_dirs
        )
        self.allowed_hidden_dirs = frozenset(
            DEFAULT_ALLOWED_HIDDEN_DIRS
            if allowed_hidden_dirs is None
            else allowed_hidden_dirs
        )
        self.skip_files = frozenset(
            DEFAULT_SKIP_FILES if skip_files is None else skip_files
        )
        self._root_rules = _compile_ignore_file(self.root / IGNORE_FILENAME)
        self._nested_rules: dict[Path, Callable[[str], bool]] = {}

    def _absolute(self, path: str | Path) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        return candidate

    def track_directory(self, path: str | Path) -> None:
        """Register the ``.gitignore`` of a directory the walk is entering."""
        directory = self._absolute(path)
        if directory == self.root or directory in self._nested_rules:
            return
        matcher = _compile_ignore_file(directory / IGNORE_FILENAME)
        if matcher is not None:
            logger.debug("loaded nested ignore rules from %s", directory)
            self._nested_rules[directory] = matcher

    @property
    def tracked_directories(self) -> list[Path]:
        return sorted(self._nested_rules)

    def should_ignore(self, path: str | Path, is_dir: bool) -> bool:
        """Return True when ``path`` must be skipped.

        ``path`` may be absolute or relative to the root. For a directory a
        True result means the whole subtree is skipped.
        """
        candidate = self._absolute(path)
        if candidate == self.root:
            return False
        name = candidate.name

        if is_dir:
            if name in self.skip_dirs:
                return True
            if name.startswith(".") and name not in self.allowed_hidden_dirs:
                return True
        elif name in self.skip_files:
            return True

        if self._root_rules is not None and _matches(self._root_rules, candidate):
            return True

        for ancestor in candidate.parents:
            if ancestor == self.root:
                break
            matcher = self._nested_rules.get(ancestor)
            if matcher is not None and _matches(matcher, candidate):
                return True

        return False


__all__ = [
    "DEFAULT_ALLOWED_HIDDEN_DIRS",
    "DEFAULT_SKIP_DIRS",
    "DEFAULT_SKIP_FILES",
    "IGNORE_FILENAME",
    "IgnoreResolver",
]
