"""Directory walking and file filtering for the codebase map."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING

from scan.ignore import IgnoreResolver
from scan.languages import LanguageClassifier

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

logger = logging.getLogger(__name__)


class ScanError(Exception):
    """Raised when the scan root cannot be opened."""


@dataclass(frozen=True)
class SourceFile:
    """A file that survived ignore rules, pattern filters and classification."""

    path: Path
    relative_path: str
    language: str


@dataclass
class WalkResult:
    files: list[SourceFile] = field(default_factory=list)
    truncated: bool = False


def _matches_any(rel_path: str, patterns: Sequence[str]) -> bool:
    # Glob match or plain substring containment both count as a match.
    return any(fnmatch(rel_path, pat) or pat in rel_path for pat in patterns)


def matches_patterns(
    rel_path: str,
    include_patterns: Sequence[str] | None,
    exclude_patterns: Sequence[str] | None,
) -> bool:
    """Check a root-relative POSIX path against include/exclude patterns."""
    if include_patterns and not _matches_any(rel_path, include_patterns):
        return False
    return not (exclude_patterns and _matches_any(rel_path, exclude_patterns))


def open_root(root: Path) -> Path:
    """Resolve the scan root, raising ScanError when it cannot be listed."""
    try:
        resolved = Path(root).expanduser().resolve()
    except OSError as exc:
        msg = f"Cannot resolve root directory '{root}': {exc}"
        raise ScanError(msg) from exc

    if not resolved.is_dir():
        msg = f"Root directory does not exist or is not a directory: {resolved}"
        raise ScanError(msg)

    try:
        with os.scandir(resolved):
            pass
    except OSError as exc:
        msg = f"Cannot read root directory '{resolved}': {exc}"
        raise ScanError(msg) from exc

    return resolved


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        logger.debug("skipping unreadable directory %s: %s", directory, exc)
        return []


def iter_candidate_files(root: Path, resolver: IgnoreResolver) -> Iterator[Path]:
    """Yield regular files under ``root`` depth-first in lexicographic order.

    Directories are registered with ``resolver`` before being tested, and an
    ignored directory is never descended into. Symbolic links are skipped so
    the walk cannot leave the root. Entries that fail with an OSError are
    skipped.
    """
    resolver.track_directory(root)
    yield from _walk_directory(root, resolver)


def _walk_directory(directory: Path, resolver: IgnoreResolver) -> Iterator[Path]:
    for entry in _sorted_entries(directory):
        path = Path(entry.path)
        try:
            if entry.is_symlink():
                continue
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file(follow_symlinks=False)
        except OSError as exc:
            logger.debug("skipping unreadable entry %s: %s", path, exc)
            continue

        if is_dir:
            resolver.track_directory(path)
            if not resolver.should_ignore(path, is_dir=True):
                yield from _walk_directory(path, resolver)
        elif is_file:
            yield path


def walk_source_files(
    root: Path,
    include_patterns: Sequence[str] | None = None,
    exclude_patterns: Sequence[str] | None = None,
    max_files: int | None = None,
    *,
    resolver: IgnoreResolver | None = None,
    classifier: LanguageClassifier | None = None,
) -> WalkResult:
    """Collect the files eligible for symbol extraction.

    Args:
        root: Directory to scan
        include_patterns: Optional glob-or-substring patterns; when given,
            a file must match at least one of them
        exclude_patterns: Optional glob-or-substring patterns; a file
            matching any of them is dropped
        max_files: Soft cap on eligible files; the walk stops once it is
            reached and the result is flagged as truncated. ``None`` or a
            value <= 0 disables the cap.
        resolver: Ignore resolver to consult (a fresh one for ``root`` by
            default)
        classifier: Language classifier (the default extension table by
            default)

    Returns:
        WalkResult holding the eligible files in walk order.

    Raises:
        ScanError: if ``root`` cannot be opened.
    """
    root = open_root(root)
    if resolver is None:
        resolver = IgnoreResolver(root)
    if classifier is None:
        classifier = LanguageClassifier()

    result = WalkResult()
    limit = max_files if max_files and max_files > 0 else None

    for path in iter_candidate_files(root, resolver):
        rel_path = path.relative_to(root).as_posix()
        if not matches_patterns(rel_path, include_patterns, exclude_patterns):
            continue
        if resolver.should_ignore(path, is_dir=False):
            continue
        language = classifier.classify(path.name)
        if language is None:
            continue

        if limit is not None and len(result.files) >= limit:
            logger.info("file limit of %d reached; map is partial", limit)
            result.truncated = True
            break

        result.files.append(
            SourceFile(path=path, relative_path=rel_path, language=language)
        )

    return result


__all__ = [
    "ScanError",
    "SourceFile",
    "WalkResult",
    "iter_candidate_files",
    "matches_patterns",
    "open_root",
    "walk_source_files",
]
