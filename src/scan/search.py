"""Case-insensitive text search across the non-ignored files of a tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from scan.files import iter_candidate_files, open_root
from scan.ignore import IgnoreResolver

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_MAX_FILES = 5000
MAX_LINE_LENGTH = 500
BINARY_SNIFF_BYTES = 512

BINARY_EXTENSIONS = frozenset(
    {".png", ".jpg", ".jpeg", ".gif", ".ico", ".pdf", ".zip", ".tar", ".gz", ".exe", ".bin"}
)


class SearchResult(BaseModel):
    """One matching line."""

    file: str
    line: int
    content: str


def is_binary(path: Path) -> bool:
    """Guess whether ``path`` is binary from its extension or leading bytes."""
    if path.suffix.lower() in BINARY_EXTENSIONS:
        return True
    try:
        with path.open("rb") as handle:
            head = handle.read(BINARY_SNIFF_BYTES)
    except OSError:
        return False
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as exc:
        # A multi-byte sequence cut at the sniff boundary is still text.
        return not (
            len(head) == BINARY_SNIFF_BYTES and exc.reason == "unexpected end of data"
        )
    return False


def _trim(line: str) -> str:
    trimmed = line.strip()
    if len(trimmed) > MAX_LINE_LENGTH:
        return trimmed[:MAX_LINE_LENGTH] + "..."
    return trimmed


def search_codebase(
    root: Path,
    query: str,
    *,
    max_files: int | None = DEFAULT_SEARCH_MAX_FILES,
    resolver: IgnoreResolver | None = None,
) -> list[SearchResult]:
    """Find lines containing ``query`` (case-insensitive) under ``root``.

    Every regular file that survives the ignore rules counts against
    ``max_files``, binary files included; the search stops once the cap is
    exceeded. Unreadable files are skipped.
    """
    root = open_root(root)
    if resolver is None:
        resolver = IgnoreResolver(root)

    needle = query.lower()
    limit = max_files if max_files and max_files > 0 else None
    searched = 0
    results: list[SearchResult] = []

    for path in iter_candidate_files(root, resolver):
        if resolver.should_ignore(path, is_dir=False):
            continue

        searched += 1
        if limit is not None and searched > limit:
            logger.info("search file limit of %d reached", limit)
            break

        if is_binary(path):
            continue

        rel_path = path.relative_to(root).as_posix()
        try:
            with path.open(encoding="utf-8", errors="replace") as handle:
                for line_num, line in enumerate(handle, start=1):
                    if needle in line.lower():
                        results.append(
                            SearchResult(file=rel_path, line=line_num, content=_trim(line))
                        )
        except OSError as exc:
            logger.debug("skipping unreadable file %s: %s", path, exc)
            continue

    return results


__all__ = [
    "BINARY_EXTENSIONS",
    "DEFAULT_SEARCH_MAX_FILES",
    "SearchResult",
    "is_binary",
    "search_codebase",
]
