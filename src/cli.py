"""Command-line interface for codemap-core."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import orjson

from codemap.aggregate import build_project_map
from codemap.format import FORMATS, render
from rules.config import ConfigError, load_config
from scan.files import ScanError
from scan.search import search_codebase


def _split_patterns(values: list[str] | None) -> list[str]:
    patterns: list[str] = []
    for value in values or []:
        patterns.extend(part.strip() for part in value.split(",") if part.strip())
    return patterns


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codemap")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (repeat for debug output)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    map_parser = subparsers.add_parser(
        "map", help="Generate a compressed map of the codebase"
    )
    map_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to map (default: .)",
    )
    map_parser.add_argument(
        "-f",
        "--format",
        default=None,
        help=f"Output format: {', '.join(FORMATS)} (default: markdown)",
    )
    map_parser.add_argument(
        "-o", "--output", default=None, help="Output file (default: stdout)"
    )
    map_parser.add_argument(
        "--include",
        action="append",
        default=None,
        help="Include pattern (glob or substring); repeatable or comma separated",
    )
    map_parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        help="Exclude pattern (glob or substring); repeatable or comma separated",
    )
    map_parser.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="Maximum number of files to process (default: 2000)",
    )
    map_parser.add_argument(
        "-c",
        "--compact",
        action="store_true",
        default=None,
        help="Compact output (hide child symbols)",
    )

    search_parser = subparsers.add_parser("search", help="Search the codebase text")
    search_parser.add_argument("query", help="Case-insensitive text to find")
    search_parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Directory to search (default: .)",
    )
    search_parser.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="Maximum number of files to search (default: 5000)",
    )
    search_parser.add_argument(
        "--json", action="store_true", help="Print results as JSON"
    )

    return parser


def _configure_logging(verbosity: int) -> None:
    if verbosity <= 0:
        return
    level = logging.DEBUG if verbosity > 1 else logging.INFO
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _handle_map(args: argparse.Namespace) -> int:
    root = Path(args.directory).expanduser().resolve()
    try:
        config = load_config(root)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    include = _split_patterns(args.include) or config.include
    exclude = _split_patterns(args.exclude) or config.exclude
    max_files = config.max_files if args.max_files is None else args.max_files
    fmt = args.format or config.format
    compact = config.compact if args.compact is None else args.compact

    try:
        project_map = build_project_map(
            root, include, exclude, max_files, config=config
        )
    except ScanError as exc:
        sys.stderr.write(f"error: failed to generate map: {exc}\n")
        return 2

    if project_map.partial:
        sys.stderr.write(
            f"warning: file limit of {max_files} reached; the map is partial\n"
        )

    result = render(project_map, fmt, compact=compact)

    if args.output:
        try:
            Path(args.output).write_text(result, encoding="utf-8")
        except OSError as exc:
            sys.stderr.write(f"error: failed to write output: {exc}\n")
            return 1
        stats = project_map.statistics
        sys.stdout.write(f"Codebase map written to: {args.output}\n")
        sys.stdout.write(
            f"Files: {stats.total_files} | Symbols: {stats.total_symbols}"
            f" | Languages: {', '.join(project_map.languages)}\n"
        )
    else:
        sys.stdout.write(result if result.endswith("\n") else result + "\n")

    return 0


def _handle_search(args: argparse.Namespace) -> int:
    root = Path(args.root).expanduser().resolve()
    try:
        config = load_config(root)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    max_files = config.search_max_files if args.max_files is None else args.max_files

    try:
        results = search_codebase(
            root,
            args.query,
            max_files=max_files,
            resolver=config.build_resolver(root),
        )
    except ScanError as exc:
        sys.stderr.write(f"error: search failed: {exc}\n")
        return 2

    if args.json:
        payload = [r.model_dump() for r in results]
        sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())
        sys.stdout.write("\n")
    else:
        for r in results:
            sys.stdout.write(f"{r.file}:{r.line}: {r.content}\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "map":
        return _handle_map(args)

    if args.command == "search":
        return _handle_search(args)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
