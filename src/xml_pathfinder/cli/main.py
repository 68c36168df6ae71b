"""Main CLI entry point for the xml-pathfinder command-line tool.

Provides commands to resolve the tag path at an offset, extract values along
a tag path, list extractable fields and search across files and zip archives.
"""

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from xml_pathfinder import __version__
from xml_pathfinder.api.adapters import (
    hits_to_records,
    rows_to_csv,
    rows_to_tsv,
)
from xml_pathfinder.api.navigator import XMLNavigator
from xml_pathfinder.api.sources import DocumentSource, SourceError, load_sources
from xml_pathfinder.search.engine import SearchHit, hits_by_file, resolve_highlight
from xml_pathfinder.shared.config import ConfigError, NavigatorConfig
from xml_pathfinder.shared.logging import configure_logging, get_logger

PRESETS = {
    "default": NavigatorConfig.default,
    "strict": NavigatorConfig.strict,
    "permissive": NavigatorConfig.permissive,
}

# Characters of raw text shown on each side of a highlighted match
SNIPPET_RADIUS = 30

# Row key naming the document a row came from when several are extracted
SOURCE_KEY = "SOURCE_FILE"

logger = get_logger(__name__, component="cli")


class ProgressTracker:
    """Progress tracking for long-running operations."""

    def __init__(self, total: int, description: str = "Processing", enabled: bool = True):
        self.total = total
        self.completed = 0
        self.description = description
        self.enabled = enabled
        self.start_time = time.time()
        self.last_update = 0.0

    def update(self, increment: int = 1) -> None:
        """Update progress and display if needed."""
        self.completed += increment
        current_time = time.time()

        # Update every second or on completion
        if current_time - self.last_update >= 1.0 or self.completed >= self.total:
            self._display_progress()
            self.last_update = current_time

    def _display_progress(self) -> None:
        if not self.enabled or self.total == 0:
            return

        percentage = (self.completed / self.total) * 100
        progress_bar = "=" * int(percentage // 2)
        progress_bar += " " * (50 - len(progress_bar))

        print(f"\r{self.description}: [{progress_bar}] "
              f"{percentage:.1f}% ({self.completed}/{self.total})",
              end="", file=sys.stderr)

        if self.completed >= self.total:
            print(file=sys.stderr)


def parse_tag_path(value: str) -> List[str]:
    """Split a ``A/B/C`` (or ``A > B > C``) tag path into its names."""
    separator = ">" if ">" in value else "/"
    parts = [part.strip() for part in value.split(separator)]
    parts = [part for part in parts if part]
    if not parts:
        raise argparse.ArgumentTypeError("tag path cannot be empty")
    return parts


def load_config(args: argparse.Namespace) -> NavigatorConfig:
    """Build the navigator configuration from a preset and an optional file."""
    config_path: Optional[Path] = getattr(args, "config", None)
    if config_path is not None:
        return NavigatorConfig.from_file(config_path)
    return PRESETS[getattr(args, "preset", "default")]()


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-pathfinder",
        description="Navigate, extract from and search XML documents and zip archives"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path (JSON)"
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="default",
        help="Configuration preset (ignored when --config is given)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Path command
    path_parser = subparsers.add_parser("path", help="Show the tag path at an offset")
    path_parser.add_argument("file", type=Path, help="XML file")
    path_parser.add_argument("offset", type=int, help="Character offset in the file")

    # Extract command
    extract_parser = subparsers.add_parser("extract", help="Extract values along a tag path")
    extract_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files, directories or zip archives"
    )
    extract_parser.add_argument(
        "--tag-path", "-t",
        type=parse_tag_path,
        required=True,
        help="Tag hierarchy, e.g. INVOICE/LINE/ITEM"
    )
    extract_parser.add_argument(
        "--field",
        action="append",
        dest="fields",
        help="Field (tag name or descendant path) to extract; repeatable"
    )
    extract_parser.add_argument(
        "--format", "-f",
        choices=["json", "csv", "tsv", "text"],
        default="json",
        help="Output format (default: json)"
    )
    extract_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    # Keys command
    keys_parser = subparsers.add_parser("keys", help="List fields extractable under a tag path")
    keys_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files, directories or zip archives"
    )
    keys_parser.add_argument(
        "--tag-path", "-t",
        type=parse_tag_path,
        required=True,
        help="Tag hierarchy, e.g. INVOICE/LINE"
    )

    # Search command
    search_parser = subparsers.add_parser("search", help="Search documents for a substring")
    search_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files, directories or zip archives"
    )
    search_parser.add_argument(
        "--query", "-Q",
        required=True,
        help="Case-insensitive substring to find"
    )
    search_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )
    search_parser.add_argument(
        "--workers", "-w",
        type=int,
        help="Number of parallel workers"
    )

    return parser


def _snippet(raw: str, start: int, length: int) -> str:
    before = raw[max(0, start - SNIPPET_RADIUS):start]
    match = raw[start:start + length]
    after = raw[start + length:start + length + SNIPPET_RADIUS]
    return " ".join(f"{before}[{match}]{after}".split())


def format_extraction(
    results: Sequence[Any], format_type: str
) -> str:
    """Format ``(source, rows)`` pairs for output."""
    all_rows: List[Dict[str, str]] = []
    for source, rows in results:
        if len(results) > 1:
            rows = [dict(row, **{SOURCE_KEY: source.identifier}) for row in rows]
        all_rows.extend(rows)

    if format_type == "json":
        return json.dumps(all_rows, indent=2, ensure_ascii=False)
    if format_type == "csv":
        return rows_to_csv(all_rows)
    if format_type == "tsv":
        return rows_to_tsv(all_rows)

    lines = [f"Extracted {len(all_rows)} rows from {len(results)} documents"]
    lines.append("-" * 60)
    for index, row in enumerate(all_rows, start=1):
        lines.append(f"#{index}")
        for key, value in row.items():
            lines.append(f"   {key}: {value}")
    return "\n".join(lines)


def format_search(
    hits: Sequence[SearchHit],
    sources: Sequence[DocumentSource],
    query: str,
    format_type: str,
) -> str:
    """Format search hits for output."""
    if format_type == "json":
        return json.dumps(hits_to_records(hits), indent=2, ensure_ascii=False)

    if not hits:
        return "No matches found."

    raw_by_id = {source.identifier: source.raw_text for source in sources}
    grouped = hits_by_file(hits)
    lines = [f"Found {len(hits)} matches in {len(grouped)} files"]
    lines.append("-" * 60)
    for file_id, file_hits in grouped.items():
        lines.append(f"{file_id} ({len(file_hits)})")
        raw = raw_by_id.get(file_id, "")
        for hit in file_hits:
            span = resolve_highlight(raw, hit, query)
            where = f"@{span[0]}" if span else "@?"
            for line in hit.context_lines:
                marker = ">" if line.is_match else " "
                lines.append(f"  {marker} {'  ' * line.indent}{line.text}")
            if span:
                lines.append(f"    {where}: {_snippet(raw, span[0], span[1])}")
            else:
                lines.append(f"    {where}: offset unavailable")
        lines.append("")
    return "\n".join(lines).rstrip()


def _write_output(text: str, output: Optional[Path]) -> int:
    if output is None:
        print(text)
        return 0
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1
    print(f"Results written to {output}", file=sys.stderr)
    return 0


def cmd_path(args: argparse.Namespace, navigator: XMLNavigator) -> int:
    """Handle path command."""
    sources = load_sources([args.file])
    if not sources:
        print(f"No document found at {args.file}", file=sys.stderr)
        return 1
    path = navigator.path_at(sources[0].raw_text, args.offset)
    if path is None:
        print("No enclosing element", file=sys.stderr)
        return 1
    print(" > ".join(path))
    return 0


def cmd_extract(args: argparse.Namespace, navigator: XMLNavigator) -> int:
    """Handle extract command."""
    sources = load_sources(args.paths)
    results = navigator.extract_sources(sources, args.tag_path, args.fields)
    exit_code = _write_output(format_extraction(results, args.format), args.output)
    if exit_code:
        return exit_code
    return 0 if any(rows for _, rows in results) else 1


def cmd_keys(args: argparse.Namespace, navigator: XMLNavigator) -> int:
    """Handle keys command."""
    sources = load_sources(args.paths)
    keys = navigator.unique_keys_sources(sources, args.tag_path)
    for key in keys:
        print(key)
    return 0 if keys else 1


def cmd_search(args: argparse.Namespace, navigator: XMLNavigator) -> int:
    """Handle search command."""
    min_length = navigator.config.search.min_query_length
    if len(args.query) < min_length:
        print(f"Query must be at least {min_length} characters", file=sys.stderr)
        return 1

    if args.workers:
        navigator.config = navigator.config.override(search__max_workers=args.workers)

    sources = load_sources(args.paths, extensions=navigator.config.search.file_extensions)
    progress = ProgressTracker(len(sources), "Searching", enabled=not args.quiet)
    hits: List[SearchHit] = []
    workers = navigator.config.search.max_workers
    try:
        if workers is not None and workers > 1:
            hits = navigator.search_sources(sources, args.query)
            progress.update(len(sources))
        else:
            # Stopping between documents is the only way to cancel a search
            for source in sources:
                hits.extend(navigator.search_sources([source], args.query))
                progress.update()
    except KeyboardInterrupt:
        print("\nSearch interrupted by user", file=sys.stderr)
        return 130

    print(format_search(hits, sources, args.query, args.format))
    return 0 if hits else 1


COMMANDS = {
    "path": cmd_path,
    "extract": cmd_extract,
    "keys": cmd_keys,
    "search": cmd_search,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    # Set up logging verbosity; flags take precedence over the configuration
    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")
    else:
        configure_logging(config.global_.logging_level)

    navigator = XMLNavigator(config)

    try:
        return COMMANDS[args.command](args, navigator)
    except SourceError as e:
        logger.error("Could not load documents", extra={"error": str(e)}, exc_info=False)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
