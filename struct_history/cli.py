"""
Command-line interface for struct-history.

This module is responsible for argument parsing, delegating to the
tracker, and printing the resulting report.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from typing import List, Optional, TextIO

from .collector import ChangeCollector
from .config import DIFF_ALGORITHMS, Config
from .domain import HistoryReport, TrackedSpan
from .errors import StructHistoryError
from .git_adapter import GitRepository, discover
from .logging_utils import configure_logging
from .tracker import StructHistoryTracker

LOG = logging.getLogger(__name__)


def _parse_span(value: str) -> TrackedSpan:
    try:
        start_text, end_text = value.split(":", 1)
        span = TrackedSpan(start=int(start_text), end=int(end_text))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected START:END byte offsets, got {value!r}") from None
    if span.start < 0 or span.is_collapsed:
        raise argparse.ArgumentTypeError(f"span {value!r} must satisfy 0 <= START < END")
    return span


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="struct-history",
        description=(
            "Follow a struct declaration backward through a file's git "
            "history and list every distinct field layout it has had."
        ),
    )

    parser.add_argument(
        "path",
        help="Path of the tracked file, relative to the repository root.",
    )
    parser.add_argument(
        "name",
        nargs="?",
        help="Name of the struct to track (required unless --span is given).",
    )
    parser.add_argument(
        "--repo",
        dest="repo_dir",
        default=".",
        help="Repository directory (default: current directory).",
    )
    parser.add_argument(
        "--rev",
        dest="start_rev",
        default="HEAD",
        help="Revision to start walking from (default: HEAD).",
    )
    parser.add_argument(
        "--span",
        type=_parse_span,
        help="Track the byte range START:END of the file instead of looking up NAME.",
    )
    parser.add_argument(
        "--diff-algorithm",
        choices=DIFF_ALGORITHMS,
        default="myers",
        help="Line diff algorithm git uses between revisions.",
    )
    parser.add_argument(
        "--max-revisions",
        type=int,
        help="Stop after examining this many revisions.",
    )
    parser.add_argument(
        "--changes",
        dest="show_changes",
        action="store_true",
        help="Show commit ids and field level changes for every signature.",
    )
    parser.add_argument(
        "--json",
        dest="output_format",
        action="store_const",
        const="json",
        default="text",
        help="Print the report as JSON.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="-v shows progress, -vv debug output, -vvv also every git command.",
    )

    return parser


def report_to_dict(report: HistoryReport) -> dict:
    return {
        "path": report.path,
        "stopped_reason": report.stopped_reason,
        "commits_visited": report.commits_visited,
        "revisions_examined": report.revisions_examined,
        "signatures": [
            {
                "signature": change_set.record.signature.text,
                "commit": change_set.record.commit_id,
                "time": change_set.record.time,
                "changes": [change.describe() for change in change_set.changes],
            }
            for change_set in report.change_sets
        ],
    }


def print_report(report: HistoryReport, config: Config, out: Optional[TextIO] = None) -> None:
    out = out or sys.stdout

    if config.output_format == "json":
        out.write(json.dumps(report_to_dict(report), indent=2) + "\n")
        return

    for change_set in report.change_sets:
        record = change_set.record
        if not config.show_changes:
            out.write(f"{record.signature.text}\n")
            continue
        out.write(f"{record.commit_id[:7]} {record.signature.text}\n")
        for change in change_set.changes:
            out.write(f"    {change.describe()}\n")


def _print_partial(collector: ChangeCollector) -> None:
    if not len(collector):
        return
    print("struct-history: partial results before the failure:", file=sys.stderr)
    for signature in collector.signatures():
        print(f"  {signature}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.name is None and args.span is None:
        parser.error("either NAME or --span is required")

    config = Config(
        repo_dir=args.repo_dir,
        start_rev=args.start_rev,
        diff_algorithm=args.diff_algorithm,
        max_revisions=args.max_revisions,
        show_changes=args.show_changes,
        output_format=args.output_format,
        verbosity=args.verbose,
    )

    configure_logging(verbosity=config.verbosity)

    tracker: Optional[StructHistoryTracker] = None
    started = time.monotonic()
    try:
        config.validate()
        repo = GitRepository(discover(config.repo_dir), diff_algorithm=config.diff_algorithm)
        tracker = StructHistoryTracker(repo, config)
        if args.span is not None:
            report = tracker.track(args.path, args.span)
        else:
            report = tracker.track_entity(args.path, args.name)
    except KeyboardInterrupt:
        return 130
    except (StructHistoryError, ValueError) as exc:
        print(f"struct-history: error: {exc}", file=sys.stderr)
        if tracker is not None:
            _print_partial(tracker.collector)
        return 1

    print_report(report, config)
    LOG.info(
        "Processed %d commits in %dms",
        report.commits_visited,
        int((time.monotonic() - started) * 1000),
    )
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
