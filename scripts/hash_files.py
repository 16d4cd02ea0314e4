from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure "sm3hash" is importable when running this script directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sm3hash.config import get_settings
from sm3hash.files.expander import expand_paths
from sm3hash.logging_config import configure_logging
from sm3hash.ops.events import Event, EventBus, FileProgress
from sm3hash.ops.queue import ReportOptions, WorkQueue
from sm3hash.ops.results import ResultStore
from sm3hash.utils.formatting import format_event_lines


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute SM3 digests of files and folders (folders are walked recursively)."
    )
    parser.add_argument("paths", nargs="+", help="Files or folders to hash")
    parser.add_argument(
        "--lower",
        action="store_true",
        help="Print digests in lowercase (default is uppercase)",
    )
    parser.add_argument(
        "--no-size",
        action="store_true",
        help="Do not print file sizes",
    )
    parser.add_argument(
        "--no-time",
        action="store_true",
        help="Do not print elapsed time",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show per-file progress percentages on stderr",
    )
    parser.add_argument(
        "--json-out",
        type=Path,
        default=None,
        help="Optional path to write a JSON summary",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default WARNING)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level)

    files = expand_paths(args.paths)
    if not files:
        print("No files found.", file=sys.stderr)
        return 1

    events = EventBus()
    store = ResultStore(history_limit=max(len(files), 1))
    store.attach(events)

    def print_event(event: Event) -> None:
        if isinstance(event, FileProgress):
            if args.progress:
                print(f"\r{event.percent:3d}%", end="", file=sys.stderr, flush=True)
                if event.percent == 100:
                    print(file=sys.stderr)
            return
        for line in format_event_lines(event):
            print(line, flush=True)

    events.subscribe(print_event)

    queue = WorkQueue(
        events=events,
        report_options=ReportOptions(
            uppercase=not args.lower,
            show_size=not args.no_size,
            show_elapsed=not args.no_time,
        ),
        hashing_options=settings.hashing_options(),
    )
    queue.enqueue(files)
    queue.wait_idle()

    records = store.results()
    failed = [record for record in records if not record.ok]

    if args.json_out:
        summary = {
            "files": len(records),
            "failed": len(failed),
            "results": [record.to_dict() for record in records],
        }
        args.json_out.write_text(json.dumps(summary, indent=2), encoding="utf-8")
        print(f"Wrote summary to {args.json_out}")

    return 0 if not failed else 1


if __name__ == "__main__":
    raise SystemExit(main())
