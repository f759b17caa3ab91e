"""Command-line interface: cron job management and daemon logs."""

from __future__ import annotations

import argparse
import os
import sys
import time
from collections import deque
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TextIO

from wildgecu.cronjob import CronJob, filename, load_all

_PROMPT_WIDTH = 60
_TAIL_LINES = 50
_POLL_SECONDS = 0.5
_PADDING = 2


def _strip_line(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def read_last_lines(stream: Iterable[str], n: int) -> List[str]:
    """Read *stream* to its end and return its last *n* lines without line endings."""
    if n <= 0:
        for _ in stream:
            pass
        return []
    return [_strip_line(line) for line in deque(stream, maxlen=n)]


def _truncate(text: str, width: int) -> str:
    if len(text) > width:
        return text[: width - 3] + "..."
    return text


def format_cron_table(jobs: Iterable[CronJob]) -> str:
    """Render jobs as an aligned NAME / SCHEDULE / PROMPT table."""
    rows = [("NAME", "SCHEDULE", "PROMPT")]
    rows.extend((job.name, job.schedule, _truncate(job.prompt, _PROMPT_WIDTH)) for job in jobs)
    name_width = max(len(row[0]) for row in rows) + _PADDING
    schedule_width = max(len(row[1]) for row in rows) + _PADDING
    return "".join(
        f"{name.ljust(name_width)}{schedule.ljust(schedule_width)}{prompt}\n"
        for name, schedule, prompt in rows
    )


def _default_home() -> Path:
    env = os.environ.get("WILDGECU_HOME")
    return Path(env) if env else Path.home() / ".wildgecu"


def _cron_ls(home: Path) -> int:
    jobs, errors = load_all(home / "crons")
    for error in errors:
        print(f"warning: {error}", file=sys.stderr)
    if not jobs:
        print("No cron jobs found.")
        print("Use 'wildgecu cron add' to create one.")
        return 0
    sys.stdout.write(format_cron_table(jobs))
    return 0


def _cron_rm(home: Path, name: str) -> int:
    target = home / "crons" / filename(name)
    try:
        target.unlink()
    except OSError as exc:
        print(f'Error: delete cron job "{name}": {exc}', file=sys.stderr)
        return 1
    print(f'Removed cron job "{name}"')
    return 0


def _follow(stream: TextIO) -> None:
    while True:
        line = stream.readline()
        if line:
            print(_strip_line(line), flush=True)
        else:
            time.sleep(_POLL_SECONDS)


def _logs(home: Path, follow: bool) -> int:
    log_path = home / "wildgecu.log"
    try:
        stream = open(log_path, encoding="utf-8", errors="replace")
    except OSError as exc:
        print(f"Error: open log file: {exc}", file=sys.stderr)
        return 1
    with stream:
        for line in read_last_lines(stream, _TAIL_LINES):
            print(line)
        if follow:
            try:
                _follow(stream)
            except KeyboardInterrupt:
                pass
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wildgecu", description="Wildgecu agent tools")
    parser.add_argument("--home", type=Path, default=None,
                        help="agent home directory (default: ~/.wildgecu)")
    commands = parser.add_subparsers(dest="command", required=True)

    cron = commands.add_parser("cron", help="Manage scheduled cron jobs")
    cron_commands = cron.add_subparsers(dest="cron_command", required=True)
    cron_commands.add_parser("ls", aliases=["list"], help="List all cron jobs")
    remove = cron_commands.add_parser("rm", help="Remove a cron job")
    remove.add_argument("name")

    logs = commands.add_parser("logs", help="Show daemon logs")
    logs.add_argument("-f", "--follow", action="store_true", help="Follow log output")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; returns the exit status."""
    args = _build_parser().parse_args(argv)
    home = args.home if args.home is not None else _default_home()

    if args.command == "cron":
        if args.cron_command in ("ls", "list"):
            return _cron_ls(home)
        return _cron_rm(home, args.name)
    return _logs(home, args.follow)


if __name__ == "__main__":
    sys.exit(main())