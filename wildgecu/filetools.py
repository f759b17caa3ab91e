"""File tools for the coding agent: list, read, write and update files."""

from __future__ import annotations

import fnmatch
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

MAX_LIST_ENTRIES = 500
MAX_READ_LINES = 10000


@dataclass
class FileEntry:
    """A single directory entry."""

    name: str
    is_dir: bool
    size: int


@dataclass
class ListFilesResult:
    """The listed directory and its entries."""

    path: str
    entries: List[FileEntry] = field(default_factory=list)


@dataclass
class ReadFileResult:
    """Numbered file content and the file's total line count."""

    path: str
    content: str
    total_lines: int


@dataclass
class WriteFileResult:
    """The written path and how many bytes went into it."""

    path: str
    bytes_written: int


def resolve_path(work_dir: str, input_path: str) -> str:
    """Resolve *input_path* against *work_dir*; absolute paths are only cleaned."""
    if os.path.isabs(input_path):
        return os.path.normpath(input_path)
    return os.path.normpath(os.path.join(work_dir, input_path))


def list_files(work_dir: str, path: str = "", pattern: str = "") -> ListFilesResult:
    """List a directory, sorted by name, optionally filtered by a glob pattern.

    At most 500 entries are returned.
    """
    directory = resolve_path(work_dir, path) if path else work_dir

    with os.scandir(directory) as scanned:
        names = sorted(scanned, key=lambda entry: entry.name)

    entries: List[FileEntry] = []
    for entry in names:
        if pattern and not fnmatch.fnmatchcase(entry.name, pattern):
            continue
        try:
            info = entry.stat(follow_symlinks=False)
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            continue
        entries.append(FileEntry(name=entry.name, is_dir=is_dir, size=info.st_size))
        if len(entries) >= MAX_LIST_ENTRIES:
            break

    return ListFilesResult(path=directory, entries=entries)


def read_file(work_dir: str, path: str, offset: int = 0, limit: int = 0) -> ReadFileResult:
    """Read a text file and prefix each line with its 1-based number.

    *offset* is the first line to return (1-based); *limit* caps the number of
    lines, never above 10000. Raises ValueError for non-UTF-8 content.
    """
    target = resolve_path(work_dir, path)
    data = Path(target).read_bytes()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        raise ValueError(f"file {target} appears to be binary") from None

    lines = text.split("\n")
    total_lines = len(lines)

    start = min(offset - 1 if offset > 0 else 0, len(lines))
    count = limit if 0 < limit < MAX_READ_LINES else MAX_READ_LINES
    selected = lines[start:start + count]

    content = "".join(
        f"{number}\t{line}\n" for number, line in enumerate(selected, start=start + 1)
    )
    return ReadFileResult(path=target, content=content, total_lines=total_lines)


def write_file(work_dir: str, path: str, content: str, create: bool = False) -> WriteFileResult:
    """Write *content* to a file, creating parent directories when *create* is set."""
    target = Path(resolve_path(work_dir, path))
    if create:
        target.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode("utf-8")
    target.write_bytes(encoded)
    return WriteFileResult(path=str(target), bytes_written=len(encoded))


def update_file(work_dir: str, path: str, old_string: str, new_string: str) -> str:
    """Replace the single occurrence of *old_string* in a file with *new_string*.

    Raises ValueError when *old_string* is missing or occurs more than once.
    Returns the updated file's path.
    """
    target = Path(resolve_path(work_dir, path))
    content = target.read_bytes().decode("utf-8", errors="surrogateescape")

    count = content.count(old_string)
    if count == 0:
        raise ValueError(f"old_string not found in {target}")
    if count > 1:
        raise ValueError(f"old_string appears {count} times in {target} — must be unique")

    updated = content.replace(old_string, new_string, 1)
    target.write_bytes(updated.encode("utf-8", errors="surrogateescape"))
    return str(target)