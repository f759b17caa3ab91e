"""Run shell commands and Node.js scripts for the agent."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import List, Optional, Union

DEFAULT_TIMEOUT = 30.0


@dataclass
class CommandResult:
    """Captured output and exit code of a finished command.

    A process killed by a signal or by the timeout has exit code -1.
    """

    stdout: str
    stderr: str
    exit_code: int


def _decode(data: Union[bytes, str, None]) -> str:
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")


def _run(args: List[str], cwd: Optional[str], timeout: float) -> CommandResult:
    try:
        completed = subprocess.run(args, cwd=cwd, capture_output=True, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        return CommandResult(stdout=_decode(exc.stdout), stderr=_decode(exc.stderr), exit_code=-1)

    code = completed.returncode
    return CommandResult(
        stdout=_decode(completed.stdout),
        stderr=_decode(completed.stderr),
        exit_code=code if code >= 0 else -1,
    )


def run_bash(command: str, cwd: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT) -> CommandResult:
    """Run *command* with ``bash -c`` in *cwd*, killing it after *timeout* seconds."""
    return _run(["bash", "-c", command], cwd, timeout)


def run_node(script: str, cwd: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT) -> CommandResult:
    """Run a Node.js *script* with ``node -e`` in *cwd*, killing it after *timeout* seconds."""
    return _run(["node", "-e", script], cwd, timeout)