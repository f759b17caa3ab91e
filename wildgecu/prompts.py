"""Conversation messages, soul and memory files, and system prompt assembly."""

from __future__ import annotations

import datetime as _dt
import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
from zoneinfo import ZoneInfo

SOUL_FILE = "SOUL.md"
MEMORY_FILE = "MEMORY.md"
USER_FILE = "USER.md"

_TOOL_RESULT_LIMIT = 200

PathLike = Union[str, Path]


class Role(str, enum.Enum):
    """Who authored a message."""

    USER = "user"
    MODEL = "model"
    TOOL = "tool"


@dataclass
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Message:
    """One message of a conversation."""

    role: Role
    content: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)


def format_transcript(messages: Iterable[Message]) -> str:
    """Render a conversation as a readable Markdown transcript.

    Tool results are shortened to their first 200 characters.
    """
    parts: List[str] = []
    for message in messages:
        if message.role == Role.USER:
            parts.append(f"**User:** {message.content}\n\n")
        elif message.role == Role.MODEL:
            if message.content:
                parts.append(f"**Assistant:** {message.content}\n\n")
            parts.extend(
                f"**Assistant** called tool `{call.name}`\n\n" for call in message.tool_calls
            )
        elif message.role == Role.TOOL:
            result = message.content
            if len(result) > _TOOL_RESULT_LIMIT:
                result = result[:_TOOL_RESULT_LIMIT] + "..."
            parts.append(f"**Tool result:** {result}\n\n")
    return "".join(parts)


def load_soul(home: PathLike) -> str:
    """Read SOUL.md from *home*; raises FileNotFoundError when it is absent."""
    return (Path(home) / SOUL_FILE).read_text(encoding="utf-8")


def load_memory(home: PathLike) -> str:
    """Read MEMORY.md from *home*; raises FileNotFoundError when it is absent."""
    return (Path(home) / MEMORY_FILE).read_text(encoding="utf-8")


def write_soul(home: PathLike, content: str) -> Path:
    """Write SOUL.md into *home*, creating the directory if needed."""
    target = Path(home) / SOUL_FILE
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


def _user_preferences(workspace: Optional[PathLike]) -> str:
    if workspace is None:
        return ""
    try:
        return (Path(workspace) / USER_FILE).read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return ""


def _assemble(base_prompt: str, soul_content: str, memory_content: str,
              workspace: Optional[PathLike]) -> str:
    sections = [f"# Agent\n\n{base_prompt.strip()}"]
    soul = soul_content.strip()
    if soul:
        sections.append(f"# Agent Soul\n\n{soul}")
    memory = memory_content.strip()
    if memory:
        sections.append(f"# Memory\n\n{memory}")
    preferences = _user_preferences(workspace)
    if preferences:
        sections.append(f"# User Preferences\n\n{preferences}")
    return "\n\n".join(sections)


def build_system_prompt(agent_prompt: str, soul_content: str, memory_content: str,
                        workspace: Optional[PathLike] = None) -> str:
    """Join the agent prompt, soul, memory and the workspace's USER.md into one prompt."""
    return _assemble(agent_prompt, soul_content, memory_content, workspace)


def build_code_system_prompt(code_prompt: str, soul_content: str, memory_content: str,
                             work_dir: str, workspace: Optional[PathLike] = None) -> str:
    """Like build_system_prompt, with ``{CWD}`` in the code prompt replaced by *work_dir*."""
    return _assemble(code_prompt.replace("{CWD}", work_dir), soul_content,
                     memory_content, workspace)


def _rfc3339(moment: _dt.datetime) -> str:
    stamp = moment.strftime("%Y-%m-%dT%H:%M:%S")
    offset = moment.utcoffset() or _dt.timedelta(0)
    if offset == _dt.timedelta(0):
        return stamp + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{stamp}{sign}{hours:02d}:{mins:02d}"


def current_time(timezone: str = "") -> str:
    """Return the current time in an IANA *timezone* (UTC by default) as RFC 3339.

    Unknown zones raise ``zoneinfo.ZoneInfoNotFoundError``.
    """
    name = timezone or "UTC"
    now = _dt.datetime.now(_dt.timezone.utc)
    if name == "UTC":
        return _rfc3339(now)
    if name == "Local":
        return _rfc3339(now.astimezone())
    return _rfc3339(now.astimezone(ZoneInfo(name)))