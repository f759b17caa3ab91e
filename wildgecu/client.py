"""Client for the daemon's newline-delimited JSON chat socket."""

from __future__ import annotations

import json
import socket
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple


class ClientError(Exception):
    """Raised when talking to the daemon fails."""


@dataclass
class Event:
    """A server-to-client message."""

    type: str
    session_id: str = ""
    content: str = ""
    welcome: str = ""
    name: str = ""
    args: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Event":
        """Build an event from a decoded JSON object, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise ClientError("event is not a JSON object")
        values: Dict[str, str] = {}
        for spec in fields(cls):
            value = data.get(spec.name)
            if value is None:
                values[spec.name] = ""
            elif isinstance(value, str):
                values[spec.name] = value
            else:
                raise ClientError(f"event field {spec.name!r} is not a string")
        return cls(**values)


class Client:
    """A long-lived connection to the daemon speaking NDJSON."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._reader = sock.makefile("rb")

    @classmethod
    def connect(cls, socket_path: str) -> "Client":
        """Open a connection to the daemon's Unix socket."""
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(socket_path)
        except OSError as exc:
            sock.close()
            raise ClientError(f"connect to daemon: {exc}") from exc
        return cls(sock)

    def _send(self, label: str, type: str, session_id: str = "", content: str = "",
              mode: str = "", work_dir: str = "") -> None:
        request = {
            "type": type,
            "session_id": session_id,
            "content": content,
            "mode": mode,
            "work_dir": work_dir,
        }
        payload = {key: value for key, value in request.items() if key == "type" or value}
        line = json.dumps(payload, separators=(",", ":"), ensure_ascii=False) + "\n"
        try:
            self._sock.sendall(line.encode("utf-8"))
        except OSError as exc:
            raise ClientError(f"send {label}: {exc}") from exc

    def read_event(self) -> Event:
        """Read the next event from the daemon."""
        while True:
            try:
                line = self._reader.readline()
            except OSError as exc:
                raise ClientError(f"read event: {exc}") from exc
            if not line:
                raise ClientError("read event: connection closed")
            if line.strip():
                break
        try:
            data = json.loads(line)
        except ValueError as exc:
            raise ClientError(f"read event: {exc}") from exc
        return Event.from_dict(data)

    def _create(self, label: str, mode: str = "", work_dir: str = "") -> Tuple[str, str]:
        self._send(label, "session.create", mode=mode, work_dir=work_dir)
        try:
            event = self.read_event()
        except ClientError as exc:
            raise ClientError(f"read session.created: {exc}") from exc
        if event.type == "error":
            raise ClientError(f"session.create failed: {event.message}")
        return event.session_id, event.welcome

    def create_session(self) -> Tuple[str, str]:
        """Create a chat session; returns the session id and welcome text."""
        return self._create("session.create")

    def create_code_session(self, work_dir: str) -> Tuple[str, str]:
        """Create a code-mode session in *work_dir*; returns the id and welcome text."""
        return self._create("session.create (code)", mode="code", work_dir=work_dir)

    def send_message(self, session_id: str, content: str) -> None:
        """Send a user message; follow with read_event calls for the reply."""
        self._send("message", "message", session_id=session_id, content=content)

    def interrupt_session(self, session_id: str) -> None:
        """Ask the daemon to interrupt the session's current turn."""
        self._send("session.interrupt", "session.interrupt", session_id=session_id)

    def close_session(self, session_id: str) -> None:
        """Ask the daemon to close and finalize the session."""
        self._send("session.close", "session.close", session_id=session_id)

    def close(self) -> None:
        """Close the connection."""
        self._reader.close()
        self._sock.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args: Optional[object]) -> None:
        self.close()