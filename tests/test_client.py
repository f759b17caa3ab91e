import json
import socket
import tempfile
import os

import pytest

from wildgecu.client import Client, ClientError, Event


@pytest.fixture
def pair():
    client_sock, peer = socket.socketpair()
    client = Client(client_sock)
    reader = peer.makefile("rb")
    yield client, peer, reader
    reader.close()
    peer.close()
    client.close()


def _reply(peer, **event):
    peer.sendall((json.dumps(event) + "\n").encode("utf-8"))


def _request(reader):
    return json.loads(reader.readline())


def test_create_session(pair):
    client, peer, reader = pair
    _reply(peer, type="session.created", session_id="abc", welcome="Agent ready.")
    assert client.create_session() == ("abc", "Agent ready.")
    assert _request(reader) == {"type": "session.create"}


def test_create_code_session_sends_mode_and_dir(pair):
    client, peer, reader = pair
    _reply(peer, type="session.created", session_id="s1", welcome="hi")
    assert client.create_code_session("/work") == ("s1", "hi")
    assert _request(reader) == {"type": "session.create", "mode": "code", "work_dir": "/work"}


def test_create_session_error_event(pair):
    client, peer, _ = pair
    _reply(peer, type="error", message="soul not found")
    with pytest.raises(ClientError, match="session.create failed: soul not found"):
        client.create_session()


def test_create_session_connection_closed():
    client_sock, peer = socket.socketpair()
    peer.close()
    with Client(client_sock) as client:
        with pytest.raises(ClientError, match="read session.created"):
            client.create_session()


def test_send_message_wire(pair):
    client, _, reader = pair
    client.send_message("s1", "hello")
    assert _request(reader) == {"type": "message", "session_id": "s1", "content": "hello"}


def test_interrupt_and_close_session_wire(pair):
    client, _, reader = pair
    client.interrupt_session("s1")
    client.close_session("s1")
    assert _request(reader) == {"type": "session.interrupt", "session_id": "s1"}
    assert _request(reader) == {"type": "session.close", "session_id": "s1"}


def test_read_event_sequence(pair):
    client, peer, _ = pair
    _reply(peer, type="chunk", content="Hel")
    _reply(peer, type="tool_call", name="bash", args="ls")
    _reply(peer, type="done", content="Hello")
    assert client.read_event() == Event(type="chunk", content="Hel")
    assert client.read_event() == Event(type="tool_call", name="bash", args="ls")
    assert client.read_event() == Event(type="done", content="Hello")


def test_read_event_ignores_unknown_keys(pair):
    client, peer, _ = pair
    _reply(peer, type="chunk", content="x", extra=1)
    assert client.read_event() == Event(type="chunk", content="x")


def test_read_event_invalid_json(pair):
    client, peer, _ = pair
    peer.sendall(b"not json\n")
    with pytest.raises(ClientError):
        client.read_event()


def test_read_event_eof():
    client_sock, peer = socket.socketpair()
    peer.close()
    client = Client(client_sock)
    with pytest.raises(ClientError, match="connection closed"):
        client.read_event()
    client.close()


def test_context_manager_closes_connection():
    client_sock, peer = socket.socketpair()
    client = Client(client_sock)
    with client as entered:
        assert entered is client
        _reply(peer, type="chunk", content="inside")
        assert entered.read_event() == Event(type="chunk", content="inside")
    assert peer.recv(16) == b""
    peer.close()


def test_connect_missing_socket(tmp_path):
    with pytest.raises(ClientError, match="connect to daemon"):
        Client.connect(str(tmp_path / "missing.sock"))


def test_connect_to_listening_socket():
    with tempfile.TemporaryDirectory() as directory:
        path = os.path.join(directory, "d.sock")
        server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        server.bind(path)
        server.listen(1)
        try:
            with Client.connect(path) as client:
                conn, _ = server.accept()
                client.send_message("s", "ping")
                line = conn.makefile("rb").readline()
                conn.close()
            assert json.loads(line) == {"type": "message", "session_id": "s", "content": "ping"}
        finally:
            server.close()