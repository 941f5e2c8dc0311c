"""
Unit tests for the acceptor and its shutdown token.
"""

import socket
import threading

import pytest

from minihttpd.config import ServerConfig
from minihttpd.core.connection import Connection
from minihttpd.core.socket_server import SocketServer, ShutdownToken


class TestShutdownToken:
    """Tests for ShutdownToken."""

    def test_starts_uncancelled(self):
        token = ShutdownToken()

        assert not token.cancelled
        assert token.wait(timeout=0.01) is False

    def test_cancel_is_idempotent(self):
        token = ShutdownToken()
        token.cancel()
        token.cancel()

        assert token.cancelled
        assert token.wait(timeout=0.01) is True

    def test_cancel_closes_attached_socket(self):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        token = ShutdownToken()
        token.attach(sock)

        token.cancel()

        assert sock.fileno() == -1

    def test_attach_after_cancel_closes_socket(self):
        token = ShutdownToken()
        token.cancel()

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        token.attach(sock)

        assert sock.fileno() == -1

    def test_cancel_from_another_thread(self):
        token = ShutdownToken()
        threading.Thread(target=token.cancel).start()

        assert token.wait(timeout=5.0)


class TestSocketServer:
    """Tests for SocketServer."""

    def _start(self, server: SocketServer, handler) -> threading.Thread:
        thread = threading.Thread(target=server.start, args=(handler,), daemon=True)
        thread.start()
        assert server.wait_until_ready(timeout=5.0)
        return thread

    def test_each_connection_gets_a_thread(self, free_port: int):
        config = ServerConfig(host="127.0.0.1", port=free_port, accept_poll_interval=0.1)
        server = SocketServer(config)
        seen = []
        done = threading.Event()

        def handler(conn: Connection):
            seen.append(threading.current_thread().name)
            with conn:
                conn.send_response(conn.read_request().upper())
            if len(seen) == 2:
                done.set()

        thread = self._start(server, handler)
        assert server.is_running
        assert server.address == ("127.0.0.1", free_port)

        for payload in (b"one", b"two"):
            with socket.create_connection(server.address, timeout=5.0) as s:
                s.sendall(payload)
                s.shutdown(socket.SHUT_WR)
                assert s.recv(64) == payload.upper()

        assert done.wait(timeout=5.0)
        assert len(set(seen)) == 2
        assert all(name.startswith("conn-") for name in seen)

        server.shutdown()
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert not server.is_running

    @pytest.mark.filterwarnings("ignore::pytest.PytestUnhandledThreadExceptionWarning")
    def test_handler_crash_does_not_stop_acceptor(self, free_port: int):
        config = ServerConfig(host="127.0.0.1", port=free_port, accept_poll_interval=0.1)
        server = SocketServer(config)
        calls = []

        def handler(conn: Connection):
            calls.append(conn.id)
            with conn:
                if len(calls) == 1:
                    raise RuntimeError("handler crashed")
                conn.send_response(b"alive")

        thread = self._start(server, handler)

        with socket.create_connection(server.address, timeout=5.0) as s:
            s.shutdown(socket.SHUT_WR)
            assert s.recv(64) == b""

        with socket.create_connection(server.address, timeout=5.0) as s:
            s.shutdown(socket.SHUT_WR)
            assert s.recv(64) == b"alive"

        server.shutdown()
        thread.join(timeout=5.0)
        assert not thread.is_alive()

    def test_bind_failure_raises(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
            busy.bind(("127.0.0.1", 0))
            busy.listen(1)
            port = busy.getsockname()[1]

            server = SocketServer(ServerConfig(host="127.0.0.1", port=port))

            with pytest.raises(OSError):
                server.start(lambda conn: None)

        assert not server.is_running
