"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and fakes for the test suite.
"""

import errno
import io
import logging
import os
from collections import deque
from typing import Deque, Iterable, List, Optional, Tuple

import pytest
from rich.console import Console

from omnimsg.client.ui.display_manager import DisplayManager
from omnimsg.shared.config import ClientConfig
from omnimsg.shared.exceptions import SendError
from omnimsg.shared.models import LineResult

PEER = ("10.0.0.5", 24250)


class FakeEndpoint:
    """In-memory stand-in for a bound, non-blocking UDP endpoint."""

    def __init__(self, datagrams: Iterable[Tuple[bytes, Tuple[str, int]]] = ()) -> None:
        self.queue: Deque[Tuple[bytes, Tuple[str, int]]] = deque(datagrams)
        self.destination = ("255.255.255.255", 24250)
        self.sent: List[bytes] = []
        self.recv_calls = 0
        self.close_calls = 0
        self.recv_error: Optional[OSError] = None
        self.send_error: Optional[OSError] = None

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def queue_datagram(self, data: bytes, peer: Tuple[str, int] = PEER) -> None:
        self.queue.append((data, peer))

    def recvfrom(self, buffer_size: int):
        self.recv_calls += 1
        if self.recv_error is not None:
            raise self.recv_error
        if not self.queue:
            raise BlockingIOError(errno.EAGAIN, "Resource temporarily unavailable")
        data, peer = self.queue.popleft()
        return data[:buffer_size], peer

    def getsockopt(self, level: int, optname: int) -> int:
        return len(self.queue[0][0]) if self.queue else 0

    def fileno(self) -> int:
        return -1

    def send(self, payload: bytes) -> int:
        if self.closed:
            raise SendError("sendto() failed: endpoint is closed", address="255.255.255.255:24250")
        if self.send_error is not None:
            raise SendError(f"sendto() failed: {self.send_error}", address="255.255.255.255:24250")
        self.sent.append(payload)
        return len(payload)

    def close(self) -> None:
        self.close_calls += 1


class ScriptedLineReader:
    """Line reader that replays a fixed list of results, then reports no input."""

    def __init__(self, results: Iterable = ()) -> None:
        self.results = deque(results)
        self.open_calls = 0
        self.close_calls = 0
        self.polls = 0

    def open(self) -> None:
        self.open_calls += 1

    def close(self) -> None:
        self.close_calls += 1

    def fileno(self) -> Optional[int]:
        return None

    def try_read_line(self) -> LineResult:
        self.polls += 1
        if not self.results:
            return LineResult.no_line_yet()
        result = self.results.popleft()
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, str):
            return LineResult.line(result)
        return result


class FakeKeySource:
    """Key source that yields a fixed sequence of keystrokes."""

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self.keys: Deque[str] = deque(keys)
        self.opened = False
        self.closed = False

    def feed(self, keys: Iterable[str]) -> None:
        self.keys.extend(keys)

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def kbhit(self) -> bool:
        return bool(self.keys)

    def getch(self) -> str:
        return self.keys.popleft()


@pytest.fixture
def client_config() -> ClientConfig:
    """Provide a test client configuration."""
    return ClientConfig(nickname="bob", port=24250, broadcast_address="255.255.255.255")


@pytest.fixture
def fake_endpoint() -> FakeEndpoint:
    return FakeEndpoint()


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def error_output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def display(output: io.StringIO, error_output: io.StringIO) -> DisplayManager:
    """Display manager writing plain text into string buffers."""
    return DisplayManager(
        console=Console(file=output, width=200, color_system=None),
        error_console=Console(file=error_output, width=200, color_system=None),
    )


@pytest.fixture
def pipe():
    """Provide a (read_fd, write_fd) pipe, closing whatever is still open afterwards."""
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        try:
            os.close(fd)
        except OSError:
            pass


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after a test reconfigures logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
