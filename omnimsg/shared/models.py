"""
Data Models

Defines data classes and models used throughout the LAN messenger.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

PeerAddress = Tuple[str, int]


class SessionState(Enum):
    """Enumeration of chat session states."""
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class ReceiveStatus(Enum):
    """Outcome of a single non-blocking receive attempt."""
    RECEIVED = "received"
    EMPTY = "empty"
    IO_ERROR = "io_error"


class LineStatus(Enum):
    """Outcome of a single operator input poll."""
    LINE = "line"
    NO_LINE_YET = "no_line_yet"
    INTERRUPTED = "interrupted"
    IO_ERROR = "io_error"


@dataclass(frozen=True)
class Message:
    """A chat message, either typed locally or decoded from a packet."""
    nickname: str
    body: str


@dataclass
class ReceiveResult:
    """Result of a receive attempt."""
    status: ReceiveStatus
    data: bytes = b""
    peer: Optional[PeerAddress] = None
    error: Optional[str] = None

    @classmethod
    def empty(cls) -> "ReceiveResult":
        return cls(ReceiveStatus.EMPTY)

    @classmethod
    def received(cls, data: bytes, peer: PeerAddress) -> "ReceiveResult":
        return cls(ReceiveStatus.RECEIVED, data=data, peer=peer)

    @classmethod
    def io_error(cls, error: str) -> "ReceiveResult":
        return cls(ReceiveStatus.IO_ERROR, error=error)


@dataclass
class LineResult:
    """Result of an input poll."""
    status: LineStatus
    text: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def line(cls, text: str) -> "LineResult":
        return cls(LineStatus.LINE, text=text)

    @classmethod
    def no_line_yet(cls) -> "LineResult":
        return cls(LineStatus.NO_LINE_YET)

    @classmethod
    def interrupted(cls) -> "LineResult":
        return cls(LineStatus.INTERRUPTED)

    @classmethod
    def io_error(cls, error: str) -> "LineResult":
        return cls(LineStatus.IO_ERROR, error=error)


@dataclass
class SessionStats:
    """Counters for a single chat session."""
    packets_received: int = 0
    malformed_packets: int = 0
    receive_errors: int = 0
    messages_sent: int = 0
    send_failures: int = 0
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def session_duration(self) -> float:
        """Get the session duration in seconds."""
        return (datetime.now() - self.started_at).total_seconds()
