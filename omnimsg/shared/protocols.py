"""
Type Protocols and Interfaces

Defines protocol interfaces for structural typing throughout the application.
"""

from abc import abstractmethod
from typing import Optional, Protocol, Tuple, runtime_checkable

from .models import LineResult, PeerAddress, ReceiveResult


@runtime_checkable
class DatagramEndpoint(Protocol):
    """Protocol for a bound, connectionless datagram endpoint."""

    @abstractmethod
    def recvfrom(self, buffer_size: int) -> Tuple[bytes, PeerAddress]:
        """
        Receive one datagram.

        Args:
            buffer_size: Maximum number of bytes to receive.

        Returns:
            Tuple of (payload, peer address).
        """
        ...

    @abstractmethod
    def getsockopt(self, level: int, optname: int) -> int:
        """Query a socket option."""
        ...

    @abstractmethod
    def fileno(self) -> int:
        """Return the underlying descriptor."""
        ...


@runtime_checkable
class ReceiveAdapter(Protocol):
    """Protocol for platform-uniform non-blocking receive."""

    @abstractmethod
    def try_receive(self, endpoint: DatagramEndpoint, max_size: int) -> ReceiveResult:
        """
        Try to receive one datagram without blocking.

        Args:
            endpoint: The bound endpoint to read from.
            max_size: Maximum datagram size to accept.

        Returns:
            RECEIVED with payload and peer, EMPTY, or IO_ERROR.
        """
        ...


@runtime_checkable
class LineReader(Protocol):
    """Protocol for platform-uniform non-blocking line input."""

    @abstractmethod
    def open(self) -> None:
        """Acquire any terminal or descriptor state the reader needs."""
        ...

    @abstractmethod
    def try_read_line(self) -> LineResult:
        """
        Try to read one completed line.

        Returns:
            LINE with text, NO_LINE_YET, INTERRUPTED, or IO_ERROR.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Restore terminal or descriptor state modified by open()."""
        ...

    @abstractmethod
    def fileno(self) -> Optional[int]:
        """Descriptor that becomes readable when input arrives, if any."""
        ...


@runtime_checkable
class KeySource(Protocol):
    """Protocol for polling individual keystrokes."""

    @abstractmethod
    def open(self) -> None:
        """Put the console into a mode where single keystrokes can be polled."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Restore the console mode changed by open()."""
        ...

    @abstractmethod
    def kbhit(self) -> bool:
        """Return True if a keystroke is pending."""
        ...

    @abstractmethod
    def getch(self) -> str:
        """Return the next pending keystroke."""
        ...
