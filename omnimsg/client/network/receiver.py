"""
Non-blocking Receive Adapters

Platform-uniform "try to receive one datagram, don't block" operation.

Two strategies share the ReceiveAdapter interface:

* NonBlockingReceiver relies on the socket being in non-blocking mode and maps
  "would block" to EMPTY.
* BufferedLengthReceiver first asks the transport how many bytes are queued
  and only calls recvfrom when that count is positive. It is meant for stacks
  whose error reporting cannot tell "would block" from a real failure.
"""

import array
import errno
import logging
import select
import sys
from typing import Callable, Optional

from omnimsg.shared.constants import (
    RECEIVE_BUFFERED_LENGTH,
    RECEIVE_NONBLOCKING,
    WINDOWS_PLATFORM,
)
from omnimsg.shared.exceptions import ConfigurationError
from omnimsg.shared.models import ReceiveResult
from omnimsg.shared.protocols import DatagramEndpoint, ReceiveAdapter

# Platform-specific imports
if sys.platform != WINDOWS_PLATFORM:
    import fcntl
    import termios

logger = logging.getLogger(__name__)

_WOULD_BLOCK = {errno.EAGAIN, errno.EWOULDBLOCK}

BufferedLengthQuery = Callable[[DatagramEndpoint], int]


def fionread_query(endpoint: DatagramEndpoint) -> int:
    """
    Return the queued byte count on the endpoint via the FIONREAD ioctl.

    Linux reports the size of the next datagram only, which is 0 for an empty
    datagram at the head of the queue. A readable socket with a zero count
    therefore yields 1 so that the empty datagram gets consumed.

    Raises:
        OSError: If the ioctl is unavailable or fails.
    """
    if sys.platform == WINDOWS_PLATFORM:
        raise OSError(errno.ENOTSUP, "FIONREAD is not available on this platform")
    buf = array.array('i', [0])
    fd = endpoint.fileno()
    fcntl.ioctl(fd, termios.FIONREAD, buf, True)
    if buf[0] > 0:
        return buf[0]
    ready, _, _ = select.select([fd], [], [], 0)
    return 1 if ready else 0


class GetsockoptLengthQuery:
    """Buffered-length query through a driver-specific socket option."""

    def __init__(self, level: int, optname: int) -> None:
        self.level = level
        self.optname = optname

    def __call__(self, endpoint: DatagramEndpoint) -> int:
        return endpoint.getsockopt(self.level, self.optname)


class NonBlockingReceiver(ReceiveAdapter):
    """Receive adapter for sockets with reliable non-blocking semantics."""

    def try_receive(self, endpoint: DatagramEndpoint, max_size: int) -> ReceiveResult:
        try:
            data, peer = endpoint.recvfrom(max_size)
        except BlockingIOError:
            return ReceiveResult.empty()
        except OSError as e:
            if e.errno in _WOULD_BLOCK:
                return ReceiveResult.empty()
            return ReceiveResult.io_error(f"recvfrom() failed: {e}")

        if not data:
            return ReceiveResult.empty()
        return ReceiveResult.received(data, peer)


class BufferedLengthReceiver(ReceiveAdapter):
    """
    Receive adapter that polls the buffered byte count before receiving.

    A failed or zero count is reported as EMPTY without touching recvfrom,
    which could block on such stacks. Once the count is positive, any
    receive failure is an IO_ERROR; the error code is not inspected further.
    Zero-byte datagrams are consumed and skipped.
    """

    def __init__(self, query: Optional[BufferedLengthQuery] = None) -> None:
        """
        Initialize the receiver.

        Args:
            query: Callable returning the buffered byte count for an endpoint.
                Defaults to the FIONREAD ioctl.
        """
        self.query = query or fionread_query

    def try_receive(self, endpoint: DatagramEndpoint, max_size: int) -> ReceiveResult:
        while True:
            try:
                available = self.query(endpoint)
            except (OSError, ValueError) as e:
                logger.debug(f"Buffered-length query failed: {e}")
                return ReceiveResult.empty()

            if available <= 0:
                return ReceiveResult.empty()

            try:
                data, peer = endpoint.recvfrom(max_size)
            except OSError as e:
                return ReceiveResult.io_error(f"recvfrom() failed: {e}")

            if data:
                return ReceiveResult.received(data, peer)
            logger.debug(f"Discarded empty datagram from {peer}")


def create_receiver(strategy: str = RECEIVE_NONBLOCKING) -> ReceiveAdapter:
    """
    Build the receive adapter for a configured strategy.

    Raises:
        ConfigurationError: If the strategy name is unknown.
    """
    if strategy == RECEIVE_NONBLOCKING:
        return NonBlockingReceiver()
    if strategy == RECEIVE_BUFFERED_LENGTH:
        return BufferedLengthReceiver()
    raise ConfigurationError(f"Unknown receive strategy: {strategy}")
