"""
Broadcast Endpoint

Creates and owns the bound UDP socket used for a chat session.
"""

import logging
import socket
from typing import Optional, Tuple

from omnimsg.shared.config import ClientConfig
from omnimsg.shared.exceptions import EndpointError, SendError
from omnimsg.shared.models import PeerAddress
from omnimsg.shared.utils import format_address

logger = logging.getLogger(__name__)

# Option names applied best-effort; platforms without them simply skip.
_BEST_EFFORT_OPTIONS = ("SO_REUSEADDR", "SO_REUSEPORT", "SO_BROADCAST")


class BroadcastEndpoint:
    """
    A bound datagram socket plus the broadcast destination for sends.

    The socket is closed exactly once; further close() calls are no-ops.
    """

    def __init__(self, sock: socket.socket, destination: Tuple[str, int]) -> None:
        """
        Initialize the endpoint.

        Args:
            sock: An already bound datagram socket.
            destination: Broadcast (host, port) that outgoing packets go to.
        """
        self._socket: Optional[socket.socket] = sock
        self.destination = destination

    @property
    def closed(self) -> bool:
        return self._socket is None

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise OSError("endpoint is closed")
        return self._socket

    def recvfrom(self, buffer_size: int) -> Tuple[bytes, PeerAddress]:
        return self._require_socket().recvfrom(buffer_size)

    def getsockopt(self, level: int, optname: int) -> int:
        return self._require_socket().getsockopt(level, optname)

    def fileno(self) -> int:
        return self._require_socket().fileno()

    @property
    def local_address(self) -> PeerAddress:
        """Address the socket is bound to."""
        return self._require_socket().getsockname()

    def send(self, payload: bytes) -> int:
        """
        Send a payload to the broadcast destination.

        Raises:
            SendError: If the socket is closed or sendto fails.
        """
        address = format_address(self.destination)
        try:
            return self._require_socket().sendto(payload, self.destination)
        except OSError as e:
            raise SendError(f"sendto() failed: {e}", address=address) from e

    def close(self) -> None:
        """Close the socket if it is still open."""
        if self._socket is None:
            return
        sock, self._socket = self._socket, None
        try:
            sock.close()
        except OSError as e:
            logger.debug(f"Error while closing endpoint: {e}")

    def __enter__(self) -> "BroadcastEndpoint":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _apply_best_effort_options(sock: socket.socket) -> None:
    for name in _BEST_EFFORT_OPTIONS:
        option = getattr(socket, name, None)
        if option is None:
            continue
        try:
            sock.setsockopt(socket.SOL_SOCKET, option, 1)
        except OSError as e:
            logger.debug(f"Could not set {name}: {e}")


def open_broadcast_endpoint(config: ClientConfig) -> BroadcastEndpoint:
    """
    Create, configure and bind the session socket.

    Args:
        config: Client configuration with port, bind and broadcast addresses.

    Returns:
        A non-blocking BroadcastEndpoint.

    Raises:
        EndpointError: If the socket cannot be created or bound.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as e:
        raise EndpointError(f"socket() failed: {e}", operation="socket") from e

    _apply_best_effort_options(sock)

    local = (config.bind_address, config.port)
    try:
        sock.bind(local)
    except OSError as e:
        sock.close()
        raise EndpointError(f"bind() failed: {e}", operation="bind", address=format_address(local)) from e

    try:
        sock.setblocking(False)
    except OSError as e:
        # Buffered-length polling does not need the flag.
        logger.warning(f"Could not switch socket to non-blocking mode: {e}")

    endpoint = BroadcastEndpoint(sock, config.destination)
    logger.info(f"Bound UDP endpoint on {format_address(local)}, broadcasting to {format_address(config.destination)}")
    return endpoint
