"""
Client Network Layer

Provides the datagram endpoint and non-blocking receive adapters.
"""

from .endpoint import BroadcastEndpoint, open_broadcast_endpoint
from .receiver import BufferedLengthReceiver, NonBlockingReceiver, create_receiver

__all__ = [
    "BroadcastEndpoint",
    "open_broadcast_endpoint",
    "BufferedLengthReceiver",
    "NonBlockingReceiver",
    "create_receiver",
]
