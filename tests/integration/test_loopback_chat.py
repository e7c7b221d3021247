"""
Integration tests over real UDP sockets on the loopback interface.

Broadcast delivery depends on the host network, so these tests point the
sender at the receiver's loopback address instead.
"""

import sys
import time
from unittest.mock import Mock

import pytest

from conftest import ScriptedLineReader
from omnimsg.client.chat_client import ChatClient
from omnimsg.client.network.endpoint import open_broadcast_endpoint
from omnimsg.client.network.receiver import BufferedLengthReceiver, NonBlockingReceiver
from omnimsg.shared.codec import decode_packet, encode_packet
from omnimsg.shared.config import ClientConfig
from omnimsg.shared.models import LineResult, ReceiveStatus

DEADLINE = 2.0


def loopback_config(nickname):
    config = ClientConfig(nickname=nickname, bind_address="127.0.0.1")
    config.port = 0
    return config


@pytest.fixture
def endpoints():
    """A receiving and a sending endpoint, with the sender aimed at the receiver."""
    receiver = open_broadcast_endpoint(loopback_config("bob"))
    sender = open_broadcast_endpoint(loopback_config("alice"))
    sender.destination = receiver.local_address
    yield receiver, sender
    sender.close()
    receiver.close()


def receive_all(adapter, endpoint, expected):
    """Poll until `expected` datagrams arrived or the deadline passes."""
    received = []
    deadline = time.monotonic() + DEADLINE
    while len(received) < expected and time.monotonic() < deadline:
        result = adapter.try_receive(endpoint, 767)
        if result.status is ReceiveStatus.RECEIVED:
            received.append(result)
        else:
            time.sleep(0.01)
    return received


class TestLoopbackDelivery:
    """Datagrams between two real endpoints."""

    def test_nonblocking_delivery(self, endpoints):
        receiver, sender = endpoints
        for i in range(3):
            sender.send(encode_packet("alice", f"message {i}"))

        results = receive_all(NonBlockingReceiver(), receiver, 3)

        assert [decode_packet(r.data).body for r in results] == ["message 0", "message 1", "message 2"]
        assert all(r.peer[0] == "127.0.0.1" for r in results)
        assert NonBlockingReceiver().try_receive(receiver, 767).status is ReceiveStatus.EMPTY

    @pytest.mark.skipif(sys.platform == "win32", reason="FIONREAD ioctl is POSIX only")
    def test_buffered_length_delivery(self, endpoints):
        receiver, sender = endpoints
        sender.send(encode_packet("alice", "counted"))

        results = receive_all(BufferedLengthReceiver(), receiver, 1)

        assert len(results) == 1
        assert decode_packet(results[0].data).body == "counted"

    @pytest.mark.skipif(sys.platform == "win32", reason="FIONREAD ioctl is POSIX only")
    def test_empty_datagram_does_not_stall_buffered_length(self, endpoints):
        receiver, sender = endpoints
        sender.send(b"")
        sender.send(encode_packet("alice", "after"))

        results = receive_all(BufferedLengthReceiver(), receiver, 1)

        assert len(results) == 1
        assert decode_packet(results[0].data).body == "after"
        assert BufferedLengthReceiver().try_receive(receiver, 767).status is ReceiveStatus.EMPTY


class TestLoopbackSession:
    """A chat session driven by real traffic."""

    def test_session_shows_incoming_and_sends_outgoing(self, endpoints, display, output):
        receiver, sender = endpoints
        sender.send(encode_packet("alice", "hello"))

        reader = ScriptedLineReader()
        client = ChatClient(
            ClientConfig(nickname="bob"),
            receiver,
            line_reader=reader,
            display=display,
            sleep=Mock(),
        )
        # Point bob back at alice so his reply can be read from her endpoint.
        receiver.destination = sender.local_address

        deadline = time.monotonic() + DEADLINE
        while "alice: hello" not in output.getvalue() and time.monotonic() < deadline:
            client.run_cycle()
            time.sleep(0.01)

        reader.results.extend([LineResult.line("hi alice"), LineResult.line("/quit")])
        assert client.run() == 0

        assert "[127.0.0.1] alice: hello" in output.getvalue()
        assert receiver.closed
        replies = receive_all(NonBlockingReceiver(), sender, 1)
        assert replies[0].data == b"OM1|bob|hi alice"
