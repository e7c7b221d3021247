"""
Main Chat Client

The cooperative event loop that ties the receive adapter, the line reader
and the packet codec together.

Each cycle drains every datagram that is already queued, polls operator
input once, acts on a completed line, and then idles for a fixed interval.
The loop is single-threaded; the session owns the endpoint and the input
reader exclusively.
"""

import logging
import select
import sys
import time
from typing import Callable, Optional

from omnimsg.client.network.endpoint import BroadcastEndpoint
from omnimsg.client.network.receiver import create_receiver
from omnimsg.client.ui.display_manager import DisplayManager
from omnimsg.client.ui.input_handler import create_line_reader
from omnimsg.shared.codec import decode_packet, encode_packet, format_raw
from omnimsg.shared.config import ClientConfig
from omnimsg.shared.constants import (
    HELP_COMMAND,
    QUIT_COMMAND,
    WAIT_SELECT,
    WINDOWS_PLATFORM,
)
from omnimsg.shared.exceptions import InputHandlingError, InvalidPacketFormatError, SendError
from omnimsg.shared.models import (
    LineResult,
    LineStatus,
    ReceiveResult,
    ReceiveStatus,
    SessionState,
    SessionStats,
)
from omnimsg.shared.protocols import LineReader, ReceiveAdapter
from omnimsg.shared.utils import format_address


class ChatClient:
    """
    Chat session state machine: RUNNING -> STOPPING -> STOPPED.

    The endpoint is released exactly once, when the session reaches STOPPED.
    """

    def __init__(self, config: ClientConfig,
                 endpoint: BroadcastEndpoint,
                 receiver: Optional[ReceiveAdapter] = None,
                 line_reader: Optional[LineReader] = None,
                 display: Optional[DisplayManager] = None,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        """
        Initialize the chat client.

        Args:
            config: Client configuration.
            endpoint: Bound, non-blocking endpoint owned by this session.
            receiver: Receive adapter. Defaults to the configured strategy.
            line_reader: Input reader. Defaults to the configured input mode.
            display: Console output. Defaults to stdout/stderr.
            sleep: Idle primitive, replaceable for tests.
        """
        self.config = config
        self.endpoint = endpoint
        self.receiver = receiver or create_receiver(config.receive_strategy)
        self.line_reader = line_reader or create_line_reader(config.input_mode)
        self.display = display or DisplayManager()
        self.logger = logging.getLogger(__name__)

        self.state = SessionState.RUNNING
        self.stats = SessionStats()
        self._sleep = sleep

    @property
    def is_running(self) -> bool:
        return self.state is SessionState.RUNNING

    def run(self) -> int:
        """
        Run the session until /quit, an interrupt or a fatal input error.

        Returns:
            Process exit status: 0 after a graceful stop.
        """
        exit_status = 0
        try:
            try:
                self._open_input()
                self.display.show_prompt()
            except KeyboardInterrupt:
                self.stop("interrupted by user")
            while self.is_running:
                try:
                    self.run_cycle()
                except KeyboardInterrupt:
                    self.stop("interrupted by user")
        except Exception as e:
            self.logger.exception("Unexpected error in chat loop")
            self.display.show_warning(f"Unexpected error: {e}")
            exit_status = 1
        finally:
            self.shutdown()
        return exit_status

    def run_cycle(self) -> None:
        """Run one cooperative poll cycle."""
        self.drain_incoming()
        if self.is_running:
            self.poll_input()
        if self.is_running:
            self._idle()

    def drain_incoming(self) -> int:
        """
        Receive until the queue is empty or a receive error occurs.

        Returns:
            Number of datagrams received in this cycle.
        """
        received = 0
        while self.is_running:
            result = self.receiver.try_receive(self.endpoint, self.config.max_packet_size)

            if result.status is ReceiveStatus.EMPTY:
                break

            if result.status is ReceiveStatus.IO_ERROR:
                self.stats.receive_errors += 1
                self.logger.warning(result.error)
                self.display.show_warning(result.error or "recvfrom() failed")
                break

            received += 1
            self.stats.packets_received += 1
            self._show_packet(result)
        return received

    def _show_packet(self, result: ReceiveResult) -> None:
        try:
            message = decode_packet(result.data)
        except InvalidPacketFormatError as e:
            self.stats.malformed_packets += 1
            self.logger.debug(f"Malformed packet from {result.peer}: {e}")
            self.display.show_raw(result.peer, format_raw(result.data))
            return
        self.display.show_message(result.peer, message)

    def poll_input(self) -> LineResult:
        """Poll the line reader once and act on the outcome."""
        result = self.line_reader.try_read_line()

        if result.status is LineStatus.INTERRUPTED:
            self.stop("input interrupted")
        elif result.status is LineStatus.IO_ERROR:
            self.logger.error(result.error)
            self.display.show_warning(result.error or "stdin read failed")
            self.stop("input error")
        elif result.status is LineStatus.LINE:
            self.handle_line(result.text or "")
        return result

    def handle_line(self, text: str) -> None:
        """Interpret a completed line as a command or a chat message."""
        if text == QUIT_COMMAND:
            self.stop("quit command")
            return

        if text == HELP_COMMAND:
            self.display.show_help()
            return

        if text:
            self.send_message(text)
        self.display.show_prompt()

    def send_message(self, text: str) -> bool:
        """
        Encode and broadcast a chat message. Failures are reported, not raised.

        Returns:
            True if the packet was handed to the socket.
        """
        payload = encode_packet(self.config.nickname, text)
        try:
            self.endpoint.send(payload)
        except SendError as e:
            self.stats.send_failures += 1
            self.logger.warning(f"Send to {e.address} failed: {e}")
            self.display.show_warning(str(e))
            return False

        self.stats.messages_sent += 1
        self.logger.debug(f"Sent {len(payload)} bytes to {format_address(self.config.destination)}")
        return True

    def stop(self, reason: str) -> None:
        """Request the session to stop after the current step."""
        if self.state is SessionState.RUNNING:
            self.logger.info(f"Stopping chat session: {reason}")
            self.state = SessionState.STOPPING

    def shutdown(self) -> None:
        """Restore input state, release the endpoint and say goodbye. Idempotent."""
        if self.state is SessionState.STOPPED:
            return
        self.state = SessionState.STOPPING

        try:
            self.line_reader.close()
        except (OSError, InputHandlingError) as e:
            self.logger.warning(f"Failed to restore input state: {e}")

        self.endpoint.close()
        self.state = SessionState.STOPPED

        self.logger.info(
            f"Session ended after {self.stats.session_duration:.1f}s: "
            f"{self.stats.packets_received} received "
            f"({self.stats.malformed_packets} malformed, {self.stats.receive_errors} receive errors), "
            f"{self.stats.messages_sent} sent ({self.stats.send_failures} failed)"
        )
        self.display.show_farewell()

    def _open_input(self) -> None:
        try:
            self.line_reader.open()
        except (OSError, InputHandlingError) as e:
            self.logger.warning(f"Could not prepare input for polling: {e}")

    def _idle(self) -> None:
        interval = self.config.idle_interval
        if self.config.wait_strategy != WAIT_SELECT:
            self._sleep(interval)
            return

        descriptors = [self.endpoint.fileno()]
        input_fd = self.line_reader.fileno()
        # select() only accepts sockets on Windows.
        if input_fd is not None and sys.platform != WINDOWS_PLATFORM:
            descriptors.append(input_fd)

        try:
            select.select(descriptors, [], [], interval)
        except (OSError, ValueError) as e:
            self.logger.debug(f"select() wait failed, sleeping instead: {e}")
            self._sleep(interval)
