"""
Packet Codec

Encodes and decodes the OM1 wire format::

    OM1|<nickname>|<body>

Only the first separator after the prefix splits nickname from body, so a
body may contain further separators verbatim. Nothing is escaped, which
means a nickname containing the separator is mis-split on receive.
"""

from typing import Optional, Union

from .constants import (
    DEFAULT_NICKNAME,
    MAX_BODY_BYTES,
    MAX_NICKNAME_BYTES,
    MAX_PACKET_BYTES,
    PROTOCOL_PREFIX,
    PROTOCOL_SEPARATOR,
)
from .exceptions import InvalidPacketFormatError
from .models import Message

TEXT_ENCODING = "utf-8"


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode(TEXT_ENCODING, errors="replace")


def _to_text(value: bytes) -> str:
    return value.decode(TEXT_ENCODING, errors="replace")


def sanitize_body(body: Union[str, bytes, None]) -> bytes:
    """
    Strip CR/LF from a message body and truncate it to the body capacity.

    Args:
        body: Body text as typed by the operator.

    Returns:
        Sanitized body bytes.
    """
    if not body:
        return b""
    raw = _to_bytes(body).replace(b"\r", b"").replace(b"\n", b"")
    return raw[:MAX_BODY_BYTES]


def encode_packet(nickname: Optional[str], body: Union[str, bytes, None]) -> bytes:
    """
    Build an OM1 packet.

    Args:
        nickname: Sender nickname. Empty or None becomes "anon".
        body: Message body. CR/LF are removed silently.

    Returns:
        Packet payload, never longer than the packet capacity.
    """
    nick = _to_bytes(nickname or DEFAULT_NICKNAME)
    packet = PROTOCOL_PREFIX + nick + PROTOCOL_SEPARATOR + sanitize_body(body)
    return packet[:MAX_PACKET_BYTES]


def decode_packet(payload: bytes) -> Message:
    """
    Parse an OM1 packet.

    An empty nickname is accepted; callers display it as-is. Oversized
    fields are truncated rather than rejected.

    Args:
        payload: Raw datagram bytes.

    Returns:
        Decoded message.

    Raises:
        InvalidPacketFormatError: If the prefix or the nickname separator is missing.
    """
    if not payload.startswith(PROTOCOL_PREFIX):
        raise InvalidPacketFormatError(
            "Payload does not start with the OM1 prefix",
            message_data=payload,
            expected_format="OM1|<nickname>|<body>",
        )

    rest = payload[len(PROTOCOL_PREFIX):]
    nickname, separator, body = rest.partition(PROTOCOL_SEPARATOR)
    if not separator:
        raise InvalidPacketFormatError(
            "Packet has no nickname separator",
            message_data=payload,
            expected_format="OM1|<nickname>|<body>",
        )

    return Message(
        nickname=_to_text(nickname[:MAX_NICKNAME_BYTES]),
        body=_to_text(body[:MAX_BODY_BYTES]),
    )


def format_raw(payload: bytes) -> str:
    """Render an undecodable payload for display."""
    return _to_text(payload.rstrip(b"\x00\r\n"))
