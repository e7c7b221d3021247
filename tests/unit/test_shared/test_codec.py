"""
Unit tests for the OM1 packet codec.
"""

import pytest

from omnimsg.shared.codec import decode_packet, encode_packet, format_raw, sanitize_body
from omnimsg.shared.constants import MAX_BODY_BYTES, MAX_NICKNAME_BYTES, MAX_PACKET_BYTES
from omnimsg.shared.exceptions import InvalidPacketFormatError, ProtocolError
from omnimsg.shared.models import Message


class TestEncodePacket:
    """Test packet encoding."""

    def test_basic_encoding(self):
        assert encode_packet("alice", "hello") == b"OM1|alice|hello"

    def test_empty_nickname_becomes_anon(self):
        assert encode_packet("", "hi") == b"OM1|anon|hi"
        assert encode_packet(None, "hi") == b"OM1|anon|hi"

    def test_crlf_stripped_from_body(self):
        assert encode_packet("a", "line\r\nbreak\n") == b"OM1|a|linebreak"

    def test_empty_body(self):
        assert encode_packet("a", "") == b"OM1|a|"
        assert encode_packet("a", None) == b"OM1|a|"

    def test_body_truncated_to_capacity(self):
        packet = encode_packet("a", "x" * 2000)
        assert packet == b"OM1|a|" + b"x" * MAX_BODY_BYTES

    def test_packet_never_exceeds_capacity(self):
        packet = encode_packet("n" * 1000, "x" * 2000)
        assert len(packet) == MAX_PACKET_BYTES
        assert packet.startswith(b"OM1|")

    def test_body_delimiters_preserved(self):
        assert encode_packet("a", "x|y|z") == b"OM1|a|x|y|z"

    def test_unicode_body(self):
        assert encode_packet("a", "héllo") == "OM1|a|héllo".encode("utf-8")


class TestSanitizeBody:
    """Test body sanitizing."""

    def test_accepts_bytes(self):
        assert sanitize_body(b"a\rb\nc") == b"abc"

    def test_truncates(self):
        assert len(sanitize_body("y" * 600)) == MAX_BODY_BYTES


class TestDecodePacket:
    """Test packet decoding."""

    def test_basic_decoding(self):
        assert decode_packet(b"OM1|alice|hello") == Message("alice", "hello")

    def test_wrong_prefix_rejected(self):
        with pytest.raises(InvalidPacketFormatError):
            decode_packet(b"NOT_OM1|a|b")

    def test_missing_body_separator_rejected(self):
        with pytest.raises(InvalidPacketFormatError) as exc_info:
            decode_packet(b"OM1|onlyonefield")
        assert exc_info.value.message_data == b"OM1|onlyonefield"

    def test_format_error_is_protocol_error(self):
        with pytest.raises(ProtocolError):
            decode_packet(b"")

    def test_empty_fields_accepted(self):
        assert decode_packet(b"OM1||") == Message("", "")

    def test_first_delimiter_wins(self):
        message = decode_packet(b"OM1|bob|a|b|c")
        assert message.nickname == "bob"
        assert message.body == "a|b|c"

    def test_nickname_with_delimiter_is_mis_split(self):
        message = decode_packet(encode_packet("a|b", "text"))
        assert message.nickname == "a"
        assert message.body == "b|text"

    def test_oversized_nickname_truncated(self):
        message = decode_packet(b"OM1|" + b"n" * 100 + b"|body")
        assert message.nickname == "n" * MAX_NICKNAME_BYTES
        assert message.body == "body"

    def test_oversized_body_truncated(self):
        message = decode_packet(b"OM1|a|" + b"b" * 5000)
        assert message.body == "b" * MAX_BODY_BYTES

    def test_invalid_utf8_replaced(self):
        message = decode_packet(b"OM1|a|\xff\xfe")
        assert message.body == "��"

    def test_round_trip(self):
        message = decode_packet(encode_packet("carol", "good\r\n morning"))
        assert message == Message("carol", "good morning")

    def test_message_is_immutable(self):
        message = decode_packet(b"OM1|a|b")
        with pytest.raises(AttributeError):
            message.body = "changed"


class TestFormatRaw:
    """Test display fallback text."""

    def test_trailing_noise_trimmed(self):
        assert format_raw(b"hello\r\n\x00") == "hello"

    def test_binary_replaced(self):
        assert format_raw(b"\xffok") == "�ok"
