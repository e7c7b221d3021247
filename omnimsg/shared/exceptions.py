"""
Custom Exceptions

Defines custom exception classes for the LAN messenger.
"""

from typing import Optional


class OmniMsgError(Exception):
    """Base exception class for all messenger errors."""
    pass


class NetworkError(OmniMsgError):
    """Raised when network-related errors occur."""

    def __init__(self, message: str, operation: Optional[str] = None, address: Optional[str] = None):
        super().__init__(message)
        self.operation = operation
        self.address = address


class EndpointError(NetworkError):
    """Raised when the datagram endpoint cannot be created or bound."""
    pass


class SendError(NetworkError):
    """Raised when a datagram cannot be sent."""

    def __init__(self, message: str, address: Optional[str] = None):
        super().__init__(message, operation="sendto", address=address)


class ProtocolError(OmniMsgError):
    """Raised when protocol-related errors occur."""

    def __init__(self, message: str, message_data: Optional[bytes] = None, expected_format: Optional[str] = None):
        super().__init__(message)
        self.message_data = message_data
        self.expected_format = expected_format


class InvalidPacketFormatError(ProtocolError):
    """Raised when a payload is not a well-formed OM1 packet."""
    pass


class ConfigurationError(OmniMsgError):
    """Raised when configuration-related errors occur."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details


class UIError(OmniMsgError):
    """Base class for console-related errors."""
    pass


class UnsupportedPlatformError(UIError):
    """Raised when the requested input mode is not available on this platform."""
    pass


class InputHandlingError(UIError):
    """Raised when operator input cannot be read."""
    pass
