"""
Exceptions raised by the query client

Every failure surfaced to a caller is a SteamQueryError subclass so that
callers can catch the whole family or a single kind.
"""


class SteamQueryError(Exception):
    """Base class for all query errors"""


class TransportFailure(SteamQueryError):
    """Address resolution or socket level failure"""


class QueryTimeout(SteamQueryError):
    """A send or receive phase did not complete in time"""

    def __init__(self, message: str, timeout_ms: int):
        super().__init__(message)
        self.timeout_ms = timeout_ms


class SendTimeout(QueryTimeout):
    """The request datagram could not be sent before the timeout"""


class ReceiveTimeout(QueryTimeout):
    """No reply datagram arrived before the timeout"""


class InvalidHeader(SteamQueryError):
    """
    Reply does not carry the expected response marker.

    Args:
        expected: Marker byte the decoder wanted at offset 4
        actual: Marker byte found, or None if the reply was too short
    """

    def __init__(self, expected: int, actual=None):
        if actual is None:
            message = f"Reply too short to hold a header (expected marker 0x{expected:02x})"
        else:
            message = f"Invalid reply header: expected 0x{expected:02x}, got 0x{actual:02x}"
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class TruncatedData(SteamQueryError):
    """
    Buffer ended before a field could be read.

    Args:
        offset: Read offset at which the field started
        needed: Bytes the field required (None for unterminated strings)
        available: Bytes left in the buffer
    """

    def __init__(self, offset: int, needed, available: int):
        if needed is None:
            message = f"Unterminated string at offset {offset} ({available} bytes left)"
        else:
            message = f"Need {needed} bytes at offset {offset}, only {available} left"
        super().__init__(message)
        self.offset = offset
        self.needed = needed
        self.available = available
