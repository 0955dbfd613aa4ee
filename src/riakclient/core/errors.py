"""
Error types raised by the Riak client.
"""

from typing import Any, Optional


class RiakError(Exception):
    """Base class for all client errors."""
    pass


class InvalidKeyError(RiakError):
    """Raised when a key is missing, empty or not a string. Never sent over the wire."""

    def __init__(self, key: Any):
        super().__init__(f"Invalid key: {key!r}")
        self.key = key


class InvalidArgumentError(RiakError):
    """Raised for malformed arguments, e.g. batch input that is not a sequence."""
    pass


class TransportError(RiakError):
    """Raised when the underlying HTTP exchange fails (connection, I/O, timeout)."""
    pass


class InvalidResponseError(RiakError):
    """Raised when a successful response carries a body that cannot be decoded."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(f"{message} ({url})" if url else message)
        self.url = url


class UnexpectedStatusError(RiakError):
    """Raised when Riak answers with a status outside the set handled by an operation."""

    def __init__(
        self,
        status_code: int,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        message = f"riak returned status code: {status_code}"
        if method and url:
            message = f"{message} ({method} {url})"
        super().__init__(message)
        self.status_code = status_code
        self.method = method
        self.url = url
