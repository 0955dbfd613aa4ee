"""
HTTP Transport Layer.

Provides the single-exchange HTTP interface used by the client.
"""

from riakclient.transport.interface import Transport, TransportResponse
from riakclient.transport.httpx_transport import HttpxTransport

__all__ = [
    "Transport",
    "TransportResponse",
    "HttpxTransport",
]
