"""
Riak HTTP Client

An asyncio client for the Riak key/value store's HTTP interface.
Translates vector clocks, links, user metadata and secondary index
annotations to and from HTTP headers, and runs multi-key operations
with a bounded number of requests in flight.
"""

__version__ = "0.1.0"

from riakclient.config import RiakConfig
from riakclient.core.client import RiakClient
from riakclient.core.errors import (
    RiakError,
    InvalidKeyError,
    InvalidArgumentError,
    InvalidResponseError,
    TransportError,
    UnexpectedStatusError,
)
from riakclient.core.headers import decode_headers, encode_headers
from riakclient.core.metadata import Link, ObjectMetadata, StoredValue, PutRequest, BatchResult

__all__ = [
    "RiakClient",
    "RiakConfig",
    "RiakError",
    "InvalidKeyError",
    "InvalidArgumentError",
    "InvalidResponseError",
    "TransportError",
    "UnexpectedStatusError",
    "decode_headers",
    "encode_headers",
    "Link",
    "ObjectMetadata",
    "StoredValue",
    "PutRequest",
    "BatchResult",
]
