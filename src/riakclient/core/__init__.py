"""
Core client components.

This module contains the header codec, the value models, the batch
executor and the client built on them.
"""

from riakclient.core.errors import (
    RiakError,
    InvalidKeyError,
    InvalidArgumentError,
    InvalidResponseError,
    TransportError,
    UnexpectedStatusError,
)
from riakclient.core.metadata import (
    Link,
    ObjectMetadata,
    RawBody,
    StructuredBody,
    StoredValue,
    PutRequest,
    BatchResult,
    IndexQueryResult,
)
from riakclient.core.headers import decode_headers, encode_headers, split_metadata
from riakclient.core.executor import BatchExecutor
from riakclient.core.client import RiakClient

__all__ = [
    "RiakError",
    "InvalidKeyError",
    "InvalidArgumentError",
    "InvalidResponseError",
    "TransportError",
    "UnexpectedStatusError",
    "Link",
    "ObjectMetadata",
    "RawBody",
    "StructuredBody",
    "StoredValue",
    "PutRequest",
    "BatchResult",
    "IndexQueryResult",
    "decode_headers",
    "encode_headers",
    "split_metadata",
    "BatchExecutor",
    "RiakClient",
]
