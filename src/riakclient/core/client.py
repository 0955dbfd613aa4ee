"""
Riak HTTP client.

Single-key get/put/delete, batched variants and secondary index queries
against one bucket.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote

import structlog

from riakclient.config import RiakConfig, get_config
from riakclient.core.errors import (
    InvalidArgumentError,
    InvalidKeyError,
    InvalidResponseError,
    UnexpectedStatusError,
)
from riakclient.core.executor import BatchExecutor
from riakclient.core.headers import (
    CONTENT_TYPE_HEADER,
    JSON_CONTENT_TYPE,
    TEXT_CONTENT_TYPE,
    decode_headers,
    media_type,
    split_metadata,
)
from riakclient.core.metadata import (
    BatchResult,
    IndexQueryResult,
    PutRequest,
    RawBody,
    StoredValue,
    StructuredBody,
    as_body,
)
from riakclient.transport.httpx_transport import HttpxTransport
from riakclient.transport.interface import Transport, TransportResponse

logger = structlog.get_logger(__name__)


def _validate_key(key: Any) -> str:
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(key)
    return key


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RiakClient:
    """
    Client for one Riak bucket over the HTTP interface.

    Settings resolve as: explicit argument, then configuration (which reads
    SZ_RIAK_* environment variables), then defaults.

    Usage:
        ```python
        async with RiakClient("users") as riak:
            await riak.put("jane", {"name": "Jane", "meta": {"source": "signup"}})
            value = await riak.get("jane")
            values = await riak.batch_get(["jane", "john"])
        ```
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        config: Optional[RiakConfig] = None,
        transport: Optional[Transport] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        concurrency_limit: Optional[int] = None,
    ):
        """
        Initialize the client.

        Args:
            bucket: Bucket name (falls back to config.bucket)
            config: Client configuration. Uses global config if not provided.
            transport: Custom transport (HttpxTransport if not provided)
            host: Riak host override
            port: Riak port override
            concurrency_limit: Maximum in-flight requests for batch operations
        """
        overrides = {
            name: value
            for name, value in (
                ("host", host),
                ("port", port),
                ("concurrency_limit", concurrency_limit),
            )
            if value is not None
        }
        self.config = (config or get_config()).model_copy(update=overrides)

        self.bucket = bucket or self.config.bucket
        if not self.bucket:
            raise InvalidArgumentError("Bucket name not configured")

        self.host = self.config.host
        self.port = self.config.port
        self.concurrency_limit = self.config.concurrency_limit

        self.transport = transport or HttpxTransport(self.config)
        self._executor = BatchExecutor(self.concurrency_limit)

    async def __aenter__(self) -> "RiakClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying transport."""
        await self.transport.close()

    # URLs

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def get_url(self, key: str) -> str:
        """URL of a key in this client's bucket."""
        return f"{self.base_url}/buckets/{quote(self.bucket, safe='')}/keys/{quote(str(key), safe='')}"

    def get_index_url(self, index: str, value: Any, end: Any = None) -> str:
        """URL of a secondary index exact-match or range query."""
        url = (
            f"{self.base_url}/buckets/{quote(self.bucket, safe='')}"
            f"/index/{quote(index, safe='')}/{quote(str(value), safe='')}"
        )
        if end is not None:
            url += f"/{quote(str(end), safe='')}"
        return url

    # Exchange helpers

    async def _request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        logger.debug("riak_request", method=method, url=url)

        response = await self.transport.request(
            method,
            url,
            headers=headers,
            body=body,
            params=params,
        )

        logger.debug(
            "riak_response",
            method=method,
            url=url,
            status=response.status_code,
            headers=response.headers,
        )
        return response

    def _unexpected(self, response: TransportResponse, method: str, url: str) -> UnexpectedStatusError:
        logger.error(
            "riak_unexpected_status",
            method=method,
            url=url,
            status=response.status_code,
            body=response.body[:200] if response.body else "",
        )
        return UnexpectedStatusError(response.status_code, method, url)

    def _parse_json(self, response: TransportResponse, url: str) -> Any:
        try:
            return json.loads(response.body)
        except ValueError as e:
            logger.error("riak_invalid_json", url=url, error=str(e))
            raise InvalidResponseError(f"Invalid JSON body: {e}", url) from e

    def _decode_value(self, key: str, response: TransportResponse, url: str) -> StoredValue:
        metadata = decode_headers(response.headers)

        if media_type(metadata.content_type) == JSON_CONTENT_TYPE and response.body:
            body = StructuredBody(self._parse_json(response, url))
        else:
            body = RawBody(response.body or "")

        return StoredValue(
            key=key,
            body=body,
            metadata=metadata,
            raw_headers=dict(response.headers),
        )

    # Single-key operations

    async def get(self, key: str) -> StoredValue:
        """
        Fetch a key.

        Returns:
            The stored value, or an empty (found=False) value if the key does not exist

        Raises:
            InvalidKeyError: If key is not a non-empty string
            UnexpectedStatusError: For any status other than 200 or 404
            InvalidResponseError: If a JSON body cannot be parsed
            TransportError: If the exchange fails
        """
        key = _validate_key(key)
        url = self.get_url(key)

        response = await self._request("GET", url)

        if response.status_code == 404:
            return StoredValue.empty(key)

        if response.status_code != 200:
            raise self._unexpected(response, "GET", url)

        return self._decode_value(key, response, url)

    async def put(
        self,
        key: str,
        body: Any,
        headers: Optional[Mapping[str, str]] = None,
    ) -> StoredValue:
        """
        Store a value under a key.

        Non-string bodies are stored as JSON. A mapping body may carry
        vclock, links, meta and index fields; these are sent as headers and
        left out of the stored document. The caller's body is not modified.

        Args:
            key: Key to store under
            body: Text, structured data, or a RawBody/StructuredBody
            headers: Extra request headers

        Returns:
            The stored value as returned by Riak

        Raises:
            InvalidKeyError: If key is not a non-empty string
            UnexpectedStatusError: For any status other than 200
            InvalidResponseError: If a JSON body cannot be parsed
            TransportError: If the exchange fails
        """
        key = _validate_key(key)
        request_headers: Dict[str, str] = {
            name.lower(): value for name, value in (headers or {}).items()
        }

        value = as_body(body)
        if isinstance(value, StructuredBody):
            request_headers[CONTENT_TYPE_HEADER] = JSON_CONTENT_TYPE
            data = value.value
            if isinstance(data, Mapping):
                inline_headers, data = split_metadata(data)
                request_headers.update(inline_headers)
            text = json.dumps(data)
        else:
            text = value.text

        request_headers.setdefault(CONTENT_TYPE_HEADER, TEXT_CONTENT_TYPE)

        url = self.get_url(key)
        response = await self._request(
            "PUT",
            url,
            headers=request_headers,
            body=text,
            params={"returnbody": "true"},
        )

        if response.status_code != 200:
            raise self._unexpected(response, "PUT", url)

        return self._decode_value(key, response, url)

    async def delete(self, key: str) -> None:
        """
        Delete a key. Deleting a missing key succeeds.

        Raises:
            InvalidKeyError: If key is not a non-empty string
            UnexpectedStatusError: For any status other than 204 or 404
            TransportError: If the exchange fails
        """
        key = _validate_key(key)
        url = self.get_url(key)

        response = await self._request("DELETE", url)

        if response.status_code in (204, 404):
            return

        raise self._unexpected(response, "DELETE", url)

    # Batch operations

    async def batch_get(self, keys: Sequence[str]) -> List[BatchResult]:
        """Fetch several keys; results follow the order of `keys`."""
        async def fetch(key: str) -> BatchResult:
            value = await self.get(key)
            return BatchResult(value=value, raw_headers=value.raw_headers)

        return await self._executor.run(keys, fetch)

    async def batch_put(self, requests: Sequence[Any]) -> List[BatchResult]:
        """
        Store several values; results follow the order of `requests`.

        Args:
            requests: PutRequest objects, {"key", "body", "headers"} mappings
                or (key, body[, headers]) tuples
        """
        puts = [PutRequest.from_value(r) for r in BatchExecutor.validate(requests)]

        async def store(request: PutRequest) -> BatchResult:
            value = await self.put(request.key, request.body, request.headers)
            return BatchResult(value=value, raw_headers=value.raw_headers)

        return await self._executor.run(puts, store)

    async def batch_delete(self, keys: Sequence[str]) -> None:
        """Delete several keys."""
        await self._executor.run(keys, self.delete)

    # Secondary indexes

    async def query_index(
        self,
        index: str,
        value: Any,
        end: Any = None,
        **options: Any,
    ) -> IndexQueryResult:
        """
        Query a secondary index by exact value or by range.

        Args:
            index: Index name including its type suffix (e.g. "email_bin", "age_int")
            value: Exact value, or range start when `end` is given
            end: Range end (inclusive)
            **options: Extra query parameters (return_terms, max_results, continuation, ...)

        Returns:
            Matching keys, term/key pairs and the continuation token if any

        Raises:
            InvalidArgumentError: If index is not a non-empty string
            UnexpectedStatusError: For any status other than 200
            InvalidResponseError: If a JSON body cannot be parsed
            TransportError: If the exchange fails
        """
        if not isinstance(index, str) or not index:
            raise InvalidArgumentError(f"Invalid index name: {index!r}")

        url = self.get_index_url(index, value, end)
        params = {name: _query_value(v) for name, v in options.items() if v is not None}

        response = await self._request("GET", url, params=params)

        if response.status_code != 200:
            raise self._unexpected(response, "GET", url)

        data = self._parse_json(response, url) if response.body else {}

        results = []
        for entry in data.get("results", []):
            for term, key in entry.items():
                results.append((term, key))

        return IndexQueryResult(
            keys=list(data.get("keys", [])) or [key for _, key in results],
            results=results,
            continuation=data.get("continuation"),
        )
