"""
httpx transport adapter.

Issues requests through an `httpx.AsyncClient`.
"""

from typing import Mapping, Optional

import httpx
import structlog

from riakclient.config import RiakConfig, get_config
from riakclient.core.errors import TransportError
from riakclient.transport.interface import Transport, TransportResponse

logger = structlog.get_logger(__name__)


class HttpxTransport(Transport):
    """
    httpx-based transport.

    Implements the Transport interface using `httpx.AsyncClient`.
    """

    def __init__(
        self,
        config: Optional[RiakConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the transport.

        Args:
            config: Client configuration. Uses global config if not provided.
            client: Pre-built httpx client (created lazily if not provided)
        """
        self.config = config or get_config()
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)
        return self._client

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        """Issue a request and return its status, headers and body."""
        client = self._get_client()

        try:
            response = await client.request(
                method,
                url,
                headers=dict(headers or {}),
                content=body.encode("utf-8") if body is not None else None,
                params=dict(params or {}),
            )
        except httpx.RequestError as e:
            logger.error("riak_transport_error", method=method, url=url, error=str(e))
            raise TransportError(f"Riak request failed: {e}") from e

        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers.items()),
            body=response.text,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("riak_transport_closed")
