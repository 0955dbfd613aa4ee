"""
Abstract interface for the HTTP transport.

Defines the contract the client uses to issue a single HTTP exchange.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional


@dataclass
class TransportResponse:
    """Status, headers and body of one HTTP exchange."""
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""


class Transport(ABC):
    """
    Abstract interface for issuing HTTP requests.

    Implementations perform exactly one exchange per call with no retries.
    """

    @abstractmethod
    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        """
        Issue an HTTP request.

        Args:
            method: HTTP method (GET, PUT, DELETE)
            url: Absolute URL
            headers: Request headers
            body: Request body text
            params: Query string parameters

        Returns:
            The response status, headers and body

        Raises:
            TransportError: If the exchange fails at the I/O level
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        pass
