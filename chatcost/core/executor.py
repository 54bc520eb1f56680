"""Async HTTP execution of provider requests.

Uses httpx.AsyncClient for a single non-blocking request/response exchange.
No retry, no streaming, and no timeout unless the caller configures one.
"""

import logging
from typing import Any, Optional, Sequence, TYPE_CHECKING

import httpx

from chatcost.core.errors import ProviderError
from chatcost.core.factory import create
from chatcost.core.estimator import TokenEstimator
from chatcost.core.provider import Message, ParsedResponse, ProviderRequest

if TYPE_CHECKING:
    from chatcost.core.session import SessionConfig

logger = logging.getLogger(__name__)


def _decode_payload(response: httpx.Response) -> Any:
    """Decoded JSON body, falling back to raw text for non-JSON error pages."""
    try:
        return response.json()
    except ValueError:
        return response.text


class ProviderExecutor:
    """Sends ProviderRequests and parses replies through the session's adapter."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        token_estimator: Optional[TokenEstimator] = None,
        temperature: Optional[float] = None,
    ):
        """Initialize the provider executor.

        Args:
            timeout: Request timeout in seconds (None = wait indefinitely)
            client: Pre-built AsyncClient (not closed by this executor)
            transport: Transport for the owned client (tests pass httpx.MockTransport)
            token_estimator: Estimator handed to adapters for reply token fallback
            temperature: Override the adapters' sampling temperature
        """
        self._timeout = timeout
        self._transport = transport
        self._client = client
        self._owns_client = client is None
        self._estimator = token_estimator or TokenEstimator()
        self._temperature = temperature

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy-init the httpx async client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def send(self, request: ProviderRequest) -> Any:
        """POST a request and return the decoded JSON body.

        Raises:
            ProviderError: On transport failure or a non-2xx status
        """
        client = await self._get_client()
        try:
            response = await client.post(request.url, json=request.body, headers=request.headers)
        except httpx.HTTPError as e:
            raise ProviderError(f"Request failed: {e}") from e

        if not response.is_success:
            payload = _decode_payload(response)
            raise ProviderError(
                f"API request failed: {response.status_code} {response.reason_phrase} - {payload}",
                status_code=response.status_code,
                payload=payload,
            )
        return _decode_payload(response)

    async def complete(
        self,
        messages: Sequence[Message],
        config: "SessionConfig",
    ) -> ParsedResponse:
        """Build, send and parse one exchange for the session's current provider.

        Raises:
            ConfigurationError: If the session has no credential (before any I/O)
            ProviderError: On transport failure or a non-2xx status
        """
        kwargs = {}
        if self._temperature is not None:
            kwargs["temperature"] = self._temperature
        adapter = create(config.provider, token_estimator=self._estimator, **kwargs)
        request = adapter.build_request(messages, config)
        logger.debug(
            "Sending %d messages to %s (model=%s)",
            len(messages), config.provider.value, config.model,
        )
        raw = await self.send(request)
        return adapter.parse_response(raw)

    async def close(self) -> None:
        """Close the underlying httpx client if this executor created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
