"""
Vision transport - HTTP call and failure classification.

Sends a chat-completions request with a bearer credential and maps every
outcome onto the analysis error taxonomy. No retries happen here: retrying
is a caller decision (see AnalysisService.analyze_with_retry).
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional

import httpx
import structlog

from iscale.domain.shared.cancellation import CancellationToken
from iscale.domain.shared.errors import (
    AnalysisCancelledError,
    MissingCredentialError,
    NetworkError,
    RateLimitedError,
    ServerError,
)
from iscale.infrastructure.config import get_vision_endpoint
from iscale.infrastructure.credentials.key_store import ICredentialStore

logger = structlog.get_logger(__name__)

CONNECT_TIMEOUT_S = 30.0
TOTAL_TIMEOUT_S = 60.0


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """
    Parse a Retry-After header as whole seconds.

    HTTP-date values and anything non-numeric yield None.

    Example:
        >>> parse_retry_after("30")
        30
        >>> parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") is None
        True
    """
    if value is None:
        return None
    value = value.strip()
    # ASCII digits only; isdigit() alone accepts superscripts int() rejects
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


class VisionTransport:
    """
    HTTP transport for the vision endpoint.

    Outcomes:
    - success: raw response body bytes
    - MissingCredentialError: no key, raised before any network I/O
    - NetworkError: connection/TLS failure or timeout
    - RateLimitedError: HTTP 429 (retry hint from Retry-After)
    - ServerError: any other non-2xx status

    Example:
        >>> async with VisionTransport(key_store) as transport:
        ...     body = await transport.send(request_body)
    """

    def __init__(
        self,
        key_store: ICredentialStore,
        client: Optional[httpx.AsyncClient] = None,
        endpoint: Optional[str] = None,
        connect_timeout: float = CONNECT_TIMEOUT_S,
        total_timeout: float = TOTAL_TIMEOUT_S,
    ):
        """
        Initialize transport.

        Args:
            key_store: Credential store providing the API key
            client: Optional shared httpx client (not closed by the transport)
            endpoint: Chat-completions URL, defaults to ISCALE_VISION_ENDPOINT
            connect_timeout: Request setup timeout in seconds
            total_timeout: Deadline for the whole request in seconds
        """
        self.key_store = key_store
        self.endpoint = endpoint or get_vision_endpoint()
        self.connect_timeout = connect_timeout
        self.total_timeout = total_timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "VisionTransport":
        """Async context manager entry."""
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.total_timeout, connect=self.connect_timeout)
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        body: Dict[str, Any],
        cancel_token: Optional[CancellationToken] = None,
    ) -> bytes:
        """
        Send a request body and return the raw response bytes.

        Args:
            body: JSON request body (see VisionRequestBuilder)
            cancel_token: Optional token; when cancelled the request is abandoned

        Returns:
            Response body bytes for a 2xx status

        Raises:
            MissingCredentialError: No API key configured
            NetworkError: Transport failure or total timeout
            RateLimitedError: HTTP 429
            ServerError: Other non-2xx status
            AnalysisCancelledError: Token cancelled while in flight
        """
        api_key = self.key_store.get()
        if not api_key:
            raise MissingCredentialError()

        if cancel_token is not None and cancel_token.is_cancelled:
            raise AnalysisCancelledError("Analysis cancelled before send")

        started = time.monotonic()
        response = await self._post(body, api_key, cancel_token)
        elapsed_ms = int((time.monotonic() - started) * 1000)

        status = response.status_code
        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            logger.warning(
                "Vision request rate limited",
                status_code=status,
                retry_after=retry_after,
                elapsed_ms=elapsed_ms,
            )
            raise RateLimitedError(retry_after=retry_after)

        if not 200 <= status < 300:
            logger.warning(
                "Vision request failed",
                status_code=status,
                elapsed_ms=elapsed_ms,
            )
            raise ServerError(status, response.text)

        logger.info(
            "Vision request completed",
            status_code=status,
            elapsed_ms=elapsed_ms,
            response_bytes=len(response.content),
        )
        return response.content

    async def _post(
        self,
        body: Dict[str, Any],
        api_key: str,
        cancel_token: Optional[CancellationToken],
    ) -> httpx.Response:
        client = self._get_client()
        request = asyncio.ensure_future(
            asyncio.wait_for(
                client.post(
                    self.endpoint,
                    json=body,
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                ),
                timeout=self.total_timeout,
            )
        )

        if cancel_token is None:
            return await self._await_response(request)

        cancelled = asyncio.ensure_future(cancel_token.wait())
        try:
            await asyncio.wait({request, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            cancelled.cancel()

        if not request.done():
            # Abandon the in-flight call; a late response is never applied
            request.cancel()
            logger.info("Vision request abandoned")
            raise AnalysisCancelledError("Analysis cancelled while in flight")

        return await self._await_response(request)

    async def _await_response(self, request: "asyncio.Future[httpx.Response]") -> httpx.Response:
        try:
            return await request
        except asyncio.TimeoutError as e:
            logger.warning("Vision request timed out", timeout_s=self.total_timeout)
            raise NetworkError(e) from e
        except httpx.HTTPError as e:
            logger.warning("Vision request network failure", error=type(e).__name__)
            raise NetworkError(e) from e
