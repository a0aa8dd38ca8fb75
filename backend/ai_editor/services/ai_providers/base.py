"""
Base class for HTTP protocol adapters.

Owns the shared httpx client, the fixed per-call timeout and the mapping from
transport signals (status code, timeout, connect failure) to ProviderError.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, Optional, Sequence, Tuple

import httpx

from ai_editor.core.logging import get_logger
from ai_editor.services.ai_providers.errors import (
    AuthError,
    BadRequestError,
    ErrorKind,
    ProtocolError,
    ProviderError,
    RateLimitError,
    TransportError,
    UpstreamError,
)
from ai_editor.services.ai_providers.types import CompletionRequest, Provider

logger = get_logger()

DEFAULT_TIMEOUT = 30.0
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000

# (url, headers, query params, json body)
PreparedRequest = Tuple[str, Dict[str, str], Optional[Dict[str, str]], Dict[str, Any]]


def error_for_status(provider_id: str, status_code: int) -> ProviderError:
    """Map an HTTP error status to a classified ProviderError."""
    if status_code in (401, 403):
        return AuthError(
            f"{provider_id}: invalid API key or unauthorized (HTTP {status_code})",
            provider_id=provider_id,
            status_code=status_code,
        )
    if status_code == 429:
        return RateLimitError(
            f"{provider_id}: rate limit or quota exceeded (HTTP 429)",
            provider_id=provider_id,
            status_code=status_code,
        )
    if 400 <= status_code < 500:
        return BadRequestError(
            f"{provider_id}: request rejected (HTTP {status_code})",
            provider_id=provider_id,
            status_code=status_code,
        )
    return UpstreamError(
        f"{provider_id}: provider server error (HTTP {status_code})",
        provider_id=provider_id,
        status_code=status_code,
    )


def deadline_error(provider_id: str, timeout: float) -> TransportError:
    return TransportError(
        f"{provider_id}: request timed out after {timeout:g}s",
        kind=ErrorKind.TIMEOUT,
        provider_id=provider_id,
    )


def error_for_exception(provider_id: str, exc: httpx.HTTPError, timeout: float) -> ProviderError:
    """Map an httpx transport exception to a classified ProviderError."""
    if isinstance(exc, httpx.TimeoutException):
        return deadline_error(provider_id, timeout)
    # Only the exception type; httpx messages can embed the request URL.
    return TransportError(
        f"{provider_id}: network error ({type(exc).__name__})",
        provider_id=provider_id,
    )


def extract_path(provider_id: str, data: Any, path: Sequence[Any]) -> str:
    """
    Walk a decoded JSON document along ``path`` and return the text found there.

    Raises:
        ProtocolError: If any step is missing or the leaf is not a string.
    """
    node = data
    try:
        for step in path:
            node = node[step]
    except (KeyError, IndexError, TypeError):
        dotted = ".".join(str(s) for s in path)
        raise ProtocolError(f"{provider_id}: response missing {dotted}", provider_id=provider_id)
    if not isinstance(node, str):
        raise ProtocolError(f"{provider_id}: response text is not a string", provider_id=provider_id)
    return node


class HTTPAdapter(ABC):
    """Base class for all protocol adapters."""

    def __init__(self, client: httpx.AsyncClient, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize adapter.

        Args:
            client: Shared async HTTP client (owned by the application lifespan)
            timeout: Per-call timeout in seconds
        """
        self._client = client
        self.timeout = timeout

    @abstractmethod
    def build_request(
        self, provider: Provider, credential: str, request: CompletionRequest, stream: bool = False
    ) -> PreparedRequest:
        """Translate the unified request into this protocol's HTTP call."""

    @abstractmethod
    def parse_response(self, provider: Provider, data: Any) -> str:
        """Extract the generated text from the decoded response body."""

    async def complete(self, provider: Provider, credential: str, request: CompletionRequest) -> str:
        url, headers, params, payload = self.build_request(provider, credential, request)
        logger.debug("%s complete: model=%s", provider.id, provider.model_id)
        data = await self._post_json(provider, url, headers, params, payload)
        return self.parse_response(provider, data)

    async def stream(self, provider: Provider, credential: str, request: CompletionRequest) -> AsyncIterator[bytes]:
        """Protocols without native streaming relay the full text as one chunk."""
        text = await self.complete(provider, credential, request)
        yield text.encode("utf-8")

    async def _post_json(
        self,
        provider: Provider,
        url: str,
        headers: Dict[str, str],
        params: Optional[Dict[str, str]],
        payload: Dict[str, Any],
    ) -> Any:
        # httpx timeouts are per phase; wait_for bounds the whole call
        # including a body that keeps trickling in.
        try:
            response = await asyncio.wait_for(
                self._client.post(
                    url,
                    headers=headers,
                    params=params,
                    json=payload,
                    timeout=self.timeout,
                ),
                self.timeout,
            )
        except asyncio.TimeoutError:
            raise deadline_error(provider.id, self.timeout)
        except httpx.HTTPError as exc:
            raise error_for_exception(provider.id, exc, self.timeout)

        if response.status_code >= 400:
            raise error_for_status(provider.id, response.status_code)

        try:
            return response.json()
        except ValueError:
            raise ProtocolError(f"{provider.id}: response is not valid JSON", provider_id=provider.id)


def bearer_headers(provider: Provider, credential: str) -> Dict[str, str]:
    """Headers for OpenAI-shaped endpoints (OpenAI, Groq, OpenRouter, Perplexity)."""
    headers = {
        "Authorization": f"Bearer {credential}",
        "Content-Type": "application/json",
    }
    if provider.organization:
        headers["OpenAI-Organization"] = provider.organization
    if provider.project:
        headers["OpenAI-Project"] = provider.project
    headers.update(provider.extra_headers)
    return headers
