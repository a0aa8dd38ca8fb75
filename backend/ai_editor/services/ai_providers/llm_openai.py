"""
OpenAI-compatible chat completions adapter (OpenAI, Groq, OpenRouter, ...).
"""

import asyncio
from typing import Any, AsyncIterator

import httpx

from ai_editor.core.logging import get_logger
from ai_editor.services.ai_providers.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    HTTPAdapter,
    PreparedRequest,
    bearer_headers,
    deadline_error,
    error_for_exception,
    error_for_status,
    extract_path,
)
from ai_editor.services.ai_providers.types import CompletionRequest, Provider

logger = get_logger()


class OpenAICompatibleAdapter(HTTPAdapter):
    """Bearer-token chat completions; supports raw streaming relay."""

    def build_request(
        self, provider: Provider, credential: str, request: CompletionRequest, stream: bool = False
    ) -> PreparedRequest:
        options = request.options
        payload = {
            "model": provider.model_id,
            "messages": [m.to_dict() for m in request.messages],
            "temperature": options.temperature if options.temperature is not None else DEFAULT_TEMPERATURE,
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            "stream": stream,
        }
        return provider.endpoint, bearer_headers(provider, credential), None, payload

    def parse_response(self, provider: Provider, data: Any) -> str:
        return extract_path(provider.id, data, ("choices", 0, "message", "content"))

    async def stream(self, provider: Provider, credential: str, request: CompletionRequest) -> AsyncIterator[bytes]:
        """
        Relay upstream server-sent-event bytes as they arrive.

        The response headers and the first non-empty chunk must arrive within
        ``self.timeout``; after that the client's per-read timeout applies.
        The upstream response is closed however this generator ends.
        """
        url, headers, params, payload = self.build_request(provider, credential, request, stream=True)
        logger.debug("%s stream: model=%s", provider.id, provider.model_id)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        try:
            http_request = self._client.build_request(
                "POST",
                url,
                headers=headers,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
            try:
                response = await asyncio.wait_for(self._client.send(http_request, stream=True), self.timeout)
            except asyncio.TimeoutError:
                raise deadline_error(provider.id, self.timeout)

            try:
                if response.status_code >= 400:
                    raise error_for_status(provider.id, response.status_code)
                chunks = response.aiter_raw()
                waiting_for_first = True
                while True:
                    try:
                        if waiting_for_first:
                            chunk = await asyncio.wait_for(_next_chunk(chunks), max(deadline - loop.time(), 0))
                        else:
                            chunk = await _next_chunk(chunks)
                    except StopAsyncIteration:
                        break
                    except asyncio.TimeoutError:
                        raise deadline_error(provider.id, self.timeout)
                    if chunk:
                        waiting_for_first = False
                        yield chunk
            finally:
                await response.aclose()
        except httpx.HTTPError as exc:
            raise error_for_exception(provider.id, exc, self.timeout)


async def _next_chunk(chunks: AsyncIterator[bytes]) -> bytes:
    return await chunks.__anext__()
