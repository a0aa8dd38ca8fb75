"""
Google Gemini generateContent adapter.
"""

from typing import Any

from ai_editor.services.ai_providers.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    HTTPAdapter,
    PreparedRequest,
    extract_path,
)
from ai_editor.services.ai_providers.types import CompletionRequest, Provider


def flatten_messages(request: CompletionRequest) -> str:
    """Gemini gets a single prompt: every message's content, in order."""
    return "\n\n".join(m.content for m in request.messages)


class GeminiAdapter(HTTPAdapter):
    """API key as query parameter; single-turn prompt."""

    def build_request(
        self, provider: Provider, credential: str, request: CompletionRequest, stream: bool = False
    ) -> PreparedRequest:
        options = request.options
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": flatten_messages(request)}],
                }
            ],
            "generationConfig": {
                "temperature": options.temperature if options.temperature is not None else DEFAULT_TEMPERATURE,
                "maxOutputTokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            },
        }
        headers = {"Content-Type": "application/json"}
        headers.update(provider.extra_headers)
        return provider.endpoint, headers, {"key": credential}, payload

    def parse_response(self, provider: Provider, data: Any) -> str:
        return extract_path(provider.id, data, ("candidates", 0, "content", "parts", 0, "text"))
