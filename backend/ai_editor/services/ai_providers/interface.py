"""
Common interface for all protocol adapters.

The executor talks to vendors only through this interface. Implementations
hide the wire format (OpenAI chat completions, Gemini generateContent,
Perplexity search) and translate every failure into a ProviderError.
"""

from typing import AsyncIterator, Protocol, runtime_checkable

from ai_editor.services.ai_providers.types import CompletionRequest, Provider


@runtime_checkable
class ProtocolAdapter(Protocol):
    """
    One adapter per protocol kind. Adapters are stateless apart from the
    shared HTTP client, so one instance serves every provider of its kind.
    """

    async def complete(self, provider: Provider, credential: str, request: CompletionRequest) -> str:
        """
        Send the request to the provider and return the generated text.

        Raises:
            ProviderError: Classified failure (auth, rate limit, timeout, ...).
        """
        ...

    def stream(self, provider: Provider, credential: str, request: CompletionRequest) -> AsyncIterator[bytes]:
        """
        Relay the provider's response as raw chunks, in receipt order.

        Raises:
            ProviderError: Classified failure before or during the stream.
        """
        ...
