"""
Invocation executor: runs a completion against the selected provider and
falls back across every other configured provider on failure.
"""

from typing import AsyncIterator, List, Mapping, Optional, Sequence

from ai_editor.core.logging import get_logger
from ai_editor.services.ai_providers.errors import AllProvidersFailedError, Attempt, ProviderError
from ai_editor.services.ai_providers.interface import ProtocolAdapter
from ai_editor.services.ai_providers.registry import ProviderRegistry
from ai_editor.services.ai_providers.selector import Selector
from ai_editor.services.ai_providers.types import (
    CompletionOptions,
    CompletionRequest,
    CompletionResult,
    Message,
    ProtocolKind,
    Provider,
    TaskType,
)

logger = get_logger()


class InvocationExecutor:
    """
    Sequential fallback chain.

    The primary comes from the Selector (task fit). Once it fails, the
    remaining configured providers are tried by ascending priority regardless
    of task fit. One attempt per provider per call; nothing is remembered
    between calls.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        selector: Selector,
        adapters: Mapping[ProtocolKind, ProtocolAdapter],
    ):
        self._registry = registry
        self._selector = selector
        self._adapters = dict(adapters)

    def candidates(self, task_type: TaskType) -> List[Provider]:
        """Primary first, then every other configured provider by priority."""
        primary = self._selector.select(task_type)
        return [primary] + [p for p in self._registry.list_configured() if p.id != primary.id]

    async def complete(
        self,
        task_type: TaskType,
        messages: Sequence[Message],
        options: Optional[CompletionOptions] = None,
    ) -> CompletionResult:
        """
        Run one completion with fallback.

        Raises:
            ConfigurationError: If no provider is configured.
            AllProvidersFailedError: If every configured provider failed.
        """
        request = CompletionRequest.build(task_type, messages, options)
        providers = self.candidates(request.task_type)
        attempts: List[Attempt] = []

        for index, provider in enumerate(providers):
            used_fallback = index > 0
            if used_fallback and index == 1:
                logger.info("Trying fallback providers: %s", [p.id for p in providers[1:]])
            try:
                text = await self.invoke(provider, request)
            except ProviderError as exc:
                exc.provider_id = exc.provider_id or provider.id
                attempts.append(Attempt(provider.id, exc))
                logger.warning("%s failed (%s): %s", provider.id, exc.kind.value, exc.message)
                continue
            logger.info(
                "Completed %s with %s%s", request.task_type.value, provider.id, " (fallback)" if used_fallback else ""
            )
            return CompletionResult(provider_id=provider.id, text=text, used_fallback=used_fallback)

        logger.error("All AI providers failed for %s", request.task_type.value)
        raise AllProvidersFailedError(attempts)

    async def stream(
        self,
        task_type: TaskType,
        messages: Sequence[Message],
        options: Optional[CompletionOptions] = None,
    ) -> AsyncIterator[bytes]:
        """
        Stream a completion with fallback.

        A provider may be replaced only until it has relayed its first chunk;
        after that a failure propagates to the caller. Closing this generator
        closes the in-flight upstream stream.

        Raises:
            ConfigurationError: If no provider is configured.
            AllProvidersFailedError: If every provider failed before streaming.
            ProviderError: If a provider failed mid-stream.
        """
        request = CompletionRequest.build(task_type, messages, options)
        providers = self.candidates(request.task_type)
        attempts: List[Attempt] = []

        for provider in providers:
            adapter = self._adapter_for(provider)
            credential = self._registry.credential_for(provider.id)
            emitted = False
            upstream = adapter.stream(provider, credential, request)
            try:
                async for chunk in upstream:
                    emitted = True
                    yield chunk
                return
            except ProviderError as exc:
                if emitted:
                    logger.error("%s failed mid-stream (%s)", provider.id, exc.kind.value)
                    raise
                exc.provider_id = exc.provider_id or provider.id
                attempts.append(Attempt(provider.id, exc))
                logger.warning("%s stream failed (%s): %s", provider.id, exc.kind.value, exc.message)
            finally:
                await upstream.aclose()

        raise AllProvidersFailedError(attempts)

    async def invoke(self, provider: Provider, request: CompletionRequest, credential: Optional[str] = None) -> str:
        """Single call to one provider; no fallback. ``credential`` overrides the configured one."""
        adapter = self._adapter_for(provider)
        credential = credential or self._registry.credential_for(provider.id)
        logger.debug("Invoking %s (%s)", provider.id, provider.protocol_kind.value)
        return await adapter.complete(provider, credential, request)

    def _adapter_for(self, provider: Provider) -> ProtocolAdapter:
        return self._adapters[provider.protocol_kind]
