"""
AI service: the contract route handlers use.

Wraps the fallback executor into the {ok: ...} envelope, reports provider
status, and runs the two cached, idempotent operations (API key validation
and research lookups).
"""

import hashlib
import os
from typing import Any, AsyncIterator, Dict, Mapping, Optional, Sequence

import httpx

from ai_editor.core.config import AIConfig
from ai_editor.core.logging import get_logger
from ai_editor.core.security import key_fingerprint
from ai_editor.services.ai_prompts import VALIDATION_PING
from ai_editor.services.ai_providers import (
    AllProvidersFailedError,
    CompletionOptions,
    CompletionRequest,
    ConfigurationError,
    InvocationExecutor,
    Message,
    ProviderError,
    ProviderRegistry,
    Selector,
    TaskType,
    build_adapters,
    build_policy_table,
    build_registry,
)
from ai_editor.services.response_cache import ResponseCache
from ai_editor.utils.helpers import truncate_text

logger = get_logger()

VALIDATION_TTL = 300
RESEARCH_TTL = 1800


def _failure(error_kind: str, message: str, attempts: Optional[list] = None) -> Dict[str, Any]:
    envelope: Dict[str, Any] = {"ok": False, "errorKind": error_kind, "message": message}
    if attempts is not None:
        envelope["attempts"] = attempts
    return envelope


def _failure_from(exc: Exception) -> Dict[str, Any]:
    if isinstance(exc, AllProvidersFailedError):
        return _failure(
            "AllProvidersFailedError",
            str(exc),
            [attempt.error.to_dict() for attempt in exc.attempts],
        )
    return _failure("ConfigurationError", str(exc))


class AIService:
    """Core-facing contract: complete(), stream(), status(), validate_key(), research()."""

    def __init__(self, registry: ProviderRegistry, executor: InvocationExecutor, cache: ResponseCache):
        self.registry = registry
        self.executor = executor
        self.cache = cache

    async def complete(
        self,
        task_type: TaskType,
        messages: Sequence[Message],
        options: Optional[CompletionOptions] = None,
    ) -> Dict[str, Any]:
        """
        Run a completion with automatic provider selection and fallback.

        Returns:
            {ok: True, providerId, text, usedFallback} on success, otherwise
            {ok: False, errorKind, message, attempts?}.
        """
        try:
            result = await self.executor.complete(task_type, messages, options)
        except (ConfigurationError, AllProvidersFailedError) as exc:
            return _failure_from(exc)
        return {
            "ok": True,
            "providerId": result.provider_id,
            "text": result.text,
            "usedFallback": result.used_fallback,
        }

    def stream(
        self,
        task_type: TaskType,
        messages: Sequence[Message],
        options: Optional[CompletionOptions] = None,
    ) -> AsyncIterator[bytes]:
        return self.executor.stream(task_type, messages, options)

    def status(self) -> Dict[str, Dict[str, Any]]:
        """Provider id -> {name, configured, strengths, priority, protocol}. Never includes keys."""
        return {
            p.id: {
                "name": p.display_name,
                "configured": self.registry.is_configured(p.id),
                "strengths": sorted(t.value for t in p.strength_tags),
                "priority": p.priority,
                "protocol": p.protocol_kind.value,
            }
            for p in self.registry.all()
        }

    async def validate_key(self, provider_id: str, api_key: Optional[str] = None) -> Dict[str, Any]:
        """
        Check that a key works for a provider by sending a tiny request.

        Uses ``api_key`` when given, otherwise the configured credential.
        Successful checks are cached for five minutes; failures never are.
        """
        provider = self.registry.get(provider_id)
        if provider is None:
            return _failure("ConfigurationError", f"Unknown provider: {provider_id}")
        credential = (api_key or "").strip() or self.registry.credential_for(provider_id)
        if not credential:
            return _failure("ConfigurationError", f"No API key configured for provider: {provider_id}")

        cache_key = f"validate_{provider_id}_{key_fingerprint(credential)}"
        if self.cache.get(cache_key):
            return {"ok": True, "providerId": provider_id, "cached": True}

        request = CompletionRequest.build(
            TaskType.GENERAL,
            [Message("user", VALIDATION_PING)],
            CompletionOptions(max_tokens=5),
        )
        try:
            await self.executor.invoke(provider, request, credential=credential)
        except ProviderError as exc:
            logger.info("Key validation failed for %s (%s)", provider_id, exc.kind.value)
            return _failure(exc.kind.value, exc.message)

        self.cache.set(cache_key, True, VALIDATION_TTL)
        return {"ok": True, "providerId": provider_id, "cached": False}

    async def research(self, query: str) -> Dict[str, Any]:
        """Search-task completion in research mode; successful answers cached 30 min."""
        digest = hashlib.sha256(query.encode("utf-8")).hexdigest()[:32]
        cache_key = f"research_{digest}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return dict(cached, cached=True)

        logger.info("Research query: %s", truncate_text(query, 80))
        envelope = await self.complete(
            TaskType.SEARCH,
            [Message("user", query)],
            CompletionOptions(mode="research"),
        )
        if envelope["ok"]:
            self.cache.set(cache_key, envelope, RESEARCH_TTL)
            return dict(envelope, cached=False)
        return envelope


def build_ai_service(
    ai_config: AIConfig,
    http_client: httpx.AsyncClient,
    cache: ResponseCache,
    environ: Optional[Mapping[str, str]] = None,
) -> AIService:
    """
    Wire registry, policy table, selector, adapters and executor from config.
    Called once at startup; the result is immutable apart from the cache.
    """
    environ = environ if environ is not None else dict(os.environ)
    registry = build_registry(ai_config, environ)
    policies = build_policy_table(ai_config, registry)
    selector = Selector(registry, policies)
    adapters = build_adapters(http_client, timeout=ai_config.request_timeout)
    executor = InvocationExecutor(registry, selector, adapters)
    return AIService(registry, executor, cache)
