"""
Test configuration and fixtures
"""

import pytest
import os
import sys

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from ai_editor.services.ai_providers import (  # noqa: E402
    InvocationExecutor,
    PolicyTable,
    ProtocolKind,
    Provider,
    ProviderRegistry,
    Selector,
    TaskType,
)
from ai_editor.services.response_cache import ResponseCache  # noqa: E402


def make_provider(
    provider_id,
    priority=0,
    protocol=ProtocolKind.OPENAI_COMPATIBLE,
    strengths=(),
    endpoint="https://llm.example.test/v1/chat/completions",
    model="test-model",
    **kwargs,
):
    """Build a Provider value with sensible test defaults."""
    return Provider(
        id=provider_id,
        display_name=provider_id.title(),
        endpoint_template=endpoint,
        model_id=model,
        credential_ref=f"{provider_id.upper()}_API_KEY",
        protocol_kind=protocol,
        strength_tags=frozenset(TaskType(s) for s in strengths),
        priority=priority,
        **kwargs,
    )


class FakeAdapter:
    """
    Scripted ProtocolAdapter.

    ``results`` maps provider id -> text or exception for complete();
    ``chunks`` maps provider id -> list of bytes/exceptions (or an exception)
    for stream(). Every call is recorded in ``calls``.
    """

    def __init__(self, results=None, chunks=None):
        self.results = dict(results or {})
        self.chunks = dict(chunks or {})
        self.calls = []
        self.credentials = []
        self.closed = []

    async def complete(self, provider, credential, request):
        self.calls.append(provider.id)
        self.credentials.append(credential)
        outcome = self.results.get(provider.id, f"answer from {provider.id}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def stream(self, provider, credential, request):
        self.calls.append(provider.id)
        outcome = self.chunks.get(provider.id, [f"chunk from {provider.id}".encode()])
        try:
            if isinstance(outcome, Exception):
                raise outcome
            for item in outcome:
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            self.closed.append(provider.id)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def build_executor(providers, secrets, adapter, policies=None):
    """Wire registry, selector and executor around a single fake adapter."""
    registry = ProviderRegistry(providers, secrets)
    if policies is None:
        policies = {TaskType.GENERAL: [p.id for p in providers]}
    selector = Selector(registry, PolicyTable(policies))
    adapters = {kind: adapter for kind in ProtocolKind}
    return registry, InvocationExecutor(registry, selector, adapters)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def memory_cache(fake_clock):
    return ResponseCache(default_ttl=120, check_period=60, clock=fake_clock)


@pytest.fixture
def three_providers():
    """The A/B/C catalog used by the fallback scenarios."""
    return [
        make_provider("a", priority=0, strengths=["code-generation"]),
        make_provider("b", priority=1, strengths=["code-generation"]),
        make_provider("c", priority=2),
    ]
