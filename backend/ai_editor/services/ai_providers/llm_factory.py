"""
Factory for protocol adapters. The set of protocols is closed: one adapter
class per ProtocolKind.
"""

from typing import Dict, Type

import httpx

from ai_editor.services.ai_providers.base import DEFAULT_TIMEOUT, HTTPAdapter
from ai_editor.services.ai_providers.interface import ProtocolAdapter
from ai_editor.services.ai_providers.llm_gemini import GeminiAdapter
from ai_editor.services.ai_providers.llm_openai import OpenAICompatibleAdapter
from ai_editor.services.ai_providers.llm_perplexity import PerplexityAdapter
from ai_editor.services.ai_providers.types import ProtocolKind

_ADAPTER_MAP: Dict[ProtocolKind, Type[HTTPAdapter]] = {
    ProtocolKind.OPENAI_COMPATIBLE: OpenAICompatibleAdapter,
    ProtocolKind.GEMINI: GeminiAdapter,
    ProtocolKind.PERPLEXITY_SEARCH: PerplexityAdapter,
}


def get_adapter(kind: ProtocolKind, client: httpx.AsyncClient, timeout: float = DEFAULT_TIMEOUT) -> ProtocolAdapter:
    """Return an adapter instance for one protocol kind."""
    return _ADAPTER_MAP[ProtocolKind(kind)](client, timeout=timeout)


def build_adapters(client: httpx.AsyncClient, timeout: float = DEFAULT_TIMEOUT) -> Dict[ProtocolKind, ProtocolAdapter]:
    """One adapter per protocol kind, all sharing the same HTTP client."""
    return {kind: get_adapter(kind, client, timeout) for kind in _ADAPTER_MAP}


def list_protocol_kinds() -> list[str]:
    """Return the supported protocol kind names."""
    return sorted(kind.value for kind in _ADAPTER_MAP)
