"""
Multi-provider AI orchestration. Route handlers go through AIService
(ai_editor.services.ai_service); the pieces here are the registry, selector,
protocol adapters and the fallback executor.
"""

from .errors import (
    AIError,
    AllProvidersFailedError,
    Attempt,
    AuthError,
    BadRequestError,
    ConfigurationError,
    ErrorKind,
    ProtocolError,
    ProviderError,
    RateLimitError,
    TransportError,
    UpstreamError,
)
from .executor import InvocationExecutor
from .interface import ProtocolAdapter
from .llm_factory import build_adapters, get_adapter, list_protocol_kinds
from .registry import PolicyTable, ProviderRegistry, build_policy_table, build_registry
from .selector import Selector
from .types import (
    CompletionOptions,
    CompletionRequest,
    CompletionResult,
    Message,
    ProtocolKind,
    Provider,
    TaskType,
)

__all__ = [
    "AIError",
    "AllProvidersFailedError",
    "Attempt",
    "AuthError",
    "BadRequestError",
    "ConfigurationError",
    "ErrorKind",
    "ProtocolError",
    "ProviderError",
    "RateLimitError",
    "TransportError",
    "UpstreamError",
    "InvocationExecutor",
    "ProtocolAdapter",
    "build_adapters",
    "get_adapter",
    "list_protocol_kinds",
    "PolicyTable",
    "ProviderRegistry",
    "build_policy_table",
    "build_registry",
    "Selector",
    "CompletionOptions",
    "CompletionRequest",
    "CompletionResult",
    "Message",
    "ProtocolKind",
    "Provider",
    "TaskType",
]
