"""
Schemas package initialization.
"""

from ai_editor.schemas.ai import (
    AIResponse,
    AttemptInfo,
    CacheStatsResponse,
    ChatMessage,
    CompletionOptionsSchema,
    CompletionRequestSchema,
    ExplainCodeRequest,
    FixBugRequest,
    GenerateCodeRequest,
    ModelStatusResponse,
    OptimizeCodeRequest,
    ProviderStatus,
    ResearchRequest,
    ReviewCodeRequest,
    ValidateKeyRequest,
)

__all__ = [
    "AIResponse",
    "AttemptInfo",
    "CacheStatsResponse",
    "ChatMessage",
    "CompletionOptionsSchema",
    "CompletionRequestSchema",
    "ExplainCodeRequest",
    "FixBugRequest",
    "GenerateCodeRequest",
    "ModelStatusResponse",
    "OptimizeCodeRequest",
    "ProviderStatus",
    "ResearchRequest",
    "ReviewCodeRequest",
    "ValidateKeyRequest",
]
