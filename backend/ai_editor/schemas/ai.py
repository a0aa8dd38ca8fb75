"""
Pydantic schemas for the AI API.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

MAX_PROMPT_LENGTH = 10000


class ChatMessage(BaseModel):
    """One chat message."""

    role: Literal["system", "user", "assistant"]
    content: str = Field(..., max_length=MAX_PROMPT_LENGTH)


class CompletionOptionsSchema(BaseModel):
    """Optional generation knobs; omitted values use provider defaults."""

    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_tokens: Optional[int] = Field(None, gt=0, le=32000)
    mode: Optional[Literal["search", "code", "research", "explanation"]] = None


class CompletionRequestSchema(BaseModel):
    """Generic completion request."""

    task_type: Literal["code-generation", "explanation", "debugging", "optimization", "search", "general"] = "general"
    messages: List[ChatMessage] = Field(..., min_length=1)
    options: CompletionOptionsSchema = CompletionOptionsSchema()


class GenerateCodeRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH)
    language: str = "javascript"
    stream: bool = False


class ExplainCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH)
    question: Optional[str] = Field(None, max_length=MAX_PROMPT_LENGTH)


class FixBugRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH)
    context: str = Field("", max_length=MAX_PROMPT_LENGTH)
    error: str = Field("", max_length=MAX_PROMPT_LENGTH)


class OptimizeCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH)
    focus_area: str = "performance"


class ReviewCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH)


class ResearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH)


class ValidateKeyRequest(BaseModel):
    """Validate an API key for one provider (falls back to the configured key)."""

    provider: str = Field(..., description="Provider id, e.g. openai, groq, google, perplexity")
    api_key: Optional[str] = None


class AttemptInfo(BaseModel):
    providerId: Optional[str] = None
    errorKind: str
    message: str


class AIResponse(BaseModel):
    """Envelope returned by every AI route."""

    ok: bool
    providerId: Optional[str] = None
    text: Optional[str] = None
    usedFallback: Optional[bool] = None
    cached: Optional[bool] = None
    errorKind: Optional[str] = None
    message: Optional[str] = None
    attempts: Optional[List[AttemptInfo]] = None


class ProviderStatus(BaseModel):
    name: str
    configured: bool
    strengths: List[str]
    priority: int
    protocol: str


class ModelStatusResponse(BaseModel):
    ok: bool = True
    models: Dict[str, ProviderStatus]
    autoMode: bool = True
    message: str = "Auto-model selection enabled. Best model will be chosen automatically for each task."


class CacheStatsResponse(BaseModel):
    entries: int
    hits: int
    misses: int
    default_ttl: float
    check_period: float
