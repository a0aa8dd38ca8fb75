"""
Value types shared by the registry, adapters and executor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Mapping, Optional, Sequence, Tuple


class TaskType(str, Enum):
    CODE_GENERATION = "code-generation"
    EXPLANATION = "explanation"
    DEBUGGING = "debugging"
    OPTIMIZATION = "optimization"
    SEARCH = "search"
    GENERAL = "general"


class ProtocolKind(str, Enum):
    OPENAI_COMPATIBLE = "openai-compatible"
    GEMINI = "gemini"
    PERPLEXITY_SEARCH = "perplexity-search"


@dataclass(frozen=True)
class Provider:
    """A catalog entry. Holds a credential reference, never the secret."""

    id: str
    display_name: str
    endpoint_template: str
    model_id: str
    credential_ref: str
    protocol_kind: ProtocolKind
    strength_tags: FrozenSet[TaskType] = frozenset()
    priority: int = 100
    extra_headers: Mapping[str, str] = field(default_factory=dict)
    organization: Optional[str] = None
    project: Optional[str] = None

    @property
    def endpoint(self) -> str:
        return self.endpoint_template.replace("{model}", self.model_id)


@dataclass(frozen=True)
class Message:
    role: str  # system | user | assistant
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class CompletionOptions:
    """Per-request knobs. None means "use the adapter's default"."""

    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: bool = False
    mode: Optional[str] = None


@dataclass(frozen=True)
class CompletionRequest:
    task_type: TaskType
    messages: Tuple[Message, ...]
    options: CompletionOptions = CompletionOptions()

    @classmethod
    def build(
        cls,
        task_type: TaskType,
        messages: Sequence[Message],
        options: Optional[CompletionOptions] = None,
    ) -> "CompletionRequest":
        return cls(TaskType(task_type), tuple(messages), options or CompletionOptions())


@dataclass(frozen=True)
class CompletionResult:
    provider_id: str
    text: str
    used_fallback: bool = False
