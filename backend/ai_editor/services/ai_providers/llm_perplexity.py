"""
Perplexity search adapter.

OpenAI-shaped wire format, but the adapter owns the prompt: it synthesizes a
mode-specific system prompt, wraps the user's question in a mode template and
runs with low temperature / top_p. The answer gets a deterministic markdown
tidy-up before it is returned.
"""

import re
from typing import Any, List, Optional

from ai_editor.services.ai_providers.base import HTTPAdapter, PreparedRequest, bearer_headers, extract_path
from ai_editor.services.ai_providers.types import CompletionRequest, Message, Provider, TaskType

PERPLEXITY_TEMPERATURE = 0.1
PERPLEXITY_TOP_P = 0.9
PERPLEXITY_MAX_TOKENS = 2048

SYSTEM_PROMPTS = {
    "search": (
        "You are a knowledgeable assistant that provides accurate, well-structured information. "
        "Format your responses clearly with headings, bullet points, and examples where appropriate. "
        "Be comprehensive but concise."
    ),
    "code": (
        "You are an expert programmer. When explaining code or generating solutions, provide clear "
        "explanations, use proper formatting, include comments, and follow best practices. "
        "Structure your response with clear sections."
    ),
    "research": (
        "You are a research assistant. Provide detailed, accurate information with proper structure. "
        "Use headings, subheadings, and organize information logically. "
        "Include practical examples and actionable insights."
    ),
    "explanation": (
        "You are a technical educator. Break down complex topics into understandable parts. "
        "Use analogies, examples, and clear explanations. "
        "Structure your response with clear sections and bullet points."
    ),
}

_TASK_MODES = {
    TaskType.CODE_GENERATION: "code",
    TaskType.DEBUGGING: "code",
    TaskType.OPTIMIZATION: "code",
    TaskType.EXPLANATION: "explanation",
    TaskType.SEARCH: "search",
    TaskType.GENERAL: "search",
}


def resolve_mode(request: CompletionRequest) -> str:
    """Explicit option wins; otherwise derive from the task type."""
    mode = (request.options.mode or "").strip().lower()
    if mode in SYSTEM_PROMPTS:
        return mode
    return _TASK_MODES.get(request.task_type, "search")


def format_query_for_mode(query: str, mode: str) -> str:
    if mode == "code":
        return (
            f"As a programming expert, {query}. Please provide a comprehensive answer with code "
            "examples, explanations, and best practices."
        )
    if mode == "research":
        return (
            f"Provide detailed research on: {query}. Include key concepts, current trends, "
            "practical applications, and relevant examples."
        )
    if mode == "explanation":
        return (
            f"Explain in detail: {query}. Break it down into clear sections with examples "
            "and make it easy to understand."
        )
    return f"{query}. Please provide a well-structured, comprehensive answer."


def enhance_response_formatting(content: str) -> str:
    """Normalize heading/bullet spacing, blank lines and code fence spacing."""
    enhanced = re.sub(r"^(#{1,6}\s+.+)$", r"\1\n", content, flags=re.MULTILINE)
    enhanced = re.sub(r"^(\s*[-*+]\s+.+)$", r"\1\n", enhanced, flags=re.MULTILINE)
    enhanced = re.sub(r"\n{3,}", "\n\n", enhanced)
    enhanced = re.sub(r"```(\w+)?\n", lambda m: f"\n```{m.group(1) or ''}\n", enhanced)
    enhanced = re.sub(r"\n```$", "\n```\n", enhanced, flags=re.MULTILINE)
    return enhanced.strip()


def build_messages(request: CompletionRequest, mode: str) -> List[dict]:
    caller_system = [m.content for m in request.messages if m.role == "system"]
    system_prompt = "\n\n".join([SYSTEM_PROMPTS[mode], *caller_system])

    conversation = [m for m in request.messages if m.role != "system"]
    last_user: Optional[int] = None
    for index, message in enumerate(conversation):
        if message.role == "user":
            last_user = index
    if last_user is None:
        conversation.append(Message("user", format_query_for_mode("", mode)))
    else:
        original = conversation[last_user]
        conversation[last_user] = Message("user", format_query_for_mode(original.content, mode))

    return [{"role": "system", "content": system_prompt}] + [m.to_dict() for m in conversation]


class PerplexityAdapter(HTTPAdapter):
    """Search-tuned adapter with deterministic defaults."""

    def build_request(
        self, provider: Provider, credential: str, request: CompletionRequest, stream: bool = False
    ) -> PreparedRequest:
        options = request.options
        mode = resolve_mode(request)
        payload = {
            "model": provider.model_id,
            "messages": build_messages(request, mode),
            "max_tokens": options.max_tokens or PERPLEXITY_MAX_TOKENS,
            "temperature": options.temperature if options.temperature is not None else PERPLEXITY_TEMPERATURE,
            "top_p": PERPLEXITY_TOP_P,
        }
        return provider.endpoint, bearer_headers(provider, credential), None, payload

    def parse_response(self, provider: Provider, data: Any) -> str:
        content = extract_path(provider.id, data, ("choices", 0, "message", "content"))
        return enhance_response_formatting(content)
