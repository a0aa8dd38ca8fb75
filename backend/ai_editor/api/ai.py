"""
AI API routes: auto-routed completions, editor actions, research, key validation.
"""

import json
from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from ai_editor.api.deps import get_ai_service
from ai_editor.core.logging import get_logger
from ai_editor.schemas import (
    AIResponse,
    CompletionRequestSchema,
    ExplainCodeRequest,
    FixBugRequest,
    GenerateCodeRequest,
    ModelStatusResponse,
    OptimizeCodeRequest,
    ResearchRequest,
    ReviewCodeRequest,
    ValidateKeyRequest,
)
from ai_editor.services import ai_prompts
from ai_editor.services.ai_providers import (
    AIError,
    CompletionOptions,
    Message,
    TaskType,
)
from ai_editor.services.ai_service import AIService
from ai_editor.utils.helpers import sanitize_input

logger = get_logger()

router = APIRouter(prefix="/ai", tags=["AI"])

_STATUS_BY_ERROR_KIND = {
    "ConfigurationError": 503,
    "AllProvidersFailedError": 502,
}


def _status_code(envelope: Dict[str, Any]) -> int:
    if envelope.get("ok"):
        return 200
    return _STATUS_BY_ERROR_KIND.get(envelope.get("errorKind"), 502)


def _respond(envelope: Dict[str, Any], response: Response) -> Dict[str, Any]:
    response.status_code = _status_code(envelope)
    if not envelope.get("ok"):
        logger.warning("AI request failed: %s - %s", envelope.get("errorKind"), envelope.get("message"))
    return envelope


@router.get("/models/status", response_model=ModelStatusResponse)
async def models_status(service: AIService = Depends(get_ai_service)):
    """
    Show every known provider, whether it is configured and what it is good at.
    """
    return ModelStatusResponse(models=service.status())


@router.post("/complete", response_model=AIResponse, response_model_exclude_none=True)
async def complete(
    body: CompletionRequestSchema,
    response: Response,
    service: AIService = Depends(get_ai_service),
):
    """
    Generic completion with automatic provider selection and fallback.
    """
    messages = [Message(m.role, sanitize_input(m.content)) for m in body.messages]
    options = CompletionOptions(
        temperature=body.options.temperature,
        max_tokens=body.options.max_tokens,
        mode=body.options.mode,
    )
    envelope = await service.complete(TaskType(body.task_type), messages, options)
    return _respond(envelope, response)


@router.post("/generate-code", response_model=AIResponse, response_model_exclude_none=True)
async def generate_code(
    body: GenerateCodeRequest,
    request: Request,
    response: Response,
    service: AIService = Depends(get_ai_service),
):
    """
    Generate code. With ``stream: true`` the upstream chunks are relayed as
    server-sent events.
    """
    messages = ai_prompts.generate_code_messages(sanitize_input(body.prompt), body.language)

    if body.stream:
        if not service.registry.list_configured():
            envelope = {
                "ok": False,
                "errorKind": "ConfigurationError",
                "message": "No AI providers available. Please configure at least one API key.",
            }
            return JSONResponse(envelope, status_code=503)
        chunks = service.stream(TaskType.CODE_GENERATION, messages, CompletionOptions(stream=True))
        return StreamingResponse(
            _relay(request, chunks),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    envelope = await service.complete(TaskType.CODE_GENERATION, messages)
    return _respond(envelope, response)


async def _relay(request: Request, chunks: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    """Pass upstream chunks through; stop and close upstream once the client is gone."""
    try:
        async for chunk in chunks:
            if await request.is_disconnected():
                logger.info("Client disconnected, aborting upstream stream")
                break
            yield chunk
        else:
            yield b"event: done\ndata: done\n\n"
    except AIError as exc:
        logger.warning("Streaming failed: %s", exc)
        payload = json.dumps({"ok": False, "errorKind": type(exc).__name__, "message": str(exc)})
        yield f"event: error\ndata: {payload}\n\n".encode("utf-8")
    finally:
        await chunks.aclose()


@router.post("/explain-code", response_model=AIResponse, response_model_exclude_none=True)
async def explain_code(
    body: ExplainCodeRequest,
    response: Response,
    service: AIService = Depends(get_ai_service),
):
    messages = ai_prompts.explain_code_messages(
        sanitize_input(body.code),
        sanitize_input(body.question) if body.question else None,
    )
    envelope = await service.complete(TaskType.EXPLANATION, messages)
    return _respond(envelope, response)


@router.post("/fix-bug", response_model=AIResponse, response_model_exclude_none=True)
async def fix_bug(
    body: FixBugRequest,
    response: Response,
    service: AIService = Depends(get_ai_service),
):
    messages = ai_prompts.fix_bug_messages(
        sanitize_input(body.code),
        context=sanitize_input(body.context),
        error=sanitize_input(body.error),
    )
    envelope = await service.complete(TaskType.DEBUGGING, messages, CompletionOptions(temperature=0.2))
    return _respond(envelope, response)


@router.post("/optimize-code", response_model=AIResponse, response_model_exclude_none=True)
async def optimize_code(
    body: OptimizeCodeRequest,
    response: Response,
    service: AIService = Depends(get_ai_service),
):
    messages = ai_prompts.optimize_code_messages(sanitize_input(body.code), body.focus_area)
    envelope = await service.complete(TaskType.OPTIMIZATION, messages)
    return _respond(envelope, response)


@router.post("/review-code", response_model=AIResponse, response_model_exclude_none=True)
async def review_code(
    body: ReviewCodeRequest,
    response: Response,
    service: AIService = Depends(get_ai_service),
):
    messages = ai_prompts.review_code_messages(sanitize_input(body.code))
    envelope = await service.complete(TaskType.GENERAL, messages)
    return _respond(envelope, response)


@router.post("/research", response_model=AIResponse, response_model_exclude_none=True)
async def research(
    body: ResearchRequest,
    response: Response,
    service: AIService = Depends(get_ai_service),
):
    """
    Research a topic (search providers first). Answers are cached for 30 minutes.
    """
    envelope = await service.research(sanitize_input(body.query))
    return _respond(envelope, response)


@router.post("/auth/validate-keys", response_model=AIResponse, response_model_exclude_none=True)
async def validate_keys(
    body: ValidateKeyRequest,
    response: Response,
    service: AIService = Depends(get_ai_service),
):
    """
    Validate an API key with a tiny request. Successful checks are cached for 5 minutes.
    """
    envelope = await service.validate_key(body.provider.strip().lower(), body.api_key)
    if envelope.get("ok"):
        response.status_code = 200
    elif envelope.get("errorKind") == "ConfigurationError":
        response.status_code = 400
    else:
        response.status_code = 401
    return envelope
