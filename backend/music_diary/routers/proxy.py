"""
Router de proxy para as APIs de terceiros (Suno e OpenAI).
As chaves ficam no servidor; o cliente só fala com este backend.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
import logging

from ..services.ai_music_generator import MusicGenerationError
from ..services.chat_client import ChatCompletionError
from ..services.session_service import DiarySessionService, get_session_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["proxy"])


class SunoGenerateRequest(BaseModel):
    model_config = {"populate_by_name": True}

    prompt: str
    style: str = ""
    title: str = ""
    custom_mode: Optional[bool] = Field(default=None, alias="customMode")
    instrumental: Optional[bool] = None
    model: Optional[str] = None
    negative_tags: Optional[str] = Field(default=None, alias="negativeTags")


class OpenAIChatRequest(BaseModel):
    model_config = {"populate_by_name": True}

    messages: List[Dict[str, str]] = []
    system_prompt: str = Field(default="", alias="systemPrompt")
    max_tokens: Optional[int] = Field(default=None, alias="maxTokens")
    temperature: Optional[float] = None


def _not_configured(vendor: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"code": 500, "msg": f"{vendor} API key is not configured"}
    )


@router.post("/suno/generate")
async def suno_generate(
    request: SunoGenerateRequest,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Repassa o pedido de geração para a Suno.
    """
    generator = service.music_generator
    if not generator.configured:
        return _not_configured("Suno")

    logger.info(f"Suno generate request: title='{request.title}', style='{request.style}'")

    try:
        return await generator.request_generation(
            request.prompt,
            request.style,
            request.title,
            custom_mode=request.custom_mode,
            instrumental=request.instrumental,
            model=request.model,
            negative_tags=request.negative_tags
        )
    except MusicGenerationError as e:
        logger.error(f"Suno generate error: {e}")
        return JSONResponse(
            status_code=500,
            content={"code": 500, "msg": "Internal server error", "error": str(e)}
        )


@router.get("/suno/tasks/{task_id}")
async def suno_task_status(
    task_id: str,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Repassa a consulta de status de uma tarefa da Suno.
    """
    generator = service.music_generator
    if not generator.configured:
        return _not_configured("Suno")

    try:
        return await generator.fetch_status(task_id)
    except MusicGenerationError as e:
        logger.error(f"Suno task status error: {e}")
        return JSONResponse(
            status_code=500,
            content={"code": 500, "msg": "Internal server error", "error": str(e)}
        )


@router.post("/openai/chat")
async def openai_chat(
    request: OpenAIChatRequest,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Repassa uma conversa para o chat completion da OpenAI.
    """
    client = service.conversation.chat_client
    if not client.configured:
        return JSONResponse(status_code=500, content={"error": "OpenAI API key is not configured"})

    try:
        return await client.create_completion(
            request.messages,
            request.system_prompt,
            max_tokens=request.max_tokens,
            temperature=request.temperature
        )
    except ChatCompletionError as e:
        logger.error(f"OpenAI chat error: {e}")
        return JSONResponse(
            status_code=e.status_code or 500,
            content={"error": "Chat completion failed", "message": str(e)}
        )
