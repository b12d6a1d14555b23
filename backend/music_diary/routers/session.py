"""
Router da sessão de diário (humor, conversa, resumo, música).
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

from ..models.config import Mood
from ..models.diary import ChatMessage, DiarySession, SummaryData
from ..services.session_service import (
    DiarySessionService,
    MusicGenerationFailed,
    SessionStateError,
    get_session_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/session", tags=["session"])


class MoodRequest(BaseModel):
    mood: Mood


class MessageRequest(BaseModel):
    content: str


class MessageResponse(BaseModel):
    accepted: bool
    reply: Optional[ChatMessage] = None
    session: DiarySession


class EmotionRequest(BaseModel):
    emotion: str = Field(min_length=1)


class EmotionResponse(BaseModel):
    selected_emotions: List[str]


class MainEmotionRequest(BaseModel):
    emotion: str = ""


class GenerateResponse(BaseModel):
    status: str
    message: str


@router.get("", response_model=DiarySession)
async def get_session(service: DiarySessionService = Depends(get_session_service)):
    """
    Estado atual da sessão (use para acompanhar o progresso da música).
    """
    return service.session


@router.post("/mood", response_model=DiarySession)
async def select_mood(
    request: MoodRequest,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Escolhe o humor do dia e inicia a conversa.
    """
    try:
        return service.select_mood(request.mood)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/messages", response_model=MessageResponse)
async def send_message(
    request: MessageRequest,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Envia uma mensagem; texto vazio ou sessão sem humor é ignorado.
    """
    reply = await service.send_message(request.content)
    return MessageResponse(accepted=reply is not None, reply=reply, session=service.session)


@router.post("/summary", response_model=SummaryData)
async def generate_summary(service: DiarySessionService = Depends(get_session_service)):
    """
    Resume a conversa em um registro de diário.
    """
    try:
        return await service.generate_summary()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/emotions", response_model=EmotionResponse)
async def select_emotion(
    request: EmotionRequest,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Seleciona/desseleciona uma emoção (no máximo duas).
    """
    return EmotionResponse(selected_emotions=service.select_emotion(request.emotion))


@router.put("/main-emotion")
async def set_main_emotion(
    request: MainEmotionRequest,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Define a emoção principal digitada pelo usuário.
    """
    return {"user_main_emotion": service.set_main_emotion(request.emotion)}


async def _run_generation(service: DiarySessionService):
    """
    Background task para gerar a música e salvar o diário.
    """
    try:
        entry = await service.complete_generation()
        logger.info(f"Diary entry {entry.id} saved with music")
    except MusicGenerationFailed as e:
        logger.warning(f"Music generation failed, back to summary: {e}")
    except Exception as e:
        logger.error(f"Music generation job crashed: {e}", exc_info=True)


@router.post("/generate", response_model=GenerateResponse)
async def generate_music(
    background_tasks: BackgroundTasks,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Inicia a geração de música e o salvamento do diário.
    Retorna imediatamente; acompanhe por GET /api/session.
    """
    try:
        service.begin_generation()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    background_tasks.add_task(_run_generation, service)

    return GenerateResponse(status="generating", message="Geração de música iniciada")


@router.post("/reset", response_model=DiarySession)
async def reset_session(service: DiarySessionService = Depends(get_session_service)):
    """
    Descarta a sessão atual (não durante a geração).
    """
    try:
        return service.reset()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
