"""
Modelos do diário de emoções: mensagens, resumo e entradas.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

from .config import Mood
from .music import MusicTask


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """Uma mensagem da conversa; imutável depois de adicionada."""
    model_config = {"frozen": True}

    role: ChatRole
    content: str
    timestamp: datetime


class SummaryData(BaseModel):
    """Resumo extraído da conversa, usado para o diário e para o prompt musical."""
    summary: str
    keywords: List[str] = []
    recommended_emotions: List[str] = []
    action_items: List[str] = []
    music_prompt: str
    music_style: str
    music_title: str


# ============== DIARY ENTRIES ==============


class DiaryEntry(BaseModel):
    id: str
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    mood: Mood
    summary: str
    keywords: List[str] = []
    selected_emotions: List[str] = []
    music_tasks: List[MusicTask] = []
    chat_messages: List[ChatMessage] = []
    created_at: datetime


class TrashEntry(DiaryEntry):
    deleted_at: datetime


class DiaryEntryList(BaseModel):
    entries: List[DiaryEntry]
    total: int
    page: int
    limit: int


# ============== STATS ==============


class MoodStat(BaseModel):
    mood: Mood
    count: int
    percentage: float


class EmotionStat(BaseModel):
    emotion: str
    count: int


class DiaryStats(BaseModel):
    total_entries: int
    moods: List[MoodStat]
    top_emotions: List[EmotionStat]
    trash_count: int = 0


# ============== SESSION ==============


class SessionStep(str, Enum):
    MOOD = "mood"
    CHAT = "chat"
    SUMMARY = "summary"
    GENERATING = "generating"


class DiarySession(BaseModel):
    """Estado da sessão de diário em andamento (um usuário, uma aba)."""
    step: SessionStep = SessionStep.MOOD
    current_mood: Optional[Mood] = None
    chat_messages: List[ChatMessage] = []
    summary_data: Optional[SummaryData] = None
    selected_emotions: List[str] = []
    user_main_emotion: str = ""
    conversation_count: int = 0
    current_music_task: Optional[MusicTask] = None
    generation_progress: int = Field(default=0, ge=0, le=100)
    last_error: Optional[str] = None
    last_saved_entry_id: Optional[str] = None
