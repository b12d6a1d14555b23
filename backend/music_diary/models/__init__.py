"""
Models package for the music diary.
"""

from .config import (
    Mood,
    MOOD_TEXT,
    ApiConfig,
    OpenAIConfig,
    SunoConfig,
    GenerationConfig,
    DiaryConfig,
    FullConfig,
)
from .music import (
    MusicTaskStatus,
    MusicTask,
    InvalidTransitionError,
    MusicGenre,
    MUSIC_GENRES,
    PublicMusic,
    PublicMusicCreate,
)
from .diary import (
    ChatRole,
    ChatMessage,
    SummaryData,
    DiaryEntry,
    TrashEntry,
    DiaryStats,
    SessionStep,
    DiarySession,
)

__all__ = [
    # Config
    "Mood",
    "MOOD_TEXT",
    "ApiConfig",
    "OpenAIConfig",
    "SunoConfig",
    "GenerationConfig",
    "DiaryConfig",
    "FullConfig",
    # Music
    "MusicTaskStatus",
    "MusicTask",
    "InvalidTransitionError",
    "MusicGenre",
    "MUSIC_GENRES",
    "PublicMusic",
    "PublicMusicCreate",
    # Diary
    "ChatRole",
    "ChatMessage",
    "SummaryData",
    "DiaryEntry",
    "TrashEntry",
    "DiaryStats",
    "SessionStep",
    "DiarySession",
]
