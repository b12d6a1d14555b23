"""
Services package for the music diary.
"""

from .chat_client import OpenAIChatClient, ChatCompletionError
from .conversation import ConversationController
from .summarizer import Summarizer
from .ai_music_generator import SunoMusicGenerator, MusicGenerationError
from .callback_store import CallbackStore
from .diary_store import DiaryStore
from .session_service import DiarySessionService, SessionStateError, MusicGenerationFailed

__all__ = [
    "OpenAIChatClient",
    "ChatCompletionError",
    "ConversationController",
    "Summarizer",
    "SunoMusicGenerator",
    "MusicGenerationError",
    "CallbackStore",
    "DiaryStore",
    "DiarySessionService",
    "SessionStateError",
    "MusicGenerationFailed",
]
