"""
Routers package for the music diary API.
"""

from .config import router as config_router
from .session import router as session_router
from .diary import router as diary_router
from .music import preferences_router, public_music_router
from .callback import router as callback_router
from .proxy import router as proxy_router

__all__ = [
    "config_router",
    "session_router",
    "diary_router",
    "preferences_router",
    "public_music_router",
    "callback_router",
    "proxy_router",
]
