"""
FastAPI main application for the Music Diary.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import (
    config_router,
    session_router,
    diary_router,
    preferences_router,
    public_music_router,
    callback_router,
    proxy_router,
)
from .services.settings import get_config
from .utils.logger import setup_logging

load_dotenv()
setup_logging(log_file=os.getenv("LOG_FILE"))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Music Diary API...")

    config = get_config()
    logger.info(f"OpenAI API key: {'configured' if config.api.openai.api_key else 'not configured'}")
    logger.info(f"Suno API key: {'configured' if config.api.suno.api_key else 'not configured'}")

    yield

    # Shutdown
    logger.info("Shutting down Music Diary API...")


# Create FastAPI app
app = FastAPI(
    title="Music Diary API",
    description="API do diário de emoções com música gerada por IA",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
frontend_url = os.getenv("FRONTEND_URL")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[frontend_url] if frontend_url else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(config_router)
app.include_router(session_router)
app.include_router(diary_router)
app.include_router(preferences_router)
app.include_router(public_music_router)
app.include_router(callback_router)
app.include_router(proxy_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Music Diary API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "message": "Music Diary API Server is running",
        "timestamp": datetime.now().isoformat()
    }


@app.get("/api")
async def api_info():
    """API information."""
    return {
        "endpoints": {
            "session": "/api/session",
            "diary": "/api/diary",
            "preferences": "/api/preferences",
            "public_music": "/api/public-music",
            "callback": "/api/callback",
            "config": "/api/config",
        },
        "documentation": "/docs",
    }
