"""
Modelos de configuração do sistema.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


# ============== ENUMS ==============


class Mood(str, Enum):
    GOOD = "good"
    NORMAL = "normal"
    BAD = "bad"


MOOD_TEXT = {
    Mood.GOOD: "좋음",
    Mood.NORMAL: "보통",
    Mood.BAD: "나쁨",
}


# ============== API CONFIGS ==============


class ApiConfigItem(BaseModel):
    api_key: str = ""
    enabled: bool = True


class OpenAIConfig(ApiConfigItem):
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-3.5-turbo"
    max_tokens: int = Field(default=300, ge=1, le=4096)
    summary_max_tokens: int = Field(default=600, ge=1, le=4096)
    temperature: float = Field(default=0.7, ge=0, le=2)
    timeout_seconds: float = 60.0


class SunoConfig(ApiConfigItem):
    base_url: str = "https://api.sunoapi.org/api/v1"
    model: str = "V3_5"
    custom_mode: bool = True
    instrumental: bool = True
    negative_tags: str = "Heavy Metal, Loud Drums, Aggressive"
    callback_url: Optional[str] = None  # Webhook do vendor (ver /api/callback)
    timeout_seconds: float = 60.0


class ApiConfig(BaseModel):
    openai: OpenAIConfig = OpenAIConfig()
    suno: SunoConfig = SunoConfig()


# ============== GENERATION ==============


class GenerationConfig(BaseModel):
    poll_interval_seconds: float = Field(default=3.0, ge=0)
    max_attempts: int = Field(default=60, ge=1)  # ~3 minutos com 3s
    progress_step: int = Field(default=10, ge=1, le=100)
    progress_interval_seconds: float = Field(default=0.5, ge=0)
    progress_ceiling: int = Field(default=90, ge=0, le=100)
    placeholder_url: str = "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-1.mp3"


# ============== DIARY ==============


class DiaryConfig(BaseModel):
    ai_name: str = "하모니"
    history_window: int = Field(default=5, ge=0)  # Mensagens anteriores enviadas ao chat
    max_selected_emotions: int = Field(default=2, ge=1)


# ============== FULL CONFIG ==============


class FullConfig(BaseModel):
    api: ApiConfig = ApiConfig()
    generation: GenerationConfig = GenerationConfig()
    diary: DiaryConfig = DiaryConfig()
