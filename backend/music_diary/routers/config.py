"""
Router para configurações do sistema.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional, Literal

from ..models.config import FullConfig, ApiConfig, GenerationConfig, DiaryConfig
from ..services.chat_client import OpenAIChatClient
from ..services.ai_music_generator import SunoMusicGenerator
from ..services.session_service import DiarySessionService, get_session_service
from ..services.settings import apply_env_overrides, get_config, load_config_file, save_config

router = APIRouter(prefix="/api/config", tags=["config"])


def _save_and_apply(config: FullConfig, service: DiarySessionService) -> FullConfig:
    # Arquivo sem chaves do ambiente; o serviço recebe a configuração efetiva
    save_config(config)
    service.apply_config(apply_env_overrides(config))
    return config


@router.get("", response_model=FullConfig)
async def get_configuration():
    """
    Retorna configurações atuais.
    """
    return get_config()


@router.put("", response_model=FullConfig)
async def update_configuration(
    config: FullConfig,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Atualiza configurações.
    """
    return _save_and_apply(config, service)


@router.patch("/api", response_model=ApiConfig)
async def update_api_config(
    api_config: ApiConfig,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Atualiza apenas configurações de API.
    """
    config = load_config_file()
    config.api = api_config
    return _save_and_apply(config, service).api


@router.patch("/generation", response_model=GenerationConfig)
async def update_generation_config(
    generation_config: GenerationConfig,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Atualiza apenas configurações de geração de música.
    """
    config = load_config_file()
    config.generation = generation_config
    return _save_and_apply(config, service).generation


@router.patch("/diary", response_model=DiaryConfig)
async def update_diary_config(
    diary_config: DiaryConfig,
    service: DiarySessionService = Depends(get_session_service)
):
    """
    Atualiza apenas configurações do diário (nome da persona etc).
    """
    config = load_config_file()
    config.diary = diary_config
    return _save_and_apply(config, service).diary


class TestApiRequest(BaseModel):
    api: Literal["openai", "suno"]


class TestApiResponse(BaseModel):
    connected: bool
    error: Optional[str] = None
    details: Optional[dict] = None


@router.post("/test-api", response_model=TestApiResponse)
async def test_api_connection(request: TestApiRequest):
    """
    Testa conexão com uma API específica.
    """
    config = get_config()

    if request.api == "openai":
        openai_cfg = config.api.openai
        if not openai_cfg.api_key:
            return TestApiResponse(connected=False, error="API key não configurada")

        client = OpenAIChatClient(
            api_key=openai_cfg.api_key,
            model=openai_cfg.model,
            base_url=openai_cfg.base_url
        )
        result = await client.test_connection()

    else:
        suno_cfg = config.api.suno
        if not suno_cfg.api_key:
            return TestApiResponse(connected=False, error="API key não configurada")

        generator = SunoMusicGenerator(api_key=suno_cfg.api_key, base_url=suno_cfg.base_url)
        result = await generator.test_connection()

    return TestApiResponse(
        connected=result.get("connected", False),
        error=result.get("error"),
        details=result
    )
