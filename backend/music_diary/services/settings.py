"""
Carrega e salva a configuração (arquivo JSON + variáveis de ambiente).
"""

import json
import os
from pathlib import Path
import logging

from pydantic import ValidationError

from ..models.config import FullConfig

logger = logging.getLogger(__name__)

# Config file path
CONFIG_FILE = Path(os.getenv("MUSIC_DIARY_STORAGE", "storage")) / "config.json"


def apply_env_overrides(config: FullConfig) -> FullConfig:
    """
    Chaves vindas do ambiente preenchem valores vazios.

    Devolve uma cópia; o resultado nunca deve ser salvo em disco.
    """
    config = config.model_copy(deep=True)
    openai_key = os.getenv("OPENAI_API_KEY")
    if openai_key and not config.api.openai.api_key:
        config.api.openai.api_key = openai_key

    suno_key = os.getenv("SUNO_API_KEY")
    if suno_key and not config.api.suno.api_key:
        config.api.suno.api_key = suno_key

    callback_url = os.getenv("SUNO_CALLBACK_URL")
    if callback_url and not config.api.suno.callback_url:
        config.api.suno.callback_url = callback_url

    return config


def load_config_file() -> FullConfig:
    """Configuração como está no arquivo (sem variáveis de ambiente)."""
    config = FullConfig()
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, encoding="utf-8") as f:
                config = FullConfig(**json.load(f))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Invalid config file {CONFIG_FILE}, using defaults: {e}")
    return config


def get_config() -> FullConfig:
    """Configuração efetiva: arquivo (ou padrões) mais chaves do ambiente."""
    return apply_env_overrides(load_config_file())


def save_config(config: FullConfig):
    """Save configuration to file."""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config.model_dump(), f, indent=2, ensure_ascii=False)
