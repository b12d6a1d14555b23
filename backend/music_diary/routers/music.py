"""
Router para preferências de gênero e músicas públicas.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import List

from ..models.music import MUSIC_GENRES, GENRES_BY_ID, MusicGenre, PublicMusic, PublicMusicCreate
from ..services.diary_store import DiaryStore, get_diary_store

preferences_router = APIRouter(prefix="/api/preferences", tags=["preferences"])
public_music_router = APIRouter(prefix="/api/public-music", tags=["public-music"])


class PreferencesPayload(BaseModel):
    genres: List[str]


def _check_genres(genre_ids: List[str]):
    unknown = [g for g in genre_ids if g not in GENRES_BY_ID]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Gêneros desconhecidos: {', '.join(unknown)}")


# ============== PREFERENCES ==============


@preferences_router.get("/genres", response_model=List[MusicGenre])
async def list_genres():
    """Lista os gêneros disponíveis."""
    return MUSIC_GENRES


@preferences_router.get("", response_model=PreferencesPayload)
async def get_preferences(store: DiaryStore = Depends(get_diary_store)):
    """Retorna os gêneros preferidos."""
    return PreferencesPayload(genres=store.get_preferences())


@preferences_router.put("", response_model=PreferencesPayload)
async def set_preferences(payload: PreferencesPayload, store: DiaryStore = Depends(get_diary_store)):
    """Substitui os gêneros preferidos."""
    _check_genres(payload.genres)
    return PreferencesPayload(genres=store.set_preferences(payload.genres))


@preferences_router.post("/{genre_id}/toggle", response_model=PreferencesPayload)
async def toggle_preference(genre_id: str, store: DiaryStore = Depends(get_diary_store)):
    """Adiciona ou remove um gênero preferido."""
    _check_genres([genre_id])
    return PreferencesPayload(genres=store.toggle_preference(genre_id))


# ============== PUBLIC MUSIC ==============


@public_music_router.get("", response_model=List[PublicMusic])
async def list_public_music(store: DiaryStore = Depends(get_diary_store)):
    """Lista músicas compartilhadas."""
    return store.list_public_music()


@public_music_router.post("", response_model=PublicMusic)
async def share_music(data: PublicMusicCreate, store: DiaryStore = Depends(get_diary_store)):
    """Compartilha uma música gerada."""
    return store.share_music(data)


@public_music_router.delete("/{task_id}")
async def remove_public_music(task_id: str, store: DiaryStore = Depends(get_diary_store)):
    """Remove uma música compartilhada."""
    if not store.remove_public_music(task_id):
        raise HTTPException(status_code=404, detail="Música não encontrada")
    return {"message": "Música removida"}
