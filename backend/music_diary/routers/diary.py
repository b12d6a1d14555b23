"""
Router para entradas do diário, busca, lixeira e estatísticas.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from ..models.config import Mood
from ..models.diary import DiaryEntry, DiaryEntryList, DiaryStats, TrashEntry
from ..services.diary_store import DiaryStore, get_diary_store

router = APIRouter(prefix="/api/diary", tags=["diary"])


# ============== ENTRIES ==============


@router.get("/entries", response_model=DiaryEntryList)
async def list_entries(
    mood: Optional[Mood] = Query(None, description="Filtrar por humor"),
    search: Optional[str] = Query(None, description="Buscar por resumo, emoções ou música"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    store: DiaryStore = Depends(get_diary_store)
):
    """Lista entradas do diário (mais recentes primeiro)."""
    entries, total = store.list_entries(mood=mood, search=search, page=page, limit=limit)
    return DiaryEntryList(entries=entries, total=total, page=page, limit=limit)


@router.get("/entries/{entry_id}", response_model=DiaryEntry)
async def get_entry(entry_id: str, store: DiaryStore = Depends(get_diary_store)):
    """Busca uma entrada pelo ID."""
    entry = store.get_entry(entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Entrada não encontrada")
    return entry


@router.delete("/entries/{entry_id}", response_model=TrashEntry)
async def move_entry_to_trash(entry_id: str, store: DiaryStore = Depends(get_diary_store)):
    """Move uma entrada para a lixeira."""
    trashed = store.move_to_trash(entry_id)
    if not trashed:
        raise HTTPException(status_code=404, detail="Entrada não encontrada")
    return trashed


@router.get("/search", response_model=List[DiaryEntry])
async def search_entries(
    q: str = Query("", description="Texto a buscar"),
    store: DiaryStore = Depends(get_diary_store)
):
    """Busca entradas; consulta vazia retorna lista vazia."""
    return store.search_entries(q)


# ============== TRASH ==============


@router.get("/trash", response_model=List[TrashEntry])
async def list_trash(store: DiaryStore = Depends(get_diary_store)):
    """Lista entradas na lixeira."""
    return store.list_trash()


@router.post("/trash/{entry_id}/restore", response_model=DiaryEntry)
async def restore_entry(entry_id: str, store: DiaryStore = Depends(get_diary_store)):
    """Restaura uma entrada da lixeira."""
    restored = store.restore_from_trash(entry_id)
    if not restored:
        raise HTTPException(status_code=404, detail="Entrada não encontrada na lixeira")
    return restored


@router.delete("/trash/{entry_id}")
async def delete_trash_entry(entry_id: str, store: DiaryStore = Depends(get_diary_store)):
    """Remove definitivamente uma entrada da lixeira."""
    if not store.delete_from_trash(entry_id):
        raise HTTPException(status_code=404, detail="Entrada não encontrada na lixeira")
    return {"message": "Entrada removida"}


@router.delete("/trash")
async def empty_trash(store: DiaryStore = Depends(get_diary_store)):
    """Esvazia a lixeira."""
    count = store.empty_trash()
    return {"message": f"{count} entradas removidas"}


# ============== STATS ==============


@router.get("/stats", response_model=DiaryStats)
async def get_stats(store: DiaryStore = Depends(get_diary_store)):
    """Retorna estatísticas do diário."""
    return store.get_stats()
