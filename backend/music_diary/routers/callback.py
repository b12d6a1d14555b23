"""
Router para callbacks do vendor de música.
"""

from fastapi import APIRouter, Body, Depends, HTTPException
from typing import Any, Dict
import json
import logging

from ..services.callback_store import CallbackStore, extract_task_id, get_callback_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["callback"])


@router.post("/callback")
async def receive_callback(
    payload: Dict[str, Any] = Body(...),
    store: CallbackStore = Depends(get_callback_store)
):
    """
    Recebe o callback do vendor e guarda o payload pelo task id.
    """
    logger.info(f"Music callback received: {json.dumps(payload, ensure_ascii=False)[:500]}")

    task_id = extract_task_id(payload)
    if task_id:
        store.save(task_id, payload)
    else:
        logger.warning("Callback without task id, ignoring payload")

    return {
        "received": True,
        "message": "Callback received successfully",
        "taskId": task_id
    }


@router.get("/music/{task_id}")
async def get_music(task_id: str, store: CallbackStore = Depends(get_callback_store)):
    """
    Retorna o payload guardado para a tarefa.
    """
    payload = store.get(task_id)
    if payload is None:
        raise HTTPException(
            status_code=404,
            detail="Music not found. Music data not yet available. Please wait for callback."
        )
    return payload


@router.post("/music/{task_id}")
async def save_music(
    task_id: str,
    payload: Dict[str, Any] = Body(...),
    store: CallbackStore = Depends(get_callback_store)
):
    """
    Guarda um payload para a tarefa.
    """
    store.save(task_id, payload)
    return {"saved": True}
