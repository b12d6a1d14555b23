"""
Armazenamento em memória dos callbacks do vendor de música.
"""

from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


def extract_task_id(payload: Dict[str, Any]) -> Optional[str]:
    """Extrai o task id de um callback (`data.task_id` ou `data.taskId`)."""
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    task_id = data.get("task_id") or data.get("taskId")
    return str(task_id) if task_id else None


class CallbackStore:
    """
    Guarda o último payload recebido por task id.

    Mapa sem limite e sem expiração; vive enquanto o processo viver.
    """

    def __init__(self):
        self._records: Dict[str, Dict[str, Any]] = {}

    def save(self, task_id: str, payload: Dict[str, Any]) -> None:
        self._records[task_id] = payload
        logger.info(f"Stored callback payload for task {task_id}")

    def get(self, task_id: str) -> Optional[Dict[str, Any]]:
        return self._records.get(task_id)


# Singleton instance
_callback_store: Optional[CallbackStore] = None


def get_callback_store() -> CallbackStore:
    """Retorna instância singleton do armazenamento de callbacks."""
    global _callback_store
    if _callback_store is None:
        _callback_store = CallbackStore()
    return _callback_store
