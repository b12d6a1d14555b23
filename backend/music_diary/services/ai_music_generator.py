"""
Serviço de geração de música usando IA (Suno via sunoapi.org).
"""

import httpx
import asyncio
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging
import time

from .callback_store import CallbackStore
from ..models.music import MusicTask, MusicTaskStatus, InvalidTransitionError
from ..utils.logger import get_task_logger

logger = logging.getLogger(__name__)


class MusicGenerationError(Exception):
    """Erro ao falar com o vendor de música."""
    pass


class SunoMusicGenerator:
    """
    Gera música usando a API da Suno.

    Features:
    - Submissão de prompt/estilo/título, devolvendo um task id opaco
    - Polling de status em intervalo fixo com limite de tentativas
    - Callbacks do vendor usados como fonte alternativa de status
    - Tarefa simulada (prefixo "mock-") sem API key ou em caso de erro
    - Faixa placeholder quando o polling esgota as tentativas
    """

    BASE_URL = "https://api.sunoapi.org/api/v1"
    MOCK_PREFIX = "mock-"
    PLACEHOLDER_URL = "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-1.mp3"

    # Vocabulário do vendor -> estados canônicos
    STATUS_MAP = {
        "SUCCESS": MusicTaskStatus.COMPLETED,
        "COMPLETE": MusicTaskStatus.COMPLETED,
        "COMPLETED": MusicTaskStatus.COMPLETED,
        "FAILED": MusicTaskStatus.FAILED,
        "CREATE_TASK_FAILED": MusicTaskStatus.FAILED,
        "GENERATE_AUDIO_FAILED": MusicTaskStatus.FAILED,
        "CALLBACK_EXCEPTION": MusicTaskStatus.FAILED,
        "SENSITIVE_WORD_ERROR": MusicTaskStatus.FAILED,
        "ERROR": MusicTaskStatus.FAILED,
        "PENDING": MusicTaskStatus.PENDING,
        "PROCESSING": MusicTaskStatus.PROCESSING,
        "TEXT_SUCCESS": MusicTaskStatus.PROCESSING,
        "FIRST_SUCCESS": MusicTaskStatus.PROCESSING,
        "SUBMITTED": MusicTaskStatus.PROCESSING,
        "QUEUED": MusicTaskStatus.PROCESSING,
        "STREAMING": MusicTaskStatus.PROCESSING,
    }

    CALLBACK_TYPE_MAP = {
        "complete": MusicTaskStatus.COMPLETED,
        "error": MusicTaskStatus.FAILED,
        "text": MusicTaskStatus.PROCESSING,
        "first": MusicTaskStatus.PROCESSING,
    }

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        model: str = "V3_5",
        custom_mode: bool = True,
        instrumental: bool = True,
        negative_tags: str = "Heavy Metal, Loud Drums, Aggressive",
        callback_url: Optional[str] = None,
        poll_interval: float = 3.0,
        max_attempts: int = 60,
        placeholder_url: Optional[str] = None,
        timeout: float = 60.0,
        callback_store: Optional[CallbackStore] = None
    ):
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.model = model
        self.custom_mode = custom_mode
        self.instrumental = instrumental
        self.negative_tags = negative_tags
        self.callback_url = callback_url
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.placeholder_url = placeholder_url or self.PLACEHOLDER_URL
        self.timeout = timeout
        self.callback_store = callback_store

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    # ============== RAW VENDOR CALLS ==============

    async def request_generation(
        self,
        prompt: str,
        style: str,
        title: str,
        custom_mode: Optional[bool] = None,
        instrumental: Optional[bool] = None,
        model: Optional[str] = None,
        negative_tags: Optional[str] = None
    ) -> dict:
        """
        Envia o pedido de geração e devolve o JSON bruto do vendor.

        Raises:
            MusicGenerationError: falha de transporte ou status não-2xx
        """
        payload = {
            "prompt": prompt,
            "style": style,
            "title": title,
            "customMode": self.custom_mode if custom_mode is None else custom_mode,
            "instrumental": self.instrumental if instrumental is None else instrumental,
            "model": model or self.model,
            "negativeTags": negative_tags or self.negative_tags,
        }
        if self.callback_url:
            payload["callBackUrl"] = self.callback_url

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/generate",
                    headers=self._headers(),
                    json=payload
                )
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise MusicGenerationError(f"Music generation request failed: {e}") from e

    async def fetch_status(self, task_id: str) -> Any:
        """
        Consulta o status bruto de uma tarefa no vendor.

        Raises:
            MusicGenerationError: falha de transporte ou status não-2xx
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}/tasks/{task_id}",
                    headers={"Authorization": f"Bearer {self.api_key}"}
                )
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise MusicGenerationError(f"Music status request failed: {e}") from e

    # ============== STATE MACHINE ==============

    def _mock_task_id(self) -> str:
        return f"{self.MOCK_PREFIX}{int(time.time() * 1000)}"

    def is_mock(self, task_id: str) -> bool:
        return task_id.startswith(self.MOCK_PREFIX)

    async def submit(self, prompt: str, style: str, title: str) -> MusicTask:
        """
        Submete a geração e devolve a tarefa em `pending`.

        Sem API key, com erro do vendor ou sem task id na resposta,
        devolve uma tarefa simulada que completa no primeiro poll.
        """
        logger.info(f"Submitting music generation: title='{title}', style='{style}'")

        task_id = None
        if not self.configured:
            logger.warning("Suno API key not configured, using mock task")
        else:
            try:
                data = await self.request_generation(prompt, style, title)
                task_id = self._extract_task_id(data)
                if not task_id:
                    logger.error(f"Unexpected generation response: {data}")
            except MusicGenerationError as e:
                logger.error(f"Music generation submit failed: {e}")

        return MusicTask(
            task_id=task_id or self._mock_task_id(),
            status=MusicTaskStatus.PENDING,
            prompt=prompt,
            style=style,
            title=title,
            created_at=datetime.now()
        )

    def _extract_task_id(self, data: Any) -> Optional[str]:
        """Aceita `{code, data: {taskId}}` ou a lista legada `[{id}]`."""
        if isinstance(data, list):
            if data and isinstance(data[0], dict) and data[0].get("id"):
                return str(data[0]["id"])
            return None

        if not isinstance(data, dict):
            return None

        code = data.get("code")
        if code is not None and code != 200:
            return None

        inner = data.get("data")
        if isinstance(inner, dict):
            task_id = inner.get("taskId") or inner.get("task_id")
            return str(task_id) if task_id else None
        return None

    def map_status(self, raw_status: Optional[str], current: MusicTaskStatus) -> MusicTaskStatus:
        """Converte o status do vendor; valores desconhecidos mantêm o atual."""
        if not raw_status:
            return current
        return self.STATUS_MAP.get(str(raw_status).upper(), current)

    async def check_status(self, task: MusicTask) -> MusicTask:
        """
        Retorna a visão atual da tarefa (não altera `task`).

        Qualquer falha na consulta devolve a faixa placeholder como concluída.
        """
        if self.is_mock(task.task_id):
            return self._placeholder(task)

        if self.callback_store is not None:
            payload = self.callback_store.get(task.task_id)
            if payload is not None:
                return self._from_callback(task, payload)

        try:
            data = await self.fetch_status(task.task_id)
            return self._from_vendor(task, data)
        except MusicGenerationError as e:
            logger.error(f"Status check failed for {task.task_id}: {e}")
            return self._placeholder(task)

    def _from_vendor(self, task: MusicTask, data: Any) -> MusicTask:
        if isinstance(data, list):
            if not data:
                raise MusicGenerationError("Task not found in vendor response")
            song = data[0]
            raw_status = song.get("status")
            tracks = [song]
            error = song.get("error_message")
        elif isinstance(data, dict) and isinstance(data.get("data"), dict):
            inner = data["data"]
            raw_status = inner.get("status")
            response = inner.get("response") or {}
            tracks = response.get("sunoData") or response.get("data") or []
            error = inner.get("errorMessage")
        else:
            raise MusicGenerationError(f"Unexpected status response: {data}")

        status = self.map_status(raw_status, task.status)
        return self._with_tracks(task, status, tracks, error)

    def _from_callback(self, task: MusicTask, payload: Dict[str, Any]) -> MusicTask:
        inner = payload.get("data") or {}
        if payload.get("code") not in (None, 200):
            status = MusicTaskStatus.FAILED
        else:
            callback_type = str(inner.get("callbackType", "")).lower()
            status = self.CALLBACK_TYPE_MAP.get(callback_type, task.status)

        tracks = inner.get("data") or []
        error = payload.get("msg") if status == MusicTaskStatus.FAILED else None
        return self._with_tracks(task, status, tracks, error)

    def _with_tracks(
        self,
        task: MusicTask,
        status: MusicTaskStatus,
        tracks: List[dict],
        error: Optional[str]
    ) -> MusicTask:
        music_url = None
        stream_url = None
        if tracks:
            first = tracks[0]
            music_url = first.get("audioUrl") or first.get("audio_url")
            stream_url = (
                first.get("streamAudioUrl")
                or first.get("stream_audio_url")
                or music_url
            )

        # Concluída sem áudio ainda não é concluída
        if status == MusicTaskStatus.COMPLETED and not music_url:
            status = task.status

        return task.model_copy(update={
            "status": status,
            "music_url": music_url,
            "stream_url": stream_url,
            "error": error if status == MusicTaskStatus.FAILED else None,
            "is_placeholder": False,
        })

    def _placeholder(self, task: MusicTask) -> MusicTask:
        return task.model_copy(update={
            "status": MusicTaskStatus.COMPLETED,
            "music_url": self.placeholder_url,
            "stream_url": self.placeholder_url,
            "is_placeholder": True,
        })

    async def poll(
        self,
        task: MusicTask,
        on_update: Optional[Callable[[MusicTask], None]] = None
    ) -> MusicTask:
        """
        Consulta o status a cada `poll_interval` até um estado terminal.

        Após `max_attempts` sem estado terminal, a tarefa é forçada para
        `completed` com a faixa placeholder. `task` é alterada in place.
        """
        task_logger = get_task_logger(__name__, task.task_id)
        attempts = 0

        while attempts < self.max_attempts and not task.is_terminal:
            await asyncio.sleep(self.poll_interval)
            attempts += 1

            update = await self.check_status(task)
            try:
                task.apply(update)
            except InvalidTransitionError as e:
                task_logger.warning(f"Ignoring status update: {e}")

            if on_update:
                on_update(task)

            task_logger.debug(f"Attempt {attempts}/{self.max_attempts}: {task.status.value}")

        if task.is_terminal:
            task_logger.info(f"Finished as {task.status.value} after {attempts} attempts")
            return task

        task_logger.warning(
            f"No terminal status after {attempts} attempts, completing with placeholder track"
        )
        task.apply(self._placeholder(task))
        if on_update:
            on_update(task)
        return task

    async def generate(
        self,
        prompt: str,
        style: str,
        title: str,
        on_update: Optional[Callable[[MusicTask], None]] = None
    ) -> MusicTask:
        """Submete e acompanha a geração até o fim."""
        task = await self.submit(prompt, style, title)
        if on_update:
            on_update(task)
        return await self.poll(task, on_update=on_update)

    async def test_connection(self) -> dict:
        """Testa conexão com a API."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}/generate/credit",
                    headers={"Authorization": f"Bearer {self.api_key}"}
                )
                response.raise_for_status()
                return {"connected": True, "credits": response.json().get("data")}
        except Exception as e:
            return {
                "connected": False,
                "error": str(e)
            }
