"""
Orquestrador da sessão de diário: humor -> conversa -> resumo -> música -> salvar.
"""

import asyncio
import uuid
import logging
from datetime import datetime
from typing import List, Optional

from .chat_client import OpenAIChatClient
from .conversation import ConversationController, greeting_for
from .summarizer import Summarizer
from .ai_music_generator import SunoMusicGenerator
from .callback_store import CallbackStore, get_callback_store
from .diary_store import DiaryStore, get_diary_store
from .settings import get_config

from ..models.config import FullConfig, Mood
from ..models.diary import (
    ChatMessage, ChatRole, DiaryEntry, DiarySession, SessionStep, SummaryData,
)
from ..models.music import MusicTask, MusicTaskStatus

logger = logging.getLogger(__name__)


class SessionStateError(Exception):
    """Operação não permitida no passo atual da sessão."""
    pass


class MusicGenerationFailed(Exception):
    """A tarefa de música terminou em `failed`."""

    def __init__(self, task: MusicTask):
        self.task = task
        super().__init__(f"Music generation failed: {task.error or 'unknown error'}")


class DiarySessionService:
    """
    Conduz uma sessão de diário por vez, de forma linear.

    Features:
    - Estado da sessão em memória (um usuário, uma aba)
    - Conversa com a persona e contador de turnos
    - Resumo e seleção de emoções (no máximo duas)
    - Geração de música com polling e barra de progresso cosmética
    - Salva a entrada e reinicia a sessão
    """

    def __init__(
        self,
        config: FullConfig,
        store: DiaryStore,
        chat_client: Optional[OpenAIChatClient] = None,
        music_generator: Optional[SunoMusicGenerator] = None,
        callback_store: Optional[CallbackStore] = None
    ):
        self.store = store
        self.callback_store = callback_store
        self.session = DiarySession()
        self._snapshot: Optional[DiarySession] = None
        self._chat_client_override = chat_client
        self._music_generator_override = music_generator
        self.apply_config(config)

    def apply_config(self, config: FullConfig):
        """(Re)constrói os clientes a partir da configuração."""
        self.config = config
        openai_cfg = config.api.openai
        suno_cfg = config.api.suno
        generation = config.generation

        chat_client = self._chat_client_override or OpenAIChatClient(
            api_key=openai_cfg.api_key if openai_cfg.enabled else "",
            model=openai_cfg.model,
            base_url=openai_cfg.base_url,
            max_tokens=openai_cfg.max_tokens,
            temperature=openai_cfg.temperature,
            timeout=openai_cfg.timeout_seconds
        )

        self.conversation = ConversationController(
            chat_client,
            ai_name=config.diary.ai_name,
            history_window=config.diary.history_window
        )
        self.summarizer = Summarizer(chat_client, max_tokens=openai_cfg.summary_max_tokens)

        self.music_generator = self._music_generator_override or SunoMusicGenerator(
            api_key=suno_cfg.api_key if suno_cfg.enabled else "",
            base_url=suno_cfg.base_url,
            model=suno_cfg.model,
            custom_mode=suno_cfg.custom_mode,
            instrumental=suno_cfg.instrumental,
            negative_tags=suno_cfg.negative_tags,
            callback_url=suno_cfg.callback_url,
            poll_interval=generation.poll_interval_seconds,
            max_attempts=generation.max_attempts,
            placeholder_url=generation.placeholder_url,
            timeout=suno_cfg.timeout_seconds,
            callback_store=self.callback_store
        )

    # ============== MOOD & CHAT ==============

    def select_mood(self, mood: Mood) -> DiarySession:
        """Escolhe o humor e abre a conversa com uma saudação."""
        if self.session.step == SessionStep.GENERATING:
            raise SessionStateError("Cannot change mood while music is being generated")

        self.session = DiarySession(
            step=SessionStep.CHAT,
            current_mood=mood,
            chat_messages=[
                ChatMessage(
                    role=ChatRole.ASSISTANT,
                    content=greeting_for(mood),
                    timestamp=datetime.now()
                )
            ]
        )
        logger.info(f"Session started with mood {mood.value}")
        return self.session

    async def send_message(self, text: str) -> Optional[ChatMessage]:
        """
        Envia uma fala do usuário e adiciona a resposta da persona.

        Só vale no passo `chat`; texto vazio ou outro passo é um no-op
        (retorna None).
        """
        if not text.strip() or self.session.step != SessionStep.CHAT:
            return None

        history = list(self.session.chat_messages)
        self.session.conversation_count += 1
        turn = self.session.conversation_count

        self.session.chat_messages.append(
            ChatMessage(role=ChatRole.USER, content=text, timestamp=datetime.now())
        )

        reply = await self.conversation.reply(
            text,
            history,
            self.session.current_mood,
            self.store.get_preferences(),
            turn
        )

        ai_message = ChatMessage(role=ChatRole.ASSISTANT, content=reply, timestamp=datetime.now())
        self.session.chat_messages.append(ai_message)
        return ai_message

    # ============== SUMMARY ==============

    async def generate_summary(self) -> SummaryData:
        """Resume a conversa; exige humor e ao menos duas mensagens."""
        if not self.session.current_mood or len(self.session.chat_messages) < 2:
            raise SessionStateError("A mood and at least two chat messages are required")
        if self.session.step == SessionStep.GENERATING:
            raise SessionStateError("Music is being generated")

        summary = await self.summarizer.summarize(
            self.session.chat_messages,
            self.session.current_mood,
            self.store.get_preferences()
        )

        self.session.summary_data = summary
        self.session.selected_emotions = []
        self.session.step = SessionStep.SUMMARY
        return summary

    def select_emotion(self, emotion: str) -> List[str]:
        """
        Alterna uma emoção selecionada.

        Selecionar uma emoção já escolhida a remove; acima do limite,
        a mais antiga é descartada.
        """
        selected = list(self.session.selected_emotions)
        limit = self.config.diary.max_selected_emotions

        if emotion in selected:
            selected = [e for e in selected if e != emotion]
        elif len(selected) < limit:
            selected.append(emotion)
        else:
            selected = selected[len(selected) - limit + 1:] + [emotion]

        self.session.selected_emotions = selected
        return selected

    def set_main_emotion(self, text: str) -> str:
        self.session.user_main_emotion = text
        return text

    # ============== MUSIC & SAVE ==============

    def begin_generation(self):
        """Valida e entra no passo `generating`."""
        if not self.session.current_mood or not self.session.summary_data:
            raise SessionStateError("Mood and summary are required before generating music")
        if self.session.step == SessionStep.GENERATING:
            raise SessionStateError("Music is already being generated")

        self.session.step = SessionStep.GENERATING
        self.session.generation_progress = 0
        self.session.current_music_task = None
        self.session.last_error = None
        self.session.last_saved_entry_id = None

        # A entrada é montada a partir desta cópia, não da sessão viva
        self._snapshot = self.session.model_copy(deep=True)

    async def complete_generation(self) -> DiaryEntry:
        """
        Gera a música, salva a entrada e reinicia a sessão.

        Raises:
            MusicGenerationFailed: tarefa terminou em `failed`; a sessão
                volta ao passo de resumo sem salvar nada
        """
        snapshot = self._snapshot
        if snapshot is None or self.session.step != SessionStep.GENERATING:
            raise SessionStateError("Call begin_generation first")

        summary = snapshot.summary_data
        ticker = asyncio.create_task(self._tick_progress())

        try:
            task = await self.music_generator.generate(
                summary.music_prompt or "A calming ambient music",
                summary.music_style or "Ambient",
                summary.music_title or "Emotional Journey",
                on_update=self._on_task_update
            )
        except Exception as e:
            logger.error(f"Music generation crashed: {e}", exc_info=True)
            self.session.step = SessionStep.SUMMARY
            self.session.last_error = str(e)
            raise
        finally:
            ticker.cancel()
            try:
                await ticker
            except asyncio.CancelledError:
                pass

        self.session.generation_progress = 100

        if task.status != MusicTaskStatus.COMPLETED:
            self.session.step = SessionStep.SUMMARY
            self.session.last_error = task.error or "음악 생성 중 문제가 발생했습니다."
            raise MusicGenerationFailed(task)

        entry = self._build_entry(task, snapshot)
        self.store.add_entry(entry)

        self._snapshot = None
        self.session = DiarySession()
        self.session.last_saved_entry_id = entry.id
        return entry

    async def generate_music_and_save(self) -> DiaryEntry:
        self.begin_generation()
        return await self.complete_generation()

    def _on_task_update(self, task: MusicTask):
        self.session.current_music_task = task.model_copy()

    async def _tick_progress(self):
        """Barra de progresso cosmética, independente do polling."""
        generation = self.config.generation
        while self.session.generation_progress < generation.progress_ceiling:
            await asyncio.sleep(generation.progress_interval_seconds)
            self.session.generation_progress = min(
                generation.progress_ceiling,
                self.session.generation_progress + generation.progress_step
            )

    def _build_entry(self, task: MusicTask, snapshot: DiarySession) -> DiaryEntry:
        now = datetime.now()
        summary = snapshot.summary_data

        emotions = []
        if snapshot.user_main_emotion.strip():
            emotions.append(snapshot.user_main_emotion.strip())
        emotions.extend(snapshot.selected_emotions)

        return DiaryEntry(
            id=str(uuid.uuid4()),
            date=now.strftime("%Y-%m-%d"),
            time=now.strftime("%H:%M"),
            mood=snapshot.current_mood,
            summary=summary.summary or "내용 없음",
            keywords=list(summary.keywords),
            selected_emotions=emotions,
            music_tasks=[task],
            chat_messages=list(snapshot.chat_messages),
            created_at=now
        )

    def reset(self) -> DiarySession:
        """Volta todo o estado da sessão aos valores iniciais."""
        if self.session.step == SessionStep.GENERATING:
            raise SessionStateError("Cannot reset while music is being generated")

        self.session = DiarySession()
        return self.session


# Singleton instance
_session_service: Optional[DiarySessionService] = None


def get_session_service() -> DiarySessionService:
    """Retorna instância singleton do serviço de sessão."""
    global _session_service
    if _session_service is None:
        _session_service = DiarySessionService(
            config=get_config(),
            store=get_diary_store(),
            callback_store=get_callback_store()
        )
    return _session_service
