"""
Modelos de tarefas de geração de música e lista pública.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

from .config import Mood


class MusicTaskStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = {MusicTaskStatus.COMPLETED, MusicTaskStatus.FAILED}

# Transições permitidas; estados terminais não saem de si mesmos
ALLOWED_TRANSITIONS = {
    MusicTaskStatus.PENDING: {
        MusicTaskStatus.PENDING,
        MusicTaskStatus.PROCESSING,
        MusicTaskStatus.COMPLETED,
        MusicTaskStatus.FAILED,
    },
    MusicTaskStatus.PROCESSING: {
        MusicTaskStatus.PROCESSING,
        MusicTaskStatus.COMPLETED,
        MusicTaskStatus.FAILED,
    },
    MusicTaskStatus.COMPLETED: set(),
    MusicTaskStatus.FAILED: set(),
}


class InvalidTransitionError(Exception):
    """Transição de status não permitida para uma MusicTask."""

    def __init__(self, task_id: str, current: MusicTaskStatus, target: MusicTaskStatus):
        self.task_id = task_id
        self.current = current
        self.target = target
        super().__init__(f"Task {task_id}: cannot move from {current.value} to {target.value}")


class MusicTask(BaseModel):
    """Uma tarefa de geração de música no vendor (Suno)."""
    task_id: str
    status: MusicTaskStatus = MusicTaskStatus.PENDING
    prompt: str
    style: str
    title: str
    created_at: datetime
    music_url: Optional[str] = None
    stream_url: Optional[str] = None
    error: Optional[str] = None
    is_placeholder: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def can_transition_to(self, target: MusicTaskStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def apply(self, update: "MusicTask") -> "MusicTask":
        """
        Aplica o resultado de um poll a esta tarefa, in place.

        Raises:
            InvalidTransitionError: se a transição não for permitida
        """
        if not self.can_transition_to(update.status):
            raise InvalidTransitionError(self.task_id, self.status, update.status)

        self.status = update.status
        if update.music_url:
            self.music_url = update.music_url
        if update.stream_url:
            self.stream_url = update.stream_url
        if update.error:
            self.error = update.error
        self.is_placeholder = update.is_placeholder
        return self


class MusicGenre(BaseModel):
    id: str
    name: str
    emoji: str


MUSIC_GENRES: List[MusicGenre] = [
    MusicGenre(id="classical", name="클래식", emoji="🎼"),
    MusicGenre(id="jazz", name="재즈", emoji="🎺"),
    MusicGenre(id="lofi", name="Lo-fi", emoji="🎧"),
    MusicGenre(id="ambient", name="앰비언트", emoji="🌌"),
    MusicGenre(id="pop", name="팝", emoji="🎤"),
    MusicGenre(id="electronic", name="일렉트로닉", emoji="🎛️"),
    MusicGenre(id="acoustic", name="어쿠스틱", emoji="🎸"),
    MusicGenre(id="piano", name="피아노", emoji="🎹"),
]

GENRES_BY_ID = {genre.id: genre for genre in MUSIC_GENRES}


def genre_names(genre_ids: List[str]) -> List[str]:
    """Converte ids de gênero em nomes de exibição (ids desconhecidos passam direto)."""
    return [GENRES_BY_ID[g].name if g in GENRES_BY_ID else g for g in genre_ids]


# ============== PUBLIC MUSIC ==============


class PublicMusicCreate(BaseModel):
    task_id: str
    title: str
    style: str = ""
    music_url: str
    stream_url: Optional[str] = None
    mood: Optional[Mood] = None
    diary_id: Optional[str] = None


class PublicMusic(PublicMusicCreate):
    play_count: int = Field(default=1, ge=0)
    shared_at: datetime
