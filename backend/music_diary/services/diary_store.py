"""
Serviço para persistir diário, preferências e músicas públicas.
"""

import json
import os
from pathlib import Path
from datetime import datetime
from collections import Counter
from typing import List, Optional
import logging

from ..models.config import Mood
from ..models.diary import (
    DiaryEntry, TrashEntry,
    DiaryStats, MoodStat, EmotionStat,
)
from ..models.music import PublicMusic, PublicMusicCreate

logger = logging.getLogger(__name__)


class DiaryStore:
    """
    Gerencia as coleções do diário usando arquivos JSON.

    Cada coleção é lida inteira e reescrita inteira a cada alteração.
    """

    DIARY_KEY = "diaryEntries"
    PREFERENCES_KEY = "musicPreferences"
    PUBLIC_MUSIC_KEY = "publicMusic"
    TRASH_KEY = "trashEntries"

    def __init__(self, storage_dir: Optional[str] = None):
        self.storage_dir = Path(storage_dir or os.getenv("MUSIC_DIARY_STORAGE", "storage"))
        self.storage_dir.mkdir(parents=True, exist_ok=True)

        self.entries_file = self._path(self.DIARY_KEY)
        self.preferences_file = self._path(self.PREFERENCES_KEY)
        self.public_music_file = self._path(self.PUBLIC_MUSIC_KEY)
        self.trash_file = self._path(self.TRASH_KEY)

        self._ensure_files()

    def _path(self, key: str) -> Path:
        return self.storage_dir / f"{key}.json"

    def _ensure_files(self):
        """Cria arquivos de dados se não existirem."""
        for file_path in [self.entries_file, self.preferences_file,
                          self.public_music_file, self.trash_file]:
            if not file_path.exists():
                file_path.write_text("[]")

    def _read_json(self, file_path: Path) -> list:
        """Lê dados de um arquivo JSON."""
        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, FileNotFoundError):
            logger.warning(f"Could not read {file_path.name}, starting empty")
            return []
        return data if isinstance(data, list) else []

    def _write_json(self, file_path: Path, data: list):
        """Escreve dados em um arquivo JSON."""
        file_path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8"
        )

    # ============== DIARY ENTRIES ==============

    def _load_entries(self) -> List[DiaryEntry]:
        return [DiaryEntry(**e) for e in self._read_json(self.entries_file)]

    def _save_entries(self, entries: List[DiaryEntry]):
        self._write_json(self.entries_file, [e.model_dump(mode="json") for e in entries])

    def list_entries(
        self,
        mood: Optional[Mood] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> tuple[List[DiaryEntry], int]:
        """Lista entradas (mais recentes primeiro) com filtros."""
        entries = self._load_entries()

        if mood:
            entries = [e for e in entries if e.mood == mood]

        if search:
            entries = [e for e in entries if self._matches(e, search.lower())]

        total = len(entries)

        start = (page - 1) * limit
        end = start + limit
        return entries[start:end], total

    def get_entry(self, entry_id: str) -> Optional[DiaryEntry]:
        """Busca uma entrada pelo ID."""
        for entry in self._load_entries():
            if entry.id == entry_id:
                return entry
        return None

    def add_entry(self, entry: DiaryEntry) -> DiaryEntry:
        """Adiciona uma entrada no início da lista."""
        entries = self._load_entries()
        entries.insert(0, entry)
        self._save_entries(entries)

        logger.info(f"Saved diary entry {entry.id} ({entry.mood.value})")
        return entry

    def _matches(self, entry: DiaryEntry, query: str) -> bool:
        return (
            query in entry.summary.lower()
            or any(query in k.lower() for k in entry.keywords)
            or any(query in e.lower() for e in entry.selected_emotions)
            or any(query in t.title.lower() for t in entry.music_tasks)
        )

    def search_entries(self, query: str) -> List[DiaryEntry]:
        """Busca por resumo, palavras-chave, emoções e títulos de música."""
        if not query.strip():
            return []

        lower_query = query.strip().lower()
        return [e for e in self._load_entries() if self._matches(e, lower_query)]

    # ============== TRASH ==============

    def _load_trash(self) -> List[TrashEntry]:
        return [TrashEntry(**e) for e in self._read_json(self.trash_file)]

    def _save_trash(self, trash: List[TrashEntry]):
        self._write_json(self.trash_file, [e.model_dump(mode="json") for e in trash])

    def list_trash(self) -> List[TrashEntry]:
        return self._load_trash()

    def move_to_trash(self, entry_id: str) -> Optional[TrashEntry]:
        """Move uma entrada do diário para a lixeira."""
        entries = self._load_entries()

        entry = next((e for e in entries if e.id == entry_id), None)
        if not entry:
            return None

        trashed = TrashEntry(**entry.model_dump(), deleted_at=datetime.now())

        trash = self._load_trash()
        trash.append(trashed)
        self._save_trash(trash)
        self._save_entries([e for e in entries if e.id != entry_id])

        logger.info(f"Moved diary entry {entry_id} to trash")
        return trashed

    def restore_from_trash(self, entry_id: str) -> Optional[DiaryEntry]:
        """Restaura uma entrada da lixeira para o fim do diário."""
        trash = self._load_trash()

        trashed = next((e for e in trash if e.id == entry_id), None)
        if not trashed:
            return None

        restored = DiaryEntry(**trashed.model_dump(exclude={"deleted_at"}))

        entries = self._load_entries()
        entries.append(restored)
        self._save_entries(entries)
        self._save_trash([e for e in trash if e.id != entry_id])

        logger.info(f"Restored diary entry {entry_id} from trash")
        return restored

    def delete_from_trash(self, entry_id: str) -> bool:
        """Remove definitivamente uma entrada da lixeira."""
        trash = self._load_trash()

        new_trash = [e for e in trash if e.id != entry_id]
        if len(new_trash) == len(trash):
            return False

        self._save_trash(new_trash)
        logger.info(f"Deleted diary entry {entry_id} permanently")
        return True

    def empty_trash(self) -> int:
        """Esvazia a lixeira e retorna quantas entradas foram removidas."""
        count = len(self._read_json(self.trash_file))
        self._save_trash([])
        return count

    # ============== PREFERENCES ==============

    def get_preferences(self) -> List[str]:
        return [str(g) for g in self._read_json(self.preferences_file)]

    def set_preferences(self, genre_ids: List[str]) -> List[str]:
        # Mantém a ordem e remove duplicados
        unique = list(dict.fromkeys(genre_ids))
        self._write_json(self.preferences_file, unique)
        return unique

    def toggle_preference(self, genre_id: str) -> List[str]:
        """Adiciona o gênero se ausente, remove se presente."""
        preferences = self.get_preferences()

        if genre_id in preferences:
            preferences = [g for g in preferences if g != genre_id]
        else:
            preferences.append(genre_id)

        self._write_json(self.preferences_file, preferences)
        return preferences

    # ============== PUBLIC MUSIC ==============

    def _load_public_music(self) -> List[PublicMusic]:
        return [PublicMusic(**m) for m in self._read_json(self.public_music_file)]

    def _save_public_music(self, items: List[PublicMusic]):
        self._write_json(self.public_music_file, [m.model_dump(mode="json") for m in items])

    def list_public_music(self) -> List[PublicMusic]:
        return self._load_public_music()

    def share_music(self, data: PublicMusicCreate) -> PublicMusic:
        """Compartilha uma música; se já existir, incrementa o contador."""
        items = self._load_public_music()

        for i, item in enumerate(items):
            if item.task_id == data.task_id:
                items[i] = item.model_copy(update={"play_count": item.play_count + 1})
                self._save_public_music(items)
                return items[i]

        shared = PublicMusic(**data.model_dump(), play_count=1, shared_at=datetime.now())
        items.append(shared)
        self._save_public_music(items)

        logger.info(f"Shared music {data.task_id}: {data.title}")
        return shared

    def remove_public_music(self, task_id: str) -> bool:
        items = self._load_public_music()

        new_items = [m for m in items if m.task_id != task_id]
        if len(new_items) == len(items):
            return False

        self._save_public_music(new_items)
        return True

    # ============== STATS ==============

    def get_stats(self) -> DiaryStats:
        """Retorna estatísticas do diário."""
        entries = self._load_entries()
        total = len(entries)

        moods = []
        for mood in Mood:
            count = sum(1 for e in entries if e.mood == mood)
            percentage = (count / total) * 100 if total > 0 else 0.0
            moods.append(MoodStat(mood=mood, count=count, percentage=percentage))

        emotion_counts = Counter(em for e in entries for em in e.selected_emotions)
        top_emotions = [
            EmotionStat(emotion=emotion, count=count)
            for emotion, count in emotion_counts.most_common(5)
        ]

        return DiaryStats(
            total_entries=total,
            moods=moods,
            top_emotions=top_emotions,
            trash_count=len(self._read_json(self.trash_file))
        )


# Singleton instance
_diary_store: Optional[DiaryStore] = None


def get_diary_store() -> DiaryStore:
    """Retorna instância singleton do armazenamento do diário."""
    global _diary_store
    if _diary_store is None:
        _diary_store = DiaryStore()
    return _diary_store
