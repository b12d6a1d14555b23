"""
Shared fixtures for the test suite.

Fakes replace the chat and music vendors so no network calls are made.
The music fake only overrides the raw vendor calls, so the real status
mapping and polling state machine run in every test.
"""

from typing import Any, List, Optional

import pytest
from fastapi.testclient import TestClient

from music_diary.main import app
from music_diary.models.config import FullConfig, GenerationConfig
from music_diary.services.ai_music_generator import MusicGenerationError, SunoMusicGenerator
from music_diary.services.callback_store import CallbackStore, get_callback_store
from music_diary.services.diary_store import DiaryStore, get_diary_store
from music_diary.services.session_service import DiarySessionService, get_session_service


# ---------------------------------------------------------------------------
# Vendor payload helpers
# ---------------------------------------------------------------------------

AUDIO_URL = "https://cdn.example.com/audio/task-123.mp3"
STREAM_URL = "https://cdn.example.com/stream/task-123"


def vendor_status(status: str, with_audio: bool = False, error: Optional[str] = None) -> dict:
    """Status payload in the sunoapi.org shape."""
    response = {}
    if with_audio:
        response = {"sunoData": [{"audioUrl": AUDIO_URL, "streamAudioUrl": STREAM_URL}]}
    return {
        "code": 200,
        "msg": "success",
        "data": {
            "taskId": "task-123",
            "status": status,
            "response": response,
            "errorMessage": error,
        },
    }


SUMMARY_TEXT = """요약: 회사에서 발표를 잘 마쳐서 뿌듯한 하루였어요.
감정키워드: #뿌듯함, #안도, #성취, #피곤, #기쁨
추천감정: 뿌듯함, 안도감, 자신감, 설렘, 감사
액션아이템: 스스로에게 작은 선물하기 | 일찍 잠자리에 들기
음악프롬프트: An uplifting acoustic track celebrating a small victory after a long day
음악스타일: Acoustic Pop
음악제목: Small Victory"""


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeChatClient:
    """Deterministic chat client; records every call."""

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.replies = list(replies or [])
        self.error = error
        self.calls: List[dict] = []
        self.configured = True

    async def complete(self, messages, system_prompt, max_tokens=None) -> str:
        self.calls.append({
            "messages": messages,
            "system_prompt": system_prompt,
            "max_tokens": max_tokens,
        })
        if self.error:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return "그랬군요! 😊 조금 더 이야기해 주실래요?"

    async def create_completion(self, messages, system_prompt=None, max_tokens=None, temperature=None) -> dict:
        content = await self.complete(messages, system_prompt, max_tokens)
        return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class StubSunoGenerator(SunoMusicGenerator):
    """
    Suno generator with the HTTP layer stubbed out.

    `statuses` are returned in order by `fetch_status`; the last one repeats.
    """

    def __init__(
        self,
        statuses: Optional[List[Any]] = None,
        submit_response: Optional[Any] = None,
        submit_error: bool = False,
        status_error: bool = False,
        **kwargs
    ):
        kwargs.setdefault("api_key", "test-suno-key")
        kwargs.setdefault("poll_interval", 0)
        super().__init__(**kwargs)
        self.statuses = list(statuses or [vendor_status("SUCCESS", with_audio=True)])
        self.submit_response = submit_response
        self.submit_error = submit_error
        self.status_error = status_error
        self.submitted: List[dict] = []
        self.status_calls = 0

    async def request_generation(self, prompt, style, title, **kwargs):
        self.submitted.append({"prompt": prompt, "style": style, "title": title, **kwargs})
        if self.submit_error:
            raise MusicGenerationError("vendor unavailable")
        if self.submit_response is not None:
            return self.submit_response
        return {"code": 200, "msg": "success", "data": {"taskId": "task-123"}}

    async def fetch_status(self, task_id):
        self.status_calls += 1
        if self.status_error:
            raise MusicGenerationError("status endpoint unavailable")
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]


# ---------------------------------------------------------------------------
# Service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fast_config() -> FullConfig:
    """Config with zero-length timers so polling and progress run instantly."""
    return FullConfig(
        generation=GenerationConfig(
            poll_interval_seconds=0,
            progress_interval_seconds=0,
        )
    )


@pytest.fixture()
def store(tmp_path) -> DiaryStore:
    return DiaryStore(storage_dir=str(tmp_path / "storage"))


@pytest.fixture()
def callback_store() -> CallbackStore:
    return CallbackStore()


@pytest.fixture()
def chat_client() -> FakeChatClient:
    return FakeChatClient(replies=[
        "안녕하세요! 😊 오늘 하루는 어떠셨어요?",
        "정말 수고 많으셨어요. 💜 어떤 점이 제일 힘들었나요?",
        SUMMARY_TEXT,
    ])


@pytest.fixture()
def music_generator(callback_store) -> StubSunoGenerator:
    return StubSunoGenerator(
        statuses=[
            vendor_status("PENDING"),
            vendor_status("PROCESSING"),
            vendor_status("SUCCESS", with_audio=True),
        ],
        callback_store=callback_store,
    )


@pytest.fixture()
def session_service(fast_config, store, chat_client, music_generator, callback_store) -> DiarySessionService:
    return DiarySessionService(
        config=fast_config,
        store=store,
        chat_client=chat_client,
        music_generator=music_generator,
        callback_store=callback_store,
    )


# ---------------------------------------------------------------------------
# FastAPI test client fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def api_client(session_service, store, callback_store):
    """``TestClient`` with the session, store and callback relay overridden."""
    app.dependency_overrides[get_session_service] = lambda: session_service
    app.dependency_overrides[get_diary_store] = lambda: store
    app.dependency_overrides[get_callback_store] = lambda: callback_store

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
