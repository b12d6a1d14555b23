"""
Tests for the Suno music generator: submission, status mapping and polling.

Only the raw vendor calls are stubbed; the polling state machine is real.
"""

from datetime import datetime

import pytest

from music_diary.models import MusicTask, MusicTaskStatus
from music_diary.services.ai_music_generator import SunoMusicGenerator
from music_diary.services.callback_store import CallbackStore

from conftest import AUDIO_URL, STREAM_URL, StubSunoGenerator, vendor_status


PLACEHOLDER = SunoMusicGenerator.PLACEHOLDER_URL


def _pending(task_id: str = "task-123") -> MusicTask:
    return MusicTask(
        task_id=task_id,
        prompt="calm piano",
        style="Piano",
        title="Quiet Night",
        created_at=datetime(2026, 10, 19, 21, 30),
    )


# ---------------------------------------------------------------------------
# submit
# ---------------------------------------------------------------------------


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_returns_pending_task(self):
        generator = StubSunoGenerator()

        task = await generator.submit("calm piano", "Piano", "Quiet Night")

        assert task.task_id == "task-123"
        assert task.status == MusicTaskStatus.PENDING
        assert generator.submitted[0]["title"] == "Quiet Night"

    @pytest.mark.asyncio
    async def test_no_api_key_gives_mock_task(self):
        generator = StubSunoGenerator(api_key="")

        task = await generator.submit("p", "s", "t")

        assert task.task_id.startswith("mock-")
        assert generator.submitted == []

    @pytest.mark.asyncio
    async def test_vendor_error_gives_mock_task(self):
        generator = StubSunoGenerator(submit_error=True)
        task = await generator.submit("p", "s", "t")
        assert generator.is_mock(task.task_id)

    @pytest.mark.asyncio
    async def test_response_without_task_id_gives_mock_task(self):
        generator = StubSunoGenerator(submit_response={"code": 400, "msg": "bad request", "data": None})
        task = await generator.submit("p", "s", "t")
        assert task.task_id.startswith("mock-")

    @pytest.mark.asyncio
    async def test_legacy_list_response(self):
        generator = StubSunoGenerator(submit_response=[{"id": "legacy-7"}])
        task = await generator.submit("p", "s", "t")
        assert task.task_id == "legacy-7"


# ---------------------------------------------------------------------------
# status mapping
# ---------------------------------------------------------------------------


class TestStatusMapping:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("SUCCESS", MusicTaskStatus.COMPLETED),
            ("complete", MusicTaskStatus.COMPLETED),
            ("FAILED", MusicTaskStatus.FAILED),
            ("SENSITIVE_WORD_ERROR", MusicTaskStatus.FAILED),
            ("PENDING", MusicTaskStatus.PENDING),
            ("TEXT_SUCCESS", MusicTaskStatus.PROCESSING),
            ("FIRST_SUCCESS", MusicTaskStatus.PROCESSING),
            ("streaming", MusicTaskStatus.PROCESSING),
        ],
    )
    def test_known_statuses(self, raw, expected):
        generator = SunoMusicGenerator(api_key="k")
        assert generator.map_status(raw, MusicTaskStatus.PENDING) == expected

    def test_unknown_status_keeps_current(self):
        generator = SunoMusicGenerator(api_key="k")
        assert generator.map_status("SOMETHING_NEW", MusicTaskStatus.PROCESSING) == MusicTaskStatus.PROCESSING
        assert generator.map_status(None, MusicTaskStatus.PENDING) == MusicTaskStatus.PENDING


# ---------------------------------------------------------------------------
# check_status
# ---------------------------------------------------------------------------


class TestCheckStatus:
    @pytest.mark.asyncio
    async def test_mock_task_completes_with_placeholder(self):
        generator = StubSunoGenerator()

        result = await generator.check_status(_pending("mock-1700000000000"))

        assert result.status == MusicTaskStatus.COMPLETED
        assert result.music_url == PLACEHOLDER
        assert result.is_placeholder
        assert generator.status_calls == 0

    @pytest.mark.asyncio
    async def test_success_with_tracks(self):
        generator = StubSunoGenerator(statuses=[vendor_status("SUCCESS", with_audio=True)])

        result = await generator.check_status(_pending())

        assert result.status == MusicTaskStatus.COMPLETED
        assert result.music_url == AUDIO_URL
        assert result.stream_url == STREAM_URL
        assert not result.is_placeholder

    @pytest.mark.asyncio
    async def test_success_without_audio_is_not_completed(self):
        generator = StubSunoGenerator(statuses=[vendor_status("SUCCESS")])
        result = await generator.check_status(_pending())
        assert result.status == MusicTaskStatus.PENDING

    @pytest.mark.asyncio
    async def test_failed_status_carries_error(self):
        generator = StubSunoGenerator(statuses=[vendor_status("GENERATE_AUDIO_FAILED", error="audio failed")])

        result = await generator.check_status(_pending())

        assert result.status == MusicTaskStatus.FAILED
        assert result.error == "audio failed"

    @pytest.mark.asyncio
    async def test_status_error_completes_with_placeholder(self):
        generator = StubSunoGenerator(status_error=True)

        result = await generator.check_status(_pending())

        assert result.status == MusicTaskStatus.COMPLETED
        assert result.music_url == PLACEHOLDER
        assert result.is_placeholder

    @pytest.mark.asyncio
    async def test_callback_payload_preferred_over_vendor(self):
        callbacks = CallbackStore()
        callbacks.save("task-123", {
            "code": 200,
            "msg": "All generated successfully.",
            "data": {
                "callbackType": "complete",
                "task_id": "task-123",
                "data": [{"audio_url": "https://cdn.example.com/cb.mp3"}],
            },
        })
        generator = StubSunoGenerator(callback_store=callbacks)

        result = await generator.check_status(_pending())

        assert result.status == MusicTaskStatus.COMPLETED
        assert result.music_url == "https://cdn.example.com/cb.mp3"
        assert result.stream_url == "https://cdn.example.com/cb.mp3"
        assert generator.status_calls == 0

    @pytest.mark.asyncio
    async def test_callback_error_code_marks_failed(self):
        callbacks = CallbackStore()
        callbacks.save("task-123", {"code": 501, "msg": "Audio generation failed", "data": {"task_id": "task-123"}})
        generator = StubSunoGenerator(callback_store=callbacks)

        result = await generator.check_status(_pending())

        assert result.status == MusicTaskStatus.FAILED
        assert result.error == "Audio generation failed"


# ---------------------------------------------------------------------------
# poll / generate
# ---------------------------------------------------------------------------


class TestPoll:
    @pytest.mark.asyncio
    async def test_poll_reaches_completed(self):
        generator = StubSunoGenerator(statuses=[
            vendor_status("PENDING"),
            vendor_status("PROCESSING"),
            vendor_status("SUCCESS", with_audio=True),
        ])
        seen = []

        task = await generator.poll(_pending(), on_update=lambda t: seen.append(t.status))

        assert task.status == MusicTaskStatus.COMPLETED
        assert task.music_url == AUDIO_URL
        assert generator.status_calls == 3
        assert seen == [
            MusicTaskStatus.PENDING,
            MusicTaskStatus.PROCESSING,
            MusicTaskStatus.COMPLETED,
        ]

    @pytest.mark.asyncio
    async def test_poll_stops_on_failed(self):
        generator = StubSunoGenerator(statuses=[
            vendor_status("PROCESSING"),
            vendor_status("FAILED", error="quota exceeded"),
            vendor_status("SUCCESS", with_audio=True),
        ])

        task = await generator.poll(_pending())

        assert task.status == MusicTaskStatus.FAILED
        assert task.error == "quota exceeded"
        assert generator.status_calls == 2

    @pytest.mark.asyncio
    async def test_never_terminal_forces_placeholder_after_max_attempts(self):
        generator = StubSunoGenerator(statuses=[vendor_status("PROCESSING")])

        task = await generator.poll(_pending())

        assert generator.status_calls == 60
        assert task.status == MusicTaskStatus.COMPLETED
        assert task.music_url == PLACEHOLDER
        assert task.is_placeholder

    @pytest.mark.asyncio
    async def test_processing_never_goes_back_to_pending(self):
        generator = StubSunoGenerator(
            statuses=[vendor_status("PROCESSING"), vendor_status("PENDING")],
            max_attempts=4,
        )
        seen = []

        await generator.poll(_pending(), on_update=lambda t: seen.append(t.status))

        assert MusicTaskStatus.PENDING not in seen
        assert seen[-1] == MusicTaskStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_generate_without_key_completes_with_placeholder(self):
        generator = StubSunoGenerator(api_key="")

        task = await generator.generate("p", "s", "t")

        assert task.task_id.startswith("mock-")
        assert task.status == MusicTaskStatus.COMPLETED
        assert task.is_placeholder
        assert generator.status_calls == 0
