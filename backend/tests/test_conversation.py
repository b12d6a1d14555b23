"""
Tests for the chat client wrapper and the conversation controller.
"""

from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest

from music_diary.models import ChatMessage, ChatRole, Mood
from music_diary.services.chat_client import ChatCompletionError, OpenAIChatClient
from music_diary.services.conversation import (
    APOLOGY_MESSAGE,
    ConversationController,
    greeting_for,
)

from conftest import FakeChatClient


def _history(count: int) -> list:
    messages = []
    for i in range(count):
        role = ChatRole.ASSISTANT if i % 2 == 0 else ChatRole.USER
        messages.append(
            ChatMessage(role=role, content=f"message {i}", timestamp=datetime(2026, 10, 19, 20, i))
        )
    return messages


# ---------------------------------------------------------------------------
# OpenAIChatClient
# ---------------------------------------------------------------------------


class TestOpenAIChatClient:
    @pytest.mark.asyncio
    async def test_missing_key_returns_fixed_message_without_request(self):
        client = OpenAIChatClient(api_key="")

        with patch.object(OpenAIChatClient, "create_completion", new=AsyncMock()) as create:
            reply = await client.complete([{"role": "user", "content": "hi"}], "system")

        assert reply == OpenAIChatClient.NO_API_KEY_MESSAGE
        create.assert_not_called()

    @pytest.mark.asyncio
    async def test_complete_extracts_first_choice(self):
        client = OpenAIChatClient(api_key="sk-test")
        payload = {
            "choices": [{"message": {"role": "assistant", "content": "반가워요! 😊"}}],
            "usage": {"total_tokens": 42},
        }

        with patch.object(OpenAIChatClient, "create_completion", new=AsyncMock(return_value=payload)):
            reply = await client.complete([], "system")

        assert reply == "반가워요! 😊"

    @pytest.mark.asyncio
    async def test_malformed_payload_raises(self):
        client = OpenAIChatClient(api_key="sk-test")

        with patch.object(OpenAIChatClient, "create_completion", new=AsyncMock(return_value={"choices": []})):
            with pytest.raises(ChatCompletionError):
                await client.complete([], "system")


# ---------------------------------------------------------------------------
# ConversationController
# ---------------------------------------------------------------------------


class TestConversationController:
    def test_greeting_mentions_mood(self):
        assert "나쁨" in greeting_for(Mood.BAD)

    def test_build_messages_keeps_last_five_plus_new(self):
        controller = ConversationController(FakeChatClient())

        messages = controller.build_messages("new text", _history(8))

        assert len(messages) == 6
        assert [m["content"] for m in messages[:5]] == [f"message {i}" for i in range(3, 8)]
        assert messages[-1] == {"role": "user", "content": "new text"}

    def test_system_prompt_carries_turn_mood_and_genres(self):
        controller = ConversationController(FakeChatClient(), ai_name="하모니")

        prompt = controller.build_system_prompt(3, Mood.GOOD, ["jazz", "piano"])

        assert "당신은 하모니입니다" in prompt
        assert "대화 횟수: 3번째" in prompt
        assert "사용자 감정 상태: 좋음" in prompt
        assert "재즈, 피아노" in prompt

    def test_system_prompt_without_genres(self):
        prompt = ConversationController(FakeChatClient()).build_system_prompt(1, None, [])
        assert "사용자 선호 장르: 없음" in prompt
        assert "사용자 감정 상태: 선택 안함" in prompt

    @pytest.mark.asyncio
    async def test_reply_returns_model_text(self):
        client = FakeChatClient(replies=["오늘 정말 고생 많으셨어요. 🌙"])
        controller = ConversationController(client)

        reply = await controller.reply("야근했어요", _history(1), Mood.BAD, [], 1)

        assert reply == "오늘 정말 고생 많으셨어요. 🌙"
        assert client.calls[0]["messages"][-1]["content"] == "야근했어요"

    @pytest.mark.asyncio
    async def test_reply_apologizes_on_endpoint_failure(self):
        client = FakeChatClient(error=ChatCompletionError("rate limited", status_code=429))
        controller = ConversationController(client)

        reply = await controller.reply("안녕", [], Mood.NORMAL, [], 1)

        assert reply == APOLOGY_MESSAGE
