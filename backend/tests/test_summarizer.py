"""
Tests for summary parsing and the Summarizer service.
"""

from datetime import datetime

import pytest

from music_diary.models import ChatMessage, ChatRole, Mood
from music_diary.services.chat_client import ChatCompletionError
from music_diary.services.summarizer import (
    DEFAULT_MUSIC_PROMPT,
    DEFAULT_MUSIC_STYLE,
    DEFAULT_MUSIC_TITLE,
    DEFAULT_SUMMARY_TEXT,
    EMPTY_SUMMARY,
    ERROR_SUMMARY,
    Summarizer,
    parse_summary,
)

from conftest import SUMMARY_TEXT, FakeChatClient


def _message(role: ChatRole, content: str) -> ChatMessage:
    return ChatMessage(role=role, content=content, timestamp=datetime(2026, 10, 19, 20, 0))


# ---------------------------------------------------------------------------
# parse_summary
# ---------------------------------------------------------------------------


class TestParseSummary:
    def test_parses_every_field(self):
        summary = parse_summary(SUMMARY_TEXT)

        assert summary.summary == "회사에서 발표를 잘 마쳐서 뿌듯한 하루였어요."
        assert summary.keywords == ["#뿌듯함", "#안도", "#성취", "#피곤", "#기쁨"]
        assert summary.recommended_emotions == ["뿌듯함", "안도감", "자신감", "설렘", "감사"]
        assert summary.action_items == ["스스로에게 작은 선물하기", "일찍 잠자리에 들기"]
        assert summary.music_style == "Acoustic Pop"
        assert summary.music_title == "Small Victory"
        assert summary.music_prompt.startswith("An uplifting acoustic track")

    def test_missing_fields_fall_back_to_defaults(self):
        summary = parse_summary("감정키워드: #평온")

        assert summary.summary == DEFAULT_SUMMARY_TEXT
        assert summary.keywords == ["#평온"]
        assert summary.recommended_emotions == []
        assert summary.action_items == []
        assert summary.music_prompt == DEFAULT_MUSIC_PROMPT
        assert summary.music_style == DEFAULT_MUSIC_STYLE
        assert summary.music_title == DEFAULT_MUSIC_TITLE

    def test_lists_are_truncated(self):
        text = "\n".join([
            "감정키워드: #a, #b, #c, #d, #e, #f, #g",
            "추천감정: a, b, c, d, e, f",
            "액션아이템: one | two | three",
        ])

        summary = parse_summary(text)

        assert len(summary.keywords) == 5
        assert len(summary.recommended_emotions) == 5
        assert summary.action_items == ["one", "two"]

    def test_ignores_unprefixed_lines_and_whitespace(self):
        text = "Here is the result:\n   요약:   산책을 했어요.  \n\n음악제목: Walk"
        summary = parse_summary(text)
        assert summary.summary == "산책을 했어요."
        assert summary.music_title == "Walk"


# ---------------------------------------------------------------------------
# Summarizer
# ---------------------------------------------------------------------------


class TestSummarizer:
    @pytest.mark.asyncio
    async def test_no_user_text_returns_default_without_calling_endpoint(self):
        client = FakeChatClient()
        summarizer = Summarizer(client)

        summary = await summarizer.summarize(
            [_message(ChatRole.ASSISTANT, "안녕하세요!")], Mood.NORMAL, []
        )

        assert summary == EMPTY_SUMMARY
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_only_user_messages_go_into_prompt(self):
        client = FakeChatClient(replies=[SUMMARY_TEXT])
        summarizer = Summarizer(client, max_tokens=600)

        summary = await summarizer.summarize(
            [
                _message(ChatRole.ASSISTANT, "ASSISTANT-ONLY-TEXT"),
                _message(ChatRole.USER, "발표를 끝냈어요"),
                _message(ChatRole.USER, "긴장했지만 잘했어요"),
            ],
            Mood.GOOD,
            ["acoustic"],
        )

        assert summary.music_title == "Small Victory"
        call = client.calls[0]
        assert call["messages"] == []
        assert call["max_tokens"] == 600
        assert "발표를 끝냈어요\n긴장했지만 잘했어요" in call["system_prompt"]
        assert "ASSISTANT-ONLY-TEXT" not in call["system_prompt"]
        assert "현재 감정 상태: 좋음" in call["system_prompt"]

    @pytest.mark.asyncio
    async def test_endpoint_failure_returns_error_summary(self):
        client = FakeChatClient(error=ChatCompletionError("boom", status_code=500))
        summarizer = Summarizer(client)

        summary = await summarizer.summarize(
            [_message(ChatRole.USER, "힘든 하루")], Mood.BAD, []
        )

        assert summary == ERROR_SUMMARY

    @pytest.mark.asyncio
    async def test_default_summary_is_a_copy(self):
        summarizer = Summarizer(FakeChatClient())
        summary = await summarizer.summarize([], None, [])
        summary.keywords.append("#changed")
        assert EMPTY_SUMMARY.keywords == ["#감정나눔"]
