"""
Serviço de resumo da conversa para o diário e para o prompt musical.
"""

from typing import List, Optional
import logging

from .chat_client import OpenAIChatClient, ChatCompletionError
from .conversation import mood_text
from ..models.config import Mood
from ..models.diary import ChatMessage, ChatRole, SummaryData

logger = logging.getLogger(__name__)


# Resumo usado quando não há nenhuma fala do usuário
EMPTY_SUMMARY = SummaryData(
    summary="오늘도 감정을 나누며 이야기를 해봤어요.",
    keywords=["#감정나눔"],
    recommended_emotions=["평온", "만족", "편안"],
    action_items=["오늘의 감정을 일기장에 기록하기", "잠들기 전 10분간 명상하기"],
    music_prompt="A peaceful and calming meditation music with soft ambient sounds",
    music_style="Ambient Meditation",
    music_title="Peaceful Mind Journey",
)

# Resumo usado quando o endpoint falha
ERROR_SUMMARY = SummaryData(
    summary="대화 요약 생성 중 문제가 발생했어요.",
    keywords=["#감정나눔"],
    recommended_emotions=["평온", "만족"],
    action_items=["오늘의 대화 내용 되새기기", "마음의 여유 갖기"],
    music_prompt="A peaceful ambient music for relaxation",
    music_style="Ambient",
    music_title="Calm Moments",
)

DEFAULT_SUMMARY_TEXT = "오늘의 감정과 상황을 나누었어요."
DEFAULT_MUSIC_PROMPT = "A calming and peaceful ambient music"
DEFAULT_MUSIC_STYLE = "Ambient"
DEFAULT_MUSIC_TITLE = "Emotional Journey"

MAX_KEYWORDS = 5
MAX_EMOTIONS = 5
MAX_ACTION_ITEMS = 2


def _split(value: str, separator: str) -> List[str]:
    return [part.strip() for part in value.split(separator) if part.strip()]


def parse_summary(text: str) -> SummaryData:
    """
    Converte a resposta em texto (linhas com prefixo) em SummaryData.

    Campos ausentes ficam com o valor padrão.
    """
    fields = {
        "요약:": "",
        "감정키워드:": "",
        "추천감정:": "",
        "액션아이템:": "",
        "음악프롬프트:": "",
        "음악스타일:": "",
        "음악제목:": "",
    }

    for line in text.splitlines():
        line = line.strip()
        for prefix in fields:
            if line.startswith(prefix):
                fields[prefix] = line[len(prefix):].strip()
                break

    return SummaryData(
        summary=fields["요약:"] or DEFAULT_SUMMARY_TEXT,
        keywords=_split(fields["감정키워드:"], ",")[:MAX_KEYWORDS],
        recommended_emotions=_split(fields["추천감정:"], ",")[:MAX_EMOTIONS],
        action_items=_split(fields["액션아이템:"], "|")[:MAX_ACTION_ITEMS],
        music_prompt=fields["음악프롬프트:"] or DEFAULT_MUSIC_PROMPT,
        music_style=fields["음악스타일:"] or DEFAULT_MUSIC_STYLE,
        music_title=fields["음악제목:"] or DEFAULT_MUSIC_TITLE,
    )


class Summarizer:
    """
    Resume a conversa em um registro de diário.

    Uma única chamada ao chat completion, sem retry.
    """

    def __init__(self, chat_client: OpenAIChatClient, max_tokens: Optional[int] = None):
        self.chat_client = chat_client
        self.max_tokens = max_tokens

    def _build_prompt(self, user_text: str, mood: Optional[Mood], genres: List[str]) -> str:
        """Constrói o prompt de extração."""
        return f"""다음 대화 내용을 분석해서 감정 일기와 음악 생성을 위한 정보를 추출해주세요:

대화 내용:
{user_text}

현재 감정 상태: {mood_text(mood)}
선호 장르: {', '.join(genres)}

분석 요청:
1. 대화 내용을 바탕으로 오늘 있었던 일을 2-4줄로 요약
2. 대화에서 느껴진 감정 키워드 5개 추출
3. AI가 분석한 세부 감정 5개 추천
4. 실행 가능한 액션 아이템 2개 제안
5. Suno AI 음악 생성을 위한 영어 프롬프트 생성 (감정과 상황을 반영한 구체적인 설명)
6. 음악 스타일 추천 (사용자 선호 장르 고려)
7. 음악 제목 추천 (영어)

응답 형식:
요약: [요약 내용]
감정키워드: #키워드1, #키워드2, #키워드3, #키워드4, #키워드5
추천감정: 감정1, 감정2, 감정3, 감정4, 감정5
액션아이템: 아이템1 | 아이템2
음악프롬프트: [영어로 작성된 구체적인 음악 설명]
음악스타일: [영어 스타일명]
음악제목: [영어 제목]"""

    async def summarize(
        self,
        messages: List[ChatMessage],
        mood: Optional[Mood],
        genres: List[str]
    ) -> SummaryData:
        user_text = "\n".join(m.content for m in messages if m.role == ChatRole.USER)

        if not user_text.strip():
            logger.info("No user messages to summarize, using default summary")
            return EMPTY_SUMMARY.model_copy(deep=True)

        prompt = self._build_prompt(user_text, mood, genres)

        try:
            result = await self.chat_client.complete([], prompt, max_tokens=self.max_tokens)
        except ChatCompletionError as e:
            logger.error(f"Summary generation failed: {e}")
            return ERROR_SUMMARY.model_copy(deep=True)

        summary = parse_summary(result)
        logger.info(f"Summary generated: {len(summary.keywords)} keywords, title '{summary.music_title}'")
        return summary
