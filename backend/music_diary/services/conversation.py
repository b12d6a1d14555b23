"""
Controlador da conversa com a persona de IA.
"""

from typing import List, Optional
import logging

from .chat_client import OpenAIChatClient, ChatCompletionError
from ..models.config import Mood, MOOD_TEXT
from ..models.diary import ChatMessage
from ..models.music import genre_names

logger = logging.getLogger(__name__)


APOLOGY_MESSAGE = "죄송해요. 💜 일시적으로 문제가 생겼어요. 다시 시도해주세요."


def mood_text(mood: Optional[Mood]) -> str:
    return MOOD_TEXT[mood] if mood else "선택 안함"


def greeting_for(mood: Mood) -> str:
    """Primeira mensagem do assistente ao escolher o humor."""
    return (
        f"안녕하세요! 🎵 오늘은 {mood_text(mood)} 기분이시군요. "
        "오늘 하루 어떻게 보내셨는지 편하게 말씀해주세요. ✨"
    )


class ConversationController:
    """
    Gera as respostas da persona a cada turno.

    O número do turno entra no prompt de sistema e muda o comportamento
    pedido à IA: cumprimentar, depois acolher, depois consolar.
    """

    def __init__(
        self,
        chat_client: OpenAIChatClient,
        ai_name: str = "하모니",
        history_window: int = 5
    ):
        self.chat_client = chat_client
        self.ai_name = ai_name
        self.history_window = history_window

    def build_system_prompt(
        self,
        turn: int,
        mood: Optional[Mood],
        genres: List[str]
    ) -> str:
        user_genres = ", ".join(genre_names(genres))

        return f"""당신은 {self.ai_name}입니다. 사용자의 감정에 공감하는 따뜻한 AI 친구입니다.

현재 대화 상황:
- 대화 횟수: {turn}번째
- 사용자 감정 상태: {mood_text(mood)}
- 사용자 선호 장르: {user_genres or '없음'}

대화 규칙:
1. 첫 번째 대화: 친근하게 인사하고 오늘 하루에 대해 묻기
2. 두 번째 대화: 사용자 이야기에 공감하고 추가 질문하기
3. 세 번째 대화부터: 대화 내용을 바탕으로 감정을 파악하고 위로하기

응답 스타일:
- 친근하고 공감적인 톤 (존댓말 사용)
- 간결하고 자연스러운 응답 (1-2문장)
- 답변 시작이나 중간에 귀여운 이모지 하나씩 추가"""

    def build_messages(self, user_message: str, history: List[ChatMessage]) -> List[dict]:
        """Últimas mensagens do histórico mais a nova mensagem do usuário."""
        recent = history[-self.history_window:] if self.history_window else []
        messages = [{"role": m.role.value, "content": m.content} for m in recent]
        messages.append({"role": "user", "content": user_message})
        return messages

    async def reply(
        self,
        user_message: str,
        history: List[ChatMessage],
        mood: Optional[Mood],
        genres: List[str],
        turn: int
    ) -> str:
        """
        Gera a resposta do assistente para um turno.

        Args:
            user_message: Texto enviado pelo usuário
            history: Transcrição anterior (sem a nova mensagem)
            mood: Humor escolhido na sessão
            genres: Ids de gênero preferidos
            turn: Número do turno (1 = primeiro)

        Returns:
            Texto da resposta; mensagem de desculpas fixa se o endpoint falhar
        """
        system_prompt = self.build_system_prompt(turn, mood, genres)
        messages = self.build_messages(user_message, history)

        try:
            return await self.chat_client.complete(messages, system_prompt)
        except ChatCompletionError as e:
            logger.error(f"AI reply failed on turn {turn}: {e}")
            return APOLOGY_MESSAGE
