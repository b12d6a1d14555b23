"""
Cliente de chat completion (OpenAI compatível).
"""

import httpx
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class ChatCompletionError(Exception):
    """Falha ao chamar o endpoint de chat completion."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class OpenAIChatClient:
    """
    Chama o endpoint de chat completion com autenticação Bearer.

    Sem API key configurada, devolve uma mensagem fixa em vez de falhar.
    """

    BASE_URL = "https://api.openai.com/v1"
    NO_API_KEY_MESSAGE = "안녕하세요! AI 기능을 사용하려면 OpenAI API 키가 필요해요. 💜"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        base_url: Optional[str] = None,
        max_tokens: int = 300,
        temperature: float = 0.7,
        timeout: float = 60.0
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def create_completion(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> dict:
        """
        Envia a requisição e devolve o JSON bruto do vendor.

        Raises:
            ChatCompletionError: status não-2xx ou falha de transporte
        """
        payload_messages = []
        if system_prompt:
            payload_messages.append({"role": "system", "content": system_prompt})
        payload_messages.extend(messages)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json"
                    },
                    json={
                        "model": self.model,
                        "messages": payload_messages,
                        "max_tokens": max_tokens or self.max_tokens,
                        "temperature": self.temperature if temperature is None else temperature
                    }
                )
        except httpx.HTTPError as e:
            raise ChatCompletionError(f"Chat completion request failed: {e}") from e

        if not response.is_success:
            raise ChatCompletionError(
                f"Chat completion returned {response.status_code}",
                status_code=response.status_code
            )

        return response.json()

    async def complete(
        self,
        messages: List[Dict[str, str]],
        system_prompt: str,
        max_tokens: Optional[int] = None
    ) -> str:
        """Devolve apenas o texto da resposta do assistente."""
        if not self.configured:
            logger.warning("OpenAI API key not configured, returning fixed reply")
            return self.NO_API_KEY_MESSAGE

        data = await self.create_completion(messages, system_prompt, max_tokens=max_tokens)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ChatCompletionError(f"Unexpected chat completion payload: {e}") from e

        usage = data.get("usage") or {}
        if usage:
            logger.debug(f"Chat completion used {usage.get('total_tokens', 0)} tokens")

        return content or ""

    async def test_connection(self) -> dict:
        """Testa conexão com a API."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {self.api_key}"}
                )
                response.raise_for_status()
                return {"connected": True}
        except Exception as e:
            return {
                "connected": False,
                "error": str(e)
            }
