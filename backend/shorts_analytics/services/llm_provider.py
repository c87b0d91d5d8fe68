"""
Chat provider interface for the marketing chatbot.

The default implementation talks to an OpenAI-compatible /chat/completions
endpoint. Swap it with set_chat_provider() to plug a different model in.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from shorts_analytics.settings import get_settings

NO_RESPONSE = "No response generated."


class ChatProviderError(RuntimeError):
    """Upstream failure; ``status_code`` mirrors the provider's HTTP status when known."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ChatCompletion:
    """Assistant reply plus token usage reported by the provider."""

    def __init__(self, message: str, *, usage: dict | None = None, model: str | None = None):
        self.message = message
        self.usage = usage
        self.model = model

    def to_response(self) -> dict[str, Any]:
        return {"message": self.message, "usage": self.usage}


class ChatProvider(ABC):
    @abstractmethod
    async def complete(self, messages: list[dict[str, str]]) -> ChatCompletion:
        ...


class OpenAIChatProvider(ChatProvider):
    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout)

    async def complete(self, messages: list[dict[str, str]]) -> ChatCompletion:
        if not self.api_key:
            raise ChatProviderError("OPENAI_API_KEY missing", status_code=401)
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with self._client() as client:
                resp = await client.post(f"{self.base_url}/chat/completions", json=payload, headers=headers)
        except (httpx.TransportError, httpx.TimeoutException) as exc:
            raise ChatProviderError(f"chat completion request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise ChatProviderError(f"chat completion error: {resp.status_code}", status_code=resp.status_code)
        data = resp.json()
        choices = data.get("choices") or []
        content = ((choices[0] if choices else {}).get("message") or {}).get("content")
        return ChatCompletion(content or NO_RESPONSE, usage=data.get("usage"), model=data.get("model"))


_provider: ChatProvider | None = None


def get_chat_provider() -> ChatProvider:
    global _provider
    if _provider is None:
        settings = get_settings()
        _provider = OpenAIChatProvider(
            settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
            timeout=settings.openai_timeout_sec,
        )
    return _provider


def set_chat_provider(provider: ChatProvider | None) -> None:
    global _provider
    _provider = provider
