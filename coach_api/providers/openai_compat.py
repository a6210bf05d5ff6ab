import os
from typing import Dict, List, Optional

import httpx

from .base import ChatClient, ChatProviderError


# Fixed sampling parameters for mentor replies
TEMPERATURE = 0.8
MAX_TOKENS = 600
TOP_P = 0.9


class OpenAICompatChatClient(ChatClient):
    """Chat client for OpenAI-compatible `/chat/completions` APIs (OpenAI, DeepSeek)."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        provider_name: str = "openai",
        timeout: Optional[float] = None,
    ):
        super().__init__(model=model)
        if not api_key:
            raise RuntimeError(f"API key is required for {provider_name} provider")
        self.provider_name = provider_name
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        if timeout is None:
            try:
                timeout = float(os.getenv("AI_HTTP_TIMEOUT_SECONDS") or 60)
            except Exception:
                timeout = 60.0
        self._timeout = timeout

    @property
    def url(self) -> str:
        return f"{self._base_url}/chat/completions"

    async def complete(self, messages: List[Dict[str, str]], request_id: Optional[str] = None) -> str:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "User-Agent": "speech-coach-api/0.1.0",
        }
        if request_id:
            headers["X-Request-Id"] = request_id
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
            "top_p": TOP_P,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self.url, headers=headers, json=payload)
                if resp.status_code >= 400:
                    raise ChatProviderError(f"{self.provider_name} error {resp.status_code}: {resp.text[:500]}")
                data = resp.json()
        except ChatProviderError:
            raise
        except Exception as e:
            raise ChatProviderError(f"{self.provider_name} request failed: {type(e).__name__}: {e}") from e

        try:
            choices = (data or {}).get("choices") or []
            if not choices:
                return ""
            msg = choices[0].get("message") or {}
            return (msg.get("content") or "").strip()
        except Exception as e:
            raise ChatProviderError(f"{self.provider_name} returned a malformed response") from e
