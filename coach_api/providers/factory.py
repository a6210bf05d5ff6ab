from typing import Optional

from coach_api.config import Settings

from .base import ChatClient
from .mock import MockChatClient


def get_chat_client(settings: Settings) -> Optional[ChatClient]:
    """Return the mentor chat client for the configured provider.

    None means no credentials were configured and the mentor runs on canned
    fallback responses only.
    """
    prov = (settings.chat_provider or "").lower()
    if not prov:
        return None

    if prov in ("mock", "test"):
        return MockChatClient(model=settings.model)

    if prov in ("deepseek", "openai"):
        from .openai_compat import OpenAICompatChatClient

        return OpenAICompatChatClient(
            api_key=settings.api_key or "",
            base_url=settings.base_url or "",
            model=settings.model or "",
            provider_name=prov,
            timeout=settings.http_timeout_seconds,
        )

    return None
