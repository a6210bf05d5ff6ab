from __future__ import annotations

import abc
from typing import Dict, List, Optional


class ChatProviderError(RuntimeError):
    """Raised when the upstream chat completion call fails for any reason."""


class ChatClient(abc.ABC):
    """Abstract chat completion client.

    `messages` is an OpenAI-style list of {"role", "content"} dicts. Returns the
    assistant text of the first choice, which may be empty.
    """

    provider_name: str = "unknown"

    def __init__(self, model: Optional[str] = None):
        self.model = model

    @abc.abstractmethod
    async def complete(self, messages: List[Dict[str, str]], request_id: Optional[str] = None) -> str:
        ...
