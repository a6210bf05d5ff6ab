from typing import Dict, List, Optional

from .base import ChatClient


class MockChatClient(ChatClient):
    provider_name: str = "mock"

    def __init__(self, model: Optional[str] = None):
        super().__init__(model=model or "mock-mentor-1")
        self.calls: List[List[Dict[str, str]]] = []

    async def complete(self, messages: List[Dict[str, str]], request_id: Optional[str] = None) -> str:
        # Deterministic reply that exposes how much context was sent
        self.calls.append(list(messages))
        last_user = next((m["content"] for m in reversed(messages) if m.get("role") == "user"), "")
        return f"[mock mentor] context={len(messages)} reply to: {last_user}"
