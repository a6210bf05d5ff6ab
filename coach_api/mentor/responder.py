import json
import logging
import time
from typing import Dict, List, Optional

from coach_api.metrics import MENTOR_RESPONSES_TOTAL, MENTOR_UPSTREAM_SECONDS
from coach_api.providers.base import ChatClient
from coach_api.schemas import AnalysisResult, ChatMessage
from coach_api.store import CHAT_CONTEXT_LIMIT, ConversationStore, SessionStore

from .prompts import build_system_prompt
from .templates import REASON_NO_CREDENTIALS, REASON_PROVIDER_ERROR, compose_fallback


MODE_NO_CREDENTIALS = "NO_CREDENTIALS"
MODE_CREDENTIALS_PRESENT = "CREDENTIALS_PRESENT"

EMPTY_REPLY = "I apologize, but I cannot provide a response at this time."

logger = logging.getLogger("speech_coach.api.mentor")


class MentorResponder:
    """Answers mentor chat messages for a session.

    With a chat client configured, the session's recent history and latest
    analysis are sent upstream and the exchange is recorded. Without one, or
    when the upstream call fails, a canned reply is returned and the history is
    left untouched.
    """

    def __init__(
        self,
        sessions: SessionStore,
        conversations: ConversationStore,
        chat_client: Optional[ChatClient] = None,
        context_limit: int = CHAT_CONTEXT_LIMIT,
    ):
        self.sessions = sessions
        self.conversations = conversations
        self.chat_client = chat_client
        self.context_limit = context_limit

    @property
    def mode(self) -> str:
        return MODE_CREDENTIALS_PRESENT if self.chat_client is not None else MODE_NO_CREDENTIALS

    def build_messages(
        self,
        session_id: Optional[str],
        message: str,
        latest: Optional[AnalysisResult],
    ) -> List[Dict[str, str]]:
        history = self.conversations.recent(session_id, self.context_limit)
        messages = [{"role": "system", "content": build_system_prompt(latest)}]
        messages.extend(m.model_dump() for m in history)
        messages.append({"role": "user", "content": message})
        return messages

    async def respond(self, message: str, session_id: Optional[str], request_id: Optional[str] = None) -> str:
        self.conversations.get_or_init(session_id)
        latest = self.sessions.latest_analysis(session_id)

        if self.chat_client is None:
            MENTOR_RESPONSES_TOTAL.labels(source="fallback_no_credentials").inc()
            return compose_fallback(message, latest, REASON_NO_CREDENTIALS)

        client = self.chat_client
        messages = self.build_messages(session_id, message, latest)
        logger.info(json.dumps({
            "event": "mentor_chat_request",
            "requestId": request_id,
            "sessionId": session_id,
            "provider": client.provider_name,
            "model": client.model,
            "historyLength": len(self.conversations.get_or_init(session_id)),
            "messageCount": len(messages),
        }))

        t0 = time.perf_counter()
        try:
            reply = await client.complete(messages, request_id=request_id)
        except Exception as e:
            logger.error(json.dumps({
                "event": "mentor_chat_provider_error",
                "requestId": request_id,
                "sessionId": session_id,
                "provider": client.provider_name,
                "errorType": type(e).__name__,
                "error": str(e)[:500],
            }))
            MENTOR_RESPONSES_TOTAL.labels(source="fallback_error").inc()
            return compose_fallback(message, latest, REASON_PROVIDER_ERROR)
        finally:
            MENTOR_UPSTREAM_SECONDS.labels(provider=client.provider_name, model=str(client.model)).observe(
                time.perf_counter() - t0
            )

        reply = reply or EMPTY_REPLY
        self.conversations.append(session_id, [
            ChatMessage(role="user", content=message),
            ChatMessage(role="assistant", content=reply),
        ])
        MENTOR_RESPONSES_TOTAL.labels(source="ai").inc()
        return reply
