"""In-memory session and conversation stores.

Both stores live for the lifetime of the process and are created once in the
application lifespan. Nothing is persisted, expired, or bounded. Handlers run
on a single event loop and each mutation is a plain dict/list operation, so no
locking is done; two requests for the same session that interleave around the
upstream chat call may still lose an update.
"""

import time
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from coach_api.schemas import AnalysisResult, ChatMessage, Recording, Session


# Only this many trailing history entries are sent upstream with a chat request
CHAT_CONTEXT_LIMIT = 10


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_ms() -> int:
    return int(time.time() * 1000)


class SessionStore:
    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get_or_create(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(id=session_id, recordings=[], created_at=utc_now_iso())
            self._sessions[session_id] = session
        return session

    def append(self, session_id: str, recording: Recording) -> Session:
        session = self.get_or_create(session_id)
        session.recordings.append(recording)
        return session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def list_all(self) -> List[Session]:
        return list(self._sessions.values())

    def latest_analysis(self, session_id: Optional[str]) -> Optional[AnalysisResult]:
        session = self.get(session_id)
        if session is None or not session.recordings:
            return None
        return session.recordings[-1].analysis

    def recording_count(self) -> int:
        return sum(len(s.recordings) for s in self._sessions.values())


class ConversationStore:
    """Per-session chat history. Stored history is never trimmed."""

    def __init__(self) -> None:
        self._history: Dict[str, List[ChatMessage]] = {}

    def __len__(self) -> int:
        return len(self._history)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._history

    def get_or_init(self, session_id: Optional[str]) -> List[ChatMessage]:
        key = session_id or ""
        history = self._history.get(key)
        if history is None:
            history = []
            self._history[key] = history
        return history

    def reset(self, session_id: Optional[str]) -> List[ChatMessage]:
        history: List[ChatMessage] = []
        self._history[session_id or ""] = history
        return history

    def append(self, session_id: Optional[str], entries: Iterable[ChatMessage]) -> List[ChatMessage]:
        history = self.get_or_init(session_id)
        history.extend(entries)
        return history

    def recent(self, session_id: Optional[str], limit: int = CHAT_CONTEXT_LIMIT) -> List[ChatMessage]:
        history = self._history.get(session_id or "") or []
        if limit <= 0:
            return []
        return list(history[-limit:])
