# backend/docchunker/core/session.py
"""
Per-session viewing state: which document is open, which of its chunks are
selected, and the chat history. History is for display only.
"""
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set

ROLES = ("user", "assistant", "error")


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    document_id: Optional[str] = None


class ChatSession:
    def __init__(self, session_id: str):
        self.session_id = session_id
        self.document_id: Optional[str] = None
        self._selection: Set[int] = set()
        self._messages: List[ChatMessage] = []
        self._lock = threading.Lock()

    # --- selection ---
    def view_document(self, document_id: Optional[str]) -> None:
        """Switch the viewed document; the selection does not carry over."""
        with self._lock:
            if document_id != self.document_id:
                self._selection.clear()
            self.document_id = document_id

    def replace_selection(self, document_id: Optional[str], chunk_ids: Iterable[int]) -> None:
        """View `document_id` with exactly `chunk_ids` selected, as one step."""
        ids = set(chunk_ids)
        with self._lock:
            self.document_id = document_id
            self._selection = ids

    def select(self, chunk_id: int) -> None:
        with self._lock:
            self._selection.add(chunk_id)

    def deselect(self, chunk_id: int) -> None:
        with self._lock:
            self._selection.discard(chunk_id)

    def toggle(self, chunk_id: int) -> bool:
        with self._lock:
            if chunk_id in self._selection:
                self._selection.discard(chunk_id)
                return False
            self._selection.add(chunk_id)
            return True

    def select_all(self, chunk_ids: Iterable[int]) -> None:
        ids = set(chunk_ids)
        with self._lock:
            self._selection.update(ids)

    def clear_selection(self) -> None:
        with self._lock:
            self._selection.clear()

    def selected_ids(self) -> List[int]:
        with self._lock:
            return sorted(self._selection)

    # --- chat log ---
    def append(self, role: str, content: str, document_id: Optional[str] = None) -> ChatMessage:
        if role not in ROLES:
            raise ValueError(f"role must be one of {ROLES}, got {role!r}")
        msg = ChatMessage(role=role, content=content, document_id=document_id)
        self._messages.append(msg)
        return msg

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)


class SessionRegistry:
    def __init__(self):
        self._sessions: Dict[str, ChatSession] = {}
        self._lock = threading.Lock()

    def find(self, session_id: str) -> Optional[ChatSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def get(self, session_id: str) -> ChatSession:
        """Return the session, creating it on first use."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = ChatSession(session_id)
                self._sessions[session_id] = session
            return session

    def forget_document(self, document_id: str) -> None:
        """Drop a deleted document from every session that was viewing it."""
        with self._lock:
            sessions = list(self._sessions.values())
        for session in sessions:
            if session.document_id == document_id:
                session.view_document(None)
