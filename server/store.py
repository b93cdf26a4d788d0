"""
In-memory deck session store.

Decks live only as long as the process; nothing is persisted. Idle
sessions are evicted by age and by count whenever a new one is created.
"""

import os
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from vedasmart.models import DocumentPayload, GenerationState


class DeckSession:
    """One upload plus its generation state."""

    def __init__(self, chapter: DocumentPayload, style: Optional[DocumentPayload] = None):
        self.id = str(uuid.uuid4())
        self.chapter = chapter
        self.style = style
        self.state = GenerationState()
        self.created_at = datetime.utcnow()
        self.updated_at = self.created_at

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()

    def release_uploads(self) -> None:
        """Drop uploaded bytes once generation is over; the file name is kept."""
        self.chapter = self.chapter.model_copy(update={"data": b""})
        self.style = None


class SessionStore:
    """
    Session id -> DeckSession.

    Sessions still generating are never evicted.
    """

    def __init__(
        self,
        max_sessions: Optional[int] = None,
        max_age_seconds: Optional[float] = None,
        on_evict: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize store.

        Args:
            max_sessions: Upper bound on kept sessions (default: VEDASMART_MAX_SESSIONS or 50)
            max_age_seconds: Idle time before a session expires (default: VEDASMART_SESSION_TTL or 3600)
            on_evict: Called with the id of every evicted session
        """
        self.sessions: Dict[str, DeckSession] = {}
        self.max_sessions = max_sessions or int(os.getenv("VEDASMART_MAX_SESSIONS", "50"))
        self.max_age = timedelta(
            seconds=max_age_seconds or float(os.getenv("VEDASMART_SESSION_TTL", "3600"))
        )
        self.on_evict = on_evict

    def create(self, chapter: DocumentPayload, style: Optional[DocumentPayload] = None) -> DeckSession:
        self.evict()
        session = DeckSession(chapter, style)
        self.sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[DeckSession]:
        return self.sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None

    def evict(self, now: Optional[datetime] = None) -> List[str]:
        """
        Remove expired sessions, then the least recently updated ones until
        there is room for one more.

        Returns:
            Ids of the evicted sessions
        """
        now = now or datetime.utcnow()
        idle = sorted(
            (s for s in self.sessions.values() if not s.state.is_busy),
            key=lambda s: s.updated_at,
        )

        evicted = [s.id for s in idle if now - s.updated_at > self.max_age]
        remaining = [s for s in idle if s.id not in evicted]
        while remaining and len(self.sessions) - len(evicted) >= self.max_sessions:
            evicted.append(remaining.pop(0).id)

        for session_id in evicted:
            del self.sessions[session_id]
            if self.on_evict:
                self.on_evict(session_id)

        if evicted:
            print(f"[Store] Evicted {len(evicted)} session(s), {len(self.sessions)} kept")
        return evicted
