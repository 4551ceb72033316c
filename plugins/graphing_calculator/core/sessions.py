"""In-memory registry of graph viewports keyed by session id."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from common.logging import get_logger

from .graph import GraphViewport

_DEFAULT_TTL = timedelta(minutes=30)
_DEFAULT_MAX_SESSIONS = 256

logger = get_logger(__name__)


@dataclass(slots=True)
class GraphSession:
    viewport: GraphViewport
    session_id: str = ""
    last_accessed: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def touch(self) -> None:
        self.last_accessed = datetime.now(timezone.utc)


class GraphSessionStore:
    """Thread-safe viewport registry with TTL purging."""

    def __init__(self, ttl: timedelta = _DEFAULT_TTL, max_sessions: int = _DEFAULT_MAX_SESSIONS) -> None:
        self.ttl = ttl
        self.max_sessions = max(int(max_sessions), 1)
        self._items: dict[str, GraphSession] = {}
        self._lock = threading.Lock()

    def _purge_locked(self) -> None:
        now = datetime.now(timezone.utc)
        expired = [
            session_id
            for session_id, session in self._items.items()
            if now - session.last_accessed > self.ttl
        ]
        for session_id in expired:
            self._items.pop(session_id, None)
        while len(self._items) >= self.max_sessions:
            oldest = min(self._items.values(), key=lambda item: item.last_accessed)
            self._items.pop(oldest.session_id, None)

    def create(self, viewport: GraphViewport) -> GraphSession:
        session_id = uuid.uuid4().hex
        with self._lock:
            self._purge_locked()
            session = GraphSession(viewport=viewport, session_id=session_id)
            self._items[session_id] = session
        logger.info("opened graph session %s", session_id)
        return session

    def get(self, session_id: str) -> GraphSession:
        with self._lock:
            try:
                session = self._items[session_id]
            except KeyError as exc:
                raise KeyError("Graph session expired or not found") from exc
            if datetime.now(timezone.utc) - session.last_accessed > self.ttl:
                self._items.pop(session_id, None)
                raise KeyError("Graph session expired or not found")
            session.touch()
            return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._items.pop(session_id, None) is None:
                raise KeyError("Graph session expired or not found")
        logger.info("closed graph session %s", session_id)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


__all__ = ["GraphSession", "GraphSessionStore"]
