"""In-memory report cache for the web API, no database required."""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from canister_graph.analysis.graph_models import AnalysisReport
from canister_graph.models import AnalyzerConfig

DEFAULT_TTL = 15 * 60  # seconds


@dataclass
class ReportSession:
    report: AnalysisReport
    payload: dict[str, Any]  # serialized form returned to clients
    source: str = ""  # project path, or "" for inline unit lists
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class ReportCache:
    """Reports keyed by session id and by project path, expiring after ``ttl``.

    Every read and write goes through one lock, so request handlers running
    in worker threads never observe a half-updated cache.
    """

    def __init__(self, ttl: float = DEFAULT_TTL):
        self.ttl = ttl
        self._sessions: dict[str, tuple[float, ReportSession]] = {}
        self._by_source: dict[str, str] = {}
        self._lock = threading.Lock()

    def store(self, session: ReportSession) -> None:
        """Insert ``session``, pruning expired entries first."""
        now = time.monotonic()
        with self._lock:
            self._prune_locked(now)
            self._sessions[session.id] = (now + self.ttl, session)
            if session.source:
                self._by_source[session.source] = session.id

    def get(self, session_id: str) -> ReportSession | None:
        with self._lock:
            return self._get_locked(session_id)

    def find_by_source(self, source: str) -> ReportSession | None:
        with self._lock:
            session_id = self._by_source.get(source)
            if session_id is None:
                return None
            session = self._get_locked(session_id)
            if session is None:
                self._by_source.pop(source, None)
            return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            entry = self._sessions.pop(session_id, None)
            if entry is None:
                return False
            source = entry[1].source
            if source and self._by_source.get(source) == session_id:
                del self._by_source[source]
            return True

    def cleanup(self) -> int:
        """Drop expired entries; returns how many were removed."""
        with self._lock:
            return self._prune_locked(time.monotonic())

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
            self._by_source.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _get_locked(self, session_id: str) -> ReportSession | None:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        expires, session = entry
        if time.monotonic() > expires:
            self._drop_locked(session_id)
            return None
        return session

    def _prune_locked(self, now: float) -> int:
        expired = [sid for sid, (expires, _) in self._sessions.items() if now > expires]
        for sid in expired:
            self._drop_locked(sid)
        return len(expired)

    def _drop_locked(self, session_id: str) -> None:
        _, session = self._sessions.pop(session_id)
        if session.source and self._by_source.get(session.source) == session_id:
            del self._by_source[session.source]


# Module-level singleton, shared by all routes
cache = ReportCache(ttl=AnalyzerConfig().cache_ttl)
