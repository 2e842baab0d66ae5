import logging
import threading
import time
from typing import Callable, Dict, Optional

from waste_detection.app.errors import AnalysisError


logger = logging.getLogger(__name__)


class AnalysisInProgress(AnalysisError):
    """A session tried to start an analysis while one is still running."""


class AnalysisSession:
    """Processing flag and progress for a single client session."""

    def __init__(self, session_id: str, clock: Callable[[], float] = time.monotonic) -> None:
        self.session_id = session_id
        self.progress = 0
        self._clock = clock
        self.last_used = clock()
        self._processing = threading.Lock()

    @property
    def processing(self) -> bool:
        return self._processing.locked()

    def touch(self) -> None:
        self.last_used = self._clock()

    def begin(self) -> None:
        if not self._processing.acquire(blocking=False):
            raise AnalysisInProgress(f"Session '{self.session_id}' is already analyzing an image")
        self.progress = 0
        self.touch()
        logger.debug("Session %s started processing", self.session_id)

    def finish(self) -> None:
        if self._processing.locked():
            self._processing.release()
        self.touch()
        logger.debug("Session %s finished processing at %d%%", self.session_id, self.progress)

    def update_progress(self, value: int) -> None:
        self.progress = min(max(int(value), 0), 100)


class SessionRegistry:
    """Look up or create sessions by id.

    Idle sessions are dropped once unused for ``idle_ttl`` seconds, and the
    oldest idle ones are evicted when more than ``max_sessions`` are held.
    A session that is processing is never dropped.
    """

    def __init__(
        self,
        idle_ttl: float = 600.0,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.idle_ttl = idle_ttl
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: Dict[str, AnalysisSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, session_id: str) -> AnalysisSession:
        with self._lock:
            self._prune()
            session = self._sessions.get(session_id)
            if session is None:
                session = AnalysisSession(session_id, clock=self._clock)
                self._sessions[session_id] = session
                self._evict_overflow()
            session.touch()
            return session

    def peek(self, session_id: str) -> AnalysisSession:
        """Return the tracked session, or an idle untracked one."""

        with self._lock:
            self._prune()
            session: Optional[AnalysisSession] = self._sessions.get(session_id)
        return session if session is not None else AnalysisSession(session_id, clock=self._clock)

    def reset(self) -> None:
        with self._lock:
            self._sessions.clear()

    def _prune(self) -> None:
        cutoff = self._clock() - self.idle_ttl
        expired = [
            key for key, session in self._sessions.items() if not session.processing and session.last_used < cutoff
        ]
        for key in expired:
            del self._sessions[key]
        if expired:
            logger.debug("Dropped %d idle sessions", len(expired))

    def _evict_overflow(self) -> None:
        overflow = len(self._sessions) - self.max_sessions
        if overflow <= 0:
            return
        idle = sorted(
            (session for session in self._sessions.values() if not session.processing),
            key=lambda session: session.last_used,
        )
        for session in idle[:overflow]:
            del self._sessions[session.session_id]
