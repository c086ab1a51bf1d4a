"""In-memory registry of search sessions.

Each client session gets its own :class:`SearchOrchestrator`, so search
state never leaks between users.  Sessions expire after a period of
inactivity, and the least recently used session is evicted once the
registry is full.  Nothing is persisted; a restart drops all sessions.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from src.services.orchestrator import (
    DEFAULT_COUNTRY,
    DEFAULT_NEARBY_RADIUS_M,
    SearchOrchestrator,
)

if TYPE_CHECKING:
    from src.services.places_client import PlacesProvider

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class SearchSession:
    session_id: str
    orchestrator: SearchOrchestrator
    created_at: float
    last_active: float


class SessionRegistry:
    """Create, look up and expire :class:`SearchSession` objects.

    Parameters
    ----------
    provider:
        Shared places provider handed to every orchestrator.
    max_sessions:
        Upper bound on live sessions; the least recently used is evicted
        when a new session would exceed it.
    idle_ttl_seconds:
        Sessions untouched for longer than this are dropped.
    clock:
        Monotonic time source, injectable for tests.
    """

    __slots__ = (
        "_clock",
        "_country",
        "_idle_ttl",
        "_max_sessions",
        "_provider",
        "_radius_meters",
        "_sessions",
    )

    def __init__(
        self,
        provider: PlacesProvider,
        *,
        max_sessions: int = 1_000,
        idle_ttl_seconds: float = 1_800,
        country: str = DEFAULT_COUNTRY,
        radius_meters: int = DEFAULT_NEARBY_RADIUS_M,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._max_sessions = max_sessions
        self._idle_ttl = idle_ttl_seconds
        self._country = country
        self._radius_meters = radius_meters
        self._clock = clock
        self._sessions: OrderedDict[str, SearchSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> SearchSession:
        """Start a new session with an empty search state."""
        self.purge_expired()
        while len(self._sessions) >= self._max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("sessions.evicted", session_id=evicted_id)

        now = self._clock()
        session = SearchSession(
            session_id=uuid4().hex,
            orchestrator=SearchOrchestrator(
                self._provider,
                country=self._country,
                radius_meters=self._radius_meters,
            ),
            created_at=now,
            last_active=now,
        )
        self._sessions[session.session_id] = session
        logger.info("sessions.created", session_id=session.session_id, live=len(self._sessions))
        return session

    def get(self, session_id: str) -> SearchSession | None:
        """Return the live session for *session_id*, refreshing its idle timer."""
        session = self._sessions.get(session_id)
        if session is None:
            return None

        now = self._clock()
        if now - session.last_active > self._idle_ttl:
            del self._sessions[session_id]
            logger.info("sessions.expired", session_id=session_id)
            return None

        session.last_active = now
        self._sessions.move_to_end(session_id)
        return session

    def remove(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def purge_expired(self) -> int:
        """Drop every idle session; returns how many were removed."""
        now = self._clock()
        expired = [
            sid
            for sid, session in self._sessions.items()
            if now - session.last_active > self._idle_ttl
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("sessions.purged", count=len(expired))
        return len(expired)
