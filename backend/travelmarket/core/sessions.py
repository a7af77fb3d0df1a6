"""
Server-side session store.

Sessions live in process memory and are lost on restart. A background task
prunes expired entries every ``check_period_seconds``; lookups also evict an
expired entry on access, so the sweep only bounds memory.
"""

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class SessionRecord:
    user_id: int
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemorySessionStore:
    """Maps opaque session ids to authenticated user ids"""

    def __init__(
        self,
        ttl_seconds: int,
        check_period_seconds: int,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.check_period_seconds = check_period_seconds
        self._clock = clock
        self._sessions: Dict[str, SessionRecord] = {}
        self._sweeper: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, user_id: int) -> str:
        session_id = secrets.token_urlsafe(32)
        now = self._clock()
        self._sessions[session_id] = SessionRecord(
            user_id=user_id,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        logger.debug(f"Session created for user {user_id}")
        return session_id

    def get(self, session_id: Optional[str]) -> Optional[SessionRecord]:
        if not session_id:
            return None
        record = self._sessions.get(session_id)
        if record is None:
            return None
        if record.is_expired(self._clock()):
            del self._sessions[session_id]
            return None
        return record

    def destroy(self, session_id: Optional[str]) -> bool:
        if not session_id:
            return False
        return self._sessions.pop(session_id, None) is not None

    def prune_expired(self) -> int:
        now = self._clock()
        expired = [sid for sid, record in self._sessions.items() if record.is_expired(now)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info(f"Pruned {len(expired)} expired sessions")
        return len(expired)

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.check_period_seconds)
            self.prune_expired()

    async def start(self) -> None:
        """Start the periodic expiry sweep on the running loop"""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())
            logger.info(f"Session sweep started (every {self.check_period_seconds}s)")

    async def stop(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        logger.info("Session sweep stopped")

    @property
    def running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()
