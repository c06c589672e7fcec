"""Session registry: sessionId -> memory thread + persona, with idle expiry.

Responsibilities:
  - Allocating session ids and creating one memory thread per session
  - Binding the persona exactly once, right after creation
  - Touching last activity on every read or write
  - Evicting idle sessions from a periodic background sweep

Ending or evicting a session only drops the registry entry. The memory
thread is left in place with the provider.

There is no per-session locking: concurrent requests on one session race on
thread append order and on last activity (last write wins), and the sweep may
evict a session between a lookup and its use. Callers treat SessionNotFound
as always possible.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Callable, Dict, List, Optional

from pitchlab.common.errors import PersonaAlreadyBound, SessionNotFound
from pitchlab.config.runtime_config import SessionSettings
from pitchlab.memory.models import ThreadMessage, ThreadRole
from pitchlab.memory.repository import ConversationMemory
from pitchlab.sessions.models import CreatedSession, Session, new_session_id

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(
        self,
        memory: ConversationMemory,
        settings: Optional[SessionSettings] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.memory = memory
        self.settings = settings or SessionSettings()
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._sweeper: Optional[asyncio.Task[None]] = None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    # --- Lifecycle ---

    async def create_session(self) -> CreatedSession:
        session_id = self._allocate_id()
        thread_ref = await self.memory.create_thread()
        now = self._clock()
        self._sessions[session_id] = Session(
            session_id=session_id,
            thread_ref=thread_ref,
            created_at=now,
            last_activity_at=now,
        )
        conversation = await self.memory.list_messages(thread_ref)
        logger.info(
            "Session created: %s thread=%s conversation_length=%d",
            session_id,
            thread_ref,
            len(conversation),
        )
        return CreatedSession(session_id=session_id, thread_ref=thread_ref, conversation=conversation)

    def end_session(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFound(session_id)
        logger.info("Session ended: %s, thread %s persists", session_id, session.thread_ref)

    # --- Persona ---

    def set_persona(self, session_id: str, persona: str) -> None:
        session = self._require(session_id)
        if session.persona is not None and session.persona != persona:
            raise PersonaAlreadyBound(session_id)
        session.persona = persona
        session.touch(self._clock())
        logger.info("Persona set for session: %s", session_id)

    def get_persona(self, session_id: str) -> Optional[str]:
        session = self._sessions.get(session_id)
        return session.persona if session else None

    # --- Messages ---

    async def add_message(self, session_id: str, role: ThreadRole, content: str) -> List[ThreadMessage]:
        session = self._require(session_id)
        session.touch(self._clock())
        if role == "user":
            await self.memory.append_user_message(session.thread_ref, content)
        # assistant turns are appended by the reply generator
        return await self.memory.list_messages(session.thread_ref)

    async def get_conversation(self, session_id: str) -> List[ThreadMessage]:
        session = self._require(session_id)
        session.touch(self._clock())
        return await self.memory.list_messages(session.thread_ref)

    def get_thread_ref(self, session_id: str) -> Optional[str]:
        session = self._sessions.get(session_id)
        return session.thread_ref if session else None

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    # --- Idle sweep ---

    def sweep_idle(self, now: Optional[float] = None) -> List[str]:
        """Evict sessions idle longer than the TTL; return the evicted ids."""
        current = self._clock() if now is None else now
        ttl = self.settings.idle_ttl_seconds
        expired = [sid for sid, s in self._sessions.items() if s.idle_for(current) > ttl]
        for sid in expired:
            session = self._sessions.pop(sid)
            logger.info("Cleaning up idle session: %s, thread %s persists", sid, session.thread_ref)
        return expired

    def start(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.get_running_loop().create_task(self._sweep_loop())

    async def stop(self) -> None:
        task, self._sweeper = self._sweeper, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    @property
    def sweeping(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    async def _sweep_loop(self) -> None:
        interval = self.settings.sweep_interval_seconds
        while True:
            await asyncio.sleep(interval)
            try:
                evicted = self.sweep_idle()
            except Exception:
                logger.exception("Idle session sweep failed")
                continue
            if evicted:
                logger.info("Idle sweep evicted %d session(s)", len(evicted))

    # --- Internal helpers ---

    def _require(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def _allocate_id(self) -> str:
        session_id = new_session_id(self._clock())
        while session_id in self._sessions:
            session_id = new_session_id(self._clock())
        return session_id
