#!/usr/bin/env python3
# src/openapi_mcp_server/protocol/session_manager.py
"""
MCP session lifecycle management.

Manages creation, lookup, eviction, and cleanup of protocol sessions. All
mutation happens on the event loop, so no locking is needed.
"""

import logging
import time
import uuid
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1000
DEFAULT_CLEANUP_INTERVAL = 100
DEFAULT_SESSION_MAX_AGE = 3600


class SessionManager:
    """Manage MCP sessions."""

    def __init__(
        self,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        cleanup_interval: int = DEFAULT_CLEANUP_INTERVAL,
        max_age: int = DEFAULT_SESSION_MAX_AGE,
    ):
        self.sessions: dict[str, dict[str, Any]] = {}
        self.max_sessions = max_sessions
        self.cleanup_interval = cleanup_interval
        self.max_age = max_age
        self._creation_count = 0

    def __len__(self) -> int:
        return len(self.sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self.sessions

    def create_session(self, client_info: dict[str, Any] | None = None, protocol_version: str = "") -> str:
        """Create a new session and return its id."""
        client_info = client_info or {}
        self._creation_count += 1

        # Periodic cleanup of expired sessions
        if self._creation_count % self.cleanup_interval == 0:
            self.cleanup_expired()

        # Evict oldest session if at capacity
        if self.sessions and len(self.sessions) >= self.max_sessions:
            oldest_sid = min(self.sessions, key=lambda sid: self.sessions[sid]["last_activity"])
            del self.sessions[oldest_sid]
            logger.debug(f"Evicted oldest session {oldest_sid[:8]}... (max_sessions reached)")

        session_id = uuid.uuid4().hex
        now = time.time()
        self.sessions[session_id] = {
            "id": session_id,
            "client_info": client_info,
            "protocol_version": protocol_version,
            "created_at": now,
            "last_activity": now,
        }
        logger.debug(f"Created session {session_id[:8]}... for {client_info.get('name', 'unknown')}")
        return session_id

    def get_or_create(
        self,
        session_id: str | None,
        client_info: dict[str, Any] | None = None,
        protocol_version: str = "",
    ) -> tuple[str, bool]:
        """Reuse a known session or create one. Returns ``(session_id, is_new)``."""
        if self._live_session(session_id) is not None:
            self.update_activity(session_id)
            return session_id, False
        return self.create_session(client_info, protocol_version), True

    def get_session(self, session_id: str | None) -> dict[str, Any] | None:
        """Get session by ID. Sessions idle past ``max_age`` are dropped."""
        return self._live_session(session_id)

    def has_session(self, session_id: str | None) -> bool:
        return self._live_session(session_id) is not None

    def update_activity(self, session_id: str) -> None:
        """Update session last activity."""
        session = self._live_session(session_id)
        if session is not None:
            session["last_activity"] = time.time()

    def _live_session(self, session_id: str | None) -> dict[str, Any] | None:
        if not session_id:
            return None
        session = self.sessions.get(session_id)
        if session is None:
            return None
        if time.time() - session["last_activity"] > self.max_age:
            del self.sessions[session_id]
            logger.debug(f"Session {session_id[:8]}... expired")
            return None
        return session

    def terminate_session(self, session_id: str | None) -> bool:
        """Drop a session. Returns False when it was not known."""
        if not session_id or session_id not in self.sessions:
            return False
        del self.sessions[session_id]
        logger.debug(f"Terminated session {session_id[:8]}...")
        return True

    def cleanup_expired(self, max_age: int | None = None) -> int:
        """Remove sessions idle for longer than ``max_age`` seconds."""
        max_age = self.max_age if max_age is None else max_age
        now = time.time()
        expired = [sid for sid, session in self.sessions.items() if now - session["last_activity"] > max_age]
        for sid in expired:
            del self.sessions[sid]
            logger.debug(f"Cleaned up expired session {sid[:8]}...")
        return len(expired)
