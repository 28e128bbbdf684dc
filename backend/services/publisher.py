"""
Delivery of search tool results to the chat request that is waiting for them.

The tool handler runs inside the agent platform's tool call, a separate
request from the chat request. It publishes results by session id; the chat
request recovers them after the agent answers.

- SessionResultPublisher: session row in the database (authoritative)
- CacheResultPublisher: in-process ResultCache
- FallbackResultPublisher: both, reading the primary first
"""

import logging
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.services.result_cache import ResultCache
from backend.services.sessions import load_tool_results, save_tool_results

logger = logging.getLogger(__name__)

SEARCH_TOOL_NAME = "search_candidates"


class ResultPublisher(Protocol):
    def publish(self, session_id: str, profiles: list[dict]) -> bool:
        """Make `profiles` the latest results for the session. False if not delivered."""
        ...

    def recover(self, session_id: str) -> list[dict] | None:
        """Latest published profiles for the session, or None."""
        ...


class SessionResultPublisher:
    def __init__(self, db: Session):
        self.db = db

    def publish(self, session_id: str, profiles: list[dict]) -> bool:
        try:
            saved = save_tool_results(self.db, session_id, profiles)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to store tool results on session %s", session_id)
            return False
        if not saved:
            logger.warning("Session %s not found; tool results not stored on session", session_id)
        return saved

    def recover(self, session_id: str) -> list[dict] | None:
        return load_tool_results(self.db, session_id)


class CacheResultPublisher:
    def __init__(self, cache: ResultCache, tool_name: str = SEARCH_TOOL_NAME):
        self.cache = cache
        self.tool_name = tool_name

    def publish(self, session_id: str, profiles: list[dict]) -> bool:
        self.cache.put(
            session_id,
            self.tool_name,
            {"allProfiles": profiles, "timestamp": datetime.now(UTC).isoformat()},
        )
        return True

    def recover(self, session_id: str) -> list[dict] | None:
        result = self.cache.get_latest_by_tool_name(session_id, self.tool_name)
        if not result:
            return None
        return result.get("allProfiles")


class FallbackResultPublisher:
    def __init__(self, primary: ResultPublisher, fallback: ResultPublisher):
        self.primary = primary
        self.fallback = fallback

    def publish(self, session_id: str, profiles: list[dict]) -> bool:
        delivered = self.primary.publish(session_id, profiles)
        return self.fallback.publish(session_id, profiles) or delivered

    def recover(self, session_id: str) -> list[dict] | None:
        try:
            profiles = self.primary.recover(session_id)
        except Exception:
            logger.exception("Primary tool result lookup failed for session %s", session_id)
            profiles = None
        if profiles is None:
            profiles = self.fallback.recover(session_id)
            if profiles is not None:
                logger.info("Recovered tool results for session %s from fallback", session_id)
        return profiles


def build_publisher(mode: str, db: Session, cache: ResultCache) -> ResultPublisher:
    """Publisher for the RESULT_PUBLISHER setting: "session" or "memory"."""
    if mode == "memory":
        return CacheResultPublisher(cache)
    if mode == "session":
        return FallbackResultPublisher(SessionResultPublisher(db), CacheResultPublisher(cache))
    raise ValueError(f"Unknown result publisher: {mode}")
