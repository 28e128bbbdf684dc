"""Database package."""

from backend.db.base import Base, dispose_engine, get_db, init_db, session_scope
from backend.db.tables import (
    CandidateProfile,
    SearchSession,
    SessionTurn,
    User,
)

__all__ = [
    "Base",
    "get_db",
    "init_db",
    "session_scope",
    "dispose_engine",
    "User",
    "SearchSession",
    "SessionTurn",
    "CandidateProfile",
]
