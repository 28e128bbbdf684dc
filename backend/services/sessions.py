"""Search session store."""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from backend.db import SearchSession, SessionTurn, User

logger = logging.getLogger(__name__)

TITLE_MAX_CHARS = 50


def make_title(query: str) -> str:
    """First 50 characters of the query, with an ellipsis when cut."""
    return query[:TITLE_MAX_CHARS] + ("..." if len(query) > TITLE_MAX_CHARS else "")


def create_session(db: Session, user: User, query: str, jd_id: str | None = None) -> SearchSession:
    """Start a conversation seeded with the user's first query."""
    session = SearchSession(
        user_id=user.id,
        title=make_title(query),
        initial_query=query,
        attached_jd_id=jd_id or None,
    )
    db.add(session)
    db.flush()
    db.add(SessionTurn(session_id=session.id, role="user", content=query))
    db.commit()
    db.refresh(session)
    return session


def get_session(db: Session, session_id: str) -> SearchSession | None:
    return db.query(SearchSession).filter(SearchSession.id == session_id).first()


def append_turn(db: Session, session_id: str, role: str, content: str) -> SessionTurn:
    """Append a message; turns are never edited or reordered."""
    turn = SessionTurn(session_id=session_id, role=role, content=content)
    db.add(turn)
    db.query(SearchSession).filter(SearchSession.id == session_id).update(
        {SearchSession.updated_at: datetime.now(UTC)}
    )
    db.commit()
    return turn


def list_turns(db: Session, session_id: str) -> list[SessionTurn]:
    return (
        db.query(SessionTurn)
        .filter(SessionTurn.session_id == session_id)
        .order_by(SessionTurn.id)
        .all()
    )


def save_tool_results(db: Session, session_id: str, profiles: list[dict]) -> bool:
    """
    Overwrite the session's tool results with the latest search.

    Returns False when the session does not exist.
    """
    session = get_session(db, session_id)
    if not session:
        return False
    session.tool_results = {
        "allProfiles": profiles,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    db.commit()
    return True


def load_tool_results(db: Session, session_id: str) -> list[dict] | None:
    """Profiles from the session's latest tool call, or None."""
    # Another request wrote them; don't trust this session's identity map
    db.expire_all()
    session = get_session(db, session_id)
    if not session or not session.tool_results:
        return None
    return session.tool_results.get("allProfiles")
