"""Database table models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.db.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """A recruiter with a sourcing agent on the agent platform."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    external_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)  # agent platform user id
    email: Mapped[str] = mapped_column(String(255))
    display_name: Mapped[str] = mapped_column(String(255), default="")
    agent_api_key: Mapped[str] = mapped_column(Text)  # encrypted
    sourcing_agent_id: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    sessions: Mapped[list["SearchSession"]] = relationship(back_populates="user")


class SearchSession(Base):
    """One sourcing conversation."""

    __tablename__ = "search_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True)
    title: Mapped[str] = mapped_column(String(255), default="")
    initial_query: Mapped[str] = mapped_column(Text)
    attached_jd_id: Mapped[str | None] = mapped_column(String(255), default=None)
    # {"allProfiles": [...], "timestamp": iso}; overwritten by every tool call
    tool_results: Mapped[dict | None] = mapped_column(JSON, default=None)
    schema_version: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    user: Mapped["User"] = relationship(back_populates="sessions")
    turns: Mapped[list["SessionTurn"]] = relationship(
        back_populates="session", order_by="SessionTurn.id"
    )


class SessionTurn(Base):
    """A message in a search session. Append-only, ordered by id."""

    __tablename__ = "session_turns"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(36), ForeignKey("search_sessions.id"), index=True)
    role: Mapped[str] = mapped_column(String(20))  # user, assistant
    content: Mapped[str] = mapped_column(Text)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    session: Mapped["SearchSession"] = relationship(back_populates="turns")


class CandidateProfile(Base):
    """A LinkedIn profile as last returned by the search API."""

    __tablename__ = "candidate_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    public_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    raw_data: Mapped[dict] = mapped_column(JSON)
    last_fetched_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
