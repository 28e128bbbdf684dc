"""API request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


# Search tool schemas (called by the agent platform)
class SearchCandidatesRequest(BaseModel):
    # Required fields are optional here so missing ones get specific 400s
    session_id: str | None = None
    keywords: str | None = None
    title_keywords: list[str] = Field(default_factory=list)
    current_company_names: list[str] = Field(default_factory=list)
    past_company_names: list[str] = Field(default_factory=list)
    geo_codes: list[str | int | float] = Field(default_factory=list, description="LinkedIn geo codes")
    limit: int | None = None


class SearchCandidatesResponse(BaseModel):
    success: bool = True
    message: str
    total_count: int
    total_fetched: int = 0
    total_stored: int = 0
    total_updated: int = 0
    total_skipped: int = 0
    data: list[dict] = Field(default_factory=list, description="Concise profiles for the agent")
    all_profiles: list[dict] = Field(default_factory=list, description="Profile cards for the UI")


# Chat schemas
class ChatUser(BaseModel):
    id: str | None = None
    email: str | None = None
    name: str | None = None


class ChatSendRequest(BaseModel):
    query: str | None = None
    jdId: str | None = None
    user: ChatUser | None = None
    sessionId: str | None = None


class ChatSendResponse(BaseModel):
    success: bool = True
    response: str
    sessionId: str
    all_profiles: list[dict] | None = None
    message: str = "Chat completed successfully"


class SessionTurnResponse(BaseModel):
    role: str
    content: str
    timestamp: datetime

    class Config:
        from_attributes = True


class SearchSessionResponse(BaseModel):
    id: str
    title: str
    initial_query: str
    attached_jd_id: str | None
    conversation_history: list[SessionTurnResponse]
    tool_results: dict | None
    schema_version: int
    created_at: datetime
    updated_at: datetime


# Candidate schemas
class CandidatesByIdsRequest(BaseModel):
    publicIds: list[str] | None = None
