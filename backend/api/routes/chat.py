"""Chat endpoints: the front door for a recruiter's sourcing conversation."""

import json
import logging
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from backend.api.dependencies import get_agent_client_factory, get_result_publisher, require_api_token
from backend.api.limiter import limiter
from backend.api.schemas import (
    ChatSendRequest,
    ChatSendResponse,
    SearchSessionResponse,
    SessionTurnResponse,
)
from backend.config import settings
from backend.db import SearchSession, User, get_db
from backend.exceptions import AppError, NotFoundError, ValidationError
from backend.locations import format_locations
from backend.security import decrypt
from backend.services.publisher import ResultPublisher
from backend.services.sessions import append_turn, create_session, get_session, list_turns
from backend.tools.agent_platform import AgentPlatformClient

logger = logging.getLogger(__name__)

router = APIRouter()


def _sse_event(event: str, data: dict) -> str:
    """Format SSE event."""
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def _validate_request(data: ChatSendRequest) -> None:
    if not data.query or not data.query.strip():
        raise ValidationError("Query is required")
    if not data.user or not data.user.id or not data.user.email:
        raise ValidationError("User information is required")


def _start_turn(db: Session, data: ChatSendRequest) -> tuple[User, SearchSession]:
    """Load the user, then create the session or append the query to it."""
    user = db.query(User).filter(User.external_id == data.user.id).first()
    if not user:
        raise NotFoundError("User not found in database")

    if not data.sessionId:
        session = create_session(db, user, data.query, data.jdId)
        logger.info("Created new search session: %s for user: %s", session.id, data.user.email)
        return user, session

    session = get_session(db, data.sessionId)
    if not session or session.user_id != user.id:
        raise NotFoundError("Session not found")

    append_turn(db, session.id, "user", data.query)
    logger.info("Updated search session: %s for user: %s", session.id, data.user.email)
    return user, session


def _system_prompt_variables(data: ChatSendRequest, session_id: str) -> dict:
    return {
        "user_name": data.user.name or data.user.email.split("@")[0],
        "session_id": session_id,  # the agent passes it back on tool calls
        "available_locations": format_locations(),
        "datetime": datetime.now(UTC).isoformat(),
    }


def _recover_profiles(publisher: ResultPublisher, session_id: str) -> list[dict] | None:
    """Profiles the search tool published during the agent's turn, if any."""
    try:
        profiles = publisher.recover(session_id)
    except Exception:
        logger.exception("Failed to recover tool results for session %s", session_id)
        return None
    logger.info(
        "Tool results for session %s: found=%s, profiles=%d",
        session_id,
        profiles is not None,
        len(profiles or []),
    )
    return profiles


@router.post("/send", response_model=ChatSendResponse)
@limiter.limit(settings.chat_rate_limit)
async def send_message(
    request: Request,
    data: ChatSendRequest,
    _: None = Depends(require_api_token),
    db: Session = Depends(get_db),
    publisher: ResultPublisher = Depends(get_result_publisher),
    agent_client_factory: Callable[[str], AgentPlatformClient] = Depends(get_agent_client_factory),
):
    """Send a query to the sourcing agent and return its answer with any candidates found."""
    _validate_request(data)
    user, session = _start_turn(db, data)
    session_id = session.id

    try:
        client = agent_client_factory(decrypt(user.agent_api_key))
        logger.info(
            "Calling agent %s for %s (session %s)", user.sourcing_agent_id, data.user.email, session_id
        )
        reply = await client.chat(
            user.sourcing_agent_id,
            data.query,
            data.user.email,
            session_id=session_id,
            system_prompt_variables=_system_prompt_variables(data, session_id),
        )
        logger.info("Agent response received: %d chars", len(reply.response))

        all_profiles = _recover_profiles(publisher, session_id)

        append_turn(db, session_id, "assistant", reply.response)
    except Exception as e:
        logger.error("Error in /chat/send: %s", e)
        message = e.message if isinstance(e, AppError) else str(e) or type(e).__name__
        raise AppError(message, error="Failed to process chat") from e

    return ChatSendResponse(
        response=reply.response,
        sessionId=session_id,
        all_profiles=all_profiles,
    )


@router.post("/stream")
@limiter.limit(settings.chat_rate_limit)
async def stream_message(
    request: Request,
    data: ChatSendRequest,
    _: None = Depends(require_api_token),
    db: Session = Depends(get_db),
    publisher: ResultPublisher = Depends(get_result_publisher),
    agent_client_factory: Callable[[str], AgentPlatformClient] = Depends(get_agent_client_factory),
):
    """Stream the agent's answer via SSE, then send the candidates found."""
    _validate_request(data)
    user, session = _start_turn(db, data)
    session_id = session.id
    # The generator runs after this handler returns; don't touch ORM objects there
    encrypted_api_key = user.agent_api_key
    agent_id = user.sourcing_agent_id

    async def event_generator() -> AsyncGenerator[str, None]:
        yield _sse_event("status", {"session_id": session_id, "message": "Searching for candidates..."})

        chunks = []
        try:
            client = agent_client_factory(decrypt(encrypted_api_key))
            async for chunk in client.stream_chat(
                agent_id,
                data.query,
                data.user.email,
                session_id=session_id,
                system_prompt_variables=_system_prompt_variables(data, session_id),
            ):
                chunks.append(chunk)
                yield _sse_event("chunk", {"data": chunk})

            response_text = "".join(chunks)
            all_profiles = _recover_profiles(publisher, session_id)
            append_turn(db, session_id, "assistant", response_text)

            yield _sse_event("done", {
                "session_id": session_id,
                "response": response_text,
                "all_profiles": all_profiles,
            })
        except Exception as e:
            logger.error("Error streaming session %s: %s", session_id, e)
            message = e.message if isinstance(e, AppError) else str(e) or type(e).__name__
            yield _sse_event("error", {"error": "Failed to process chat", "details": message})

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/{session_id}", response_model=SearchSessionResponse)
async def get_search_session(
    session_id: str,
    _: None = Depends(require_api_token),
    db: Session = Depends(get_db),
    x_user_id: str | None = Header(None, alias="X-User-ID"),
):
    """Get a session's conversation and latest tool results."""
    session = get_session(db, session_id)
    if not session or not x_user_id or session.user.external_id != x_user_id:
        raise NotFoundError("Session not found")

    return SearchSessionResponse(
        id=session.id,
        title=session.title,
        initial_query=session.initial_query,
        attached_jd_id=session.attached_jd_id,
        conversation_history=[
            SessionTurnResponse.model_validate(turn) for turn in list_turns(db, session_id)
        ],
        tool_results=session.tool_results,
        schema_version=session.schema_version,
        created_at=session.created_at,
        updated_at=session.updated_at,
    )
