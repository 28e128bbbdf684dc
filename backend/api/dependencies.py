"""Shared FastAPI dependencies."""

import secrets
from collections.abc import Callable

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from backend.config import settings
from backend.db import get_db
from backend.exceptions import AuthenticationError
from backend.security import decrypt
from backend.services.publisher import ResultPublisher, build_publisher
from backend.services.result_cache import ResultCache
from backend.tools.agent_platform import AgentPlatformClient
from backend.tools.linkedin_search import LinkedInSearchClient


def require_api_token(authorization: str | None = Header(None)) -> None:
    """Static bearer token shared with the UI server."""
    expected = settings.api_auth_token
    if not authorization or not expected or not secrets.compare_digest(
        authorization, f"Bearer {expected}"
    ):
        raise AuthenticationError("Unauthorized - Invalid token")


def require_tool_user(x_token: str | None = Header(None, alias="x-token")) -> str:
    """Decrypt the per-user token the agent platform sends on tool calls."""
    if not x_token:
        raise AuthenticationError("Missing authentication token")
    try:
        user_id = decrypt(x_token)
    except ValueError:
        raise AuthenticationError("Invalid authentication token")
    if not user_id.strip():
        raise AuthenticationError("Invalid authentication token")
    return user_id


def get_result_cache(request: Request) -> ResultCache:
    return request.app.state.result_cache


def get_result_publisher(
    db: Session = Depends(get_db),
    cache: ResultCache = Depends(get_result_cache),
) -> ResultPublisher:
    return build_publisher(settings.result_publisher, db, cache)


def get_search_client() -> LinkedInSearchClient:
    return LinkedInSearchClient.from_settings()


def get_agent_client_factory() -> Callable[[str], AgentPlatformClient]:
    """Agent clients are per user: each one carries that user's API key."""
    return AgentPlatformClient
