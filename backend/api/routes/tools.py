"""Tool endpoints called by the agent platform during a conversation."""

import logging

from fastapi import APIRouter, Depends, Response
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.api.dependencies import get_result_publisher, get_search_client, require_tool_user
from backend.api.schemas import SearchCandidatesRequest, SearchCandidatesResponse
from backend.config import settings
from backend.db import get_db
from backend.exceptions import AppError, ValidationError
from backend.services.candidates import upsert_candidate
from backend.services.publisher import ResultPublisher
from backend.tools.linkedin_search import (
    LinkedInProfile,
    LinkedInSearchClient,
    SearchCriteria,
    format_profile_for_display,
    format_profile_for_llm,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# The agent platform calls from its own origin
TOOL_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, x-token",
}

MISSING_SESSION_MESSAGE = (
    "session_id parameter is required. Pass the session_id from your system prompt "
    "variables unchanged on every search_candidates call."
)


def _geo_code(value: str | int | float) -> int:
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        number = float(text)  # "94105.0"
        if not number.is_integer():
            raise ValueError(f"not an integral geo code: {value!r}")
        return int(number)


def parse_geo_codes(values: list[str | int | float]) -> list[int]:
    """Convert geo codes to ints, dropping anything that is not a whole number."""
    codes = []
    dropped = []
    for value in values:
        try:
            codes.append(_geo_code(value))
        except ValueError:
            dropped.append(value)
    if dropped:
        logger.warning("Dropping non-numeric geo codes: %s", dropped)
    return codes


def cap_limit(limit: int | None, max_limit: int) -> int:
    if limit is None or limit <= 0:
        return max_limit
    return min(limit, max_limit)


@router.options("/search_candidates")
async def search_candidates_preflight():
    """CORS pre-flight for the agent platform."""
    return Response(status_code=200, headers=TOOL_CORS_HEADERS)


@router.post("/search_candidates", response_model=SearchCandidatesResponse)
async def search_candidates(
    data: SearchCandidatesRequest,
    response: Response,
    user_id: str = Depends(require_tool_user),
    db: Session = Depends(get_db),
    search_client: LinkedInSearchClient = Depends(get_search_client),
    publisher: ResultPublisher = Depends(get_result_publisher),
):
    """Search LinkedIn for candidates, store their profiles and publish the results."""
    response.headers.update(TOOL_CORS_HEADERS)
    logger.info("search_candidates called by user %s: %s", user_id, data.model_dump(exclude_none=True))

    if not data.session_id or not data.session_id.strip():
        raise ValidationError(MISSING_SESSION_MESSAGE)
    if not data.keywords or not data.keywords.strip():
        raise ValidationError("keywords parameter is required and must be a non-empty string")

    session_id = data.session_id.strip()
    criteria = SearchCriteria(
        keywords=data.keywords,
        title_keywords=data.title_keywords,
        current_company_names=data.current_company_names,
        past_company_names=data.past_company_names,
        geo_codes=parse_geo_codes(data.geo_codes),
        limit=cap_limit(data.limit, settings.search_max_limit),
    )
    logger.info("Executing LinkedIn search with params: %s", criteria.to_payload())

    try:
        results = await search_client.search(criteria)
    except Exception as e:
        logger.error("Error in /tools/search_candidates: %s", e)
        message = e.message if isinstance(e, AppError) else str(e) or type(e).__name__
        raise AppError(message, error="Failed to search candidates") from e

    total_count = results.total_count or 0

    if not results.data:
        publisher.publish(session_id, [])
        return SearchCandidatesResponse(
            message="No candidates found matching the search criteria.",
            total_count=total_count,
        )

    logger.info(
        "LinkedIn search returned %d candidates out of %d total available.",
        len(results.data),
        total_count,
    )

    formatted_profiles = []  # concise, for the agent
    all_profiles = []  # cards, for the UI
    stored = 0
    updated = 0
    skipped = 0

    for raw in results.data:
        try:
            profile = LinkedInProfile.model_validate(raw)
        except PydanticValidationError as e:
            logger.warning("Skipping malformed profile: %s", e.error_count())
            skipped += 1
            continue

        if not profile.public_id:
            logger.warning("Skipping profile without public_id: %s", profile.full_name or "Unknown")
            skipped += 1
            continue

        try:
            created = upsert_candidate(db, profile.public_id, raw)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to save profile %s: %s", profile.public_id, e)
            skipped += 1
            continue

        if created:
            stored += 1
        else:
            updated += 1

        formatted_profiles.append(format_profile_for_llm(profile))
        all_profiles.append(format_profile_for_display(profile))

    logger.info(
        "Profile processing complete: %d new, %d updated, %d skipped.", stored, updated, skipped
    )

    if not publisher.publish(session_id, all_profiles):
        logger.warning("Tool results for session %s were not published", session_id)

    return SearchCandidatesResponse(
        message=f"Found {len(formatted_profiles)} candidates matching your criteria.",
        total_count=total_count,
        total_fetched=len(all_profiles),
        total_stored=stored,
        total_updated=updated,
        total_skipped=skipped,
        data=formatted_profiles,
        all_profiles=all_profiles,
    )
