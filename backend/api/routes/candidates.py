"""Candidate profile endpoints."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.api.dependencies import require_api_token
from backend.api.schemas import CandidatesByIdsRequest
from backend.db import get_db
from backend.exceptions import ValidationError
from backend.services.candidates import candidate_card, get_candidates

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/get-by-ids")
def get_candidates_by_ids(
    data: CandidatesByIdsRequest,
    _: None = Depends(require_api_token),
    db: Session = Depends(get_db),
):
    """Stored profiles for the given public ids, as profile cards."""
    if not data.publicIds:
        raise ValidationError("publicIds must be a non-empty array")

    logger.info("Fetching %d candidate profiles", len(data.publicIds))
    candidates = get_candidates(db, data.publicIds)
    logger.info("Found %d profiles in database", len(candidates))

    return [candidate_card(c) for c in candidates]
