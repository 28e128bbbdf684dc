"""Candidate profile storage."""

from datetime import UTC, datetime

from sqlalchemy.orm import Session

from backend.db import CandidateProfile


def upsert_candidate(db: Session, public_id: str, raw_data: dict) -> bool:
    """
    Insert or overwrite the stored profile for `public_id`.

    Returns True when a new record was created. The caller handles
    database errors.
    """
    candidate = db.query(CandidateProfile).filter(CandidateProfile.public_id == public_id).first()
    created = candidate is None
    if created:
        candidate = CandidateProfile(public_id=public_id)
        db.add(candidate)

    candidate.raw_data = raw_data
    candidate.last_fetched_at = datetime.now(UTC)
    db.commit()
    return created


def get_candidates(db: Session, public_ids: list[str]) -> list[CandidateProfile]:
    return db.query(CandidateProfile).filter(CandidateProfile.public_id.in_(public_ids)).all()


def candidate_card(candidate: CandidateProfile) -> dict:
    """Profile card for the saved-profiles and matching views."""
    data = candidate.raw_data or {}
    educations = data.get("educations") or []
    first_education = (educations[0] if educations else None) or {}
    return {
        "id": data.get("public_id") or candidate.public_id,
        "name": data.get("full_name"),
        "title": data.get("job_title") or "No title available",
        "company": data.get("company") or "No company",
        "location": data.get("location") or "Location not specified",
        "education": first_education.get("school") or "",
        "summary": (data.get("about") or "")[:200] or "No summary available",
        "companyLogo": data.get("company_logo_url") or "",
        "profilePic": data.get("profile_image_url") or "",
        "linkedinUrl": data.get("linkedin_url") or "",
        "public_id": candidate.public_id,
    }
