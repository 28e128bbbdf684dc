"""
LinkedIn candidate search via RapidAPI.

The API is asynchronous and only exposes three primitives:
1. Initiate a search (returns a request_id)
2. Check the search status (poll until done)
3. Get the search results

`LinkedInSearchClient.search` runs all three as one call.
"""

import asyncio
import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any

import httpx
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from backend.config import settings
from backend.exceptions import ExternalServiceError, SearchTimeoutError

logger = logging.getLogger(__name__)


def _lenient_int(value: Any) -> int | None:
    """The API mixes numbers, numeric strings, "" and null for dates."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


LenientInt = Annotated[int | None, BeforeValidator(_lenient_int)]


# Search request / status / results


class SearchCriteria(BaseModel):
    """Criteria for one candidate search."""

    keywords: str
    title_keywords: list[str] = Field(default_factory=list)
    current_company_names: list[str] = Field(default_factory=list)
    past_company_names: list[str] = Field(default_factory=list)
    geo_codes: list[int] = Field(default_factory=list)
    limit: int | None = None

    @field_validator("keywords")
    @classmethod
    def _keywords_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("keywords must be a non-empty string")
        return value

    def to_payload(self) -> dict:
        """Request body for /search-employees; empty filters are omitted."""
        payload: dict[str, Any] = {"keywords": self.keywords}
        for name in ("title_keywords", "current_company_names", "past_company_names", "geo_codes"):
            values = getattr(self, name)
            if values:
                payload[name] = values
        if self.limit is not None:
            payload["limit"] = self.limit
        return payload


class SearchStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str  # pending | processing | done | error
    total_count: LenientInt = None
    employees_scraped_so_far: LenientInt = None
    message: str | None = None


class SearchResults(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Records are validated one by one at ingestion so one bad record can be skipped
    data: Annotated[list[Any], BeforeValidator(_none_to_list)] = Field(default_factory=list)
    total_count: LenientInt = None
    message: str | None = None


# Profile fields the backend actually reads. Everything else rides along in
# the raw payload that gets persisted.


class Education(BaseModel):
    model_config = ConfigDict(extra="allow")

    degree: str | None = None
    field_of_study: str | None = None
    school: str | None = None


class Experience(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str | None = None
    company: str | None = None
    duration: str | None = None
    is_current: bool | None = False
    start_month: LenientInt = None
    start_year: LenientInt = None
    end_month: LenientInt = None
    end_year: LenientInt = None


class LinkedInProfile(BaseModel):
    model_config = ConfigDict(extra="allow")

    public_id: str | None = None
    full_name: str | None = None
    headline: str | None = None
    job_title: str | None = None
    company: str | None = None
    location: str | None = None
    about: str | None = None
    linkedin_url: str | None = None
    profile_image_url: str | None = None
    company_logo_url: str | None = None
    educations: Annotated[list[Education], BeforeValidator(_none_to_list)] = Field(default_factory=list)
    experiences: Annotated[list[Experience], BeforeValidator(_none_to_list)] = Field(default_factory=list)


# Client


class LinkedInSearchClient:
    """Blocking-style wrapper over the initiate/poll/fetch search API."""

    def __init__(
        self,
        api_host: str,
        api_key: str,
        *,
        poll_interval: float = 2.0,
        max_attempts: int = 30,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_host = api_host
        self.api_key = api_key
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, **overrides) -> "LinkedInSearchClient":
        """Build a client from application settings."""
        kwargs = {
            "poll_interval": settings.search_poll_interval,
            "max_attempts": settings.search_max_attempts,
            "timeout": settings.search_timeout,
        }
        kwargs.update(overrides)
        return cls(settings.rapid_api_base, settings.rapid_api_key, **kwargs)

    async def _request(self, method: str, path: str, action: str, **kwargs) -> dict:
        if not self.api_host or not self.api_key:
            raise ExternalServiceError("LinkedIn API credentials not configured")

        headers = {
            "x-rapidapi-host": self.api_host,
            "x-rapidapi-key": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method, f"https://{self.api_host}{path}", headers=headers, **kwargs
                )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to {action}: {type(e).__name__} {e}") from e

        if not response.is_success:
            raise ExternalServiceError(
                f"Failed to {action}: {response.status_code} {response.text}",
                status=response.status_code,
                body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(
                f"Failed to {action}: response is not JSON",
                status=response.status_code,
                body=response.text,
            ) from e

    async def initiate(self, criteria: SearchCriteria) -> str:
        """Step 1: start a search job and return its request id."""
        data = await self._request(
            "POST", "/search-employees", "initiate LinkedIn search", json=criteria.to_payload()
        )
        request_id = data.get("request_id")
        if not request_id:
            raise ExternalServiceError("Failed to initiate LinkedIn search: no request_id in response")
        return str(request_id)

    async def check_status(self, request_id: str) -> SearchStatus:
        """Step 2: current status of a search job."""
        data = await self._request(
            "GET",
            "/check-search-status",
            "check LinkedIn search status",
            params={"request_id": request_id},
        )
        return SearchStatus.model_validate(data)

    async def fetch_results(self, request_id: str) -> SearchResults:
        """Step 3: results of a completed search job."""
        data = await self._request(
            "GET",
            "/get-search-results",
            "get LinkedIn search results",
            params={"request_id": request_id},
        )
        return SearchResults.model_validate(data)

    async def search(self, criteria: SearchCriteria) -> SearchResults:
        """
        Run a complete search: initiate, poll until done, fetch.

        Sleeps `poll_interval` before each status check, at most
        `max_attempts` checks.

        Raises:
            ExternalServiceError: a remote call failed or the job reported error
            SearchTimeoutError: no terminal status within `max_attempts`
        """
        request_id = await self.initiate(criteria)
        logger.info("LinkedIn search initiated with request_id: %s", request_id)

        for attempt in range(1, self.max_attempts + 1):
            await asyncio.sleep(self.poll_interval)

            status = await self.check_status(request_id)
            logger.info(
                "LinkedIn search status (attempt %d/%d): %s", attempt, self.max_attempts, status.status
            )

            if status.status == "done":
                results = await self.fetch_results(request_id)
                logger.info(
                    "LinkedIn search completed. Got %d of %s candidates.",
                    len(results.data),
                    results.total_count,
                )
                return results
            if status.status == "error":
                raise ExternalServiceError(f"LinkedIn search failed: {status.message}")

        raise SearchTimeoutError(f"LinkedIn search timed out after {self.max_attempts} attempts")


# Profile helpers


def calculate_years_of_experience(profile: LinkedInProfile, now: datetime | None = None) -> float:
    """
    Total years across all experiences, rounded to one decimal.

    Current roles run until `now`. Entries without a start year count as zero.
    """
    now = now or datetime.now()
    total_months = 0

    for exp in profile.experiences:
        if not exp.start_year:
            continue
        start_month = exp.start_month or 1
        if exp.is_current:
            end_year, end_month = now.year, now.month
        else:
            end_year = exp.end_year or now.year
            end_month = exp.end_month or 12
        total_months += (end_year - exp.start_year) * 12 + (end_month - start_month)

    # Rounds half up: 27 months is 2.3 years
    years = Decimal(total_months) / 12
    return float(years.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _education_summary(edu: Education) -> dict:
    return {"degree": edu.degree, "field": edu.field_of_study, "school": edu.school}


def format_profile_for_llm(profile: LinkedInProfile) -> dict:
    """Concise profile for the agent; keeps token usage down."""
    return {
        "public_id": profile.public_id,
        "full_name": profile.full_name,
        "headline": profile.headline,
        "current_title": profile.job_title,
        "current_company": profile.company,
        "location": profile.location,
        "years_of_experience": calculate_years_of_experience(profile),
        "education": [_education_summary(edu) for edu in profile.educations[:2]],
        "recent_experience": [
            {
                "title": exp.title,
                "company": exp.company,
                "duration": exp.duration,
                "is_current": exp.is_current,
            }
            for exp in profile.experiences[:3]
        ],
        "linkedin_url": profile.linkedin_url,
        "about": (profile.about or "")[:300],
    }


def format_profile_for_display(profile: LinkedInProfile) -> dict:
    """Profile card data for the UI."""
    return {
        "public_id": profile.public_id,
        "full_name": profile.full_name,
        "job_title": profile.job_title,
        "company": profile.company,
        "location": profile.location,
        "linkedin_url": profile.linkedin_url,
        "profile_image_url": profile.profile_image_url,
        "company_logo_url": profile.company_logo_url,
        "headline": profile.headline,
        "about": (profile.about or "")[:200],
        "years_of_experience": calculate_years_of_experience(profile),
        "education": [_education_summary(edu) for edu in profile.educations[:1]],
    }
