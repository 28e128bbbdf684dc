"""Shared fixtures: sqlite database, fake upstream APIs and an in-process app client."""

import json

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from backend.api.app import app
from backend.api.dependencies import get_agent_client_factory, get_search_client
from backend.api.limiter import limiter
from backend.config import settings
from backend.db import Base, User, get_db
from backend.security import encrypt
from backend.services.result_cache import ResultCache
from backend.tools.agent_platform import AgentPlatformClient
from backend.tools.linkedin_search import LinkedInSearchClient

API_TOKEN = "test-api-token"
SEARCH_HOST = "linkedin.test"
REQUEST_ID = "req-123"


def _profile(public_id: str | None = "jane-doe", **overrides) -> dict:
    """Raw search API record."""
    profile = {
        "public_id": public_id,
        "full_name": "Jane Doe",
        "headline": "Senior Python Engineer at Acme",
        "job_title": "Senior Python Engineer",
        "company": "Acme",
        "location": "San Francisco, California",
        "about": "Builds data platforms.",
        "linkedin_url": f"https://www.linkedin.com/in/{public_id}",
        "profile_image_url": "https://media.licdn.com/jane.jpg",
        "company_logo_url": "https://media.licdn.com/acme.png",
        "educations": [
            {"degree": "BSc", "field_of_study": "Computer Science", "school": "Stanford"},
        ],
        "experiences": [
            {
                "title": "Senior Python Engineer",
                "company": "Acme",
                "duration": "2 yrs",
                "is_current": False,
                "start_year": 2020,
                "start_month": 1,
                "end_year": 2022,
                "end_month": 1,
            },
        ],
    }
    profile.update(overrides)
    return profile


class FakeLinkedInAPI:
    """Scripted initiate/status/results endpoints of the search API."""

    def __init__(self):
        self.statuses = ["done"]
        self.profiles: list[dict] = []
        self.total_count: int | None = None
        self.max_attempts = 30
        self.initiate_error: tuple[int, str] | None = None
        self.search_payloads: list[dict] = []
        self.status_checks = 0
        self.fetches = 0
        self.headers: list[httpx.Headers] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.headers.append(request.headers)
        path = request.url.path

        if path == "/search-employees":
            self.search_payloads.append(json.loads(request.content))
            if self.initiate_error:
                status, body = self.initiate_error
                return httpx.Response(status, text=body)
            return httpx.Response(200, json={"request_id": REQUEST_ID})

        if path == "/check-search-status" and request.url.params.get("request_id") == REQUEST_ID:
            status = self.statuses[min(self.status_checks, len(self.statuses) - 1)]
            self.status_checks += 1
            body = {"status": status}
            if status == "error":
                body["message"] = "quota exceeded"
            return httpx.Response(200, json=body)

        if path == "/get-search-results" and request.url.params.get("request_id") == REQUEST_ID:
            self.fetches += 1
            total = self.total_count if self.total_count is not None else len(self.profiles)
            return httpx.Response(200, json={"data": self.profiles, "total_count": total})

        return httpx.Response(404, text="not found")

    def client(self, **kwargs) -> LinkedInSearchClient:
        kwargs.setdefault("poll_interval", 0)
        kwargs.setdefault("max_attempts", self.max_attempts)
        return LinkedInSearchClient(
            SEARCH_HOST, "rapid-key", transport=httpx.MockTransport(self.handler), **kwargs
        )


class FakeAgentPlatform:
    """Chat and stream endpoints of the agent platform."""

    def __init__(self):
        self.reply = "I found some strong candidates."
        self.stream_chunks = ["Searching...", "Found 2 candidates."]
        self.status_code = 200
        self.bodies: list[dict] = []
        self.api_keys: list[str | None] = []
        self.paths: list[str] = []
        # Async callable(body) run before answering; stands in for the agent's tool calls
        self.on_message = None

    async def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.bodies.append(body)
        self.api_keys.append(request.headers.get("x-api-key"))
        self.paths.append(request.url.path)

        if self.on_message is not None:
            await self.on_message(body)

        if self.status_code != 200:
            return httpx.Response(self.status_code, text="agent unavailable")

        if request.url.path == "/v3/inference/stream/":
            lines = "".join(f"data: {chunk}\n\n" for chunk in self.stream_chunks)
            return httpx.Response(
                200,
                text=lines + "data: [DONE]\n\n",
                headers={"content-type": "text/event-stream"},
            )
        return httpx.Response(200, json={"response": self.reply, "session_id": body["session_id"]})

    def factory(self, api_key: str) -> AgentPlatformClient:
        return AgentPlatformClient(
            api_key, base_url="https://agent.test", transport=httpx.MockTransport(self.handler)
        )


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    monkeypatch.setattr(settings, "api_auth_token", API_TOKEN)
    monkeypatch.setattr(settings, "encryption_key", "test-encryption-key")
    monkeypatch.setattr(settings, "rapid_api_base", SEARCH_HOST)
    monkeypatch.setattr(settings, "rapid_api_key", "rapid-key")
    monkeypatch.setattr(settings, "search_poll_interval", 0.0)
    monkeypatch.setattr(settings, "result_publisher", "session")
    return settings


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def user(db) -> User:
    user = User(
        external_id="user-1",
        email="recruiter@example.com",
        display_name="Recruiter",
        agent_api_key=encrypt("agent-key"),
        sourcing_agent_id="agent-1",
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def tool_token(user) -> str:
    return encrypt(user.external_id)


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {API_TOKEN}"}


@pytest.fixture
def linkedin_api() -> FakeLinkedInAPI:
    return FakeLinkedInAPI()


@pytest.fixture
def agent_platform() -> FakeAgentPlatform:
    return FakeAgentPlatform()


@pytest.fixture
async def client(session_factory, linkedin_api, agent_platform):
    """App client with the database and upstream APIs swapped for test doubles."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_search_client] = lambda: linkedin_api.client()
    app.dependency_overrides[get_agent_client_factory] = lambda: agent_platform.factory
    app.state.result_cache = ResultCache()
    limiter.enabled = False

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c

    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def make_profile():
    return _profile
