"""Tests for the agent platform client."""

import json

import httpx
import pytest

from backend.exceptions import ExternalServiceError
from backend.tools.agent_platform import AgentPlatformClient, generate_session_id


def _client(handler) -> AgentPlatformClient:
    return AgentPlatformClient(
        "agent-key", base_url="https://agent.test/", timeout=5, transport=httpx.MockTransport(handler)
    )


class TestChat:
    async def test_posts_message_and_returns_reply(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers["x-api-key"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "Hello", "session_id": "sess-1"})

        reply = await _client(handler).chat(
            "agent-1", "Find engineers", "r@example.com", session_id="sess-1",
            system_prompt_variables={"session_id": "sess-1"},
        )

        assert reply.response == "Hello"
        assert reply.session_id == "sess-1"
        assert seen["url"] == "https://agent.test/v3/inference/chat/"
        assert seen["key"] == "agent-key"
        assert seen["body"]["agent_id"] == "agent-1"
        assert seen["body"]["message"] == "Find engineers"
        assert seen["body"]["system_prompt_variables"] == {"session_id": "sess-1"}

    async def test_generates_session_id(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            return httpx.Response(200, json={"response": "ok", "session_id": body["session_id"]})

        reply = await _client(handler).chat("agent-1", "hi", "r@example.com")

        assert reply.session_id.startswith("agent-1-")

    async def test_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="bad key")

        with pytest.raises(ExternalServiceError) as exc_info:
            await _client(handler).chat("agent-1", "hi", "r@example.com")

        assert exc_info.value.status == 401
        assert exc_info.value.body == "bad key"

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExternalServiceError, match="ConnectError"):
            await _client(handler).chat("agent-1", "hi", "r@example.com")


class TestStreamChat:
    async def test_yields_data_lines_until_done(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v3/inference/stream/"
            text = "data: one\n\n: keep-alive\n\ndata: two\n\ndata: [DONE]\n\ndata: ignored\n\n"
            return httpx.Response(200, text=text)

        chunks = [c async for c in _client(handler).stream_chat("agent-1", "hi", "r@example.com")]

        assert chunks == ["one", "two"]

    async def test_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        with pytest.raises(ExternalServiceError, match="500 boom"):
            async for _ in _client(handler).stream_chat("agent-1", "hi", "r@example.com"):
                pass


def test_session_ids_are_unique() -> None:
    ids = {generate_session_id("agent-1") for _ in range(50)}
    assert len(ids) == 50
