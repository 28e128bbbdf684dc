"""
Agent platform client.

The sourcing agent is hosted on the Lyzr agent platform. It holds the
conversation, decides when to call our `search_candidates` tool and returns
the final answer.
"""

import logging
import random
import string
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx

from backend.config import settings
from backend.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

DONE_MARKER = "[DONE]"


@dataclass
class AgentReply:
    response: str
    session_id: str


def generate_session_id(agent_id: str) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{agent_id}-{int(time.time() * 1000)}-{suffix}"


class AgentPlatformClient:
    """Chat with an agent on behalf of one user (one API key)."""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or settings.agent_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.agent_timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"Content-Type": "application/json", "x-api-key": self.api_key},
        )

    @staticmethod
    def _body(
        agent_id: str,
        message: str,
        user_id: str,
        session_id: str,
        system_prompt_variables: dict | None,
    ) -> dict:
        return {
            "user_id": user_id,
            "agent_id": agent_id,
            "session_id": session_id,
            "message": message,
            "system_prompt_variables": system_prompt_variables or {},
            "filter_variables": {},
            "features": [],
        }

    async def chat(
        self,
        agent_id: str,
        message: str,
        user_id: str,
        session_id: str | None = None,
        system_prompt_variables: dict | None = None,
    ) -> AgentReply:
        """
        Send one message and wait for the agent's final answer.

        The agent may call tools (including ours) before answering, so this
        can take minutes.
        """
        session_id = session_id or generate_session_id(agent_id)
        body = self._body(agent_id, message, user_id, session_id, system_prompt_variables)
        body["assets"] = []

        try:
            async with self._client() as client:
                response = await client.post("/v3/inference/chat/", json=body)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to chat with agent: {type(e).__name__} {e}") from e

        if not response.is_success:
            logger.error("Chat failed: %s %s", response.status_code, response.text)
            raise ExternalServiceError(
                f"Failed to chat with agent: {response.status_code} {response.text}",
                status=response.status_code,
                body=response.text,
            )

        data = response.json()
        return AgentReply(
            response=data.get("response") or "",
            session_id=data.get("session_id") or session_id,
        )

    async def stream_chat(
        self,
        agent_id: str,
        message: str,
        user_id: str,
        session_id: str | None = None,
        system_prompt_variables: dict | None = None,
    ) -> AsyncIterator[str]:
        """Yield text chunks from the agent's SSE stream until [DONE]."""
        session_id = session_id or generate_session_id(agent_id)
        body = self._body(agent_id, message, user_id, session_id, system_prompt_variables)

        try:
            async with self._client() as client:
                async with client.stream("POST", "/v3/inference/stream/", json=body) as response:
                    if not response.is_success:
                        text = (await response.aread()).decode("utf-8", errors="replace")
                        logger.error("Streaming chat failed: %s %s", response.status_code, text)
                        raise ExternalServiceError(
                            f"Failed to stream chat with agent: {response.status_code} {text}",
                            status=response.status_code,
                            body=text,
                        )

                    async for line in response.aiter_lines():
                        if not line.startswith("data: "):
                            continue
                        data = line[len("data: "):].strip()
                        if data == DONE_MARKER:
                            return
                        yield data
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to stream chat with agent: {type(e).__name__} {e}") from e
