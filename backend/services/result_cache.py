"""
In-memory tool result cache, indexed by session id.

Tool calls arrive from the agent platform with no channel back to the chat
request that triggered them. Tool handlers `put` their results here and the
chat request reads them back by session id.
"""

import asyncio
import itertools
import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from cachetools import TTLCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedToolResult:
    session_id: str
    tool_name: str
    result: Any
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class ResultCache:
    """
    TTL-bounded store of tool results per session.

    Each entry expires `ttl` seconds after it was put. Expired entries are
    never returned; `sweep` (run every `sweep_interval` once started)
    frees their memory.
    """

    def __init__(
        self,
        ttl: float = 600.0,
        sweep_interval: float = 300.0,
        maxsize: float = math.inf,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        # (session_id, seq) -> CachedToolResult; insertion order == expiry order.
        # Bounded by TTL only: a size bound would evict entries that are still fresh.
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._seq = itertools.count()
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task | None = None

    def put(self, session_id: str, tool_name: str, result: Any) -> None:
        """Append a result for a session. Never raises."""
        try:
            entry = CachedToolResult(session_id=session_id, tool_name=tool_name, result=result)
            with self._lock:
                self._entries[(session_id, next(self._seq))] = entry
            logger.info("Stored %s result for session %s", tool_name, session_id)
        except Exception:
            logger.exception("Failed to cache %s result for session %s", tool_name, session_id)

    def get_all(self, session_id: str) -> list[CachedToolResult]:
        """Live results for a session, oldest first."""
        with self._lock:
            keys = [key for key in self._entries.keys() if key[0] == session_id]
            entries = [self._entries.get(key) for key in keys]
        return [entry for entry in entries if entry is not None]

    def get_latest_by_tool_name(self, session_id: str, tool_name: str) -> Any | None:
        """
        Payload of the newest result whose tool name contains `tool_name`.

        Registered tool names carry version and user suffixes
        (e.g. `search_candidates_v1.0.3`), hence the substring match.
        """
        for entry in reversed(self.get_all(session_id)):
            if tool_name in entry.tool_name:
                return entry.result
        return None

    def clear(self, session_id: str) -> None:
        """Drop every result for a session."""
        with self._lock:
            for key in [k for k in self._entries.keys() if k[0] == session_id]:
                self._entries.pop(key, None)
        logger.info("Cleared session %s", session_id)

    def sweep(self) -> int:
        """Remove expired entries. Returns how many sessions were dropped."""
        with self._lock:
            expired = {key[0] for key, _ in self._entries.expire()}
            dropped = len(expired - self._session_ids())
        if dropped:
            logger.info("Cleaned up %d expired sessions", dropped)
        return dropped

    def session_count(self) -> int:
        with self._lock:
            return len(self._session_ids())

    def _session_ids(self) -> set[str]:
        return {key[0] for key in self._entries.keys()}

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()

    def start(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())

    async def stop(self) -> None:
        """Cancel the periodic sweep."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
