"""
Services behind the API routes.

- result_cache: In-memory TTL cache of tool results per session
- publisher: Delivery of tool results to the waiting chat request
- sessions: Search session store
- candidates: Candidate profile storage
"""

from backend.services.publisher import ResultPublisher, build_publisher
from backend.services.result_cache import CachedToolResult, ResultCache

__all__ = ["CachedToolResult", "ResultCache", "ResultPublisher", "build_publisher"]
