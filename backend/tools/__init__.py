"""
Clients for external services.

- linkedin_search: Candidate search via the RapidAPI LinkedIn data API
- agent_platform: Chat with the hosted sourcing agent
"""

from backend.tools.agent_platform import AgentPlatformClient, AgentReply
from backend.tools.linkedin_search import (
    LinkedInProfile,
    LinkedInSearchClient,
    SearchCriteria,
    SearchResults,
    calculate_years_of_experience,
    format_profile_for_display,
    format_profile_for_llm,
)

__all__ = [
    "AgentPlatformClient",
    "AgentReply",
    "LinkedInProfile",
    "LinkedInSearchClient",
    "SearchCriteria",
    "SearchResults",
    "calculate_years_of_experience",
    "format_profile_for_display",
    "format_profile_for_llm",
]
