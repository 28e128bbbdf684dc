"""
HR Sourcing Agent Backend.

Core components:
- tools: LinkedIn search and agent platform clients
- services: Result cache, publishers, session and candidate stores
- api: Chat, search tool and candidate endpoints
"""
