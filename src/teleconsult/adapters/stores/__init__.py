"""In-memory storage adapters."""

from .in_memory_rate_limit_store import InMemoryRateLimitStore
from .in_memory_session_store import InMemorySessionStore

__all__ = [
    "InMemoryRateLimitStore",
    "InMemorySessionStore",
]
