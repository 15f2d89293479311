"""
Rate limit storage interface.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ClientRequestLog:
    """Request history for one client key."""

    timestamps: List[float] = field(default_factory=list)
    blocked_until: Optional[float] = None
    last_seen: float = 0.0


class RateLimitStore:
    """Repository interface for per-client request logs."""

    async def load(self, client_key: str) -> Optional[ClientRequestLog]:
        raise NotImplementedError

    async def save(self, client_key: str, log: ClientRequestLog) -> None:
        raise NotImplementedError

    async def evict_idle(self, older_than: float) -> int:
        """Drop logs whose ``last_seen`` is before ``older_than``."""
        raise NotImplementedError

    async def size(self) -> int:
        raise NotImplementedError
