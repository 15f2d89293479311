"""
In-memory rate limit storage, one log per client key.
"""

from typing import Dict, Optional

from ...application.ports.repositories.rate_limit_store import ClientRequestLog, RateLimitStore


class InMemoryRateLimitStore(RateLimitStore):
    def __init__(self) -> None:
        self._logs: Dict[str, ClientRequestLog] = {}

    async def load(self, client_key: str) -> Optional[ClientRequestLog]:
        return self._logs.get(client_key)

    async def save(self, client_key: str, log: ClientRequestLog) -> None:
        self._logs[client_key] = log

    async def evict_idle(self, older_than: float) -> int:
        stale = [
            key
            for key, log in self._logs.items()
            if log.last_seen < older_than
            and (log.blocked_until is None or log.blocked_until < older_than)
        ]
        for key in stale:
            del self._logs[key]
        return len(stale)

    async def size(self) -> int:
        return len(self._logs)
