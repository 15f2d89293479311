"""
Process-local session store.

Entries are lost on restart; clients simply request a new OTP. Individual
operations never await, so each one is atomic under the event loop.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from ...application.ports.repositories.session_store import SessionStore, T

logger = logging.getLogger(__name__)


class InMemorySessionStore(SessionStore[T]):
    """Dict-backed implementation of SessionStore."""

    def __init__(self, name: str = "sessions") -> None:
        self._name = name
        self._entries: Dict[str, T] = {}

    async def get(self, key: str) -> Optional[T]:
        return self._entries.get(key)

    async def set(self, key: str, session: T) -> None:
        self._entries[key] = session

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def find(self, predicate: Callable[[T], bool]) -> List[Tuple[str, T]]:
        return [(key, session) for key, session in list(self._entries.items()) if predicate(session)]

    async def sweep(self, now: float) -> int:
        expired = [key for key, session in self._entries.items() if session.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired entries from {self._name}")
        return len(expired)

    async def count(self) -> int:
        return len(self._entries)
