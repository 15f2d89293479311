"""
Session store interface for ephemeral authorization state.

OTP challenges and access sessions both live behind this interface so a
process-local map and a shared cache are interchangeable.
"""

from typing import Callable, Generic, List, Optional, Protocol, Tuple, TypeVar


class Expiring(Protocol):
    expires_at: float

    def is_expired(self, now: float) -> bool:
        ...


T = TypeVar("T", bound=Expiring)


class SessionStore(Generic[T]):
    """Repository interface for expiring sessions keyed by an opaque id."""

    async def get(self, key: str) -> Optional[T]:
        """Return the session stored under ``key`` (expired or not)."""
        raise NotImplementedError

    async def set(self, key: str, session: T) -> None:
        """Insert or replace a session."""
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        """Remove a session; True when something was removed."""
        raise NotImplementedError

    async def find(self, predicate: Callable[[T], bool]) -> List[Tuple[str, T]]:
        """Return every (key, session) pair matching ``predicate``."""
        raise NotImplementedError

    async def sweep(self, now: float) -> int:
        """Evict expired sessions; returns how many were removed."""
        raise NotImplementedError

    async def count(self) -> int:
        raise NotImplementedError
