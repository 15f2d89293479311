"""Sliding-window rate limiter for the decrypt endpoints."""

import logging
import math

from ...core.config import RateLimitSettings
from ...core.utils.datetime_utils import Clock, system_clock
from ..dto.consultation_dto import RateLimitDecision
from ..ports.repositories.rate_limit_store import ClientRequestLog, RateLimitStore

logger = logging.getLogger(__name__)


class DecryptRateLimiter:
    """Per-client limiter: a sliding window with a fast-burst trip wire.

    A client is blocked for ``block_seconds`` when it either exceeds
    ``max_requests`` inside ``window_seconds`` or fires more than
    ``burst_allowance`` requests inside ``burst_min_interval_seconds``.
    """

    def __init__(
        self,
        settings: RateLimitSettings,
        store: RateLimitStore,
        clock: Clock = system_clock,
    ) -> None:
        self._settings = settings
        self._store = store
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    async def check(self, client_key: str) -> RateLimitDecision:
        if not self._settings.enabled:
            return RateLimitDecision(allowed=True)

        now = self._clock()
        await self._evict_if_crowded(now)

        log = await self._store.load(client_key) or ClientRequestLog()
        log.last_seen = now

        if log.blocked_until is not None:
            if now < log.blocked_until:
                await self._store.save(client_key, log)
                return RateLimitDecision(
                    allowed=False,
                    retry_after=max(1, math.ceil(log.blocked_until - now)),
                    reason="blocked",
                )
            log.blocked_until = None

        s = self._settings
        log.timestamps = [t for t in log.timestamps if now - t < s.window_seconds]

        burst = [t for t in log.timestamps if now - t < s.burst_window_seconds]
        if (
            len(burst) >= s.burst_allowance
            and now - burst[-s.burst_allowance] < s.burst_min_interval_seconds
        ):
            return await self._block(client_key, log, now, "burst")

        log.timestamps.append(now)
        if len(log.timestamps) > s.max_requests:
            return await self._block(client_key, log, now, "window")

        await self._store.save(client_key, log)
        return RateLimitDecision(allowed=True)

    async def _block(
        self, client_key: str, log: ClientRequestLog, now: float, reason: str
    ) -> RateLimitDecision:
        log.blocked_until = now + self._settings.block_seconds
        await self._store.save(client_key, log)
        logger.warning(f"Decrypt rate limit tripped ({reason}) for client {client_key}")
        return RateLimitDecision(
            allowed=False,
            retry_after=max(1, math.ceil(self._settings.block_seconds)),
            reason=reason,
        )

    async def _evict_if_crowded(self, now: float) -> None:
        if await self._store.size() > self._settings.max_tracked_clients:
            await self.evict_idle(now)

    async def evict_idle(self, now: float) -> int:
        removed = await self._store.evict_idle(now - self._settings.idle_eviction_seconds)
        if removed:
            logger.debug(f"Evicted {removed} idle rate-limit entries")
        return removed
