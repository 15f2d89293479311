import asyncio
import logging

from ..core.container import Container, ServiceNames

logger = logging.getLogger(__name__)


async def sweep_once(container: Container) -> dict:
    """
    Evict expired OTP and access sessions and idle rate-limit entries.
    """
    now = container.get(ServiceNames.CLOCK)()
    removed = {
        "otp": await container.get(ServiceNames.OTP_STORE).sweep(now),
        "access": await container.get(ServiceNames.ACCESS_STORE).sweep(now),
        "rate_limit": await container.get(ServiceNames.RATE_LIMITER).evict_idle(now),
    }
    if any(removed.values()):
        logger.info(
            f"[SessionSweeper] Evicted otp={removed['otp']} access={removed['access']} "
            f"rate_limit={removed['rate_limit']}"
        )
    return removed


async def run_session_sweeper_forever(container: Container) -> None:
    """
    Run the sweeper every ``session_sweep_interval_seconds`` until cancelled.
    """
    interval = container.settings.session_sweep_interval_seconds
    logger.info(f"[SessionSweeper] Starting (interval={interval}s)")

    while True:
        try:
            await sweep_once(container)
        except Exception as e:  # noqa: BLE001
            logger.error(f"[SessionSweeper] Sweep iteration failed: {e}", exc_info=True)
        await asyncio.sleep(interval)
