"""
Bearer token cache for the CRM appointment API.

One token is shared by every caller. Two coroutines may refresh at the same
time; the later response simply overwrites the earlier one.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from ...core.config import CrmSettings
from ...core.exceptions import ExternalVerificationError
from ...core.utils.datetime_utils import Clock, system_clock
from .http_utils import read_json_body

logger = logging.getLogger(__name__)


class CrmTokenCache:
    def __init__(self, settings: CrmSettings, clock: Clock = system_clock) -> None:
        self._settings = settings
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at: float = 0.0

    def _is_fresh(self) -> bool:
        margin = self._settings.token_refresh_margin_seconds
        return bool(self._token) and self._expires_at > self._clock() + margin

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0

    async def get_token(self, force_refresh: bool = False) -> str:
        """Return a cached token, fetching a new one when close to expiry or forced."""
        if not self._settings.username or not self._settings.password:
            raise ExternalVerificationError("CRM credentials (CRM_USERNAME/CRM_PASSWORD) are not configured")
        if not self._settings.token_url:
            raise ExternalVerificationError("CRM token URL (CRM_TOKEN_URL) is not configured")

        if not force_refresh and self._is_fresh():
            return self._token  # type: ignore[return-value]

        form = {
            "UserName": self._settings.username,
            "Password": self._settings.password,
            "grant_type": self._settings.grant_type,
        }
        timeout = aiohttp.ClientTimeout(total=self._settings.request_timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self._settings.token_url, data=form) as response:
                    body = await read_json_body(response)
                    if response.status >= 400:
                        logger.error(
                            f"CRM token acquisition failed: status={response.status} body={body}"
                        )
                        reason = body.get("error_description") or body.get("error") or f"HTTP {response.status}"
                        raise ExternalVerificationError(
                            f"CRM authentication failed: {reason}",
                            details={"status": response.status},
                        )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error(f"CRM token request error: {exc!r}")
            raise ExternalVerificationError(f"CRM authentication failed: {exc!r}") from exc

        token = body.get("access_token")
        if not token:
            raise ExternalVerificationError("CRM token response did not include access_token")

        try:
            expires_in = float(body.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0.0
        if expires_in <= 0:
            expires_in = self._settings.default_token_ttl_seconds

        self._token = token
        self._expires_at = self._clock() + expires_in
        logger.info(f"CRM token refreshed (expires in {int(expires_in)}s)")
        return token
