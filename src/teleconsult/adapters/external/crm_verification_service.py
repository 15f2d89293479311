"""
CRM (TeleMobile API) implementation of the appointment/mobile verifier.

Env vars used (through settings):
- CRM_TELE_MOBILE_URL: verification endpoint
- CRM_REQUEST_TIMEOUT_SECONDS: per-request timeout
- plus the CRM_TOKEN_URL / CRM_USERNAME / CRM_PASSWORD used by the token cache
"""

import asyncio
import logging
from typing import Any, Dict, Tuple

import aiohttp

from ...application.ports.services.appointment_verifier import AppointmentVerifier
from ...core.config import CrmSettings
from ...core.exceptions import ExternalVerificationError
from ...core.utils.string_utils import mask_identifier, mask_mobile
from .crm_token_cache import CrmTokenCache
from .http_utils import read_json_body

logger = logging.getLogger(__name__)


class CrmAppointmentVerifier(AppointmentVerifier):
    """Asks the CRM whether a mobile number belongs to an appointment."""

    def __init__(self, settings: CrmSettings, token_cache: CrmTokenCache) -> None:
        self._settings = settings
        self._token_cache = token_cache

    async def verify_appointment_mobile(self, appointment_number: str, mobile: str) -> bool:
        if not self._settings.tele_mobile_url:
            raise ExternalVerificationError("TeleMobile URL (CRM_TELE_MOBILE_URL) is not configured")

        payload = {"Appno": appointment_number, "Mobno": mobile}

        token = await self._token_cache.get_token()
        status, body = await self._post(token, payload)

        if status == 401:
            logger.warning("CRM rejected cached token; refreshing once and retrying")
            token = await self._token_cache.get_token(force_refresh=True)
            status, body = await self._post(token, payload)

        if status < 200 or status >= 300:
            logger.error(
                f"CRM TeleMobile API error: status={status} body={body} "
                f"appointment={mask_identifier(appointment_number)} mobile={mask_mobile(mobile)}"
            )
            upstream = body.get("Message") or body.get("message") or f"HTTP {status}"
            raise ExternalVerificationError(
                f"CRM verification failed: {upstream}", details={"status": status}
            )

        verified = body.get("Status") == "Success"
        logger.info(
            f"CRM verification for appointment {mask_identifier(appointment_number)}: "
            f"Status={body.get('Status')}"
        )
        return verified

    async def _post(self, token: str, payload: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        headers = {"Authorization": f"Bearer {token}"}
        timeout = aiohttp.ClientTimeout(total=self._settings.request_timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self._settings.tele_mobile_url, json=payload, headers=headers
                ) as response:
                    return response.status, await read_json_body(response)
        except asyncio.TimeoutError as exc:
            logger.error(
                f"CRM verification timed out after {self._settings.request_timeout_seconds}s"
            )
            raise ExternalVerificationError("CRM verification timed out") from exc
        except aiohttp.ClientError as exc:
            logger.error(f"CRM verification request error: {exc!r}")
            raise ExternalVerificationError(f"CRM verification failed: {exc!r}") from exc
