"""
Airtel IQ SMS gateway implementation of SmsSender.

Env vars used (through settings):
- OTP_SMS_URL, OTP_SMS_CUSTOMER_ID, OTP_SMS_USER, OTP_SMS_PASSWORD
- OTP_SMS_TEMPLATE_ID, OTP_SMS_ENTITY_ID: DLT registration
- OTP_SMS_MESSAGE: DLT-approved template with a {#var#} slot for the code
"""

import asyncio
import logging
from typing import Any, Dict

import aiohttp

from ...application.ports.services.sms_sender import SmsSender
from ...core.config import SmsSettings
from ...core.exceptions import SmsDeliveryError
from ...core.utils.string_utils import last_ten_digits, mask_mobile
from .http_utils import read_json_body

logger = logging.getLogger(__name__)

OTP_PLACEHOLDER = "{#var#}"


def body_reports_failure(body: Dict[str, Any]) -> bool:
    """The gateway can answer 2xx and still reject the message (DLT, template)."""
    if not body:
        return False
    status = body.get("status")
    if isinstance(status, str) and status.lower() == "failed":
        return True
    if isinstance(status, (int, float)) and not isinstance(status, bool) and status != 0:
        return True
    error = body.get("error")
    if isinstance(error, dict) and (error.get("code") or error.get("message")):
        return True
    message = body.get("message")
    return isinstance(message, str) and "fail" in message.lower()


class AirtelSmsSender(SmsSender):
    def __init__(self, settings: SmsSettings) -> None:
        self._settings = settings

    def _build_payload(self, mobile: str, otp_code: str) -> Dict[str, Any]:
        s = self._settings
        return {
            "customerId": s.customer_id,
            "destinationAddress": last_ten_digits(mobile),
            "message": s.message.replace(OTP_PLACEHOLDER, otp_code),
            "sourceAddress": s.source_address or "KAUVRY",
            "messageType": s.message_type or "SERVICE_IMPLICIT",
            "dltTemplateId": s.template_id,
            "entityId": s.entity_id,
        }

    async def send_otp(self, mobile: str, otp_code: str) -> Dict[str, Any]:
        if not self._settings.is_configured:
            logger.error("SMS config missing: OTP_SMS_USER/OTP_SMS_CUSTOMER_ID and OTP_SMS_PASSWORD must be set")
            raise SmsDeliveryError("SMS configuration incomplete")

        payload = self._build_payload(mobile, otp_code)
        masked = mask_mobile(payload["destinationAddress"])
        auth = aiohttp.BasicAuth(self._settings.auth_user, self._settings.password)
        timeout = aiohttp.ClientTimeout(total=self._settings.timeout_seconds)
        ssl = None if self._settings.verify_ssl else False

        logger.info(f"Sending OTP SMS to {masked}")
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self._settings.url, json=payload, auth=auth, ssl=ssl
                ) as response:
                    status = response.status
                    body = await read_json_body(response)
        except asyncio.TimeoutError as exc:
            logger.error(f"SMS gateway timed out after {self._settings.timeout_seconds}s ({masked})")
            raise SmsDeliveryError("SMS gateway timed out") from exc
        except aiohttp.ClientError as exc:
            logger.error(f"SMS gateway request error for {masked}: {exc!r}")
            raise SmsDeliveryError(f"SMS gateway request failed: {exc!r}") from exc

        if status < 200 or status >= 300:
            logger.error(f"SMS gateway error: status={status} body={body}")
            upstream = body.get("detail") or body.get("message") or body.get("error") or f"HTTP {status}"
            raise SmsDeliveryError(f"Failed to send OTP: {upstream}", details={"status": status})

        if body_reports_failure(body):
            logger.error(f"SMS provider reported failure: body={body}")
            raise SmsDeliveryError("SMS provider reported failure", details={"status": status})

        logger.info(f"✅ OTP SMS accepted for {masked}")
        return {"delivered": True, "providerResponse": body}
