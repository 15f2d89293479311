"""Verify OTP use case: check a submitted code and mint a consultation access token."""

import logging

from ...core.config import AccessSettings, OtpSettings
from ...core.exceptions import InvalidPayloadError
from ...core.utils.crypto_utils import constant_time_equals, generate_access_token, hash_otp
from ...core.utils.datetime_utils import Clock, system_clock
from ...core.utils.string_utils import mask_identifier
from ...domain.entities.access_session import ConsultationAccessSession
from ...domain.entities.otp_session import OtpSession
from ...domain.errors import OtpAttemptsExceededError, OtpExpiredError, OtpInvalidError
from ..dto.consultation_dto import VerifyOtpRequest, VerifyOtpResult
from ..ports.repositories.session_store import SessionStore

logger = logging.getLogger(__name__)


class VerifyConsultationOtpUseCase:
    """Use case for verifying an OTP challenge.

    Attempts count verification calls, not failures: the counter is bumped
    before the hash comparison, so a correct code on a call past the limit
    is still refused.
    """

    def __init__(
        self,
        otp_settings: OtpSettings,
        access_settings: AccessSettings,
        otp_store: SessionStore[OtpSession],
        access_store: SessionStore[ConsultationAccessSession],
        clock: Clock = system_clock,
    ) -> None:
        self._otp_settings = otp_settings
        self._access_settings = access_settings
        self._otp_store = otp_store
        self._access_store = access_store
        self._clock = clock

    async def execute(self, request: VerifyOtpRequest) -> VerifyOtpResult:
        precheck_id = _clean(request.precheck_id)
        otp = _clean(request.otp)
        if not precheck_id or not otp:
            raise InvalidPayloadError("precheckId and otp are required")

        session = await self._otp_store.get(precheck_id)
        if session is None:
            logger.info("OTP verify failed: unknown precheck id")
            raise OtpExpiredError("No OTP session for precheck id")

        now = self._clock()
        if session.is_expired(now):
            await self._otp_store.delete(precheck_id)
            logger.info(f"OTP verify failed: session expired for {session.masked_mobile}")
            raise OtpExpiredError("OTP session expired")

        attempts = session.register_attempt()
        await self._otp_store.set(precheck_id, session)
        if attempts > self._otp_settings.max_attempts:
            await self._otp_store.delete(precheck_id)
            logger.warning(
                f"OTP verify failed: attempts exceeded ({attempts}) for {session.masked_mobile}"
            )
            raise OtpAttemptsExceededError(f"Attempt {attempts} exceeds limit")

        if not constant_time_equals(hash_otp(session.otp_salt, otp), session.otp_hash):
            logger.info(
                f"OTP verify failed: code mismatch (attempt {attempts}) for {session.masked_mobile}"
            )
            raise OtpInvalidError(f"OTP mismatch on attempt {attempts}")

        await self._otp_store.delete(precheck_id)

        token = generate_access_token()
        ttl = self._access_settings.token_ttl_seconds
        await self._access_store.set(
            token,
            ConsultationAccessSession(
                appointment_number=session.appointment_number,
                mobile_hash=session.mobile_hash,
                link_hash=session.link_hash,
                expires_at=now + ttl,
            ),
        )
        logger.info(
            f"OTP verified for appointment {mask_identifier(session.appointment_number)} "
            f"({session.masked_mobile}); access token issued"
        )
        return VerifyOtpResult(
            access_token=token,
            expires_in=int(round(ttl)),
            masked_mobile=session.masked_mobile,
            appointment_hint=mask_identifier(session.appointment_number),
        )


def _clean(value) -> str:
    if value is None:
        return ""
    return str(value).strip()
