"""Precheck use case: validate a mobile against the link's appointment and send an OTP."""

import logging
import math

from ...core.config import OtpSettings
from ...core.exceptions import InvalidMobileError, InvalidPayloadError
from ...core.utils.crypto_utils import (
    generate_otp_code,
    generate_precheck_id,
    generate_salt,
    hash_otp,
    hash_value,
)
from ...core.utils.datetime_utils import Clock, system_clock
from ...core.utils.string_utils import (
    is_valid_mobile,
    last_ten_digits,
    mask_identifier,
    mask_mobile,
)
from ...domain.entities.otp_session import OtpSession
from ...domain.errors import MobileMismatchError, OtpThrottledError
from ...domain.value_objects.link_parameters import LinkParameters
from ..dto.consultation_dto import PrecheckRequest, PrecheckResult
from ..ports.repositories.session_store import SessionStore
from ..ports.services.sms_sender import SmsSender
from .resolve_appointment import AppointmentResolver

logger = logging.getLogger(__name__)


class PrecheckConsultationUseCase:
    """Use case for issuing an OTP challenge for a consultation link."""

    def __init__(
        self,
        otp_settings: OtpSettings,
        resolver: AppointmentResolver,
        sms_sender: SmsSender,
        otp_store: SessionStore[OtpSession],
        clock: Clock = system_clock,
    ) -> None:
        self._settings = otp_settings
        self._resolver = resolver
        self._sms_sender = sms_sender
        self._otp_store = otp_store
        self._clock = clock

    async def execute(self, request: PrecheckRequest) -> PrecheckResult:
        """Execute the precheck.

        Steps run in a fixed order: payload, mobile shape, appointment
        resolution, link hash, CRM cross-check, resend cooldown, then
        challenge creation and SMS dispatch.
        """
        if request.params is None:
            raise InvalidPayloadError("Encrypted parameters are required")
        params = LinkParameters.from_mapping(request.params)

        if not is_valid_mobile(request.mobile):
            raise InvalidMobileError(f"Mobile failed shape check (masked={mask_mobile(str(request.mobile or ''))})")
        mobile = str(request.mobile).strip()
        # Country-code and trunk-prefix variants reach the same handset; key on the national number.
        national_mobile = last_ten_digits(mobile)
        masked = mask_mobile(national_mobile)

        appointment_number = self._resolver.resolve_appointment_number(params)
        link_hash = params.link_hash()

        if not await self._resolver.verify_appointment_mobile(appointment_number, mobile):
            logger.info(f"Precheck rejected: CRM mobile mismatch for mobile {masked}")
            raise MobileMismatchError(
                f"CRM reported no match for appointment {mask_identifier(appointment_number)}"
            )

        now = self._clock()
        mobile_hash = hash_value(national_mobile)

        # Scan-then-insert is not atomic across the awaits below: two concurrent
        # prechecks for one mobile can both pass and both send an SMS. Accepted.
        recent = await self._otp_store.find(
            lambda s: s.mobile_hash == mobile_hash
            and s.in_cooldown(now, self._settings.resend_cooldown_seconds)
        )
        if recent:
            newest = max(session.created_at for _, session in recent)
            retry_after = max(
                1, math.ceil(self._settings.resend_cooldown_seconds - (now - newest))
            )
            logger.info(f"Precheck throttled (resend cooldown) for mobile {masked}")
            raise OtpThrottledError(retry_after=retry_after)

        otp_code = generate_otp_code(self._settings.length)
        otp_salt = generate_salt()
        precheck_id = generate_precheck_id()
        session = OtpSession(
            appointment_number=appointment_number,
            mobile_hash=mobile_hash,
            masked_mobile=masked,
            otp_hash=hash_otp(otp_salt, otp_code),
            otp_salt=otp_salt,
            link_hash=link_hash,
            created_at=now,
            expires_at=now + self._settings.ttl_seconds,
        )
        await self._otp_store.set(precheck_id, session)

        try:
            await self._sms_sender.send_otp(mobile, otp_code)
        except BaseException:
            # Also covers cancellation, so no undelivered challenge holds the cooldown.
            await self._otp_store.delete(precheck_id)
            logger.error(
                f"Precheck failed: SMS dispatch error for appointment "
                f"{mask_identifier(appointment_number)} mobile {masked}"
            )
            raise

        logger.info(
            f"Precheck OK: OTP sent for appointment {mask_identifier(appointment_number)} to {masked}"
        )
        return PrecheckResult(
            precheck_id=precheck_id,
            masked_mobile=masked,
            link_hash=link_hash,
            expires_in=int(round(self._settings.ttl_seconds)),
            resend_cooldown_seconds=int(round(self._settings.resend_cooldown_seconds)),
            appointment_hint=mask_identifier(appointment_number),
        )
