"""Resolve and verify the appointment a consultation link points at."""

import logging

from ...core.exceptions import DecryptionError
from ...core.utils.crypto import decrypt_text
from ...core.utils.string_utils import last_ten_digits
from ...domain.errors import InvalidLinkError
from ...domain.value_objects.link_parameters import LinkParameters
from ..ports.services.appointment_verifier import AppointmentVerifier

logger = logging.getLogger(__name__)

# Tried in order; the first one present and decryptable wins.
ENCRYPTED_APPOINTMENT_KEYS = ("a", "app_no_enc")
# Links generated before parameter encryption carry the number in clear.
PLAIN_APPOINTMENT_KEYS = ("app_no", "appointment", "appointmentNumber", "appointment_no")


class AppointmentResolver:
    """Derives the appointment number from a link and cross-checks a mobile against it."""

    def __init__(self, decrypt_key: str, verifier: AppointmentVerifier) -> None:
        self._decrypt_key = decrypt_key
        self._verifier = verifier

    def resolve_appointment_number(self, params: LinkParameters) -> str:
        for key in ENCRYPTED_APPOINTMENT_KEYS:
            ciphertext = params.get(key)
            if not ciphertext:
                continue
            try:
                appointment_number = decrypt_text(self._decrypt_key, ciphertext).strip()
            except DecryptionError as exc:
                logger.warning(f"Failed to decrypt appointment field '{key}': {exc.message}")
                continue
            if appointment_number:
                return appointment_number

        for key in PLAIN_APPOINTMENT_KEYS:
            value = params.get(key)
            if value and value.strip():
                return value.strip()

        raise InvalidLinkError("No decryptable appointment field found in link parameters")

    async def verify_appointment_mobile(self, appointment_number: str, mobile: str) -> bool:
        """True only when the system of record confirms the mobile for this appointment."""
        return await self._verifier.verify_appointment_mobile(
            str(appointment_number).strip(), last_ten_digits(mobile)
        )
