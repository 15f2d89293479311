"""
Appointment verification service interface (external system of record).
"""

from abc import ABC, abstractmethod


class AppointmentVerifier(ABC):
    """Checks a claimed mobile number against an appointment."""

    @abstractmethod
    async def verify_appointment_mobile(self, appointment_number: str, mobile: str) -> bool:
        """
        Ask the system of record whether ``mobile`` belongs to ``appointment_number``.

        Returns:
            True only when the upstream reports a match.

        Raises:
            ExternalVerificationError: upstream unreachable, timed out or erroring.
        """
        pass
