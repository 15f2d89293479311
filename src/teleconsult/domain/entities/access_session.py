"""Consultation access session entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ConsultationAccessSession:
    """Live authorization fact created by a successful OTP verification.

    Read-only once created; the gate never mutates it.
    """

    appointment_number: str
    mobile_hash: str
    link_hash: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
