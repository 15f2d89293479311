"""OTP session entity: one pending verification challenge."""

from dataclasses import dataclass


@dataclass
class OtpSession:
    """Pending OTP challenge keyed by its precheck id.

    Holds only hashes of the mobile number and of the code.
    """

    appointment_number: str
    mobile_hash: str
    masked_mobile: str
    otp_hash: str
    otp_salt: str
    link_hash: str
    created_at: float
    expires_at: float
    attempts: int = 0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def in_cooldown(self, now: float, cooldown_seconds: float) -> bool:
        return now - self.created_at < cooldown_seconds

    def register_attempt(self) -> int:
        self.attempts += 1
        return self.attempts
