"""Consultation access DTOs passed between the API layer and use cases."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ...domain.entities.access_session import ConsultationAccessSession


@dataclass
class PrecheckRequest:
    """Request DTO for starting OTP verification."""

    mobile: Any
    params: Any


@dataclass
class PrecheckResult:
    """Response DTO for a successful precheck. Never carries the code, hash or salt."""

    precheck_id: str
    masked_mobile: str
    link_hash: str
    expires_in: int
    resend_cooldown_seconds: int
    appointment_hint: Optional[str]


@dataclass
class VerifyOtpRequest:
    """Request DTO for OTP verification."""

    precheck_id: Any
    otp: Any


@dataclass
class VerifyOtpResult:
    """Response DTO for a successful verification."""

    access_token: str
    expires_in: int
    masked_mobile: str
    appointment_hint: Optional[str]


@dataclass
class AccessGrant:
    """Resolved access session attached to a gated request."""

    token: str
    session: ConsultationAccessSession


@dataclass
class BatchDecryptResult:
    """Per-key plaintexts and per-key failures from one batch call."""

    results: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def item_count(self) -> int:
        return len(self.results) + len(self.errors)


@dataclass
class RateLimitDecision:
    allowed: bool
    retry_after: int = 0
    reason: Optional[str] = None
