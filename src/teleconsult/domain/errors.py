"""
Domain-specific error types for consultation access rule violations.

Messages are deliberately generic: none of them reveal whether an
appointment exists, why a link failed to resolve, or how many attempts
remain.
"""

from typing import Optional

from ..core.exceptions import TeleconsultException


class DomainError(TeleconsultException):
    """Base domain error."""

    error_code = "domain_error"
    http_status = 400
    public_message = "Request could not be completed"


class InvalidLinkError(DomainError):
    """No appointment number could be derived from the link."""

    error_code = "invalid_link"
    public_message = "Unable to locate appointment number from link"


class InvalidLinkHashError(DomainError):
    error_code = "invalid_link_hash"
    public_message = "Unable to validate encrypted link"


class MobileMismatchError(DomainError):
    """Mobile number is not registered against the appointment."""

    error_code = "mobile_mismatch"
    public_message = "The entered mobile number does not match this appointment"


class OtpThrottledError(DomainError):
    """An OTP was sent to this mobile within the resend cooldown."""

    error_code = "otp_throttled"
    http_status = 429
    public_message = "OTP already sent. Please wait before requesting again."

    def __init__(self, retry_after: Optional[int] = None) -> None:
        details = {"retryAfter": retry_after} if retry_after is not None else None
        super().__init__(self.public_message, details=details)
        self.retry_after = retry_after


class OtpExpiredError(DomainError):
    """Challenge is unknown or past its expiry; both look the same to callers."""

    error_code = "otp_expired"
    public_message = "OTP has expired. Please restart verification."


class OtpAttemptsExceededError(DomainError):
    error_code = "otp_attempts_exceeded"
    http_status = 429
    public_message = "Too many invalid attempts. Please request a new OTP."


class OtpInvalidError(DomainError):
    error_code = "otp_invalid"
    public_message = "Invalid OTP. Please try again."


class ConsultationAccessError(DomainError):
    """Base for access-gate rejections."""

    http_status = 401
    public_message = "Consultation access token is invalid or expired"


class ConsultationTokenRequiredError(ConsultationAccessError):
    error_code = "consultation_token_required"
    public_message = "Consultation access token is required"


class ConsultationTokenInvalidError(ConsultationAccessError):
    error_code = "consultation_token_invalid"


class ConsultationTokenExpiredError(ConsultationAccessError):
    error_code = "consultation_token_expired"


class ConsultationLinkMismatchError(ConsultationAccessError):
    """Token was minted for a different consultation link."""

    error_code = "consultation_link_mismatch"
    http_status = 403
    public_message = "Encrypted link verification failed"
