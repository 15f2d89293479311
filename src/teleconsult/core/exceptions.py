"""
Exception handling for the teleconsultation access service.

Every error carries two messages: ``message`` holds the internal detail
that is logged server-side, ``public_message`` is what a client sees
outside development. The HTTP layer picks between them in one place
(see ``api.utils.responses.error_response``).
"""

from typing import Any, Dict, Optional


class TeleconsultException(Exception):
    """Base exception class for the service."""

    error_code: str = "internal_error"
    http_status: int = 500
    public_message: str = "An unexpected error has occurred. Please try again later."

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        http_status: Optional[int] = None,
    ) -> None:
        self.message = message or self.public_message
        if error_code:
            self.error_code = error_code
        if http_status:
            self.http_status = http_status
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(TeleconsultException):
    """Raised when there's a configuration error."""

    error_code = "configuration_error"
    http_status = 500
    public_message = "Service is not configured correctly"


class ValidationError(TeleconsultException):
    """Raised when client input fails validation."""

    error_code = "invalid_input"
    http_status = 400
    public_message = "Invalid input"


class InvalidPayloadError(ValidationError):
    """Required request fields are missing or malformed."""

    error_code = "invalid_payload"
    public_message = "Request payload is missing required fields"


class InvalidMobileError(ValidationError):
    """Mobile number does not have a plausible shape."""

    error_code = "invalid_mobile"
    public_message = "Please provide a valid mobile number"


class InputTooLargeError(ValidationError):
    error_code = "input_too_large"
    public_message = "Encoded text is too large"


class BatchTooLargeError(ValidationError):
    """Batch request carries more items than allowed."""

    error_code = "too_many_items"
    public_message = "Too many items in batch request"

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(
            f"Maximum {limit} items allowed per batch request, got {count}",
            details={"limit": limit},
        )
        self.public_message = f"Maximum {limit} items allowed per batch request"


class ExternalServiceError(TeleconsultException):
    """Raised when a downstream dependency fails."""

    error_code = "downstream_error"
    http_status = 502

    def __init__(
        self, service: str, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.service = service
        super().__init__(f"{service} service error: {message}", details=details)


class ExternalVerificationError(ExternalServiceError):
    """The CRM appointment/mobile verification call failed."""

    error_code = "precheck_failed"
    public_message = "Unable to initiate verification"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("CRM", message, details)


class SmsDeliveryError(ExternalServiceError):
    """The OTP could not be handed to the SMS gateway."""

    error_code = "sms_delivery_failed"
    public_message = "Unable to send verification code"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("SMS", message, details)


class DecryptionError(TeleconsultException):
    """Ciphertext could not be decoded or decrypted."""

    error_code = "decryption_failed"
    http_status = 400
    public_message = "Invalid encrypted data"


class RateLimitExceededError(TeleconsultException):
    """Client exceeded the request budget for an endpoint."""

    error_code = "rate_limited"
    http_status = 429
    public_message = "Rate limit exceeded. Please try again later."

    def __init__(self, retry_after: int) -> None:
        super().__init__(
            f"Rate limit exceeded, retry after {retry_after}s",
            details={"retryAfter": retry_after},
        )
        self.retry_after = retry_after
