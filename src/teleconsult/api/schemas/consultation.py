"""
Request/response schemas for the consultation access and decrypt endpoints.

Field names on the wire are camelCase. Request bodies are deliberately
loose (``Any``): shape problems are reported by the use cases with the
same error codes the clients already handle, instead of pydantic's 422.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...core.utils.datetime_utils import iso_timestamp


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Requests

class PrecheckRequestSchema(CamelModel):
    mobile: Any = Field(None, description="Claimed mobile number (8-15 digits)")
    params: Any = Field(None, description="Link parameters as received in the URL")


class VerifyOtpRequestSchema(CamelModel):
    precheck_id: Any = Field(None, alias="precheckId")
    otp: Any = Field(None)


class DecryptRequestSchema(CamelModel):
    text: Any = Field(None, description="Encrypted link parameter")


class BatchDecryptRequestSchema(CamelModel):
    texts: Any = Field(None, description="List of {key, text} objects")


# Responses

class PrecheckResponseSchema(CamelModel):
    success: bool = True
    precheck_id: str = Field(..., alias="precheckId")
    masked_mobile: str = Field(..., alias="maskedMobile")
    link_hash: str = Field(..., alias="linkHash")
    expires_in: int = Field(..., alias="expiresIn", description="Seconds until the OTP expires")
    resend_cooldown_seconds: int = Field(..., alias="resendCooldownSeconds")
    appointment_hint: Optional[str] = Field(None, alias="appointmentHint")


class VerifyOtpResponseSchema(CamelModel):
    success: bool = True
    token: str
    expires_in: int = Field(..., alias="expiresIn", description="Seconds until the token expires")
    masked_mobile: str = Field(..., alias="maskedMobile")
    appointment_hint: Optional[str] = Field(None, alias="appointmentHint")


class RevokeResponseSchema(CamelModel):
    success: bool = True
    revoked: bool


class DecryptResponseSchema(CamelModel):
    success: bool = True
    decrypted_text: str = Field(..., alias="decryptedText")
    timestamp: str = Field(default_factory=iso_timestamp)


class BatchDecryptResponseSchema(CamelModel):
    success: bool = True
    results: Dict[str, str] = Field(default_factory=dict)
    errors: Optional[Dict[str, str]] = None
    timestamp: str = Field(default_factory=iso_timestamp)
