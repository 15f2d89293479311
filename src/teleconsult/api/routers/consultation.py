"""
Consultation access endpoints: OTP precheck, OTP verification, token
revocation, and the decrypt endpoints that require an access token.
"""

from fastapi import APIRouter, Depends, Request

from ...application.dto.consultation_dto import PrecheckRequest, VerifyOtpRequest
from ..deps import (
    AccessGateDep,
    DecryptionServiceDep,
    PrecheckUseCaseDep,
    VerifyOtpUseCaseDep,
    enforce_decrypt_rate_limit,
    extract_consultation_token,
)
from ..schemas.consultation import (
    BatchDecryptRequestSchema,
    BatchDecryptResponseSchema,
    DecryptRequestSchema,
    DecryptResponseSchema,
    PrecheckRequestSchema,
    PrecheckResponseSchema,
    RevokeResponseSchema,
    VerifyOtpRequestSchema,
    VerifyOtpResponseSchema,
)
from .decrypt import decrypt_batch_response, decrypt_single_response


router = APIRouter(prefix="/consultation", tags=["consultation"])


@router.post("/precheck", response_model=PrecheckResponseSchema)
async def precheck(payload: PrecheckRequestSchema, use_case: PrecheckUseCaseDep):
    """
    Validate a mobile number against the link's appointment and send an OTP.

    Returns the precheck id the client submits with the code. The code
    itself only travels by SMS.
    """
    result = await use_case.execute(PrecheckRequest(mobile=payload.mobile, params=payload.params))
    return PrecheckResponseSchema(
        precheck_id=result.precheck_id,
        masked_mobile=result.masked_mobile,
        link_hash=result.link_hash,
        expires_in=result.expires_in,
        resend_cooldown_seconds=result.resend_cooldown_seconds,
        appointment_hint=result.appointment_hint,
    )


@router.post("/verify-otp", response_model=VerifyOtpResponseSchema)
async def verify_otp(payload: VerifyOtpRequestSchema, use_case: VerifyOtpUseCaseDep):
    """Check an OTP and exchange it for a consultation access token."""
    result = await use_case.execute(
        VerifyOtpRequest(precheck_id=payload.precheck_id, otp=payload.otp)
    )
    return VerifyOtpResponseSchema(
        token=result.access_token,
        expires_in=result.expires_in,
        masked_mobile=result.masked_mobile,
        appointment_hint=result.appointment_hint,
    )


@router.post("/revoke", response_model=RevokeResponseSchema)
async def revoke(request: Request, gate: AccessGateDep):
    """Drop the caller's access token, e.g. when the patient changes the mobile number."""
    revoked = await gate.revoke(extract_consultation_token(request))
    return RevokeResponseSchema(revoked=revoked)


@router.post(
    "/decrypt",
    response_model=DecryptResponseSchema,
    dependencies=[Depends(enforce_decrypt_rate_limit)],
)
async def decrypt(request: Request, payload: DecryptRequestSchema, service: DecryptionServiceDep):
    return decrypt_single_response(request, payload, service)


@router.post(
    "/decrypt/batch",
    response_model=BatchDecryptResponseSchema,
    response_model_exclude_none=True,
    dependencies=[Depends(enforce_decrypt_rate_limit)],
)
async def decrypt_batch(
    request: Request, payload: BatchDecryptRequestSchema, service: DecryptionServiceDep
):
    """Decrypt the full link parameter set for a verified caller."""
    return decrypt_batch_response(request, payload, service)
