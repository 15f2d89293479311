"""
Link field decryption endpoints.

The ungated variants here serve low-sensitivity display fields (doctor name,
appointment slot) before OTP verification. The gated variants under
/consultation reuse the handlers below behind the access middleware.
"""

import logging

from fastapi import APIRouter, Depends, Request

from ..deps import DecryptionServiceDep, enforce_decrypt_rate_limit, get_client_ip
from ..schemas.consultation import (
    BatchDecryptRequestSchema,
    BatchDecryptResponseSchema,
    DecryptRequestSchema,
    DecryptResponseSchema,
)
from ...application.use_cases.decrypt_link_fields import LinkDecryptionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["decrypt"], dependencies=[Depends(enforce_decrypt_rate_limit)])


def decrypt_single_response(
    request: Request, payload: DecryptRequestSchema, service: LinkDecryptionService
) -> DecryptResponseSchema:
    plaintext = service.decrypt_single(payload.text)
    logger.info(f"Decrypt endpoint accessed by IP: {get_client_ip(request)}")
    return DecryptResponseSchema(decrypted_text=plaintext)


def decrypt_batch_response(
    request: Request, payload: BatchDecryptRequestSchema, service: LinkDecryptionService
) -> BatchDecryptResponseSchema:
    outcome = service.decrypt_batch(payload.texts)
    logger.info(
        f"Batch decrypt endpoint accessed by IP: {get_client_ip(request)}, "
        f"items: {outcome.item_count}, failed: {len(outcome.errors)}"
    )
    return BatchDecryptResponseSchema(
        results=outcome.results,
        errors=outcome.errors or None,
    )


@router.post("/decrypt", response_model=DecryptResponseSchema)
async def decrypt(request: Request, payload: DecryptRequestSchema, service: DecryptionServiceDep):
    """Decrypt one link parameter."""
    return decrypt_single_response(request, payload, service)


@router.post(
    "/decrypt/batch",
    response_model=BatchDecryptResponseSchema,
    response_model_exclude_none=True,
)
async def decrypt_batch(
    request: Request, payload: BatchDecryptRequestSchema, service: DecryptionServiceDep
):
    """Decrypt several link parameters; one bad item does not fail the others."""
    return decrypt_batch_response(request, payload, service)
