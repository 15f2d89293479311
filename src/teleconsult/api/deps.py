"""FastAPI dependency providers.

Services come from the per-app container on ``app.state.container``.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request

from ..application.use_cases.authorize_consultation_access import ConsultationAccessGate
from ..application.use_cases.check_rate_limit import DecryptRateLimiter
from ..application.use_cases.decrypt_link_fields import LinkDecryptionService
from ..application.use_cases.precheck_consultation import PrecheckConsultationUseCase
from ..application.use_cases.verify_consultation_otp import VerifyConsultationOtpUseCase
from ..core.container import Container, ServiceNames
from ..core.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

TOKEN_HEADER = "X-Consultation-Token"
LINK_HEADER = "X-Consultation-Link"


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def extract_consultation_token(request: Request) -> Optional[str]:
    token = request.headers.get(TOKEN_HEADER)
    if token and token.strip():
        return token.strip()
    auth_header = request.headers.get("Authorization") or ""
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_precheck_use_case(
    container: Annotated[Container, Depends(get_container)]
) -> PrecheckConsultationUseCase:
    return container.get(ServiceNames.PRECHECK_USE_CASE)


def get_verify_otp_use_case(
    container: Annotated[Container, Depends(get_container)]
) -> VerifyConsultationOtpUseCase:
    return container.get(ServiceNames.VERIFY_OTP_USE_CASE)


def get_access_gate(
    container: Annotated[Container, Depends(get_container)]
) -> ConsultationAccessGate:
    return container.get(ServiceNames.ACCESS_GATE)


def get_decryption_service(
    container: Annotated[Container, Depends(get_container)]
) -> LinkDecryptionService:
    return container.get(ServiceNames.DECRYPTION_SERVICE)


def get_rate_limiter(
    container: Annotated[Container, Depends(get_container)]
) -> DecryptRateLimiter:
    return container.get(ServiceNames.RATE_LIMITER)


async def enforce_decrypt_rate_limit(
    request: Request,
    limiter: Annotated[DecryptRateLimiter, Depends(get_rate_limiter)],
) -> None:
    client_ip = get_client_ip(request)
    decision = await limiter.check(client_ip)
    if not decision.allowed:
        logger.warning(
            f"Decrypt request rejected for {client_ip} ({decision.reason}); "
            f"retry after {decision.retry_after}s"
        )
        raise RateLimitExceededError(retry_after=decision.retry_after)


PrecheckUseCaseDep = Annotated[PrecheckConsultationUseCase, Depends(get_precheck_use_case)]
VerifyOtpUseCaseDep = Annotated[VerifyConsultationOtpUseCase, Depends(get_verify_otp_use_case)]
AccessGateDep = Annotated[ConsultationAccessGate, Depends(get_access_gate)]
DecryptionServiceDep = Annotated[LinkDecryptionService, Depends(get_decryption_service)]
