"""
Consultation access middleware - guards the decrypt endpoints that expose the
full link parameter set.

A caller must present the access token minted by OTP verification and the
link hash of the consultation link it is currently on. Errors are rendered
here because exceptions raised inside BaseHTTPMiddleware never reach the
app's exception handlers.
"""
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..api.deps import LINK_HEADER, extract_consultation_token, get_client_ip
from ..api.utils.responses import error_response
from ..core.container import ServiceNames
from ..domain.errors import ConsultationAccessError

logger = logging.getLogger(__name__)


class ConsultationAccessMiddleware(BaseHTTPMiddleware):
    """Enforce consultation access tokens on protected paths."""

    PROTECTED_PATHS = {
        "/consultation/decrypt",
        "/consultation/decrypt/batch",
    }

    def is_protected(self, request: Request) -> bool:
        if request.method == "OPTIONS":
            return False
        return (request.url.path.rstrip("/") or "/") in self.PROTECTED_PATHS

    async def dispatch(self, request: Request, call_next):
        if not self.is_protected(request):
            return await call_next(request)

        gate = request.app.state.container.get(ServiceNames.ACCESS_GATE)
        if not gate.enabled:
            return await call_next(request)

        try:
            grant = await gate.authorize(
                extract_consultation_token(request),
                (request.headers.get(LINK_HEADER) or "").strip() or None,
            )
        except ConsultationAccessError as exc:
            logger.warning(
                f"Consultation access denied ({exc.error_code}) for {request.url.path} "
                f"(IP: {get_client_ip(request)})",
                extra={"request_id": getattr(request.state, "request_id", None)},
            )
            return error_response(request, exc)

        request.state.consultation_access = grant.session
        return await call_next(request)
