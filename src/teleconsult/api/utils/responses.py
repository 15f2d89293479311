"""Error rendering shared by the exception handlers and the access middleware."""

from fastapi import Request
from fastapi.responses import JSONResponse

from ...core.exceptions import TeleconsultException
from ..schemas.common import ErrorResponse

# Upstream status codes and similar stay server-side outside development.
PUBLIC_DETAIL_KEYS = frozenset({"retryAfter"})


def _is_development(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.is_development)


def fail(
    request: Request,
    error: str,
    message: str,
    status_code: int,
    details: dict = None,
) -> JSONResponse:
    req_id = getattr(request.state, "request_id", None)
    body = ErrorResponse(
        error=error, message=message, details=details or None, request_id=req_id or ""
    )
    headers = {}
    retry_after = (details or {}).get("retryAfter")
    if retry_after:
        headers["Retry-After"] = str(retry_after)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers or None,
    )


def error_response(request: Request, exc: TeleconsultException) -> JSONResponse:
    """Render an exception; internal detail only in development."""
    if _is_development(request):
        message, details = exc.message, exc.details
    else:
        message = exc.public_message
        details = {k: v for k, v in exc.details.items() if k in PUBLIC_DETAIL_KEYS}
    return fail(request, exc.error_code, message, exc.http_status, details)
