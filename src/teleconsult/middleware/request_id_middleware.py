"""
Request ID middleware - tags every request and response with X-Request-ID.
"""
import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_REQUEST_ID_LENGTH = 128


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse a caller-supplied request id or mint one, and time the request."""

    async def dispatch(self, request: Request, call_next):
        incoming = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
        request_id = incoming[:_MAX_REQUEST_ID_LENGTH] if incoming else str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({round(process_time * 1000, 2)}ms)",
            extra={"request_id": request_id},
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = str(round(process_time * 1000, 2))
        return response
