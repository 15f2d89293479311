"""
Common schemas shared by every endpoint.
"""

import uuid
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ...core.utils.datetime_utils import iso_timestamp


class ErrorResponse(BaseModel):
    """Standardized error response schema."""

    success: bool = Field(False, description="Operation success status")
    error: str = Field(..., description="Error type/code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: str = Field(default_factory=iso_timestamp, description="Error timestamp")
    request_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()), description="Request ID for tracking"
    )


class ServiceInfoResponse(BaseModel):
    service: str
    version: str
    environment: str
    timestamp: str = Field(default_factory=iso_timestamp)
