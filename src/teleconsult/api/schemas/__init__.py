"""
API schemas package.
"""

from .common import ErrorResponse, ServiceInfoResponse
from .consultation import (
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

__all__ = [
    "ErrorResponse",
    "ServiceInfoResponse",
    "BatchDecryptRequestSchema",
    "BatchDecryptResponseSchema",
    "DecryptRequestSchema",
    "DecryptResponseSchema",
    "PrecheckRequestSchema",
    "PrecheckResponseSchema",
    "RevokeResponseSchema",
    "VerifyOtpRequestSchema",
    "VerifyOtpResponseSchema",
]
