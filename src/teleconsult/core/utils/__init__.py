"""
Utility functions for the teleconsultation access service.

This module provides common utility functions used throughout
the application for hashing, masking and link decryption.
"""

from .crypto import decrypt_text, encrypt_text, normalize_base64
from .crypto_utils import (
    constant_time_equals,
    generate_access_token,
    generate_otp_code,
    generate_precheck_id,
    generate_salt,
    hash_otp,
    hash_value,
)
from .datetime_utils import Clock, ManualClock, iso_timestamp, system_clock
from .masking import mask_sensitive_fields, sanitize_decrypted_text
from .string_utils import is_valid_mobile, last_ten_digits, mask_identifier, mask_mobile

__all__ = [
    "decrypt_text",
    "encrypt_text",
    "normalize_base64",
    "constant_time_equals",
    "generate_access_token",
    "generate_otp_code",
    "generate_precheck_id",
    "generate_salt",
    "hash_otp",
    "hash_value",
    "Clock",
    "ManualClock",
    "iso_timestamp",
    "system_clock",
    "mask_sensitive_fields",
    "sanitize_decrypted_text",
    "is_valid_mobile",
    "last_ten_digits",
    "mask_identifier",
    "mask_mobile",
]
