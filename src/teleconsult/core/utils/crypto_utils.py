"""
Cryptographic utility functions for OTP and access-token handling.
"""

import hashlib
import hmac
import secrets
import uuid


def hash_value(value: str) -> str:
    """SHA-256 hex digest of a string."""
    return hashlib.sha256(str(value).encode("utf-8")).hexdigest()


def hash_otp(salt: str, code: str) -> str:
    """Salted OTP digest; the plaintext code is never stored."""
    return hash_value(f"{salt}:{code}")


def constant_time_equals(left: str, right: str) -> bool:
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


def generate_otp_code(length: int = 6) -> str:
    """Generate a numeric OTP from the system CSPRNG."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def generate_salt() -> str:
    return secrets.token_hex(16)


def generate_precheck_id() -> str:
    return str(uuid.uuid4())


def generate_access_token() -> str:
    """96 hex characters of randomness for the consultation bearer token."""
    return secrets.token_hex(48)
