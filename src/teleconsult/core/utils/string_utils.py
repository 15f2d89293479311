"""
String utility functions for mobile numbers and display-safe redaction.
"""

import re
from typing import Optional

_MOBILE_PATTERN = re.compile(r"^[0-9]{8,15}$")


def is_valid_mobile(mobile: object) -> bool:
    """Basic shape check: 8 to 15 digits after trimming."""
    if mobile is None:
        return False
    return bool(_MOBILE_PATTERN.match(str(mobile).strip()))


def last_ten_digits(mobile: str) -> str:
    """Strip non-digits and keep the national number (last 10 digits)."""
    digits = re.sub(r"\D", "", str(mobile or ""))
    return digits[-10:] if len(digits) > 10 else digits


def mask_mobile(number: Optional[str]) -> str:
    """Show only the last 4 digits, e.g. ``******3210``."""
    if not number or len(number) < 4:
        return "****"
    return "*" * (len(number) - 4) + number[-4:]


def mask_identifier(value: Optional[str]) -> Optional[str]:
    """``****`` followed by the last 4 characters; None stays None."""
    if value is None:
        return None
    return f"****{str(value)[-4:]}"
