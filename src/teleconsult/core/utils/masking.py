"""
Redaction applied to decrypted link payloads before they leave the server.

Only JSON objects are treated as structured payloads. Plain strings (the
usual case, e.g. a doctor name or ``CN206201``) and other JSON values are
returned untouched.
"""

import json
import re
from typing import Any, Dict

DOB_FIELDS = ("dob", "date_of_birth", "dateOfBirth")
IDENTIFIER_FIELDS = ("userid", "patient_id", "patientId")
PARTIAL_FIELDS = ("ssn", "aadhaar", "pan", "phone", "mobile", "email")
REMOVED_FIELDS = frozenset(
    {"ssn", "aadhaar", "pan", "credit_card", "card_number", "cardnumber"}
)

_YEAR_SUFFIX = re.compile(r"(\d{4})$")
_KEY_SEPARATORS = re.compile(r"[_\-]")


def _mask_dob(value: Any) -> str:
    match = _YEAR_SUFFIX.search(str(value).strip())
    return f"**/**/{match.group(1)}" if match else "**/**/****"


def _mask_partial(value: Any) -> str:
    text = str(value)
    if len(text) > 4:
        return f"{text[:2]}****{text[-2:]}"
    return "****"


def _is_removed_field(key: str) -> bool:
    lowered = key.lower()
    if lowered in REMOVED_FIELDS:
        return True
    parts = [part for part in _KEY_SEPARATORS.split(lowered) if part]
    if any(part in REMOVED_FIELDS for part in parts):
        return True
    # two-part names such as credit_card_no / card_number_last
    pairs = {f"{a}_{b}" for a, b in zip(parts, parts[1:])}
    return bool(pairs & REMOVED_FIELDS)


def mask_sensitive_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Return a redacted copy of a decrypted JSON object."""
    masked = dict(payload)

    for field in DOB_FIELDS:
        if masked.get(field):
            masked[field] = _mask_dob(masked[field])

    for field in IDENTIFIER_FIELDS:
        if masked.get(field):
            value = str(masked[field])
            if len(value) > 4:
                masked[field] = f"****{value[-4:]}"

    for field in PARTIAL_FIELDS:
        if masked.get(field):
            masked[field] = _mask_partial(masked[field])

    return {key: value for key, value in masked.items() if not _is_removed_field(key)}


def sanitize_decrypted_text(plaintext: str) -> str:
    """Mask a decrypted value; JSON objects come back re-serialized."""
    try:
        parsed = json.loads(plaintext)
    except (TypeError, ValueError):
        return plaintext

    if not isinstance(parsed, dict):
        return plaintext

    return json.dumps(mask_sensitive_fields(parsed), ensure_ascii=False)
