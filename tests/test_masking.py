"""
Masking and redaction tests.
"""

import json

import pytest

from teleconsult.core.utils.masking import mask_sensitive_fields, sanitize_decrypted_text
from teleconsult.core.utils.string_utils import (
    is_valid_mobile,
    last_ten_digits,
    mask_identifier,
    mask_mobile,
)


def test_json_object_fields_are_masked():
    payload = {
        "name": "Ravi Kumar",
        "dob": "12/05/1990",
        "userid": "USER123456",
        "phone": "9876543210",
        "email": "ravi@example.com",
    }
    masked = json.loads(sanitize_decrypted_text(json.dumps(payload)))

    assert masked["name"] == "Ravi Kumar"
    assert masked["dob"] == "**/**/1990"
    assert masked["userid"] == "****3456"
    assert masked["phone"] == "98****10"
    assert masked["email"] == "ra****om"


def test_highly_sensitive_fields_are_removed():
    payload = {
        "name": "Ravi",
        "ssn": "123-45-6789",
        "aadhaar_number": "1234 5678 9012",
        "pan": "ABCDE1234F",
        "credit_card_no": "4111111111111111",
        "company": "Acme",
    }
    masked = mask_sensitive_fields(payload)

    assert masked == {"name": "Ravi", "company": "Acme"}


def test_dob_without_year_is_fully_masked():
    assert mask_sensitive_fields({"dob": "unknown"})["dob"] == "**/**/****"


def test_short_identifier_is_left_alone():
    assert mask_sensitive_fields({"patient_id": "P12"})["patient_id"] == "P12"


@pytest.mark.parametrize("plaintext", ["Dr. Meena Rao", "CN206201", "[1, 2]", '"quoted"', "42"])
def test_non_object_values_pass_through(plaintext):
    assert sanitize_decrypted_text(plaintext) == plaintext


def test_mask_mobile():
    assert mask_mobile("9876543210") == "******3210"
    assert mask_mobile("12") == "****"
    assert mask_mobile("") == "****"


def test_mask_identifier():
    assert mask_identifier("APT123") == "****T123"
    assert mask_identifier(None) is None


@pytest.mark.parametrize(
    "mobile,expected",
    [
        ("9876543210", True),
        (" 9876543210 ", True),
        (9876543210, True),
        ("12345678", True),
        ("123456789012345", True),
        ("1234567", False),
        ("1234567890123456", False),
        ("+919876543210", False),
        ("98765 43210", False),
        (None, False),
    ],
)
def test_mobile_shape_check(mobile, expected):
    assert is_valid_mobile(mobile) is expected


def test_last_ten_digits():
    assert last_ten_digits("+91 98765-43210") == "9876543210"
    assert last_ten_digits("919876543210") == "9876543210"
    assert last_ten_digits("12345678") == "12345678"
