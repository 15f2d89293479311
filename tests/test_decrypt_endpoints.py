"""
Decrypt endpoint tests (ungated variants; the gated ones share the handlers).
"""

import json

from fastapi.testclient import TestClient

from teleconsult.app import create_app
from teleconsult.core.config import RateLimitSettings
from teleconsult.core.container import Container
from teleconsult.core.utils.crypto import encrypt_text
from teleconsult.core.utils.datetime_utils import ManualClock

from .conftest import TEST_KEY, make_settings


def test_single_decrypt(client):
    response = client.post("/decrypt", json={"text": encrypt_text(TEST_KEY, "CN206201")})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["decryptedText"] == "CN206201"
    assert "timestamp" in data


def test_single_decrypt_masks_json_payload(client):
    payload = json.dumps({"name": "Ravi", "dob": "01/02/1985", "ssn": "123-45-6789"})
    response = client.post("/decrypt", json={"text": encrypt_text(TEST_KEY, payload)})

    assert json.loads(response.json()["decryptedText"]) == {"name": "Ravi", "dob": "**/**/1985"}


def test_single_decrypt_errors(client):
    missing = client.post("/decrypt", json={})
    not_string = client.post("/decrypt", json={"text": 42})
    too_large = client.post("/decrypt", json={"text": "A" * 1001})
    corrupt = client.post("/decrypt", json={"text": "bm90IHJlYWxseSBjaXBoZXJ0ZXh0"})

    assert (missing.status_code, missing.json()["error"]) == (400, "invalid_input")
    assert (not_string.status_code, not_string.json()["error"]) == (400, "invalid_input")
    assert (too_large.status_code, too_large.json()["error"]) == (400, "input_too_large")
    assert (corrupt.status_code, corrupt.json()["error"]) == (400, "decryption_failed")
    assert corrupt.json()["message"] == "Invalid encrypted data"


def test_batch_isolates_item_failures(client):
    response = client.post(
        "/decrypt/batch",
        json={
            "texts": [
                {"key": "d", "text": encrypt_text(TEST_KEY, "Dr. Meena Rao")},
                {"key": "bad", "text": "not*base64!"},
                {"key": "empty", "text": ""},
                {"key": "long", "text": "A" * 1001},
                {"text": encrypt_text(TEST_KEY, "orphan")},
            ]
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["results"] == {"d": "Dr. Meena Rao"}
    assert data["errors"] == {
        "bad": "Invalid encrypted data",
        "empty": "Invalid input",
        "long": "Input too large",
        "item_4": "Invalid input",
    }
    assert "timestamp" in data


def test_batch_repeated_key_reports_last_item_only(client):
    good = encrypt_text(TEST_KEY, "Cardiology")
    response = client.post(
        "/decrypt/batch",
        json={"texts": [{"key": "s", "text": good}, {"key": "s", "text": "not*base64!"}]},
    )
    assert response.json()["results"] == {}
    assert response.json()["errors"] == {"s": "Invalid encrypted data"}

    response = client.post(
        "/decrypt/batch",
        json={"texts": [{"key": "s", "text": "not*base64!"}, {"key": "s", "text": good}]},
    )
    assert response.json()["results"] == {"s": "Cardiology"}
    assert "errors" not in response.json()


def test_batch_cap_is_enforced_before_decrypting(client):
    texts = [{"key": f"k{i}", "text": encrypt_text(TEST_KEY, str(i))} for i in range(21)]

    response = client.post("/decrypt/batch", json={"texts": texts})

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "too_many_items"
    assert data["message"] == "Maximum 20 items allowed per batch request"


def test_batch_of_exactly_twenty_is_accepted(client):
    texts = [{"key": f"k{i}", "text": encrypt_text(TEST_KEY, str(i))} for i in range(20)]

    response = client.post("/decrypt/batch", json={"texts": texts})

    assert response.status_code == 200
    assert len(response.json()["results"]) == 20


def test_batch_requires_a_list(client):
    response = client.post("/decrypt/batch", json={"texts": "abc"})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_payload"


def test_development_mode_exposes_decrypt_detail():
    container = Container(make_settings(app_env="development"), ManualClock())
    client = TestClient(create_app(container=container))

    response = client.post("/decrypt/batch", json={"texts": [{"key": "bad", "text": "not*base64!"}]})

    assert response.json()["errors"]["bad"].startswith("Invalid base64 payload")


def test_decrypt_endpoints_are_rate_limited_per_client_ip():
    clock = ManualClock()
    settings = make_settings(
        rate_limit=RateLimitSettings(enabled=True, max_requests=3, window_seconds=900, block_seconds=1800)
    )
    client = TestClient(create_app(container=Container(settings, clock)))
    body = {"text": encrypt_text(TEST_KEY, "x")}
    first_ip = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}

    for _ in range(3):
        assert client.post("/decrypt", json=body, headers=first_ip).status_code == 200
        clock.advance(5)

    blocked = client.post("/decrypt", json=body, headers=first_ip)
    assert blocked.status_code == 429
    assert blocked.json()["error"] == "rate_limited"
    assert blocked.headers["Retry-After"] == "1800"

    other = client.post("/decrypt", json=body, headers={"X-Forwarded-For": "198.51.100.2"})
    assert other.status_code == 200
