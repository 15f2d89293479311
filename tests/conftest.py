"""
Shared fixtures: test settings, a manual clock, fake CRM/SMS ports and a
TestClient wired to a fresh container per test.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from teleconsult.app import create_app
from teleconsult.application.ports.services.appointment_verifier import AppointmentVerifier
from teleconsult.application.ports.services.sms_sender import SmsSender
from teleconsult.core.config import (
    AccessSettings,
    DecryptSettings,
    LoggingSettings,
    OtpSettings,
    RateLimitSettings,
    Settings,
)
from teleconsult.core.container import Container, ServiceNames
from teleconsult.core.exceptions import SmsDeliveryError
from teleconsult.core.utils.crypto import encrypt_text
from teleconsult.core.utils.datetime_utils import ManualClock

TEST_KEY = "0123456789abcdef"
MOBILE = "9876543210"
APPOINTMENT = "APT123"


class FakeVerifier(AppointmentVerifier):
    """Answers from a fixed appointment -> mobile table."""

    def __init__(self, registry: Optional[Dict[str, str]] = None) -> None:
        self.registry = registry if registry is not None else {APPOINTMENT: MOBILE}
        self.calls: List[Tuple[str, str]] = []

    async def verify_appointment_mobile(self, appointment_number: str, mobile: str) -> bool:
        self.calls.append((appointment_number, mobile))
        return self.registry.get(appointment_number) == mobile


class FakeSmsSender(SmsSender):
    def __init__(self) -> None:
        self.sent: List[Tuple[str, str]] = []
        self.fail = False

    async def send_otp(self, mobile: str, otp_code: str) -> Dict[str, Any]:
        if self.fail:
            raise SmsDeliveryError("gateway down")
        self.sent.append((mobile, otp_code))
        return {"delivered": True}

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


def make_settings(**overrides) -> Settings:
    values = dict(
        app_env="testing",
        otp=OtpSettings(length=6, ttl_seconds=300, resend_cooldown_seconds=30, max_attempts=5),
        access=AccessSettings(enabled=True, token_ttl_seconds=900),
        decrypt=DecryptSettings(key=TEST_KEY, max_text_length=1000, max_batch_items=20),
        rate_limit=RateLimitSettings(enabled=False),
        logging=LoggingSettings(level="WARNING", format="text"),
    )
    values.update(overrides)
    return Settings(**values)


def link_params(appointment: str = APPOINTMENT, **extra: str) -> Dict[str, str]:
    params = {
        "a": encrypt_text(TEST_KEY, appointment),
        "d": encrypt_text(TEST_KEY, "Dr. Meena Rao"),
    }
    params.update(extra)
    return params


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def sms() -> FakeSmsSender:
    return FakeSmsSender()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def container(settings, clock, verifier, sms) -> Container:
    c = Container(settings, clock)
    c.register_singleton(ServiceNames.APPOINTMENT_VERIFIER, verifier)
    c.register_singleton(ServiceNames.SMS_SENDER, sms)
    return c


@pytest.fixture
def client(container) -> TestClient:
    """Test client without lifespan, so no background sweeper runs."""
    return TestClient(create_app(container=container))


@pytest.fixture
def verified_session(client, sms):
    """Run precheck + verify and return (token, link_hash, params)."""
    params = link_params()
    pre = client.post("/consultation/precheck", json={"mobile": MOBILE, "params": params})
    assert pre.status_code == 200, pre.text
    body = pre.json()
    ver = client.post(
        "/consultation/verify-otp",
        json={"precheckId": body["precheckId"], "otp": sms.last_code},
    )
    assert ver.status_code == 200, ver.text
    return ver.json()["token"], body["linkHash"], params
