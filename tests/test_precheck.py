"""
OTP precheck tests: use case and endpoint.
"""

import asyncio

import pytest

from teleconsult.application.dto.consultation_dto import PrecheckRequest
from teleconsult.core.container import ServiceNames
from teleconsult.core.exceptions import InvalidMobileError, InvalidPayloadError, SmsDeliveryError
from teleconsult.core.utils.crypto_utils import hash_otp, hash_value
from teleconsult.domain.errors import InvalidLinkError, MobileMismatchError, OtpThrottledError
from teleconsult.domain.value_objects.link_parameters import LinkParameters

from .conftest import APPOINTMENT, MOBILE, link_params


@pytest.fixture
def use_case(container):
    return container.get(ServiceNames.PRECHECK_USE_CASE)


@pytest.fixture
def otp_store(container):
    return container.get(ServiceNames.OTP_STORE)


@pytest.mark.asyncio
async def test_precheck_issues_challenge(use_case, otp_store, verifier, sms):
    params = link_params()
    result = await use_case.execute(PrecheckRequest(mobile=MOBILE, params=params))

    assert result.masked_mobile == "******3210"
    assert result.expires_in == 300
    assert result.resend_cooldown_seconds == 30
    assert result.appointment_hint == "****T123"
    assert result.link_hash == LinkParameters.from_mapping(params).link_hash()
    assert verifier.calls == [(APPOINTMENT, MOBILE)]

    sent_mobile, code = sms.sent[0]
    assert sent_mobile == MOBILE
    assert len(code) == 6 and code.isdigit()

    session = await otp_store.get(result.precheck_id)
    assert session.appointment_number == APPOINTMENT
    assert session.mobile_hash == hash_value(MOBILE)
    assert session.otp_hash == hash_otp(session.otp_salt, code)
    assert code not in (session.otp_hash, session.otp_salt)
    assert session.attempts == 0


@pytest.mark.asyncio
async def test_second_precheck_within_cooldown_is_throttled(use_case, otp_store, sms, clock):
    await use_case.execute(PrecheckRequest(mobile=MOBILE, params=link_params()))
    clock.advance(10)

    with pytest.raises(OtpThrottledError) as exc_info:
        await use_case.execute(PrecheckRequest(mobile=MOBILE, params=link_params()))

    assert exc_info.value.retry_after == 20
    assert len(sms.sent) == 1
    assert await otp_store.count() == 1


@pytest.mark.asyncio
async def test_precheck_allowed_again_after_cooldown(use_case, otp_store, sms, clock):
    await use_case.execute(PrecheckRequest(mobile=MOBILE, params=link_params()))
    clock.advance(30)

    await use_case.execute(PrecheckRequest(mobile=MOBILE, params=link_params()))

    assert len(sms.sent) == 2
    assert await otp_store.count() == 2


@pytest.mark.asyncio
async def test_mobile_mismatch_sends_nothing(use_case, otp_store, sms):
    with pytest.raises(MobileMismatchError):
        await use_case.execute(PrecheckRequest(mobile="9000000000", params=link_params()))

    assert sms.sent == []
    assert await otp_store.count() == 0


@pytest.mark.asyncio
async def test_invalid_mobile_rejected_before_crm_call(use_case, verifier):
    with pytest.raises(InvalidMobileError):
        await use_case.execute(PrecheckRequest(mobile="12ab", params=link_params()))
    assert verifier.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [None, {}, {"a": 5}])
async def test_malformed_params_rejected(use_case, params):
    with pytest.raises(InvalidPayloadError):
        await use_case.execute(PrecheckRequest(mobile=MOBILE, params=params))


@pytest.mark.asyncio
async def test_link_without_appointment_is_rejected(use_case, sms):
    with pytest.raises(InvalidLinkError):
        await use_case.execute(PrecheckRequest(mobile=MOBILE, params={"d": "something"}))
    assert sms.sent == []


@pytest.mark.asyncio
async def test_undecryptable_appointment_falls_back_to_plain_key(use_case, verifier):
    params = {"a": "garbage!!", "app_no": APPOINTMENT}
    result = await use_case.execute(PrecheckRequest(mobile=MOBILE, params=params))

    assert result.appointment_hint == "****T123"
    assert verifier.calls == [(APPOINTMENT, MOBILE)]


@pytest.mark.asyncio
async def test_country_code_prefix_is_normalized_for_crm(use_case, verifier):
    await use_case.execute(PrecheckRequest(mobile="91" + MOBILE, params=link_params()))
    assert verifier.calls == [(APPOINTMENT, MOBILE)]


@pytest.mark.asyncio
async def test_sms_failure_leaves_no_session(use_case, otp_store, sms):
    sms.fail = True

    with pytest.raises(SmsDeliveryError):
        await use_case.execute(PrecheckRequest(mobile=MOBILE, params=link_params()))

    assert await otp_store.count() == 0


@pytest.mark.asyncio
async def test_cancelled_sms_dispatch_leaves_no_session(use_case, otp_store, sms, monkeypatch):
    async def cancelled(mobile, otp_code):
        raise asyncio.CancelledError()

    monkeypatch.setattr(sms, "send_otp", cancelled)

    with pytest.raises(asyncio.CancelledError):
        await use_case.execute(PrecheckRequest(mobile=MOBILE, params=link_params()))

    assert await otp_store.count() == 0

@pytest.mark.asyncio
async def test_cooldown_is_keyed_on_national_number(use_case, otp_store, sms):
    await use_case.execute(PrecheckRequest(mobile="91" + MOBILE, params=link_params()))

    ((_, session),) = await otp_store.find(lambda s: True)
    assert session.mobile_hash == hash_value(MOBILE)
    assert session.masked_mobile == "******3210"

    with pytest.raises(OtpThrottledError):
        await use_case.execute(PrecheckRequest(mobile=MOBILE, params=link_params()))
    assert len(sms.sent) == 1

def test_precheck_endpoint_success(client):
    response = client.post(
        "/consultation/precheck", json={"mobile": MOBILE, "params": link_params()}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["maskedMobile"] == "******3210"
    assert data["expiresIn"] == 300
    assert data["resendCooldownSeconds"] == 30
    assert data["appointmentHint"] == "****T123"
    assert set(data) >= {"precheckId", "linkHash"}
    assert "otp" not in data


def test_precheck_endpoint_throttles_second_call(client):
    body = {"mobile": MOBILE, "params": link_params()}
    assert client.post("/consultation/precheck", json=body).status_code == 200

    response = client.post("/consultation/precheck", json=body)

    assert response.status_code == 429
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "otp_throttled"
    assert data["details"] == {"retryAfter": 30}
    assert response.headers["Retry-After"] == "30"
    assert data["request_id"] == response.headers["X-Request-ID"]


@pytest.mark.parametrize("variant", ["91" + MOBILE, "0" + MOBILE])
def test_precheck_endpoint_throttles_prefixed_variants_of_same_mobile(client, sms, variant):
    first = client.post("/consultation/precheck", json={"mobile": MOBILE, "params": link_params()})
    assert first.status_code == 200

    response = client.post(
        "/consultation/precheck", json={"mobile": variant, "params": link_params()}
    )

    assert response.status_code == 429
    assert response.json()["error"] == "otp_throttled"
    assert len(sms.sent) == 1


@pytest.mark.parametrize(
    "body,status,error",
    [
        ({"mobile": MOBILE}, 400, "invalid_payload"),
        ({"mobile": "123", "params": {"a": "x"}}, 400, "invalid_mobile"),
        ({"mobile": MOBILE, "params": {"zz": "x"}}, 400, "invalid_link"),
        ({"mobile": "9000000000", "params": None}, 400, "invalid_payload"),
    ],
)
def test_precheck_endpoint_client_errors(client, body, status, error):
    response = client.post("/consultation/precheck", json=body)
    assert response.status_code == status
    assert response.json()["error"] == error


def test_precheck_endpoint_mismatch_message_is_generic(client):
    response = client.post(
        "/consultation/precheck", json={"mobile": "9000000000", "params": link_params()}
    )

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "mobile_mismatch"
    assert "APT123" not in data["message"]
    assert "details" not in data


def test_precheck_endpoint_sms_failure_is_502(client, sms):
    sms.fail = True
    response = client.post(
        "/consultation/precheck", json={"mobile": MOBILE, "params": link_params()}
    )

    assert response.status_code == 502
    assert response.json()["error"] == "sms_delivery_failed"
    assert response.json()["message"] == "Unable to send verification code"


def test_precheck_endpoint_rejects_non_json_body(client):
    response = client.post(
        "/consultation/precheck",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_payload"
