"""
Unit tests for phone code login and opportunistic passkey enrollment.
"""

import logging

import pytest

from conftest import FakeCeremony, make_token, registration_options
from momentum_auth.errors import CeremonyDeclined, RequestRejected, TransportError
from momentum_auth.services.otp import OtpLoginFlow, OtpState, mask_phone
from momentum_auth.services.webauthn import WebAuthnOrchestrator

PHONE = "+15551234567"


def verified():
    return {
        "access": make_token(),
        "refresh": make_token(expires_in=86400),
        "user": {"first_name": "Alice", "last_name": "Smith"},
    }


def build_flow(stack, config, ceremony):
    webauthn = WebAuthnOrchestrator(stack.api, ceremony, stack.tokens, config)
    return OtpLoginFlow(stack.api, stack.tokens, webauthn, config)


@pytest.fixture
def flow(stack, config, ceremony):
    return build_flow(stack, config, ceremony)


async def verify(flow):
    return await flow.verify_code(
        PHONE, "123456", "US", device_id="dev-1", user_agent="pytest-agent", fcm_token="fcm-1"
    )


def test_mask_phone():
    """Test phone numbers are masked for logs."""
    assert mask_phone(PHONE) == "**********67"
    assert mask_phone(None) == "<none>"
    assert mask_phone("7") == "7"


@pytest.mark.asyncio
async def test_request_code(flow, server):
    """Test requesting a code moves the flow to CODE_REQUESTED."""
    server.on("POST", "/auth/phone/login", (200, {"detail": "Code sent"}))

    await flow.request_code(PHONE, "US")

    assert flow.state is OtpState.CODE_REQUESTED
    assert flow.phone == PHONE
    assert flow.country == "US"
    assert server.body(server.calls("POST", "/auth/phone/login")[0]) == {
        "phone": PHONE,
        "country": "US",
    }


@pytest.mark.asyncio
async def test_request_code_rejected(flow, server):
    """Test a rejected code request leaves the flow idle."""
    server.on("POST", "/auth/phone/login", (400, {"error": "Invalid phone number"}))

    with pytest.raises(RequestRejected) as exc_info:
        await flow.request_code("555", "US")

    assert exc_info.value.message == "Invalid phone number"
    assert flow.state is OtpState.IDLE


@pytest.mark.asyncio
async def test_verify_code_stores_tokens(flow, server, store):
    """Test a verified code stores the token pair and returns the user."""
    body = verified()
    server.on("POST", "/auth/phone/verify", (200, body))
    server.on("GET", "/auth/passkey/register/trigger", (200, {"has_passkeys": True}))

    user = await verify(flow)
    await flow.wait_for_enrollment()

    assert user.is_logged_in
    assert user.phone == PHONE
    assert user.country == "US"
    assert user.name == "Alice Smith"
    assert flow.state is OtpState.VERIFIED
    assert store.get("access_token") == body["access"]
    assert store.get("refresh_token") == body["refresh"]

    payload = server.body(server.calls("POST", "/auth/phone/verify")[0])
    assert payload == {
        "phone": PHONE,
        "code": "123456",
        "country": "US",
        "device_id": "dev-1",
        "fcm_token": "fcm-1",
        "user_agent": "pytest-agent",
    }


@pytest.mark.asyncio
async def test_wrong_code(flow, server, store):
    """Test a wrong code stores nothing and schedules no enrollment."""
    server.on("POST", "/auth/phone/verify", (400, {"error": "Invalid code"}))

    with pytest.raises(RequestRejected):
        await verify(flow)

    assert store.keys() == []
    assert flow.pending_enrollments == 0
    assert server.calls("GET", "/auth/passkey/register/trigger") == []


@pytest.mark.asyncio
async def test_enrollment_runs_after_tokens_stored(stack, server, store, config):
    """Test the enrollment ceremony only starts once the session is stored."""
    seen = []
    ceremony = FakeCeremony(on_call=lambda: seen.append(store.get("access_token")))
    flow = build_flow(stack, config, ceremony)
    body = verified()
    server.on("POST", "/auth/phone/verify", (200, body))
    server.on(
        "GET", "/auth/passkey/register/trigger",
        (200, {"has_passkeys": False, "options": registration_options()}),
    )
    server.on("POST", "/auth/passkey/register/verify", (201, {"id": 1}))
    server.on("GET", "/auth/passkey/credentials", (200, []))

    await verify(flow)
    await flow.wait_for_enrollment()

    assert seen == [body["access"]]
    payload = server.body(server.calls("POST", "/auth/passkey/register/verify")[0])
    assert payload["name"] == config.enrollment_name
    trigger = server.calls("GET", "/auth/passkey/register/trigger")[0]
    assert trigger.headers["Authorization"] == f"Bearer {body['access']}"


@pytest.mark.asyncio
async def test_enrollment_failure_does_not_affect_login(stack, server, store, config, caplog):
    """Test a declined enrollment is logged and login still succeeds."""
    flow = build_flow(stack, config, FakeCeremony(error=CeremonyDeclined()))
    server.on("POST", "/auth/phone/verify", (200, verified()))
    server.on(
        "GET", "/auth/passkey/register/trigger",
        (200, {"has_passkeys": False, "options": registration_options()}),
    )

    with caplog.at_level(logging.WARNING, logger="momentum_auth.services.otp"):
        user = await verify(flow)
        await flow.wait_for_enrollment()

    assert user.is_logged_in
    assert flow.state is OtpState.VERIFIED
    assert store.get("access_token") is not None
    assert "Passkey enrollment failed" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize("trigger", [
    {"has_passkeys": True, "options": registration_options()},
    {"options": registration_options()},
    {"has_passkeys": False},
])
async def test_enrollment_skipped(flow, server, ceremony, trigger):
    """Test no ceremony runs when the user has passkeys or no options were issued."""
    server.on("POST", "/auth/phone/verify", (200, verified()))
    server.on("GET", "/auth/passkey/register/trigger", (200, trigger))

    await verify(flow)
    await flow.wait_for_enrollment()

    assert ceremony.created == []


@pytest.mark.asyncio
async def test_trigger_failure_swallowed(flow, server, ceremony, store):
    """Test an unreachable enrollment trigger does not surface."""
    server.on("POST", "/auth/phone/verify", (200, verified()))
    server.on("GET", "/auth/passkey/register/trigger", (503, {"detail": "Unavailable"}))

    user = await verify(flow)
    await flow.wait_for_enrollment()

    assert user.is_logged_in
    assert ceremony.created == []
    assert store.get("refresh_token") is not None


@pytest.mark.asyncio
async def test_no_enrollment_without_orchestrator(stack, server, config):
    """Test a flow without an orchestrator never calls the trigger."""
    flow = OtpLoginFlow(stack.api, stack.tokens, config=config)
    server.on("POST", "/auth/phone/verify", (200, verified()))

    await verify(flow)

    assert flow.pending_enrollments == 0
    assert server.calls("GET", "/auth/passkey/register/trigger") == []


@pytest.mark.asyncio
async def test_verify_network_error(flow, server):
    """Test a server error on verify is a transport error."""
    server.on("POST", "/auth/phone/verify", 502)

    with pytest.raises(TransportError):
        await verify(flow)


def test_reset(flow):
    """Test reset forgets the phone."""
    flow.state = OtpState.CODE_REQUESTED
    flow.phone = PHONE

    flow.reset()

    assert flow.state is OtpState.IDLE
    assert flow.phone is None
