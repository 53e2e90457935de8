"""Google OAuth client tests — both legs run against a mock transport."""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from notekeeper.auth.google import GoogleOAuthClient, normalize_code
from notekeeper.errors import AuthenticationFailed, ProviderNotConfigured

from conftest import TEST_SETTINGS, MockTransport, google_profile


def _client(transport: MockTransport, **overrides) -> GoogleOAuthClient:
    client = GoogleOAuthClient.from_settings(
        TEST_SETTINGS, http=httpx.AsyncClient(transport=transport)
    )
    for key, value in overrides.items():
        setattr(client, key, value)
    return client


# ═══════════════════════════════════════════════════════════
# Consent URL
# ═══════════════════════════════════════════════════════════


def test_auth_url_carries_client_and_scope():
    url = urlparse(_client(MockTransport()).auth_url())
    params = parse_qs(url.query)
    assert url.netloc == "accounts.google.com"
    assert params["client_id"] == [TEST_SETTINGS.google_client_id]
    assert params["redirect_uri"] == [TEST_SETTINGS.google_callback_url]
    assert params["response_type"] == ["code"]
    assert params["scope"] == ["email profile"]
    assert params["access_type"] == ["offline"]
    assert params["prompt"] == ["consent"]


def test_auth_url_requires_configuration():
    with pytest.raises(ProviderNotConfigured):
        _client(MockTransport(), client_id="").auth_url()
    with pytest.raises(ProviderNotConfigured):
        _client(MockTransport(), redirect_uri="").auth_url()


# ═══════════════════════════════════════════════════════════
# Code exchange
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_exchange_code_returns_verified_identity():
    transport = MockTransport([
        httpx.Response(200, json={"access_token": "ya29.token"}),
        httpx.Response(200, json=google_profile()),
    ])
    identity = await _client(transport).exchange_code("4/abc")

    assert identity.email == "alice@example.com"
    assert identity.name == "Alice Example"
    assert identity.picture == "https://lh3.googleusercontent.com/a/alice"
    assert identity.external_id == "109876543210"

    token_req, userinfo_req = transport.requests
    assert token_req.method == "POST"
    form = parse_qs(token_req.content.decode())
    assert form["code"] == ["4/abc"]
    assert form["grant_type"] == ["authorization_code"]
    assert form["client_secret"] == [TEST_SETTINGS.google_client_secret]
    assert userinfo_req.method == "GET"
    assert userinfo_req.headers["Authorization"] == "Bearer ya29.token"


@pytest.mark.asyncio
async def test_unverified_email_rejected():
    transport = MockTransport([
        httpx.Response(200, json={"access_token": "ya29.token"}),
        httpx.Response(200, json=google_profile(verified_email=False)),
    ])
    with pytest.raises(AuthenticationFailed) as exc:
        await _client(transport).exchange_code("4/abc")
    assert exc.value.reason == "Google email not verified"


@pytest.mark.asyncio
async def test_missing_verified_flag_rejected():
    profile = google_profile()
    del profile["verified_email"]
    transport = MockTransport([
        httpx.Response(200, json={"access_token": "ya29.token"}),
        httpx.Response(200, json=profile),
    ])
    with pytest.raises(AuthenticationFailed):
        await _client(transport).exchange_code("4/abc")


@pytest.mark.asyncio
async def test_token_endpoint_error_description_is_the_reason():
    transport = MockTransport([
        httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "Bad Request"},
        ),
    ])
    with pytest.raises(AuthenticationFailed) as exc:
        await _client(transport).exchange_code("used-code")
    assert exc.value.reason == "Bad Request"
    # Userinfo is never called
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_no_access_token_rejected():
    transport = MockTransport([httpx.Response(200, json={"token_type": "Bearer"})])
    with pytest.raises(AuthenticationFailed):
        await _client(transport).exchange_code("4/abc")


@pytest.mark.asyncio
async def test_transport_error_becomes_authentication_failed():
    transport = MockTransport([httpx.ConnectError("connection refused")])
    with pytest.raises(AuthenticationFailed):
        await _client(transport).exchange_code("4/abc")


@pytest.mark.asyncio
async def test_userinfo_failure_rejected():
    transport = MockTransport([
        httpx.Response(200, json={"access_token": "ya29.token"}),
        httpx.Response(401, json={"error": {"message": "Invalid Credentials"}}),
    ])
    with pytest.raises(AuthenticationFailed) as exc:
        await _client(transport).exchange_code("4/abc")
    assert exc.value.reason == "Invalid Credentials"


@pytest.mark.asyncio
async def test_non_json_token_response_rejected():
    transport = MockTransport([httpx.Response(200, text="<html>oops</html>")])
    with pytest.raises(AuthenticationFailed):
        await _client(transport).exchange_code("4/abc")


# ═══════════════════════════════════════════════════════════
# Code normalization
# ═══════════════════════════════════════════════════════════


def test_normalize_plain_code_untouched():
    assert normalize_code("4/0AbCdEf") == "4/0AbCdEf"


def test_normalize_single_encoded_code():
    assert normalize_code("4%2F0AbCdEf") == "4/0AbCdEf"


def test_normalize_double_encoded_code():
    assert normalize_code("4%252F0AbCdEf") == "4/0AbCdEf"
    assert normalize_code("4%252f0AbCdEf") == "4/0AbCdEf"
