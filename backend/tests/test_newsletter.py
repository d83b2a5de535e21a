"""
Kit newsletter integration and its effect on login.
"""
from unittest.mock import AsyncMock

import httpx
import pytest

from legallylegit.services.auth_service import NEWSLETTER_WARNING, AuthService
from legallylegit.services.newsletter_service import NewsletterService

pytestmark = pytest.mark.asyncio


def kit(handler):
    return NewsletterService(api_key="kit-test", base_url="https://kit.test/v4", transport=httpx.MockTransport(handler))


async def test_subscriber_added():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(201, json={"subscriber": {"id": 1}})

    ok, error = await kit(handler).add_subscriber("owner@example.com")
    assert (ok, error) == (True, None)
    assert seen["url"] == "https://kit.test/v4/subscribers"
    assert seen["auth"] == "Bearer kit-test"


async def test_existing_subscriber_is_not_an_error():
    ok, _ = await kit(lambda request: httpx.Response(409)).add_subscriber("owner@example.com")
    assert ok is True


async def test_api_error_reported():
    ok, error = await kit(lambda request: httpx.Response(500, text="boom")).add_subscriber("owner@example.com")
    assert ok is False
    assert "500" in error


async def test_network_error_reported():
    def handler(request):
        raise httpx.ConnectError("unreachable")

    ok, error = await kit(handler).add_subscriber("owner@example.com")
    assert ok is False
    assert error


async def test_missing_key_skips_call():
    ok, error = await NewsletterService(api_key="").add_subscriber("owner@example.com")
    assert ok is False
    assert error


async def test_login_succeeds_when_newsletter_fails(store, entitlements):
    newsletter = AsyncMock()
    newsletter.add_subscriber = AsyncMock(return_value=(False, "Kit API timeout"))
    auth = AuthService(store=store, entitlements=entitlements, newsletter=newsletter)

    session, profile, warning = await auth.login("owner@example.com", newsletter_consent=True)

    assert warning == NEWSLETTER_WARNING
    assert profile.newsletter_subscribed is False
    assert (await auth.get_session(session.session_id)).email == "owner@example.com"


async def test_logout_keeps_profile(store, entitlements):
    newsletter = AsyncMock()
    auth = AuthService(store=store, entitlements=entitlements, newsletter=newsletter)
    session, _, warning = await auth.login("owner@example.com")

    assert warning is None
    newsletter.add_subscriber.assert_not_called()
    assert await auth.logout(session.session_id) is True
    assert await auth.get_session(session.session_id) is None
    assert await entitlements.get_profile("owner@example.com") is not None
