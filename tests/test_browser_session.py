import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from vinted_publisher.schemas.article import Credentials
from vinted_publisher.services import browser_session as browser_session_module
from vinted_publisher.services.browser_session import BrowserSession
from vinted_publisher.services.errors import InitializationError
from vinted_publisher.services.session_store import load_session, save_session
from vinted_publisher.services.vinted_auth import login
from vinted_publisher.services.vinted_client import VintedPublisher


@pytest.fixture
def fake_playwright(monkeypatch):
    """Patch async_playwright() with mocks; returns (playwright, browser, context)."""

    context = MagicMock(name="context")
    context.add_cookies = AsyncMock()
    context.new_page = AsyncMock(return_value=MagicMock(name="page"))
    context.cookies = AsyncMock(return_value=[])

    browser = MagicMock(name="browser")
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock(name="playwright")
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)
    monkeypatch.setattr(browser_session_module, "async_playwright", lambda: starter)

    return playwright, browser, context


@pytest.mark.asyncio
async def test_initialize_configures_browser_and_context(fake_playwright, settings):
    playwright, browser, context = fake_playwright
    session = BrowserSession(settings, headless=False)

    handle = await session.initialize()

    launch_kwargs = playwright.chromium.launch.call_args.kwargs
    assert launch_kwargs["headless"] is False
    assert launch_kwargs["slow_mo"] == settings.browser_slow_mo_ms
    assert "--no-sandbox" in launch_kwargs["args"]

    context_kwargs = browser.new_context.call_args.kwargs
    assert context_kwargs["viewport"] == {"width": 1280, "height": 720}
    assert context_kwargs["locale"] == "fr-FR"
    assert "Chrome/120" in context_kwargs["user_agent"]

    assert handle.context is context
    assert handle.driver.page is handle.page
    assert session.is_open
    context.add_cookies.assert_not_awaited()


@pytest.mark.asyncio
async def test_initialize_injects_saved_cookies(fake_playwright, settings, session_file):
    _, _, context = fake_playwright
    cookies = [{"name": "_vinted_fr_session", "value": "abc", "domain": ".vinted.fr", "path": "/"}]
    save_session(session_file, cookies)

    await BrowserSession(settings).initialize()

    context.add_cookies.assert_awaited_once_with(cookies)


@pytest.mark.asyncio
async def test_rejected_cookies_do_not_fail_initialize(fake_playwright, settings, session_file):
    _, _, context = fake_playwright
    context.add_cookies.side_effect = ValueError("cookie without domain")
    save_session(session_file, [{"name": "x", "value": "y"}])

    handle = await BrowserSession(settings).initialize()

    assert handle.page is not None


@pytest.mark.asyncio
async def test_second_initialize_requires_close(fake_playwright, settings):
    session = BrowserSession(settings)
    await session.initialize()

    with pytest.raises(InitializationError):
        await session.initialize()

    await session.close()
    await session.initialize()


@pytest.mark.asyncio
async def test_close_is_idempotent(fake_playwright, settings):
    playwright, browser, _ = fake_playwright
    session = BrowserSession(settings)

    await session.close()  # never opened
    await session.initialize()
    await session.close()
    await session.close()

    browser.close.assert_awaited_once()
    playwright.stop.assert_awaited_once()
    assert not session.is_open


@pytest.mark.asyncio
async def test_close_survives_browser_errors(fake_playwright, settings):
    playwright, browser, _ = fake_playwright
    browser.close.side_effect = RuntimeError("browser already gone")
    session = BrowserSession(settings)
    await session.initialize()

    await session.close()

    playwright.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_launch_failure_releases_playwright(fake_playwright, settings):
    playwright, _, _ = fake_playwright
    playwright.chromium.launch.side_effect = RuntimeError(
        "BrowserType.launch: Executable doesn't exist at /ms-playwright/chromium"
    )
    session = BrowserSession(settings)

    with pytest.raises(InitializationError, match="playwright install chromium"):
        await session.initialize()

    playwright.stop.assert_awaited_once()
    assert not session.is_open


@pytest.mark.asyncio
async def test_page_failure_closes_browser(fake_playwright, settings):
    playwright, browser, context = fake_playwright
    context.new_page.side_effect = RuntimeError("target closed")

    with pytest.raises(InitializationError, match="target closed"):
        await BrowserSession(settings).initialize()

    browser.close.assert_awaited_once()
    playwright.stop.assert_awaited_once()


async def _hang(*args, **kwargs):
    await asyncio.Event().wait()


@pytest.mark.asyncio
async def test_cancelled_initialize_releases_browser(fake_playwright, settings):
    playwright, browser, context = fake_playwright
    context.new_page.side_effect = _hang
    session = BrowserSession(settings)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(session.initialize(), 0.05)
    await session.close()

    browser.close.assert_awaited_once()
    playwright.stop.assert_awaited_once()
    assert not session.is_open


@pytest.mark.asyncio
async def test_publish_timed_out_during_launch_leaves_no_browser(
    fake_playwright, settings, credentials, make_article
):
    playwright, browser, context = fake_playwright
    context.new_page.side_effect = _hang
    session = BrowserSession(settings)
    publisher = VintedPublisher(credentials, settings=settings, browser_session=session)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(publisher.publish_article(make_article()), 0.05)
    await publisher.close()

    browser.close.assert_awaited_once()
    playwright.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_session_survives_two_browser_lifetimes(fake_playwright, settings, session_file):
    _, _, context = fake_playwright
    issued = [
        {"name": "access_token_web", "value": "tok", "domain": ".vinted.fr", "path": "/"},
        {"name": "_vinted_fr_session", "value": "abc", "domain": ".vinted.fr", "path": "/"},
    ]
    context.cookies.return_value = issued
    credentials = Credentials(email="seller@example.com", password="pw")

    first = BrowserSession(settings)
    handle = await first.initialize()
    handle.driver.login = AsyncMock()
    handle.driver.check_signed_in = AsyncMock(return_value=True)
    await login(handle, credentials)
    await first.close()

    second = BrowserSession(settings)
    await second.initialize()

    restored = context.add_cookies.call_args.args[0]
    assert sorted(restored, key=lambda c: c["name"]) == sorted(issued, key=lambda c: c["name"])
    assert load_session(session_file) == issued
