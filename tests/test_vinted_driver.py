import re
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from vinted_publisher.core.constants import ITEM_URL_PATTERN, SIGNED_IN_MARKER
from vinted_publisher.services.vinted_driver import (
    DriverTimeoutError,
    FormField,
    PlaywrightVintedDriver,
)


@pytest.fixture
def page():
    page = MagicMock(name="page")
    for name in ("goto", "query_selector", "wait_for_selector", "fill", "click",
                 "select_option", "wait_for_function", "wait_for_url"):
        setattr(page, name, AsyncMock())
    page.url = "https://www.vinted.fr/items/98765-robe"
    return page


@pytest.fixture
def driver(page, settings):
    context = MagicMock(name="context")
    context.cookies = AsyncMock(return_value=[{"name": "a", "value": "b"}])
    return PlaywrightVintedDriver(page, context, settings)


def test_item_url_pattern():
    assert ITEM_URL_PATTERN.search("https://www.vinted.fr/items/12345-veste")
    assert not ITEM_URL_PATTERN.search("https://www.vinted.fr/items/new")


@pytest.mark.asyncio
async def test_open_home_waits_for_network_idle(driver, page, settings):
    await driver.open_home()

    page.goto.assert_awaited_once_with(
        "https://www.vinted.fr", wait_until="networkidle", timeout=settings.navigation_timeout_ms
    )


@pytest.mark.asyncio
async def test_open_home_timeout_is_driver_timeout(driver, page):
    page.goto.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded")

    with pytest.raises(DriverTimeoutError):
        await driver.open_home()


@pytest.mark.asyncio
async def test_signed_in_marker(driver, page):
    page.query_selector.return_value = MagicMock()
    assert await driver.check_signed_in() is True
    page.query_selector.assert_awaited_with(SIGNED_IN_MARKER)

    page.query_selector.return_value = None
    assert await driver.check_signed_in() is False


@pytest.mark.asyncio
async def test_condition_uses_select_and_waits_for_value(driver, page):
    await driver.set_field(FormField.CONDITION, "2")

    page.select_option.assert_awaited_once_with('select[name="status"]', "2")
    page.fill.assert_not_awaited()
    assert page.wait_for_function.await_args.kwargs["arg"] == ['select[name="status"]', "2"]


@pytest.mark.asyncio
async def test_text_field_is_filled(driver, page):
    await driver.set_field(FormField.DESCRIPTION, "Peu portée")

    page.fill.assert_awaited_once_with('textarea[name="description"]', "Peu portée")


@pytest.mark.asyncio
async def test_wait_for_url_timeout(driver, page):
    page.wait_for_url.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded")

    with pytest.raises(DriverTimeoutError, match="items"):
        await driver.wait_for_url(re.compile(r"/items/\d+"), 30000)


@pytest.mark.asyncio
async def test_current_url_and_cookies(driver):
    assert await driver.current_url() == "https://www.vinted.fr/items/98765-robe"
    assert await driver.cookies() == [{"name": "a", "value": "b"}]
