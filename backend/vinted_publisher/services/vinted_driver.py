"""
Vinted site driver.

All knowledge of the target site's DOM lives here. The rest of the pipeline
talks to the narrow SiteDriver interface, so it can run against a fake.
"""
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Pattern

from playwright.async_api import BrowserContext, Page, TimeoutError as PlaywrightTimeoutError

from vinted_publisher.core.config import Settings
from vinted_publisher.core.constants import SIGNED_IN_MARKER

logger = logging.getLogger(__name__)


class FormField(str, Enum):
    """Fields of the item creation form, in the order they are written."""
    TITLE = "title"
    DESCRIPTION = "description"
    BRAND = "brand"
    SIZE = "size"
    CONDITION = "condition"
    COLOR = "color"
    MATERIAL = "material"
    PRICE = "price"


class DriverTimeoutError(Exception):
    """A bounded wait on the target page expired"""
    pass


class SiteDriver(ABC):
    """Capabilities the pipeline needs from the controlled browser page."""

    @abstractmethod
    async def open_home(self) -> None:
        """Load the home page and wait for it to settle."""

    @abstractmethod
    async def check_signed_in(self) -> bool:
        """Whether the signed-in marker is on the current page."""

    @abstractmethod
    async def login(self, email: str, password: str) -> None:
        """Open the login page, submit the credentials, wait for navigation."""

    @abstractmethod
    async def open_new_item_page(self) -> None:
        """Load the item creation page."""

    @abstractmethod
    async def set_field(self, field: FormField, value: str) -> None:
        """Write one form field and wait until the page holds that value."""

    @abstractmethod
    async def upload_photo(self, path: str) -> None:
        """Attach one local image file to the creation form."""

    @abstractmethod
    async def submit(self) -> None:
        """Trigger the final submit of the creation form."""

    @abstractmethod
    async def wait_for_url(self, pattern: Pattern[str], timeout_ms: int) -> None:
        """Wait until the page URL matches ``pattern``."""

    @abstractmethod
    async def current_url(self) -> str:
        pass

    @abstractmethod
    async def cookies(self) -> List[dict]:
        pass


# Form field -> element on the creation page
FIELD_SELECTORS = {
    FormField.TITLE: 'input[name="title"]',
    FormField.DESCRIPTION: 'textarea[name="description"]',
    FormField.BRAND: 'input[name="brand"]',
    FormField.SIZE: 'input[name="size"]',
    FormField.CONDITION: 'select[name="status"]',
    FormField.COLOR: 'input[name="color"]',
    FormField.MATERIAL: 'input[name="material"]',
    FormField.PRICE: 'input[name="price"]',
}

LOGIN_INPUT = 'input[name="login"]'
PASSWORD_INPUT = 'input[name="password"]'
SUBMIT_BUTTON = 'button[type="submit"]'
PHOTO_INPUT = 'input[type="file"][accept*="image"]'

# Resolves once the element reflects the value we wrote
VALUE_SETTLED_JS = """
([selector, expected]) => {
    const el = document.querySelector(selector);
    return el !== null && el.value === expected;
}
"""


class PlaywrightVintedDriver(SiteDriver):
    def __init__(self, page: Page, context: BrowserContext, settings: Settings):
        self.page = page
        self.context = context
        self.settings = settings

    async def open_home(self) -> None:
        try:
            await self.page.goto(
                self.settings.home_url,
                wait_until="networkidle",
                timeout=self.settings.navigation_timeout_ms,
            )
        except PlaywrightTimeoutError as e:
            raise DriverTimeoutError(f"Home page did not settle: {e}") from e

    async def check_signed_in(self) -> bool:
        marker = await self.page.query_selector(SIGNED_IN_MARKER)
        return marker is not None

    async def login(self, email: str, password: str) -> None:
        try:
            await self.page.goto(
                self.settings.login_url,
                wait_until="networkidle",
                timeout=self.settings.navigation_timeout_ms,
            )
            await self.page.wait_for_selector(LOGIN_INPUT, timeout=self.settings.login_form_timeout_ms)

            await self.page.fill(LOGIN_INPUT, email)
            await self.page.fill(PASSWORD_INPUT, password)

            async with self.page.expect_navigation(
                wait_until="networkidle",
                timeout=self.settings.navigation_timeout_ms,
            ):
                await self.page.click(SUBMIT_BUTTON)
        except PlaywrightTimeoutError as e:
            raise DriverTimeoutError(f"Login page wait expired: {e}") from e

    async def open_new_item_page(self) -> None:
        try:
            await self.page.goto(
                self.settings.new_item_url,
                wait_until="networkidle",
                timeout=self.settings.navigation_timeout_ms,
            )
        except PlaywrightTimeoutError as e:
            raise DriverTimeoutError(f"Item creation page did not settle: {e}") from e

    async def set_field(self, field: FormField, value: str) -> None:
        selector = FIELD_SELECTORS[field]
        if field is FormField.CONDITION:
            await self.page.select_option(selector, value)
        else:
            await self.page.fill(selector, value)

        await self.page.wait_for_function(
            VALUE_SETTLED_JS,
            arg=[selector, value],
            timeout=self.settings.field_timeout_ms,
        )

    async def upload_photo(self, path: str) -> None:
        file_input = self.page.locator(PHOTO_INPUT).first
        await file_input.set_input_files(path)

    async def submit(self) -> None:
        await self.page.locator(SUBMIT_BUTTON).last.click()

    async def wait_for_url(self, pattern: Pattern[str], timeout_ms: int) -> None:
        try:
            await self.page.wait_for_url(pattern, timeout=timeout_ms, wait_until="networkidle")
        except PlaywrightTimeoutError as e:
            raise DriverTimeoutError(f"URL never matched {pattern.pattern}: {e}") from e

    async def current_url(self) -> str:
        return self.page.url

    async def cookies(self) -> List[dict]:
        return await self.context.cookies()
