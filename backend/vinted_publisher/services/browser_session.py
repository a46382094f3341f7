"""
Browser session lifecycle: one Chromium browser, one context, one page.

initialize() hands back a BrowserHandle that the publisher passes down to
each step; close() may be called at any time, any number of times.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from playwright.async_api import async_playwright

from vinted_publisher.core.config import Settings, get_settings
from vinted_publisher.services.errors import InitializationError
from vinted_publisher.services.session_store import load_session, save_session
from vinted_publisher.services.vinted_driver import PlaywrightVintedDriver, SiteDriver

logger = logging.getLogger(__name__)


@dataclass
class BrowserHandle:
    driver: SiteDriver
    session_file: Path
    playwright: Any = None
    browser: Any = None
    context: Any = None
    page: Any = None

    async def persist_session(self) -> bool:
        """Save the current cookies. Never raises."""
        try:
            cookies = await self.driver.cookies()
        except Exception as e:
            logger.error("Could not read browser cookies: %s", e)
            return False
        return save_session(self.session_file, cookies)


def get_browser_launch_args() -> List[str]:
    """Chromium flags for containerised hosts"""
    return [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",  # small /dev/shm in containers
        "--disable-gpu",
    ]


class BrowserSession:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        session_file: Optional[str] = None,
        headless: Optional[bool] = None,
    ):
        self.settings = settings or get_settings()
        self.session_file = Path(session_file or self.settings.vinted_session_file)
        self.headless = self.settings.browser_headless if headless is None else headless
        self._handle: Optional[BrowserHandle] = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    async def initialize(self) -> BrowserHandle:
        if self._handle is not None:
            raise InitializationError("Browser session already initialized; close it first")

        logger.info("Launching Chromium (headless=%s)", self.headless)
        playwright = None
        browser = None
        try:
            playwright = await async_playwright().start()
            browser = await playwright.chromium.launch(
                headless=self.headless,
                slow_mo=self.settings.browser_slow_mo_ms,
                args=get_browser_launch_args(),
            )
            context = await browser.new_context(
                viewport={
                    "width": self.settings.browser_viewport_width,
                    "height": self.settings.browser_viewport_height,
                },
                locale=self.settings.browser_locale,
                user_agent=self.settings.browser_user_agent,
            )

            cookies = load_session(self.session_file)
            if cookies:
                try:
                    await context.add_cookies(cookies)
                    logger.info("Session restored from %s", self.session_file)
                except Exception as e:
                    logger.warning("Cached session rejected by the browser: %s", e)

            page = await context.new_page()
        except Exception as e:
            await _shutdown(browser, playwright)
            if "Executable doesn't exist" in str(e):
                raise InitializationError(
                    "Playwright browser not installed. Run 'playwright install chromium'."
                ) from e
            raise InitializationError(f"Browser initialization failed: {e}") from e
        except BaseException:
            # Cancelled mid-launch: nothing holds a handle yet, release here
            await _shutdown(browser, playwright)
            raise

        self._handle = BrowserHandle(
            driver=PlaywrightVintedDriver(page, context, self.settings),
            session_file=self.session_file,
            playwright=playwright,
            browser=browser,
            context=context,
            page=page,
        )
        logger.info("Browser initialized")
        return self._handle

    async def close(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        await _shutdown(handle.browser, handle.playwright)
        logger.info("Browser closed")


async def _shutdown(browser, playwright) -> None:
    if browser is not None:
        try:
            await browser.close()
        except Exception as e:
            logger.warning("Error while closing browser: %s", e)
    if playwright is not None:
        try:
            await playwright.stop()
        except Exception as e:
            logger.warning("Error while stopping Playwright: %s", e)
