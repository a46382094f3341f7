"""
Vinted publishing client.

VintedPublisher.publish_article() is the single entry point:

    initialize browser -> check auth -> [login] -> open creation page
    -> upload photos -> fill form -> submit -> close browser

Steps run strictly in order and the first failure stops the run. Every
error is caught here, once, and returned as a PublicationResult; nothing is
retried. Callers wanting a retry call publish_article() again.
"""
import asyncio
import logging
import time
from typing import Callable, Optional

import httpx

from vinted_publisher.core.config import Settings, get_settings
from vinted_publisher.core.constants import ITEM_URL_PATTERN
from vinted_publisher.schemas.article import Article, Credentials
from vinted_publisher.schemas.publication import PublicationResult, PublicationStatus
from vinted_publisher.services.browser_session import BrowserHandle, BrowserSession
from vinted_publisher.services.errors import NavigationError, PublishError, SubmissionError
from vinted_publisher.services.form_filler import fill_article_form
from vinted_publisher.services.photo_ingestion import PhotoIngestion
from vinted_publisher.services.vinted_auth import check_authentication, login
from vinted_publisher.services.vinted_driver import DriverTimeoutError, SiteDriver

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]

_LOG_LEVELS = {"error": logging.ERROR, "warning": logging.WARNING}


async def submit_article(driver: SiteDriver, timeout_ms: int) -> str:
    """Submit the form and return the new item's URL as the page reports it."""
    logger.info("Submitting article...")
    try:
        await driver.submit()
    except Exception as e:
        raise SubmissionError(f"Article submission failed: {e}") from e

    try:
        await driver.wait_for_url(ITEM_URL_PATTERN, timeout_ms)
    except DriverTimeoutError as e:
        raise SubmissionError(
            f"Article submission timed out after {timeout_ms / 1000:g}s without reaching "
            "an item page; the item may still have been created",
            timed_out=True,
        ) from e

    url = await driver.current_url()
    logger.info("Article submitted: %s", url)
    return url


class VintedPublisher:
    """Publishes one article at a time through its own browser session."""

    def __init__(
        self,
        credentials: Credentials,
        settings: Optional[Settings] = None,
        browser_session: Optional[BrowserSession] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        progress: Optional[ProgressCallback] = None,
    ):
        self.credentials = credentials
        self.settings = settings or get_settings()
        self.browser_session = browser_session or BrowserSession(self.settings)
        self.http_client = http_client
        self.progress = progress

    def _emit(self, message: str, level: str = "info") -> None:
        logger.log(_LOG_LEVELS.get(level, logging.INFO), message)
        if self.progress:
            self.progress(message, level)

    async def publish_article(self, article: Article) -> PublicationResult:
        start_time = time.monotonic()
        self._emit(f"Publishing article: {article.title}")

        try:
            url = await self._publish(article)
            result = PublicationResult.published(url, article_id=article.id)
        except SubmissionError as e:
            if e.timed_out:
                result = PublicationResult.unknown(str(e), article_id=article.id)
            else:
                result = PublicationResult.failed(str(e), article_id=article.id)
        except PublishError as e:
            result = PublicationResult.failed(str(e), article_id=article.id)
        except Exception as e:
            logger.exception("Unexpected error while publishing %r", article.title)
            result = PublicationResult.failed(f"Unexpected error: {e}", article_id=article.id)
        finally:
            await self.close()

        elapsed = time.monotonic() - start_time
        if result.success:
            self._emit(f"Article published in {elapsed:.1f}s: {result.url}", "success")
        elif result.status is PublicationStatus.UNKNOWN:
            self._emit(f"Publication unconfirmed after {elapsed:.1f}s: {result.error}", "warning")
        else:
            self._emit(f"Failed to publish article after {elapsed:.1f}s: {result.error}", "error")
        return result

    async def _publish(self, article: Article) -> str:
        handle = await self.browser_session.initialize()

        self._emit("Checking authentication...")
        if not await check_authentication(handle.driver):
            self._emit("Not authenticated, logging in...")
            await login(handle, self.credentials)
            self._emit("Logged in", "success")

        await self._open_creation_page(handle)

        if article.photos:
            self._emit(f"Uploading {len(article.photos)} photos...")
            ingestion = PhotoIngestion(
                handle.driver,
                http_client=self.http_client,
                settle_seconds=self.settings.photo_settle_seconds,
                download_timeout=self.settings.photo_download_timeout_seconds,
            )
            await ingestion.run(article.photos)

        self._emit("Filling article form...")
        await fill_article_form(handle.driver, article, self.settings.field_settle_seconds)

        self._emit("Submitting article...")
        return await submit_article(handle.driver, self.settings.submit_timeout_ms)

    async def _open_creation_page(self, handle: BrowserHandle) -> None:
        self._emit("Navigating to new item page...")
        try:
            await handle.driver.open_new_item_page()
        except Exception as e:
            raise NavigationError(f"Could not open the item creation page: {e}") from e
        await asyncio.sleep(self.settings.page_settle_seconds)

    async def close(self) -> None:
        """Release the browser. Safe at any point, any number of times."""
        try:
            await self.browser_session.close()
        except Exception as e:
            logger.warning("Error while closing browser session: %s", e)
