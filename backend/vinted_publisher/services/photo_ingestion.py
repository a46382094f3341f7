"""
Photo ingestion: resolve each photo source to a local file and attach it.

Sources are handled strictly one after another in input order; the first
photo becomes the cover image. Remote sources are downloaded with httpx into
a private temporary directory that is always emptied before returning.
"""
import asyncio
import logging
import tempfile
from pathlib import Path, PurePosixPath
from typing import List, Optional
from urllib.parse import unquote, urlparse

import httpx

from vinted_publisher.core.constants import DEFAULT_PHOTO_NAME
from vinted_publisher.services.errors import DownloadError, PhotoUploadError
from vinted_publisher.services.vinted_driver import SiteDriver

logger = logging.getLogger(__name__)


def is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def photo_filename(url: str) -> str:
    name = PurePosixPath(unquote(urlparse(url).path)).name
    return name or DEFAULT_PHOTO_NAME


class PhotoIngestion:
    def __init__(
        self,
        driver: SiteDriver,
        http_client: Optional[httpx.AsyncClient] = None,
        settle_seconds: float = 1.5,
        download_timeout: float = 15.0,
    ):
        self.driver = driver
        self.http_client = http_client
        self.settle_seconds = settle_seconds
        self.download_timeout = download_timeout
        # Every temp file created during run(), kept after cleanup for inspection
        self.temp_files: List[Path] = []
        self._temp_dir: Optional[Path] = None

    async def run(self, sources: List[str]) -> int:
        """Upload every source in order. Returns the number uploaded."""
        logger.info("Uploading %d photos...", len(sources))
        owns_client = self.http_client is None
        if owns_client:
            self.http_client = httpx.AsyncClient()

        uploaded = 0
        try:
            for index, source in enumerate(sources):
                try:
                    local_path = await self._resolve(index, source)
                    await self.driver.upload_photo(str(local_path))
                except Exception as e:
                    logger.error("Photo %d (%s) failed: %s", index + 1, source, e)
                    raise PhotoUploadError(f"Photo upload failed: {e}") from e

                uploaded += 1
                # Let the page register the attached file before the next one
                await asyncio.sleep(self.settle_seconds)
        finally:
            self.cleanup()
            if owns_client:
                await self.http_client.aclose()
                self.http_client = None

        logger.info("Uploaded %d photos", uploaded)
        return uploaded

    async def _resolve(self, index: int, source: str) -> Path:
        if is_remote(source):
            return await self._download(index, source)
        return Path(source)

    async def _download(self, index: int, url: str) -> Path:
        logger.info("Downloading photo from %s", url)
        try:
            response = await self.http_client.get(
                url, timeout=self.download_timeout, follow_redirects=True
            )
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to download photo {url}: {e}") from e

        if not response.is_success:
            raise DownloadError(
                f"Failed to download photo {url}: HTTP {response.status_code}"
            )

        if self._temp_dir is None:
            self._temp_dir = Path(tempfile.mkdtemp(prefix="vinted-photos-"))

        # Index prefix keeps two URLs with the same file name apart
        temp_path = self._temp_dir / f"{index:02d}-{photo_filename(url)}"
        self.temp_files.append(temp_path)
        temp_path.write_bytes(response.content)
        return temp_path

    def cleanup(self) -> None:
        """Delete downloaded files. Failures are only logged."""
        for temp_path in self.temp_files:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Failed to delete temp file %s: %s", temp_path, e)

        if self._temp_dir is not None:
            try:
                self._temp_dir.rmdir()
            except OSError as e:
                logger.warning("Failed to remove temp dir %s: %s", self._temp_dir, e)
            self._temp_dir = None
