"""
Dataset acquisition with a local file copy.

A fresh local copy short-circuits the network. Otherwise the dataset is
downloaded through a PageFetcher; on failure any local copy, however old,
is used instead.
"""
import os
import time
import logging
from datetime import timedelta
from typing import Optional

import aiofiles

from ..config import get_settings
from ..exceptions import AcquisitionError
from .browser import PageFetcher, PlaywrightPageFetcher

logger = logging.getLogger(__name__)

HTML_MARKERS = ("<!doctype", "<html")


def is_html_payload(payload: bytes) -> bool:
    """Sniff the first bytes for markup - an error or challenge page instead of data."""
    start = payload[:100].decode("utf-8", errors="ignore").lower()
    return any(marker in start for marker in HTML_MARKERS)


class DatasetAcquirer:
    def __init__(self, fetcher: PageFetcher, cache_path: str, max_age: timedelta):
        self.fetcher = fetcher
        self.cache_path = cache_path
        self.max_age = max_age

    def has_cached_copy(self) -> bool:
        return os.path.isfile(self.cache_path)

    def is_cache_fresh(self) -> bool:
        if not self.has_cached_copy():
            return False
        return os.path.getmtime(self.cache_path) > time.time() - self.max_age.total_seconds()

    async def acquire(self, url: str) -> bytes:
        if self.is_cache_fresh():
            logger.info(f"[ACQUIRE] Using cached dataset: {self.cache_path}")
            return await self._read_cache()

        try:
            logger.info(f"[ACQUIRE] Downloading dataset via headless browser: {url}")
            payload = await self.fetcher.fetch_rendered_page(url)
            if not payload:
                raise AcquisitionError("Received an empty payload")
            if is_html_payload(payload):
                raise AcquisitionError("Received HTML instead of CSV - the bot challenge may still be blocking")
        except Exception as e:
            logger.warning(f"[ACQUIRE] Download failed: {e}")
            if self.has_cached_copy():
                logger.warning(f"[ACQUIRE] Falling back to local copy: {self.cache_path}")
                return await self._read_cache()
            raise AcquisitionError(
                f"Dataset download failed: {e}. No local cache available at {self.cache_path}."
            ) from e

        logger.info(f"[ACQUIRE] Downloaded {len(payload) / 1024 / 1024:.2f} MB")
        await self._write_cache(payload)
        return payload

    async def _read_cache(self) -> bytes:
        async with aiofiles.open(self.cache_path, "rb") as f:
            return await f.read()

    async def _write_cache(self, payload: bytes) -> None:
        try:
            directory = os.path.dirname(self.cache_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            async with aiofiles.open(self.cache_path, "wb") as f:
                await f.write(payload)
            logger.info(f"[ACQUIRE] Cached dataset to: {self.cache_path}")
        except OSError as e:
            logger.warning(f"[ACQUIRE] Failed to cache dataset: {e}")


def build_mec_acquirer(fetcher: Optional[PageFetcher] = None) -> DatasetAcquirer:
    settings = get_settings()
    fetcher = fetcher or PlaywrightPageFetcher(
        origin_url=settings.mec_origin_url,
        headless=settings.browser_headless,
        navigation_timeout_ms=settings.browser_navigation_timeout_ms,
        challenge_timeout_ms=settings.browser_challenge_timeout_ms,
    )
    return DatasetAcquirer(
        fetcher=fetcher,
        cache_path=settings.mec_cache_path,
        max_age=timedelta(days=settings.mec_cache_max_age_days),
    )
