"""HTTP document loading for EDM Liveset pages."""

import asyncio
import logging
import random
import time
from typing import Optional

import aiohttp
from bs4 import BeautifulSoup

from .dataclasses import EdmLiveConfig


class FetchError(Exception):
    """Raised when a page cannot be fetched.

    ``status`` is the HTTP status code, or None when the request failed
    before a response was received (connection error, timeout).
    """

    def __init__(self, url: str, status: Optional[int] = None, message: Optional[str] = None):
        self.url = url
        self.status = status
        super().__init__(message or f"Failed to load {url}: {status}")

    @property
    def is_transient(self) -> bool:
        """Whether retrying the same request later might succeed."""
        return self.status is None or self.status == 429 or self.status >= 500


class DocumentLoader:
    """Fetches pages with a fixed client identity and parses them with BeautifulSoup."""

    def __init__(self, config: EdmLiveConfig, session: Optional[aiohttp.ClientSession] = None) -> None:
        self.config = config
        self.logger = logging.getLogger(__name__)

        self._session = session
        self._owns_session = session is None
        self._last_request_time: Optional[float] = None
        self._rate_limit_lock: Optional[asyncio.Lock] = None

    async def __aenter__(self):
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        del exc_type, exc_val, exc_tb
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this loader created it."""
        if not self._owns_session:
            return
        if self._session is not None and not self._session.closed:
            await self._session.close()
            self.logger.debug("HTTP session closed")
        self._session = None

    async def fetch_html(self, url: str) -> str:
        """GET ``url`` and return the response body.

        Raises:
            FetchError: on a non-2xx status or a transport failure
        """
        session = self._ensure_session()
        await self._wait_for_rate_limit()

        self.logger.debug(f"Fetching {url}")
        try:
            async with session.get(url, headers=self.config.request_headers) as response:
                if not 200 <= response.status < 300:
                    self.logger.error(f"Request to {url} failed with status {response.status}")
                    raise FetchError(url, response.status)
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error(f"Network error fetching {url}: {e}")
            raise FetchError(url, None, f"Failed to load {url}: {e}") from e
        finally:
            self._update_request_time()

    async def fetch_document(self, url: str) -> BeautifulSoup:
        """GET ``url`` and return the parsed document tree."""
        html = await self.fetch_html(url)
        return BeautifulSoup(html, 'lxml')

    async def _wait_for_rate_limit(self) -> None:
        """Wait if needed to respect the minimum request interval."""
        if self.config.min_request_interval <= 0:
            return

        # Concurrent fetches take turns so each one sees the previous start time.
        if self._rate_limit_lock is None:
            self._rate_limit_lock = asyncio.Lock()
        async with self._rate_limit_lock:
            await self._sleep_for_interval()
            self._update_request_time()

    async def _sleep_for_interval(self) -> None:
        if self._last_request_time is None:
            return

        elapsed = time.time() - self._last_request_time
        base_delay = self.config.min_request_interval

        if self.config.humanize_request_interval:
            jitter = random.uniform(-0.25, 0.25) * base_delay
            delay_needed = base_delay + jitter
        else:
            delay_needed = base_delay

        wait_time = delay_needed - elapsed
        if wait_time > 0:
            self.logger.debug(f"Rate limiting: waiting {wait_time:.2f}s before next request")
            await asyncio.sleep(wait_time)

    def _update_request_time(self) -> None:
        self._last_request_time = time.time()
