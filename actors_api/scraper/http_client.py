"""
HTTP client used by the scrapers.

One GET per call, no retries: seeding is a single fail-fast attempt.
"""

import asyncio
import logging
from typing import Dict
from typing import Optional

import aiohttp

from actors_api.errors import UpstreamFetchError
from actors_api.settings import Settings
from actors_api.settings import get_settings

logger = logging.getLogger(__name__)


class HttpClient:
    """Thin aiohttp wrapper that turns every failure into UpstreamFetchError."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }

    async def fetch_text(self, url: str) -> str:
        """
        Download a page as text.

        Args:
            url: Page to fetch

        Returns:
            Decoded response body

        Raises:
            UpstreamFetchError: On network errors, timeouts or non-200 status
        """
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)
        try:
            async with aiohttp.ClientSession(headers=self.headers, timeout=timeout) as session:
                async with session.get(url) as resp:
                    status = resp.status
                    if status != 200:
                        logger.warning(f"[FETCH] status={status} url={url}")
                        raise UpstreamFetchError(url, f"unexpected status {status}")
                    text = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            logger.warning(f"[FETCH] error={type(e).__name__} url={url} msg={e}")
            raise UpstreamFetchError(url, f"{type(e).__name__}: {e}") from e

        logger.info(f"[FETCH] status=200 bytes={len(text)} url={url}")
        return text
