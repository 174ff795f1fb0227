"""
Short-link expansion for TikTok share links.
"""

import logging
from urllib.parse import urljoin

import httpx

from app.core.exceptions import NetworkError


logger = logging.getLogger(__name__)


class ShortLinkResolver:
    """Expands vm./vt.tiktok.com links with a single non-following HEAD request."""

    def __init__(self, client: httpx.AsyncClient, timeout: float = 3.0):
        self.client = client
        self.timeout = timeout

    async def resolve(self, url: str) -> str:
        """
        Return the redirect target of ``url``.

        The response status is not checked; when no ``location`` header is
        present the original URL is returned unchanged.

        Raises:
            NetworkError: If the HEAD request itself fails
        """
        try:
            response = await self.client.head(url, follow_redirects=False, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.warning(f"Short link resolution failed for {url}: {e}")
            raise NetworkError(reason=f"could not resolve short link ({type(e).__name__})")

        location = response.headers.get("location")
        if not location:
            logger.info(f"No redirect for short link {url}, using it as-is")
            return url

        resolved = urljoin(url, location)
        logger.info(f"Resolved short link {url} -> {resolved}")
        return resolved
