"""
Fetch-and-normalize pipelines for vidproxy.

This module ties the platform fetchers and normalizers together and turns
every upstream or extraction failure into an error envelope.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from app.core.config import Settings
from app.core.exceptions import NetworkError, ProcessingTimeoutError, VidProxyException
from app.models.response import Envelope, Meta
from app.services.normalizers import normalize_tiktok, normalize_youtube
from app.services.tiktok_fetcher import TikTokFetcher
from app.services.youtube_fetcher import YouTubeFetcher


logger = logging.getLogger(__name__)


class VideoProcessor:
    """
    Runs the per-platform pipelines.

    Upstream failures (``VidProxyException`` and ``httpx`` errors) end up in
    an error envelope with code 500; anything else is a bug and propagates
    to the error handling middleware. The taxonomy status only decides the
    log level.
    """

    ERROR_CODE = 500

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.client = client

    def _meta(self) -> Meta:
        return Meta(version=self.settings.api_version, creator=self.settings.api_creator)

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        """Shared application client when available, else a short-lived one."""
        if self.client is not None:
            yield self.client
        else:
            async with httpx.AsyncClient() as client:
                yield client

    async def get_tiktok(self, url: str) -> Envelope:
        """
        Fetch and normalize a TikTok video.

        Args:
            url: TikTok video or share link

        Returns:
            Success or error envelope
        """
        try:
            async with self._session() as client:
                fetcher = TikTokFetcher(
                    client,
                    timeout=self.settings.upstream_timeout,
                    short_link_timeout=self.settings.short_link_timeout,
                )
                record = await fetcher.fetch(url)

            data = normalize_tiktok(record.item, record.url, record.play)
            logger.info(f"TikTok video {record.video_id} processed")
            return Envelope.success("Video data retrieved successfully", data, self._meta())

        except Exception as e:
            return self._error_envelope("TikTok", url, e)

    async def get_youtube(self, url: str) -> Envelope:
        """
        Fetch and normalize a YouTube video.

        Args:
            url: YouTube video URL

        Returns:
            Success or error envelope
        """
        try:
            fetcher = YouTubeFetcher(timeout=self.settings.youtube_timeout)
            record = await fetcher.fetch(url)

            data = normalize_youtube(record.info, url, record.variants, record.mp4, record.audio)
            logger.info(f"YouTube video {record.video_id} processed")
            return Envelope.success("YouTube video data retrieved successfully", data, self._meta())

        except Exception as e:
            return self._error_envelope("YouTube", url, e)

    def _error_envelope(self, platform: str, url: str, exc: Exception) -> Envelope:
        error = self._as_upstream_error(exc)
        if error is None:
            raise exc

        if error.status_code >= 500:
            logger.error(f"{platform} request failed for {url}: {error.message}")
        else:
            logger.warning(f"{platform} request rejected for {url}: {error.message}")

        return Envelope.error(error.message, self.ERROR_CODE, self._meta())

    def _as_upstream_error(self, exc: Exception) -> Optional[VidProxyException]:
        """Map known upstream failures into the error taxonomy; None for anything else."""
        if isinstance(exc, VidProxyException):
            return exc
        if isinstance(exc, httpx.TimeoutException):
            return ProcessingTimeoutError(timeout_seconds=self.settings.upstream_timeout)
        if isinstance(exc, httpx.HTTPStatusError):
            return NetworkError(reason=f"upstream returned HTTP {exc.response.status_code}")
        if isinstance(exc, httpx.HTTPError):
            return NetworkError(reason=f"{type(exc).__name__}: {exc}")
        return None
