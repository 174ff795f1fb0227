"""
YouTube metadata fetcher for vidproxy.

This module fetches video info with yt-dlp and maps its format list onto
stream variants, picking the fixed 360p muxed MP4 (itag 18) and the best
audio-only stream as the default downloads.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yt_dlp

from app.core.exceptions import (
    ExtractionError, FormatNotAvailableError, InvalidURLError,
    ProcessingTimeoutError, VidProxyException, classify_yt_dlp_error
)
from app.services.platform_detector import PlatformDetector


logger = logging.getLogger(__name__)


@dataclass
class StreamVariant:
    """One downloadable stream, in the shape the normalizer expects."""
    itag: str
    url: str
    quality_label: str = ""
    mime_type: str = ""
    container: str = ""
    codecs: str = ""
    bitrate: int = 0
    audio_bitrate: int = 0
    content_length: Optional[int] = None
    has_video: bool = False
    has_audio: bool = False

    @property
    def is_audio_only(self) -> bool:
        return self.has_audio and not self.has_video


@dataclass
class YouTubeRecord:
    """Raw platform data for one YouTube video."""
    video_id: str
    url: str
    info: Dict[str, Any]
    variants: List[StreamVariant] = field(default_factory=list)
    mp4: Optional[StreamVariant] = None
    audio: Optional[StreamVariant] = None


class YouTubeFetcher:
    """
    Video info fetcher backed by yt-dlp.

    yt-dlp is synchronous, so extraction runs in the default executor with an
    overall timeout.
    """

    MP4_ITAG = "18"

    def __init__(self, timeout: float = 30.0, socket_timeout: float = 10.0):
        self.timeout = timeout
        self.ydl_opts = {
            'quiet': True,
            'no_warnings': True,
            'skip_download': True,
            'simulate': True,
            'noplaylist': True,
            'check_formats': False,
            'socket_timeout': socket_timeout,
        }

    async def fetch(self, url: str) -> YouTubeRecord:
        """
        Fetch info and stream variants for a YouTube URL.

        Args:
            url: YouTube video URL

        Returns:
            YouTubeRecord with info dict, all variants and the two convenience picks

        Raises:
            InvalidURLError: If the URL is not a recognized YouTube video link
            FormatNotAvailableError: If itag 18 or an audio-only stream is missing
            VidProxyException: For classified yt-dlp failures
        """
        video_id = PlatformDetector.extract_youtube_id(url) if url else None
        if not video_id:
            raise InvalidURLError("Please provide a valid YouTube URL", url=url)

        logger.info(f"Extracting YouTube info for {video_id}")
        info = await self._extract_with_ytdlp(video_id)

        variants = [self.to_variant(fmt) for fmt in info.get('formats') or [] if fmt.get('url')]

        mp4 = self.choose_format(variants, self.MP4_ITAG)
        if mp4 is None:
            raise FormatNotAvailableError(self.MP4_ITAG)

        audio = self.best_audio(variants)
        if audio is None:
            raise FormatNotAvailableError("audioonly")

        return YouTubeRecord(video_id=video_id, url=url, info=info, variants=variants, mp4=mp4, audio=audio)

    async def _extract_with_ytdlp(self, video_id: str) -> Dict[str, Any]:
        """
        Extract metadata using yt-dlp in a separate thread.

        Raises:
            ProcessingTimeoutError: If extraction exceeds the configured timeout
            VidProxyException: Classified yt-dlp error
        """
        opts = dict(self.ydl_opts)
        watch_url = PlatformDetector.youtube_watch_url(video_id)

        def _extract():
            try:
                with yt_dlp.YoutubeDL(opts) as ydl:
                    return ydl.extract_info(watch_url, download=False)
            except yt_dlp.utils.DownloadError as e:
                raise classify_yt_dlp_error(str(e))

        try:
            loop = asyncio.get_running_loop()
            info = await asyncio.wait_for(loop.run_in_executor(None, _extract), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise ProcessingTimeoutError(timeout_seconds=self.timeout)
        except VidProxyException:
            raise
        except Exception as e:
            logger.error(f"Error running yt-dlp extraction for {video_id}: {e}")
            raise ExtractionError(reason=f"Failed to extract metadata: {e}")

        if not info:
            raise ExtractionError(reason="No metadata returned from yt-dlp")
        return info

    @staticmethod
    def to_variant(fmt: Dict[str, Any]) -> StreamVariant:
        """Map a yt-dlp format dict onto a StreamVariant."""
        vcodec = fmt.get('vcodec') or 'none'
        acodec = fmt.get('acodec') or 'none'
        has_video = vcodec != 'none'
        has_audio = acodec != 'none'
        ext = fmt.get('ext') or ''

        codecs = ", ".join(c for c in (vcodec, acodec) if c != 'none')
        kind = 'video' if has_video else 'audio'
        mime_type = f'{kind}/{ext}' if ext else ''
        if mime_type and codecs:
            mime_type += f'; codecs="{codecs}"'

        height = fmt.get('height')
        quality_label = fmt.get('format_note') or (f"{height}p" if height else "")
        if not has_video:
            quality_label = ""

        content_length = fmt.get('filesize') or fmt.get('filesize_approx')

        return StreamVariant(
            itag=str(fmt.get('format_id', '')),
            url=fmt['url'],
            quality_label=quality_label,
            mime_type=mime_type,
            container=ext,
            codecs=codecs,
            bitrate=int((fmt.get('tbr') or 0) * 1000),
            audio_bitrate=int(fmt.get('abr') or 0),
            content_length=int(content_length) if content_length else None,
            has_video=has_video,
            has_audio=has_audio,
        )

    @staticmethod
    def choose_format(variants: List[StreamVariant], itag: str) -> Optional[StreamVariant]:
        for variant in variants:
            if variant.itag == itag:
                return variant
        return None

    @staticmethod
    def best_audio(variants: List[StreamVariant]) -> Optional[StreamVariant]:
        """Highest-bitrate audio-only stream."""
        audio_only = [v for v in variants if v.is_audio_only]
        if not audio_only:
            return None
        return max(audio_only, key=lambda v: (v.audio_bitrate, v.bitrate))
