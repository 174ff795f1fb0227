"""
Unit tests for the yt-dlp backed YouTube fetcher.
"""

import time
from unittest.mock import AsyncMock, patch

import pytest
import yt_dlp

from app.core.exceptions import (
    ExtractionError, FormatNotAvailableError, InvalidURLError,
    ProcessingTimeoutError, VideoPrivateError
)
from app.services.youtube_fetcher import YouTubeFetcher


WATCH_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class TestToVariant:
    """Test mapping of yt-dlp format dicts."""

    def test_muxed_mp4(self, ytdlp_info):
        variant = YouTubeFetcher.to_variant(ytdlp_info["formats"][2])

        assert variant.itag == "18"
        assert variant.mime_type == 'video/mp4; codecs="avc1.42001E, mp4a.40.2"'
        assert variant.quality_label == "360p"
        assert variant.container == "mp4"
        assert variant.content_length == 13369344
        assert variant.has_video and variant.has_audio
        assert not variant.is_audio_only

    def test_audio_only(self, ytdlp_info):
        variant = YouTubeFetcher.to_variant(ytdlp_info["formats"][1])

        assert variant.itag == "140"
        assert variant.mime_type == 'audio/m4a; codecs="mp4a.40.2"'
        assert variant.quality_label == ""
        assert variant.bitrate == 130000
        assert variant.audio_bitrate == 129
        assert variant.is_audio_only

    def test_quality_from_height(self):
        variant = YouTubeFetcher.to_variant({
            "format_id": "22", "url": "https://rr.googlevideo.com/22", "ext": "mp4",
            "vcodec": "avc1", "acodec": "mp4a", "height": 720,
        })

        assert variant.quality_label == "720p"
        assert variant.content_length is None


class TestYouTubeFetcher:
    """Test the fetch flow with yt-dlp extraction mocked out."""

    @pytest.mark.asyncio
    async def test_fetch_picks_itag_18_and_best_audio(self, ytdlp_info):
        fetcher = YouTubeFetcher()
        with patch.object(fetcher, "_extract_with_ytdlp", AsyncMock(return_value=ytdlp_info)) as extract:
            record = await fetcher.fetch(WATCH_URL)

        extract.assert_awaited_once_with("dQw4w9WgXcQ")
        assert record.video_id == "dQw4w9WgXcQ"
        assert record.mp4.itag == "18"
        assert record.audio.itag == "140"
        # storyboard format without a url is dropped
        assert [v.itag for v in record.variants] == ["139", "140", "18", "137"]

    @pytest.mark.asyncio
    async def test_missing_itag_18_fails(self, ytdlp_info):
        ytdlp_info["formats"] = [f for f in ytdlp_info["formats"] if f["format_id"] != "18"]
        fetcher = YouTubeFetcher()

        with patch.object(fetcher, "_extract_with_ytdlp", AsyncMock(return_value=ytdlp_info)):
            with pytest.raises(FormatNotAvailableError) as exc_info:
                await fetcher.fetch(WATCH_URL)

        assert exc_info.value.status_code == 404
        assert exc_info.value.details["format_id"] == "18"

    @pytest.mark.asyncio
    async def test_missing_audio_fails(self, ytdlp_info):
        ytdlp_info["formats"] = [f for f in ytdlp_info["formats"] if f["format_id"] in ("18", "137")]
        fetcher = YouTubeFetcher()

        with patch.object(fetcher, "_extract_with_ytdlp", AsyncMock(return_value=ytdlp_info)):
            with pytest.raises(FormatNotAvailableError):
                await fetcher.fetch(WATCH_URL)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["", "https://www.youtube.com/feed/trending"])
    async def test_invalid_url(self, url):
        with pytest.raises(InvalidURLError) as exc_info:
            await YouTubeFetcher().fetch(url)

        assert exc_info.value.message == "Please provide a valid YouTube URL"


class TestExtraction:
    """Test the executor-wrapped yt-dlp call."""

    @pytest.mark.asyncio
    async def test_download_error_is_classified(self):
        with patch("app.services.youtube_fetcher.yt_dlp.YoutubeDL") as mock_ydl:
            ydl = mock_ydl.return_value.__enter__.return_value
            ydl.extract_info.side_effect = yt_dlp.utils.DownloadError("ERROR: Private video. Sign in")

            with pytest.raises(VideoPrivateError):
                await YouTubeFetcher()._extract_with_ytdlp("dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_empty_info_fails(self):
        with patch("app.services.youtube_fetcher.yt_dlp.YoutubeDL") as mock_ydl:
            mock_ydl.return_value.__enter__.return_value.extract_info.return_value = None

            with pytest.raises(ExtractionError):
                await YouTubeFetcher()._extract_with_ytdlp("dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def slow_extract(*args, **kwargs):
            time.sleep(0.5)
            return {}

        with patch("app.services.youtube_fetcher.yt_dlp.YoutubeDL") as mock_ydl:
            mock_ydl.return_value.__enter__.return_value.extract_info.side_effect = slow_extract

            with pytest.raises(ProcessingTimeoutError) as exc_info:
                await YouTubeFetcher(timeout=0.05)._extract_with_ytdlp("dQw4w9WgXcQ")

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_watch_url_is_canonical(self, ytdlp_info):
        with patch("app.services.youtube_fetcher.yt_dlp.YoutubeDL") as mock_ydl:
            ydl = mock_ydl.return_value.__enter__.return_value
            ydl.extract_info.return_value = ytdlp_info

            info = await YouTubeFetcher()._extract_with_ytdlp("dQw4w9WgXcQ")

        assert info is ytdlp_info
        ydl.extract_info.assert_called_once_with(WATCH_URL, download=False)
