"""
TikTok metadata fetcher for vidproxy.

Resolves share links, finds a playable video URL through an ordered list of
strategies and pulls the embedded item record out of the public video page.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from app.core.exceptions import (
    ExtractionError, InvalidURLError, MetadataNotFoundError
)
from app.services.link_resolver import ShortLinkResolver
from app.services.platform_detector import PlatformDetector


logger = logging.getLogger(__name__)


@dataclass
class PlayAddress:
    """A playable video URL and where it came from."""
    url: str
    quality: str
    server: str


@dataclass
class TikTokRecord:
    """Raw platform data for one TikTok video."""
    video_id: str
    url: str
    item: Dict[str, Any]
    play: PlayAddress


PlayUrlStrategy = Callable[[str], Awaitable[Optional[PlayAddress]]]


class TikTokFetcher:
    """
    Fetches raw TikTok video data.

    The no-watermark play URL comes from the first strategy in
    ``play_url_strategies`` that succeeds: the mobile feed API, then the
    public CDN proxy. The CDN proxy never fails, so a play URL is always
    available.
    """

    MOBILE_API_URL = "https://api16-normal-c-useast1a.tiktokv.com/aweme/v1/feed/"
    CDN_PROXY_URL = "https://tikcdn.io/tiktokdownload/{video_id}"
    PAGE_URL = "https://www.tiktok.com/@placeholder/video/{video_id}"

    MOBILE_USER_AGENT = (
        "com.ss.android.ugc.trill/2613 (Linux; U; Android 10; en_US; Pixel 4; "
        "Build/QQ3A.200805.001; Cronet/58.0.2991.0)"
    )
    BROWSER_USER_AGENT = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )

    REHYDRATION_SCRIPT_ID = "__UNIVERSAL_DATA_FOR_REHYDRATION__"
    LEGACY_SCRIPT_ID = "SIGI_STATE"

    # Where the item record lives inside the rehydration blob, newest layout first
    ITEM_PATHS: List[Tuple[str, ...]] = [
        ("__DEFAULT_SCOPE__", "webapp.video-detail", "itemInfo", "itemStruct"),
        ("__DEFAULT_SCOPE__", "webapp", "videoDetail", "itemInfo", "itemStruct"),
    ]

    def __init__(self, client: httpx.AsyncClient, timeout: float = 5.0, short_link_timeout: float = 3.0):
        self.client = client
        self.timeout = timeout
        self.link_resolver = ShortLinkResolver(client, timeout=short_link_timeout)
        self.play_url_strategies: List[Tuple[str, PlayUrlStrategy]] = [
            ("mobile_api", self._play_url_from_mobile_api),
            ("cdn_proxy", self._play_url_from_cdn_proxy),
        ]

    async def fetch(self, url: str) -> TikTokRecord:
        """
        Fetch the raw record for a TikTok URL.

        Args:
            url: Canonical or short TikTok link

        Returns:
            TikTokRecord with the working URL, item record and play address

        Raises:
            InvalidURLError: If no video id can be found in the URL
            MetadataNotFoundError: If the page carries no embedded data
            ExtractionError: If the embedded data has an unexpected shape
            httpx.HTTPError: If the page request fails
        """
        if PlatformDetector.is_tiktok_short_link(url):
            url = await self.link_resolver.resolve(url)

        video_id = PlatformDetector.extract_tiktok_id(url)
        if not video_id:
            raise InvalidURLError("Invalid TikTok URL", url=url)

        play = await self.resolve_play_url(video_id)
        html = await self.fetch_page(url, video_id)
        item = self.extract_item(html, video_id)

        return TikTokRecord(video_id=video_id, url=url, item=item, play=play)

    async def resolve_play_url(self, video_id: str) -> PlayAddress:
        """Try each play URL strategy in order; the first result wins."""
        for name, strategy in self.play_url_strategies:
            try:
                play = await strategy(video_id)
            except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
                logger.warning(f"Play URL strategy '{name}' failed for {video_id}: {type(e).__name__}: {e}")
                continue
            if play:
                logger.info(f"Play URL for {video_id} resolved via '{name}' ({play.quality})")
                return play
            logger.info(f"Play URL strategy '{name}' returned nothing for {video_id}")

        raise ExtractionError("No playable video URL found")

    async def _play_url_from_mobile_api(self, video_id: str) -> Optional[PlayAddress]:
        response = await self.client.get(
            self.MOBILE_API_URL,
            params={"aweme_id": video_id},
            headers={
                "User-Agent": self.MOBILE_USER_AGENT,
                "Accept": "application/json",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()

        data = response.json()
        play_url = data["aweme_list"][0]["video"]["play_addr"]["url_list"][0]
        if not play_url:
            return None
        return PlayAddress(url=play_url, quality="HD", server=urlparse(play_url).hostname or "tiktokv.com")

    async def _play_url_from_cdn_proxy(self, video_id: str) -> Optional[PlayAddress]:
        return PlayAddress(
            url=self.CDN_PROXY_URL.format(video_id=video_id),
            quality="Standard",
            server="tikcdn.io",
        )

    async def fetch_page(self, url: str, video_id: str) -> str:
        """Download the public video page HTML."""
        page_url = url if "tiktok.com" in url else self.PAGE_URL.format(video_id=video_id)
        response = await self.client.get(
            page_url,
            headers={
                "User-Agent": self.BROWSER_USER_AGENT,
                "Referer": "https://www.tiktok.com/",
            },
            timeout=self.timeout,
            follow_redirects=True,
        )
        response.raise_for_status()
        return response.text

    @classmethod
    def extract_item(cls, html: str, video_id: str) -> Dict[str, Any]:
        """
        Pull the item record out of the page HTML.

        Args:
            html: Video page HTML
            video_id: Numeric video id, used for the legacy layout lookup

        Returns:
            The platform item record with native field names

        Raises:
            MetadataNotFoundError: If no known data script is present
            ExtractionError: If the script content is not the expected JSON
        """
        soup = BeautifulSoup(html or "", "html.parser")

        script_text = cls._script_text(soup, cls.REHYDRATION_SCRIPT_ID)
        if script_text:
            data = cls._load_json(script_text)
            for path in cls.ITEM_PATHS:
                item = cls._dig(data, path)
                if item:
                    return item
            raise ExtractionError("Video data extraction failed")

        legacy_text = cls._script_text(soup, cls.LEGACY_SCRIPT_ID)
        if legacy_text:
            item = cls._item_from_sigi_state(cls._load_json(legacy_text), video_id)
            if item:
                return item
            raise ExtractionError("Video data extraction failed")

        raise MetadataNotFoundError("TikTok metadata not found")

    @staticmethod
    def _script_text(soup: BeautifulSoup, script_id: str) -> Optional[str]:
        script = soup.find("script", id=script_id)
        if script is None:
            return None
        return script.string or script.get_text() or None

    @staticmethod
    def _load_json(text: str) -> Any:
        try:
            return json.loads(text)
        except ValueError as e:
            raise ExtractionError(f"Malformed embedded video data: {e}")

    @staticmethod
    def _dig(data: Any, path: Sequence[str]) -> Optional[Dict[str, Any]]:
        for key in path:
            if not isinstance(data, dict):
                return None
            data = data.get(key)
        return data if isinstance(data, dict) and data else None

    @staticmethod
    def _item_from_sigi_state(data: Any, video_id: str) -> Optional[Dict[str, Any]]:
        """Older pages keep items and users in separate modules keyed by id/username."""
        if not isinstance(data, dict):
            return None
        item = (data.get("ItemModule") or {}).get(video_id)
        if not isinstance(item, dict) or not item:
            return None

        item = dict(item)
        username = item.get("author")
        if isinstance(username, str):
            users = data.get("UserModule") or {}
            item["author"] = (users.get("users") or {}).get(username) or {"uniqueId": username}
            item["authorStats"] = (users.get("stats") or {}).get(username) or {}
        return item
