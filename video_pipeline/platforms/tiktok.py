"""TikTok content client backed by a RapidAPI scraper."""
import re
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote

from video_pipeline.core.config import settings
from video_pipeline.models.content import ContentRecord, EngagementMetrics, Platform
from video_pipeline.platforms.base import (
    BasePlatformClient, as_dict, as_int, as_str, epoch_to_iso, first_item, url_host
)
from video_pipeline.utils.text import clean_text, extract_hashtags, extract_mentions


class TikTokClient(BasePlatformClient):
    """Resolves TikTok video URLs and metadata."""

    PLATFORM = Platform.TIKTOK
    SUPPORTS_DOWNLOAD = True

    API_HOST = "tiktok-scrapper-videos-music-challenges-downloader.p.rapidapi.com"

    ID_PATTERNS = [
        re.compile(r'tiktok\.com/@[^/]+/video/(\d+)'),
        re.compile(r'(?:vm|vt)\.tiktok\.com/([A-Za-z0-9]+)'),
        re.compile(r'tiktok\.com/t/([A-Za-z0-9]+)'),
        re.compile(r'm\.tiktok\.com/v/(\d+)'),
        re.compile(r'tiktok\.com/embed/(?:v2/)?(\d+)'),
    ]

    def _default_api_key(self) -> str:
        return settings.rapidapi_key

    def validate_url(self, url: str) -> bool:
        host = url_host(url)
        return host == "tiktok.com" or host.endswith(".tiktok.com")

    def extract_content_id(self, url: str) -> Optional[str]:
        if not url or not self.validate_url(url):
            return None
        decoded = unquote(url)
        for pattern in self.ID_PATTERNS:
            match = pattern.search(decoded)
            if match:
                return match.group(1)
        return None

    def build_request(self, content_id: str) -> Tuple[str, Dict[str, str], Optional[Dict[str, Any]]]:
        headers = {
            "x-rapidapi-key": self.api_key,
            "x-rapidapi-host": self.API_HOST,
        }
        return f"https://{self.API_HOST}/video/{content_id}", headers, None

    def map_content(self, data: Dict[str, Any], content_id: str) -> ContentRecord:
        detail = as_dict(as_dict(data.get("data")).get("aweme_detail")) or data

        statistics = as_dict(detail.get("statistics"))
        author = as_dict(detail.get("author"))
        video = as_dict(detail.get("video"))
        music = as_dict(detail.get("music"))

        video_url = first_item(as_dict(video.get("play_addr")).get("url_list"))
        audio_url = as_str(as_dict(music.get("play_url")).get("uri")) or None
        thumbnail_url = first_item(
            as_dict(video.get("cover")).get("url_list") or as_dict(video.get("dynamic_cover")).get("url_list")
        )

        description = clean_text(as_str(detail.get("desc")))
        handle = as_str(author.get("unique_id"))
        nickname = as_str(author.get("nickname"))
        duration_ms = as_int(video.get("duration"))

        return ContentRecord(
            id=content_id,
            platform=self.PLATFORM,
            title=description or f"Video by @{nickname or handle}",
            description=description,
            author=handle or "unknown",
            author_display_name=nickname,
            author_verified=(
                str(author.get("custom_verify") or "") == "1"
                or bool(author.get("enterprise_verify_reason"))
            ),
            video_url=video_url if isinstance(video_url, str) else None,
            audio_url=audio_url,
            thumbnail_url=thumbnail_url if isinstance(thumbnail_url, str) else None,
            duration=duration_ms // 1000 if duration_ms else 0,
            hashtags=extract_hashtags(description),
            mentions=extract_mentions(description),
            metrics=EngagementMetrics(
                likes=as_int(statistics.get("digg_count")),
                views=as_int(statistics.get("play_count")),
                comments=as_int(statistics.get("comment_count")),
                shares=as_int(statistics.get("share_count")),
                saves=as_int(statistics.get("collect_count")),
            ),
            timestamp=epoch_to_iso(detail.get("create_time")),
            language=as_str(detail.get("region")) or "en",
            raw_data=data,
        )
