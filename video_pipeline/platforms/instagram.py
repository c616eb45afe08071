"""Instagram content client backed by a RapidAPI scraper."""
import re
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote

from video_pipeline.core.config import settings
from video_pipeline.models.content import ContentRecord, EngagementMetrics, Platform
from video_pipeline.platforms.base import (
    BasePlatformClient, as_dict, as_float, as_int, as_str, epoch_to_iso, first_item, parse_url, url_host
)
from video_pipeline.utils.text import clean_text, extract_hashtags, extract_mentions

SHORTCODE_PATTERN = re.compile(r'/(?:share/(?:reels?/|p/)?|p/|reels?/|tv/)([A-Za-z0-9_-]+)', re.IGNORECASE)


class InstagramClient(BasePlatformClient):
    """Resolves Instagram post, reel and share links."""

    PLATFORM = Platform.INSTAGRAM
    SUPPORTS_DOWNLOAD = True

    API_HOST = "instagram-api-fast-reliable-data-scraper.p.rapidapi.com"

    def _default_api_key(self) -> str:
        return settings.rapidapi_key

    def validate_url(self, url: str) -> bool:
        return self.extract_content_id(url) is not None

    def extract_content_id(self, url: str) -> Optional[str]:
        host = url_host(url)
        if not (host == "instagram.com" or host.endswith(".instagram.com")):
            return None
        match = SHORTCODE_PATTERN.search(unquote(parse_url(url).path))
        return match.group(1) if match else None

    def build_request(self, content_id: str) -> Tuple[str, Dict[str, str], Optional[Dict[str, Any]]]:
        headers = {
            "x-rapidapi-host": self.API_HOST,
            "x-rapidapi-key": self.api_key,
        }
        return f"https://{self.API_HOST}/post", headers, {"shortcode": content_id}

    @staticmethod
    def select_video_url(data: Dict[str, Any]) -> Optional[str]:
        """Lowest-bandwidth rendition across the standard and DASH versions."""
        standard = data.get("video_versions")
        dash = as_dict(data.get("video_dash_manifest")).get("video_versions")
        versions = [
            v for v in (dash if isinstance(dash, list) else []) + (standard if isinstance(standard, list) else [])
            if isinstance(v, dict) and isinstance(v.get("url"), str) and v["url"]
        ]
        if not versions:
            return None
        return sorted(versions, key=lambda v: as_int(v.get("bandwidth")))[0]["url"]

    def map_content(self, data: Dict[str, Any], content_id: str) -> ContentRecord:
        video_url = self.select_video_url(data)
        thumbnail = as_dict(first_item(as_dict(data.get("image_versions2")).get("candidates"))).get("url")
        caption = clean_text(as_str(as_dict(data.get("caption")).get("text")))
        user = as_dict(data.get("user"))
        username = as_str(user.get("username"))

        return ContentRecord(
            id=content_id,
            platform=self.PLATFORM,
            short_code=content_id,
            title=caption or f"Video by @{username}",
            description=caption,
            author=username or "unknown",
            author_display_name=as_str(user.get("full_name")),
            author_verified=bool(user.get("is_verified")),
            video_url=video_url,
            thumbnail_url=as_str(thumbnail) or None,
            duration=as_float(data.get("video_duration")),
            hashtags=extract_hashtags(caption),
            mentions=extract_mentions(caption),
            metrics=EngagementMetrics(
                likes=as_int(data.get("like_count")),
                views=as_int(data.get("play_count")),
                comments=as_int(data.get("comment_count")),
                shares=as_int(data.get("reshare_count")),
            ),
            timestamp=epoch_to_iso(data.get("taken_at")),
            is_video=bool(video_url),
            raw_data=data,
        )
