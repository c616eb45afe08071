"""YouTube content client using the Data API v3, with captions via yt-dlp."""
import asyncio
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, unquote

import yt_dlp

from video_pipeline.core.config import settings, YTDLPConfig
from video_pipeline.core.exceptions import PipelineBaseException
from video_pipeline.models.content import (
    ContentRecord, EngagementMetrics, Platform, TranscriptSegment
)
from video_pipeline.platforms.base import (
    BasePlatformClient, as_dict, as_int, as_str, first_item, parse_url, url_host
)
from video_pipeline.utils.logging import CorrelatedLogger
from video_pipeline.utils.subtitles import SUPPORTED_FORMATS, parse_subtitle_content
from video_pipeline.utils.text import clean_text, extract_hashtags, extract_mentions

VIDEO_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{11}$')
PATH_PREFIXES = ("embed", "shorts", "live", "v")
YOUTUBE_HOSTS = ("youtube.com", "www.youtube.com", "m.youtube.com", "music.youtube.com")
ISO_DURATION_PATTERN = re.compile(
    r'^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$'
)


def parse_iso8601_duration(value: Optional[str]) -> float:
    """Seconds in an ISO 8601 duration such as PT1H2M3S; 0 for anything unparseable."""
    match = ISO_DURATION_PATTERN.match(value or "")
    if not match:
        return 0.0
    parts = {k: float(v) for k, v in match.groupdict().items() if v}
    return (
        parts.get("days", 0) * 86400
        + parts.get("hours", 0) * 3600
        + parts.get("minutes", 0) * 60
        + parts.get("seconds", 0)
    )


class YouTubeClient(BasePlatformClient):
    """Resolves YouTube watch, short and embed links."""

    PLATFORM = Platform.YOUTUBE
    CREDENTIAL_NAME = "YOUTUBE_API_KEY"
    SUPPORTS_TRANSCRIPT = True

    API_URL = "https://www.googleapis.com/youtube/v3/videos"

    # Caption language preference order
    PREFERRED_LANGUAGES = ['en', 'en-US', 'en-GB']

    def _default_api_key(self) -> str:
        return settings.youtube_api_key

    def validate_url(self, url: str) -> bool:
        return self.extract_content_id(url) is not None

    def extract_content_id(self, url: str) -> Optional[str]:
        if not url or not isinstance(url, str):
            return None
        decoded = unquote(url).strip()
        parsed = parse_url(decoded)
        host = url_host(decoded)
        if parsed is None or not host:
            return None

        candidate = None
        if host == "youtu.be":
            candidate = parsed.path.lstrip("/").split("/")[0]
        elif host in YOUTUBE_HOSTS:
            segments = [s for s in parsed.path.split("/") if s]
            if segments and segments[0] == "watch":
                candidate = (parse_qs(parsed.query).get("v") or [None])[0]
            elif len(segments) >= 2 and segments[0] in PATH_PREFIXES:
                candidate = segments[1]

        if candidate and VIDEO_ID_PATTERN.match(candidate):
            return candidate
        return None

    def build_request(self, content_id: str) -> Tuple[str, Dict[str, str], Optional[Dict[str, Any]]]:
        params = {"part": "snippet,statistics,contentDetails", "id": content_id}
        return self.API_URL, {"x-goog-api-key": self.api_key}, params

    def map_content(self, data: Dict[str, Any], content_id: str) -> ContentRecord:
        item = as_dict(first_item(data.get("items")))
        if not item:
            return self.minimal_record(content_id, data)

        snippet = as_dict(item.get("snippet"))
        statistics = as_dict(item.get("statistics"))
        details = as_dict(item.get("contentDetails"))
        thumbnails = as_dict(snippet.get("thumbnails"))
        thumbnail = next(
            (as_str(thumbnails[size].get("url")) or None for size in ("maxres", "high", "medium", "default")
             if isinstance(thumbnails.get(size), dict)),
            None
        )

        title = clean_text(as_str(snippet.get("title")))
        description = clean_text(as_str(snippet.get("description")))
        channel = as_str(snippet.get("channelTitle"))
        raw_tags = snippet.get("tags")
        tags = [t for t in raw_tags if isinstance(t, str)] if isinstance(raw_tags, list) else []

        return ContentRecord(
            id=content_id,
            platform=self.PLATFORM,
            title=title,
            description=description,
            author=channel or "unknown",
            author_display_name=channel,
            thumbnail_url=thumbnail,
            duration=parse_iso8601_duration(as_str(details.get("duration"))),
            hashtags=extract_hashtags(description) or tags,
            mentions=extract_mentions(description),
            metrics=EngagementMetrics(
                likes=as_int(statistics.get("likeCount")),
                views=as_int(statistics.get("viewCount")),
                comments=as_int(statistics.get("commentCount")),
                saves=as_int(statistics.get("favoriteCount")),
            ),
            timestamp=as_str(snippet.get("publishedAt")) or None,
            language=as_str(snippet.get("defaultAudioLanguage")) or as_str(snippet.get("defaultLanguage")) or None,
            raw_data=data,
        )

    async def get_transcript(
        self,
        content_id: str,
        request_id: Optional[str] = None
    ) -> Optional[List[TranscriptSegment]]:
        """
        Caption segments located by yt-dlp (no media download).

        Manual subtitles are preferred over automatic captions, json3 over vtt.
        Returns None when no usable track exists or extraction fails.
        """
        logger = CorrelatedLogger(__name__, request_id)
        watch_url = f"https://www.youtube.com/watch?v={content_id}"

        try:
            video_info = await asyncio.to_thread(self._extract_info, watch_url)
        except yt_dlp.utils.DownloadError as e:
            logger.warning(f"Caption lookup failed for {content_id}: {str(e)}")
            return None

        for track in self.select_tracks(video_info or {}):
            try:
                response = await self.http_client.get(track["url"])
            except PipelineBaseException as e:
                logger.warning(f"Caption fetch failed ({track['ext']}): {e.message}")
                continue
            if not response.ok:
                logger.warning(f"Caption fetch returned {response.status} ({track['ext']})")
                continue

            segments = parse_subtitle_content(response.text(), track["ext"])
            if segments:
                logger.info(f"Extracted {len(segments)} caption segments for {content_id}")
                return segments

        logger.info(f"No usable captions for {content_id}")
        return None

    def _extract_info(self, url: str) -> Dict[str, Any]:
        options = YTDLPConfig.get_options(timeout=int(settings.http_timeout))
        with yt_dlp.YoutubeDL(options) as ydl:
            return ydl.extract_info(url, download=False)

    def select_tracks(self, video_info: Dict[str, Any]) -> List[Dict[str, str]]:
        """Candidate caption tracks in preference order."""
        tracks = []
        for source in ("subtitles", "automatic_captions"):
            by_language = video_info.get(source) or {}
            if not isinstance(by_language, dict):
                continue
            languages = [lang for lang in self.PREFERRED_LANGUAGES if lang in by_language]
            languages += [lang for lang in by_language if lang not in languages]
            for language in languages:
                formats = by_language.get(language) or []
                for ext in SUPPORTED_FORMATS:
                    for fmt in formats:
                        if isinstance(fmt, dict) and fmt.get("ext") == ext and fmt.get("url"):
                            tracks.append({"url": fmt["url"], "ext": ext, "language": language})
        return tracks
