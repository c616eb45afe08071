"""URL-based routing to the platform clients."""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from video_pipeline.core.exceptions import (
    ContentIdExtractionError, DownloadNotSupportedError,
    TranscriptNotSupportedError, UnsupportedPlatformError
)
from video_pipeline.models.content import (
    ContentRecord, DownloadResult, TranscriptSegment, UrlValidationResult
)
from video_pipeline.platforms.base import BasePlatformClient, parse_url, url_host
from video_pipeline.platforms.instagram import InstagramClient
from video_pipeline.platforms.tiktok import TikTokClient
from video_pipeline.platforms.youtube import YouTubeClient
from video_pipeline.services.download_service import VideoDownloadService
from video_pipeline.utils.http_client import HttpClient
from video_pipeline.utils.logging import CorrelatedLogger

UNSUPPORTED_PLATFORM_MESSAGE = "Unsupported platform. Only TikTok, Instagram, and YouTube are supported."


@dataclass
class PlatformDetection:
    """A URL matched to the platform client that owns it."""
    platform: str
    client: BasePlatformClient


class PlatformServiceManager:
    """Holds one client per platform and dispatches URLs to them in a fixed order."""

    def __init__(
        self,
        clients: Optional[List[BasePlatformClient]] = None,
        http_client: Optional[HttpClient] = None,
        downloader: Optional[VideoDownloadService] = None,
    ):
        if clients is None:
            http_client = http_client or HttpClient()
            downloader = downloader or VideoDownloadService(http_client=http_client)
            clients = [
                TikTokClient(http_client=http_client, downloader=downloader),
                InstagramClient(http_client=http_client, downloader=downloader),
                YouTubeClient(http_client=http_client, downloader=downloader),
            ]
        self.clients: Dict[str, BasePlatformClient] = {c.get_platform(): c for c in clients}

    def detect_platform_and_get_client(self, url: str) -> Optional[PlatformDetection]:
        """First client (tiktok, instagram, youtube) whose validate_url accepts the URL."""
        for platform, client in self.clients.items():
            if client.validate_url(url):
                return PlatformDetection(platform=platform, client=client)
        return None

    def get_client(self, platform: str) -> Optional[BasePlatformClient]:
        return self.clients.get((platform or "").lower())

    def _resolve(self, url: str) -> tuple:
        detection = self.detect_platform_and_get_client(url)
        if detection is None:
            raise UnsupportedPlatformError(url)

        content_id = detection.client.extract_content_id(url)
        if not content_id:
            raise ContentIdExtractionError(url, detection.platform)
        return detection, content_id

    async def fetch_content(self, url: str, request_id: Optional[str] = None) -> ContentRecord:
        """
        Fetch normalized metadata for any supported URL.

        Raises:
            UnsupportedPlatformError: no client recognizes the URL
            ContentIdExtractionError: the client recognizes the URL but finds no id in it
        """
        detection, content_id = self._resolve(url)
        logger = CorrelatedLogger(__name__, request_id)
        logger.info(f"Fetching {detection.platform} content: {content_id}")

        content = await detection.client.fetch_content(content_id, request_id)
        logger.info(f"Fetched {detection.platform} content {content_id}")
        return content

    async def download_video(
        self,
        url: str,
        cookies: Any = None,
        request_id: Optional[str] = None
    ) -> Optional[DownloadResult]:
        """
        Download the media behind any supported URL.

        Raises:
            UnsupportedPlatformError, ContentIdExtractionError: as for fetch_content
            DownloadNotSupportedError: the platform does not allow downloads
        """
        detection, content_id = self._resolve(url)
        if not detection.client.SUPPORTS_DOWNLOAD:
            raise DownloadNotSupportedError(detection.platform)

        logger = CorrelatedLogger(__name__, request_id)
        logger.info(f"Downloading {detection.platform} video: {content_id}")

        result = await detection.client.download_video(content_id, cookies=cookies, request_id=request_id)
        if result:
            logger.info(f"Downloaded {detection.platform} video ({result.size / 1024 / 1024:.2f}MB)")
        else:
            logger.warning(f"{detection.platform} video download returned no result")
        return result

    async def get_transcript(
        self,
        url: str,
        request_id: Optional[str] = None
    ) -> Optional[List[TranscriptSegment]]:
        """
        Caption segments for any supported URL.

        Raises:
            UnsupportedPlatformError, ContentIdExtractionError: as for fetch_content
            TranscriptNotSupportedError: the platform has no caption support
        """
        detection, content_id = self._resolve(url)
        if not detection.client.SUPPORTS_TRANSCRIPT:
            raise TranscriptNotSupportedError(detection.platform)

        CorrelatedLogger(__name__, request_id).info(f"Getting {detection.platform} transcript: {content_id}")
        return await detection.client.get_transcript(content_id, request_id)

    def validate_url(self, url: str) -> UrlValidationResult:
        """Check a URL against the registered platforms. Never raises."""
        parsed = parse_url(url)
        if parsed is None or parsed.scheme not in ("http", "https") or not url_host(url):
            return UrlValidationResult(valid=False, error="Invalid URL format")

        detection = self.detect_platform_and_get_client(url)
        if detection is None:
            return UrlValidationResult(valid=False, error=UNSUPPORTED_PLATFORM_MESSAGE)

        if not detection.client.extract_content_id(url):
            return UrlValidationResult(
                valid=False,
                platform=detection.platform,
                error=f"Invalid {detection.platform} URL format"
            )
        return UrlValidationResult(valid=True, platform=detection.platform)

    def get_clients_status(self) -> Dict[str, Dict[str, Any]]:
        """Configuration and capability flags per platform."""
        return {
            platform: {
                "configured": client.is_configured(),
                "credential": client.CREDENTIAL_NAME,
                "supports_download": client.SUPPORTS_DOWNLOAD,
                "supports_transcript": client.SUPPORTS_TRANSCRIPT,
            }
            for platform, client in self.clients.items()
        }
