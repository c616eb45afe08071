"""Shared behaviour for the per-platform content clients."""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import ParseResult, urlparse

from video_pipeline.core.exceptions import (
    ConfigurationError, DownloadNotSupportedError, UpstreamHttpError
)
from video_pipeline.models.content import (
    ContentRecord, DownloadResult, Platform, TranscriptSegment
)
from video_pipeline.services.cache_service import CacheService
from video_pipeline.services.download_service import VideoDownloadService
from video_pipeline.utils.http_client import HttpClient
from video_pipeline.utils.logging import CorrelatedLogger


def first_item(values: Any) -> Any:
    """First element of a list, or None."""
    if isinstance(values, list) and values:
        return values[0]
    return None


def as_int(value: Any) -> int:
    """Coerce a provider counter to int; missing or malformed values become 0."""
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def as_dict(value: Any) -> Dict[str, Any]:
    """The value when it is a JSON object, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_url(url: Any) -> Optional[ParseResult]:
    """urlparse that returns None instead of raising on malformed input."""
    if not isinstance(url, str):
        return None
    try:
        return urlparse(url.strip())
    except ValueError:
        return None


def url_host(url: Any) -> str:
    """Lowercased hostname, or an empty string when the URL cannot be parsed."""
    parsed = parse_url(url)
    if parsed is None:
        return ""
    try:
        return (parsed.hostname or "").lower()
    except ValueError:
        return ""


def epoch_to_iso(value: Any) -> Optional[str]:
    """Unix seconds to an ISO 8601 UTC timestamp."""
    seconds = as_int(value)
    if seconds <= 0:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat().replace("+00:00", "Z")


class BasePlatformClient(ABC):
    """
    Base class for platform clients.

    Subclasses provide URL recognition, the remote lookup request and the
    mapping from the provider payload to a ContentRecord. Fetching, caching
    and downloading are shared.
    """

    PLATFORM: Platform
    CREDENTIAL_NAME = "RAPIDAPI_KEY"
    SUPPORTS_DOWNLOAD = False
    SUPPORTS_TRANSCRIPT = False

    def __init__(
        self,
        api_key: Optional[str] = None,
        http_client: Optional[HttpClient] = None,
        cache: Optional[CacheService] = None,
        downloader: Optional[VideoDownloadService] = None,
    ):
        self.api_key = api_key if api_key is not None else self._default_api_key()
        self.http_client = http_client or HttpClient()
        self.cache = cache or CacheService()
        self.downloader = downloader or VideoDownloadService(http_client=self.http_client)

    def _default_api_key(self) -> str:
        return ""

    def get_platform(self) -> str:
        return self.PLATFORM.value

    def is_configured(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    def validate_url(self, url: str) -> bool:
        """Whether the URL belongs to this platform. Pure, no I/O."""

    @abstractmethod
    def extract_content_id(self, url: str) -> Optional[str]:
        """Content id embedded in the URL, or None for unrecognized shapes."""

    @abstractmethod
    def build_request(self, content_id: str) -> Tuple[str, Dict[str, str], Optional[Dict[str, Any]]]:
        """URL, headers and query parameters for the metadata lookup."""

    @abstractmethod
    def map_content(self, data: Dict[str, Any], content_id: str) -> ContentRecord:
        """Map a provider payload to a ContentRecord. Missing fields take defaults."""

    def minimal_record(self, content_id: str, data: Any = None) -> ContentRecord:
        return ContentRecord(id=content_id, platform=self.PLATFORM, raw_data=data)

    async def fetch_content(self, content_id: str, request_id: Optional[str] = None) -> ContentRecord:
        """
        Fetch normalized metadata for one content id.

        Records are cached per client for the configured TTL.

        Raises:
            ConfigurationError: the platform credential is missing (no network call is made)
            UpstreamHttpError: the provider answered with a non-2xx status
            ServiceUnavailableError: the provider could not be reached
            TimeoutError: the provider did not answer in time
        """
        if not self.is_configured():
            raise ConfigurationError(
                self.CREDENTIAL_NAME,
                f"{self.PLATFORM.value} client requires {self.CREDENTIAL_NAME}"
            )

        cached = self.cache.get(self.PLATFORM.value, content_id)
        if cached is not None:
            return cached

        logger = CorrelatedLogger(__name__, request_id)
        url, headers, params = self.build_request(content_id)
        logger.info(f"Fetching {self.PLATFORM.value} content {content_id}")

        response = await self.http_client.get(url, headers=headers, params=params)
        if not response.ok:
            logger.warning(f"{self.PLATFORM.value} API error: {response.status} {response.reason}")
            raise UpstreamHttpError(self.PLATFORM.value, response.status, response.reason, response.json_or_none())

        data = response.json_or_none()
        if isinstance(data, dict) and data:
            try:
                record = self.map_content(data, content_id)
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning(f"Could not map {self.PLATFORM.value} payload for {content_id}: {str(e)}")
                record = self.minimal_record(content_id, data)
        else:
            logger.warning(f"{self.PLATFORM.value} returned an empty or malformed payload for {content_id}")
            record = self.minimal_record(content_id, data)

        self.cache.set(self.PLATFORM.value, content_id, record)
        return record

    async def download_video(
        self,
        content_id: str,
        cookies: Any = None,
        request_id: Optional[str] = None
    ) -> Optional[DownloadResult]:
        """
        Fetch the record and download its media.

        Returns:
            DownloadResult, or None when the record has no video URL

        Raises:
            DownloadNotSupportedError: the platform does not allow downloads
        """
        if not self.SUPPORTS_DOWNLOAD:
            raise DownloadNotSupportedError(self.PLATFORM.value)

        content = await self.fetch_content(content_id, request_id)
        if not content.video_url:
            CorrelatedLogger(__name__, request_id).warning(
                f"No video URL found in {self.PLATFORM.value} content {content_id}"
            )
            return None

        result = await self.downloader.download(content.video_url, cookies=cookies, request_id=request_id)
        extension = "." + result.filename.rsplit(".", 1)[-1] if "." in result.filename else ".mp4"
        return result.model_copy(update={"filename": f"{self.PLATFORM.value}-{content_id}{extension}"})

    async def get_transcript(
        self,
        content_id: str,
        request_id: Optional[str] = None
    ) -> Optional[List[TranscriptSegment]]:
        """Caption segments for the content; platforms without caption support return None."""
        return None
