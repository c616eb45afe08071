"""Resilient video download from direct media URLs."""
import asyncio
import mimetypes
import os
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import urlparse

from video_pipeline.core.config import settings, PlatformConfig
from video_pipeline.core.exceptions import (
    PipelineBaseException, DownloadFailedError, SizeLimitExceededError,
    UpstreamHttpError, ValidationError
)
from video_pipeline.models.content import DownloadResult
from video_pipeline.utils.cookies import build_cookie_header, cookie_names
from video_pipeline.utils.http_client import HttpClient, HttpResponse
from video_pipeline.utils.logging import CorrelatedLogger, MetricsLogger
from video_pipeline.utils.retry import Backoff, exponential_backoff, retry_async

DEFAULT_MIME_TYPE = "video/mp4"


def _is_retryable(error: BaseException) -> bool:
    # Size rejections are final
    return isinstance(error, PipelineBaseException) and not isinstance(error, SizeLimitExceededError)


class VideoDownloadService:
    """HEAD size check, GET and body size check wrapped in a bounded retry loop."""

    BASE_HEADERS = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/119.0 Safari/537.36"
        ),
        "Accept": "video/mp4,video/*;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Connection": "keep-alive",
    }

    # Platforms whose CDNs reject requests without a matching Referer/Origin
    PLATFORM_HEADERS = {
        "tiktok": {"Referer": "https://www.tiktok.com/", "Origin": "https://www.tiktok.com"},
        "instagram": {"Referer": "https://www.instagram.com/", "Origin": "https://www.instagram.com"},
    }

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        max_bytes: Optional[int] = None,
        max_attempts: Optional[int] = None,
        backoff: Optional[Backoff] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.http_client = http_client or HttpClient()
        self.max_bytes = settings.max_download_bytes if max_bytes is None else max_bytes
        self.max_attempts = settings.download_max_attempts if max_attempts is None else max_attempts
        self.backoff = backoff or exponential_backoff(
            base=settings.download_backoff_base,
            cap=settings.download_backoff_cap,
            jitter=settings.download_backoff_jitter,
        )
        self.sleep = sleep
        self.metrics = MetricsLogger()

    def build_headers(self, url: str, cookie_header: Optional[str] = None) -> Dict[str, str]:
        """Browser-like headers plus platform Referer/Origin and the optional Cookie."""
        headers = dict(self.BASE_HEADERS)
        platform = PlatformConfig.platform_for_host(urlparse(url).hostname or "")
        headers.update(self.PLATFORM_HEADERS.get(platform, {}))
        if cookie_header:
            headers["Cookie"] = cookie_header
        return headers

    async def download(
        self,
        url: str,
        cookies: Any = None,
        request_id: Optional[str] = None
    ) -> DownloadResult:
        """
        Download a video from a direct media URL.

        Args:
            url: Direct media (CDN) URL
            cookies: Cookie header string, list of {name, value} pairs, or a mapping
            request_id: Request correlation ID for logging

        Returns:
            DownloadResult with the full body

        Raises:
            ValidationError: url is not an http(s) URL
            SizeLimitExceededError: declared or actual size is over the limit (never retried)
            DownloadFailedError: every attempt failed
        """
        try:
            parsed = urlparse(url or "")
            host = parsed.hostname
        except ValueError:
            raise ValidationError("Invalid video URL", {"url": url})
        if parsed.scheme not in ("http", "https") or not host:
            raise ValidationError("Invalid video URL", {"url": url})

        logger = CorrelatedLogger(__name__, request_id)
        cookie_header = build_cookie_header(cookies)
        headers = self.build_headers(url, cookie_header)
        headers_used = list(headers.keys())
        names = cookie_names(cookie_header)
        attempts_made = 0

        logger.info(f"Downloading video from {parsed.netloc} (max {self.max_bytes} bytes)")

        async def attempt(number: int) -> DownloadResult:
            nonlocal attempts_made
            attempts_made = number
            await self._check_declared_size(url, headers, number, logger)

            response = await self.http_client.get(url, headers=headers)
            if not response.ok:
                raise UpstreamHttpError("download", response.status, response.reason)

            size = len(response.body)
            if size > self.max_bytes:
                raise SizeLimitExceededError(size, self.max_bytes, {"status": response.status})

            logger.info(f"Video downloaded (attempt {number}): {size} bytes")
            return self._build_result(url, response, headers_used, names)

        def on_retry(number: int, error: BaseException, wait: float) -> None:
            logger.warning(f"Download attempt {number} failed: {error}. Retrying in {wait:.2f}s")

        try:
            result = await retry_async(
                attempt,
                max_attempts=self.max_attempts,
                backoff=self.backoff,
                is_retryable=_is_retryable,
                sleep=self.sleep,
                on_retry=on_retry,
            )
        except SizeLimitExceededError as e:
            logger.warning(e.message)
            self.metrics.log_download_metrics(
                request_id, url, False, attempts_made, e.size, error_code=e.error_code
            )
            raise
        except PipelineBaseException as e:
            status = e.status if isinstance(e, UpstreamHttpError) else None
            reason = f"GET failed: {e.status} {e.status_text}".strip() if status else e.message
            logger.error(f"Download failed after {attempts_made} attempts: {reason}")
            self.metrics.log_download_metrics(
                request_id, url, False, attempts_made, error_code="DOWNLOAD_FAILED"
            )
            raise DownloadFailedError(url, reason, headers_used, names, status)

        self.metrics.log_download_metrics(request_id, url, True, attempts_made, result.size)
        return result

    async def _check_declared_size(self, url: str, headers: Dict[str, str], attempt: int, logger: CorrelatedLogger) -> None:
        """HEAD the URL and reject early when the declared size is over the limit."""
        try:
            head = await self.http_client.head(url, headers=headers)
        except PipelineBaseException as e:
            # Some CDNs block HEAD while GET works
            logger.warning(f"Attempt {attempt} HEAD error: {e.message}")
            return

        if not head.ok:
            logger.warning(f"Attempt {attempt} HEAD {head.status} {head.reason}")

        try:
            declared = int(head.header("content-length", ""))
        except ValueError:
            return

        if declared > self.max_bytes:
            raise SizeLimitExceededError(declared, self.max_bytes, {"status": head.status, "declared": True})

    def _build_result(self, url: str, response: HttpResponse, headers_used, names) -> DownloadResult:
        mime_type = (response.header("content-type") or DEFAULT_MIME_TYPE).split(";")[0].strip() or DEFAULT_MIME_TYPE
        return DownloadResult(
            data=response.body,
            size=len(response.body),
            mime_type=mime_type,
            filename=self._filename_for(url, mime_type),
            quality="original",
            source_url=url,
            headers_used=headers_used,
            cookie_names=names,
        )

    @staticmethod
    def _filename_for(url: str, mime_type: str) -> str:
        name = os.path.basename(urlparse(url).path)
        if name and "." in name:
            return name
        extension = mimetypes.guess_extension(mime_type) or ".mp4"
        return f"{name or 'video'}{extension}"
