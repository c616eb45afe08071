"""Unit tests for VideoDownloadService."""
import pytest
from unittest.mock import AsyncMock, Mock

from video_pipeline.core.exceptions import (
    DownloadFailedError, ServiceUnavailableError, SizeLimitExceededError, ValidationError
)
from video_pipeline.services.download_service import VideoDownloadService
from video_pipeline.utils.http_client import HttpResponse

VIDEO_URL = "https://v16-webapp.tiktokcdn.com/abc/video.mp4?expire=1"


async def no_sleep(seconds):
    return None


class TestVideoDownloadService:
    """Test HEAD size check, GET, body size check and retry behaviour."""

    @pytest.fixture
    def http(self):
        http = Mock()
        http.head = AsyncMock(return_value=HttpResponse(status=200, headers={"Content-Length": "4096"}))
        http.get = AsyncMock(return_value=HttpResponse(
            status=200, headers={"Content-Type": "video/mp4; charset=binary"}, body=b"\x00" * 4096
        ))
        return http

    def make_service(self, http, max_bytes=10_000, max_attempts=4):
        return VideoDownloadService(
            http_client=http, max_bytes=max_bytes, max_attempts=max_attempts,
            backoff=lambda attempt: 0, sleep=no_sleep
        )

    @pytest.mark.asyncio
    async def test_successful_download(self, http):
        result = await self.make_service(http).download(VIDEO_URL)

        assert result.size == len(result.data) == 4096
        assert result.mime_type == "video/mp4"
        assert result.filename == "video.mp4"
        assert result.source_url == VIDEO_URL
        assert http.get.await_count == 1

    @pytest.mark.asyncio
    async def test_tiktok_cdn_gets_referer_and_cookie(self, http):
        service = self.make_service(http)

        result = await service.download(VIDEO_URL, cookies=[{"name": "sessionid", "value": "secret"}])

        headers = http.get.await_args.kwargs["headers"]
        assert headers["Referer"] == "https://www.tiktok.com/"
        assert headers["Origin"] == "https://www.tiktok.com"
        assert headers["Cookie"] == "sessionid=secret"
        assert "Cookie" in result.headers_used
        assert result.cookie_names == ["sessionid"]

    def test_generic_host_has_no_platform_headers(self):
        headers = VideoDownloadService(http_client=Mock()).build_headers("https://files.example.com/v.mp4")
        assert "Referer" not in headers
        assert headers["User-Agent"].startswith("Mozilla/5.0")

    @pytest.mark.asyncio
    async def test_declared_oversize_fails_without_retry(self, http):
        http.head.return_value = HttpResponse(status=200, headers={"Content-Length": "50000"})

        with pytest.raises(SizeLimitExceededError) as exc_info:
            await self.make_service(http).download(VIDEO_URL)

        assert exc_info.value.size == 50000
        assert http.head.await_count == 1
        http.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_actual_oversize_fails_without_retry(self, http):
        http.head.return_value = HttpResponse(status=200)
        http.get.return_value = HttpResponse(status=200, body=b"\x00" * 20_000)

        with pytest.raises(SizeLimitExceededError):
            await self.make_service(http).download(VIDEO_URL)

        assert http.get.await_count == 1

    @pytest.mark.asyncio
    async def test_zero_limit_is_honored(self, http):
        service = self.make_service(http, max_bytes=0)

        assert service.max_bytes == 0
        with pytest.raises(SizeLimitExceededError):
            await service.download(VIDEO_URL)
        http.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_head_failure_is_tolerated(self, http):
        http.head.side_effect = ServiceUnavailableError("cdn", "HEAD blocked")

        result = await self.make_service(http).download(VIDEO_URL)

        assert result.size == 4096

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self, http):
        http.get.side_effect = [
            HttpResponse(status=503, reason="Service Unavailable"),
            HttpResponse(status=200, body=b"ok-video"),
        ]
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        service = VideoDownloadService(
            http_client=http, max_bytes=10_000, max_attempts=4,
            backoff=lambda attempt: 0.5 * attempt, sleep=record_sleep
        )
        result = await service.download(VIDEO_URL)

        assert result.data == b"ok-video"
        assert sleeps == [0.5]

    @pytest.mark.asyncio
    async def test_exhaustion_raises_download_failed(self, http):
        http.get.return_value = HttpResponse(status=403, reason="Forbidden")

        with pytest.raises(DownloadFailedError) as exc_info:
            await self.make_service(http, max_attempts=3).download(VIDEO_URL, cookies="sessionid=x; tt=y")

        error = exc_info.value
        assert http.get.await_count == 3
        assert error.status == 403
        assert error.details["reason"] == "GET failed: 403 Forbidden"
        assert error.cookie_names == ["sessionid", "tt"]
        assert "User-Agent" in error.headers_used

    @pytest.mark.asyncio
    async def test_transport_errors_exhaust_to_download_failed(self, http):
        http.get.side_effect = ServiceUnavailableError("cdn", "connection reset")

        with pytest.raises(DownloadFailedError) as exc_info:
            await self.make_service(http, max_attempts=2).download(VIDEO_URL)

        assert exc_info.value.status is None
        assert "connection reset" in exc_info.value.details["reason"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["", "ftp://example.com/v.mp4", "not a url", "http://[bad-host/v.mp4"])
    async def test_invalid_url(self, http, url):
        with pytest.raises(ValidationError):
            await self.make_service(http).download(url)
        http.get.assert_not_awaited()
