"""Unit tests for TranscriptionService."""
import asyncio
import pytest
from unittest.mock import AsyncMock, Mock

from video_pipeline.core.exceptions import (
    DownloadFailedError, ServiceUnavailableError, SizeLimitExceededError,
    TimeoutError, TranscriptionFailedError
)
from video_pipeline.models.content import DownloadResult
from video_pipeline.models.transcription import ScriptComponents
from video_pipeline.services.gemini_provider import RemoteFile
from video_pipeline.services.transcription_service import TranscriptionService

VIDEO_URL = "https://v16-webapp.tiktokcdn.com/abc/video.mp4"
COMPONENTS_JSON = '```json\n{"hook": "Stop scrolling", "bridge": "Here is why", "nugget": "Drink water", "wta": "Follow for more"}\n```'


async def no_sleep(seconds):
    return None


def remote_file(state="ACTIVE", error_message=None):
    return RemoteFile(
        name="files/abc123", uri="https://generativelanguage.googleapis.com/v1beta/files/abc123",
        mime_type="video/mp4", state=state, error_message=error_message
    )


class TestTranscriptionService:
    """Test cases for TranscriptionService."""

    @pytest.fixture
    def provider(self):
        provider = Mock()
        provider.is_configured = Mock(return_value=True)
        provider.model_name = "gemini-1.5-flash"
        provider.upload_file = AsyncMock(return_value=remote_file("PROCESSING"))
        provider.get_file = AsyncMock(return_value=remote_file("ACTIVE"))
        provider.delete_file = AsyncMock(return_value=None)
        provider.generate_from_file = AsyncMock(return_value="  Hello everyone, welcome back.  ")
        provider.generate_text = AsyncMock(return_value=COMPONENTS_JSON)
        return provider

    @pytest.fixture
    def downloader(self):
        downloader = Mock()
        downloader.download = AsyncMock(return_value=DownloadResult(
            data=b"\x00" * 2048, size=2048, mime_type="video/mp4", filename="video.mp4",
            headers_used=["User-Agent", "Referer"], cookie_names=[]
        ))
        return downloader

    def make_service(self, provider, downloader, **kwargs):
        options = {"poll_interval": 0, "poll_max_attempts": 3, "sleep": no_sleep}
        options.update(kwargs)
        return TranscriptionService(provider=provider, downloader=downloader, **options)

    @pytest.mark.asyncio
    async def test_successful_transcription(self, provider, downloader):
        service = self.make_service(provider, downloader)

        result = await service.transcribe_from_url(VIDEO_URL, request_id="req_test")

        assert result.success is True
        assert result.status_code == 200
        assert result.transcript == "Hello everyone, welcome back."
        assert result.word_count == 4
        assert result.character_count == len("Hello everyone, welcome back.")
        assert result.components == ScriptComponents(
            hook="Stop scrolling", bridge="Here is why", nugget="Drink water", cta="Follow for more"
        )
        assert result.content_metadata.platform == "tiktok"
        assert result.content_metadata.source == VIDEO_URL
        assert result.transcription_metadata.file_size == 2048
        assert result.transcription_metadata.model == "gemini-1.5-flash"
        assert result.headers_used == ["User-Agent", "Referer"]
        provider.delete_file.assert_awaited_once_with("files/abc123")

    @pytest.mark.asyncio
    async def test_upload_display_name(self, provider, downloader):
        service = self.make_service(provider, downloader)

        await service.transcribe_from_url(VIDEO_URL, request_id="req_test")

        data, mime_type, display_name = provider.upload_file.await_args.args
        assert mime_type == "video/mp4"
        assert display_name.startswith("transcription-req_test-")

    @pytest.mark.asyncio
    async def test_missing_url(self, provider, downloader):
        result = await self.make_service(provider, downloader).transcribe_from_url("  ")

        assert result.success is False
        assert result.status_code == 400
        downloader.download.assert_not_awaited()

    def test_zero_limits_are_kept(self, provider, downloader):
        service = self.make_service(
            provider, downloader, poll_max_attempts=0, transcription_timeout=0, component_timeout=0
        )

        assert service.poll_max_attempts == 0
        assert service.transcription_timeout == 0
        assert service.component_timeout == 0

    @pytest.mark.asyncio
    async def test_missing_credential(self, provider, downloader):
        provider.is_configured.return_value = False

        result = await self.make_service(provider, downloader).transcribe_from_url(VIDEO_URL)

        assert result.success is False
        assert result.error == "Server configuration incomplete"
        assert result.status_code == 500
        downloader.download.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_download_failure_maps_to_400(self, provider, downloader):
        downloader.download.side_effect = DownloadFailedError(
            VIDEO_URL, "GET failed: 403 Forbidden", ["User-Agent", "Cookie"], ["sessionid"], 403
        )

        result = await self.make_service(provider, downloader).transcribe_from_url(VIDEO_URL)

        assert result.success is False
        assert result.status_code == 400
        assert result.error == "Failed to download video"
        assert result.error_details == "GET failed: 403 Forbidden"
        assert result.cookie_names == ["sessionid"]
        provider.upload_file.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_size_limit_maps_to_413(self, provider, downloader):
        downloader.download.side_effect = SizeLimitExceededError(90_000_000, 80_000_000)

        result = await self.make_service(provider, downloader).transcribe_from_url(VIDEO_URL)

        assert result.status_code == 413
        assert result.error_code == "SIZE_LIMIT_EXCEEDED"

    @pytest.mark.asyncio
    async def test_transcription_timeout_maps_to_504(self, provider, downloader):
        async def hang(*args, **kwargs):
            await asyncio.sleep(1)
            return "late"

        provider.generate_from_file.side_effect = hang
        service = self.make_service(provider, downloader, transcription_timeout=0.01)

        result = await service.transcribe_from_url(VIDEO_URL)

        assert result.success is False
        assert result.status_code == 504
        assert result.error_code == "TIMEOUT"
        provider.delete_file.assert_awaited_once_with("files/abc123")

    @pytest.mark.asyncio
    async def test_failed_upload_state_aborts(self, provider, downloader):
        provider.get_file.return_value = remote_file("FAILED", "unsupported codec")
        service = self.make_service(provider, downloader)

        with pytest.raises(TranscriptionFailedError) as exc_info:
            await service.generate_transcript(b"video", "video/mp4", "req_test")

        assert "unsupported codec" in exc_info.value.message
        assert provider.get_file.await_count == 1
        provider.generate_from_file.assert_not_awaited()
        provider.delete_file.assert_awaited_once_with("files/abc123")

    @pytest.mark.asyncio
    async def test_file_never_active_times_out(self, provider, downloader):
        provider.get_file.return_value = remote_file("PROCESSING")
        service = self.make_service(provider, downloader, poll_max_attempts=4)

        with pytest.raises(TimeoutError):
            await service.generate_transcript(b"video", "video/mp4", "req_test")

        assert provider.get_file.await_count == 3
        provider.delete_file.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_transient_poll_error_is_retried(self, provider, downloader):
        provider.get_file.side_effect = [
            ServiceUnavailableError("gemini", "get_file failed"),
            remote_file("ACTIVE"),
        ]
        service = self.make_service(provider, downloader)

        assert await service.generate_transcript(b"video", "video/mp4", "req_test") == "Hello everyone, welcome back."

    @pytest.mark.asyncio
    async def test_empty_transcript_fails(self, provider, downloader):
        provider.generate_from_file.return_value = "   "

        result = await self.make_service(provider, downloader).transcribe_from_url(VIDEO_URL)

        assert result.success is False
        assert result.error_code == "TRANSCRIPTION_FAILED"
        assert result.status_code == 500

    @pytest.mark.asyncio
    async def test_cleanup_failure_does_not_mask_result(self, provider, downloader):
        provider.delete_file.side_effect = ServiceUnavailableError("gemini", "delete failed")

        result = await self.make_service(provider, downloader).transcribe_from_url(VIDEO_URL)

        assert result.success is True

    @pytest.mark.asyncio
    async def test_unexpected_error_maps_to_500(self, provider, downloader):
        provider.upload_file.side_effect = RuntimeError("boom")

        result = await self.make_service(provider, downloader).transcribe_from_url(VIDEO_URL)

        assert result.success is False
        assert result.status_code == 500
        assert result.error_details == "boom"

    @pytest.mark.asyncio
    async def test_component_timeout_gives_empty_components(self, provider, downloader):
        async def hang(*args, **kwargs):
            await asyncio.sleep(1)
            return "{}"

        provider.generate_text.side_effect = hang
        service = self.make_service(provider, downloader, component_timeout=0.01)

        result = await service.transcribe_from_url(VIDEO_URL)

        assert result.success is True
        assert result.components == ScriptComponents()

    def test_parse_components_fenced_json(self):
        components = TranscriptionService.parse_components(COMPONENTS_JSON)
        assert components.hook == "Stop scrolling"
        assert components.cta == "Follow for more"

    @pytest.mark.parametrize("text", ["not json", "", None, "[1, 2]"])
    def test_parse_components_garbage(self, text):
        assert TranscriptionService.parse_components(text) == ScriptComponents()

    def test_parse_components_prefers_cta_key(self):
        components = TranscriptionService.parse_components('{"cta": "Subscribe", "wta": "Other"}')
        assert components.cta == "Subscribe"
        assert components.hook == ""
