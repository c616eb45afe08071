"""Video transcription through the Gemini file upload protocol."""
import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional
from urllib.parse import urlparse

from video_pipeline.config.templates import PromptTemplateEngine, get_template_engine
from video_pipeline.core.config import settings, PlatformConfig
from video_pipeline.core.exceptions import (
    PipelineBaseException, DownloadFailedError, SizeLimitExceededError,
    ServiceUnavailableError, TimeoutError, TranscriptionFailedError, ValidationError
)
from video_pipeline.models.content import DownloadResult
from video_pipeline.models.transcription import (
    ContentMetadata, ScriptComponents, TranscriptionMetadata,
    TranscriptionOutcome, TranscriptionResponse
)
from video_pipeline.services.download_service import VideoDownloadService
from video_pipeline.services.gemini_provider import GeminiProvider, RemoteFile
from video_pipeline.utils.json_extraction import parse_json_with_fallback
from video_pipeline.utils.logging import CorrelatedLogger, MetricsLogger
from video_pipeline.utils.response_helpers import ResponseHelper
from video_pipeline.utils.retry import linear_backoff, retry_async, with_timeout
from video_pipeline.utils.text import count_words

MAX_DOWNLOAD_BYTES = settings.max_download_bytes
DEFAULT_VIDEO_MIME = "video/mp4"

# Keys the model may use for the closing call to action
CTA_KEYS = ("cta", "wta", "call_to_action")


class _FileNotReady(Exception):
    """Uploaded file is still processing."""


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _failure_status(error_code: str) -> int:
    if error_code in ("VALIDATION_ERROR", "DOWNLOAD_FAILED"):
        return 400
    if error_code == "SIZE_LIMIT_EXCEEDED":
        return 413
    if error_code == "TIMEOUT":
        return 504
    return 500


class TranscriptionService:
    """Download, upload, poll, transcribe and decompose a video into script components."""

    def __init__(
        self,
        provider: Optional[GeminiProvider] = None,
        downloader: Optional[VideoDownloadService] = None,
        template_engine: Optional[PromptTemplateEngine] = None,
        poll_interval: Optional[float] = None,
        poll_max_attempts: Optional[int] = None,
        transcription_timeout: Optional[float] = None,
        component_timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.provider = provider or GeminiProvider()
        self.downloader = downloader or VideoDownloadService(max_bytes=MAX_DOWNLOAD_BYTES)
        self.template_engine = template_engine or get_template_engine()
        self.poll_interval = settings.file_poll_interval if poll_interval is None else poll_interval
        self.poll_max_attempts = settings.file_poll_max_attempts if poll_max_attempts is None else poll_max_attempts
        self.transcription_timeout = (
            settings.transcription_timeout if transcription_timeout is None else transcription_timeout
        )
        self.component_timeout = (
            settings.component_analysis_timeout if component_timeout is None else component_timeout
        )
        self.sleep = sleep
        self.metrics = MetricsLogger()

    async def transcribe_from_url(
        self,
        video_url: Optional[str],
        cookies: Any = None,
        request_id: Optional[str] = None
    ) -> TranscriptionResponse:
        """
        Download a video and transcribe it.

        Expected failures (missing URL, missing credential, download failure,
        size limit, timeout, provider failure) come back as a response with
        ``success=False`` and the HTTP status they map to; nothing is raised.
        """
        request_id = request_id or ResponseHelper.generate_request_id()
        logger = CorrelatedLogger(__name__, request_id)
        start_time = datetime.now()

        if not video_url or not str(video_url).strip():
            return self._failure(request_id, start_time, "Video URL is required", "VALIDATION_ERROR")

        if not self.provider.is_configured():
            logger.error("Missing GEMINI_API_KEY")
            return self._failure(request_id, start_time, "Server configuration incomplete", "CONFIGURATION_ERROR")

        logger.info(f"Processing video URL: {video_url[:100]}")

        try:
            download = await self.downloader.download(video_url, cookies=cookies, request_id=request_id)
        except DownloadFailedError as e:
            logger.error(f"Download failed: {e.details.get('reason')}")
            return self._failure(
                request_id, start_time, "Failed to download video", e.error_code,
                details=e.details.get("reason"), headers_used=e.headers_used, cookie_names=e.cookie_names
            )
        except (SizeLimitExceededError, ValidationError) as e:
            return self._failure(request_id, start_time, e.message, e.error_code)

        try:
            outcome = await self.transcribe_download(download, video_url, request_id)
        except PipelineBaseException as e:
            logger.error(f"Transcription failed: {e.message}")
            return self._failure(
                request_id, start_time, e.message, e.error_code,
                headers_used=download.headers_used, cookie_names=download.cookie_names
            )
        except Exception as e:
            logger.exception(f"Unexpected transcription error: {str(e)}")
            return self._failure(
                request_id, start_time, "Transcription failed", "TRANSCRIPTION_FAILED", details=str(e),
                headers_used=download.headers_used, cookie_names=download.cookie_names
            )

        self.metrics.log_transcription_metrics(
            request_id, True, self._elapsed_ms(start_time), word_count=outcome.word_count
        )
        logger.info("Transcription completed successfully")
        return TranscriptionResponse.from_outcome(outcome, download.headers_used, download.cookie_names)

    async def transcribe_download(
        self,
        download: DownloadResult,
        source_url: Optional[str],
        request_id: str
    ) -> TranscriptionOutcome:
        """Transcribe already-downloaded bytes and derive the script components."""
        start_time = datetime.now()
        mime_type = download.mime_type or DEFAULT_VIDEO_MIME

        transcript = await self.generate_transcript(download.data, mime_type, request_id)
        components = await self.analyze_components(transcript, request_id)

        host = urlparse(source_url or "").hostname or ""
        return TranscriptionOutcome(
            transcript=transcript,
            word_count=count_words(transcript),
            character_count=len(transcript),
            components=components,
            content_metadata=ContentMetadata(
                platform=PlatformConfig.platform_for_host(host) or "unknown",
                source=source_url,
            ),
            visual_context="",
            transcription_metadata=TranscriptionMetadata(
                processed_at=datetime.now(timezone.utc).isoformat(),
                file_size=download.size,
                mime_type=mime_type,
                model=self.provider.model_name,
                processing_time_ms=self._elapsed_ms(start_time),
            ),
        )

    async def generate_transcript(self, data: bytes, mime_type: Optional[str], request_id: str) -> str:
        """
        Upload bytes, wait for the file to become active, and transcribe it.

        The uploaded file is deleted afterwards whatever the outcome.

        Raises:
            TimeoutError: the file never became active, or transcription overran its time limit
            TranscriptionFailedError: the provider rejected the file or returned no text
        """
        logger = CorrelatedLogger(__name__, request_id)
        display_name = f"transcription-{request_id}-{int(time.time() * 1000)}"

        uploaded = await self.provider.upload_file(data, mime_type or DEFAULT_VIDEO_MIME, display_name)
        if not uploaded.name:
            raise TranscriptionFailedError("Gemini upload did not return a file reference")

        logger.info(f"Uploaded {len(data)} bytes as {uploaded.name}")

        try:
            ready = await self._wait_until_active(uploaded, request_id)
            prompt = self.template_engine.render_prompt("transcription")
            transcript = await with_timeout(
                self.provider.generate_from_file(ready, prompt),
                self.transcription_timeout,
                f"Gemini transcription {request_id}",
            )
            transcript = (transcript or "").strip()
            if not transcript:
                raise TranscriptionFailedError("Gemini returned an empty transcript")

            logger.info(f"Transcript received ({len(transcript)} characters)")
            return transcript
        finally:
            await self._delete_remote_file(uploaded.name, logger)

    async def analyze_components(self, transcript: str, request_id: str) -> ScriptComponents:
        """Ask the model for hook / bridge / nugget / cta; any failure yields empty components."""
        logger = CorrelatedLogger(__name__, request_id)
        prompt = self.template_engine.render_prompt("component_analysis", transcript=transcript)

        try:
            text = await with_timeout(
                self.provider.generate_text(prompt),
                self.component_timeout,
                f"Gemini component analysis {request_id}",
            )
        except PipelineBaseException as e:
            logger.warning(f"Component analysis unavailable, returning empty components: {e.message}")
            return ScriptComponents()

        return self.parse_components(text, logger)

    @staticmethod
    def parse_components(text: Optional[str], logger: Optional[CorrelatedLogger] = None) -> ScriptComponents:
        """Map model output to ScriptComponents; unparseable output gives empty strings."""
        payload = parse_json_with_fallback(text)
        if not isinstance(payload, dict):
            if logger:
                logger.warning("Failed to parse component JSON, returning empty components")
            return ScriptComponents()

        cta = next((payload[key] for key in CTA_KEYS if payload.get(key) is not None), "")
        return ScriptComponents(
            hook=_as_text(payload.get("hook")),
            bridge=_as_text(payload.get("bridge")),
            nugget=_as_text(payload.get("nugget")),
            cta=_as_text(cta),
        )

    async def _wait_until_active(self, uploaded: RemoteFile, request_id: str) -> RemoteFile:
        """Poll the uploaded file until ACTIVE; FAILED aborts immediately."""
        current = uploaded

        async def poll(attempt: int) -> RemoteFile:
            nonlocal current
            if attempt > 1:
                current = await self.provider.get_file(current.name)
            if current.is_active:
                return current
            if current.is_failed:
                message = current.error_message or "Gemini reported the upload failed"
                raise TranscriptionFailedError(
                    f"Gemini upload failed for {request_id}: {message}", {"file": current.name}
                )
            raise _FileNotReady(current.state)

        try:
            return await retry_async(
                poll,
                max_attempts=self.poll_max_attempts,
                backoff=linear_backoff(self.poll_interval),
                is_retryable=lambda e: isinstance(e, (_FileNotReady, ServiceUnavailableError)),
                sleep=self.sleep,
            )
        except _FileNotReady:
            waited = sum(self.poll_interval * n for n in range(1, self.poll_max_attempts))
            raise TimeoutError(f"Gemini file readiness {request_id}", waited)

    async def _delete_remote_file(self, name: str, logger: CorrelatedLogger) -> None:
        try:
            await self.provider.delete_file(name)
        except Exception as e:
            logger.warning(f"Failed to delete Gemini file {name}: {str(e)}")

    def _failure(
        self,
        request_id: str,
        start_time: datetime,
        error: str,
        error_code: str,
        details: Optional[str] = None,
        headers_used: Optional[List[str]] = None,
        cookie_names: Optional[List[str]] = None,
    ) -> TranscriptionResponse:
        self.metrics.log_transcription_metrics(
            request_id, False, self._elapsed_ms(start_time), error_code=error_code
        )
        return TranscriptionResponse(
            success=False,
            error=error,
            error_code=error_code,
            error_details=details,
            status_code=_failure_status(error_code),
            headers_used=headers_used or [],
            cookie_names=cookie_names or [],
        )

    @staticmethod
    def _elapsed_ms(start_time: datetime) -> int:
        return int((datetime.now() - start_time).total_seconds() * 1000)
