"""Fetch, transcribe and analyze a batch of candidate videos."""
import time
from typing import Any, Dict, List, Optional

from video_pipeline.core.config import settings
from video_pipeline.core.exceptions import PipelineBaseException, UpstreamHttpError
from video_pipeline.models.orchestration import (
    FetchSummary, OrchestrateRequest, OrchestrationReport, OrchestrationSummary,
    TranscriptionAttempt, VoiceAnalysisOutcome
)
from video_pipeline.services.voice_analysis import VoiceAnalysisBatcher
from video_pipeline.utils.http_client import HttpClient, HttpResponse
from video_pipeline.utils.logging import CorrelatedLogger, MetricsLogger
from video_pipeline.utils.response_helpers import ResponseHelper

# Candidate fields holding a direct media URL, best first
URL_FIELDS = (
    "downloadUrl", "download_url",
    "playUrl", "play_url",
    "videoUrl", "video_url",
    "url",
    "audioUrl", "audio_url",
)

NO_URL_ERROR = "No usable URL for transcription"
NO_TRANSCRIPTS_ERROR = "No valid transcripts available for analysis"


def sanitize_path(path: str) -> str:
    if not path:
        return ""
    return path if path.startswith("/") else f"/{path}"


def pick_best_url(video: Any) -> Optional[str]:
    """First non-blank string among the known URL fields, then meta.url."""
    if not isinstance(video, dict):
        return None
    for field in URL_FIELDS:
        value = video.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    meta = video.get("meta")
    if isinstance(meta, dict):
        value = meta.get("url")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def extract_videos(body: Any) -> List[Any]:
    """Accept {"videos": [...]}, {"data": {"videos": [...]}}, {"data": [...]} or a bare list."""
    if isinstance(body, list):
        return body
    if not isinstance(body, dict):
        return []
    if isinstance(body.get("videos"), list):
        return body["videos"]
    data = body.get("data")
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("videos"), list):
        return data["videos"]
    return []


def unwrap_envelope(body: Any) -> Dict[str, Any]:
    """Return the payload of a {success, data, metadata} envelope, or the body itself."""
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        return body["data"]
    return body if isinstance(body, dict) else {}


def error_message(body: Any, response: HttpResponse) -> str:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    return f"Transcription request failed: {response.status} {response.reason}".strip()


class OrchestratorService:
    """Sequences fetch, per-item transcription and optional voice analysis."""

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        batcher: Optional[VoiceAnalysisBatcher] = None,
        base_url: Optional[str] = None
    ):
        self.http_client = http_client or HttpClient()
        self.batcher = batcher or VoiceAnalysisBatcher()
        self.base_url = (base_url or settings.orchestrator_base_url).rstrip("/")
        self.metrics = MetricsLogger()

    def resolve_url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}{sanitize_path(endpoint)}"

    async def orchestrate_workflow(
        self,
        params: Optional[OrchestrateRequest] = None,
        request_id: Optional[str] = None
    ) -> OrchestrationReport:
        """
        Fetch candidate videos, transcribe each one, and optionally analyze the transcripts.

        Only the fetch stage can fail the call. Per-item transcription failures
        and voice analysis failures are recorded in the report.

        Raises:
            UpstreamHttpError: the fetch endpoint answered with a non-2xx status
            ServiceUnavailableError: the fetch endpoint could not be reached
        """
        params = params or OrchestrateRequest()
        request_id = request_id or ResponseHelper.generate_request_id()
        logger = CorrelatedLogger(__name__, request_id)
        started = time.monotonic()

        videos = await self._fetch_candidates(params, logger)
        limited = videos[:max(1, params.fetch_limit)]
        logger.info(f"Fetched {len(videos)} candidates, processing {len(limited)}")

        transcribe_url = self.resolve_url(params.transcribe_endpoint)
        attempts = []
        for index, video in enumerate(limited, start=1):
            attempts.append(await self._transcribe_candidate(video, index, transcribe_url, logger))

        success_count = sum(1 for attempt in attempts if attempt.success)
        voice_analysis = await self._run_voice_analysis(params, attempts, request_id, logger)

        duration_ms = int((time.monotonic() - started) * 1000)
        self.metrics.log_orchestration_metrics(
            request_id, len(attempts), success_count, len(attempts) - success_count,
            duration_ms, voice_analysis.status
        )

        return OrchestrationReport(
            request_id=request_id,
            duration_ms=duration_ms,
            fetch=FetchSummary(
                endpoint=params.fetch_endpoint,
                payload=params.fetch_payload,
                total_videos=len(videos),
                processed=len(limited),
            ),
            transcriptions=attempts,
            summary=OrchestrationSummary(
                success_count=success_count,
                failure_count=len(attempts) - success_count,
            ),
            voice_analysis=voice_analysis,
        )

    async def _fetch_candidates(self, params: OrchestrateRequest, logger: CorrelatedLogger) -> List[Any]:
        fetch_url = self.resolve_url(params.fetch_endpoint)
        logger.info(f"Fetching candidates from {params.fetch_endpoint}")

        response = await self.http_client.post_json(fetch_url, params.fetch_payload)
        body = response.json_or_none()
        if not response.ok:
            raise UpstreamHttpError(params.fetch_endpoint, response.status, response.reason, body)
        return extract_videos(body)

    async def _transcribe_candidate(
        self,
        video: Any,
        index: int,
        transcribe_url: str,
        logger: CorrelatedLogger
    ) -> TranscriptionAttempt:
        source = video if isinstance(video, dict) else {}
        identifier = str(source.get("id") or source.get("aweme_id") or f"video-{index}")
        direct_url = pick_best_url(video)

        if not direct_url:
            logger.warning(f"{identifier}: {NO_URL_ERROR}")
            return TranscriptionAttempt(id=identifier, success=False, error=NO_URL_ERROR)

        try:
            response = await self.http_client.post_json(transcribe_url, {"videoUrl": direct_url})
        except PipelineBaseException as e:
            logger.warning(f"{identifier}: transcription request failed: {e.message}")
            return TranscriptionAttempt(id=identifier, success=False, video_url=direct_url, error=e.message)
        except Exception as e:
            logger.exception(f"{identifier}: unexpected transcription error")
            return TranscriptionAttempt(id=identifier, success=False, video_url=direct_url, error=str(e))

        body = response.json_or_none()
        if not response.ok or (isinstance(body, dict) and body.get("success") is False):
            message = error_message(body, response)
            logger.warning(f"{identifier}: {message}")
            return TranscriptionAttempt(
                id=identifier,
                success=False,
                video_url=direct_url,
                error=message,
                status=response.status,
                response=body,
            )

        details = unwrap_envelope(body)
        transcript = details.get("transcript")
        logger.info(f"{identifier}: transcribed")
        return TranscriptionAttempt(
            id=identifier,
            success=True,
            video_url=direct_url,
            transcript_length=len(transcript) if isinstance(transcript, str) else 0,
            details=details,
        )

    async def _run_voice_analysis(
        self,
        params: OrchestrateRequest,
        attempts: List[TranscriptionAttempt],
        request_id: str,
        logger: CorrelatedLogger
    ) -> VoiceAnalysisOutcome:
        if not params.enable_voice_analysis:
            return VoiceAnalysisOutcome(status="not_attempted")

        transcripts = [attempt.transcript for attempt in attempts if attempt.transcript]
        if not transcripts:
            logger.warning(NO_TRANSCRIPTS_ERROR)
            return VoiceAnalysisOutcome(status="failed", error=NO_TRANSCRIPTS_ERROR)

        try:
            result = await self.batcher.analyze_batch(
                transcripts,
                creator=params.creator_info,
                batch_size=params.voice_analysis_batch_size,
                request_id=request_id,
            )
        except PipelineBaseException as e:
            logger.warning(f"Voice analysis failed: {e.message}")
            return VoiceAnalysisOutcome(status="failed", error=e.message)
        except Exception as e:
            logger.exception("Voice analysis failed unexpectedly")
            return VoiceAnalysisOutcome(status="failed", error=str(e) or "Voice analysis failed")

        return VoiceAnalysisOutcome(status="completed", result=result.to_payload())
