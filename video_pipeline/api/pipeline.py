"""Pipeline API endpoints: platform lookups, transcription, orchestration and voice analysis."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends

from video_pipeline.core.dependencies import (
    get_orchestrator_dep, get_platform_manager_dep,
    get_transcription_service_dep, get_voice_analysis_batcher_dep
)
from video_pipeline.core.exceptions import PipelineBaseException
from video_pipeline.models.orchestration import OrchestrateRequest
from video_pipeline.models.requests import AnalyzeBatchRequest, PlatformUrlRequest, TranscribeFromUrlRequest
from video_pipeline.models.responses import ErrorDetails
from video_pipeline.platforms import PlatformServiceManager
from video_pipeline.services import OrchestratorService, TranscriptionService, VoiceAnalysisBatcher
from video_pipeline.utils.logging import CorrelatedLogger
from video_pipeline.utils.response_helpers import ResponseHelper

# Create router
router = APIRouter(prefix="/api", tags=["pipeline"])


def _elapsed_ms(start_time: datetime) -> int:
    return int((datetime.now() - start_time).total_seconds() * 1000)


@router.post("/platforms/validate")
async def validate_platform_url(
    request: PlatformUrlRequest,
    manager: PlatformServiceManager = Depends(get_platform_manager_dep)
):
    """Check which platform a URL belongs to."""
    request_id = ResponseHelper.generate_request_id()
    result = manager.validate_url(request.url)
    return ResponseHelper.create_success_response(result.model_dump(), request_id)


@router.post("/platforms/content")
async def get_platform_content(
    request: PlatformUrlRequest,
    manager: PlatformServiceManager = Depends(get_platform_manager_dep)
):
    """Fetch normalized metadata for a TikTok, Instagram or YouTube URL."""
    request_id = ResponseHelper.generate_request_id()
    start_time = datetime.now()

    try:
        content = await manager.fetch_content(request.url, request_id)
    except PipelineBaseException as e:
        return ResponseHelper.create_error_from_exception(e, request_id)

    return ResponseHelper.create_success_response(
        data=content.model_dump(exclude={"raw_data"}),
        request_id=request_id,
        processing_time_ms=_elapsed_ms(start_time)
    )


@router.post("/video/transcribe-from-url")
async def transcribe_from_url(
    request: TranscribeFromUrlRequest,
    service: TranscriptionService = Depends(get_transcription_service_dep)
):
    """Download a video from a direct URL and transcribe it."""
    request_id = ResponseHelper.generate_request_id()
    start_time = datetime.now()

    result = await service.transcribe_from_url(request.video_url, request.cookies, request_id)

    if not result.success:
        return ResponseHelper.create_error_response(
            error_code=result.error_code or "TRANSCRIPTION_FAILED",
            message=result.error or "Transcription failed",
            status_code=result.status_code,
            request_id=request_id,
            details=ErrorDetails(
                reason=result.error_details,
                headers_used=result.headers_used,
                cookie_names=result.cookie_names,
            )
        )

    return ResponseHelper.create_success_response(
        data=result.model_dump(exclude={"status_code", "error", "error_code", "error_details"}),
        request_id=request_id,
        processing_time_ms=_elapsed_ms(start_time)
    )


@router.post("/video/orchestrate")
async def orchestrate(
    request: Optional[OrchestrateRequest] = Body(None),
    orchestrator: OrchestratorService = Depends(get_orchestrator_dep)
):
    """Fetch candidate videos, transcribe each one and optionally run voice analysis."""
    request_id = ResponseHelper.generate_request_id()

    try:
        report = await orchestrator.orchestrate_workflow(request or OrchestrateRequest(), request_id)
    except PipelineBaseException as e:
        CorrelatedLogger(__name__, request_id).error(f"Orchestration failed: {e.message}")
        return ResponseHelper.create_error_from_exception(e, request_id)

    return ResponseHelper.create_success_response(
        data=report.to_payload(),
        request_id=request_id,
        processing_time_ms=report.duration_ms
    )


@router.post("/voice/analyze-batch")
async def analyze_batch(
    request: AnalyzeBatchRequest,
    batcher: VoiceAnalysisBatcher = Depends(get_voice_analysis_batcher_dep)
):
    """Analyze transcripts in batches and return merged templates and style signature."""
    request_id = ResponseHelper.generate_request_id()

    try:
        result = await batcher.analyze_batch(
            request.transcripts,
            creator=request.creator,
            batch_size=request.batch_size,
            model=request.model,
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            request_id=request_id,
        )
    except PipelineBaseException as e:
        return ResponseHelper.create_error_from_exception(e, request_id)

    return ResponseHelper.create_success_response(
        data=result.to_payload(),
        request_id=request_id,
        processing_time_ms=result.meta.processing_time_ms
    )
