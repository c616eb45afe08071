"""API tests for the video pipeline application."""
import json
import pytest
from unittest.mock import AsyncMock, Mock
from fastapi.testclient import TestClient

from video_pipeline.core.dependencies import (
    get_orchestrator_dep, get_platform_manager_dep,
    get_transcription_service_dep, get_voice_analysis_batcher_dep
)
from video_pipeline.core.exceptions import BatchAnalysisError
from video_pipeline.main import app
from video_pipeline.models.content import ContentRecord
from video_pipeline.models.orchestration import (
    FetchSummary, OrchestrationReport, OrchestrationSummary, VoiceAnalysisOutcome
)
from video_pipeline.models.transcription import (
    ContentMetadata, ScriptComponents, TranscriptionMetadata, TranscriptionResponse
)
from video_pipeline.platforms import PlatformServiceManager
from video_pipeline.services import VoiceAnalysisBatcher


@pytest.fixture
def client():
    """Test client fixture."""
    yield TestClient(app)
    app.dependency_overrides.clear()


def override(dependency, value):
    app.dependency_overrides[dependency] = lambda: value


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "Video Pipeline Service is running"


def test_health_endpoint(client):
    """Test health check endpoint."""
    manager = Mock()
    manager.get_clients_status.return_value = {
        "tiktok": {"configured": True}, "instagram": {"configured": True}, "youtube": {"configured": False}
    }
    override(get_platform_manager_dep, manager)

    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["dependencies"]["yt_dlp"] == "healthy"
    assert data["dependencies"]["gemini"] in ("healthy", "not_configured")
    assert data["platform_clients"] == {"tiktok": True, "instagram": True, "youtube": False}


def test_supported_platforms_endpoint(client):
    """Test supported platforms endpoint."""
    response = client.get("/supported-platforms")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    names = [p["name"] for p in data["data"]["platforms"]]
    assert set(names) == {"tiktok", "instagram", "youtube"}
    assert data["data"]["limits"]["max_download_bytes"] > 0


@pytest.mark.parametrize("url, valid, platform", [
    ("https://www.tiktok.com/@user/video/7234567890123456789", True, "tiktok"),
    ("https://www.instagram.com/reel/CxYz123AbC/", True, "instagram"),
    ("https://youtu.be/dQw4w9WgXcQ", True, "youtube"),
    ("https://vimeo.com/123", False, None),
])
def test_validate_url(client, url, valid, platform):
    override(get_platform_manager_dep, PlatformServiceManager())

    response = client.post("/api/platforms/validate", json={"url": url})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["valid"] is valid
    assert data["platform"] == platform


def test_content_unsupported_platform(client):
    override(get_platform_manager_dep, PlatformServiceManager())

    response = client.post("/api/platforms/content", json={"url": "https://vimeo.com/123"})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "UNSUPPORTED_PLATFORM"


def test_content_success(client):
    manager = Mock()
    manager.fetch_content = AsyncMock(return_value=ContentRecord(
        id="7234567890123456789", platform="tiktok", title="Morning routine",
        author="jane", video_url="https://cdn/v.mp4", raw_data={"big": "payload"}
    ))
    override(get_platform_manager_dep, manager)

    response = client.post("/api/platforms/content", json={"url": "https://www.tiktok.com/@jane/video/7234567890123456789"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == "7234567890123456789"
    assert data["platform"] == "tiktok"
    assert "raw_data" not in data


def transcription_service(result):
    service = Mock()
    service.transcribe_from_url = AsyncMock(return_value=result)
    return service


def test_transcribe_success(client):
    result = TranscriptionResponse(
        success=True, transcript="hello there", word_count=2, character_count=11,
        components=ScriptComponents(hook="hello"),
        content_metadata=ContentMetadata(platform="tiktok", source="https://cdn/v.mp4"),
        visual_context="",
        transcription_metadata=TranscriptionMetadata(
            processed_at="2024-01-01T00:00:00+00:00", file_size=10, mime_type="video/mp4", model="gemini-1.5-flash"
        ),
        headers_used=["User-Agent"],
    )
    service = transcription_service(result)
    override(get_transcription_service_dep, service)

    response = client.post("/api/video/transcribe-from-url", json={"videoUrl": "https://cdn/v.mp4", "cookies": "a=b"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["transcript"] == "hello there"
    assert data["components"]["hook"] == "hello"
    assert "status_code" not in data and "error" not in data
    args = service.transcribe_from_url.await_args.args
    assert args[0] == "https://cdn/v.mp4"
    assert args[1] == "a=b"


@pytest.mark.parametrize("status_code, error_code, message", [
    (400, "VALIDATION_ERROR", "videoUrl is required"),
    (413, "SIZE_LIMIT_EXCEEDED", "Video too large"),
    (504, "TIMEOUT", "Transcription timed out"),
])
def test_transcribe_failure_status(client, status_code, error_code, message):
    result = TranscriptionResponse(
        success=False, error=message, error_code=error_code, error_details="detail",
        status_code=status_code, cookie_names=["sessionid"]
    )
    override(get_transcription_service_dep, transcription_service(result))

    response = client.post("/api/video/transcribe-from-url", json={"videoUrl": "https://cdn/v.mp4"})

    assert response.status_code == status_code
    error = response.json()["error"]
    assert error["code"] == error_code
    assert error["message"] == message
    assert error["details"]["reason"] == "detail"
    assert error["details"]["cookie_names"] == ["sessionid"]


def test_orchestrate(client):
    report = OrchestrationReport(
        requestId="req_x", durationMs=12,
        fetch=FetchSummary(endpoint="/api/tiktok/user-feed", totalVideos=1, processed=1),
        transcriptions=[],
        summary=OrchestrationSummary(successCount=0, failureCount=0),
        voiceAnalysis=VoiceAnalysisOutcome(status="not_attempted"),
    )
    orchestrator = Mock()
    orchestrator.orchestrate_workflow = AsyncMock(return_value=report)
    override(get_orchestrator_dep, orchestrator)

    response = client.post("/api/video/orchestrate", json={"fetchLimit": 3})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["fetch"]["totalVideos"] == 1
    assert data["voiceAnalysis"]["status"] == "not_attempted"
    sent = orchestrator.orchestrate_workflow.await_args.args[0]
    assert sent.fetch_limit == 3


def test_analyze_batch_failure_reports_batch_index(client):
    batcher = Mock()
    batcher.analyze_batch = AsyncMock(side_effect=BatchAnalysisError(2, 3, "unparseable output"))
    override(get_voice_analysis_batcher_dep, batcher)

    response = client.post("/api/voice/analyze-batch", json={"transcripts": ["a", "b", "c"], "batchSize": 1})

    assert response.status_code == 502
    error = response.json()["error"]
    assert error["code"] == "BATCH_ANALYSIS_FAILED"
    assert error["details"]["batchIndex"] == 2
    assert error["details"]["totalBatches"] == 3


def test_analyze_batch_empty_transcripts(client):
    provider = Mock()
    provider.generate_text = AsyncMock()
    override(get_voice_analysis_batcher_dep, VoiceAnalysisBatcher(provider=provider))

    response = client.post("/api/voice/analyze-batch", json={"transcripts": []})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    provider.generate_text.assert_not_awaited()


def test_analyze_batch_success(client):
    provider = Mock()
    provider.generate_text = AsyncMock(return_value=json.dumps({
        "templates": {"hooks": [{"pattern": "Stop doing [X]", "sourceIndex": 1}]},
        "styleSignature": {"powerWords": ["secret"], "tone": "Direct"},
    }))
    override(get_voice_analysis_batcher_dep, VoiceAnalysisBatcher(provider=provider))

    response = client.post("/api/voice/analyze-batch", json={"transcripts": ["one transcript"]})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["analysis"]["templates"]["hooks"][0]["sourceIndex"] == 1
    assert data["meta"]["totalTranscripts"] == 1
