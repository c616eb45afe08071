"""Unit tests for custom exceptions."""
import pytest
from video_pipeline.core.exceptions import (
    PipelineBaseException, ValidationError, UnsupportedPlatformError,
    ContentIdExtractionError, UpstreamHttpError, SizeLimitExceededError,
    DownloadFailedError, BatchAnalysisError, ConfigurationError, TimeoutError
)
from video_pipeline.utils.response_helpers import ResponseHelper

class TestCustomExceptions:
    """Test custom exception classes."""

    def test_base_exception(self):
        """Test base exception functionality."""
        exc = PipelineBaseException(
            "Test message",
            "TEST_ERROR",
            {"key": "value"}
        )

        assert str(exc) == "Test message"
        assert exc.message == "Test message"
        assert exc.error_code == "TEST_ERROR"
        assert exc.details == {"key": "value"}

    def test_validation_error(self):
        """Test validation error."""
        exc = ValidationError("Invalid input", {"field": "url"})

        assert exc.error_code == "VALIDATION_ERROR"
        assert exc.message == "Invalid input"
        assert exc.details == {"field": "url"}

    def test_platform_errors_are_validation_errors(self):
        """Unsupported platform and missing id are distinguishable validation errors."""
        unsupported = UnsupportedPlatformError("https://example.com/video")
        missing_id = ContentIdExtractionError("https://www.tiktok.com/@user", "tiktok")

        assert isinstance(unsupported, ValidationError)
        assert isinstance(missing_id, ValidationError)
        assert unsupported.error_code == "UNSUPPORTED_PLATFORM"
        assert missing_id.error_code == "CONTENT_ID_NOT_FOUND"
        assert missing_id.details["platform"] == "tiktok"

    def test_upstream_http_error(self):
        """Test upstream error carries status and status text."""
        exc = UpstreamHttpError("tiktok", 429, "Too Many Requests")

        assert exc.status == 429
        assert exc.status_text == "Too Many Requests"
        assert "429" in exc.message

    def test_size_limit_error(self):
        """Test size limit error."""
        exc = SizeLimitExceededError(90_000_000, 80_000_000)

        assert exc.size == 90_000_000
        assert exc.limit == 80_000_000
        assert exc.error_code == "SIZE_LIMIT_EXCEEDED"

    def test_download_failed_error_keeps_diagnostics(self):
        """Test download failure keeps header and cookie names."""
        exc = DownloadFailedError(
            "https://cdn.example.com/v.mp4", "GET failed: 403 Forbidden",
            headers_used=["User-Agent", "Cookie"], cookie_names=["sessionid"], status=403
        )

        assert exc.status == 403
        assert exc.cookie_names == ["sessionid"]
        assert exc.details["reason"] == "GET failed: 403 Forbidden"

    def test_batch_analysis_error(self):
        """Test batch failure names the batch."""
        exc = BatchAnalysisError(2, 3, "bad JSON")

        assert exc.batch_index == 2
        assert exc.total_batches == 3
        assert exc.details["batchIndex"] == 2
        assert exc.details["totalBatches"] == 3

    @pytest.mark.parametrize("exc, expected_status", [
        (ValidationError("bad"), 400),
        (UnsupportedPlatformError("https://example.com"), 422),
        (SizeLimitExceededError(2, 1), 413),
        (TimeoutError("transcription", 120), 504),
        (BatchAnalysisError(1, 1, "x"), 502),
        (ConfigurationError("GEMINI_API_KEY", "missing"), 500),
    ])
    def test_status_mapping(self, exc, expected_status):
        """Each error code maps to an HTTP status."""
        assert ResponseHelper.status_for(exc.error_code) == expected_status
