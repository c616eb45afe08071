"""Custom exceptions for the Video Pipeline Service."""
from typing import List, Optional


class PipelineBaseException(Exception):
    """Base exception for the video pipeline."""

    def __init__(self, message: str, error_code: str, details: Optional[dict] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(PipelineBaseException):
    """Exception raised when a required setting or credential is missing."""

    def __init__(self, setting: str, reason: str):
        message = f"Configuration error for {setting}: {reason}"
        details = {"setting": setting, "reason": reason}
        super().__init__(message, "CONFIGURATION_ERROR", details)


class ValidationError(PipelineBaseException):
    """Exception raised for input validation errors."""

    def __init__(self, message: str, details: Optional[dict] = None, error_code: str = "VALIDATION_ERROR"):
        super().__init__(message, error_code, details)


class UnsupportedPlatformError(ValidationError):
    """Exception raised when no platform client recognizes a URL."""

    def __init__(self, url: str):
        message = "Unsupported platform or invalid URL format"
        super().__init__(message, {"url": url}, "UNSUPPORTED_PLATFORM")


class ContentIdExtractionError(ValidationError):
    """Exception raised when a recognized URL carries no parsable content id."""

    def __init__(self, url: str, platform: str):
        message = f"Could not extract content ID from {platform} URL"
        super().__init__(message, {"url": url, "platform": platform}, "CONTENT_ID_NOT_FOUND")


class UpstreamHttpError(PipelineBaseException):
    """Exception raised for a non-2xx response from a remote API."""

    def __init__(self, service: str, status: int, status_text: str = "", body: Optional[object] = None):
        self.status = status
        self.status_text = status_text
        self.body = body
        message = f"{service} API error: {status} {status_text}".rstrip()
        details = {"service": service, "status": status, "status_text": status_text}
        super().__init__(message, "UPSTREAM_HTTP_ERROR", details)


class ServiceUnavailableError(PipelineBaseException):
    """Exception raised when an external service cannot be reached."""

    def __init__(self, service: str, reason: str = "Service temporarily unavailable"):
        message = f"Service unavailable: {service} - {reason}"
        details = {"service": service, "reason": reason}
        super().__init__(message, "SERVICE_UNAVAILABLE", details)


class SizeLimitExceededError(PipelineBaseException):
    """Exception raised when a download exceeds the configured maximum size."""

    def __init__(self, size: int, limit: int, details: Optional[dict] = None):
        self.size = size
        self.limit = limit
        message = f"Video file too large: {size} bytes (max {limit})"
        merged = {"size": size, "limit": limit}
        merged.update(details or {})
        super().__init__(message, "SIZE_LIMIT_EXCEEDED", merged)


class TimeoutError(PipelineBaseException):
    """Exception raised when an operation does not finish inside its time limit."""

    def __init__(self, operation: str, timeout_seconds: float):
        message = f"Operation '{operation}' timed out after {timeout_seconds:g} seconds"
        details = {"operation": operation, "timeout_seconds": timeout_seconds}
        super().__init__(message, "TIMEOUT", details)


class ParseError(PipelineBaseException):
    """Exception raised when model output cannot be coerced to JSON."""

    def __init__(self, what: str, snippet: str = ""):
        message = f"Failed to parse JSON content for {what}"
        details = {"what": what, "snippet": snippet[:200]}
        super().__init__(message, "PARSE_ERROR", details)


class DownloadNotSupportedError(PipelineBaseException):
    """Exception raised when a platform client cannot download videos."""

    def __init__(self, platform: str):
        message = f"Video download not supported for {platform}"
        super().__init__(message, "DOWNLOAD_NOT_SUPPORTED", {"platform": platform})


class TranscriptNotSupportedError(PipelineBaseException):
    """Exception raised when a platform client cannot provide captions."""

    def __init__(self, platform: str):
        message = f"Transcript not supported for {platform}"
        super().__init__(message, "TRANSCRIPT_NOT_SUPPORTED", {"platform": platform})


class DownloadFailedError(PipelineBaseException):
    """Exception raised when every download attempt failed."""

    def __init__(
        self,
        url: str,
        reason: str,
        headers_used: Optional[List[str]] = None,
        cookie_names: Optional[List[str]] = None,
        status: Optional[int] = None,
    ):
        self.headers_used = headers_used or []
        self.cookie_names = cookie_names or []
        self.status = status
        message = f"Failed to download video: {reason}"
        details = {
            "url": url,
            "reason": reason,
            "headers_used": self.headers_used,
            "cookie_names": self.cookie_names,
            "status": status,
        }
        super().__init__(message, "DOWNLOAD_FAILED", details)


class TranscriptionFailedError(PipelineBaseException):
    """Exception raised when the provider could not produce a transcript."""

    def __init__(self, reason: str, details: Optional[dict] = None):
        message = f"Transcription failed: {reason}"
        merged = {"reason": reason}
        merged.update(details or {})
        super().__init__(message, "TRANSCRIPTION_FAILED", merged)


class BatchAnalysisError(PipelineBaseException):
    """Exception raised when one voice-analysis batch fails."""

    def __init__(self, batch_index: int, total_batches: int, reason: str):
        self.batch_index = batch_index
        self.total_batches = total_batches
        message = f"Batch {batch_index} analysis failed: {reason}"
        details = {"batchIndex": batch_index, "totalBatches": total_batches, "reason": reason}
        super().__init__(message, "BATCH_ANALYSIS_FAILED", details)
