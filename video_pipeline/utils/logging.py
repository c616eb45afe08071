"""Logging configuration and utilities."""
import logging
import sys
from typing import Optional
from ..core.config import settings


class LoggerSetup:
    """Centralized logging configuration."""

    @staticmethod
    def setup_logging(
        level: Optional[str] = None,
        format_string: Optional[str] = None
    ) -> None:
        """Setup application logging."""
        log_level = level or settings.log_level
        log_format = format_string or settings.log_format

        # Configure root logger
        logging.basicConfig(
            level=getattr(logging, log_level.upper(), logging.INFO),
            format=log_format,
            handlers=[
                logging.StreamHandler(sys.stdout)
            ]
        )

        # Set specific logger levels
        logging.getLogger("uvicorn").setLevel(logging.INFO)
        logging.getLogger("fastapi").setLevel(logging.INFO)
        logging.getLogger("yt_dlp").setLevel(logging.WARNING)
        logging.getLogger("aiohttp").setLevel(logging.WARNING)
        logging.getLogger("google").setLevel(logging.WARNING)


class CorrelatedLogger:
    """Logger with correlation ID support for request tracking."""

    def __init__(self, name: str, request_id: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.request_id = request_id

    def _format_message(self, message: str) -> str:
        """Format message with request ID if available."""
        if self.request_id:
            return f"[{self.request_id}] {message}"
        return message

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message with correlation ID."""
        self.logger.debug(self._format_message(message), **kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log info message with correlation ID."""
        self.logger.info(self._format_message(message), **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message with correlation ID."""
        self.logger.warning(self._format_message(message), **kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Log error message with correlation ID."""
        self.logger.error(self._format_message(message), **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log exception message with correlation ID."""
        self.logger.exception(self._format_message(message), **kwargs)


class MetricsLogger:
    """Logger for pipeline stage metrics."""

    def __init__(self):
        self.logger = logging.getLogger("metrics")

    def log_download_metrics(
        self,
        request_id: Optional[str],
        url: str,
        success: bool,
        attempts: int,
        size_bytes: int = 0,
        error_code: Optional[str] = None
    ) -> None:
        """Log video download metrics."""
        status = "success" if success else "failed"
        log_msg = (
            f"DOWNLOAD_METRICS request_id={request_id} "
            f"url={url[:100]} status={status} attempts={attempts} size_bytes={size_bytes}"
        )
        if error_code:
            log_msg += f" error_code={error_code}"
        self.logger.info(log_msg)

    def log_transcription_metrics(
        self,
        request_id: Optional[str],
        success: bool,
        processing_time_ms: int,
        word_count: int = 0,
        error_code: Optional[str] = None
    ) -> None:
        """Log transcription metrics."""
        status = "success" if success else "failed"
        log_msg = (
            f"TRANSCRIPTION_METRICS request_id={request_id} status={status} "
            f"processing_time_ms={processing_time_ms} word_count={word_count}"
        )
        if error_code:
            log_msg += f" error_code={error_code}"
        self.logger.info(log_msg)

    def log_orchestration_metrics(
        self,
        request_id: str,
        processed: int,
        success_count: int,
        failure_count: int,
        duration_ms: int,
        voice_analysis_status: str
    ) -> None:
        """Log orchestration summary metrics."""
        self.logger.info(
            f"ORCHESTRATION_METRICS request_id={request_id} processed={processed} "
            f"success={success_count} failed={failure_count} duration_ms={duration_ms} "
            f"voice_analysis={voice_analysis_status}"
        )

    def log_batch_analysis_metrics(
        self,
        request_id: str,
        total_transcripts: int,
        batches: int,
        success: bool,
        processing_time_ms: int,
        failed_batch: Optional[int] = None
    ) -> None:
        """Log voice analysis metrics."""
        status = "success" if success else "failed"
        log_msg = (
            f"BATCH_ANALYSIS_METRICS request_id={request_id} transcripts={total_transcripts} "
            f"batches={batches} status={status} processing_time_ms={processing_time_ms}"
        )
        if failed_batch is not None:
            log_msg += f" failed_batch={failed_batch}"
        self.logger.info(log_msg)
