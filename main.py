"""Entry point for the Video Pipeline Service."""

if __name__ == "__main__":
    import uvicorn
    from video_pipeline.core.config import settings
    from video_pipeline.utils.logging import CorrelatedLogger, LoggerSetup

    LoggerSetup.setup_logging()
    logger = CorrelatedLogger("main")
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")
    logger.info(f"Gemini model: {settings.gemini_model}")
    logger.info(f"Max download size: {settings.max_download_bytes} bytes")
    logger.info(f"Log level: {settings.log_level}")

    uvicorn.run(
        "video_pipeline.main:app",  # Use string import for hot reload
        host="0.0.0.0",
        port=8000,
        reload=settings.debug_mode,
        log_level=settings.log_level.lower()
    )
