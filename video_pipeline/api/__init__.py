"""API routers."""
from .pipeline import router as pipeline_router
from .health import router as health_router

__all__ = ["pipeline_router", "health_router"]
