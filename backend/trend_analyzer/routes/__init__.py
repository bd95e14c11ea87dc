# Routes package
from .analysis import router as analysis_router
from .auth import router as auth_router
from .report import router as report_router

__all__ = ["analysis_router", "auth_router", "report_router"]
