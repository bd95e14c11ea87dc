import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .constants import DEFAULT_LANGUAGE, LANGUAGES
from .routes import analysis_router, auth_router, report_router
from .services.auth_service import LocalAuthService
from .services.i18n import Translator
from .services.profile_store import ProfileStore
from .services.report_session import AppContext, ReportSession


# Load environment variables from .env file
load_dotenv()


def build_session(store: ProfileStore) -> ReportSession:
    """Restore the persisted profile and language into a fresh session."""
    language = store.load_language()
    if language not in LANGUAGES:
        language = DEFAULT_LANGUAGE
    context = AppContext(
        translator=Translator(),
        user=LocalAuthService(store).load_session(),
        language=language,
    )
    return ReportSession(context)


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    print("Starting Global Trend Analyzer")
    has_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    print(f"   Gemini Key:  {' Configured' if has_key else ' Not set (generation will fail)'}")

    store = ProfileStore()
    app.state.profile_store = store
    app.state.report_session = build_session(store)

    user = app.state.report_session.context.user
    print(f"   Session:     {user.name + ' (' + user.subscription + ')' if user else 'anonymous'}")
    print(f"   Language:    {app.state.report_session.context.language}")

    yield

    print("Shutting down Global Trend Analyzer")


app = FastAPI(
    title="Global Trend Analyzer",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",      # Frontend dev server
        "http://127.0.0.1:3000",      # Alternative localhost
        "http://localhost:5173",      # Vite dev server
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(report_router)
app.include_router(analysis_router)
app.include_router(auth_router)


@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Global Trend Analyzer",
        "version": "0.1.0",
        "description": "AI-generated market-trend reports with sector and product drill-down",
        "docs": "/docs",
        "endpoints": {
            "state": "GET /state - Current session view state",
            "report": "POST /report/generate - Generate the trend report",
            "sector": "POST /analysis/sector - Analyse a sector (premium)",
            "product": "POST /analysis/product - Analyse a suggested product",
            "health": "GET /health - Service health check",
        }
    }


@app.get(
    "/health",
    summary="Global Health Check",
    description="Check if the API server is running",
    tags=["General"]
)
async def health():
    """Global health check endpoint."""
    return {
        "status": "healthy",
        "service": "global-trend-analyzer",
        "version": "0.1.0"
    }


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "detail": str(exc) if os.getenv("DEBUG", "false").lower() == "true" else "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "trend_analyzer.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("DEBUG", "true").lower() == "true",
    )
