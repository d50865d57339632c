"""
HR Analytics Dashboard API v1.0
FastAPI backend over a Google Sheets workbook (employees, trainings,
participation, performance) with Gemini summaries of free-text notes.
"""
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from hr_dashboard.api.deps import get_settings
from hr_dashboard.config import DashboardSettings
from hr_dashboard.services.errors import (
    ConfigurationError,
    DashboardError,
    FetchError,
    NetworkError,
    NothingToAnalyzeError,
)
from hr_dashboard.services.logging_config import setup_logging
from hr_dashboard.services.middleware import RequestTimingMiddleware

API_VERSION = "1.0.0"

# .env in the working directory, if any; real environment variables win
load_dotenv()

_settings = get_settings()
setup_logging(level=_settings.log_level, json_output=_settings.json_logs)
logger = logging.getLogger("hr-dashboard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    # Missing credentials degrade the feature, they never stop the API
    if not settings.sheets_api_key:
        logger.warning("MISSING env var: GOOGLE_SHEETS_API_KEY; dashboard views will fail")
    if not settings.spreadsheet_id:
        logger.warning("MISSING env var: SPREADSHEET_ID; dashboard views will fail")
    if not settings.gemini_api_key:
        logger.warning("MISSING env var: GEMINI_API_KEY; AI analysis disabled")
    logger.info(
        f"Parsers: fallback={settings.fallback_policy}, schema={settings.schema_revision}"
    )
    yield


app = FastAPI(
    title="HR Analytics Dashboard API",
    version=API_VERSION,
    description="KPIs and AI summaries over the HR spreadsheet",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

def status_for(exc: DashboardError) -> int:
    if isinstance(exc, ConfigurationError):
        return 503
    if isinstance(exc, (FetchError, NetworkError)):
        return 502
    if isinstance(exc, NothingToAnalyzeError):
        return 422
    return 500


@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError):
    body = {"detail": str(exc), "error": exc.kind}
    if isinstance(exc, FetchError):
        body["upstream_status"] = exc.status_code
    return JSONResponse(status_code=status_for(exc), content=body)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "X-Requested-With", "X-Request-ID"],
)
# Timing must be outermost so it wraps all other middleware
app.add_middleware(RequestTimingMiddleware)


# Routers
from hr_dashboard.api.analysis_routes import router as analysis_router  # noqa: E402
from hr_dashboard.api.dashboard_routes import router as dashboard_router  # noqa: E402

app.include_router(dashboard_router)
app.include_router(analysis_router)


@app.get("/health")
async def health_check(settings: DashboardSettings = Depends(get_settings)):
    return {
        "status": "active",
        "version": API_VERSION,
        "sheets_configured": settings.sheets_configured,
        "gemini_configured": settings.gemini_configured,
        "fallback_policy": settings.fallback_policy,
        "schema_revision": settings.schema_revision,
    }
