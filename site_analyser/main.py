# site_analyser/main.py
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from site_analyser.core.config import Settings, get_settings
from site_analyser.core.exceptions import (
    GENERIC_ERROR_MESSAGE,
    AnalyserError,
    add_exception_handlers,
    error_response,
)
from site_analyser.models import AnalysisReport, AnalysisRequest, ErrorResponse, HealthResponse
from site_analyser.services.analysis_service import AnalysisService, validate_url

logging.basicConfig(
    level=get_settings().LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("site_analyser")

STARTED_AT = time.monotonic()

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Content-Security-Policy": (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; "
        "script-src 'self'; img-src 'self' data: https:"
    ),
}

ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type"]

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
    "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
    "Access-Control-Max-Age": "600",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(f"Environment: {settings.ENVIRONMENT}, analysis mode: {settings.ANALYSIS_MODE}")
    if settings.ai_enabled:
        logger.info("AI reports are enabled")
    else:
        logger.warning("GROQ_API_KEY not set. AI report generation will be disabled.")
    yield
    logger.info("Shutting down")


# --- FastAPI App Initialization ---
app = FastAPI(
    title="Website Analyser API",
    description="Audits a website with Lighthouse, fingerprints its stack and writes a friendly report.",
    version="1.0.0",
    lifespan=lifespan,
)

add_exception_handlers(app)


# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=ALLOWED_METHODS,
    allow_headers=ALLOWED_HEADERS,
)


# Must stay below add_middleware(CORSMiddleware): it has to be the outer layer
# so every OPTIONS request gets an empty 200.
@app.middleware("http")
async def preflight_and_security_headers(request: Request, call_next):
    if request.method == "OPTIONS":
        response = Response(status_code=200, headers=PREFLIGHT_HEADERS)
    else:
        response = await call_next(request)
    response.headers.update(SECURITY_HEADERS)
    return response


def get_analysis_service(settings: Settings = Depends(get_settings)) -> AnalysisService:
    return AnalysisService.from_settings(settings)


# --- API Endpoints ---
@app.post(
    "/analyze",
    response_model=AnalysisReport,
    responses={400: {"model": ErrorResponse}, 405: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze_website(
    request: AnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Receives a URL, runs Lighthouse and the technical inspection, and returns
    the scores together with a readable report.
    """
    logger.info(f"Analysis request received: {request.url}")
    url = validate_url(request.url)
    try:
        return await service.analyze(url)
    except AnalyserError:
        raise
    except Exception as e:
        logger.exception(f"Analysis error: {e}")
        return error_response(str(e) or GENERIC_ERROR_MESSAGE, 500)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(timestamp=_now(), uptime=round(time.monotonic() - STARTED_AT, 3))


@app.get("/")
def read_root():
    return {
        "name": "Website Analyser API",
        "version": "1.0.0",
        "endpoints": {
            "analyze": "POST /analyze",
            "health": "GET /health",
        },
    }


@app.get("/api/test")
async def smoke_test():
    return {"message": "Server is working", "timestamp": _now()}


@app.post("/api/debug")
async def debug_request(
    body: Optional[Dict[str, Any]] = Body(default=None),
    settings: Settings = Depends(get_settings),
):
    """Echoes the request body and which optional features are configured."""
    body = body or {}
    return {
        "received": True,
        "url": body.get("url"),
        "body": body,
        "env": {
            "hosted": settings.ENVIRONMENT == "hosted",
            "ai": settings.ai_enabled,
        },
    }
