"""
FastAPI server: token analysis API.

POST /analyze scores a Solana token mint; GET / and GET /health are liveness
probes; GET /test-config reports which credentials are configured without
exposing them. Settings and the analyzer are built once in create_app() and
kept on app.state.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from snifftools import __version__
from snifftools.analytics.analysis_pipeline import TokenAnalyzer
from snifftools.api_server.middleware import install_middleware
from snifftools.config import Settings, get_settings
from snifftools.core.exceptions import InputValidationError, InternalComputationError
from snifftools.logging import get_logger

logger = get_logger(__name__)

ROOT_MESSAGE = "SniffTools API is running!"
INTERNAL_ERROR_MESSAGE = "Internal server error"
INVALID_BODY_MESSAGE = "Invalid request body"


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------


class AnalyzeRequest(BaseModel):
    """POST /analyze body. address is validated by the analyzer, not here, so bad values map to 400."""

    address: Any = Field(None, description="Solana token mint address (base58)")


class MetricScore(BaseModel):
    score: int = Field(..., ge=0, le=100)
    description: str


class AnalyzeResponse(BaseModel):
    """POST /analyze response: composite score, band message, per-metric sub-scores."""

    score: int = Field(..., ge=0, le=100, description="Weighted composite score (0-100)")
    label: str = Field(..., description="Score band label")
    message: str = Field(..., description="Human-readable summary for the score band")
    metrics: dict[str, MetricScore] = Field(default_factory=dict)
    tokenData: dict[str, Any] = Field(default_factory=dict, description="Raw provider fields echoed for display")


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------


def get_analyzer(request: Request) -> TokenAnalyzer:
    return request.app.state.analyzer


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

router = APIRouter()


@router.get("/")
def root() -> dict[str, str]:
    return {"message": ROOT_MESSAGE}


@router.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok"}


@router.get("/test-config")
def test_config(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
    """Report Present/Missing for each credential and endpoint; never the values."""
    return settings.config_report()


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(body: AnalyzeRequest, analyzer: TokenAnalyzer = Depends(get_analyzer)) -> Any:
    """
    Score a token. 400 for an invalid address (no provider calls are made);
    provider failures degrade to neutral sub-scores and still return 200.
    """
    try:
        analysis = await analyzer.analyze(body.address)
    except (InputValidationError, InternalComputationError):
        raise
    except Exception as e:
        logger.exception("analyze_unexpected_error", error=type(e).__name__)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})
    return analysis.to_dict()


# -----------------------------------------------------------------------------
# Error handlers: every error body is {"error": "..."}
# -----------------------------------------------------------------------------


def input_validation_handler(request: Request, exc: InputValidationError) -> JSONResponse:
    logger.info("analyze_rejected", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=400, content={"error": str(exc)})


def internal_error_handler(request: Request, exc: InternalComputationError) -> JSONResponse:
    logger.error("analyze_internal_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_body_invalid", path=request.url.path)
    return JSONResponse(status_code=400, content={"error": INVALID_BODY_MESSAGE})


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Consistent JSON error response for HTTPException."""
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------


def create_app(settings: Settings | None = None, analyzer: TokenAnalyzer | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="SniffTools API",
        description="Token trust/quality scoring from third-party market data.",
        version=__version__,
    )
    app.state.settings = settings
    app.state.analyzer = analyzer or TokenAnalyzer(settings)

    install_middleware(app, settings.cors_allow_origins)
    app.include_router(router)
    app.add_exception_handler(InputValidationError, input_validation_handler)
    app.add_exception_handler(InternalComputationError, internal_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    logger.info(
        "api_app_created",
        providers=[f.name for f in app.state.analyzer.fetchers],
        weights=dict(settings.weights),
    )
    return app
