"""
State Probe — FastAPI Server
============================

HTTP API around the classification engine.

Endpoints:
    POST /classify          Classify a document body you already have
    POST /classify/url      Fetch a URL once, then classify it
    GET  /health            Health check / readiness probe

Run:
    uvicorn api:app --reload              # Dev (http://localhost:8000)
    uvicorn api:app --host 0.0.0.0        # Production

Docs:
    http://localhost:8000/docs             # Swagger UI (auto-generated)
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from state_probe import __version__
from state_probe.config import Settings
from state_probe.engine import ClassificationEngine
from state_probe.exceptions import RequestConstructionError, TransportError
from state_probe.fetcher import fetch_document
from state_probe.models import BatteryResult, Classification, ClassificationReport

# ─── Load .env if available ──────────────────────────────────────────
try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    pass


# ─── Application Lifespan (build engine once) ───────────────────────

_engine: ClassificationEngine | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Read settings and build the engine on startup."""
    global _engine  # noqa: PLW0603
    _engine = ClassificationEngine(Settings.from_env())
    yield
    _engine = None


# ─── FastAPI App ─────────────────────────────────────────────────────

app = FastAPI(
    title="State Probe API",
    description=(
        "Classifies a web page's interaction model as Stateful, Stateless, "
        "or Undetermined by threshold vote over independent pattern detectors."
    ),
    version=__version__,
    lifespan=lifespan,
)


# ─── Request / Response Schemas ─────────────────────────────────────


class ClassifyRequest(BaseModel):
    """Request body for the /classify endpoint."""

    body: str = Field(
        ...,
        description="Document text, optionally prefixed with response headers.",
        json_schema_extra={
            "example": "Set-Cookie: id=1\n<input type='hidden' name='csrf'>"
        },
    )


class ClassifyUrlRequest(BaseModel):
    """Request body for the /classify/url endpoint."""

    url: str = Field(..., min_length=1, description="Absolute http(s) URL to GET once.")


class ClassifyResponse(BaseModel):
    """Label plus per-battery diagnostics."""

    classification: Classification
    stateful: BatteryResult
    stateless: BatteryResult
    body_sha256: str = Field(description="SHA-256 hash of the classified text")
    body_length: int
    url: Optional[str] = None
    status_code: Optional[int] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    stateful_threshold: int
    stateless_threshold: int


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_engine() -> ClassificationEngine:
    if _engine is None:
        raise HTTPException(status_code=503, detail="Engine not initialised")
    return _engine


def _build_response(
    report: ClassificationReport, url: str | None = None, status_code: int | None = None
) -> ClassifyResponse:
    return ClassifyResponse(**report.model_dump(), url=url, status_code=status_code)


# ─── Endpoints ───────────────────────────────────────────────────────


@app.post(
    "/classify",
    summary="Classify a document body",
    tags=["Classification"],
    responses={503: {"description": "Engine not yet initialised"}},
)
def classify_body(request: ClassifyRequest) -> ClassifyResponse:
    """Run both detector batteries over the given text.

    Returns:
    - **classification**: `Stateful`, `Stateless` or `Undetermined`
    - **stateful** / **stateless**: every detector's signal and the vote count
    """
    engine = _get_engine()
    return _build_response(engine.analyze(request.body))


@app.post(
    "/classify/url",
    summary="Fetch a URL once and classify it",
    tags=["Classification"],
    responses={
        400: {"description": "URL could not be turned into a request"},
        502: {"description": "Upstream request failed"},
        503: {"description": "Engine not yet initialised"},
    },
)
async def classify_url(request: ClassifyUrlRequest) -> ClassifyResponse:
    """GET the URL (no redirects, no retries) and classify the response."""
    engine = _get_engine()
    try:
        document = await asyncio.to_thread(
            fetch_document,
            request.url,
            timeout=engine.settings.fetch_timeout,
            include_headers=engine.settings.include_headers,
        )
    except RequestConstructionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransportError as e:
        raise HTTPException(status_code=502, detail=str(e))

    report = await asyncio.to_thread(engine.analyze, document.text)
    return _build_response(report, url=document.url, status_code=document.status_code)


@app.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"description": "Engine not yet initialised"}},
)
def health_check() -> HealthResponse:
    """Returns service status and the active vote thresholds."""
    engine = _get_engine()
    return HealthResponse(
        status="healthy",
        version=__version__,
        stateful_threshold=engine.settings.stateful_threshold,
        stateless_threshold=engine.settings.stateless_threshold,
    )
