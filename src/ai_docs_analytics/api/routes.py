"""
Analytics API routes.

- POST /track: gate, classify and record one request
- GET /detect: classify the calling request's own headers
- GET /query: run a named report template
- GET /health: liveness
"""

from __future__ import annotations

import hmac
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from ..config.constants import (
    API_SECRET_HEADER,
    MISSING_CREDENTIALS_ERROR,
    UNKNOWN_VALUE,
)
from ..config.settings import Settings
from ..events.writer import EventWriter, track_request
from ..reporting.query_catalog import QueryCatalog, QueryNotFoundError
from ..storage import StorageBackend, StorageError
from ..utils.visitor_classifier import classify
from .deps import get_app_settings, get_event_writer, get_query_catalog, get_storage
from .schemas import (
    DetectHeaders,
    DetectResponse,
    ErrorResponse,
    HealthResponse,
    QueryResponse,
    TrackResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@router.post("/track", response_model=TrackResponse, response_model_exclude_none=True)
def track(
    payload: dict[str, Any] | None = Body(None),
    writer: EventWriter = Depends(get_event_writer),
) -> dict:
    """Record one visit. Missing fields fall back to sentinel values."""
    return track_request(payload or {}, writer)


@router.get("/detect", response_model=DetectResponse, response_model_exclude_none=True)
def detect(request: Request) -> DetectResponse:
    """Classify the caller from its own request headers."""
    user_agent = request.headers.get("user-agent", "")
    accept = request.headers.get("accept", "")
    host = request.headers.get("host") or UNKNOWN_VALUE

    classification = classify(user_agent, accept, host)
    return DetectResponse(
        category=classification.category.value,
        agent=classification.agent,
        filtered=True if classification.filtered else None,
        headers=DetectHeaders(user_agent=user_agent, accept=accept),
    )


@router.get(
    "/query",
    response_model=QueryResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
def run_query(
    request: Request,
    q: str = "default",
    host: str | None = None,
    settings: Settings = Depends(get_app_settings),
    backend: StorageBackend = Depends(get_storage),
    catalog: QueryCatalog = Depends(get_query_catalog),
):
    """Run a named report template, optionally filtered to one host."""
    if settings.api_secret:
        supplied = request.headers.get(API_SECRET_HEADER, "")
        if not hmac.compare_digest(supplied.encode(), settings.api_secret.encode()):
            return _error(401, "unauthorized")

    if backend.missing_credentials():
        return _error(500, MISSING_CREDENTIALS_ERROR)

    try:
        sql = catalog.render(q or "default", host or None)
    except QueryNotFoundError as e:
        return _error(400, "invalid query", allowed=list(e.allowed))

    try:
        rows = backend.query(sql)
    except StorageError as e:
        logger.error(f"Query '{q}' failed: {e}")
        return _error(502, str(e))

    return QueryResponse(data=rows)


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True)
