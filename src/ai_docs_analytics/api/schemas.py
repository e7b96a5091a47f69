"""Response models for the analytics API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TrackResponse(BaseModel):
    """POST /track response."""

    ok: bool = True
    category: str | None = Field(None, description="Visitor category")
    agent: str | None = Field(None, description="Agent name")
    filtered: bool | None = Field(None, description="Present (true) for filtered traffic")
    skipped: str | None = Field(None, description="Reason the request was not recorded")


class DetectHeaders(BaseModel):
    """Headers echoed back by GET /detect."""

    user_agent: str
    accept: str


class DetectResponse(BaseModel):
    """GET /detect response."""

    category: str
    agent: str
    filtered: bool | None = None
    headers: DetectHeaders


class QueryResponse(BaseModel):
    """GET /query success response."""

    data: list[dict[str, Any]]


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    allowed: list[str] | None = None


class HealthResponse(BaseModel):
    """GET /health response."""

    ok: bool = True
