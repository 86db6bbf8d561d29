"""Pydantic schemas for signup, stats and admin responses."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class SignupRecord(BaseModel):
    """A stored signup row."""

    email: str = Field(..., description="Normalized (trimmed, lowercased) email address.")
    created_at: datetime = Field(..., description="Insert timestamp set by the store.")
    ip_address: str | None = Field(
        default=None,
        description="Client address reported at signup time (best-effort).",
    )


class SignupRequest(BaseModel):
    """Documented request body for ``POST /signup``.

    The route reads the raw JSON itself so that a missing or non-string
    ``email`` maps to a 400 instead of FastAPI's default 422.
    """

    email: str = Field(..., description="Email address to subscribe.", examples=["ada@example.com"])


class SignupResponse(BaseModel):
    """Body returned by ``POST /signup``.

    ``success`` is true only when a new row was inserted. A duplicate is
    reported with ``success=false`` and ``duplicate=true`` and is not an error.
    """

    success: bool
    message: str | None = None
    duplicate: bool | None = None
    error: str | None = None
    code: str | None = None


class StatsResponse(BaseModel):
    """Aggregate signup statistics."""

    total_signups: int = Field(..., ge=0, description="Number of stored signups.")


class AdminSignupsResponse(BaseModel):
    """Full signup listing for operators, newest first."""

    signups: List[SignupRecord] = Field(default_factory=list)
    total: int = Field(..., ge=0)
