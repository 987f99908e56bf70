"""Shared Pydantic schema bases: camelCase aliases and the response envelope."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from app.core.exceptions import utc_timestamp


class CamelModel(BaseModel):
    """API schemas inherit from this to auto-generate camelCase aliases."""

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
    }


class Envelope(CamelModel):
    """Every /api response carries a ``success`` discriminant and a timestamp."""

    success: bool
    timestamp: str = Field(default_factory=utc_timestamp)


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str
