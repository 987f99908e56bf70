"""Response envelopes for ``POST /api/analyze``."""

from typing import Any

from pydantic import Field

from app.schemas.common import Envelope


class AnalyzeResponse(Envelope):
    """Successful analysis.  ``data`` is ``None`` when the upload is not an ACORD 25."""

    success: bool = True
    data: dict[str, Any] | None
    model: str
    files_processed: int | None = None
    message: str | None = None
    reason: str | None = Field(
        default=None,
        description=(
            "Why the document was not recognized: explicit_null, no_json, "
            "invalid_json, or empty_object. Null when data is present."
        ),
    )


class ErrorResponse(Envelope):
    """Application-level rejection (4xx/5xx)."""

    success: bool = False
    error: str
    code: str
