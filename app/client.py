"""HTTP client for the analysis API.

Does on the caller's machine what the original web page did in the browser:
apply the advisory selection limits, turn a PDF into page JPEGs, post the
images to ``/api/analyze`` and hand back the response envelope.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx
from pydantic import Field
from pydantic_settings import BaseSettings

from app.core.exceptions import AppException
from app.core.limits import DEFAULT_LIMITS, REQUEST_TIMEOUT_SECONDS, UploadLimits
from app.services.rasterizer import rasterize_pdf
from app.services.upload_validator import (
    FileBlob,
    SelectionValidator,
    UploadMode,
    ValidatedUpload,
)

logger = logging.getLogger(__name__)

_MEDIA_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


class ClientSettings(BaseSettings):
    """Client configuration loaded from environment variables / .env file."""

    api_url: str = Field(default="http://localhost:8000", alias="ACORD_API_URL")
    # Server side waits up to REQUEST_TIMEOUT_SECONDS per model, two models
    timeout: float = Field(default=REQUEST_TIMEOUT_SECONDS * 2 + 30, alias="ACORD_API_TIMEOUT")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }


class AnalyzeClientError(AppException):
    """The API rejected the request, or could not be reached."""


def media_type_for(path: Path) -> str:
    return _MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")


def load_files(paths: list[str | Path]) -> list[FileBlob]:
    """Read local files into memory, inferring the media type from the extension."""
    blobs: list[FileBlob] = []
    for raw in paths:
        path = Path(raw)
        blobs.append(FileBlob.from_bytes(path.name, media_type_for(path), path.read_bytes()))
    return blobs


def format_file_size(size: int) -> str:
    """Human-readable size, e.g. ``1.5 MB``."""
    value = float(max(size, 0))
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


def describe_selection(selection: ValidatedUpload) -> str:
    if selection.mode is UploadMode.DOCUMENT:
        return f"PDF selected: {selection.files[0].name}"
    return f"{len(selection.files)} image(s) selected"


class AnalyzeClient:
    """Submit ACORD 25 uploads to a running analysis API."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        limits: UploadLimits = DEFAULT_LIMITS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        config = ClientSettings()
        self.base_url = (base_url or config.api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.timeout
        self.limits = limits
        self.validator = SelectionValidator(limits)
        self._transport = transport

    def select(self, files: list[FileBlob]) -> ValidatedUpload:
        """Apply the client-side selection rules (advisory only)."""
        return self.validator.validate(files)

    def prepare(self, selection: ValidatedUpload) -> list[FileBlob]:
        """Return the images to upload; a PDF is rasterized locally."""
        if selection.mode is UploadMode.DOCUMENT:
            document = selection.files[0]
            pages = rasterize_pdf(document.content, max_pages=self.limits.max_pdf_pages)
            return [page.to_blob(document.name) for page in pages]
        return selection.files

    def submit(self, images: list[FileBlob]) -> dict[str, Any]:
        """POST the images as repeated ``file`` parts and return the success envelope.

        Raises :class:`AnalyzeClientError` for error envelopes and transport failures.
        """
        files = [("file", (img.name, img.content, img.media_type)) for img in images]
        url = f"{self.base_url}/api/analyze"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as http:
                response = http.post(url, files=files)
        except httpx.HTTPError as exc:
            logger.error("Request to %s failed: %s", url, exc)
            raise AnalyzeClientError(f"Analyze failed: {exc}", status_code=0, code="NETWORK_ERROR") from exc

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            raise AnalyzeClientError(
                f"Analyze failed: unexpected response ({response.status_code})",
                status_code=response.status_code,
                code="INVALID_RESPONSE",
            )

        if response.is_error or body.get("error"):
            raise AnalyzeClientError(
                body.get("error") or "Analyze failed",
                status_code=response.status_code,
                code=body.get("code") or "INTERNAL_ERROR",
            )
        return body

    def analyze(self, files: list[FileBlob]) -> dict[str, Any]:
        """Select, prepare, and submit in one go."""
        return self.submit(self.prepare(self.select(files)))
