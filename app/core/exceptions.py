"""Application-level exceptions and FastAPI exception handlers."""


import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

class UploadValidationError(AppException):
    """Raised when the uploaded file set breaks a count, type, or size rule."""

    def __init__(self, message: str, code: str):
        super().__init__(message, status_code=400, code=code)

class FileProcessingError(AppException):
    """Raised when the bytes of an accepted file cannot be read or encoded."""

    def __init__(self, filename: str):
        super().__init__(
            f"Failed to process file {filename}", status_code=400, code="FILE_PROCESSING_ERROR",
        )

class FileConversionError(AppException):
    """Raised when a PDF cannot be turned into page images."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400, code="FILE_CONVERSION_ERROR")

class AIAnalysisError(AppException):
    """Raised when every configured model failed."""

    def __init__(self, message: str, code: str = "AI_ANALYSIS_FAILED"):
        super().__init__(message, status_code=500, code=code)

class AINotConfiguredError(AppException):
    def __init__(self, message: str = "AI features are not available. Configure GROQ_API_KEY to enable analysis."):
        super().__init__(message, status_code=503, code="AI_NOT_CONFIGURED")

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def error_body(code: str, message: str) -> dict:
    return {
        "error": message,
        "code": code,
        "success": False,
        "timestamp": utc_timestamp(),
    }

_HTTP_ERROR_CODES = {
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
}

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        logger.warning("%s %s failed: [%s] %s", request.method, request.url.path, exc.code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.code, exc.message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        fallback = "INVALID_REQUEST" if exc.status_code < 500 else "INTERNAL_ERROR"
        code = _HTTP_ERROR_CODES.get(exc.status_code, fallback)
        message = "Resource not found" if exc.status_code == 404 else str(exc.detail)
        logger.warning("%s %s rejected: [%s] %s", request.method, request.url.path, code, message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(code, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_ERROR", "Internal server error"),
        )
