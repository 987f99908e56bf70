"""ACORD 25 analysis service — orchestrates validation, rasterization, and extraction.

This module owns all analysis business logic.  The router delegates to
:func:`analyze_upload` and never contains domain logic directly.

Responsibilities:
  - Server-side upload validation (authoritative limits)
  - Server-side PDF rasterization when enabled
  - Model fallback: each configured model is tried once, in order
  - Interpreting free-text model output as a certificate record
"""


import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.core.config import settings
from app.core.exceptions import AIAnalysisError
from app.schemas.acord import AcordCertificate
from app.schemas.analyze import AnalyzeResponse
from app.services.encoder import EncodedImage, encode_images
from app.services.openai_service import ModelCallError, VisionClient, build_system_prompt
from app.services.rasterizer import rasterize_pdf
from app.services.upload_validator import FileBlob, UploadMode, UploadValidator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

NOT_RECOGNIZED_MESSAGE = "Document does not appear to be an ACORD 25 certificate"

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


class ExtractionStatus(str, Enum):
    RECOGNIZED = "recognized"
    NOT_RECOGNIZED = "not_recognized"


class NotRecognizedReason(str, Enum):
    EXPLICIT_NULL = "explicit_null"
    NO_JSON = "no_json"
    INVALID_JSON = "invalid_json"
    EMPTY_OBJECT = "empty_object"


@dataclass(frozen=True)
class ParsedOutput:
    data: dict[str, Any] | None
    reason: NotRecognizedReason | None = None


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one successful model call.

    Failures are never represented here; they raise :class:`AIAnalysisError`.
    """

    status: ExtractionStatus
    model: str
    data: dict[str, Any] | None = None
    reason: NotRecognizedReason | None = None

    @property
    def recognized(self) -> bool:
        return self.status is ExtractionStatus.RECOGNIZED

    @property
    def certificate(self) -> AcordCertificate | None:
        """Typed view of :attr:`data`, or ``None`` when it does not fit the schema."""
        return AcordCertificate.from_extraction(self.data)

# ---------------------------------------------------------------------------
# Model output interpretation
# ---------------------------------------------------------------------------

def parse_model_output(text: str) -> ParsedOutput:
    """Pull the certificate object out of free-form model text.

    The greedy match runs from the first ``{`` to the last ``}``.  Anything
    that does not yield a non-empty JSON object is "not recognized", never an
    error.
    """
    match = _JSON_OBJECT_RE.search(text or "")
    if not match:
        if (text or "").strip() == "null":
            return ParsedOutput(None, NotRecognizedReason.EXPLICIT_NULL)
        return ParsedOutput(None, NotRecognizedReason.NO_JSON)

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        logger.error("JSON parsing failed: %s", exc)
        return ParsedOutput(None, NotRecognizedReason.INVALID_JSON)

    if not isinstance(parsed, dict) or not parsed:
        return ParsedOutput(None, NotRecognizedReason.EMPTY_OBJECT)

    return ParsedOutput(parsed)

# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class ExtractionOrchestrator:
    """Send one request per model, in order, until a model answers."""

    def __init__(self, client: VisionClient, models: list[str] | None = None):
        self.client = client
        self.models = list(settings.vision_models if models is None else models)

    async def extract(self, images: list[EncodedImage]) -> ExtractionResult:
        """Run the extraction and interpret the first successful answer.

        Raises :class:`AIAnalysisError` (``AI_ANALYSIS_FAILED``) when every
        model failed, or (``ALL_MODELS_FAILED``) when no model is configured.
        """
        system_prompt = build_system_prompt()
        last_error: Exception | None = None

        for model in self.models:
            try:
                text = await self.client.complete(model, system_prompt, images)
            except ModelCallError as exc:
                last_error = exc
                logger.error("Model %s failed: %s", model, exc)
                continue

            parsed = parse_model_output(text)
            if parsed.data is not None:
                logger.info("Model %s recognized the certificate", model)
                return ExtractionResult(ExtractionStatus.RECOGNIZED, model, data=parsed.data)

            logger.info("Model %s did not recognize the document (%s)", model, parsed.reason.value)
            return ExtractionResult(
                ExtractionStatus.NOT_RECOGNIZED, model, reason=parsed.reason,
            )

        if last_error is not None:
            raise AIAnalysisError(f"AI analysis failed: {last_error}")
        raise AIAnalysisError("All AI models failed", code="ALL_MODELS_FAILED")

# ---------------------------------------------------------------------------
# Core orchestration — public API
# ---------------------------------------------------------------------------

def _server_validator() -> UploadValidator:
    return UploadValidator(
        settings.upload_limits,
        allow_documents=settings.enable_pdf_conversion,
        allow_images=settings.enable_image_upload,
    )


def prepare_images(files: list[FileBlob]) -> list[FileBlob]:
    """Validate the raw upload and return the images to send, in order.

    A PDF (when server-side conversion is enabled) is replaced by its
    rasterized pages.
    """
    upload = _server_validator().validate(files)
    if upload.mode is UploadMode.DOCUMENT:
        document = upload.files[0]
        pages = rasterize_pdf(document.content, max_pages=settings.max_pdf_pages)
        return [page.to_blob(document.name) for page in pages]
    return upload.files


def build_analyze_response(result: ExtractionResult, files_processed: int) -> AnalyzeResponse:
    if result.recognized:
        return AnalyzeResponse(
            data=result.data,
            model=result.model,
            files_processed=files_processed,
        )
    return AnalyzeResponse(
        data=None,
        model=result.model,
        files_processed=files_processed,
        message=NOT_RECOGNIZED_MESSAGE,
        reason=result.reason.value if result.reason else None,
    )


async def analyze_upload(files: list[FileBlob], client: VisionClient) -> AnalyzeResponse:
    """Validate, encode, and extract an uploaded certificate.

    Raises :class:`AppException` subclasses for every failure; a document
    that is not an ACORD 25 is a successful response with ``data=None``.
    """
    images = prepare_images(files)
    encoded = encode_images(images)
    result = await ExtractionOrchestrator(client).extract(encoded)
    certificate = result.certificate
    if certificate is not None:
        logger.info("Extracted certificate: %s", certificate.summary())
    return build_analyze_response(result, files_processed=len(images))
