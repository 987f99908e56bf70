"""ACORD 25 analysis endpoint — thin HTTP layer.

Business logic lives in :mod:`app.services.coi_service`.  This router is
responsible only for HTTP concerns: collecting the multipart file parts and
handing them to the service as plain :class:`FileBlob` objects.
"""


import logging

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from app.core.exceptions import FileProcessingError
from app.schemas.analyze import AnalyzeResponse, ErrorResponse
from app.services import coi_service
from app.services.openai_service import VisionModelClient, get_ai_service
from app.services.upload_validator import FileBlob

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analyze"])

# Form fields that may carry files; the web client only sends ``file``
_FILE_FIELDS = ("file", "files")


# ---------------------------------------------------------------------------
# Multipart handling (HTTP concern — stays in the router)
# ---------------------------------------------------------------------------

async def _read_blob(upload: UploadFile) -> FileBlob:
    """Read an uploaded part into memory."""
    name = upload.filename or "upload"
    try:
        contents = await upload.read()
    except OSError as exc:
        raise FileProcessingError(name) from exc
    finally:
        await upload.close()
    return FileBlob.from_bytes(name, upload.content_type or "", contents)


async def _collect_files(request: Request) -> list[FileBlob]:
    """Return every file part of the form, in order.  Non-file parts are ignored."""
    form = await request.form()
    uploads = [
        item
        for field in _FILE_FIELDS
        for item in form.getlist(field)
        if isinstance(item, UploadFile)
    ]
    return [await _read_blob(upload) for upload in uploads]


# ---------------------------------------------------------------------------
# POST /api/analyze — PDF or up to 5 images
# ---------------------------------------------------------------------------

@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    summary="Analyze ACORD 25",
    description=(
        "Upload up to 5 page images (PNG/JPEG) of an ACORD 25 certificate, "
        "or a single PDF when server-side conversion is enabled. Returns the "
        "extracted certificate, or data=null when the document is not an ACORD 25."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid upload"},
        500: {"model": ErrorResponse, "description": "All models failed"},
        503: {"model": ErrorResponse, "description": "AI not configured"},
    },
)
async def analyze_certificate(
    request: Request,
    ai_service: VisionModelClient = Depends(get_ai_service),
):
    files = await _collect_files(request)
    logger.info("Received %d file(s) for analysis", len(files))
    return await coi_service.analyze_upload(files, ai_service)
