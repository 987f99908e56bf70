"""Upload validation — count, type, and size rules for an upload set.

Two validators share the limits in :mod:`app.core.limits`:

* :class:`SelectionValidator` runs on the client before submission.  It is a
  convenience for the user and silently trims the selection where it can.
* :class:`UploadValidator` runs on the server and is authoritative.  It
  re-checks everything and rejects rather than trims.
"""


import logging
from dataclasses import dataclass, field
from enum import Enum

from app.core.exceptions import UploadValidationError
from app.core.limits import (
    DEFAULT_LIMITS,
    PDF_MEDIA_TYPE,
    SERVER_IMAGE_TYPES,
    UploadLimits,
)

logger = logging.getLogger(__name__)

__all__ = [
    "FileBlob",
    "SelectionValidator",
    "UploadMode",
    "UploadValidator",
    "ValidatedUpload",
]


@dataclass(frozen=True)
class FileBlob:
    """One raw file of an upload set."""

    name: str
    media_type: str
    size: int
    content: bytes = field(default=b"", repr=False)

    @classmethod
    def from_bytes(cls, name: str, media_type: str, content: bytes) -> "FileBlob":
        return cls(name=name, media_type=media_type, size=len(content), content=content)

    @property
    def is_document(self) -> bool:
        return self.media_type == PDF_MEDIA_TYPE

    @property
    def is_image(self) -> bool:
        return self.media_type.startswith("image/")


class UploadMode(str, Enum):
    DOCUMENT = "document"
    IMAGES = "images"


@dataclass(frozen=True)
class ValidatedUpload:
    mode: UploadMode
    files: list[FileBlob]

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.files)


def _total_size(files: list[FileBlob]) -> int:
    return sum(f.size for f in files)


def _format_mb(size: int) -> str:
    return f"{size // (1024 * 1024)}MB"


class SelectionValidator:
    """Client-side checks applied when the user picks or drops files.

    A PDF anywhere in the selection wins: only the first PDF is kept and
    everything else, images included, is dropped.  Otherwise the images are
    truncated to the first ``max_images``.
    """

    def __init__(self, limits: UploadLimits = DEFAULT_LIMITS):
        self.limits = limits

    def validate(self, files: list[FileBlob]) -> ValidatedUpload:
        if not files:
            raise UploadValidationError("No files selected", "NO_FILES")

        document = next((f for f in files if f.is_document), None)
        if document is not None:
            if len(files) > 1:
                logger.debug("PDF selected; ignoring %d other file(s)", len(files) - 1)
            return ValidatedUpload(UploadMode.DOCUMENT, [document])

        images = [f for f in files if f.is_image]
        if not images:
            raise UploadValidationError(
                "Please upload either a single PDF or up to "
                f"{self.limits.max_images} images (PNG/JPEG/JPG).",
                "INVALID_FILE_TYPE",
            )

        limited = images[: self.limits.max_images]
        if _total_size(limited) > self.limits.max_total_size:
            raise UploadValidationError(
                f"Total size of selected images must be {_format_mb(self.limits.max_total_size)} or less.",
                "TOTAL_SIZE_EXCEEDED",
            )
        return ValidatedUpload(UploadMode.IMAGES, limited)


class UploadValidator:
    """Server-side checks.  Never assumes the client validator ran."""

    def __init__(
        self,
        limits: UploadLimits = DEFAULT_LIMITS,
        *,
        allow_documents: bool = False,
        allow_images: bool = True,
    ):
        self.limits = limits
        self.allow_documents = allow_documents
        self.allow_images = allow_images

    def validate(self, files: list[FileBlob]) -> ValidatedUpload:
        if not files:
            raise UploadValidationError("No files uploaded", "NO_FILES")

        if len(files) > self.limits.max_images:
            raise UploadValidationError(
                f"Maximum {self.limits.max_images} images allowed", "TOO_MANY_FILES",
            )

        if self.allow_documents:
            document = next((f for f in files if f.is_document), None)
            if document is not None:
                if document.size > self.limits.max_document_size:
                    raise UploadValidationError(
                        f"File {document.name} is too large "
                        f"(max {_format_mb(self.limits.max_document_size)} per document)",
                        "FILE_TOO_LARGE",
                    )
                return ValidatedUpload(UploadMode.DOCUMENT, [document])

        images = (
            [f for f in files if f.media_type in SERVER_IMAGE_TYPES]
            if self.allow_images else []
        )
        if not images:
            raise UploadValidationError(
                "Only images (PNG/JPEG/JPG) are supported", "INVALID_FILE_TYPE",
            )

        for image in images:
            if image.size > self.limits.max_image_size:
                raise UploadValidationError(
                    f"File {image.name} is too large "
                    f"(max {_format_mb(self.limits.max_image_size)} per file)",
                    "FILE_TOO_LARGE",
                )

        if _total_size(images) > self.limits.max_total_size:
            raise UploadValidationError(
                f"Total file size exceeds {_format_mb(self.limits.max_total_size)} limit",
                "TOTAL_SIZE_EXCEEDED",
            )

        return ValidatedUpload(UploadMode.IMAGES, images)
