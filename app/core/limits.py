"""Upload and rasterization limits shared by the client and server validators.

The server reads its effective values from :mod:`app.core.config`; the
defaults there come from this module so both sides start from the same
numbers.
"""

from dataclasses import dataclass

MIB = 1024 * 1024

MAX_IMAGES = 5
MAX_IMAGE_SIZE = 2 * MIB
MAX_TOTAL_SIZE = 4 * MIB
MAX_DOCUMENT_SIZE = 10 * MIB
MAX_PDF_PAGES = 5

# Rasterization
MAX_DIMENSION = 1600
MAX_SCALE = 1.5
JPEG_QUALITY = 80

REQUEST_TIMEOUT_SECONDS = 60

PDF_MEDIA_TYPE = "application/pdf"
JPEG_MEDIA_TYPE = "image/jpeg"
SERVER_IMAGE_TYPES = frozenset({"image/png", "image/jpeg", "image/jpg"})


@dataclass(frozen=True)
class UploadLimits:
    """Size and count limits applied to one upload set."""

    max_images: int = MAX_IMAGES
    max_image_size: int = MAX_IMAGE_SIZE
    max_total_size: int = MAX_TOTAL_SIZE
    max_document_size: int = MAX_DOCUMENT_SIZE
    max_pdf_pages: int = MAX_PDF_PAGES


DEFAULT_LIMITS = UploadLimits()
