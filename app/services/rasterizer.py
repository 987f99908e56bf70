"""PDF → JPEG page rasterization (PyMuPDF).

Pages are rendered one at a time and each pixmap is dropped before the next
page is rendered, so peak memory stays at one page on top of the document.
"""


import logging
import re
from dataclasses import dataclass, field

from app.core.exceptions import FileConversionError
from app.core.limits import (
    JPEG_MEDIA_TYPE,
    JPEG_QUALITY,
    MAX_DIMENSION,
    MAX_PDF_PAGES,
    MAX_SCALE,
)
from app.services.upload_validator import FileBlob

logger = logging.getLogger(__name__)

__all__ = ["RasterPage", "page_scale", "rasterize_pdf"]

_PDF_SUFFIX_RE = re.compile(r"\.pdf$", re.IGNORECASE)


@dataclass(frozen=True)
class RasterPage:
    """One rendered page of a PDF."""

    page_index: int  # 0-based index in the source document
    width: int
    height: int
    content: bytes = field(repr=False)
    media_type: str = JPEG_MEDIA_TYPE

    def to_blob(self, source_name: str) -> FileBlob:
        """Wrap the page as an upload file named ``<stem>_page_<n>.jpg``."""
        stem = _PDF_SUFFIX_RE.sub("", source_name)
        return FileBlob.from_bytes(
            f"{stem}_page_{self.page_index + 1}.jpg", self.media_type, self.content,
        )


def page_scale(
    width: float,
    height: float,
    *,
    max_dimension: int = MAX_DIMENSION,
    max_scale: float = MAX_SCALE,
) -> float:
    """Scale that fits the longer side into *max_dimension*, capped at *max_scale*."""
    return min(max_scale, max_dimension / max(width, height))


def rasterize_pdf(
    contents: bytes,
    *,
    max_pages: int = MAX_PDF_PAGES,
    max_dimension: int = MAX_DIMENSION,
    max_scale: float = MAX_SCALE,
    jpeg_quality: int = JPEG_QUALITY,
) -> list[RasterPage]:
    """Render the first *max_pages* pages of a PDF as JPEG images.

    Pages that render to no data are skipped.  Raises
    :class:`FileConversionError` for unreadable or password-protected PDFs and
    when no page could be rendered at all.
    """
    import fitz  # PyMuPDF — lazy import to keep startup fast

    try:
        doc = fitz.open(stream=contents, filetype="pdf")
    except Exception as exc:
        raise FileConversionError(f"Unable to open PDF: {exc}") from exc

    if doc.needs_pass:
        doc.close()
        raise FileConversionError(
            "Password-protected PDFs are not supported. "
            "Please upload an unprotected document."
        )

    pages: list[RasterPage] = []
    try:
        page_count = min(doc.page_count, max_pages)
        for page_num in range(page_count):
            page = doc[page_num]
            rect = page.rect
            scale = page_scale(
                rect.width, rect.height,
                max_dimension=max_dimension, max_scale=max_scale,
            )
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            data = pix.tobytes(output="jpeg", jpg_quality=jpeg_quality)
            width, height = pix.width, pix.height
            # Release the raster buffer before the next page is rendered
            pix = None
            page = None

            if not data:
                logger.warning("PDF page %d rendered no data; skipping", page_num + 1)
                continue

            pages.append(RasterPage(page_num, width, height, data))
            logger.debug(
                "Rendered PDF page %d → %dx%d JPEG (%d bytes, scale=%.3f)",
                page_num + 1, width, height, len(data), scale,
            )
    finally:
        doc.close()

    if not pages:
        raise FileConversionError("PDF contains no renderable pages.")

    logger.info("Converted %d PDF page(s) to images", len(pages))
    return pages
