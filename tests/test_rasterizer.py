"""Tests for PDF page rasterization (PyMuPDF)."""

import fitz
import pytest

from app.core.exceptions import FileConversionError
from app.services.rasterizer import page_scale, rasterize_pdf

from helpers import build_pdf


def test_page_scale_caps_upscaling():
    assert page_scale(612, 792) == pytest.approx(1.5)


def test_page_scale_fits_longest_side():
    assert page_scale(4000, 2000) == pytest.approx(0.4)


def test_letter_pages(letter_pdf):
    pages = rasterize_pdf(letter_pdf)
    assert len(pages) == 2
    assert [p.page_index for p in pages] == [0, 1]
    for page in pages:
        assert (page.width, page.height) == (918, 1188)
        assert page.media_type == "image/jpeg"
        assert page.content[:2] == b"\xff\xd8"  # JPEG SOI marker


@pytest.mark.parametrize("size", [(2000, 1000), (1000, 3000), (3300, 2550)])
def test_large_pages_fit_max_dimension_and_keep_ratio(size):
    width, height = size
    page = rasterize_pdf(build_pdf([size]))[0]
    assert max(page.width, page.height) <= 1600
    assert page.width / page.height == pytest.approx(width / height, rel=0.01)


def test_caps_at_five_pages():
    pdf = build_pdf([(612, 792)] * 7)
    pages = rasterize_pdf(pdf)
    assert [p.page_index for p in pages] == [0, 1, 2, 3, 4]


def test_custom_page_cap(letter_pdf):
    assert len(rasterize_pdf(letter_pdf, max_pages=1)) == 1


def test_encoded_image_matches_reported_size(letter_pdf):
    page = rasterize_pdf(letter_pdf)[0]
    pix = fitz.Pixmap(page.content)
    assert (pix.width, pix.height) == (page.width, page.height)


def test_page_blob_naming(letter_pdf):
    pages = rasterize_pdf(letter_pdf)
    blobs = [page.to_blob("Certificate.PDF") for page in pages]
    assert [b.name for b in blobs] == ["Certificate_page_1.jpg", "Certificate_page_2.jpg"]
    assert all(b.media_type == "image/jpeg" for b in blobs)
    assert blobs[0].size == len(pages[0].content)


def test_unreadable_pdf():
    with pytest.raises(FileConversionError) as exc_info:
        rasterize_pdf(b"this is not a pdf")
    assert exc_info.value.code == "FILE_CONVERSION_ERROR"


def test_encrypted_pdf():
    doc = fitz.open()
    doc.new_page()
    data = doc.tobytes(
        encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw="owner", user_pw="secret",
    )
    doc.close()
    with pytest.raises(FileConversionError, match="Password-protected"):
        rasterize_pdf(data)


def _blank_jpeg_on(monkeypatch, empty_calls):
    """Make ``Pixmap.tobytes`` return no data for the given 0-based call numbers."""
    original = fitz.Pixmap.tobytes
    calls = []

    def tobytes(self, *args, **kwargs):
        calls.append(None)
        if len(calls) - 1 in empty_calls:
            return b""
        return original(self, *args, **kwargs)

    monkeypatch.setattr(fitz.Pixmap, "tobytes", tobytes)


def test_empty_page_is_skipped(monkeypatch):
    _blank_jpeg_on(monkeypatch, {1})
    pages = rasterize_pdf(build_pdf([(612, 792)] * 3))
    assert [p.page_index for p in pages] == [0, 2]
    assert all(p.content for p in pages)


def test_all_pages_empty(monkeypatch, letter_pdf):
    _blank_jpeg_on(monkeypatch, {0, 1})
    with pytest.raises(FileConversionError, match="no renderable pages") as exc_info:
        rasterize_pdf(letter_pdf)
    assert exc_info.value.code == "FILE_CONVERSION_ERROR"
