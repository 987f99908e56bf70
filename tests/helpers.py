"""Test helpers: in-memory PDFs, image blobs, and a scripted vision client."""

import fitz

from app.services.openai_service import ModelCallError
from app.services.upload_validator import FileBlob

SAMPLE_CERTIFICATE = {
    "certificate_information": {
        "certificate_holder": "City of Springfield, 100 Main St",
        "certificate_number": "CN-2024-0042",
        "revision_number": "1",
        "issue_date": "05/01/2024",
    },
    "insurers": [
        {"insurer_letter": "A", "insurer_name": "Acme Casualty Co", "naic_code": "12345"},
    ],
    "policies": [
        {
            "policy_information": {
                "policy_type": "COMMERCIAL GENERAL LIABILITY",
                "policy_number": "GL-998877",
                "effective_date": "01/01/2024",
                "expiry_date": "01/01/2025",
            },
            "insurer_letter": "A",
            "coverages": [
                {"limit_type": "EACH OCCURRENCE", "limit_value": 1000000},
                {"limit_type": "GENERAL AGGREGATE", "limit_value": 2000000},
            ],
        }
    ],
    "producer_information": {
        "primary_details": {"full_name": "Best Insurance Agency", "email_address": None},
    },
}


def image_blob(name: str = "page.png", size: int = 1024, media_type: str = "image/png") -> FileBlob:
    return FileBlob(name=name, media_type=media_type, size=size, content=b"\x89PNG" + b"\0" * max(size - 4, 0))


def pdf_blob(name: str = "certificate.pdf", size: int = 50_000) -> FileBlob:
    return FileBlob(name=name, media_type="application/pdf", size=size, content=b"%PDF-1.7")


def build_pdf(page_sizes: list[tuple[float, float]]) -> bytes:
    """Create a PDF with one page per ``(width, height)`` in points."""
    doc = fitz.open()
    for index, (width, height) in enumerate(page_sizes):
        page = doc.new_page(width=width, height=height)
        page.insert_text((36, 72), f"CERTIFICATE OF LIABILITY INSURANCE page {index + 1}")
    data = doc.tobytes()
    doc.close()
    return data


class FakeVisionClient:
    """Returns scripted answers, one per call; exceptions are raised."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls: list[dict] = []

    async def complete(self, model, system_prompt, images):
        self.calls.append({"model": model, "system_prompt": system_prompt, "images": list(images)})
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


def model_error(model: str = "model", message: str = "connection reset") -> ModelCallError:
    return ModelCallError(model, message)
