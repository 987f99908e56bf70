"""Vision model client — OpenAI SDK against Groq's OpenAI-compatible endpoint.

One call = one model identifier, one system prompt, and one user turn made of
page images.  The client never retries; choosing the next model on failure is
the caller's job (see :mod:`app.services.coi_service`).
"""

from __future__ import annotations

import logging
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError

from app.core.config import settings
from app.core.exceptions import AINotConfiguredError
from app.services.encoder import EncodedImage

logger = logging.getLogger(__name__)

# ── System prompt ─────────────────────────────────────────────────────────

ACORD_PROMPT = """You are an expert insurance document analyst specialising in ACORD 25 Certificates of Liability Insurance.

You receive one or more page images of a single document. Read every page and extract the certificate data into ONE JSON object with exactly this structure:

{
  "certificate_information": {
    "certificate_holder": "<name and address of the certificate holder or null>",
    "certificate_number": "<string or null>",
    "revision_number": "<string or null>",
    "issue_date": "<MM/DD/YYYY or null>"
  },
  "insurers": [
    {
      "insurer_letter": "<A-F>",
      "insurer_name": "<string>",
      "naic_code": "<string or null>"
    }
  ],
  "policies": [
    {
      "policy_information": {
        "policy_type": "<e.g. COMMERCIAL GENERAL LIABILITY, AUTOMOBILE LIABILITY, UMBRELLA LIAB, WORKERS COMPENSATION>",
        "policy_number": "<string or null>",
        "effective_date": "<MM/DD/YYYY or null>",
        "expiry_date": "<MM/DD/YYYY or null>"
      },
      "insurer_letter": "<A-F or null>",
      "coverages": [
        {
          "limit_type": "<e.g. EACH OCCURRENCE, GENERAL AGGREGATE, COMBINED SINGLE LIMIT>",
          "limit_value": <number without currency symbols or separators, or null>
        }
      ]
    }
  ],
  "producer_information": {
    "primary_details": {
      "full_name": "<string or null>",
      "email_address": "<string or null>",
      "doing_business_as": "<string or null>"
    },
    "contact_information": {
      "phone_number": "<string or null>",
      "fax_number": "<string or null>",
      "license_number": "<string or null>"
    },
    "address_details": {
      "address_line_1": "<string or null>",
      "address_line_2": "<string or null>",
      "address_line_3": "<string or null>",
      "city": "<string or null>",
      "state": "<string or null>",
      "zip_code": "<string or null>",
      "country": "<string or null>"
    }
  }
}

## Rules
1. Output ONLY the JSON object — no markdown fences, no commentary.
2. Copy values exactly as printed; do not guess. Use null for anything you cannot read.
3. List one policy per row of the coverage grid, in the order printed, with every limit shown for that row.
4. limit_value is a plain number (1000000, not "$1,000,000").
5. Omit coverage rows whose limit is blank."""

STRICT_OUTPUT_RULE = "STRICT OUTPUT RULE: If the document is not an ACORD 25, output exactly: null."


def build_system_prompt() -> str:
    return f"{ACORD_PROMPT}\n\n{STRICT_OUTPUT_RULE}"


class ModelCallError(Exception):
    """A single model attempt failed (transport, API, or empty response)."""

    def __init__(self, model: str, message: str):
        self.model = model
        super().__init__(message)


class VisionClient(Protocol):
    async def complete(
        self, model: str, system_prompt: str, images: list[EncodedImage],
    ) -> str: ...


class VisionModelClient:
    """Thin async wrapper around the OpenAI SDK for image-to-text extraction."""

    def __init__(self) -> None:
        if not settings.ai_enabled:
            raise AINotConfiguredError()
        self.client = AsyncOpenAI(
            api_key=settings.groq_api_key,
            base_url=settings.groq_base_url,
            timeout=settings.request_timeout,
            max_retries=0,
        )
        self.temperature = settings.vision_temperature
        self.top_p = settings.vision_top_p
        self.max_tokens = settings.vision_max_completion_tokens

    @staticmethod
    def build_messages(system_prompt: str, images: list[EncodedImage]) -> list[dict]:
        return [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": image.data_uri}}
                    for image in images
                ],
            },
        ]

    async def complete(
        self, model: str, system_prompt: str, images: list[EncodedImage],
    ) -> str:
        """Send one request to *model* and return the raw response text."""
        try:
            logger.info("Calling vision model=%s, images=%d", model, len(images))
            response = await self.client.chat.completions.create(
                model=model,
                messages=self.build_messages(system_prompt, images),
                temperature=self.temperature,
                top_p=self.top_p,
                max_completion_tokens=self.max_tokens,
            )
        except OpenAIError as exc:
            logger.error("Vision API error (model=%s): %s", model, exc)
            raise ModelCallError(model, str(exc)) from exc

        if not response.choices:
            raise ModelCallError(model, "Response contained no choices")

        content = response.choices[0].message.content or ""
        logger.info("Vision call successful (model=%s, output_length=%d)", model, len(content))
        return content


def get_ai_service() -> VisionModelClient:
    """FastAPI dependency that creates a :class:`VisionModelClient`.

    Raises ``AINotConfiguredError`` when the Groq key is not configured.
    """
    return VisionModelClient()
