"""Image → data URI encoding for model request payloads."""


import base64
import logging
from dataclasses import dataclass, field

from app.core.exceptions import FileProcessingError
from app.services.upload_validator import FileBlob

logger = logging.getLogger(__name__)

_FALLBACK_MEDIA_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class EncodedImage:
    media_type: str
    data_uri: str = field(repr=False)
    source_name: str = ""


def encode_image(blob: FileBlob) -> EncodedImage:
    """Return ``data:<mediaType>;base64,<payload>`` for one image.

    Raises :class:`FileProcessingError` when the file's bytes are unusable.
    """
    try:
        payload = base64.b64encode(bytes(blob.content)).decode("ascii")
    except (TypeError, ValueError) as exc:
        logger.error("Failed to encode %s: %s", blob.name, exc)
        raise FileProcessingError(blob.name) from exc

    media_type = blob.media_type or _FALLBACK_MEDIA_TYPE
    return EncodedImage(
        media_type=media_type,
        data_uri=f"data:{media_type};base64,{payload}",
        source_name=blob.name,
    )


def encode_images(blobs: list[FileBlob]) -> list[EncodedImage]:
    """Encode every image in order; the first failure fails the batch."""
    return [encode_image(blob) for blob in blobs]
