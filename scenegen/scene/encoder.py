"""
Image encoder.
Turns uploaded image bytes into the base64 payload sent as an inline data part.
"""
import base64
import logging
from dataclasses import dataclass

from .errors import ReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodedImage:
    """Text-safe encoding of an image plus its declared media type."""
    media_type: str
    payload: str

    def decode(self) -> bytes:
        return base64.b64decode(self.payload)

    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.payload}"

    def as_inline_data(self) -> dict:
        """Render as a Gemini inline data part."""
        return {
            "inlineData": {
                "mimeType": self.media_type,
                "data": self.payload
            }
        }


def encode_image(data: bytes, media_type: str) -> EncodedImage:
    return EncodedImage(
        media_type=media_type,
        payload=base64.b64encode(data).decode("ascii")
    )


async def read_upload(upload) -> bytes:
    """
    Read the full contents of an uploaded file.

    Args:
        upload: Object with an awaitable ``read()`` (FastAPI ``UploadFile``)

    Returns:
        Raw bytes of the upload

    Raises:
        ReadError: If the underlying read fails or yields no bytes
    """
    try:
        content = await upload.read()
    except Exception as e:
        logger.error(f"Failed to read upload {getattr(upload, 'filename', '')}: {e}")
        raise ReadError(str(e) or "Failed to read file.") from e

    if not isinstance(content, (bytes, bytearray)):
        raise ReadError("Failed to read file as base64 string.")
    return bytes(content)

