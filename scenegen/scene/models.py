"""
Image values held by a session.
"""
import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class SelectedImage:
    """Image chosen by the user."""
    filename: str
    media_type: str
    data: bytes


@dataclass(frozen=True)
class GenerationResult:
    """Image returned by the generation service."""
    media_type: str
    data: bytes

    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{base64.b64encode(self.data).decode('ascii')}"
