"""
Base Generator class for scene generation.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class GeneratorResult:
    """Result from an AI image generation request."""
    data: Optional[bytes]
    mime_type: str = "image/png"
    request_info: str = ""
    response_info: str = ""
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.data is not None


class BaseGenerator:
    """Abstract base class for image generators."""

    def is_configured(self) -> bool:
        raise NotImplementedError("Subclasses must implement is_configured")

    def get_missing_config(self) -> list:
        return []

    def generate(self, image, prompt: str) -> GeneratorResult:
        """
        Send a reference image and a prompt, return the generated image.
        Must be implemented by subclasses.

        Args:
            image: EncodedImage carrying media type and base64 payload
            prompt: Scene composition instructions

        Returns:
            GeneratorResult with the generated image, or with ``error`` set
        """
        raise NotImplementedError("Subclasses must implement generate")
