"""
Gemini Generator for scene composition.
Calls the Gemini ``generateContent`` REST endpoint with one inline image part
and one text part, asking for image and text output.

Required Environment Variables:
    GEMINI_API_KEY: Gemini API key

Optional Environment Variables:
    GEMINI_MODEL: Model name (default: gemini-2.5-flash-image-preview)
    GEMINI_ENDPOINT: API base URL (default: https://generativelanguage.googleapis.com/v1beta)
    GEMINI_TIMEOUT: Request timeout in seconds (default: 120)
"""
import base64
import logging
import os
import time

import requests

from .base import BaseGenerator, GeneratorResult

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "No image was generated. The model may have refused the request."


class GeminiGenerator(BaseGenerator):
    """Gemini multimodal image generator."""

    ENV_API_KEY = "GEMINI_API_KEY"
    ENV_MODEL = "GEMINI_MODEL"
    ENV_ENDPOINT = "GEMINI_ENDPOINT"
    ENV_TIMEOUT = "GEMINI_TIMEOUT"

    DEFAULT_MODEL = "gemini-2.5-flash-image-preview"
    DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_TIMEOUT = 120

    RESPONSE_MODALITIES = ["IMAGE", "TEXT"]

    def __init__(self):
        self.api_key = os.getenv(self.ENV_API_KEY)
        self.model = os.getenv(self.ENV_MODEL, self.DEFAULT_MODEL)
        self.endpoint = os.getenv(self.ENV_ENDPOINT, self.DEFAULT_ENDPOINT).rstrip("/")
        self.timeout = float(os.getenv(self.ENV_TIMEOUT, self.DEFAULT_TIMEOUT))

    @property
    def url(self) -> str:
        return f"{self.endpoint}/models/{self.model}:generateContent"

    def is_configured(self) -> bool:
        """Check if the Gemini generator has a credential."""
        return bool(self.api_key)

    def get_missing_config(self) -> list:
        """Return list of missing configuration variables."""
        return [] if self.api_key else [self.ENV_API_KEY]

    def build_payload(self, image, prompt: str) -> dict:
        return {
            "contents": [{
                "parts": [
                    image.as_inline_data(),
                    {"text": prompt}
                ]
            }],
            "generationConfig": {
                "responseModalities": self.RESPONSE_MODALITIES
            }
        }

    @staticmethod
    def find_image_part(result: dict):
        """
        Scan the first candidate's parts in order for inline image data.

        Returns:
            Tuple of (mime_type, base64 data) or None if no part carries an image
        """
        candidates = result.get("candidates") or []
        if not candidates:
            return None

        parts = (candidates[0].get("content") or {}).get("parts") or []
        for part in parts:
            inline_data = part.get("inlineData") or part.get("inline_data")
            if inline_data and inline_data.get("data"):
                mime_type = inline_data.get("mimeType") or inline_data.get("mime_type") or "image/png"
                return mime_type, inline_data["data"]
            if part.get("text"):
                logger.info(f"Model text part: {part['text'][:80]}")
        return None

    @staticmethod
    def error_message(response) -> str:
        """Pull the service's own error message out of a failed response."""
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        return response.text or f"HTTP {response.status_code}"

    def generate(self, image, prompt: str) -> GeneratorResult:
        """Compose a scene from ``image`` using the Gemini endpoint."""
        if not self.is_configured():
            missing = self.get_missing_config()
            return GeneratorResult(
                None,
                error=f"Missing required environment variables: {', '.join(missing)}"
            )

        logger.info(f"Using Gemini Endpoint: {self.endpoint}")
        logger.info(f"Using Model: {self.model}")

        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key
        }

        start_time = time.time()
        req_info = f"POST {self.url}\nImage: {image.media_type}\nPrompt: {prompt[:50]}..."
        resp_info = ""

        try:
            logger.info("Submitting Gemini scene request...")
            response = requests.post(
                self.url,
                headers=headers,
                json=self.build_payload(image, prompt),
                timeout=self.timeout
            )

            latency = time.time() - start_time
            resp_info = f"Status: {response.status_code}\nLatency: {latency:.2f}s"

            if response.status_code != 200:
                message = self.error_message(response)
                logger.error(f"Gemini API Error: {message}")
                return GeneratorResult(None, request_info=req_info,
                                       response_info=resp_info, error=message)

            found = self.find_image_part(response.json())
            if found is None:
                logger.warning("Gemini response carried no inline image part")
                return GeneratorResult(None, request_info=req_info,
                                       response_info=resp_info, error=NO_IMAGE_MESSAGE)

            mime_type, data = found
            return GeneratorResult(
                data=base64.b64decode(data),
                mime_type=mime_type,
                request_info=req_info,
                response_info=resp_info
            )

        except requests.exceptions.RequestException as e:
            logger.error(f"Gemini request failed: {e}")
            return GeneratorResult(None, request_info=req_info,
                                   response_info=resp_info, error=str(e))

        except ValueError as e:
            logger.error(f"Unreadable Gemini response: {e}")
            return GeneratorResult(None, request_info=req_info,
                                   response_info=resp_info, error=f"Invalid response: {e}")
