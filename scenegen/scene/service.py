"""
Scene Service
Runs the upload and generate steps of the scene workflow against a session.
"""
import logging
import os
from typing import Optional

from .clients import BaseGenerator, GeneratorResult, get_generator
from .errors import GenerationError, SupersededError, ValidationError
from .models import GenerationResult
from .prompt import load_prompt
from .upload import UploadController

logger = logging.getLogger(__name__)

ENV_PROVIDER = "SCENE_PROVIDER"
DEFAULT_PROVIDER = "gemini"

NO_IMAGE_UPLOADED_MESSAGE = "Please upload an image first."


class SceneService:
    """
    Service for composing uploaded images into generated scenes.
    Owns the upload controller and the generator used for remote calls.
    """

    def __init__(self, generator: Optional[BaseGenerator] = None, provider: Optional[str] = None):
        """
        Initialize SceneService.

        Args:
            generator: Generator instance; built from ``provider`` when omitted
            provider: Generator factory key (default: SCENE_PROVIDER or 'gemini')
        """
        self.provider = provider or os.getenv(ENV_PROVIDER, DEFAULT_PROVIDER)
        self._generator = generator
        self.uploads = UploadController()

    @property
    def generator(self) -> BaseGenerator:
        if self._generator is None:
            self._generator = get_generator(self.provider)
        return self._generator

    async def select_image(self, session, upload, source: str = "picker"):
        return await self.uploads.select(session, upload, source)

    def generate(self, session) -> GenerationResult:
        """
        Generate a scene from the session's selected image.

        The session is left Idle on every exit path that still owns the latest
        request. A completion that has been overtaken by a newer request leaves
        the session untouched.

        Args:
            session: SessionState holding the selected and encoded image

        Returns:
            GenerationResult stored on the session

        Raises:
            ValidationError: If no image has been selected and encoded yet
            GenerationError: If the remote call fails or returns no image
            SupersededError: If a newer request was issued meanwhile
        """
        encoded = session.encoded
        if session.selected is None or encoded is None:
            logger.warning(f"[{session.session_id}] Generate requested without an image")
            raise ValidationError(NO_IMAGE_UPLOADED_MESSAGE)

        ticket = session.begin_request()
        logger.info(f"[{session.session_id}] Starting scene request #{ticket}")

        try:
            prompt = load_prompt()
            gen_result: GeneratorResult = self.generator.generate(encoded, prompt)
        except Exception as e:
            logger.error(f"[{session.session_id}] Scene request #{ticket} crashed: {e}")
            gen_result = GeneratorResult(None, error=str(e))

        if not gen_result.success:
            logger.warning(
                f"[{session.session_id}] Scene request #{ticket} failed: "
                f"{gen_result.error} {gen_result.response_info}"
            )
            if not session.fail_request(ticket):
                raise SupersededError(f"Request #{ticket} was superseded")
            raise GenerationError(gen_result.error or "Generation failed")

        result = GenerationResult(media_type=gen_result.mime_type, data=gen_result.data)
        if not session.complete_request(ticket, result):
            logger.info(f"[{session.session_id}] Discarding stale result of request #{ticket}")
            raise SupersededError(f"Request #{ticket} was superseded")

        logger.info(
            f"[{session.session_id}] Scene request #{ticket} produced "
            f"{result.media_type} ({len(result.data)} bytes)"
        )
        return result
