"""
Upload controller.
The only path through which a session's selected image changes.
"""
import logging

from .encoder import encode_image, read_upload
from .errors import ValidationError
from .models import SelectedImage

logger = logging.getLogger(__name__)

INVALID_IMAGE_MESSAGE = "Please select a valid image file."


def is_image_type(media_type) -> bool:
    return bool(media_type) and media_type.startswith("image/")


class UploadController:
    """Validate, store and encode a candidate image for a session."""

    async def select(self, session, upload, source: str = "picker"):
        """
        Accept ``upload`` as the session's selected image.

        Args:
            session: SessionState to update
            upload: FastAPI ``UploadFile`` (or anything with filename,
                content_type and an awaitable ``read()``)
            source: 'picker' or 'drop', for logging only

        Returns:
            The session's SelectedImage

        Raises:
            ValidationError: If the candidate is missing or not an image
            ReadError: If the candidate cannot be read
        """
        if upload is None or not is_image_type(upload.content_type):
            logger.warning(
                f"[{session.session_id}] Rejected {source} upload: "
                f"{getattr(upload, 'content_type', None)}"
            )
            raise ValidationError(INVALID_IMAGE_MESSAGE)

        content = await read_upload(upload)
        image = SelectedImage(
            filename=upload.filename or "upload",
            media_type=upload.content_type,
            data=content
        )
        selection_id = session.select(image)
        logger.info(
            f"[{session.session_id}] Selected {image.filename} via {source} "
            f"({image.media_type}, {len(content)} bytes)"
        )

        session.store_encoding(selection_id, encode_image(content, image.media_type))
        return image
