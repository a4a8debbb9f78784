"""
Scene workflow errors.
Each carries a human-readable message that is shown to the user as-is.
"""


class SceneError(Exception):
    """Base class for user-facing workflow failures."""

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.__class__.__name__


class ValidationError(SceneError):
    """Rejected input: non-image file or missing upload."""


class ReadError(SceneError):
    """The uploaded resource could not be read."""


class GenerationError(SceneError):
    """The remote call failed or returned no usable image."""


class SupersededError(SceneError):
    """A newer generation request was issued before this one completed."""
