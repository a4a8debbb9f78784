"""
Scene Module
Reference-image scene composition backed by a multimodal generation service.
"""
from .service import SceneService
from .clients import get_generator, GeneratorResult
from .errors import SceneError, ValidationError, ReadError, GenerationError, SupersededError

__all__ = [
    "SceneService", "get_generator", "GeneratorResult",
    "SceneError", "ValidationError", "ReadError", "GenerationError", "SupersededError"
]
