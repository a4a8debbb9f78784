"""
Scene Generator Clients
"""
from .base import BaseGenerator, GeneratorResult
from .gemini import GeminiGenerator


def get_generator(provider: str = "gemini") -> BaseGenerator:
    """
    Factory function to get the appropriate generator.

    Args:
        provider: 'gemini' (only Gemini is currently supported)

    Returns:
        BaseGenerator instance
    """
    provider = provider.lower()
    if provider == "gemini":
        return GeminiGenerator()
    else:
        raise ValueError(f"Unknown provider: {provider}. Use 'gemini'.")


__all__ = ["get_generator", "GeneratorResult", "BaseGenerator", "GeminiGenerator"]
