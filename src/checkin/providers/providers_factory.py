"""Factory for remote analysis providers."""

from ..config import AppConfig
from .providers_base import RemoteProvider
from .providers_gemini import GeminiFilesProvider


def create_provider(name: str, *, config: AppConfig) -> RemoteProvider:
    """Instantiate provider by name."""
    lower = name.lower()
    if lower == "gemini":
        return GeminiFilesProvider(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            api_url_base=config.gemini_api_base.rstrip("/"),
            timeout_seconds=config.request_timeout_seconds,
        )
    raise ValueError(f"Unsupported provider '{name}'")
