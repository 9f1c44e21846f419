"""Remote analysis providers."""

from .providers_base import AssetState, ProviderError, RemoteAsset, RemoteProvider
from .providers_gemini import GeminiFilesProvider

__all__ = [
    "AssetState",
    "ProviderError",
    "RemoteAsset",
    "RemoteProvider",
    "GeminiFilesProvider",
]
