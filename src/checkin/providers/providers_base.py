"""Abstract remote analysis provider definition."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum


class AssetState(StrEnum):
    """Lifecycle states reported for an uploaded remote asset."""

    UPLOADING = "UPLOADING"
    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"


@dataclass(slots=True)
class RemoteAsset:
    """Provider-side copy of an uploaded video."""

    uri: str
    name: str
    mime_type: str
    state: AssetState = AssetState.UPLOADING


class ProviderError(Exception):
    """Raised when a provider call fails at the transport or protocol level."""


class RemoteProvider(ABC):
    """Four-operation contract the analysis client depends on."""

    @abstractmethod
    async def upload(self, data: bytes, mime_type: str, display_name: str) -> RemoteAsset:
        """Upload bytes and return the created asset."""

    @abstractmethod
    async def get_status(self, name: str) -> AssetState:
        """Return the current processing state of ``name``."""

    @abstractmethod
    async def generate_text(self, uri: str, mime_type: str, prompt: str) -> str:
        """Run the model against the asset at ``uri`` and return its raw text."""

    @abstractmethod
    async def delete_asset(self, name: str) -> None:
        """Delete the remote asset."""
