"""Remote analysis client: upload, wait, analyze, clean up."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from ..providers.providers_base import AssetState, RemoteAsset, RemoteProvider
from .analysis_errors import AnalysisError, ErrorCode, describe_exception
from .analysis_prompt import CLINICAL_EXAM_PROMPT
from .analysis_schemas import ClinicalAnalysis
from .response_validator import validate_analysis_response

logger = structlog.get_logger(__name__)

DEFAULT_MIME_TYPE = "video/mp4"
MIME_TYPES = {
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "avi": "video/x-msvideo",
}


def guess_video_mime_type(path: Path | str) -> str:
    extension = Path(path).suffix.lstrip(".").lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def asset_name_from_uri(uri: str) -> str:
    """Return the trailing id of ``.../v1beta/files/<id>``."""
    name = uri.rstrip("/").rsplit("/", 1)[-1]
    if not name:
        raise ValueError(f"Cannot derive asset name from uri '{uri}'")
    return name


def _read_file(path: Path) -> bytes:
    return path.read_bytes()


@dataclass(slots=True)
class RemoteAnalysisClient:
    """Drive a single video through the remote provider.

    ``sleep`` and ``clock`` are injectable so the polling window can be
    simulated without real delays.
    """

    provider: RemoteProvider
    poll_interval_seconds: float = 1.0
    max_poll_attempts: int = 30
    poll_timeout_seconds: float | None = None
    prompt: str = CLINICAL_EXAM_PROMPT
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)
    clock: Callable[[], float] = field(default=time.monotonic)
    read_file: Callable[[Path], bytes] = field(default=_read_file)
    log: Any = field(default_factory=lambda: logger)

    async def upload_file(self, path: Path | str) -> str:
        """Upload ``path`` and return the asset URI once it is ACTIVE.

        If the asset was created but never became usable, it is deleted
        before the error propagates.
        """
        asset = await self._upload(Path(path))
        try:
            await self.wait_for_active(asset.name)
        except BaseException:
            await self.delete_file(asset.uri)
            raise
        asset.state = AssetState.ACTIVE
        return asset.uri

    async def wait_for_active(self, name: str) -> None:
        """Poll until ``name`` is ACTIVE, within the configured window."""
        deadline = (
            self.clock() + self.poll_timeout_seconds
            if self.poll_timeout_seconds is not None
            else None
        )

        for attempt in range(1, self.max_poll_attempts + 1):
            try:
                state = await self.provider.get_status(name)
            except Exception as exc:
                raise AnalysisError(
                    ErrorCode.UPLOAD_FAILED,
                    f"Failed to upload file: {describe_exception(exc)}",
                ) from exc

            self.log.debug("analysis.poll.status", asset_name=name, attempt=attempt, state=state.value)
            if state == AssetState.ACTIVE:
                self.log.info("analysis.poll.active", asset_name=name, attempts=attempt)
                return
            if state == AssetState.FAILED:
                self.log.warning("analysis.poll.failed", asset_name=name, attempts=attempt)
                raise AnalysisError(ErrorCode.FILE_PROCESSING_FAILED, "File processing failed")

            if attempt >= self.max_poll_attempts:
                break
            delay = self.poll_interval_seconds
            if deadline is not None:
                remaining = deadline - self.clock()
                if remaining <= 0:
                    break
                delay = min(delay, remaining)
            await self.sleep(delay)

        self.log.warning(
            "analysis.poll.timeout",
            asset_name=name,
            max_attempts=self.max_poll_attempts,
            timeout_seconds=self.poll_timeout_seconds,
        )
        raise AnalysisError(ErrorCode.FILE_PROCESSING_TIMEOUT, "File processing timed out")

    async def analyze_video(
        self, uri: str, mime_type: str = DEFAULT_MIME_TYPE
    ) -> ClinicalAnalysis:
        """Request the clinical analysis for an ACTIVE asset and validate it."""
        self.log.info("analysis.generate.start", uri=uri, mime_type=mime_type)
        try:
            text = await self.provider.generate_text(uri, mime_type, self.prompt)
        except Exception as exc:
            raise AnalysisError(
                ErrorCode.ANALYSIS_FAILED,
                f"Failed to analyze video: {describe_exception(exc)}",
            ) from exc

        if not text or not text.strip():
            raise AnalysisError(
                ErrorCode.INVALID_RESPONSE,
                "Invalid analysis response: provider returned no text",
            )

        analysis = validate_analysis_response(text)
        self.log.info(
            "analysis.generate.done",
            uri=uri,
            mood_score=analysis.mood_score,
            has_mse=analysis.mse is not None,
        )
        return analysis

    async def delete_file(self, uri: str) -> None:
        """Best-effort removal of the remote copy; never raises."""
        try:
            name = asset_name_from_uri(uri)
            await self.provider.delete_asset(name)
        except Exception as exc:
            self.log.error(
                "analysis.remote.delete_failed",
                uri=uri,
                error=describe_exception(exc),
            )
            return
        self.log.info("analysis.remote.deleted", uri=uri)

    async def process_video(self, path: Path | str) -> ClinicalAnalysis:
        """Upload, analyze and always delete the remote asset once obtained."""
        uri: str | None = None
        try:
            uri = await self.upload_file(path)
            return await self.analyze_video(uri, guess_video_mime_type(path))
        finally:
            if uri is not None:
                await self.delete_file(uri)

    async def _upload(self, path: Path) -> RemoteAsset:
        mime_type = guess_video_mime_type(path)
        display_name = f"scan_{int(time.time() * 1000)}"
        self.log.info(
            "analysis.upload.start",
            path=str(path),
            mime_type=mime_type,
            display_name=display_name,
        )
        try:
            data = self.read_file(path)
            asset = await self.provider.upload(data, mime_type, display_name)
        except Exception as exc:
            raise AnalysisError(
                ErrorCode.UPLOAD_FAILED,
                f"Failed to upload file: {describe_exception(exc)}",
            ) from exc
        asset.state = AssetState.PROCESSING
        self.log.info("analysis.upload.done", asset_name=asset.name, uri=asset.uri)
        return asset
