"""Temporary storage for uploaded check-in videos."""

from __future__ import annotations

import os
import re
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

import structlog

from ..analysis.analysis_errors import AnalysisError, ErrorCode, describe_exception
from .media_models import UploadedMedia

logger = structlog.get_logger(__name__)

FILE_PREFIX = "scan_"
DEFAULT_EXTENSION = ".mp4"
_SAFE_EXTENSION = re.compile(r"\.[A-Za-z0-9]+")

T = TypeVar("T")


def _write_file(path: Path, data: bytes) -> None:
    path.write_bytes(data)


def _unlink_file(path: Path) -> None:
    path.unlink()


def _new_token() -> str:
    return str(uuid.uuid4())


@dataclass(slots=True)
class TempFileStore:
    """Writes uploads under ``root`` and removes them once processed.

    Filesystem access goes through ``write_file``/``unlink`` so callers (and
    tests) decide what "disk" means; nothing outside ``root`` is ever deleted.
    """

    root: Path
    write_file: Callable[[Path, bytes], None] = field(default=_write_file)
    unlink: Callable[[Path], None] = field(default=_unlink_file)
    token_factory: Callable[[], str] = field(default=_new_token)
    log: Any = field(default_factory=lambda: logger)

    def save_to_temp(self, media: UploadedMedia) -> Path:
        """Persist upload bytes as ``scan_<token><ext>`` and return the path.

        A partially written file is removed before ``SAVE_FAILED`` is raised.
        """
        filename = f"{FILE_PREFIX}{self.token_factory()}{self.get_file_extension(media.filename)}"
        target = Path(os.path.abspath(self.root)) / filename

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self.write_file(target, media.payload)
        except (OSError, ValueError) as exc:
            self.log.error("media.temp.save_failed", path=str(target), error=describe_exception(exc))
            self._discard_partial(target)
            raise AnalysisError(
                ErrorCode.SAVE_FAILED,
                f"Failed to save file: {describe_exception(exc)}",
            ) from exc

        self.log.info(
            "media.temp.saved",
            path=str(target),
            size_bytes=media.size_bytes,
            original_filename=media.filename,
        )
        return target

    def delete_from_temp(self, path: Path | str) -> None:
        """Remove a temp file; absent files count as already deleted."""
        candidate = Path(os.path.abspath(os.path.normpath(str(path))))
        if not self.is_within_root(candidate):
            self.log.warning("media.temp.delete_refused", path=str(candidate))
            raise AnalysisError(
                ErrorCode.SECURITY_ERROR,
                "Security error: Cannot delete files outside temp directory",
            )

        try:
            self.unlink(candidate)
        except FileNotFoundError:
            self.log.debug("media.temp.already_absent", path=str(candidate))
            return
        except OSError as exc:
            raise AnalysisError(
                ErrorCode.DELETE_FAILED,
                f"Failed to delete file: {describe_exception(exc)}",
            ) from exc
        self.log.info("media.temp.deleted", path=str(candidate))

    async def with_scoped_file(
        self,
        media: UploadedMedia,
        operation: Callable[[Path], Awaitable[T]],
    ) -> T:
        """Run ``operation`` against a temp copy of ``media``, always cleaning up."""
        path = self.save_to_temp(media)
        try:
            return await operation(path)
        finally:
            try:
                self.delete_from_temp(path)
            except AnalysisError as exc:
                # Cleanup must not mask the operation outcome.
                self.log.warning(
                    "media.temp.cleanup_failed",
                    path=str(path),
                    code=exc.code.value,
                    error=exc.message,
                )

    def is_within_root(self, path: Path) -> bool:
        root = Path(os.path.abspath(self.root))
        return path != root and path.is_relative_to(root)

    @staticmethod
    def get_file_extension(filename: str | None) -> str:
        """Return the upload's suffix when it is plain alphanumeric, else ``.mp4``."""
        if not filename or "." not in filename:
            return DEFAULT_EXTENSION
        suffix = os.path.splitext(filename)[1]
        if not _SAFE_EXTENSION.fullmatch(suffix):
            return DEFAULT_EXTENSION
        return suffix

    def _discard_partial(self, target: Path) -> None:
        try:
            self.unlink(target)
        except FileNotFoundError:
            return
        except (OSError, ValueError) as exc:
            self.log.warning(
                "media.temp.partial_cleanup_failed",
                path=str(target),
                error=describe_exception(exc),
            )
