"""HTTP route accepting check-in videos for analysis."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
import structlog

from ..config import AppConfig
from ..media.media_models import UploadedMedia, normalize_video_mime_type
from ..pipeline.pipeline_service import PipelineOrchestrator
from .analysis_errors import AnalysisError, ErrorCode

router = APIRouter(prefix="/api", tags=["analysis"])
logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1 * 1024 * 1024  # 1 MiB


class RequestFailure(StrEnum):
    """Request-level failures rejected before the pipeline runs."""

    INVALID_REQUEST = "invalid_request"
    PAYLOAD_TOO_LARGE = "payload_too_large"


STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.SAVE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.DELETE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SECURITY_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.UPLOAD_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.FILE_PROCESSING_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.FILE_PROCESSING_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorCode.INVALID_RESPONSE: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.ANALYSIS_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.PARSE_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.VALIDATION_FAILED: status.HTTP_502_BAD_GATEWAY,
}


def get_pipeline(request: Request) -> PipelineOrchestrator:
    """Fetch the pipeline from application state."""
    try:
        return request.app.state.pipeline  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("PipelineOrchestrator is not configured") from exc


def get_config(request: Request) -> AppConfig:
    try:
        return request.app.state.config  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("AppConfig is not configured") from exc


@router.post("/analyze")
async def analyze_checkin(
    video: UploadFile | None = File(None),
    pipeline: PipelineOrchestrator = Depends(get_pipeline),
    config: AppConfig = Depends(get_config),
) -> dict[str, Any]:
    """Run the clinical analysis pipeline on an uploaded check-in video."""
    if video is None:
        logger.warning("analysis.request.missing_file")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "status": "error",
                "failure_reason": RequestFailure.INVALID_REQUEST.value,
                "details": "No video file provided",
            },
        )

    payload = await _read_limited(video, config.max_upload_bytes)
    media = UploadedMedia(
        payload=payload,
        filename=video.filename,
        content_type=normalize_video_mime_type(video.content_type),
    )
    logger.info(
        "analysis.request.received",
        upload_name=media.filename,
        declared_content_type=video.content_type,
        content_type=media.content_type,
        size_bytes=media.size_bytes,
    )

    try:
        outcome = await pipeline.analyze(media)
    except AnalysisError as exc:
        raise HTTPException(
            status_code=STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
            detail={
                "status": "error",
                "failure_reason": exc.code.value,
                "message": exc.message,
            },
        ) from exc

    return {"status": "ok", "data": outcome.to_payload()}


async def _read_limited(upload: UploadFile, limit_bytes: int) -> bytes:
    chunks: list[bytes] = []
    size = 0
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > limit_bytes:
            logger.warning(
                "analysis.request.payload_too_large",
                size_bytes=size,
                limit_bytes=limit_bytes,
            )
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail={
                    "status": "error",
                    "failure_reason": RequestFailure.PAYLOAD_TOO_LARGE.value,
                },
            )
        chunks.append(chunk)
    return b"".join(chunks)
