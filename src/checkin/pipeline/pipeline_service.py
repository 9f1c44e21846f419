"""End-to-end check-in analysis pipeline."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from ..analysis.analysis_client import RemoteAnalysisClient
from ..analysis.analysis_errors import AnalysisError
from ..analysis.analysis_schemas import ClinicalAnalysis, derive_risk_flag
from ..media.media_models import UploadedMedia
from ..media.temp_file_store import TempFileStore

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class AnalysisOutcome:
    """Successful pipeline result."""

    analysis: ClinicalAnalysis
    risk_flag: bool

    @property
    def mood_score(self) -> int:
        return self.analysis.mood_score

    def to_payload(self) -> dict[str, object]:
        return {
            "mood_score": self.analysis.mood_score,
            "risk_flag": self.risk_flag,
            "analysis": self.analysis.model_dump(mode="json", exclude_none=True),
        }


@dataclass(slots=True)
class PipelineOrchestrator:
    """Save locally, run the remote analysis, clean up both copies.

    The local file is always removed by ``TempFileStore.with_scoped_file``
    and the remote asset by ``RemoteAnalysisClient.process_video``; the first
    stage error is what the caller receives.
    """

    temp_store: TempFileStore
    client: RemoteAnalysisClient
    log: Any = field(default_factory=lambda: logger)

    async def analyze(self, media: UploadedMedia) -> AnalysisOutcome:
        started = time.monotonic()
        self.log.info(
            "pipeline.start",
            upload_name=media.filename,
            content_type=media.content_type,
            size_bytes=media.size_bytes,
        )
        try:
            analysis = await self.temp_store.with_scoped_file(media, self._run)
        except AnalysisError as exc:
            self.log.error(
                "pipeline.failed",
                code=exc.code.value,
                error=exc.message,
                duration_seconds=round(time.monotonic() - started, 3),
            )
            raise

        outcome = AnalysisOutcome(analysis=analysis, risk_flag=derive_risk_flag(analysis))
        self.log.info(
            "pipeline.completed",
            mood_score=outcome.mood_score,
            risk_flag=outcome.risk_flag,
            duration_seconds=round(time.monotonic() - started, 3),
        )
        return outcome

    async def _run(self, path: Path) -> ClinicalAnalysis:
        return await self.client.process_video(path)
