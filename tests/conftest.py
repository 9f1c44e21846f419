from __future__ import annotations

import json
from pathlib import Path

import pytest

from src.checkin.analysis.analysis_client import RemoteAnalysisClient
from src.checkin.media.temp_file_store import TempFileStore
from src.checkin.pipeline.pipeline_service import PipelineOrchestrator
from tests.mocks.providers import RecordingSleep, ScriptedProvider, valid_analysis_payload


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "CHECKIN_GEMINI_API_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    root = tmp_path / "scans"
    root.mkdir()
    return root


@pytest.fixture
def temp_store(temp_root: Path) -> TempFileStore:
    return TempFileStore(root=temp_root)


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider(response_text=json.dumps(valid_analysis_payload()))


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def client(provider: ScriptedProvider, recording_sleep: RecordingSleep) -> RemoteAnalysisClient:
    return RemoteAnalysisClient(
        provider=provider,
        poll_interval_seconds=1.0,
        max_poll_attempts=5,
        sleep=recording_sleep,
    )


@pytest.fixture
def pipeline(temp_store: TempFileStore, client: RemoteAnalysisClient) -> PipelineOrchestrator:
    return PipelineOrchestrator(temp_store=temp_store, client=client)
