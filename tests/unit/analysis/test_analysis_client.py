from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from src.checkin.analysis.analysis_client import (
    RemoteAnalysisClient,
    asset_name_from_uri,
    guess_video_mime_type,
)
from src.checkin.analysis.analysis_errors import AnalysisError, ErrorCode
from src.checkin.analysis.analysis_prompt import CLINICAL_EXAM_PROMPT
from src.checkin.providers.providers_base import AssetState
from tests.mocks.providers import (
    FakeClock,
    ProviderScenario,
    RecordingSleep,
    ScriptedProvider,
    valid_analysis_payload,
)

P = AssetState.PROCESSING
A = AssetState.ACTIVE
F = AssetState.FAILED


@pytest.fixture
def video(tmp_path: Path) -> Path:
    path = tmp_path / "scan_abc.webm"
    path.write_bytes(b"webm-bytes")
    return path


@pytest.mark.asyncio
async def test_wait_for_active_after_processing(
    client: RemoteAnalysisClient, provider: ScriptedProvider, recording_sleep: RecordingSleep
) -> None:
    provider.statuses = [P, P, A]

    await client.wait_for_active("files/file-123")

    assert len(provider.status_calls) == 3
    assert recording_sleep.delays == [1.0, 1.0]


@pytest.mark.asyncio
async def test_wait_for_active_times_out_after_bound(
    client: RemoteAnalysisClient, provider: ScriptedProvider, recording_sleep: RecordingSleep
) -> None:
    provider.statuses = [P]

    with pytest.raises(AnalysisError) as excinfo:
        await client.wait_for_active("files/file-123")

    assert excinfo.value.code is ErrorCode.FILE_PROCESSING_TIMEOUT
    assert len(provider.status_calls) == client.max_poll_attempts == 5
    assert len(recording_sleep.delays) == 4


@pytest.mark.asyncio
async def test_wait_for_active_failed_state_is_terminal(
    client: RemoteAnalysisClient, provider: ScriptedProvider
) -> None:
    provider.statuses = [P, F, A]

    with pytest.raises(AnalysisError) as excinfo:
        await client.wait_for_active("files/file-123")

    assert excinfo.value.code is ErrorCode.FILE_PROCESSING_FAILED
    assert len(provider.status_calls) == 2


@pytest.mark.asyncio
async def test_wait_for_active_respects_overall_timeout(provider: ScriptedProvider) -> None:
    clock = FakeClock()

    async def sleep(seconds: float) -> None:
        clock.advance(seconds)

    provider.statuses = [P]
    client = RemoteAnalysisClient(
        provider=provider,
        poll_interval_seconds=2.0,
        max_poll_attempts=100,
        poll_timeout_seconds=5.0,
        sleep=sleep,
        clock=clock,
    )

    with pytest.raises(AnalysisError) as excinfo:
        await client.wait_for_active("files/file-123")

    assert excinfo.value.code is ErrorCode.FILE_PROCESSING_TIMEOUT
    # checks at t=0, 2, 4, 5; the deadline is reached before a fifth sleep
    assert len(provider.status_calls) == 4
    assert clock.now == pytest.approx(5.0)


@pytest.mark.asyncio
async def test_status_transport_error_is_upload_failure(
    client: RemoteAnalysisClient, provider: ScriptedProvider
) -> None:
    provider.scenario = ProviderScenario.STATUS_ERROR

    with pytest.raises(AnalysisError) as excinfo:
        await client.wait_for_active("files/file-123")

    assert excinfo.value.code is ErrorCode.UPLOAD_FAILED


@pytest.mark.asyncio
async def test_upload_file_returns_uri_once_active(
    client: RemoteAnalysisClient, provider: ScriptedProvider, video: Path
) -> None:
    provider.statuses = [P, A]

    uri = await client.upload_file(video)

    assert uri.endswith("/files/file-123")
    upload = provider.uploads[0]
    assert upload["data"] == b"webm-bytes"
    assert upload["mime_type"] == "video/webm"
    assert upload["display_name"].startswith("scan_")
    assert provider.deleted == []


@pytest.mark.asyncio
async def test_upload_transport_error_is_wrapped(
    client: RemoteAnalysisClient, provider: ScriptedProvider, video: Path
) -> None:
    provider.scenario = ProviderScenario.UPLOAD_ERROR

    with pytest.raises(AnalysisError) as excinfo:
        await client.upload_file(video)

    assert excinfo.value.code is ErrorCode.UPLOAD_FAILED
    assert "Simulated upload failure" in excinfo.value.message
    assert provider.status_calls == []


@pytest.mark.asyncio
async def test_upload_of_missing_file_is_upload_failure(
    client: RemoteAnalysisClient, provider: ScriptedProvider, tmp_path: Path
) -> None:
    with pytest.raises(AnalysisError) as excinfo:
        await client.upload_file(tmp_path / "gone.mp4")

    assert excinfo.value.code is ErrorCode.UPLOAD_FAILED
    assert provider.uploads == []


@pytest.mark.asyncio
async def test_upload_timeout_still_deletes_remote_asset(
    client: RemoteAnalysisClient, provider: ScriptedProvider, video: Path
) -> None:
    provider.statuses = [P]

    with pytest.raises(AnalysisError) as excinfo:
        await client.upload_file(video)

    assert excinfo.value.code is ErrorCode.FILE_PROCESSING_TIMEOUT
    assert provider.deleted == ["file-123"]


@pytest.mark.asyncio
async def test_analyze_video_returns_validated_record(
    client: RemoteAnalysisClient, provider: ScriptedProvider
) -> None:
    analysis = await client.analyze_video("https://example.test/v1beta/files/file-123", "video/webm")

    assert analysis.mood_score == 6
    call = provider.generate_calls[0]
    assert call["uri"].endswith("files/file-123")
    assert call["mime_type"] == "video/webm"
    assert call["prompt"] == CLINICAL_EXAM_PROMPT


@pytest.mark.asyncio
async def test_analyze_video_accepts_fenced_response(
    client: RemoteAnalysisClient, provider: ScriptedProvider
) -> None:
    raw = json.dumps(valid_analysis_payload())
    plain = await client.analyze_video("uri/file-123")
    provider.response_text = f"```json\n{raw}\n```"

    fenced = await client.analyze_video("uri/file-123")

    assert fenced == plain


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("response_text", "code"),
    [
        ("{not json", ErrorCode.PARSE_FAILED),
        (json.dumps(valid_analysis_payload(mood_score=11)), ErrorCode.VALIDATION_FAILED),
        ("   ", ErrorCode.INVALID_RESPONSE),
    ],
)
async def test_analyze_video_rejections(
    client: RemoteAnalysisClient,
    provider: ScriptedProvider,
    response_text: str,
    code: ErrorCode,
) -> None:
    provider.response_text = response_text

    with pytest.raises(AnalysisError) as excinfo:
        await client.analyze_video("uri/file-123")

    assert excinfo.value.code is code


@pytest.mark.asyncio
async def test_analyze_video_transport_error(
    client: RemoteAnalysisClient, provider: ScriptedProvider
) -> None:
    provider.scenario = ProviderScenario.GENERATE_ERROR

    with pytest.raises(AnalysisError) as excinfo:
        await client.analyze_video("uri/file-123")

    assert excinfo.value.code is ErrorCode.ANALYSIS_FAILED
    assert "Simulated generation failure" in excinfo.value.message


@pytest.mark.asyncio
async def test_delete_file_swallows_errors(
    client: RemoteAnalysisClient, provider: ScriptedProvider
) -> None:
    provider.scenario = ProviderScenario.DELETE_ERROR

    await client.delete_file("https://example.test/v1beta/files/file-123")

    assert provider.deleted == ["file-123"]


@pytest.mark.asyncio
async def test_process_video_deletes_asset_after_success(
    client: RemoteAnalysisClient, provider: ScriptedProvider, video: Path
) -> None:
    provider.statuses = [P, A]

    analysis = await client.process_video(video)

    assert analysis.mood_score == 6
    assert provider.generate_calls[0]["mime_type"] == "video/webm"
    assert provider.deleted == ["file-123"]
    assert provider.events[-1] == "delete"


@pytest.mark.asyncio
async def test_process_video_deletes_asset_once_when_analysis_fails(
    client: RemoteAnalysisClient, provider: ScriptedProvider, video: Path
) -> None:
    provider.response_text = "not json"

    with pytest.raises(AnalysisError) as excinfo:
        await client.process_video(video)

    assert excinfo.value.code is ErrorCode.PARSE_FAILED
    assert provider.deleted == ["file-123"]


@pytest.mark.asyncio
async def test_process_video_keeps_primary_error_when_delete_fails(
    client: RemoteAnalysisClient, provider: ScriptedProvider, video: Path
) -> None:
    provider.scenario = ProviderScenario.DELETE_ERROR
    provider.response_text = json.dumps(valid_analysis_payload(mood_score=0))

    with pytest.raises(AnalysisError) as excinfo:
        await client.process_video(video)

    assert excinfo.value.code is ErrorCode.VALIDATION_FAILED
    assert provider.deleted == ["file-123"]


@pytest.mark.asyncio
async def test_process_video_without_upload_skips_delete(
    client: RemoteAnalysisClient, provider: ScriptedProvider, video: Path
) -> None:
    provider.scenario = ProviderScenario.UPLOAD_ERROR

    with pytest.raises(AnalysisError):
        await client.process_video(video)

    assert provider.deleted == []


@pytest.mark.asyncio
async def test_process_video_timeout_deletes_asset_once(
    client: RemoteAnalysisClient, provider: ScriptedProvider, video: Path
) -> None:
    provider.statuses = [P]

    with pytest.raises(AnalysisError) as excinfo:
        await client.process_video(video)

    assert excinfo.value.code is ErrorCode.FILE_PROCESSING_TIMEOUT
    assert provider.deleted == ["file-123"]
    assert provider.generate_calls == []


@pytest.mark.asyncio
async def test_cancellation_during_polling_still_deletes_asset(
    provider: ScriptedProvider, video: Path
) -> None:
    provider.statuses = [P]
    client = RemoteAnalysisClient(
        provider=provider,
        poll_interval_seconds=30.0,
        max_poll_attempts=10,
    )

    task = asyncio.create_task(client.process_video(video))
    while not provider.status_calls:
        await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert provider.deleted == ["file-123"]


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("scan_1.mp4", "video/mp4"),
        ("scan_1.webm", "video/webm"),
        ("scan_1.MOV", "video/quicktime"),
        ("scan_1.avi", "video/x-msvideo"),
        ("scan_1.mkv", "video/mp4"),
        ("scan_1", "video/mp4"),
    ],
)
def test_guess_video_mime_type(path: str, expected: str) -> None:
    assert guess_video_mime_type(path) == expected


def test_asset_name_from_uri() -> None:
    uri = "https://generativelanguage.googleapis.com/v1beta/files/abc-123"

    assert asset_name_from_uri(uri) == "abc-123"
    assert asset_name_from_uri(uri + "/") == "abc-123"
