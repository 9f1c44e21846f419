"""Dependency wiring helpers."""

from fastapi import FastAPI

from .analysis.analysis_api import router as analysis_router
from .analysis.analysis_client import RemoteAnalysisClient
from .config import AppConfig
from .media.temp_file_store import TempFileStore
from .pipeline.pipeline_service import PipelineOrchestrator
from .providers.providers_base import RemoteProvider
from .providers.providers_factory import create_provider


def build_pipeline(
    config: AppConfig, *, provider: RemoteProvider | None = None
) -> PipelineOrchestrator:
    """Construct the pipeline once; every collaborator is passed down explicitly."""
    remote = provider or create_provider(config.provider, config=config)
    temp_store = TempFileStore(root=config.temp_root)
    client = RemoteAnalysisClient(
        provider=remote,
        poll_interval_seconds=config.poll_interval_seconds,
        max_poll_attempts=config.max_poll_attempts,
        poll_timeout_seconds=config.poll_timeout_seconds,
    )
    return PipelineOrchestrator(temp_store=temp_store, client=client)


def include_routers(
    app: FastAPI, config: AppConfig, *, provider: RemoteProvider | None = None
) -> None:
    """Mount routers and attach services."""
    app.state.config = config
    app.state.pipeline = build_pipeline(config, provider=provider)
    app.include_router(analysis_router)
