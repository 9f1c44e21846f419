"""FastAPI application entry point."""

from fastapi import FastAPI

from .config import AppConfig
from .dependencies import include_routers
from .logging import configure_logging
from .providers.providers_base import RemoteProvider


def create_app(
    config: AppConfig | None = None, *, provider: RemoteProvider | None = None
) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    configure_logging()
    cfg = config or AppConfig.build_default()
    app = FastAPI(title="Check-in Analyzer")
    include_routers(app, cfg, provider=provider)
    return app
