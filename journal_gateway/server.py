"""
HTTP server for the journal insight gateway.

A thin transport layer: reads the raw body, hands it to the dispatcher
and writes back whatever status and payload the dispatcher chose.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from journal_gateway.config import Configuration
from journal_gateway.dispatcher import AnalysisDispatcher
from journal_gateway.llm.registry import ProviderRegistry

logger = logging.getLogger(__name__)


def build_dispatcher(config: Configuration) -> AnalysisDispatcher:
    """Registry, adapters and dispatcher wired from one configuration."""
    registry = ProviderRegistry.from_overrides(config.get_provider_overrides())
    adapters = registry.build_adapters(config)
    logger.info(
        f"Providers: {', '.join(registry.provider_ids)} "
        f"(default: {config.default_provider})"
    )
    return AnalysisDispatcher(registry, adapters, config.default_provider)


def create_app(
    config: Configuration | None = None,
    dispatcher: AnalysisDispatcher | None = None,
) -> FastAPI:
    """Create and configure the FastAPI app."""
    config = config or Configuration()
    dispatcher = dispatcher or build_dispatcher(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await dispatcher.close()

    app = FastAPI(title="Journal Insight Gateway", lifespan=lifespan)
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get_server_config().get("cors_origins", ["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/api/llm")
    async def analyze(request: Request) -> JSONResponse:
        response = await dispatcher.handle(await request.body())
        return JSONResponse(response.body, status_code=response.status_code)

    @app.get("/")
    async def root():
        return {"message": "Journal Insight Gateway"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app
