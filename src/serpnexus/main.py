"""
SerpNexus - Main FastAPI application.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .api import DataForSeoClient
from .config import Settings, configure_logging
from .mcp.server import router as mcp_router
from .tools import build_registry
from .tools.base import ToolRegistry

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, registry: Optional[ToolRegistry] = None) -> FastAPI:
    """Create the app. A prebuilt registry skips client setup (used by tests)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if registry is not None:
            app.state.registry = registry
            yield
            return

        resolved = settings or Settings.from_env()
        logger.info("🚀 SerpNexus starting...")
        async with DataForSeoClient(resolved.client) as client:
            app.state.registry = build_registry(client, resolved.poll)
            logger.info("✅ Loaded %d tools", len(app.state.registry))
            for tool in app.state.registry.get_all_tools():
                logger.info("   - %s (%s)", tool.name, tool.kind.value)
            yield

    app = FastAPI(
        title="SerpNexus",
        description="DataForSEO SERP tools over MCP",
        version=__version__,
        lifespan=lifespan,
    )

    # Include MCP router
    app.include_router(mcp_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "SerpNexus",
            "version": __version__,
            "status": "operational"
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
